"""
Render report data into the initial, unpaginated report HTML.

The markup keeps every content block in a staging container; the layout
engine later moves the blocks onto fixed-height pages.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .errors import TemplateRenderError
from .layout.page import PageGeometry
from .models import ChartDataRecord, ReportData

logger = logging.getLogger(__name__)

REPORT_TEMPLATE = "report.html"

# Note text lives here; the back end only assigns note numbers.
EXPLANATORY_NOTE_TEXT = {
    "meanHourlyPayDiff": (
        "The average hourly wage gap is the difference between the average "
        "hourly wage of each gender category and that of the reference category."
    ),
    "medianHourlyPayDiff": (
        "The median hourly wage gap compares the middle hourly wage of each "
        "gender category with the middle hourly wage of the reference category."
    ),
    "meanOvertimePayDiff": (
        "The average overtime pay gap compares average overtime pay among "
        "employees who received overtime pay."
    ),
    "medianOvertimePayDiff": (
        "The median overtime pay gap compares the middle overtime pay among "
        "employees who received overtime pay."
    ),
    "meanOvertimeHoursDiff": (
        "The average overtime hours gap is the difference in average paid "
        "overtime hours worked, in hours."
    ),
    "medianOvertimeHoursDiff": (
        "The median overtime hours gap is the difference in the middle number "
        "of paid overtime hours worked, in hours."
    ),
    "meanBonusPayDiff": (
        "The average bonus pay gap compares average bonus pay among employees "
        "who received bonus pay."
    ),
    "medianBonusPayDiff": (
        "The median bonus pay gap compares the middle bonus pay among employees "
        "who received bonus pay."
    ),
    "payQuartiles": (
        "Pay quartiles divide all employees, ordered by hourly wage, into four "
        "groups of equal size."
    ),
}

# Data each note explains; the note is shown only when that data is.
NOTE_SOURCES = {
    "meanHourlyPayDiff": ("chart_data", ["mean_hourly_pay_gap"]),
    "medianHourlyPayDiff": ("chart_data", ["median_hourly_pay_gap"]),
    "meanOvertimePayDiff": ("chart_data", ["mean_overtime_pay_gap"]),
    "medianOvertimePayDiff": ("chart_data", ["median_overtime_pay_gap"]),
    "meanOvertimeHoursDiff": ("table_data", ["mean_overtime_hours_gap"]),
    "medianOvertimeHoursDiff": ("table_data", ["median_overtime_hours_gap"]),
    "meanBonusPayDiff": ("chart_data", ["mean_bonus_pay_gap"]),
    "medianBonusPayDiff": ("chart_data", ["median_bonus_pay_gap"]),
    "payQuartiles": (
        "chart_data",
        [
            "hourly_pay_quartile1",
            "hourly_pay_quartile2",
            "hourly_pay_quartile3",
            "hourly_pay_quartile4",
        ],
    ),
}


def format_dollars(value: float) -> str:
    """0.91 -> '$0.91'"""
    return f"${value:,.2f}"


def format_percent(value: float) -> str:
    """Whole-number percentage, e.g. 12.6 -> '13%'"""
    return f"{round(value)}%"


def bar_width(record: ChartDataRecord, series: List[ChartDataRecord]) -> float:
    """Bar width as a percentage of the widest bar in the series."""
    widest = max((abs(r.value) for r in series), default=0)
    if not widest:
        return 0.0
    return round(abs(record.value) / widest * 100, 2)


def explanatory_note_items(report: ReportData) -> List[Dict]:
    """
    List the explanatory notes to print, ordered by note number.

    A note is listed only when the data it explains appears in the report.
    """
    if not report.explanatory_notes:
        return []

    items = []
    for code, note in report.explanatory_notes.items():
        source = NOTE_SOURCES.get(code)
        if source is None:
            logger.warning(f"Ignoring unknown explanatory note code: {code}")
            continue
        attr, fields = source
        container = getattr(report, attr)
        if container is None or not any(getattr(container, f) for f in fields):
            continue
        items.append({
            "code": code,
            "num": note.num,
            "text": note.text or EXPLANATORY_NOTE_TEXT[code],
        })

    return sorted(items, key=lambda item: item["num"])


def note_num(report: ReportData, code: str) -> Optional[int]:
    """Footnote number assigned to a note code, if any."""
    if not report.explanatory_notes or code not in report.explanatory_notes:
        return None
    return report.explanatory_notes[code].num


@lru_cache(maxsize=8)
def get_template_environment(template_path: str) -> Environment:
    """Build (once per path) the Jinja environment used for reports."""
    env = Environment(
        loader=FileSystemLoader(template_path),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["dollars"] = format_dollars
    env.filters["percent"] = format_percent
    env.globals["bar_width"] = bar_width
    return env


def build_report_template(
    report: ReportData,
    geometry: PageGeometry,
    template_path: str,
    page_width: int,
) -> str:
    """
    Render the unpaginated report markup.

    Args:
        report: Report data including supplementary values
        geometry: Page sizing used for page and staging CSS
        template_path: Directory containing the report templates
        page_width: Page width in CSS pixels

    Returns:
        HTML string

    Raises:
        TemplateRenderError: If the template is missing or fails to render
    """
    try:
        template = get_template_environment(template_path).get_template(REPORT_TEMPLATE)
        return template.render(
            report=report,
            geometry=geometry,
            page_width=page_width,
            notes=explanatory_note_items(report),
            note_num=lambda code: note_num(report, code),
        )
    except TemplateError as e:
        logger.error(f"Report template rendering failed: {e}")
        raise TemplateRenderError(f"Failed to render report template: {e}") from e
