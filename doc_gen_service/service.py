"""
Report generation pipeline.

Supplements submitted report data, renders the unpaginated template, then
paginates it on a fresh rendering surface and serializes the result.
"""

import logging
from typing import Union

from .config import DocGenSettings
from .layout import PageGeometry, ReportAssembler, open_surface
from .models import ReportFormat, SubmittedReportData
from .report_data import add_supplementary_report_data
from .templating import build_report_template

logger = logging.getLogger(__name__)


async def generate_report(
    report_format: ReportFormat,
    submitted: SubmittedReportData,
    settings: DocGenSettings,
) -> Union[str, bytes]:
    """
    Generate one report.

    Args:
        report_format: HTML or PDF
        submitted: Report data as received from the reporting back end
        settings: Service configuration (page sizing, browser options, templates)

    Returns:
        The finalized HTML string, or PDF bytes

    Raises:
        TemplateRenderError: If the report template cannot be rendered
        DocGenError: If layout fails
    """
    report = add_supplementary_report_data(submitted)
    geometry = PageGeometry.from_settings(settings)

    html = build_report_template(
        report,
        geometry,
        settings.template_path,
        settings.page_width_px,
    )
    logger.debug(f"Rendered report template ({len(html)} chars)")

    async with open_surface(settings.playwright_headless, settings.playwright_timeout_ms) as surface:
        assembler = ReportAssembler(surface, geometry, draft=report.is_draft)
        document = await assembler.assemble(html)
        logger.info(
            f"Assembled {report_format.value} report for '{report.company_name}' "
            f"({document.page_count} pages, draft={report.is_draft})"
        )

        if report_format == ReportFormat.PDF:
            return await assembler.to_pdf(settings.page_width_px)
        return await assembler.to_html()
