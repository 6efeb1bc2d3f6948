"""
Shared Pydantic models for the doc gen service.

These models define the report data accepted over HTTP (camelCase JSON, as
produced by the reporting back end) and the service's response payloads.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportFormat(str, Enum):
    """Output formats a report can be generated in."""

    HTML = "html"
    PDF = "pdf"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenderChartInfo(CamelModel):
    """How a gender category is labelled and coloured in charts."""

    code: str
    label: str
    extended_label: str
    color: str = "#444444"


class ChartDataRecord(CamelModel):
    """One bar of a chart: a gender category and its value."""

    gender_chart_info: GenderChartInfo
    value: float


class ChartData(CamelModel):
    """Series for every chart in the report.

    An empty series means the chart was suppressed entirely.
    """

    mean_hourly_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    median_hourly_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    mean_overtime_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    median_overtime_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    percent_receiving_overtime_pay: List[ChartDataRecord] = Field(default_factory=list)
    mean_bonus_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    median_bonus_pay_gap: List[ChartDataRecord] = Field(default_factory=list)
    percent_receiving_bonus_pay: List[ChartDataRecord] = Field(default_factory=list)
    hourly_pay_quartile1: List[ChartDataRecord] = Field(default_factory=list)
    hourly_pay_quartile2: List[ChartDataRecord] = Field(default_factory=list)
    hourly_pay_quartile3: List[ChartDataRecord] = Field(default_factory=list)
    hourly_pay_quartile4: List[ChartDataRecord] = Field(default_factory=list)
    hourly_pay_quartiles_legend: List[GenderChartInfo] = Field(default_factory=list)

    def visible_series(self) -> Dict[str, List[ChartDataRecord]]:
        """Chart series with at least one record, keyed by field name."""
        return {
            name: series
            for name, series in self
            if name != "hourly_pay_quartiles_legend" and series
        }


class TableData(CamelModel):
    """Rows of the overtime-hours tables (reference category excluded)."""

    mean_overtime_hours_gap: List[ChartDataRecord] = Field(default_factory=list)
    median_overtime_hours_gap: List[ChartDataRecord] = Field(default_factory=list)


class ChartSummaryText(CamelModel):
    """Plain-language summary shown beside each chart or table."""

    mean_hourly_pay_gap: Optional[str] = None
    median_hourly_pay_gap: Optional[str] = None
    mean_overtime_pay_gap: Optional[str] = None
    median_overtime_pay_gap: Optional[str] = None
    mean_bonus_pay_gap: Optional[str] = None
    median_bonus_pay_gap: Optional[str] = None
    mean_overtime_hours_gap: Optional[str] = None
    median_overtime_hours_gap: Optional[str] = None
    hourly_pay_quartiles: Optional[str] = None


class ExplanatoryNote(CamelModel):
    """Footnote number (and optional override text) of an explanatory note."""

    num: int = Field(..., ge=1)
    text: Optional[str] = None


class SubmittedReportData(CamelModel):
    """Report data as computed by the reporting back end."""

    company_name: str
    company_address: str = ""
    report_start_date: str
    report_end_date: str
    naics_code: str
    naics_label: str
    employee_count_range: str
    comments: Optional[str] = None
    data_constraints: Optional[str] = None
    reference_gender_category: Optional[str] = None
    chart_suppressed_error: Optional[str] = None
    table_data: Optional[TableData] = None
    chart_data: Optional[ChartData] = None
    chart_summary_text: Optional[ChartSummaryText] = None
    explanatory_notes: Optional[Dict[str, ExplanatoryNote]] = None
    is_all_calculated_data_suppressed: bool = False
    gender_codes: List[str] = Field(default_factory=list)
    is_draft: bool = False


class ReportData(SubmittedReportData):
    """Submitted report data plus values derived for rendering."""

    footnote_symbols: Dict[str, str] = Field(default_factory=dict)
    is_general_suppressed_data_footnote_visible: bool = False


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    timestamp: datetime
    active_reports: int
    max_concurrent: int
    browser_ready: bool = True
    browser_error: Optional[str] = None
    rate_limit: Optional[Dict[str, int]] = None
