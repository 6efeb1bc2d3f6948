"""
Derive the extra values the report template needs from submitted report data.
"""

from .models import ReportData, SubmittedReportData


FOOTNOTE_SYMBOLS = {
    "genderCategorySuppressed": "*",
}


def is_general_suppressed_data_footnote_visible(data: SubmittedReportData) -> bool:
    """
    Decide whether the general "suppressed gender category" footnote is shown.

    A chart that is visible (has at least one bar) but has fewer bars than
    there are gender categories had some category suppressed for
    disclosure reasons, and that is what the footnote explains.

    Args:
        data: Submitted report data

    Returns:
        True if any visible chart is missing at least one gender category
    """
    if data.chart_data is None:
        return False

    num_gender_categories = len(data.gender_codes)
    return any(
        len(series) < num_gender_categories
        for series in data.chart_data.visible_series().values()
    )


def add_supplementary_report_data(submitted: SubmittedReportData) -> ReportData:
    """
    Return a new ReportData with every submitted field plus derived values.

    The submitted object is left untouched.
    """
    return ReportData(
        **submitted.model_dump(),
        footnote_symbols=dict(FOOTNOTE_SYMBOLS),
        is_general_suppressed_data_footnote_visible=is_general_suppressed_data_footnote_visible(submitted),
    )
