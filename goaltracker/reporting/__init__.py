"""
Reporting Module
"""
from .documents import (
    ReportDocument,
    ReportFormat,
    admin_report,
    advisor_report,
    matrix_report,
    store_metrics_report,
)
from .excel import ReportWorkbook
from .pdf import format_money, render_pdf
from .tables import ReportTable

__all__ = [
    "ReportDocument",
    "ReportFormat",
    "ReportTable",
    "ReportWorkbook",
    "admin_report",
    "advisor_report",
    "matrix_report",
    "store_metrics_report",
    "format_money",
    "render_pdf",
]
