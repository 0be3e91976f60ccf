"""
Report Documents

Assembles the downloadable admin, advisor, store metrics and matrix
reports in either Excel or PDF format.
"""

import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from enum import Enum
from io import BytesIO
from typing import List, Optional, Sequence

import structlog

from goaltracker.engine import AdvisorHourShare, AdvisorProgress, GoalBoard, MatrixSheet, StoreHourRow, StoreTotals
from goaltracker.reporting.excel import ReportWorkbook
from goaltracker.reporting.pdf import format_money, render_pdf
from goaltracker.reporting.tables import (
    ReportTable,
    admin_report_table,
    advisor_breakdown_table,
    advisor_summary_table,
    matrix_table,
    store_metrics_table,
    store_totals_table,
)

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"


def safe_filename(stem: str, fallback: str = "report") -> str:
    """ASCII filename stem that can travel in a Content-Disposition header"""
    folded = unicodedata.normalize("NFKD", stem or "").encode("ascii", "ignore").decode("ascii")
    safe = re.sub(r'[\\/:*?"<>|\s]+', "-", folded.strip())
    safe = safe.strip(" .-")
    return safe or fallback


class ReportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


@dataclass
class ReportDocument:
    content: BytesIO
    media_type: str
    filename: str


def _render(
    fmt: ReportFormat,
    name: str,
    title: str,
    tables: List[ReportTable],
    info: List[str],
    currency: str,
    wide: bool = False,
) -> ReportDocument:
    if fmt == ReportFormat.XLSX:
        workbook = ReportWorkbook(currency=currency)
        workbook.add_sheet(title, tables, title=title, info=info)
        content = workbook.to_bytes()
        media_type = XLSX_MEDIA_TYPE
    else:
        content = render_pdf(title, tables, info=info, currency=currency, wide=wide)
        media_type = PDF_MEDIA_TYPE

    logger.info("Report generated", report=name, format=fmt.value)
    return ReportDocument(content=content, media_type=media_type, filename=f"{safe_filename(name)}.{fmt.value}")


def admin_report(board: GoalBoard, fmt: ReportFormat, currency: str = "CRC") -> ReportDocument:
    session_date = board.session.session_date
    info = [
        f"Date: {session_date.isoformat() if session_date else '-'}",
        f"Daily goal: {format_money(board.session.total_daily_goal, currency)}",
        f"Business hours: {board.hours[0]}:00 - {board.hours[-1]}:00" if board.hours else "Business hours: -",
    ]
    return _render(
        fmt,
        name=f"goals-{session_date.isoformat() if session_date else 'session'}",
        title="Daily goal report",
        tables=[admin_report_table(board)],
        info=info,
        currency=currency,
    )


def advisor_report(
    progress: AdvisorProgress,
    breakdown: Sequence[AdvisorHourShare],
    session_date: Optional[date],
    fmt: ReportFormat,
    currency: str = "CRC",
) -> ReportDocument:
    slug = safe_filename(progress.name.lower(), fallback="advisor")
    info = [
        f"Advisor: {progress.name}",
        f"Date: {session_date.isoformat() if session_date else '-'}",
    ]
    return _render(
        fmt,
        name=f"goal-{slug}-{session_date.isoformat() if session_date else 'session'}",
        title="Personal goal report",
        tables=[advisor_summary_table(progress), advisor_breakdown_table(breakdown)],
        info=info,
        currency=currency,
    )


def store_metrics_report(
    rows: Sequence[StoreHourRow],
    totals: StoreTotals,
    session_date: Optional[date],
    fmt: ReportFormat,
    currency: str = "CRC",
) -> ReportDocument:
    return _render(
        fmt,
        name=f"store-metrics-{session_date.isoformat() if session_date else 'session'}",
        title="Store metrics report",
        tables=[store_totals_table(totals), store_metrics_table(rows, totals)],
        info=[f"Date: {session_date.isoformat() if session_date else '-'}"],
        currency=currency,
        wide=True,
    )


def matrix_report(sheet: MatrixSheet, fmt: ReportFormat, currency: str = "CRC") -> ReportDocument:
    return _render(
        fmt,
        name="goal-matrix",
        title="Goal matrix",
        tables=[matrix_table(sheet)],
        info=[f"Hours: {sheet.start_hour}:00 - {sheet.end_hour}:00"],
        currency=currency,
        wide=True,
    )
