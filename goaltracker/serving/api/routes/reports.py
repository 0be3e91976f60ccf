"""
Reports API Endpoints

Excel and PDF downloads of the admin board and store metrics.
"""

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.config import get_settings
from goaltracker.database.connection import get_db_dependency
from goaltracker.engine import GoalAllocationEngine, store_hourly_rows, store_totals
from goaltracker.reporting import ReportDocument, ReportFormat, admin_report, store_metrics_report
from goaltracker.services import SessionService

router = APIRouter()
settings = get_settings()


def download(document: ReportDocument) -> Response:
    return Response(
        content=document.content.getvalue(),
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("/{session_date}/admin.{fmt}")
async def download_admin_report(
    session_date: date,
    fmt: ReportFormat,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    """Advisor goals, sales, tickets and compliance with a totals row."""
    engine = GoalAllocationEngine(await SessionService(db).load_snapshot(session_date))
    return download(admin_report(engine.goal_board(), fmt, currency=settings.tracker.currency))


@router.get("/{session_date}/store-metrics.{fmt}")
async def download_store_metrics_report(
    session_date: date,
    fmt: ReportFormat,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    snapshot = await SessionService(db).load_snapshot(session_date)
    engine = GoalAllocationEngine(snapshot)
    rows = store_hourly_rows(engine, snapshot.store_metrics)
    document = store_metrics_report(
        rows,
        store_totals(rows, snapshot.advisors),
        session_date,
        fmt,
        currency=settings.tracker.currency,
    )
    return download(document)
