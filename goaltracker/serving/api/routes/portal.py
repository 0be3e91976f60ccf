"""
Advisor Portal Endpoints

Self-service view reached through an advisor's private link. The token is
the only credential; unknown tokens get a generic 404.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from goaltracker.config import get_settings
from goaltracker.database.connection import get_db_dependency
from goaltracker.engine import GoalAllocationEngine
from goaltracker.reporting import ReportFormat, advisor_report
from goaltracker.serving.api.routes.reports import download
from goaltracker.serving.api.schemas import AdvisorHourResponse, AdvisorProgressResponse
from goaltracker.serving.cache import portal_cache
from goaltracker.services import AdvisorService
from goaltracker.services.snapshots import load_snapshot

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()


class PortalResponse(BaseModel):
    """Everything the advisor view renders, refreshed on a fixed interval"""
    advisor_name: str
    date: Optional[date]
    start_hour: int
    end_hour: int
    progress: AdvisorProgressResponse
    hours: List[AdvisorHourResponse]
    currency: str
    refresh_interval_seconds: int


class SalesUpdate(BaseModel):
    """Cumulative figures for the day, not increments"""
    total_sales: float = Field(..., ge=0)
    tickets_count: int = Field(..., ge=0)


async def _portal_engine(db: AsyncSession, token: str):
    service = AdvisorService(db)
    advisor = await service.get_by_token(token)
    session = await service.get_session_of(advisor)
    engine = GoalAllocationEngine(await load_snapshot(db, session))
    return advisor, session, engine


async def build_portal(db: AsyncSession, token: str) -> PortalResponse:
    advisor, session, engine = await _portal_engine(db, token)
    key = str(advisor.id)
    return PortalResponse(
        advisor_name=advisor.name,
        date=session.session_date,
        start_hour=engine.start_hour,
        end_hour=engine.end_hour,
        progress=AdvisorProgressResponse.from_progress(engine.advisor_progress(key)),
        hours=[AdvisorHourResponse.from_share(share) for share in engine.advisor_breakdown(key)],
        currency=settings.tracker.currency,
        refresh_interval_seconds=settings.tracker.advisor_poll_interval_seconds,
    )


@router.get("/{token}", response_model=PortalResponse)
async def get_portal(
    token: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> PortalResponse:
    """Personal goal, progress and hourly split for the advisor behind ``token``."""

    async def factory():
        portal = await build_portal(db, token)
        return portal.model_dump(mode="json")

    cached = await portal_cache.get_or_set(token, factory)
    return PortalResponse.model_validate(cached)


@router.put("/{token}/sales", response_model=PortalResponse)
async def report_sales(
    token: str,
    payload: SalesUpdate,
    db: AsyncSession = Depends(get_db_dependency),
) -> PortalResponse:
    """Self-report cumulative sales and tickets; last write wins."""
    service = AdvisorService(db)
    advisor = await service.get_by_token(token)
    await service.update_sales(advisor, payload.total_sales, payload.tickets_count)
    await portal_cache.invalidate_all()
    return await build_portal(db, token)


@router.get("/{token}/report.{fmt}")
async def download_portal_report(
    token: str,
    fmt: ReportFormat,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    advisor, session, engine = await _portal_engine(db, token)
    key = str(advisor.id)
    logger.info("Advisor report requested", advisor_id=key, format=fmt.value)
    document = advisor_report(
        engine.advisor_progress(key),
        engine.advisor_breakdown(key),
        session.session_date,
        fmt,
        currency=settings.tracker.currency,
    )
    return download(document)
