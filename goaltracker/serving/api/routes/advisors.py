"""
Advisors API Endpoints

Admin roster management and per-advisor goal breakdown.
"""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.config import get_settings
from goaltracker.database.connection import get_db_dependency
from goaltracker.database.models import Advisor
from goaltracker.engine import GoalAllocationEngine
from goaltracker.serving.api.schemas import AdvisorHourResponse, AdvisorProgressResponse, BreakdownResponse
from goaltracker.serving.cache import portal_cache
from goaltracker.services import AdvisorService, SessionService
from goaltracker.services.snapshots import load_snapshot

router = APIRouter()
settings = get_settings()


class AdvisorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class AdvisorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    name: str
    access_token: str
    link: str
    total_sales: float
    tickets_count: int

    @classmethod
    def from_advisor(cls, advisor: Advisor) -> "AdvisorResponse":
        base_url = settings.tracker.public_base_url.rstrip("/")
        return cls(
            id=advisor.id,
            session_id=advisor.session_id,
            name=advisor.name,
            access_token=advisor.access_token,
            link=f"{base_url}/advisor/{advisor.access_token}",
            total_sales=advisor.total_sales or 0.0,
            tickets_count=advisor.tickets_count or 0,
        )


@router.get("/sessions/{session_date}/advisors", response_model=List[AdvisorResponse])
async def list_advisors(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> List[AdvisorResponse]:
    session = await SessionService(db).get_or_create_session(session_date)
    advisors = await AdvisorService(db).list_advisors(session)
    return [AdvisorResponse.from_advisor(advisor) for advisor in advisors]


@router.post("/sessions/{session_date}/advisors", response_model=AdvisorResponse, status_code=201)
async def create_advisor(
    session_date: date,
    payload: AdvisorCreate,
    db: AsyncSession = Depends(get_db_dependency),
) -> AdvisorResponse:
    """Add an advisor; names are unique per day, ignoring case and surrounding spaces."""
    session = await SessionService(db).get_or_create_session(session_date)
    advisor = await AdvisorService(db).create_advisor(session, payload.name)
    await portal_cache.invalidate_all()
    return AdvisorResponse.from_advisor(advisor)


@router.delete("/advisors/{advisor_id}", status_code=204)
async def delete_advisor(
    advisor_id: UUID,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    await AdvisorService(db).delete_advisor(advisor_id)
    await portal_cache.invalidate_all()
    return Response(status_code=204)


@router.get("/advisors/{advisor_id}/breakdown", response_model=BreakdownResponse)
async def get_advisor_breakdown(
    advisor_id: UUID,
    db: AsyncSession = Depends(get_db_dependency),
) -> BreakdownResponse:
    """Hour-by-hour split of one advisor's personal goal."""
    service = AdvisorService(db)
    advisor = await service.get_advisor(advisor_id)
    session = await service.get_session_of(advisor)
    engine = GoalAllocationEngine(await load_snapshot(db, session))
    key = str(advisor.id)
    return BreakdownResponse(
        date=session.session_date,
        progress=AdvisorProgressResponse.from_progress(engine.advisor_progress(key)),
        hours=[AdvisorHourResponse.from_share(share) for share in engine.advisor_breakdown(key)],
    )
