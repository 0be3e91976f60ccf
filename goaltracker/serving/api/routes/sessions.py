"""
Sessions API Endpoints

Admin configuration of a business day: goal, business hours, hourly
weights, availability, plus the goal board and unsaved-edit previews.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from goaltracker.config import get_settings
from goaltracker.database.connection import get_db_dependency
from goaltracker.engine import EditBuffer, GoalAllocationEngine, SessionSnapshot, configuration_warnings
from goaltracker.serving.api.schemas import BoardResponse, HoursUpdate, SessionResponse, WarningResponse, WeightItem
from goaltracker.serving.cache import portal_cache
from goaltracker.services import AdvisorNotFoundError, AdvisorService, SessionService, store_today

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()


class GoalUpdate(BaseModel):
    total_daily_goal: float = Field(..., ge=0)


class WeightsPayload(BaseModel):
    weights: List[WeightItem]


class WeightsResponse(BaseModel):
    weights: List[WeightItem]
    total_percentage: float
    can_save: bool
    warnings: List[WarningResponse]


class BoardPreviewRequest(BaseModel):
    """Unsaved edits merged over the stored configuration"""
    total_daily_goal: Optional[float] = Field(default=None, ge=0)
    weights: List[WeightItem] = []


class AvailabilityChange(BaseModel):
    advisor_id: UUID
    hour_start: int = Field(..., ge=0, le=23)
    is_active: bool


class AvailabilityPayload(BaseModel):
    changes: List[AvailabilityChange]


class AvailabilityResponse(BaseModel):
    """Explicit overrides only; missing pairs are active"""
    overrides: List[AvailabilityChange]


async def _engine_for(service: SessionService, session_date: date) -> GoalAllocationEngine:
    return GoalAllocationEngine(await service.load_snapshot(session_date))


def _weights_response(snapshot: SessionSnapshot) -> WeightsResponse:
    engine = GoalAllocationEngine(snapshot)
    tolerance = settings.tracker.weights_sum_tolerance
    total = engine.weights.total_percentage()
    return WeightsResponse(
        weights=[
            WeightItem(hour_start=hour, percentage=percentage)
            for hour, percentage in engine.weights.as_dict().items()
        ],
        total_percentage=total,
        can_save=abs(total - 100) <= tolerance,
        warnings=[
            WarningResponse.from_warning(w)
            for w in configuration_warnings(snapshot, tolerance)
        ],
    )


@router.get("/today", response_model=SessionResponse)
async def get_today_session(db: AsyncSession = Depends(get_db_dependency)) -> SessionResponse:
    """Get or create the session for the store's current date."""
    service = SessionService(db)
    return SessionResponse.from_engine(await _engine_for(service, store_today()))


@router.get("/{session_date}", response_model=SessionResponse)
async def get_session(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> SessionResponse:
    """Get or create the session, bootstrapping hours and weights from a previous day."""
    service = SessionService(db)
    return SessionResponse.from_engine(await _engine_for(service, session_date))


@router.put("/{session_date}/goal", response_model=SessionResponse)
async def update_goal(
    session_date: date,
    payload: GoalUpdate,
    db: AsyncSession = Depends(get_db_dependency),
) -> SessionResponse:
    service = SessionService(db)
    await service.update_goal(session_date, payload.total_daily_goal)
    await portal_cache.invalidate_all()
    return SessionResponse.from_engine(await _engine_for(service, session_date))


@router.put("/{session_date}/hours", response_model=SessionResponse)
async def update_hours(
    session_date: date,
    payload: HoursUpdate,
    db: AsyncSession = Depends(get_db_dependency),
) -> SessionResponse:
    service = SessionService(db)
    await service.update_hours(session_date, payload.start_hour, payload.end_hour)
    await portal_cache.invalidate_all()
    return SessionResponse.from_engine(await _engine_for(service, session_date))


@router.get("/{session_date}/weights", response_model=WeightsResponse)
async def get_weights(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> WeightsResponse:
    """In-window weights (zero-filled) with their sum and consistency warnings."""
    service = SessionService(db)
    return _weights_response(await service.load_snapshot(session_date))


@router.put("/{session_date}/weights", response_model=WeightsResponse)
async def save_weights(
    session_date: date,
    payload: WeightsPayload,
    db: AsyncSession = Depends(get_db_dependency),
) -> WeightsResponse:
    """
    Upsert weights by hour.

    Sums other than 100% are stored as given; the response carries the
    ``weights_sum`` warning and ``can_save`` so clients can block saving.
    """
    service = SessionService(db)
    await service.upsert_weights(
        session_date,
        {item.hour_start: item.percentage for item in payload.weights},
    )
    await portal_cache.invalidate_all()
    return _weights_response(await service.load_snapshot(session_date))


@router.get("/{session_date}/board", response_model=BoardResponse)
async def get_board(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> BoardResponse:
    """Personal goals, progress, goal curve and totals for the day."""
    service = SessionService(db)
    snapshot = await service.load_snapshot(session_date)
    engine = GoalAllocationEngine(snapshot)
    warnings = configuration_warnings(snapshot, settings.tracker.weights_sum_tolerance)
    return BoardResponse.build(engine, engine.goal_board(), warnings)


@router.post("/{session_date}/board/preview", response_model=BoardResponse)
async def preview_board(
    session_date: date,
    payload: BoardPreviewRequest,
    db: AsyncSession = Depends(get_db_dependency),
) -> BoardResponse:
    """Recompute the board over unsaved goal and weight edits without persisting them."""
    service = SessionService(db)
    snapshot = await service.load_snapshot(session_date)

    weights: EditBuffer[int, float] = EditBuffer(
        {record.hour_start: record.percentage for record in snapshot.weights}
    )
    for item in payload.weights:
        weights.edit(item.hour_start, item.percentage)

    logger.debug(
        "Board preview",
        date=session_date.isoformat(),
        goal_override=payload.total_daily_goal is not None,
        pending_weights=len(weights.pending()),
    )
    preview = snapshot.with_overrides(
        total_daily_goal=payload.total_daily_goal,
        weights=weights.merged(),
    )
    engine = GoalAllocationEngine(preview)
    warnings = configuration_warnings(preview, settings.tracker.weights_sum_tolerance)
    return BoardResponse.build(engine, engine.goal_board(), warnings)


@router.get("/{session_date}/availability", response_model=AvailabilityResponse)
async def get_availability(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> AvailabilityResponse:
    session = await SessionService(db).get_or_create_session(session_date)
    records = await AdvisorService(db).get_session_availability(session)
    return AvailabilityResponse(overrides=[
        AvailabilityChange(advisor_id=r.advisor_id, hour_start=r.hour_start, is_active=r.is_active)
        for r in records
    ])


@router.put("/{session_date}/availability", response_model=AvailabilityResponse)
async def update_availability(
    session_date: date,
    payload: AvailabilityPayload,
    db: AsyncSession = Depends(get_db_dependency),
) -> AvailabilityResponse:
    """Set per-hour availability flags; hours never flagged stay active."""
    session = await SessionService(db).get_or_create_session(session_date)
    advisors = AdvisorService(db)
    roster = {advisor.id for advisor in await advisors.list_advisors(session)}

    for change in payload.changes:
        if change.advisor_id not in roster:
            raise AdvisorNotFoundError(
                f"Advisor {change.advisor_id} is not on the roster for {session_date.isoformat()}"
            )
    for change in payload.changes:
        await advisors.set_availability(change.advisor_id, change.hour_start, change.is_active)
    await portal_cache.invalidate_all()
    logger.info("Availability saved", date=session_date.isoformat(), changes=len(payload.changes))

    records = await advisors.get_session_availability(session)
    return AvailabilityResponse(overrides=[
        AvailabilityChange(advisor_id=r.advisor_id, hour_start=r.hour_start, is_active=r.is_active)
        for r in records
    ])
