"""
Store Metrics API Endpoints

Hourly traffic, tickets and sales for the whole store, shown against the
same hourly goal curve as the advisor board.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from goaltracker.database.connection import get_db_dependency
from goaltracker.engine import (
    EditBuffer,
    GoalAllocationEngine,
    SessionSnapshot,
    StoreMetricRecord,
    store_hourly_rows,
    store_totals,
)
from goaltracker.engine.metrics import metric_fields, records_from_fields
from goaltracker.services import SessionService, StoreMetricsService

router = APIRouter()
logger = structlog.get_logger(__name__)


class StoreMetricItem(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    traffic: float = Field(default=0, ge=0)
    tickets: float = Field(default=0, ge=0)
    last_year_sales: float = Field(default=0, ge=0)
    current_sales: float = Field(default=0, ge=0)


class StoreMetricsPayload(BaseModel):
    metrics: List[StoreMetricItem]


class StoreMetricEdit(BaseModel):
    """One unsaved cell edit"""
    hour: int = Field(..., ge=0, le=23)
    field: str = Field(..., pattern="^(traffic|tickets|last_year_sales|current_sales)$")
    value: float = Field(..., ge=0)


class StoreMetricsPreviewRequest(BaseModel):
    edits: List[StoreMetricEdit]


class StoreHourRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: int
    store_goal: float
    cumulative_goal: float
    traffic: float
    tickets: float
    conversion_rate: float
    last_year_sales: float
    current_sales: float
    growth: float
    average_ticket: float


class StoreTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    store_sales: float
    advisor_sales: float
    difference: float
    last_year_sales: float
    growth: float


class StoreMetricsResponse(BaseModel):
    rows: List[StoreHourRowResponse]
    totals: StoreTotalsResponse


def metrics_response(snapshot: SessionSnapshot) -> StoreMetricsResponse:
    engine = GoalAllocationEngine(snapshot)
    rows = store_hourly_rows(engine, snapshot.store_metrics)
    return StoreMetricsResponse(
        rows=[StoreHourRowResponse.model_validate(row) for row in rows],
        totals=StoreTotalsResponse.model_validate(store_totals(rows, snapshot.advisors)),
    )


@router.get("/{session_date}/store-metrics", response_model=StoreMetricsResponse)
async def get_store_metrics(
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> StoreMetricsResponse:
    snapshot = await SessionService(db).load_snapshot(session_date)
    return metrics_response(snapshot)


@router.put("/{session_date}/store-metrics", response_model=StoreMetricsResponse)
async def save_store_metrics(
    session_date: date,
    payload: StoreMetricsPayload,
    db: AsyncSession = Depends(get_db_dependency),
) -> StoreMetricsResponse:
    """Upsert metrics by hour; hours not sent are left unchanged."""
    sessions = SessionService(db)
    session = await sessions.get_or_create_session(session_date)
    await StoreMetricsService(db).upsert_metrics(
        session,
        [StoreMetricRecord(**item.model_dump()) for item in payload.metrics],
    )
    return metrics_response(await sessions.load_snapshot(session_date))


@router.post("/{session_date}/store-metrics/preview", response_model=StoreMetricsResponse)
async def preview_store_metrics(
    session_date: date,
    payload: StoreMetricsPreviewRequest,
    db: AsyncSession = Depends(get_db_dependency),
) -> StoreMetricsResponse:
    """Stored metrics with unsaved cell edits layered on top; nothing is written."""
    snapshot = await SessionService(db).load_snapshot(session_date)
    cells: EditBuffer = EditBuffer(metric_fields(snapshot.store_metrics))
    for edit in payload.edits:
        cells.edit((edit.hour, edit.field), edit.value)
    logger.debug("Store metrics preview", date=session_date.isoformat(), pending_cells=len(cells.pending()))
    preview = snapshot.with_overrides(store_metrics=records_from_fields(cells.merged()))
    return metrics_response(preview)
