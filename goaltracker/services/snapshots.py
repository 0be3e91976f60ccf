"""
Snapshot Loading

Reads a session's rows and freezes them into the engine's SessionSnapshot.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.config import get_settings
from goaltracker.config.settings import TrackerSettings
from goaltracker.database.models import (
    Advisor,
    AdvisorAvailability,
    DailySession,
    HourlyWeight,
    StoreHourlyMetric,
)
from goaltracker.engine import (
    AdvisorRecord,
    AvailabilityRecord,
    SessionConfig,
    SessionSnapshot,
    StoreMetricRecord,
    WeightRecord,
)
from goaltracker.services.errors import PersistenceError

logger = structlog.get_logger(__name__)


def session_config(session: DailySession) -> SessionConfig:
    return SessionConfig(
        total_daily_goal=session.total_daily_goal or 0.0,
        start_hour=session.start_hour,
        end_hour=session.end_hour,
        session_id=str(session.id),
        session_date=session.session_date,
    )


def advisor_record(advisor: Advisor) -> AdvisorRecord:
    return AdvisorRecord(
        advisor_id=str(advisor.id),
        name=advisor.name,
        total_sales=advisor.total_sales or 0.0,
        tickets_count=advisor.tickets_count or 0,
    )


async def load_snapshot(
    db: AsyncSession,
    session: DailySession,
    tracker: Optional[TrackerSettings] = None,
) -> SessionSnapshot:
    """
    Build the immutable engine input for one session.

    Weights, roster, availability overrides and store metrics are read in
    one pass; the default business hours come from the tracker settings.
    """
    tracker = tracker or get_settings().tracker
    try:
        weights = (await db.execute(
            select(HourlyWeight)
            .where(HourlyWeight.session_id == session.id)
            .order_by(HourlyWeight.hour_start)
        )).scalars().all()

        advisors = (await db.execute(
            select(Advisor)
            .where(Advisor.session_id == session.id)
            .order_by(Advisor.created_at, Advisor.name)
        )).scalars().all()

        availability = (await db.execute(
            select(AdvisorAvailability)
            .join(Advisor, Advisor.id == AdvisorAvailability.advisor_id)
            .where(Advisor.session_id == session.id)
        )).scalars().all()

        metrics = (await db.execute(
            select(StoreHourlyMetric)
            .where(StoreHourlyMetric.session_id == session.id)
            .order_by(StoreHourlyMetric.hour)
        )).scalars().all()
    except SQLAlchemyError as exc:
        logger.error("Failed to load session snapshot", session_id=str(session.id), error=str(exc))
        raise PersistenceError("loading", "session", str(exc)) from exc

    return SessionSnapshot.build(
        session=session_config(session),
        weights=(
            WeightRecord(hour_start=weight.hour_start, percentage=weight.percentage or 0.0)
            for weight in weights
        ),
        advisors=(advisor_record(advisor) for advisor in advisors),
        availability=(
            AvailabilityRecord(
                advisor_id=str(record.advisor_id),
                hour_start=record.hour_start,
                is_active=record.is_active,
            )
            for record in availability
        ),
        store_metrics=(
            StoreMetricRecord(
                hour=metric.hour,
                traffic=metric.traffic or 0.0,
                tickets=metric.tickets or 0.0,
                last_year_sales=metric.last_year_sales or 0.0,
                current_sales=metric.current_sales or 0.0,
            )
            for metric in metrics
        ),
        default_start_hour=tracker.default_start_hour,
        default_end_hour=tracker.default_end_hour,
    )
