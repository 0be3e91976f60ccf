"""
Session Service

Daily session lifecycle: get-or-create with configuration bootstrap,
goal and business hours updates, and hourly weights.
"""

from datetime import date, datetime
from typing import Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.config import get_settings
from goaltracker.config.settings import TrackerSettings
from goaltracker.database.models import DailySession, HourlyWeight
from goaltracker.engine import SessionSnapshot
from goaltracker.services.errors import InvalidValueError, PersistenceError, SessionNotFoundError
from goaltracker.services.snapshots import load_snapshot

logger = structlog.get_logger(__name__)


def store_today(tracker: Optional[TrackerSettings] = None) -> date:
    """Current business date in the store's timezone"""
    tracker = tracker or get_settings().tracker
    return datetime.now(ZoneInfo(tracker.timezone)).date()


def validate_hours(start_hour: int, end_hour: int) -> None:
    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23):
        raise InvalidValueError("Hours must be between 0 and 23")
    if start_hour >= end_hour:
        raise InvalidValueError("Start hour must be before end hour")


class SessionService:
    """
    Persistence operations for daily sessions.

    Example:
        service = SessionService(db)
        session = await service.get_or_create_session(date(2024, 5, 10))
        await service.upsert_weights(session.session_date, {9: 10, 10: 15})
    """

    def __init__(self, db: AsyncSession, tracker: Optional[TrackerSettings] = None):
        self.db = db
        self.tracker = tracker or get_settings().tracker

    async def get_session(self, session_date: date) -> Optional[DailySession]:
        try:
            result = await self.db.execute(
                select(DailySession).where(DailySession.session_date == session_date)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "session", str(exc)) from exc
        return result.scalar_one_or_none()

    async def require_session(self, session_date: date) -> DailySession:
        session = await self.get_session(session_date)
        if session is None:
            raise SessionNotFoundError(f"No session for {session_date.isoformat()}")
        return session

    async def get_or_create_session(self, session_date: date) -> DailySession:
        """
        Return the session for ``session_date``, creating it when missing.

        A new session starts with a zero goal and copies the business hours
        and weights of a previous session: the most recent one on the same
        weekday within the lookback, otherwise the most recent one overall.
        Without any previous session it stays unconfigured.
        """
        existing = await self.get_session(session_date)
        if existing is not None:
            return existing

        session = DailySession(session_date=session_date, total_daily_goal=0)
        try:
            self.db.add(session)
            await self.db.flush()

            source = await self._bootstrap_source(session_date)
            if source is not None:
                await self._copy_configuration(source, session)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("Failed to create session", date=session_date.isoformat(), error=str(exc))
            raise PersistenceError("creating", "session", str(exc)) from exc

        logger.info(
            "Session created",
            date=session_date.isoformat(),
            bootstrap_source=source.session_date.isoformat() if source else None,
        )
        return session

    async def _bootstrap_source(self, session_date: date) -> Optional[DailySession]:
        result = await self.db.execute(
            select(DailySession)
            .where(DailySession.session_date < session_date)
            .order_by(DailySession.session_date.desc())
            .limit(self.tracker.bootstrap_lookback_sessions)
        )
        candidates = result.scalars().all()
        if not candidates:
            return None
        for candidate in candidates:
            if candidate.session_date.weekday() == session_date.weekday():
                return candidate
        return candidates[0]

    async def _copy_configuration(self, source: DailySession, target: DailySession) -> None:
        if source.start_hour is not None and source.end_hour is not None:
            target.start_hour = source.start_hour
            target.end_hour = source.end_hour

        weights = await self._weights_for(source)
        for weight in weights:
            self.db.add(HourlyWeight(
                session_id=target.id,
                hour_start=weight.hour_start,
                percentage=weight.percentage,
            ))

    async def update_goal(self, session_date: date, total_daily_goal: float) -> DailySession:
        if total_daily_goal < 0:
            raise InvalidValueError("Daily goal cannot be negative")
        session = await self.get_or_create_session(session_date)
        try:
            session.total_daily_goal = total_daily_goal
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("updating", "goal", str(exc)) from exc
        logger.info("Daily goal updated", date=session_date.isoformat(), goal=total_daily_goal)
        return session

    async def update_hours(self, session_date: date, start_hour: int, end_hour: int) -> DailySession:
        """Weights outside the new range are kept but no longer counted"""
        validate_hours(start_hour, end_hour)
        session = await self.get_or_create_session(session_date)
        try:
            session.start_hour = start_hour
            session.end_hour = end_hour
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("updating", "hours", str(exc)) from exc
        logger.info("Business hours updated", date=session_date.isoformat(), start=start_hour, end=end_hour)
        return session

    async def _weights_for(self, session: DailySession) -> List[HourlyWeight]:
        result = await self.db.execute(
            select(HourlyWeight)
            .where(HourlyWeight.session_id == session.id)
            .order_by(HourlyWeight.hour_start)
        )
        return list(result.scalars().all())

    async def get_weights(self, session_date: date) -> Dict[int, float]:
        session = await self.get_or_create_session(session_date)
        try:
            weights = await self._weights_for(session)
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "weights", str(exc)) from exc
        return {weight.hour_start: weight.percentage for weight in weights}

    async def upsert_weights(self, session_date: date, weights: Mapping[int, float]) -> Dict[int, float]:
        """Insert or update weights by (session, hour); other hours are left alone"""
        for hour, percentage in weights.items():
            if not 0 <= hour <= 23:
                raise InvalidValueError(f"Invalid hour: {hour}")
            if percentage < 0:
                raise InvalidValueError("Weights cannot be negative")

        session = await self.get_or_create_session(session_date)
        try:
            existing = {weight.hour_start: weight for weight in await self._weights_for(session)}
            for hour, percentage in weights.items():
                if hour in existing:
                    existing[hour].percentage = percentage
                else:
                    self.db.add(HourlyWeight(session_id=session.id, hour_start=hour, percentage=percentage))
            await self.db.flush()
            stored = await self._weights_for(session)
        except SQLAlchemyError as exc:
            raise PersistenceError("saving", "weights", str(exc)) from exc

        logger.info("Weights saved", date=session_date.isoformat(), hours=len(weights))
        return {weight.hour_start: weight.percentage for weight in stored}

    async def replace_weights(self, session: DailySession, weights: Mapping[int, float]) -> None:
        """Delete every weight of the session and insert ``weights``"""
        try:
            await self.db.execute(delete(HourlyWeight).where(HourlyWeight.session_id == session.id))
            for hour, percentage in sorted(weights.items()):
                self.db.add(HourlyWeight(session_id=session.id, hour_start=hour, percentage=percentage))
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("replacing", "weights", str(exc)) from exc

    async def load_snapshot(self, session_date: date) -> SessionSnapshot:
        session = await self.get_or_create_session(session_date)
        return await load_snapshot(self.db, session, self.tracker)
