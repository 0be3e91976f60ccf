"""
Advisor Service

Roster management, per-hour availability and advisor self-reporting
through private access links.
"""

import secrets
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.config import get_settings
from goaltracker.config.settings import SecuritySettings
from goaltracker.database.models import Advisor, AdvisorAvailability, DailySession
from goaltracker.engine.validation import is_duplicate_advisor_name, normalize_advisor_name
from goaltracker.services.errors import (
    AdvisorNotFoundError,
    DuplicateAdvisorError,
    InvalidAccessTokenError,
    InvalidValueError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)


class AdvisorService:
    """Persistence operations for advisors and their availability"""

    def __init__(self, db: AsyncSession, security: Optional[SecuritySettings] = None):
        self.db = db
        self.security = security or get_settings().security

    def generate_token(self) -> str:
        return secrets.token_urlsafe(self.security.access_token_bytes)

    async def list_advisors(self, session: DailySession) -> List[Advisor]:
        try:
            result = await self.db.execute(
                select(Advisor)
                .where(Advisor.session_id == session.id)
                .order_by(Advisor.created_at, Advisor.name)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "advisors", str(exc)) from exc
        return list(result.scalars().all())

    async def create_advisor(self, session: DailySession, name: str) -> Advisor:
        """
        Add an advisor to the session's roster.

        The name is trimmed and compared case-insensitively against the
        roster before anything is written.
        """
        clean_name = normalize_advisor_name(name)
        if not clean_name:
            raise InvalidValueError("Advisor name cannot be empty")

        roster = await self.list_advisors(session)
        if is_duplicate_advisor_name(clean_name, (advisor.name for advisor in roster)):
            raise DuplicateAdvisorError(clean_name)

        advisor = Advisor(
            session_id=session.id,
            name=clean_name,
            access_token=self.generate_token(),
            total_sales=0.0,
            tickets_count=0,
        )
        try:
            self.db.add(advisor)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("Failed to create advisor", name=clean_name, error=str(exc))
            raise PersistenceError("creating", "advisor", str(exc)) from exc

        logger.info("Advisor created", advisor_id=str(advisor.id), session_id=str(session.id))
        return advisor

    async def get_advisor(self, advisor_id: UUID) -> Advisor:
        try:
            advisor = await self.db.get(Advisor, advisor_id)
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "advisor", str(exc)) from exc
        if advisor is None:
            raise AdvisorNotFoundError(f"Advisor {advisor_id} not found")
        return advisor

    async def get_session_of(self, advisor: Advisor) -> DailySession:
        try:
            session = await self.db.get(DailySession, advisor.session_id)
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "session", str(exc)) from exc
        if session is None:
            raise AdvisorNotFoundError(f"Advisor {advisor.id} has no session")
        return session

    async def delete_advisor(self, advisor_id: UUID) -> None:
        """Remove the advisor together with its availability overrides"""
        advisor = await self.get_advisor(advisor_id)
        try:
            await self.db.delete(advisor)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("deleting", "advisor", str(exc)) from exc
        logger.info("Advisor deleted", advisor_id=str(advisor_id))

    async def get_session_availability(self, session: DailySession) -> List[AdvisorAvailability]:
        try:
            result = await self.db.execute(
                select(AdvisorAvailability)
                .join(Advisor, Advisor.id == AdvisorAvailability.advisor_id)
                .where(Advisor.session_id == session.id)
                .order_by(AdvisorAvailability.hour_start)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "availability", str(exc)) from exc
        return list(result.scalars().all())

    async def set_availability(self, advisor_id: UUID, hour_start: int, is_active: bool) -> AdvisorAvailability:
        """Upsert the flag for (advisor, hour)"""
        if not 0 <= hour_start <= 23:
            raise InvalidValueError(f"Invalid hour: {hour_start}")
        await self.get_advisor(advisor_id)
        try:
            result = await self.db.execute(
                select(AdvisorAvailability).where(
                    AdvisorAvailability.advisor_id == advisor_id,
                    AdvisorAvailability.hour_start == hour_start,
                )
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = AdvisorAvailability(advisor_id=advisor_id, hour_start=hour_start, is_active=is_active)
                self.db.add(record)
            else:
                record.is_active = is_active
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("updating", "availability", str(exc)) from exc

        logger.info("Availability updated", advisor_id=str(advisor_id), hour=hour_start, is_active=is_active)
        return record

    async def get_by_token(self, token: str) -> Advisor:
        try:
            result = await self.db.execute(select(Advisor).where(Advisor.access_token == token))
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "advisor", str(exc)) from exc
        advisor = result.scalar_one_or_none()
        if advisor is None:
            raise InvalidAccessTokenError()
        return advisor

    async def update_sales(self, advisor: Advisor, total_sales: float, tickets_count: int) -> Advisor:
        """Store the advisor's cumulative figures for the day"""
        if total_sales < 0 or tickets_count < 0:
            raise InvalidValueError("Sales and tickets cannot be negative")
        try:
            advisor.total_sales = total_sales
            advisor.tickets_count = tickets_count
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("updating", "sales", str(exc)) from exc
        logger.info("Advisor sales reported", advisor_id=str(advisor.id), sales=total_sales, tickets=tickets_count)
        return advisor
