"""
Template Service

Reusable (hour range, weight distribution) pairs. Applying a template
replaces the target session's hours and weights; it never merges.
"""

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.database.models import DailySession, SessionTemplate
from goaltracker.engine import GoalAllocationEngine
from goaltracker.services.errors import (
    DuplicateTemplateError,
    InvalidValueError,
    PersistenceError,
    TemplateNotFoundError,
)
from goaltracker.services.sessions import SessionService, validate_hours

logger = structlog.get_logger(__name__)


def template_weights(template: SessionTemplate) -> Dict[int, float]:
    return {
        int(item["hour_start"]): float(item["percentage"])
        for item in template.weights or []
    }


class TemplateService:
    def __init__(self, db: AsyncSession, sessions: Optional[SessionService] = None):
        self.db = db
        self.sessions = sessions or SessionService(db)

    async def list_templates(self) -> List[SessionTemplate]:
        try:
            result = await self.db.execute(select(SessionTemplate).order_by(SessionTemplate.name))
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "templates", str(exc)) from exc
        return list(result.scalars().all())

    async def get_template(self, template_id: UUID) -> SessionTemplate:
        try:
            template = await self.db.get(SessionTemplate, template_id)
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "template", str(exc)) from exc
        if template is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return template

    async def create_from_session(self, name: str, session_date: date) -> SessionTemplate:
        """
        Save the session's resolved business hours and in-window weights.

        Weight records are copied as stored; hours without a record stay
        without one. Unconfigured sessions are captured with the default hours.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidValueError("Template name cannot be empty")

        try:
            duplicate = (await self.db.execute(
                select(SessionTemplate.id).where(func.lower(SessionTemplate.name) == clean_name.lower())
            )).first()
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "templates", str(exc)) from exc
        if duplicate is not None:
            raise DuplicateTemplateError(clean_name)

        engine = GoalAllocationEngine(await self.sessions.load_snapshot(session_date))
        template = SessionTemplate(
            name=clean_name,
            start_hour=engine.start_hour,
            end_hour=engine.end_hour,
            weights=[
                {"hour_start": weight.hour_start, "percentage": weight.percentage}
                for weight in sorted(engine.snapshot.weights, key=lambda w: w.hour_start)
                if engine.weights.in_window(weight.hour_start)
            ],
        )
        try:
            self.db.add(template)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("creating", "template", str(exc)) from exc

        logger.info("Template created", template_id=str(template.id), source=session_date.isoformat())
        return template

    async def apply_template(self, template_id: UUID, session_date: date) -> DailySession:
        """Overwrite the session's hours and replace all of its weights"""
        template = await self.get_template(template_id)
        validate_hours(template.start_hour, template.end_hour)
        session = await self.sessions.get_or_create_session(session_date)
        try:
            session.start_hour = template.start_hour
            session.end_hour = template.end_hour
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("applying", "template", str(exc)) from exc
        await self.sessions.replace_weights(session, template_weights(template))

        logger.info("Template applied", template_id=str(template_id), date=session_date.isoformat())
        return session

    async def delete_template(self, template_id: UUID) -> None:
        template = await self.get_template(template_id)
        try:
            await self.db.delete(template)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("deleting", "template", str(exc)) from exc
        logger.info("Template deleted", template_id=str(template_id))
