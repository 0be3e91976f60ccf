"""
Store Metrics Service

Hourly store-wide traffic, tickets and sales, upserted by (session, hour).
"""

from typing import Iterable, List

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.database.models import DailySession, StoreHourlyMetric
from goaltracker.engine import StoreMetricRecord
from goaltracker.engine.metrics import METRIC_FIELDS
from goaltracker.services.errors import InvalidValueError, PersistenceError

logger = structlog.get_logger(__name__)


class StoreMetricsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_metrics(self, session: DailySession) -> List[StoreHourlyMetric]:
        try:
            result = await self.db.execute(
                select(StoreHourlyMetric)
                .where(StoreHourlyMetric.session_id == session.id)
                .order_by(StoreHourlyMetric.hour)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError("fetching", "store metrics", str(exc)) from exc
        return list(result.scalars().all())

    async def upsert_metrics(
        self,
        session: DailySession,
        records: Iterable[StoreMetricRecord],
    ) -> List[StoreHourlyMetric]:
        records = list(records)
        for record in records:
            if not 0 <= record.hour <= 23:
                raise InvalidValueError(f"Invalid hour: {record.hour}")
            if any(getattr(record, name) < 0 for name in METRIC_FIELDS):
                raise InvalidValueError("Store metrics cannot be negative")

        try:
            existing = {metric.hour: metric for metric in await self.get_metrics(session)}
            for record in records:
                metric = existing.get(record.hour)
                if metric is None:
                    metric = StoreHourlyMetric(session_id=session.id, hour=record.hour)
                    self.db.add(metric)
                for name in METRIC_FIELDS:
                    setattr(metric, name, getattr(record, name))
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("saving", "store metrics", str(exc)) from exc

        logger.info("Store metrics saved", session_id=str(session.id), hours=len(records))
        return await self.get_metrics(session)
