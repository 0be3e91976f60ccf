"""
Demo Data Seeder

Creates a configured session for today (store timezone) with a typical
weight curve, a small roster with lunch breaks, self-reported sales and
hourly store metrics.

Usage:
    python scripts/seed_demo.py --advisors 5 --goal 2500000
"""

import argparse
import asyncio
import random

import structlog
from faker import Faker

from goaltracker.config.logging import configure_logging
from goaltracker.database.connection import close_database, get_db, init_database
from goaltracker.engine import GoalAllocationEngine, StoreMetricRecord
from goaltracker.services import AdvisorService, SessionService, StoreMetricsService, store_today

logger = structlog.get_logger(__name__)

fake = Faker("es_MX")
Faker.seed(42)
random.seed(42)

# Share of the day's sales per hour, 9:00 - 21:00
DEMO_WEIGHTS = {
    9: 3.0, 10: 5.0, 11: 7.0, 12: 9.0, 13: 10.0, 14: 9.0, 15: 8.0,
    16: 8.0, 17: 9.0, 18: 10.0, 19: 9.0, 20: 8.0, 21: 5.0,
}


async def seed(advisor_count: int, daily_goal: float) -> None:
    today = store_today()
    async with get_db() as db:
        sessions = SessionService(db)
        session = await sessions.update_hours(today, 9, 21)
        await sessions.update_goal(today, daily_goal)
        await sessions.upsert_weights(today, DEMO_WEIGHTS)

        advisors = AdvisorService(db)
        existing = {advisor.name for advisor in await advisors.list_advisors(session)}
        created = []
        while len(created) < advisor_count:
            name = fake.first_name()
            if name in existing:
                continue
            existing.add(name)
            advisor = await advisors.create_advisor(session, name)
            lunch = random.choice([12, 13, 14])
            await advisors.set_availability(advisor.id, lunch, False)
            created.append(advisor)

        engine = GoalAllocationEngine(await sessions.load_snapshot(today))
        for advisor in created:
            goal = engine.personal_goal(str(advisor.id))
            sales = round(goal * random.uniform(0.4, 1.2), -2)
            await advisors.update_sales(advisor, sales, random.randint(5, 40))

        metrics = []
        for hour, weight in DEMO_WEIGHTS.items():
            traffic = random.randint(20, 120)
            tickets = random.randint(5, traffic)
            expected = daily_goal * weight / 100
            metrics.append(StoreMetricRecord(
                hour=hour,
                traffic=traffic,
                tickets=tickets,
                last_year_sales=round(expected * random.uniform(0.7, 1.1), -2),
                current_sales=round(expected * random.uniform(0.6, 1.3), -2),
            ))
        await StoreMetricsService(db).upsert_metrics(session, metrics)

    logger.info("Demo data seeded", date=today.isoformat(), advisors=len(created), goal=daily_goal)
    for advisor in created:
        print(f"{advisor.name}: /advisor/{advisor.access_token}")


async def main(advisor_count: int, daily_goal: float) -> None:
    configure_logging()
    await init_database()
    try:
        await seed(advisor_count, daily_goal)
    finally:
        await close_database()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo data for today's session")
    parser.add_argument("--advisors", type=int, default=5, help="Number of advisors to create")
    parser.add_argument("--goal", type=float, default=2_500_000, help="Total daily goal")
    args = parser.parse_args()
    asyncio.run(main(args.advisors, args.goal))
