"""Insert the demo catalog: `python -m app.seed`."""

import asyncio
import logging

from sqlalchemy import select

from app.core.db import async_session_maker, init_db
from app.models.catalog import Branch, Practitioner, Service
from app.services.store import MemoryBookingStore

logger = logging.getLogger(__name__)


def demo_services() -> list[Service]:
    return [
        Service(id="S1", name="Routine Check-up", duration_minutes=30),
        Service(id="S2", name="Teeth Cleaning", duration_minutes=60),
        Service(id="S3", name="Filling Procedure", duration_minutes=45),
    ]


def demo_branches() -> list[Branch]:
    return [Branch(id="B1", name="Main Clinic", start_hour=9, end_hour=17)]


def demo_practitioners() -> list[Practitioner]:
    return [
        Practitioner(id="D1", name="Dr. Evelyn Reed", start_hour=9, end_hour=17, branch_id="B1"),
        Practitioner(id="D2", name="Dr. Marcus Hill", start_hour=8, end_hour=16, branch_id="B1"),
    ]


def build_demo_store() -> MemoryBookingStore:
    return MemoryBookingStore(
        services=demo_services(),
        practitioners=demo_practitioners(),
        branches=demo_branches(),
    )


async def seed() -> int:
    """Add demo records that are not present yet. Returns how many were inserted."""
    await init_db()
    inserted = 0
    async with async_session_maker() as session:
        try:
            for model, records in (
                (Service, demo_services()),
                (Branch, demo_branches()),
                (Practitioner, demo_practitioners()),
            ):
                result = await session.execute(select(model.id))
                existing = {row[0] for row in result.all()}
                for record in records:
                    if record.id not in existing:
                        session.add(record)
                        inserted += 1
                # branches must exist before practitioners reference them
                await session.flush()
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    return inserted


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    count = asyncio.run(seed())
    logger.info("Seeded %d catalog record(s)", count)
