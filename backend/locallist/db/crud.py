"""
Storage operations used by the plan builder: reading the published catalog
for a city and persisting generated plans for identified callers.
"""

import logging
from datetime import time as TimeOfDay
from typing import Any, Dict, List, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from locallist.core.catalog import CandidatePlace
from locallist.core.scheduler import ScheduledStop
from locallist.db.models import Place, PlaceStatus, Plan, PlanStop, PlanType

logger = logging.getLogger(__name__)


class PlanStore(Protocol):
    async def list_published_places(self, city: str) -> List[CandidatePlace]:
        ...

    async def save_plan(
        self,
        *,
        name: str,
        city: str,
        description: str,
        duration_days: int,
        trip_context: Optional[Dict[str, Any]],
        created_by: UUID,
        stops: Sequence[ScheduledStop],
    ) -> Plan:
        ...


# ===== PLACE QUERIES =====

async def list_published_places(session: AsyncSession, city: str) -> List[CandidatePlace]:
    """Published places of a city, projected to candidate records"""
    result = await session.execute(
        select(Place)
        .where(Place.status == PlaceStatus.PUBLISHED.value, Place.city == city)
        .order_by(Place.name)
    )
    places = result.scalars().all()
    logger.info(f"Loaded {len(places)} published places for {city}")
    return [p.to_candidate() for p in places]


# ===== PLAN PERSISTENCE =====

def _stop_row(plan_id: UUID, stop: ScheduledStop) -> PlanStop:
    segment = stop.travel_from_previous
    return PlanStop(
        plan_id=plan_id,
        place_id=stop.place_id,
        day_number=stop.day_number,
        order_index=stop.order_index,
        time_block=stop.time_block,
        suggested_arrival=TimeOfDay.fromisoformat(stop.suggested_arrival) if stop.suggested_arrival else None,
        suggested_duration_min=stop.suggested_duration_min,
        travel_from_previous=segment._asdict() if segment is not None else None,
    )


async def create_plan_with_stops(
    session: AsyncSession,
    name: str,
    city: str,
    description: str,
    duration_days: int,
    trip_context: Optional[Dict[str, Any]],
    created_by: UUID,
    stops: Sequence[ScheduledStop],
) -> Plan:
    """Persist a generated plan and its stops"""
    try:
        plan = Plan(
            name=name,
            city=city,
            type=PlanType.AI.value,
            description=description,
            duration_days=duration_days,
            trip_context=trip_context or {},
            is_public=False,
            created_by=created_by,
        )
        session.add(plan)
        await session.flush()

        if stops:
            session.add_all([_stop_row(plan.id, s) for s in stops])

        await session.commit()
        await session.refresh(plan)
        logger.info(f"Created plan {plan.id} with {len(stops)} stops for user {created_by}")
        return plan
    except Exception as e:
        await session.rollback()
        logger.error(f"Error creating plan: {e}")
        raise


class SqlPlanStore:
    """PlanStore backed by an async SQLAlchemy session"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_published_places(self, city: str) -> List[CandidatePlace]:
        return await list_published_places(self.session, city)

    async def save_plan(self, **fields) -> Plan:
        return await create_plan_with_stops(self.session, **fields)
