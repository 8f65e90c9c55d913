from uuid import UUID, uuid4
from typing import Any, Dict, Optional
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address
import structlog

from locallist.api.schemas import BuilderChatRequest, BuilderChatResponse
from locallist.core.catalog import filter_places
from locallist.core.nlp.extractor import GeminiExtractor, PreferenceExtractor
from locallist.core.nlp.gemini import GeminiClient
from locallist.core.preferences import TripContext
from locallist.core.scheduler import ScheduleBuilder
from locallist.core.security import get_optional_user_id
from locallist.core.settings import Settings
from locallist.core.stop_resolver import resolve_stop_places
from locallist.db.crud import PlanStore, SqlPlanStore
from locallist.db.models import Plan
from locallist.db.session import get_db_session

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/builder", tags=["builder"])

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

settings = Settings()

PLAN_NAME_PREFIX_CHARS = 60


@asynccontextmanager
async def performance_timer(operation: str):
    """Context manager for timing operations"""
    start = time.time()
    try:
        yield
    finally:
        duration = time.time() - start
        logger.info("operation_completed", operation=operation, duration_seconds=round(duration, 2))


# ===== DEPENDENCIES =====

def get_preference_extractor() -> PreferenceExtractor:
    return PreferenceExtractor(GeminiExtractor(GeminiClient.from_settings(settings)))

def get_schedule_builder() -> ScheduleBuilder:
    return ScheduleBuilder()

def get_plan_store(session: AsyncSession = Depends(get_db_session)) -> PlanStore:
    return SqlPlanStore(session)


class BuilderService:
    """Runs the plan pipeline: extract -> load catalog -> filter -> schedule -> resolve"""

    def __init__(
        self,
        store: PlanStore,
        extractor: PreferenceExtractor,
        scheduler: Optional[ScheduleBuilder] = None,
        default_city: Optional[str] = None,
    ):
        self.store = store
        self.extractor = extractor
        self.scheduler = scheduler or ScheduleBuilder()
        self.default_city = default_city or settings.DEFAULT_CITY

    @staticmethod
    def _persisted_summary(plan: Plan) -> Dict[str, Any]:
        return {
            "id": plan.id,
            "name": plan.name,
            "city": plan.city,
            "type": plan.type,
            "description": plan.description,
            "duration_days": plan.duration_days,
            "trip_context": plan.trip_context,
            "is_public": plan.is_public,
            "is_ephemeral": False,
            "created_by": plan.created_by,
            "created_at": plan.created_at,
        }

    async def generate_plan(
        self,
        message: str,
        trip_context: Optional[TripContext],
        user_id: Optional[UUID],
    ) -> Dict[str, Any]:
        # extraction may block on the model call
        prefs = await run_in_threadpool(self.extractor.extract, message, trip_context)

        city = (trip_context.city if trip_context and trip_context.city else None) or self.default_city
        places = await self.store.list_published_places(city)
        candidates = filter_places(places, prefs)
        stops = self.scheduler.build(candidates, prefs)

        logger.info(
            "plan_scheduled",
            city=city,
            days=prefs.days,
            categories=prefs.categories,
            places=len(places),
            candidates=len(candidates),
            stops=len(stops),
            anonymous=user_id is None,
        )

        name = prefs.plan_name or f"{message[:PLAN_NAME_PREFIX_CHARS]} Plan"
        description = f"AI-generated plan: {message}"
        context_echo = trip_context.model_dump(exclude_none=True) if trip_context else None

        if user_id is None:
            plan = {
                "id": uuid4(),
                "name": name,
                "city": city,
                "type": "ai",
                "description": description,
                "duration_days": prefs.days,
                "trip_context": context_echo,
                "is_public": False,
                "is_ephemeral": True,
                "created_by": None,
            }
        else:
            saved = await self.store.save_plan(
                name=name,
                city=city,
                description=description,
                duration_days=prefs.days,
                trip_context=context_echo,
                created_by=user_id,
                stops=stops,
            )
            plan = self._persisted_summary(saved)

        return {
            "plan": plan,
            "stops": resolve_stop_places(stops, candidates),
            "message": f"Created a {prefs.days}-day plan with {len(stops)} stops!",
        }


@router.post("/chat",
    response_model=BuilderChatResponse,
    status_code=status.HTTP_200_OK,
    responses={
        422: {"description": "Invalid request body"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Plan generation failed"}
    },
    summary="Generate a day-by-day plan from a chat message",
    description="Extracts trip preferences from free text and schedules curated places into time blocks"
)
@limiter.limit(settings.RATE_LIMIT_BUILDER if settings.ENABLE_RATE_LIMITING else "1000/minute")
async def generate_plan(
    request: Request,
    payload: BuilderChatRequest,
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    store: PlanStore = Depends(get_plan_store),
    extractor: PreferenceExtractor = Depends(get_preference_extractor),
    scheduler: ScheduleBuilder = Depends(get_schedule_builder),
):
    """Build a plan; anonymous callers get an ephemeral plan, identified ones a saved plan"""
    async with performance_timer("plan_generation"):
        try:
            service = BuilderService(store, extractor, scheduler)
            return await service.generate_plan(payload.message, payload.trip_context, user_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(
                "plan_generation_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Failed to generate plan", "details": str(e)},
            )
