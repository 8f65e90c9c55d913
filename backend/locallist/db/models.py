import uuid
from datetime import datetime, timezone, time as TimeOfDay
from enum import Enum
from typing import List, Optional, Dict, Any

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, Index, CheckConstraint, JSON
from uuid import UUID as PyUUID

from locallist.core.catalog import CandidatePlace


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_column() -> Column:
    return Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# Enums
class PlaceStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    REJECTED = "rejected"

class PlanType(str, Enum):
    AI = "ai"
    CURATED = "curated"
    USER = "user"


class Place(SQLModel, table=True):
    __tablename__ = "places"

    __table_args__ = (
        Index('idx_places_city_status', 'city', 'status'),
        Index('idx_places_category', 'category'),
        CheckConstraint('latitude IS NULL OR latitude BETWEEN -90 AND 90', name='check_place_latitude'),
        CheckConstraint('longitude IS NULL OR longitude BETWEEN -180 AND 180', name='check_place_longitude'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255, description="Display name")
    category: str = Field(max_length=50, description="Catalog category, e.g. food, coffee, fine-dining-food")
    subcategory: Optional[str] = Field(default=None, max_length=100)
    neighborhood: Optional[str] = Field(default=None, max_length=100)
    city: str = Field(default="Miami", max_length=100)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    why_this_place: str = Field(default="", description="Curator's justification")
    best_for: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    suitable_for: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    best_time: Optional[str] = Field(
        default=None,
        max_length=50,
        description="When the place works best: morning, lunch, evening, any, ..."
    )
    price_range: Optional[str] = Field(default=None, max_length=10)
    photos: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    google_place_id: Optional[str] = Field(default=None, max_length=255)
    google_rating: Optional[float] = Field(default=None, ge=0, le=5)
    google_review_count: Optional[int] = Field(default=None)
    source: str = Field(default="curated", max_length=50)
    source_url: Optional[str] = Field(default=None)
    status: str = Field(default=PlaceStatus.DRAFT.value, max_length=20)
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=_timestamp_column())

    def to_candidate(self) -> CandidatePlace:
        """Immutable projection handed to the scheduling engine"""
        return CandidatePlace(
            id=self.id,
            name=self.name,
            category=self.category,
            latitude=self.latitude,
            longitude=self.longitude,
            best_time=self.best_time,
            why_this_place=self.why_this_place,
            price_range=self.price_range,
            photos=tuple(self.photos or ()),
            neighborhood=self.neighborhood,
        )


class Plan(SQLModel, table=True):
    __tablename__ = "plans"

    __table_args__ = (
        Index('idx_plans_created_by', 'created_by'),
        Index('idx_plans_city_public', 'city', 'is_public'),
        CheckConstraint('duration_days >= 1', name='check_plan_duration'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=255)
    city: str = Field(default="Miami", max_length=100)
    type: str = Field(default=PlanType.AI.value, max_length=20)
    description: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    duration_days: int = Field(default=1)
    trip_context: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    is_public: bool = Field(default=True)
    is_showcase: bool = Field(default=False)
    created_by: Optional[PyUUID] = Field(default=None, description="Identity of the caller who generated the plan")
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=_timestamp_column())

    stops: List["PlanStop"] = Relationship(back_populates="plan")


class PlanStop(SQLModel, table=True):
    __tablename__ = "plan_stops"

    __table_args__ = (
        Index('idx_plan_stops_plan_day', 'plan_id', 'day_number', 'order_index'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    plan_id: PyUUID = Field(foreign_key="plans.id", nullable=False)
    place_id: PyUUID = Field(foreign_key="places.id", nullable=False)
    day_number: int = Field(ge=1)
    order_index: int = Field(ge=0)
    time_block: Optional[str] = Field(default=None, max_length=20)
    suggested_arrival: Optional[TimeOfDay] = Field(default=None)
    suggested_duration_min: Optional[int] = Field(default=None)
    travel_from_previous: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_timestamp_column())

    plan: Optional[Plan] = Relationship(back_populates="stops")
