from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
from datetime import datetime

from locallist.core.preferences import TripContext

# ===== BUILDER REQUEST =====

class BuilderChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Free-text description of the plan the user wants")
    trip_context: Optional[TripContext] = Field(default=None, alias="tripContext")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        if not v or not v.strip():
            raise ValueError("Message cannot be empty")
        # Check for potentially malicious content
        suspicious_patterns = ['<script>', 'javascript:', 'data:text/html']
        if any(pattern in v.lower() for pattern in suspicious_patterns):
            raise ValueError("Message contains invalid content")
        return v.strip()

# ===== BUILDER RESPONSE =====

class TravelSegmentRead(BaseModel):
    distance_km: float
    duration_min: int
    mode: str

class PlaceSummaryRead(BaseModel):
    id: UUID
    name: str
    category: Optional[str] = None
    neighborhood: Optional[str] = None
    why_this_place: Optional[str] = None
    price_range: Optional[str] = None
    photos: List[str] = []
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class ResolvedStopRead(BaseModel):
    id: UUID
    place_id: UUID
    day_number: int
    order_index: int
    time_block: str
    suggested_arrival: Optional[str] = None
    suggested_duration_min: int
    travel_from_previous: Optional[TravelSegmentRead] = None
    place: Optional[PlaceSummaryRead] = None

class PlanSummaryRead(BaseModel):
    id: UUID
    name: str
    city: str
    type: str = "ai"
    description: Optional[str] = None
    duration_days: int
    trip_context: Optional[Dict[str, Any]] = None
    is_public: bool = False
    is_ephemeral: bool = False
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

class BuilderChatResponse(BaseModel):
    plan: PlanSummaryRead
    stops: List[ResolvedStopRead]
    message: str

# ===== HEALTH =====

class HealthRead(BaseModel):
    status: str
    version: str
    timestamp: datetime
