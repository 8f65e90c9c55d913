"""
Trip preference record and the optional trip context a caller may send.

All bounds checking lives in the TripPreferences validators, so every
extraction path (AI or keyword) produces a record that is already clamped
and normalized.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_DAYS, MAX_DAYS = 1, 7
MIN_STOPS_PER_DAY, MAX_STOPS_PER_DAY = 3, 6

ALLOWED_CATEGORIES = ("food", "nightlife", "coffee", "outdoors", "wellness", "culture")
ALLOWED_GROUP_TYPES = ("solo", "couple", "friends", "family-kids", "family", "group")
DEFAULT_GROUP_TYPE = "couple"
DEFAULT_PLAN_NAME = "My Plan"
DEFAULT_STOPS_PER_DAY = 5


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError("expected a number")
    try:
        number = int(float(str(value).strip()))
    except (TypeError, OverflowError) as exc:
        raise ValueError(f"not a finite number: {value!r}") from exc
    return max(low, min(high, number))


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


class TripContext(BaseModel):
    """Optional structured hints sent alongside the free-text message."""
    model_config = ConfigDict(populate_by_name=True)

    group_type: Optional[str] = Field(default=None, alias="groupType")
    preferences: Optional[List[str]] = None
    vibes: Optional[List[str]] = None
    days: Optional[int] = None
    city: Optional[str] = None


class TripPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    days: int = 1
    categories: List[str] = Field(default_factory=list)
    vibes: List[str] = Field(default_factory=list)
    group_type: str = Field(default=DEFAULT_GROUP_TYPE, alias="groupType")
    plan_name: str = Field(default=DEFAULT_PLAN_NAME, alias="planName")
    max_stops_per_day: int = Field(default=DEFAULT_STOPS_PER_DAY, alias="maxStopsPerDay")

    @field_validator("days", mode="before")
    @classmethod
    def clamp_days(cls, v):
        return _clamp_int(v, MIN_DAYS, MAX_DAYS, default=1)

    @field_validator("max_stops_per_day", mode="before")
    @classmethod
    def clamp_stops(cls, v):
        return _clamp_int(v, MIN_STOPS_PER_DAY, MAX_STOPS_PER_DAY, default=DEFAULT_STOPS_PER_DAY)

    @field_validator("categories", mode="before")
    @classmethod
    def keep_known_categories(cls, v):
        kept: List[str] = []
        for category in _str_list(v):
            category = category.lower()
            if category in ALLOWED_CATEGORIES and category not in kept:
                kept.append(category)
        return kept

    @field_validator("vibes", mode="before")
    @classmethod
    def clean_vibes(cls, v):
        return _str_list(v)

    @field_validator("group_type", mode="before")
    @classmethod
    def known_group_type(cls, v):
        if isinstance(v, str) and v.strip().lower() in ALLOWED_GROUP_TYPES:
            return v.strip().lower()
        return DEFAULT_GROUP_TYPE

    @field_validator("plan_name", mode="before")
    @classmethod
    def clean_plan_name(cls, v):
        return "" if v is None else str(v).strip()

    @classmethod
    def from_loose_dict(cls, data: Dict[str, Any]) -> "TripPreferences":
        """Build from a dict whose keys may use any casing or snake/camel style."""
        lookup = {name.replace("_", "").lower(): name for name in cls.model_fields}
        normalized = {}
        for key, value in data.items():
            field = lookup.get(str(key).replace("_", "").lower())
            if field is not None:
                normalized[field] = value
        return cls.model_validate(normalized)
