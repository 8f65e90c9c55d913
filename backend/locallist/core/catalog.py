from collections import namedtuple
from typing import List, Sequence

from locallist.core.preferences import TripPreferences

# Read-only projection of a published catalog place
CandidatePlace = namedtuple("CandidatePlace", [
    "id",
    "name",
    "category",
    "latitude",        # optional
    "longitude",       # optional
    "best_time",       # optional, e.g. "morning", "evening", "any"
    "why_this_place",
    "price_range",
    "photos",
    "neighborhood",
], defaults=(None, None, None, "", None, None, None))

# preference tag -> exact catalog category name
CATEGORY_MAP = {
    "food": "food",
    "nightlife": "nightlife",
    "coffee": "coffee",
    "outdoors": "outdoors",
    "wellness": "wellness",
    "culture": "culture",
}


def category_matches(place_category: str, wanted: str) -> bool:
    """Exact mapped name, or the tag anywhere inside a looser catalog category."""
    return CATEGORY_MAP.get(wanted) == place_category or wanted in place_category


def filter_places(places: Sequence[CandidatePlace], preferences: TripPreferences) -> List[CandidatePlace]:
    if not preferences.categories:
        return list(places)

    wanted = [c.lower() for c in preferences.categories]
    return [
        p for p in places
        if any(category_matches((p.category or "").lower(), c) for c in wanted)
    ]
