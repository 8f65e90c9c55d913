"""
Day template used to lay stops out in time.

Every day of a plan walks the same ordered blocks; a plan asking for fewer
stops per day simply uses a prefix of the template.
"""
from collections import namedtuple
from typing import List, Optional

TimeSlot = namedtuple("TimeSlot", [
    "time_block",    # label shown to the user
    "arrival",       # nominal arrival, "HH:MM"
    "duration_min",  # nominal time on site
])

DAY_TEMPLATE = (
    TimeSlot("morning", "09:00", 60),
    TimeSlot("lunch", "12:00", 90),
    TimeSlot("afternoon", "14:30", 90),
    TimeSlot("dinner", "19:00", 90),
    TimeSlot("evening", "21:00", 60),
)

# best-time tags a place may carry to be scheduled into each block
TIME_BLOCK_MATCHES = {
    "morning": ("morning",),
    "lunch": ("lunch", "morning", "afternoon"),
    "afternoon": ("afternoon", "morning"),
    "dinner": ("dinner", "evening", "lunch"),
    "evening": ("evening",),
}


def day_slots(max_stops: int) -> List[TimeSlot]:
    """First `max_stops` blocks of the template (never more than the template holds)."""
    return list(DAY_TEMPLATE[:max(0, min(max_stops, len(DAY_TEMPLATE)))])


def is_good_time_match(best_time: Optional[str], time_block: str) -> bool:
    if not best_time or best_time.lower() == "any":
        return True

    allowed = TIME_BLOCK_MATCHES.get(time_block)
    if allowed is None:
        return True

    tag = best_time.lower()
    return any(t in tag for t in allowed)
