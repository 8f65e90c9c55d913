"""
Preference extraction for the plan builder.

Two strategies share one contract, extract(message, context) -> TripPreferences:
  - GeminiExtractor asks the model for a JSON preference record
  - KeywordExtractor derives one from simple keyword heuristics

PreferenceExtractor runs the primary strategy and switches to the keyword
strategy on any failure, so callers always get a valid, clamped record.
"""

import json
import re
from typing import Optional, Protocol

import structlog

from locallist.core.nlp.gemini import GeminiClient
from locallist.core.preferences import (
    ALLOWED_CATEGORIES,
    ALLOWED_GROUP_TYPES,
    TripContext,
    TripPreferences,
)

logger = structlog.get_logger(__name__)

PLAN_NAME_MAX_CHARS = 60

# keyword -> category, checked as case-insensitive substrings of the message
KEYWORD_CATEGORIES = (
    ("food", ("food", "eat", "restaurant")),
    ("nightlife", ("night", "bar", "club")),
    ("coffee", ("coffee", "cafe", "breakfast")),
)
DEFAULT_CATEGORIES = ["food", "outdoors", "culture"]

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

PROMPT_TEMPLATE = """Extract travel plan preferences from this message. Return JSON only, no markdown.
Message: "{message}"
Context: {context}

Return this exact JSON shape:
{{
  "days": number (1-7, default 1),
  "categories": string[] (from: {categories}),
  "vibes": string[] (e.g. romantic, adventurous, relaxed, party, cultural),
  "groupType": string ({group_types}),
  "planName": string (short descriptive name for the plan),
  "maxStopsPerDay": number (3-6, based on pace)
}}"""


class PreferenceStrategy(Protocol):
    def extract(self, message: str, context: Optional[TripContext]) -> TripPreferences:
        ...


def build_prompt(message: str, context: Optional[TripContext]) -> str:
    ctx = (context or TripContext()).model_dump(by_alias=True)
    return PROMPT_TEMPLATE.format(
        message=message,
        context=json.dumps(ctx),
        categories=", ".join(ALLOWED_CATEGORIES),
        group_types="/".join(ALLOWED_GROUP_TYPES),
    )


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_ai_response(text: str) -> TripPreferences:
    """Parse model output into a record; anything unusable yields the default record."""
    try:
        data = json.loads(strip_code_fences(text))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return TripPreferences.from_loose_dict(data)
    except Exception as e:
        logger.warning("preference_json_unusable", error=str(e), error_type=type(e).__name__)
        return TripPreferences()


class GeminiExtractor:
    def __init__(self, client: GeminiClient):
        self.client = client

    def extract(self, message: str, context: Optional[TripContext]) -> TripPreferences:
        text = self.client.generate_json(build_prompt(message, context))
        return parse_ai_response(text)


class KeywordExtractor:
    """Heuristic extraction used whenever the model is unavailable."""

    def extract(self, message: str, context: Optional[TripContext]) -> TripPreferences:
        lower = message.lower()
        categories = [
            category
            for category, keywords in KEYWORD_CATEGORIES
            if any(k in lower for k in keywords)
        ] or list(DEFAULT_CATEGORIES)

        ctx = context or TripContext()
        if ctx.days is not None:
            days = ctx.days
        else:
            days = 2 if "weekend" in lower else 1

        group_type = (ctx.group_type or "").strip().lower()

        return TripPreferences(
            days=days,
            categories=categories,
            vibes=ctx.vibes or ctx.preferences or [],
            group_type=group_type,
            plan_name=message[:PLAN_NAME_MAX_CHARS],
            max_stops_per_day=3 if group_type == "family-kids" else 5,
        )


class PreferenceExtractor:
    def __init__(self, primary: Optional[PreferenceStrategy], fallback: Optional[PreferenceStrategy] = None):
        self.primary = primary
        self.fallback = fallback or KeywordExtractor()

    def extract(self, message: str, context: Optional[TripContext] = None) -> TripPreferences:
        if self.primary is not None:
            try:
                return self.primary.extract(message, context)
            except Exception as e:
                logger.warning(
                    "preference_extraction_fallback",
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return self.fallback.extract(message, context)
