"""
Shared fixtures for the plan builder tests
"""

import os
import random
from uuid import uuid4

# keep tests away from real credentials and log files
os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_FILE"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ISSUER"] = ""
os.environ["JWT_AUDIENCE"] = ""

import pytest
import requests
from fastapi.testclient import TestClient

from locallist.core.catalog import CandidatePlace
from locallist.core.nlp.extractor import PreferenceExtractor
from locallist.core.scheduler import ScheduleBuilder
from locallist.db.models import Plan

MIAMI = (25.7617, -80.1918)


def make_place(category="food", best_time=None, latitude=None, longitude=None, name=None, **extra):
    place_id = extra.pop("id", None) or uuid4()
    return CandidatePlace(
        id=place_id,
        name=name or f"{category.title()} spot {str(place_id)[:4]}",
        category=category,
        latitude=latitude,
        longitude=longitude,
        best_time=best_time,
        why_this_place=extra.pop("why_this_place", "Locals love it"),
        price_range=extra.pop("price_range", "$$"),
        photos=extra.pop("photos", ("photo-ref-1",)),
        neighborhood=extra.pop("neighborhood", "Wynwood"),
    )


class FakePlanStore:
    """In-memory stand-in for the storage collaborator"""

    def __init__(self, places=None, fail_on_save=False):
        self.places = list(places or [])
        self.fail_on_save = fail_on_save
        self.cities = []
        self.saved = []

    async def list_published_places(self, city):
        self.cities.append(city)
        return list(self.places)

    async def save_plan(self, **fields):
        if self.fail_on_save:
            raise RuntimeError("database unavailable")
        self.saved.append(fields)
        return Plan(
            name=fields["name"],
            city=fields["city"],
            type="ai",
            description=fields["description"],
            duration_days=fields["duration_days"],
            trip_context=fields["trip_context"] or {},
            is_public=False,
            created_by=fields["created_by"],
        )


class UnreachableModel:
    """Primary strategy whose transport always fails"""

    def __init__(self):
        self.calls = 0

    def extract(self, message, context):
        self.calls += 1
        raise requests.ConnectionError("generativelanguage.googleapis.com unreachable")


@pytest.fixture
def offline_extractor():
    return PreferenceExtractor(UnreachableModel())


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def api_client(monkeypatch):
    """Returns make(store, extractor) -> TestClient with collaborators swapped out"""
    from locallist.api import builder
    from locallist.main import app

    monkeypatch.setattr(builder.limiter, "enabled", False)

    def make(store, extractor, seed=7):
        app.dependency_overrides[builder.get_plan_store] = lambda: store
        app.dependency_overrides[builder.get_preference_extractor] = lambda: extractor
        app.dependency_overrides[builder.get_schedule_builder] = lambda: ScheduleBuilder(random.Random(seed))
        return TestClient(app)

    yield make
    app.dependency_overrides.clear()
