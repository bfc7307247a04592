import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

SERVICE_ROOT = Path(__file__).resolve().parents[1]
BACKEND_COMMON_ROOT = SERVICE_ROOT.parents[1] / "libs" / "backend-common"
for path in (SERVICE_ROOT, BACKEND_COMMON_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

FULL_KIT = [
    "barbell",
    "dumbbells",
    "kettlebell",
    "pull_up_bar",
    "bench",
    "cable_machine",
    "rower",
    "jump_rope",
    "box",
    "medicine_ball",
    "resistance_band",
    "bike",
]


@pytest.fixture()
def full_kit():
    return list(FULL_KIT)


@pytest.fixture(scope="session")
def catalog():
    from program_service.services.catalog import load_catalog

    return list(load_catalog())


@pytest.fixture(scope="session")
def exercise_by_name(catalog):
    by_name = {exercise.name: exercise for exercise in catalog}

    def _get(name: str):
        return by_name[name]

    return _get


@pytest.fixture()
def settings():
    from program_service.config import Settings

    return Settings()


@pytest.fixture()
def make_profile():
    from program_service.schemas import UserProfile

    def _make(**overrides):
        data = {
            "equipment": ["dumbbells"],
            "experience_level": "beginner",
            "nutrition_goal": "maintain",
            "session_minutes": 60,
            "days_per_week": 3,
        }
        data.update(overrides)
        return UserProfile(**data)

    return _make


@pytest.fixture()
def make_request(catalog, make_profile):
    from program_service.schemas import Assessment, ProgramGenerationRequest

    def _make(assessment: dict | None = None, **profile_overrides):
        return ProgramGenerationRequest(
            profile=make_profile(**profile_overrides),
            assessment=Assessment(**assessment) if assessment is not None else None,
            catalog=catalog,
        )

    return _make


@pytest.fixture()
def client():
    from program_service.main import app

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
