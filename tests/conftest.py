import json
import os
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure the app module is in path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.main import app, get_parameterizer, resolve_limiter
from tests.parameterizers import blake2b_parameterizer

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def resolving_client():
    app.dependency_overrides[get_parameterizer] = lambda: blake2b_parameterizer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def blueprint():
    with open(os.path.join(FIXTURES, "plutus.json"), "r", encoding="utf-8") as f:
        return json.load(f)


# Reset rate limit counters before each test for isolation
@pytest.fixture(autouse=True)
def _reset_rate_limits():
    resolve_limiter.reset()
    yield
