from datetime import datetime, timezone

import pytest

from app.services.category_mapper import CategoryMapper
from app.services.fallback_resolver import FallbackResolver
from app.services.priority_scoring import PriorityScoringService
from app.services.triage_config import ClassificationConfig

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config():
    return ClassificationConfig()


@pytest.fixture
def mapper(config):
    return CategoryMapper(config)


@pytest.fixture
def resolver(config):
    return FallbackResolver(config)


@pytest.fixture
def scorer():
    return PriorityScoringService()
