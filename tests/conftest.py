"""Shared fixtures: isolate cached settings and data between tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

import ary.settings as settings
from ary.graph import local_graph

FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_caches():
    settings.reset()
    local_graph.reset()
    yield
    settings.reset()
    local_graph.reset()


@pytest.fixture
def graph():
    return local_graph.get_conversation_graph()


@pytest.fixture
def catalog():
    return local_graph.get_profile_catalog()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME
