from __future__ import annotations

import pytest

from guildsmith.engine.builder import BlueprintBuilder
from guildsmith.engine.editor import EditEngine
from guildsmith.engine.rate_limiter import RateLimiter
from guildsmith.services.resource_state_store import ResourceStateStore
from guildsmith.testing.fakes import FakeGuild


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild()


@pytest.fixture
def store(tmp_path) -> ResourceStateStore:
    return ResourceStateStore(str(tmp_path / "state.sqlite3"))


@pytest.fixture
def builder(store) -> BlueprintBuilder:
    return BlueprintBuilder(store, RateLimiter(max_retries=0))


@pytest.fixture
def editor(store) -> EditEngine:
    return EditEngine(RateLimiter(max_retries=0), store)
