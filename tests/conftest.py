"""Shared fixtures: an in-memory store, a stepping clock and a repo."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from forumstore.content.repository import ChannelsRepo
from forumstore.storage.memory import MemoryDatastore


class SteppingClock:
    """Returns a fixed start time, advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def store() -> MemoryDatastore:
    return MemoryDatastore()


@pytest.fixture
def repo(store: MemoryDatastore, clock: SteppingClock) -> ChannelsRepo:
    return ChannelsRepo(store, "acme", clock=clock)


@pytest.fixture
def news(repo: ChannelsRepo) -> str:
    """A created channel; returns its slug."""
    repo.create_channel("news", "Company news")
    return "news"
