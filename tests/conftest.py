"""Shared fixtures for monitor tests."""

from __future__ import annotations

import pytest

from tests.fakes import InMemoryHistoryStore


@pytest.fixture
def history() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()
