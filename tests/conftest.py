"""Shared fixtures. Everything runs against in-memory storage; no backend calls."""

from datetime import datetime, timezone

import pytest

from src.models.client import Client, FnaSession
from src.services.storage import InMemoryFnaStorage


@pytest.fixture
def clients():
    return [
        Client(
            id="c-ana",
            firstname="Ana",
            lastname="Lee",
            phone="555-1111",
            email="ana@example.com",
            createdat=datetime(2024, 1, 10, tzinfo=timezone.utc),
        ),
        Client(
            id="c-bo",
            firstname="Bo",
            lastname="Lee",
            phone="555-2222",
            createdat=datetime(2024, 3, 5, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def sessions():
    return [
        FnaSession(
            id="abc123",
            created_at=datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc),
            household_income="85000",
            dependents=2,
        ),
        FnaSession(
            id="older",
            created_at=datetime(2023, 12, 1, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def storage(clients, sessions):
    return InMemoryFnaStorage(clients=clients, sessions=sessions)
