"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Each test runs against a fresh, isolated in-memory SQLite database created
with Tortoise-ORM, in the same event loop as the test itself.

Key Fixtures:
- `anyio_backend`: Specifies the asyncio backend.
- `initialize_test_db`: (autouse) Creates a fresh DB schema for each test.
- `app_for_testing`: The FastAPI application with dependency overrides cleared after the test.
- `client`: An httpx AsyncClient talking to the app in-process.
- `sales_data`: Users, groups, memberships and sales spread over Dec 2023 - Apr 2024.
- `fake_store`: A ReportStore double that records queries and returns canned rows.
"""

import datetime
from typing import Any, AsyncGenerator, Dict, Generator, List, Optional, Sequence

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from tortoise import Tortoise

from sales_reports.features.reports.queries import POSTGRES, SqlDialect
from sales_reports.features.sales.models import Group, Sale, User, UserGroup

# Import the app
from sales_reports.main import app as actual_app


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """
    Specifies the asyncio backend for async tests.
    """
    return "asyncio"


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for each test function.

    This async, autouse fixture creates a fresh in-memory database and schema
    for each test and tears it down afterwards.
    """
    test_db_config = {
        "connections": {"default": "sqlite://:memory:"},
        "apps": {
            "models": {
                "models": ["sales_reports.features.sales.models"],
                "default_connection": "default",
            }
        },
    }
    await Tortoise.init(config=test_db_config)
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


@pytest.fixture(scope="function")
def app_for_testing() -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application instance for testing.

    The production lifespan is never started (ASGITransport does not send
    lifespan events), so `initialize_test_db` owns the database connection.
    Dependency overrides set by a test are removed afterwards.
    """
    yield actual_app
    actual_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app_for_testing: FastAPI) -> AsyncGenerator[httpx.AsyncClient, Any]:
    """
    Provides an httpx AsyncClient bound to the app, without a network.
    """
    transport = httpx.ASGITransport(app=app_for_testing)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


def sale_at(year: int, month: int, day: int, hour: int = 12) -> datetime.datetime:
    return datetime.datetime(year, month, day, hour, 0, 0)


@pytest_asyncio.fixture(scope="function")
async def sales_data() -> Dict[str, Any]:
    """
    Seeds a small store:

    - alice (group North): Mar 2024 sales 100 + 300, Jan 2024 sale 50
    - bob (groups North and South): Mar 2024 sale 150, Feb 2024 sale 80
    - carol (no group): Mar 2024 sales 20 + 40 + 60, Dec 2023 sale 10
    - a sale exactly at 2024-04-01 00:00:00 for alice (outside March)
    """
    alice = await User.create(name="Alice")
    bob = await User.create(name="Bob")
    carol = await User.create(name="Carol")
    north = await Group.create(name="North")
    south = await Group.create(name="South")

    await UserGroup.create(user=alice, group=north)
    await UserGroup.create(user=bob, group=north)
    await UserGroup.create(user=bob, group=south)

    await Sale.create(user=alice, amount=100.0, date=sale_at(2024, 3, 1, 0))
    await Sale.create(user=alice, amount=300.0, date=sale_at(2024, 3, 31, 23))
    await Sale.create(user=alice, amount=50.0, date=sale_at(2024, 1, 15))
    await Sale.create(user=alice, amount=999.0, date=datetime.datetime(2024, 4, 1, 0, 0, 0))
    await Sale.create(user=bob, amount=150.0, date=sale_at(2024, 3, 10))
    await Sale.create(user=bob, amount=80.0, date=sale_at(2024, 2, 29))
    await Sale.create(user=carol, amount=20.0, date=sale_at(2024, 3, 5))
    await Sale.create(user=carol, amount=40.0, date=sale_at(2024, 3, 6))
    await Sale.create(user=carol, amount=60.0, date=sale_at(2024, 3, 7))
    await Sale.create(user=carol, amount=10.0, date=sale_at(2023, 12, 31, 23))

    return {"alice": alice, "bob": bob, "carol": carol, "north": north, "south": south}


class FakeReportStore:
    """ReportStore double: records every executed plan and returns `rows` or raises `error`."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None,
                 dialect: SqlDialect = POSTGRES):
        self.rows = rows if rows is not None else []
        self.error = error
        self._dialect = dialect
        self.calls: List[tuple] = []

    @property
    def dialect(self) -> SqlDialect:
        return self._dialect

    async def execute(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        self.calls.append((sql, list(params)))
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]


@pytest.fixture(scope="function")
def fake_store() -> FakeReportStore:
    return FakeReportStore(rows=[
        {"user_id": 1, "user_name": "Alice", "period": "2024-03-01", "num_sales": 2,
         "total_revenue": 400.0, "avg_revenue": 200.0},
    ])
