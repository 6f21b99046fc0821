"""Store access for the report engine.

The engine only needs one capability from the database: run a parameterized
SQL template and give back the rows. Handlers receive a ReportStore through
FastAPI's dependency injection, so tests can substitute their own."""
import logging
from typing import Any, Dict, List, Protocol, Sequence

from tortoise import BaseDBAsyncClient, connections

from ...core.config import DB_CONNECTION_NAME
from .queries import SqlDialect, get_dialect

logger = logging.getLogger(__name__)


class ReportStore(Protocol):
    @property
    def dialect(self) -> SqlDialect: ...

    async def execute(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]: ...


class TortoiseReportStore:
    """Runs report queries as raw SQL on a Tortoise ORM connection.

    The connection is looked up on use, so a store that is not initialised
    fails inside the report call (and maps to a 500) rather than at injection.
    """

    def __init__(self, connection_name: str = DB_CONNECTION_NAME):
        self.connection_name = connection_name

    @property
    def connection(self) -> BaseDBAsyncClient:
        return connections.get(self.connection_name)

    @property
    def dialect(self) -> SqlDialect:
        return get_dialect(self.connection.capabilities.dialect)

    async def execute(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        logger.debug(f"Executing report query on '{self.connection_name}' with {len(params)} parameters")
        rows = await self.connection.execute_query_dict(sql, list(params))
        return [dict(row) for row in rows]


async def get_report_store() -> ReportStore:
    """FastAPI dependency providing the store bound to the configured connection."""
    return TortoiseReportStore()
