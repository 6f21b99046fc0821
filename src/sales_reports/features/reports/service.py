"""
Reports Service Module

Runs a report request through the whole pipeline:
validate the raw parameters, resolve the date range, build the query plan,
execute it on the store and map the outcome. Each step can short-circuit with
a ReportError; nothing is cached or retried between requests.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .dates import resolve_sales_range, resolve_trends_range
from .exceptions import NoSalesDataFound, ReportExecutionError, ReportValidationError
from .queries import SqlDialect, build_sales_plan, build_trends_plan
from .schemas import QueryPlan
from .store import ReportStore
from .validation import SalesDateInput, validate_sales_params, validate_trends_params

logger = logging.getLogger(__name__)

ReportRows = List[Dict[str, Any]]


def map_rows(rows: ReportRows) -> ReportRows:
    """
    Maps the executed rows to the report result.

    Rows are passed through untouched and in store order.

    Raises:
        NoSalesDataFound: If the store returned no rows.
    """
    if not rows:
        logger.info("Report query returned no rows")
        raise NoSalesDataFound()
    return rows


def _store_dialect(store: ReportStore) -> SqlDialect:
    try:
        return store.dialect
    except Exception as e:
        logger.error(f"Could not determine the report store dialect: {e}", exc_info=True)
        raise ReportExecutionError()


async def execute_plan(store: ReportStore, plan: QueryPlan) -> ReportRows:
    """
    Executes a query plan, turning any store failure into a ReportExecutionError.

    The failure itself is logged here and never reaches the caller.
    """
    try:
        rows = await store.execute(plan.sql, plan.params)
    except Exception as e:
        logger.error(f"Error querying sales: {e}", exc_info=True)
        raise ReportExecutionError()
    return map_rows(list(rows))


async def generate_sales_report(
    params: Mapping[str, Optional[str]],
    store: ReportStore,
    date_input: SalesDateInput = SalesDateInput.DATE,
) -> ReportRows:
    """
    Generates the monthly sales report grouped by user or group.

    Args:
        params: Raw query parameters as sent by the client.
        store: Where the query is executed.
        date_input: Which calendar input shape the endpoint accepts.

    Returns:
        One row per entity and month: id, name, period, num_sales,
        total_revenue and avg_revenue, ordered by the requested column.

    Raises:
        ReportValidationError: Invalid parameters (400).
        NoSalesDataFound: No sales in the requested month (404).
        ReportExecutionError: The store failed (500).
    """
    try:
        request = validate_sales_params(params, date_input)
        date_range = resolve_sales_range(request)
    except ReportValidationError as e:
        logger.info(f"Rejected sales report request: {e.message}")
        raise

    plan = build_sales_plan(request, date_range, _store_dialect(store))
    rows = await execute_plan(store, plan)
    logger.info(
        f"Sales report for {request.period} by {request.group_by.value} returned {len(rows)} row(s)"
    )
    return rows


async def generate_trends_report(params: Mapping[str, Optional[str]], store: ReportStore) -> ReportRows:
    """
    Generates the month-by-month sales trend, optionally restricted to a user and/or group.

    Users without a group appear with null group fields. Rows are ordered by
    ascending period.
    """
    try:
        request = validate_trends_params(params)
        date_range = resolve_trends_range(request)
    except ReportValidationError as e:
        logger.info(f"Rejected sales trends request: {e.message}")
        raise

    plan = build_trends_plan(request, date_range, _store_dialect(store))
    rows = await execute_plan(store, plan)
    logger.info(f"Sales trends {request.start}..{request.end} returned {len(rows)} row(s)")
    return rows
