"""
Query templates for the sales reports.

Every report is one of a small, fixed set of query shapes. Which shape, which
ORDER BY column and which direction are chosen by looking validated enum
members up in the tables below; nothing the client sent is ever spliced into
SQL text. Data values (range bounds, ids) always travel as positional
parameters, and each placeholder is numbered from the length of the
parameter list at the moment its value is appended.
"""
import datetime
import logging
from typing import Any, Callable, Dict, List

from .schemas import (
    DateRange, GroupBy, QueryPlan, SalesReportRequest, SortBy, SortOrder,
    TrendsReportRequest,
)

logger = logging.getLogger(__name__)


class UnsupportedDialectError(LookupError):
    pass


class SqlDialect:
    """The few SQL details that differ between the stores we run against."""

    def __init__(
        self,
        name: str,
        placeholder: Callable[[int], str],
        month_trunc: Callable[[str], str],
        encode_instant: Callable[[datetime.datetime], Any],
    ):
        self.name = name
        self.placeholder = placeholder
        self.month_trunc = month_trunc
        self.encode_instant = encode_instant

    def __repr__(self):
        return f"SqlDialect({self.name!r})"


POSTGRES = SqlDialect(
    name="postgres",
    placeholder=lambda index: f"${index}",
    month_trunc=lambda column: f"DATE_TRUNC('month', {column})",
    encode_instant=lambda value: value,
)

# SQLite keeps datetimes as ISO-8601 text. Range bounds are always midnight on the
# first of a month, so the bare date compares correctly against any stored time suffix.
SQLITE = SqlDialect(
    name="sqlite",
    placeholder=lambda index: "?",
    month_trunc=lambda column: f"strftime('%Y-%m-01', {column})",
    encode_instant=lambda value: value.date().isoformat(),
)

DIALECTS: Dict[str, SqlDialect] = {d.name: d for d in (POSTGRES, SQLITE)}


def get_dialect(name: str) -> SqlDialect:
    try:
        return DIALECTS[name]
    except KeyError:
        raise UnsupportedDialectError(f"No report SQL dialect for '{name}'")


class QueryBuilder:
    """Accumulates positional parameters and hands back their placeholders."""

    def __init__(self, dialect: SqlDialect):
        self.dialect = dialect
        self.params: List[Any] = []

    def bind(self, value: Any) -> str:
        if isinstance(value, datetime.datetime):
            value = self.dialect.encode_instant(value)
        self.params.append(value)
        return self.dialect.placeholder(len(self.params))

    def plan(self, sql: str) -> QueryPlan:
        return QueryPlan(sql=sql, params=list(self.params))


SORT_COLUMNS: Dict[SortBy, str] = {
    SortBy.TOTAL_REVENUE: "total_revenue",
    SortBy.AVG_REVENUE: "avg_revenue",
}

SORT_DIRECTIONS: Dict[SortOrder, str] = {
    SortOrder.ASC: "ASC",
    SortOrder.DESC: "DESC",
}

# Sales shapes, one per group_by value. {period}, {start}, {end}, {sort_column} and
# {sort_direction} are only ever filled from the dialect and the tables above.
SALES_TEMPLATES: Dict[GroupBy, str] = {
    GroupBy.USER: """
SELECT
  u.id AS user_id,
  u.name AS user_name,
  {period} AS period,
  COUNT(s.id) AS num_sales,
  SUM(s.amount) AS total_revenue,
  AVG(s.amount) AS avg_revenue
FROM users u
JOIN sales s ON s.user_id = u.id
WHERE s.date >= {start} AND s.date < {end}
GROUP BY u.id, u.name, period
ORDER BY {sort_column} {sort_direction}, period ASC, user_id ASC
""",
    GroupBy.GROUP: """
SELECT
  g.id AS group_id,
  g.name AS group_name,
  {period} AS period,
  COUNT(s.id) AS num_sales,
  SUM(s.amount) AS total_revenue,
  AVG(s.amount) AS avg_revenue
FROM groups g
JOIN user_groups ug ON ug.group_id = g.id
JOIN users u ON ug.user_id = u.id
JOIN sales s ON s.user_id = u.id
WHERE s.date >= {start} AND s.date < {end}
GROUP BY g.id, g.name, period
ORDER BY {sort_column} {sort_direction}, period ASC, group_id ASC
""",
}

TRENDS_SELECT = """
SELECT
  u.id AS user_id,
  u.name AS user_name,
  g.id AS group_id,
  g.name AS group_name,
  {period} AS period,
  COUNT(s.id) AS num_sales,
  SUM(s.amount) AS total_revenue,
  AVG(s.amount) AS avg_revenue
FROM sales s
JOIN users u ON s.user_id = u.id
LEFT JOIN user_groups ug ON ug.user_id = u.id
LEFT JOIN groups g ON ug.group_id = g.id
WHERE s.date >= {start} AND s.date < {end}"""

TRENDS_GROUP_ORDER = """
GROUP BY u.id, u.name, g.id, g.name, period
ORDER BY period ASC, user_id ASC, group_id ASC
"""

# Optional trend filters, appended in this order when present
TRENDS_FILTERS = (
    ("user_id", "u.id"),
    ("group_id", "g.id"),
)


def build_sales_plan(request: SalesReportRequest, date_range: DateRange, dialect: SqlDialect = POSTGRES) -> QueryPlan:
    """
    Builds the monthly sales query for the requested grouping and ordering.

    Both shapes take exactly two parameters: [start, end).
    """
    builder = QueryBuilder(dialect)
    start = builder.bind(date_range.start)
    end = builder.bind(date_range.end)

    # Re-check membership before using a value as a lookup key
    template = SALES_TEMPLATES[GroupBy(request.group_by)]
    sql = template.format(
        period=dialect.month_trunc("s.date"),
        start=start,
        end=end,
        sort_column=SORT_COLUMNS[SortBy(request.sort_by)],
        sort_direction=SORT_DIRECTIONS[SortOrder(request.sort_order)],
    )
    return builder.plan(sql)


def build_trends_plan(request: TrendsReportRequest, date_range: DateRange, dialect: SqlDialect = POSTGRES) -> QueryPlan:
    """
    Builds the monthly trends query.

    Parameters are [start, end] followed by each present filter value in
    TRENDS_FILTERS order, so with both filters present they are
    [start, end, user_id, group_id].
    """
    builder = QueryBuilder(dialect)
    sql = TRENDS_SELECT.format(
        period=dialect.month_trunc("s.date"),
        start=builder.bind(date_range.start),
        end=builder.bind(date_range.end),
    )

    for field_name, column in TRENDS_FILTERS:
        value = getattr(request, field_name)
        if value is not None:
            sql += f"\n  AND {column} = {builder.bind(value)}"

    sql += TRENDS_GROUP_ORDER
    logger.debug(f"Trends plan built with {len(builder.params)} parameters")
    return builder.plan(sql)
