"""Validation of raw report query parameters.

Checks run in a fixed order and the first failure wins:
presence of the required calendar inputs, then their format (and the format
of optional integer filters), then membership of the option enums. Callers
depend on which message comes back, so keep the order stable."""
import logging
import re
from enum import Enum
from typing import Mapping, Optional, Type, TypeVar

from .exceptions import ReportValidationError
from .schemas import (
    MAX_YEAR, MIN_YEAR, CalendarMonth, GroupBy, SalesReportRequest, SortBy,
    SortOrder, TrendsReportRequest,
)

logger = logging.getLogger(__name__)

MISSING_DATE = "Please provide the date parameter in 'YYYY-MM' format."
MISSING_MONTH_YEAR = "Please provide both month and year parameters."
MISSING_DATE_RANGE = "Please provide both start_date and end_date parameters in 'YYYY-MM' format."
INVALID_DATE_FORMAT = "Invalid date format. Please use 'YYYY-MM' format with valid months (01 to 12)."
INVALID_MONTH = "Invalid month. Month must be a number between 1 and 12."
INVALID_YEAR = f"Invalid year. Year must be an integer between {MIN_YEAR} and {MAX_YEAR}."
INVALID_USER_ID = "Invalid user_id. Must be an integer."
INVALID_GROUP_ID = "Invalid group_id. Must be an integer."
INVALID_GROUP_BY = "Invalid group_by value. Valid options are 'user' or 'group'."
INVALID_SORT_BY = "Invalid sort_by value. Valid options are 'total_revenue' or 'avg_revenue'."
INVALID_SORT_ORDER = "Invalid sort_order value. Valid options are 'asc' or 'desc'."

_YEAR_MONTH_PATTERN = re.compile(r"([0-9]{4})-(0[1-9]|1[0-2])")
# Bounded so int() never sees an oversized digit string
_INT_PATTERN = re.compile(r"[+-]?[0-9]{1,18}")

# users.id and groups.id are 32-bit integer columns
MIN_ID = -(2 ** 31)
MAX_ID = 2 ** 31 - 1

E = TypeVar("E", bound=Enum)


class SalesDateInput(str, Enum):
    """Which calendar input shape GET /sales accepts."""
    DATE = "date"              # date=YYYY-MM
    MONTH_YEAR = "month_year"  # month=1..12&year=YYYY


def sales_date_input_from_config(value: str) -> SalesDateInput:
    try:
        return SalesDateInput(value)
    except ValueError:
        logger.warning(f"Unknown SALES_DATE_INPUT '{value}', falling back to '{SalesDateInput.DATE.value}'.")
        return SalesDateInput.DATE


def _present(value: Optional[str]) -> bool:
    return value is not None and value != ""


def _parse_int(value: str) -> Optional[int]:
    if not _INT_PATTERN.fullmatch(value):
        return None
    return int(value)


def parse_year_month(value: str) -> Optional[CalendarMonth]:
    """Parse a 'YYYY-MM' string, returning None if it is not a valid calendar month."""
    match = _YEAR_MONTH_PATTERN.fullmatch(value)
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None
    return CalendarMonth(year=year, month=month)


def _parse_enum(enum_cls: Type[E], value: Optional[str], default: E, message: str) -> E:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise ReportValidationError(message)


def _parse_optional_id(value: Optional[str], message: str) -> Optional[int]:
    # An empty filter is treated as "no filter"
    if not _present(value):
        return None
    parsed = _parse_int(value)
    if parsed is None or not MIN_ID <= parsed <= MAX_ID:
        raise ReportValidationError(message)
    return parsed


def validate_sales_params(
    params: Mapping[str, Optional[str]],
    date_input: SalesDateInput = SalesDateInput.DATE,
) -> SalesReportRequest:
    """
    Validates the query parameters of the monthly sales report.

    Args:
        params: Raw query parameters (values are the strings the client sent).
        date_input: Which calendar input shape is accepted.

    Returns:
        SalesReportRequest with defaults applied for absent options.

    Raises:
        ReportValidationError: On the first violated rule.
    """
    # 1. Presence
    if date_input is SalesDateInput.DATE:
        if not _present(params.get("date")):
            raise ReportValidationError(MISSING_DATE)
    else:
        if not (_present(params.get("month")) and _present(params.get("year"))):
            raise ReportValidationError(MISSING_MONTH_YEAR)

    # 2. Format
    if date_input is SalesDateInput.DATE:
        period = parse_year_month(params["date"])
        if period is None:
            raise ReportValidationError(INVALID_DATE_FORMAT)
    else:
        month = _parse_int(params["month"])
        if month is None or not 1 <= month <= 12:
            raise ReportValidationError(INVALID_MONTH)
        year = _parse_int(params["year"])
        if year is None or not MIN_YEAR <= year <= MAX_YEAR:
            raise ReportValidationError(INVALID_YEAR)
        period = CalendarMonth(year=year, month=month)

    # 3. Enum membership
    group_by = _parse_enum(GroupBy, params.get("group_by"), GroupBy.USER, INVALID_GROUP_BY)
    sort_by = _parse_enum(SortBy, params.get("sort_by"), SortBy.TOTAL_REVENUE, INVALID_SORT_BY)
    sort_order = _parse_enum(SortOrder, params.get("sort_order"), SortOrder.DESC, INVALID_SORT_ORDER)

    return SalesReportRequest(period=period, group_by=group_by, sort_by=sort_by, sort_order=sort_order)


def validate_trends_params(params: Mapping[str, Optional[str]]) -> TrendsReportRequest:
    """
    Validates the query parameters of the sales trends report.

    The order of start_date and end_date is not checked here; that is the
    date range resolver's job.
    """
    start_raw, end_raw = params.get("start_date"), params.get("end_date")
    if not (_present(start_raw) and _present(end_raw)):
        raise ReportValidationError(MISSING_DATE_RANGE)

    start, end = parse_year_month(start_raw), parse_year_month(end_raw)
    if start is None or end is None:
        raise ReportValidationError(INVALID_DATE_FORMAT)

    user_id = _parse_optional_id(params.get("user_id"), INVALID_USER_ID)
    group_id = _parse_optional_id(params.get("group_id"), INVALID_GROUP_ID)

    return TrendsReportRequest(start=start, end=end, user_id=user_id, group_id=group_id)
