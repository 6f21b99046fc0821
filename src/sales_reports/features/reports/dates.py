"""Resolution of calendar inputs into half-open [start, end) UTC ranges.

Only month boundaries are ever produced, so the day of month never matters:
the end of a range is always the first instant of the month after the last
month requested."""
import datetime

from .exceptions import ReportValidationError
from .schemas import CalendarMonth, DateRange, SalesReportRequest, TrendsReportRequest

INVALID_DATE_RANGE = "Invalid date range. Start date must be before or equal to end date."


def month_start(period: CalendarMonth) -> datetime.datetime:
    """First instant (UTC) of the given calendar month."""
    return datetime.datetime(period.year, period.month, 1, tzinfo=datetime.timezone.utc)


def next_month_start(period: CalendarMonth) -> datetime.datetime:
    """First instant (UTC) of the month following the given one; December rolls over."""
    if period.month == 12:
        return datetime.datetime(period.year + 1, 1, 1, tzinfo=datetime.timezone.utc)
    return datetime.datetime(period.year, period.month + 1, 1, tzinfo=datetime.timezone.utc)


def resolve_month_range(start: CalendarMonth, end: CalendarMonth) -> DateRange:
    """
    Range covering every month from `start` to `end`, both inclusive.

    Raises:
        ReportValidationError: If `start` is after `end`.
    """
    if start.as_tuple() > end.as_tuple():
        raise ReportValidationError(INVALID_DATE_RANGE)
    return DateRange(start=month_start(start), end=next_month_start(end))


def resolve_sales_range(request: SalesReportRequest) -> DateRange:
    return resolve_month_range(request.period, request.period)


def resolve_trends_range(request: TrendsReportRequest) -> DateRange:
    return resolve_month_range(request.start, request.end)
