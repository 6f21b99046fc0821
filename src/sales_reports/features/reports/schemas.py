"""Sales Reports API Schemas

This module defines the Pydantic models used by the sales report engine:

1. Report option enums (group_by, sort_by, sort_order)
2. Validated report requests for the monthly sales and trends endpoints
3. The half-open date range and the parameterized query plan
4. Response row and error shapes (used for the OpenAPI documentation only;
   rows are returned exactly as the store produced them)"""
import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# The exclusive end of a December range is January of the next year, which must stay representable
MIN_YEAR = datetime.MINYEAR
MAX_YEAR = datetime.MAXYEAR - 1


class GroupBy(str, Enum):
    USER = "user"
    GROUP = "group"


class SortBy(str, Enum):
    TOTAL_REVENUE = "total_revenue"
    AVG_REVENUE = "avg_revenue"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CalendarMonth(BaseModel):
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month, 1..12")

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[int, int]:
        return self.year, self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class SalesReportRequest(BaseModel):
    period: CalendarMonth
    group_by: GroupBy = GroupBy.USER
    sort_by: SortBy = SortBy.TOTAL_REVENUE
    sort_order: SortOrder = SortOrder.DESC

    model_config = ConfigDict(frozen=True)


class TrendsReportRequest(BaseModel):
    start: CalendarMonth
    end: CalendarMonth
    user_id: Optional[int] = None
    group_id: Optional[int] = None

    model_config = ConfigDict(frozen=True)


class DateRange(BaseModel):
    """Half-open interval [start, end) of UTC instants."""
    start: datetime.datetime
    end: datetime.datetime

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _start_before_end(self) -> "DateRange":
        if not self.start < self.end:
            raise ValueError("DateRange start must be strictly before end")
        return self


class QueryPlan(BaseModel):
    sql: str
    params: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# Response shapes (documentation only)
class ErrorResponse(BaseModel):
    error: str


class _RevenueFields(BaseModel):
    period: Any = Field(..., description="First instant of the month the row aggregates")
    num_sales: int
    total_revenue: float
    avg_revenue: float


class SalesByUserRow(_RevenueFields):
    user_id: int
    user_name: str


class SalesByGroupRow(_RevenueFields):
    group_id: int
    group_name: str


class SalesTrendRow(_RevenueFields):
    user_id: int
    user_name: str
    group_id: Optional[int] = None
    group_name: Optional[str] = None
