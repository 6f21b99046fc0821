"""Sales report API endpoints

GET /sales          revenue totals and averages for one month, grouped by user or group
GET /sales/trends   month-by-month revenue over a range, optionally for one user and/or group

Query parameters are declared here for the OpenAPI docs only; their raw string
values are handed to the report service, which owns validation so that the
400 messages and their precedence stay under its control."""
import logging
from typing import Annotated, List, Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ...core.config import SALES_DATE_INPUT
from .schemas import ErrorResponse, SalesByGroupRow, SalesByUserRow, SalesTrendRow
from .store import ReportStore, get_report_store
from .validation import SalesDateInput, sales_date_input_from_config
from . import service as report_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sales",
    tags=["Reports"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid parameters"},
        404: {"model": ErrorResponse, "description": "No sales data found"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def get_sales_date_input() -> SalesDateInput:
    return sales_date_input_from_config(SALES_DATE_INPUT)


@router.get(
    "",
    responses={200: {"model": Union[List[SalesByUserRow], List[SalesByGroupRow]]}},
)
async def get_sales_report(
    store: Annotated[ReportStore, Depends(get_report_store)],
    date_input: Annotated[SalesDateInput, Depends(get_sales_date_input)],
    date: Optional[str] = Query(None, description="Report month as YYYY-MM (date variant)"),
    month: Optional[str] = Query(None, description="Report month 1..12 (month/year variant)"),
    year: Optional[str] = Query(None, description="Report year (month/year variant)"),
    group_by: Optional[str] = Query(None, description="user (default) or group"),
    sort_by: Optional[str] = Query(None, description="total_revenue (default) or avg_revenue"),
    sort_order: Optional[str] = Query(None, description="desc (default) or asc"),
):
    params = {
        "date": date, "month": month, "year": year,
        "group_by": group_by, "sort_by": sort_by, "sort_order": sort_order,
    }
    rows = await report_service.generate_sales_report(params, store, date_input)
    return JSONResponse(content=jsonable_encoder(rows))


@router.get(
    "/trends",
    responses={200: {"model": List[SalesTrendRow]}},
)
async def get_sales_trends_report(
    store: Annotated[ReportStore, Depends(get_report_store)],
    start_date: Optional[str] = Query(None, description="First month of the range, YYYY-MM"),
    end_date: Optional[str] = Query(None, description="Last month of the range (inclusive), YYYY-MM"),
    user_id: Optional[str] = Query(None, description="Only this user's sales"),
    group_id: Optional[str] = Query(None, description="Only sales of this group's members"),
):
    params = {"start_date": start_date, "end_date": end_date, "user_id": user_id, "group_id": group_id}
    rows = await report_service.generate_trends_report(params, store)
    return JSONResponse(content=jsonable_encoder(rows))
