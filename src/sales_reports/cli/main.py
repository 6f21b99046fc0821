import asyncio
import json
import logging
from typing import Optional

import typer
from fastapi.encoders import jsonable_encoder
from tortoise import Tortoise

from sales_reports.core.config import SALES_DATE_INPUT, TORTOISE_ORM_CONFIG
from sales_reports.features.reports import service as report_service
from sales_reports.features.reports.exceptions import ReportError
from sales_reports.features.reports.store import TortoiseReportStore
from sales_reports.features.reports.validation import SalesDateInput, sales_date_input_from_config
from sales_reports.features.sales.models import Group, Sale, User, UserGroup

logger = logging.getLogger(__name__)

app = typer.Typer(name="sales-reports-cli", help="Run sales reports against the configured database.")


# Shared async context manager for database connection
class DBConnection:
    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM_CONFIG)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


def _echo_rows(rows) -> None:
    typer.echo(json.dumps(jsonable_encoder(rows), indent=2))


def _echo_error(exc: ReportError) -> None:
    typer.secho(f"Error ({exc.status_code}): {exc.message}", fg=typer.colors.RED, err=True)


@app.command("sales")
def sales_report_command(
    date: Optional[str] = typer.Option(None, help="Report month as YYYY-MM."),
    month: Optional[str] = typer.Option(None, help="Report month 1..12 (with --year)."),
    year: Optional[str] = typer.Option(None, help="Report year (with --month)."),
    group_by: Optional[str] = typer.Option(None, help="user (default) or group."),
    sort_by: Optional[str] = typer.Option(None, help="total_revenue (default) or avg_revenue."),
    sort_order: Optional[str] = typer.Option(None, help="desc (default) or asc."),
):
    """Prints the monthly sales report as JSON."""
    # The CLI accepts either calendar shape; --month/--year wins when given
    if month is not None or year is not None:
        date_input = SalesDateInput.MONTH_YEAR
    elif date is not None:
        date_input = SalesDateInput.DATE
    else:
        date_input = sales_date_input_from_config(SALES_DATE_INPUT)

    params = {
        "date": date, "month": month, "year": year,
        "group_by": group_by, "sort_by": sort_by, "sort_order": sort_order,
    }
    exit_code = asyncio.run(_run_sales_report(params, date_input))
    raise typer.Exit(code=exit_code)


async def _run_sales_report(params: dict, date_input: SalesDateInput) -> int:
    async with DBConnection():
        try:
            rows = await report_service.generate_sales_report(params, TortoiseReportStore(), date_input)
        except ReportError as e:
            _echo_error(e)
            return 1
    _echo_rows(rows)
    return 0


@app.command("trends")
def trends_report_command(
    start_date: str = typer.Option(..., help="First month, YYYY-MM."),
    end_date: str = typer.Option(..., help="Last month (inclusive), YYYY-MM."),
    user_id: Optional[str] = typer.Option(None, help="Only this user's sales."),
    group_id: Optional[str] = typer.Option(None, help="Only sales of this group's members."),
):
    """Prints the month-by-month sales trend as JSON."""
    params = {"start_date": start_date, "end_date": end_date, "user_id": user_id, "group_id": group_id}
    exit_code = asyncio.run(_run_trends_report(params))
    raise typer.Exit(code=exit_code)


async def _run_trends_report(params: dict) -> int:
    async with DBConnection():
        try:
            rows = await report_service.generate_trends_report(params, TortoiseReportStore())
        except ReportError as e:
            _echo_error(e)
            return 1
    _echo_rows(rows)
    return 0


@app.command("test-db-connection")
def test_db_connection_command_sync():
    """Tests the database connection and counts the rows of the report tables."""
    asyncio.run(test_db_connection_command())


async def test_db_connection_command():
    async with DBConnection():
        typer.echo("Successfully connected to the database.")
        try:
            for model in (User, Group, UserGroup, Sale):
                count = await model.all().count()
                typer.echo(f"{model._meta.db_table}: {count} row(s)")
        except Exception as e:
            typer.echo(f"Error querying report tables: {e}", err=True)


if __name__ == "__main__":
    app()
