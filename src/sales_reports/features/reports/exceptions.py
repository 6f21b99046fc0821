"""Report errors and their HTTP status codes.

Every failure of the report engine is one of these. The handler registered in
main.py renders them as ``{"error": message}`` with the matching status code."""
from fastapi import status

INTERNAL_ERROR_MESSAGE = "Internal server error"
NO_SALES_DATA_MESSAGE = "No sales data found for the given parameters."


class ReportError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReportValidationError(ReportError):
    """The caller's parameters are missing, malformed or out of range."""
    status_code = status.HTTP_400_BAD_REQUEST


class NoSalesDataFound(ReportError):
    """Valid parameters, but the aggregation produced zero rows."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = NO_SALES_DATA_MESSAGE):
        super().__init__(message)


class ReportExecutionError(ReportError):
    """The store failed. The message returned to callers is always generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        super().__init__(message)
