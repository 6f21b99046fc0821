import logging
import sys

from .config import LOG_LEVEL, LOG_NAMESPACES


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)


def configure_logging(level: str = LOG_LEVEL, allowed_namespaces=None) -> logging.Logger:
    """
    Attach the stdout handler to the 'sales_reports' application logger.

    Safe to call more than once: the module-level handler is added only if it
    is not already attached, and its namespace filter is replaced each call.
    Modules use logging.getLogger(__name__), so their loggers
    ("sales_reports.features.reports.service", ...) inherit from this one.
    """
    app_logger = logging.getLogger("sales_reports")
    app_logger.setLevel(level)

    for existing in list(console_handler.filters):
        console_handler.removeFilter(existing)
    namespaces = LOG_NAMESPACES if allowed_namespaces is None else allowed_namespaces
    if namespaces:
        # e.g. LOG_NAMESPACES=sales_reports.features.reports to only see the report engine
        console_handler.addFilter(NamespaceFilter(namespaces))

    if console_handler not in app_logger.handlers:
        app_logger.addHandler(console_handler)
    return app_logger
