import os

# In a real deployment, these come from the environment (docker-compose, k8s secrets, ...)
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./sales_reports.sqlite3")
DB_CONNECTION_NAME: str = os.getenv("DB_CONNECTION_NAME", "default")

# Which calendar input GET /sales accepts: "date" (YYYY-MM) or "month_year" (month=..&year=..)
SALES_DATE_INPUT: str = os.getenv("SALES_DATE_INPUT", "date").strip().lower()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_NAMESPACES: list[str] = [
    ns.strip() for ns in os.getenv("LOG_NAMESPACES", "").split(",") if ns.strip()
]

TORTOISE_ORM_CONFIG = {
    "connections": {DB_CONNECTION_NAME: DATABASE_URL},
    "apps": {
        "models": {  # This is an app label, can be anything
            "models": ["sales_reports.features.sales.models"],
            "default_connection": DB_CONNECTION_NAME,
        }
    },
    "use_tz": False,
    "timezone": "UTC",
}
