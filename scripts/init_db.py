from __future__ import annotations

import importlib

import structlog
from dotenv import load_dotenv

from geo_attendance.database.bootstrap import apply_schema, list_tables
from geo_attendance.database.connection import DatabaseConnection, DBConfig
from geo_attendance.logging import setup_logging
from geo_attendance.settings import get_settings_module

log = structlog.get_logger(__name__)


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    conn = DatabaseConnection(DBConfig.from_dict(dict(settings.DB_CONFIG)))
    apply_schema(conn)
    tables = list_tables(conn)
    log.info(
        "init_db.done",
        target=f"{conn.config.user}@{conn.config.host}:{conn.config.port}/{conn.config.database}",
        tables=len(tables),
    )


if __name__ == "__main__":
    main()
