from __future__ import annotations

import importlib

from dotenv import load_dotenv

from campus_attendance.config import get_settings_module
from campus_attendance.core.app_logger import get_logger, setup_logging
from campus_attendance.database.bootstrap import SCHEMA_PATH, apply_schema, list_tables

logger = get_logger("scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    logger.info(
        "applied %s -> %s@%s:%s/%s (tables=%d)",
        SCHEMA_PATH.name,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
