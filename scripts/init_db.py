from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.checkin_api.checkin_api.database.bootstrap import apply_schema, list_tables
from src.checkin_api.checkin_api.logging import setup_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    logger = setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "schema_applied",
        target=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        tables=len(tables),
    )


if __name__ == "__main__":
    main()
