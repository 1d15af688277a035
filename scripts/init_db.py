from __future__ import annotations

import importlib

from dotenv import load_dotenv

from class_attendance.config import get_settings_module
from class_attendance.database.bootstrap import apply_schema, list_tables
from class_attendance.database.connection import DatabaseConnection, config_from_dict


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn_factory = DatabaseConnection(config_from_dict(dict(settings.DB_CONFIG)))

    apply_schema(conn_factory)
    tables = list_tables(conn_factory)
    cfg = conn_factory.config
    print(f"OK: documents table ready -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
