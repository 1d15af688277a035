from __future__ import annotations

import importlib

from dotenv import load_dotenv

from class_attendance.config import get_settings_module
from class_attendance.container import build_store
from class_attendance.database.seed import seed_demo_data


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    store = build_store(backend=settings.STORE_BACKEND, db_config=dict(settings.DB_CONFIG))

    created = seed_demo_data(store)
    print(f"OK: seeded {created} demo document(s) into {settings.STORE_BACKEND} store")


if __name__ == "__main__":
    main()
