from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import build_container, build_store
from .core.exceptions import ConflictError, InvalidDocumentError, NotFoundError, StoreUnavailable, ValidationError
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DatabaseConnection, config_from_dict
from .database.store import DocumentStore
from .schedules.controller import register as register_schedules
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return jsonify({"error": str(e), "field": e.field}), 400

    @app.errorhandler(InvalidDocumentError)
    def handle_invalid_document(e: InvalidDocumentError):
        # Corrupt stored data is a server fault, not a bad request.
        logger.error("Invalid stored document: %s", e)
        return jsonify({"error": "Stored data is invalid"}), 500

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return jsonify({"error": str(e), "kind": e.kind, "id": e.record_id}), 404

    @app.errorhandler(ConflictError)
    def handle_conflict(e: ConflictError):
        return jsonify({"error": str(e), "conflicts": [s.to_dict() for s in e.conflicts]}), 409

    @app.errorhandler(StoreUnavailable)
    def handle_store_unavailable(e: StoreUnavailable):
        logger.error("Store unavailable: %s", e)
        return jsonify({"error": "Storage is temporarily unavailable"}), 503


def create_app(settings_module: Optional[str] = None, *, store: Optional[DocumentStore] = None) -> Flask:
    """Application factory.

    `store` overrides the backend chosen by STORE_BACKEND (tests pass a seeded
    in-memory store).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG", {})
    backend = getattr(settings, "STORE_BACKEND", "memory")
    if store is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            conn_factory = DatabaseConnection(config_from_dict(db_config))
            apply_schema(conn_factory)
            logger.debug("Schema ready (tables=%d)", len(list_tables(conn_factory)))
        store = build_store(backend=backend, db_config=db_config)

    logger.info(
        "Starting with settings=%s backend=%s",
        settings_module,
        type(store).__name__,
    )

    container = build_container(store=store)
    app.extensions["class_attendance"] = container

    register_schedules(app, container)
    register_sessions(app, container)
    register_attendance(app, container)
    _register_error_handlers(app)

    return app
