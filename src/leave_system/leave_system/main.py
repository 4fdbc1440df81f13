from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .container import Container, build_container
from .core.exceptions import DomainError, InvalidTransitionError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_employees, list_tables
from .leaves.controller import register as register_leaves
from .ledger.controller import register as register_ledger

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        body = {"message": str(e), "error": e.kind}
        if isinstance(e, InvalidTransitionError) and e.current_status is not None:
            body["currentStatus"] = e.current_status.value
        logger.info("%s: %s", e.kind, e)
        return jsonify(body), e.http_status

    @app.errorhandler(404)
    def handle_not_found(_e):
        return jsonify({"message": "Not found", "error": "NotFound"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_e):
        return jsonify({"message": "Method not allowed", "error": "MethodNotAllowed"}), 405

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error("Unhandled error: %s", getattr(e, "original_exception", e), exc_info=True)
        return jsonify({"message": "Server error", "error": "ServerError"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_employees(db_config)

        container = build_container(db_config=db_config)

    register_error_handlers(app)
    register_leaves(app, container)
    register_ledger(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "service": "leave-system"})

    return app
