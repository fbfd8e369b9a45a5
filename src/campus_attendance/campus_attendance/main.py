from __future__ import annotations

import importlib
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .auth.controller import register as register_auth
from .config import get_settings_module
from .container import BACKEND_MYSQL, build_container
from .core.app_logger import get_logger, setup_logging
from .core.constants import (
    CLASS_SESSION_TTL_SECONDS,
    DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    LATE_THRESHOLD_SECONDS,
    TEACHER_SELF_TTL_SECONDS,
)
from .database.bootstrap import apply_schema, list_tables
from .redemption.controller import register as register_qr
from .reports.controller import register as register_reports

logger = get_logger(__name__)

_SETTING_KEYS = (
    "SECRET_KEY",
    "QR_SIGNING_KEY",
    "DB_BACKEND",
    "DB_CONFIG",
    "AUTO_INIT_DB",
    "DEBUG",
    "TESTING",
    "LOG_LEVEL",
    "ACCESS_TOKEN_TTL_SECONDS",
    "CLASS_SESSION_TTL_SECONDS",
    "TEACHER_SELF_TTL_SECONDS",
    "LATE_THRESHOLD_SECONDS",
)


def load_settings(settings_module: Optional[str] = None, overrides: Optional[dict] = None) -> dict:
    module = importlib.import_module(settings_module or get_settings_module())
    settings = {key: getattr(module, key) for key in _SETTING_KEYS if hasattr(module, key)}
    settings.update(overrides or {})
    settings.setdefault("QR_SIGNING_KEY", settings.get("SECRET_KEY"))
    return settings


def create_app(settings_module: Optional[str] = None, *, overrides: Optional[dict] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings(settings_module, overrides)

    setup_logging(settings.get("LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))

    backend = settings.get("DB_BACKEND", BACKEND_MYSQL)
    db_config = settings.get("DB_CONFIG")
    if backend == BACKEND_MYSQL:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module or get_settings_module(),
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if settings.get("AUTO_INIT_DB"):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    else:
        logger.info("using %s storage backend", backend)

    container = build_container(
        db_config=db_config,
        backend=backend,
        signing_key=settings["QR_SIGNING_KEY"],
        access_secret_key=settings["SECRET_KEY"],
        access_token_ttl_seconds=settings.get("ACCESS_TOKEN_TTL_SECONDS", DEFAULT_ACCESS_TOKEN_TTL_SECONDS),
        class_ttl_seconds=settings.get("CLASS_SESSION_TTL_SECONDS", CLASS_SESSION_TTL_SECONDS),
        teacher_self_ttl_seconds=settings.get("TEACHER_SELF_TTL_SECONDS", TEACHER_SELF_TTL_SECONDS),
        late_threshold_seconds=settings.get("LATE_THRESHOLD_SECONDS", LATE_THRESHOLD_SECONDS),
    )
    app.extensions["campus_attendance"] = container

    register_auth(app, container)
    register_qr(app, container)
    register_reports(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "OK", "backend": backend}), 200

    return app


def run() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=app.config["DEBUG"])


if __name__ == "__main__":
    run()
