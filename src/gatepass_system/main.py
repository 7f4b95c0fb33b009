from __future__ import annotations

import importlib
import logging
import time
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS

from .analytics.controller import register as register_analytics
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .passes.controller import register as register_passes
from .vip.controller import register as register_vip
from .visitors.controller import register as register_visitors

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["APP_ENV"] = settings_module.rsplit(".", 1)[-1]

    log_level = getattr(settings, "LOG_LEVEL", "DEBUG" if app.config["DEBUG"] else "INFO")
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app.logger.setLevel(log_level)

    origins = list(getattr(settings, "CORS_ORIGINS", []) or [])
    CORS(app, origins=origins or "*")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(db_config=db_config, admin_password=getattr(settings, "ADMIN_PASSWORD"))
        if getattr(settings, "AUTO_INIT_DB", False):
            # A store that cannot be reached here aborts startup.
            apply_schema(container.conn)
            logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    app.extensions["gatepass_container"] = container
    started = time.monotonic()

    register_visitors(app, container)
    register_passes(app, container)
    register_vip(app, container)
    register_analytics(app, container)

    @app.after_request
    def add_security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({
            "status": "ok",
            "uptime": int(time.monotonic() - started),
            "env": app.config["APP_ENV"],
            "timestamp": datetime.now().astimezone().isoformat(),
        })

    @app.errorhandler(404)
    def not_found(_error):
        if request.path.startswith("/api"):
            return jsonify({"message": "API route not found."}), 404
        return jsonify({"message": "Not found."}), 404

    return app
