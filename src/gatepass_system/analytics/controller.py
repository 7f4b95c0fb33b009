from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import server_error
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/analytics", methods=["GET"], endpoint="analytics")
    def analytics():
        try:
            report = container.analytics_service.aggregate(request.args.get("rangeDays", "7"))
        except Exception:
            return server_error("Failed to load analytics.")
        return jsonify(report.to_dict())
