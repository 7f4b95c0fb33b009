from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response, json_body, server_error
from ..container import Container
from ..core.constants import NAME_SUGGESTION_LIMIT
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    matcher = container.visitor_matcher

    @app.route("/api/nameSuggestions", methods=["GET"], endpoint="name_suggestions")
    def name_suggestions():
        try:
            suggestions = matcher.find_suggestions(request.args.get("q"), NAME_SUGGESTION_LIMIT)
        except Exception:
            return server_error("Failed to load name suggestions.")
        return jsonify({"suggestions": suggestions})

    @app.route("/api/checkVisitor", methods=["POST"], endpoint="check_visitor")
    def check_visitor():
        body = json_body()
        try:
            result = matcher.check_visitor(body.get("name"), body.get("phone"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to check visitor.")
        return jsonify(result.to_dict())
