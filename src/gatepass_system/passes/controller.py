from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_password_from_request, error_response, json_body, server_error
from ..common.validators import normalize_pass_id
from ..container import Container
from ..core.exceptions import DomainError
from .qr import parse_scan_payload


def register(app: Flask, container: Container) -> None:
    service = container.pass_service

    @app.route("/api/createPass", methods=["POST"], endpoint="create_pass")
    def create_pass():
        body = json_body()
        try:
            issued = service.issue(body, admin_password=admin_password_from_request(body))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to create gate pass.")

        return jsonify({
            "success": True,
            "message": "Gate pass issued",
            "passId": issued.pass_id,
            "qrCodeDataUrl": issued.qr_code_data_url,
            "visitor": issued.visitor.to_dict(),
        }), 201

    @app.route("/api/renewPass", methods=["POST"], endpoint="renew_pass")
    def renew_pass():
        body = json_body()
        try:
            overrides = {k: v for k, v in body.items() if k not in {"passId", "adminPassword"}}
            issued = service.renew(body.get("passId"), overrides, admin_password=admin_password_from_request(body))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to renew gate pass.")

        return jsonify({
            "success": True,
            "message": "Gate pass renewed",
            "passId": issued.pass_id,
            "renewedFrom": normalize_pass_id(body.get("passId")),
            "qrCodeDataUrl": issued.qr_code_data_url,
            "visitor": issued.visitor.to_dict(),
        }), 201

    @app.route("/api/validatePass", methods=["POST"], endpoint="validate_pass")
    def validate_pass():
        body = json_body()
        try:
            visitor = service.validate(body.get("passId"), body.get("phone"))
        except DomainError as e:
            return error_response(e, valid=False)
        except Exception:
            return server_error("Failed to validate pass.", valid=False)

        return jsonify({"success": True, "valid": True, "message": "User authenticated", "visitor": visitor.to_dict()})

    @app.route("/api/scanPass", methods=["POST"], endpoint="scan_pass")
    def scan_pass():
        body = json_body()
        try:
            pass_id, phone = parse_scan_payload(str(body.get("code") or ""))
            visitor = service.validate(pass_id, phone)
        except DomainError as e:
            return error_response(e, valid=False)
        except Exception:
            return server_error("Failed to validate scanned pass.", valid=False)

        return jsonify({"success": True, "valid": True, "message": "User authenticated", "visitor": visitor.to_dict()})

    @app.route("/api/markExit", methods=["POST"], endpoint="mark_exit")
    def mark_exit():
        body = json_body()
        try:
            result = service.mark_exit(body.get("passId"), body.get("phone"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to mark exit.")

        return jsonify({"success": True, "message": result.message, "visitor": result.visitor.to_dict()})

    def _delete(pass_id, admin_password):
        try:
            deleted = service.delete(pass_id, admin_password=admin_password)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to delete pass.")

        return jsonify({"success": True, "message": "Pass deleted successfully", "passId": deleted})

    @app.route("/api/pass/<pass_id>", methods=["DELETE"], endpoint="delete_pass_by_path")
    def delete_pass_by_path(pass_id: str):
        return _delete(pass_id, admin_password_from_request())

    @app.route("/api/deletePass", methods=["POST"], endpoint="delete_pass")
    def delete_pass():
        body = json_body()
        return _delete(body.get("passId"), admin_password_from_request(body))

    @app.route("/api/todayVisitors", methods=["GET"], endpoint="today_visitors")
    def today_visitors():
        try:
            visitors = service.list_today()
        except Exception:
            return server_error("Failed to fetch today's visitors.")

        return jsonify({"count": len(visitors), "visitors": [v.to_dict() for v in visitors]})

    @app.route("/api/activePasses", methods=["GET"], endpoint="active_passes")
    def active_passes():
        try:
            visitors = service.list_active(admin_password=admin_password_from_request())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to fetch active passes.")

        return jsonify({"success": True, "count": len(visitors), "visitors": [v.to_dict() for v in visitors]})

    @app.route("/api/passHistory", methods=["GET"], endpoint="pass_history")
    def pass_history():
        try:
            result = service.list_history(
                admin_password=admin_password_from_request(),
                range_days=request.args.get("rangeDays"),
                from_date=request.args.get("fromDate"),
                to_date=request.args.get("toDate"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to fetch pass history.")

        return jsonify({
            "success": True,
            "count": len(result.visitors),
            "visitors": [v.to_dict() for v in result.visitors],
            "filters": result.filters(),
        })
