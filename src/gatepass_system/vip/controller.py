from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_password_from_request, error_response, json_body, server_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    service = container.vip_service

    @app.route("/api/vip/generate", methods=["POST"], endpoint="vip_generate")
    def vip_generate():
        body = json_body()
        try:
            code = service.generate(body.get("label"), admin_password=admin_password_from_request(body))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to generate VIP pass ID.")

        return jsonify({
            "success": True,
            "message": "VIP pass ID generated",
            "vipAccessId": code.vip_access_id,
            "vipPass": code.to_dict(),
        }), 201

    @app.route("/api/vip/issue", methods=["POST"], endpoint="vip_issue")
    def vip_issue():
        body = json_body()
        try:
            result = service.issue(body.get("vipAccessId"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to issue VIP gate pass.")

        return jsonify({
            "success": True,
            "message": "Gate pass issued",
            "passId": result.issued.pass_id,
            "vipAccessId": result.code.vip_access_id,
            "qrCodeDataUrl": result.issued.qr_code_data_url,
            "visitor": result.issued.visitor.to_dict(),
        }), 201

    @app.route("/api/vip/verify", methods=["POST"], endpoint="vip_verify")
    def vip_verify():
        body = json_body()
        try:
            visitor = service.verify(pass_id=body.get("passId"), vip_access_id=body.get("vipAccessId"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to verify VIP entry.")

        return jsonify({"success": True, "visitor": visitor.to_dict()})

    @app.route("/api/vip/checkout", methods=["POST"], endpoint="vip_checkout")
    def vip_checkout():
        body = json_body()
        try:
            visitor = service.checkout(pass_id=body.get("passId"), vip_access_id=body.get("vipAccessId"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to complete VIP checkout.")

        return jsonify({"success": True, "message": "VIP visitor checked out", "visitor": visitor.to_dict()})

    @app.route("/api/vip/logs", methods=["GET"], endpoint="vip_logs")
    def vip_logs():
        try:
            visitors = service.list_logs(request.args.get("limit"))
        except Exception:
            return server_error("Failed to load VIP logs.")

        return jsonify({"count": len(visitors), "visitors": [v.to_log_dict() for v in visitors]})
