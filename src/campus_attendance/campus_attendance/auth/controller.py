from __future__ import annotations

from flask import Flask, jsonify, request

from ..core.app_logger import get_logger
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..container import Container

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = request.get_json(silent=True) or {}
        login_value = data.get("login") or data.get("email") or data.get("rollNo") or ""
        password = data.get("password") or ""

        try:
            role = Role(str(data.get("role", "")).lower())
        except ValueError:
            return jsonify({"success": False, "message": "Role must be institution, teacher or student"}), 400

        try:
            token, principal = container.auth_service.login(
                role,
                login_value,
                password,
                institution_code=data.get("institution_code") or data.get("institutionCode"),
            )
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        except Exception:
            logger.exception("login failed")
            return jsonify({"success": False, "message": "Login failed"}), 500

        return jsonify(
            {
                "success": True,
                "message": "Login successful",
                "data": {
                    "access_token": token,
                    "token_type": "Bearer",
                    "role": principal.role.value,
                    "user": {
                        "id": principal.user_id,
                        "name": principal.name,
                        "institution_code": principal.institution_code,
                    },
                },
            }
        ), 200
