from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .service import AuthService


def make_role_required(auth_service: AuthService):
    """Build a ``role_required(*roles)`` decorator bound to one AuthService.

    On success the caller is available as ``flask.g.principal``.
    """

    def role_required(*roles: Role):
        allowed = {Role(r) for r in roles}

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                header = request.headers.get("Authorization", "")
                scheme, _, token = header.partition(" ")
                if scheme.lower() != "bearer" or not token.strip():
                    return jsonify({"success": False, "message": "Access denied. No token provided."}), 401

                try:
                    principal = auth_service.verify(token.strip())
                except AuthenticationError as e:
                    return jsonify({"success": False, "message": str(e)}), 401

                if allowed and principal.role not in allowed:
                    names = " or ".join(sorted(r.value.capitalize() for r in allowed))
                    return jsonify({"success": False, "message": f"Access denied. {names} privileges required."}), 403

                g.principal = principal
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return role_required
