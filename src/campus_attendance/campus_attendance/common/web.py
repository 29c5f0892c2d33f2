"""Small helpers shared by the JSON controllers."""

from __future__ import annotations

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..users.model import Actor


def current_actor() -> Actor:
    """Identity written into the Flask session by the external login."""
    user_id = session.get("user_id")
    role = session.get("role")
    if user_id is None or not role:
        raise AuthenticationError("Please sign in to continue")
    try:
        return Actor(user_id=int(user_id), role=Role(role))
    except ValueError:
        raise AuthenticationError("Unknown identity in session")


def require_role(actor: Actor, *roles: Role) -> Actor:
    if actor.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise AuthorizationError(f"This action is only available to: {allowed}")
    return actor


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


def require_field(data: dict, name: str):
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    return value


def require_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def ok(data, status: int = 200):
    return jsonify({"success": True, "data": data}), status
