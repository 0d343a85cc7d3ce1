"""Session auth decorators and JSON helpers shared by the controllers."""

from __future__ import annotations

import logging
from functools import wraps

from flask import flash, jsonify, redirect, render_template, request, session, url_for

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError

logger = logging.getLogger(__name__)


def current_role() -> Role:
    return Role(session.get("role", Role.MEMBER.value))


def current_user_id() -> int:
    return int(session["user_id"])


def wants_json() -> bool:
    return request.is_json or request.path.startswith("/api/")


def render_forbidden():
    current_user = {"name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            if wants_json():
                return json_fail("Please sign in to continue", 401)
            flash("Please sign in to continue", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            if wants_json():
                return json_fail("Please sign in to continue", 401)
            return redirect(url_for("login"))

        if not current_role().is_admin:
            if wants_json():
                return json_fail("Admin access required", 403)
            return render_forbidden()

        return view(*args, **kwargs)

    return wrapper


def json_ok(payload=None, status: int = 200, **extra):
    body = {"success": True}
    if payload is not None:
        body["data"] = payload
    body.update(extra)
    return jsonify(body), status


def json_fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def json_domain_error(exc: DomainError):
    """Map a domain exception to the JSON error shape used by every API route."""
    if isinstance(exc, AuthorizationError):
        return json_fail(str(exc), 403)
    if isinstance(exc, NotFoundError):
        return json_fail(str(exc), 404)
    if isinstance(exc, ConflictError):
        return json_fail(str(exc), 409)
    return json_fail(str(exc), 400)


def json_api(view):
    """Wrap a JSON view: domain errors become 4xx, anything else a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return json_domain_error(e)
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return json_fail("Something went wrong, please try again", 500)

    return wrapper


def request_data() -> dict:
    """JSON body if present, form fields otherwise."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def flag(value) -> bool:
    """Checkbox or JSON boolean."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on", "yes")
    return bool(value)
