"""
Session context middleware: who is calling, as which role.

The caller declares its role and e-mail in request headers; nothing is
authenticated here. The values land in ``flask.g``:

    X-VR-Role   → g.vr_role   ("admin" | "provider", DEFAULT_ROLE when absent)
    X-VR-Email  → g.vr_email  (normalised, or None)

Usage:
    @bp.route("/projects/<int:project_id>/proposals", methods=["POST"])
    @require_role("provider")
    def submit_proposal(project_id):
        ...
"""

import functools
import logging

from email_validator import EmailNotValidError, validate_email
from flask import Flask, current_app, g, request

from vrshow.middleware.timing import HEALTH_PREFIX
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_PROVIDER = "provider"
VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_PROVIDER})

ROLE_HEADER = "X-VR-Role"
EMAIL_HEADER = "X-VR-Email"


def normalize_email(raw: str | None) -> str | None:
    """Return the normalised address, or None when absent or malformed."""
    if not raw or not raw.strip():
        return None
    try:
        return validate_email(raw.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        logger.debug("Ignoring malformed e-mail header %r", raw)
        return None


def current_identity() -> dict:
    return {
        "role": getattr(g, "vr_role", None),
        "email": getattr(g, "vr_email", None),
    }


def init_session_context(app: Flask):
    """Register the before_request hook that resolves the caller's role."""

    @app.before_request
    def _resolve_session():
        if not request.path.startswith("/api/") or request.path.startswith(HEALTH_PREFIX):
            return None
        raw_role = (request.headers.get(ROLE_HEADER) or "").strip().lower()
        role = raw_role or current_app.config.get("DEFAULT_ROLE", ROLE_ADMIN)
        if role not in VALID_ROLES:
            return api_error(
                E.VALIDATION_INVALID,
                f"Unknown role '{raw_role}'",
                details={"valid_roles": sorted(VALID_ROLES)},
            )
        g.vr_role = role
        g.vr_email = normalize_email(request.headers.get(EMAIL_HEADER))
        return None


def require_role(*roles: str):
    """
    Decorator: only let callers whose session role is in ``roles`` through.

    Args:
        roles: Accepted role names, e.g. require_role("admin").
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            role = getattr(g, "vr_role", None)
            if role not in roles:
                logger.warning("Role %r denied on %s (requires %s)", role, f.__name__, roles)
                return api_error(
                    E.FORBIDDEN,
                    "Permission denied",
                    details={"required_any": list(roles)},
                )
            return f(*args, **kwargs)
        return decorated
    return decorator
