"""JSON error bodies shared by every blueprint.

    return api_error(E.NOT_FOUND, "Project 12 not found")
    return api_error(E.UNPROCESSABLE, "Proposal rejected", details=errors)

Body shape: ``{"error": <message>, "code": <ERR_*>, "details"?: {...}}``.
"""

from __future__ import annotations

from flask import jsonify


class E:
    """Error codes returned in the ``code`` field."""

    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"  # missing body field
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"    # wrong type / value
    UNPROCESSABLE = "ERR_UNPROCESSABLE"              # project or proposal rejected
    NOT_FOUND = "ERR_NOT_FOUND"
    FORBIDDEN = "ERR_FORBIDDEN"                      # role not allowed
    NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    TOO_LARGE = "ERR_PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "ERR_RATE_LIMITED"
    INTERNAL = "ERR_INTERNAL"


HTTP_STATUS = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.FORBIDDEN: 403,
    E.NOT_FOUND: 404,
    E.NOT_ALLOWED: 405,
    E.TOO_LARGE: 413,
    E.UNPROCESSABLE: 422,
    E.RATE_LIMITED: 429,
    E.INTERNAL: 500,
}


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None):
    """Build ``(response, status)`` for a Flask view or error handler.

    The status comes from ``HTTP_STATUS`` unless overridden; unknown codes
    answer 400.
    """
    body = {"error": message, "code": code}
    if details:
        body["details"] = details
    return jsonify(body), status or HTTP_STATUS.get(code, 400)
