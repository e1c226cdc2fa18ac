"""
Final quote blueprint: the admin's "Devis" tab.

Endpoints:
    GET    /api/v1/projects/<id>/quote                          — priced lines + stats
    DELETE /api/v1/projects/<id>/quote                          — clear the quote
    POST   /api/v1/projects/<id>/quote/select                   — {bid_id}: take a bid
    PUT    /api/v1/projects/<id>/quote/margin                   — {margin}: reprice all lines
    POST   /api/v1/projects/<id>/quote/lines/<line_id>/move     — {direction: up|down}
    PATCH  /api/v1/projects/<id>/quote/lines/<line_id>          — {days, unit_cost, sale_price}
    DELETE /api/v1/projects/<id>/quote/lines/<line_id>          — drop one line
    GET    /api/v1/projects/<id>/quote/export                   — .xlsx download

Unknown line ids are not errors: move / patch / delete answer 200 with
``moved`` / ``updated`` / ``removed`` set to false and the quote unchanged.
``line_id`` may also be a planning task id (``task-<line id>``).
"""

import logging

from flask import Blueprint, Response, jsonify, request

from vrshow.core.exceptions import NotFoundError, ValidationError
from vrshow.middleware.session_context import ROLE_ADMIN, require_role
from vrshow.services import project_service, quote_service
from vrshow.services.quote_composer import MOVE_DIRECTIONS
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

quote_bp = Blueprint("quote", __name__, url_prefix="/api/v1")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@quote_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@quote_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.UNPROCESSABLE, str(error), details=error.details)


@quote_bp.before_request
@require_role(ROLE_ADMIN)
def _admin_only():
    return None


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ── Quote ─────────────────────────────────────────────────────────────────────


@quote_bp.route("/projects/<int:project_id>/quote", methods=["GET"])
def get_quote(project_id: int):
    project = project_service.get_project(project_id)
    return jsonify(quote_service.quote_view(project)), 200


@quote_bp.route("/projects/<int:project_id>/quote", methods=["DELETE"])
def reset_quote(project_id: int):
    project = project_service.get_project(project_id)
    quote_service.reset_quote(project)
    return jsonify(quote_service.quote_view(project)), 200


@quote_bp.route("/projects/<int:project_id>/quote/select", methods=["POST"])
def select_bid(project_id: int):
    """Body (JSON): bid_id (int, required)."""
    data = _json_body()
    bid_id = data.get("bid_id")
    if bid_id is None:
        return api_error(E.VALIDATION_REQUIRED, "bid_id is required")
    if isinstance(bid_id, bool) or not isinstance(bid_id, int):
        return api_error(E.VALIDATION_INVALID, "bid_id must be an integer")

    project = project_service.get_project(project_id)
    line = quote_service.select_bid(project, bid_id)
    return jsonify({"line": line.to_dict(), "quote": quote_service.quote_view(project)}), 200


@quote_bp.route("/projects/<int:project_id>/quote/margin", methods=["PUT"])
def apply_margin(project_id: int):
    """Body (JSON): margin (number, percent of the sale price)."""
    data = _json_body()
    if "margin" not in data:
        return api_error(E.VALIDATION_REQUIRED, "margin is required")

    project = project_service.get_project(project_id)
    applied = quote_service.apply_margin(project, data["margin"])
    return jsonify({"applied_margin": applied, "quote": quote_service.quote_view(project)}), 200


# ── Lines ─────────────────────────────────────────────────────────────────────


@quote_bp.route("/projects/<int:project_id>/quote/lines/<string:line_id>/move", methods=["POST"])
def move_line(project_id: int, line_id: str):
    """Body (JSON): direction ("up" | "down")."""
    direction = _json_body().get("direction")
    if direction not in MOVE_DIRECTIONS:
        return api_error(
            E.VALIDATION_INVALID,
            "direction must be 'up' or 'down'",
            details={"direction": sorted(MOVE_DIRECTIONS)},
        )

    project = project_service.get_project(project_id)
    moved = quote_service.move_line(project, line_id, direction)
    return jsonify({"moved": moved, "quote": quote_service.quote_view(project)}), 200


@quote_bp.route("/projects/<int:project_id>/quote/lines/<string:line_id>", methods=["PATCH"])
def update_line(project_id: int, line_id: str):
    """Body (JSON): any of days, unit_cost, sale_price. Non-numeric values become 0."""
    project = project_service.get_project(project_id)
    line = quote_service.update_line(project, line_id, _json_body())
    return jsonify({"updated": line is not None, "quote": quote_service.quote_view(project)}), 200


@quote_bp.route("/projects/<int:project_id>/quote/lines/<string:line_id>", methods=["DELETE"])
def remove_line(project_id: int, line_id: str):
    project = project_service.get_project(project_id)
    removed = quote_service.remove_line(project, line_id)
    return jsonify({"removed": removed, "quote": quote_service.quote_view(project)}), 200


# ── Export ────────────────────────────────────────────────────────────────────


@quote_bp.route("/projects/<int:project_id>/quote/export", methods=["GET"])
def export_quote(project_id: int):
    project = project_service.get_project(project_id)
    content = quote_service.export_quote(project)
    filename = quote_service.quote_export_filename(project)
    return Response(
        content,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
