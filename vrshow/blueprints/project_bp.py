"""
Project & provider proposal blueprint.

Endpoints:
    GET  /api/v1/projects                          — list projects (paginated)
    POST /api/v1/projects                          — create project
    GET  /api/v1/projects/<id>                     — project detail (providers see brief + roles)
    PUT  /api/v1/projects/<id>                     — edit start date / type / name
    POST /api/v1/projects/<id>/proposals           — provider submits role lines
    GET  /api/v1/projects/<id>/bids                — all received bids
    GET  /api/v1/projects/<id>/bids/compare        — bids grouped per role with price flags

Layer contract:
    - No ORM calls here; all DB work goes through project_service.
    - Services raise NotFoundError / ValidationError; the handlers below
      turn them into 404 / 422.
"""

import logging

from flask import Blueprint, jsonify, request

from vrshow.blueprints import paginate_query
from vrshow.core.exceptions import NotFoundError, ValidationError
from vrshow.middleware.session_context import ROLE_ADMIN, ROLE_PROVIDER, current_identity, require_role
from vrshow.services import project_service
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

project_bp = Blueprint("projects", __name__, url_prefix="/api/v1")


@project_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@project_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.UNPROCESSABLE, str(error), details=error.details)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# ── Projects ──────────────────────────────────────────────────────────────────


@project_bp.route("/projects", methods=["GET"])
@require_role(ROLE_ADMIN)
def list_projects():
    items, total = paginate_query(project_service.projects_query())
    return jsonify({"items": [p.to_dict() for p in items], "total": total}), 200


@project_bp.route("/projects", methods=["POST"])
@require_role(ROLE_ADMIN)
def create_project():
    """Create a project.

    Body (JSON, all optional):
        name, brief, project_type, required_roles, invited_team,
        global_margin, start_date
    """
    data = _json_body()
    if data is None:
        data = {}
    project = project_service.create_project(data)
    return jsonify(project.to_dict()), 201


@project_bp.route("/projects/<int:project_id>", methods=["GET"])
@require_role(ROLE_ADMIN, ROLE_PROVIDER)
def get_project(project_id: int):
    project = project_service.get_project(project_id)
    if current_identity()["role"] == ROLE_PROVIDER:
        return jsonify({
            "id": project.id,
            "name": project.name,
            "brief": project.brief,
            "roles": project_service.role_catalog(project),
        }), 200
    return jsonify(project.to_dict()), 200


@project_bp.route("/projects/<int:project_id>", methods=["PUT"])
@require_role(ROLE_ADMIN)
def update_project(project_id: int):
    """Body (JSON): start_date, project_type, name. Other keys are ignored."""
    data = _json_body()
    if data is None:
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    project = project_service.get_project(project_id)
    project_service.update_project_settings(project, data)
    return jsonify(project.to_dict()), 200


# ── Provider proposals & bids ─────────────────────────────────────────────────


@project_bp.route("/projects/<int:project_id>/proposals", methods=["POST"])
@require_role(ROLE_PROVIDER)
def submit_proposal(project_id: int):
    """Provider proposal.

    Body (JSON):
        first_name, last_name, company_name (str, required)
        lines: [{role, unit_cost, days}, ...] (at least one)
    """
    data = _json_body()
    if data is None:
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    project = project_service.get_project(project_id)
    bids = project_service.submit_proposal(project, current_identity(), data)
    return jsonify({"items": [b.to_dict() for b in bids], "total": len(bids)}), 201


@project_bp.route("/projects/<int:project_id>/bids", methods=["GET"])
@require_role(ROLE_ADMIN)
def list_bids(project_id: int):
    project = project_service.get_project(project_id)
    bids = project_service.list_bids(project)
    return jsonify({"items": [b.to_dict() for b in bids], "total": len(bids)}), 200


@project_bp.route("/projects/<int:project_id>/bids/compare", methods=["GET"])
@require_role(ROLE_ADMIN)
def compare_bids(project_id: int):
    project = project_service.get_project(project_id)
    return jsonify({"groups": project_service.compare_bids(project)}), 200
