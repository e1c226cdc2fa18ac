"""
Project archive blueprint.

Endpoints:
    GET    /api/v1/archive                        — snapshots, newest first (paginated)
    POST   /api/v1/projects/<id>/snapshots        — save the project into the archive
    DELETE /api/v1/archive/<snapshot_id>          — delete a snapshot
    POST   /api/v1/archive/<snapshot_id>/restore  — {project_id}: load into a project
"""

import logging

from flask import Blueprint, jsonify, request

from vrshow.blueprints import paginate_query
from vrshow.core.exceptions import NotFoundError
from vrshow.middleware.session_context import ROLE_ADMIN, require_role
from vrshow.services import archive_service, project_service, quote_service
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

archive_bp = Blueprint("archive", __name__, url_prefix="/api/v1")


@archive_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@archive_bp.before_request
@require_role(ROLE_ADMIN)
def _admin_only():
    return None


@archive_bp.route("/archive", methods=["GET"])
def list_archive():
    """Query params: limit, offset, include_data (1 | 0, default 0)."""
    include_data = request.args.get("include_data", "0") == "1"
    items, total = paginate_query(archive_service.archive_query())
    return jsonify({
        "items": [s.to_dict(include_data=include_data) for s in items],
        "total": total,
    }), 200


@archive_bp.route("/projects/<int:project_id>/snapshots", methods=["POST"])
def save_snapshot(project_id: int):
    project = project_service.get_project(project_id)
    snapshot = archive_service.save_snapshot(project)
    return jsonify(snapshot.to_dict()), 201


@archive_bp.route("/archive/<int:snapshot_id>", methods=["DELETE"])
def delete_snapshot(snapshot_id: int):
    archive_service.delete_snapshot(snapshot_id)
    return jsonify({"deleted": True, "id": snapshot_id}), 200


@archive_bp.route("/archive/<int:snapshot_id>/restore", methods=["POST"])
def restore_snapshot(snapshot_id: int):
    """Body (JSON): project_id (int, required)."""
    data = request.get_json(silent=True) or {}
    project_id = data.get("project_id") if isinstance(data, dict) else None
    if project_id is None:
        return api_error(E.VALIDATION_REQUIRED, "project_id is required")
    if isinstance(project_id, bool) or not isinstance(project_id, int):
        return api_error(E.VALIDATION_INVALID, "project_id must be an integer")

    project = project_service.get_project(project_id)
    archive_service.restore_snapshot(snapshot_id, project)
    return jsonify({
        "project": project.to_dict(),
        "quote": quote_service.quote_view(project),
    }), 200
