"""
Production planning blueprint.

Endpoints:
    GET /api/v1/projects/<id>/planning         — sequential timeline, phase legend + summary
    GET /api/v1/projects/<id>/planning/export  — CSV download (semicolon, UTF-8 BOM)

Reordering the timeline goes through the quote's move endpoint with the
task id: the quote order is the planning order.
"""

import logging

from flask import Blueprint, Response, jsonify

from vrshow.core.exceptions import NotFoundError
from vrshow.middleware.session_context import ROLE_ADMIN, require_role
from vrshow.services import project_service, quote_service
from vrshow.services.export_service import PLANNING_EXPORT_FILENAME
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

planning_bp = Blueprint("planning", __name__, url_prefix="/api/v1")


@planning_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@planning_bp.route("/projects/<int:project_id>/planning", methods=["GET"])
@require_role(ROLE_ADMIN)
def get_planning(project_id: int):
    project = project_service.get_project(project_id)
    return jsonify(quote_service.planning_view(project)), 200


@planning_bp.route("/projects/<int:project_id>/planning/export", methods=["GET"])
@require_role(ROLE_ADMIN)
def export_planning(project_id: int):
    project = project_service.get_project(project_id)
    content = quote_service.export_planning(project)
    logger.info("Planning exported project=%s bytes=%d", project.id, len(content.encode("utf-8")))
    return Response(
        content.encode("utf-8"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={PLANNING_EXPORT_FILENAME}"},
    )
