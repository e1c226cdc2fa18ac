"""
Request timing and access logging.

Every response gets X-Request-Duration-Ms and X-Request-ID. Each API call
is logged once with the project it touched and the caller's role, at
WARNING when slower than SLOW_REQUEST_MS, ERROR on 5xx, DEBUG otherwise.
Health checks are timed but not logged.
"""

import logging
import time
import uuid

from flask import Flask, current_app, g, request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
DURATION_HEADER = "X-Request-Duration-Ms"
HEALTH_PREFIX = "/api/v1/health"


def _extract_project_id() -> int | None:
    """Project id from the URL, or from the JSON body of an archive restore."""
    project_id = (request.view_args or {}).get("project_id")
    if project_id is None and request.is_json:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            project_id = payload.get("project_id")
    if isinstance(project_id, bool):
        return None
    return project_id if isinstance(project_id, int) else None


def _access_log_level(status: int, duration_ms: float) -> int:
    if duration_ms > current_app.config.get("SLOW_REQUEST_MS", 1000):
        return logging.WARNING
    if status >= 500:
        return logging.ERROR
    return logging.DEBUG


def init_request_timing(app: Flask):
    """Register before/after hooks for request timing."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]

    @app.after_request
    def _log_request(response):
        start = getattr(g, "request_start", None)
        if start is None:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers[DURATION_HEADER] = f"{duration_ms:.1f}"
        response.headers[REQUEST_ID_HEADER] = g.request_id

        if request.path.startswith(HEALTH_PREFIX):
            return response

        logger.log(
            _access_log_level(response.status_code, duration_ms),
            "%s %s %d (%.0fms)", request.method, request.path, response.status_code, duration_ms,
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "request_id": g.request_id,
                "project_id": _extract_project_id(),
                "vr_role": getattr(g, "vr_role", None),
            },
        )
        return response
