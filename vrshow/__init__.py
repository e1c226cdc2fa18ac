"""
VR SHOW Quoting Service: Flask application factory.

    from vrshow import create_app
    app = create_app()           # APP_ENV, else "development"
    app = create_app("testing")

Provider bids, the final quote, the production planning and the project
archive are served under /api/v1. The caller's role comes from the
X-VR-Role header (see middleware.session_context).
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event
from sqlalchemy.exc import SQLAlchemyError

from vrshow.config import config
from vrshow.middleware.diagnostics import run_startup_diagnostics
from vrshow.middleware.logging_config import configure_logging
from vrshow.middleware.rate_limiter import init_rate_limits
from vrshow.middleware.session_context import init_session_context
from vrshow.middleware.timing import init_request_timing
from vrshow.models import db
from vrshow.utils.errors import E, api_error

logger = logging.getLogger(__name__)


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Bids, quote lines and snapshots rely on ON DELETE CASCADE in SQLite too."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # per-blueprint limits only
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def _load_config(app: Flask, config_name: str) -> None:
    config_cls = config[config_name]
    # ProductionConfig checks its environment on instantiation
    app.config.from_object(config_cls() if config_name == "production" else config_cls)


def _init_cors(app: Flask) -> None:
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins and origins != "*":
        CORS(app, origins=[o.strip() for o in origins.split(",") if o.strip()])
    else:
        CORS(app)


def _init_database(app: Flask) -> None:
    from vrshow.models import archive as _archive_models  # noqa: F401
    from vrshow.models import project as _project_models  # noqa: F401

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///") and ":memory:" not in uri:
        os.makedirs(app.instance_path, exist_ok=True)

    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError as exc:
            app.logger.warning("db.create_all() failed: %s", exc)


def _register_blueprints(app: Flask) -> None:
    from vrshow.blueprints.archive_bp import archive_bp
    from vrshow.blueprints.health_bp import health_bp
    from vrshow.blueprints.planning_bp import planning_bp
    from vrshow.blueprints.project_bp import project_bp
    from vrshow.blueprints.quote_bp import quote_bp

    for bp in (project_bp, quote_bp, planning_bp, archive_bp, health_bp):
        app.register_blueprint(bp)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, f"No route for {request.path}")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.NOT_ALLOWED, f"{request.method} not allowed on {request.path}")

    @app.errorhandler(413)
    def too_large(e):
        return api_error(E.TOO_LARGE, "Request body too large")

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Too many requests", details={"limit": str(e.description)})

    @app.errorhandler(500)
    def server_error(e):
        logger.error("Unhandled error on %s: %s", request.path, e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: "development", "testing" or "production".
                     Defaults to the APP_ENV env var, then "development".
    """
    config_name = config_name or os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    _load_config(app, config_name)
    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    _init_cors(app)

    init_request_timing(app)
    init_session_context(app)

    _init_database(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    run_startup_diagnostics(app)
    # Limits attach to registered blueprints, so this runs last
    init_rate_limits(app, limiter)

    logger.debug("App created config=%s", config_name)
    return app
