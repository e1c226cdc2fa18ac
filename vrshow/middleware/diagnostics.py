"""Startup diagnostics: one summary line about the database and quoting defaults."""

import logging

from flask import Flask
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from vrshow.models import db

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("projects", "provider_bids", "quote_lines", "project_snapshots")


def _database_kind(uri: str) -> str:
    if uri.startswith("postgresql"):
        return "postgresql"
    if uri.startswith("sqlite"):
        return "sqlite"
    return uri.split(":", 1)[0] or "unknown"


def run_startup_diagnostics(app: Flask):
    """Log database reachability, missing tables and quoting defaults (skipped in tests)."""
    if app.config.get("TESTING"):
        return

    with app.app_context():
        kind = _database_kind(str(app.config.get("SQLALCHEMY_DATABASE_URI") or ""))
        try:
            tables = set(sa_inspect(db.engine).get_table_names())
        except SQLAlchemyError as exc:
            logger.error("Startup: %s database unreachable: %s", kind, exc)
            return

        missing = [name for name in REQUIRED_TABLES if name not in tables]
        if missing:
            logger.warning("Startup: tables missing from %s database: %s", kind, ", ".join(missing))

        logger.info(
            "VR SHOW quoting service ready | database=%s tables=%d default_role=%s "
            "margin=%s%% markup=%s",
            kind, len(tables), app.config.get("DEFAULT_ROLE"),
            app.config.get("DEFAULT_GLOBAL_MARGIN"), app.config.get("PROVIDER_SALE_MARKUP"),
        )
