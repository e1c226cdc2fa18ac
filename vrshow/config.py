"""
Configuration classes for the VR SHOW quoting service.

    app.config.from_object(config[os.getenv("APP_ENV", "development")])

Every value can be overridden from the environment. Production refuses to
start without DATABASE_URL and SECRET_KEY.
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'vrshow_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"


def _database_url(default=None):
    """DATABASE_URL with the legacy ``postgres://`` scheme rewritten for SQLAlchemy."""
    raw = os.getenv("DATABASE_URL", "")
    if not raw:
        return default
    return raw.replace("postgres://", "postgresql://", 1)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_hex(32))
    DEBUG = False
    TESTING = False

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Proposals and quote edits are small JSON bodies
    MAX_CONTENT_LENGTH = 1024 * 1024

    # Flask-Limiter storage; "memory://" keeps counters per process
    REDIS_URL = os.getenv("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "1") != "0"

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # ── Quoting ──────────────────────────────────────────────────────────
    # Margin (% of sale price) applied to new projects
    DEFAULT_GLOBAL_MARGIN = int(os.getenv("DEFAULT_GLOBAL_MARGIN", "40"))
    # Provider bid sale_price = unit_cost x markup, until a margin is applied
    PROVIDER_SALE_MARKUP = float(os.getenv("PROVIDER_SALE_MARKUP", "1.5"))
    # Date format of the planning CSV columns
    EXPORT_DATE_FORMAT = os.getenv("EXPORT_DATE_FORMAT", "%d/%m/%Y")

    # Session role when the X-VR-Role header is absent
    DEFAULT_ROLE = os.getenv("DEFAULT_ROLE", "admin")

    SLOW_REQUEST_MS = int(os.getenv("SLOW_REQUEST_MS", "1000"))


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _database_url(_SQLITE_DEV)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    DEFAULT_ROLE = "admin"
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = _database_url()
    # Must be set explicitly in production
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    # Unauthenticated callers only get the provider portal
    DEFAULT_ROLE = os.getenv("DEFAULT_ROLE", "provider")

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
