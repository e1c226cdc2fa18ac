"""
Shared pytest fixtures for the VR SHOW quoting service test suite.

Provides:
    - app: the "testing" app, built once
    - _setup_db: tables for the whole run
    - session: app context per test, tables rebuilt afterwards (autouse)
    - client: test client (admin unless headers say otherwise)
    - provider_headers: session headers of a provider
    - project: Pre-created Project (via the API)
"""

import pytest

from vrshow import create_app
from vrshow.models import db as _db

PROVIDER_EMAIL = "studio@polygones.fr"

DEMO_ROLES = [
    "Chef de projet / Direction de production",
    "Modeleur 3D",
    "Comédien",
    "QA / Test VR",
]


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """In-memory SQLite, rate limiting off, DEFAULT_ROLE=admin."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Tables for the run; dropped when the session ends."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Every test starts from empty tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def provider_headers():
    return {"X-VR-Role": "provider", "X-VR-Email": PROVIDER_EMAIL}


@pytest.fixture()
def project(client):
    """Create and return a test Project via the API."""
    res = client.post(
        "/api/v1/projects",
        json={
            "name": "Parcours VR Musée",
            "brief": "Parcours de 12 minutes",
            "project_type": "UnityVR",
            "required_roles": DEMO_ROLES,
            "start_date": "2025-03-03",
        },
    )
    assert res.status_code == 201
    return res.get_json()
