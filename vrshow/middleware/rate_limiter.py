"""
Per-blueprint rate limits (Flask-Limiter).

The Limiter is created in vrshow/__init__.py without default limits;
init_rate_limits attaches one limit per blueprint once they are registered.
Limits are per remote address.
"""

import logging

logger = logging.getLogger(__name__)

BLUEPRINT_LIMITS = {
    "projects": "60/minute",    # provider proposal submissions
    "quote": "120/minute",      # admin edits the quote interactively
    "archive": "60/minute",
    "planning": "200/minute",   # re-rendered after every quote edit
}
EXEMPT_BLUEPRINTS = ("health",)


def init_rate_limits(app, limiter):
    """Attach BLUEPRINT_LIMITS; no-op when testing or RATELIMIT_ENABLED is off."""
    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        logger.info("Rate limiting disabled")
        return

    applied = []
    for name, limit in BLUEPRINT_LIMITS.items():
        bp = app.blueprints.get(name)
        if bp is None:
            logger.warning("Rate limit for unknown blueprint %r skipped", name)
            continue
        limiter.limit(limit)(bp)
        applied.append(f"{name}={limit}")

    for name in EXEMPT_BLUEPRINTS:
        bp = app.blueprints.get(name)
        if bp is not None:
            limiter.exempt(bp)

    logger.info("Rate limits applied: %s", ", ".join(applied))
