"""API blueprints of the quoting service, plus list pagination."""

from flask import request

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def paginate_query(query, default_limit=DEFAULT_PAGE_SIZE, max_limit=MAX_PAGE_SIZE):
    """Slice ``query`` with the ``limit`` / ``offset`` query params.

    Bad values fall back to the defaults; limit is capped at ``max_limit``.
    Returns ``(items, total)`` where total ignores the slice.
    """
    limit = max(min(_int_arg("limit", default_limit), max_limit), 0)
    offset = max(_int_arg("offset", 0), 0)
    return query.limit(limit).offset(offset).all(), query.count()
