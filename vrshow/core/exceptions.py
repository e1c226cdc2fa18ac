"""
Service-layer exception hierarchy.

Services raise these; blueprints register one handler per type and map
them to HTTP status codes.

Usage:
    from vrshow.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=42)
    raise ValidationError("Proposal is incomplete", details={"lines": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested project, bid, quote line or snapshot does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Project", "ProviderBid").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when well-formed input violates a business rule.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names;
                 values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)
