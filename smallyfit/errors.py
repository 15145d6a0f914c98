"""Domain errors raised by services and mapped to HTTP in api.main."""
from __future__ import annotations


class SmallyFitError(Exception):
    """Base class. ``code`` becomes the ``error`` field of the response envelope."""
    status_code = 500
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SmallyFitError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id: str | None = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class AuthorizationError(SmallyFitError):
    """The entity exists but belongs to another account."""
    status_code = 403
    code = "forbidden"

    def __init__(self, entity: str):
        super().__init__(f"Not authorized to access this {entity.lower()}")
        self.entity = entity


class ConflictError(SmallyFitError):
    status_code = 409
    code = "conflict"


def ensure_owner(row, account_id: str, entity: str) -> None:
    """Raise NotFoundError / AuthorizationError unless ``row`` belongs to the account."""
    if row is None:
        raise NotFoundError(entity)
    if row.account_id != account_id:
        raise AuthorizationError(entity)
