"""Error taxonomy shared by the backend services and the web state layer."""
from __future__ import annotations


class PortalError(Exception):
    """Base error. `status_code` is the HTTP status the backend answers with."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PortalError):
    """Malformed input; user-correctable."""

    status_code = 400
    code = "validation_error"


class NotAuthorizedError(PortalError):
    """Missing credentials (401) or insufficient role (403). Never retried."""

    status_code = 403
    code = "not_authorized"


class NotFoundError(PortalError):
    """Referenced key/identifier absent. Readers treat it as "use default"."""

    status_code = 404
    code = "not_found"


class TransientStoreError(PortalError):
    """Network or database hiccup. Reads may be retried, writes may not."""

    status_code = 503
    code = "store_unavailable"


def error_for_status(status_code: int, message: str) -> PortalError:
    """Map an HTTP status back to the matching error class."""
    if status_code == 400 or status_code == 422:
        return ValidationError(message)
    if status_code in (401, 403):
        return NotAuthorizedError(message, status_code=status_code)
    if status_code == 404:
        return NotFoundError(message)
    if status_code >= 500:
        return TransientStoreError(message, status_code=status_code)
    return PortalError(message, status_code=status_code)
