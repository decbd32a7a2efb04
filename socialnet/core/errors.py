"""
Error taxonomy shared by services, the settings workflow and the HTTP layer.

Every error is terminal for the attempt that raised it; nothing here is
retried.
"""

import logging
from typing import Optional

from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

# SQLSTATE / PostgREST codes surfaced by the backend
INSUFFICIENT_PRIVILEGE = "42501"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NO_ROWS = "PGRST116"


class SocialError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PolicyDenied(SocialError):
    """A row-level policy refused the write (or the row is outside the caller's reach)."""
    status_code = 403
    default_message = "Permission denied"


class NotFound(SocialError):
    status_code = 404
    default_message = "Not found"


class ConstraintViolation(SocialError):
    """Unique / foreign-key constraint fired in the database."""
    status_code = 409
    default_message = "Constraint violation"


class IdentityServiceError(SocialError):
    """Supabase Auth refused an identity change; message is passed through verbatim."""
    status_code = 400
    default_message = "Identity update failed"


class ValidationFailed(SocialError):
    status_code = 422
    default_message = "Invalid input"


class BackendError(SocialError):
    status_code = 502
    default_message = "Backend request failed"


class PolicyRecursionError(RuntimeError):
    """A SELECT policy re-entered the SELECT policies of its own table."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f'infinite recursion detected in policy for relation "{table}"')


def translate_api_error(exc: APIError) -> SocialError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    if code == INSUFFICIENT_PRIVILEGE:
        return PolicyDenied()
    if code in (UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION):
        return ConstraintViolation(message)
    if code == NO_ROWS:
        return NotFound()
    logger.error(f"Unexpected backend error ({code}): {message}")
    return BackendError()
