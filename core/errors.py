# core/errors.py
from __future__ import annotations

from typing import Optional


class HRMError(Exception):
    """Base class for every error the payroll/auth core raises on purpose."""

    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(HRMError):
    """Malformed input. Raised before anything is written."""

    code = "validation_error"


class NotFoundError(ValidationError):
    code = "not_found"


class AuthenticationFailure(HRMError):
    """
    Login/credential failure. ``message`` is safe to show to the user,
    ``reason`` is the precise internal cause and only goes to the logs.
    """

    code = "authentication_failed"

    def __init__(self, message: str, reason: str, status: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.status = status


class StateTransitionError(HRMError):
    """Workflow action not allowed from the record's current status."""

    code = "invalid_state_transition"


class PersistenceFailure(HRMError):
    """The store failed or returned something unexpected; the unit of work was rolled back."""

    code = "persistence_failure"
