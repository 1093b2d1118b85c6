"""
utils/exceptions.py
-------------------
Error taxonomy shared by the engines, services and repositories.

Engine errors (ExhaustedRecurrence, InvalidAnchor, ValidationError) are
deterministic functions of their inputs. PersistenceError wraps storage
failures and is always propagated to the caller untouched.
"""

from typing import Any, Optional


class FinanceError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class ExhaustedRecurrence(FinanceError):
    """Processing a recurring definition that is inactive or past its end date."""


class InvalidAnchor(FinanceError):
    """A budget window was requested before the budget's start date."""


class ValidationError(FinanceError):
    """Invalid input on create/update."""


class NotFoundError(FinanceError):
    """Record does not exist or belongs to another owner."""


class PersistenceError(FinanceError):
    """A storage collaborator failed to read or write."""


class ConcurrentUpdateError(PersistenceError):
    """The stored definition changed between read and advance."""
