"""Exceptions raised by the Livebox client.

Every error carries the chain of operations that failed, outermost first,
e.g. ``list port forwardings: do request: api error: [...]``. Use
:meth:`LiveboxError.wrap` to add an operation while keeping the error kind.
"""

from __future__ import annotations

import copy
from typing import Any, Optional


class LiveboxError(Exception):
    """Base exception for all Livebox client errors."""

    def wrap(self, operation: str) -> LiveboxError:
        """Return a copy of this error prefixed with the failed operation.

        Args:
            operation: Short description of the operation that failed.

        Returns:
            An error of the same type with the same attributes.
        """
        err = copy.copy(self)
        err.args = (f"{operation}: {self}",)
        return err


class TransportError(LiveboxError):
    """Raised when the HTTP round trip to the router fails."""

    pass


class DecodeError(LiveboxError):
    """Raised when a response or a wire field cannot be decoded."""

    pass


class APIError(LiveboxError):
    """Raised when the router answers with a non-empty errors payload.

    Attributes:
        errors: The raw errors payload, kept for diagnostics.
    """

    def __init__(self, message: str, errors: Optional[Any] = None) -> None:
        super().__init__(message)
        self.errors = errors


class AuthenticationError(LiveboxError):
    """Raised when login does not yield a session token."""

    pass


class ValidationError(LiveboxError):
    """Raised when a configuration is rejected before any network call."""

    pass


class NotFoundError(LiveboxError):
    """Raised when a port forwarding rule cannot be found by name."""

    pass
