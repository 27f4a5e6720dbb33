"""JSON envelopes of the Livebox web-service API.

Every call is a POST of ``{"service", "method", "parameters"}`` and every
answer (except login) is ``{"status", "errors"}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .exceptions import APIError, DecodeError


@dataclass
class ApiRequest:
    """A call to a method of a router service."""

    service: str
    method: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON body sent to the router."""
        return {
            "method": self.method,
            "service": self.service,
            "parameters": self.parameters,
        }


@dataclass
class ApiResponse:
    """Generic answer of the router."""

    status: Any = None
    errors: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Any) -> ApiResponse:
        """Create an ApiResponse from a decoded JSON body.

        Raises:
            DecodeError: If the body is not a JSON object.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"unexpected response body: {data!r}")
        return cls(status=data.get("status"), errors=data.get("errors"))

    @property
    def failed(self) -> bool:
        """Any non-empty errors payload is a failure."""
        return bool(self.errors)

    def raise_for_errors(self) -> None:
        """Raise APIError carrying the raw errors payload, if any."""
        if self.failed:
            raise APIError(f"api error: {self.errors}", errors=self.errors)
