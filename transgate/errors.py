"""
Error taxonomy for the translation gateway.

Every failure a request can hit is classified into exactly one ErrorKind,
and every kind maps to one response contract (status code + message).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a request failure."""
    ACCESS = "access"
    PARAM = "param"
    TOKEN = "token"
    CACHE = "cache"
    UNKNOWN = "unknown"


# Status code and user-facing message per error kind
_CONTRACTS = {
    ErrorKind.ACCESS: (403, "Invalid request."),
    ErrorKind.PARAM: (400, "Parameter validation failed."),
    ErrorKind.TOKEN: (401, "Token validation failed."),
    ErrorKind.CACHE: (500, "Cache error."),
    ErrorKind.UNKNOWN: (500, "Translation failed."),
}


class GatewayError(Exception):
    """Base class for gateway errors."""
    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code or _CONTRACTS[self.kind][0]


class AccessError(GatewayError):
    """Client identified as an automated agent."""
    kind = ErrorKind.ACCESS


class ParamError(GatewayError):
    """Malformed or out-of-bounds request."""
    kind = ErrorKind.PARAM


class TokenError(GatewayError):
    """Missing, malformed, expired or badly signed token."""
    kind = ErrorKind.TOKEN


class CacheError(GatewayError):
    """Cache layer fault. Absorbed by CacheStore, never sent to clients."""
    kind = ErrorKind.CACHE


class UnknownError(GatewayError):
    """Upstream failure or anything unexpected."""
    kind = ErrorKind.UNKNOWN


@dataclass(frozen=True)
class Rejection:
    """Result of a failed validation step."""
    kind: ErrorKind
    details: str
    status_code: int = 0

    def __post_init__(self):
        if not self.status_code:
            object.__setattr__(self, "status_code", _CONTRACTS[self.kind][0])

    @property
    def message(self) -> str:
        return _CONTRACTS[self.kind][1]

    @classmethod
    def from_error(cls, error: GatewayError) -> "Rejection":
        return cls(kind=error.kind, details=str(error), status_code=error.status_code)

    def to_body(self) -> dict:
        """Render as the {error, details} response body."""
        return {"error": self.message, "details": self.details}
