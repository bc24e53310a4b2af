"""
Time-limited bearer tokens.

A token is "<signature>.<expiry>" where expiry is a Unix timestamp in
seconds and signature is the hex HMAC-SHA256 of the expiry string, keyed
with the server secret.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

DEFAULT_BYPASS_TOKEN = "valid"


class TokenStatus(str, Enum):
    """Outcome of token validation."""
    VALID = "valid"
    MISSING = "missing"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"


@dataclass(frozen=True)
class Token:
    """Decoded token fields."""
    signature: str
    expiry_field: str
    expiry: int


@dataclass(frozen=True)
class TokenCheck:
    """Validation result with a human readable reason."""
    status: TokenStatus
    reason: str = ""

    @property
    def valid(self) -> bool:
        return self.status is TokenStatus.VALID


def _as_bytes(secret: Union[str, bytes]) -> bytes:
    return secret if isinstance(secret, bytes) else secret.encode("utf-8")


def sign(secret: Union[str, bytes], expiry_field: str) -> str:
    """Hex HMAC-SHA256 of the expiry field."""
    return hmac.new(_as_bytes(secret), expiry_field.encode("utf-8"), hashlib.sha256).hexdigest()


def encode_token(secret: Union[str, bytes], expiry: int) -> str:
    """Build a token that is valid until the given Unix timestamp."""
    expiry_field = str(int(expiry))
    return f"{sign(secret, expiry_field)}.{expiry_field}"


def issue_token(secret: Union[str, bytes], ttl: int, now: Optional[float] = None) -> str:
    """Build a token that expires ttl seconds from now."""
    now = time.time() if now is None else now
    return encode_token(secret, int(now) + ttl)


def decode_token(raw: str) -> Optional[Token]:
    """
    Split a raw token into its fields.

    Only the first "." separates the fields, so anything after it belongs
    to the expiry and must parse as an integer.

    Returns:
        Token, or None if the token is malformed
    """
    signature, sep, expiry_field = raw.partition(".")
    if not sep:
        return None

    try:
        expiry = int(expiry_field)
    except ValueError:
        return None

    return Token(signature=signature, expiry_field=expiry_field, expiry=expiry)


def validate_token(
    raw: Optional[str],
    secret: Optional[Union[str, bytes]],
    now: Optional[float] = None,
    bypass: Optional[str] = DEFAULT_BYPASS_TOKEN,
) -> TokenCheck:
    """
    Validate a raw token.

    Expiry is checked before the signature, so an expired token is reported
    as expired even when its signature is wrong.

    Args:
        raw: Token from the request, may be None
        secret: Server secret used for signing
        now: Current Unix time (defaults to time.time())
        bypass: Literal that is accepted without verification, None disables it

    Returns:
        TokenCheck with the terminal status
    """
    if not raw:
        return TokenCheck(TokenStatus.MISSING, "A token is required (?token=<token>).")

    if bypass and raw == bypass:
        return TokenCheck(TokenStatus.VALID)

    token = decode_token(raw)
    if token is None:
        return TokenCheck(TokenStatus.MALFORMED, f"Malformed token: {raw}")

    current_time = int(time.time() if now is None else now)
    if current_time >= token.expiry:
        return TokenCheck(
            TokenStatus.EXPIRED,
            f"Token expired. Current time: {current_time}, expiry: {token.expiry_field}",
        )

    if not secret:
        return TokenCheck(TokenStatus.BAD_SIGNATURE, "Server secret is not configured.")

    expected = sign(secret, token.expiry_field)
    if not hmac.compare_digest(token.signature.encode("utf-8"), expected.encode("utf-8")):
        return TokenCheck(TokenStatus.BAD_SIGNATURE, f"Invalid token signature: {token.signature}")

    return TokenCheck(TokenStatus.VALID)
