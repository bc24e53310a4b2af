"""
Request decoding and parameter validation.

The `q` parameter carries a JSON array of strings compressed with
lz-string's compressToEncodedURIComponent.
"""

import json
from typing import Any, Optional

from lzstring import LZString

from transgate.errors import ErrorKind, ParamError, Rejection
from transgate.models import TranslationRequest

MAX_TEXTS = 50

_lz = LZString()


def decode_texts(q: Optional[str]) -> Any:
    """
    Decompress and parse the `q` parameter.

    Raises:
        ParamError: If q is missing or does not decode to JSON
    """
    if not q:
        raise ParamError("The q parameter is required (q=<compressed JSON array>).")

    try:
        decompressed = _lz.decompressFromEncodedURIComponent(q)
    except Exception as e:
        raise ParamError(f"Cannot decompress q: {e}") from e

    if not decompressed:
        raise ParamError("Cannot decompress q.")

    # lz-string works on UTF-16 code units; join surrogate pairs back into code points
    try:
        decompressed = decompressed.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeError as e:
        raise ParamError(f"q holds invalid UTF-16: {e}") from e

    try:
        return json.loads(decompressed)
    except ValueError as e:
        raise ParamError(f"q is not valid JSON: {e}") from e


def parse_request(
    q: Optional[str],
    target: Optional[str],
    token: Optional[str],
    user_agent: Optional[str] = None,
) -> TranslationRequest:
    """Build a TranslationRequest from raw query fields and headers."""
    return TranslationRequest(
        texts=decode_texts(q),
        target=target,
        token=token,
        user_agent=user_agent or "",
    )


def validate_params(request: TranslationRequest) -> Optional[Rejection]:
    """Check the request shape; return a Rejection if it is out of bounds."""
    if not isinstance(request.texts, list) or not isinstance(request.target, str) or not request.target:
        return Rejection(
            ErrorKind.PARAM,
            "A list of texts and a target language are required (q=<array>&target=<language>).",
        )

    if not request.texts:
        return Rejection(ErrorKind.PARAM, "At least one text is required.")

    if len(request.texts) > MAX_TEXTS:
        return Rejection(ErrorKind.PARAM, f"Reduce the number of texts to {MAX_TEXTS} or fewer.")

    return None
