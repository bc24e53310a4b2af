"""
Cache key derivation for translation requests.
"""

import hashlib
import json
from typing import Any, List

from transgate.errors import ParamError

CACHE_KEY_PREFIX = "translate:"


def derive_cache_key(texts: List[Any], target: str) -> str:
    """
    Derive a stable cache key for a batch of texts and a target language.

    The texts are sorted and written as a JSON array before hashing, so any
    ordering of the same texts yields the same key, and a separator inside a
    text cannot make two different batches look alike.

    Args:
        texts: Source texts
        target: Target language code

    Returns:
        Namespaced sha256 hex digest

    Raises:
        ParamError: If texts is not a list or target is not a string
    """
    if not isinstance(texts, list) or not isinstance(target, str):
        raise ParamError(f"Cannot derive cache key: texts={texts!r}, target={target!r}")

    canonical = json.dumps(sorted(str(text) for text in texts), ensure_ascii=False)
    raw_key = canonical + ":" + target
    digest = hashlib.sha256(raw_key.encode("utf-8")).hexdigest()

    return f"{CACHE_KEY_PREFIX}{digest}"
