import json

import pytest
from lzstring import LZString

from transgate.cache_store import CacheBackend, CacheStore
from transgate.pipeline import RequestPipeline
from transgate.tokens import encode_token

NOW = 1_700_000_000
SECRET = "test-secret"


class MemoryCacheBackend(CacheBackend):
    """Dict backed cache that can be switched into failure modes."""

    def __init__(self):
        self.data = {}
        self.writes = []
        self.fail_get = False
        self.fail_set = False
        self.closed = False

    async def get(self, key):
        if self.fail_get:
            raise ConnectionError("cache unavailable")
        return self.data.get(key)

    async def set(self, key, value, ttl):
        if self.fail_set:
            raise ConnectionError("cache unavailable")
        self.writes.append((key, value, ttl))
        self.data[key] = value

    async def close(self):
        self.closed = True


class FakeTranslator:
    """Records calls and answers like the Translation v2 API."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.closed = False

    async def translate(self, texts, target):
        self.calls.append((list(texts), target))
        if self.error is not None:
            raise self.error
        return {
            "data": {
                "translations": [{"translatedText": f"{target}:{text}"} for text in texts]
            }
        }

    async def close(self):
        self.closed = True


@pytest.fixture
def compress():
    lz = LZString()

    def _compress(texts):
        return lz.compressToEncodedURIComponent(json.dumps(texts))

    return _compress


@pytest.fixture
def compress_js():
    """Compress like the browser library, one character per UTF-16 code unit."""
    lz = LZString()

    def _compress(texts):
        raw = json.dumps(texts, ensure_ascii=False).encode("utf-16-le")
        units = "".join(chr(int.from_bytes(raw[i:i + 2], "little")) for i in range(0, len(raw), 2))
        return lz.compressToEncodedURIComponent(units)

    return _compress


@pytest.fixture
def backend():
    return MemoryCacheBackend()


@pytest.fixture
def cache_store(backend):
    return CacheStore(backend)


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def valid_token():
    return encode_token(SECRET, NOW + 3600)


@pytest.fixture
def pipeline(translator, cache_store):
    return RequestPipeline(
        translator=translator,
        server_secret=SECRET,
        cache=cache_store,
        use_cache=True,
        clock=lambda: NOW,
    )
