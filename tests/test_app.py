import pytest
from fastapi.testclient import TestClient

from app import build_pipeline, close_pipeline, create_app
from transgate.cache_store import SqlCacheBackend
from transgate.config import Settings
from transgate.translation_client import TranslationClient

from conftest import SECRET


@pytest.fixture
def client(pipeline):
    with TestClient(create_app(pipeline=pipeline)) as client:
        yield client


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "translate" in response.json()["endpoints"]


def test_translate_miss_then_hit(client, translator, compress, valid_token):
    params = {"q": compress(["hello", "world"]), "target": "es", "token": valid_token}

    first = client.get("/translate", params=params)
    second = client.get("/translate", params=params)

    assert first.status_code == 200
    assert first.json() == {
        "data": {"translations": [{"translatedText": "es:hello"}, {"translatedText": "es:world"}]}
    }
    assert second.json() == first.json()
    assert len(translator.calls) == 1


def test_translate_status_codes(client, compress, valid_token):
    q = compress(["hello"])

    bot = client.get("/translate", params={"q": q, "target": "es", "token": valid_token},
                     headers={"User-Agent": "curl/8.0"})
    bad_params = client.get("/translate", params={"q": compress(["x"] * 51), "target": "es", "token": valid_token})
    no_token = client.get("/translate", params={"q": q, "target": "es"})

    assert bot.status_code == 403
    assert bad_params.status_code == 400
    assert no_token.status_code == 401
    for response in (bot, bad_params, no_token):
        assert set(response.json()) == {"error", "details"}


def test_cors_preflight(client):
    response = client.options(
        "/translate",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_header_on_get(client):
    response = client.get("/", headers={"Origin": "https://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_lifespan_builds_pipeline_from_settings():
    settings = Settings(translation_key="key", server_secret=SECRET, use_cache=False)

    with TestClient(create_app(settings=settings)) as client:
        pipeline = client.app.state.pipeline
        assert isinstance(pipeline.translator, TranslationClient)
        assert pipeline.cache is None
        assert not pipeline.use_cache


@pytest.mark.asyncio
async def test_build_pipeline_with_sql_cache(tmp_path):
    settings = Settings(
        translation_key="key",
        server_secret=SECRET,
        use_cache=True,
        cache_url=f"sqlite:///{tmp_path / 'cache.db'}",
        cache_ttl=60,
    )

    pipeline = await build_pipeline(settings)
    try:
        assert pipeline.use_cache
        assert isinstance(pipeline.cache.backend, SqlCacheBackend)
        assert pipeline.cache.default_ttl == 60
    finally:
        await close_pipeline(pipeline)
