from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
from contextlib import asynccontextmanager
import uvicorn
from transgate.cache_store import CacheStore, SqlCacheBackend, create_cache_backend
from transgate.config import Settings
from transgate.logger import setup_logger
from transgate.models import ErrorResponse
from transgate.pipeline import RequestPipeline
from transgate.translation_client import TranslationClient

log = setup_logger("transgate")


async def build_pipeline(settings: Settings) -> RequestPipeline:
    """
    Build the pipeline and the long-lived clients it owns.

    Args:
        settings: Process settings

    Returns:
        RequestPipeline wired to the upstream client and, if enabled, the cache
    """
    cache = None
    if settings.use_cache:
        backend = create_cache_backend(settings.cache_url)
        if isinstance(backend, SqlCacheBackend):
            await backend.clear_expired()
        cache = CacheStore(backend, settings.cache_ttl)

    translator = TranslationClient(
        api_key=settings.translation_key,
        api_url=settings.translation_api_url,
        timeout=settings.upstream_timeout,
    )

    return RequestPipeline(
        translator=translator,
        server_secret=settings.server_secret,
        cache=cache,
        use_cache=settings.use_cache,
        bypass_token=settings.bypass_token,
    )


async def close_pipeline(pipeline: RequestPipeline):
    """Release the upstream client and the cache connection."""
    await pipeline.translator.close()
    if pipeline.cache is not None:
        await pipeline.cache.close()


def create_app(settings: Optional[Settings] = None, pipeline: Optional[RequestPipeline] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use, loaded from the environment if omitted
        pipeline: Prebuilt pipeline; the app then neither builds nor closes one

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler - runs on startup and shutdown."""
        owns_pipeline = pipeline is None
        if owns_pipeline:
            app.state.settings = settings or Settings.from_env()
            app.state.pipeline = await build_pipeline(app.state.settings)
            log.info(
                "transgate started",
                extra={
                    "translation_key": "set" if app.state.settings.translation_key else "not set",
                    "server_secret": "set" if app.state.settings.server_secret else "not set",
                    "use_cache": app.state.settings.use_cache,
                },
            )
        else:
            app.state.pipeline = pipeline

        yield

        if owns_pipeline:
            await close_pipeline(app.state.pipeline)

    app = FastAPI(
        title="transgate",
        description="Caching, token-authorized gateway for a translation API",
        version="0.1.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/")
    def read_root():
        return {
            "message": "transgate API",
            "docs": "/docs",
            "endpoints": {
                "translate": "/translate?q={compressed texts}&target={language}&token={token}",
            }
        }

    @app.get(
        "/translate",
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            403: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def translate(
        request: Request,
        q: Optional[str] = Query(None, description="lz-string compressed JSON array of texts"),
        target: Optional[str] = Query(None, description="Target language code"),
        token: Optional[str] = Query(None, description="<signature>.<expiry> token"),
    ):
        """
        Translate a batch of texts, serving from cache when possible.

        Returns:
            The upstream translation response, or an {error, details} body
        """
        result = await request.app.state.pipeline.handle(
            q=q,
            target=target,
            token=token,
            user_agent=request.headers.get("user-agent"),
        )
        return JSONResponse(status_code=result.status_code, content=result.body)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=Settings.from_env().port)
