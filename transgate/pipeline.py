"""
Translation request pipeline.

decode -> access check -> parameter check -> token check -> cache lookup
-> upstream call on miss -> cache store -> response.

Each check returns a Rejection on failure and the pipeline stops at the
first one. Every outcome is rendered as a PipelineResponse.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from transgate.access_guard import check_access
from transgate.cache_key import derive_cache_key
from transgate.cache_store import CacheStore
from transgate.errors import ErrorKind, GatewayError, Rejection, UnknownError
from transgate.logger import setup_logger
from transgate.params import parse_request, validate_params
from transgate.tokens import DEFAULT_BYPASS_TOKEN, validate_token
from transgate.translation_client import TranslationAPIError

log = setup_logger("transgate.pipeline")


@dataclass
class PipelineResponse:
    """Status code and JSON body to send back."""
    status_code: int
    body: Dict[str, Any]
    cache_hit: bool = False


def _upstream_status(status_code: Optional[int]) -> int:
    if isinstance(status_code, int) and 400 <= status_code <= 599:
        return status_code
    return 500


class RequestPipeline:
    """
    Authorizes, caches and forwards translation requests.

    Holds no per-request state, so one instance serves every request.
    """

    def __init__(
        self,
        translator,
        server_secret: Optional[str],
        cache: Optional[CacheStore] = None,
        use_cache: bool = False,
        bypass_token: Optional[str] = DEFAULT_BYPASS_TOKEN,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            translator: Object with `async translate(texts, target) -> dict`
            server_secret: HMAC secret for tokens
            cache: Cache store, required when use_cache is True
            use_cache: Enable the cache-aside lookup and store
            bypass_token: Token literal accepted without verification
            clock: Returns the current Unix time
        """
        self.translator = translator
        self.server_secret = server_secret
        self.cache = cache
        self.use_cache = use_cache and cache is not None
        self.bypass_token = bypass_token
        self.clock = clock

    async def handle(
        self,
        q: Optional[str],
        target: Optional[str],
        token: Optional[str],
        user_agent: Optional[str] = None,
    ) -> PipelineResponse:
        """
        Process one translation request.

        Args:
            q: Compressed JSON array of texts
            target: Target language code
            token: Raw bearer token
            user_agent: Client User-Agent header

        Returns:
            PipelineResponse with the upstream body or an {error, details} body
        """
        try:
            return await self._handle(q, target, token, user_agent)
        except GatewayError as e:
            return self._reject(Rejection.from_error(e))
        except TranslationAPIError as e:
            log.error("Upstream translation failed", extra={"error": str(e), "status": e.status_code})
            return self._reject(Rejection.from_error(UnknownError(str(e), _upstream_status(e.status_code))))
        except Exception as e:
            log.exception("Unexpected error while translating")
            return self._reject(Rejection(ErrorKind.UNKNOWN, str(e)))

    async def _handle(self, q, target, token, user_agent) -> PipelineResponse:
        request = parse_request(q, target, token, user_agent)

        rejection = check_access(request.user_agent) or validate_params(request)
        if rejection:
            return self._reject(rejection)

        check = validate_token(
            request.token,
            self.server_secret,
            now=self.clock(),
            bypass=self.bypass_token,
        )
        if not check.valid:
            return self._reject(Rejection(ErrorKind.TOKEN, check.reason))

        texts: List[str] = request.texts
        cache_key = derive_cache_key(texts, request.target)

        if self.use_cache:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                log.info("Cache hit", extra={"key": cache_key})
                return PipelineResponse(200, cached, cache_hit=True)
            log.info("Cache miss", extra={"key": cache_key})

        data = await self.translator.translate(texts, request.target)

        if self.use_cache:
            await self.cache.set(cache_key, data)

        return PipelineResponse(200, data)

    def _reject(self, rejection: Rejection) -> PipelineResponse:
        log.info(
            "Request rejected",
            extra={"kind": rejection.kind.value, "status": rejection.status_code, "details": rejection.details},
        )
        return PipelineResponse(rejection.status_code, rejection.to_body())
