"""
Upstream translation API client (Google Cloud Translation v2).
"""

from typing import Any, Dict, List, Optional

import httpx

DEFAULT_TRANSLATION_API_URL = "https://translation.googleapis.com/language/translate/v2"


class TranslationAPIError(Exception):
    """Upstream translation API error."""
    def __init__(self, message: str, status_code: Optional[int]):
        super().__init__(message)
        self.status_code = status_code


class TranslationClient:
    """
    Translation API client.

    Holds one httpx.AsyncClient for the process lifetime; call close() at
    shutdown.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = DEFAULT_TRANSLATION_API_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize translation client.

        Args:
            api_key: Upstream API key
            api_url: Translate endpoint URL
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (tests inject a mock transport)
        """
        self.api_key = api_key
        self.api_url = api_url
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def translate(self, texts: List[str], target: str) -> Dict[str, Any]:
        """
        Translate a batch of texts.

        Args:
            texts: Source texts
            target: Target language code

        Returns:
            Upstream JSON response, passed through unchanged

        Raises:
            TranslationAPIError: On missing key, HTTP or transport errors
        """
        if not self.api_key:
            raise TranslationAPIError("Translation API key is not configured", None)

        try:
            response = await self.client.post(
                self.api_url,
                params={"key": self.api_key},
                json={"q": texts, "target": target},
            )
            response.raise_for_status()

            data = response.json()

            # An error object in the body is a failure whatever the status
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                error = data["error"]
                raise TranslationAPIError(
                    f"Translation API error: {error.get('message', error)}",
                    error.get("code"),
                )

            return data

        except httpx.HTTPStatusError as e:
            raise TranslationAPIError(
                f"{e.response.status_code}: {e.response.text if e.response.text else 'HTTP error'}",
                status_code=e.response.status_code
            )
        except httpx.RequestError as e:
            raise TranslationAPIError(f"Request error: {str(e)}", None)
        except ValueError as e:
            raise TranslationAPIError(f"Invalid response body: {str(e)}", None)
