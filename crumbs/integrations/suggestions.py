"""
Client for the AI suggestion provider (Gemini generateContent API).

Used only to pre-fill forms. The model is asked for JSON, and the reply is
parsed into a pydantic model; anything that does not fit is an UpstreamError.
"""
import json
import logging
from typing import Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError
from crumbs.core.config import AI_TIMEOUT, GEMINI_API_KEY, GEMINI_BASE_URL, GEMINI_MODEL
from crumbs.core.exceptions import UpstreamError

log = logging.getLogger("crumbs.suggestions")

T = TypeVar("T", bound=BaseModel)


class SuggestionClient:
    """Client for generating structured suggestions with the Gemini LLM API."""

    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL,
                 base_url: str = GEMINI_BASE_URL, timeout: float = AI_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.model = model
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self):
        await self._client.aclose()

    async def generate(self, prompt: str, schema: Type[T], temperature: float = 0.7) -> T:
        """
        Sends the prompt and parses the JSON answer into `schema`.

        Args:
            prompt: Full instruction text for the model
            schema: Pydantic model the answer must validate against
            temperature: Sampling temperature

        Returns:
            An instance of `schema`
        """
        if not self.api_key:
            raise UpstreamError("AI provider is not configured")

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "responseMimeType": "application/json",
            },
        }
        try:
            response = await self._client.post(
                f"/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            log.error(f"AI provider unreachable: {e}")
            raise UpstreamError(f"AI provider unreachable: {e}") from e

        if response.status_code != 200:
            log.error(f"AI provider returned {response.status_code}: {response.text}")
            raise UpstreamError(f"AI provider returned {response.status_code}", upstream_status=response.status_code)

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
            return schema.model_validate(json.loads(text))
        except (ValueError, KeyError, IndexError, TypeError, ValidationError) as e:
            log.error(f"Unexpected AI response structure: {e}")
            raise UpstreamError("AI provider returned an unusable answer") from e


_client: Optional[SuggestionClient] = None


def get_suggestion_client() -> SuggestionClient:
    """FastAPI dependency returning the process-wide client."""
    global _client
    if _client is None:
        _client = SuggestionClient()
    return _client


async def close_suggestion_client():
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
