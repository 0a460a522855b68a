from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import GenerationError, ParseError
from ..settings import get_settings

logger = logging.getLogger(__name__)

UNEXPECTED_FORMAT = "Failed to get suggestions from AI, or unexpected response format."


class GeminiClient:
    """Thin async wrapper around the generateContent endpoint.

    No retries: any transport error, timeout, bad status or malformed
    envelope is raised as GenerationError straight away.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.model = model or settings.gemini_model

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=timeout if timeout is not None else settings.gemini_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str) -> Dict[str, Any]:
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY is not configured.")

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        logger.debug("generate: model=%s prompt_chars=%d", self.model, len(prompt))
        try:
            resp = await self._client.post(
                f"/v1beta/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise GenerationError(f"AI request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise GenerationError(f"AI request failed: {e}") from e

        if resp.status_code >= 400:
            raise GenerationError(f"AI request failed with status {resp.status_code}.")
        try:
            result = resp.json()
        except ValueError as e:
            raise GenerationError(UNEXPECTED_FORMAT) from e

        if not _has_text(result):
            raise GenerationError(UNEXPECTED_FORMAT)
        return result


def _has_text(result: Any) -> bool:
    try:
        return isinstance(result["candidates"][0]["content"]["parts"][0]["text"], str)
    except (KeyError, IndexError, TypeError):
        return False


# Normalizing the raw response


def extract_text(result: Dict[str, Any]) -> str:
    if not _has_text(result):
        raise GenerationError(UNEXPECTED_FORMAT)
    return result["candidates"][0]["content"]["parts"][0]["text"]


def strip_code_fence(text: str) -> str:
    # Only one leading ```json line and one trailing ``` line are removed
    if text.startswith("```json\n"):
        text = text[len("```json\n"):]
    if text.endswith("\n```"):
        text = text[: -len("\n```")]
    return text.strip()


def extract_json(result: Dict[str, Any]) -> Any:
    text = strip_code_fence(extract_text(result))
    try:
        return json.loads(text)
    except ValueError as e:
        raise ParseError(f"Failed to parse AI response as JSON: {e}") from e


async def get_generation_client():
    """FastAPI dependency yielding a client that is closed after the request."""
    client = GeminiClient()
    try:
        yield client
    finally:
        await client.close()
