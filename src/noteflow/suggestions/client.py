"""Async client for the word-suggestion service."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, List, Protocol

import httpx
from jsonschema import Draft202012Validator

from ..core.errors import SuggestionTransportError

__all__ = [
    "DEFAULT_BASE_URL",
    "MAX_SUGGESTIONS",
    "SUGGESTIONS_SCHEMA",
    "SuggestionClient",
    "SuggestionClientSettings",
    "SuggestionSource",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
MAX_SUGGESTIONS = 5

SUGGESTIONS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["suggestions"],
    "properties": {"suggestions": {"type": "array"}},
}
_VALIDATOR = Draft202012Validator(SUGGESTIONS_SCHEMA)


class SuggestionSource(Protocol):
    """Anything that can turn a typed prefix into completion candidates."""

    async def suggest(self, word: str) -> List[str]:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class SuggestionClientSettings:
    """Subset of settings required to configure the suggestion client."""

    base_url: str = DEFAULT_BASE_URL
    request_timeout: float | None = 5.0
    max_suggestions: int = MAX_SUGGESTIONS


class SuggestionClient:
    """Queries ``GET {base_url}/suggest?word=<prefix>``.

    :meth:`fetch` raises :class:`SuggestionTransportError` for any transport,
    status or payload problem; :meth:`suggest` swallows those and returns an
    empty list. Neither retries.
    """

    def __init__(
        self,
        settings: SuggestionClientSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or SuggestionClientSettings()
        self._client = client or self._build_client(self._settings)

    @property
    def settings(self) -> SuggestionClientSettings:
        return self._settings

    async def fetch(self, word: str) -> List[str]:
        """Return suggestions for ``word`` (lower-cased before sending)."""

        query = word.lower()
        try:
            response = await self._client.get("/suggest", params={"word": query})
        except httpx.HTTPError as exc:
            raise SuggestionTransportError(f"Suggestion request failed: {exc}") from exc
        if not response.is_success:
            raise SuggestionTransportError(
                f"Suggestion service returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SuggestionTransportError("Suggestion service returned malformed JSON") from exc
        errors = sorted(_VALIDATOR.iter_errors(payload), key=lambda error: list(error.path))
        if errors:
            raise SuggestionTransportError(f"Unexpected suggestion payload: {errors[0].message}")
        words = [item for item in payload["suggestions"] if isinstance(item, str)]
        LOGGER.debug("Suggestion lookup for %r returned %s item(s)", query, len(words))
        return words[: self._settings.max_suggestions]

    async def suggest(self, word: str) -> List[str]:
        try:
            return await self.fetch(word)
        except SuggestionTransportError as exc:
            LOGGER.warning("Suggestion lookup for %r failed: %s", word, exc)
            return []

    def _build_client(self, settings: SuggestionClientSettings) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=settings.base_url, timeout=settings.request_timeout)

    async def aclose(self) -> None:
        """Close the underlying HTTP client to release network resources."""

        close = getattr(self._client, "aclose", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result
