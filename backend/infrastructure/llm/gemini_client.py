from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from application.ports.text_generation_port import TextGenerationPort
from infrastructure.config.settings import (
    GEMINI_API_KEY,
    GEMINI_BASE_URL,
    GEMINI_LLM_MODEL,
    GEMINI_MAX_TOKENS,
    GEMINI_TEMPERATURE,
    GEMINI_TIMEOUT_S,
)
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


def extract_text(data: Any) -> Optional[str]:
    """Pull `candidates[0].content.parts[*].text` out of a generateContent response."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [str(p.get("text")) for p in parts if isinstance(p, dict) and p.get("text")]
    return "".join(texts) if texts else None


class GeminiClient(TextGenerationPort):
    """Gemini `generateContent` over REST (API-key auth)."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._api_key = (api_key or GEMINI_API_KEY or "").strip()
        self._model = (model or GEMINI_LLM_MODEL).strip()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._timeout_s = float(timeout_s or GEMINI_TIMEOUT_S or 30.0)
        self._temperature = GEMINI_TEMPERATURE if temperature is None else temperature
        self._max_tokens = GEMINI_MAX_TOKENS if max_tokens is None else max_tokens
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session
        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout_s))
            return self._session

    def _payload(self, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        generation_config: dict[str, Any] = {}
        if self._temperature is not None:
            generation_config["temperature"] = float(self._temperature)
        if self._max_tokens is not None:
            generation_config["maxOutputTokens"] = int(self._max_tokens)
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def generate_text(self, prompt: str) -> Optional[str]:
        if not self.configured:
            logger.warning("Gemini client not configured (missing GEMINI_API_KEY)")
            return None

        url = f"{self._base_url}/models/{self._model}:generateContent"
        try:
            session = await self._get_session()
            async with session.post(
                url,
                params={"key": self._api_key},
                json=self._payload(prompt),
                headers={"Content-Type": "application/json"},
            ) as resp:
                if resp.status >= 400:
                    error_text = await resp.text()
                    logger.error(
                        "Gemini request failed %s",
                        format_kv(model=self._model, status=resp.status, body=error_text),
                    )
                    return None
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            logger.error("Gemini timeout after %ss model=%s", self._timeout_s, self._model)
            return None
        except Exception as e:
            logger.exception("Gemini request failed model=%s: %s", self._model, e)
            return None

        text = extract_text(data)
        if text is None:
            logger.error("Gemini response had no text %s", format_kv(model=self._model, data=data))
        return text

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
