from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings, get_settings


logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    """Raised for any failure of the remote completion call."""


def build_payload(prompt: str) -> Dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def extract_first_candidate(data: Any) -> str:
    if not isinstance(data, dict):
        raise CompletionError("Malformed response: expected a JSON object")
    candidates = data.get("candidates")
    if not candidates:
        raise CompletionError("No candidates in response")
    try:
        text = candidates[0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise CompletionError(f"Malformed candidate in response: {exc!r}") from exc
    if not isinstance(text, str):
        raise CompletionError("Malformed candidate in response: text is not a string")
    return text


class GeminiClient:
    """Single-shot text completion against the Gemini generateContent endpoint.

    One POST per call. No retries, no history, and no timeout unless
    ``GEMINI_TIMEOUT`` is configured.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        base = self._settings.gemini_api_base.rstrip("/")
        return f"{base}/models/{self._settings.gemini_model}:generateContent"

    async def generate(self, prompt: str) -> str:
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise CompletionError(
                "GEMINI_API_KEY not set. Please configure it in environment or .env"
            )

        logger.info(
            "Sending completion request: model=%s prompt_len=%s",
            self._settings.gemini_model,
            len(prompt),
        )
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.gemini_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=build_payload(prompt),
                    headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise CompletionError(
                f"Gemini API call failed: HTTP {exc.response.status_code} from {exc.request.url.path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CompletionError(f"Gemini API call failed: {type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise CompletionError(f"Malformed response: {exc}") from exc

        text = extract_first_candidate(data)
        logger.info("Completion received: %s chars", len(text))
        return text
