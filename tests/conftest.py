from __future__ import annotations

import json
from typing import Callable, List, Optional

import httpx
import pytest

from config.settings import Settings


class FakeCompleter:
    """Records prompts and returns a fixed reply, or raises ``error``."""

    def __init__(self, reply: str = "A remote answer.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_completer() -> FakeCompleter:
    return FakeCompleter()


@pytest.fixture
def gemini_settings(monkeypatch) -> Settings:
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    return Settings()


def candidates_body(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}} for text in texts]}


@pytest.fixture
def recording_transport() -> Callable[[httpx.Response], tuple]:
    def build(response: httpx.Response):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return response

        return httpx.MockTransport(handler), requests

    return build


def request_prompt(request: httpx.Request) -> str:
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]
