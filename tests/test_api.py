import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app, get_completer
from assistant.core.knowledge import common_questions
from assistant.core.prompt import REFUSAL_MESSAGE
from tests.conftest import FakeCompleter


@pytest.fixture
def completer():
    return FakeCompleter(reply="Pace yourself and rest.")


@pytest.fixture
def client(completer):
    app.dependency_overrides[get_completer] = lambda: completer
    app.state.sessions.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.sessions.clear()


@pytest.fixture
def session_id(client):
    response = client.post("/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_questions_listed(client):
    assert client.get("/questions").json() == {"questions": common_questions()}


def test_canned_message(client, session_id, completer):
    body = client.post(
        f"/sessions/{session_id}/messages",
        json={"text": "How can I manage my chronic illness effectively?"},
    ).json()

    assert body["response"]["kind"] == "canned"
    transcript = body["session"]["transcript"]
    assert [entry["role"] for entry in transcript] == ["user", "assistant"]
    assert transcript[1]["text"] == "Consistent medication, healthy diet, and regular check-ups."
    assert body["session"]["busy"] is False
    assert completer.prompts == []


def test_refused_message(client, session_id, completer):
    body = client.post(
        f"/sessions/{session_id}/messages", json={"text": "What's the weather today?"}
    ).json()

    assert body["response"]["kind"] == "refusal"
    assert body["session"]["transcript"][-1]["text"] == REFUSAL_MESSAGE
    assert completer.prompts == []


def test_remote_message(client, session_id, completer):
    text = "chronic illness but phrased differently"
    body = client.post(f"/sessions/{session_id}/messages", json={"text": text}).json()

    assert body["response"] == {"kind": "remote", "text": "Pace yourself and rest."}
    assert completer.prompts == [text]


def test_failed_message(client, session_id, completer):
    completer.error = RuntimeError("No candidates in response")
    body = client.post(f"/sessions/{session_id}/messages", json={"text": "diet tips"}).json()

    assert body["response"]["kind"] == "failed"
    assert "No candidates in response" in body["session"]["transcript"][-1]["text"]
    assert body["session"]["busy"] is False


def test_blank_message_is_ignored(client, session_id):
    body = client.post(f"/sessions/{session_id}/messages", json={"text": "  "}).json()

    assert body["response"] is None
    assert body["session"]["transcript"] == []


def test_question_click_and_detail(client, session_id):
    question = common_questions()[2]
    body = client.post(f"/sessions/{session_id}/questions", json={"question": question}).json()
    assert body["transcript"][0]["text"] == (
        "Very important to control symptoms and prevent complications."
    )

    detail = client.post(f"/sessions/{session_id}/entries/0/detail").json()
    assert detail["transcript"][1]["text"].startswith("Medication adherence is critical")
    assert detail["transcript"][1]["detail"] is None


def test_detail_without_detail_is_conflict(client, session_id):
    client.post(f"/sessions/{session_id}/messages", json={"text": "What's the weather today?"})

    assert client.post(f"/sessions/{session_id}/entries/1/detail").status_code == 409


def test_copy_entry(client, session_id):
    client.post(f"/sessions/{session_id}/messages", json={"text": "health check"})

    assert client.get(f"/sessions/{session_id}/entries/0/copy").json() == {"text": "health check"}
    assert client.get(f"/sessions/{session_id}/entries/9/copy").status_code == 404


def test_unknown_session_and_question(client, session_id):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions/nope/messages", json={"text": "diet"}).status_code == 404
    assert (
        client.post(f"/sessions/{session_id}/questions", json={"question": "diet?"}).status_code
        == 404
    )


class GatedCompleter:
    """Holds the first prompt until ``release`` is set; answers later ones at once."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.prompts = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.prompts) == 1:
            self.started.set()
            await self.release.wait()
            return "first reply"
        return "second reply"


def _run_with_gated_completer(scenario):
    async def main():
        completer = GatedCompleter()
        app.dependency_overrides[get_completer] = lambda: completer
        app.state.sessions.clear()
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                session_id = (await client.post("/sessions")).json()["session_id"]
                return await scenario(client, session_id, completer)
        finally:
            app.dependency_overrides.clear()
            app.state.sessions.clear()

    return asyncio.run(main())


def test_newest_submission_wins_over_late_reply():
    async def scenario(client, session_id, completer):
        first = asyncio.create_task(
            client.post(f"/sessions/{session_id}/messages", json={"text": "diet one"})
        )
        await completer.started.wait()

        pending = (await client.get(f"/sessions/{session_id}")).json()
        assert pending["busy"] is True

        second = await client.post(
            f"/sessions/{session_id}/messages", json={"text": "diet two"}
        )
        assert second.json()["session"]["busy"] is False

        completer.release.set()
        late = (await first).json()
        assert late["response"]["text"] == "first reply"

        final = (await client.get(f"/sessions/{session_id}")).json()
        return [entry["text"] for entry in final["transcript"]], final["busy"]

    texts, busy = _run_with_gated_completer(scenario)

    assert texts == ["diet one", "diet two", "second reply"]
    assert busy is False


def test_question_click_during_pending_message_is_kept():
    async def scenario(client, session_id, completer):
        pending = asyncio.create_task(
            client.post(f"/sessions/{session_id}/messages", json={"text": "diet one"})
        )
        await completer.started.wait()

        await client.post(
            f"/sessions/{session_id}/questions", json={"question": common_questions()[0]}
        )
        completer.release.set()
        await pending

        final = (await client.get(f"/sessions/{session_id}")).json()
        return [entry["text"] for entry in final["transcript"]], final["busy"]

    texts, busy = _run_with_gated_completer(scenario)

    assert texts == [
        "diet one",
        "Consistent medication, healthy diet, and regular check-ups.",
        "first reply",
    ]
    assert busy is False
