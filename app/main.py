from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from assistant.core.knowledge import common_questions
from assistant.core.memory import Session, TranscriptEntry
from assistant.core.topic_filter import check_questions_in_scope
from assistant.resolver import Completer, Response, answer_question, resolve
from assistant.tools import GeminiClient
from config.settings import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("chronic_care")


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_questions_in_scope()
    logger.info(
        "Config: model=%s key_set=%s",
        settings.gemini_model,
        bool(settings.gemini_api_key),
    )
    yield


app = FastAPI(title="Chronic Illness Support Bot", version="1.0.0", lifespan=lifespan)
# Sessions live only as long as the process, like a page session.
app.state.sessions = {}

# CORS: allow local frontend during development
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class MessageRequest(BaseModel):
    text: str = Field(..., description="User's latest message")


class QuestionRequest(BaseModel):
    question: str = Field(..., description="One of the common questions")


class SessionView(BaseModel):
    session_id: str
    transcript: List[TranscriptEntry]
    busy: bool


class MessageResult(BaseModel):
    session: SessionView
    response: Optional[Response] = None


async def get_store(request: Request) -> Dict[str, Session]:
    return request.app.state.sessions


async def get_completer() -> Completer:
    return GeminiClient().generate


def _load(store: Dict[str, Session], session_id: str) -> Session:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


def _view(session_id: str, session: Session) -> SessionView:
    return SessionView(
        session_id=session_id,
        transcript=list(session.transcript),
        busy=session.busy,
    )


def _entry(session: Session, index: int) -> TranscriptEntry:
    try:
        return session.entry(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/questions")
async def questions() -> Dict[str, List[str]]:
    return {"questions": common_questions()}


@app.post("/sessions", status_code=201)
async def create_session(store: Dict[str, Session] = Depends(get_store)) -> SessionView:
    session_id = uuid.uuid4().hex
    store[session_id] = Session()
    logger.info("Created session %s", session_id)
    return _view(session_id, store[session_id])


@app.get("/sessions/{session_id}")
async def read_session(
    session_id: str,
    store: Dict[str, Session] = Depends(get_store),
) -> SessionView:
    return _view(session_id, _load(store, session_id))


@app.post("/sessions/{session_id}/messages")
async def post_message(
    session_id: str,
    req: MessageRequest,
    store: Dict[str, Session] = Depends(get_store),
    complete: Completer = Depends(get_completer),
) -> MessageResult:
    session, token = _load(store, session_id).submit(req.text)
    if token is None:
        logger.info("Ignoring blank message for session %s", session_id)
        return MessageResult(session=_view(session_id, session))

    store[session_id] = session
    logger.info("Incoming message: session=%s text_len=%s", session_id, len(req.text))

    response = await resolve(req.text, complete)

    current = _load(store, session_id)
    settled = current.settle(token, response.to_entry())
    if settled is current:
        logger.info("Discarding stale %s response for session %s", response.kind, session_id)
    store[session_id] = settled
    logger.info("Resolved message: session=%s kind=%s", session_id, response.kind)
    return MessageResult(session=_view(session_id, settled), response=response)


@app.post("/sessions/{session_id}/questions")
async def click_question(
    session_id: str,
    req: QuestionRequest,
    store: Dict[str, Session] = Depends(get_store),
) -> SessionView:
    session = _load(store, session_id)
    canned = answer_question(req.question)
    if canned is None:
        raise HTTPException(status_code=404, detail="Unknown question")
    session = session.append_assistant(canned.short, detail=canned.long)
    store[session_id] = session
    return _view(session_id, session)


@app.post("/sessions/{session_id}/entries/{index}/detail")
async def show_detail(
    session_id: str,
    index: int,
    store: Dict[str, Session] = Depends(get_store),
) -> SessionView:
    session = _load(store, session_id)
    entry = _entry(session, index)
    if not entry.detail:
        raise HTTPException(status_code=409, detail="Entry has no further detail")
    session = session.append_assistant(entry.detail)
    store[session_id] = session
    return _view(session_id, session)


@app.get("/sessions/{session_id}/entries/{index}/copy")
async def copy_entry(
    session_id: str,
    index: int,
    store: Dict[str, Session] = Depends(get_store),
) -> Dict[str, str]:
    return {"text": _entry(_load(store, session_id), index).text}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
