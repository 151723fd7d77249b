from __future__ import annotations

import logging
from typing import Annotated, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from assistant.core.knowledge import find_question
from assistant.core.memory import TranscriptEntry
from assistant.core.prompt import FAILURE_MESSAGE, REFUSAL_MESSAGE
from assistant.core.topic_filter import is_in_scope


logger = logging.getLogger(__name__)

Completer = Callable[[str], Awaitable[str]]


class CannedResponse(BaseModel):
    kind: Literal["canned"] = "canned"
    short: str
    long: str

    def to_entry(self) -> TranscriptEntry:
        return TranscriptEntry(role="assistant", text=self.short, detail=self.long)


class RemoteResponse(BaseModel):
    kind: Literal["remote"] = "remote"
    text: str

    def to_entry(self) -> TranscriptEntry:
        return TranscriptEntry(role="assistant", text=self.text)


class RefusalResponse(BaseModel):
    kind: Literal["refusal"] = "refusal"
    text: str = REFUSAL_MESSAGE

    def to_entry(self) -> TranscriptEntry:
        return TranscriptEntry(role="assistant", text=self.text)


class FailedResponse(BaseModel):
    kind: Literal["failed"] = "failed"
    text: str
    error: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FailedResponse":
        error = " ".join(str(exc).split())[:500] or type(exc).__name__
        return cls(text=FAILURE_MESSAGE.format(error=error), error=error)

    def to_entry(self) -> TranscriptEntry:
        return TranscriptEntry(role="assistant", text=self.text)


Response = Annotated[
    Union[CannedResponse, RemoteResponse, RefusalResponse, FailedResponse],
    Field(discriminator="kind"),
]


def answer_question(question: str) -> Optional[CannedResponse]:
    """Canned answer for a listed question, bypassing the topic filter."""
    entry = find_question(question)
    if entry is None:
        return None
    return CannedResponse(short=entry.short_answer, long=entry.long_answer)


async def resolve(text: str, complete: Completer) -> Response:
    """Classify ``text`` and produce the assistant's reply.

    Out-of-scope text is refused without touching the network. In-scope text
    that matches a known question exactly gets the canned pair; anything else
    is sent verbatim to ``complete`` once. Completion failures come back as a
    ``FailedResponse`` rather than an exception.
    """
    if not is_in_scope(text):
        logger.info("Refusing out-of-scope message: %s chars", len(text or ""))
        return RefusalResponse()

    canned = answer_question(text)
    if canned is not None:
        logger.info("Matched canned question")
        return canned

    try:
        completion = await complete(text)
    except Exception as exc:
        logger.warning("Remote completion failed: %s", exc)
        return FailedResponse.from_exception(exc)
    return RemoteResponse(text=completion)
