from __future__ import annotations

"""Per-session transcript state.

Sessions are immutable values: every transition returns a new ``Session`` and
the caller (the HTTP layer) decides where to keep it. Nothing here is sent
upstream; the remote model only ever sees the latest user text.
"""

import uuid
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TranscriptEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    text: str
    detail: Optional[str] = Field(None, description="Expandable long answer, if any")


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    transcript: Tuple[TranscriptEntry, ...] = ()
    busy: bool = False
    pending_token: Optional[str] = None

    def submit(self, text: str) -> Tuple["Session", Optional[str]]:
        """Record a user message and mark a request as pending.

        A new token replaces any earlier pending one, so a response for the
        earlier submission is discarded when it arrives.
        """
        if not (text or "").strip():
            return self, None
        token = uuid.uuid4().hex
        entry = TranscriptEntry(role="user", text=text)
        updated = self.model_copy(
            update={
                "transcript": self.transcript + (entry,),
                "busy": True,
                "pending_token": token,
            }
        )
        return updated, token

    def settle(self, token: Optional[str], entry: TranscriptEntry) -> "Session":
        if token is None or token != self.pending_token:
            return self
        return self.model_copy(
            update={
                "transcript": self.transcript + (entry,),
                "busy": False,
                "pending_token": None,
            }
        )

    def append_assistant(self, text: str, detail: Optional[str] = None) -> "Session":
        entry = TranscriptEntry(role="assistant", text=text, detail=detail)
        return self.model_copy(update={"transcript": self.transcript + (entry,)})

    def entry(self, index: int) -> TranscriptEntry:
        if index < 0 or index >= len(self.transcript):
            raise IndexError(f"No transcript entry at index {index}")
        return self.transcript[index]
