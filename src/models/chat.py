"""Chat turn and stream-event models.

History is owned by the client and sent with each request; nothing here is
persisted server-side.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.models.rag import RAGEvaluation


class ChatMessage(BaseModel):
    """One turn of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatEvent(BaseModel):
    """An item produced while streaming a reply.

    ``token`` events carry one generated fragment in ``content``.  The single
    trailing ``done`` event carries the whole answer, both chat turns and
    the evaluation of the answer against the retrieved contexts.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["token", "done"]
    content: str = ""
    user_message: ChatMessage | None = None
    assistant_message: ChatMessage | None = None
    evaluation: RAGEvaluation | None = None
