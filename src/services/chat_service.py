"""Retrieval-augmented chat with streamed replies.

One turn is: retrieve contexts for the message, build the prompt (system
prompt in the user's language, recent history, context block, question),
stream the model's reply token by token, then evaluate the finished answer
against the same retrieval.  History is supplied by the caller on every
request; nothing is stored here.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING

import structlog

from src.models.chat import ChatEvent, ChatMessage
from src.utils.language import is_bengali, system_prompt_for

if TYPE_CHECKING:
    from src.interfaces.llm_provider import ILLMProvider
    from src.services.context_retriever import ContextRetriever
    from src.services.rag_evaluator import RAGEvaluator

logger = structlog.get_logger(logger_name=__name__)


class ChatService:
    """Answers chat messages from retrieved context.

    Parameters
    ----------
    llm:
        Streaming chat model.
    retriever:
        Source of contexts for each message.
    evaluator:
        Scores the finished answer.
    history_window:
        Number of most recent history turns sent to the model.
    temperature, max_tokens:
        Generation parameters.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        retriever: ContextRetriever,
        evaluator: RAGEvaluator,
        history_window: int = 10,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        self._llm = llm
        self._retriever = retriever
        self._evaluator = evaluator
        self._history_window = history_window
        self._temperature = temperature
        self._max_tokens = max_tokens

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_messages(
        self,
        message: str,
        history: Sequence[ChatMessage],
        contexts: Sequence[str],
    ) -> list[dict[str, str]]:
        """Assemble the model input for one turn."""
        context_block = ""
        if contexts:
            context_block = "Context information:\n" + "\n\n".join(contexts) + "\n\n"

        recent = list(history)[-self._history_window :] if self._history_window > 0 else []
        return [
            {"role": "system", "content": system_prompt_for(message)},
            *({"role": turn.role, "content": turn.content} for turn in recent),
            {"role": "user", "content": f"{context_block}Question: {message}"},
        ]

    async def stream_reply(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
    ) -> AsyncIterator[ChatEvent]:
        """Yield ``token`` events as the reply is generated, then one ``done`` event.

        Closing the iterator early also closes the model stream.

        Raises
        ------
        LLMError
            If the chat model fails; tokens already yielded stay delivered.
        """
        user_message = ChatMessage(role="user", content=message)
        retrieval = await self._retriever.retrieve(message)
        messages = self.build_messages(message, history, retrieval.contexts)

        logger.info(
            "chat_turn_started",
            bengali=is_bengali(message),
            history_turns=len(messages) - 2,
            contexts=len(retrieval.contexts),
        )

        parts: list[str] = []
        stream = self._llm.stream_chat(
            messages, temperature=self._temperature, max_tokens=self._max_tokens
        )
        async with contextlib.aclosing(stream):
            async for fragment in stream:
                parts.append(fragment)
                yield ChatEvent(type="token", content=fragment)

        answer = "".join(parts)
        evaluation = await self._evaluator.evaluate(message, answer, retrieval=retrieval)

        logger.info(
            "chat_turn_complete",
            answer_length=len(answer),
            groundedness=evaluation.groundedness.score,
            relevance=evaluation.relevance.score,
        )
        yield ChatEvent(
            type="done",
            content=answer,
            user_message=user_message,
            assistant_message=ChatMessage(role="assistant", content=answer),
            evaluation=evaluation,
        )

    async def answer(self, message: str, history: Sequence[ChatMessage] = ()) -> ChatEvent:
        """Answer *message* in one call and return the ``done`` event.

        Used where nothing consumes a token stream, such as the CLI.
        """
        retrieval = await self._retriever.retrieve(message)
        messages = self.build_messages(message, history, retrieval.contexts)
        answer = await self._llm.complete(
            messages, temperature=self._temperature, max_tokens=self._max_tokens
        )
        evaluation = await self._evaluator.evaluate(message, answer, retrieval=retrieval)
        logger.info("chat_answer_complete", answer_length=len(answer))
        return ChatEvent(
            type="done",
            content=answer,
            user_message=ChatMessage(role="user", content=message),
            assistant_message=ChatMessage(role="assistant", content=answer),
            evaluation=evaluation,
        )
