"""Bengali/English language detection and prompt selection.

Retrieval and chat both branch on whether the user wrote in Bengali: the
retriever only runs its keyword fallback for Bengali queries, and the chat
service picks a system prompt that asks the model to answer in the same
language as the question.
"""

from __future__ import annotations

import re

# The whole Bengali Unicode block, U+0980 to U+09FF.
_BENGALI_CHAR_RE = re.compile("[ঀ-৿]")
_BENGALI_RUN_RE = re.compile("[ঀ-৿]+")
_WHITESPACE_RE = re.compile(r"\s")

# Share of non-whitespace characters that must be Bengali.
BENGALI_RATIO_THRESHOLD = 0.3

BENGALI_SYSTEM_PROMPT = (
    "আপনি একটি সহায়ক AI সহায়ক। আপনাকে দেওয়া প্রসঙ্গের ভিত্তিতে প্রশ্নের উত্তর দিন। "
    "যদি প্রসঙ্গে উত্তর না থাকে, তাহলে বিনয়ের সাথে বলুন যে আপনি জানেন না। "
    "সবসময় বাংলায় উত্তর দিন।"
)

ENGLISH_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Answer questions based on the provided context. "
    "If the answer is not in the context, politely say you don't know. "
    "Always respond in English."
)


def bengali_ratio(text: str) -> float:
    """Return the fraction of non-whitespace characters in the Bengali block.

    Returns ``0.0`` for empty or all-whitespace input.
    """
    if not text:
        return 0.0
    bengali = len(_BENGALI_CHAR_RE.findall(text))
    if bengali == 0:
        return 0.0
    total = len(_WHITESPACE_RE.sub("", text))
    if total == 0:
        return 0.0
    return bengali / total


def is_bengali(text: str) -> bool:
    """Return ``True`` when more than 30% of *text* is Bengali script.

    Exactly 30% is *not* Bengali.
    """
    return bengali_ratio(text) > BENGALI_RATIO_THRESHOLD


def extract_bengali_keywords(text: str) -> list[str]:
    """Return every maximal run of Bengali-block characters in *text*."""
    return _BENGALI_RUN_RE.findall(text or "")


def system_prompt_for(text: str) -> str:
    """Pick the Bengali or English assistant prompt based on *text*."""
    return BENGALI_SYSTEM_PROMPT if is_bengali(text) else ENGLISH_SYSTEM_PROMPT
