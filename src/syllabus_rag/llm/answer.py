"""
Answer Composer

Turns ranked passages into a grounded, cited answer via the chat model.
The grounding rule lives in the system prompt; this module only decides
what the model sees and short-circuits when there is nothing to see.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, ConfigDict

from ..prompts import ANSWER_SYSTEM_PROMPT, NO_SYLLABUS_ANSWER
from ..rag.models import RankedPassage
from .client import LLMClient

logger = logging.getLogger("syllabus_rag.llm")


class HistoryTurn(BaseModel):
    role: str
    content: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class ComposedAnswer(BaseModel):
    answer: str
    sources: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


def build_context(passages: Sequence[RankedPassage]) -> str:
    """Render passages as numbered, class-labelled source blocks."""
    parts = [
        f"[Source {i} - {p.class_label}]:\n{p.text}"
        for i, p in enumerate(passages, start=1)
    ]
    return "\n\n---\n\n".join(parts)


def unique_sources(passages: Sequence[RankedPassage]) -> List[str]:
    """Class labels of the passages, de-duplicated in rank order."""
    return list(dict.fromkeys(p.class_label for p in passages))


class AnswerComposer:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def answer(
        self,
        question: str,
        passages: Sequence[RankedPassage],
        history: Optional[Sequence[HistoryTurn]] = None,
    ) -> ComposedAnswer:
        if not passages:
            return ComposedAnswer(answer=NO_SYLLABUS_ANSWER, sources=[])

        system_prompt = ANSWER_SYSTEM_PROMPT.format(context=build_context(passages))

        # Only prior user/assistant turns are forwarded; anything else could
        # override the system instruction.
        messages = [
            {"role": turn.role, "content": turn.content}
            for turn in (history or [])
            if turn.role in ("user", "assistant")
        ]
        messages.append({"role": "user", "content": question})

        text = await self._llm.chat(system_prompt, messages)
        logger.info("Answered question from %d passages", len(passages))

        return ComposedAnswer(answer=text, sources=unique_sources(passages))
