"""
Syllabus Date Extraction

Asks the chat model for a JSON array of dated events and parses the reply.
Model output is never trusted to be well formed: parsing returns a
ParseResult (ParsedEvents | ParseFailure) and never raises.
"""

from __future__ import annotations

import json
import logging
import datetime as dt
from typing import Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..prompts import DATE_EXTRACTION_SYSTEM_PROMPT, DATE_EXTRACTION_USER_PROMPT
from .client import LLMClient

logger = logging.getLogger("syllabus_rag.llm")

EventType = Literal["exam", "assignment", "deadline", "quiz", "project", "holiday", "other"]
_EVENT_TYPES = {"exam", "assignment", "deadline", "quiz", "project", "holiday", "other"}


class ExtractedEvent(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    date: dt.date
    time: str = Field(default="09:00", pattern=r"^\d{1,2}:\d{2}$")
    event_type: EventType = Field(default="other", alias="eventType")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("time", mode="before")
    @classmethod
    def _default_time(cls, v: Any) -> Any:
        return v or "09:00"

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, v: Any) -> Any:
        return v or ""

    @field_validator("event_type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> str:
        v = str(v or "other").strip().lower()
        return v if v in _EVENT_TYPES else "other"


# ---------------------------------------------------------------------
# Parse result sum type
# ---------------------------------------------------------------------

class ParsedEvents(BaseModel):
    ok: Literal[True] = True
    events: List[ExtractedEvent] = Field(default_factory=list)
    dropped: int = 0


class ParseFailure(BaseModel):
    ok: Literal[False] = False
    reason: str
    raw: str = ""


ParseResult = Union[ParsedEvents, ParseFailure]


def parse_event_array(raw: str) -> ParseResult:
    """
    Parse a model reply expected to contain a JSON array of events.

    Tolerates surrounding prose and markdown fences by taking the span from
    the first ``[`` to the last ``]``. Elements that fail validation are
    dropped and counted.
    """
    if not raw:
        return ParseFailure(reason="empty_response")

    start = raw.find("[")
    end = raw.rfind("]")
    if start == -1 or end < start:
        return ParseFailure(reason="no_json_array", raw=raw[:500])

    try:
        items = json.loads(raw[start : end + 1])
    except json.JSONDecodeError:
        return ParseFailure(reason="invalid_json", raw=raw[:500])

    if not isinstance(items, list):
        return ParseFailure(reason="not_a_list", raw=raw[:500])

    events: List[ExtractedEvent] = []
    dropped = 0
    for item in items:
        if not isinstance(item, dict):
            dropped += 1
            continue
        try:
            events.append(ExtractedEvent.model_validate(item))
        except ValidationError:
            dropped += 1

    return ParsedEvents(events=events, dropped=dropped)


class DateExtractor:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def extract(self, text: str, class_label: str) -> List[ExtractedEvent]:
        """
        Extract dated events from syllabus text.

        Provider failures propagate; unparseable replies yield an empty list.
        """
        if not text or not text.strip():
            return []

        reply = await self._llm.chat(
            DATE_EXTRACTION_SYSTEM_PROMPT,
            [{
                "role": "user",
                "content": DATE_EXTRACTION_USER_PROMPT.format(
                    class_label=class_label, text=text
                ),
            }],
            temperature=0.1,
            max_tokens=4000,
        )

        result = parse_event_array(reply)
        if isinstance(result, ParseFailure):
            logger.warning("Could not parse extracted dates: %s", result.reason)
            return []

        if result.dropped:
            logger.warning("Dropped %d malformed extracted events", result.dropped)

        return result.events
