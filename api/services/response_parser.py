"""
Parse and validate model replies for fact extraction.

Parsing is a pipeline that never raises:

    reply text -> parse_model_reply() -> ParseSuccess | ParseFailure
    ParseSuccess.data -> coerce_facts() -> list of raw records
    raw record -> validate_fact(record, chunk) -> FactRecord | None

Tolerated reply quirks:
- Reasoning before the JSON (including <think>...</think> blocks)
- Markdown code fences around the JSON
- A single fact object where an array was asked for
- Extra, undocumented fields (ignored)

Facts whose source_text is not found in the chunk that was sent are
dropped, which filters out invented facts.
"""
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from api.services.facts import FactRecord, normalize_category

logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE)
_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")
_WHITESPACE = re.compile(r"\s+")


class ParseFailureReason(str, Enum):
    """Why a reply could not be turned into a JSON object."""
    EMPTY_REPLY = "empty_reply"
    NO_JSON_OBJECT = "no_json_object"
    INVALID_JSON = "invalid_json"
    NOT_AN_OBJECT = "not_an_object"


@dataclass(frozen=True)
class ParseSuccess:
    data: dict

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ParseFailure:
    reason: ParseFailureReason
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


ParseResult = Union[ParseSuccess, ParseFailure]


def _balanced_object(text: str) -> Optional[str]:
    """Return the first balanced {...} span, skipping braces inside strings."""
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(text[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def _candidate_spans(text: str) -> list[str]:
    """Spans worth trying as JSON, most specific first."""
    spans = [text]

    fence = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    if fence:
        spans.append(fence.group(1))

    balanced = _balanced_object(text)
    if balanced:
        spans.append(balanced)

    # Greedy first-{ to last-} as the last resort
    first, last = text.find("{"), text.rfind("}")
    if 0 <= first < last:
        spans.append(text[first:last + 1])

    return spans


def parse_model_reply(text: Optional[str]) -> ParseResult:
    """
    Extract one JSON object from a model reply.

    Args:
        text: Raw reply text

    Returns:
        ParseSuccess with the object, or ParseFailure with a reason
    """
    if not text or not text.strip():
        return ParseFailure(ParseFailureReason.EMPTY_REPLY)

    cleaned = _THINK_BLOCK.sub("", text).strip()
    if not cleaned:
        return ParseFailure(ParseFailureReason.EMPTY_REPLY, "reply was only reasoning")

    saw_json_value = False
    for span in _candidate_spans(cleaned):
        try:
            data = json.loads(span.strip())
        except json.JSONDecodeError:
            continue

        if isinstance(data, dict):
            return ParseSuccess(data)
        if isinstance(data, list):
            # A bare fact array
            return ParseSuccess({"facts": data})
        saw_json_value = True

    if saw_json_value:
        return ParseFailure(ParseFailureReason.NOT_AN_OBJECT, cleaned[:200])
    if "{" not in cleaned:
        return ParseFailure(ParseFailureReason.NO_JSON_OBJECT, cleaned[:200])
    return ParseFailure(ParseFailureReason.INVALID_JSON, cleaned[:200])


def coerce_facts(data: dict) -> list:
    """
    Find the fact list in a parsed reply and coerce it to a list.

    Looks under payload.facts, then facts, then entries. A single object
    with both a type and a value becomes a one-element list; anything else
    becomes empty.
    """
    payload = data.get("payload")
    facts: Any = None
    if isinstance(payload, dict):
        facts = payload.get("facts", payload.get("entries"))
    if facts is None:
        facts = data.get("facts", data.get("entries"))

    if isinstance(facts, list):
        return facts
    if isinstance(facts, dict):
        if facts.get("type") and facts.get("value"):
            logger.debug("Coerced single fact object into a list")
            return [facts]
        logger.warning(f"Dropping fact object without type and value: {facts}")
    return []


def _text_field(record: dict, name: str) -> Optional[str]:
    value = record.get(name)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == "null":
        return None
    return value


def _squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip().lower()


def source_in_chunk(source_text: str, chunk: str) -> bool:
    """Check a source span appears verbatim (ignoring case and whitespace) in the chunk."""
    needle = _squash(source_text).strip("\"'")
    return bool(needle) and needle in _squash(chunk)


def validate_fact(record: Any, chunk: str) -> Optional[FactRecord]:
    """
    Validate one raw fact record against the chunk it was extracted from.

    Returns:
        FactRecord, or None if the record is rejected
    """
    if not isinstance(record, dict):
        logger.warning(f"Removing invalid fact (not an object): {record!r}")
        return None

    fact_type = _text_field(record, "type")
    value = _text_field(record, "value")
    if fact_type is None or value is None:
        logger.warning(f"Removing invalid fact (missing or null fields): {record}")
        return None

    source_text = _text_field(record, "source_text")
    if source_text is None or not source_in_chunk(source_text, chunk):
        logger.warning(f"Removing fact with unverifiable source: {value!r} <- {source_text!r}")
        return None

    categories = ()
    raw_categories = record.get("categories")
    if isinstance(raw_categories, list):
        categories = tuple(c for c in raw_categories if isinstance(c, str) and c.strip())

    # Known labels are normalized; unknown ones are kept for the reshaper to route
    return FactRecord(
        type=normalize_category(fact_type) or fact_type,
        value=value,
        source_text=source_text,
        categories=categories,
    )
