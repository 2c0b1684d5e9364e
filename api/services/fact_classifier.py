"""
Deterministic category classifier for extracted facts.

Re-derives a fact's category from its source text, independent of what the
model said. Small models routinely file "went to Tokyo for my birthday" under
interests; a fixed rule order is more consistent.

## Priority

1. **important_date**: date keywords (birthday, anniversary, deadline...),
   explicit dates ("April 5", "5th of April", "4/5", "2024-04-05").
   A bare month name only counts next to a date keyword.
2. **place**: relocation/visit phrasing ("went to", "lives in", "from",
   "works at").
3. **interest**: preference verbs ("likes", "loves", "enjoys", "plays",
   "favorite").
4. **note**: everything else.
"""
import re
import logging
from typing import Literal

from config.extraction_patterns import MONTHS

logger = logging.getLogger(__name__)

Category = Literal["important_date", "place", "interest", "note"]

# Keywords that make a fact a date on their own
DATE_KEYWORDS = {
    "birthday", "birth day", "bday", "b-day", "born on", "anniversary",
    "wedding day", "deadline", "due date", "due on", "holiday",
}

# Phrases that indicate a location
PLACE_PHRASES = {
    "went to", "go to", "going to", "visited", "visiting", "traveled to",
    "travelled to", "moved to", "moving to", "lives in", "live in",
    "living in", "lived in", "from", "works at", "work at", "working at",
    "born in", "grew up in", "based in", "trip to",
}

# Preference verbs that indicate an interest
INTEREST_VERBS = {
    "like", "likes", "liked", "love", "loves", "loved", "enjoy", "enjoys",
    "enjoyed", "plays", "play", "playing", "favorite", "favourite", "hobby",
    "hobbies", "into", "fan of", "passionate about",
}

_MONTH_PATTERN = "|".join(MONTHS + ("jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec"))

# Month + day number, or day number + "of" + month
_EXPLICIT_DATE = re.compile(
    rf"\b(?:{_MONTH_PATTERN})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?\b"
    rf"|\b\d{{1,2}}(?:st|nd|rd|th)?\s+of\s+(?:{_MONTH_PATTERN})\b"
)
_NUMERIC_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")


def _phrase_pattern(phrases: set[str]) -> re.Pattern:
    # Longest first so "fan of" wins over shorter overlaps
    ordered = sorted(phrases, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(p) for p in ordered) + r")\b")


_DATE_KEYWORD_RE = _phrase_pattern(DATE_KEYWORDS)
_PLACE_RE = _phrase_pattern(PLACE_PHRASES)
_INTEREST_RE = _phrase_pattern(INTEREST_VERBS)


def is_date_text(text: str) -> bool:
    """Check for an explicit date or a date keyword."""
    text_lower = text.lower()
    if _DATE_KEYWORD_RE.search(text_lower):
        return True
    if _NUMERIC_DATE.search(text_lower):
        return True
    return bool(_EXPLICIT_DATE.search(text_lower))


def classify_fact(source_text: str) -> Category:
    """
    Classify a fact's source text into a category.

    Args:
        source_text: The verbatim span the fact was taken from

    Returns:
        One of "important_date", "place", "interest", "note"
    """
    text_lower = source_text.lower()

    if is_date_text(text_lower):
        logger.debug(f"Date: '{source_text[:60]}'")
        return "important_date"

    if _PLACE_RE.search(text_lower):
        logger.debug(f"Place: '{source_text[:60]}'")
        return "place"

    if _INTEREST_RE.search(text_lower):
        logger.debug(f"Interest: '{source_text[:60]}'")
        return "interest"

    return "note"
