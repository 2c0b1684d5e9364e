"""
Rule-based fact extractor for Rapport.

Classifies free text into interests, important dates, places and notes using
only local regex and keyword matching. Deterministic and side-effect free, so
it doubles as the offline backend and as a fallback when the model is down.

Pipeline (per category, notes excluded):
1. Capturing regexes over the original-case text (first group = candidate)
2. Clean candidates: trailing punctuation, whitespace runs
3. Word-boundary keyword scan over the lowercased text (title-cased hits)
4. Merge into an insertion-ordered map keyed by lowercased value
5. Drop generic filler words (category stoplist)
6. Substring dedup: the shortest distinguishing value survives

Notes always hold the whole input as a single item.
"""
import logging
import re
from typing import Iterable

from api.services.facts import (
    ClassificationResult,
    IMPORTANT_DATE,
    INTEREST,
    PLACE,
)
from config.extraction_patterns import (
    DATE_KEYWORDS,
    DATE_PATTERNS,
    DATE_STOPLIST,
    INTEREST_KEYWORDS,
    INTEREST_PATTERNS,
    INTEREST_STOPLIST,
    PLACE_KEYWORDS,
    PLACE_PATTERNS,
    PLACE_STOPLIST,
)

logger = logging.getLogger(__name__)

_TRAILING_PUNCT = re.compile(r"[,;.!?\s]+$")
_WHITESPACE = re.compile(r"\s+")


def _compile_keyword(keyword: str) -> re.Pattern:
    # Multi-word keywords tolerate any run of whitespace between words
    words = keyword.split()
    return re.compile(r"\b" + r"\s+".join(re.escape(w) for w in words) + r"\b")


class CategoryRules:
    """Compiled patterns, keywords and stoplist for one category."""

    def __init__(
        self,
        category: str,
        patterns: Iterable[str],
        keywords: Iterable[str],
        stoplist: Iterable[str],
    ):
        self.category = category
        self.patterns = [re.compile(p) for p in patterns]
        self.keywords = [(kw, _compile_keyword(kw)) for kw in keywords]
        self.stoplist = {s.lower() for s in stoplist}


CATEGORY_RULES = (
    CategoryRules(INTEREST, INTEREST_PATTERNS, INTEREST_KEYWORDS, INTEREST_STOPLIST),
    CategoryRules(IMPORTANT_DATE, DATE_PATTERNS, DATE_KEYWORDS, DATE_STOPLIST),
    CategoryRules(PLACE, PLACE_PATTERNS, PLACE_KEYWORDS, PLACE_STOPLIST),
)


def clean_value(value: str) -> str:
    """
    Normalize a candidate for display.

    Strips trailing punctuation (,;.!?), collapses internal whitespace and
    trims. Idempotent: clean_value(clean_value(x)) == clean_value(x).
    """
    value = _WHITESPACE.sub(" ", value).strip()
    return _TRAILING_PUNCT.sub("", value).strip()


def title_case(value: str) -> str:
    """Capitalize the first letter of each word, leaving the rest as-is."""
    return " ".join(w[:1].upper() + w[1:] for w in value.split())


def find_pattern_candidates(text: str, patterns: Iterable[re.Pattern]) -> list[str]:
    """Run each pattern in order over the original-case text."""
    candidates = []
    for pattern in patterns:
        for match in pattern.finditer(text):
            raw = match.group(1)
            if not raw or len(raw.strip()) <= 1:
                continue
            cleaned = clean_value(raw)
            if len(cleaned) > 1:
                candidates.append(cleaned)
    return candidates


def find_keyword_candidates(text: str, keywords: Iterable[tuple[str, re.Pattern]]) -> list[str]:
    """Find whole-word keyword hits, title-cased, in order of appearance."""
    lowered = text.lower()
    hits = []
    for keyword, pattern in keywords:
        match = pattern.search(lowered)
        if match:
            hits.append((match.start(), title_case(keyword)))
    hits.sort(key=lambda h: h[0])
    return [value for _, value in hits]


def merge_candidates(*groups: Iterable[str]) -> dict[str, str]:
    """
    Merge candidate groups into an ordered map keyed by lowercased value.

    Earlier groups win collisions, so regex phrasing beats keyword phrasing.
    """
    merged: dict[str, str] = {}
    for group in groups:
        for value in group:
            key = value.lower()
            if key not in merged:
                merged[key] = value
    return merged


def filter_generic(candidates: dict[str, str], stoplist: set[str]) -> dict[str, str]:
    """Drop candidates that are empty or exactly a generic filler word."""
    return {
        key: value for key, value in candidates.items()
        if key.strip() and key not in stoplist
    }


def dedupe_substrings(values: list[str]) -> list[str]:
    """
    Collapse values that contain an already-kept shorter value.

    Candidates are visited shortest first; one is kept only if no kept
    value's lowercased form is a substring of (or equal to) its own. The
    survivors keep their original relative order.
    """
    kept_keys: list[str] = []
    kept: set[int] = set()
    for index in sorted(range(len(values)), key=lambda i: len(values[i])):
        key = values[index].lower()
        if any(k in key for k in kept_keys):
            logger.debug(f"Substring dedup dropped: {values[index]}")
            continue
        kept_keys.append(key)
        kept.add(index)
    return [v for i, v in enumerate(values) if i in kept]


def extract_category(text: str, rules: CategoryRules) -> list[str]:
    """Run the full candidate pipeline for one category."""
    from_patterns = find_pattern_candidates(text, rules.patterns)
    from_keywords = find_keyword_candidates(text, rules.keywords)
    merged = merge_candidates(from_patterns, from_keywords)
    filtered = filter_generic(merged, rules.stoplist)
    return dedupe_substrings(list(filtered.values()))


def extract_with_rules(text: str) -> ClassificationResult:
    """
    Classify text with the deterministic pipeline.

    Callers must reject empty text first.

    Args:
        text: Raw input text (any case, any length)

    Returns:
        ClassificationResult with notes holding the original text
    """
    result = ClassificationResult(notes=[text])
    for rules in CATEGORY_RULES:
        result.values_for(rules.category).extend(extract_category(text, rules))

    logger.info(
        f"Rule extraction: {len(result.interests)} interests, "
        f"{len(result.important_dates)} dates, {len(result.places)} places"
    )
    return result
