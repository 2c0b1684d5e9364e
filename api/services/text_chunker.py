"""
Sentence/clause chunking for model-backed extraction.

Small models tend to answer with a single fact per call, so long input is
cut into sentence- or clause-sized pieces and each piece is classified on
its own.

Chunking strategy:
- Split on sentence boundaries (. ! ? followed by whitespace, and newlines)
- Sentences over max_chars: split on commas, semicolons and conjunctions
- Pieces still over max_chars: split on word boundaries
- Re-merge neighbouring fragments under min_chars while the result fits
"""
import re

DEFAULT_MAX_CHARS = 180
DEFAULT_MIN_CHARS = 80

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")
# Keep the conjunction with the clause it introduces
_CLAUSE_SPLIT = re.compile(r"(?<=[,;])\s+|\s+(?=(?:and|but|so|or)\s)", re.IGNORECASE)


def split_sentences(text: str) -> list[str]:
    """Split text into trimmed, non-empty sentences."""
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s and s.strip()]


def split_by_words(text: str, max_chars: int) -> list[str]:
    """Split text on word boundaries into pieces of at most max_chars."""
    pieces = []
    current = ""
    for word in text.split():
        if current and len(current) + 1 + len(word) > max_chars:
            pieces.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        pieces.append(current)
    return pieces


def split_clauses(sentence: str, max_chars: int) -> list[str]:
    """Split an over-long sentence on commas, semicolons and conjunctions."""
    pieces = []
    for clause in _CLAUSE_SPLIT.split(sentence):
        clause = clause.strip()
        if not clause:
            continue
        if len(clause) > max_chars:
            pieces.extend(split_by_words(clause, max_chars))
        else:
            pieces.append(clause)
    return pieces


def merge_small(pieces: list[str], min_chars: int, max_chars: int) -> list[str]:
    """Join neighbouring pieces when either side is under min_chars and the join fits."""
    merged: list[str] = []
    for piece in pieces:
        if merged:
            last = merged[-1]
            small = len(last) < min_chars or len(piece) < min_chars
            if small and len(last) + 1 + len(piece) <= max_chars:
                merged[-1] = f"{last} {piece}"
                continue
        merged.append(piece)
    return merged


def chunk_text(
    text: str,
    max_chars: int = DEFAULT_MAX_CHARS,
    min_chars: int = DEFAULT_MIN_CHARS,
) -> list[str]:
    """
    Chunk text into sentence/clause-sized pieces.

    Args:
        text: Input text
        max_chars: Upper bound per chunk
        min_chars: Fragments shorter than this are merged into a neighbour

    Returns:
        List of chunks in input order (empty for blank text)
    """
    pieces: list[str] = []
    for sentence in split_sentences(text):
        if len(sentence) > max_chars:
            pieces.extend(split_clauses(sentence, max_chars))
        else:
            pieces.append(sentence)

    return merge_small(pieces, min_chars, max_chars)
