"""
Tests for api/services/text_chunker.py

Sentence and clause chunking ahead of model-backed extraction.
"""
import pytest

from api.services.text_chunker import (
    chunk_text,
    merge_small,
    split_by_words,
    split_clauses,
    split_sentences,
)


# =============================================================================
# split_sentences Tests
# =============================================================================

@pytest.mark.unit
class TestSplitSentences:
    """Tests for sentence splitting."""

    def test_splits_on_terminal_punctuation(self):
        result = split_sentences("I like pizza. Oh and I'm from Boston! Is it May?")
        assert result == ["I like pizza.", "Oh and I'm from Boston!", "Is it May?"]

    def test_splits_on_newlines(self):
        assert split_sentences("first line\n\nsecond line") == ["first line", "second line"]

    def test_blank_text(self):
        assert split_sentences("   ") == []


# =============================================================================
# Clause / word splitting Tests
# =============================================================================

@pytest.mark.unit
class TestSplitClauses:
    """Tests for splitting over-long sentences."""

    def test_splits_on_commas_and_conjunctions(self):
        sentence = "I went hiking in Colorado, then camped for a week and my birthday was on the last day"
        result = split_clauses(sentence, max_chars=60)
        assert result == [
            "I went hiking in Colorado,",
            "then camped for a week",
            "and my birthday was on the last day",
        ]

    def test_word_split_for_long_clause(self):
        result = split_by_words("one two three four five", max_chars=9)
        assert result == ["one two", "three", "four five"]
        assert all(len(piece) <= 9 for piece in result)


@pytest.mark.unit
class TestMergeSmall:
    """Tests for re-merging fragments."""

    def test_merges_small_neighbours(self):
        result = merge_small(["Hi.", "I like jazz."], min_chars=20, max_chars=100)
        assert result == ["Hi. I like jazz."]

    def test_respects_max_chars(self):
        result = merge_small(["a" * 10, "b" * 10], min_chars=20, max_chars=15)
        assert result == ["a" * 10, "b" * 10]


# =============================================================================
# chunk_text Tests
# =============================================================================

@pytest.mark.unit
class TestChunkText:
    """Tests for the full chunking pipeline."""

    def test_short_text_single_chunk(self):
        assert chunk_text("I like pizza.") == ["I like pizza."]

    def test_empty_text(self):
        assert chunk_text("") == []

    def test_chunks_respect_max_chars(self):
        text = " ".join(
            f"Sentence number {i} talks about a different hobby like chess, tennis and jazz."
            for i in range(20)
        )
        chunks = chunk_text(text, max_chars=120, min_chars=40)
        assert len(chunks) > 1
        assert all(len(c) <= 120 for c in chunks)

    def test_preserves_all_words_in_order(self):
        text = "I love sushi. I went to Tokyo last April. My birthday is May 3rd, and I play tennis."
        chunks = chunk_text(text, max_chars=40, min_chars=10)
        assert " ".join(chunks).split() == text.split()

    def test_separate_sentences_when_long_enough(self):
        text = "I like pizza. Oh and I'm from Boston. My birthday is May 3rd."
        chunks = chunk_text(text, max_chars=30, min_chars=5)
        assert chunks == ["I like pizza.", "Oh and I'm from Boston.", "My birthday is May 3rd."]
