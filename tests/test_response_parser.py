"""
Tests for api/services/response_parser.py

Model replies arrive wrapped in reasoning, fences and prose; parsing must
find the JSON without ever raising.
"""
import pytest

from api.services.response_parser import (
    ParseFailure,
    ParseFailureReason,
    ParseSuccess,
    coerce_facts,
    parse_model_reply,
    source_in_chunk,
    validate_fact,
)

pytestmark = pytest.mark.unit


class TestParseModelReply:
    """Tests for locating a JSON object in a reply."""

    def test_plain_json(self):
        result = parse_model_reply('{"facts": []}')
        assert isinstance(result, ParseSuccess)
        assert result.ok
        assert result.data == {"facts": []}

    def test_json_fence(self):
        reply = 'Here you go:\n```json\n{"facts": [{"type": "interest"}]}\n```\nDone.'
        result = parse_model_reply(reply)
        assert result.ok
        assert result.data["facts"] == [{"type": "interest"}]

    def test_think_block_removed(self):
        reply = '<think>The user mentions {sushi}. Hmm.</think>\n{"intent": "extract_facts"}'
        result = parse_model_reply(reply)
        assert result.ok
        assert result.data == {"intent": "extract_facts"}

    def test_prose_around_object(self):
        reply = 'Sure! The answer is {"facts": [{"value": "a}b"}]} and that is all.'
        result = parse_model_reply(reply)
        assert result.ok
        assert result.data["facts"][0]["value"] == "a}b"

    def test_bare_array_wrapped(self):
        result = parse_model_reply('[{"type": "place", "value": "Tokyo"}]')
        assert result.ok
        assert result.data == {"facts": [{"type": "place", "value": "Tokyo"}]}

    @pytest.mark.parametrize("reply", [None, "", "   ", "<think>only thinking</think>"])
    def test_empty_reply(self, reply):
        result = parse_model_reply(reply)
        assert isinstance(result, ParseFailure)
        assert not result.ok
        assert result.reason == ParseFailureReason.EMPTY_REPLY

    def test_no_json(self):
        result = parse_model_reply("I could not find any facts.")
        assert result.reason == ParseFailureReason.NO_JSON_OBJECT

    def test_invalid_json(self):
        result = parse_model_reply('{"facts": [ {"type": "interest", } ')
        assert result.reason == ParseFailureReason.INVALID_JSON

    def test_scalar_json(self):
        result = parse_model_reply("42")
        assert result.reason == ParseFailureReason.NOT_AN_OBJECT


class TestCoerceFacts:
    """Tests for finding the fact list inside a parsed reply."""

    def test_payload_facts(self):
        assert coerce_facts({"payload": {"facts": [1, 2]}}) == [1, 2]

    def test_top_level_facts(self):
        assert coerce_facts({"facts": [1]}) == [1]

    def test_entries_key(self):
        assert coerce_facts({"payload": {"entries": [3]}}) == [3]

    def test_single_object_coerced(self):
        fact = {"type": "interest", "value": "sushi"}
        assert coerce_facts({"payload": {"facts": fact}}) == [fact]

    def test_object_without_type_dropped(self):
        assert coerce_facts({"facts": {"value": "sushi"}}) == []

    def test_missing_or_wrong_type(self):
        assert coerce_facts({}) == []
        assert coerce_facts({"facts": "sushi"}) == []


class TestValidateFact:
    """Tests for per-fact validation against the source chunk."""

    CHUNK = "I love sushi and went to Tokyo last April"

    def test_valid_fact(self):
        record = {"type": "interest", "value": "likes sushi", "source_text": "love sushi"}
        fact = validate_fact(record, self.CHUNK)
        assert fact is not None
        assert fact.type == "interest"
        assert fact.value == "likes sushi"
        assert fact.source_text == "love sushi"

    def test_category_label_normalized(self):
        record = {"type": "Places", "value": "Tokyo", "source_text": "went to Tokyo"}
        assert validate_fact(record, self.CHUNK).type == "place"

    def test_unknown_type_kept(self):
        record = {"type": "food", "value": "sushi", "source_text": "sushi"}
        assert validate_fact(record, self.CHUNK).type == "food"

    def test_hallucinated_source_rejected(self):
        record = {"type": "place", "value": "Paris", "source_text": "moved to Paris"}
        assert validate_fact(record, self.CHUNK) is None

    def test_missing_source_rejected(self):
        record = {"type": "interest", "value": "sushi"}
        assert validate_fact(record, self.CHUNK) is None

    @pytest.mark.parametrize("record", [
        {"type": "interest", "value": "", "source_text": "sushi"},
        {"type": "interest", "value": "null", "source_text": "sushi"},
        {"type": None, "value": "sushi", "source_text": "sushi"},
        "sushi",
        ["sushi"],
    ])
    def test_invalid_records_rejected(self, record):
        assert validate_fact(record, self.CHUNK) is None

    def test_numeric_value_stringified(self):
        record = {"type": "note", "value": 2, "source_text": "Tokyo"}
        assert validate_fact(record, self.CHUNK).value == "2"

    def test_categories_read(self):
        record = {
            "type": "place",
            "value": "Tokyo trip",
            "source_text": "went to Tokyo last April",
            "categories": ["place", "important_date", 7, ""],
        }
        fact = validate_fact(record, self.CHUNK)
        assert fact.categories == ("place", "important_date")


class TestSourceInChunk:
    """Tests for the source-span check."""

    def test_ignores_case_and_whitespace(self):
        assert source_in_chunk("WENT  to\ntokyo", "I went to Tokyo")

    def test_strips_quotes(self):
        assert source_in_chunk('"went to Tokyo"', "I went to Tokyo")

    def test_absent(self):
        assert not source_in_chunk("Paris", "I went to Tokyo")
        assert not source_in_chunk("   ", "I went to Tokyo")
