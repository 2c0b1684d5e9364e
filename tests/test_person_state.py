"""
Tests for api/services/person_state.py

People, messages and extracted items held by clients.
"""
import pytest

from api.services.person_state import (
    AppState,
    InfoItem,
    Speaker,
    add_message,
    add_person,
    delete_item,
    dedupe_items,
    find_person_by_name,
    get_message,
    get_person,
    load_state,
    merge_extraction,
    remove_person,
    save_state,
    select_person,
    update_item,
)

pytestmark = pytest.mark.unit


def _envelope(interests=(), dates=(), places=(), notes=()):
    return {
        "interests": [{"value": v} for v in interests],
        "importantDates": [{"value": v} for v in dates],
        "places": [{"value": v} for v in places],
        "notes": [{"value": v} for v in notes],
    }


@pytest.fixture
def state_with_sam():
    return add_person(AppState(), "Sam")


# =============================================================================
# People
# =============================================================================

class TestPeople:

    def test_add_person_selects_them(self):
        state = add_person(AppState(), "  Sam ")
        person = state.selected_person
        assert person is not None
        assert person.name == "Sam"
        assert person.interests == ()

    def test_add_person_does_not_mutate(self):
        empty = AppState()
        add_person(empty, "Sam")
        assert empty.people == ()

    def test_find_by_name_case_insensitive(self, state_with_sam):
        assert find_person_by_name(state_with_sam, "sam").name == "Sam"
        assert find_person_by_name(state_with_sam, "Alex") is None

    def test_remove_selected_person_selects_first_remaining(self):
        state = add_person(AppState(), "Sam")
        sam_id = state.selected_person_id
        state = add_person(state, "Alex")
        alex_id = state.selected_person_id

        state = remove_person(state, alex_id)
        assert state.selected_person_id == sam_id

        state = remove_person(state, sam_id)
        assert state.people == ()
        assert state.selected_person_id is None

    def test_remove_person_drops_their_messages(self, state_with_sam):
        state, message = add_message(state_with_sam, "hello")
        state = remove_person(state, message.person_id)
        assert get_message(state, message.id) is None

    def test_select_unknown_person(self, state_with_sam):
        with pytest.raises(ValueError):
            select_person(state_with_sam, "missing")

    def test_select_none_clears(self, state_with_sam):
        assert select_person(state_with_sam, None).selected_person is None


# =============================================================================
# Messages
# =============================================================================

class TestMessages:

    def test_add_message_for_selected_person(self, state_with_sam):
        state, message = add_message(state_with_sam, "I love sushi", Speaker.PERSON)

        assert message.person_id == state_with_sam.selected_person_id
        assert message.speaker == Speaker.PERSON
        assert message.timestamp > 0
        assert get_message(state, message.id) == message

    def test_add_message_accepts_speaker_string(self, state_with_sam):
        _, message = add_message(state_with_sam, "How was Tokyo?", "user")
        assert message.speaker == Speaker.USER

    def test_add_message_without_selection(self):
        state = AppState()
        new_state, message = add_message(state, "hello")
        assert message is None
        assert new_state is state


# =============================================================================
# Merging extractions
# =============================================================================

class TestMergeExtraction:

    def test_items_point_at_source_message(self, state_with_sam):
        state, message = add_message(state_with_sam, "I love sushi and went to Tokyo")
        state = merge_extraction(
            state, message.person_id, message.id,
            _envelope(interests=["sushi"], places=["Tokyo"], notes=["I love sushi and went to Tokyo"]),
        )

        person = get_person(state, message.person_id)
        assert [i.value for i in person.interests] == ["sushi"]
        assert [i.value for i in person.places] == ["Tokyo"]
        assert person.important_dates == ()
        assert all(i.message_id == message.id for i in person.interests + person.places + person.notes)

    def test_same_fact_twice_keeps_one_pointing_at_newer_message(self, state_with_sam):
        state, first = add_message(state_with_sam, "She likes sushi")
        state = merge_extraction(state, first.person_id, first.id, _envelope(interests=["likes sushi", "jazz"]))

        state, second = add_message(state, "Again: likes sushi")
        state = merge_extraction(state, second.person_id, second.id, _envelope(interests=["likes sushi"]))

        person = get_person(state, first.person_id)
        sushi = [i for i in person.interests if i.value == "likes sushi"]
        assert len(sushi) == 1
        assert sushi[0].message_id == second.id
        # Position of the first insertion is kept
        assert [i.value for i in person.interests] == ["likes sushi", "jazz"]
        # Both source messages are still in the log
        assert get_message(state, first.id) is not None
        assert get_message(state, second.id).text == "Again: likes sushi"

    def test_malformed_entries_ignored(self, state_with_sam):
        person_id = state_with_sam.selected_person_id
        envelope = {"interests": [{"value": ""}, "sushi", {"value": "jazz"}], "places": None}
        state = merge_extraction(state_with_sam, person_id, "m-1", envelope)
        assert [i.value for i in get_person(state, person_id).interests] == ["jazz"]

    def test_unknown_person_unchanged(self, state_with_sam):
        state = merge_extraction(state_with_sam, "missing", "m-1", _envelope(interests=["jazz"]))
        assert state is state_with_sam

    def test_dedupe_items(self):
        items = (InfoItem("1", "a", "m1"), InfoItem("2", "b", "m1"), InfoItem("3", "a", "m2"))
        assert dedupe_items(items) == (InfoItem("3", "a", "m2"), InfoItem("2", "b", "m1"))


# =============================================================================
# Editing items
# =============================================================================

class TestEditItems:

    @pytest.fixture
    def state_with_items(self, state_with_sam):
        person_id = state_with_sam.selected_person_id
        return merge_extraction(state_with_sam, person_id, "m-1", _envelope(interests=["sushi", "jazz"]))

    def test_update_item(self, state_with_items):
        person = state_with_items.selected_person
        item = person.interests[0]

        state = update_item(state_with_items, person.id, item.id, "interests", "omakase")

        assert [i.value for i in state.selected_person.interests] == ["omakase", "jazz"]
        assert state.selected_person.interests[0].message_id == "m-1"
        # Original untouched
        assert state_with_items.selected_person.interests[0].value == "sushi"

    def test_delete_item(self, state_with_items):
        person = state_with_items.selected_person
        state = delete_item(state_with_items, person.id, person.interests[1].id, "interests")
        assert [i.value for i in state.selected_person.interests] == ["sushi"]

    def test_bad_category(self, state_with_items):
        person = state_with_items.selected_person
        with pytest.raises(ValueError):
            delete_item(state_with_items, person.id, "x", "hobbies")


# =============================================================================
# Persistence
# =============================================================================

class TestPersistence:

    def test_missing_file_gives_empty_state(self, tmp_path):
        assert load_state(tmp_path / "nope.json") == AppState()

    def test_save_and_load(self, tmp_path, state_with_sam):
        state, message = add_message(state_with_sam, "My birthday is May 3rd")
        state = merge_extraction(state, message.person_id, message.id, _envelope(dates=["May 3rd"]))

        path = tmp_path / "nested" / "state.json"
        save_state(state, path)

        assert load_state(path) == state
