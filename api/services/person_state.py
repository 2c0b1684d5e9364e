"""
Conversation state store for Rapport clients.

Holds people, the messages logged for them, and the items extracted from
those messages. Items reference their source message by ID instead of
copying its text.

All state is immutable; every update is a function that takes the current
AppState and returns a new one:

    state = add_person(AppState(), "Sam")
    state, message = add_message(state, "I love sushi", Speaker.PERSON)
    state = merge_extraction(state, message.person_id, message.id, envelope)

The server never holds this state; clients (see scripts/track.py) keep it
and persist it with save_state/load_state.
"""
import json
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class Speaker(str, Enum):
    """Who said a message."""
    USER = "user"      # The person using the app
    PERSON = "person"  # The person being tracked


# Person list attribute -> envelope list name
ITEM_LISTS = {
    "interests": "interests",
    "important_dates": "importantDates",
    "places": "places",
    "notes": "notes",
}


def _generate_id() -> str:
    return str(uuid.uuid4())


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Message:
    """A logged conversation message; the source every item points back to."""
    id: str
    person_id: str
    text: str
    speaker: Speaker
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "person_id": self.person_id,
            "text": self.text,
            "speaker": self.speaker.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            id=data["id"],
            person_id=data["person_id"],
            text=data["text"],
            speaker=Speaker(data.get("speaker", Speaker.PERSON.value)),
            timestamp=int(data.get("timestamp", 0)),
        )


@dataclass(frozen=True)
class InfoItem:
    """An extracted value plus the message it came from."""
    id: str
    value: str
    message_id: str

    def to_dict(self) -> dict:
        return {"id": self.id, "value": self.value, "message_id": self.message_id}

    @classmethod
    def from_dict(cls, data: dict) -> "InfoItem":
        return cls(id=data["id"], value=data["value"], message_id=data["message_id"])


@dataclass(frozen=True)
class Person:
    """A tracked person and everything extracted about them."""
    id: str
    name: str
    interests: tuple[InfoItem, ...] = ()
    important_dates: tuple[InfoItem, ...] = ()
    places: tuple[InfoItem, ...] = ()
    notes: tuple[InfoItem, ...] = ()

    def items(self, category: str) -> tuple[InfoItem, ...]:
        _check_category(category)
        return getattr(self, category)

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name}
        for category in ITEM_LISTS:
            data[category] = [item.to_dict() for item in getattr(self, category)]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Person":
        lists = {
            category: tuple(InfoItem.from_dict(i) for i in data.get(category, []))
            for category in ITEM_LISTS
        }
        return cls(id=data["id"], name=data["name"], **lists)


@dataclass(frozen=True)
class AppState:
    """Everything a client tracks."""
    people: tuple[Person, ...] = ()
    messages: tuple[Message, ...] = ()
    selected_person_id: Optional[str] = None

    @property
    def selected_person(self) -> Optional[Person]:
        return get_person(self, self.selected_person_id) if self.selected_person_id else None

    def to_dict(self) -> dict:
        return {
            "people": [p.to_dict() for p in self.people],
            "messages": [m.to_dict() for m in self.messages],
            "selected_person_id": self.selected_person_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppState":
        return cls(
            people=tuple(Person.from_dict(p) for p in data.get("people", [])),
            messages=tuple(Message.from_dict(m) for m in data.get("messages", [])),
            selected_person_id=data.get("selected_person_id"),
        )


def _check_category(category: str) -> None:
    if category not in ITEM_LISTS:
        raise ValueError(f"Unknown item list: {category}")


def _replace_person(state: AppState, person_id: str, **changes) -> AppState:
    people = tuple(
        replace(p, **changes) if p.id == person_id else p
        for p in state.people
    )
    return replace(state, people=people)


def get_person(state: AppState, person_id: str) -> Optional[Person]:
    """Find a person by ID."""
    return next((p for p in state.people if p.id == person_id), None)


def find_person_by_name(state: AppState, name: str) -> Optional[Person]:
    """Find a person by name (case-insensitive)."""
    wanted = name.strip().lower()
    return next((p for p in state.people if p.name.lower() == wanted), None)


def get_message(state: AppState, message_id: str) -> Optional[Message]:
    """Find a message by ID."""
    return next((m for m in state.messages if m.id == message_id), None)


def add_person(state: AppState, name: str) -> AppState:
    """Add a person and select them."""
    person = Person(id=_generate_id(), name=name.strip())
    return replace(state, people=state.people + (person,), selected_person_id=person.id)


def remove_person(state: AppState, person_id: str) -> AppState:
    """
    Remove a person and their messages.

    If the removed person was selected, the first remaining person (or
    nobody) becomes selected.
    """
    people = tuple(p for p in state.people if p.id != person_id)
    messages = tuple(m for m in state.messages if m.person_id != person_id)

    selected = state.selected_person_id
    if selected == person_id:
        selected = people[0].id if people else None

    return AppState(people=people, messages=messages, selected_person_id=selected)


def select_person(state: AppState, person_id: Optional[str]) -> AppState:
    """Change the selected person (None clears the selection)."""
    if person_id is not None and get_person(state, person_id) is None:
        raise ValueError(f"No person with id {person_id}")
    return replace(state, selected_person_id=person_id)


def add_message(
    state: AppState,
    text: str,
    speaker: Speaker = Speaker.PERSON,
) -> tuple[AppState, Optional[Message]]:
    """
    Log a message for the selected person.

    Returns:
        (new state, message); state unchanged and message None without a selection
    """
    if not state.selected_person_id:
        return state, None

    message = Message(
        id=_generate_id(),
        person_id=state.selected_person_id,
        text=text,
        speaker=Speaker(speaker),
        timestamp=_now_ms(),
    )
    return replace(state, messages=state.messages + (message,)), message


def dedupe_items(items: tuple[InfoItem, ...]) -> tuple[InfoItem, ...]:
    """
    Deduplicate items by value.

    A later item with the same value replaces the earlier one but keeps the
    earlier one's position.
    """
    seen: dict[str, InfoItem] = {}
    for item in items:
        seen[item.value] = item
    return tuple(seen.values())


def merge_extraction(
    state: AppState,
    person_id: str,
    message_id: str,
    envelope: dict,
) -> AppState:
    """
    Merge an /extract response into a person's item lists.

    Each value becomes an InfoItem pointing at message_id. Lists are
    deduplicated by value, newest item winning.
    """
    person = get_person(state, person_id)
    if person is None:
        logger.warning(f"Dropping extraction for unknown person {person_id}")
        return state

    changes = {}
    for category, field_name in ITEM_LISTS.items():
        new_items = tuple(
            InfoItem(id=_generate_id(), value=entry["value"], message_id=message_id)
            for entry in envelope.get(field_name) or []
            if isinstance(entry, dict) and entry.get("value")
        )
        changes[category] = dedupe_items(getattr(person, category) + new_items)

    return _replace_person(state, person_id, **changes)


def update_item(
    state: AppState,
    person_id: str,
    item_id: str,
    category: str,
    new_value: str,
) -> AppState:
    """Change the value of one item."""
    _check_category(category)
    person = get_person(state, person_id)
    if person is None:
        return state

    items = tuple(
        replace(item, value=new_value) if item.id == item_id else item
        for item in getattr(person, category)
    )
    return _replace_person(state, person_id, **{category: items})


def delete_item(state: AppState, person_id: str, item_id: str, category: str) -> AppState:
    """Remove one item."""
    _check_category(category)
    person = get_person(state, person_id)
    if person is None:
        return state

    items = tuple(item for item in getattr(person, category) if item.id != item_id)
    return _replace_person(state, person_id, **{category: items})


def load_state(path: Path) -> AppState:
    """Load state from a JSON file (empty state if the file is missing)."""
    path = Path(path)
    if not path.exists():
        return AppState()
    with open(path, "r", encoding="utf-8") as f:
        return AppState.from_dict(json.load(f))


def save_state(state: AppState, path: Path) -> None:
    """Write state to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(state.to_dict(), f, indent=2)
