#!/usr/bin/env python3
"""
Track conversations with people from the command line.

Keeps people, messages and extracted items in a local JSON state file and
sends each logged message to a running Rapport server for classification.

Examples:
    python scripts/track.py add-person Sam
    python scripts/track.py say "I love sushi and went to Tokyo last April"
    python scripts/track.py say "How was the trip?" --speaker user
    python scripts/track.py show Sam
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import logging

import httpx

from api.services.person_state import (
    ITEM_LISTS,
    AppState,
    Speaker,
    add_message,
    add_person,
    find_person_by_name,
    get_message,
    load_state,
    merge_extraction,
    remove_person,
    save_state,
    select_person,
)

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = Path("./data/rapport_state.json")
DEFAULT_SERVER = "http://localhost:5000"

LIST_TITLES = {
    "interests": "Interests",
    "important_dates": "Important dates",
    "places": "Places",
    "notes": "Notes",
}


def request_extraction(server: str, text: str, message_id: str, timeout: float = 120.0) -> dict:
    """
    POST text to the server's /extract endpoint.

    Returns:
        The four-list envelope

    Raises:
        httpx.HTTPError: If the request fails or the server answers with an error
    """
    response = httpx.post(
        f"{server.rstrip('/')}/extract",
        json={"text": text, "messageId": message_id},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()


def _require_person(state: AppState, name: str):
    person = find_person_by_name(state, name)
    if person is None:
        logger.error(f"No person named '{name}'")
    return person


def cmd_add_person(state: AppState, args) -> AppState:
    if find_person_by_name(state, args.name):
        logger.error(f"'{args.name}' is already tracked")
        return state
    state = add_person(state, args.name)
    print(f"Added and selected {args.name}")
    return state


def cmd_remove_person(state: AppState, args) -> AppState:
    person = _require_person(state, args.name)
    if person is None:
        return state
    state = remove_person(state, person.id)
    selected = state.selected_person
    print(f"Removed {person.name}. Selected: {selected.name if selected else 'nobody'}")
    return state


def cmd_select(state: AppState, args) -> AppState:
    person = _require_person(state, args.name)
    if person is None:
        return state
    print(f"Selected {person.name}")
    return select_person(state, person.id)


def cmd_say(state: AppState, args) -> AppState:
    state, message = add_message(state, args.text, Speaker(args.speaker))
    if message is None:
        logger.error("No person selected. Use add-person or select first.")
        return state

    try:
        envelope = request_extraction(args.server, message.text, message.id)
    except httpx.HTTPError as e:
        # The message stays logged; only its items are missing
        logger.error(f"Extraction failed: {e}")
        return state

    state = merge_extraction(state, message.person_id, message.id, envelope)
    counts = ", ".join(f"{len(envelope.get(name) or [])} {name}" for name in ITEM_LISTS.values())
    print(f"Logged message ({counts})")
    return state


def cmd_show(state: AppState, args) -> AppState:
    person = _require_person(state, args.name) if args.name else state.selected_person
    if person is None:
        if not args.name:
            print("No person selected.")
        return state

    print(f"== {person.name} ==")
    for category, title in LIST_TITLES.items():
        items = person.items(category)
        print(f"{title} ({len(items)})")
        for item in items:
            message = get_message(state, item.message_id)
            source = f'  <- "{message.text}"' if message else ""
            print(f"  - {item.value}{source}")
    return state


def main(argv=None):
    parser = argparse.ArgumentParser(description="Track what people tell you")
    parser.add_argument('--state', type=Path, default=DEFAULT_STATE_FILE,
                        help=f'State file (default: {DEFAULT_STATE_FILE})')
    parser.add_argument('--server', default=DEFAULT_SERVER,
                        help=f'Rapport server URL (default: {DEFAULT_SERVER})')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('add-person', help='Track a new person and select them')
    p.add_argument('name')
    p.set_defaults(func=cmd_add_person)

    p = subparsers.add_parser('remove-person', help='Stop tracking a person')
    p.add_argument('name')
    p.set_defaults(func=cmd_remove_person)

    p = subparsers.add_parser('select', help='Select the person messages are logged for')
    p.add_argument('name')
    p.set_defaults(func=cmd_select)

    p = subparsers.add_parser('say', help='Log a message and extract items from it')
    p.add_argument('text')
    p.add_argument('--speaker', choices=[s.value for s in Speaker], default=Speaker.PERSON.value,
                   help='Who said it (default: person)')
    p.set_defaults(func=cmd_say)

    p = subparsers.add_parser('show', help="Show a person's items and their source messages")
    p.add_argument('name', nargs='?')
    p.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)

    state = load_state(args.state)
    new_state = args.func(state, args)
    if new_state is not state:
        save_state(new_state, args.state)
    return 0


if __name__ == '__main__':
    sys.exit(main())
