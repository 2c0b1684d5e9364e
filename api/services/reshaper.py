"""
Fan categorized facts out into the client envelope.

    [FactRecord, ...] -> {interests, importantDates, places, notes}

Each fact's value is appended to every list its category set names.
Unrecognized labels land in notes. No dedup here: the model path dedups
upstream and the rule path dedups per category before it gets this far.
"""
import logging
from typing import Iterable

from api.services.facts import ENVELOPE_FIELDS, NOTE, FactRecord, empty_envelope, normalize_category

logger = logging.getLogger(__name__)


def to_envelope(facts: Iterable[FactRecord]) -> dict[str, list[dict]]:
    """
    Build the {interests, importantDates, places, notes} envelope.

    Args:
        facts: Categorized facts in output order

    Returns:
        Envelope dict; every list present, possibly empty
    """
    envelope = empty_envelope()

    for fact in facts:
        value = (fact.value or "").strip()
        if not value:
            logger.debug(f"Skipping fact with empty value: {fact}")
            continue

        targets = []
        for label in fact.category_labels:
            category = normalize_category(label)
            if category is None:
                logger.debug(f"Unknown category '{label}', filing under notes")
                category = NOTE
            if category not in targets:
                targets.append(category)

        for category in targets:
            envelope[ENVELOPE_FIELDS[category]].append({"value": value})

    return envelope
