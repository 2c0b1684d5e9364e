"""
Fact categories and result types shared by the extractors.

Categories are a closed set; "note" is the catch-all. The client-facing
envelope uses camelCase list names, one per category.
"""
from dataclasses import dataclass, field
from typing import Optional

INTEREST = "interest"
IMPORTANT_DATE = "important_date"
PLACE = "place"
NOTE = "note"

CATEGORIES = (INTEREST, IMPORTANT_DATE, PLACE, NOTE)

# Category -> envelope list name
ENVELOPE_FIELDS = {
    INTEREST: "interests",
    IMPORTANT_DATE: "importantDates",
    PLACE: "places",
    NOTE: "notes",
}

# Labels models (and older clients) use for the same categories
_CATEGORY_ALIASES = {
    "interest": INTEREST,
    "interests": INTEREST,
    "important_date": IMPORTANT_DATE,
    "importantdate": IMPORTANT_DATE,
    "importantdates": IMPORTANT_DATE,
    "important_dates": IMPORTANT_DATE,
    "date": IMPORTANT_DATE,
    "dates": IMPORTANT_DATE,
    "place": PLACE,
    "places": PLACE,
    "location": PLACE,
    "note": NOTE,
    "notes": NOTE,
}


def normalize_category(label: Optional[str]) -> Optional[str]:
    """Map a category label to a known category, or None if unrecognized."""
    if not isinstance(label, str):
        return None
    key = label.strip().lower().replace("-", "_").replace(" ", "_")
    return _CATEGORY_ALIASES.get(key)


def normalize_value(value: str) -> str:
    """Dedup key for a display value."""
    return value.strip().lower()


def empty_envelope() -> dict[str, list[dict]]:
    """Build the four empty lists every response carries."""
    return {name: [] for name in ENVELOPE_FIELDS.values()}


@dataclass
class FactRecord:
    """
    A single fact returned by the model-backed extractor.

    `type` is the label as the model (or the re-classifier) assigned it and may
    be unrecognized; `categories` holds every category the fact should be
    listed under (empty means just `type`).
    """
    type: str
    value: str
    source_text: str = ""
    categories: tuple[str, ...] = ()

    @property
    def category_labels(self) -> tuple[str, ...]:
        return self.categories or (self.type,)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        data = {
            "type": self.type,
            "value": self.value,
            "source_text": self.source_text,
        }
        if self.categories:
            data["categories"] = list(self.categories)
        return data


@dataclass
class ClassificationResult:
    """Per-text result of the deterministic extractor, in first-seen order."""
    interests: list[str] = field(default_factory=list)
    important_dates: list[str] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def values_for(self, category: str) -> list[str]:
        return {
            INTEREST: self.interests,
            IMPORTANT_DATE: self.important_dates,
            PLACE: self.places,
            NOTE: self.notes,
        }[category]

    def to_envelope(self) -> dict[str, list[dict]]:
        """Convert to the client-facing {interests, importantDates, places, notes} shape."""
        envelope = empty_envelope()
        for category, name in ENVELOPE_FIELDS.items():
            envelope[name] = [{"value": v} for v in self.values_for(category)]
        return envelope
