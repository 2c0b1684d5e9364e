"""
Model-backed fact extractor for Rapport.

Delegates classification to an external text-generation model and turns its
JSON reply into validated, deduplicated FactRecords.

Pipeline:
1. Chunk the text into sentence/clause pieces (optional)
2. One model call per chunk, in order, with the fixed system prompt
3. Parse each reply (tagged result, never raises) and validate each fact
   against the chunk it came from
4. Optionally re-derive each fact's category from its source text
5. Cross-chunk dedup by (category, normalized value), first occurrence wins

A chunk whose call or parse fails contributes no facts. Only when every
chunk fails does the request fail with ExtractionError.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from config.settings import settings
from api.services.extraction_prompt import EXTRACTION_SYSTEM_PROMPT
from api.services.fact_classifier import classify_fact
from api.services.facts import FactRecord, normalize_value
from api.services.response_parser import (
    ParseFailure,
    coerce_facts,
    parse_model_reply,
    validate_fact,
)
from api.services.text_chunker import chunk_text

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """The text could not be classified at all."""
    pass


class ChatClient(Protocol):
    """Anything that can answer a system + user message pair."""

    async def chat(self, system: str, user: str) -> str:
        ...


@dataclass
class ModelExtraction:
    """Result of one model-backed extraction request."""
    facts: list[FactRecord] = field(default_factory=list)
    intent: str = "extract_facts"
    confidence: float = 0.0
    needs_clarification: bool = False
    chunks_total: int = 0
    chunks_failed: int = 0

    def to_dict(self) -> dict:
        """Convert to the raw {intent, payload, confidence, ...} shape."""
        return {
            "intent": self.intent,
            "payload": {"facts": [f.to_dict() for f in self.facts]},
            "confidence": self.confidence,
            "needs_clarification": self.needs_clarification,
            "chunks_total": self.chunks_total,
            "chunks_failed": self.chunks_failed,
        }


@dataclass
class ChunkResult:
    facts: list[FactRecord]
    intent: Optional[str] = None
    confidence: Optional[float] = None
    needs_clarification: bool = False


def dedupe_facts(facts: list[FactRecord]) -> list[FactRecord]:
    """Drop facts whose (category, normalized value) was already seen."""
    seen = set()
    unique = []
    for fact in facts:
        key = (fact.category_labels, normalize_value(fact.value))
        if key in seen:
            logger.debug(f"Duplicate fact dropped: {fact.value}")
            continue
        seen.add(key)
        unique.append(fact)
    return unique


def reclassify(fact: FactRecord) -> FactRecord:
    """Replace the model's category with the rule-derived one."""
    category = classify_fact(fact.source_text or fact.value)
    if category != fact.type:
        logger.debug(f"Reclassified '{fact.value}': {fact.type} -> {category}")
    return FactRecord(
        type=category,
        value=fact.value,
        source_text=fact.source_text,
    )


class ModelFactExtractor:
    """
    Extracts facts by asking an external model, one chunk at a time.

    Key features:
    - Chunking keeps small models from answering with a single fact
    - Source-span check drops facts the model made up
    - Deterministic re-classification overrides shaky model categories
    """

    def __init__(
        self,
        client: ChatClient,
        chunking: Optional[bool] = None,
        reclassify_facts: Optional[bool] = None,
        max_chars: Optional[int] = None,
        min_chars: Optional[int] = None,
    ):
        self.client = client
        self.chunking = settings.chunking_enabled if chunking is None else chunking
        self.reclassify_facts = settings.reclassify_enabled if reclassify_facts is None else reclassify_facts
        self.max_chars = max_chars or settings.chunk_max_chars
        self.min_chars = min_chars or settings.chunk_min_chars

    def _chunks(self, text: str) -> list[str]:
        if not self.chunking:
            return [text]
        return chunk_text(text, max_chars=self.max_chars, min_chars=self.min_chars) or [text]

    async def _extract_chunk(self, chunk: str) -> Optional[ChunkResult]:
        """Classify one chunk. Returns None when the chunk fails."""
        try:
            reply = await self.client.chat(EXTRACTION_SYSTEM_PROMPT, chunk)
        except Exception as e:
            logger.warning(f"Model call failed for chunk '{chunk[:50]}': {e}")
            return None

        parsed = parse_model_reply(reply)
        if isinstance(parsed, ParseFailure):
            logger.warning(f"Unparseable model reply ({parsed.reason.value}): {parsed.detail[:100]}")
            return None

        raw_facts = coerce_facts(parsed.data)
        facts = [f for f in (validate_fact(r, chunk) for r in raw_facts) if f is not None]
        logger.debug(f"Chunk kept {len(facts)}/{len(raw_facts)} facts")

        confidence = parsed.data.get("confidence")
        return ChunkResult(
            facts=facts,
            intent=parsed.data.get("intent") if isinstance(parsed.data.get("intent"), str) else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
            needs_clarification=parsed.data.get("needs_clarification") is True,
        )

    async def extract(self, text: str) -> ModelExtraction:
        """
        Extract facts from text.

        Args:
            text: Non-empty input text

        Returns:
            ModelExtraction with validated, deduplicated facts

        Raises:
            ExtractionError: If every chunk failed
        """
        chunks = self._chunks(text)
        logger.info(f"Extracting facts from {len(chunks)} chunk(s)")

        result = ModelExtraction(chunks_total=len(chunks))
        all_facts: list[FactRecord] = []
        confidences = []

        # Chunk order decides which duplicate survives dedup
        for chunk in chunks:
            chunk_result = await self._extract_chunk(chunk)
            if chunk_result is None:
                result.chunks_failed += 1
                continue

            all_facts.extend(chunk_result.facts)
            if chunk_result.intent and result.intent == "extract_facts":
                result.intent = chunk_result.intent
            if chunk_result.confidence is not None:
                confidences.append(chunk_result.confidence)
            result.needs_clarification = result.needs_clarification or chunk_result.needs_clarification

        if chunks and result.chunks_failed == len(chunks):
            raise ExtractionError(f"All {len(chunks)} chunk(s) failed to extract")

        if self.reclassify_facts:
            all_facts = [reclassify(f) for f in all_facts]

        result.facts = dedupe_facts(all_facts)
        result.confidence = min(confidences) if confidences else 0.0

        logger.info(
            f"Model extraction: {len(result.facts)} facts "
            f"({result.chunks_failed}/{len(chunks)} chunks failed)"
        )
        return result
