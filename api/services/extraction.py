"""
Fact extraction service for Rapport.

Single entry point the routes call. Picks the configured backend:
- "rules": deterministic extractor, no network
- "ollama" / "anthropic": model-backed extractor, reshaped into the envelope

With fallback_to_rules enabled, a failed model request is answered by the
rule-based extractor instead of failing.
"""
import logging
from typing import Optional

from config.settings import settings
from api.services.model_extractor import (
    ChatClient,
    ExtractionError,
    ModelExtraction,
    ModelFactExtractor,
)
from api.services.reshaper import to_envelope
from api.services.rule_extractor import extract_with_rules

logger = logging.getLogger(__name__)

BACKENDS = ("ollama", "anthropic", "rules")


def build_chat_client(backend: str) -> ChatClient:
    """Create the model client for a backend name."""
    if backend == "ollama":
        from api.services.ollama_client import OllamaClient
        return OllamaClient()
    if backend == "anthropic":
        from api.services.claude_client import ClaudeClient
        return ClaudeClient()
    raise ValueError(f"No chat client for backend: {backend}")


class FactExtractionService:
    """Classifies text into the four-list envelope using the configured backend."""

    def __init__(
        self,
        backend: Optional[str] = None,
        client: Optional[ChatClient] = None,
        fallback_to_rules: Optional[bool] = None,
    ):
        self.backend = (backend or settings.extraction_backend).lower()
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown extraction backend '{self.backend}'. Use one of {BACKENDS}")

        self.fallback_to_rules = (
            settings.fallback_to_rules if fallback_to_rules is None else fallback_to_rules
        )
        self._client = client
        self._model_extractor: Optional[ModelFactExtractor] = None

    @property
    def client(self) -> ChatClient:
        """Lazy-load the model client."""
        if self._client is None:
            self._client = build_chat_client(self.backend)
        return self._client

    @property
    def model_extractor(self) -> ModelFactExtractor:
        if self._model_extractor is None:
            self._model_extractor = ModelFactExtractor(self.client)
        return self._model_extractor

    async def extract_raw(self, text: str) -> ModelExtraction:
        """
        Run the model-backed extractor and return its intermediate result.

        Raises:
            ExtractionError: If the backend is "rules" or the model path fails
        """
        if self.backend == "rules":
            raise ExtractionError("Raw model output is not available with the rules backend")
        return await self.model_extractor.extract(text)

    async def extract(self, text: str) -> dict[str, list[dict]]:
        """
        Classify text into {interests, importantDates, places, notes}.

        Args:
            text: Non-empty input text (validated by the caller)

        Returns:
            Envelope dict

        Raises:
            ExtractionError: If the model path fails and fallback is off
        """
        if self.backend == "rules":
            return extract_with_rules(text).to_envelope()

        try:
            extraction = await self.model_extractor.extract(text)
        except ExtractionError as e:
            if not self.fallback_to_rules:
                raise
            logger.warning(f"Model extraction failed, using rule-based fallback: {e}")
            return extract_with_rules(text).to_envelope()

        return to_envelope(extraction.facts)


_extraction_service: Optional[FactExtractionService] = None


def get_extraction_service() -> FactExtractionService:
    """Get or create the singleton FactExtractionService."""
    global _extraction_service
    if _extraction_service is None:
        _extraction_service = FactExtractionService()
    return _extraction_service


def reset_extraction_service() -> None:
    """Reset the singleton (for testing)."""
    global _extraction_service
    _extraction_service = None
