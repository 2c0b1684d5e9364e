"""
Claude client for fact extraction.

Alternative to the local Ollama model: sends the same system prompt and text
to the Anthropic Messages API.

NOTE: anthropic library is imported lazily to speed up test collection.
"""
import logging
from typing import Optional, Any, TYPE_CHECKING

from config.settings import settings

if TYPE_CHECKING:
    import anthropic

logger = logging.getLogger(__name__)


class ClaudeError(Exception):
    """Error communicating with the Anthropic API."""
    pass


class ClaudeClient:
    """Async chat wrapper around the Anthropic Messages API."""

    MAX_RETRIES = 2  # handled by the SDK with backoff

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to settings)
            model: Model name (defaults to settings)
            timeout: Per-request timeout in seconds (defaults to settings)
        """
        # Use provided key, but only fall back to settings if not explicitly passed
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.timeout = timeout or settings.anthropic_timeout
        self._client: Any = None

    def _validate_api_key(self):
        """Validate that API key is configured."""
        if not self.api_key or not self.api_key.strip():
            raise ClaudeError(
                "Anthropic API key not configured. "
                "Please set ANTHROPIC_API_KEY in your .env file."
            )

    @property
    def client(self) -> "anthropic.AsyncAnthropic":
        """Lazy-load the Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.MAX_RETRIES,
            )
        return self._client

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def chat(self, system: str, user: str, max_tokens: int = 2048) -> str:
        """
        Send a system prompt plus user text and return the reply text.

        Raises:
            ClaudeError: If the key is missing or the API call fails
        """
        self._validate_api_key()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except Exception as e:
            logger.warning(f"Claude request failed: {e}")
            raise ClaudeError(f"Error communicating with Claude: {e}") from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
