"""
Ollama Client for Local LLM inference.

Connects to a local Ollama server that classifies conversation text into
facts. Uses the chat API with a system prompt and JSON output mode.
"""
import asyncio
import logging
import httpx
from typing import Optional

from config.settings import settings

logger = logging.getLogger(__name__)


class OllamaError(Exception):
    """Error communicating with Ollama."""
    pass


class OllamaClient:
    """
    Client for the Ollama local LLM API.

    Provides async chat completions for fact extraction, one call per chunk.
    """

    MAX_RETRIES = 3
    RETRY_BACKOFF_BASE = 2  # Exponential backoff multiplier

    def __init__(
        self,
        host: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize Ollama client.

        Args:
            host: Ollama server URL (default from settings)
            model: Model name to use (default from settings)
            timeout: Request timeout in seconds (default from settings)
        """
        self.host = host or settings.ollama_host
        self.model = model or settings.ollama_model
        self.timeout = timeout or settings.ollama_timeout

    async def chat(
        self,
        system: str,
        user: str,
        json_mode: bool = True,
        temperature: float = 0.1,
        timeout: Optional[int] = None
    ) -> str:
        """
        Send a system + user message pair and return the reply text, with retry logic.

        Args:
            system: System instructions
            user: User text to classify
            json_mode: Ask Ollama for structured (JSON) output
            temperature: Sampling temperature (low for classification)
            timeout: Request timeout (defaults to instance timeout)

        Returns:
            The assistant message content

        Raises:
            OllamaError: If communication fails after retries
        """
        url = f"{self.host}/api/chat"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {
                "temperature": temperature,
            }
        }
        if json_mode:
            payload["format"] = "json"

        request_timeout = timeout or self.timeout
        last_error = None

        for attempt in range(self.MAX_RETRIES):
            try:
                async with httpx.AsyncClient(timeout=request_timeout) as client:
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    data = response.json()
                    return (data.get("message") or {}).get("content", "")

            except httpx.TimeoutException as e:
                last_error = OllamaError(f"Timeout connecting to Ollama: {e}")
                logger.warning(f"Ollama timeout (attempt {attempt + 1}/{self.MAX_RETRIES})")
            except httpx.ConnectError as e:
                last_error = OllamaError(f"Connection error to Ollama: {e}")
                logger.warning(f"Ollama connection error (attempt {attempt + 1}/{self.MAX_RETRIES})")
            except httpx.HTTPStatusError as e:
                last_error = OllamaError(f"HTTP error from Ollama: {e}")
                logger.warning(f"Ollama HTTP error (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}")
            except Exception as e:
                last_error = OllamaError(f"Error communicating with Ollama: {e}")
                logger.warning(f"Ollama error (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}")

            # Exponential backoff before retry
            if attempt < self.MAX_RETRIES - 1:
                wait_time = self.RETRY_BACKOFF_BASE ** attempt
                await asyncio.sleep(wait_time)

        raise last_error

    async def is_available(self) -> bool:
        """
        Check if Ollama server is available and has at least one model.

        Returns:
            True if Ollama is running with models pulled
        """
        try:
            async with httpx.AsyncClient(timeout=2.0) as client:
                response = await client.get(f"{self.host}/api/tags")
                if response.status_code != 200:
                    return False

                data = response.json()
                models = data.get("models", [])
                model_names = [m.get("name", "") for m in models]
                if not any(self.model.split(":")[0] in name for name in model_names):
                    logger.warning(f"Model {self.model} not found in Ollama. Available: {model_names}")
                return len(models) > 0

        except Exception as e:
            logger.debug(f"Ollama availability check failed: {e}")
            return False
