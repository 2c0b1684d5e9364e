"""
Rapport Configuration Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server (port 5000 is what the web client posts to)
    port: int = Field(default=5000, alias="RAPPORT_PORT")
    host: str = Field(default="0.0.0.0", alias="RAPPORT_HOST")

    cors_origins_raw: str = Field(
        default="*",
        alias="RAPPORT_CORS_ORIGINS",
        description="Allowed CORS origins (comma-separated, '*' for any)"
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated origins into list."""
        if not self.cors_origins_raw:
            return ["*"]
        return [x.strip() for x in self.cors_origins_raw.split(",") if x.strip()]

    # ==========================================================================
    # EXTRACTION BACKEND
    # ==========================================================================
    # "ollama"    - local model via the Ollama chat API (default)
    # "anthropic" - Claude via the Messages API
    # "rules"     - deterministic regex/keyword extractor, no network calls
    # ==========================================================================

    extraction_backend: str = Field(
        default="ollama",
        alias="RAPPORT_EXTRACTION_BACKEND",
        description="Which extractor classifies text: ollama, anthropic or rules"
    )
    fallback_to_rules: bool = Field(
        default=False,
        alias="RAPPORT_FALLBACK_TO_RULES",
        description="Answer with the rule-based extractor when the model path fails"
    )

    # Local LLM (Ollama)
    ollama_host: str = Field(default="http://localhost:11434", alias="OLLAMA_HOST")
    ollama_model: str = Field(default="deepseek-r1:1.5b", alias="OLLAMA_MODEL")
    ollama_timeout: int = Field(default=45, alias="OLLAMA_TIMEOUT")  # per chunk

    # API Keys (no prefix - standard env var names)
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(default="claude-haiku-4-5", alias="RAPPORT_ANTHROPIC_MODEL")
    anthropic_timeout: int = Field(default=30, alias="RAPPORT_ANTHROPIC_TIMEOUT")

    # Chunking (characters, not tokens)
    chunking_enabled: bool = Field(default=True, alias="RAPPORT_CHUNKING")
    chunk_max_chars: int = 180
    chunk_min_chars: int = 80

    # Re-derive each fact's category from its source text after the model answers
    reclassify_enabled: bool = Field(default=True, alias="RAPPORT_RECLASSIFY")

    # Uploads
    max_upload_bytes: int = Field(
        default=8 * 1024 * 1024,
        alias="RAPPORT_MAX_UPLOAD_BYTES",
        description="Largest accepted upload (bytes)"
    )
    max_text_chars: int = Field(
        default=12000,
        alias="RAPPORT_MAX_TEXT_CHARS",
        description="Extracted file text is truncated to this many characters"
    )

    @property
    def uses_model(self) -> bool:
        """Check if classification goes through an external model."""
        return self.extraction_backend in ("ollama", "anthropic")


settings = Settings()
