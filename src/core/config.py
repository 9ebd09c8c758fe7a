"""
Sarthi Guidance Service - Application Configuration

Patterns Applied:
- Pydantic Settings with SettingsConfigDict
- Environment variable prefix SARTHI_ for the guidance service
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with SARTHI_ prefix.
    Example: SARTHI_PORT=5001, SARTHI_LLM_PROVIDER=ollama
    """

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5001

    # Application metadata
    service_name: str = "sarthi-guidance-service"
    version: str = "0.1.0"
    environment: str = "development"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = True

    # Tracing configuration
    tracing_enabled: bool = True
    tracing_console_export: bool = False

    # Verse data
    verses_path: str = "./data/verses.json"
    stop_words_path: str | None = None

    # Retrieval limits
    max_keywords: int = 5
    min_keyword_length: int = 3
    default_max_results: int = 5
    max_results_ceiling: int = 50
    commentary_max_chars: int = 600

    # LLM configuration
    llm_provider: str = "gemini"  # gemini | ollama | fake
    llm_timeout: float = 30.0
    llm_max_retries: int = 2
    generation_timeout: float = 60.0
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.1:8b"

    model_config = SettingsConfigDict(
        env_prefix="SARTHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance with values from environment
    """
    return Settings()
