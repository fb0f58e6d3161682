from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Google Custom Search (default search provider)
    google_api_key: str = ""
    google_search_engine_id: str = ""

    # Brave (optional alternative provider)
    brave_api_key: str = ""

    # Search provider
    search_provider: str = "google"  # google | brave
    search_timeout_seconds: float = 10.0
    search_max_results: int = 10
    search_degraded_fallback: bool = False  # placeholder result instead of hard failure
    search_fallback_max_results: int = 5

    # OpenRouter (OpenAI-compatible)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "anthropic/claude-3.7-sonnet"
    openrouter_model: str = ""  # optional override of default_model
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1024
    llm_timeout_seconds: float = 30.0
    llm_max_attempts: int = 3
    llm_backoff_base_seconds: float = 1.0

    # Batch processing
    inter_company_delay_seconds: float = 0.5
    max_companies_per_batch: int = 500

    # Export
    csv_include_bom: bool = False

    # App
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: str = "*"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def search_credentials_configured(self) -> bool:
        if self.search_provider.lower().strip() == "brave":
            return bool(self.brave_api_key)
        return bool(self.google_api_key and self.google_search_engine_id)

    @property
    def llm_credentials_configured(self) -> bool:
        return bool(self.openrouter_api_key)


settings = Settings()
