"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        protected_namespaces=(),
    )

    # Database (on-device SQLite file by default)
    database_url: str = "sqlite+aiosqlite:///./nutrition_insights.db"

    # Logging
    log_format: str = "json"  # 'json' or 'text'
    log_level: str = "INFO"
    service_name: str = "nutrition-insights"

    # CORS
    cors_origins: list[str] = ["http://localhost:8081"]

    # Daily insight cache
    insight_data_ttl_minutes: int = 15  # Snapshot/score refresh window
    insight_response_ttl_minutes: int = 120  # Per-question narrative lifetime
    legacy_insights_ttl_hours: int = 4
    alert_dismissal_days: int = 7

    # Waking window used for day progress (local hours)
    waking_start_hour: int = 6
    waking_end_hour: int = 22
    user_timezone: str = "UTC"

    # On-device language model
    model_enabled: bool = True
    model_filename: str = "smollm2-1.7b-instruct-q4_k_m.gguf"
    model_download_url: str = (
        "https://huggingface.co/HuggingFaceTB/SmolLM2-1.7B-Instruct-GGUF"
        "/resolve/main/smollm2-1.7b-instruct-q4_k_m.gguf"
    )
    model_dir: str = "./models"
    model_expected_size_bytes: int = 1_000_000_000  # ~1.0 GB
    model_min_free_space_bytes: int = 1_500_000_000  # ~1.5 GB
    # OpenAI-compatible local runtime (llama.cpp server) serving the model file
    model_runtime_url: str = "http://127.0.0.1:8080/v1"
    model_runtime_timeout_seconds: float = 60.0
    model_temperature: float = 0.7
    model_top_p: float = 0.9
    insight_max_tokens: int = 200

    # Background jobs
    dismissal_sweep_enabled: bool = True
    dismissal_sweep_interval_minutes: int = 60
    insight_refresh_enabled: bool = True
    insight_refresh_interval_minutes: int = 15

    # Testing
    testing: bool = False  # Set to True during tests to disable connection pooling


settings = Settings()
