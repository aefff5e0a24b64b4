from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "recapify"
    db_username: str = "recapify"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    worker_concurrency: int = 2
    job_poll_interval_seconds: int = 5

    extraction_engine: str = "pdfplumber"
    extraction_timeout_seconds: int = 30
    ocr_space_api_key: str = ""
    ocr_space_url: str = "https://api.ocr.space/parse/image"

    summarization_provider: str = "gemini"
    summarization_mode: str = "text"
    summarization_max_chars: int = 1_000_000
    summarization_timeout_seconds: int = 300
    summarization_max_attempts: int = 3
    summarization_retry_initial_delay_seconds: float = 1.0
    summarization_file_poll_interval_seconds: float = 1.0
    summarization_file_poll_max_attempts: int = 120
    summarization_gemini_api_key: str = ""
    summarization_gemini_model_name: str = "gemini-2.0-flash"
    summarization_openai_api_key: str = ""
    summarization_openai_model_name: str = "gpt-4o-mini"
    summarization_openai_compatible_api_key: str = ""
    summarization_openai_compatible_model_name: str = ""
    summarization_openai_compatible_base_url: str | None = None

    speech_provider: str = "elevenlabs"
    speech_default_voice: str = "female-1"
    speech_chunk_size: int = 4000
    speech_timeout_seconds: int = 60
    speech_max_attempts: int = 3
    speech_retry_initial_delay_seconds: float = 1.0
    speech_poll_initial_delay_seconds: float = 2.0
    speech_poll_max_delay_seconds: float = 30.0
    speech_poll_max_attempts: int = 20
    speech_max_parallel_chunks: int = 1
    elevenlabs_api_key: str = ""
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_fallback_base_url: str | None = None
    unrealspeech_api_key: str = ""
    unrealspeech_base_url: str = "https://api.v8.unrealspeech.com"
    unrealspeech_fallback_base_url: str | None = "https://api.v7.unrealspeech.com"

    short_summary_max_chars: int = 300
    short_summary_always_ellipsis: bool = False

    storage_backend: str = "local"
    storage_local_root: str = "/app/files"
    storage_public_base_url: str = "http://localhost:8000/files"
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_bucket: str = "documents"
