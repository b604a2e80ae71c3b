"""Runtime configuration for the voice to-do demos."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="VOICE_TODO_", env_file=".env", extra="ignore")

    app_name: str = "voice-todo"
    log_level: str = "INFO"
    silence_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Quiet period after the last speech signal before a session commits.",
    )
    no_input_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="How long a session waits for any speech before giving up.",
    )
    acknowledgement: str = "Thank you for adding the to-do."
    language: str = "en-US"
    phrase_time_limit: float = 5.0
    ambient_noise_seconds: float = 0.2
    voice_enabled: bool = True
    speech_max_chars: int = 500
    voice_id: str | None = None
    speech_rate: int | None = None


settings = Settings()
