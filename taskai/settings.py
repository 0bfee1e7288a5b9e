from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILES = [PROJECT_ROOT / ".env", ".env"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, extra="ignore")

    # DB
    DATABASE_URL: str = "sqlite:///./data/taskai.db"

    # App
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # API
    API_KEY: str | None = None
    API_KEY_SECRET: str | None = None
    SESSION_TTL_DAYS: int = 7
    API_RATE_LIMIT_PER_MIN: int = 120
    API_RATE_WINDOW_SEC: int = 60
    REDIS_URL: str | None = None

    # Sign-in lockout
    AUTH_FAIL_MAX: int = 5
    AUTH_FAIL_WINDOW_SEC: int = 300
    AUTH_BLOCK_SEC: int = 600
    BCRYPT_ROUNDS: int = 12

    # Reminders
    MAX_PENDING_REMINDERS: int = 4
    MAX_PENDING_SNOOZES: int = 3
    EXPIRY_SWEEP_INTERVAL_SEC: int = 300

    # AI framing (optional)
    OPENAI_API_KEY: str | None = None
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    AI_MAX_TEXT_CHARS: int = 1000
    AI_ERROR_THRESHOLD: int = 3
    AI_ERROR_WINDOW_SEC: int = 300
    AI_COOLDOWN_SEC: int = 600


settings = Settings()
