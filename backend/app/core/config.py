from typing import Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from urllib.parse import quote_plus
from enum import Enum

class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a friendly and supportive AI assistant specializing in mental health "
    "conversations. Respond concisely, use emojis to convey empathy, and act as a blend "
    "of a caring friend and a helpful therapist. Focus on providing support and coping "
    "strategies."
)

SAFETY_CATEGORIES = ("harassment", "hate_speech", "sexually_explicit", "dangerous_content")
SAFETY_THRESHOLDS = (
    "block_none",
    "block_only_high",
    "block_medium_and_above",
    "block_low_and_above",
)


class Settings(BaseSettings):
    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Project Information
    PROJECT_NAME: str = "MindEase"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # Server settings
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000
    CORS_ORIGINS: List[str] = []

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # e.g. "server.log"; stdout only when unset

    # Database
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Timezone used to decide what "today" means for check-ins
    DEFAULT_TIMEZONE: str = "UTC"

    # Mood / energy ordinal scale (inclusive)
    MOOD_SCALE_MIN: int = 0
    MOOD_SCALE_MAX: int = 4

    # Analytics
    ANALYTICS_MOOD_FEED_LIMIT: int = 3
    ANALYTICS_SESSION_FEED_LIMIT: int = 2
    ANALYTICS_ACTIVITY_FEED_LIMIT: int = 5
    ANALYTICS_SESSION_DURATION_MINUTES: int = 50  # placeholder, not measured time
    ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS: Optional[int] = 7  # None = full history
    ANALYTICS_STREAK_REQUIRES_RECENT_CHECKIN: bool = False

    # Conversational assistant (OpenAI)
    OPENAI_API_KEY: Optional[str] = None
    ASSISTANT_MODEL: str = "gpt-4o-mini"
    ASSISTANT_MODERATION_MODEL: str = "omni-moderation-latest"
    ASSISTANT_TEMPERATURE: float = 0.7
    ASSISTANT_MAX_TOKENS: int = 500
    ASSISTANT_TIMEOUT_SECONDS: float = 60.0
    ASSISTANT_SYSTEM_INSTRUCTION: str = DEFAULT_SYSTEM_INSTRUCTION
    ASSISTANT_SAFETY_THRESHOLDS: Dict[str, str] = {
        category: "block_medium_and_above" for category in SAFETY_CATEGORIES
    }
    ASSISTANT_GREETING: str = (
        "Hello! I'm your AI therapy companion. I'm here to listen and support you through "
        "your mental health journey. How are you feeling today?"
    )
    ASSISTANT_FALLBACK_MESSAGE: str = (
        "I'm having trouble responding right now. Please try again in a moment, and if you "
        "need immediate support, reach out to someone you trust or a crisis line."
    )
    ASSISTANT_LOG_DIR: str = "data/assistant_interactions"
    ASSISTANT_LOG_ENABLED: bool = True

    # Metrics
    METRICS_ENABLED: bool = True

    # --- Validators & Derived Settings ---
    @field_validator("ASSISTANT_SAFETY_THRESHOLDS")
    @classmethod
    def _validate_safety_thresholds(cls, v: Dict[str, str]) -> Dict[str, str]:
        normalized = {}
        for category, threshold in v.items():
            category = category.strip().lower()
            threshold = threshold.strip().lower()
            if category not in SAFETY_CATEGORIES:
                raise ValueError(f"Unknown safety category: {category}")
            if threshold not in SAFETY_THRESHOLDS:
                raise ValueError(f"Unknown safety threshold for {category}: {threshold}")
            normalized[category] = threshold
        # Categories left out of the override keep the default threshold
        for category in SAFETY_CATEGORIES:
            normalized.setdefault(category, "block_medium_and_above")
        return normalized

    @model_validator(mode="after")
    def _finalize_and_validate(self) -> "Settings":
        # Derive SQLALCHEMY_DATABASE_URI if not provided
        if not self.SQLALCHEMY_DATABASE_URI:
            if self.POSTGRES_USER and self.POSTGRES_SERVER and self.POSTGRES_DB:
                safe_user = quote_plus(self.POSTGRES_USER)
                if self.POSTGRES_PASSWORD:
                    safe_password = quote_plus(self.POSTGRES_PASSWORD)
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}:{safe_password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                    )
                else:
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                    )
            else:
                raise ValueError(
                    "Set SQLALCHEMY_DATABASE_URI or POSTGRES_USER/POSTGRES_SERVER/POSTGRES_DB"
                )

        if self.MOOD_SCALE_MIN >= self.MOOD_SCALE_MAX:
            raise ValueError("MOOD_SCALE_MIN must be lower than MOOD_SCALE_MAX")

        if self.ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS is not None and self.ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS <= 0:
            raise ValueError("ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS must be positive or unset")

        for name in (
            "ANALYTICS_MOOD_FEED_LIMIT",
            "ANALYTICS_SESSION_FEED_LIMIT",
            "ANALYTICS_ACTIVITY_FEED_LIMIT",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

        return self

    # Environment-specific properties
    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def is_staging(self) -> bool:
        return self.ENVIRONMENT == Environment.STAGING

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def uses_sqlite(self) -> bool:
        return str(self.SQLALCHEMY_DATABASE_URI).startswith("sqlite")

    @property
    def allowed_cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS:
            return self.CORS_ORIGINS
        if self.is_production:
            return []
        return ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')

settings = Settings()
