from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in the sample .env; treated the same as "not set".
PLACEHOLDER_API_KEYS = {
    "your_openai_api_key_here",
    "your_gemini_api_key_here",
}


class Settings(BaseSettings):
    # Read from OS env and optional .env file in project root.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment / mode
    environment: str = Field(
        "development",
        alias="APP_ENV",
        description="Current environment, e.g. development / production",
    )
    app_version: str = Field("1.0.0", alias="APP_VERSION")

    # Listening address for uvicorn
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")

    cors_allow_origins: str = Field(
        "*",
        alias="CORS_ALLOW_ORIGINS",
        description="Allowed CORS origins, comma-separated; '*' allows all",
    )

    # Redis connection. REDIS_URL wins over host/port when present.
    redis_url_override: Optional[str] = Field(
        default=None,
        alias="REDIS_URL",
        description="Redis connection URL, e.g. 'redis://redis:6379/0'",
    )
    redis_host: str = Field("localhost", alias="REDIS_HOST")
    redis_port: int = Field(6379, alias="REDIS_PORT")
    redis_db: int = Field(0, alias="REDIS_DB")

    # Session lifecycle
    session_timeout: int = Field(
        1800,
        alias="SESSION_TIMEOUT",
        ge=1,
        description="Seconds of inactivity after which a session expires",
    )
    max_conversation_history: int = Field(
        10,
        alias="MAX_CONVERSATION_HISTORY",
        ge=1,
        description="Maximum number of turns kept per session",
    )
    escalation_keywords_raw: str = Field(
        "human,agent,manager,supervisor,escalate,urgent,complaint",
        alias="ESCALATION_KEYWORDS",
        description="Comma-separated keywords that hand the chat to a human",
    )

    # Completion providers
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-3.5-turbo", alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    openai_max_tokens: int = Field(500, alias="OPENAI_MAX_TOKENS", ge=1)
    openai_temperature: float = Field(0.7, alias="OPENAI_TEMPERATURE", ge=0.0)

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-flash", alias="GEMINI_MODEL")
    gemini_max_tokens: int = Field(500, alias="GEMINI_MAX_TOKENS", ge=1)
    gemini_temperature: float = Field(0.7, alias="GEMINI_TEMPERATURE", ge=0.0)

    provider_timeout: float = Field(
        30.0,
        alias="PROVIDER_TIMEOUT",
        gt=0,
        description="Upper bound in seconds for a single provider call",
    )

    # Logging
    log_level: str = Field(
        "INFO",
        alias="LOG_LEVEL",
        description="Application log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_timezone: Optional[str] = Field(
        default=None,
        alias="LOG_TIMEZONE",
        description="Timezone name for log timestamps, e.g. 'Europe/Berlin'. Defaults to system local time.",
    )
    log_dir: str = Field("logs", alias="LOG_DIR")

    @property
    def redis_url(self) -> str:
        if self.redis_url_override:
            return self.redis_url_override
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    def get_escalation_keywords(self) -> List[str]:
        """
        Return configured escalation keywords, lowercased.
        Whitespace is stripped and empty entries are ignored.
        """
        return [
            item.strip().lower()
            for item in self.escalation_keywords_raw.split(",")
            if item.strip()
        ]

    def get_cors_origins(self) -> List[str]:
        if self.cors_allow_origins.strip() == "*":
            return ["*"]
        return [
            origin.strip()
            for origin in self.cors_allow_origins.split(",")
            if origin.strip()
        ]


def is_configured_key(value: Optional[str]) -> bool:
    """
    True when an API key is present and is not one of the sample placeholders.
    """
    if not value or not value.strip():
        return False
    return value.strip() not in PLACEHOLDER_API_KEYS


settings = Settings()  # Reads from environment if available
