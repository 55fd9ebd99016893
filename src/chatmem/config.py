from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    OPENAI_API_KEY: SecretStr | None = Field(None, description="OpenAI API Key")
    OPENAI_MODEL_CHAT: str = Field("gpt-4o-mini", description="Model used for replies and descriptions")
    OPENAI_TEMPERATURE: Optional[float] = Field(None, ge=0.0, le=2.0)
    OPENAI_TIMEOUT_SECONDS: float = Field(60.0, gt=0, description="Per-request timeout for the OpenAI SDK")
    OPENAI_MAX_RETRIES: int = Field(2, ge=0, description="SDK-level retries on transient upstream errors")
    SYSTEM_PROMPT: Optional[str] = Field(None, description="Optional system message prepended to every model call")

    DATABASE_URL: str = Field("sqlite:///data/chatmem.db", description="SQLAlchemy URL of the durable store")

    MEMORY_WINDOW_SIZE: int = Field(10, ge=1, description="Number of recent messages fed back to the model")
    DEFAULT_OWNER_ID: str = Field("default", description="Owner identity used when none is passed explicitly")
    DESCRIPTION_MAX_CHARS: int = Field(30, ge=1, description="Length hint given to the model for descriptions")
    DESCRIPTION_HARD_TRUNCATE: bool = Field(
        False,
        description="Cut generated descriptions to DESCRIPTION_MAX_CHARS instead of only asking the model to"
    )
    SERIALIZE_CONVERSATION_TURNS: bool = Field(
        False,
        description="Hold a per-conversation lock across context load, model call and persist"
    )

    API_PREFIX: str = Field("", description="Path prefix for the HTTP routes, e.g. /api")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    LOG_LEVEL: str = Field("INFO")

# Singleton instance
settings = Settings()
