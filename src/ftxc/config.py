"""Configuration management using pydantic-settings."""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://ftx.com/api"
DEFAULT_WS_URL = "wss://ftx.com/ws/"
DEFAULT_USER_AGENT = "ftxc"


class Settings(BaseSettings):
    """Client settings.

    Every field can be set from the environment with the ``FTX_`` prefix,
    e.g. ``FTX_PUBLIC_KEY``, ``FTX_PRIVATE_KEY``, ``FTX_SUBACCOUNT``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FTX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Endpoints
    api_url: str = Field(default=DEFAULT_API_URL, description="REST API base URL")
    ws_url: str = Field(default=DEFAULT_WS_URL, description="WebSocket endpoint")
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Value of the user-agent header sent on every request and upgrade",
    )

    # Timeouts are opt-in; callers impose their own deadlines otherwise
    http_timeout: float | None = Field(
        default=None, description="HTTP request timeout in seconds (None disables)"
    )
    ws_open_timeout: float | None = Field(
        default=None, description="WebSocket handshake timeout in seconds (None disables)"
    )

    # Credentials
    public_key: str | None = Field(default=None, description="API key identifier")
    private_key: SecretStr | None = Field(default=None, description="API secret")
    subaccount: str | None = Field(default=None, description="Subaccount nickname")

    @field_validator("api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended with their leading slash."""
        return v.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        """True when both halves of the key pair are configured."""
        return bool(self.public_key) and self.private_key is not None


# Global settings instance (lazy loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings instance (useful for testing)."""
    global _settings
    _settings = None
