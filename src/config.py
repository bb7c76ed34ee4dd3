# src/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
StackStorm settings keep the ST2_* names used by existing ChatOps deployments.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


def _is_unset(value: str | None) -> bool:
    """Credentials given as an empty string or the literal "null" count as unset."""
    return not value or value == "null"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # StackStorm API
    st2_api: str = "http://localhost:9101"
    st2_channel: str = "hubot"
    st2_commands_reload_interval: int = 120  # Seconds between alias reloads
    st2_request_timeout: float = 30.0
    st2_verify_ssl: bool = False

    # Optional StackStorm authentication
    st2_auth_username: str = ""
    st2_auth_password: str = ""
    st2_auth_url: str = ""  # Derived from ST2_API when empty

    # Name the bot answers to (used in help lines)
    bot_name: str = "hubot"

    # Slack Integration
    slack_bot_token: str = ""
    slack_app_token: str = ""

    # Webhook server
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 8080

    # Observability
    logfire_token: str = ""
    log_format: str = "text"  # "text" or "json"

    # API Security
    api_auth_key: str = ""  # Optional X-API-Key for the HTTP endpoints
    api_rate_limit: int = 60  # Requests per minute

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )

    @property
    def has_credentials(self) -> bool:
        """Whether both username and password are configured.

        Returns:
            True when authentication must happen before serving commands.
        """
        return not _is_unset(self.st2_auth_username) and not _is_unset(
            self.st2_auth_password
        )

    @property
    def auth_url(self) -> str | None:
        """Explicit auth endpoint URL, or None to derive it from the API URL."""
        if _is_unset(self.st2_auth_url):
            return None
        return self.st2_auth_url


# Singleton instance - import this in your code
settings = Settings()
