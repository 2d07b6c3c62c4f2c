"""Configuration management for myshell."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import configure_logging

DEFAULT_HISTORY_FILE = Path.home() / ".myshell_history"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MYSHELL_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # History
    history_file: Path = Field(default=DEFAULT_HISTORY_FILE, description="File used to persist command history")
    max_history_size: int = Field(default=1000, ge=1, description="Maximum number of history entries kept")

    # Prompt
    prompt_name: str = Field(default="myshell", description="Name shown at the start of the prompt")
    show_timestamp: bool = Field(default=True, description="Print an ISO timestamp before each command")

    # Process control
    terminate_on_interrupt: bool = Field(
        default=True, description="Terminate running child processes when the user interrupts a line"
    )
    kill_grace_seconds: float = Field(
        default=2.0, ge=0, description="Seconds to wait after terminate before killing a child"
    )

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Explicit values that win over environment and .env entries

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)  # type: ignore[arg-type]

    configure_logging(settings.log_level)

    return settings
