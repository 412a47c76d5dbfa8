"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Runtime settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="A2UI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Inbound messages
    max_message_size: int = Field(
        default=512 * 1024, gt=0, description="Max inbound message size (bytes)"
    )
    max_json_depth: int = Field(default=32, gt=0, description="Max inbound JSON nesting depth")
    repair_json: bool = Field(
        default=False, description="Repair malformed JSON from LLM producers before rejecting"
    )

    # Actions
    emit_value_change_actions: bool = Field(
        default=False, description="Emit a companion action for every bound control edit"
    )
    value_change_action: str = Field(
        default="valueChanged", description="Name of the companion value-change action"
    )
    action_history_size: int = Field(
        default=100, gt=0, description="Number of dispatched actions kept for inspection"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
