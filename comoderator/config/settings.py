"""
Configuration settings for the chat co-moderator bot.
Browser automation, bot behavior, completion API and host API settings.
"""

from typing import Optional, List
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SYSTEM_PROMPT = (
    "You are an AI co-moderator. Analyze if this is a question and provide a helpful answer."
)


class BrowserSettings(BaseSettings):
    """Automated browser configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_", env_file=".env", extra="ignore")

    headless: bool = Field(default=False, description="Run Chromium without a window")
    executable_path: Optional[str] = Field(default=None, description="Chrome/Chromium executable")
    launch_args: List[str] = Field(
        default=[
            "--use-fake-ui-for-media-stream",
            "--use-fake-device-for-media-stream",
            "--disable-blink-features=AutomationControlled",
            "--disable-infobars",
        ],
        description="Extra Chromium command line switches"
    )
    viewport_width: int = Field(default=1280, description="Viewport width")
    viewport_height: int = Field(default=720, description="Viewport height")

    # Timeouts (milliseconds)
    launch_timeout_ms: int = Field(default=30000, gt=0, description="Browser launch timeout")
    navigation_timeout_ms: int = Field(default=30000, gt=0, description="Meeting page load timeout")
    action_timeout_ms: int = Field(default=5000, gt=0, description="Click/type timeout")


class BotSettings(BaseSettings):
    """Bot behavior configuration."""
    model_config = SettingsConfigDict(env_prefix="BOT_", env_file=".env", extra="ignore")

    display_name: str = Field(default="Clarify AI Bot", description="Name shown in the meeting")
    name_input_timeout_ms: int = Field(default=15000, gt=0, description="Max wait for name field")
    settle_seconds: float = Field(default=5.0, ge=0, description="Wait after join before monitoring")
    type_delay_ms: int = Field(default=50, ge=0, description="Delay between typed keys")

    # Chat monitoring
    poll_interval_ms: int = Field(default=2000, gt=0, description="Chat poll period")
    seen_ceiling: int = Field(default=1000, ge=2, description="Max remembered chat messages")

    # Optional JSON file overriding the built-in selector catalog
    selector_catalog_path: Optional[str] = Field(default=None, description="Selector catalog override")


class CompletionSettings(BaseSettings):
    """Language-model completion API configuration."""
    model_config = SettingsConfigDict(env_prefix="OPENAI_", env_file=".env", extra="ignore")

    api_key: Optional[SecretStr] = Field(default=None, description="Bearer credential")
    api_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completions endpoint"
    )
    model: str = Field(default="gpt-4", description="Model identifier")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, description="System instruction")
    temperature: float = Field(default=0.2, ge=0, le=2, description="Sampling temperature")
    max_tokens: int = Field(default=500, gt=0, description="Max answer length (tokens)")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Request timeout")
    default_confidence: float = Field(default=85.0, ge=0, le=100, description="Fixed answer confidence")


class ApiSettings(BaseSettings):
    """Host control API configuration."""
    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", extra="ignore")

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    event_buffer_size: int = Field(default=200, gt=0, description="Recent events kept for the host")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    # Nested settings
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    bot: BotSettings = Field(default_factory=BotSettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    # Application settings
    project_name: str = Field(default="Chat Co-Moderator", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Write rotating log files")
    log_dir: str = Field(default="logs", description="Log file directory")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


# Global settings instance
settings = Settings()
