"""Settings for the chat layer."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MalformedURIPolicy = Literal["strict", "skip"]


class ChatSettings(BaseSettings):
    """mcp-chat settings.

    All settings can be configured via environment variables with the prefix MCP_CHAT_.
    For example, MCP_CHAT_MALFORMED_URI_POLICY=skip will set malformed_uri_policy="skip".
    """

    model_config = SettingsConfigDict(
        env_prefix="MCP_CHAT_",
        env_file=".env",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # discovery settings
    malformed_uri_policy: MalformedURIPolicy = "strict"
    """What to do with a resource whose URI is not a chat URI.

    "strict" fails the whole discovery, "skip" drops the resource with a warning.
    """

    # resource settings
    resource_mime_type: str = "application/json"
    json_indent: int | None = 2

    # timeouts, in seconds; None disables them
    accessor_timeout: float | None = Field(default=None, gt=0)
    notification_timeout: float | None = Field(default=None, gt=0)
