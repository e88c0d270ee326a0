"""Logging utilities for mcp-chat."""

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the mcp_chat namespace.

    Args:
        name: the name of the logger, which will be prefixed with 'mcp_chat.'

    Returns:
        a configured logger instance
    """
    if name == "mcp_chat" or name.startswith("mcp_chat."):
        return logging.getLogger(name)
    return logging.getLogger(f"mcp_chat.{name}")


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
) -> None:
    """Configure logging for mcp-chat.

    Args:
        level: the log level to use
    """
    handlers: list[logging.Handler] = [RichHandler(console=Console(stderr=True), rich_tracebacks=True)]

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
    )
