"""Errors raised by the chat layer."""

from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, ErrorData


class ChatError(Exception):
    """Base error for mcp-chat."""


class MalformedResourceURIError(ChatError, McpError):
    """A resource returned by the accessor does not carry a chat URI."""

    def __init__(self, uri: str):
        self.uri = uri
        McpError.__init__(self, ErrorData(code=INTERNAL_ERROR, message=f"Failed to parse resource URI: {uri}"))


class InvalidToolArgumentsError(ChatError, McpError):
    """Arguments of a chat tool call do not match ``{uri, message}``.

    ``errors`` is a JSON-serializable description of what failed and is sent
    to the client as the error data.
    """

    def __init__(self, tool_name: str, errors: list[dict[str, Any]] | None = None):
        self.tool_name = tool_name
        self.errors = errors or []
        McpError.__init__(
            self,
            ErrorData(
                code=INVALID_PARAMS,
                message=f"Invalid arguments for tool {tool_name}",
                data=self.errors or None,
            ),
        )
