"""The data source the chat layer reads threads from and writes messages to.

The embedding application owns storage and the actual chat backends. It hands
the chat layer three async callables; the chat layer treats them as opaque.
Resources and messages may be returned as models or as plain dicts.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeAlias

import anyio
import mcp.types as types

from mcp_chat.types import ChatMessage
from mcp_chat.utilities.logging import get_logger

logger = get_logger(__name__)

GetResourcesFn: TypeAlias = Callable[[], Awaitable[Sequence[types.Resource | dict[str, Any]] | None]]
ReadMessagesFn: TypeAlias = Callable[[str], Awaitable[Sequence[ChatMessage | dict[str, Any]] | None]]
WriteMessageFn: TypeAlias = Callable[[str, str], Awaitable[str | None]]


class ChatAccessor:
    """Wraps the application's accessor callables.

    Errors raised by the callables propagate unchanged. When ``timeout`` is
    set, each call is bounded by it and raises ``TimeoutError`` on expiry.
    """

    def __init__(
        self,
        get_resources: GetResourcesFn,
        read_messages: ReadMessagesFn,
        write_message: WriteMessageFn,
        timeout: float | None = None,
    ):
        self._get_resources = get_resources
        self._read_messages = read_messages
        self._write_message = write_message
        self.timeout = timeout

    async def get_resources(self) -> list[types.Resource]:
        """List chat resources. A None result from the application counts as empty."""
        with anyio.fail_after(self.timeout):
            resources = await self._get_resources()
        return [
            resource if isinstance(resource, types.Resource) else types.Resource.model_validate(resource)
            for resource in resources or []
        ]

    async def read_messages(self, uri: str) -> list[ChatMessage] | None:
        """Read the messages of a thread, or None if the application does not know the URI."""
        with anyio.fail_after(self.timeout):
            messages = await self._read_messages(uri)
        if messages is None:
            return None
        return [
            message if isinstance(message, ChatMessage) else ChatMessage.model_validate(message)
            for message in messages
        ]

    async def write_message(self, uri: str, message: str) -> str | None:
        logger.debug("Writing message to %s", uri)
        with anyio.fail_after(self.timeout):
            return await self._write_message(uri, message)
