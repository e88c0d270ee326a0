"""
ChatMessageBus: chat threads, send tools and update notifications for an MCP server.

Usage:
1. Create a bus with the three accessor callables and a resource template:
   bus = ChatMessageBus(
       get_resources=get_resources,
       read_messages=read_messages,
       write_message=write_message,
       resource_template=types.ResourceTemplate(
           uriTemplate="chat+discord:///{channel}",
           name="Discord",
           description="A Discord channel",
       ),
   )

2. Attach it to a low-level server. Handlers the server already has, or gets
   later, for tools and resources keep working behind the chat handlers:
   server = Server("your_server_name")
   bus.attach(server)

   @server.list_tools()
   async def handle_list_tools() -> list[types.Tool]:
       # Listed before the chat send tools

3. Tell clients about new messages:
   await bus.notify_new_message(session, "chat+discord:///general", message.id)
"""

from __future__ import annotations

from typing import Any

import anyio.abc
import mcp.types as types
from mcp.server.lowlevel import Server

from mcp_chat.accessor import ChatAccessor, GetResourcesFn, ReadMessagesFn, WriteMessageFn
from mcp_chat.discovery import ProtocolDiscovery, synthesize_tools
from mcp_chat.exceptions import ChatError
from mcp_chat.facade import DispatchFacade
from mcp_chat.notifications import NotificationDispatcher, NotificationOutcome, NotificationSession
from mcp_chat.registry import HandlerRegistry
from mcp_chat.settings import ChatSettings
from mcp_chat.utilities.logging import configure_logging, get_logger

logger = get_logger(__name__)


class ChatMessageBus:
    def __init__(
        self,
        get_resources: GetResourcesFn,
        read_messages: ReadMessagesFn,
        write_message: WriteMessageFn,
        resource_template: types.ResourceTemplate,
        **settings: Any,
    ):
        self.settings = ChatSettings(**settings)
        self.resource_template = resource_template
        self.accessor = ChatAccessor(
            get_resources,
            read_messages,
            write_message,
            timeout=self.settings.accessor_timeout,
        )
        self.registry = HandlerRegistry()
        self.discovery = ProtocolDiscovery(self.accessor, policy=self.settings.malformed_uri_policy)
        self.facade = DispatchFacade(
            self.accessor,
            self.discovery,
            self.registry,
            resource_template,
            mime_type=self.settings.resource_mime_type,
            json_indent=self.settings.json_indent,
        )
        self.notifications = NotificationDispatcher(self.accessor, timeout=self.settings.notification_timeout)
        self.server: Server[Any, Any] | None = None
        configure_logging(self.settings.log_level)

    def attach(self, server: Server[Any, Any]) -> None:
        """Serve chat requests on ``server``.

        Raises ChatError if a chat layer is already attached to it, or if this
        bus already serves another server.
        """
        if self.server is not None and self.server is not server:
            raise ChatError(f"Chat layer is already attached to server {self.server.name!r}")
        self.facade.install(server)
        self.server = server
        logger.info("Chat layer %r attached to server %r", self.resource_template.name, server.name)

    async def get_protocols(self) -> list[str]:
        return await self.discovery.discover()

    async def list_tools(self) -> list[types.Tool]:
        """The send tools for the protocols currently present, without fallback tools."""
        return synthesize_tools(await self.discovery.discover(), self.resource_template)

    async def notify_new_message(self, session: NotificationSession, uri: str, message_id: str) -> NotificationOutcome:
        return await self.notifications.notify_new_message(session, uri, message_id)

    def schedule_new_message(
        self,
        task_group: anyio.abc.TaskGroup,
        session: NotificationSession,
        uri: str,
        message_id: str,
    ) -> None:
        self.notifications.schedule_new_message(task_group, session, uri, message_id)

    async def notify_resource_list_changed(self, session: NotificationSession) -> bool:
        """Tell clients the set of chat threads changed. Returns False if sending failed."""
        return await self.notifications.notify_resource_list_changed(session)
