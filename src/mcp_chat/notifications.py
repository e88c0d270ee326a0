"""Notifications sent to MCP clients when chat threads change."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import anyio
import anyio.abc
from pydantic import AnyUrl

from mcp_chat.accessor import ChatAccessor
from mcp_chat.types import ChatMessage, ContentUpdatedNotification, ContentUpdatedNotificationParams
from mcp_chat.utilities.logging import get_logger

logger = get_logger(__name__)


class NotificationSession(Protocol):
    """The part of mcp.server.session.ServerSession used to notify clients."""

    async def send_resource_updated(self, uri: AnyUrl) -> None: ...

    async def send_resource_list_changed(self) -> None: ...

    async def send_notification(self, notification: Any, related_request_id: Any = None) -> None: ...


@dataclass
class NotificationOutcome:
    """What notify_new_message managed to send."""

    uri: str
    message_id: str
    resource_updated: bool = False
    content_updated: bool = False
    message: ChatMessage | None = None
    errors: list[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.resource_updated and self.content_updated


class NotificationDispatcher:
    """Sends resources/updated and content_updated notifications for new messages.

    Failures on either notification are logged and recorded on the returned
    NotificationOutcome; they are never raised to the caller.
    """

    def __init__(self, accessor: ChatAccessor, timeout: float | None = None):
        self.accessor = accessor
        self.timeout = timeout

    async def notify_new_message(self, session: NotificationSession, uri: str, message_id: str) -> NotificationOutcome:
        """Tell clients that ``message_id`` was posted to the thread at ``uri``.

        Both notifications are sent concurrently and this returns once both have
        been sent or have failed.
        """
        outcome = NotificationOutcome(uri=uri, message_id=message_id)
        async with anyio.create_task_group() as tg:
            tg.start_soon(self._send_resource_updated, session, outcome)
            tg.start_soon(self._send_content_updated, session, outcome)
        return outcome

    def schedule_new_message(
        self,
        task_group: anyio.abc.TaskGroup,
        session: NotificationSession,
        uri: str,
        message_id: str,
    ) -> None:
        """Start notify_new_message in ``task_group`` without waiting for it."""
        task_group.start_soon(self.notify_new_message, session, uri, message_id)

    async def notify_resource_list_changed(self, session: NotificationSession) -> bool:
        try:
            with anyio.fail_after(self.timeout):
                await session.send_resource_list_changed()
        except Exception:
            logger.exception("Failed to send resource list changed notification")
            return False
        return True

    async def _send_resource_updated(self, session: NotificationSession, outcome: NotificationOutcome) -> None:
        try:
            with anyio.fail_after(self.timeout):
                await session.send_resource_updated(AnyUrl(outcome.uri))
        except Exception as e:
            logger.exception("Failed to send channel resource update notification for %s", outcome.uri)
            outcome.errors.append(e)
        else:
            outcome.resource_updated = True

    async def _send_content_updated(self, session: NotificationSession, outcome: NotificationOutcome) -> None:
        try:
            with anyio.fail_after(self.timeout):
                messages = await self.accessor.read_messages(outcome.uri) or []
                outcome.message = next((m for m in messages if m.id == outcome.message_id), None)
                notification = ContentUpdatedNotification(
                    params=ContentUpdatedNotificationParams(content=outcome.message),
                )
                await session.send_notification(notification)
        except Exception as e:
            logger.exception("Failed to send content updated notification for %s", outcome.uri)
            outcome.errors.append(e)
        else:
            outcome.content_updated = True
