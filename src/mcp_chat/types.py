"""Data types for chat threads and chat notifications."""

from typing import Any, Literal

from mcp.types import Notification, NotificationParams
from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

CONTENT_UPDATED_METHOD = "notifications/resources/content_updated"


class ChatAuthor(BaseModel):
    name: str
    id: str


class ChatMessage(BaseModel):
    """A single message posted to a chat thread."""

    id: str
    uri: str
    """URI of the thread the message belongs to."""
    author: ChatAuthor
    content: str
    timestamp: str
    model_config = ConfigDict(extra="allow")


class ChatThread(BaseModel):
    """Payload returned when a chat resource is read."""

    uri: str
    messages: list[ChatMessage]


class SendChatMessageArguments(BaseModel):
    """Arguments accepted by the per-protocol send tools."""

    uri: str = Field(description="Resource URI in the format of the protocol")
    message: str = Field(description="Message to send")


class ContentUpdatedNotificationParams(NotificationParams):
    content: ChatMessage | None = None
    """The new message, or None when it could not be found in the thread."""

    @model_serializer(mode="wrap")
    def _serialize_with_content(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        # content is sent as null rather than dropped by exclude_none
        data = handler(self)
        data.setdefault("content", None)
        return data


class ContentUpdatedNotification(
    Notification[ContentUpdatedNotificationParams, Literal["notifications/resources/content_updated"]]
):
    """
    Sent alongside resources/updated so that clients get the new message without
    having to read the whole thread again.
    """

    method: Literal["notifications/resources/content_updated"] = CONTENT_UPDATED_METHOD
    params: ContentUpdatedNotificationParams
