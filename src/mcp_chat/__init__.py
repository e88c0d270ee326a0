"""Chat threads, send tools and update notifications for MCP servers.

## Example

```python
from mcp.server.lowlevel import Server
import mcp.types as types

from mcp_chat import ChatMessageBus

bus = ChatMessageBus(
    get_resources=get_resources,
    read_messages=read_messages,
    write_message=write_message,
    resource_template=types.ResourceTemplate(uriTemplate="chat+irc:///{channel}", name="IRC"),
)

server = Server("chat")
bus.attach(server)
```
"""

from .bus import ChatMessageBus
from .exceptions import ChatError, InvalidToolArgumentsError, MalformedResourceURIError
from .notifications import NotificationOutcome
from .registry import HandlerRegistry, RequestKind
from .settings import ChatSettings
from .types import (
    CONTENT_UPDATED_METHOD,
    ChatAuthor,
    ChatMessage,
    ChatThread,
    ContentUpdatedNotification,
    SendChatMessageArguments,
)
from .uri import ChatURI, parse_chat_uri

__all__ = [
    "CONTENT_UPDATED_METHOD",
    "ChatAuthor",
    "ChatError",
    "ChatMessage",
    "ChatMessageBus",
    "ChatSettings",
    "ChatThread",
    "ChatURI",
    "ContentUpdatedNotification",
    "HandlerRegistry",
    "InvalidToolArgumentsError",
    "MalformedResourceURIError",
    "NotificationOutcome",
    "RequestKind",
    "SendChatMessageArguments",
    "parse_chat_uri",
]
