from typing import Any

import mcp.types as types
import pytest
from mcp.server.lowlevel import Server

from mcp_chat import ChatMessageBus
from tests.test_helpers import InMemoryChat, make_message


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def chat() -> InMemoryChat:
    chat = InMemoryChat()
    chat.add_thread("chat+irc:///general", "general", [make_message("m1", "chat+irc:///general")])
    chat.add_thread("chat+irc:///random", "random")
    chat.add_thread("chat+discord:///1234/5678", "lounge")
    return chat


@pytest.fixture
def resource_template() -> types.ResourceTemplate:
    return types.ResourceTemplate(
        uriTemplate="chat+{protocol}:///{channel}",
        name="Chat",
        description="A chat channel",
    )


@pytest.fixture
def bus(chat: InMemoryChat, resource_template: types.ResourceTemplate) -> ChatMessageBus:
    return ChatMessageBus(
        get_resources=chat.get_resources,
        read_messages=chat.read_messages,
        write_message=chat.write_message,
        resource_template=resource_template,
    )


@pytest.fixture
def server() -> Server[Any, Any]:
    return Server("test")
