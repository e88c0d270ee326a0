"""A stdio MCP server exposing two in-memory chat rooms.

Clients see one send tool per chat protocol (chat+irc and chat+matrix), can
read each room as a resource, and get notified when a message is posted.

    uv run python examples/chat_server.py --log-level DEBUG
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import anyio
import click
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from mcp_chat import ChatAuthor, ChatMessage, ChatMessageBus

ROOMS: dict[str, list[ChatMessage]] = {
    "chat+irc:///python": [],
    "chat+irc:///offtopic": [],
    "chat+matrix:///lobby": [],
}

BOT = ChatAuthor(name="assistant", id="bot")


@click.command()
@click.option("--log-level", default="INFO", help="Log level")
def main(log_level: str) -> int:
    app: Server[Any, Any] = Server("mcp-chat-rooms")

    async def get_resources() -> list[types.Resource]:
        return [
            types.Resource(uri=uri, name=uri.rsplit("/", 1)[-1], description=f"{len(messages)} messages")
            for uri, messages in ROOMS.items()
        ]

    async def read_messages(uri: str) -> list[ChatMessage] | None:
        return ROOMS.get(uri)

    async def write_message(uri: str, message: str) -> str | None:
        if uri not in ROOMS:
            return f"No such room: {uri}"
        posted = ChatMessage(
            id=uuid4().hex,
            uri=uri,
            author=BOT,
            content=message,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        ROOMS[uri].append(posted)
        await bus.notify_new_message(app.request_context.session, uri, posted.id)
        return f"Posted message {posted.id} to {uri}"

    bus = ChatMessageBus(
        get_resources=get_resources,
        read_messages=read_messages,
        write_message=write_message,
        resource_template=types.ResourceTemplate(
            uriTemplate="chat+{protocol}:///{room}",
            name="Chat rooms",
            description="An in-memory chat room",
        ),
        log_level=log_level.upper(),
    )
    bus.attach(app)

    @app.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name="rooms",
                description="List the chat rooms and their message counts",
                inputSchema={"type": "object", "properties": {}},
            )
        ]

    @app.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        if name != "rooms":
            raise ValueError(f"Unknown tool: {name}")
        lines = [f"{uri}: {len(messages)}" for uri, messages in ROOMS.items()]
        return [types.TextContent(type="text", text="\n".join(lines))]

    async def arun():
        async with stdio_server() as streams:
            await app.run(streams[0], streams[1], app.create_initialization_options())

    anyio.run(arun)
    return 0


if __name__ == "__main__":
    main()
