"""
Fallback handlers for the request kinds the chat layer takes over.

Once a chat layer is attached to a server, the server's own handlers for
tools/list, tools/call, resources/read, resources/list and
resources/templates/list are no longer called directly. They are kept in a
HandlerRegistry and the chat layer calls them when it cannot answer a request
by itself, or merges their results with its own.

Handlers get into the registry in one of three ways:

1. They were registered on the server before the chat layer was attached.
2. They are registered on the server after attachment, e.g. with
   ``@server.list_tools()``. The server's handler mapping is replaced by an
   InterceptingRequestHandlers, which routes those writes into the registry.
3. They are registered on the registry directly:

   @bus.registry.handler(RequestKind.LIST_TOOLS)
   async def list_tools(req: types.ListToolsRequest) -> types.ServerResult:
       ...
"""

from __future__ import annotations

from collections import UserDict
from collections.abc import Awaitable, Callable, Iterator, Mapping
from enum import Enum
from typing import Any, TypeAlias

import mcp.types as types

from mcp_chat.utilities.logging import get_logger

logger = get_logger(__name__)

RequestHandlerFn: TypeAlias = Callable[..., Awaitable[Any]]


class RequestKind(Enum):
    """The request kinds served by the chat layer, tagged with their request class."""

    LIST_TOOLS = ("tools/list", types.ListToolsRequest)
    CALL_TOOL = ("tools/call", types.CallToolRequest)
    READ_RESOURCE = ("resources/read", types.ReadResourceRequest)
    LIST_RESOURCES = ("resources/list", types.ListResourcesRequest)
    LIST_RESOURCE_TEMPLATES = ("resources/templates/list", types.ListResourceTemplatesRequest)

    def __init__(self, method: str, request_type: type[Any]):
        self.method = method
        self.request_type = request_type

    @classmethod
    def for_request_type(cls, request_type: type[Any]) -> RequestKind | None:
        for kind in cls:
            if kind.request_type is request_type:
                return kind
        return None


class HandlerRegistry:
    """At most one fallback handler per request kind. Later registrations win."""

    def __init__(self) -> None:
        self._handlers: dict[RequestKind, RequestHandlerFn] = {}

    def register(self, kind: RequestKind, handler: RequestHandlerFn) -> None:
        if kind in self._handlers:
            logger.debug("Replacing fallback handler for %s", kind.method)
        self._handlers[kind] = handler

    def handler(self, kind: RequestKind) -> Callable[[RequestHandlerFn], RequestHandlerFn]:
        """Decorator form of register()."""

        def decorator(func: RequestHandlerFn) -> RequestHandlerFn:
            self.register(kind, func)
            return func

        return decorator

    def get(self, kind: RequestKind) -> RequestHandlerFn | None:
        return self._handlers.get(kind)

    def __contains__(self, kind: object) -> bool:
        return kind in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[RequestKind]:
        return iter(self._handlers)


class InterceptingRequestHandlers(UserDict[type, RequestHandlerFn]):
    """Stand-in for ``Server.request_handlers`` once a chat layer is attached.

    Reads behave like the plain dict the server had. Writes for a request class
    in RequestKind go to the registry instead, so the chat handlers installed
    with install() stay in front.
    """

    def __init__(self, registry: HandlerRegistry, handlers: Mapping[type, RequestHandlerFn] | None = None):
        self.registry = registry
        super().__init__()
        if handlers is not None:
            for request_type, handler in handlers.items():
                self[request_type] = handler

    def __setitem__(self, request_type: type, handler: RequestHandlerFn) -> None:
        kind = RequestKind.for_request_type(request_type)
        if kind is None:
            self.data[request_type] = handler
            return
        logger.debug("Capturing %s handler as chat fallback", kind.method)
        self.registry.register(kind, handler)

    def install(self, kind: RequestKind, handler: RequestHandlerFn) -> None:
        """Put a chat handler in front for ``kind``, bypassing interception."""
        self.data[kind.request_type] = handler
