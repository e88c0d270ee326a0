"""
Request handlers the chat layer installs on a server.

Each handler answers from chat state where it can and falls back to the
handler the application registered for the same request kind:

- tools/list: fallback tools, then one send tool per chat protocol
- tools/call: chat protocols write a message, other tools go to the fallback
- resources/read: threads known to the accessor are returned as JSON, other
  URIs go to the fallback
- resources/list: chat resources, then fallback resources
- resources/templates/list: the chat template, then fallback templates

List results keep the fallback's nextCursor. Chat entries are only added to
the first page.
"""

from __future__ import annotations

from typing import Any, TypeVar

import mcp.types as types
from mcp.server.lowlevel import Server
from pydantic import ValidationError

from mcp_chat.accessor import ChatAccessor
from mcp_chat.discovery import ProtocolDiscovery, synthesize_tools
from mcp_chat.exceptions import ChatError, InvalidToolArgumentsError
from mcp_chat.registry import HandlerRegistry, InterceptingRequestHandlers, RequestKind
from mcp_chat.types import ChatThread, SendChatMessageArguments
from mcp_chat.utilities.logging import get_logger

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=types.Result)


def _is_first_page(req: Any) -> bool:
    params = getattr(req, "params", None)
    return params is None or getattr(params, "cursor", None) is None


class DispatchFacade:
    def __init__(
        self,
        accessor: ChatAccessor,
        discovery: ProtocolDiscovery,
        registry: HandlerRegistry,
        resource_template: types.ResourceTemplate,
        mime_type: str = "application/json",
        json_indent: int | None = 2,
    ):
        self.accessor = accessor
        self.discovery = discovery
        self.registry = registry
        self.resource_template = resource_template
        self.mime_type = mime_type
        self.json_indent = json_indent

    def install(self, server: Server[Any, Any]) -> InterceptingRequestHandlers:
        """Put the chat handlers in front of the server's own handlers.

        Handlers the server already has for the chat request kinds become
        fallbacks, and so does anything registered for them from now on.
        """
        if isinstance(server.request_handlers, InterceptingRequestHandlers):
            raise ChatError(f"A chat layer is already attached to server {server.name!r}")

        handlers = InterceptingRequestHandlers(self.registry, server.request_handlers)
        handlers.install(RequestKind.LIST_TOOLS, self.list_tools)
        handlers.install(RequestKind.CALL_TOOL, self.call_tool)
        handlers.install(RequestKind.READ_RESOURCE, self.read_resource)
        handlers.install(RequestKind.LIST_RESOURCES, self.list_resources)
        handlers.install(RequestKind.LIST_RESOURCE_TEMPLATES, self.list_resource_templates)
        # Server annotates request_handlers as a dict; the UserDict serves the same reads
        server.request_handlers = handlers  # type: ignore[assignment]
        logger.debug("Chat handlers installed on server %r", server.name)
        return handlers

    async def _call_fallback(self, kind: RequestKind, req: Any) -> types.ServerResult | None:
        handler = self.registry.get(kind)
        if handler is None:
            return None
        logger.debug("Delegating %s to fallback handler", kind.method)
        result = await handler(req)
        if isinstance(result, types.ServerResult):
            return result
        return types.ServerResult(result)

    async def _fallback_result(self, kind: RequestKind, req: Any, result_type: type[ResultT]) -> ResultT | None:
        result = await self._call_fallback(kind, req)
        if result is None:
            return None
        if not isinstance(result.root, result_type):
            raise ChatError(
                f"Fallback handler for {kind.method} returned {type(result.root).__name__}, "
                f"expected {result_type.__name__}"
            )
        return result.root

    async def list_tools(self, req: types.ListToolsRequest | None) -> types.ServerResult:
        fallback = await self._fallback_result(RequestKind.LIST_TOOLS, req, types.ListToolsResult)
        tools = list(fallback.tools) if fallback is not None else []
        if _is_first_page(req):
            protocols = await self.discovery.discover()
            tools.extend(synthesize_tools(protocols, self.resource_template))
        return types.ServerResult(
            types.ListToolsResult(tools=tools, nextCursor=fallback.nextCursor if fallback is not None else None)
        )

    async def call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        name = req.params.name
        protocols = await self.discovery.discover()
        if name not in protocols:
            result = await self._call_fallback(RequestKind.CALL_TOOL, req)
            if result is None:
                return types.ServerResult(types.CallToolResult(content=[]))
            return result

        try:
            arguments = SendChatMessageArguments.model_validate(req.params.arguments or {})
        except ValidationError as e:
            raise InvalidToolArgumentsError(
                name,
                [{"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in e.errors()],
            ) from e

        summary = await self.accessor.write_message(arguments.uri, arguments.message)
        return types.ServerResult(
            types.CallToolResult(content=[types.TextContent(type="text", text=summary or "")])
        )

    async def read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        uri = str(req.params.uri)
        messages = await self.accessor.read_messages(uri)
        if messages is None:
            result = await self._call_fallback(RequestKind.READ_RESOURCE, req)
            if result is None:
                return types.ServerResult(types.ReadResourceResult(contents=[]))
            return result

        thread = ChatThread(uri=uri, messages=messages)
        return types.ServerResult(
            types.ReadResourceResult(
                contents=[
                    types.TextResourceContents(
                        uri=req.params.uri,
                        mimeType=self.mime_type,
                        text=thread.model_dump_json(indent=self.json_indent),
                    )
                ]
            )
        )

    async def list_resources(self, req: types.ListResourcesRequest | None) -> types.ServerResult:
        resources = await self.accessor.get_resources() if _is_first_page(req) else []
        fallback = await self._fallback_result(RequestKind.LIST_RESOURCES, req, types.ListResourcesResult)
        if fallback is not None:
            resources.extend(fallback.resources)
        next_cursor = fallback.nextCursor if fallback is not None else None
        return types.ServerResult(types.ListResourcesResult(resources=resources, nextCursor=next_cursor))

    async def list_resource_templates(self, req: types.ListResourceTemplatesRequest | None) -> types.ServerResult:
        templates = [self.resource_template] if _is_first_page(req) else []
        fallback = await self._fallback_result(
            RequestKind.LIST_RESOURCE_TEMPLATES, req, types.ListResourceTemplatesResult
        )
        if fallback is not None:
            templates.extend(fallback.resourceTemplates)
        return types.ServerResult(
            types.ListResourceTemplatesResult(
                resourceTemplates=templates, nextCursor=fallback.nextCursor if fallback is not None else None
            )
        )
