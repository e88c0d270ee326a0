"""Discovery of chat protocols and the send tools synthesized from them."""

from collections.abc import Iterable

import mcp.types as types

from mcp_chat.accessor import ChatAccessor
from mcp_chat.exceptions import MalformedResourceURIError
from mcp_chat.settings import MalformedURIPolicy
from mcp_chat.uri import parse_chat_uri
from mcp_chat.utilities.logging import get_logger

logger = get_logger(__name__)


class ProtocolDiscovery:
    """Derives the set of chat protocols from the resources the accessor lists.

    With the "strict" policy a single resource without a chat URI fails the
    whole discovery with MalformedResourceURIError. With "skip" that resource is
    left out and a warning is logged.
    """

    def __init__(self, accessor: ChatAccessor, policy: MalformedURIPolicy = "strict"):
        self.accessor = accessor
        self.policy = policy

    async def discover(self) -> list[str]:
        """Return the distinct protocols in order of first occurrence."""
        resources = await self.accessor.get_resources()
        protocols: dict[str, None] = {}
        for resource in resources:
            parsed = parse_chat_uri(resource.uri)
            if parsed is None:
                if self.policy == "strict":
                    raise MalformedResourceURIError(str(resource.uri))
                logger.warning("Skipping resource with non-chat URI: %s", resource.uri)
                continue
            protocols.setdefault(parsed.protocol, None)
        return list(protocols)


def synthesize_tools(protocols: Iterable[str], template: types.ResourceTemplate) -> list[types.Tool]:
    """Build one send-message tool per protocol.

    The tool is named after the protocol and takes the thread URI and the
    message text, both required.
    """
    uri_description = f"Resource URI in the format {template.uriTemplate}"
    if template.description:
        uri_description = f"{uri_description} -- {template.description}"

    return [
        types.Tool(
            name=protocol,
            description=f"Send a message on the {template.name} protocol using the resource URI",
            inputSchema={
                "type": "object",
                "properties": {
                    "uri": {
                        "type": "string",
                        "description": uri_description,
                    },
                    "message": {
                        "type": "string",
                        "description": "Message content to send",
                    },
                },
                "required": ["uri", "message"],
            },
        )
        for protocol in protocols
    ]
