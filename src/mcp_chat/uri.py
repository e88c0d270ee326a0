"""Parsing of chat resource URIs.

Chat threads are addressed as ``chat+<protocol>:///<path>``, for example
``chat+discord:///1234567890/1234567890``. The ``chat+<protocol>`` prefix is
the only thing used to tell chat backends apart.
"""

import re
from typing import NamedTuple

from pydantic import AnyUrl

_CHAT_URI_RE = re.compile(r"^(chat\+[^:]+):///(.*)", re.DOTALL)


class ChatURI(NamedTuple):
    protocol: str
    """Scheme including the ``chat+`` marker, e.g. ``chat+discord``."""
    pathname: str
    """Everything after the triple slash."""


def parse_chat_uri(uri: str | AnyUrl) -> ChatURI | None:
    """Split a chat resource URI into its protocol and path.

    Returns None when the URI is not a chat URI.
    """
    match = _CHAT_URI_RE.match(str(uri))
    if match is None:
        return None
    return ChatURI(protocol=match.group(1), pathname=match.group(2))
