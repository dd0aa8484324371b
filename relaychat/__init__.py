"""Relay Chat – a minimal WebSocket broadcast / private‑message relay.

Importing this package exposes :class:`relaychat.RelayServer` and
:class:`relaychat.RelayClient`, allowing the whole stack to be embedded in
another application or launched via ``python -m relaychat``.
"""

# ------------------------ re-exports ------------------------
from .client import RelayClient                        # noqa: F401
from .history import HistoryBuffer                     # noqa: F401
from .protocol import ChatMessage                      # noqa: F401
from .registry import InvalidName, NameTaken, SessionRegistry  # noqa: F401
from .router import MessageRouter                      # noqa: F401
from .server import RelayServer                        # noqa: F401

# ------------------------ public API ------------------------
__all__: list[str] = [
    "ChatMessage",
    "HistoryBuffer",
    "InvalidName",
    "MessageRouter",
    "NameTaken",
    "RelayClient",
    "RelayServer",
    "SessionRegistry",
]
