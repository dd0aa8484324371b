#!/usr/bin/env python3
"""Message router: classify each inbound frame and dispatch it.

* ``auth``     – claim a display name, reply with recent history
* ``private``  – deliver to one named session plus an echo to the sender
* anything else, including plain text – broadcast to every other session

Routing is synchronous and never awaits a send: outbound frames are handed to
a fire‑and‑forget *deliver* callable, which by default is ``websockets``'
``broadcast`` (skips connections that are not open, logs failures per peer).
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Optional

from websockets.asyncio.server import broadcast

from .history import HistoryBuffer
from .packet_spec import has_required_fields
from .protocol import (
    ANONYMOUS, AUTH, AUTH_ERROR, AUTH_SUCCESS, BROADCAST, HISTORY_REPLAY,
    PRIVATE, RECIPIENT_NOT_FOUND, ChatMessage, envelope_kind, make_envelope,
    parse_envelope, utc_now,
)
from .registry import AuthError, SessionRegistry
from .util import LOG

Deliver = Callable[[Iterable[Any], str], None]


def deliver(connections: Iterable[Any], message: str) -> None:
    """Best‑effort send of one text frame to many websockets."""
    broadcast(connections, message, raise_exceptions=False)


def as_text(value: Any) -> str:
    """Message content as relayed text: null ➜ "", other non‑strings ➜ JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class MessageRouter:
    """Dispatches frames between the sessions of one :class:`SessionRegistry`."""

    def __init__(
        self,
        registry: SessionRegistry,
        history: Optional[HistoryBuffer] = None,
        deliver: Deliver = deliver,
        notify_missing_recipient: bool = False,
    ) -> None:
        self.registry = registry
        self.history = history if history is not None else HistoryBuffer()
        self._deliver = deliver
        self.notify_missing_recipient = notify_missing_recipient

    # ================================================================= entry ===
    def route(self, sid: int, raw: str | bytes) -> None:
        """Handle one inbound frame from session *sid*."""
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")

        envelope = parse_envelope(raw)
        if envelope is None:                       # Plain text ➜ broadcast
            self._handle_broadcast(sid, raw)
            return

        kind = envelope_kind(envelope)
        if kind in (AUTH, PRIVATE) and not has_required_fields(kind, envelope):
            LOG.warning("Malformed %r envelope from session %d relayed as broadcast", kind, sid)
            kind = BROADCAST

        if kind == AUTH:
            self._handle_auth(sid, envelope["username"])
        elif kind == PRIVATE:
            self._handle_private(sid, envelope["recipient"], envelope["content"])
        else:
            self._handle_broadcast(sid, as_text(envelope.get("content")))

    # ---------------------------------------------------------------- handlers
    def _handle_auth(self, sid: int, username: Any) -> None:
        try:
            self.registry.authenticate(sid, username)
        except AuthError as exc:
            LOG.info("Session %d failed to claim %r: %s", sid, username, exc)
            self._send(sid, make_envelope(AUTH_ERROR, content=str(exc)))
            return

        LOG.info("Session %d authenticated as %s", sid, username)
        history = [m.to_dict() for m in self.history.recent(HISTORY_REPLAY)]
        self._send(sid, make_envelope(
            AUTH_SUCCESS, content="Authentication successful", history=history,
        ))

    def _handle_private(self, sid: int, recipient: Any, content: Any) -> None:
        sender = self._sender_name(sid)
        target = self.registry.lookup(recipient) if isinstance(recipient, str) else None
        if target is None:
            LOG.info("Dropped private message from %s: no user %r", sender, recipient)
            if self.notify_missing_recipient:
                self._send(sid, make_envelope(
                    RECIPIENT_NOT_FOUND, recipient=recipient,
                    content=f"User '{recipient}' is not connected",
                ))
            return

        message = ChatMessage(PRIVATE, sender, as_text(content), utc_now(), recipient=recipient)
        LOG.info("Private message %s ➜ %s", sender, recipient)
        targets = {target, sid}                    # Self‑addressed ⇒ one copy
        self._deliver(
            [self.registry.connection_of(t) for t in targets],
            message.to_envelope(),
        )

    def _handle_broadcast(self, sid: int, content: str) -> None:
        message = ChatMessage(BROADCAST, self._sender_name(sid), content, utc_now())
        self.history.append(message)
        LOG.info("<%s> %s", message.sender, content)
        peers = self.registry.all_except(sid)
        self._deliver(
            [self.registry.connection_of(p) for p in peers],
            message.to_envelope(),
        )

    # ---------------------------------------------------------------- helpers
    def _sender_name(self, sid: int) -> str:
        name = self.registry.name_of(sid) if sid in self.registry else None
        return name if name is not None else ANONYMOUS

    def _send(self, sid: int, frame: str) -> None:
        self._deliver([self.registry.connection_of(sid)], frame)
