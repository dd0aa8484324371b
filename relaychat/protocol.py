#!/usr/bin/env python3
"""Shared constants, helpers and the message record used by **both** client & server.

Everything that travels over the WebSocket is encoded/decoded via the
utilities here so that client & server never disagree on wire‑format details.
"""

from __future__ import annotations       # Postponed annotation evaluation (PEP 563)
import json                              # JSON is our lightweight wire format
from dataclasses import dataclass        # Immutable record type for chat messages
from datetime import datetime, timezone
from typing import Dict, Optional

# --- Network configuration -------------------------------------------------
DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 8765

# --- Server tunables -------------------------------------------------------
HISTORY_CAPACITY: int = 100     # Broadcasts kept in RAM
HISTORY_REPLAY: int = 10        # Broadcasts replayed on auth_success
ANONYMOUS: str = "Anonymous"    # Sender name of unauthenticated sessions

# --- Envelope kinds ---------------------------------------------------------
# Every frame carries a JSON object with a top‑level "type" field set to one of
# the symbolic strings below.  Inbound frames may spell the field "kind".
AUTH_REQUEST        = "auth_request"         # server → client, sent on connect
AUTH                = "auth"                 # client → server, name claim
AUTH_SUCCESS        = "auth_success"         # server → client, with history
AUTH_ERROR          = "auth_error"           # server → client, claim refused
PRIVATE             = "private"              # both directions
BROADCAST           = "broadcast"            # server → client
RECIPIENT_NOT_FOUND = "recipient_not_found"  # server → client, opt‑in notice

KIND_FIELDS = ("type", "kind")

# --- Envelope helpers -------------------------------------------------------

def make_envelope(kind: str, **payload) -> str:
    """Serialize a python dict ⟶ JSON text suitable for one WebSocket frame.

    Args:
        kind: symbolic envelope kind, one of the constants above.
        **payload: arbitrary key/value data (MUST be JSON‑serialisable).
    """
    return json.dumps({"type": kind, **payload})


def parse_envelope(data: str | bytes) -> Optional[Dict]:
    """Inverse of :func:`make_envelope`.

    Returns ``None`` when *data* is not a JSON object; the caller decides
    what plain text means.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    try:
        obj = json.loads(data)
    except (ValueError, RecursionError):     # Deep nesting exhausts the decoder
        return None
    return obj if isinstance(obj, dict) else None


def envelope_kind(envelope: Dict) -> Optional[str]:
    """Return the discriminator of *envelope*, whichever field carries it."""
    for field in KIND_FIELDS:
        if field in envelope:
            return envelope[field]
    return None

# --- Timestamps -------------------------------------------------------------

def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision of the wire."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(ts: datetime) -> str:
    """``2024-05-01T12:00:00.123Z``"""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"   # fromisoformat() only learned "Z" in 3.11
    return datetime.fromisoformat(text)

# --- Message record ---------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A broadcast or private message, stamped by the server when processed."""

    kind: str                         # BROADCAST or PRIVATE
    sender: str
    content: str
    timestamp: datetime
    recipient: Optional[str] = None   # PRIVATE only

    def to_dict(self) -> Dict:
        data = {
            "type": self.kind,
            "sender": self.sender,
            "content": self.content,
            "timestamp": format_timestamp(self.timestamp),
        }
        if self.recipient is not None:
            data["recipient"] = self.recipient
        return data

    def to_envelope(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict) -> "ChatMessage":
        return cls(
            kind=envelope_kind(data) or BROADCAST,
            sender=data["sender"],
            content=data["content"],
            timestamp=parse_timestamp(data["timestamp"]),
            recipient=data.get("recipient"),
        )

    @classmethod
    def from_envelope(cls, data: str | bytes) -> "ChatMessage":
        envelope = parse_envelope(data)
        if envelope is None:
            raise ValueError("not a JSON envelope")
        return cls.from_dict(envelope)
