#!/usr/bin/env python3
"""Session registry: live connections and the display names they hold.

Sessions are keyed by an integer id handed out on :meth:`SessionRegistry.admit`;
the connection object itself is only stored, never used as a key.  All
methods are synchronous, so when driven from a single asyncio event loop the
check‑then‑bind in :meth:`SessionRegistry.authenticate` cannot interleave
with another claim.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional


class AuthError(Exception):
    """A name claim was refused; the session stays unauthenticated."""


class NameTaken(AuthError):
    def __init__(self, name: str) -> None:
        super().__init__("Username already taken")
        self.name = name


class InvalidName(AuthError):
    def __init__(self, name: str) -> None:
        super().__init__("Username must not be empty")
        self.name = name


@dataclass(slots=True)
class Session:
    """Server‑side state for one live connection."""

    sid: int
    connection: Any               # Opaque transport handle (a websocket in practice)
    name: Optional[str] = None    # Set once authentication succeeds

    @property
    def authenticated(self) -> bool:
        return self.name is not None


class SessionRegistry:
    """Owns every live :class:`Session` and the name ➜ session index."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._sessions: Dict[int, Session] = {}    # sid ➜ session
        self._by_name: Dict[str, int] = {}         # name ➜ sid

    # ---------------------------------------------------------------- lifecycle
    def admit(self, connection: Any) -> int:
        sid = next(self._ids)
        self._sessions[sid] = Session(sid, connection)
        return sid

    def authenticate(self, sid: int, name: str) -> None:
        """Bind *name* to session *sid*.

        Raises:
            InvalidName: *name* is empty or whitespace only.
            NameTaken: another live session holds *name* (case‑sensitive).
            KeyError: *sid* is not a live session.
        """
        session = self._sessions[sid]
        if not isinstance(name, str) or not name.strip():
            raise InvalidName(name)
        holder = self._by_name.get(name)
        if holder is not None and holder != sid:
            raise NameTaken(name)
        if session.name is not None:
            self._by_name.pop(session.name, None)   # Rename releases the old name
        session.name = name
        self._by_name[name] = sid

    def remove(self, sid: int) -> None:
        """Drop the session and its name binding.  Unknown ids are ignored."""
        session = self._sessions.pop(sid, None)
        if session is not None and session.name is not None:
            if self._by_name.get(session.name) == sid:
                del self._by_name[session.name]

    # ---------------------------------------------------------------- queries
    def lookup(self, name: str) -> Optional[int]:
        return self._by_name.get(name)

    def all_except(self, sid: int) -> List[int]:
        """Snapshot of every live session id other than *sid*."""
        return [other for other in self._sessions if other != sid]

    def get(self, sid: int) -> Session:
        return self._sessions[sid]

    def name_of(self, sid: int) -> Optional[str]:
        return self._sessions[sid].name

    def connection_of(self, sid: int) -> Any:
        return self._sessions[sid].connection

    def names(self) -> List[str]:
        return list(self._by_name)

    def __contains__(self, sid: object) -> bool:
        return sid in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
