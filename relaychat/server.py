#!/usr/bin/env python3
"""WebSocket relay server managing:

* Name claims (unique, case‑sensitive, released on disconnect)
* Broadcasts to every other session + a 100‑entry replay history
* Private messages to one named session
* No persistence – everything lives in RAM until process exits.
"""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from .history import HistoryBuffer
from .protocol import AUTH_REQUEST, DEFAULT_HOST, DEFAULT_PORT, make_envelope
from .registry import SessionRegistry
from .router import MessageRouter
from .util import LOG


class RelayServer:
    """Event‑driven WebSocket server: one receive loop per connection, one router."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        notify_missing_recipient: bool = False,
    ) -> None:
        # Listening endpoint
        self.host = host
        self.port = port

        # ------ runtime state ------
        self.registry = SessionRegistry()
        self.history = HistoryBuffer()
        self.router = MessageRouter(
            self.registry, self.history,
            notify_missing_recipient=notify_missing_recipient,
        )

    @property
    def connection_count(self) -> int:
        return len(self.registry)

    # ================================================================= main ===
    def start(self) -> None:
        """Blocking entry point; returns once the listener has closed."""
        try:
            asyncio.run(self.serve())
        except KeyboardInterrupt:             # No signal handlers (Windows)
            LOG.info("Shutdown requested")
        LOG.info("Server stopped")

    async def serve(self, stop: Optional[asyncio.Future] = None) -> None:
        """Listen until *stop* resolves, or until SIGINT / SIGTERM when omitted."""
        loop = asyncio.get_running_loop()
        installed = []
        if stop is None:
            stop = loop.create_future()
            for signum in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(signum, _resolve, stop)
                    installed.append(signum)
                except (NotImplementedError, RuntimeError):
                    pass

        try:
            async with serve(self.handle_connection, self.host, self.port):
                LOG.info("Server started on ws://%s:%d", self.host, self.port)
                await stop
                LOG.info("Shutting down server...")
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)

    # ---------------------------------------------------------------- per connection
    async def handle_connection(self, websocket: ServerConnection) -> None:
        """Receive loop for one client: admit, prompt, route frames, tear down."""
        sid = self.registry.admit(websocket)
        LOG.info("New client connected. Total clients: %d", self.connection_count)
        try:
            await websocket.send(make_envelope(AUTH_REQUEST))
            async for frame in websocket:
                self.router.route(sid, frame)
        except ConnectionClosedError as exc:
            LOG.info("Session %d transport error: %s", sid, exc)
        except ConnectionClosed:
            pass                               # Closed while sending auth_request
        finally:
            self.registry.remove(sid)
            LOG.info("Client disconnected. Total clients: %d", self.connection_count)


def _resolve(stop: asyncio.Future) -> None:
    if not stop.done():
        stop.set_result(None)
