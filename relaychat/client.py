#!/usr/bin/env python3
"""Command‑line relay *client* supporting:

* Username claim with retry on ``auth_error``
* Replay of recent broadcasts after login
* Broadcasts (plain lines) and private messages (``@name text``)
* ANSI‑coloured output via *colorama*.

Usage (after installing package locally):

    relaychat connect --host 203.0.113.22 --port 8765
"""

from __future__ import annotations                # ↩ type hints forward refs OK

import sys                                         # Needed for prompt redraw
import threading                                   # Background listener thread
from typing import Dict, List, Optional

from websockets.exceptions import ConnectionClosed
from websockets.sync.client import ClientConnection, connect

# ---------- Shared protocol symbols / helpers ----------
from .protocol import (
    AUTH, AUTH_ERROR, AUTH_REQUEST, AUTH_SUCCESS, BROADCAST, PRIVATE,
    RECIPIENT_NOT_FOUND, envelope_kind, make_envelope, parse_envelope,
    parse_timestamp,
)

# ---------- Local utilities ----------
from .util import LOG

# 3rd‑party: coloured terminal output
from colorama import Fore, Style, init
init(autoreset=True)                               # Reset colour after each print

PROMPT = 'Enter message ("@username message" for private, "quit" to exit): '


def compose_outbound(line: str) -> Optional[str]:
    """Turn one line of user input into the frame to send.

    ``@bob hi there`` becomes a private envelope, anything else is sent as raw
    text.  Returns ``None`` for blank input.
    """
    if not line.strip():
        return None
    if line.startswith("@"):
        recipient, _, content = line[1:].partition(" ")
        return make_envelope(PRIVATE, recipient=recipient, content=content)
    return line


def local_time(timestamp: str) -> str:
    """ISO‑8601 wire timestamp ⟶ ``HH:MM:SS`` in the local timezone."""
    try:
        return parse_timestamp(timestamp).astimezone().strftime("%H:%M:%S")
    except (AttributeError, TypeError, ValueError):
        return "??:??:??"


class RelayClient:
    """Embeds the entire client state machine – can also be used programmatically."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        self.ws: Optional[ClientConnection] = None
        self.username: str = ""                    # Accepted name (set after auth)

        # Cooperative shutdown across threads
        self.running = threading.Event()

    # ================================================================== main ===
    def start(self) -> int:
        """Blocking run‑loop; returns the process exit status."""
        try:
            self.ws = connect(self.uri)
        except (OSError, ConnectionClosed) as exc:
            LOG.error("Connection error: %s", exc)
            return 1
        LOG.info("Connected to %s", self.uri)
        self.running.set()

        try:
            if not self._authenticate():
                return 0

            # -------- spawn receiver thread --------
            threading.Thread(target=self._recv_loop, daemon=True).start()

            # -------- main input loop --------
            while self.running.is_set():
                try:
                    line = input(PROMPT)               # Blocking stdin read
                except EOFError:                       # Ctrl‑D on *nix
                    break
                if line.strip().lower() == "quit":
                    break
                frame = compose_outbound(line)
                if frame is not None:
                    self._send(frame)
        except (KeyboardInterrupt, EOFError):          # Ctrl‑C, or stdin closed mid‑login
            pass
        finally:
            self.running.clear()
            self.ws.close()
        print("\nDisconnected from server")
        return 0

    # ---------------------------------------------------------------- handshake
    def _authenticate(self) -> bool:
        """Answer auth_request / auth_error until the server accepts a name."""
        while True:
            try:
                envelope = parse_envelope(self.ws.recv())
            except ConnectionClosed:
                print("\nDisconnected from server")
                return False
            if envelope is None:
                continue

            kind = envelope_kind(envelope)
            if kind == AUTH_SUCCESS:
                print(f"{Fore.GREEN}{envelope.get('content', '')}")
                self._show_history(envelope.get("history") or [])
                return True
            if kind == AUTH_ERROR:
                print(f"{Fore.RED}Error:{Style.RESET_ALL} {envelope.get('content', '')}")
            if kind in (AUTH_REQUEST, AUTH_ERROR):
                self.username = input("Enter your username: ")
                self._send(make_envelope(AUTH, username=self.username))

    def _show_history(self, history: List[Dict]) -> None:
        if not history:
            return
        print("\n=== Recent Messages ===")
        for msg in history:
            print(f"{msg.get('sender')} [{local_time(msg.get('timestamp'))}]: {msg.get('content')}")
        print("==================\n")

    # ---------------------------------------------------------------- networking
    def _send(self, frame: str) -> None:
        """Thin wrapper around ws.send() with basic error handling."""
        try:
            self.ws.send(frame)
        except ConnectionClosed as exc:
            LOG.error("Send failed: %s", exc)
            self.running.clear()

    def _recv_loop(self) -> None:
        """Background thread – prints inbound envelopes then redraws prompt."""
        while self.running.is_set():
            try:
                envelope = parse_envelope(self.ws.recv())
            except ConnectionClosed:
                if self.running.is_set():
                    self.running.clear()
                    # Unblocks input() in the main thread
                    threading.interrupt_main()
                break
            if envelope is None:
                continue
            self._render(envelope)
            # Prompt re‑paint so the user's current input line isn't lost
            sys.stdout.write(PROMPT)
            sys.stdout.flush()

    def _render(self, envelope: Dict) -> None:
        kind = envelope_kind(envelope)
        when = local_time(envelope.get("timestamp"))
        if kind == BROADCAST:
            print(f"\r{Fore.GREEN}{envelope.get('sender')} [{when}]:{Style.RESET_ALL} {envelope.get('content')}")
        elif kind == PRIVATE:
            print(f"\r{Fore.MAGENTA}Private message from {envelope.get('sender')} [{when}]:{Style.RESET_ALL} {envelope.get('content')}")
        elif kind == RECIPIENT_NOT_FOUND:
            print(f"\r{Fore.CYAN}[SYSTEM]{Style.RESET_ALL} {envelope.get('content')}")
