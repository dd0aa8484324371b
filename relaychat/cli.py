#!/usr/bin/env python3
"""``relaychat start`` / ``relaychat connect`` command‑line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .protocol import DEFAULT_HOST, DEFAULT_PORT
from .util import LOG, LOG_FILE, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("relaychat", description="WebSocket broadcast chat")
    sub = parser.add_subparsers(dest="command", metavar="{start,connect}")
    sub.required = True                    # Exactly one action is mandatory

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--host", default=DEFAULT_HOST, help="Host address")
    common.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port number")
    common.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    common.add_argument("--log-file", default=LOG_FILE,
                        help="Rotating log file ('' disables file logging)")

    start = sub.add_parser("start", parents=[common], help="Start the broadcast server")
    start.add_argument("--notify-missing-recipient", action="store_true",
                       help="Tell senders when a private message has no recipient")

    sub.add_parser("connect", parents=[common], help="Connect to the broadcast server as a client")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Parse CLI args then run the server or the interactive client."""
    args = build_parser().parse_args(argv)
    configure_logging(getattr(logging, args.log_level), args.log_file or None)

    if args.command == "start":
        from .server import RelayServer
        server = RelayServer(args.host, args.port, args.notify_missing_recipient)
        try:
            server.start()
        except OSError as exc:             # e.g. port already in use
            LOG.error("Could not start server on %s:%d: %s", args.host, args.port, exc)
            sys.exit(1)
        sys.exit(0)

    from .client import RelayClient
    sys.exit(RelayClient(f"ws://{args.host}:{args.port}").start())


if __name__ == "__main__":
    main()
