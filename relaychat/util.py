#!/usr/bin/env python3
"""Logging utils shared by the relay server and the terminal client."""

from __future__ import annotations
import logging                           # Python stdlib logging framework
import sys                               # For stderr/stdout handles
from logging.handlers import RotatingFileHandler
from typing import Optional

__all__ = ["LOG", "LOG_FILE", "configure_logging"]

LOG_FILE = "relaychat.log"

# Importers simply do:
#     from relaychat.util import LOG
# Handlers are attached later by configure_logging(), called once from the CLI.
LOG = logging.getLogger("relaychat")

# ----------------------------------------------------------------------
# configure_logging() gives the shared logger both console + file output.
# ----------------------------------------------------------------------

def configure_logging(level: int = logging.INFO, logfile: Optional[str] = LOG_FILE) -> logging.Logger:
    """Attach handlers to the "relaychat" logger and return it.

    Safe to call more than once: existing handlers are replaced, not stacked.
    Pass ``logfile=None`` to log to stdout only.
    """
    LOG.setLevel(level)
    for handler in LOG.handlers[:]:
        LOG.removeHandler(handler)
        handler.close()

    # Unified log line format.  Example: [23:59:59] INFO     alice joined
    fmt = logging.Formatter("[%(asctime)s] %(levelname)-8s %(message)s", "%H:%M:%S")

    # ----- Console handler (stdout) -----
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    LOG.addHandler(sh)

    # ----- Rotating file handler -----
    # Rotates once file hits ±1 MiB, keeps 3 backups ⇒ log ≲ 4 MiB on disk.
    if logfile:
        fh = RotatingFileHandler(
            logfile,
            maxBytes=1_048_576,
            backupCount=3,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        LOG.addHandler(fh)

    return LOG
