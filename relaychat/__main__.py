"""Allow ``python -m relaychat start|connect``."""

from .cli import main

main()
