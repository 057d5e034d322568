"""HEX stake tracking package."""

from typing import NoReturn

__version__ = "0.1.0"


def _entry_point() -> NoReturn:
    """Entry point for the hex-stakes script."""
    import sys

    from hex_stakes.cli import main

    raise SystemExit(main(sys.argv[1:]))


def _clear_cache_entry_point() -> NoReturn:
    """Entry point for clearing the cache."""
    from hex_stakes.cache import clear_cache

    clear_cache()
    raise SystemExit(0)
