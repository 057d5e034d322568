"""On-disk store for completed daily data chunks, one directory per chain."""

import hashlib
import json
import os
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path

from hex_stakes.constants import CACHE_DIR_NAME, CACHE_VERSION
from hex_stakes.models import Chain


def get_cache_dir(chain: Chain | None = None) -> Path:
    """Cache root (or a chain's subdirectory) under XDG_CACHE_HOME, falling back to ~/.cache."""
    cache_home = os.getenv("XDG_CACHE_HOME")
    root = (Path(cache_home) if cache_home else Path.home() / ".cache") / CACHE_DIR_NAME
    path = root if chain is None else root / chain.value
    path.mkdir(parents=True, exist_ok=True)
    return path


def clear_cache(chain: Chain | None = None) -> int:
    """Remove cached chunks for one chain, or for all chains. Returns the number of entries removed."""
    cache_dir = get_cache_dir(chain)
    removed = sum(1 for _ in cache_dir.rglob("*.json"))
    shutil.rmtree(cache_dir)
    where = f" for {chain}" if chain is not None else ""
    if removed:
        print(f"✅ Cleared {removed} cached daily data chunk(s){where}.", file=sys.stderr)
    else:
        print(f"ℹ️  Cache is empty{where} (nothing to clear).", file=sys.stderr)
    return removed


def chunk_key(begin: int, end: int) -> str:
    """File stem for the chunk [begin, end). Bumping CACHE_VERSION orphans every existing entry."""
    key_str = f"daily_data:{CACHE_VERSION}:{begin}:{end}"
    return hashlib.sha256(key_str.encode()).hexdigest()


def _chunk_path(chain: Chain, begin: int, end: int) -> Path:
    return get_cache_dir(chain) / f"{chunk_key(begin, end)}.json"


def load_daily_chunk(chain: Chain, begin: int, end: int) -> list[int] | None:
    """Packed words of a stored chunk, or None on a miss or an unreadable entry."""
    path = _chunk_path(chain, begin, end)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            words = [int(w) for w in json.load(f)]
    except (OSError, TypeError, ValueError):
        return None
    if len(words) != end - begin:
        # Truncated write
        return None
    return words


def store_daily_chunk(chain: Chain, begin: int, end: int, words: Sequence[int]) -> None:
    """Persist a chunk. Words are stored as decimal strings since they exceed JSON's safe integer range."""
    path = _chunk_path(chain, begin, end)
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump([str(w) for w in words], f, separators=(",", ":"))
    except OSError as ex:
        print(f"⚠️  Failed to cache daily data [{begin}, {end}) for {chain}: {ex}", file=sys.stderr)
