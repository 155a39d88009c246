from __future__ import annotations

import hashlib
import random

CACHE_PRESENCE_STREAM_PREFIX = "cache_presence"
CACHE_COINS_STREAM_PREFIX = "cache_coins"


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def cell_stream(master_seed: int, prefix: str, key: str) -> random.Random:
    """Per-cell stream; draws never depend on the order cells are visited in."""
    return random.Random(derive_stream_seed(master_seed=master_seed, stream_name=f"{prefix}:{key}"))
