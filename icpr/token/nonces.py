# -*- coding: utf-8 -*-
"""
Per-owner permit nonces.

Each owner has a counter under `tok:permit:nonce:<owner>`, starting at 0. A
permit signs the owner's *current* value; accepting it advances the counter
by exactly one, so each signature is usable at most once and permits for one
owner are consumed strictly in order.
"""

from __future__ import annotations

from typing import Final

from ..math.safe_uint import u256_add
from ..runtime import storage_api as storage

K_NONCE_PREFIX: Final[bytes] = b"tok:permit:nonce:"  # + owner


def _k_nonce(owner: bytes) -> bytes:
    return K_NONCE_PREFIX + bytes(owner)


def nonces(owner: bytes) -> int:
    """Current (unused) nonce for `owner`."""
    return storage.get_int(_k_nonce(owner))


def use_nonce(owner: bytes) -> int:
    """Return the current nonce for `owner` and store it incremented by one."""
    n = nonces(owner)
    storage.set_int(_k_nonce(owner), u256_add(n, 1))
    return n


__all__ = ["K_NONCE_PREFIX", "nonces", "use_nonce"]
