"""
icpr.runtime.storage_api — host hooks for deterministic key/value storage.

This module provides the contract-facing storage primitives used by the token
modules (`storage.get(key)`, `storage.set(key, value)`).

Design goals
------------
- Deterministic: pure functions over (key, value) with no wall-clock or I/O.
- Per-contract: the host binds the storage of the contract being executed
  for the duration of a call (`bound(backend)`).
- Atomic: calls run against an `Overlay` whose writes reach the contract's
  committed state only through `Overlay.commit()`. A reverted call simply
  drops its overlay.
- Safe: strict byte-length caps; typed helpers for common int <-> bytes use.

Public API (contract-facing)
----------------------------
- get(key: bytes) -> Optional[bytes]
- set(key: bytes, value: bytes) -> None
- delete(key: bytes) -> None
- exists(key: bytes) -> bool
- get_int(key: bytes) -> int              # big-endian, unsigned, default 0
- set_int(key: bytes, value: int) -> None # 32-byte big-endian, u256 range

Host API
--------
- StorageBackend, MemoryBackend, Overlay
- bound(backend) context manager
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, Optional, Protocol, runtime_checkable

from .error import VmError

MAX_STORAGE_KEY_BYTES = 64
MAX_STORAGE_VALUE_BYTES = 64 * 1024

_U256_MAX = (1 << 256) - 1
_TOMBSTONE = object()


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for contract storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """Thread-safe in-memory backend holding one contract's committed state."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def snapshot(self) -> Dict[bytes, bytes]:
        """Copy of the committed key/value pairs (for inspection in tests/tools)."""
        with self._lock:
            return dict(self._store)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class Overlay:
    """
    Write buffer over a parent backend. Reads fall through to the parent for
    keys the call has not touched; `commit()` flushes the buffered writes.
    """

    def __init__(self, parent: StorageBackend) -> None:
        self._parent = parent
        self._writes: Dict[bytes, object] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        if key in self._writes:
            v = self._writes[key]
            return None if v is _TOMBSTONE else v  # type: ignore[return-value]
        return self._parent.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._writes[key] = value

    def delete(self, key: bytes) -> None:
        self._writes[key] = _TOMBSTONE

    def exists(self, key: bytes) -> bool:
        if key in self._writes:
            return self._writes[key] is not _TOMBSTONE
        return self._parent.exists(key)

    @property
    def dirty(self) -> int:
        return len(self._writes)

    def commit(self) -> None:
        for k, v in self._writes.items():
            if v is _TOMBSTONE:
                self._parent.delete(k)
            else:
                self._parent.set(k, v)  # type: ignore[arg-type]
        self._writes.clear()

    def discard(self) -> None:
        self._writes.clear()


_ACTIVE: ContextVar[Optional[StorageBackend]] = ContextVar("_icpr_storage", default=None)


@contextmanager
def bound(backend: StorageBackend) -> Iterator[StorageBackend]:
    """Route contract-facing storage calls to `backend` within the scope."""
    for attr in ("get", "set", "delete", "exists"):
        if not callable(getattr(backend, attr, None)):
            raise VmError(f"backend missing method: {attr}", code="storage_backend")
    token = _ACTIVE.set(backend)
    try:
        yield backend
    finally:
        _ACTIVE.reset(token)


def _backend() -> StorageBackend:
    b = _ACTIVE.get()
    if b is None:
        raise VmError("no storage bound (contract code invoked outside the host)", code="storage_unbound")
    return b


# --------------------------- Validation helpers --------------------------- #


def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)):
        raise VmError("storage key must be bytes", code="storage_key")
    if len(key) == 0:
        raise VmError("storage key must be non-empty", code="storage_key")
    if len(key) > MAX_STORAGE_KEY_BYTES:
        raise VmError(f"storage key too long (>{MAX_STORAGE_KEY_BYTES} bytes)", code="storage_key")


def _check_value(value: bytes) -> None:
    if not isinstance(value, (bytes, bytearray)):
        raise VmError("storage value must be bytes", code="storage_value")
    if len(value) > MAX_STORAGE_VALUE_BYTES:
        raise VmError(f"storage value too large (>{MAX_STORAGE_VALUE_BYTES} bytes)", code="storage_value")


# --------------------------- Contract-facing API --------------------------- #


def get(key: bytes) -> Optional[bytes]:
    """Return the value for `key`, or None if not set."""
    _check_key(key)
    return _backend().get(bytes(key))


def set(key: bytes, value: bytes) -> None:
    """Set `key` to `value` (overwrites existing)."""
    _check_key(key)
    _check_value(value)
    _backend().set(bytes(key), bytes(value))


def delete(key: bytes) -> None:
    """Delete `key` if present (no-op otherwise)."""
    _check_key(key)
    _backend().delete(bytes(key))


def exists(key: bytes) -> bool:
    _check_key(key)
    return _backend().exists(bytes(key))


# ------------------------------ Typed helpers ----------------------------- #


def get_int(key: bytes) -> int:
    """Read a big-endian unsigned integer at `key`; unset keys read as 0."""
    raw = get(key)
    if not raw:
        return 0
    return int.from_bytes(raw, byteorder="big", signed=False)


def set_int(key: bytes, value: int) -> None:
    """Store `value` as a 32-byte big-endian word. Enforces 0 <= value <= 2^256-1."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise VmError("set_int value must be int", code="storage_value")
    if value < 0 or value > _U256_MAX:
        raise VmError("set_int out of range (must fit in 256 bits)", code="storage_value")
    set(key, value.to_bytes(32, "big"))


__all__ = [
    "MAX_STORAGE_KEY_BYTES",
    "MAX_STORAGE_VALUE_BYTES",
    "StorageBackend",
    "MemoryBackend",
    "Overlay",
    "bound",
    "get",
    "set",
    "delete",
    "exists",
    "get_int",
    "set_int",
]
