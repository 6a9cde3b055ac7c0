"""
icpr.runtime.hash_api — deterministic hashing wrappers for the ledger runtime.

Goals
-----
- Strictly bytes-in, bytes-out (no implicit text/encoding).
- Keccak-256 as used by Ethereum tooling (pre-standard padding, *not*
  hashlib's sha3_256), provided by PyCryptodome.

Provided APIs
-------------
- keccak256(data: bytes) -> bytes
- keccak256_text(text: str) -> bytes       # UTF-8 encodes first
"""

from __future__ import annotations

from Crypto.Hash import keccak as _keccak

from .error import VmError


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise VmError(f"{name} must be bytes-like (got {type(buf).__name__})", code="hash_input")


def _new_keccak256():
    return _keccak.new(digest_bits=256)


def keccak256(data: bytes | bytearray | memoryview) -> bytes:
    """Keccak-256 (pre-SHA3) digest of `data`."""
    h = _new_keccak256()
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


def keccak256_text(text: str) -> bytes:
    if not isinstance(text, str):
        raise VmError(f"text must be str (got {type(text).__name__})", code="hash_input")
    return keccak256(text.encode("utf-8"))


__all__ = [
    "keccak256",
    "keccak256_text",
]
