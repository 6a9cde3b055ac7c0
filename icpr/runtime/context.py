"""
icpr.runtime.context — BlockEnv/TxEnv/CallEnv passed to contracts (deterministic)

These lightweight environments are bound by the ledger host around each call
so contracts can read chain/transaction metadata in a *deterministic* way.
They contain only pure data (ints/bytes) and perform strict validation.

Design notes
------------
- Addresses are raw 20-byte values. Hex strings (with or without "0x", any
  checksum casing) are accepted by helpers and normalized to bytes.
- All numeric fields are validated to be non-negative.
- `chain_id` is included in BlockEnv so contracts can bind signatures to the
  network (EIP-712 domain separation).
- `timestamp` is the host's logical block time, never wall-clock time.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, Optional, Union

ADDRESS_BYTES = 20
ZERO_ADDRESS = b"\x00" * ADDRESS_BYTES


# ----------------------------- helpers ----------------------------- #

class ContextError(Exception):
    """Validation or coercion failure for host-side environments."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_address(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """Coerce `value` to a 20-byte account identity."""
    b = to_bytes(value)
    if len(b) != ADDRESS_BYTES:
        raise ContextError(f"address must be {ADDRESS_BYTES} bytes, got {len(b)}")
    return b


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def _require_non_negative_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- models ------------------------------ #

@dataclass(frozen=True)
class BlockEnv:
    """
    Deterministic per-block environment.

    Fields
    ------
    number:     Block number (0 = genesis).
    timestamp:  Logical block timestamp (seconds).
    chain_id:   Integer chain identifier.
    """
    number: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "number", _require_non_negative_int("number", self.number))
        object.__setattr__(self, "timestamp", _require_non_negative_int("timestamp", self.timestamp))
        object.__setattr__(self, "chain_id", _require_non_negative_int("chain_id", self.chain_id))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TxEnv:
    """
    Deterministic per-transaction environment.

    Fields
    ------
    sender:  Originator address (20 bytes).
    to:      Call target address, or None for a deployment.
    nonce:   Sender's transaction count at submission.
    """
    sender: bytes
    to: Optional[bytes]
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", to_address(self.sender))
        if self.to is not None:
            object.__setattr__(self, "to", to_address(self.to))
        object.__setattr__(self, "nonce", _require_non_negative_int("nonce", self.nonce))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": to_hex(self.sender),
            "to": (to_hex(self.to) if self.to is not None else None),
            "nonce": self.nonce,
        }


@dataclass(frozen=True)
class CallEnv:
    """Everything a contract may observe about the call it is executing in."""
    block: BlockEnv
    tx: TxEnv
    address: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", to_address(self.address))


# ----------------------------- binding ----------------------------- #

_CURRENT: ContextVar[Optional[CallEnv]] = ContextVar("_icpr_call_env", default=None)


def current() -> CallEnv:
    env = _CURRENT.get()
    if env is None:
        raise ContextError("no active call context (contract code invoked outside the host)")
    return env


@contextmanager
def bound(env: CallEnv) -> Iterator[CallEnv]:
    """Bind `env` as the active call context for the duration of the scope."""
    token = _CURRENT.set(env)
    try:
        yield env
    finally:
        _CURRENT.reset(token)


__all__ = [
    "ADDRESS_BYTES",
    "ZERO_ADDRESS",
    "ContextError",
    "to_bytes",
    "to_address",
    "to_hex",
    "BlockEnv",
    "TxEnv",
    "CallEnv",
    "current",
    "bound",
]
