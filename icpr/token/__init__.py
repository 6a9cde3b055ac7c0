# -*- coding: utf-8 -*-
"""
icpr.token
==========

Shared conventions for the ICPR token modules: storage prefixes, event names,
revert reasons and argument guards. This package performs no storage or event
I/O itself; `fungible`, `mintable`, `nonces` and `permit` do, through
`icpr.runtime.storage_api` / `events_api`.

Storage keys (prefixed bytes)
-----------------------------
  - balances:    BAL_PREFIX || <addr>
  - allowances:  ALLOW_PREFIX || <owner> || b"|" || <spender>
Addresses are raw 20-byte values; hex presentation is for clients only.

Allowance records are 33 bytes: one `AllowanceKind` byte followed by the
32-byte big-endian amount. An UNLIMITED record is never decremented by
`transfer_from` / `burn_from`; `allowance()` reports it as U256_MAX.

Events (names as bytes)
-----------------------
  - b"Transfer" { "from": bytes, "to": bytes, "value": int }
  - b"Approval" { "owner": bytes, "spender": bytes, "value": int }
Mint and burn use ZERO_ADDRESS as the `from` / `to` side.

Revert reasons
--------------
The reason strings are the exact texts ERC-20 tooling expects (e.g.
"ERC20: burn amount exceeds balance"); each revert also carries an
`ErrorKind` for programmatic matching.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final, Union

from ..math import U256_MAX, is_u256
from ..runtime import abi
from ..runtime.context import ZERO_ADDRESS, ContextError, to_address
from ..runtime.error import ErrorKind

# -----------------------------------------------------------------------------
# Storage prefixes & event names
# -----------------------------------------------------------------------------

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"

DEFAULT_DECIMALS: Final[int] = 18

# -----------------------------------------------------------------------------
# Revert reasons
# -----------------------------------------------------------------------------

ERR_BAD_ADDR: Final[str] = "TOKEN: malformed address"
ERR_BAD_AMOUNT: Final[str] = "TOKEN: amount out of range"
ERR_ALREADY_INIT: Final[str] = "TOKEN: already initialized"

ERR_TRANSFER_FROM_ZERO: Final[str] = "ERC20: transfer from the zero address"
ERR_TRANSFER_TO_ZERO: Final[str] = "ERC20: transfer to the zero address"
ERR_TRANSFER_EXCEEDS_BALANCE: Final[str] = "ERC20: transfer amount exceeds balance"
ERR_TRANSFER_EXCEEDS_ALLOWANCE: Final[str] = "ERC20: transfer amount exceeds allowance"
ERR_APPROVE_FROM_ZERO: Final[str] = "ERC20: approve from the zero address"
ERR_APPROVE_TO_ZERO: Final[str] = "ERC20: approve to the zero address"
ERR_DECREASED_BELOW_ZERO: Final[str] = "ERC20: decreased allowance below zero"
ERR_MINT_TO_ZERO: Final[str] = "ERC20: mint to the zero address"
ERR_BURN_FROM_ZERO: Final[str] = "ERC20: burn from the zero address"
ERR_BURN_EXCEEDS_BALANCE: Final[str] = "ERC20: burn amount exceeds balance"
ERR_BURN_EXCEEDS_ALLOWANCE: Final[str] = "ERC20: burn amount exceeds allowance"


class AllowanceKind(IntEnum):
    LIMITED = 0
    UNLIMITED = 1


# -----------------------------------------------------------------------------
# Key derivation (no storage I/O here)
# -----------------------------------------------------------------------------


def key_balance(addr: bytes) -> bytes:
    return BAL_PREFIX + bytes(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    return ALLOW_PREFIX + bytes(owner) + b"|" + bytes(spender)


# -----------------------------------------------------------------------------
# Argument guards
# -----------------------------------------------------------------------------


def require_address(addr: Union[bytes, bytearray, str]) -> bytes:
    """
    Normalize `addr` (20 raw bytes, or hex with/without 0x in any casing) to
    bytes. Malformed input reverts; the null identity is accepted here and
    rejected by the operations that forbid it.
    """
    try:
        return to_address(addr)
    except ContextError:
        abi.revert(ERR_BAD_ADDR, ErrorKind.INVALID_ARGUMENT, context={"value": repr(addr)})


def require_nonzero(addr: bytes, reason: str) -> None:
    if addr == ZERO_ADDRESS:
        abi.revert(reason, ErrorKind.ZERO_ADDRESS)


def require_amount(n: int) -> int:
    """Ensure `n` is an integer amount in [0, 2**256-1]."""
    if not is_u256(n):
        abi.revert(ERR_BAD_AMOUNT, ErrorKind.INVALID_ARGUMENT, context={"value": repr(n)})
    return n


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "DEFAULT_DECIMALS",
    "U256_MAX",
    "ZERO_ADDRESS",
    "AllowanceKind",
    "ERR_BAD_ADDR",
    "ERR_BAD_AMOUNT",
    "ERR_ALREADY_INIT",
    "ERR_TRANSFER_FROM_ZERO",
    "ERR_TRANSFER_TO_ZERO",
    "ERR_TRANSFER_EXCEEDS_BALANCE",
    "ERR_TRANSFER_EXCEEDS_ALLOWANCE",
    "ERR_APPROVE_FROM_ZERO",
    "ERR_APPROVE_TO_ZERO",
    "ERR_DECREASED_BELOW_ZERO",
    "ERR_MINT_TO_ZERO",
    "ERR_BURN_FROM_ZERO",
    "ERR_BURN_EXCEEDS_BALANCE",
    "ERR_BURN_EXCEEDS_ALLOWANCE",
    "key_balance",
    "key_allow",
    "require_address",
    "require_nonzero",
    "require_amount",
]
