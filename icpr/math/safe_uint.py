# -*- coding: utf-8 -*-
"""
icpr.math.safe_uint
===================

Checked U256 arithmetic for the token ledger.

Every operation validates its inputs against [0, U256_MAX] and reverts instead
of wrapping. The reason strings are the ones wallets and clients already
pattern-match on for ERC-20 contracts:

- "SafeMath: addition overflow"      (ErrorKind.OVERFLOW)
- "SafeMath: subtraction overflow"   (ErrorKind.UNDERFLOW)

Ledger operations that want a domain-specific message (for example
"ERC20: burn amount exceeds balance") pass it as `reason`; the kind is chosen
by the caller too, so an overdrawn balance surfaces as INSUFFICIENT_BALANCE
rather than a bare UNDERFLOW.
"""

from __future__ import annotations

from typing import Final

from ..runtime import abi
from ..runtime.error import ErrorKind
from . import U256_MAX, require_u256

ERR_ADD_OVERFLOW: Final[str] = "SafeMath: addition overflow"
ERR_SUB_OVERFLOW: Final[str] = "SafeMath: subtraction overflow"


def u256_add(x: int, y: int, reason: str = ERR_ADD_OVERFLOW, kind: ErrorKind = ErrorKind.OVERFLOW) -> int:
    """Checked add: revert on overflow."""
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        abi.revert(reason, kind)
    return s


def u256_sub(x: int, y: int, reason: str = ERR_SUB_OVERFLOW, kind: ErrorKind = ErrorKind.UNDERFLOW) -> int:
    """Checked sub: revert on underflow (y > x)."""
    require_u256(x, y)
    if y > x:
        abi.revert(reason, kind)
    return x - y


__all__ = [
    "ERR_ADD_OVERFLOW",
    "ERR_SUB_OVERFLOW",
    "u256_add",
    "u256_sub",
]
