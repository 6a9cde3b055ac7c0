# -*- coding: utf-8 -*-
"""
icpr.access
===========

Single-owner access control for ICPR contracts.

Storage layout
--------------
- Owner: key `b"access:owner"` → 20-byte address, or empty once renounced.

Events
------
- "OwnershipTransferred" args: {"previous": bytes, "new": bytes}
  (ZERO_ADDRESS stands for "no owner" on either side)

Quick usage (inside a contract)
-------------------------------
    from icpr.access import init_owner, require_owner

    def init() -> None:
        init_owner(abi.caller())

    def mint(to, amount) -> bool:
        require_owner(abi.caller())
        ...
"""

from __future__ import annotations

from typing import Final

OWNER_KEY: Final[bytes] = b"access:owner"
EVT_OWNERSHIP_TRANSFERRED: Final[bytes] = b"OwnershipTransferred"

ERR_NOT_OWNER: Final[str] = "Ownable: caller is not the owner"
ERR_NEW_OWNER_ZERO: Final[str] = "Ownable: new owner is the zero address"

from .ownable import (  # noqa: E402
    get_owner,
    init_owner,
    renounce_ownership,
    require_owner,
    transfer_ownership,
)

__all__ = [
    "OWNER_KEY",
    "EVT_OWNERSHIP_TRANSFERRED",
    "ERR_NOT_OWNER",
    "ERR_NEW_OWNER_ZERO",
    "get_owner",
    "init_owner",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]
