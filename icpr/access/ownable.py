# -*- coding: utf-8 -*-
"""
icpr.access.ownable
===================

Minimal, deterministic **Ownable** helper.

- read the current owner (`get_owner`)
- initialize the owner once (`init_owner`)
- check that a caller is the owner (`require_owner`)
- transfer ownership to a new account (`transfer_ownership`)
- renounce ownership (clear owner) (`renounce_ownership`)

Safety notes
------------
- `init_owner` does not overwrite a previously set owner.
- `transfer_ownership` rejects the null identity; use `renounce_ownership`
  explicitly to leave the contract without an owner. After renouncing, every
  owner-gated call fails permanently.
"""
from __future__ import annotations

from typing import Optional

from ..runtime import abi, events_api as events, storage_api as storage
from ..runtime.context import ZERO_ADDRESS
from ..runtime.error import ErrorKind
from . import ERR_NEW_OWNER_ZERO, ERR_NOT_OWNER, EVT_OWNERSHIP_TRANSFERRED, OWNER_KEY


def _emit(previous: Optional[bytes], new: Optional[bytes]) -> None:
    events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous or ZERO_ADDRESS, "new": new or ZERO_ADDRESS})


def get_owner() -> Optional[bytes]:
    """Return the current owner address, or None if unset/renounced."""
    v = storage.get(OWNER_KEY)
    return v if v else None


def init_owner(owner: bytes) -> None:
    """Set the initial owner and emit OwnershipTransferred(0x0, owner). No-op if already set."""
    if get_owner() is not None:
        return
    storage.set(OWNER_KEY, bytes(owner))
    _emit(None, owner)


def require_owner(caller: bytes) -> None:
    owner = get_owner()
    if owner is None or owner != caller:
        abi.revert(ERR_NOT_OWNER, ErrorKind.UNAUTHORIZED)


def transfer_ownership(caller: bytes, new_owner: bytes) -> None:
    require_owner(caller)
    if not new_owner or new_owner == ZERO_ADDRESS:
        abi.revert(ERR_NEW_OWNER_ZERO, ErrorKind.ZERO_ADDRESS)

    previous = get_owner()
    storage.set(OWNER_KEY, bytes(new_owner))
    _emit(previous, new_owner)


def renounce_ownership(caller: bytes) -> None:
    require_owner(caller)

    previous = get_owner()
    storage.set(OWNER_KEY, b"")
    _emit(previous, None)


__all__ = [
    "get_owner",
    "init_owner",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]
