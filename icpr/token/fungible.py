# -*- coding: utf-8 -*-
"""
ICPR fungible ledger (ERC-20 semantics)
=======================================

Deterministic, storage-backed balance/allowance/supply ledger. Every mutating
operation takes an explicit `caller` so the same functions serve the contract
entrypoints (which pass the transaction sender) and the permit flow (which
passes the recovered owner).

Highlights
----------
- Storage layout and reason strings from `icpr.token`.
- Events emitted via `icpr.runtime.events_api`:
    - b"Transfer" {"from": bytes, "to": bytes, "value": int}
    - b"Approval" {"owner": bytes, "spender": bytes, "value": int}
- U256-checked math via `icpr.math.safe_uint` (reverts, never wraps).
- Conservation: the only writers of the total supply are `_mint_to` and
  `_burn`, each of which moves the same amount on exactly one balance.

Public interface
----------------
# metadata & reads (pure)
name() -> str
symbol() -> str
decimals() -> int
total_supply() -> int
balance_of(account) -> int
allowance(owner, spender) -> int

# state-changing (explicit caller)
init_metadata(name, symbol, decimals) -> None
transfer(caller, to, amount) -> bool
approve(caller, spender, amount) -> bool
approve_unlimited(caller, spender) -> bool
transfer_from(caller, owner, to, amount) -> bool
increase_allowance(caller, spender, added) -> bool
decrease_allowance(caller, spender, subtracted) -> bool
burn(caller, amount) -> bool
burn_from(caller, holder, amount) -> bool

Minting is owner-gated and lives in `icpr.token.mintable`; it calls
`_mint_to` here.

Ordering notes
--------------
`transfer_from` moves the balance before it charges the allowance, so an
overdrawn balance reports "transfer amount exceeds balance" even when the
allowance is also short. `burn_from` does the opposite: the allowance is
charged first, so a short allowance wins over a short balance.
"""

from __future__ import annotations

from typing import Final, Tuple

from ..math.safe_uint import u256_add, u256_sub
from ..runtime import abi, events_api as events, storage_api as storage
from ..runtime.error import ErrorKind
from . import (
    DEFAULT_DECIMALS,
    ERR_ALREADY_INIT,
    ERR_APPROVE_FROM_ZERO,
    ERR_APPROVE_TO_ZERO,
    ERR_BURN_EXCEEDS_ALLOWANCE,
    ERR_BURN_EXCEEDS_BALANCE,
    ERR_BURN_FROM_ZERO,
    ERR_DECREASED_BELOW_ZERO,
    ERR_MINT_TO_ZERO,
    ERR_TRANSFER_EXCEEDS_ALLOWANCE,
    ERR_TRANSFER_EXCEEDS_BALANCE,
    ERR_TRANSFER_FROM_ZERO,
    ERR_TRANSFER_TO_ZERO,
    EVT_APPROVAL,
    EVT_TRANSFER,
    U256_MAX,
    ZERO_ADDRESS,
    AllowanceKind,
    key_allow,
    key_balance,
    require_address,
    require_amount,
    require_nonzero,
)

# ------------------------------------------------------------------------------
# Storage keys (metadata). Values are raw bytes unless noted.
# ------------------------------------------------------------------------------

K_NAME: Final[bytes] = b"tok:meta:name"  # UTF-8
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"  # UTF-8
K_DECIMALS: Final[bytes] = b"tok:meta:dec"  # u256
K_TOTAL: Final[bytes] = b"tok:meta:total"  # u256
K_INIT: Final[bytes] = b"tok:meta:inited"  # presence flag (b"1")

_ALLOW_RECORD_LEN: Final[int] = 33


# ------------------------------------------------------------------------------
# Internal IO helpers
# ------------------------------------------------------------------------------


def _set_balance(addr: bytes, amount: int) -> None:
    storage.set_int(key_balance(addr), amount)


def _read_allowance(owner: bytes, spender: bytes) -> Tuple[AllowanceKind, int]:
    raw = storage.get(key_allow(owner, spender))
    if not raw:
        return AllowanceKind.LIMITED, 0
    if len(raw) != _ALLOW_RECORD_LEN:
        abi.revert("TOKEN: corrupt allowance record", ErrorKind.INVALID_ARGUMENT)
    return AllowanceKind(raw[0]), int.from_bytes(raw[1:], "big")


def _write_allowance(owner: bytes, spender: bytes, kind: AllowanceKind, amount: int) -> None:
    storage.set(key_allow(owner, spender), bytes([int(kind)]) + amount.to_bytes(32, "big"))


def _emit_transfer(src: bytes, dst: bytes, amount: int) -> None:
    events.emit(EVT_TRANSFER, {"from": src, "to": dst, "value": amount})


def _emit_approval(owner: bytes, spender: bytes, amount: int) -> None:
    events.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": amount})


# ------------------------------------------------------------------------------
# Metadata & reads
# ------------------------------------------------------------------------------


def init_metadata(name: str, symbol: str, decimals: int = DEFAULT_DECIMALS) -> None:
    """One-time metadata initializer. Reverts if already initialized."""
    if storage.get(K_INIT):
        abi.revert(ERR_ALREADY_INIT, ErrorKind.ALREADY_INITIALIZED)
    abi.require(isinstance(name, str) and 0 < len(name) <= 64, "TOKEN: bad name")
    abi.require(isinstance(symbol, str) and 0 < len(symbol) <= 11, "TOKEN: bad symbol")
    abi.require(isinstance(decimals, int) and 0 <= decimals <= 77, "TOKEN: bad decimals")

    storage.set(K_NAME, name.encode("utf-8"))
    storage.set(K_SYMBOL, symbol.encode("utf-8"))
    storage.set_int(K_DECIMALS, decimals)
    storage.set(K_INIT, b"1")


def name() -> str:
    return (storage.get(K_NAME) or b"").decode("utf-8")


def symbol() -> str:
    return (storage.get(K_SYMBOL) or b"").decode("utf-8")


def decimals() -> int:
    return storage.get_int(K_DECIMALS)


def total_supply() -> int:
    return storage.get_int(K_TOTAL)


def balance_of(account: bytes) -> int:
    return storage.get_int(key_balance(require_address(account)))


def allowance(owner: bytes, spender: bytes) -> int:
    """Current allowance; an unlimited entry reads as U256_MAX."""
    kind, amount = _read_allowance(require_address(owner), require_address(spender))
    return U256_MAX if kind is AllowanceKind.UNLIMITED else amount


# ------------------------------------------------------------------------------
# Core movements
# ------------------------------------------------------------------------------


def _transfer(src: bytes, dst: bytes, amount: int) -> None:
    require_nonzero(src, ERR_TRANSFER_FROM_ZERO)
    require_nonzero(dst, ERR_TRANSFER_TO_ZERO)
    require_amount(amount)

    src_bal = u256_sub(
        storage.get_int(key_balance(src)), amount, ERR_TRANSFER_EXCEEDS_BALANCE, ErrorKind.INSUFFICIENT_BALANCE
    )
    _set_balance(src, src_bal)
    _set_balance(dst, u256_add(storage.get_int(key_balance(dst)), amount))
    _emit_transfer(src, dst, amount)


def _approve(owner: bytes, spender: bytes, amount: int, kind: AllowanceKind = AllowanceKind.LIMITED) -> None:
    require_nonzero(owner, ERR_APPROVE_FROM_ZERO)
    require_nonzero(spender, ERR_APPROVE_TO_ZERO)
    require_amount(amount)

    _write_allowance(owner, spender, kind, amount)
    _emit_approval(owner, spender, U256_MAX if kind is AllowanceKind.UNLIMITED else amount)


def _spend_allowance(owner: bytes, spender: bytes, amount: int, reason: str) -> None:
    """Charge `amount` against a limited allowance; unlimited entries are left as they are."""
    kind, current = _read_allowance(owner, spender)
    if kind is AllowanceKind.UNLIMITED:
        return
    _approve(owner, spender, u256_sub(current, amount, reason, ErrorKind.INSUFFICIENT_ALLOWANCE))


def _mint_to(to: bytes, amount: int) -> None:
    require_nonzero(to, ERR_MINT_TO_ZERO)
    require_amount(amount)

    storage.set_int(K_TOTAL, u256_add(total_supply(), amount))
    _set_balance(to, u256_add(storage.get_int(key_balance(to)), amount))
    _emit_transfer(ZERO_ADDRESS, to, amount)


def _burn(holder: bytes, amount: int) -> None:
    require_nonzero(holder, ERR_BURN_FROM_ZERO)
    require_amount(amount)

    bal = u256_sub(
        storage.get_int(key_balance(holder)), amount, ERR_BURN_EXCEEDS_BALANCE, ErrorKind.INSUFFICIENT_BALANCE
    )
    _set_balance(holder, bal)
    storage.set_int(K_TOTAL, u256_sub(total_supply(), amount))
    _emit_transfer(holder, ZERO_ADDRESS, amount)


# ------------------------------------------------------------------------------
# Public mutators
# ------------------------------------------------------------------------------


def transfer(caller: bytes, to: bytes, amount: int) -> bool:
    _transfer(require_address(caller), require_address(to), amount)
    return True


def approve(caller: bytes, spender: bytes, amount: int) -> bool:
    _approve(require_address(caller), require_address(spender), amount)
    return True


def approve_unlimited(caller: bytes, spender: bytes) -> bool:
    """Grant `spender` an allowance that spending never decrements."""
    _approve(require_address(caller), require_address(spender), 0, AllowanceKind.UNLIMITED)
    return True


def transfer_from(caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
    spender = require_address(caller)
    src = require_address(owner)
    _transfer(src, require_address(to), amount)
    _spend_allowance(src, spender, amount, ERR_TRANSFER_EXCEEDS_ALLOWANCE)
    return True


def increase_allowance(caller: bytes, spender: bytes, added: int) -> bool:
    """
    Raise the allowance by `added`. An unlimited entry counts as U256_MAX, so
    any positive increase on it overflows.
    """
    owner = require_address(caller)
    sp = require_address(spender)
    _approve(owner, sp, u256_add(allowance(owner, sp), require_amount(added)))
    return True


def decrease_allowance(caller: bytes, spender: bytes, subtracted: int) -> bool:
    """Lower the allowance by `subtracted`; the result is always a limited entry."""
    owner = require_address(caller)
    sp = require_address(spender)
    new = u256_sub(
        allowance(owner, sp), require_amount(subtracted), ERR_DECREASED_BELOW_ZERO, ErrorKind.INSUFFICIENT_ALLOWANCE
    )
    _approve(owner, sp, new)
    return True


def burn(caller: bytes, amount: int) -> bool:
    _burn(require_address(caller), amount)
    return True


def burn_from(caller: bytes, holder: bytes, amount: int) -> bool:
    """
    Destroy `amount` of `holder`'s tokens using `caller`'s allowance. The
    allowance is checked (and, when limited, reduced) before the balance.
    """
    spender = require_address(caller)
    src = require_address(holder)
    require_amount(amount)
    _spend_allowance(src, spender, amount, ERR_BURN_EXCEEDS_ALLOWANCE)
    _burn(src, amount)
    return True


__all__ = [
    "K_NAME",
    "K_SYMBOL",
    "K_DECIMALS",
    "K_TOTAL",
    "K_INIT",
    "init_metadata",
    "name",
    "symbol",
    "decimals",
    "total_supply",
    "balance_of",
    "allowance",
    "transfer",
    "approve",
    "approve_unlimited",
    "transfer_from",
    "increase_allowance",
    "decrease_allowance",
    "burn",
    "burn_from",
]
