# -*- coding: utf-8 -*-
"""
ICPR — "ICP Reboot" token contract
----------------------------------

The deployable contract module: ERC-20 surface with owner-gated minting,
burning, and EIP-2612 permits. Deploy with `LedgerHost.deploy(deployer,
icpr.contract)`; the deployer becomes the owner and receives the genesis
supply.

Views:
  - name() -> str                      "ICP Reboot"
  - symbol() -> str                    "ICPR"
  - decimals() -> int                  18
  - totalSupply() -> int
  - balanceOf(account) -> int
  - allowance(owner, spender) -> int   (2**256-1 for an unlimited approval)
  - owner() -> bytes                   (ZERO_ADDRESS once renounced)
  - nonces(owner) -> int
  - DOMAIN_SEPARATOR() -> bytes32
State-changing (caller = transaction sender):
  - transfer(to, amount) -> bool
  - approve(spender, amount) -> bool
  - approveUnlimited(spender) -> bool
  - transferFrom(src, dst, amount) -> bool
  - increaseAllowance(spender, added) -> bool
  - decreaseAllowance(spender, subtracted) -> bool
  - mint(to, amount) -> bool                       (owner-only)
  - burn(amount) -> bool
  - burnFrom(account, amount) -> bool
  - transferOwnership(new_owner) -> None           (owner-only)
  - renounceOwnership() -> None                    (owner-only)
  - permit(owner, spender, value, deadline, v, r, s) -> bool

Addresses may be passed as 20 raw bytes or hex strings.

Event names (bytes):
  b"Transfer", b"Approval", b"OwnershipTransferred"
"""
from __future__ import annotations

from typing import Final

from .access import get_owner, init_owner, renounce_ownership, transfer_ownership
from .runtime import abi
from .runtime.context import ZERO_ADDRESS
from .token import DEFAULT_DECIMALS, fungible, mintable, nonces as _nonces, permit as _permit, require_address

TOKEN_NAME: Final[str] = "ICP Reboot"
TOKEN_SYMBOL: Final[str] = "ICPR"
TOKEN_VERSION: Final[str] = "1"
DECIMALS: Final[int] = DEFAULT_DECIMALS
GENESIS_SUPPLY: Final[int] = 470_000_000 * 10**DECIMALS

# ----------------------------
# Initialization
# ----------------------------


def init() -> None:
    """
    Genesis: metadata, owner = deployer, GENESIS_SUPPLY minted to the
    deployer, and the EIP-712 domain separator bound to this chain and
    address. Reverts if already initialized.
    """
    deployer = abi.caller()
    fungible.init_metadata(TOKEN_NAME, TOKEN_SYMBOL, DECIMALS)
    init_owner(deployer)
    fungible._mint_to(deployer, GENESIS_SUPPLY)
    _permit.init_permit(TOKEN_NAME, TOKEN_VERSION, abi.chain_id(), abi.this_address())

# ----------------------------
# Views
# ----------------------------


def name() -> str:
    return fungible.name()


def symbol() -> str:
    return fungible.symbol()


def decimals() -> int:
    return fungible.decimals()


def totalSupply() -> int:
    return fungible.total_supply()


def balanceOf(account) -> int:
    return fungible.balance_of(account)


def allowance(owner, spender) -> int:
    return fungible.allowance(owner, spender)


def owner() -> bytes:
    return get_owner() or ZERO_ADDRESS


def nonces(owner) -> int:
    return _nonces.nonces(require_address(owner))


def DOMAIN_SEPARATOR() -> bytes:
    return _permit.domain_separator()

# ----------------------------
# ERC-20 mutators
# ----------------------------


def transfer(to, amount: int) -> bool:
    return fungible.transfer(abi.caller(), to, amount)


def approve(spender, amount: int) -> bool:
    return fungible.approve(abi.caller(), spender, amount)


def approveUnlimited(spender) -> bool:
    return fungible.approve_unlimited(abi.caller(), spender)


def transferFrom(src, dst, amount: int) -> bool:
    return fungible.transfer_from(abi.caller(), src, dst, amount)


def increaseAllowance(spender, added: int) -> bool:
    return fungible.increase_allowance(abi.caller(), spender, added)


def decreaseAllowance(spender, subtracted: int) -> bool:
    return fungible.decrease_allowance(abi.caller(), spender, subtracted)

# ----------------------------
# Supply
# ----------------------------


def mint(to, amount: int) -> bool:
    return mintable.mint(abi.caller(), to, amount)


def burn(amount: int) -> bool:
    return fungible.burn(abi.caller(), amount)


def burnFrom(account, amount: int) -> bool:
    return fungible.burn_from(abi.caller(), account, amount)

# ----------------------------
# Ownership
# ----------------------------


def transferOwnership(new_owner) -> None:
    transfer_ownership(abi.caller(), require_address(new_owner))


def renounceOwnership() -> None:
    renounce_ownership(abi.caller())

# ----------------------------
# Permit
# ----------------------------


def permit(owner, spender, value: int, deadline: int, v: int, r, s) -> bool:
    return _permit.permit(owner, spender, value, deadline, v, r, s, abi.block_timestamp())


__all__ = [
    "init",
    "name",
    "symbol",
    "decimals",
    "totalSupply",
    "balanceOf",
    "allowance",
    "owner",
    "nonces",
    "DOMAIN_SEPARATOR",
    "transfer",
    "approve",
    "approveUnlimited",
    "transferFrom",
    "increaseAllowance",
    "decreaseAllowance",
    "mint",
    "burn",
    "burnFrom",
    "transferOwnership",
    "renounceOwnership",
    "permit",
]
