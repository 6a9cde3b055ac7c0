# -*- coding: utf-8 -*-
"""
EIP-2612 permits for the ICPR ledger
====================================

Gasless approvals: a holder signs a typed Permit message off-chain with any
EIP-712 capable wallet, and *anyone* may submit it. On success the owner's
nonce is consumed and the allowance `owner -> spender` is overwritten with
`value`, exactly as if the owner had called `approve`.

Flow
----
1. Deadline: the executing block's timestamp must be `<= deadline`
   ("ERC20Permit: expired deadline"). A permit submitted in the block whose
   timestamp equals the deadline is still valid.
2. Digest: keccak256(0x1901 || DOMAIN_SEPARATOR || structHash) where the
   struct hash binds (owner, spender, value, nonces(owner), deadline).
3. Recovery: secp256k1 recovery must yield `owner`
   ("ERC20Permit: invalid signature" for any mismatch or malformed input).
4. Effects: nonce += 1, then approve(owner, spender, value).

Steps 1-3 are pure. If step 4 fails the host drops the nonce write together
with everything else the call did.

State
-----
- Domain separator: `tok:permit:domain` (32 bytes), written once by
  `init_permit` from (name, version, chain id, contract address).
- Nonces: see `icpr.token.nonces`.
"""

from __future__ import annotations

import logging
from typing import Final

from ..runtime import abi, storage_api as storage
from ..runtime.context import to_hex
from ..runtime.error import ErrorKind
from . import require_address, require_amount
from .ecrecover import Word, recover
from .eip712 import domain_separator as _build_domain_separator
from .eip712 import permit_digest
from .fungible import _approve
from .nonces import nonces, use_nonce

log = logging.getLogger(__name__)

K_DOMAIN: Final[bytes] = b"tok:permit:domain"

ERR_EXPIRED: Final[str] = "ERC20Permit: expired deadline"
ERR_INVALID_SIGNATURE: Final[str] = "ERC20Permit: invalid signature"
ERR_DOMAIN_SET: Final[str] = "ERC20Permit: domain already initialized"
ERR_DOMAIN_UNSET: Final[str] = "ERC20Permit: domain not initialized"


def init_permit(name: str, version: str, chain_id: int, verifying_contract: bytes) -> bytes:
    """Compute and store the domain separator. Reverts if one is already stored."""
    if storage.get(K_DOMAIN):
        abi.revert(ERR_DOMAIN_SET, ErrorKind.ALREADY_INITIALIZED)
    ds = _build_domain_separator(name, version, chain_id, verifying_contract)
    storage.set(K_DOMAIN, ds)
    return ds


def domain_separator() -> bytes:
    ds = storage.get(K_DOMAIN)
    if not ds:
        abi.revert(ERR_DOMAIN_UNSET, ErrorKind.INVALID_ARGUMENT)
    return ds


def permit(
    owner: bytes,
    spender: bytes,
    value: int,
    deadline: int,
    v: int,
    r: Word,
    s: Word,
    now: int,
) -> bool:
    """
    Verify a signed Permit and apply it. `now` is the timestamp of the block
    the call executes in.
    """
    owner_b = require_address(owner)
    spender_b = require_address(spender)
    require_amount(value)
    require_amount(deadline)

    if now > deadline:
        abi.revert(ERR_EXPIRED, ErrorKind.EXPIRED, context={"deadline": deadline, "now": now})

    nonce = nonces(owner_b)
    digest = permit_digest(domain_separator(), owner_b, spender_b, value, nonce, deadline)
    signer = recover(digest, v, r, s)
    if signer is None or signer != owner_b:
        log.debug(
            "permit rejected",
            extra={"owner": to_hex(owner_b), "signer": to_hex(signer) if signer else None, "nonce": nonce},
        )
        abi.revert(ERR_INVALID_SIGNATURE, ErrorKind.INVALID_SIGNATURE)

    use_nonce(owner_b)
    _approve(owner_b, spender_b, value)
    return True


__all__ = [
    "K_DOMAIN",
    "ERR_EXPIRED",
    "ERR_INVALID_SIGNATURE",
    "init_permit",
    "domain_separator",
    "permit",
]
