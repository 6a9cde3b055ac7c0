"""
ICPR — "ICP Reboot" fungible token ledger with EIP-2612 permits.

Layout:

- icpr.runtime   deterministic ledger host (storage, events, block/tx context)
- icpr.math      checked U256 arithmetic
- icpr.access    single-owner access control
- icpr.token     ledger, mint gate, EIP-712 hashing, nonces, signature recovery, permit
- icpr.contract  the deployable ICPR token contract

Quick start:

    from icpr import contract
    from icpr.runtime import LedgerHost

    host = LedgerHost()
    token = host.deploy(deployer, contract)
    host.transact(deployer, token, "transfer", alice, 10**18)
"""

from __future__ import annotations

from .version import __version__


def version() -> str:
    """Return the icpr version string."""
    return __version__


__all__ = ["__version__", "version"]
