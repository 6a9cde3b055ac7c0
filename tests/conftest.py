# -*- coding: utf-8 -*-
"""
tests.conftest
==============

Pytest fixtures for the ICPR token.

- Deterministic development accounts (the well-known local-devnet keys), so
  addresses and the first contract address are stable across runs.
- A fresh `LedgerHost` per test and a deployed ICPR token.
- A `sign_permit` helper that signs EIP-2612 permits with `eth_account`,
  exactly as a wallet would (`eth_signTypedData_v4`). The contract only ever
  sees (v, r, s); it never handles keys.

Usage (inside a test file):
    def test_flow(host, token, deployer, alice, bob, sign_permit):
        host.transact(deployer.address, token, "transfer", alice.address, 10)
        v, r, s = sign_permit(alice, bob, 10, deadline)
        host.transact(bob.address, token, "permit", alice.address, bob.address, 10, deadline, v, r, s)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import pytest
from eth_account import Account
from eth_utils import to_checksum_address

from icpr import contract
from icpr.config import HostConfig
from icpr.runtime import LedgerHost

# --- stable env for tests -----------------------------------------------------

os.environ.setdefault("TZ", "UTC")

CHAIN_ID = 31337
GENESIS_TIMESTAMP = 1_700_000_000

DEPLOYER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ALICE_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
BOB_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
CAROL_KEY = "0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6"


@dataclass(frozen=True)
class Wallet:
    key: str
    checksum: str
    address: bytes


def _wallet(key: str) -> Wallet:
    acct = Account.from_key(key)
    return Wallet(key=key, checksum=acct.address, address=bytes.fromhex(acct.address[2:]))


# --- accounts -----------------------------------------------------------------


@pytest.fixture
def deployer() -> Wallet:
    return _wallet(DEPLOYER_KEY)


@pytest.fixture
def alice() -> Wallet:
    return _wallet(ALICE_KEY)


@pytest.fixture
def bob() -> Wallet:
    return _wallet(BOB_KEY)


@pytest.fixture
def carol() -> Wallet:
    return _wallet(CAROL_KEY)


# --- host & token -------------------------------------------------------------


@pytest.fixture
def host_config() -> HostConfig:
    return HostConfig(chain_id=CHAIN_ID, genesis_timestamp=GENESIS_TIMESTAMP, block_time=1)


@pytest.fixture
def host(host_config: HostConfig) -> LedgerHost:
    return LedgerHost(host_config)


@pytest.fixture
def token(host: LedgerHost, deployer: Wallet) -> bytes:
    return host.deploy(deployer.address, contract)


@pytest.fixture
def funded(host: LedgerHost, token: bytes, deployer: Wallet, alice: Wallet, bob: Wallet) -> Dict[str, int]:
    """Give alice and bob 1,000 ICPR each from the genesis holder."""
    amount = 1_000 * 10**18
    host.transact(deployer.address, token, "transfer", alice.address, amount)
    host.transact(deployer.address, token, "transfer", bob.address, amount)
    return {"alice": amount, "bob": amount}


# --- permits ------------------------------------------------------------------


def permit_typed_data(
    token: bytes,
    chain_id: int,
    owner: str,
    spender: str,
    value: int,
    nonce: int,
    deadline: int,
    name: str = contract.TOKEN_NAME,
    version: str = contract.TOKEN_VERSION,
) -> Dict[str, Any]:
    """EIP-712 full message for an ICPR Permit, in eth_account's format."""
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "Permit": [
                {"name": "owner", "type": "address"},
                {"name": "spender", "type": "address"},
                {"name": "value", "type": "uint256"},
                {"name": "nonce", "type": "uint256"},
                {"name": "deadline", "type": "uint256"},
            ],
        },
        "primaryType": "Permit",
        "domain": {
            "name": name,
            "version": version,
            "chainId": chain_id,
            "verifyingContract": to_checksum_address(token),
        },
        "message": {
            "owner": owner,
            "spender": spender,
            "value": value,
            "nonce": nonce,
            "deadline": deadline,
        },
    }


SignPermit = Callable[..., Tuple[int, int, int]]


@pytest.fixture
def typed_permit(host: LedgerHost, token: bytes) -> Callable[..., Dict[str, Any]]:
    def _build(owner: Wallet, spender: Wallet, value: int, deadline: int, nonce: int, chain_id: Optional[int] = None):
        return permit_typed_data(
            token,
            host.chain_id if chain_id is None else chain_id,
            owner.checksum,
            spender.checksum,
            value,
            nonce,
            deadline,
        )

    return _build


@pytest.fixture
def sign_permit(host: LedgerHost, token: bytes, typed_permit) -> SignPermit:
    """
    Sign a Permit(owner -> spender, value, deadline) with `signer`'s key
    (defaults to the owner). The nonce defaults to the owner's current one.
    Returns (v, r, s).
    """

    def _sign(
        owner: Wallet,
        spender: Wallet,
        value: int,
        deadline: int,
        *,
        nonce: Optional[int] = None,
        signer: Optional[Wallet] = None,
        chain_id: Optional[int] = None,
    ) -> Tuple[int, int, int]:
        if nonce is None:
            nonce = host.call(token, "nonces", owner.address)
        data = typed_permit(owner, spender, value, deadline, nonce, chain_id)
        signed = Account.sign_typed_data((signer or owner).key, full_message=data)
        return signed.v, signed.r, signed.s

    return _sign


@pytest.fixture
def deadline(host: LedgerHost) -> int:
    return host.latest_block().timestamp + 3_600
