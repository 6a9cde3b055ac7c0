# -*- coding: utf-8 -*-
"""
Genesis state of a freshly deployed ICPR token: metadata, supply, owner,
the deterministic contract address and the stored EIP-712 domain separator.
"""
from __future__ import annotations

import pytest
from eth_account.messages import encode_typed_data

from icpr import contract
from icpr.runtime import ZERO_ADDRESS, ErrorKind, Revert, VmError
from icpr.runtime import storage_api
from icpr.token import eip712, fungible

GENESIS = 470_000_000 * 10**18


def test_metadata(host, token):
    assert host.call(token, "name") == "ICP Reboot"
    assert host.call(token, "symbol") == "ICPR"
    assert host.call(token, "decimals") == 18


def test_genesis_supply_goes_to_deployer(host, token, deployer, alice):
    assert contract.GENESIS_SUPPLY == GENESIS
    assert host.call(token, "totalSupply") == GENESIS
    assert host.call(token, "balanceOf", deployer.address) == GENESIS
    assert host.call(token, "balanceOf", alice.address) == 0


def test_deployer_is_owner(host, token, deployer):
    assert host.call(token, "owner") == deployer.address


def test_first_deployment_address_is_deterministic(token):
    assert token == bytes.fromhex("5FbDB2315678afecb367f032d93F642f64180aa3")


def test_genesis_events(host, token, deployer):
    logs = host.logs(token)
    assert [lg.name for lg in logs] == [b"OwnershipTransferred", b"Transfer"]
    assert logs[0].args == {"previous": ZERO_ADDRESS, "new": deployer.address}
    assert logs[1].args == {"from": ZERO_ADDRESS, "to": deployer.address, "value": GENESIS}


def test_nonces_start_at_zero(host, token, deployer, alice):
    assert host.call(token, "nonces", deployer.address) == 0
    assert host.call(token, "nonces", alice.checksum) == 0


def test_domain_separator_matches_wallet_encoding(host, token, deployer, alice, typed_permit):
    ds = host.call(token, "DOMAIN_SEPARATOR")
    assert len(ds) == 32
    assert ds == eip712.domain_separator("ICP Reboot", "1", 31337, token)

    signable = encode_typed_data(full_message=typed_permit(deployer, alice, 1, 1, 0))
    assert signable.header == ds


def test_domain_separator_is_stable_across_calls(host, token, deployer, alice):
    before = host.call(token, "DOMAIN_SEPARATOR")
    host.transact(deployer.address, token, "transfer", alice.address, 1)
    host.transact(deployer.address, token, "approve", alice.address, 1)
    assert host.call(token, "DOMAIN_SEPARATOR") == before


def test_init_is_not_a_public_entrypoint(host, token, deployer):
    with pytest.raises(VmError) as ei:
        host.transact(deployer.address, token, "init")
    assert ei.value.code == "bad_entrypoint"


def test_second_deployment_gets_next_address_and_own_domain(host, token, deployer):
    second = host.deploy(deployer.address, contract)
    assert second == bytes.fromhex("e7f1725E7734CE288F8367e1Bb143E90bb3F0512")
    assert host.call(second, "DOMAIN_SEPARATOR") != host.call(token, "DOMAIN_SEPARATOR")
    assert host.call(second, "totalSupply") == GENESIS


def test_metadata_cannot_be_initialized_twice(host, token):
    with storage_api.bound(host.deployment(token).storage):
        with pytest.raises(Revert) as ei:
            fungible.init_metadata("Other", "OTH", 18)
    assert ei.value.kind is ErrorKind.ALREADY_INITIALIZED
