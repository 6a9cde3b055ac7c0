# -*- coding: utf-8 -*-
"""
EIP-2612 permit flow against wallet-produced signatures.

Signatures come from `eth_account.Account.sign_typed_data`, so every accepted
permit here is one a real wallet could have produced.
"""
from __future__ import annotations

import pytest
from eth_keys.constants import SECPK1_N

from icpr.runtime import ErrorKind, Revert

U256_MAX = 2**256 - 1
INVALID = "ERC20Permit: invalid signature"
EXPIRED = "ERC20Permit: expired deadline"


def _permit(host, token, submitter, owner, spender, value, deadline, v, r, s):
    return host.transact(
        submitter.address, token, "permit", owner.address, spender.address, value, deadline, v, r, s
    )


# ---------------------------- acceptance --------------------------------------


def test_permit_sets_allowance_and_consumes_nonce(host, token, alice, bob, carol, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 100, deadline)
    receipt = _permit(host, token, carol, alice, bob, 100, deadline, v, r, s)

    assert receipt.ok
    assert host.call(token, "allowance", alice.address, bob.address) == 100
    assert host.call(token, "nonces", alice.address) == 1
    approvals = receipt.events_named("Approval")
    assert len(approvals) == 1
    assert approvals[0].args == {"owner": alice.address, "spender": bob.address, "value": 100}


def test_owner_may_submit_own_permit(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 7, deadline)
    _permit(host, token, alice, alice, bob, 7, deadline, v, r, s)
    assert host.call(token, "allowance", alice.address, bob.address) == 7


def test_permit_accepts_bytes32_r_and_s(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 5, deadline)
    _permit(host, token, bob, alice, bob, 5, deadline, v, r.to_bytes(32, "big"), s.to_bytes(32, "big"))
    assert host.call(token, "allowance", alice.address, bob.address) == 5


def test_permit_accepted_when_deadline_equals_block_time(host, token, alice, bob, sign_permit):
    deadline = host.latest_block().timestamp + 100
    v, r, s = sign_permit(alice, bob, 42, deadline)
    host.set_next_block_timestamp(deadline)
    receipt = _permit(host, token, bob, alice, bob, 42, deadline, v, r, s)
    assert receipt.timestamp == deadline
    assert host.call(token, "allowance", alice.address, bob.address) == 42


def test_permit_overwrites_existing_allowance(host, token, alice, bob, sign_permit, deadline):
    host.transact(alice.address, token, "approve", bob.address, 1_000)
    v, r, s = sign_permit(alice, bob, 3, deadline)
    _permit(host, token, bob, alice, bob, 3, deadline, v, r, s)
    assert host.call(token, "allowance", alice.address, bob.address) == 3


def test_permit_replaces_unlimited_with_limited(host, token, funded, alice, bob, carol, sign_permit, deadline):
    host.transact(alice.address, token, "approveUnlimited", bob.address)
    assert host.call(token, "allowance", alice.address, bob.address) == U256_MAX

    v, r, s = sign_permit(alice, bob, 10, deadline)
    _permit(host, token, bob, alice, bob, 10, deadline, v, r, s)
    assert host.call(token, "allowance", alice.address, bob.address) == 10

    host.transact(bob.address, token, "transferFrom", alice.address, carol.address, 4)
    assert host.call(token, "allowance", alice.address, bob.address) == 6


def test_sequential_permits_use_increasing_nonces(host, token, alice, bob, sign_permit, deadline):
    for i, value in enumerate((10, 20, 30)):
        assert host.call(token, "nonces", alice.address) == i
        v, r, s = sign_permit(alice, bob, value, deadline)
        _permit(host, token, bob, alice, bob, value, deadline, v, r, s)
    assert host.call(token, "nonces", alice.address) == 3
    assert host.call(token, "allowance", alice.address, bob.address) == 30


def test_permitted_allowance_is_spendable(host, token, funded, alice, bob, carol, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 250, deadline)
    _permit(host, token, carol, alice, bob, 250, deadline, v, r, s)
    host.transact(bob.address, token, "transferFrom", alice.address, carol.address, 200)
    assert host.call(token, "balanceOf", carol.address) == 200
    assert host.call(token, "allowance", alice.address, bob.address) == 50


# ---------------------------- rejection ---------------------------------------


def test_replayed_permit_is_rejected(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 100, deadline)
    _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    host.transact(alice.address, token, "approve", bob.address, 0)

    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == INVALID
    assert ei.value.kind is ErrorKind.INVALID_SIGNATURE
    assert host.call(token, "nonces", alice.address) == 1
    assert host.call(token, "allowance", alice.address, bob.address) == 0


def test_stale_nonce_signature_is_rejected(host, token, alice, bob, sign_permit, deadline):
    stale = sign_permit(alice, bob, 1, deadline, nonce=0)
    fresh = sign_permit(alice, bob, 2, deadline, nonce=0)
    _permit(host, token, bob, alice, bob, 2, deadline, *fresh)

    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 1, deadline, *stale)
    assert ei.value.reason == INVALID


def test_future_nonce_signature_is_rejected(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 1, deadline, nonce=1)
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 1, deadline, v, r, s)
    assert ei.value.reason == INVALID


def test_wrong_signer_is_rejected(host, token, alice, bob, carol, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 100, deadline, signer=carol)
    with pytest.raises(Revert) as ei:
        _permit(host, token, carol, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == INVALID
    assert host.call(token, "nonces", alice.address) == 0
    assert host.call(token, "allowance", alice.address, bob.address) == 0


@pytest.mark.parametrize("field", ["value", "deadline", "spender"])
def test_tampered_message_is_rejected(host, token, alice, bob, carol, sign_permit, deadline, field):
    v, r, s = sign_permit(alice, bob, 100, deadline)
    value, dl, spender = 100, deadline, bob
    if field == "value":
        value = 101
    elif field == "deadline":
        dl = deadline + 1
    else:
        spender = carol
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, spender, value, dl, v, r, s)
    assert ei.value.reason == INVALID


def test_signature_for_other_chain_is_rejected(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 100, deadline, chain_id=1)
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == INVALID


def test_expired_permit_is_rejected(host, token, alice, bob, sign_permit):
    deadline = host.latest_block().timestamp + 10
    v, r, s = sign_permit(alice, bob, 100, deadline)
    host.set_next_block_timestamp(deadline + 1)

    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == EXPIRED
    assert ei.value.kind is ErrorKind.EXPIRED
    assert host.call(token, "nonces", alice.address) == 0
    assert host.call(token, "allowance", alice.address, bob.address) == 0


def test_expiry_is_checked_before_signature(host, token, alice, bob, carol, sign_permit):
    deadline = host.latest_block().timestamp + 1
    v, r, s = sign_permit(alice, bob, 100, deadline, signer=carol)
    host.increase_time(60)
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == EXPIRED


def test_high_s_twin_is_rejected(host, token, alice, bob, sign_permit, deadline):
    v, r, s = sign_permit(alice, bob, 100, deadline)
    twin_v = 55 - v  # 27 <-> 28
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, twin_v, r, SECPK1_N - s)
    assert ei.value.reason == INVALID


@pytest.mark.parametrize("bad_v", [0, 1, 26, 29, 255])
def test_bad_v_is_rejected(host, token, alice, bob, sign_permit, deadline, bad_v):
    _, r, s = sign_permit(alice, bob, 100, deadline)
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, bad_v, r, s)
    assert ei.value.reason == INVALID


@pytest.mark.parametrize("bad", ["zero_r", "zero_s", "short_r", "r_too_big"])
def test_malformed_components_are_rejected(host, token, alice, bob, sign_permit, deadline, bad):
    v, r, s = sign_permit(alice, bob, 100, deadline)
    if bad == "zero_r":
        r = 0
    elif bad == "zero_s":
        s = 0
    elif bad == "short_r":
        r = r.to_bytes(32, "big")[1:]
    else:
        r = SECPK1_N
    with pytest.raises(Revert) as ei:
        _permit(host, token, bob, alice, bob, 100, deadline, v, r, s)
    assert ei.value.reason == INVALID


def test_failed_permit_leaves_no_trace(host, token, alice, bob, carol, sign_permit, deadline):
    before_logs = len(host.logs(token))
    before_storage = host.deployment(token).storage.snapshot()

    v, r, s = sign_permit(alice, bob, 100, deadline, signer=carol)
    with pytest.raises(Revert):
        _permit(host, token, carol, alice, bob, 100, deadline, v, r, s)

    assert len(host.logs(token)) == before_logs
    assert host.deployment(token).storage.snapshot() == before_storage
    failed = host.receipts[-1]
    assert failed.status == 0
    assert failed.error == INVALID
