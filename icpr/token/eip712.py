# -*- coding: utf-8 -*-
"""
EIP-712 typed-data hashing for ICPR permits
===========================================

Bit-exact reimplementation of the hashes a wallet computes when it signs an
EIP-2612 permit with `eth_signTypedData_v4`:

    domainSeparator = keccak256(abi.encode(
        TYPEHASH_DOMAIN, keccak256(name), keccak256(version), chainId, verifyingContract))

    structHash = keccak256(abi.encode(
        TYPEHASH_PERMIT, owner, spender, value, nonce, deadline))

    digest = keccak256(0x19 0x01 || domainSeparator || structHash)

ABI encoding is `eth_abi.encode` (every field a 32-byte head word); Keccak is
`icpr.runtime.hash_api`. All functions here are pure and never touch
storage, so tools can reproduce digests off-chain with the same code the
contract uses.
"""

from __future__ import annotations

from typing import Final, Union

from eth_abi import encode
from eth_utils import to_checksum_address

from ..runtime.context import to_address
from ..runtime.hash_api import keccak256, keccak256_text

DOMAIN_TYPE: Final[str] = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
PERMIT_TYPE: Final[str] = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"

TYPEHASH_DOMAIN: Final[bytes] = keccak256_text(DOMAIN_TYPE)
TYPEHASH_PERMIT: Final[bytes] = keccak256_text(PERMIT_TYPE)

EIP191_PREFIX: Final[bytes] = b"\x19\x01"

AddressLike = Union[bytes, bytearray, str]


def _addr(value: AddressLike) -> str:
    return to_checksum_address(to_address(value))


def domain_separator(name: str, version: str, chain_id: int, verifying_contract: AddressLike) -> bytes:
    """32-byte EIP-712 domain separator for (name, version, chainId, verifyingContract)."""
    return keccak256(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                TYPEHASH_DOMAIN,
                keccak256_text(name),
                keccak256_text(version),
                int(chain_id),
                _addr(verifying_contract),
            ],
        )
    )


def hash_permit(owner: AddressLike, spender: AddressLike, value: int, nonce: int, deadline: int) -> bytes:
    """EIP-712 struct hash of a Permit message."""
    return keccak256(
        encode(
            ["bytes32", "address", "address", "uint256", "uint256", "uint256"],
            [TYPEHASH_PERMIT, _addr(owner), _addr(spender), int(value), int(nonce), int(deadline)],
        )
    )


def typed_data_digest(domain_sep: bytes, struct_hash: bytes) -> bytes:
    """The `0x1901` envelope digest that is actually signed."""
    if len(domain_sep) != 32 or len(struct_hash) != 32:
        raise ValueError("domain separator and struct hash must be 32 bytes each")
    return keccak256(EIP191_PREFIX + bytes(domain_sep) + bytes(struct_hash))


def permit_digest(
    domain_sep: bytes,
    owner: AddressLike,
    spender: AddressLike,
    value: int,
    nonce: int,
    deadline: int,
) -> bytes:
    return typed_data_digest(domain_sep, hash_permit(owner, spender, value, nonce, deadline))


__all__ = [
    "DOMAIN_TYPE",
    "PERMIT_TYPE",
    "TYPEHASH_DOMAIN",
    "TYPEHASH_PERMIT",
    "EIP191_PREFIX",
    "domain_separator",
    "hash_permit",
    "typed_data_digest",
    "permit_digest",
]
