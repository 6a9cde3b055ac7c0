# -*- coding: utf-8 -*-
"""
secp256k1 signer recovery for permit signatures.

`recover(digest, v, r, s)` returns the 20-byte address whose key produced the
signature, or None when the signature is malformed or recovery fails. It
never reverts; the permit flow turns None into "ERC20Permit: invalid
signature". A signature that recovers to the zero address is also None.

Accepted components:
- v: 27 or 28 (Ethereum convention; 0/1 are rejected)
- r, s: 32-byte big-endian values or ints, each in [1, n-1]
- s must be in the lower half of the curve order, so the (r, n - s) twin of
  a valid signature does not verify
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Union

from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature, ValidationError

from ..runtime.context import ZERO_ADDRESS

log = logging.getLogger(__name__)

SECP256K1_HALF_N: Final[int] = SECPK1_N // 2

Word = Union[bytes, bytearray, int]


def _as_int(x: Word) -> Optional[int]:
    if isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, (bytes, bytearray)) and len(x) == 32:
        return int.from_bytes(x, "big")
    return None


def recover(digest: bytes, v: int, r: Word, s: Word) -> Optional[bytes]:
    """Recover the signer address of `digest`, or None if (v, r, s) is not a valid signature."""
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
        return None
    if isinstance(v, bool) or v not in (27, 28):
        return None
    r_int = _as_int(r)
    s_int = _as_int(s)
    if r_int is None or s_int is None:
        return None
    if not (0 < r_int < SECPK1_N) or not (0 < s_int <= SECP256K1_HALF_N):
        return None

    try:
        sig = keys.Signature(vrs=(v - 27, r_int, s_int))
        public_key = sig.recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, ValidationError) as exc:
        log.debug("signature recovery failed", extra={"err": str(exc)})
        return None
    signer = public_key.to_canonical_address()
    if signer == ZERO_ADDRESS:
        return None
    return signer


__all__ = ["SECP256K1_HALF_N", "recover"]
