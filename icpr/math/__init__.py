# -*- coding: utf-8 -*-
"""
icpr.math
=========

Integer-only numeric envelope shared by the token modules.

Amounts, supplies, nonces and allowances all live in the closed interval
[0, U256_MAX]. Nothing here uses floats, and range violations abort the
current call through `icpr.runtime.abi.revert`.

    from icpr.math import U256_MAX, require_u256
    require_u256(amount, deadline)
"""

from __future__ import annotations

from typing import Final

from ..runtime import abi
from ..runtime.error import ErrorKind

U256_MAX: Final[int] = (1 << 256) - 1

ERR_OOB: Final[str] = "UINT: value out of range"


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def require_u256(*xs: int) -> None:
    """Revert unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        if not is_u256(x):
            abi.revert(ERR_OOB, ErrorKind.INVALID_ARGUMENT, context={"value": repr(x)})


__all__ = ["U256_MAX", "ERR_OOB", "is_u256", "require_u256"]
