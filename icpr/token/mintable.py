# -*- coding: utf-8 -*-
"""
Owner-gated minting for the ICPR ledger.

Only the current owner (see `icpr.access`) may create new supply. Minting
increases the total supply and the recipient's balance by the same checked
amount and emits Transfer(ZERO_ADDRESS, to, amount).
"""

from __future__ import annotations

from ..access import require_owner
from . import require_address
from .fungible import _mint_to


def mint(caller: bytes, to: bytes, amount: int) -> bool:
    require_owner(require_address(caller))
    _mint_to(require_address(to), amount)
    return True


__all__ = ["mint"]
