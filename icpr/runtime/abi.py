from __future__ import annotations

from typing import Any, Mapping, NoReturn, Optional

from . import context as _ctx
from .error import ErrorKind, Revert


def _to_message(msg: Any) -> str:
    if isinstance(msg, (bytes, bytearray)):
        return msg.decode("utf-8", errors="replace")
    return str(msg)


def revert(
    reason: Any,
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT,
    *,
    context: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    """Abort the current call. The host drops all of its writes and events."""
    raise Revert(_to_message(reason), kind, context=context)


def require(
    condition: bool,
    reason: Any = "abi.require failed",
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT,
    *,
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Assertion helper for contracts:

        abi.require(balance >= amount, "ERC20: burn amount exceeds balance",
                    ErrorKind.INSUFFICIENT_BALANCE)
    """
    if condition:
        return
    revert(reason, kind, context=context)


# --- call environment -------------------------------------------------------


def caller() -> bytes:
    """Sender of the transaction being executed."""
    return _ctx.current().tx.sender


def this_address() -> bytes:
    """Address of the contract being executed."""
    return _ctx.current().address


def block_timestamp() -> int:
    return _ctx.current().block.timestamp


def block_number() -> int:
    return _ctx.current().block.number


def chain_id() -> int:
    return _ctx.current().block.chain_id


__all__ = [
    "revert",
    "require",
    "caller",
    "this_address",
    "block_timestamp",
    "block_number",
    "chain_id",
]
