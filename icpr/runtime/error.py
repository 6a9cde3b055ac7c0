from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping


class ErrorKind(str, Enum):
    """Named failure outcomes surfaced by contract calls."""

    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    EXPIRED = "EXPIRED"
    OVERFLOW = "OVERFLOW"
    UNDERFLOW = "UNDERFLOW"
    ZERO_ADDRESS = "ZERO_ADDRESS"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"


@dataclass(eq=False)
class VmError(Exception):
    """
    Structured error used inside the ICPR ledger runtime.

    Supported call patterns:

        VmError("simple message")
        VmError("message", code="some_code", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging / receipts
    """

    code: str
    message: str
    context: Dict[str, Any]

    def __init__(self, message: Any = "", *, code: str = "vm_error", context: Mapping[str, Any] | None = None) -> None:
        super().__init__(str(message))
        object.__setattr__(self, "code", str(code))
        object.__setattr__(self, "message", str(message))
        object.__setattr__(self, "context", dict(context or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class Revert(VmError):
    """
    Raised when contract code aborts a call.

    `reason` is the exact human-readable string clients pattern-match on
    (e.g. "ERC20: burn amount exceeds balance"); `kind` is the named outcome.
    The host discards every write and event of the reverted call.
    """

    def __init__(
        self,
        reason: str,
        kind: ErrorKind = ErrorKind.INVALID_ARGUMENT,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(reason, code=ErrorKind(kind).value, context=context)
        self.reason = reason
        self.kind = ErrorKind(kind)


__all__ = ["ErrorKind", "VmError", "Revert"]
