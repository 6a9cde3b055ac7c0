"""
ICPR ledger runtime — the in-process host the token contract executes in.

Contract-facing modules (import these from contract code):

    from icpr.runtime import abi, storage, events

Host-facing classes:

    from icpr.runtime import LedgerHost, Receipt, BlockEnv, TxEnv

Every call runs with a bound CallEnv, a storage Overlay and an EventSink; see
`icpr.runtime.host` for the commit/discard rules.
"""

from __future__ import annotations

from ..version import __version__
from . import abi as abi
from . import events_api as events
from . import hash_api as hashing
from . import storage_api as storage
from .context import ZERO_ADDRESS, BlockEnv, CallEnv, ContextError, TxEnv, to_address
from .error import ErrorKind, Revert, VmError
from .host import LedgerHost, Log, Receipt, create_address

__all__ = [
    "__version__",
    # host
    "LedgerHost",
    "Receipt",
    "Log",
    "create_address",
    # environments
    "BlockEnv",
    "TxEnv",
    "CallEnv",
    "ZERO_ADDRESS",
    "ContextError",
    "to_address",
    # errors
    "ErrorKind",
    "VmError",
    "Revert",
    # namespaces
    "abi",
    "storage",
    "events",
    "hashing",
]
