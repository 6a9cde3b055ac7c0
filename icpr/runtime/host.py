"""
icpr.runtime.host — deterministic in-process ledger host.

The host is the execution environment the token contract runs in. It owns
every deployed contract's committed storage, the block clock, per-account
transaction counts and the published event log, and it executes each call as
one indivisible unit:

    overlay = Overlay(contract.storage)     # writes buffered
    sink    = EventSink()                   # events buffered
    with context.bound(env), storage_api.bound(overlay), events_api.bound(sink):
        result = getattr(module, fn)(*args)
    overlay.commit(); publish(sink)          # only if no exception escaped

A `Revert` (or any other exception) drops the overlay and the buffered events,
so a failed call has no observable effect on contract state. Like a real
chain, a failed *transaction* still mines its block and consumes the sender's
transaction count.

Contracts are plain Python modules. Their public entrypoints are the names in
the module's `__all__`; `init` is reserved for deployment.

Addresses
---------
Contract addresses follow the CREATE rule:
`keccak256(rlp([deployer, deployer_tx_count]))[12:]`.
"""

from __future__ import annotations

import logging
import threading
import types
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import rlp

from .. import logging as ilog
from ..config import HostConfig, load_config
from . import context as _ctx
from . import events_api, storage_api
from .context import BlockEnv, CallEnv, ContextError, TxEnv, to_address, to_hex
from .error import Revert, VmError
from .events_api import Event, EventSink
from .hash_api import keccak256
from .storage_api import MemoryBackend, Overlay

log = logging.getLogger(__name__)

INIT_ENTRYPOINT = "init"

AddressLike = Union[bytes, bytearray, str]


# ----------------------------- records ----------------------------- #


@dataclass(frozen=True)
class Log:
    """An event published by a committed call."""
    address: bytes
    block_number: int
    event: Event

    @property
    def name(self) -> bytes:
        return self.event.name

    @property
    def args(self) -> Dict[str, Any]:
        return self.event.args


@dataclass(frozen=True)
class Receipt:
    status: int  # 1 = success, 0 = reverted
    block_number: int
    timestamp: int
    sender: bytes
    to: bytes
    function: str
    return_value: Any = None
    events: Tuple[Event, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 1

    def events_named(self, name: Union[bytes, str]) -> List[Event]:
        n = name.encode("ascii") if isinstance(name, str) else bytes(name)
        return [e for e in self.events if e.name == n]


@dataclass
class Deployment:
    address: bytes
    module: types.ModuleType
    deployer: bytes
    block_number: int
    storage: MemoryBackend = field(default_factory=MemoryBackend)


def create_address(sender: AddressLike, nonce: int) -> bytes:
    """CREATE address for a deployment by `sender` at transaction count `nonce`."""
    return keccak256(rlp.encode([to_address(sender), int(nonce)]))[12:]


def _failure_reason(exc: BaseException) -> str:
    if isinstance(exc, Revert):
        return exc.reason
    return f"{type(exc).__name__}: {exc}"


# ------------------------------ host ------------------------------- #


class LedgerHost:
    """Deterministic single-process execution environment for contracts."""

    def __init__(self, config: Optional[HostConfig] = None) -> None:
        self.config = config or load_config()
        self._lock = threading.RLock()
        self._contracts: Dict[bytes, Deployment] = {}
        self._tx_counts: Dict[bytes, int] = {}
        self._logs: List[Log] = []
        self._receipts: List[Receipt] = []
        self._block = BlockEnv(number=0, timestamp=self.config.genesis_timestamp, chain_id=self.config.chain_id)
        self._next_timestamp: Optional[int] = None
        self._time_offset = 0

    # --- chain view -------------------------------------------------------

    @property
    def chain_id(self) -> int:
        return self.config.chain_id

    def latest_block(self) -> BlockEnv:
        return self._block

    def tx_count(self, account: AddressLike) -> int:
        return self._tx_counts.get(to_address(account), 0)

    def is_contract(self, address: AddressLike) -> bool:
        return to_address(address) in self._contracts

    def deployment(self, address: AddressLike) -> Deployment:
        addr = to_address(address)
        try:
            return self._contracts[addr]
        except KeyError:
            raise ContextError(f"no contract at {to_hex(addr)}") from None

    def logs(self, address: Optional[AddressLike] = None, name: Union[bytes, str, None] = None) -> List[Log]:
        addr = to_address(address) if address is not None else None
        n = name.encode("ascii") if isinstance(name, str) else name
        return [
            lg for lg in self._logs
            if (addr is None or lg.address == addr) and (n is None or lg.name == n)
        ]

    @property
    def receipts(self) -> List[Receipt]:
        return list(self._receipts)

    # --- clock ------------------------------------------------------------

    def set_next_block_timestamp(self, timestamp: int) -> None:
        """Pin the timestamp of the next mined block (must move time forward)."""
        if int(timestamp) <= self._block.timestamp:
            raise ContextError(
                f"next timestamp {timestamp} must be greater than latest {self._block.timestamp}"
            )
        self._next_timestamp = int(timestamp)

    def increase_time(self, seconds: int) -> None:
        """Add `seconds` to the timestamp of the next mined block."""
        if int(seconds) < 0:
            raise ContextError("cannot move time backwards")
        self._time_offset += int(seconds)

    def mine(self) -> BlockEnv:
        """Mine an empty block."""
        with self._lock:
            self._block = self._next_block()
            return self._block

    def _next_block(self) -> BlockEnv:
        if self._next_timestamp is not None:
            ts = self._next_timestamp
        else:
            ts = self._block.timestamp + self.config.block_time + self._time_offset
        self._next_timestamp = None
        self._time_offset = 0
        return BlockEnv(number=self._block.number + 1, timestamp=ts, chain_id=self.config.chain_id)

    # --- execution --------------------------------------------------------

    def _resolve(self, module: types.ModuleType, fn: str):
        exported = getattr(module, "__all__", ())
        if fn.startswith("_") or fn not in exported:
            raise VmError(f"{fn!r} is not a public entrypoint", code="bad_entrypoint")
        if fn == INIT_ENTRYPOINT:
            raise VmError("init is only callable at deployment", code="bad_entrypoint")
        target = getattr(module, fn, None)
        if not callable(target):
            raise VmError(f"{fn!r} is not callable", code="bad_entrypoint")
        return target

    def _execute(
        self,
        dep: Deployment,
        target,
        args: Tuple[Any, ...],
        kwargs: Mapping[str, Any],
        env: CallEnv,
        *,
        commit: bool,
    ) -> Tuple[Any, Tuple[Event, ...]]:
        overlay = Overlay(dep.storage)
        sink = EventSink()
        with _ctx.bound(env), storage_api.bound(overlay), events_api.bound(sink):
            result = target(*args, **kwargs)
        events = sink.drain()
        if commit:
            overlay.commit()
        else:
            overlay.discard()
        return result, events

    def _publish(self, address: bytes, block_number: int, events: Tuple[Event, ...]) -> None:
        self._logs.extend(Log(address, block_number, ev) for ev in events)

    def _bump(self, sender: bytes) -> int:
        n = self._tx_counts.get(sender, 0)
        self._tx_counts[sender] = n + 1
        return n

    def deploy(self, deployer: AddressLike, module: types.ModuleType, *args: Any, **kwargs: Any) -> bytes:
        """
        Deploy `module` as a new contract and run its `init(*args)` atomically.
        Returns the new contract address. Raises `Revert` if `init` reverts.
        """
        sender = to_address(deployer)
        with self._lock:
            block = self._next_block()
            self._block = block
            nonce = self._bump(sender)
            address = create_address(sender, nonce)
            dep = Deployment(address=address, module=module, deployer=sender, block_number=block.number)
            env = CallEnv(block=block, tx=TxEnv(sender=sender, to=None, nonce=nonce), address=address)

            with ilog.scope(chain_id=block.chain_id, contract=to_hex(address), block=block.number):
                init = getattr(module, INIT_ENTRYPOINT, None)
                try:
                    if callable(init):
                        _, events = self._execute(dep, init, args, kwargs, env, commit=True)
                    else:
                        events = ()
                except Exception as exc:
                    reason = _failure_reason(exc)
                    log.info("deployment reverted", extra={"reason": reason, "deployer": to_hex(sender)})
                    self._receipts.append(
                        Receipt(0, block.number, block.timestamp, sender, address, INIT_ENTRYPOINT, error=reason)
                    )
                    raise

                self._contracts[address] = dep
                self._publish(address, block.number, events)
                self._receipts.append(
                    Receipt(1, block.number, block.timestamp, sender, address, INIT_ENTRYPOINT, None, events)
                )
                log.info(
                    "contract deployed",
                    extra={"source": module.__name__, "deployer": to_hex(sender), "events": len(events)},
                )
            return address

    def transact(self, sender: AddressLike, to: AddressLike, fn: str, *args: Any, **kwargs: Any) -> Receipt:
        """
        Execute `fn(*args)` on the contract at `to` as a transaction from
        `sender`, in a newly mined block. Returns the receipt; raises `Revert`
        (after recording a failed receipt) if the call reverts.
        """
        caller = to_address(sender)
        dep = self.deployment(to)
        target = self._resolve(dep.module, fn)
        with self._lock:
            block = self._next_block()
            self._block = block
            nonce = self._bump(caller)
            env = CallEnv(block=block, tx=TxEnv(sender=caller, to=dep.address, nonce=nonce), address=dep.address)

            with ilog.scope(chain_id=block.chain_id, contract=to_hex(dep.address), block=block.number):
                log.debug("transact", extra={"fn": fn, "sender": to_hex(caller)})
                try:
                    result, events = self._execute(dep, target, args, kwargs, env, commit=True)
                except Exception as exc:
                    reason = _failure_reason(exc)
                    kind = exc.kind.value if isinstance(exc, Revert) else type(exc).__name__
                    log.info("call reverted", extra={"fn": fn, "reason": reason, "kind": kind})
                    self._receipts.append(
                        Receipt(0, block.number, block.timestamp, caller, dep.address, fn, error=reason)
                    )
                    raise

            self._publish(dep.address, block.number, events)
            receipt = Receipt(1, block.number, block.timestamp, caller, dep.address, fn, result, events)
            self._receipts.append(receipt)
            return receipt

    def call(self, to: AddressLike, fn: str, *args: Any, sender: Optional[AddressLike] = None, **kwargs: Any) -> Any:
        """
        Read-only execution against the latest block. Writes and events are
        discarded; reverts propagate.
        """
        dep = self.deployment(to)
        target = self._resolve(dep.module, fn)
        caller = to_address(sender) if sender is not None else _ctx.ZERO_ADDRESS
        with self._lock:
            env = CallEnv(
                block=self._block,
                tx=TxEnv(sender=caller, to=dep.address, nonce=self._tx_counts.get(caller, 0)),
                address=dep.address,
            )
            result, _ = self._execute(dep, target, args, kwargs, env, commit=False)
            return result


__all__ = [
    "INIT_ENTRYPOINT",
    "Log",
    "Receipt",
    "Deployment",
    "create_address",
    "LedgerHost",
]
