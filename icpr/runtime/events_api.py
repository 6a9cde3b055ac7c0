from __future__ import annotations

import re
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .error import VmError

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """In-VM representation of an emitted event."""

    name: bytes
    args: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for k, v in self.args.items():
            out[k] = "0x" + v.hex() if isinstance(v, (bytes, bytearray)) else v
        return {"name": self.name.decode("ascii", errors="replace"), "args": out}


class EventSink:
    """
    Per-call event buffer. The host hands a fresh sink to every call and only
    publishes its events when the call commits.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []

    # --- Validation helpers -------------------------------------------------

    def _check_name(self, name: Any) -> bytes:
        if not isinstance(name, (bytes, bytearray)):
            raise VmError("event name must be bytes", code="event_invalid", context={"where": "name_type"})
        b = bytes(name)
        if len(b) == 0:
            raise VmError("event name must be non-empty", code="event_invalid", context={"where": "name_empty"})
        if len(b) > MAX_EVENT_NAME_BYTES:
            raise VmError(
                "event name too long",
                code="event_invalid",
                context={"where": "name_length", "len": len(b)},
            )
        return b

    def _check_key(self, key: Any) -> str:
        if not isinstance(key, str) or not key:
            raise VmError("event key must be a non-empty str", code="event_invalid", context={"where": "key_type"})
        if len(key) > MAX_KEY_LEN or not _KEY_RE.match(key):
            raise VmError(
                "event key has invalid characters",
                code="event_invalid",
                context={"where": "key_grammar", "key": key},
            )
        return key

    def _check_value(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            b = bytes(value)
            if len(b) > MAX_BYTES_LEN:
                raise VmError(
                    "event bytes arg too long",
                    code="event_invalid",
                    context={"where": "value_bytes_length", "len": len(b)},
                )
            return b

        if isinstance(value, bool):
            # bool is a subclass of int, so check it before int.
            return value

        if isinstance(value, int):
            if value < 0 or value.bit_length() > MAX_INT_BITS:
                raise VmError(
                    "event int arg out of range",
                    code="event_invalid",
                    context={"where": "value_int_bits", "bits": value.bit_length()},
                )
            return int(value)

        raise VmError(
            "unsupported event arg type",
            code="event_invalid",
            context={"where": "value_type", "py_type": type(value).__name__},
        )

    # --- Core sink operations -----------------------------------------------

    def emit(self, name: bytes, args: Mapping[Any, Any]) -> None:
        bname = self._check_name(name)
        if not isinstance(args, Mapping):
            raise VmError("event args must be a mapping", code="event_invalid", context={"where": "args_type"})
        checked: Dict[str, Any] = {}
        for raw_k, raw_v in args.items():
            checked[self._check_key(raw_k)] = self._check_value(raw_v)
        self._events.append(Event(bname, checked))

    def drain(self) -> Tuple[Event, ...]:
        out = tuple(self._events)
        self._events.clear()
        return out

    def __len__(self) -> int:
        return len(self._events)


_ACTIVE: ContextVar[Optional[EventSink]] = ContextVar("_icpr_events", default=None)


@contextmanager
def bound(sink: EventSink) -> Iterator[EventSink]:
    token = _ACTIVE.set(sink)
    try:
        yield sink
    finally:
        _ACTIVE.reset(token)


# --- Public API -------------------------------------------------------------


def emit(name: bytes, args: Mapping[Any, Any]) -> None:
    sink = _ACTIVE.get()
    if sink is None:
        raise VmError("no event sink bound (contract code invoked outside the host)", code="event_unbound")
    sink.emit(name, args)


__all__ = [
    "Event",
    "EventSink",
    "bound",
    "emit",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
