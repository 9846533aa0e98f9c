"""Per-request values, shutdown signalling and middleware composition."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Sequence, TypeVar

ZERO_TRACE_ID = "00000000-0000-0000-0000-000000000000"

H = TypeVar("H")
Middleware = Callable[[H], H]


@dataclass
class Values:
    """State carried through the handling of one request."""

    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status_code: int = 0


_current: ContextVar[Optional[Values]] = ContextVar("hypercontacts_values", default=None)


@contextmanager
def request_values(values: Values) -> Iterator[Values]:
    """Make ``values`` the current request values inside the block."""
    token = _current.set(values)
    try:
        yield values
    finally:
        _current.reset(token)


def get_values() -> Values:
    """Return the current request values, or fresh defaults outside a request."""
    values = _current.get()
    if values is None:
        return Values(trace_id=ZERO_TRACE_ID, now=datetime.now())
    return values


def get_trace_id() -> str:
    """Return the current trace id."""
    values = _current.get()
    return ZERO_TRACE_ID if values is None else values.trace_id


def get_time() -> datetime:
    """Return the time the current request started."""
    values = _current.get()
    return datetime.now() if values is None else values.now


def set_status_code(status_code: int) -> None:
    """Record the response status on the current request values, if any."""
    values = _current.get()
    if values is not None:
        values.status_code = status_code


class ShutdownError(Exception):
    """Raised by a handler to ask the application to shut down gracefully."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def wrap_middleware(middleware: Sequence[Optional[Middleware]], handler: H) -> H:
    """Wrap ``handler`` so the first middleware runs first on each request."""
    for mw in reversed(middleware):
        if mw is not None:
            handler = mw(handler)
    return handler