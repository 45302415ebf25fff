"""The active-subscriber slot — the heart of dependency capture.

A subscriber installs itself here for the duration of a read pass. Every
tracked read performed meanwhile calls Dep.depend(), which looks at this
slot and records whoever is in it.

The slot is a contextvar, so each thread and each asyncio task sees its
own value. Nesting is the driver's business: tracking() restores whatever
was active before, but the engine itself only ever inspects the current
value.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Iterator, Protocol


class Subscriber(Protocol):
    """Anything that can be asked to re-run after its inputs changed."""

    def update(self) -> None: ...


# The subscriber currently performing a read pass, if any.
current_subscriber: contextvars.ContextVar[Subscriber | None] = contextvars.ContextVar(
    "current_subscriber", default=None
)


def active_subscriber() -> Subscriber | None:
    return current_subscriber.get()


@contextmanager
def tracking(subscriber: Subscriber | None) -> Iterator[None]:
    """Install subscriber into the slot for the duration of the block.

    Usage:
        with tracking(watcher):
            state["count"]  # watcher now depends on count
    """
    token = current_subscriber.set(subscriber)
    try:
        yield
    finally:
        current_subscriber.reset(token)


@contextmanager
def untracked() -> Iterator[None]:
    """Read reactive state without recording any dependency."""
    with tracking(None):
        yield
