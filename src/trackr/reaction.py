"""Reactions — the stock subscribers that drive read passes.

A Reaction installs itself as the active subscriber, runs its function,
and gets update()d by every Dep it read along the way. It never prunes
stale registrations: a dependency read once keeps re-running it until it
is disposed.

Two flavors:
- autorun(fn): runs fn immediately, re-runs whenever anything it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new
  value only when data_fn's result changes.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from trackr._tracking import tracking

T = TypeVar("T")


class Reaction:
    """A side effect re-run on every notification until disposed."""

    __slots__ = ("_fn", "_disposed", "runs", "__weakref__")

    def __init__(self, fn: Callable[[], None]) -> None:
        self._fn = fn
        self._disposed = False
        self.runs = 0

    @property
    def disposed(self) -> bool:
        return self._disposed

    def run(self) -> None:
        """Execute fn as a tracking pass."""
        self.runs += 1
        with tracking(self):
            self._fn()

    def update(self) -> None:
        if not self._disposed:
            self.run()

    def dispose(self) -> None:
        """Stop reacting. Deps may still hold the handle; updates become no-ops."""
        self._disposed = True

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        name = getattr(self._fn, "__name__", "fn")
        return f"Reaction({name}, {state}, runs={self.runs})"


class _DataReaction(Reaction):
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn. On each notification, re-runs data_fn and calls
    effect_fn only if the result differs from last time.
    """

    __slots__ = ("_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable[[], T], effect_fn: Callable[[T], None]) -> None:
        super().__init__(data_fn)
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    def run(self) -> None:
        self.runs += 1
        with tracking(self):
            new_value = self._fn()
        if not self._initialized or new_value != self._last_value:
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def prime(self) -> None:
        """Establish dependencies without firing the effect."""
        self.runs += 1
        with tracking(self):
            self._last_value = self._fn()
        self._initialized = True


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then again whenever state it read changes.

    Usage:
        state = reactive({"count": 0})
        log = []

        r = autorun(lambda: log.append(state["count"]))
        # log == [0]

        state["count"] = 1
        # log == [0, 1]

        r.dispose()
    """
    r = Reaction(fn)
    r.run()
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> Reaction:
    """Track data_fn; call effect_fn when its result changes.

    Usage:
        user = reactive({"first": "Ada", "last": "Lovelace"})
        names = []
        reaction(lambda: f"{user['first']} {user['last']}", names.append)

        user["first"] = "Augusta"
        # names == ["Augusta Lovelace"]
    """
    r = _DataReaction(data_fn, effect_fn)
    if fire_immediately:
        r.run()
    else:
        r.prime()
    return r
