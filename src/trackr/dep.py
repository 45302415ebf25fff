"""Dependency sets — who read this slot during their last pass.

One Dep exists per instrumented property and one per observed container
(its "own shape" dependency). depend() records the active subscriber;
notify() re-runs everyone recorded so far.
"""

from __future__ import annotations

from trackr._tracking import Subscriber, current_subscriber


class Dep:
    """Insertion-ordered, de-duplicated set of subscriber handles.

    The set never prunes itself. A subscriber that wants to forget stale
    registrations calls remove_sub() on its own.
    """

    __slots__ = ("_subs",)

    def __init__(self) -> None:
        # dict as an ordered set: notify() must follow registration order
        self._subs: dict[Subscriber, None] = {}

    def add_sub(self, sub: Subscriber) -> None:
        self._subs[sub] = None

    def remove_sub(self, sub: Subscriber) -> None:
        self._subs.pop(sub, None)

    def depend(self) -> None:
        """Attach the active subscriber, if there is one."""
        sub = current_subscriber.get()
        if sub is not None:
            self._subs[sub] = None

    def notify(self) -> None:
        """Re-run every attached subscriber, synchronously and in order."""
        # snapshot: a re-run may depend() on this very set again
        for sub in list(self._subs):
            sub.update()

    @property
    def subscribers(self) -> tuple[Subscriber, ...]:
        return tuple(self._subs)

    def __len__(self) -> int:
        return len(self._subs)

    def __repr__(self) -> str:
        return f"Dep(subscribers={len(self._subs)})"
