"""Observers — turning containers into dependency-tracked state.

observe() attaches one Observer per container. For a record, the Observer
walks every key and swaps it for a tracked getter/setter pair
(define_reactive). For a sequence, it observes every element and relies on
ReactiveList's mutating methods to report structural changes.

Reads inside a tracking pass register dependencies; writes notify. Keys
added after the walk, and positional writes into sequences, are only seen
when they go through set() / delete().

Usage diagnostics are logged only in debug builds (`python -O` turns them
off). Nothing here raises for structural reasons.
"""

from __future__ import annotations

import logging
import math
import weakref
from typing import Any, Callable, Iterable

from trackr import _anchor, config
from trackr._tracking import active_subscriber
from trackr.containers import (
    Kind,
    ReactiveDict,
    ReactiveList,
    is_raw,
    is_state_root,
    kind_of,
    lift,
)
from trackr.dep import Dep

logger = logging.getLogger("trackr.observer")

_MISSING = object()

# getters installed by define_reactive
_tracked_getters: weakref.WeakSet = weakref.WeakSet()

_PRIMITIVES = (str, bytes, int, float, complex, bool)


class Observer:
    """Per-container record holding the container's own Dep.

    `dep` is notified when the container's shape changes: a key added or
    removed through the mutation API, or a structural list mutation.
    """

    __slots__ = ("_value_ref", "dep", "root_count", "__weakref__")

    def __init__(self, value: ReactiveDict | ReactiveList) -> None:
        self._value_ref = weakref.ref(value)
        self.dep = Dep()
        # number of state roots using this container as their root
        self.root_count = 0
        # Registered before walking, so a graph that contains itself terminates.
        _anchor.observers[value] = self
        if isinstance(value, ReactiveList):
            value._items[:] = self.observe_array(value._items)
        else:
            self.walk(value)
        logger.debug("Observing %s (%d entries)", type(value).__name__, len(value))

    @property
    def value(self) -> ReactiveDict | ReactiveList | None:
        return self._value_ref()

    def walk(self, record: ReactiveDict) -> None:
        """Instrument every enumerable key currently present."""
        for key in record.keys():
            define_reactive(record, key)

    def observe_array(self, items: Iterable) -> list:
        """Lift and observe each item. Returns the (possibly lifted) items."""
        admitted = []
        for item in items:
            item = _lift_if_observing(item)
            observe(item)
            admitted.append(item)
        return admitted

    def __repr__(self) -> str:
        return f"Observer({type(self.value).__name__}, root_count={self.root_count})"


def _lift_if_observing(value: Any) -> Any:
    if config.is_observing() and not config.is_server_rendering():
        return lift(value)
    return value


def observer_of(value: Any) -> Observer | None:
    """The Observer already attached to value, if any."""
    if kind_of(value) is Kind.OPAQUE:
        return None
    return _anchor.observers.get(value)


def observe(value: Any, as_root: bool = False) -> Observer | None:
    """Return value's Observer, creating it if value is eligible.

    Eligible means: a ReactiveDict or ReactiveList, extensible, not marked
    raw, with observation enabled and server-only mode off. Anything else
    yields None. as_root counts value as the root of one more state tree.
    """
    if kind_of(value) is Kind.OPAQUE:
        return None
    ob = _anchor.observers.get(value)
    if (
        ob is None
        and not is_raw(value)
        and config.is_observing()
        and not config.is_server_rendering()
        and (isinstance(value, ReactiveList) or value.is_extensible())
    ):
        ob = Observer(value)
    if as_root and ob is not None:
        ob.root_count += 1
    return ob


def reactive(data: Any) -> Any:
    """Lift raw data into a container and observe it.

    Usage:
        state = reactive({"count": 0, "todos": []})
    """
    value = lift(data)
    observe(value)
    return value


def _unchanged(old: Any, new: Any) -> bool:
    if old is new:
        return True
    # bool is its own kind: 0 -> False is a change
    if isinstance(old, bool) or isinstance(new, bool):
        return False
    if isinstance(old, (int, float)) and isinstance(new, (int, float)):
        if math.isnan(old) and math.isnan(new):
            return True
        return old == new
    if type(old) is not type(new):
        return False
    return old == new


def depend_array(items: ReactiveList) -> None:
    """Depend on every observed element, recursing into nested sequences.

    Element reads cannot be intercepted, so touching the list through a
    property stands in for touching each element.
    """
    for item in items:
        ob = observer_of(item)
        if ob is not None:
            ob.dep.depend()
        if isinstance(item, ReactiveList):
            depend_array(item)


def define_reactive(
    container: ReactiveDict,
    key: Any,
    value: Any = _MISSING,
    on_write: Callable[[], None] | None = None,
    shallow: bool = False,
) -> None:
    """Replace container[key] with a tracked getter/setter pair.

    An existing getter/setter is kept underneath. Non-configurable keys are
    left alone. on_write runs before each effective write in debug builds.
    Unless shallow, the value is observed too, and reading the key also
    depends on the nested container's own Dep.
    """
    prop = container.get_descriptor(key)
    if prop is not None and not prop.configurable:
        return
    if prop is not None and prop.getter in _tracked_getters:
        # already instrumented; a second wrapper would notify twice
        if value is not _MISSING:
            container[key] = value
        return

    dep = Dep()
    getter = prop.getter if prop is not None else None
    setter = prop.setter if prop is not None else None
    if value is _MISSING:
        # Derived (getter-only) properties are not evaluated eagerly.
        if prop is not None and (getter is None or setter is not None):
            value = container[key]
        else:
            value = None

    child_ob = None
    if not shallow:
        if getter is None:
            value = _lift_if_observing(value)
        child_ob = observe(value)

    def reactive_getter(obj: ReactiveDict) -> Any:
        current = getter(obj) if getter is not None else value
        if active_subscriber() is not None:
            dep.depend()
            if child_ob is not None:
                child_ob.dep.depend()
                if isinstance(current, ReactiveList):
                    depend_array(current)
        return current

    def reactive_setter(obj: ReactiveDict, new_value: Any) -> None:
        nonlocal value, child_ob
        current = getter(obj) if getter is not None else value
        if _unchanged(current, new_value):
            return
        if __debug__ and on_write is not None:
            on_write()
        # read-only derived property
        if getter is not None and setter is None:
            return
        if not shallow:
            new_value = _lift_if_observing(new_value)
        if setter is not None:
            setter(obj, new_value)
        else:
            value = new_value
        child_ob = None if shallow else observe(new_value)
        dep.notify()

    _tracked_getters.add(reactive_getter)
    container.define_property(
        key, getter=reactive_getter, setter=reactive_setter, enumerable=True, configurable=True
    )


# ─── Mutation API ────────────────────────────────────────────────────────────


def _is_valid_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool) and key >= 0


def _is_primitive(target: Any) -> bool:
    return target is None or isinstance(target, _PRIMITIVES)


def _pad(target: ReactiveList | list, index: int) -> None:
    """Grow target with None up to index, without notifying anyone."""
    if len(target) < index:
        target[len(target):] = [None] * (index - len(target))


def _plain_assign(target: Any, key: Any, value: Any) -> None:
    if isinstance(target, ReactiveDict):
        if key not in target and not target.is_extensible():
            if __debug__:
                logger.warning("Cannot add property %r to a sealed record", key)
            return
        target[key] = value
    elif isinstance(target, dict):
        target[key] = value
    elif isinstance(target, (list, ReactiveList)):
        if not _is_valid_index(key):
            if __debug__:
                logger.warning("Invalid sequence index %r", key)
            return
        _pad(target, key)
        if key == len(target):
            target[key:] = [value]
        else:
            target[key] = value
    else:
        try:
            setattr(target, key, value)
        except (AttributeError, TypeError):
            if __debug__:
                logger.warning(
                    "Cannot set property %r on %s", key, type(target).__name__
                )


def set(target: Any, key: Any, value: Any) -> Any:
    """Set target[key] so that subscribers hear about it. Returns value.

    This is the only way to add a reactive key to an observed record, or
    to change a sequence element observably. Suppressed writes still return
    value.
    """
    if _is_primitive(target):
        if __debug__:
            logger.warning(
                "Cannot set reactive property on None or primitive value: %r", target
            )
        return value
    if isinstance(target, ReactiveList) and _is_valid_index(key):
        _pad(target, key)
        target.splice(key, 1, value)
        return value
    if isinstance(target, ReactiveDict) and key in target:
        target[key] = value
        return value

    ob = observer_of(target)
    if is_state_root(target) or (ob is not None and ob.root_count):
        if __debug__:
            logger.warning(
                "Avoid adding reactive property %r to a state root at runtime - "
                "declare it upfront.",
                key,
            )
        return value
    if ob is None:
        _plain_assign(target, key, value)
        return value
    if isinstance(target, ReactiveList):
        if __debug__:
            logger.warning("Invalid sequence index %r", key)
        return value
    if not target.is_extensible():
        if __debug__:
            logger.warning("Cannot add property %r to a sealed record", key)
        return value

    define_reactive(target, key, value)
    ob.dep.notify()
    return value


def _has_own(target: Any, key: Any) -> bool:
    if isinstance(target, (ReactiveDict, dict)):
        return key in target
    if isinstance(target, (ReactiveList, list)):
        return _is_valid_index(key) and key < len(target)
    return isinstance(key, str) and key in getattr(target, "__dict__", {})


def delete(target: Any, key: Any) -> None:
    """Remove target[key] so that subscribers hear about it."""
    if _is_primitive(target):
        if __debug__:
            logger.warning(
                "Cannot delete reactive property on None or primitive value: %r", target
            )
        return
    if isinstance(target, ReactiveList) and _is_valid_index(key):
        target.splice(key, 1)
        return

    ob = observer_of(target)
    if is_state_root(target) or (ob is not None and ob.root_count):
        if __debug__:
            logger.warning(
                "Avoid deleting property %r on a state root - just set it to None.", key
            )
        return
    if not _has_own(target, key):
        return
    if isinstance(target, ReactiveDict) and not target.get_descriptor(key).configurable:
        return

    if isinstance(target, (ReactiveDict, dict, list)):
        del target[key]
    else:
        delattr(target, key)
    if ob is None:
        return
    ob.dep.notify()
