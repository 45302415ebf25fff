"""Reactive containers — records and sequences that can be instrumented.

Builtin dict and list cannot have their item access intercepted, so the
engine works on two wrapper types that own their storage:

- ReactiveDict keeps an explicit map of key -> Property. Instrumenting a
  key means swapping its Property for a tracked getter/setter pair.
- ReactiveList keeps a plain list. Its mutating methods report structural
  changes to the list's Observer; reads pass straight through.

Until observed, both behave like ordinary containers. Raw dicts and lists
are lifted into these types where they enter an observed graph.
"""

from __future__ import annotations

import enum
import reprlib
from typing import Any, Callable, Iterable, Iterator

from trackr import _anchor
from trackr._tracking import untracked

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


class Kind(enum.Enum):
    """The closed set of shapes the engine distinguishes."""

    RECORD = "record"
    SEQUENCE = "sequence"
    OPAQUE = "opaque"


class Property:
    """Descriptor for one key of a ReactiveDict.

    A data property uses `value`. An accessor property uses `getter(container)`
    and optionally `setter(container, value)`.
    """

    __slots__ = ("value", "getter", "setter", "enumerable", "configurable")

    def __init__(
        self,
        value: Any = None,
        getter: Getter | None = None,
        setter: Setter | None = None,
        *,
        enumerable: bool = True,
        configurable: bool = True,
    ) -> None:
        self.value = value
        self.getter = getter
        self.setter = setter
        self.enumerable = enumerable
        self.configurable = configurable

    @property
    def is_accessor(self) -> bool:
        return self.getter is not None or self.setter is not None

    def __repr__(self) -> str:
        if self.is_accessor:
            return f"Property(getter={self.getter!r}, setter={self.setter!r})"
        return f"Property({self.value!r})"


class ReactiveDict:
    """A record: keyed container whose properties can be instrumented.

    Plain item assignment of a brand-new key stores an ordinary property.
    It stays invisible to subscribers; use trackr.set() to add keys
    reactively.
    """

    __slots__ = ("_props", "__weakref__")

    def __init__(self, data: dict | Iterable | None = None) -> None:
        self._props: dict[Any, Property] = {}
        if data:
            for key, value in dict(data).items():
                self._props[key] = Property(value)

    def _read(self, prop: Property) -> Any:
        if prop.getter is not None:
            return prop.getter(self)
        return prop.value

    # --- Descriptors ---

    def get_descriptor(self, key: Any) -> Property | None:
        return self._props.get(key)

    def define_property(
        self,
        key: Any,
        value: Any = None,
        *,
        getter: Getter | None = None,
        setter: Setter | None = None,
        enumerable: bool = True,
        configurable: bool = True,
    ) -> None:
        """Install or replace the descriptor for key."""
        existing = self._props.get(key)
        if existing is None and not self.is_extensible():
            raise TypeError(f"cannot define {key!r}: record is not extensible")
        if existing is not None and not existing.configurable:
            raise TypeError(f"cannot redefine non-configurable property {key!r}")
        self._props[key] = Property(
            value, getter, setter, enumerable=enumerable, configurable=configurable
        )

    def seal(self) -> None:
        """Refuse new keys from now on. Sealed records are never observed."""
        _anchor.sealed.add(self)

    def is_extensible(self) -> bool:
        return self not in _anchor.sealed

    # --- Read operations ---

    def __getitem__(self, key: Any) -> Any:
        return self._read(self._props[key])

    def get(self, key: Any, default: Any = None) -> Any:
        prop = self._props.get(key)
        return default if prop is None else self._read(prop)

    def __contains__(self, key: Any) -> bool:
        return key in self._props

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def keys(self) -> list[Any]:
        return [key for key, prop in self._props.items() if prop.enumerable]

    def values(self) -> list[Any]:
        return [self._read(self._props[key]) for key in self.keys()]

    def items(self) -> list[tuple[Any, Any]]:
        return [(key, self._read(self._props[key])) for key in self.keys()]

    # --- Write operations (plain, never notify on their own) ---

    def __setitem__(self, key: Any, value: Any) -> None:
        prop = self._props.get(key)
        if prop is None:
            if not self.is_extensible():
                raise TypeError(f"cannot add {key!r}: record is not extensible")
            self._props[key] = Property(value)
        elif prop.setter is not None:
            prop.setter(self, value)
        elif prop.getter is not None:
            raise AttributeError(f"property {key!r} is read-only")
        else:
            prop.value = value

    def __delitem__(self, key: Any) -> None:
        if not self._props[key].configurable:
            raise TypeError(f"cannot delete non-configurable property {key!r}")
        del self._props[key]

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        with untracked():
            return f"ReactiveDict({dict(self.items())!r})"


class ReactiveList:
    """A sequence whose structural mutations are observable.

    append/extend/appendleft/insert/pop/popleft/splice/remove/clear/sort/reverse
    notify the list's Observer once it exists, after observing any newly
    inserted element. Index assignment, del and slice assignment are plain
    writes that nobody hears about; use trackr.set()/trackr.delete() for
    positional changes that must be seen.
    """

    __slots__ = ("_items", "__weakref__")

    def __init__(self, items: Iterable | None = None) -> None:
        self._items: list = list(items) if items else []

    def _admit(self, items: Iterable) -> list:
        """Lift and observe elements about to be inserted, if observed."""
        ob = _anchor.observers.get(self)
        if ob is None:
            return list(items)
        return ob.observe_array(items)

    def _notify(self) -> None:
        ob = _anchor.observers.get(self)
        if ob is not None:
            ob.dep.notify()

    # --- Read operations (pass-through) ---

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __contains__(self, item) -> bool:
        return item in self._items

    def __bool__(self) -> bool:
        return bool(self._items)

    def index(self, item, *args) -> int:
        return self._items.index(item, *args)

    def count(self, item) -> int:
        return self._items.count(item)

    # --- Plain writes (not observable) ---

    def __setitem__(self, index, value) -> None:
        self._items[index] = value

    def __delitem__(self, index) -> None:
        del self._items[index]

    # --- Intercepted mutations ---

    def append(self, item) -> None:
        self._items.extend(self._admit((item,)))
        self._notify()

    def extend(self, items: Iterable) -> None:
        self._items.extend(self._admit(items))
        self._notify()

    def appendleft(self, item) -> None:
        self._items[0:0] = self._admit((item,))
        self._notify()

    def insert(self, index: int, item) -> None:
        (item,) = self._admit((item,))
        self._items.insert(index, item)
        self._notify()

    def pop(self, index: int = -1):
        result = self._items.pop(index)
        self._notify()
        return result

    def popleft(self):
        result = self._items.pop(0)
        self._notify()
        return result

    def splice(self, start: int, delete_count: int | None = None, *items) -> list:
        """Replace delete_count elements at start with items. Returns the removed ones.

        Out-of-range arguments are clamped; a negative start counts from the end.
        """
        size = len(self._items)
        start = max(size + start, 0) if start < 0 else min(start, size)
        if delete_count is None:
            delete_count = size - start
        delete_count = max(0, min(delete_count, size - start))
        admitted = self._admit(items)
        removed = self._items[start:start + delete_count]
        self._items[start:start + delete_count] = admitted
        self._notify()
        return removed

    def remove(self, item) -> None:
        self._items.remove(item)
        self._notify()

    def clear(self) -> None:
        self._items.clear()
        self._notify()

    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._items.sort(key=key, reverse=reverse)
        self._notify()

    def reverse(self) -> None:
        self._items.reverse()
        self._notify()

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f"ReactiveList({self._items!r})"


# ─── Classification ──────────────────────────────────────────────────────────


def kind_of(value: Any) -> Kind:
    if isinstance(value, ReactiveDict):
        return Kind.RECORD
    if isinstance(value, ReactiveList):
        return Kind.SEQUENCE
    return Kind.OPAQUE


def lift(value: Any) -> Any:
    """Wrap a raw dict or list so it can be observed. Anything else is returned as-is.

    Only exact builtins are lifted; subclasses are someone else's type.
    """
    if type(value) is dict:
        return ReactiveDict(value)
    if type(value) is list:
        return ReactiveList(value)
    return value


def mark_raw(container: ReactiveDict | ReactiveList) -> ReactiveDict | ReactiveList:
    """Exclude a container from observation for good."""
    _anchor.raw.add(container)
    return container


def is_raw(value: Any) -> bool:
    if getattr(type(value), "__skip_observe__", False):
        return True
    return kind_of(value) is not Kind.OPAQUE and value in _anchor.raw


def is_state_root(value: Any) -> bool:
    """Is value a state-root holder, whose reactive keys must be declared upfront?"""
    return bool(getattr(type(value), "__state_root__", False))


def to_raw(value: Any, _memo: dict[int, Any] | None = None) -> Any:
    """Plain recursive copy of a reactive graph, read without tracking.

    Shared and self-referencing containers map to a single shared copy.
    """
    if _memo is None:
        _memo = {}
    if id(value) in _memo:
        return _memo[id(value)]
    with untracked():
        if isinstance(value, (ReactiveDict, dict)):
            copy: Any = {}
            _memo[id(value)] = copy
            for key, item in value.items():
                copy[key] = to_raw(item, _memo)
            return copy
        if isinstance(value, (ReactiveList, list)):
            copy = []
            _memo[id(value)] = copy
            copy.extend(to_raw(item, _memo) for item in value)
            return copy
        return value
