"""Tests for ReactiveDict, ReactiveList and classification helpers."""

import pytest

from trackr import Kind, ReactiveDict, ReactiveList, is_raw, kind_of, mark_raw, observe, to_raw
from trackr.containers import is_state_root, lift


class TestReactiveDict:
    def test_basic_operations(self):
        d = ReactiveDict({"a": 1, "b": 2})
        assert d["a"] == 1
        assert d.get("c", 99) == 99
        assert "a" in d
        assert len(d) == 2
        assert list(d) == ["a", "b"]
        assert d.items() == [("a", 1), ("b", 2)]
        assert dict(d) == {"a": 1, "b": 2}

    def test_missing_key(self):
        with pytest.raises(KeyError):
            ReactiveDict()["nope"]

    def test_plain_writes(self):
        d = ReactiveDict({"a": 1})
        d["a"] = 2
        d["b"] = 3
        del d["a"]
        assert d.items() == [("b", 3)]

    def test_getter_property(self):
        d = ReactiveDict({"first": "ada"})
        d.define_property("shout", getter=lambda rec: rec["first"].upper())
        assert d["shout"] == "ADA"
        with pytest.raises(AttributeError):
            d["shout"] = "x"

    def test_getter_setter_property(self):
        store = {"v": 1}
        d = ReactiveDict()
        d.define_property(
            "v",
            getter=lambda rec: store["v"],
            setter=lambda rec, value: store.__setitem__("v", value),
        )
        d["v"] = 5
        assert store["v"] == 5
        assert d["v"] == 5

    def test_non_enumerable_hidden_from_iteration(self):
        d = ReactiveDict({"a": 1})
        d.define_property("secret", 42, enumerable=False)
        assert "secret" in d
        assert d.keys() == ["a"]
        assert len(d) == 1

    def test_non_configurable(self):
        d = ReactiveDict()
        d.define_property("fixed", 1, configurable=False)
        with pytest.raises(TypeError):
            del d["fixed"]
        with pytest.raises(TypeError):
            d.define_property("fixed", 2)

    def test_seal(self):
        d = ReactiveDict({"a": 1})
        d.seal()
        assert not d.is_extensible()
        d["a"] = 2  # existing keys stay writable
        with pytest.raises(TypeError):
            d["b"] = 1

    def test_hashable_by_identity(self):
        a, b = ReactiveDict({"x": 1}), ReactiveDict({"x": 1})
        assert a != b
        assert len({a, b}) == 2

    def test_repr(self):
        assert repr(ReactiveDict({"a": 1})) == "ReactiveDict({'a': 1})"


class TestReactiveList:
    def test_reads(self):
        lst = ReactiveList([1, 2, 3])
        assert len(lst) == 3
        assert lst[0] == 1
        assert lst[1:] == [2, 3]
        assert list(lst) == [1, 2, 3]
        assert 2 in lst
        assert lst.index(3) == 2
        assert lst.count(1) == 1
        assert bool(ReactiveList()) is False

    def test_mutations(self):
        lst = ReactiveList([1, 2, 3])
        lst.append(4)
        lst.appendleft(0)
        lst.insert(2, 99)
        assert list(lst) == [0, 1, 99, 2, 3, 4]
        assert lst.pop() == 4
        assert lst.popleft() == 0
        lst.remove(99)
        lst.extend([7, 8])
        lst.reverse()
        assert list(lst) == [8, 7, 3, 2, 1]
        lst.sort()
        assert list(lst) == [1, 2, 3, 7, 8]
        lst.clear()
        assert list(lst) == []

    def test_splice_replace(self):
        lst = ReactiveList([1, 2, 3, 4])
        removed = lst.splice(1, 2, "a", "b", "c")
        assert removed == [2, 3]
        assert list(lst) == [1, "a", "b", "c", 4]

    def test_splice_to_end(self):
        lst = ReactiveList([1, 2, 3, 4])
        assert lst.splice(2) == [3, 4]
        assert list(lst) == [1, 2]

    def test_splice_negative_start(self):
        lst = ReactiveList([1, 2, 3, 4])
        assert lst.splice(-1, 1) == [4]
        assert lst.splice(-10, 1) == [1]
        assert list(lst) == [2, 3]

    def test_splice_clamps(self):
        lst = ReactiveList([1, 2])
        assert lst.splice(10, 5, "x") == []
        assert lst.splice(0, -3) == []
        assert list(lst) == [1, 2, "x"]

    def test_index_writes(self):
        lst = ReactiveList([1, 2, 3])
        lst[1] = 20
        del lst[0]
        assert list(lst) == [20, 3]


class TestClassification:
    def test_kind_of(self):
        assert kind_of(ReactiveDict()) is Kind.RECORD
        assert kind_of(ReactiveList()) is Kind.SEQUENCE
        assert kind_of({}) is Kind.OPAQUE
        assert kind_of([]) is Kind.OPAQUE
        assert kind_of(3) is Kind.OPAQUE

    def test_lift(self):
        assert isinstance(lift({"a": 1}), ReactiveDict)
        assert isinstance(lift([1]), ReactiveList)
        assert lift((1, 2)) == (1, 2)
        existing = ReactiveDict()
        assert lift(existing) is existing

    def test_lift_skips_subclasses(self):
        class Config(dict):
            pass

        cfg = Config(a=1)
        assert lift(cfg) is cfg

    def test_mark_raw(self):
        d = ReactiveDict()
        assert not is_raw(d)
        assert mark_raw(d) is d
        assert is_raw(d)
        assert not is_raw({"a": 1})

    def test_skip_observe_class(self):
        class Rendered(ReactiveDict):
            __skip_observe__ = True

        assert is_raw(Rendered())

    def test_state_root(self):
        class Root:
            __state_root__ = True

        assert is_state_root(Root())
        assert not is_state_root(ReactiveDict())

    def test_to_raw(self):
        graph = ReactiveDict({"rows": ReactiveList([ReactiveDict({"n": 1})]), "plain": [{"x": 2}]})
        assert to_raw(graph) == {"rows": [{"n": 1}], "plain": [{"x": 2}]}


class TestSelfReference:
    def test_repr(self):
        r = ReactiveDict({"a": 1})
        r["me"] = r
        assert repr(r) == "ReactiveDict({'a': 1, 'me': ...})"
        lst = ReactiveList([1])
        lst.append(lst)
        assert repr(lst) == "ReactiveList([1, ...])"

    def test_repr_observed(self):
        r = ReactiveDict()
        r["me"] = r
        observe(r)
        assert repr(r) == "ReactiveDict({'me': ...})"

    def test_to_raw_keeps_cycles(self):
        r = ReactiveDict({"a": 1})
        r["me"] = r
        lst = ReactiveList([r])
        lst.append(lst)
        snapshot = to_raw(lst)
        assert snapshot[0]["me"] is snapshot[0]
        assert snapshot[1] is snapshot
        assert snapshot[0]["a"] == 1

    def test_to_raw_shares_repeated_containers(self):
        shared = ReactiveDict({"n": 1})
        snapshot = to_raw(ReactiveDict({"x": shared, "y": shared}))
        assert snapshot["x"] is snapshot["y"]
