import re

import pytest

from dbtoolkit.schemacmp import mysql
from dbtoolkit.schemacmp.lattice import (
    BitSet,
    Bool,
    Byte,
    EqualitySingleton,
    FieldTp,
    IncompatibleError,
    Int,
    Int64,
    LatticeMap,
    Map,
    Maybe,
    Singleton,
    StringList,
    Tuple,
    Uint,
    combine_compare_result,
    maybe_singleton_interface,
    maybe_singleton_string,
)


class UintMap(LatticeMap):
    def __init__(self, data=None):
        self.data = dict(data or {})

    def new(self):
        return UintMap()

    def insert(self, key, value):
        self.data[key] = value.value

    def get(self, key):
        return Uint(self.data[key]) if key in self.data else None

    def items(self):
        for key, value in self.data.items():
            yield key, Uint(value)

    def compare_with_nil(self, value):
        return 1

    def join_with_nil(self, value):
        return value

    def should_delete_incompatible_join(self):
        return True


def _case(a, b, cmp=0, cmp_err="", join=None, join_err=""):
    return (a, b, cmp, cmp_err, join, join_err)


CASES = [
    _case(Bool(False), Bool(False), 0, join=Bool(False)),
    _case(Bool(False), Bool(True), -1, join=Bool(True)),
    _case(Bool(True), Bool(True), 0, join=Bool(True)),
    _case(Singleton(123), Singleton(123), 0, join=Singleton(123)),
    _case(Singleton(123), Singleton(2468), cmp_err="distinct singletons.*", join_err="distinct singletons.*"),
    _case(BitSet(0b010110), BitSet(0b110001), cmp_err="non-inclusive bit sets.*", join=BitSet(0b110111)),
    _case(BitSet(0xFFFFFFFF), BitSet(0), 1, join=BitSet(0xFFFFFFFF)),
    _case(BitSet(0b10001), BitSet(0b11011), -1, join=BitSet(0b11011)),
    _case(BitSet(0x522), BitSet(0x522), 0, join=BitSet(0x522)),
    _case(Byte(123), Byte(123), 0, join=Byte(123)),
    _case(Byte(1), Byte(23), -1, join=Byte(23)),
    _case(Byte(123), Byte(45), 1, join=Byte(123)),
    _case(
        Tuple([Byte(123), Bool(False)]),
        Tuple([Byte(67), Bool(True)]),
        cmp_err="at tuple index 1: combining contradicting orders.*",
        join=Tuple([Byte(123), Bool(True)]),
    ),
    _case(Tuple([]), Tuple([]), 0, join=Tuple([])),
    _case(
        Tuple([Singleton(6), Singleton(7)]),
        Tuple([Singleton(6), Singleton(8)]),
        cmp_err="at tuple index 1: distinct singletons.*",
        join_err="at tuple index 1: distinct singletons.*",
    ),
    _case(Tuple([]), Tuple([Bool(False)]), cmp_err="tuple length mismatch.*", join_err="tuple length mismatch.*"),
    _case(Bool(False), Singleton(False), cmp_err="type mismatch.*", join_err="type mismatch.*"),
    _case(
        Maybe(Singleton(123)),
        Maybe(Singleton(678)),
        cmp_err="distinct singletons.*",
        join_err="distinct singletons.*",
    ),
    _case(Maybe(Byte(111)), Maybe(Byte(222)), -1, join=Maybe(Byte(222))),
    _case(Maybe(None), Maybe(Singleton(135)), -1, join=Maybe(Singleton(135))),
    _case(Maybe(None), Maybe(None), 0, join=Maybe(None)),
    _case(Bool(False), Maybe(Bool(False)), cmp_err="type mismatch.*", join_err="type mismatch.*"),
    _case(
        StringList(["one", "two", "three"]),
        StringList(["one", "two", "three", "four", "five"]),
        -1,
        join=StringList(["one", "two", "three", "four", "five"]),
    ),
    _case(
        StringList(["one", "two", "three"]),
        StringList(["two", "three"]),
        cmp_err="at string list index 0: distinct values.*",
        join_err="at string list index 0: distinct values.*",
    ),
    _case(
        StringList(["a", "b", "c"]),
        StringList(["a", "e", "i", "o", "u"]),
        cmp_err="at string list index 1: distinct values.*",
        join_err="at string list index 1: distinct values.*",
    ),
    _case(StringList([]), StringList([]), 0, join=StringList([])),
    _case(
        EqualitySingleton(b"abcdef"),
        EqualitySingleton(b"abcdef"),
        0,
        join=EqualitySingleton(b"abcdef"),
    ),
    _case(
        EqualitySingleton(b"abcdef"),
        EqualitySingleton(b"ABCDEF"),
        cmp_err="distinct singletons.*",
        join_err="distinct singletons.*",
    ),
    _case(
        EqualitySingleton(b"abcdef"),
        Singleton(b"ABCDEF"),
        cmp_err="type mismatch.*",
        join_err="type mismatch.*",
    ),
    _case(Int64(234), Int64(-5), 1, join=Int64(234)),
    _case(Uint(665544), Uint(765), 1, join=Uint(665544)),
    _case(
        Map(UintMap({"a": 123, "b": 678, "c": 456})),
        Map(UintMap({"a": 234, "b": 567, "d": 789})),
        cmp_err=".*combining contradicting orders.*",
        join=Map(UintMap({"a": 234, "b": 678, "c": 456, "d": 789})),
    ),
    _case(
        Map(UintMap({"a": 123, "b": 678, "c": 456})),
        Map(UintMap({"a": 1, "c": 4})),
        1,
        join=Map(UintMap({"a": 123, "b": 678, "c": 456})),
    ),
    _case(FieldTp(mysql.TYPE_LONG), Singleton(False), cmp_err="type mismatch.*", join_err="type mismatch.*"),
    _case(
        FieldTp(mysql.TYPE_LONG),
        FieldTp(mysql.TYPE_SET),
        cmp_err="incompatible mysql type.*",
        join_err="incompatible mysql type.*",
    ),
]

INTEGER_ORDER = [mysql.TYPE_TINY, mysql.TYPE_SHORT, mysql.TYPE_INT24, mysql.TYPE_LONG, mysql.TYPE_LONGLONG]
BLOB_ORDER = [mysql.TYPE_TINY_BLOB, mysql.TYPE_BLOB, mysql.TYPE_MEDIUM_BLOB, mysql.TYPE_LONG_BLOB]

for _order in (INTEGER_ORDER, BLOB_ORDER):
    for _i, _a in enumerate(_order):
        for _j, _b in enumerate(_order):
            CASES.append(
                _case(FieldTp(_a), FieldTp(_b), (_i > _j) - (_i < _j), join=FieldTp(_order[max(_i, _j)]))
            )


def _expect_error(action, pattern):
    with pytest.raises(IncompatibleError) as info:
        action()
    assert re.fullmatch(pattern, str(info.value)), str(info.value)


@pytest.mark.parametrize("a,b,cmp,cmp_err,joined,join_err", CASES)
def test_compatibilities(a, b, cmp, cmp_err, joined, join_err):
    if cmp_err:
        _expect_error(lambda: a.compare(b), cmp_err)
        _expect_error(lambda: b.compare(a), cmp_err)
    else:
        assert combine_compare_result(a.compare(b), 0) == cmp
        assert combine_compare_result(b.compare(a), 0) == -cmp

    if join_err:
        _expect_error(lambda: a.join(b), join_err)
        _expect_error(lambda: b.join(a), join_err)
    else:
        assert a.join(b) == joined
        result = b.join(a)
        assert result == joined
        assert Maybe(a).join(Maybe(b)) == Maybe(joined)
        assert combine_compare_result(result.compare(a), 0) >= 0
        assert combine_compare_result(result.compare(b), 0) >= 0


def test_combine_compare_result():
    assert combine_compare_result(0, 1) == 1
    assert combine_compare_result(-1, 0) == -1
    assert combine_compare_result(1, 1) == 1
    _expect_error(lambda: combine_compare_result(1, -1), "combining contradicting orders.*")


def test_singleton_distinguishes_value_types():
    _expect_error(lambda: Singleton(1).compare(Singleton(True)), "distinct singletons.*")


def test_unwrap_is_deep():
    tup = Tuple([Int(1), Bool(True), Maybe(None), Maybe(Singleton("x")), StringList(["a"])])
    assert tup.unwrap() == [1, True, None, "x", ["a"]]
    assert Map(UintMap({"k": 7})).unwrap() == {"k": 7}


def test_maybe_singleton_helpers():
    assert maybe_singleton_string("") == Maybe(None)
    assert maybe_singleton_string("utf8") == Maybe(Singleton("utf8"))
    assert maybe_singleton_interface(None) == Maybe(None)
    assert maybe_singleton_interface(0) == Maybe(Singleton(0))


def test_map_key_error_quotes_key():
    a = Map(UintMap({"a": 1, "b": 5}))
    b = Map(UintMap({"a": 2, "b": 3}))
    _expect_error(lambda: a.compare(b), 'at map key "b": combining contradicting orders.*')


def test_tuple_join_does_not_mutate_inputs():
    a = Tuple([Byte(1), Bool(False)])
    b = Tuple([Byte(2), Bool(True)])
    a.join(b)
    assert a == Tuple([Byte(1), Bool(False)])
    assert b == Tuple([Byte(2), Bool(True)])