"""Column field types encoded as lattices."""

from __future__ import annotations

from typing import Any

from dbtoolkit.schemacmp import mysql
from dbtoolkit.schemacmp.lattice import (
    Bool,
    Byte,
    IncompatibleError,
    Int,
    Lattice,
    Maybe,
    Singleton,
    StringList,
    Tuple,
)

FLAG_MASK_KEYS = mysql.PRI_KEY_FLAG | mysql.UNIQUE_KEY_FLAG | mysql.MULTIPLE_KEY_FLAG
FLAG_MASK_DEF_VAL = mysql.AUTO_INCREMENT_FLAG | mysql.NO_DEFAULT_VALUE_FLAG
NOT_PART_OF_KEYS = 0xFF

INDEX_TP = 0
INDEX_FLEN = 1
INDEX_DEC = 2
INDEX_FLAG_SINGLETON = 3
INDEX_FLAG_NULL = 4
INDEX_FLAG_ANTI_KEYS = 5
INDEX_FLAG_DEF_VAL = 6
INDEX_CHARSET = 7
INDEX_COLLATE = 8
INDEX_ELEMS = 9

ERR_MSG_AUTO_TYPE_WITHOUT_KEY = "auto type but not defined as a key"

_NUMERIC_TYPES = frozenset(
    {
        mysql.TYPE_TINY,
        mysql.TYPE_INT24,
        mysql.TYPE_SHORT,
        mysql.TYPE_LONG,
        mysql.TYPE_LONGLONG,
        mysql.TYPE_FLOAT,
        mysql.TYPE_DOUBLE,
        mysql.TYPE_NEW_DECIMAL,
    }
)


def _reverse8(value: int) -> int:
    return int(f"{value & 0xFF:08b}"[::-1], 2)


def encode_anti_keys(flag: int) -> int:
    """Encode key flags so that "no key" is largest, then multiple > unique > primary."""
    return ~_reverse8(flag & FLAG_MASK_KEYS) & 0xFF


def decode_anti_keys(encoded: int) -> int:
    """Recover the key flags from their anti-key encoding."""
    return _reverse8(~encoded & 0xFF)


def encode_field_type(ft: mysql.FieldType) -> Tuple:
    """Encode a field type as a tuple of lattices."""
    if ft.tp == mysql.TYPE_NEW_DECIMAL:
        flen: Lattice = Singleton(ft.flen)
        dec: Lattice = Singleton(ft.decimal)
    else:
        flen = Int(ft.flen)
        dec = Int(ft.decimal)

    if ft.flag & mysql.AUTO_INCREMENT_FLAG or not ft.flag & mysql.NO_DEFAULT_VALUE_FLAG:
        def_val = Maybe(Singleton(ft.flag & FLAG_MASK_DEF_VAL))
    else:
        def_val = Maybe(None)

    rest = ft.flag & ~(FLAG_MASK_DEF_VAL | mysql.NOT_NULL_FLAG | FLAG_MASK_KEYS)
    return Tuple(
        [
            _field_tp(ft.tp),
            flen,
            dec,
            Singleton(rest),
            Bool(not ft.flag & mysql.NOT_NULL_FLAG),
            Byte(encode_anti_keys(ft.flag)),
            def_val,
            Singleton(ft.charset),
            Singleton(ft.collate),
            StringList(list(ft.elems)),
        ]
    )


def _field_tp(tp: int) -> Lattice:
    from dbtoolkit.schemacmp.lattice import FieldTp

    return FieldTp(tp)


def decode_field_type(tup: Tuple) -> mysql.FieldType:
    """Decode a tuple produced by encode_field_type back into a field type."""
    lst = tup.unwrap()
    flags = lst[INDEX_FLAG_SINGLETON]
    flags |= decode_anti_keys(lst[INDEX_FLAG_ANTI_KEYS])
    if not lst[INDEX_FLAG_NULL]:
        flags |= mysql.NOT_NULL_FLAG
    def_val = lst[INDEX_FLAG_DEF_VAL]
    if isinstance(def_val, int):
        flags |= def_val
    else:
        flags |= mysql.NO_DEFAULT_VALUE_FLAG
    return mysql.FieldType(
        tp=lst[INDEX_TP],
        flag=flags,
        flen=lst[INDEX_FLEN],
        decimal=lst[INDEX_DEC],
        charset=lst[INDEX_CHARSET],
        collate=lst[INDEX_COLLATE],
        elems=list(lst[INDEX_ELEMS]),
    )


class Type(Lattice):
    """A column field type as a lattice."""

    tuple: Tuple

    def __init__(self, ft: mysql.FieldType) -> None:
        self.tuple = encode_field_type(ft)

    @classmethod
    def from_tuple(cls, tup: Tuple) -> Type:
        obj = cls.__new__(cls)
        obj.tuple = tup
        return obj

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return self.tuple == other.tuple

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Type({self.unwrap()!r})"

    def has_default(self) -> bool:
        return self.tuple[INDEX_FLAG_DEF_VAL].unwrap() is not None

    def set_flag_for_missing_column(self) -> bool:
        """Adjust flags for filling in a missing column; return whether it had no default."""
        self.tuple[INDEX_FLAG_ANTI_KEYS] = Byte(NOT_PART_OF_KEYS)
        def_val = self.tuple[INDEX_FLAG_DEF_VAL].unwrap()
        if not isinstance(def_val, int) or def_val & mysql.NO_DEFAULT_VALUE_FLAG:
            base = def_val if isinstance(def_val, int) else 0
            self.tuple[INDEX_FLAG_DEF_VAL] = Maybe(Singleton(base & ~mysql.NO_DEFAULT_VALUE_FLAG))
            return True
        return False

    def is_not_null(self) -> bool:
        return not self.tuple[INDEX_FLAG_NULL].unwrap()

    def in_auto_increment(self) -> bool:
        def_val = self.tuple[INDEX_FLAG_DEF_VAL].unwrap()
        return isinstance(def_val, int) and bool(def_val & mysql.AUTO_INCREMENT_FLAG)

    def set_anti_key_flags(self, flag: int) -> None:
        self.tuple[INDEX_FLAG_ANTI_KEYS] = Byte(encode_anti_keys(flag))

    def standard_default_value(self) -> Any:
        """The implicit default of a NOT NULL column of this type."""
        dec = self.tuple[INDEX_DEC].unwrap()
        tail = "." + "0" * dec if dec > 0 else ""
        tp = self.tuple[INDEX_TP].unwrap()
        if tp in _NUMERIC_TYPES:
            return "0"
        if tp in (mysql.TYPE_TIMESTAMP, mysql.TYPE_DATETIME):
            return "0000-00-00 00:00:00" + tail
        if tp == mysql.TYPE_DATE:
            return "0000-00-00"
        if tp == mysql.TYPE_DURATION:
            return "00:00:00" + tail
        if tp == mysql.TYPE_YEAR:
            return "0000"
        if tp == mysql.TYPE_JSON:
            return "null"
        if tp == mysql.TYPE_ENUM:
            return self.tuple[INDEX_ELEMS][0]
        return ""

    def clone(self) -> Type:
        return Type.from_tuple(Tuple(list(self.tuple)))

    def unwrap(self) -> mysql.FieldType:
        return decode_field_type(self.tuple)

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        return self.tuple.compare(other.tuple)

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        joined = self.tuple.join(other.tuple)
        def_val = joined[INDEX_FLAG_DEF_VAL].unwrap()
        if (
            isinstance(def_val, int)
            and def_val & mysql.AUTO_INCREMENT_FLAG
            and joined[INDEX_FLAG_ANTI_KEYS].unwrap() == NOT_PART_OF_KEYS
        ):
            raise IncompatibleError(ERR_MSG_AUTO_TYPE_WITHOUT_KEY)
        return Type.from_tuple(joined)