"""Table schemas encoded as lattices, with comparison, join and SQL rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterator, NamedTuple

from dbtoolkit.schemacmp import mysql
from dbtoolkit.schemacmp.fieldtype import ERR_MSG_AUTO_TYPE_WITHOUT_KEY, Type
from dbtoolkit.schemacmp.lattice import (
    Bool,
    EqualitySingleton,
    IncompatibleError,
    Int64,
    Lattice,
    LatticeMap,
    Map,
    Maybe,
    Singleton,
    Tuple,
    maybe_singleton_interface,
    maybe_singleton_string,
)

_COL_DEFAULT = 0
_COL_GENERATED_EXPR = 1
_COL_GENERATED_STORED = 2
_COL_FIELD_TYPE = 3

_IDX_COLUMNS = 0
_IDX_NOT_UNIQUE = 1
_IDX_NOT_PRIMARY = 2
_IDX_TYPE = 3

_TBL_CHARSET = 0
_TBL_COLLATE = 1
_TBL_COLUMNS = 2
_TBL_INDICES = 3
_TBL_AUTO_INC_ID = 4
_TBL_SHARD_ROW_ID_BITS = 5
_TBL_AUTO_RANDOM_BITS = 6
_TBL_PRE_SPLIT_REGIONS = 7
_TBL_COMPRESSION = 8


class IndexType(enum.Enum):
    """The storage structure of an index."""

    INVALID = 0
    BTREE = 1
    HASH = 2
    RTREE = 3


@dataclass
class ColumnInfo:
    """A column definition."""

    name: str
    field_type: mysql.FieldType
    default_value: Any = None
    generated_expr_string: str = ""
    generated_stored: bool = False


@dataclass
class IndexColumnInfo:
    """A column reference within an index, with an optional prefix length."""

    name: str
    length: int = mysql.UNSPECIFIED_LENGTH


@dataclass
class IndexInfo:
    """An index definition."""

    name: str
    columns: list[IndexColumnInfo] = field(default_factory=list)
    unique: bool = False
    primary: bool = False
    tp: IndexType = IndexType.BTREE


@dataclass
class TableInfo:
    """A table definition."""

    columns: list[ColumnInfo] = field(default_factory=list)
    indices: list[IndexInfo] = field(default_factory=list)
    charset: str = mysql.UTF8MB4_CHARSET
    collate: str = mysql.UTF8MB4_DEFAULT_COLLATION
    auto_inc_id: int = 0
    shard_row_id_bits: int = 0
    auto_random_bits: int = 0
    pre_split_regions: int = 0
    compression: str = ""


class _IndexColumn(NamedTuple):
    name: str
    length: int


class _DictMap(LatticeMap):
    def __init__(self) -> None:
        self._entries: dict[str, Lattice] = {}

    def new(self) -> LatticeMap:
        return type(self)()

    def insert(self, key: str, value: Lattice) -> None:
        self._entries[key] = value

    def get(self, key: str) -> Lattice | None:
        return self._entries.get(key)

    def items(self) -> Iterator[tuple[str, Lattice]]:
        return iter(list(self._entries.items()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._entries!r})"


class _ColumnMap(_DictMap):
    def compare_with_nil(self, value: Lattice) -> int:
        if value[_COL_FIELD_TYPE].has_default():
            return 1
        raise IncompatibleError("column with no default value cannot be missing")

    def join_with_nil(self, value: Lattice) -> Lattice | None:
        col = Tuple(list(value))
        ty = col[_COL_FIELD_TYPE].clone()
        if ty.set_flag_for_missing_column() and ty.is_not_null():
            col[_COL_DEFAULT] = Maybe(Singleton(ty.standard_default_value()))
        col[_COL_FIELD_TYPE] = ty
        return col

    def should_delete_incompatible_join(self) -> bool:
        return False


class _IndexMap(_DictMap):
    def compare_with_nil(self, value: Lattice) -> int:
        return -1

    def join_with_nil(self, value: Lattice) -> Lattice | None:
        return None

    def should_delete_incompatible_join(self) -> bool:
        return True


def _encode_column(ci: ColumnInfo) -> Tuple:
    return Tuple(
        [
            maybe_singleton_interface(ci.default_value),
            Singleton(ci.generated_expr_string),
            Singleton(ci.generated_stored),
            Type(ci.field_type),
        ]
    )


def _encode_index(ii: IndexInfo) -> Tuple:
    columns = tuple(_IndexColumn(c.name.lower(), c.length) for c in ii.columns)
    return Tuple(
        [
            EqualitySingleton(columns),
            Bool(not ii.unique),
            Bool(not ii.primary),
            Singleton(ii.tp),
        ]
    )


def _encode_implicit_primary_key(ci: ColumnInfo) -> Tuple:
    return Tuple(
        [
            EqualitySingleton((_IndexColumn(ci.name.lower(), mysql.UNSPECIFIED_LENGTH),)),
            Bool(False),
            Bool(False),
            Singleton(IndexType.BTREE),
        ]
    )


def _encode_table(ti: TableInfo) -> Tuple:
    has_explicit_primary = False
    indices = _IndexMap()
    for ii in ti.indices:
        if ii.primary:
            has_explicit_primary = True
        indices.insert(ii.name.lower(), _encode_index(ii))
    columns = _ColumnMap()
    for ci in ti.columns:
        columns.insert(ci.name.lower(), _encode_column(ci))
        if not has_explicit_primary and ci.field_type.flag & mysql.PRI_KEY_FLAG:
            indices.insert("primary", _encode_implicit_primary_key(ci))
    return Tuple(
        [
            Singleton(ti.charset),
            Singleton(ti.collate),
            Map(columns),
            Map(indices),
            Int64(ti.auto_inc_id),
            Singleton(ti.shard_row_id_bits),
            Singleton(ti.auto_random_bits),
            Singleton(ti.pre_split_regions),
            maybe_singleton_string(ti.compression),
        ]
    )


def _name(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def _string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _restore_column(col: list[Any], name: str) -> str:
    typ: mysql.FieldType = col[_COL_FIELD_TYPE]
    parts = [_name(name), " ", typ.to_sql()]
    if col[_COL_GENERATED_EXPR]:
        parts.append(f" GENERATED ALWAYS AS ({col[_COL_GENERATED_EXPR]})")
    if col[_COL_GENERATED_STORED]:
        parts.append(" STORED")
    if typ.flag & mysql.NOT_NULL_FLAG:
        parts.append(" NOT NULL")
    if col[_COL_DEFAULT] is not None:
        parts.append(f" DEFAULT {col[_COL_DEFAULT]}")
    if typ.flag & mysql.AUTO_INCREMENT_FLAG:
        parts.append(" AUTO_INCREMENT")
    return "".join(parts)


def _restore_index(index: list[Any], name: str) -> str:
    if not index[_IDX_NOT_PRIMARY]:
        text = "PRIMARY KEY"
    elif not index[_IDX_NOT_UNIQUE]:
        text = "UNIQUE KEY " + _name(name)
    else:
        text = "KEY " + _name(name)
    tp = index[_IDX_TYPE]
    if tp != IndexType.BTREE:
        text += " USING " + tp.name
    cols = []
    for column in index[_IDX_COLUMNS]:
        part = _name(column.name)
        if column.length != mysql.UNSPECIFIED_LENGTH:
            part += f"({column.length})"
        cols.append(part)
    return text + " (" + ", ".join(cols) + ")"


@dataclass
class Table:
    """An encoded table schema."""

    value: Tuple

    def compare(self, other: Table) -> int:
        return self.value.compare(other.value)

    def join(self, other: Table) -> Table:
        joined = self.value.join(other.value)

        key_flags: dict[str, int] = {}
        for _, index in joined[_TBL_INDICES].mapping.items():
            if not index[_IDX_NOT_PRIMARY].unwrap():
                flag = mysql.PRI_KEY_FLAG
            elif not index[_IDX_NOT_UNIQUE].unwrap():
                flag = mysql.UNIQUE_KEY_FLAG
            else:
                flag = mysql.MULTIPLE_KEY_FLAG
            cols = index[_IDX_COLUMNS].unwrap()
            if len(cols) > 1:
                flag |= mysql.MULTIPLE_KEY_FLAG
            for col in cols:
                key_flags[col.name] = key_flags.get(col.name, 0) | flag

        for name, column in joined[_TBL_COLUMNS].mapping.items():
            ty = column[_COL_FIELD_TYPE]
            if name not in key_flags and ty.in_auto_increment():
                raise IncompatibleError.at_map_key(
                    name, IncompatibleError(ERR_MSG_AUTO_TYPE_WITHOUT_KEY)
                )
            ty.set_anti_key_flags(key_flags.get(name, 0))
        return Table(joined)

    def restore(self, table_name: str) -> str:
        """Render the schema as a CREATE TABLE statement."""
        table = self.value.unwrap()
        parts = ["CREATE TABLE ", _name(table_name), "("]
        columns = table[_TBL_COLUMNS]
        parts.append(", ".join(_restore_column(columns[k], k) for k in sorted(columns)))
        indices = table[_TBL_INDICES]
        for key in sorted(indices):
            parts.append(", " + _restore_index(indices[key], key))
        parts.append(") CHARSET " + table[_TBL_CHARSET])
        parts.append(" COLLATE " + table[_TBL_COLLATE])
        if table[_TBL_SHARD_ROW_ID_BITS] > 0:
            parts.append(f" SHARD_ROW_ID_BITS {table[_TBL_SHARD_ROW_ID_BITS]}")
        if table[_TBL_AUTO_RANDOM_BITS] > 0:
            parts.append(f"/* AUTO_RANDOM_BITS {table[_TBL_AUTO_RANDOM_BITS]} */")
        compression = table[_TBL_COMPRESSION]
        if isinstance(compression, str) and compression:
            parts.append(" COMPRESSION " + _string(compression))
        return "".join(parts)

    def __str__(self) -> str:
        return self.restore("tbl")


def encode(ti: TableInfo) -> Table:
    """Encode a table definition."""
    return Table(_encode_table(ti))


def decode_column_field_types(t: Table) -> dict[str, mysql.FieldType]:
    """Return the field type of every column of the encoded table."""
    columns = t.value.unwrap()[_TBL_COLUMNS]
    return {key: value[_COL_FIELD_TYPE] for key, value in columns.items()}