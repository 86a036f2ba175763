"""MySQL column type codes, flags and a field type description."""

from __future__ import annotations

from dataclasses import dataclass, field

TYPE_DECIMAL = 0
TYPE_TINY = 1
TYPE_SHORT = 2
TYPE_LONG = 3
TYPE_FLOAT = 4
TYPE_DOUBLE = 5
TYPE_NULL = 6
TYPE_TIMESTAMP = 7
TYPE_LONGLONG = 8
TYPE_INT24 = 9
TYPE_DATE = 10
TYPE_DURATION = 11
TYPE_DATETIME = 12
TYPE_YEAR = 13
TYPE_NEW_DATE = 14
TYPE_VARCHAR = 15
TYPE_BIT = 16
TYPE_JSON = 0xF5
TYPE_NEW_DECIMAL = 0xF6
TYPE_ENUM = 0xF7
TYPE_SET = 0xF8
TYPE_TINY_BLOB = 0xF9
TYPE_MEDIUM_BLOB = 0xFA
TYPE_LONG_BLOB = 0xFB
TYPE_BLOB = 0xFC
TYPE_VAR_STRING = 0xFD
TYPE_STRING = 0xFE
TYPE_GEOMETRY = 0xFF

NOT_NULL_FLAG = 1
PRI_KEY_FLAG = 1 << 1
UNIQUE_KEY_FLAG = 1 << 2
MULTIPLE_KEY_FLAG = 1 << 3
BLOB_FLAG = 1 << 4
UNSIGNED_FLAG = 1 << 5
ZEROFILL_FLAG = 1 << 6
BINARY_FLAG = 1 << 7
ENUM_FLAG = 1 << 8
AUTO_INCREMENT_FLAG = 1 << 9
TIMESTAMP_FLAG = 1 << 10
SET_FLAG = 1 << 11
NO_DEFAULT_VALUE_FLAG = 1 << 12
ON_UPDATE_NOW_FLAG = 1 << 13

UNSPECIFIED_LENGTH = -1

BINARY_CHARSET = "binary"
UTF8MB4_CHARSET = "utf8mb4"
UTF8MB4_DEFAULT_COLLATION = "utf8mb4_bin"

_INTEGER_TYPES = frozenset({TYPE_TINY, TYPE_SHORT, TYPE_INT24, TYPE_LONG, TYPE_LONGLONG})
_BLOB_TYPES = frozenset({TYPE_TINY_BLOB, TYPE_MEDIUM_BLOB, TYPE_BLOB, TYPE_LONG_BLOB})
_FRACTIONAL_TYPES = frozenset({TYPE_DECIMAL, TYPE_NEW_DECIMAL, TYPE_FLOAT, TYPE_DOUBLE})
_TIME_TYPES = frozenset({TYPE_DATETIME, TYPE_TIMESTAMP, TYPE_DURATION})
_STRING_TYPES = frozenset({TYPE_VARCHAR, TYPE_VAR_STRING, TYPE_STRING}) | _BLOB_TYPES
_LENGTH_TYPES = _INTEGER_TYPES | frozenset({TYPE_BIT, TYPE_YEAR, TYPE_VARCHAR, TYPE_VAR_STRING, TYPE_STRING})

_TYPE_NAMES = {
    TYPE_DECIMAL: "DECIMAL",
    TYPE_TINY: "TINYINT",
    TYPE_SHORT: "SMALLINT",
    TYPE_LONG: "INT",
    TYPE_FLOAT: "FLOAT",
    TYPE_DOUBLE: "DOUBLE",
    TYPE_NULL: "NULL",
    TYPE_TIMESTAMP: "TIMESTAMP",
    TYPE_LONGLONG: "BIGINT",
    TYPE_INT24: "MEDIUMINT",
    TYPE_DATE: "DATE",
    TYPE_DURATION: "TIME",
    TYPE_DATETIME: "DATETIME",
    TYPE_YEAR: "YEAR",
    TYPE_NEW_DATE: "DATE",
    TYPE_VARCHAR: "VARCHAR",
    TYPE_BIT: "BIT",
    TYPE_JSON: "JSON",
    TYPE_NEW_DECIMAL: "DECIMAL",
    TYPE_ENUM: "ENUM",
    TYPE_SET: "SET",
    TYPE_TINY_BLOB: "TINYTEXT",
    TYPE_MEDIUM_BLOB: "MEDIUMTEXT",
    TYPE_LONG_BLOB: "LONGTEXT",
    TYPE_BLOB: "TEXT",
    TYPE_VAR_STRING: "VARCHAR",
    TYPE_STRING: "CHAR",
    TYPE_GEOMETRY: "GEOMETRY",
}

_BINARY_TYPE_NAMES = {
    TYPE_VARCHAR: "VARBINARY",
    TYPE_VAR_STRING: "VARBINARY",
    TYPE_STRING: "BINARY",
    TYPE_TINY_BLOB: "TINYBLOB",
    TYPE_MEDIUM_BLOB: "MEDIUMBLOB",
    TYPE_LONG_BLOB: "LONGBLOB",
    TYPE_BLOB: "BLOB",
}


def _quote_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


@dataclass
class FieldType:
    """The type of a column: type code, flags, length, scale and charset."""

    tp: int
    flag: int = 0
    flen: int = UNSPECIFIED_LENGTH
    decimal: int = UNSPECIFIED_LENGTH
    charset: str = ""
    collate: str = ""
    elems: list[str] = field(default_factory=list)

    def to_sql(self) -> str:
        """Render the type as it would appear in a column definition."""
        is_binary = self.charset == BINARY_CHARSET
        if is_binary and self.tp in _BINARY_TYPE_NAMES:
            text = _BINARY_TYPE_NAMES[self.tp]
        else:
            text = _TYPE_NAMES.get(self.tp, "UNKNOWN")

        if self.tp in (TYPE_ENUM, TYPE_SET):
            text += "(" + ",".join(_quote_string(e) for e in self.elems) + ")"
        elif self.tp in _FRACTIONAL_TYPES:
            if self.flen != UNSPECIFIED_LENGTH:
                if self.decimal != UNSPECIFIED_LENGTH:
                    text += f"({self.flen},{self.decimal})"
                else:
                    text += f"({self.flen})"
        elif self.tp in _TIME_TYPES:
            if self.decimal > 0:
                text += f"({self.decimal})"
        elif self.tp in _LENGTH_TYPES and self.flen != UNSPECIFIED_LENGTH:
            text += f"({self.flen})"

        if self.tp in _INTEGER_TYPES or self.tp in _FRACTIONAL_TYPES:
            if self.flag & UNSIGNED_FLAG:
                text += " UNSIGNED"
            if self.flag & ZEROFILL_FLAG:
                text += " ZEROFILL"

        if self.tp in _STRING_TYPES or self.tp in (TYPE_ENUM, TYPE_SET):
            if self.charset and not is_binary:
                text += f" CHARSET {self.charset}"
                if self.collate:
                    text += f" COLLATE {self.collate}"
        return text


def is_integer_type(tp: int) -> bool:
    """Whether the type code is one of the integer types."""
    return tp in _INTEGER_TYPES


def is_blob_type(tp: int) -> bool:
    """Whether the type code is one of the blob/text types."""
    return tp in _BLOB_TYPES


def compare_integer_types(a: int, b: int) -> int:
    """Order integer types: TINY < SHORT < INT24 < LONG < LONGLONG."""
    if a == b:
        return 0
    if a == TYPE_INT24:
        return 1 if b <= TYPE_SHORT else -1
    if b == TYPE_INT24:
        return -1 if a <= TYPE_SHORT else 1
    return -1 if a < b else 1


def compare_blob_types(a: int, b: int) -> int:
    """Order blob types: TINY_BLOB < BLOB < MEDIUM_BLOB < LONG_BLOB."""
    if a == b:
        return 0
    if a == TYPE_BLOB:
        return 1 if b == TYPE_TINY_BLOB else -1
    if b == TYPE_BLOB:
        return -1 if a == TYPE_TINY_BLOB else 1
    return -1 if a < b else 1