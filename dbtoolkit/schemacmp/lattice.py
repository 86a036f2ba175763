"""Join-semilattices used to compare and merge table schemas."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator

from dbtoolkit.schemacmp import mysql


def _go_quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


class IncompatibleError(Exception):
    """Two lattice values are not ordered, or have no join."""

    @classmethod
    def type_mismatch(cls, a: object, b: object) -> IncompatibleError:
        return cls(f"type mismatch ({type(a).__name__} vs {type(b).__name__})")

    @classmethod
    def tuple_length_mismatch(cls, a: int, b: int) -> IncompatibleError:
        return cls(f"tuple length mismatch ({a} vs {b})")

    @classmethod
    def distinct_singletons(cls, a: object, b: object) -> IncompatibleError:
        return cls(f"distinct singletons ({a} vs {b})")

    @classmethod
    def incompatible_type(cls, a: object, b: object) -> IncompatibleError:
        return cls(f"incompatible mysql type ({a} vs {b})")

    @classmethod
    def at_tuple_index(cls, index: int, inner: Exception) -> IncompatibleError:
        return cls(f"at tuple index {index}: {inner}")

    @classmethod
    def at_map_key(cls, key: str, inner: Exception) -> IncompatibleError:
        return cls(f"at map key {_go_quote(key)}: {inner}")


class Lattice(ABC):
    """A value of a join-semilattice."""

    @abstractmethod
    def unwrap(self) -> Any:
        """Return the plain underlying value, recursively."""

    @abstractmethod
    def compare(self, other: Lattice) -> int:
        """Return -1, 0 or 1; raise IncompatibleError if unordered."""

    @abstractmethod
    def join(self, other: Lattice) -> Lattice:
        """Return the least upper bound; raise IncompatibleError if none."""

    def _check_kind(self, other: Lattice) -> None:
        if type(other) is not type(self):
            raise IncompatibleError.type_mismatch(self, other)


@dataclass(frozen=True)
class Bool(Lattice):
    """A boolean where False < True."""

    value: bool

    def unwrap(self) -> bool:
        return self.value

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        if self.value == other.value:
            return 0
        return 1 if self.value else -1

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        return Bool(self.value or other.value)


@dataclass(frozen=True)
class Singleton(Lattice):
    """An unordered value; distinct values (including by type) are incompatible."""

    value: Any

    def unwrap(self) -> Any:
        return self.value

    def _same(self, other: Singleton) -> bool:
        return type(self.value) is type(other.value) and self.value == other.value

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        if not self._same(other):
            raise IncompatibleError.distinct_singletons(self.value, other.value)
        return 0

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        if not self._same(other):
            raise IncompatibleError.distinct_singletons(self.value, other.value)
        return self


@dataclass(frozen=True)
class EqualitySingleton(Lattice):
    """An unordered value whose equality is the value's own ``==``."""

    value: Any

    def unwrap(self) -> Any:
        return self.value

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        if not self.value == other.value:
            raise IncompatibleError.distinct_singletons(self.value, other.value)
        return 0

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        if not self.value == other.value:
            raise IncompatibleError.distinct_singletons(self.value, other.value)
        return self


@dataclass(frozen=True)
class BitSet(Lattice):
    """A set of bits ordered by inclusion."""

    value: int

    def unwrap(self) -> int:
        return self.value

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        a, b = self.value, other.value
        if a == b:
            return 0
        if a & ~b == 0:
            return -1
        if b & ~a == 0:
            return 1
        raise IncompatibleError(f"non-inclusive bit sets ({hex(a)} vs {hex(b)})")

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        return BitSet(self.value | other.value)


@dataclass(frozen=True)
class _Ordered(Lattice):
    value: int

    def unwrap(self) -> int:
        return self.value

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        return (self.value > other.value) - (self.value < other.value)

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        return self if self.value >= other.value else other


class Byte(_Ordered):
    """A byte with the natural order."""


class Int(_Ordered):
    """An int with the natural order."""


class Int64(_Ordered):
    """A 64-bit int with the natural order."""


class Uint(_Ordered):
    """An unsigned int with the natural order."""


@dataclass(frozen=True)
class FieldTp(Lattice):
    """A MySQL column type code; integer and blob types widen, others must match."""

    value: int

    def unwrap(self) -> int:
        return self.value

    def _order(self, other: FieldTp) -> int:
        a, b = self.value, other.value
        if a == b:
            return 0
        if mysql.is_integer_type(a) and mysql.is_integer_type(b):
            return mysql.compare_integer_types(a, b)
        if mysql.is_blob_type(a) and mysql.is_blob_type(b):
            return mysql.compare_blob_types(a, b)
        raise IncompatibleError.incompatible_type(a, b)

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        return self._order(other)

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        return other if self._order(other) < 0 else self


def combine_compare_result(x: int, y: int) -> int:
    """Combine two comparison results; raise if they contradict."""
    if x == y or y == 0:
        return x
    if x == 0:
        return y
    raise IncompatibleError(f"combining contradicting orders ({x} && {y})")


@dataclass
class Tuple(Lattice):
    """A sequence of lattices ordered component-wise."""

    items: list[Lattice] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.items = list(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Lattice]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Lattice:
        return self.items[index]

    def __setitem__(self, index: int, value: Lattice) -> None:
        self.items[index] = value

    def unwrap(self) -> list[Any]:
        return [item.unwrap() for item in self.items]

    def _check_length(self, other: Tuple) -> None:
        if len(self.items) != len(other.items):
            raise IncompatibleError.tuple_length_mismatch(len(self.items), len(other.items))

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        self._check_length(other)
        result = 0
        for index, (left, right) in enumerate(zip(self.items, other.items)):
            try:
                result = combine_compare_result(result, left.compare(right))
            except IncompatibleError as err:
                raise IncompatibleError.at_tuple_index(index, err) from err
        return result

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        self._check_length(other)
        joined = []
        for index, (left, right) in enumerate(zip(self.items, other.items)):
            try:
                joined.append(left.join(right))
            except IncompatibleError as err:
                raise IncompatibleError.at_tuple_index(index, err) from err
        return Tuple(joined)


@dataclass(frozen=True)
class Maybe(Lattice):
    """Adds an absent value (None) below every value of the inner lattice."""

    inner: Lattice | None = None

    def unwrap(self) -> Any:
        return None if self.inner is None else self.inner.unwrap()

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        if self.inner is None and other.inner is None:
            return 0
        if self.inner is None:
            return -1
        if other.inner is None:
            return 1
        return self.inner.compare(other.inner)

    def join(self, other: Lattice) -> Lattice:
        self._check_kind(other)
        if self.inner is None:
            return other
        if other.inner is None:
            return self
        return Maybe(self.inner.join(other.inner))


def maybe_singleton_interface(value: Any) -> Maybe:
    """Wrap a value as ``Maybe(Singleton(value))``, or ``Maybe(None)`` for None."""
    return Maybe(None) if value is None else Maybe(Singleton(value))


def maybe_singleton_string(s: str) -> Maybe:
    """Wrap a string as ``Maybe(Singleton(s))``, or ``Maybe(None)`` if empty."""
    return Maybe(Singleton(s)) if s else Maybe(None)


@dataclass
class StringList(Lattice):
    """A list of strings where a <= b iff a is a prefix of b."""

    items: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.items = list(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> str:
        return self.items[index]

    def unwrap(self) -> list[str]:
        return list(self.items)

    def compare(self, other: Lattice) -> int:
        self._check_kind(other)
        for index, (a, b) in enumerate(zip(self.items, other.items)):
            if a != b:
                raise IncompatibleError(
                    f"at string list index {index}: distinct values ({_go_quote(a)} vs {_go_quote(b)})"
                )
        return (len(self.items) > len(other.items)) - (len(self.items) < len(other.items))

    def join(self, other: Lattice) -> Lattice:
        return other if self.compare(other) <= 0 else self


class LatticeMap(ABC):
    """A string-keyed map of lattices, with rules for missing entries."""

    @abstractmethod
    def new(self) -> LatticeMap:
        """Create an empty map of the same kind."""

    @abstractmethod
    def insert(self, key: str, value: Lattice) -> None:
        """Store a value under the key."""

    @abstractmethod
    def get(self, key: str) -> Lattice | None:
        """Return the value under the key, or None."""

    @abstractmethod
    def items(self) -> Iterator[tuple[str, Lattice]]:
        """Yield the key-value pairs."""

    @abstractmethod
    def compare_with_nil(self, value: Lattice) -> int:
        """Compare a present value with a missing entry."""

    @abstractmethod
    def join_with_nil(self, value: Lattice) -> Lattice | None:
        """Join a present value with a missing entry; None drops the entry."""

    @abstractmethod
    def should_delete_incompatible_join(self) -> bool:
        """Whether incompatible entries are dropped instead of failing the join."""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return dict(self.items()) == dict(other.items())

    __hash__ = None  # type: ignore[assignment]


@dataclass
class Map(Lattice):
    """A LatticeMap seen as a lattice, compared and joined key by key."""

    mapping: LatticeMap

    def unwrap(self) -> dict[str, Any]:
        return {key: value.unwrap() for key, value in self.mapping.items()}

    def _pairs(self, other: Lattice) -> Iterator[tuple[str, Lattice | None, Lattice | None]]:
        self._check_kind(other)
        visited = set()
        for key, av in list(self.mapping.items()):
            visited.add(key)
            yield key, av, other.mapping.get(key)
        for key, bv in list(other.mapping.items()):
            if key not in visited:
                yield key, None, bv

    def compare(self, other: Lattice) -> int:
        result = 0
        for key, av, bv in self._pairs(other):
            try:
                if av is not None and bv is not None:
                    res = av.compare(bv)
                elif av is not None:
                    res = self.mapping.compare_with_nil(av)
                else:
                    res = -self.mapping.compare_with_nil(bv)
                result = combine_compare_result(result, res)
            except IncompatibleError as err:
                raise IncompatibleError.at_map_key(key, err) from err
        return result

    def join(self, other: Lattice) -> Lattice:
        result = self.mapping.new()
        for key, av, bv in self._pairs(other):
            try:
                if av is not None and bv is not None:
                    joined = av.join(bv)
                elif av is not None:
                    joined = self.mapping.join_with_nil(av)
                else:
                    joined = self.mapping.join_with_nil(bv)
            except IncompatibleError as err:
                if not self.mapping.should_delete_incompatible_join():
                    raise IncompatibleError.at_map_key(key, err) from err
                continue
            if joined is not None:
                result.insert(key, joined)
        return Map(result)