"""Filters deciding which schemas and tables are processed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from dbtoolkit.tablefilter.matchers import Rule
from dbtoolkit.tablefilter.parser import RuleParser


class Filter(ABC):
    """Decides whether a schema or table should be processed."""

    @abstractmethod
    def match_table(self, schema: str, table: str) -> bool:
        """Whether the table passes the filter."""

    @abstractmethod
    def match_schema(self, schema: str) -> bool:
        """Whether the schema passes the filter."""

    @abstractmethod
    def to_lower(self) -> Filter:
        """A filter comparing against lower-cased names."""


class RuleFilter(Filter):
    """A list of rules; the first rule that matches decides."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self.rules = list(rules)

    def __repr__(self) -> str:
        return f"RuleFilter({self.rules!r})"

    def match_table(self, schema: str, table: str) -> bool:
        for rule in self.rules:
            if rule.schema.match_string(schema) and rule.table.match_string(table):
                return rule.positive
        return False

    def match_schema(self, schema: str) -> bool:
        for rule in self.rules:
            if rule.schema.match_string(schema) and (
                rule.positive or rule.table.match_all_strings()
            ):
                return rule.positive
        return False

    def to_lower(self) -> Filter:
        return RuleFilter(
            Rule(rule.schema.to_lower(), rule.table.to_lower(), rule.positive)
            for rule in self.rules
        )


class LoweredFilter(Filter):
    """Lower-cases names before passing them to the wrapped filter."""

    def __init__(self, wrapped: Filter) -> None:
        self.wrapped = wrapped

    def match_table(self, schema: str, table: str) -> bool:
        return self.wrapped.match_table(schema.lower(), table.lower())

    def match_schema(self, schema: str) -> bool:
        return self.wrapped.match_schema(schema.lower())

    def to_lower(self) -> Filter:
        return self


class AllFilter(Filter):
    """Matches everything."""

    def match_table(self, schema: str, table: str) -> bool:
        return True

    def match_schema(self, schema: str) -> bool:
        return True

    def to_lower(self) -> Filter:
        return self


def parse(args: Iterable[str] | None) -> Filter:
    """Parse a case-sensitive filter; later rules take precedence."""
    parser = RuleParser()
    for arg in args or ():
        parser.parse(arg, True)
    return RuleFilter(reversed(parser.rules))


def case_insensitive(f: Filter) -> Filter:
    """A case-insensitive version of the filter."""
    return LoweredFilter(f.to_lower())


def match_all() -> Filter:
    """A filter which matches everything."""
    return AllFilter()