"""Filters built from schema/table lists and MySQL replication rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from dbtoolkit.tablefilter.filter import AllFilter, Filter, RuleFilter
from dbtoolkit.tablefilter.matchers import (
    Matcher,
    PatternError,
    Rule,
    StringMatcher,
    TrueMatcher,
    new_regexp_matcher,
)

_QUOTE_META_CHARS = frozenset("\\.+*?()|[]{}^$")

_LEGACY_WILDCARD_RE = re.compile(r"\\\*|\\\?|\\\[!|\\\[|\\\]")
_LEGACY_REPLACEMENTS = {
    "\\*": ".*",
    "\\?": ".",
    "\\[!": "[^",
    "\\[": "[",
    "\\]": "]",
}


@dataclass(order=True)
class Table:
    """A qualified table name."""

    schema: str = ""
    name: str = ""

    def __str__(self) -> str:
        if self.name:
            return f"`{self.schema}`.`{self.name}`"
        return f"`{self.schema}`"

    def clone(self) -> Table:
        return Table(schema=self.schema, name=self.name)


@dataclass
class MySQLReplicationRules:
    """Allow and block lists of schemas and tables, as in MySQL replication filters."""

    do_tables: list[Table] = field(default_factory=list)
    do_dbs: list[str] = field(default_factory=list)
    ignore_tables: list[Table] = field(default_factory=list)
    ignore_dbs: list[str] = field(default_factory=list)

    def to_lower(self) -> None:
        """Lower-case every entry in place."""
        for table in (*self.do_tables, *self.ignore_tables):
            table.name = table.name.lower()
            table.schema = table.schema.lower()
        self.ignore_dbs = [db.lower() for db in self.ignore_dbs]
        self.do_dbs = [db.lower() for db in self.do_dbs]


class SchemasFilter(Filter):
    """Accepts only the listed schemas, compared literally."""

    def __init__(self, schemas: Iterable[str]) -> None:
        self.schemas = frozenset(schemas)

    def match_table(self, schema: str, table: str) -> bool:
        return self.match_schema(schema)

    def match_schema(self, schema: str) -> bool:
        return schema in self.schemas

    def to_lower(self) -> Filter:
        return SchemasFilter(schema.lower() for schema in self.schemas)


class TablesFilter(Filter):
    """Accepts only the listed tables, compared literally."""

    def __init__(self, schemas: dict[str, set[str]]) -> None:
        self.schemas = schemas

    def match_table(self, schema: str, table: str) -> bool:
        return table in self.schemas.get(schema, ())

    def match_schema(self, schema: str) -> bool:
        return schema in self.schemas

    def to_lower(self) -> Filter:
        lowered: dict[str, set[str]] = {}
        for schema, tables in self.schemas.items():
            lowered.setdefault(schema.lower(), set()).update(t.lower() for t in tables)
        return TablesFilter(lowered)


@dataclass
class BothFilter(Filter):
    """Passes only what both filters pass."""

    a: Filter
    b: Filter

    def match_table(self, schema: str, table: str) -> bool:
        return self.a.match_table(schema, table) and self.b.match_table(schema, table)

    def match_schema(self, schema: str) -> bool:
        return self.a.match_schema(schema) and self.b.match_schema(schema)

    def to_lower(self) -> Filter:
        return BothFilter(self.a.to_lower(), self.b.to_lower())


def new_schemas_filter(*args: str) -> Filter:
    """A filter accepting only the given schemas."""
    return SchemasFilter(args)


def new_tables_filter(*args: Table) -> Filter:
    """A filter accepting only the given tables."""
    schemas: dict[str, set[str]] = {}
    for table in args:
        schemas.setdefault(table.schema, set()).add(table.name)
    return TablesFilter(schemas)


def _quote_meta(text: str) -> str:
    return "".join("\\" + c if c in _QUOTE_META_CHARS else c for c in text)


def matcher_from_legacy_pattern(pattern: str) -> Matcher:
    """Build a matcher from a literal, a ``~regexp`` or a wildcard pattern."""
    if not pattern:
        raise PatternError("pattern cannot be empty")
    if pattern[0] == "~":
        return new_regexp_matcher(pattern[1:])
    if not any(c in pattern for c in "?*["):
        return StringMatcher(pattern)
    body = _LEGACY_WILDCARD_RE.sub(
        lambda m: _LEGACY_REPLACEMENTS[m.group(0)], _quote_meta(pattern)
    )
    return new_regexp_matcher("(?s)^" + body + "$")


def _rules_for(
    entries: list[tuple[str, str | None]], positive: bool
) -> list[Rule]:
    rules = []
    for schema, table in entries:
        table_matcher = TrueMatcher() if table is None else matcher_from_legacy_pattern(table)
        rules.append(Rule(matcher_from_legacy_pattern(schema), table_matcher, positive))
    if not positive:
        rules.append(Rule(TrueMatcher(), TrueMatcher(), True))
    return rules


def parse_mysql_replication_rules(rules: MySQLReplicationRules | None) -> Filter:
    """Build a filter that a table must pass on both its schema and table rules."""
    if rules is None:
        return AllFilter()

    if rules.do_dbs:
        schema_rules = _rules_for([(db, None) for db in rules.do_dbs], True)
    else:
        schema_rules = _rules_for([(db, None) for db in rules.ignore_dbs], False)

    if rules.do_tables:
        table_rules = _rules_for([(t.schema, t.name) for t in rules.do_tables], True)
    else:
        table_rules = _rules_for([(t.schema, t.name) for t in rules.ignore_tables], False)

    return BothFilter(RuleFilter(schema_rules), RuleFilter(table_rules))