# dbtoolkit

Utilities for working with MySQL-compatible table schemas:

- **`dbtoolkit.schemacmp`**: encodes column types and table definitions as
  values of a join-semilattice, so two schemas can be compared
  (`Table.compare`) and merged into the smallest schema compatible with both
  (`Table.join`). An incompatible pair raises `IncompatibleError`.
- **`dbtoolkit.tablefilter`**: parses table filter rules such as `db*.*`,
  `!*.cfg*` or `/^foo/.*` and checks schemas and tables against them.
  MySQL replication rules (`do_dbs`, `ignore_tables`, ...) are supported too.
- **`dbtoolkit.importer`**: random and unique value generators for filling
  test tables: integers, strings, dates, times, timestamps and years.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

## Table filters

```python
from dbtoolkit.tablefilter.filter import parse, case_insensitive

f = parse(["*.*", "!foo1.*"])
f.match_table("foo", "bar")    # True
f.match_table("foo1", "bar")   # False

ci = case_insensitive(parse(["BAR.*"]))
ci.match_schema("bar")         # True
```

Each rule is `schema.table`. A leading `!` rejects what the rule matches, a
line starting with `#` is a comment, blank lines are ignored, and `@path`
reads more rules from a file (a file may not import another file). When
several rules match, the one given last decides; a table that no rule matches
is rejected.

Patterns can be:

- literal names, made of letters, digits, `$`, `_` and non-ASCII characters;
  other characters can be escaped with `\`;
- wildcards: `*`, `?`, `[a-z]`, `[!a-z]`;
- quoted identifiers: `"some ""quoted"""` or `` `back``quoted` ``;
- regular expressions between slashes: `/^foo/`.

A malformed rule raises `FilterParseError`, whose message names the file and
line (`<cmdline>` for rules given directly).

`match_all()` returns a filter that accepts everything, and
`case_insensitive(f)` wraps any filter so that names are compared in lower case.

### Replication rules

```python
from dbtoolkit.tablefilter.compat import (
    MySQLReplicationRules,
    Table,
    parse_mysql_replication_rules,
)

rules = MySQLReplicationRules(do_dbs=["foo", "bar"], do_tables=[Table("*", "a")])
f = parse_mysql_replication_rules(rules)
f.match_table("foo", "a")      # True
f.match_table("baz", "a")      # False
```

Entries are literal names, wildcards (`*`, `?`, `[...]`, `[!...]`) or, with a
leading `~`, regular expressions. A table must pass both the schema rules and
the table rules. Passing `None` gives a filter that accepts everything. An
empty or invalid pattern raises `PatternError`.

`new_schemas_filter(*schemas)` and `new_tables_filter(*tables)` build filters
that accept exactly the listed schemas or tables, compared literally.

## Schema comparison

Table definitions are described with `TableInfo`, `ColumnInfo`, `IndexInfo`
and `IndexColumnInfo` from `dbtoolkit.schemacmp.table`; column types with
`FieldType` and the type and flag constants in `dbtoolkit.schemacmp.mysql`.

```python
from dbtoolkit.schemacmp import mysql
from dbtoolkit.schemacmp.table import ColumnInfo, TableInfo, encode

int_type = mysql.FieldType(tp=mysql.TYPE_LONG, flen=11, charset="binary", collate="binary")

a = encode(TableInfo(columns=[ColumnInfo("col1", int_type)]))
b = encode(TableInfo(columns=[ColumnInfo("col1", int_type), ColumnInfo("new_col1", int_type)]))

a.compare(b)       # -1: b is a wider schema than a
joined = a.join(b)
print(joined)      # CREATE TABLE `tbl`(`col1` INT(11), `new_col1` INT(11)) CHARSET utf8mb4 COLLATE utf8mb4_bin
```

`Table.restore(name)` renders the schema as a `CREATE TABLE` statement, and
`decode_column_field_types(table)` returns the `FieldType` of every column.
The lattice building blocks (`Bool`, `Singleton`, `Tuple`, `Maybe`,
`StringList`, `Map`, ...) live in `dbtoolkit.schemacmp.lattice`, and the
column type lattice `Type` in `dbtoolkit.schemacmp.fieldtype`.

## Data generators

```python
from dbtoolkit.importer.datum import Datum
from dbtoolkit.importer.rand import rand_date, rand_string

d = Datum()
d.set_init_int64_value(1, 1, 10)
[d.uniq_int64() for _ in range(3)]   # [1, 2, 3]

rand_date("2020-01-01", "2020-12-31")
rand_string(8)
```

`Datum` is thread-safe and also yields unique strings, times, dates,
timestamps and years. The `rand_*` functions in `dbtoolkit.importer.rand`
produce random integers, floats, booleans, strings, durations and
date/time strings, optionally within given bounds.

## What it does not do

- It does not parse SQL: table definitions for `schemacmp` are built from the
  `TableInfo` classes, not read from `CREATE TABLE` statements.
- It does not connect to a database. The generators produce values; writing
  rows into a table is left to the caller.
- It has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```