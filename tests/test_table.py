import pytest

from dbtoolkit.schemacmp import mysql
from dbtoolkit.schemacmp.lattice import IncompatibleError
from dbtoolkit.schemacmp.table import (
    ColumnInfo,
    IndexColumnInfo,
    IndexInfo,
    IndexType,
    TableInfo,
    decode_column_field_types,
    encode,
)

B = mysql.BINARY_CHARSET
NN = mysql.NOT_NULL_FLAG | mysql.NO_DEFAULT_VALUE_FLAG


def int_col(name, flag=0, default=None, tp=mysql.TYPE_LONG, flen=11):
    return ColumnInfo(name, mysql.FieldType(tp, flag, flen, 0, B, B), default)


def bigint_col(name, flag=0):
    return int_col(name, flag, tp=mysql.TYPE_LONGLONG, flen=20)


def float_col(name, flag=0, default=None):
    return ColumnInfo(name, mysql.FieldType(mysql.TYPE_FLOAT, flag, -1, -1, B, B), default)


def varchar_col(name, n=10):
    return ColumnInfo(
        name,
        mysql.FieldType(mysql.TYPE_VARCHAR, 0, n, -1, mysql.UTF8MB4_CHARSET,
                        mysql.UTF8MB4_DEFAULT_COLLATION),
    )


def enum_col(name, flag=0, default=None):
    return ColumnInfo(
        name,
        mysql.FieldType(mysql.TYPE_ENUM, flag, -1, 0, mysql.UTF8MB4_CHARSET,
                        mysql.UTF8MB4_DEFAULT_COLLATION, ["abc", "def"]),
        default,
    )


def key(name, *cols):
    return IndexInfo(name, [IndexColumnInfo(c) for c in cols])


def check(a, b, cmp=None, cmp_err=None, join=None, join_err=None):
    ta, tb = encode(a), encode(b)
    for info, t in ((a, ta), (b, tb)):
        types = decode_column_field_types(t)
        assert types == {c.name: c.field_type for c in info.columns}
    if cmp_err:
        with pytest.raises(IncompatibleError, match=cmp_err):
            ta.compare(tb)
        with pytest.raises(IncompatibleError, match=cmp_err):
            tb.compare(ta)
    else:
        assert ta.compare(tb) == cmp
        assert tb.compare(ta) == -cmp
    if join_err:
        with pytest.raises(IncompatibleError, match=join_err):
            ta.join(tb)
        with pytest.raises(IncompatibleError, match=join_err):
            tb.join(ta)
    else:
        j = encode(join)
        joined = ta.join(tb)
        assert joined == j
        assert str(joined) == str(j)
        joined = tb.join(ta)
        assert joined == j
        assert joined.compare(ta) >= 0
        assert joined.compare(tb) >= 0


def test_add_column():
    check(
        TableInfo([int_col("col1")]),
        TableInfo([int_col("col1"), int_col("new_col1")]),
        cmp=-1,
        join=TableInfo([int_col("col1"), int_col("new_col1")]),
    )


def test_same_columns_unordered():
    check(
        TableInfo([int_col("col1"), int_col("new_col1")]),
        TableInfo([int_col("new_col1"), int_col("col1")]),
        cmp=0,
        join=TableInfo([int_col("col1"), int_col("new_col1")]),
    )


def test_incompatible_column_type():
    check(
        TableInfo([int_col("a"), varchar_col("b"), int_col("new_col1"), int_col("new_col2")]),
        TableInfo([int_col("a"), varchar_col("b"), float_col("new_col1")]),
        cmp_err=r'.*"new_col1".*incompatible mysql type.*',
        join_err=r'.*"new_col1".*incompatible mysql type.*',
    )


def test_contradicting_columns():
    check(
        TableInfo([int_col("a"), varchar_col("b"), int_col("new_col1")]),
        TableInfo([int_col("a"), varchar_col("b"), int_col("new_col2")]),
        cmp_err=".*combining contradicting orders.*",
        join=TableInfo([int_col("a"), varchar_col("b"), int_col("new_col1"), int_col("new_col2")]),
    )


def test_missing_not_null_column():
    check(
        TableInfo([int_col("a"), varchar_col("b"), float_col("c", NN)]),
        TableInfo([int_col("a"), varchar_col("b")]),
        cmp_err='.*"c": column with no default value cannot be missing',
        join=TableInfo([int_col("a"), varchar_col("b"),
                        float_col("c", mysql.NOT_NULL_FLAG, "0")]),
    )


def test_distinct_defaults():
    check(
        TableInfo([int_col("a"), int_col("col1", default="0")]),
        TableInfo([int_col("a"), int_col("col1", default="-1")]),
        cmp_err=r'.*"col1".*distinct singletons.*',
        join_err=r'.*"col1".*distinct singletons.*',
    )


def test_widen_integer():
    check(
        TableInfo([int_col("a"), varchar_col("b")]),
        TableInfo([bigint_col("a"), varchar_col("b")]),
        cmp=-1,
        join=TableInfo([bigint_col("a"), varchar_col("b")]),
    )


def test_implicit_primary_key_dropped():
    check(
        TableInfo([int_col("a"), varchar_col("b")]),
        TableInfo([int_col("a", mysql.PRI_KEY_FLAG | NN), varchar_col("b")]),
        cmp=1,
        join=TableInfo([int_col("a"), varchar_col("b")]),
    )


def test_unique_keys_dropped():
    a_idx = [
        IndexInfo("idx_a", [IndexColumnInfo("a")], unique=True),
        IndexInfo("idx_b", [IndexColumnInfo("b")], unique=True),
        IndexInfo("idx_ab", [IndexColumnInfo("a"), IndexColumnInfo("b")], unique=True),
    ]
    multi = mysql.UNIQUE_KEY_FLAG | mysql.MULTIPLE_KEY_FLAG
    a_cols = [int_col("a", multi), varchar_col("b")]
    a_cols[1].field_type.flag = multi
    b_cols = [int_col("a", mysql.UNIQUE_KEY_FLAG), varchar_col("b")]
    b_cols[1].field_type.flag = mysql.UNIQUE_KEY_FLAG
    j_cols = [int_col("a", mysql.UNIQUE_KEY_FLAG), varchar_col("b")]
    j_cols[1].field_type.flag = mysql.UNIQUE_KEY_FLAG
    check(
        TableInfo(a_cols, a_idx),
        TableInfo(b_cols, a_idx[:2]),
        cmp=-1,
        join=TableInfo(j_cols, a_idx[:2]),
    )


def test_different_index_components():
    mk = mysql.MULTIPLE_KEY_FLAG
    check(
        TableInfo([int_col("a", mk), int_col("b")], [key("i", "a")]),
        TableInfo([int_col("a"), int_col("b", mk)], [key("i", "b")]),
        cmp_err=".*combining contradicting orders.*",
        join=TableInfo([int_col("a"), int_col("b")]),
    )


def test_cannot_drop_key_of_auto_increment():
    auto = mysql.AUTO_INCREMENT_FLAG | mysql.MULTIPLE_KEY_FLAG | mysql.NOT_NULL_FLAG
    mk = mysql.MULTIPLE_KEY_FLAG
    check(
        TableInfo([int_col("a", auto), int_col("b")], [key("i", "a")]),
        TableInfo([int_col("a", auto), int_col("b", mk)], [key("i", "a", "b")]),
        cmp_err=".*distinct singletons.*",
        join_err='.*"a".*auto type but not defined as a key',
    )


def test_not_null_special_types():
    check(
        TableInfo([enum_col("e1", NN)]),
        TableInfo([int_col("a2", NN)]),
        cmp_err=".*column with no default value cannot be missing",
        join=TableInfo([enum_col("e1", mysql.NOT_NULL_FLAG, "abc"),
                        int_col("a2", mysql.NOT_NULL_FLAG, "0")]),
    )


def test_restore_with_unique_key():
    info = TableInfo(
        [int_col("a", mysql.UNIQUE_KEY_FLAG), varchar_col("b")],
        [IndexInfo("idx_a", [IndexColumnInfo("a")], unique=True)],
    )
    assert str(encode(info)) == (
        "CREATE TABLE `tbl`(`a` INT(11), `b` VARCHAR(10) CHARSET utf8mb4 COLLATE utf8mb4_bin, "
        "UNIQUE KEY `idx_a` (`a`)) CHARSET utf8mb4 COLLATE utf8mb4_bin"
    )


def test_restore_options():
    gen = ColumnInfo("g", mysql.FieldType(mysql.TYPE_LONG, 0, 11, 0, B, B),
                     generated_expr_string="a + 1", generated_stored=True)
    info = TableInfo(
        [int_col("a", mysql.PRI_KEY_FLAG | NN), gen],
        [IndexInfo("k", [IndexColumnInfo("g", 3)], tp=IndexType.HASH)],
        shard_row_id_bits=4,
        compression="lz4",
    )
    assert encode(info).restore("t") == (
        "CREATE TABLE `t`(`a` INT(11) NOT NULL, "
        "`g` INT(11) GENERATED ALWAYS AS (a + 1) STORED, "
        "KEY `k` USING HASH (`g`(3)), PRIMARY KEY (`a`)) "
        "CHARSET utf8mb4 COLLATE utf8mb4_bin SHARD_ROW_ID_BITS 4 COMPRESSION 'lz4'"
    )