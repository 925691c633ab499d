import itertools

import pytest

from logquery.ast import ColumnRef, CompareOp, Comparison, Literal, Query, SelectItem, Wildcard
from logquery.errors import EvalError
from logquery.evaluator import Evaluator
from logquery.executor import QueryExecutor, execute
from logquery.parser import parse_query
from logquery.row import Row
from logquery.values import MISSING, NumberValue


def run(sql, rows, columns=("a", "b"), executor=None):
    ex = executor or QueryExecutor()
    return [r.as_dict() for r in ex.execute(parse_query(sql), rows, list(columns))]


def ab_rows(pairs):
    return [Row.from_values({"a": str(a), "b": str(b)}) for a, b in pairs]


def test_stable_multi_key_sort():
    rows = ab_rows([(1, 2), (1, 1), (2, 0)])
    assert run("SELECT a, b ORDER BY a, b DESC", rows) == [
        {"a": "1", "b": "2"},
        {"a": "1", "b": "1"},
        {"a": "2", "b": "0"},
    ]


def test_multi_key_sort_reorders():
    rows = ab_rows([(2, 0), (1, 1), (1, 2)])
    assert run("SELECT a, b ORDER BY a ASC, b DESC", rows) == [
        {"a": "1", "b": "2"},
        {"a": "1", "b": "1"},
        {"a": "2", "b": "0"},
    ]


def test_sort_ties_keep_filtered_order():
    rows = [Row.from_values({"k": "x", "id": str(i)}) for i in range(6)]
    out = run("SELECT id ORDER BY k DESC", rows, columns=("k", "id"))
    assert [r["id"] for r in out] == ["0", "1", "2", "3", "4", "5"]


def test_sort_is_numeric_for_numeric_text():
    rows = ab_rows([(10, 0), (9, 0), (100, 0)])
    assert [r["a"] for r in run("SELECT a ORDER BY a", rows)] == ["9", "10", "100"]


def test_sort_of_mixed_numeric_and_text_is_a_total_order():
    for perm in itertools.permutations(["9", "10", "1a"]):
        rows = [Row.from_values({"a": a}) for a in perm]
        assert [r["a"] for r in run("SELECT a ORDER BY a", rows)] == ["9", "10", "1a"]


def test_missing_sorts_first_ascending_and_last_descending():
    rows = [Row.from_values({"a": "2"}), Row.from_values({}), Row.from_values({"a": "1"})]
    assert [r["a"] for r in run("SELECT a ORDER BY a", rows)] == [None, "1", "2"]
    assert [r["a"] for r in run("SELECT a ORDER BY a DESC", rows)] == ["2", "1", None]


def test_paging_after_sort():
    rows = [Row.from_values({"i": str(i)}) for i in reversed(range(10))]
    out = run("SELECT i ORDER BY i LIMIT 3 OFFSET 5", rows, columns=("i",))
    assert [r["i"] for r in out] == ["5", "6", "7"]


def test_offset_without_limit_and_edge_cases():
    rows = [Row.from_values({"i": str(i)}) for i in range(4)]
    assert [r["i"] for r in run("SELECT i OFFSET 2", rows, columns=("i",))] == ["2", "3"]
    assert run("SELECT i LIMIT 0", rows, columns=("i",)) == []
    assert run("SELECT i OFFSET 10", rows, columns=("i",)) == []
    assert len(run("SELECT i LIMIT 10", rows, columns=("i",))) == 4


def test_filter_then_project():
    rows = ab_rows([(1, 1), (2, 2), (3, 3)])
    assert run("SELECT b WHERE a >= 2", rows) == [{"b": "2"}, {"b": "3"}]


def test_alias_defaulting():
    rows = [Row.from_values({"col1": "v"})]
    res = execute(parse_query("SELECT col1, col1 AS x, 'hi', 42"), rows, ["col1"])
    assert res.columns == ["col1", "x", "'hi'", "42"]
    (row,) = res.fetchall()
    assert row.columns == ("col1", "x", "'hi'", "42")
    assert row.as_dict() == {"col1": "v", "x": "v", "'hi'": "hi", "42": 42}
    assert row["x"].render() == "v"
    with pytest.raises(KeyError):
        row["nope"]


def test_wildcard_projects_schema_columns_in_order():
    rows = [Row.from_values({"b": "2", "a": "1"}), Row.from_values({"a": "3"})]
    res = execute(parse_query("SELECT *"), rows, ["a", "b"])
    assert res.columns == ["a", "b"]
    out = res.fetchall()
    assert out[0].values[0].render() == "1"
    assert out[1]["b"] is MISSING


def test_unknown_select_column_is_missing():
    rows = [Row.from_values({"a": "1"})]
    assert run("SELECT zzz", rows) == [{"zzz": None}]


def test_execution_is_lazy():
    pulled = []

    def source():
        for i in range(3):
            pulled.append(i)
            yield Row.from_values({"a": str(i)})

    res = QueryExecutor().execute(parse_query("SELECT a"), source(), ["a"])
    assert pulled == []
    assert [r["a"].render() for r in res] == ["0", "1", "2"]
    assert pulled == [0, 1, 2]


def test_stats():
    rows = ab_rows([(1, 1), (2, 2), (3, 3), (4, 4)])
    res = execute(parse_query("SELECT a WHERE a > 1 LIMIT 2"), rows, ["a", "b"])
    res.fetchall()
    assert res.stats == {"rows_scanned": 4, "rows_matched": 3, "rows_returned": 2}


def test_case_insensitive_executor():
    rows = [Row.from_values({"level": "error"}), Row.from_values({"level": "INFO"})]
    ex = QueryExecutor(Evaluator(case_sensitive=False))
    assert run("SELECT level WHERE level = 'ERROR'", rows, columns=("level",), executor=ex) == [
        {"level": "error"}
    ]


def test_hand_built_query_with_wildcard_predicate_fails():
    q = Query(
        select=(SelectItem(ColumnRef("a")),),
        where=Comparison(Wildcard(), CompareOp.EQ, Literal.number(1)),
    )
    res = execute(q, [Row.from_values({"a": "1"})], ["a"])
    with pytest.raises(EvalError):
        res.fetchall()


def test_query_is_reusable():
    q = parse_query("SELECT a WHERE a = 1")
    rows = ab_rows([(1, 0), (2, 0)])
    first = execute(q, rows, ["a", "b"]).fetchall()
    second = execute(q, rows, ["a", "b"]).fetchall()
    assert first == second
    assert len(first) == 1


def test_order_by_select_alias():
    rows = [Row.from_values({"ts": ts}) for ts in ("1", "3", "2")]
    out = run("SELECT ts AS t ORDER BY t DESC", rows, columns=("ts",))
    assert [r["t"] for r in out] == ["3", "2", "1"]


def test_order_by_source_column_wins_over_alias():
    rows = ab_rows([(1, 3), (2, 2), (3, 1)])
    # "a" is a source column, so ORDER BY a sorts by column a, not by b.
    out = run("SELECT b AS a ORDER BY a DESC", rows)
    assert [r["a"] for r in out] == ["1", "2", "3"]


def test_order_by_typed_values():
    rows = [
        Row({"ms": ["0900"]}, {"ms": NumberValue(900)}),
        Row({"ms": ["85"]}, {"ms": NumberValue(85)}),
    ]
    out = run("SELECT ms ORDER BY ms", rows, columns=("ms",))
    assert [r["ms"] for r in out] == [85, 900]
