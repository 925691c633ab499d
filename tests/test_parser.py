import pytest

from logquery.ast import (
    And,
    ColumnRef,
    CompareOp,
    Comparison,
    Direction,
    Literal,
    Not,
    Or,
    OrderItem,
    Query,
    SelectItem,
    Wildcard,
)
from logquery.errors import ParseError
from logquery.parser import parse, parse_query
from logquery.lexer import tokenize


def cmp(col, op, lit):
    value = Literal.number(lit) if isinstance(lit, int) else Literal.string(lit)
    return Comparison(ColumnRef(col), op, value)


def test_select_list_with_alias():
    q = parse_query("SELECT col1, col2 AS x, 'lit', 7")
    assert q.select == (
        SelectItem(ColumnRef("col1")),
        SelectItem(ColumnRef("col2"), alias="x"),
        SelectItem(Literal.string("lit")),
        SelectItem(Literal.number(7, "7")),
    )
    assert q.where is None
    assert q.order_by == ()
    assert q.limit is None and q.offset is None


def test_parse_accepts_token_stream():
    assert parse(tokenize("SELECT a")) == parse_query("SELECT a")


def test_wildcard_select():
    q = parse_query("SELECT * FROM logs;")
    assert q.select == (SelectItem(Wildcard()),)
    assert q.is_wildcard


def test_wildcard_cannot_be_mixed_with_columns():
    with pytest.raises(ParseError):
        parse_query("SELECT *, col1")
    with pytest.raises(ParseError):
        parse_query("SELECT col1, *")


def test_wildcard_not_allowed_in_where_or_order_by():
    with pytest.raises(ParseError):
        parse_query("SELECT a WHERE * = 1")
    with pytest.raises(ParseError):
        parse_query("SELECT a WHERE a = *")
    with pytest.raises(ParseError):
        parse_query("SELECT a ORDER BY *")


def test_or_binds_looser_than_and():
    q = parse_query("SELECT * WHERE a=1 OR a=2 AND b=3")
    assert q.where == Or(
        cmp("a", CompareOp.EQ, 1),
        And(cmp("a", CompareOp.EQ, 2), cmp("b", CompareOp.EQ, 3)),
    )


def test_parentheses_override_precedence():
    q = parse_query("SELECT * WHERE (a=1 OR a=2) AND b=3")
    assert q.where == And(
        Or(cmp("a", CompareOp.EQ, 1), cmp("a", CompareOp.EQ, 2)),
        cmp("b", CompareOp.EQ, 3),
    )


def test_parentheses_leave_no_node_behind():
    assert parse_query("SELECT * WHERE ((a = 1))") == parse_query("SELECT * WHERE a = 1")


def test_and_or_are_left_associative():
    q = parse_query("SELECT * WHERE a=1 AND b=2 AND c=3")
    assert q.where == And(
        And(cmp("a", CompareOp.EQ, 1), cmp("b", CompareOp.EQ, 2)),
        cmp("c", CompareOp.EQ, 3),
    )


def test_not_binds_tighter_than_and():
    q = parse_query("SELECT * WHERE NOT a = 1 AND b = 2")
    assert q.where == And(Not(cmp("a", CompareOp.EQ, 1)), cmp("b", CompareOp.EQ, 2))


def test_literal_on_left_is_kept_as_written():
    q = parse_query("SELECT * WHERE 'x' <> col")
    assert q.where == Comparison(Literal.string("x"), CompareOp.NE, ColumnRef("col"))


def test_order_by_directions():
    q = parse_query("SELECT * ORDER BY a, b DESC, c ASC")
    assert q.order_by == (
        OrderItem(ColumnRef("a"), Direction.ASC),
        OrderItem(ColumnRef("b"), Direction.DESC),
        OrderItem(ColumnRef("c"), Direction.ASC),
    )


def test_limit_and_offset():
    q = parse_query("SELECT * LIMIT 3 OFFSET 5")
    assert (q.limit, q.offset) == (3, 5)
    q = parse_query("select * offset 2")
    assert (q.limit, q.offset) == (None, 2)


@pytest.mark.parametrize("clause", ["LIMIT -1", "LIMIT 1.5", "LIMIT 'a'", "OFFSET -2", "LIMIT"])
def test_limit_offset_must_be_non_negative_integers(clause):
    with pytest.raises(ParseError) as exc:
        parse_query(f"SELECT * {clause}")
    assert exc.value.expected == "non-negative integer"


def test_parse_error_reports_expected_and_found():
    with pytest.raises(ParseError) as exc:
        parse_query("SELECT a WHERE a 1")
    err = exc.value
    assert err.found == "'1'"
    assert "=" in err.expected
    assert err.position.col == 18


def test_trailing_tokens_rejected():
    with pytest.raises(ParseError) as exc:
        parse_query("SELECT a b")
    assert exc.value.found == "'b'"


def test_missing_select_and_empty_input():
    with pytest.raises(ParseError):
        parse_query("WHERE a = 1")
    with pytest.raises(ParseError) as exc:
        parse_query("")
    assert exc.value.found == "end of input"


def test_unclosed_group():
    with pytest.raises(ParseError):
        parse_query("SELECT * WHERE (a = 1 OR b = 2")


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT *",
        "SELECT a, b AS x, 'lit' AS y, 1.50",
        "SELECT a WHERE a = 1 OR a = 2 AND b = 3",
        "SELECT a WHERE (a = 1 OR a = 2) AND NOT (b = 3 OR c <> 'z')",
        "SELECT msg WHERE msg = 'error: x\\n  at y' AND 'it''s' >= msg",
        "SELECT `order` AS `select` WHERE `order` < -4 ORDER BY `order` DESC, msg LIMIT 3 OFFSET 0",
        "SELECT * WHERE NOT NOT a = 1 ORDER BY a LIMIT 10",
        "SELECT req.id, `req-id` WHERE req.id != '' ORDER BY req.id",
    ],
)
def test_render_round_trip(sql):
    q = parse_query(sql)
    assert parse_query(q.render()) == q


def test_render_keeps_right_nested_groups():
    q = Query(
        select=(SelectItem(Wildcard()),),
        where=And(cmp("a", CompareOp.EQ, 1), And(cmp("b", CompareOp.EQ, 2), cmp("c", CompareOp.EQ, 3))),
    )
    assert parse_query(q.render()) == q


def test_dotted_column_names():
    q = parse_query("SELECT req.id AS id WHERE req.id = 'x'")
    assert q.select == (SelectItem(ColumnRef("req.id"), "id"),)
    assert q.where == Comparison(ColumnRef("req.id"), CompareOp.EQ, Literal.string("x"))
    assert "SELECT req.id AS id" in q.render()
