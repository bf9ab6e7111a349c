import pytest

from tnacalc.ast_base import NodeKind, Scope
from tnacalc.ast_expr import (
    AbsExpr,
    ArrayExpr,
    AssignExpr,
    BinaryExpr,
    CallExpr,
    CondExpr,
    CondShort,
    DotExpr,
    ErrorExpr,
    IdExpr,
    LitExpr,
    Matcher,
    ParenExpr,
    Pattern,
    ResultExpr,
    RetExpr,
    TailExpr,
    TypeCheckExpr,
    TypedExpr,
    TypeResolveExpr,
    UnaryExpr,
)
from tnacalc.token import Token, TokKind


def lit(text="1"):
    return LitExpr(Token(text, TokKind.INT_DEC))


def test_literal_keeps_token_and_kind():
    tok = Token("42", TokKind.INT_DEC)
    e = LitExpr(tok)
    assert e.pos is tok
    assert e.kind == NodeKind.LITERAL
    assert e.valid


def test_result_expr_kind():
    e = ResultExpr(Token("_result", TokKind.KW_RESULT))
    assert e.is_kind(NodeKind.RESULT)


def test_id_expr_name_and_symbol():
    sym = object()
    e = IdExpr(Token("abc", TokKind.IDENTIFIER), sym)
    assert e.name == "abc"
    assert e.symbol is sym


def test_binary_children_and_position():
    left, right = lit("1"), lit("2")
    op = Token("+", TokKind.PLUS)
    b = BinaryExpr(left, right, op)
    assert b.left is left and b.right is right
    assert b.op is op
    assert b.pos is left.pos
    assert left.parent is b and right.parent is b
    assert b.kind == NodeKind.BINARY


def test_assign_is_binary_with_assign_kind():
    a = AssignExpr(lit("x"), lit("y"), Token("=", TokKind.ASSIGN))
    assert isinstance(a, BinaryExpr)
    assert a.kind == NodeKind.ASSIGN


def test_error_expr_is_invalid_and_propagates():
    tok = Token("?", TokKind.ERROR)
    err = ErrorExpr(tok, "expected expression")
    assert not err.valid
    assert err.message == "expected expression"
    assert err.at is tok
    outer = UnaryExpr(err, Token("-", TokKind.MINUS))
    assert not outer.valid
    paren = ParenExpr(outer, Token("(", TokKind.PAREN_OPEN))
    assert not paren.valid


def test_valid_children_keep_parent_valid():
    u = UnaryExpr(lit(), Token("-", TokKind.MINUS))
    assert u.valid
    assert u.op.kind == TokKind.MINUS


def test_climb_finds_ancestor():
    inner = lit()
    tail = TailExpr(inner)
    paren = ParenExpr(tail, Token("(", TokKind.PAREN_OPEN))
    assert inner.climb(NodeKind.PAREN) is paren
    assert inner.climb(NodeKind.CALL) is None
    assert tail.operand is inner


def test_ret_expr():
    val = lit()
    kw = Token("_ret", TokKind.KW_RET)
    r = RetExpr(val, kw)
    assert r.returned_value is val
    assert r.pos is kw
    assert val.parent is r


def test_type_check_and_resolve():
    kw = Token("_int", TokKind.KW_INT)
    operand = lit()
    chk = TypeCheckExpr(operand, kw)
    assert chk.type is kw
    res = lit("2")
    tr = TypeResolveExpr(chk, res)
    assert tr.checker is chk and tr.resolver is res
    assert chk.parent is tr
    assert tr.kind == NodeKind.TYPE_RES


def test_array_elements_adopted():
    elems = [lit("1"), lit("2"), lit("3")]
    arr = ArrayExpr(Token("[", TokKind.BRACKET_OPEN), elems)
    assert arr.elements == elems
    assert all(e.parent is arr for e in elems)


def test_typed_expr_and_call():
    kw = Token("_cplx", TokKind.KW_COMPLEX)
    args = [lit("1"), lit("2")]
    t = TypedExpr(kw, args)
    assert t.type_name is kw and t.name is kw
    assert t.args == args
    callee = IdExpr(Token("f", TokKind.IDENTIFIER), None)
    c = CallExpr(callee, [lit()])
    assert c.callable is callee
    assert c.pos is callee.pos
    assert callee.parent is c


def test_dot_and_abs():
    a, b = lit("a"), lit("b")
    d = DotExpr(a, b)
    assert d.accessed is a and d.accessor is b
    ab = AbsExpr(a, Token("|", TokKind.PIPE))
    assert ab.expression is a
    assert ab.kind == NodeKind.ABS


@pytest.mark.parametrize(
    "kind, unary, implicit",
    [
        (TokKind.EXCLAMATION, True, False),
        (TokKind.QUESTION, True, False),
        (TokKind.LESS, False, False),
        (TokKind.EQ, False, False),
        (TokKind.INT_DEC, False, True),
    ],
)
def test_matcher_flags(kind, unary, implicit):
    m = Matcher(Token("x", kind), lit())
    assert m.is_unary() == unary
    assert m.has_implicit_op() == implicit
    assert not m.is_default()


def test_default_matcher():
    m = Matcher(Token("{}", TokKind.CURLY_OPEN), None)
    assert m.is_default()
    assert m.checked is None


def test_pattern_and_conditional():
    m = Matcher(Token("<", TokKind.LESS), lit())
    body = Scope([lit()])
    p = Pattern(m, body)
    assert p.matcher is m and p.body is body
    assert body.parent is p
    cond = lit("c")
    patterns = Scope([p])
    ce = CondExpr(cond, patterns)
    assert ce.cond is cond and ce.patterns is patterns
    assert p.climb(NodeKind.COND) is ce


def test_cond_short_branches():
    sc = Scope()
    t = lit("t")
    cs = CondShort(lit("c"), t, None, sc)
    assert cs.has_true()
    assert not cs.has_false()
    assert cs.on_true is t
    assert t.parent is cs


def test_cond_short_invalid_branch_invalidates():
    err = ErrorExpr(Token("!", TokKind.ERROR), "bad")
    cs = CondShort(lit(), None, err, Scope())
    assert cs.has_false()
    assert not cs.valid