"""Expression nodes of the syntax tree."""

from __future__ import annotations

from typing import Any, Iterable

from tnacalc.ast_base import Node, NodeKind, Scope
from tnacalc.token import Token, TokKind

_UNARY_MATCH_OPS = frozenset({TokKind.EXCLAMATION, TokKind.QUESTION})

_EXPLICIT_MATCH_OPS = _UNARY_MATCH_OPS | frozenset(
    {
        TokKind.EQ,
        TokKind.NOT_EQ,
        TokKind.LESS,
        TokKind.LESS_EQ,
        TokKind.GREATER,
        TokKind.GREATER_EQ,
    }
)


class Expr(Node):
    """Base expression; remembers the first token it was built from."""

    def __init__(self, kind: NodeKind, tok: Token) -> None:
        super().__init__(kind)
        self.pos = tok


class ResultExpr(Expr):
    """The ``_result`` keyword: the last evaluated value."""

    def __init__(self, tok: Token) -> None:
        super().__init__(NodeKind.RESULT, tok)


class RetExpr(Expr):
    """Returns control and a value to the caller."""

    def __init__(self, ret_val: Expr, kw_pos: Token) -> None:
        super().__init__(NodeKind.RET, kw_pos)
        self.returned_value = ret_val
        self._assume_ancestry(ret_val)


class LitExpr(Expr):
    """A literal of any supported value type."""

    def __init__(self, tok: Token) -> None:
        super().__init__(NodeKind.LITERAL, tok)


class IdExpr(Expr):
    """A reference to a previously declared entity."""

    def __init__(self, tok: Token, sym: Any) -> None:
        super().__init__(NodeKind.IDENTIFIER, tok)
        self.symbol = sym

    @property
    def name(self) -> str:
        return self.pos.value


class UnaryExpr(Expr):
    """A unary operator applied to an operand."""

    def __init__(self, e: Expr, op: Token) -> None:
        super().__init__(NodeKind.UNARY, op)
        self.operand = e
        self._assume_ancestry(e)

    @property
    def op(self) -> Token:
        return self.pos


class TailExpr(Expr):
    """A postfix tail expression."""

    def __init__(self, e: Expr) -> None:
        super().__init__(NodeKind.TAIL, e.pos)
        self.operand = e
        self._assume_ancestry(e)


class TypeCheckExpr(Expr):
    """Checks whether an operand has the type named by a keyword."""

    def __init__(self, e: Expr, type_tok: Token) -> None:
        super().__init__(NodeKind.IS_TYPE, type_tok)
        self.operand = e
        self._assume_ancestry(e)

    @property
    def type(self) -> Token:
        return self.pos


class TypeResolveExpr(Expr):
    """A type check and the expression evaluated when it holds."""

    def __init__(self, chk: TypeCheckExpr, res: Expr) -> None:
        super().__init__(NodeKind.TYPE_RES, chk.pos)
        self.checker = chk
        self.resolver = res
        self._assume_ancestry(chk)
        self._assume_ancestry(res)


class BinaryExpr(Expr):
    """A binary operator with both of its operands."""

    def __init__(
        self,
        left: Expr,
        right: Expr,
        op: Token,
        kind: NodeKind = NodeKind.BINARY,
    ) -> None:
        super().__init__(kind, left.pos)
        self.left = left
        self.right = right
        self.op = op
        self._assume_ancestry(left)
        self._assume_ancestry(right)


class AssignExpr(BinaryExpr):
    """An assignment: ``left`` is assigned to, ``right`` is assigned from."""

    def __init__(self, assignee: Expr, assigned: Expr, op: Token) -> None:
        super().__init__(assignee, assigned, op, NodeKind.ASSIGN)


class DotExpr(Expr):
    """A member access."""

    def __init__(self, accessed: Expr, accessor: Expr) -> None:
        super().__init__(NodeKind.DOT, accessed.pos)
        self.accessed = accessed
        self.accessor = accessor
        self._assume_ancestry(accessed)
        self._assume_ancestry(accessor)


class ArrayExpr(Expr):
    """An array instantiation."""

    def __init__(self, ob: Token, elements: Iterable[Expr]) -> None:
        super().__init__(NodeKind.ARRAY, ob)
        self.elements: list[Expr] = list(elements)
        for elem in self.elements:
            self._assume_ancestry(elem)


class ParenExpr(Expr):
    """An expression enclosed in parentheses."""

    def __init__(self, e: Expr, op: Token) -> None:
        super().__init__(NodeKind.PAREN, op)
        self.internal_expr = e
        self._assume_ancestry(e)


class AbsExpr(Expr):
    """The absolute value of an expression."""

    def __init__(self, e: Expr, op: Token) -> None:
        super().__init__(NodeKind.ABS, op)
        self.expression = e
        self._assume_ancestry(e)


class Invocation(Expr):
    """Anything with a name and a list of arguments."""

    def __init__(self, kind: NodeKind, name: Token, args: Iterable[Expr]) -> None:
        super().__init__(kind, name)
        self.args: list[Expr] = list(args)
        for arg in self.args:
            self._assume_ancestry(arg)

    @property
    def name(self) -> Token:
        return self.pos


class TypedExpr(Invocation):
    """A value of the named type initialised by an argument list."""

    def __init__(self, type_name: Token, args: Iterable[Expr]) -> None:
        super().__init__(NodeKind.TYPED, type_name, args)

    @property
    def type_name(self) -> Token:
        return self.pos


class CallExpr(Expr):
    """A call to a callable expression with an argument list."""

    def __init__(self, callee: Expr, args: Iterable[Expr]) -> None:
        super().__init__(NodeKind.CALL, callee.pos)
        self.callable = callee
        self.args: list[Expr] = list(args)
        self._assume_ancestry(callee)
        for arg in self.args:
            self._assume_ancestry(arg)


class Matcher(Expr):
    """The matcher of a conditional pattern; without a checked expr it is the default."""

    def __init__(self, op: Token, checked: Expr | None) -> None:
        super().__init__(NodeKind.MATCHER, op)
        self.checked = checked
        self._assume_ancestry(checked)

    def is_default(self) -> bool:
        return self.checked is None

    def is_unary(self) -> bool:
        return self.pos.kind in _UNARY_MATCH_OPS

    def has_implicit_op(self) -> bool:
        return self.pos.kind not in _EXPLICIT_MATCH_OPS


class Pattern(Expr):
    """A matcher and the body evaluated when it matches."""

    def __init__(self, matcher: Expr, body: Scope) -> None:
        super().__init__(NodeKind.PATTERN, matcher.pos)
        self.matcher = matcher
        self.body = body
        self._assume_ancestry(matcher)
        self._assume_ancestry(body)


class CondExpr(Expr):
    """A condition checked against a collection of patterns."""

    def __init__(self, condition: Expr, body: Scope) -> None:
        super().__init__(NodeKind.COND, condition.pos)
        self.cond = condition
        self.patterns = body
        self._assume_ancestry(condition)
        self._assume_ancestry(body)


class CondShort(Expr):
    """A shorthand conditional selecting a true or a false branch."""

    def __init__(
        self,
        condition: Expr,
        on_true: Expr | None,
        on_false: Expr | None,
        sc: Scope,
    ) -> None:
        super().__init__(NodeKind.COND_SHORT, condition.pos)
        self.cond = condition
        self.on_true = on_true
        self.on_false = on_false
        self.scope = sc
        self._assume_ancestry(sc)
        self._assume_ancestry(condition)
        self._assume_ancestry(on_true)
        self._assume_ancestry(on_false)

    def has_true(self) -> bool:
        return self.on_true is not None

    def has_false(self) -> bool:
        return self.on_false is not None


class ErrorExpr(Expr):
    """Built in place of an expression that failed to parse; always invalid."""

    def __init__(self, tok: Token, msg: str) -> None:
        super().__init__(NodeKind.ERROR, tok)
        self.message = msg
        self._make_invalid()

    @property
    def at(self) -> Token:
        return self.pos