"""Base classes of the syntax tree."""

from __future__ import annotations

from enum import Enum, auto
from typing import Iterable


class NodeKind(Enum):
    """Kinds of syntax tree nodes."""

    ERROR = auto()
    ROOT = auto()
    SCOPE = auto()
    MODULE = auto()
    IMPORT = auto()

    # Expressions
    LITERAL = auto()
    IDENTIFIER = auto()
    UNARY = auto()
    TAIL = auto()
    BINARY = auto()
    ASSIGN = auto()
    ARRAY = auto()
    PAREN = auto()
    ABS = auto()
    TYPED = auto()
    CALL = auto()
    DECL = auto()
    RESULT = auto()
    RET = auto()
    COND = auto()
    COND_SHORT = auto()
    MATCHER = auto()
    PATTERN = auto()
    DOT = auto()
    IS_TYPE = auto()
    TYPE_RES = auto()

    # Declarations
    VAR_DECL = auto()
    FUNC_DECL = auto()
    PARAM_DECL = auto()


class Node:
    """Base of every syntax tree node: a kind, a parent and a validity flag."""

    def __init__(self, kind: NodeKind) -> None:
        self.kind = kind
        self._parent: Node | None = None
        self._valid = True

    @property
    def parent(self) -> Node | None:
        return self._parent

    @property
    def valid(self) -> bool:
        """False when this node or one of its children holds an error."""
        return self._valid

    def is_kind(self, kind: NodeKind) -> bool:
        return self.kind == kind

    def is_any(self, *args: NodeKind) -> bool:
        return self.kind in args

    def climb(self, kind: NodeKind) -> Node | None:
        """Return the nearest ancestor of the given kind, or None."""
        top = self._parent
        while top is not None:
            if top.kind == kind:
                return top
            top = top._parent
        return None

    # Helpers for derived nodes

    def _make_invalid(self) -> None:
        self._valid = False

    def _make_invalid_if(self, child: Node | None) -> None:
        if child is not None and not child._valid:
            self._make_invalid()

    def _make_child_of(self, parent: Node | None) -> None:
        self._parent = parent

    def _assume_ancestry(self, child: Node | None) -> None:
        if child is None:
            return
        child._make_child_of(self)
        self._make_invalid_if(child)

    def _invalidate_parents(self) -> None:
        if self._valid:
            return
        top = self._parent
        while top is not None:
            top._make_invalid()
            top = top._parent


class Scope(Node):
    """A list of expressions belonging to one scope."""

    def __init__(
        self,
        children: Iterable[Node] | None = None,
        kind: NodeKind = NodeKind.SCOPE,
    ) -> None:
        super().__init__(kind)
        self.children: list[Node] = []
        if children is not None:
            self.adopt(children)

    def adopt(self, children: Iterable[Node]) -> None:
        """Append the given children and make this scope their parent."""
        for child in children:
            self._assume_ancestry(child)
            self.children.append(child)

    def is_global(self) -> bool:
        """True for module scopes and for scopes not nested in anything."""
        return self.kind == NodeKind.MODULE or self._parent is None