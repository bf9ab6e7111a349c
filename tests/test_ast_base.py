from tnacalc.ast_base import Node, NodeKind, Scope


def test_new_node_defaults():
    node = Node(NodeKind.LITERAL)
    assert node.kind == NodeKind.LITERAL
    assert node.parent is None
    assert node.valid is True


def test_is_kind_and_is_any():
    node = Node(NodeKind.BINARY)
    assert node.is_kind(NodeKind.BINARY)
    assert not node.is_kind(NodeKind.UNARY)
    assert node.is_any(NodeKind.UNARY, NodeKind.BINARY)
    assert not node.is_any(NodeKind.UNARY, NodeKind.ASSIGN)


def test_scope_adopts_children():
    a = Node(NodeKind.LITERAL)
    b = Node(NodeKind.IDENTIFIER)
    scope = Scope([a])
    scope.adopt([b])
    assert scope.children == [a, b]
    assert a.parent is scope
    assert b.parent is scope
    assert scope.kind == NodeKind.SCOPE


def test_invalid_child_invalidates_scope():
    bad = Node(NodeKind.ERROR)
    bad._make_invalid()
    scope = Scope([Node(NodeKind.LITERAL), bad])
    assert scope.valid is False


def test_valid_children_keep_scope_valid():
    scope = Scope([Node(NodeKind.LITERAL), Node(NodeKind.LITERAL)])
    assert scope.valid is True


def test_climb_finds_nearest_ancestor():
    leaf = Node(NodeKind.LITERAL)
    inner = Scope([leaf])
    outer = Scope([inner], kind=NodeKind.MODULE)
    assert leaf.climb(NodeKind.SCOPE) is inner
    assert leaf.climb(NodeKind.MODULE) is outer
    assert leaf.climb(NodeKind.ROOT) is None


def test_climb_skips_self():
    inner = Scope()
    outer = Scope([inner])
    assert inner.climb(NodeKind.SCOPE) is outer
    assert outer.climb(NodeKind.SCOPE) is None


def test_invalidate_parents_propagates_up():
    leaf = Node(NodeKind.LITERAL)
    inner = Scope([leaf])
    outer = Scope([inner])
    leaf._make_invalid()
    leaf._invalidate_parents()
    assert inner.valid is False
    assert outer.valid is False


def test_is_global():
    top = Scope()
    module = Scope(kind=NodeKind.MODULE)
    nested = Scope()
    holder = Node(NodeKind.FUNC_DECL)
    holder._assume_ancestry(nested)
    module.adopt([Scope()])
    assert top.is_global()
    assert module.is_global()
    assert not nested.is_global()


def test_empty_scope():
    assert Scope().children == []