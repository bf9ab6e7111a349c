"""Basic blocks, the edges between them, and IR functions."""

from __future__ import annotations

from collections import deque
from typing import Any, Hashable, Iterator

from tnacalc.ir_nodes import Instruction, IrKind, IrNode, Operand

_UINT16_MAX = 2**16 - 1


class Edge(IrNode):
    """A directed connection between two basic blocks carrying a value.

    A loose edge does not register itself with the blocks it connects.
    """

    def __init__(
        self,
        src: BasicBlock,
        dst: BasicBlock,
        val: Any,
        loose: bool = False,
    ) -> None:
        super().__init__(IrKind.EDGE)
        self.incoming = src
        self.outgoing = dst
        self.value = val if isinstance(val, Operand) else Operand(val)
        self.loose = loose
        if not loose:
            src._outs.append(self)
            dst._preds.append(self)

    def __repr__(self) -> str:
        return f"Edge({self.incoming.name!r} -> {self.outgoing.name!r})"


class BasicBlock(IrNode):
    """A named sequence of instructions with incoming and outgoing edges."""

    def __init__(self, name: str, func: Function) -> None:
        super().__init__(IrKind.BLOCK)
        self.name = name
        self.func = func
        self.instructions: list[Instruction] = []
        self._preds: list[Edge] = []
        self._outs: list[Edge] = []

    def __repr__(self) -> str:
        return f"BasicBlock({self.name!r})"

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    @property
    def preds(self) -> tuple[Edge, ...]:
        return tuple(self._preds)

    @property
    def outs(self) -> tuple[Edge, ...]:
        return tuple(self._outs)

    @property
    def first(self) -> Instruction | None:
        return self.instructions[0] if self.instructions else None

    @property
    def last(self) -> Instruction | None:
        return self.instructions[-1] if self.instructions else None

    def _check_owner(self, instr: Instruction) -> None:
        if instr.owner_block is not self:
            raise ValueError("instruction belongs to another block")

    def add_instruction(self, instr: Instruction) -> BasicBlock:
        self._check_owner(instr)
        self.instructions.append(instr)
        return self

    def add_instruction_front(self, instr: Instruction) -> BasicBlock:
        self._check_owner(instr)
        self.instructions.insert(0, instr)
        return self

    def clear_instructions(self) -> None:
        for instr in self.instructions:
            instr._detach()
        self.instructions.clear()

    def is_last_pred(self, edge: Edge) -> bool:
        return bool(self._preds) and self._preds[-1] is edge

    def is_last_connection(self, block: BasicBlock) -> bool:
        return bool(self._preds) and self._preds[-1].incoming is block

    def is_connected_to(self, other: BasicBlock) -> bool:
        """True if ``other`` can be reached by following outgoing edges."""
        seen: set[BasicBlock] = set()
        queue = deque(edge.outgoing for edge in self._outs)
        while queue:
            block = queue.popleft()
            if block is other:
                return True
            if block in seen:
                continue
            seen.add(block)
            queue.extend(edge.outgoing for edge in block._outs)
        return False


class Function(IrNode):
    """An IR function or module: blocks, nested functions and parameters."""

    def __init__(
        self,
        name: str,
        ident: Hashable,
        param_count: int = 0,
        owner: Function | None = None,
        loose: bool = False,
    ) -> None:
        super().__init__(IrKind.FUNCTION)
        if not 0 <= param_count <= _UINT16_MAX:
            raise ValueError(f"parameter count {param_count} out of range")
        self.name = name
        self.id = ident
        self.param_count = param_count
        self.owner: Function | None = None
        self.children: list[Function] = []
        self.blocks: dict[str, BasicBlock] = {}
        self._entry: BasicBlock | None = None
        self._child_names: dict[str, Function] = {}
        self._loose = loose
        if owner is not None:
            owner.add_child(self)

    def __repr__(self) -> str:
        return f"Function({self.name!r})"

    def is_loose(self) -> bool:
        """Loose functions are artificial and are neither called nor traversed."""
        return self._loose

    @property
    def entry(self) -> BasicBlock:
        if self._entry is None:
            raise LookupError(f"function {self.name!r} has no entry block")
        return self._entry

    def lookup(self, name: str) -> Function | None:
        return self._child_names.get(name)

    def create_block(self, name: str) -> BasicBlock:
        """Create a block; the first block created becomes the entry."""
        if name in self.blocks:
            raise ValueError(f"block {name!r} already exists in {self.name!r}")
        block = BasicBlock(name, self)
        self.blocks[name] = block
        if self._entry is None:
            self._entry = block
        return block

    def delete_block_tree(self, root: BasicBlock) -> None:
        """Delete ``root`` and every block reachable from it through outgoing edges."""
        if root.func is not self:
            raise ValueError("block belongs to another function")
        doomed: list[BasicBlock] = []
        seen: set[BasicBlock] = set()
        queue = deque([root])
        while queue:
            block = queue.popleft()
            if block in seen:
                continue
            seen.add(block)
            doomed.append(block)
            queue.extend(edge.outgoing for edge in block._outs)

        for block in doomed:
            block.clear_instructions()
            if self.blocks.get(block.name) is block:
                del self.blocks[block.name]
            for edge in block._preds:
                if edge.incoming not in seen:
                    edge.incoming._outs = [e for e in edge.incoming._outs if e is not edge]
            block._preds.clear()
            block._outs.clear()

        if self._entry in seen:
            self._entry = None

    def add_child(self, child: Function) -> None:
        """Nest ``child`` in this function and make it findable by name."""
        if any(existing is child for existing in self.children):
            return
        child.owner = self
        self.children.append(child)
        self._add_child_name(child.name, child)

    def _add_child_name(self, name: str, child: Function) -> None:
        self._child_names.setdefault(name, child)