"""Walker over the control flow graph and its IR."""

from __future__ import annotations

from collections import deque
from typing import Callable, Optional

from tnacalc.ir_builder import Cfg
from tnacalc.ir_graph import BasicBlock, Function
from tnacalc.ir_nodes import Constant, Instruction


class CfgWalker:
    """Walks a CFG and calls visit hooks on its nodes.

    Hooks are supplied either as callbacks to the constructor or by
    overriding the hook methods in a subclass.

    Interned constants are visited first, then every non-loose module.
    A function's blocks are walked breadth first before the function is
    visited; nested functions come after it. A block's instructions are
    visited before the block. Preview hooks returning False skip a node's
    children but not the node itself.
    """

    _preview_function_cb: Optional[Callable[[Function], bool]] = None
    _preview_block_cb: Optional[Callable[[BasicBlock], bool]] = None
    _on_function: Optional[Callable[[Function], None]] = None
    _on_block: Optional[Callable[[BasicBlock], None]] = None
    _on_instruction: Optional[Callable[[Instruction], None]] = None
    _on_constant: Optional[Callable[[Constant], None]] = None

    def __init__(
        self,
        *,
        preview_function: Optional[Callable[[Function], bool]] = None,
        preview_block: Optional[Callable[[BasicBlock], bool]] = None,
        on_function: Optional[Callable[[Function], None]] = None,
        on_block: Optional[Callable[[BasicBlock], None]] = None,
        on_instruction: Optional[Callable[[Instruction], None]] = None,
        on_constant: Optional[Callable[[Constant], None]] = None,
    ) -> None:
        self._preview_function_cb = preview_function
        self._preview_block_cb = preview_block
        self._on_function = on_function
        self._on_block = on_block
        self._on_instruction = on_instruction
        self._on_constant = on_constant

    def walk(self, graph: Cfg) -> None:
        for const in graph.interned:
            self.visit_constant(const)
        for module in graph:
            if not module.is_loose():
                self._walk_function(module)

    # Hooks

    def preview_function(self, func: Function) -> bool:
        """Decides whether the function's blocks and children are walked."""
        callback = self._preview_function_cb
        return True if callback is None else bool(callback(func))

    def preview_block(self, block: BasicBlock) -> bool:
        """Decides whether the block's instructions are visited."""
        callback = self._preview_block_cb
        return True if callback is None else bool(callback(block))

    def visit_function(self, func: Function) -> None:
        callback = self._on_function
        if callback is not None:
            callback(func)

    def visit_block(self, block: BasicBlock) -> None:
        callback = self._on_block
        if callback is not None:
            callback(block)

    def visit_instruction(self, instr: Instruction) -> None:
        callback = self._on_instruction
        if callback is not None:
            callback(instr)

    def visit_constant(self, const: Constant) -> None:
        callback = self._on_constant
        if callback is not None:
            callback(const)

    # Traversal

    def _walk_function(self, func: Function) -> None:
        descend = self.preview_function(func)
        if descend:
            self._walk_blocks(func.entry)
        self.visit_function(func)
        if not descend:
            return
        for nested in func.children:
            self._walk_function(nested)

    def _walk_block(self, block: BasicBlock) -> None:
        if self.preview_block(block):
            for instr in block:
                self.visit_instruction(instr)
        self.visit_block(block)

    def _walk_blocks(self, start: BasicBlock) -> None:
        queue = deque([start])
        while queue:
            cur = queue.popleft()
            self._walk_block(cur)
            for conn in cur.outs:
                out = conn.outgoing
                if out.is_last_pred(conn):
                    queue.append(out)