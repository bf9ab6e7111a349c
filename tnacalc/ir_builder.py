"""Creation of IR nodes and the control flow graph that gives access to them."""

from __future__ import annotations

from typing import Any, Hashable, Iterator

from tnacalc.arrays import ArrayWrapper
from tnacalc.ir_graph import BasicBlock, Edge, Function
from tnacalc.ir_nodes import Constant, Instruction, OpCode, RegScope, VReg
from tnacalc.value import Value


class IrBuilder:
    """Creates IR nodes and keeps track of them."""

    def __init__(self) -> None:
        self._functions: dict[Hashable, Function] = {}
        self._loose_modules: list[Function] = []
        self._edges: list[Edge] = []
        self._loose_edges: list[Edge] = []
        self._synth_phis: list[Instruction] = []
        self._consts: list[Constant] = []
        self._regs: list[VReg] = []
        self._arrays: dict[int, Constant] = {}

    # Functions

    def _make_function(
        self, ident: Hashable, owner: Function | None, name: str, param_count: int
    ) -> Function:
        if ident in self._functions:
            raise ValueError(f"an entity with id {ident!r} already exists")
        func = Function(name, ident, param_count, owner)
        self._functions[ident] = func
        return func

    def make_module(self, ident: Hashable, name: str, param_count: int) -> Function:
        return self._make_function(ident, None, name, param_count)

    def make_function(
        self, ident: Hashable, owner: Function, name: str, param_count: int
    ) -> Function:
        return self._make_function(ident, owner, name, param_count)

    def find_function(self, ident: Hashable) -> Function | None:
        return self._functions.get(ident)

    def make_loose_module(self, ident: Hashable, name: str) -> Function:
        """Create an artificial module that is neither called nor traversed."""
        module = Function(name, ident, 0, loose=True)
        self._loose_modules.append(module)
        return module

    # Instructions

    def add_instruction(
        self, owner: BasicBlock, op: OpCode, pos: Instruction | None = None
    ) -> Instruction:
        """Add an instruction to ``owner`` before ``pos``, or at its end if ``pos`` is None."""
        instr = Instruction(owner, op)
        if pos is None:
            owner.add_instruction(instr)
            return instr
        for idx, existing in enumerate(owner.instructions):
            if existing is pos:
                owner.instructions.insert(idx, instr)
                return instr
        raise ValueError("insertion position is not an instruction of the block")

    def add_var(self, owner: BasicBlock, pos: Instruction | None = None) -> Instruction:
        return self.add_instruction(owner, OpCode.ALLOC, pos)

    def add_array(self, owner: BasicBlock, pos: Instruction | None = None) -> Instruction:
        return self.add_instruction(owner, OpCode.ARR, pos)

    def synth_phi(self, owner: BasicBlock) -> Instruction:
        """Create a phi node that is not placed into any block."""
        phi = Instruction(owner, OpCode.PHI)
        self._synth_phis.append(phi)
        return phi

    # Registers

    def _register(self, key: str | int, scope: RegScope) -> VReg:
        reg = VReg(key, scope)
        self._regs.append(reg)
        return reg

    def make_register(self, key: str | int) -> VReg:
        return self._register(key, RegScope.LOCAL)

    def make_global_register(self, key: str | int) -> VReg:
        return self._register(key, RegScope.GLOBAL)

    # Edges

    def make_edge(self, src: BasicBlock, dst: BasicBlock, val: Any) -> Edge:
        edge = Edge(src, dst, val)
        self._edges.append(edge)
        return edge

    def make_loose_edge(self, src: BasicBlock, dst: BasicBlock, val: Any) -> Edge:
        """Create an edge that does not add itself to the graph; used by synthetic phis."""
        edge = Edge(src, dst, val, loose=True)
        self._loose_edges.append(edge)
        return edge

    # Interned constants

    def intern(self, reg: VReg, val: ArrayWrapper) -> Constant:
        const = Constant(reg, Value.array(val))
        self._consts.append(const)
        self._arrays[val.id] = const
        return const

    def find_interned(self, arr: ArrayWrapper) -> Constant | None:
        return self._arrays.get(arr.id)

    # Collections

    @property
    def functions(self) -> tuple[Function, ...]:
        return tuple(self._functions.values())

    @property
    def instructions(self) -> list[Instruction]:
        """Every instruction currently placed in a block of a known function."""
        return [
            instr
            for func in self._functions.values()
            for block in func.blocks.values()
            for instr in block
        ]

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    @property
    def interned(self) -> tuple[Constant, ...]:
        return tuple(self._consts)


class Cfg:
    """The control flow graph of a program: its modules and access to the IR."""

    def __init__(self, builder: IrBuilder) -> None:
        self._builder = builder
        self._modules: list[Function] = []

    @property
    def builder(self) -> IrBuilder:
        return self._builder

    def __iter__(self) -> Iterator[Function]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def declare_module(self, ident: Hashable, name: str, param_count: int) -> Function:
        module = self._builder.make_module(ident, name, param_count)
        self._modules.append(module)
        return module

    def declare_function(
        self, ident: Hashable, owner: Function, name: str, param_count: int
    ) -> Function:
        return self._builder.make_function(ident, owner, name, param_count)

    def find_entity(self, ident: Hashable) -> Function | None:
        return self._builder.find_function(ident)

    def connect(self, src: BasicBlock, dst: BasicBlock, val: Any) -> Edge:
        return self._builder.make_edge(src, dst, val)

    def find_array(self, arr: ArrayWrapper) -> Constant | None:
        return self._builder.find_interned(arr)

    @property
    def instructions(self) -> list[Instruction]:
        return self._builder.instructions

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._builder.edges

    @property
    def interned(self) -> tuple[Constant, ...]:
        return self._builder.interned