"""IR node base, virtual registers, operands, instructions and interned constants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterable, Iterator

from tnacalc.value import TypeId, Value

_UINT16_MAX = 2**16 - 1
_UINT64_MAX = 2**64 - 1


class IrKind(Enum):
    """Kinds of IR nodes."""

    FUNCTION = auto()
    BLOCK = auto()
    EDGE = auto()
    INSTRUCTION = auto()
    REGISTER = auto()
    CONSTANT = auto()


class IrNode:
    """Base of every IR node; carries its kind."""

    def __init__(self, kind: IrKind) -> None:
        self.kind = kind


class RegScope(Enum):
    """Whether a register lives in a function frame or in global storage."""

    LOCAL = auto()
    GLOBAL = auto()


class VReg(IrNode):
    """A virtual register identified by a name or by an index."""

    def __init__(self, key: str | int, scope: RegScope = RegScope.LOCAL) -> None:
        super().__init__(IrKind.REGISTER)
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise TypeError(f"register key must be a name or an index, not {type(key).__name__}")
        if isinstance(key, int) and not 0 <= key <= _UINT64_MAX:
            raise ValueError(f"register index {key} out of range")
        self._key = key
        self.scope = scope
        self._source: Instruction | None = None

    def __repr__(self) -> str:
        prefix = "@" if self.is_global() else "%"
        return f"VReg({prefix}{self._key})"

    def is_named(self) -> bool:
        return isinstance(self._key, str)

    @property
    def name(self) -> str:
        if not isinstance(self._key, str):
            raise ValueError("register has no name")
        return self._key

    @property
    def index(self) -> int:
        if isinstance(self._key, str):
            raise ValueError("register has no index")
        return self._key

    def is_global(self) -> bool:
        return self.scope is RegScope.GLOBAL

    def has_src(self) -> bool:
        return self._source is not None

    @property
    def source(self) -> Instruction:
        """The instruction producing this register's value."""
        if self._source is None:
            raise LookupError("register has no source instruction")
        return self._source

    def _make_result_of(self, src: Instruction) -> None:
        if not self.is_global():
            self._source = src

    def _drop_source_if(self, instr: Instruction) -> None:
        if self._source is instr:
            self._source = None


@dataclass(frozen=True)
class FuncParam:
    """Index of a function parameter."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("parameter index must be an integer")
        if not 0 <= self.value <= _UINT16_MAX:
            raise ValueError(f"parameter index {self.value} out of range")


class _OpKind(Enum):
    VALUE = auto()
    BLOCK = auto()
    REGISTER = auto()
    EDGE = auto()
    PARAM = auto()
    INDEX = auto()
    NAME = auto()
    TYPEID = auto()


_NODE_OPERANDS = {
    IrKind.BLOCK: _OpKind.BLOCK,
    IrKind.REGISTER: _OpKind.REGISTER,
    IrKind.EDGE: _OpKind.EDGE,
}


def _classify(data: Any) -> _OpKind | None:
    if isinstance(data, Value):
        return _OpKind.VALUE
    if isinstance(data, IrNode):
        return _NODE_OPERANDS.get(data.kind)
    if isinstance(data, FuncParam):
        return _OpKind.PARAM
    if isinstance(data, TypeId):
        return _OpKind.TYPEID
    if isinstance(data, bool):
        return None
    if isinstance(data, int):
        if not 0 <= data <= _UINT64_MAX:
            raise ValueError(f"operand index {data} out of range")
        return _OpKind.INDEX
    if isinstance(data, str):
        return _OpKind.NAME
    return None


class Operand:
    """An instruction operand: a value, block, register, edge, parameter, index, name or type id."""

    __slots__ = ("_data", "_kind")

    def __init__(self, data: Any) -> None:
        kind = _classify(data)
        if kind is None:
            raise TypeError(f"unsupported operand: {type(data).__name__}")
        self._data = data
        self._kind = kind

    def __repr__(self) -> str:
        return f"Operand({self._data!r})"

    @property
    def data(self) -> Any:
        return self._data

    def _get(self, kind: _OpKind) -> Any:
        if self._kind is not kind:
            raise TypeError(f"operand holds {self._kind.name.lower()}, not {kind.name.lower()}")
        return self._data

    def is_undef(self) -> bool:
        return self._kind is _OpKind.VALUE and not self._data

    def is_value(self) -> bool:
        return self._kind is _OpKind.VALUE

    def is_register(self) -> bool:
        return self._kind is _OpKind.REGISTER

    def is_param(self) -> bool:
        return self._kind is _OpKind.PARAM

    def is_block(self) -> bool:
        return self._kind is _OpKind.BLOCK

    def is_edge(self) -> bool:
        return self._kind is _OpKind.EDGE

    def is_index(self) -> bool:
        return self._kind is _OpKind.INDEX

    def is_name(self) -> bool:
        return self._kind is _OpKind.NAME

    def is_typeid(self) -> bool:
        return self._kind is _OpKind.TYPEID

    @property
    def value(self) -> Value:
        return self._get(_OpKind.VALUE)

    @property
    def reg(self) -> VReg:
        return self._get(_OpKind.REGISTER)

    @property
    def param(self) -> FuncParam:
        return self._get(_OpKind.PARAM)

    @property
    def block(self) -> Any:
        return self._get(_OpKind.BLOCK)

    @property
    def edge(self) -> Any:
        return self._get(_OpKind.EDGE)

    @property
    def index(self) -> int:
        return self._get(_OpKind.INDEX)

    @property
    def name(self) -> str:
        return self._get(_OpKind.NAME)

    @property
    def type_id(self) -> TypeId:
        return self._get(_OpKind.TYPEID)


class OpCode(Enum):
    """Operation codes of instructions."""

    NONE = auto()

    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    POW = auto()
    ROOT = auto()
    AND = auto()
    OR = auto()
    XOR = auto()
    CMP_E = auto()
    CMP_L = auto()
    CMP_LE = auto()
    CMP_NE = auto()
    CMP_G = auto()
    CMP_GE = auto()

    ABS = auto()
    PLUS = auto()
    HEAD = auto()
    TAIL = auto()
    NEG = auto()
    B_NEG = auto()
    CMP_NOT = auto()
    CMP_IS = auto()

    STORE = auto()
    LOAD = auto()
    ALLOC = auto()
    ARR = auto()
    APPEND = auto()

    SELECT = auto()
    CALL = auto()
    JUMP = auto()
    RET = auto()

    PHI = auto()

    DYN_BIND = auto()

    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    FRAC = auto()
    CPLX = auto()

    TEST = auto()

    @property
    def mnemonic(self) -> str:
        return self.name.lower().replace("_", "")


_NO_RESULT = frozenset({OpCode.NONE, OpCode.STORE, OpCode.APPEND, OpCode.JUMP, OpCode.RET})


class Instruction(IrNode):
    """An operation with its operands, owned by a basic block."""

    def __init__(self, owner: Any, opcode: OpCode, operands: Iterable[Any] = ()) -> None:
        super().__init__(IrKind.INSTRUCTION)
        self.owner_block = owner
        self.opcode = opcode
        self._operands: list[Operand] = []
        for op in operands:
            self.add(op)

    def __repr__(self) -> str:
        return f"Instruction({self.opcode_str()}, {self._operands!r})"

    def __getitem__(self, idx: int) -> Operand:
        return self._operands[idx]

    def __iter__(self) -> Iterator[Operand]:
        return iter(self._operands)

    @property
    def operands(self) -> tuple[Operand, ...]:
        return tuple(self._operands)

    def add(self, op: Any) -> Instruction:
        """Append an operand; the first register of a result-producing op gets this as source."""
        operand = op if isinstance(op, Operand) else Operand(op)
        if not self._operands and self.opcode not in _NO_RESULT and operand.is_register():
            operand.reg._make_result_of(self)
        self._operands.append(operand)
        return self

    def operand_count(self) -> int:
        return len(self._operands)

    def opcode_str(self) -> str:
        return self.opcode.mnemonic

    def _neighbour(self, delta: int) -> Instruction | None:
        siblings = getattr(self.owner_block, "instructions", None)
        if siblings is None:
            return None
        for idx, instr in enumerate(siblings):
            if instr is self:
                pos = idx + delta
                return siblings[pos] if 0 <= pos < len(siblings) else None
        return None

    @property
    def next(self) -> Instruction | None:
        """The following instruction of the owner block, or None."""
        return self._neighbour(1)

    @property
    def prev(self) -> Instruction | None:
        """The preceding instruction of the owner block, or None."""
        return self._neighbour(-1)

    def _detach(self) -> None:
        for operand in self._operands:
            if operand.is_register():
                operand.reg._drop_source_if(self)


class Constant(IrNode):
    """A value interned in static storage together with its global register."""

    def __init__(self, reg: VReg, value: Value) -> None:
        super().__init__(IrKind.CONSTANT)
        self.target_reg = reg
        self.value = value