"""Evaluator that executes the IR one instruction at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tnacalc.arrays import ValueStore
from tnacalc.eval_stack import CallStack, Environment, StackFrame
from tnacalc.ir_builder import Cfg
from tnacalc.ir_graph import BasicBlock, Function
from tnacalc.ir_nodes import Instruction, OpCode, Operand, VReg
from tnacalc.value import TypeId, ValOps, Value, to_bool

if TYPE_CHECKING:
    from tnacalc.feedback import Feedback


_UNARY = {
    OpCode.ABS: ValOps.ABSOLUTE_VALUE,
    OpCode.CMP_NOT: ValOps.LOGICAL_NOT,
    OpCode.CMP_IS: ValOps.LOGICAL_IS,
    OpCode.PLUS: ValOps.UNARY_PLUS,
    OpCode.NEG: ValOps.UNARY_NEGATION,
    OpCode.B_NEG: ValOps.UNARY_BITWISE_NOT,
    OpCode.HEAD: ValOps.UNARY_HEAD,
    OpCode.TAIL: ValOps.POST_TAIL,
}

_BINARY = {
    OpCode.ADD: ValOps.ADDITION,
    OpCode.SUB: ValOps.SUBTRACTION,
    OpCode.MUL: ValOps.MULTIPLICATION,
    OpCode.DIV: ValOps.DIVISION,
    OpCode.MOD: ValOps.MODULO,
    OpCode.POW: ValOps.BINARY_POW,
    OpCode.ROOT: ValOps.BINARY_ROOT,
    OpCode.AND: ValOps.BITWISE_AND,
    OpCode.OR: ValOps.BITWISE_OR,
    OpCode.XOR: ValOps.BITWISE_XOR,
    OpCode.CMP_E: ValOps.EQUAL,
    OpCode.CMP_L: ValOps.REL_LESS,
    OpCode.CMP_LE: ValOps.REL_LESS_EQ,
    OpCode.CMP_NE: ValOps.N_EQUAL,
    OpCode.CMP_G: ValOps.REL_GR,
    OpCode.CMP_GE: ValOps.REL_GR_EQ,
}


@dataclass
class _Branch:
    """The block control came from and the block it is in, per active call."""

    source: BasicBlock | None
    target: BasicBlock


class IrEvaluator:
    """Executes IR functions on a call stack of frames."""

    def __init__(self, cfg: Cfg, store: ValueStore, feedback: Feedback | None = None) -> None:
        self.cfg = cfg
        self.store = store
        self._feedback = feedback
        self._env = Environment()
        self._stack = CallStack()
        self._branching: list[_Branch] = []
        self._frame: StackFrame | None = None
        self._instr: Instruction | None = None
        self._result = Value()

    @property
    def result(self) -> Value:
        """The last value stored or returned."""
        return self._result

    @property
    def current(self) -> Instruction | None:
        """The instruction to be executed next, or None."""
        return self._instr

    @property
    def environment(self) -> Environment:
        return self._env

    def clear_env(self) -> None:
        self._env.clear()

    def enter(self, func: Function) -> None:
        """Push a frame for ``func`` and move to its entry block."""
        jump_back = self._instr.next if self._instr is not None else None
        self._frame = self._stack.make_frame(func.name, func.param_count, jump_back)
        entry = func.entry
        self._branching.append(_Branch(None, entry))
        self._instr = entry.first

    def leave(self) -> None:
        """Pop the current frame and jump back to where it was entered from."""
        if self._frame is None:
            self._instr = None
            return
        self._instr = self._frame.jump_back
        self._frame = self._stack.pop_frame()
        self._branching.pop()

    def evaluate_current(self) -> None:
        while self.step():
            pass

    def step(self) -> bool:
        """Execute one instruction; False when there is nothing left to run."""
        if self._instr is None:
            return False
        self._dispatch()
        return True

    # Helpers

    def _current_frame(self) -> StackFrame:
        if self._frame is None:
            raise RuntimeError("no function has been entered")
        return self._frame

    def _get_reg(self, reg: VReg) -> int:
        reg_id = self._env.find_reg(reg)
        if reg_id is None:
            raise LookupError(f"register {reg!r} has not been allocated")
        return reg_id

    def _get_value(self, op: Operand) -> Value | None:
        if op.is_value():
            return op.value
        if op.is_register():
            return self._current_frame().value_for(self._get_reg(op.reg))
        return None

    def _require_value(self, op: Operand) -> Value:
        val = self._get_value(op)
        if val is None:
            raise ValueError(f"operand {op!r} does not hold a value")
        return val

    def _store(self, reg: int, val: Value) -> None:
        self._current_frame().store(reg, val)
        self._result = val

    def _alloc_new(self, op: Operand) -> int:
        target = op.reg
        reg_id = self._current_frame().allocate()
        self._env.map(target, reg_id)
        return reg_id

    def _jump_to(self, block: BasicBlock) -> None:
        if not self._branching:
            raise RuntimeError("jump outside of a function")
        br = self._branching[-1]
        br.source = br.target
        br.target = block
        self._instr = block.first

    def _abort(self, msg: str) -> None:
        if self._feedback is not None:
            self._feedback.error(msg)
        self._instr = None

    # Execution

    def _dispatch(self) -> None:
        instr = self._instr
        assert instr is not None
        opcode = instr.opcode

        if opcode is OpCode.JUMP:
            self._jump(instr)
            return
        if opcode is OpCode.CALL:
            self._call(instr)
            return
        if opcode is OpCode.RET:
            self._ret(instr)
            return

        if opcode is OpCode.ALLOC:
            self._alloc_new(instr[0])
        elif opcode is OpCode.STORE:
            self._store(self._get_reg(instr[1].reg), self._require_value(instr[0]))
        elif opcode is OpCode.LOAD:
            self._load(instr)
        elif opcode is OpCode.TEST:
            self._test_type(instr)
        elif opcode is OpCode.PHI:
            self._phi(instr)
        elif opcode in _UNARY:
            reg_id = self._alloc_new(instr[0])
            self._store(reg_id, self._require_value(instr[1]).unary(_UNARY[opcode]))
        elif opcode in _BINARY:
            reg_id = self._alloc_new(instr[0])
            lhs = self._require_value(instr[1])
            rhs = self._require_value(instr[2])
            self._store(reg_id, lhs.binary(_BINARY[opcode], rhs))

        self._instr = instr.next

    def _load(self, instr: Instruction) -> None:
        to, src = instr[0], instr[1]
        if not src.is_param():
            reg_id = self._alloc_new(to)
            self._store(reg_id, self._require_value(src))
            return
        self._env.map(to.reg, src.param.value)

    def _jump(self, instr: Instruction) -> None:
        if instr.operand_count() == 1:
            self._jump_to(instr[0].block)
            return
        cond = self._require_value(instr[0])
        target = instr[1] if to_bool(cond) else instr[2]
        self._jump_to(target.block)

    def _phi(self, instr: Instruction) -> None:
        reg_id = self._alloc_new(instr[0])
        if not self._branching:
            raise RuntimeError("phi outside of a function")
        came_from = self._branching[-1].source
        for op in instr.operands[1:]:
            edge = op.edge
            if edge.incoming is not came_from:
                continue
            self._store(reg_id, self._require_value(edge.value))
            return

    def _test_type(self, instr: Instruction) -> None:
        type_id = instr[1].type_id
        reg_id = self._alloc_new(instr[0])
        val = self._require_value(instr[2])
        self._store(reg_id, Value(val.id() is type_id))

    def _call(self, instr: Instruction) -> None:
        arg_count = instr.operand_count() - 2
        reg_id = self._alloc_new(instr[0])
        target: Any = (self._get_value(instr[1]) or Value()).try_get(TypeId.FUNCTION)
        if target is None:
            self._abort("call target is not a function")
            return

        func: Function = target.func
        if func.param_count != arg_count:
            self._abort(
                f"wrong number of arguments: expected {func.param_count}, got {arg_count}"
            )
            return

        caller = self._frame
        self.enter(func)
        callee = self._current_frame()
        callee.attach_ret_val(reg_id)
        self._frame = caller
        args = [self._require_value(op) for op in instr.operands[2:]]
        for arg in args:
            callee.add_arg(arg)
        self._frame = callee

    def _ret(self, instr: Instruction) -> None:
        frame = self._current_frame()
        ret_addr = frame.ret_val
        ret_val = self._require_value(instr[0])
        ret_frame = frame.prev

        if ret_frame is None:
            self._result = ret_val
            self.leave()
            return

        self._frame = ret_frame
        self._store(ret_addr, ret_val)
        self._frame = frame
        self.leave()