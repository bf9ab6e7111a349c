import pytest

from tnacalc.arrays import ValueStore
from tnacalc.feedback import Feedback
from tnacalc.ir_builder import Cfg, IrBuilder
from tnacalc.ir_evaluator import IrEvaluator
from tnacalc.ir_nodes import FuncParam, OpCode
from tnacalc.value import TypeId, ValOps, Value


@pytest.fixture
def ir():
    builder = IrBuilder()
    return builder, Cfg(builder)


def emit(builder, block, opcode, *operands):
    instr = builder.add_instruction(block, opcode)
    for op in operands:
        instr.add(op)
    return instr


def run(cfg, module, feedback=None):
    ev = IrEvaluator(cfg, ValueStore(), feedback)
    ev.enter(module)
    ev.evaluate_current()
    return ev


def test_add_and_return(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    r1, r2, r3 = (b.make_register(i) for i in range(3))
    emit(b, entry, OpCode.LOAD, r1, Value(2))
    emit(b, entry, OpCode.LOAD, r2, Value(3))
    emit(b, entry, OpCode.ADD, r3, r1, r2)
    emit(b, entry, OpCode.RET, r3)
    ev = run(cfg, mod)
    assert ev.result == Value(5)
    assert ev.current is None


@pytest.mark.parametrize(
    "opcode, op",
    [
        (OpCode.NEG, ValOps.UNARY_NEGATION),
        (OpCode.B_NEG, ValOps.UNARY_BITWISE_NOT),
        (OpCode.CMP_NOT, ValOps.LOGICAL_NOT),
        (OpCode.ABS, ValOps.ABSOLUTE_VALUE),
    ],
)
def test_unary_ops(ir, opcode, op):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    res = b.make_register("res")
    emit(b, entry, opcode, res, Value(-7))
    emit(b, entry, OpCode.RET, res)
    assert run(cfg, mod).result == Value(-7).unary(op)


@pytest.mark.parametrize(
    "opcode, op",
    [
        (OpCode.SUB, ValOps.SUBTRACTION),
        (OpCode.MUL, ValOps.MULTIPLICATION),
        (OpCode.DIV, ValOps.DIVISION),
        (OpCode.XOR, ValOps.BITWISE_XOR),
        (OpCode.CMP_L, ValOps.REL_LESS),
        (OpCode.CMP_GE, ValOps.REL_GR_EQ),
    ],
)
def test_binary_ops(ir, opcode, op):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    res = b.make_register("res")
    emit(b, entry, opcode, res, Value(7), Value(2))
    emit(b, entry, OpCode.RET, res)
    assert run(cfg, mod).result == Value(7).binary(op, Value(2))


def test_alloc_and_store(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    var = b.make_register("x")
    emit(b, entry, OpCode.ALLOC, var)
    emit(b, entry, OpCode.STORE, Value(9), var)
    emit(b, entry, OpCode.RET, var)
    assert run(cfg, mod).result == Value(9)


def test_result_tracks_last_store_without_ret(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    emit(b, entry, OpCode.LOAD, b.make_register(0), Value(4))
    ev = run(cfg, mod)
    assert ev.result == Value(4)
    assert ev.step() is False


@pytest.mark.parametrize("type_id, expected", [(TypeId.INT, True), (TypeId.FLOAT, False)])
def test_type_test(ir, type_id, expected):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    res = b.make_register("res")
    emit(b, entry, OpCode.TEST, res, type_id, Value(3))
    emit(b, entry, OpCode.RET, res)
    assert run(cfg, mod).result == Value(expected)


@pytest.mark.parametrize("flag, chosen", [(True, 10), (False, 20)])
def test_branch_and_phi(ir, flag, chosen):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    then = mod.create_block("then")
    other = mod.create_block("else")
    merge = mod.create_block("merge")
    cond = b.make_register("cond")
    emit(b, entry, OpCode.LOAD, cond, Value(flag))
    emit(b, entry, OpCode.JUMP, cond, then, other)
    cfg.connect(entry, then, Value())
    cfg.connect(entry, other, Value())
    emit(b, then, OpCode.JUMP, merge)
    emit(b, other, OpCode.JUMP, merge)
    e_then = cfg.connect(then, merge, Value(10))
    e_else = cfg.connect(other, merge, Value(20))
    phi = b.make_register("phi")
    emit(b, merge, OpCode.PHI, phi, e_then, e_else)
    emit(b, merge, OpCode.RET, phi)
    assert run(cfg, mod).result == Value(chosen)


def build_callee(b, cfg, mod):
    fn = cfg.declare_function("f", mod, "ident", 1)
    entry = fn.create_block("fentry")
    par = b.make_register("par")
    emit(b, entry, OpCode.LOAD, par, FuncParam(0))
    emit(b, entry, OpCode.RET, par)
    return fn


def test_call_returns_argument(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    fn = build_callee(b, cfg, mod)
    callee = b.make_register("callee")
    out = b.make_register("out")
    emit(b, entry, OpCode.LOAD, callee, Value.function(fn))
    emit(b, entry, OpCode.CALL, out, callee, Value(21))
    emit(b, entry, OpCode.RET, out)
    ev = run(cfg, mod)
    assert ev.result == Value(21)
    assert ev.current is None


def test_call_with_wrong_arg_count_aborts(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    fn = build_callee(b, cfg, mod)
    callee = b.make_register("callee")
    emit(b, entry, OpCode.LOAD, callee, Value.function(fn))
    emit(b, entry, OpCode.CALL, b.make_register("out"), callee)
    emit(b, entry, OpCode.RET, callee)
    messages = []
    fb = Feedback()
    fb.on_error(messages.append)
    ev = run(cfg, mod, fb)
    assert len(messages) == 1
    assert ev.step() is False


def test_call_of_non_function_aborts(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    emit(b, entry, OpCode.CALL, b.make_register("out"), Value(3))
    ev = run(cfg, mod)
    assert ev.current is None
    assert ev.step() is False


def test_unknown_register_raises(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    emit(b, entry, OpCode.STORE, Value(1), b.make_register("nowhere"))
    ev = IrEvaluator(cfg, ValueStore())
    ev.enter(mod)
    with pytest.raises(LookupError):
        ev.evaluate_current()


def test_stepping(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    first = emit(b, entry, OpCode.LOAD, b.make_register(0), Value(1))
    second = emit(b, entry, OpCode.LOAD, b.make_register(1), Value(2))
    ev = IrEvaluator(cfg, ValueStore())
    assert ev.step() is False
    ev.enter(mod)
    assert ev.current is first
    assert ev.step() is True
    assert ev.current is second
    assert ev.result == Value(1)


def test_leave_without_frame(ir):
    _, cfg = ir
    ev = IrEvaluator(cfg, ValueStore())
    ev.leave()
    assert ev.current is None
    assert ev.step() is False


def test_clear_env(ir):
    b, cfg = ir
    mod = cfg.declare_module("m", "main", 0)
    entry = mod.create_block("entry")
    reg = b.make_register(0)
    emit(b, entry, OpCode.LOAD, reg, Value(1))
    ev = run(cfg, mod)
    assert reg in ev.environment
    ev.clear_env()
    assert len(ev.environment) == 0