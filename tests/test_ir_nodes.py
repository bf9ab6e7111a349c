import pytest

from tnacalc.ir_nodes import (
    Constant,
    FuncParam,
    Instruction,
    IrKind,
    IrNode,
    OpCode,
    Operand,
    RegScope,
    VReg,
)
from tnacalc.value import TypeId, Value


class _Block(IrNode):
    def __init__(self):
        super().__init__(IrKind.BLOCK)
        self.instructions = []


def test_named_register():
    reg = VReg("x")
    assert reg.is_named()
    assert reg.name == "x"
    assert not reg.is_global()
    with pytest.raises(ValueError):
        reg.index


def test_indexed_global_register():
    reg = VReg(7, RegScope.GLOBAL)
    assert not reg.is_named()
    assert reg.index == 7
    assert reg.is_global()
    assert reg.kind is IrKind.REGISTER
    with pytest.raises(ValueError):
        reg.name


@pytest.mark.parametrize("key, exc", [(True, TypeError), (1.5, TypeError), (-1, ValueError)])
def test_register_rejects_bad_keys(key, exc):
    with pytest.raises(exc):
        VReg(key)


def test_register_without_source():
    reg = VReg(0)
    assert not reg.has_src()
    with pytest.raises(LookupError):
        reg.source


def test_func_param_range():
    assert FuncParam(3).value == 3
    with pytest.raises(ValueError):
        FuncParam(-1)
    with pytest.raises(ValueError):
        FuncParam(2**16)
    with pytest.raises(TypeError):
        FuncParam(True)


def test_operand_kinds():
    block = _Block()
    reg = VReg("r")
    assert Operand(Value(1)).is_value()
    assert Operand(reg).is_register()
    assert Operand(reg).reg is reg
    assert Operand(block).is_block()
    assert Operand(block).block is block
    assert Operand(FuncParam(2)).param == FuncParam(2)
    assert Operand(5).index == 5
    assert Operand("name").name == "name"
    assert Operand(TypeId.INT).type_id is TypeId.INT
    assert Operand(TypeId.INT).is_typeid()


def test_operand_wrong_accessor_raises():
    op = Operand(Value(2))
    assert not op.is_register()
    with pytest.raises(TypeError):
        op.reg
    with pytest.raises(TypeError):
        Operand("n").index


def test_operand_undef():
    assert Operand(Value()).is_undef()
    assert not Operand(Value(0)).is_undef()
    assert not Operand(3).is_undef()


@pytest.mark.parametrize("data, exc", [(True, TypeError), (-1, ValueError), (1.5, TypeError)])
def test_operand_rejects(data, exc):
    with pytest.raises(exc):
        Operand(data)


def test_instruction_result_register_gets_source():
    res = VReg(0)
    instr = Instruction(_Block(), OpCode.ADD).add(res).add(Value(1)).add(Value(2))
    assert instr.operand_count() == 3
    assert res.source is instr
    assert instr[1].value == Value(1)


def test_store_does_not_claim_register():
    target = VReg("v")
    Instruction(_Block(), OpCode.STORE, [Value(1), target])
    assert not target.has_src()


def test_global_register_never_has_source():
    reg = VReg("g", RegScope.GLOBAL)
    Instruction(_Block(), OpCode.ALLOC, [reg])
    assert not reg.has_src()


def test_opcode_str():
    assert Instruction(_Block(), OpCode.ADD).opcode_str() == "add"
    assert OpCode.CMP_E.mnemonic == "cmpe"


def test_next_and_prev_follow_owner_block():
    block = _Block()
    first = Instruction(block, OpCode.ALLOC, [VReg(0)])
    second = Instruction(block, OpCode.RET, [Value(1)])
    block.instructions.extend([first, second])
    assert first.next is second
    assert second.prev is first
    assert second.next is None
    assert first.prev is None


def test_detach_drops_source():
    reg = VReg(1)
    instr = Instruction(_Block(), OpCode.LOAD, [reg, Value(1)])
    instr._detach()
    assert not reg.has_src()


def test_constant_holds_register_and_value():
    reg = VReg("arr", RegScope.GLOBAL)
    const = Constant(reg, Value(4))
    assert const.target_reg is reg
    assert const.value == Value(4)
    assert const.kind is IrKind.CONSTANT