# tnacalc

Building blocks of a small calculator language, usable as a library.

- `tnacalc.token`: `TokKind`, `Location` and `Token`.
- `tnacalc.ast_base` and `tnacalc.ast_expr`: syntax tree nodes. `Node` and `Scope` form the base. The expression nodes include `LitExpr`, `IdExpr`, `UnaryExpr`, `BinaryExpr`, `AssignExpr`, `CallExpr`, `CondExpr`, `CondShort`, `Matcher`, `Pattern` and `ErrorExpr`, among others.
- `tnacalc.commands`: `Command`, `Verification`, `VerResult`, `Descriptor` and `CommandStore`. A store keeps named commands together with their handlers, parameter kinds and required argument counts.
- `tnacalc.feedback`: `Feedback` holds callbacks for errors, warnings, notes, commands and file-load requests. If no callback is set, the event is ignored and `load_file` returns `False`.
- `tnacalc.value`: `Value`, `TypeId`, `ValOps`, `to_bool`, `head`, `tail` and `to_array`. A value can be undefined, bool, int, float, complex, fraction, function or array.
- `tnacalc.arrays`: `ValueStore`, `ArrayData`, `ArrayWrapper` and `FunctionType`.
- `tnacalc.ir_nodes` and `tnacalc.ir_graph`: the intermediate representation. This covers registers (`VReg`), operands (`Operand`), instructions (`Instruction`, `OpCode`), constants (`Constant`), and the graph types `BasicBlock`, `Edge` and `Function`.
- `tnacalc.ir_builder`: `IrBuilder` creates IR nodes. `Cfg` holds the modules of a program.
- `tnacalc.cfg_walker`: `CfgWalker` visits constants, functions, blocks and instructions. You supply the hooks either as callbacks or by subclassing.
- `tnacalc.ir_evaluator`: `IrEvaluator` runs IR one instruction at a time. Its call stack comes from `tnacalc.eval_stack` (`Environment`, `StackFrame`, `CallStack`).

## Installation

```
pip install .
pip install ".[test]"   # with pytest
```

## Values

```python
from tnacalc.value import Value, ValOps, to_bool

two = Value.parse_int("2", 10)
three = Value.parse_float("3.0")
total = two.binary(ValOps.ADDITION, three)          # Value(5.0)
print(total.id_str())                               # float
print(to_bool(total.binary(ValOps.REL_GR, two)))    # True
```

Some operations do not apply to their operand types. These return an undefined value, for which `bool(value)` is `False`. They do not raise.

When an operation has an array operand, it is applied to every element. For a binary operation, it is applied to every pair of elements.

## Running IR

```python
from tnacalc.arrays import ValueStore
from tnacalc.ir_builder import Cfg, IrBuilder
from tnacalc.ir_evaluator import IrEvaluator
from tnacalc.ir_nodes import OpCode
from tnacalc.value import Value

builder = IrBuilder()
cfg = Cfg(builder)
module = cfg.declare_module("main", "main", 0)
entry = module.create_block("entry")

tmp = builder.make_register(0)
builder.add_instruction(entry, OpCode.ADD).add(tmp).add(Value(2)).add(Value(3))
builder.add_instruction(entry, OpCode.RET).add(tmp)

evaluator = IrEvaluator(cfg, ValueStore())
evaluator.enter(module)
evaluator.evaluate_current()
print(evaluator.result)   # Value(5)
```

`IrEvaluator` does not execute every opcode. It handles the following:

- jumps, calls and returns;
- `ALLOC`, `STORE`, `LOAD`, `PHI` and `TEST`;
- the unary and binary arithmetic, bitwise and comparison opcodes.

Other opcodes are skipped. A call can fail because its target is not a function or because it has the wrong number of arguments. In that case the evaluator reports the failure through `Feedback.error`, if a `Feedback` was given, and then stops.

## What the package does not do

The package has no lexer or parser, so it does not turn text into tokens or syntax trees. It has no declaration or root nodes, and no builder for syntax trees. There is also no compiler from syntax trees to IR: you build IR by hand with `IrBuilder`. The package provides no command-line program and does not read source files.

## Tests

```
pytest
```