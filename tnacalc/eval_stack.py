"""Register environment, stack frames and the call stack of the evaluator."""

from __future__ import annotations

from typing import Any, Hashable

from tnacalc.value import Value


class Environment:
    """Maps IR entities to the registers allocated for them."""

    def __init__(self) -> None:
        self._map: dict[Hashable, Any] = {}

    def map(self, ent: Hashable, reg: Any) -> None:
        """Bind ``ent`` to ``reg`` unless it is already bound."""
        self._map.setdefault(ent, reg)

    def find_reg(self, ent: Hashable) -> Any:
        """Return the register bound to ``ent``, or None."""
        return self._map.get(ent)

    def clear(self) -> None:
        self._map.clear()

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, ent: object) -> bool:
        return ent in self._map


class StackFrame:
    """Memory of one function invocation: arguments followed by allocated registers."""

    def __init__(
        self,
        name: str,
        param_count: int = 0,
        jump_back: Any = None,
        prev: StackFrame | None = None,
    ) -> None:
        self.name = name
        self.param_count = param_count
        self.jump_back = jump_back
        self.prev = prev
        self.ret_val: Any = None
        self._mem: list[Value] = []

    def __len__(self) -> int:
        return len(self._mem)

    def add_arg(self, value: Value) -> StackFrame:
        self._mem.append(value)
        return self

    def store(self, reg: int, value: Value) -> StackFrame:
        if not 0 <= reg < len(self._mem):
            raise IndexError(f"register {reg} is not allocated in frame {self.name!r}")
        self._mem[reg] = value
        return self

    def allocate(self) -> int:
        """Reserve a new undefined slot and return its index."""
        self._mem.append(Value())
        return len(self._mem) - 1

    def value_for(self, reg: int) -> Value:
        """Return the value in a slot, or undefined for an unknown slot."""
        if 0 <= reg < len(self._mem):
            return self._mem[reg]
        return Value()

    def attach_ret_val(self, reg: Any) -> None:
        """Remember where the caller expects the return value."""
        self.ret_val = reg


class CallStack:
    """A stack of frames, each linked to the one below it."""

    def __init__(self) -> None:
        self._frames: list[StackFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> StackFrame | None:
        return self._frames[-1] if self._frames else None

    def make_frame(self, name: str, param_count: int, jump_back: Any) -> StackFrame:
        frame = StackFrame(name, param_count, jump_back, self.top)
        self._frames.append(frame)
        return frame

    def pop_frame(self) -> StackFrame | None:
        """Remove the top frame and return the one below it, or None."""
        if not self._frames:
            return None
        return self._frames.pop().prev