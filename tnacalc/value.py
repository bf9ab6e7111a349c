"""Runtime values and the operations defined on them."""

from __future__ import annotations

import math
import re
import sys
from enum import Enum, auto
from fractions import Fraction
from itertools import product
from typing import Any, Callable

from tnacalc.arrays import ArrayWrapper, FunctionType, ValueStore


class TypeId(Enum):
    """Type of the data a value holds."""

    INVALID = auto()
    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    COMPLEX = auto()
    FRACTION = auto()
    FUNCTION = auto()
    ARRAY = auto()


class ValOps(Enum):
    """Operations that can be applied to values."""

    INVALID_OP = auto()

    UNARY_PLUS = auto()
    UNARY_NEGATION = auto()
    UNARY_BITWISE_NOT = auto()
    LOGICAL_NOT = auto()
    LOGICAL_IS = auto()
    ABSOLUTE_VALUE = auto()
    UNARY_HEAD = auto()
    POST_TAIL = auto()

    ADDITION = auto()
    SUBTRACTION = auto()
    MULTIPLICATION = auto()
    DIVISION = auto()
    MODULO = auto()
    BITWISE_AND = auto()
    BITWISE_OR = auto()
    BITWISE_XOR = auto()
    BINARY_POW = auto()
    BINARY_ROOT = auto()
    REL_LESS = auto()
    REL_LESS_EQ = auto()
    REL_GR = auto()
    REL_GR_EQ = auto()
    EQUAL = auto()
    N_EQUAL = auto()


_TYPE_NAMES = {
    TypeId.BOOL: "bool",
    TypeId.INT: "int",
    TypeId.FLOAT: "float",
    TypeId.COMPLEX: "cplx",
    TypeId.FRACTION: "frac",
    TypeId.FUNCTION: "fn",
    TypeId.ARRAY: "arr",
}

_UNARY_OPS = frozenset(
    {
        ValOps.UNARY_PLUS,
        ValOps.UNARY_NEGATION,
        ValOps.UNARY_BITWISE_NOT,
        ValOps.LOGICAL_NOT,
        ValOps.LOGICAL_IS,
        ValOps.ABSOLUTE_VALUE,
        ValOps.UNARY_HEAD,
        ValOps.POST_TAIL,
    }
)

_COMPARISONS = frozenset(
    {
        ValOps.REL_LESS,
        ValOps.REL_LESS_EQ,
        ValOps.REL_GR,
        ValOps.REL_GR_EQ,
        ValOps.EQUAL,
        ValOps.N_EQUAL,
    }
)

_BINARY_OPS = _COMPARISONS | frozenset(
    {
        ValOps.ADDITION,
        ValOps.SUBTRACTION,
        ValOps.MULTIPLICATION,
        ValOps.DIVISION,
        ValOps.MODULO,
        ValOps.BITWISE_AND,
        ValOps.BITWISE_OR,
        ValOps.BITWISE_XOR,
        ValOps.BINARY_POW,
        ValOps.BINARY_ROOT,
    }
)

# Promotion order of numeric types: the common type of two operands is the
# one ranked higher.
_RANK = {
    TypeId.BOOL: 0,
    TypeId.INT: 1,
    TypeId.FRACTION: 2,
    TypeId.FLOAT: 3,
    TypeId.COMPLEX: 4,
}

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1
_EPS = sys.float_info.epsilon


def _type_of(raw: Any) -> TypeId | None:
    if raw is None:
        return TypeId.INVALID
    if isinstance(raw, bool):
        return TypeId.BOOL
    if isinstance(raw, int):
        return TypeId.INT
    if isinstance(raw, float):
        return TypeId.FLOAT
    if isinstance(raw, complex):
        return TypeId.COMPLEX
    if isinstance(raw, Fraction):
        return TypeId.FRACTION
    if isinstance(raw, FunctionType):
        return TypeId.FUNCTION
    if isinstance(raw, ArrayWrapper):
        return TypeId.ARRAY
    return None


# Casts


def _as_bool(raw: Any) -> bool | None:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float, complex, Fraction)):
        return raw != 0
    if isinstance(raw, ArrayWrapper):
        return len(raw) > 0 and all(to_bool(item) for item in raw)
    return None


def _as_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, Fraction):
        return int(raw)
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, complex):
        return _as_int(raw.real) if raw.imag == 0 else None
    return None


def _as_float(raw: Any) -> float | None:
    if isinstance(raw, float):
        return raw
    if isinstance(raw, (bool, int, Fraction)):
        try:
            return float(raw)
        except OverflowError:
            return math.copysign(math.inf, raw)
    if isinstance(raw, complex):
        return raw.real if raw.imag == 0 else None
    return None


def _as_fraction(raw: Any) -> Fraction | None:
    if isinstance(raw, Fraction):
        return raw
    if isinstance(raw, (bool, int)):
        return Fraction(int(raw))
    if isinstance(raw, float):
        return Fraction(raw) if math.isfinite(raw) else None
    if isinstance(raw, complex):
        return _as_fraction(raw.real) if raw.imag == 0 else None
    return None


def _as_complex(raw: Any) -> complex | None:
    if isinstance(raw, complex):
        return raw
    as_float = _as_float(raw)
    return None if as_float is None else complex(as_float)


_CASTERS: dict[TypeId, Callable[[Any], Any]] = {
    TypeId.BOOL: _as_bool,
    TypeId.INT: _as_int,
    TypeId.FLOAT: _as_float,
    TypeId.FRACTION: _as_fraction,
    TypeId.COMPLEX: _as_complex,
}


# Floating point helpers mirroring IEEE semantics instead of raising


def _feq(a: float, b: float) -> bool:
    if a == b:
        return True
    if not (math.isfinite(a) and math.isfinite(b)):
        return False
    return abs(a - b) <= _EPS * max(1.0, abs(a), abs(b))


def _ceq(a: complex, b: complex) -> bool:
    return _feq(a.real, b.real) and _feq(a.imag, b.imag)


def _fdiv(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    try:
        return a / b
    except OverflowError:
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _cdiv(a: complex, b: complex) -> complex:
    try:
        return a / b
    except (ZeroDivisionError, OverflowError):
        return complex(math.nan, math.nan)


def _fmod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _inv(x: float) -> float:
    return _fdiv(1.0, x)


def _cinv(c: complex) -> complex:
    return _cdiv(complex(1.0), c)


def _fpow(base: float, exp: float) -> float:
    try:
        return math.pow(base, exp)
    except OverflowError:
        return math.inf
    except ValueError:
        if base == 0 and exp < 0:
            return math.inf
        return math.nan


def _cpow(base: complex, exp: complex) -> complex:
    try:
        return base**exp
    except (ZeroDivisionError, OverflowError):
        return complex(math.nan, math.nan)


def _arith(x: Any) -> Any:
    return int(x) if isinstance(x, bool) else x


# Scalar operations


def _enforce_complex(base: float, exp: float) -> complex | None:
    if base > 0.0 or _feq(base, 0.0):
        return None
    root = _inv(exp)
    square = 2.0
    if not _feq(_fmod(root, square), 0.0):
        return None
    remainder = _inv(root / square)
    res = complex(0.0, _fpow(abs(base), _inv(square)))
    intrm = res if _feq(abs(remainder), 1.0) else _cpow(res, complex(remainder))
    return intrm if remainder > 0.0 else _cinv(intrm)


def _neg_root(base: float, exp: float) -> float | None:
    if base > 0.0 or _feq(base, 0.0):
        return None
    if _feq(_fmod(_inv(exp), 2.0), 0.0):
        return None
    return -_fpow(abs(base), exp)


def _power_float(base: float, exp: float) -> Value:
    cpl = _enforce_complex(base, exp)
    if cpl is not None:
        return Value(cpl)
    neg = _neg_root(base, exp)
    if neg is not None:
        return Value(neg)
    return Value(_fpow(base, exp))


def _scalar_eq(common: TypeId, a: Any, b: Any) -> bool:
    if common is TypeId.FLOAT:
        return _feq(a, b)
    if common is TypeId.COMPLEX:
        return _ceq(a, b)
    return a == b


def _divide(common: TypeId, a: Any, b: Any) -> Value:
    if common in (TypeId.BOOL, TypeId.INT, TypeId.FLOAT):
        return Value(_fdiv(float(a), float(b)))
    if common is TypeId.FRACTION:
        return Value() if b == 0 else Value(a / b)
    return Value(_cdiv(a, b))


def _modulo(common: TypeId, a: Any, b: Any) -> Value:
    if common in (TypeId.BOOL, TypeId.INT, TypeId.FLOAT):
        return Value(_fmod(float(a), float(b)))
    if common is TypeId.FRACTION:
        return Value() if b == 0 else Value(a % b)
    return Value()


def _bitwise(op: ValOps, a: Any, b: Any) -> Value:
    lhs, rhs = _as_int(a), _as_int(b)
    if lhs is None or rhs is None:
        return Value()
    if op is ValOps.BITWISE_AND:
        return Value(lhs & rhs)
    if op is ValOps.BITWISE_OR:
        return Value(lhs | rhs)
    return Value(lhs ^ rhs)


def _power(common: TypeId, a: Any, b: Any) -> Value:
    if common is TypeId.COMPLEX:
        return Value(_cpow(a, b))
    base, exp = _as_float(a), _as_float(b)
    if base is None or exp is None:
        return Value()
    return _power_float(base, exp)


def _root(common: TypeId, a: Any, b: Any) -> Value:
    if common is TypeId.COMPLEX:
        return Value(_cpow(a, _cinv(b)))
    base, exp = _as_float(a), _as_float(b)
    if base is None or exp is None:
        return Value()
    return _power_float(base, _inv(exp))


def _compare(op: ValOps, common: TypeId, a: Any, b: Any) -> Value:
    eq = _scalar_eq(common, a, b)
    if op is ValOps.EQUAL:
        return Value(eq)
    if op is ValOps.N_EQUAL:
        return Value(not eq)
    if common is TypeId.COMPLEX:
        return Value()
    less = a < b
    if op is ValOps.REL_LESS:
        return Value(less)
    if op is ValOps.REL_LESS_EQ:
        return Value(eq or less)
    if op is ValOps.REL_GR:
        return Value(not eq and not less)
    return Value(not less)


def _binary_scalar(op: ValOps, lhs: Any, rhs: Any) -> Value:
    lt, rt = _type_of(lhs), _type_of(rhs)
    if TypeId.INVALID in (lt, rt):
        return Value()

    if TypeId.FUNCTION in (lt, rt):
        if lt is not rt:
            return Value()
        if op is ValOps.EQUAL:
            return Value(lhs == rhs)
        if op is ValOps.N_EQUAL:
            return Value(lhs != rhs)
        return Value()

    common = lt if _RANK[lt] >= _RANK[rt] else rt
    caster = _CASTERS[common]
    a, b = caster(lhs), caster(rhs)
    if a is None or b is None:
        return Value()

    if op in _COMPARISONS:
        return _compare(op, common, a, b)
    if op is ValOps.ADDITION:
        return Value(_arith(a) + _arith(b))
    if op is ValOps.SUBTRACTION:
        return Value(_arith(a) - _arith(b))
    if op is ValOps.MULTIPLICATION:
        return Value(_arith(a) * _arith(b))
    if op is ValOps.DIVISION:
        return _divide(common, a, b)
    if op is ValOps.MODULO:
        return _modulo(common, a, b)
    if op in (ValOps.BITWISE_AND, ValOps.BITWISE_OR, ValOps.BITWISE_XOR):
        return _bitwise(op, a, b)
    if op is ValOps.BINARY_POW:
        return _power(common, a, b)
    if op is ValOps.BINARY_ROOT:
        return _root(common, a, b)
    return Value()


def _unary_scalar(op: ValOps, raw: Any) -> Value:
    tid = _type_of(raw)
    if tid is TypeId.INVALID:
        return Value()

    if op is ValOps.LOGICAL_NOT:
        as_bool = _as_bool(raw)
        return Value(not as_bool if as_bool is not None else True)
    if op is ValOps.LOGICAL_IS:
        return Value(bool(_as_bool(raw)))
    if op is ValOps.UNARY_HEAD:
        return Value(raw)
    if op is ValOps.POST_TAIL:
        return Value()

    if tid is TypeId.FUNCTION:
        return Value()

    if op is ValOps.UNARY_PLUS:
        return Value(_arith(raw))
    if op is ValOps.UNARY_NEGATION:
        return Value(-_arith(raw))
    if op is ValOps.UNARY_BITWISE_NOT:
        as_int = _as_int(raw)
        return Value() if as_int is None else Value(~as_int)
    if op is ValOps.ABSOLUTE_VALUE:
        return Value(abs(_arith(raw)))
    return Value()


# Array operations


def _array_eq(lhs: ArrayWrapper, rhs: ArrayWrapper, for_equality: bool) -> Value:
    if lhs.id == rhs.id:
        return Value(for_equality)
    if len(lhs) != len(rhs):
        return Value(not for_equality)
    for le, re_ in zip(lhs, rhs):
        if not to_bool(le.binary(ValOps.EQUAL, re_)):
            return Value(not for_equality)
    return Value(for_equality)


def _array_rel(lhs: ArrayWrapper, rhs: ArrayWrapper, op: ValOps) -> Value:
    """Strict less or greater: the first element pair that satisfies it decides."""
    if lhs.id == rhs.id:
        return Value.false_val()
    for lv, rv in zip(lhs, rhs):
        if to_bool(lv.binary(op, rv)):
            return Value.true_val()
    if op is ValOps.REL_LESS:
        return Value(len(lhs) < len(rhs))
    return Value(len(lhs) > len(rhs))


def _array_compare(op: ValOps, lhs: ArrayWrapper, rhs: ArrayWrapper) -> Value:
    if op is ValOps.EQUAL:
        return _array_eq(lhs, rhs, True)
    if op is ValOps.N_EQUAL:
        return _array_eq(lhs, rhs, False)
    if op in (ValOps.REL_LESS, ValOps.REL_GR):
        return _array_rel(lhs, rhs, op)
    strict = ValOps.REL_LESS if op is ValOps.REL_LESS_EQ else ValOps.REL_GR
    if to_bool(_array_rel(lhs, rhs, strict)):
        return Value.true_val()
    return _array_eq(lhs, rhs, True)


class Value:
    """A runtime value: undefined, bool, int, float, complex, fraction, function or array."""

    __slots__ = ("_raw",)

    def __init__(self, raw: Any = None) -> None:
        if _type_of(raw) is None:
            raise TypeError(f"unsupported value type: {type(raw).__name__}")
        self._raw = raw

    @property
    def raw(self) -> Any:
        """The underlying Python object; None for an undefined value."""
        return self._raw

    def __bool__(self) -> bool:
        """True unless the value is undefined."""
        return self._raw is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        lt, rt = self.id(), other.id()
        if lt is not rt:
            return False
        if lt is TypeId.ARRAY:
            return list(self._raw) == list(other._raw)
        return self._raw == other._raw

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.id() is TypeId.ARRAY:
            return f"Value({list(self._raw)!r})"
        return f"Value({self._raw!r})"

    def id(self) -> TypeId:
        return _type_of(self._raw)  # type: ignore[return-value]

    def id_str(self) -> str:
        return _TYPE_NAMES.get(self.id(), "undef")

    def try_get(self, kind: TypeId) -> Any:
        """Return the underlying object if the value has the given type, else None."""
        return self._raw if self.id() is kind else None

    # Construction

    @staticmethod
    def parse_int(src: str, base: int) -> Value:
        """Parse an integer literal, skipping the prefix its base implies."""
        if not 2 <= base <= 36:
            raise ValueError(f"unsupported base {base}")
        prefix = 2 if base in (2, 16) else 1 if base == 8 else 0
        text = src[prefix:]
        negative = text.startswith("-")
        if negative:
            text = text[1:]
        count = 0
        for ch in text:
            try:
                digit = int(ch, 36)
            except ValueError:
                break
            if digit >= base:
                break
            count += 1
        if not count:
            return Value()
        result = int(text[:count], base)
        if negative:
            result = -result
        if not _INT_MIN <= result <= _INT_MAX:
            return Value()
        return Value(result)

    @staticmethod
    def parse_float(src: str) -> Value:
        """Parse the longest floating point literal at the start of ``src``."""
        match = _FLOAT_RE.match(src)
        if not match:
            return Value()
        text = match.group(0)
        lowered = text.lower()
        if "nan" in lowered:
            return Value(-math.nan if lowered.startswith("-") else math.nan)
        result = float(text)
        if "inf" in lowered:
            return Value(result)
        mantissa = lowered.split("e", 1)[0]
        if math.isinf(result):
            return Value()
        if result == 0.0 and any(ch in "123456789" for ch in mantissa):
            return Value()
        return Value(result)

    @staticmethod
    def pi() -> Value:
        return Value(math.pi)

    @staticmethod
    def e() -> Value:
        return Value(math.e)

    @staticmethod
    def i() -> Value:
        return Value(complex(0, 1))

    @staticmethod
    def true_val() -> Value:
        return Value(True)

    @staticmethod
    def false_val() -> Value:
        return Value(False)

    @staticmethod
    def function(func: Any) -> Value:
        return Value(FunctionType(func))

    @staticmethod
    def array(wrapper: ArrayWrapper) -> Value:
        return Value(wrapper)

    # Evaluation

    def unary(self, op: ValOps) -> Value:
        """Apply a unary operation; arrays apply it element by element."""
        if self.id() is TypeId.ARRAY:
            return self._unary_as_array(op)
        if op not in _UNARY_OPS:
            return Value()
        return _unary_scalar(op, self._raw)

    def binary(self, op: ValOps, rhs: Value) -> Value:
        """Apply a binary operation; an array operand combines every pair of elements."""
        if self.id() is TypeId.ARRAY or rhs.id() is TypeId.ARRAY:
            return self._binary_as_array(op, rhs)
        if op not in _BINARY_OPS:
            return Value()
        return _binary_scalar(op, self._raw, rhs._raw)

    def _unary_as_array(self, op: ValOps) -> Value:
        arr: ArrayWrapper = self._raw
        if op in (ValOps.LOGICAL_IS, ValOps.LOGICAL_NOT):
            return Value(bool(_as_bool(arr))).unary(op)
        if op is ValOps.UNARY_HEAD:
            return head(arr)
        if op is ValOps.POST_TAIL:
            return tail(arr)

        store = arr.val_store
        res_data = store.allocate_array(len(arr))
        for item in arr:
            res_data.add(item.unary(op))
        return Value(store.wrap(res_data))

    def _binary_as_array(self, op: ValOps, rhs: Value) -> Value:
        store = self._extract_store() or rhs._extract_store()
        if store is None or not self or not rhs:
            return Value()
        larr = to_array(store, self)
        rarr = to_array(store, rhs)

        if op in _COMPARISONS:
            return _array_compare(op, larr, rarr)

        if not len(larr) or not len(rarr):
            return Value()

        res_data = store.allocate_array(len(larr) * len(rarr))
        for li, ri in product(larr, rarr):
            res_data.add(li.binary(op, ri))
        return Value(store.wrap(res_data))

    def _extract_store(self) -> ValueStore | None:
        arr = self.try_get(TypeId.ARRAY)
        return arr.val_store if arr is not None else None


_FLOAT_RE = re.compile(
    r"-?(?:inf(?:inity)?|nan(?:\([0-9a-z_]*\))?|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)",
    re.IGNORECASE,
)


def to_bool(val: Value) -> bool:
    """Truth of a value; undefined and non-convertible values are false."""
    return bool(_as_bool(val.raw))


def head(arr: ArrayWrapper) -> Value:
    """First element of an array, or undefined if it is empty."""
    if not len(arr):
        return Value()
    return arr[0]


def tail(arr: ArrayWrapper) -> Value:
    """Everything after the first element.

    Undefined for arrays shorter than two, the element itself for two,
    and a view of the same storage otherwise.
    """
    size = len(arr)
    if size < 2:
        return Value()
    if size == 2:
        return arr[1]
    return Value(arr.val_store.wrap(arr.data, arr.offset + 1, size - 1))


def to_array(store: ValueStore, val: Value) -> ArrayWrapper:
    """Return the array a value holds, or wrap the value in a one-element array."""
    if val.id() is TypeId.ARRAY:
        return val.raw
    data = store.allocate_array(1)
    data.add(val)
    return store.wrap(data)