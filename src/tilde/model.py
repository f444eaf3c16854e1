from __future__ import annotations

import enum
import math
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Callable

import numpy as np

BETA_MIN = 1.02
BETA_MAX = 30.0
EFFICIENCY_THRESHOLD = 2.0

SLIDER_MIN = 0.0
SLIDER_MAX = 100.0

# Gap beyond which addition ignores the LUT correction.
ADD_LUT_GAP_LIMIT = 8
LUT_SCALE = 8

GATE_TO_TRANSISTOR_FACTOR = 1.8
TRANSISTORS_PER_GATE = 4

_LOG_SLIDER_MIN = math.log(BETA_MIN - 1.0)
_LOG_SLIDER_MAX = math.log(BETA_MAX - 1.0)


class TildeModelError(ValueError):
    """Base class for invalid inputs to the Tilde model."""


class BetaDomainError(TildeModelError):
    pass


class OperandRangeError(TildeModelError):
    pass


class InvalidOperationError(TildeModelError):
    pass


class Operation(str, enum.Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"

    @classmethod
    def parse(cls, value: Operation | str) -> Operation:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            valid = ", ".join(op.value for op in cls)
            raise InvalidOperationError(
                f"Unknown operation {value!r}; expected one of: {valid}."
            ) from exc


def _require_finite(beta: float) -> float:
    try:
        value = float(beta)
    except (TypeError, ValueError) as exc:
        raise BetaDomainError(f"Beta must be a real number; got {beta!r}.") from exc
    if not math.isfinite(value):
        raise BetaDomainError(f"Beta must be finite; got {beta!r}.")
    return value


def _require_above_one(beta: float) -> float:
    value = _require_finite(beta)
    if value <= 1.0:
        raise BetaDomainError(f"Beta must be greater than 1; got {beta!r}.")
    return value


@dataclass(frozen=True)
class Beta:
    """Validated base parameter, restricted to [BETA_MIN, BETA_MAX]."""

    value: float

    def __post_init__(self) -> None:
        value = _require_above_one(self.value)
        if not BETA_MIN <= value <= BETA_MAX:
            raise BetaDomainError(
                f"Beta must lie in [{BETA_MIN}, {BETA_MAX}]; got {self.value!r}."
            )
        object.__setattr__(self, "value", value)

    @classmethod
    def from_slider(cls, position: float) -> Beta:
        return cls(slider_to_beta(position))

    @classmethod
    def clamped(cls, beta: float) -> Beta:
        try:
            value = float(beta)
        except (TypeError, ValueError) as exc:
            raise BetaDomainError(f"Beta must be a real number; got {beta!r}.") from exc
        if math.isnan(value):
            raise BetaDomainError("Beta must not be NaN.")
        return cls(min(BETA_MAX, max(BETA_MIN, value)))

    @property
    def slider(self) -> float:
        return beta_to_slider(self.value)

    @property
    def simplified(self) -> bool:
        return is_simplified(self.value)


def beta_to_slider(beta: float) -> float:
    value = _require_finite(beta)
    if value <= BETA_MIN:
        return SLIDER_MIN
    if value >= BETA_MAX:
        return SLIDER_MAX

    log_beta = math.log(value - 1.0)
    return ((log_beta - _LOG_SLIDER_MIN) / (_LOG_SLIDER_MAX - _LOG_SLIDER_MIN)) * SLIDER_MAX


def slider_to_beta(position: float) -> float:
    value = float(position)
    if not math.isfinite(value):
        raise BetaDomainError(f"Slider position must be finite; got {position!r}.")

    log_beta = _LOG_SLIDER_MIN + (value / SLIDER_MAX) * (_LOG_SLIDER_MAX - _LOG_SLIDER_MIN)
    return max(BETA_MIN, min(BETA_MAX, 1.0 + math.exp(log_beta)))


def is_simplified(beta: float) -> bool:
    return _require_above_one(beta) >= EFFICIENCY_THRESHOLD


def mode_label(beta: float) -> str:
    return "Simplified Mode" if is_simplified(beta) else "Full LUT Mode"


def lut_length(beta: float) -> int:
    value = _require_above_one(beta)
    if value >= EFFICIENCY_THRESHOLD:
        return 1
    return max(1, math.floor(LUT_SCALE / (value - 1.0)))


def lut_value(d: int, beta: float) -> int:
    value = _require_above_one(beta)
    if d < 0:
        raise OperandRangeError(f"Gap must be non-negative; got {d}.")
    if value >= EFFICIENCY_THRESHOLD and d > 0:
        return 1
    return min(d, math.floor(math.log(d + 1) / math.log(value)))


def _log_ratio(beta: float) -> float:
    value = _require_above_one(beta)
    return -math.log(0.5 * (value - 1.0)) / math.log(value)


def alpha_add(beta: float) -> int:
    return math.ceil(_log_ratio(beta))


def alpha_carry(beta: float) -> int:
    return math.floor(_log_ratio(beta))


def error_percent(beta: float) -> float:
    value = _require_above_one(beta)
    return 100.0 * (value - 1.0) / (value + 1.0)


def _is_integer(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def validate_bit_width(bit_width: int) -> int:
    if not _is_integer(bit_width):
        raise OperandRangeError(f"Bit width must be an integer; got {bit_width!r}.")
    if bit_width < 1:
        raise OperandRangeError(f"Bit width must be at least 1; got {bit_width}.")
    return int(bit_width)


def max_value(bit_width: int) -> int:
    return (1 << validate_bit_width(bit_width)) - 1


def validate_operand(value: int, bit_width: int, name: str = "operand") -> int:
    limit = max_value(bit_width)
    if not _is_integer(value):
        raise OperandRangeError(f"{name} must be an integer; got {value!r}.")
    if not 0 <= value <= limit:
        raise OperandRangeError(
            f"{name} must lie in [0, {limit}] for {bit_width}-bit width; got {value}."
        )
    return int(value)


@dataclass(frozen=True)
class OperandTerms:
    a: int
    b: int
    a_zero: bool
    b_zero: bool
    a_unit: bool
    b_unit: bool
    equal: bool
    gap: int
    larger: int


def operand_terms(a: int, b: int) -> OperandTerms:
    return OperandTerms(
        a=a,
        b=b,
        a_zero=a == 0,
        b_zero=b == 0,
        a_unit=a == 1,
        b_unit=b == 1,
        equal=a == b,
        gap=abs(a - b),
        larger=max(a, b),
    )


def tilde_add(terms: OperandTerms, beta: float, limit: int) -> int:
    if terms.a_zero or terms.b_zero:
        return terms.larger
    if terms.gap < ADD_LUT_GAP_LIMIT:
        return terms.larger + lut_value(terms.gap, beta)
    return terms.larger


def tilde_sub(terms: OperandTerms, beta: float, limit: int) -> int:
    if terms.equal:
        return 0
    if terms.a_zero or terms.b_zero:
        return terms.larger
    return terms.larger - lut_value(terms.gap, beta)


def tilde_mul(terms: OperandTerms, beta: float, limit: int) -> int:
    if terms.a_zero or terms.b_zero:
        return 0
    if terms.a_unit or terms.b_unit:
        return terms.larger
    return terms.a + terms.b - 1


def tilde_div(terms: OperandTerms, beta: float, limit: int) -> int:
    if terms.a_zero:
        return 0
    if terms.b_zero:
        # Division by zero saturates to the largest representable value.
        return limit
    if terms.equal:
        return 1
    return terms.a - terms.b + 1


OPERATION_RULES: dict[Operation, Callable[[OperandTerms, float, int], int]] = {
    Operation.ADD: tilde_add,
    Operation.SUB: tilde_sub,
    Operation.MUL: tilde_mul,
    Operation.DIV: tilde_div,
}


def clamp_result(value: int, limit: int) -> int:
    return min(max(0, value), limit)


def apply_operation(
    operation: Operation | str,
    a: int,
    b: int,
    beta: float,
    bit_width: int,
) -> int:
    op = Operation.parse(operation)
    _require_above_one(beta)
    limit = max_value(bit_width)
    a = validate_operand(a, bit_width, "a")
    b = validate_operand(b, bit_width, "b")

    raw = OPERATION_RULES[op](operand_terms(a, b), beta, limit)
    return clamp_result(raw, limit)


@dataclass(frozen=True)
class GateCounts:
    shared: int
    add: int
    sub: int
    mul: int
    div: int
    decoder: int
    mux: int
    control: int
    base: int
    lut: int
    total: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@lru_cache(maxsize=256)
def _gate_counts(bit_width: int, beta: float) -> GateCounts:
    shared = round(bit_width * 6 + 32)
    add = round(bit_width * 3 + 16)
    sub = round(bit_width * 4 + 20)
    mul = round(bit_width * 2 + 12)
    div = round(bit_width * 2 + 12)
    decoder = 12
    mux = round(bit_width * 6)

    base = shared + add + sub + mul + div + decoder + mux
    per_entry = 4 if beta >= EFFICIENCY_THRESHOLD else 12
    lut = round(lut_length(beta) * per_entry)

    return GateCounts(
        shared=shared,
        add=add,
        sub=sub,
        mul=mul,
        div=div,
        decoder=decoder,
        mux=mux,
        control=decoder + mux,
        base=base,
        lut=lut,
        total=base + lut,
    )


def gate_counts(bit_width: int, beta: float) -> GateCounts:
    return _gate_counts(validate_bit_width(bit_width), _require_above_one(beta))


def transistor_estimate(total_gates: int) -> int:
    return math.floor(total_gates * GATE_TO_TRANSISTOR_FACTOR * TRANSISTORS_PER_GATE + 0.5)
