from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from tilde.model import (
    Beta,
    InvalidOperationError,
    Operation,
    OperandRangeError,
    alpha_add,
    alpha_carry,
    apply_operation,
    beta_to_slider,
    error_percent,
    gate_counts,
    lut_length,
    max_value,
    mode_label,
    transistor_estimate,
    validate_bit_width,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    name: str
    beta: float
    bit_width: int


PRESETS: dict[str, Preset] = {
    preset.name: preset
    for preset in (
        Preset(name="AI/ML Inference", beta=2.5, bit_width=4),
        Preset(name="High Efficiency", beta=4.0, bit_width=4),
        Preset(name="IoT Sensors", beta=1.5, bit_width=5),
        Preset(name="MIDI Music", beta=1.4, bit_width=6),
        Preset(name="Ultra Precision", beta=1.05, bit_width=8),
    )
}


def _lenient_beta(beta: float) -> Beta:
    clamped = Beta.clamped(beta)
    if clamped.value != beta:
        logger.debug("Clamped beta %r to %r", beta, clamped.value)
    return clamped


def _to_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise OperandRangeError(f"{name} must be an integer; got {value!r}.") from exc


def _lenient_bit_width(bit_width: int) -> int:
    width = max(1, _to_int(bit_width, "Bit width"))
    if width != bit_width:
        logger.debug("Raised bit width %r to %d", bit_width, width)
    return width


def _lenient_operand(value: int, limit: int, name: str) -> int:
    clamped = min(max(0, _to_int(value, name)), limit)
    if clamped != value:
        logger.debug("Clamped operand %s=%r into [0, %d]", name, value, limit)
    return clamped


def evaluate(
    beta: float,
    bit_width: int,
    a: int,
    b: int,
    operation: Operation | str,
    *,
    lenient: bool = False,
) -> dict[str, Any]:
    """Compute the result of one calculator step with every derived metric.

    Strict by default: invalid beta, bit width, operands or operation raise a
    ``TildeModelError``. With ``lenient=True`` inputs are clamped into range
    and an unknown operation produces 0.
    """
    op: Operation | None
    if lenient:
        checked_beta = _lenient_beta(beta)
        width = _lenient_bit_width(bit_width)
        limit = max_value(width)
        a = _lenient_operand(a, limit, "a")
        b = _lenient_operand(b, limit, "b")
        try:
            op = Operation.parse(operation)
        except InvalidOperationError:
            logger.warning("Unknown operation %r; result falls back to 0", operation)
            op = None
    else:
        checked_beta = Beta(beta)
        width = validate_bit_width(bit_width)
        limit = max_value(width)
        op = Operation.parse(operation)

    beta_value = checked_beta.value
    result = 0 if op is None else apply_operation(op, a, b, beta_value, width)

    return {
        "beta": beta_value,
        "bit_width": width,
        "a": a,
        "b": b,
        "operation": None if op is None else op.value,
        "max_value": limit,
        "result": result,
        "lut_length": lut_length(beta_value),
        "alpha_add": alpha_add(beta_value),
        "alpha_carry": alpha_carry(beta_value),
        "error_percent": error_percent(beta_value),
        "mode": mode_label(beta_value),
        "gate_counts": gate_counts(width, beta_value).as_dict(),
    }


def format_expression(operation: str | None, a: int, b: int, result: int) -> str:
    name = operation if operation is not None else "?"
    return f"{name}({a}, {b}) = {result}"


def build_calculator_display_data(
    beta: float,
    bit_width: int,
    a: int,
    b: int,
    operation: Operation | str,
    *,
    lenient: bool = False,
) -> dict[str, Any]:
    data = evaluate(beta, bit_width, a, b, operation, lenient=lenient)
    total = data["gate_counts"]["total"]

    data.update(
        {
            "mode_label": data["mode"],
            "beta_text": f"{data['beta']:.4f}",
            "error_text": f"{data['error_percent']:.4f}%",
            "error_short_text": f"{data['error_percent']:.1f}",
            "range_text": f"0 to {data['max_value']}",
            "transistor_text": f"~{transistor_estimate(total)}",
            "expression": format_expression(
                data["operation"], data["a"], data["b"], data["result"]
            ),
            "slider_position": beta_to_slider(data["beta"]),
        }
    )
    return data


def apply_preset(
    name: str,
    a: int,
    b: int,
    operation: Operation | str,
    *,
    lenient: bool = False,
) -> dict[str, Any]:
    try:
        preset = PRESETS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name!r}") from exc
    return build_calculator_display_data(
        preset.beta, preset.bit_width, a, b, operation, lenient=lenient
    )
