from __future__ import annotations

import numpy as np

from tilde.model import (
    ADD_LUT_GAP_LIMIT,
    SLIDER_MAX,
    SLIDER_MIN,
    Operation,
    OperandRangeError,
    alpha_add,
    alpha_carry,
    error_percent,
    gate_counts,
    lut_length,
    lut_value,
    max_value,
    slider_to_beta,
    validate_bit_width,
)

MAX_TABLE_BIT_WIDTH = 12


def slider_grid(num_points: int = 201) -> np.ndarray:
    if num_points < 2:
        raise ValueError(f"Need at least 2 grid points; got {num_points}.")
    return np.linspace(SLIDER_MIN, SLIDER_MAX, num_points)


def beta_sweep(bit_width: int = 4, num_points: int = 201) -> dict[str, np.ndarray]:
    width = validate_bit_width(bit_width)
    slider = slider_grid(num_points)
    betas = np.array([slider_to_beta(position) for position in slider], dtype=np.float64)

    def _series(func, dtype) -> np.ndarray:
        return np.fromiter((func(beta) for beta in betas), dtype=dtype, count=betas.size)

    return {
        "slider": slider,
        "beta": betas,
        "lut_length": _series(lut_length, np.int64),
        "error_percent": _series(error_percent, np.float64),
        "alpha_add": _series(alpha_add, np.int64),
        "alpha_carry": _series(alpha_carry, np.int64),
        "gate_total": _series(lambda beta: gate_counts(width, beta).total, np.int64),
    }


def _gap_lut(beta: float, size: int) -> np.ndarray:
    return np.array([lut_value(d, beta) for d in range(size)], dtype=np.int16)


def operation_table(
    operation: Operation | str,
    beta: float,
    bit_width: int,
) -> np.ndarray:
    op = Operation.parse(operation)
    width = validate_bit_width(bit_width)
    if width > MAX_TABLE_BIT_WIDTH:
        raise OperandRangeError(
            f"Operation tables are limited to {MAX_TABLE_BIT_WIDTH} bits; got {width}."
        )

    limit = max_value(width)
    size = limit + 1
    lut = _gap_lut(beta, size)

    # a runs down the rows, b across the columns; intermediates stay within int16 up to 12 bits.
    a = np.arange(size, dtype=np.int16)[:, np.newaxis]
    b = np.arange(size, dtype=np.int16)[np.newaxis, :]
    gap = np.abs(a - b)
    larger = np.maximum(a, b)
    any_zero = (a == 0) | (b == 0)

    if op is Operation.ADD:
        near = np.where(gap < ADD_LUT_GAP_LIMIT, larger + lut[gap], larger)
        raw = np.where(any_zero, larger, near)
    elif op is Operation.SUB:
        raw = np.where(a == b, 0, np.where(any_zero, larger, larger - lut[gap]))
    elif op is Operation.MUL:
        any_unit = (a == 1) | (b == 1)
        raw = np.where(any_zero, 0, np.where(any_unit, larger, a + b - 1))
    else:
        raw = np.where(
            a == 0,
            0,
            np.where(b == 0, limit, np.where(a == b, 1, a - b + 1)),
        )

    return np.clip(raw, 0, limit).astype(np.int64)
