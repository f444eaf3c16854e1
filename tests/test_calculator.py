import logging

import pytest

from tilde.calculator import (
    PRESETS,
    apply_preset,
    build_calculator_display_data,
    evaluate,
    format_expression,
)
from tilde.model import (
    BETA_MAX,
    BETA_MIN,
    BetaDomainError,
    InvalidOperationError,
    OperandRangeError,
)


def test_evaluate_default_dashboard_state() -> None:
    data = evaluate(2.5, 4, 5, 3, "add")
    assert data["result"] == 6
    assert data["max_value"] == 15
    assert data["lut_length"] == 1
    assert data["alpha_add"] == 1
    assert data["alpha_carry"] == 0
    assert data["error_percent"] == pytest.approx(300.0 / 7.0)
    assert data["mode"] == "Simplified Mode"
    assert data["gate_counts"]["total"] == 200


def test_evaluate_strict_rejections() -> None:
    with pytest.raises(BetaDomainError):
        evaluate(1.0, 4, 1, 1, "add")
    with pytest.raises(BetaDomainError):
        evaluate(31.0, 4, 1, 1, "add")
    with pytest.raises(OperandRangeError):
        evaluate(2.5, 4, 16, 1, "add")
    with pytest.raises(OperandRangeError):
        evaluate(2.5, 0, 0, 0, "add")
    with pytest.raises(InvalidOperationError):
        evaluate(2.5, 4, 1, 1, "mod")


def test_evaluate_lenient_clamps_inputs() -> None:
    data = evaluate(0.5, 4, 20, -3, "add", lenient=True)
    assert data["beta"] == BETA_MIN
    assert data["a"] == 15
    assert data["b"] == 0
    assert data["result"] == 15


def test_evaluate_lenient_unknown_operation_falls_back_to_zero(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="tilde.calculator"):
        data = evaluate(2.5, 4, 5, 3, "pow", lenient=True)
    assert data["result"] == 0
    assert data["operation"] is None
    assert "Unknown operation" in caplog.text


def test_display_data_strings() -> None:
    data = build_calculator_display_data(2.5, 4, 5, 3, "add")
    assert data["beta_text"] == "2.5000"
    assert data["error_text"] == "42.8571%"
    assert data["error_short_text"] == "42.9"
    assert data["range_text"] == "0 to 15"
    assert data["transistor_text"] == "~1440"
    assert data["expression"] == "add(5, 3) = 6"
    assert 0.0 < data["slider_position"] < 100.0


def test_format_expression_without_operation() -> None:
    assert format_expression(None, 1, 2, 0) == "?(1, 2) = 0"


def test_presets_all_evaluate() -> None:
    assert len(PRESETS) == 5
    for name, preset in PRESETS.items():
        data = apply_preset(name, 1, 1, "mul")
        assert data["beta"] == preset.beta
        assert data["bit_width"] == preset.bit_width
        assert data["result"] == 1


def test_ultra_precision_preset_uses_full_lut() -> None:
    data = apply_preset("Ultra Precision", 5, 3, "add")
    assert data["mode"] == "Full LUT Mode"
    assert data["lut_length"] > 100
    assert data["gate_counts"]["lut"] == data["lut_length"] * 12


def test_unknown_preset() -> None:
    with pytest.raises(KeyError):
        apply_preset("Quantum", 1, 1, "add")


def test_evaluate_lenient_raises_bit_width_to_one() -> None:
    data = evaluate(2.5, 0, 1, 1, "add", lenient=True)
    assert data["bit_width"] == 1
    assert data["max_value"] == 1
    assert data["result"] == 1


def test_evaluate_lenient_clamps_beta_above_range() -> None:
    data = evaluate(50.0, 4, 5, 3, "add", lenient=True)
    assert data["beta"] == BETA_MAX
    assert data["mode"] == "Simplified Mode"


def test_evaluate_lenient_logs_clamps_at_debug(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.DEBUG, logger="tilde.calculator"):
        evaluate(50.0, 0, 7, -2, "sub", lenient=True)
    messages = [record.getMessage() for record in caplog.records]
    assert all(record.levelno == logging.DEBUG for record in caplog.records)
    assert any("Clamped beta" in message for message in messages)
    assert any("Raised bit width" in message for message in messages)
    assert any("Clamped operand a=7" in message for message in messages)
    assert any("Clamped operand b=-2" in message for message in messages)


def test_evaluate_lenient_rejects_non_numeric_operands() -> None:
    with pytest.raises(OperandRangeError):
        evaluate(2.5, 4, float("nan"), 1, "add", lenient=True)
    with pytest.raises(OperandRangeError):
        evaluate(2.5, 4, 1, "three", "add", lenient=True)
    with pytest.raises(OperandRangeError):
        evaluate(2.5, "wide", 1, 1, "add", lenient=True)


def test_display_data_mode_label() -> None:
    assert build_calculator_display_data(2.5, 4, 5, 3, "add")["mode_label"] == "Simplified Mode"
    assert build_calculator_display_data(1.5, 4, 5, 3, "add")["mode_label"] == "Full LUT Mode"
