"""
Result interpretation tests: threshold boundary, confidence range, formatting
"""
import numpy as np
import pytest

from pneumo_ui.core.interpret import (
    Prediction,
    format_failure,
    format_prediction,
    interpret,
)


class TestInterpret:

    def test_midpoint_is_normal(self):
        p = interpret(0.5)
        assert p.label == "Normal"
        assert p.confidence == pytest.approx(50.0)
        assert p.to_text() == "Prediction: Normal\nConfidence: 50.00%"

    def test_just_above_midpoint_is_pneumonia(self):
        p = interpret(0.51)
        assert p.label == "Pneumonia"
        assert f"{p.confidence:.2f}" == "51.00"

    def test_just_below_midpoint_is_normal(self):
        p = interpret(0.49)
        assert p.label == "Normal"
        assert f"{p.confidence:.2f}" == "51.00"

    def test_smallest_float32_above_midpoint(self):
        s = float(np.nextafter(np.float32(0.5), np.float32(1.0)))
        assert interpret(s).label == "Pneumonia"

    @pytest.mark.parametrize("score,label,confidence", [
        (0.0, "Normal", 100.0),
        (1.0, "Pneumonia", 100.0),
        (0.875, "Pneumonia", 87.5),
        (0.125, "Normal", 87.5),
    ])
    def test_extremes(self, score, label, confidence):
        p = interpret(score)
        assert p.label == label
        assert p.confidence == pytest.approx(confidence)
        assert p.score == pytest.approx(score)

    def test_confidence_always_at_least_50(self):
        for s in np.linspace(0.0, 1.0, 1001):
            p = interpret(float(s))
            assert 50.0 <= p.confidence <= 100.0
            assert p.label == ("Pneumonia" if s > 0.5 else "Normal")

    def test_idempotent(self):
        assert interpret(0.7312) == interpret(0.7312)
        assert interpret(0.7312).to_text() == interpret(0.7312).to_text()

    def test_accepts_numpy_scalars(self):
        assert interpret(np.float32(0.9)).label == "Pneumonia"


class TestFormatting:

    def test_two_decimals(self):
        p = Prediction("Pneumonia", 93.4, 0.934)
        assert format_prediction(p) == "Prediction: Pneumonia\nConfidence: 93.40%"

    def test_failure_message(self):
        assert format_failure("model missing") == "Prediction Failed: model missing"
