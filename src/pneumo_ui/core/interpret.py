"""
Result Interpretation
=====================

Maps the classifier's scalar output to a label and a confidence percentage.

Decision rule (fixed, not configurable):

- ``score > 0.5``  -> "Pneumonia", confidence ``score * 100``
- ``score <= 0.5`` -> "Normal", confidence ``(1 - score) * 100``

A score of exactly 0.5 is reported as "Normal" at 50.00%. The confidence is
therefore always in [50, 100].
"""

from dataclasses import dataclass

import numpy as np

DECISION_THRESHOLD = 0.5
POSITIVE_LABEL = "Pneumonia"
NEGATIVE_LABEL = "Normal"


@dataclass(frozen=True)
class Prediction:
    """
    Labelled classifier result.

    Attributes
    ----------
    label : str
        "Pneumonia" or "Normal"
    confidence : float
        Confidence of ``label`` in percent, 50-100
    score : float
        Raw classifier output (probability of Pneumonia)
    """

    label: str
    confidence: float
    score: float

    def to_text(self) -> str:
        return format_prediction(self)


def interpret(score: float) -> Prediction:
    """
    Interpret a classifier score.

    Arithmetic is done in float32, the precision of the classifier output.

    Examples
    --------
    >>> interpret(0.5).to_text()
    'Prediction: Normal\\nConfidence: 50.00%'
    >>> interpret(0.51).label
    'Pneumonia'
    """
    s = np.float32(score)
    if s > DECISION_THRESHOLD:
        return Prediction(POSITIVE_LABEL, float(s * np.float32(100)), float(s))
    return Prediction(NEGATIVE_LABEL, float((np.float32(1) - s) * np.float32(100)), float(s))


def format_prediction(prediction: Prediction) -> str:
    return f"Prediction: {prediction.label}\nConfidence: {prediction.confidence:.2f}%"


def format_failure(message: str) -> str:
    return f"Prediction Failed: {message}"
