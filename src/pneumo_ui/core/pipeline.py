"""
Inference Pipeline
==================

The single stateful object of the application. It holds the current source
image and the current result text, and runs the three user actions:

1. ``select_image`` : load a file as the current source image
2. ``predict``      : preprocess -> infer -> interpret
3. ``export_report``: write the current result as a one-page PDF

Every action runs to completion on the calling thread and returns a
``PipelineOutcome``. This is the only place where pipeline errors are caught:
lower layers raise ``PipelineError`` subclasses, and each one is logged here
and converted to a user-facing message. No action raises.

Examples
--------
>>> from pneumo_ui.core.pipeline import InferencePipeline
>>>
>>> pipe = InferencePipeline(model_path="~/.pneumoscan/models/xray_model.tflite")
>>> pipe.select_image("xray.png").ok
True
>>> print(pipe.predict().message)
Prediction: Pneumonia
Confidence: 93.41%
>>> doc = pipe.export_report().document
>>> print(doc.path.name)
Xray_Report_1760800000000.pdf
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .classifier import ClassifierAdapter
from .errors import (
    ExportError,
    ImageDecodeError,
    InferenceError,
    NothingToExportError,
    PipelineError,
)
from .image_io import load_source_image
from .interpret import Prediction, format_failure, interpret
from .preprocessing import preprocess
from .report import ReportDocument, export_report

logger = logging.getLogger(__name__)

MSG_SELECT_FIRST = "Please select an image first!"
MSG_NOTHING_TO_SHARE = "No prediction to share!"


@dataclass(frozen=True)
class PipelineOutcome:
    """
    Result of one user action.

    Attributes
    ----------
    ok : bool
        True if the action succeeded
    message : str
        Text to show to the user
    prediction : Prediction, optional
        Set by a successful ``predict``
    document : ReportDocument, optional
        Set by a successful ``export_report``
    error : str, optional
        ``kind`` of the error that caused a failure
    """

    ok: bool
    message: str
    prediction: Optional[Prediction] = None
    document: Optional[ReportDocument] = None
    error: Optional[str] = None


class InferencePipeline:
    """
    Holds the current image and result and runs the user actions.

    Parameters
    ----------
    model_path : str or Path, optional
        Classifier model file. Ignored when ``classifier`` is given.
    classifier : ClassifierAdapter, optional
        Adapter to use; built from ``model_path`` if omitted
    output_dir : str or Path, optional
        Directory for exported reports
    report_font : str or Path, optional
        TrueType font for the PDF report; the built-in Helvetica only covers
        Latin-1

    Attributes
    ----------
    current_image : PIL.Image or None
    current_prediction : Prediction or None
    result_text : str
        Text last shown as the result; this is what gets exported
    """

    def __init__(self, model_path=None, classifier=None, output_dir=None, report_font=None):
        self.classifier = classifier or ClassifierAdapter(model_path)
        self.output_dir = output_dir
        self.report_font = report_font
        self.current_image = None
        self.current_prediction = None
        self.result_text = ""

    @property
    def model_path(self):
        return self.classifier.model_path

    def set_model_path(self, model_path) -> None:
        self.classifier.model_path = model_path
        logger.info("Classifier model set to %s", model_path)

    def select_image(self, path) -> PipelineOutcome:
        try:
            image = load_source_image(path)
        except ImageDecodeError as e:
            logger.exception("Failed to load image %s", path)
            self.current_image = None
            self.current_prediction = None
            self.result_text = ""
            return PipelineOutcome(False, f"Failed to load image: {e}", error=e.kind)

        self.current_image = image
        self.current_prediction = None
        self.result_text = ""
        logger.info("Selected image %s (%dx%d)", path, image.width, image.height)
        return PipelineOutcome(True, "")

    def predict(self) -> PipelineOutcome:
        """
        Classify the current image.

        The result text is replaced in every case: the prediction on success,
        "Please select an image first!" without an image, or
        "Prediction Failed: <message>" on any failure.
        """
        if self.current_image is None:
            self.current_prediction = None
            self.result_text = MSG_SELECT_FIRST
            return PipelineOutcome(False, MSG_SELECT_FIRST, error="input_missing")

        try:
            tensor = preprocess(self.current_image)
            prediction = interpret(self.classifier.infer(tensor))
        except Exception as e:
            logger.exception("Exception during prediction")
            kind = e.kind if isinstance(e, PipelineError) else InferenceError.kind
            self.current_prediction = None
            self.result_text = format_failure(str(e) or type(e).__name__)
            return PipelineOutcome(False, self.result_text, error=kind)

        self.current_prediction = prediction
        self.result_text = prediction.to_text()
        logger.info("Prediction %s (%.2f%%)", prediction.label, prediction.confidence)
        return PipelineOutcome(True, self.result_text, prediction=prediction)

    def export_report(self, now=None) -> PipelineOutcome:
        try:
            doc = export_report(
                self.result_text,
                self.current_image,
                output_dir=self.output_dir,
                now=now,
                font_path=self.report_font,
            )
        except NothingToExportError as e:
            return PipelineOutcome(False, MSG_NOTHING_TO_SHARE, error=e.kind)
        except ExportError as e:
            return PipelineOutcome(False, f"Failed to create PDF: {e}", error=e.kind)
        return PipelineOutcome(True, str(doc.path), document=doc)
