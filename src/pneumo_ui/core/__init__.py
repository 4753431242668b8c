"""
Core Application Logic for PneumoScan-CXR
=========================================

This module contains the inference pipeline that powers the PneumoScan-CXR
desktop application:

- **Image I/O**: Loading of standard image formats and DICOM as RGB rasters
- **Preprocessing**: Resize, luminance conversion and tensor packing
- **Classifier adapter**: Scoped open / run / close of the pretrained model
- **Interpretation**: Fixed-threshold mapping of the score to a label
- **Report export**: One-page PDF of the prediction text
- **Pipeline**: Current image / result state and user-facing error handling

Pipeline
--------
``acquire image -> preprocess -> infer -> interpret -> format report ->
(optional) export document``

Every step runs synchronously on the calling thread.

Data Model
----------
No persistent state. ``InferencePipeline`` holds at most one current source
image and one current result; both are overwritten by the next action.
Exported reports are written to ``~/.pneumoscan/reports`` by default.

Examples
--------
>>> from pneumo_ui.core import InferencePipeline
>>>
>>> pipe = InferencePipeline(model_path="models/xray_model.pt")
>>> pipe.select_image("xray.jpg")
>>> outcome = pipe.predict()
>>> print(outcome.message)
Prediction: Normal
Confidence: 87.12%

Modules
-------
errors
    Error taxonomy of the pipeline
image_io
    Load images from disk for the pipeline and for display
preprocessing
    Image to (224, 224, 1) float32 tensor
classifier
    Model handles and the single-call classifier adapter
interpret
    Score to (label, confidence)
report
    PDF report rendering and export
pipeline
    Stateful pipeline used by the GUI

See Also
--------
pneumo_ui.models : Model registry
pneumo_ui.ui : PySide6 GUI components
"""

from .classifier import ClassifierAdapter, open_classifier
from .errors import (
    ExportError,
    ImageDecodeError,
    InferenceError,
    InputMissingError,
    NothingToExportError,
    PipelineError,
)
from .image_io import load_source_image, to_display_image
from .interpret import Prediction, interpret
from .pipeline import InferencePipeline, PipelineOutcome
from .preprocessing import preprocess, to_model_input
from .report import ReportDocument, export_report, render_report_pdf

__all__ = [
    "ClassifierAdapter",
    "open_classifier",
    "ExportError",
    "ImageDecodeError",
    "InferenceError",
    "InputMissingError",
    "NothingToExportError",
    "PipelineError",
    "load_source_image",
    "to_display_image",
    "Prediction",
    "interpret",
    "InferencePipeline",
    "PipelineOutcome",
    "preprocess",
    "to_model_input",
    "ReportDocument",
    "export_report",
    "render_report_pdf",
]
