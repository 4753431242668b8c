"""
Pipeline Errors
===============

Exception hierarchy raised by the inference pipeline layers. Lower layers
(image I/O, preprocessing, classifier, report export) raise these; only
``InferencePipeline`` catches them and turns them into user-facing messages.

Classes
-------
PipelineError
    Base class, carries a short ``kind`` tag
InputMissingError
    No image (or no report text) available for the requested action
NothingToExportError
    Export requested without a prediction or image
ImageDecodeError
    Selected image could not be read or decoded
InferenceError
    Classifier unavailable, failed, or returned an invalid result
ExportError
    PDF serialization or write failed
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    kind = "pipeline"


class InputMissingError(PipelineError):
    kind = "input_missing"


class NothingToExportError(InputMissingError):
    kind = "nothing_to_export"


class ImageDecodeError(PipelineError):
    kind = "decode_failure"


class InferenceError(PipelineError):
    kind = "inference_failure"


class ExportError(PipelineError):
    kind = "export_failure"
