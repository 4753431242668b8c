"""
PneumoScan-CXR: Pneumonia Prediction from Chest X-rays
======================================================

PneumoScan-CXR provides a desktop GUI for classifying a single chest X-ray
as "Pneumonia" or "Normal" with a pretrained binary classifier, and for
sharing the result as a one-page PDF report.

The application supports one workflow:

1. **Select** an image (PNG, JPEG, BMP or DICOM)
2. **Predict**: resize to 224x224, convert to luminance, run the classifier,
   and report the label with its confidence
3. **Share**: export the result text as a 300x600 pt PDF page

**Critical constraint**: The classifier is an opaque, already-trained
artifact. It expects the exact preprocessing in
``pneumo_ui.core.preprocessing`` and returns the probability of pneumonia.

Quick Start
-----------
>>> from pneumo_ui.core import load_source_image, preprocess, interpret
>>> from pneumo_ui.core import ClassifierAdapter
>>>
>>> adapter = ClassifierAdapter("~/.pneumoscan/models/xray_model.tflite")
>>> tensor = preprocess(load_source_image("xray.jpg"))
>>> prediction = interpret(adapter.infer(tensor))
>>> print(prediction.to_text())
Prediction: Pneumonia
Confidence: 93.41%

Main Modules
------------
models
    Registry of classifier artifacts and their local paths
core
    Inference pipeline: image I/O, preprocessing, classifier, report export
ui
    PySide6 GUI components
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
