"""
Model Utilities for Pneumonia Prediction
========================================

This module provides the registry of classifier artifacts the application
knows about and resolves them to files in the local model directory.

- **Model registry**: Configuration database describing each artifact
- **Path resolution**: Locate a registered model under the model directory
- **Availability listing**: Which registered models are present locally

Available Models
----------------
The MODEL_CONFIGS dictionary contains metadata for all known models:

- xray_pneumonia_tflite : TensorFlow Lite export of the classifier
- xray_pneumonia_torchscript : TorchScript export of the same classifier

Both take a float32 tensor of shape (1, 224, 224, 1) and return one
probability for the "Pneumonia" class.

Critical Implementation Details
--------------------------------
**Preprocessing consistency**: Inputs must come from
``pneumo_ui.core.preprocessing.preprocess``; the model was trained on the
truncated ``0.30/0.59/0.11`` luminance of a bilinear 224x224 resize.

**No downloads**: artifacts are copied into the model directory by the
operator; nothing here touches the network.

Examples
--------
>>> from pneumo_ui.models.model_util import list_available_models, resolve_model_path
>>> for name, info in list_available_models().items():
...     print(name, info["available"])
>>> path = resolve_model_path("xray_pneumonia_tflite")
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_MODEL_DIR = "~/.pneumoscan/models"

MODEL_CONFIGS = {
    "xray_pneumonia_tflite": {
        "filename": "xray_model.tflite",
        "description": "Pneumonia vs. normal chest X-ray classifier (TensorFlow Lite)",
        "input_shape": (1, 224, 224, 1),
        "labels": ("Normal", "Pneumonia"),
    },
    "xray_pneumonia_torchscript": {
        "filename": "xray_model.pt",
        "description": "Pneumonia vs. normal chest X-ray classifier (TorchScript)",
        "input_shape": (1, 224, 224, 1),
        "labels": ("Normal", "Pneumonia"),
    },
}


def _model_dir(save_dir: str) -> Path:
    return Path(os.path.expanduser(save_dir))


def model_file(model_name: str, save_dir: str = DEFAULT_MODEL_DIR) -> Path:
    """
    Expected location of a registered model.

    Raises
    ------
    ValueError
        If model_name is not found in MODEL_CONFIGS
    """
    if model_name not in MODEL_CONFIGS:
        available_models = ", ".join(MODEL_CONFIGS.keys())
        raise ValueError(
            f"Model '{model_name}' not found. Available models: {available_models}"
        )
    return _model_dir(save_dir) / MODEL_CONFIGS[model_name]["filename"]


def resolve_model_path(model_name: str, save_dir: str = DEFAULT_MODEL_DIR) -> Path:
    """
    Locate a registered model file on disk.

    Parameters
    ----------
    model_name : str
        Key in MODEL_CONFIGS
    save_dir : str, default="~/.pneumoscan/models"
        Model directory (supports ~ expansion)

    Returns
    -------
    Path
        Path to the existing model file

    Raises
    ------
    ValueError
        If model_name is not registered
    FileNotFoundError
        If the file is not present in save_dir
    """
    path = model_file(model_name, save_dir)
    if not path.is_file():
        raise FileNotFoundError(f"Model '{model_name}' not found at {path}")
    return path


def list_available_models(save_dir: str = DEFAULT_MODEL_DIR) -> Dict[str, Dict[str, Any]]:
    """
    List all registered models with their metadata.

    Returns
    -------
    dict
        model_name -> metadata dict with two extra keys:
        - 'path' : Path, expected file location
        - 'available' : bool, True if the file exists

    Examples
    --------
    >>> models = list_available_models()
    >>> print(sorted(models))
    ['xray_pneumonia_tflite', 'xray_pneumonia_torchscript']
    """
    models = {}
    for name, config in MODEL_CONFIGS.items():
        path = model_file(name, save_dir)
        models[name] = {**config, "path": path, "available": path.is_file()}
    return models


def default_model_path(save_dir: str = DEFAULT_MODEL_DIR) -> Optional[Path]:
    """First registered model present in ``save_dir``, or None."""
    for name in MODEL_CONFIGS:
        try:
            return resolve_model_path(name, save_dir)
        except FileNotFoundError:
            continue
    return None
