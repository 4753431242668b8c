"""
Model Registry for Pneumonia Prediction
=======================================

This module lists the pretrained classifier artifacts the application can
run and resolves them to local files.

Critical Usage Notes
--------------------
1. **Binary classification only**: Models output one probability for
   "Pneumonia"; "Normal" is its complement
2. **Exact preprocessing required**: Always use
   ``pneumo_ui.core.preprocessing.preprocess``
3. **CPU inference**: Models run on CPU
4. **Input size**: Models expect (1, 224, 224, 1) float32 tensors

Functions
---------
resolve_model_path
    Path of a registered model file (must exist)
list_available_models
    All registered models with availability flags
default_model_path
    First registered model present locally

See Also
--------
pneumo_ui.core.classifier : Opens and runs the model files
"""

from .model_util import (
    DEFAULT_MODEL_DIR,
    MODEL_CONFIGS,
    default_model_path,
    list_available_models,
    model_file,
    resolve_model_path,
)

__all__ = [
    "DEFAULT_MODEL_DIR",
    "MODEL_CONFIGS",
    "default_model_path",
    "list_available_models",
    "model_file",
    "resolve_model_path",
]
