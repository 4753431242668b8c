"""
Classifier Adapter
==================

This module wraps the pre-trained pneumonia classifier behind a small
acquire / process / close interface. The model itself is an opaque artifact:
it takes a float32 tensor of shape ``(1, 224, 224, 1)`` and returns one
probability in [0, 1] for the positive class (Pneumonia).

Classes
-------
ClassifierHandle
    Base class for an open model handle (context manager)
TorchScriptClassifier
    Handle backed by a TorchScript module (``.pt``, ``.pth``, ``.ts``)
TFLiteClassifier
    Handle backed by a TensorFlow Lite interpreter (``.tflite``)
ClassifierAdapter
    Runs one inference per call on a freshly opened handle

Functions
---------
open_classifier
    Open a handle for a model file, picking the backend by suffix

Notes
-----
The adapter does not cache handles: every ``infer()`` call opens the model,
runs it once and closes it, also when loading or the forward pass raises.

See Also
--------
pneumo_ui.core.preprocessing : Produces the input tensor
pneumo_ui.core.interpret : Turns the score into a label
pneumo_ui.models.model_util : Registry of known model files
"""

import logging
from pathlib import Path

import numpy as np
import torch

from .errors import InferenceError
from .preprocessing import INPUT_SIZE, to_model_input

logger = logging.getLogger(__name__)

INPUT_SHAPE = (1, INPUT_SIZE, INPUT_SIZE, 1)
TORCHSCRIPT_SUFFIXES = (".pt", ".pth", ".ts")
TFLITE_SUFFIXES = (".tflite",)


class ClassifierHandle:
    """
    An open classifier model.

    Subclasses implement ``_run`` and ``_release``. The handle is a context
    manager; leaving the ``with`` block always closes it.

    Attributes
    ----------
    model_path : Path
        File the handle was opened from
    closed : bool
        True once ``close()`` has been called
    """

    def __init__(self, model_path):
        self.model_path = Path(model_path)
        self.closed = False

    def process(self, batch: np.ndarray) -> np.ndarray:
        """Run the model on a ``(1, 224, 224, 1)`` float32 batch."""
        if self.closed:
            raise InferenceError(f"Classifier {self.model_path.name} is closed")
        return np.asarray(self._run(batch))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._release()
        logger.debug("Closed classifier %s", self.model_path)

    def _run(self, batch):
        raise NotImplementedError

    def _release(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class TorchScriptClassifier(ClassifierHandle):
    """
    TorchScript model on CPU.

    The module receives the NHWC batch exactly as produced by the
    preprocessor and runs under ``torch.inference_mode()``.
    """

    def __init__(self, model_path, device: str = "cpu"):
        super().__init__(model_path)
        self.device = torch.device(device)
        self._module = torch.jit.load(str(self.model_path), map_location=self.device)
        self._module.eval()

    def _run(self, batch):
        x = torch.from_numpy(np.ascontiguousarray(batch, dtype=np.float32)).to(self.device)
        with torch.inference_mode():
            out = self._module(x)
        if isinstance(out, (tuple, list)):
            out = out[0]
        return out.detach().cpu().numpy()

    def _release(self):
        self._module = None


class TFLiteClassifier(ClassifierHandle):
    """
    TensorFlow Lite model, the format the classifier is distributed in.

    Requires the ``tflite`` extra (tensorflow).
    """

    def __init__(self, model_path):
        super().__init__(model_path)
        import tensorflow as tf

        self._interpreter = tf.lite.Interpreter(model_path=str(self.model_path))
        self._interpreter.allocate_tensors()

    def _run(self, batch):
        inp = self._interpreter.get_input_details()[0]
        out = self._interpreter.get_output_details()[0]
        self._interpreter.set_tensor(inp["index"], np.asarray(batch, dtype=inp["dtype"]))
        self._interpreter.invoke()
        return np.array(self._interpreter.get_tensor(out["index"]))

    def _release(self):
        self._interpreter = None


def open_classifier(model_path) -> ClassifierHandle:
    """
    Open a classifier handle for ``model_path``.

    Parameters
    ----------
    model_path : str or Path
        Model file; ``.tflite`` selects TensorFlow Lite, ``.pt``/``.pth``/``.ts``
        select TorchScript

    Returns
    -------
    ClassifierHandle
        Open handle; the caller must close it (or use it as a context manager)

    Raises
    ------
    InferenceError
        If the file does not exist or the suffix is not supported
    """
    path = Path(model_path).expanduser()
    if not path.is_file():
        raise InferenceError(f"Model file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in TFLITE_SUFFIXES:
        return TFLiteClassifier(path)
    if suffix in TORCHSCRIPT_SUFFIXES:
        return TorchScriptClassifier(path)
    raise InferenceError(f"Unsupported model format: {suffix or path.name}")


def _as_batch(tensor) -> np.ndarray:
    arr = np.asarray(tensor, dtype=np.float32)
    if arr.shape == INPUT_SHAPE[1:]:
        arr = to_model_input(arr)
    if arr.shape != INPUT_SHAPE:
        raise InferenceError(f"Expected input shape {INPUT_SHAPE}, got {arr.shape}")
    return np.ascontiguousarray(arr)


def _score_from_output(output) -> float:
    flat = np.asarray(output, dtype=np.float64).ravel()
    if flat.size == 0:
        raise InferenceError("Classifier returned no output")
    score = float(flat[0])
    if not np.isfinite(score) or not 0.0 <= score <= 1.0:
        raise InferenceError(f"Classifier returned an invalid score: {score}")
    return score


class ClassifierAdapter:
    """
    Single-call inference on a freshly opened classifier handle.

    Parameters
    ----------
    model_path : str or Path, optional
        Model file passed to ``loader``
    loader : callable, default=open_classifier
        ``loader(model_path) -> ClassifierHandle``

    Examples
    --------
    >>> from pneumo_ui.core.classifier import ClassifierAdapter
    >>> from pneumo_ui.core.preprocessing import preprocess
    >>> from PIL import Image
    >>>
    >>> adapter = ClassifierAdapter("~/.pneumoscan/models/xray_model.tflite")
    >>> score = adapter.infer(preprocess(Image.open("xray.png")))
    >>> print(f"P(Pneumonia) = {score:.4f}")
    """

    def __init__(self, model_path=None, loader=open_classifier):
        self.model_path = model_path
        self.loader = loader

    def infer(self, tensor) -> float:
        """
        Run the classifier once and return the positive-class probability.

        Parameters
        ----------
        tensor : np.ndarray
            Preprocessed tensor, shape (224, 224, 1) or (1, 224, 224, 1)

        Returns
        -------
        float
            Score in [0, 1]

        Raises
        ------
        InferenceError
            If no model is configured, loading or the forward pass fails, or
            the output is not a single finite probability. The handle is
            closed before the error leaves this method.
        """
        if self.model_path is None:
            raise InferenceError("No classifier model configured")
        batch = _as_batch(tensor)
        try:
            with self.loader(self.model_path) as handle:
                output = handle.process(batch)
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(str(e) or type(e).__name__) from e
        score = _score_from_output(output)
        logger.info("Classifier %s returned score %.4f", Path(self.model_path).name, score)
        return score
