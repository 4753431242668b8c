"""
Shared fixtures for the PneumoScan-CXR test suite
"""
import numpy as np
import pytest
from PIL import Image

from pneumo_ui.core.classifier import ClassifierAdapter, ClassifierHandle


class TrackingHandle(ClassifierHandle):
    """Classifier double that records calls and releases."""

    def __init__(self, output=None, error=None, model_path="fake.tflite"):
        super().__init__(model_path)
        self.output = np.array([[0.8]], dtype=np.float32) if output is None else output
        self.error = error
        self.calls = 0
        self.released = 0
        self.seen_shape = None
        self.seen_dtype = None

    def _run(self, batch):
        self.calls += 1
        self.seen_shape = batch.shape
        self.seen_dtype = batch.dtype
        if self.error is not None:
            raise self.error
        return self.output

    def _release(self):
        self.released += 1


class TrackingLoader:
    """Loader double: hands out a new TrackingHandle per call."""

    def __init__(self, **handle_kwargs):
        self.handle_kwargs = handle_kwargs
        self.handles = []

    def __call__(self, model_path):
        handle = TrackingHandle(model_path=model_path, **self.handle_kwargs)
        self.handles.append(handle)
        return handle


@pytest.fixture
def make_adapter():
    def _make(**handle_kwargs):
        loader = TrackingLoader(**handle_kwargs)
        return ClassifierAdapter("fake.tflite", loader=loader), loader

    return _make


@pytest.fixture
def xray_image():
    """Synthetic 320x240 RGB 'X-ray' with a horizontal gradient"""
    ramp = np.tile(np.linspace(0, 255, 320, dtype=np.uint8), (240, 1))
    arr = np.stack([ramp, ramp, ramp], axis=2)
    return Image.fromarray(arr)


@pytest.fixture
def xray_path(tmp_path, xray_image):
    path = tmp_path / "xray.png"
    xray_image.save(path)
    return path
