"""
Classifier adapter tests: scoped handle release, output validation, backends
"""
import sys
import types

import numpy as np
import pytest
import torch
from PIL import Image

from pneumo_ui.core.classifier import (
    ClassifierAdapter,
    TFLiteClassifier,
    TorchScriptClassifier,
    open_classifier,
)
from pneumo_ui.core.errors import InferenceError
from pneumo_ui.core.preprocessing import preprocess

from .conftest import TrackingHandle


@pytest.fixture
def tensor(xray_image):
    return preprocess(xray_image)


class TestClassifierAdapter:

    def test_returns_score_and_releases_handle(self, make_adapter, tensor):
        adapter, loader = make_adapter(output=np.array([[0.73]], dtype=np.float32))

        score = adapter.infer(tensor)

        assert score == pytest.approx(0.73)
        (handle,) = loader.handles
        assert handle.calls == 1
        assert handle.closed
        assert handle.released == 1

    def test_model_receives_batched_float32_tensor(self, make_adapter, tensor):
        adapter, loader = make_adapter()
        adapter.infer(tensor)
        assert loader.handles[0].seen_shape == (1, 224, 224, 1)
        assert loader.handles[0].seen_dtype == np.float32

    def test_accepts_batched_input(self, make_adapter, tensor):
        adapter, _ = make_adapter()
        assert adapter.infer(tensor[np.newaxis, ...]) == pytest.approx(0.8)

    def test_fresh_handle_per_call(self, make_adapter, tensor):
        adapter, loader = make_adapter()
        adapter.infer(tensor)
        adapter.infer(tensor)
        assert len(loader.handles) == 2
        assert all(h.closed and h.released == 1 for h in loader.handles)

    def test_failure_is_wrapped_and_handle_released(self, make_adapter, tensor):
        adapter, loader = make_adapter(error=RuntimeError("interpreter crashed"))

        with pytest.raises(InferenceError, match="interpreter crashed"):
            adapter.infer(tensor)

        (handle,) = loader.handles
        assert handle.closed
        assert handle.released == 1

    @pytest.mark.parametrize("output", [
        np.array([1.7], dtype=np.float32),
        np.array([-0.1], dtype=np.float32),
        np.array([np.nan], dtype=np.float32),
        np.array([], dtype=np.float32),
    ])
    def test_invalid_output_is_rejected(self, make_adapter, tensor, output):
        adapter, loader = make_adapter(output=output)
        with pytest.raises(InferenceError):
            adapter.infer(tensor)
        assert loader.handles[0].closed

    def test_loader_failure(self, tensor):
        def broken_loader(path):
            raise ValueError("corrupt flatbuffer")

        adapter = ClassifierAdapter("model.tflite", loader=broken_loader)
        with pytest.raises(InferenceError, match="corrupt flatbuffer"):
            adapter.infer(tensor)

    def test_no_model_configured(self, tensor):
        with pytest.raises(InferenceError, match="No classifier model"):
            ClassifierAdapter(None).infer(tensor)

    def test_wrong_shape_rejected_before_loading(self, make_adapter):
        adapter, loader = make_adapter()
        with pytest.raises(InferenceError, match="shape"):
            adapter.infer(np.zeros((224, 224, 3), dtype=np.float32))
        assert loader.handles == []


class TestClassifierHandle:

    def test_close_is_idempotent(self):
        handle = TrackingHandle()
        handle.close()
        handle.close()
        assert handle.released == 1

    def test_process_after_close_fails(self):
        handle = TrackingHandle()
        handle.close()
        with pytest.raises(InferenceError):
            handle.process(np.zeros((1, 224, 224, 1), dtype=np.float32))

    def test_context_manager_closes_on_error(self):
        handle = TrackingHandle()
        with pytest.raises(KeyError):
            with handle:
                raise KeyError("x")
        assert handle.closed


class MeanModel(torch.nn.Module):
    def forward(self, x):
        return x.mean().reshape(1, 1)


@pytest.fixture
def torchscript_model(tmp_path):
    path = tmp_path / "xray_model.pt"
    torch.jit.script(MeanModel()).save(str(path))
    return path


class TestOpenClassifier:

    def test_missing_file(self, tmp_path):
        with pytest.raises(InferenceError, match="not found"):
            open_classifier(tmp_path / "nope.tflite")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "model.onnx"
        path.write_bytes(b"\x00")
        with pytest.raises(InferenceError, match="Unsupported"):
            open_classifier(path)

    def test_torchscript_backend(self, torchscript_model):
        handle = open_classifier(torchscript_model)
        assert isinstance(handle, TorchScriptClassifier)
        with handle:
            out = handle.process(np.full((1, 224, 224, 1), 0.25, dtype=np.float32))
        assert out.shape == (1, 1)
        assert out[0, 0] == pytest.approx(0.25)
        assert handle.closed

    def test_adapter_with_torchscript(self, torchscript_model):
        arr = np.zeros((224, 224, 3), dtype=np.uint8)
        arr[:, :112] = (0, 255, 0)
        tensor = preprocess(Image.fromarray(arr))
        score = ClassifierAdapter(torchscript_model).infer(tensor)
        assert score == pytest.approx(float(tensor.mean()), abs=1e-6)

    def test_corrupt_torchscript_file(self, tmp_path):
        path = tmp_path / "broken.pt"
        path.write_bytes(b"definitely not a zip archive")
        with pytest.raises(InferenceError):
            ClassifierAdapter(path).infer(np.zeros((224, 224, 1), dtype=np.float32))


class RecordingInterpreter:
    """Stands in for ``tf.lite.Interpreter``; records every call."""

    instances = []

    def __init__(self, model_path):
        self.model_path = model_path
        self.allocated = False
        self.tensors = {}
        self.invoked = 0
        RecordingInterpreter.instances.append(self)

    def allocate_tensors(self):
        self.allocated = True

    def get_input_details(self):
        return [{"index": 0, "dtype": np.float32, "shape": np.array([1, 224, 224, 1])}]

    def get_output_details(self):
        return [{"index": 1}]

    def set_tensor(self, index, value):
        self.tensors[index] = value

    def invoke(self):
        self.invoked += 1
        self.tensors[1] = np.array([[0.66]], dtype=np.float32)

    def get_tensor(self, index):
        return self.tensors[index]


@pytest.fixture
def fake_tensorflow(monkeypatch):
    RecordingInterpreter.instances = []
    tf = types.ModuleType("tensorflow")
    tf.lite = types.SimpleNamespace(Interpreter=RecordingInterpreter)
    monkeypatch.setitem(sys.modules, "tensorflow", tf)
    return tf


@pytest.fixture
def tflite_model(tmp_path):
    path = tmp_path / "xray_model.tflite"
    path.write_bytes(b"TFL3")
    return path


class TestTFLiteClassifier:

    def test_open_selects_tflite(self, fake_tensorflow, tflite_model):
        handle = open_classifier(tflite_model)
        assert isinstance(handle, TFLiteClassifier)
        (interp,) = RecordingInterpreter.instances
        assert interp.model_path == str(tflite_model)
        assert interp.allocated
        handle.close()

    def test_process_feeds_input_tensor(self, fake_tensorflow, tflite_model, tensor):
        with open_classifier(tflite_model) as handle:
            out = handle.process(tensor[np.newaxis, ...].astype(np.float64))
        (interp,) = RecordingInterpreter.instances
        fed = interp.tensors[0]
        assert fed.dtype == np.float32
        assert fed.shape == (1, 224, 224, 1)
        np.testing.assert_allclose(fed[0], tensor)
        assert interp.invoked == 1
        assert out[0, 0] == pytest.approx(0.66)

    def test_close_drops_interpreter(self, fake_tensorflow, tflite_model):
        handle = open_classifier(tflite_model)
        handle.close()
        assert handle.closed
        assert handle._interpreter is None

    def test_adapter_with_tflite(self, fake_tensorflow, tflite_model, tensor):
        score = ClassifierAdapter(tflite_model).infer(tensor)
        assert score == pytest.approx(0.66)
        (interp,) = RecordingInterpreter.instances
        assert interp.invoked == 1
        assert interp.tensors[0].shape == (1, 224, 224, 1)
