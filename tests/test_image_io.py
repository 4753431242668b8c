"""
Image loading tests
"""
import numpy as np
import pytest
from PIL import Image
from pydicom.dataset import FileDataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian, SecondaryCaptureImageStorage, generate_uid

from pneumo_ui.core.errors import ImageDecodeError
from pneumo_ui.core.image_io import load_source_image, to_display_image
from pneumo_ui.core.preprocessing import preprocess


@pytest.fixture
def dicom_path(tmp_path):
    path = tmp_path / "xray.dcm"
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = SecondaryCaptureImageStorage
    meta.MediaStorageSOPInstanceUID = generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(str(path), {}, file_meta=meta, preamble=b"\0" * 128)
    ds.SOPClassUID = meta.MediaStorageSOPClassUID
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.Modality = "CR"
    ds.Rows = 4
    ds.Columns = 6
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.BitsAllocated = 16
    ds.BitsStored = 12
    ds.HighBit = 11
    ds.PixelRepresentation = 0
    pixels = np.arange(24, dtype=np.uint16).reshape(4, 6) * 100 + 500
    ds.PixelData = pixels.tobytes()
    ds.save_as(str(path))
    return path


class TestLoadSourceImage:

    @pytest.mark.parametrize("mode,color", [
        ("RGB", (10, 20, 30)),
        ("RGBA", (10, 20, 30, 0)),
        ("L", 77),
    ])
    def test_converts_to_rgb(self, tmp_path, mode, color):
        path = tmp_path / f"img_{mode}.png"
        Image.new(mode, (33, 17), color).save(path)
        img = load_source_image(path)
        assert img.mode == "RGB"
        assert img.size == (33, 17)

    def test_jpeg(self, tmp_path, xray_image):
        path = tmp_path / "xray.jpg"
        xray_image.save(path, quality=95)
        assert load_source_image(str(path)).size == (320, 240)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            load_source_image(tmp_path / "missing.png")

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "garbage.jpg"
        path.write_bytes(b"\x00\x01\x02 not an image")
        with pytest.raises(ImageDecodeError):
            load_source_image(path)

    def test_truncated_file(self, tmp_path, xray_image):
        path = tmp_path / "truncated.png"
        xray_image.save(path)
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with pytest.raises(ImageDecodeError):
            load_source_image(path)

    def test_dicom_is_normalized(self, dicom_path):
        img = load_source_image(dicom_path)
        arr = np.array(img)
        assert img.mode == "RGB"
        assert img.size == (6, 4)
        assert arr.min() == 0
        assert arr.max() == 255

    def test_12_bit_png_is_rescaled_not_clipped(self, tmp_path):
        ramp = np.linspace(0, 4095, 64).round().astype(np.uint16)
        path = tmp_path / "ramp16.png"
        Image.fromarray(np.tile(ramp, (64, 1))).save(path)

        img = load_source_image(path)
        arr = np.array(img)

        assert img.mode == "RGB"
        assert arr.min() == 0
        assert arr.max() == 255
        assert 110 <= arr[:, 32, 0].mean() <= 145
        # only the brightest column is white
        assert (arr[..., 0] == 255).mean() < 0.05

        tensor = preprocess(img)
        assert (tensor >= 254 / 255).mean() < 0.05

    def test_float_tiff_is_rescaled(self, tmp_path):
        values = np.linspace(-50.0, 1000.0, 48, dtype=np.float32)
        path = tmp_path / "float.tif"
        Image.fromarray(np.tile(values, (16, 1))).save(path)

        arr = np.array(load_source_image(path))

        assert arr.shape == (16, 48, 3)
        assert arr[0, 0, 0] == 0
        assert arr[0, -1, 0] == 255
        assert np.all(np.diff(arr[0, :, 0].astype(int)) >= 0)

    def test_broken_dicom(self, tmp_path):
        path = tmp_path / "broken.dcm"
        path.write_bytes(b"nope")
        with pytest.raises(ImageDecodeError):
            load_source_image(path)


def test_display_image_fits_box(xray_image):
    preview = to_display_image(xray_image, size=100)
    assert max(preview.size) == 100
    assert preview.size == (100, 75)
    assert xray_image.size == (320, 240)
