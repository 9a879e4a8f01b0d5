import io
import os

import piexif
import pytest
from PIL import Image

from batch_watermark.core.errors import EmptyBatchError
from batch_watermark.core.exporter import ExportSettings, derive_output_name, encode, save_all, save_result
from batch_watermark.core.models import ProcessedResult


@pytest.mark.parametrize(
    "original, expected",
    [
        ("a.png", "a_watermarked.png"),
        ("noext", "noext_watermarked"),
        (".hidden", "_watermarked.hidden"),
        ("a.b.png", "a.b_watermarked.png"),
        ("photo.jpg", "photo_watermarked.jpg"),
        ("", "_watermarked"),
        ("trailing.", "trailing_watermarked."),
    ],
)
def test_derive_output_name(original, expected):
    assert derive_output_name(original) == expected


@pytest.fixture
def rgba_image():
    return Image.new("RGBA", (64, 48), (200, 10, 10, 255))


def test_encode_jpeg_by_default(rgba_image):
    data, mime = encode(rgba_image)
    assert mime == "image/jpeg"
    assert data[:2] == b"\xff\xd8"
    assert Image.open(io.BytesIO(data)).size == (64, 48)


def test_encode_png(rgba_image):
    data, mime = encode(rgba_image, ExportSettings(fmt="png"))
    assert mime == "image/png"
    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    assert Image.open(io.BytesIO(data)).mode == "RGBA"


def test_export_settings_validation():
    with pytest.raises(ValueError):
        ExportSettings(fmt="gif")
    with pytest.raises(ValueError):
        ExportSettings(jpeg_quality=0)
    assert ExportSettings(fmt="JPG").mime_type == "image/jpeg"


def test_exif_is_carried_over(rgba_image, exif_jpeg_bytes):
    data, _ = encode(rgba_image, source_data=exif_jpeg_bytes)
    exif = piexif.load(data)
    assert exif["0th"][piexif.ImageIFD.Make] == b"TestCam"
    assert exif["thumbnail"] is None


def test_exif_dropped_when_disabled(rgba_image, exif_jpeg_bytes):
    data, _ = encode(rgba_image, ExportSettings(keep_exif=False), source_data=exif_jpeg_bytes)
    assert not Image.open(io.BytesIO(data)).info.get("exif")


def test_source_without_exif(rgba_image, png_bytes):
    data, _ = encode(rgba_image, source_data=png_bytes)
    assert not Image.open(io.BytesIO(data)).info.get("exif")


def test_data_uri():
    result = ProcessedResult("x.png", b"\x89PNG", "image/png")
    assert result.data_uri() == "data:image/png;base64,iVBORw=="
    assert result.output_name == "x_watermarked.png"


def test_save_result_never_overwrites(tmp_path):
    result = ProcessedResult("a.png", b"first", "image/png")
    out_dir = tmp_path / "out"
    p1 = save_result(result, str(out_dir))
    p2 = save_result(ProcessedResult("a.png", b"second", "image/png"), str(out_dir))
    assert p1.endswith("a_watermarked.png")
    assert p2.endswith("a_watermarked_1.png")
    assert (out_dir / "a_watermarked.png").read_bytes() == b"first"
    assert (out_dir / "a_watermarked_1.png").read_bytes() == b"second"


def test_save_all(tmp_path):
    results = [ProcessedResult("a.png", b"1"), ProcessedResult("b", b"2")]
    paths = save_all(results, str(tmp_path))
    assert [os.path.basename(p) for p in paths] == ["a_watermarked.png", "b_watermarked"]


def test_save_all_empty(tmp_path):
    with pytest.raises(EmptyBatchError):
        save_all([], str(tmp_path))


def test_transparent_image_is_not_flattened_to_jpeg():
    img = Image.new("RGBA", (64, 48), (255, 255, 255, 0))
    data, mime = encode(img)
    assert mime == "image/png"
    decoded = Image.open(io.BytesIO(data))
    assert decoded.mode == "RGBA"
    assert decoded.getpixel((0, 0))[3] == 0
