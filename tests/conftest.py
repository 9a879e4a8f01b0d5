"""Shared fixtures: in-memory images built with Pillow."""

import io

import piexif
import pytest
from PIL import Image

from batch_watermark.core.models import SourceAsset


def image_bytes(size=(200, 100), fmt="PNG", color=(128, 128, 128), exif=None):
    img = Image.new("RGB", size, color)
    buf = io.BytesIO()
    kwargs = {"exif": exif} if exif else {}
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return image_bytes()


@pytest.fixture
def make_asset():
    def _make(name, size=(200, 100), fmt="PNG", mime=None, data=None):
        if data is None:
            data = image_bytes(size, fmt)
        return SourceAsset(name, data, mime or "image/" + fmt.lower())

    return _make


@pytest.fixture
def corrupt_asset():
    return SourceAsset("broken.png", b"definitely not an image", "image/png")


@pytest.fixture
def exif_jpeg_bytes():
    exif = piexif.dump({
        "0th": {piexif.ImageIFD.Make: b"TestCam"},
        "Exif": {},
        "GPS": {},
        "1st": {},
        "thumbnail": None,
    })
    return image_bytes(fmt="JPEG", exif=exif)
