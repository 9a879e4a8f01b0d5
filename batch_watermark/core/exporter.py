# -*- coding: utf-8 -*-
"""编码与下载。

- 命名规则：在最后一个 '.' 前插入 _watermarked，没有扩展名则追加
- 输出格式：JPEG（默认，质量 90）/ PNG / WEBP；带透明像素的图不用 JPEG，改存 PNG
- JPEG/WEBP 可保留原图 EXIF（去掉内嵌缩略图）
- 保存到目录时不覆盖已有文件，冲突自动追加 _1, _2
"""
from __future__ import annotations
import io
import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

import piexif
from PIL import Image

from .errors import EmptyBatchError

if TYPE_CHECKING:
    from .models import ProcessedResult

logger = logging.getLogger(__name__)

SUFFIX = "_watermarked"

# fmt -> (Pillow 格式名, MIME)
FORMATS = {
    "jpeg": ("JPEG", "image/jpeg"),
    "jpg": ("JPEG", "image/jpeg"),
    "png": ("PNG", "image/png"),
    "webp": ("WEBP", "image/webp"),
}


@dataclass(frozen=True)
class ExportSettings:
    fmt: str = "jpeg"  # 'jpeg' | 'png' | 'webp'
    jpeg_quality: int = 90  # 1-95，JPEG 与 WEBP 共用
    keep_exif: bool = True

    def __post_init__(self):
        if self.fmt.lower() not in FORMATS:
            raise ValueError(f"不支持的输出格式: {self.fmt}")
        if not 1 <= int(self.jpeg_quality) <= 100:
            raise ValueError(f"质量取值应在 1-100 之间: {self.jpeg_quality}")

    @property
    def mime_type(self) -> str:
        return FORMATS[self.fmt.lower()][1]


def derive_output_name(original: str) -> str:
    idx = original.rfind(".")
    if idx == -1:
        return original + SUFFIX
    return f"{original[:idx]}{SUFFIX}{original[idx:]}"


def _source_exif(data: Optional[bytes]) -> Optional[bytes]:
    """读取原图 EXIF 并重新打包；无 EXIF 或无法解析时返回 None。"""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as im:
            raw = im.info.get("exif")
        if not raw:
            return None
        exif_dict = piexif.load(raw)
        # 内嵌缩略图仍是未加水印的原图
        exif_dict.pop("thumbnail", None)
        exif_dict.pop("1st", None)
        return piexif.dump(exif_dict)
    except (OSError, ValueError, KeyError, piexif.InvalidImageDataError) as e:
        logger.debug("忽略无法解析的 EXIF: %s", e)
        return None


def _has_transparency(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA"):
        return img.getchannel("A").getextrema()[0] < 255
    return img.mode == "P" and "transparency" in img.info


def encode(
    img: Image.Image,
    settings: Optional[ExportSettings] = None,
    *,
    source_data: Optional[bytes] = None,
) -> Tuple[bytes, str]:
    """把位图编码为字节流，返回 (bytes, mime_type)。

    JPEG 不支持透明通道：带透明像素的图改用无损 PNG 输出。
    """
    settings = settings or ExportSettings()
    pil_fmt, mime = FORMATS[settings.fmt.lower()]
    if pil_fmt == "JPEG" and _has_transparency(img):
        pil_fmt, mime = FORMATS["png"]
    save_kwargs = {}
    if pil_fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = int(settings.jpeg_quality)
        if settings.keep_exif:
            exif = _source_exif(source_data)
            if exif:
                save_kwargs["exif"] = exif
    buf = io.BytesIO()
    if pil_fmt == "JPEG":
        img.convert("RGB").save(buf, format="JPEG", optimize=True, **save_kwargs)
    else:
        img.convert("RGBA").save(buf, format=pil_fmt, **save_kwargs)
    return buf.getvalue(), mime


def _safe_filename(base_name: str, output_dir: str) -> str:
    name, ext = os.path.splitext(base_name)
    target = os.path.join(output_dir, base_name)
    i = 1
    while os.path.exists(target):
        target = os.path.join(output_dir, f"{name}_{i}{ext}")
        i += 1
    return target


def save_result(result: "ProcessedResult", output_dir: str) -> str:
    """把单个结果写入目录，返回实际路径。"""
    os.makedirs(output_dir, exist_ok=True)
    target = _safe_filename(result.output_name, output_dir)
    with open(target, "wb") as f:
        f.write(result.encoded_bytes)
    logger.debug("已保存 %s", target)
    return target


def save_all(results: Iterable["ProcessedResult"], output_dir: str) -> List[str]:
    results = list(results)
    if not results:
        raise EmptyBatchError()
    return [save_result(r, output_dir) for r in results]
