# -*- coding: utf-8 -*-
"""图片解码与缩略图生成。

职责：
- 从文件/文件夹收集待导入路径（文件夹内只收集 image/* 类型）
- 把 SourceAsset 的字节解码为 RGBA 位图
- 生成并缓存缩略图到内存
"""
from __future__ import annotations
import hashlib
import io
import mimetypes
import os
from typing import Dict, Iterable, List, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .models import SourceAsset


def decode(asset: SourceAsset) -> Image.Image:
    """解码为 RGBA 位图；宽或高为 0 视同解码失败。"""
    try:
        with Image.open(io.BytesIO(asset.data)) as im:
            im.load()
            img = im.convert("RGBA")
    except UnidentifiedImageError as e:
        raise DecodeError(asset.name, "无法识别的图片格式") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(asset.name, str(e)) from e
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeError(asset.name, str(e) or e.__class__.__name__) from e
    if img.width <= 0 or img.height <= 0:
        raise DecodeError(asset.name, "图片尺寸为 0")
    return img


def _is_image_path(path: str) -> bool:
    mime, _ = mimetypes.guess_type(path)
    return bool(mime) and mime.startswith("image/")


class ImageLoader:
    def __init__(self, thumb_size=(160, 160)):
        self.thumb_size = thumb_size
        self._thumb_cache: Dict[Tuple[str, str, Tuple[int, int]], Image.Image] = {}

    def collect(self, inputs: Iterable[str]) -> List[str]:
        """展开文件夹；单独给出的文件原样保留，由会话层做类型校验。"""
        results: List[str] = []
        for p in inputs:
            if os.path.isdir(p):
                for root, _, files in os.walk(p):
                    for fn in sorted(files):
                        fp = os.path.join(root, fn)
                        if _is_image_path(fp):
                            results.append(fp)
            elif os.path.isfile(p):
                results.append(p)
        # 去重且保持顺序
        seen = set()
        uniq: List[str] = []
        for p in results:
            if p not in seen:
                uniq.append(p)
                seen.add(p)
        return uniq

    def get_thumbnail(self, name: str, data: bytes) -> Image.Image:
        key = (name, hashlib.sha1(data).hexdigest(), tuple(self.thumb_size))
        if key in self._thumb_cache:
            return self._thumb_cache[key]
        img = Image.open(io.BytesIO(data))
        img.thumbnail(self.thumb_size, Image.LANCZOS)
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        self._thumb_cache[key] = img
        return img

    def clear(self) -> None:
        self._thumb_cache.clear()
