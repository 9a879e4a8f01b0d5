# -*- coding: utf-8 -*-
"""批处理用到的数据结构。

- SourceAsset：导入的原始文件（字节 + 显示名），导入后不可变
- WatermarkStyle：一次批处理内只读的文本水印样式
- ProcessedResult：单个文件的编码结果
"""
from __future__ import annotations
import base64
import mimetypes
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .exporter import derive_output_name

DEFAULT_TEXT = "© 2024"

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class SourceAsset:
    name: str
    data: bytes = field(repr=False)
    mime_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str) -> "SourceAsset":
        """读取文件内容，MIME 按扩展名推断。"""
        with open(path, "rb") as f:
            data = f.read()
        mime, _ = mimetypes.guess_type(path)
        return cls(os.path.basename(path), data, mime or "application/octet-stream")

    @property
    def is_image(self) -> bool:
        return (self.mime_type or "").lower().startswith("image/")


@dataclass(frozen=True)
class ShadowStyle:
    color: RGBA = (0, 0, 0, 178)
    offset_x: int = 2
    offset_y: int = 2
    blur_radius: float = 4.0


@dataclass(frozen=True)
class WatermarkStyle:
    """文本水印样式，锚点固定为右下角。"""
    text: str = DEFAULT_TEXT
    font_size_px: int = 40
    fill_color: RGBA = (255, 255, 255, 255)
    stroke_color: RGBA = (0, 0, 0, 128)
    stroke_width_px: int = 2
    shadow: Optional[ShadowStyle] = field(default_factory=ShadowStyle)
    font_path: Optional[str] = None

    @property
    def margin_px(self) -> float:
        return margin_for(self.font_size_px)

    def normalized(self, default_text: str = DEFAULT_TEXT) -> "WatermarkStyle":
        """批处理入口的规范化：空白文本替换为默认值，字号至少为 1。"""
        text = self.text if self.text and self.text.strip() else default_text
        return replace(self, text=text, font_size_px=max(1, int(self.font_size_px)))


def margin_for(font_size_px: int) -> float:
    return max(20, font_size_px * 0.5)


@dataclass(frozen=True)
class ProcessedResult:
    source_name: str
    encoded_bytes: bytes = field(repr=False)
    mime_type: str = "image/jpeg"

    @property
    def output_name(self) -> str:
        return derive_output_name(self.source_name)

    def data_uri(self) -> str:
        """可直接嵌入页面/富文本的预览地址（data:<mime>;base64,...）。"""
        payload = base64.b64encode(self.encoded_bytes).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"


@dataclass(frozen=True)
class AssetFailure:
    source_name: str
    reason: str


@dataclass
class BatchReport:
    results: List[ProcessedResult] = field(default_factory=list)
    failures: List[AssetFailure] = field(default_factory=list)

    @property
    def ok(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)
