# -*- coding: utf-8 -*-
"""水印处理中的异常类型。

失败只在单个文件粒度上生效，任何异常都不应中断整批处理。
"""
from __future__ import annotations
from typing import Iterable, List


class WatermarkError(Exception):
    """所有水印相关错误的基类。"""


class InvalidInputError(WatermarkError):
    """导入的文件不是 image/* 类型。"""

    def __init__(self, names: Iterable[str]):
        self.names: List[str] = list(names)
        super().__init__("请选择有效的图片文件！（已忽略：%s）" % ", ".join(self.names))


class DecodeError(WatermarkError):
    """文件无法解码为位图。"""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"图片加载失败: {name}: {reason}")


class EmptyBatchError(WatermarkError):
    """没有可下载的处理结果。"""

    def __init__(self):
        super().__init__("没有可下载的图片！")
