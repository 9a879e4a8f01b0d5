# -*- coding: utf-8 -*-
"""程序配置：启动时读取一次，运行期间只读。

可选地从 JSON 文件覆盖默认值；程序从不回写配置。
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Optional, Tuple

from .exporter import ExportSettings
from .models import DEFAULT_TEXT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    default_text: str = DEFAULT_TEXT
    font_size_min: int = 10
    font_size_max: int = 200
    font_size_default: int = 40
    thumb_size: Tuple[int, int] = (160, 160)
    export: ExportSettings = field(default_factory=ExportSettings)

    def __post_init__(self):
        if not 1 <= self.font_size_min <= self.font_size_default <= self.font_size_max:
            raise ValueError(
                "字号范围无效: min=%s default=%s max=%s"
                % (self.font_size_min, self.font_size_default, self.font_size_max)
            )

    def clamp_font_size(self, value: int) -> int:
        return max(self.font_size_min, min(self.font_size_max, int(value)))

    @staticmethod
    def load(path: Optional[str] = None) -> "AppConfig":
        cfg = AppConfig()
        if not path:
            return cfg
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"配置文件格式错误: {path}")
        known = {f.name for f in fields(AppConfig)}
        overrides = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("忽略未知配置项: %s", key)
                continue
            if key == "export":
                try:
                    value = ExportSettings(**value)
                except TypeError as e:
                    raise ValueError(f"导出配置无效: {e}") from e
            elif key == "thumb_size":
                value = (int(value[0]), int(value[1]))
            overrides[key] = value
        return replace(cfg, **overrides)
