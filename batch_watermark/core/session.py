# -*- coding: utf-8 -*-
"""一次使用会话：已导入的文件、处理结果与失败记录。

界面层只调用这里的方法，不直接持有列表。
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .batch import ProgressCallback, run_batch
from .config import AppConfig
from .errors import EmptyBatchError, InvalidInputError
from .exporter import save_all, save_result
from .models import AssetFailure, BatchReport, ProcessedResult, SourceAsset, WatermarkStyle

logger = logging.getLogger(__name__)


@dataclass
class IntakeReport:
    accepted: List[SourceAsset] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


class WatermarkSession:
    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.uploaded: List[SourceAsset] = []
        self.processed: List[ProcessedResult] = []
        self.failures: List[AssetFailure] = []

    @property
    def can_generate(self) -> bool:
        return bool(self.uploaded)

    def add_assets(self, assets: Iterable[SourceAsset]) -> IntakeReport:
        """只接收 image/* 类型；全部不合格时抛出 InvalidInputError。"""
        report = IntakeReport()
        for a in assets:
            if a.is_image:
                report.accepted.append(a)
            else:
                report.rejected.append(a.name)
        if report.rejected:
            logger.info("已忽略非图片文件: %s", ", ".join(report.rejected))
        if not report.accepted:
            raise InvalidInputError(report.rejected)
        self.uploaded.extend(report.accepted)
        return report

    def add_paths(self, paths: Iterable[str]) -> IntakeReport:
        return self.add_assets([SourceAsset.from_path(p) for p in paths])

    def build_style(self, text: str, font_size_px: int) -> WatermarkStyle:
        style = WatermarkStyle(text=text, font_size_px=self.config.clamp_font_size(font_size_px))
        return style.normalized(self.config.default_text)

    def process(
        self,
        text: str,
        font_size_px: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """重新处理全部已导入文件，替换上一次的结果。"""
        self.processed = []
        self.failures = []
        report = run_batch(
            self.uploaded,
            self.build_style(text, font_size_px),
            settings=self.config.export,
            on_progress=on_progress,
        )
        self.processed = list(report.results)
        self.failures = list(report.failures)
        return report

    def find_result(self, source_name: str) -> Optional[ProcessedResult]:
        for r in self.processed:
            if r.source_name == source_name:
                return r
        return None

    def download_single(self, source_name: str, output_dir: str) -> Optional[str]:
        result = self.find_result(source_name)
        if result is None:
            return None
        return save_result(result, output_dir)

    def download_all(self, output_dir: str) -> List[str]:
        if not self.processed:
            raise EmptyBatchError()
        return save_all(self.processed, output_dir)

    def clear(self) -> None:
        self.uploaded = []
        self.processed = []
        self.failures = []
