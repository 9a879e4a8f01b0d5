# -*- coding: utf-8 -*-
"""批量处理：逐个 解码 -> 合成 -> 编码。

严格按输入顺序串行处理，同一时刻只保留一张解码后的位图。
单个文件失败只记录日志并跳过，不影响其余文件。
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable, List, Optional

from .compositor import composite
from .errors import DecodeError
from .exporter import ExportSettings, encode
from .image_loader import decode
from .models import AssetFailure, BatchReport, ProcessedResult, SourceAsset, WatermarkStyle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def process_asset(
    asset: SourceAsset,
    style: WatermarkStyle,
    settings: Optional[ExportSettings] = None,
) -> ProcessedResult:
    bitmap = decode(asset)
    out = composite(bitmap, style)
    data, mime = encode(out, settings, source_data=asset.data)
    return ProcessedResult(asset.name, data, mime)


def run_batch(
    assets: Iterable[SourceAsset],
    style: WatermarkStyle,
    *,
    settings: Optional[ExportSettings] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> BatchReport:
    """处理所有文件，返回结果与失败列表。"""
    assets = list(assets)
    style = style.normalized()
    report = BatchReport()
    total = len(assets)
    logger.info("开始批量处理 %d 张图片 (text=%r, font=%dpx)", total, style.text, style.font_size_px)
    for i, asset in enumerate(assets):
        if on_progress is not None:
            on_progress(i, total, asset.name)
        try:
            result = process_asset(asset, style, settings)
        except DecodeError as e:
            logger.warning("处理图片失败: %s", e)
            report.failures.append(AssetFailure(asset.name, e.reason))
            continue
        except Exception as e:
            logger.exception("处理图片失败: %s", asset.name)
            report.failures.append(AssetFailure(asset.name, str(e) or e.__class__.__name__))
            continue
        logger.debug("%s -> %d bytes (%s)", asset.name, len(result.encoded_bytes), result.mime_type)
        report.results.append(result)
    logger.info("批量处理完成：成功 %d 张，失败 %d 张", report.ok, report.failed)
    return report


def run(
    assets: Iterable[SourceAsset],
    style: WatermarkStyle,
    *,
    settings: Optional[ExportSettings] = None,
) -> List[ProcessedResult]:
    return run_batch(assets, style, settings=settings).results
