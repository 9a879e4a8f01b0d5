# -*- coding: utf-8 -*-
"""程序入口模块。"""
import logging
import os
import sys

try:
    # 优先绝对导入，适配打包后的运行环境
    from batch_watermark.core.config import AppConfig  # type: ignore
    from batch_watermark.ui.main_window import launch  # type: ignore
except ImportError as e:
    # 仅在包名不可用时回退相对导入；否则抛出原始错误，避免掩盖真正问题
    if getattr(e, "name", None) in (
        "batch_watermark",
        "batch_watermark.core",
        "batch_watermark.core.config",
        "batch_watermark.ui",
        "batch_watermark.ui.main_window",
    ):
        from .core.config import AppConfig  # type: ignore
        from .ui.main_window import launch  # type: ignore
    else:
        raise

CONFIG_NAME = "batch_watermark.json"


def _config_path():
    # 可执行文件/当前工作目录下的可选配置
    if getattr(sys, "frozen", False):
        base_dir = os.path.dirname(sys.executable)
    else:
        base_dir = os.getcwd()
    path = os.path.join(base_dir, CONFIG_NAME)
    return path if os.path.isfile(path) else None


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return launch(AppConfig.load(_config_path()))


if __name__ == "__main__":
    sys.exit(main())
