# -*- coding: utf-8 -*-
"""主窗口：导入、设置、生成、预览与下载。

- 上传区域：点击选择文件，或把文件/文件夹拖入窗口
- 水印文本 + 字号滑块（实时显示 “{n}px”）
- 生成后在网格中预览，点击缩略图查看大图
- 单张下载 / 全部下载到所选目录
"""
from __future__ import annotations
import logging
import os
from typing import List

from PySide6.QtCore import Qt
from PySide6.QtGui import QDragEnterEvent, QDropEvent, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QFileDialog,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSlider,
    QVBoxLayout,
    QWidget,
)
from PIL import ImageQt

from ..core.config import AppConfig
from ..core.errors import EmptyBatchError, InvalidInputError
from ..core.image_loader import ImageLoader
from ..core.models import ProcessedResult
from ..core.session import WatermarkSession

logger = logging.getLogger(__name__)

GRID_COLUMNS = 4


class UploadArea(QLabel):
    """点击打开文件对话框；拖拽由主窗口统一处理。"""

    def __init__(self, on_click, parent=None):
        super().__init__(parent)
        self._on_click = on_click
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumHeight(120)
        self.setText("点击选择图片，或将图片拖拽到此处")
        self.setStyleSheet("border:2px dashed #888; border-radius:8px; color:#555;")

    def mousePressEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self._on_click()
            e.accept()
        else:
            super().mousePressEvent(e)

    def set_dragover(self, active: bool):
        color = "#2d8cf0" if active else "#888"
        self.setStyleSheet(f"border:2px dashed {color}; border-radius:8px; color:#555;")


class ClickableLabel(QLabel):
    def __init__(self, on_click, parent=None):
        super().__init__(parent)
        self._on_click = on_click
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    def mousePressEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self._on_click()
            e.accept()
        else:
            super().mousePressEvent(e)


class ImageDialog(QDialog):
    """大图预览。"""

    def __init__(self, result: ProcessedResult, parent=None):
        super().__init__(parent)
        self.setWindowTitle(result.output_name)
        pix = QPixmap()
        pix.loadFromData(result.encoded_bytes)
        screen = QApplication.primaryScreen().availableGeometry()
        if pix.width() > screen.width() * 0.9 or pix.height() > screen.height() * 0.9:
            pix = pix.scaled(
                int(screen.width() * 0.9),
                int(screen.height() * 0.9),
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        lbl = QLabel()
        lbl.setPixmap(pix)
        lay = QVBoxLayout(self)
        lay.addWidget(lbl)


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig):
        super().__init__()
        self.setWindowTitle("批量图片水印")
        self.resize(1100, 800)
        self.config = config
        self.session = WatermarkSession(config)
        self.loader = ImageLoader(thumb_size=config.thumb_size)
        self._build_ui()
        self.setAcceptDrops(True)

    # ---------- UI 构建 ----------
    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)

        self.upload_area = UploadArea(self.import_files_dialog)
        root.addWidget(self.upload_area)
        self.lbl_count = QLabel("尚未选择图片")
        root.addWidget(self.lbl_count)

        group = QGroupBox("水印设置")
        g_layout = QVBoxLayout(group)
        text_row = QHBoxLayout()
        self.text_edit = QLineEdit()
        self.text_edit.setPlaceholderText(self.config.default_text)
        text_row.addWidget(QLabel("水印文本：")); text_row.addWidget(self.text_edit)
        size_row = QHBoxLayout()
        self.font_slider = QSlider(Qt.Orientation.Horizontal)
        self.font_slider.setRange(self.config.font_size_min, self.config.font_size_max)
        self.font_slider.setValue(self.config.font_size_default)
        self.lbl_font_size = QLabel(f"{self.config.font_size_default}px")
        self.font_slider.valueChanged.connect(self.on_font_size_change)
        size_row.addWidget(QLabel("字号：")); size_row.addWidget(self.font_slider); size_row.addWidget(self.lbl_font_size)
        g_layout.addLayout(text_row)
        g_layout.addLayout(size_row)
        root.addWidget(group)

        btn_row = QHBoxLayout()
        self.btn_generate = QPushButton("生成水印图片")
        self.btn_generate.setEnabled(False)
        self.btn_generate.clicked.connect(self.on_generate)
        self.btn_clear = QPushButton("清除")
        self.btn_clear.clicked.connect(self.clear_all)
        self.btn_download_all = QPushButton("下载全部")
        self.btn_download_all.clicked.connect(self.download_all)
        btn_row.addWidget(self.btn_generate); btn_row.addWidget(self.btn_clear)
        btn_row.addStretch(1); btn_row.addWidget(self.btn_download_all)
        root.addLayout(btn_row)

        self.preview_section = QScrollArea()
        self.preview_section.setWidgetResizable(True)
        self.preview_host = QWidget()
        self.preview_grid = QGridLayout(self.preview_host)
        self.preview_grid.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self.preview_section.setWidget(self.preview_host)
        self.preview_section.setVisible(False)
        root.addWidget(self.preview_section, 1)

    # ---------- 导入 ----------
    def import_files_dialog(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "选择图片文件", os.getcwd(), "Images (*.*)")
        if paths:
            self.add_images(paths)

    def add_images(self, paths: List[str]):
        paths = self.loader.collect(paths)
        if not paths:
            QMessageBox.warning(self, "提示", "请选择有效的图片文件！")
            return
        try:
            report = self.session.add_paths(paths)
        except InvalidInputError:
            QMessageBox.warning(self, "提示", "请选择有效的图片文件！")
            return
        except OSError as e:
            QMessageBox.warning(self, "导入失败", f"无法读取文件: {e}")
            return
        if report.rejected:
            QMessageBox.information(self, "提示", "已忽略非图片文件：\n" + "\n".join(report.rejected))
        self.lbl_count.setText(f"已选择 {len(self.session.uploaded)} 张图片")
        self.btn_generate.setEnabled(self.session.can_generate)

    def on_font_size_change(self, v: int):
        self.lbl_font_size.setText(f"{v}px")

    # ---------- 生成 ----------
    def on_generate(self):
        self._clear_preview()
        self.loader.clear()
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        try:
            report = self.session.process(
                self.text_edit.text(),
                self.font_slider.value(),
                on_progress=self._on_progress,
            )
        finally:
            QApplication.restoreOverrideCursor()
        for result in report.results:
            self.add_preview_item(result)
        self.preview_section.setVisible(True)
        self.statusBar().showMessage(f"完成：成功 {report.ok} 张，失败 {report.failed} 张", 5000)
        if report.failures:
            lines = [f"{f.source_name}: {f.reason}" for f in report.failures]
            QMessageBox.warning(self, "部分图片处理失败", "\n".join(lines))

    def _on_progress(self, index: int, total: int, name: str):
        self.statusBar().showMessage(f"正在处理 {index + 1}/{total}: {name}")
        QApplication.processEvents()

    def add_preview_item(self, result: ProcessedResult):
        item = QWidget()
        lay = QVBoxLayout(item)
        img_label = ClickableLabel(lambda r=result: self.show_image_dialog(r))
        thumb = self.loader.get_thumbnail(result.output_name, result.encoded_bytes)
        img_label.setPixmap(QPixmap.fromImage(ImageQt.ImageQt(thumb)))
        img_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        name_label = QLabel(result.source_name)
        name_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        btn = QPushButton("下载此图片")
        btn.clicked.connect(lambda _=False, n=result.source_name: self.download_single(n))
        lay.addWidget(img_label); lay.addWidget(name_label); lay.addWidget(btn)
        n = self.preview_grid.count()
        self.preview_grid.addWidget(item, n // GRID_COLUMNS, n % GRID_COLUMNS)

    def show_image_dialog(self, result: ProcessedResult):
        ImageDialog(result, self).exec()

    def _clear_preview(self):
        while self.preview_grid.count():
            w = self.preview_grid.takeAt(0).widget()
            if w is not None:
                w.deleteLater()

    # ---------- 清除 ----------
    def clear_all(self):
        self.session.clear()
        self.loader.clear()
        self._clear_preview()
        self.preview_section.setVisible(False)
        self.lbl_count.setText("尚未选择图片")
        self.btn_generate.setEnabled(False)

    # ---------- 下载 ----------
    def _pick_output_dir(self) -> str:
        return QFileDialog.getExistingDirectory(self, "选择保存目录", os.getcwd())

    def download_single(self, source_name: str):
        if self.session.find_result(source_name) is None:
            return
        out_dir = self._pick_output_dir()
        if not out_dir:
            return
        try:
            path = self.session.download_single(source_name, out_dir)
        except OSError as e:
            QMessageBox.warning(self, "保存失败", str(e))
            return
        self.statusBar().showMessage(f"已保存：{path}", 5000)

    def download_all(self):
        if not self.session.processed:
            QMessageBox.information(self, "提示", str(EmptyBatchError()))
            return
        out_dir = self._pick_output_dir()
        if not out_dir:
            return
        try:
            paths = self.session.download_all(out_dir)
        except EmptyBatchError as e:
            QMessageBox.information(self, "提示", str(e))
            return
        except OSError as e:
            QMessageBox.warning(self, "保存失败", str(e))
            return
        QMessageBox.information(self, "下载完成", f"已保存 {len(paths)} 张图片到：\n{out_dir}")

    # ---------- 拖拽支持 ----------
    def dragEnterEvent(self, event: QDragEnterEvent):
        if event.mimeData().hasUrls():
            self.upload_area.set_dragover(True)
            event.acceptProposedAction()

    def dragLeaveEvent(self, event):
        self.upload_area.set_dragover(False)
        super().dragLeaveEvent(event)

    def dropEvent(self, event: QDropEvent):
        self.upload_area.set_dragover(False)
        paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
        event.acceptProposedAction()
        self.add_images(paths)


def launch(config: AppConfig) -> int:
    app = QApplication.instance() or QApplication([])
    win = MainWindow(config)
    win.show()
    return app.exec()
