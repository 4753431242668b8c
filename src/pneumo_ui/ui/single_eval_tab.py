"""Single image prediction tab for PneumoScan-CXR application."""

import logging
from pathlib import Path

import numpy as np
from PySide6.QtWidgets import (
    QApplication,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
    QFileDialog,
    QComboBox,
    QGroupBox,
    QTextEdit,
    QMessageBox,
)
from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices, QPixmap, QImage

from pneumo_ui.core.image_io import IMAGE_FILTER, to_display_image
from pneumo_ui.core.pipeline import InferencePipeline
from pneumo_ui.core.preprocessing import INPUT_SIZE, grayscale_preview
from pneumo_ui.models.model_util import default_model_path, list_available_models

logger = logging.getLogger(__name__)

MODEL_FILTER = "Model Files (*.tflite *.pt *.pth *.ts);;All Files (*)"


def pil_to_pixmap(image):
    """
    Convert a PIL image to a QPixmap.

    Parameters
    ----------
    image : PIL.Image
        Image in any mode; converted to RGB

    Returns
    -------
    QPixmap
    """
    arr = np.ascontiguousarray(np.array(image.convert("RGB")))
    height, width, _ = arr.shape
    q_image = QImage(arr.data, width, height, 3 * width, QImage.Format.Format_RGB888)
    # QImage does not own the numpy buffer
    return QPixmap.fromImage(q_image.copy())


class SingleEvalTab(QWidget):
    """
    Tab for classifying a single chest X-ray image.

    Provides interface for:
    - Loading an X-ray image
    - Selecting a classifier model
    - Running the prediction
    - Sharing the result as a one-page PDF report

    All actions call the pipeline synchronously on the GUI thread.

    Parameters
    ----------
    pipeline : InferencePipeline, optional
        Pipeline to drive; a new one using the first locally available
        model is created if omitted
    parent : QWidget, optional
        Parent widget, by default None

    Attributes
    ----------
    pipeline : InferencePipeline
        Holds the current image and result
    image_path : Path or None
        Currently loaded image path
    """

    def __init__(self, pipeline=None, parent=None):
        super().__init__(parent)
        self.pipeline = pipeline or InferencePipeline(model_path=default_model_path())
        self.image_path = None

        self._setup_ui()

    def _setup_ui(self):
        """Initialize the user interface components."""
        layout = QVBoxLayout(self)

        title = QLabel("Pneumonia Prediction")
        title.setStyleSheet("font-size: 20px; font-weight: bold; margin: 10px;")
        layout.addWidget(title)

        layout.addWidget(self._create_image_selection_group())

        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.image_label.setMinimumSize(512, 512)
        self.image_label.setStyleSheet("border: 2px solid #ccc; background: #f5f5f5;")
        self.image_label.setText("No image loaded")

        # grayscale 224x224 raster the classifier receives
        self.model_input_label = QLabel()
        self.model_input_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.model_input_label.setFixedSize(INPUT_SIZE, INPUT_SIZE)
        self.model_input_label.setStyleSheet("border: 1px solid #ccc; background: #f5f5f5;")
        self.model_input_label.setText("Model input")

        images = QHBoxLayout()
        images.addWidget(self.image_label, stretch=1)
        images.addWidget(self.model_input_label, alignment=Qt.AlignmentFlag.AlignTop)
        layout.addLayout(images, stretch=1)

        layout.addWidget(self._create_controls_group())
        layout.addWidget(self._create_results_group())

    def _create_image_selection_group(self):
        group = QGroupBox("Image Selection")
        layout = QHBoxLayout()

        self.file_path_label = QLabel("No file selected")
        self.file_path_label.setStyleSheet("color: #666;")
        layout.addWidget(self.file_path_label, stretch=1)

        select_btn = QPushButton("Select Image...")
        select_btn.clicked.connect(self._select_image)
        layout.addWidget(select_btn)

        group.setLayout(layout)
        return group

    def _create_controls_group(self):
        """
        Create the model selection, prediction and share controls.

        Returns
        -------
        QGroupBox
            Group box containing model selection and action buttons
        """
        group = QGroupBox("Model and Actions")
        layout = QHBoxLayout()

        layout.addWidget(QLabel("Model:"))
        self.model_combo = QComboBox()
        for model_name, info in list_available_models().items():
            if info["available"]:
                self.model_combo.addItem(model_name, userData=str(info["path"]))
        if self.pipeline.model_path is not None:
            idx = self.model_combo.findData(str(self.pipeline.model_path))
            if idx < 0:
                self.model_combo.addItem(Path(self.pipeline.model_path).name,
                                         userData=str(self.pipeline.model_path))
                idx = self.model_combo.count() - 1
            self.model_combo.setCurrentIndex(idx)
        self.model_combo.currentIndexChanged.connect(self._on_model_changed)
        layout.addWidget(self.model_combo, stretch=1)

        load_model_btn = QPushButton("Load Model...")
        load_model_btn.clicked.connect(self._load_model)
        layout.addWidget(load_model_btn)

        self.predict_btn = QPushButton("Run Prediction")
        self.predict_btn.clicked.connect(self._run_prediction)
        self.predict_btn.setStyleSheet(
            """
            QPushButton {
                background-color: #4CAF50;
                color: white;
                font-weight: bold;
                padding: 10px;
                border-radius: 5px;
            }
            QPushButton:hover {
                background-color: #45a049;
            }
        """
        )
        layout.addWidget(self.predict_btn)

        self.share_btn = QPushButton("Share PDF Report")
        self.share_btn.clicked.connect(self._share_report)
        layout.addWidget(self.share_btn)

        group.setLayout(layout)
        return group

    def _create_results_group(self):
        group = QGroupBox("Results")
        layout = QVBoxLayout()

        self.results_text = QTextEdit()
        self.results_text.setReadOnly(True)
        self.results_text.setMaximumHeight(120)
        layout.addWidget(self.results_text)

        group.setLayout(layout)
        return group

    def _select_image(self):
        """Open file dialog to select an X-ray image (PNG, JPEG, BMP, DICOM)."""
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Select X-ray Image", "", IMAGE_FILTER
        )
        if not file_path:
            return

        outcome = self.pipeline.select_image(file_path)
        if not outcome.ok:
            self.image_path = None
            self.file_path_label.setText("No file selected")
            self.image_label.clear()
            self.image_label.setText(outcome.message)
            self.model_input_label.clear()
            self.model_input_label.setText("Model input")
            self.results_text.setText(self.pipeline.result_text)
            return

        self.image_path = Path(file_path)
        self.file_path_label.setText(str(self.image_path))
        self.results_text.setText(self.pipeline.result_text)
        self.image_label.setPixmap(pil_to_pixmap(to_display_image(self.pipeline.current_image)))
        self.model_input_label.setPixmap(
            pil_to_pixmap(grayscale_preview(self.pipeline.current_image))
        )

    def _load_model(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Select Classifier Model", "", MODEL_FILTER
        )
        if not file_path:
            return
        idx = self.model_combo.findData(file_path)
        if idx < 0:
            self.model_combo.addItem(Path(file_path).name, userData=file_path)
            idx = self.model_combo.count() - 1
        self.model_combo.setCurrentIndex(idx)
        self.pipeline.set_model_path(file_path)

    def _on_model_changed(self, index):
        model_path = self.model_combo.itemData(index)
        if model_path:
            self.pipeline.set_model_path(model_path)

    def _run_prediction(self):
        """Classify the current image; blocks until the model returns."""
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        try:
            outcome = self.pipeline.predict()
        finally:
            QApplication.restoreOverrideCursor()
        self.results_text.setText(outcome.message)

    def _share_report(self):
        """Export the current result as PDF and hand it to the desktop."""
        outcome = self.pipeline.export_report()
        if not outcome.ok:
            QMessageBox.warning(self, "Share PDF Report", outcome.message)
            return
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(str(outcome.document.path))):
            logger.warning("No application to open %s", outcome.document.path)
            QMessageBox.information(
                self, "Share PDF Report", f"Report saved to:\n{outcome.document.path}"
            )
