"""
UI Components for PneumoScan-CXR Application
============================================

This module provides the PySide6-based graphical user interface.

Single Image Prediction Tab
---------------------------
- Import a chest X-ray (PNG, JPEG, BMP, DICOM)
- Choose the classifier model (registry entry or any model file)
- Run the prediction and show label and confidence
- Share the result as a one-page PDF report

UI Components
-------------
MainWindow
    Main window container
SingleEvalTab
    Select / predict / share workflow

Architecture Notes
------------------
- Button handlers call ``core.InferencePipeline`` directly and synchronously
- The pipeline never raises; every outcome carries a message to display
- Exported PDFs are opened with the desktop's default handler

Examples
--------
>>> from PySide6.QtWidgets import QApplication
>>> from pneumo_ui.ui.main_window import MainWindow
>>> import sys
>>>
>>> app = QApplication(sys.argv)
>>> window = MainWindow()
>>> window.show()
>>> sys.exit(app.exec())

See Also
--------
pneumo_ui.core : Inference pipeline
apps.gui_app : Entry point for launching the GUI
"""

__all__ = []
