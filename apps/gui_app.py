#!/usr/bin/env python
"""
PneumoScan-CXR GUI Application Entry Point.

This script launches the graphical user interface for pneumonia prediction
from chest X-rays.
"""

import logging
import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from PySide6.QtWidgets import QApplication  # noqa: E402
from pneumo_ui.ui.main_window import MainWindow  # noqa: E402


def main():
    """
    Launch the PneumoScan-CXR GUI application.

    Returns
    -------
    int
        Exit code (0 for success)
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("PneumoScan-CXR")
    app.setOrganizationName("PneumoScan Team")
    app.setStyle("Fusion")

    window = MainWindow()
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
