"""Main window for PneumoScan-CXR application."""

from PySide6.QtWidgets import QMainWindow, QTabWidget, QWidget, QVBoxLayout

from .single_eval_tab import SingleEvalTab


class MainWindow(QMainWindow):
    """
    Main application window.

    Parameters
    ----------
    pipeline : InferencePipeline, optional
        Pipeline passed to the prediction tab
    parent : QWidget, optional
        Parent widget, by default None

    Attributes
    ----------
    tab_widget : QTabWidget
        Tab container
    single_eval_tab : SingleEvalTab
        Select / predict / share tab
    """

    def __init__(self, pipeline=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("PneumoScan-CXR: Pneumonia Prediction from Chest X-rays")
        self.setMinimumSize(900, 800)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        self.tab_widget = QTabWidget()
        layout.addWidget(self.tab_widget)

        self.single_eval_tab = SingleEvalTab(pipeline)
        self.tab_widget.addTab(self.single_eval_tab, "Single Image Prediction")
