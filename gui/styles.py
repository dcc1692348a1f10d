from PyQt5.QtWidgets import QGraphicsDropShadowEffect
from PyQt5.QtGui import QColor

def apply_shadow(widget, blur=12, offset=(0, 2)):
    shadow = QGraphicsDropShadowEffect()
    shadow.setBlurRadius(blur)
    shadow.setXOffset(offset[0])
    shadow.setYOffset(offset[1])
    shadow.setColor(QColor(0, 0, 0, 30))
    widget.setGraphicsEffect(shadow)

APP_STYLE = """
    QMainWindow, QDialog {
        background-color: #f7f8fa;
    }

    #MainTitle {
        font-family: 'Segoe UI', 'Helvetica Neue', Arial;
        font-size: 24px;
        font-weight: 800;
        color: #0d47a1;
    }

    #SubTitle {
        font-size: 13px;
        color: #5c6bc0;
        margin-bottom: 8px;
    }

    #TotalLabel {
        font-size: 13px;
        font-weight: bold;
        color: #37474f;
    }

    QTabWidget::pane {
        background-color: #ffffff;
        border: 1px solid #cfd8dc;
        border-radius: 8px;
    }

    QTabBar::tab {
        padding: 8px 14px;
        color: #546e7a;
    }

    QTabBar::tab:selected {
        color: #0d47a1;
        font-weight: bold;
        border-bottom: 2px solid #1976d2;
    }

    QPlainTextEdit {
        font-family: Consolas, 'Courier New', monospace;
        font-size: 13px;
        border: none;
        background-color: #ffffff;
    }

    #OutputView {
        border: 1px solid #cfd8dc;
        border-radius: 8px;
        background-color: #fbfcfd;
    }

    QPushButton {
        padding: 10px 18px;
        font-size: 13px;
        font-weight: bold;
        border-radius: 8px;
        background-color: #eceff1;
        color: #37474f;
        border: none;
    }

    QPushButton:hover {
        background-color: #e0e0e0;
    }

    QPushButton:disabled {
        color: #b0bec5;
    }

    #PrimaryBtn {
        background-color: #1565c0;
        color: #ffffff;
    }

    #PrimaryBtn:hover {
        background-color: #0d47a1;
    }

    QProgressBar {
        border: none;
        border-radius: 4px;
        background-color: #e0e0e0;
        height: 6px;
    }

    QProgressBar::chunk {
        background-color: #1976d2;
        border-radius: 4px;
    }

    QGroupBox {
        font-weight: bold;
        border: 1px solid #e0e0e0;
        border-radius: 8px;
        margin-top: 1.5em;
        padding-top: 10px;
    }

    QGroupBox::title {
        subcontrol-origin: margin;
        left: 10px;
        padding: 0 3px 0 3px;
        color: #1565c0;
    }
"""
