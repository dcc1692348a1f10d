import os
from pathlib import Path
from PyQt5.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                              QLabel, QPushButton, QPlainTextEdit, QTabWidget,
                              QFrame, QAction, QMessageBox, QApplication, QShortcut,
                              QProgressBar)
from PyQt5.QtCore import pyqtSignal, QThread, QUrl
from PyQt5.QtGui import QIcon, QDesktopServices, QKeySequence

from converter.config_manager import ConfigManager
from converter.error_messages import build_archive_error_message, build_conversion_summary
from converter.exceptions import ProcessingError
from converter.logs import log_exception
from converter.models import KIND_ORDER, ArchiveResult, ConversionResult, QuestionKind
from converter.service import ConversionService

from .preview_window import PreviewWindow
from .settings_window import SettingsWindow
from .styles import APP_STYLE, apply_shadow


PLACEHOLDERS = {
    QuestionKind.MULTIPLE_CHOICE: "1. What is the capital of France?\n*a) Paris\nb) London\nc) Berlin",
    QuestionKind.MULTIPLE_ANSWER: "1. Which are primary colors?\n*a) Red\n*b) Blue\nc) Green",
    QuestionKind.TRUE_FALSE: "1. The Earth is round.\n*a) True\nb) False",
    QuestionKind.ESSAY: "1. Discuss the causes of the First World War.",
    QuestionKind.FILL_IN_BLANK: "1. The chemical symbol for water is ____.\nH2O\nh2o",
    QuestionKind.MATCHING: "1. Match the capitals.\nFrance Paris\nJapan Tokyo",
    QuestionKind.NUMERIC: "1. What is 2 + 2?\n4\n0",
}


class ArchiveWorker(QThread):
    succeeded = pyqtSignal(object)
    failed = pyqtSignal(str)

    def __init__(self, service: ConversionService, buffers: dict):
        super().__init__()
        self.service = service
        self.buffers = dict(buffers)

    def run(self):
        try:
            result = self.service.build_archive(self.buffers)
        except ProcessingError as exc:
            self.failed.emit(str(exc))
            return
        except Exception as exc:
            log_exception("archive worker", exc, self.service.log_dir)
            self.failed.emit(f"{type(exc).__name__}: {exc}")
            return
        self.succeeded.emit(result)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Blackboard Question Converter v2.0")
        icon_path = os.path.join("assets", "icon.ico")
        if os.path.isfile(icon_path):
            self.setWindowIcon(QIcon(icon_path))
        self.resize(900, 720)

        self.config_manager = ConfigManager()
        self.service = ConversionService(self.config_manager)
        self.editors: dict[QuestionKind, QPlainTextEdit] = {}
        self.last_result: ConversionResult | None = None
        self.last_output_dir = ""
        self._archive_worker: ArchiveWorker | None = None

        self.initUI()
        self.applyStyle()
        self.updateCounters()

    def initUI(self):
        menu_bar = self.menuBar()
        self.settings_action = QAction("Settings", self)
        self.settings_action.triggered.connect(self.showSettings)
        help_action = QAction("Help", self)
        help_action.triggered.connect(self.showHelp)
        menu_bar.addAction(self.settings_action)
        menu_bar.addAction(help_action)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(24, 24, 24, 24)
        main_layout.setSpacing(14)

        title_label = QLabel("Blackboard Question Converter")
        title_label.setObjectName("MainTitle")
        main_layout.addWidget(title_label)

        subtitle_label = QLabel("Paste numbered questions into each tab, then convert or export to QTI 2.1.")
        subtitle_label.setObjectName("SubTitle")
        main_layout.addWidget(subtitle_label)

        self.tabs = QTabWidget()
        self.tabs.setObjectName("KindTabs")
        for kind in KIND_ORDER:
            editor = QPlainTextEdit()
            editor.setPlaceholderText(PLACEHOLDERS[kind])
            editor.textChanged.connect(self.updateCounters)
            self.editors[kind] = editor
            self.tabs.addTab(editor, kind.label)
        apply_shadow(self.tabs)
        main_layout.addWidget(self.tabs, stretch=3)

        self.total_label = QLabel("Total questions: 0")
        self.total_label.setObjectName("TotalLabel")
        main_layout.addWidget(self.total_label)

        btn_layout = QHBoxLayout()
        self.convert_btn = QPushButton("Convert")
        self.convert_btn.setObjectName("PrimaryBtn")
        self.convert_btn.clicked.connect(self.startConversion)
        self.preview_btn = QPushButton("Preview")
        self.preview_btn.setEnabled(False)
        self.preview_btn.clicked.connect(self.showPreview)
        self.copy_btn = QPushButton("Copy")
        self.copy_btn.setEnabled(False)
        self.copy_btn.clicked.connect(self.copyOutput)
        self.save_btn = QPushButton("Save .txt")
        self.save_btn.setEnabled(False)
        self.save_btn.clicked.connect(self.saveTabFile)
        self.export_btn = QPushButton("Export QTI")
        self.export_btn.clicked.connect(self.startArchiveExport)
        self.open_output_btn = QPushButton("Open Folder")
        self.open_output_btn.setEnabled(False)
        self.open_output_btn.clicked.connect(self.openOutputFolder)
        self.clear_btn = QPushButton("Clear All")
        self.clear_btn.clicked.connect(self.clearAll)

        for button in (
            self.convert_btn,
            self.preview_btn,
            self.copy_btn,
            self.save_btn,
            self.export_btn,
            self.open_output_btn,
            self.clear_btn,
        ):
            btn_layout.addWidget(button)
        main_layout.addLayout(btn_layout)

        self.status_frame = QFrame()
        self.status_frame.setObjectName("StatusFrame")
        status_layout = QVBoxLayout(self.status_frame)
        self.status_label = QLabel("Ready")
        status_layout.addWidget(self.status_label)
        self.progress_bar = QProgressBar()
        self.progress_bar.setVisible(False)
        status_layout.addWidget(self.progress_bar)
        main_layout.addWidget(self.status_frame)

        self.output_view = QPlainTextEdit()
        self.output_view.setObjectName("OutputView")
        self.output_view.setReadOnly(True)
        self.output_view.setPlaceholderText("Converted tab-delimited rows appear here.")
        main_layout.addWidget(self.output_view, stretch=2)

        shortcut = QShortcut(QKeySequence("Ctrl+Return"), self)
        shortcut.activated.connect(self.startConversion)
        enter_shortcut = QShortcut(QKeySequence("Ctrl+Enter"), self)
        enter_shortcut.activated.connect(self.startConversion)

    def collectBuffers(self) -> dict[QuestionKind, str]:
        return {kind: editor.toPlainText() for kind, editor in self.editors.items()}

    def updateCounters(self):
        counts = self.service.count_questions(self.collectBuffers())
        for index, kind in enumerate(KIND_ORDER):
            count = counts.get(kind, 0)
            suffix = f" ({count})" if count else ""
            self.tabs.setTabText(index, f"{kind.label}{suffix}")
        self.total_label.setText(f"Total questions: {sum(counts.values())}")

    def startConversion(self):
        result = self.service.convert(self.collectBuffers())
        self.last_result = result
        self.output_view.setPlainText(result.rows)
        has_rows = bool(result.rows)
        self.copy_btn.setEnabled(has_rows)
        self.save_btn.setEnabled(has_rows)
        self.preview_btn.setEnabled(bool(result.questions or result.failures))

        status_suffix = f" | {len(result.failures)} skipped" if result.has_failures else ""
        self.status_label.setText(f"Converted {result.total} question(s){status_suffix}")
        if result.has_failures or result.warnings or not result.total:
            QMessageBox.warning(self, "Conversion", build_conversion_summary(result))

    def showPreview(self):
        if not self.last_result:
            QMessageBox.information(self, "Preview", "Convert the questions first.")
            return
        preview = PreviewWindow(self.last_result, self)
        preview.exec_()

    def copyOutput(self):
        text = self.output_view.toPlainText()
        if not text:
            return
        QApplication.clipboard().setText(text)
        self.status_label.setText("Copied the converted rows to the clipboard.")

    def saveTabFile(self):
        if not self.last_result or not self.last_result.rows:
            QMessageBox.information(self, "Save", "Convert the questions first.")
            return
        try:
            path = self.service.export_tab_file(self.last_result)
        except OSError as exc:
            log_exception("save tab file", exc, self.service.log_dir)
            QMessageBox.warning(self, "Save failed", f"Could not save the file.\n{exc}")
            return
        self._on_file_written(path)

    def startArchiveExport(self):
        if self._archive_worker and self._archive_worker.isRunning():
            QMessageBox.information(self, "Export", "A QTI export is already in progress.")
            return

        self.progress_bar.setVisible(True)
        self.progress_bar.setRange(0, 0)
        self.status_label.setText("Building the QTI package..")
        self.export_btn.setEnabled(False)
        self.settings_action.setEnabled(False)

        self._archive_worker = ArchiveWorker(self.service, self.collectBuffers())
        self._archive_worker.succeeded.connect(self._on_archive_succeeded)
        self._archive_worker.failed.connect(self._on_archive_failed)
        self._archive_worker.finished.connect(self._on_archive_finished)
        self._archive_worker.start()

    def _on_archive_succeeded(self, result: ArchiveResult):
        try:
            path = self.service.export_archive(result)
        except ProcessingError as exc:
            self._on_archive_failed(str(exc))
            return
        self._on_file_written(path)
        if result.failures:
            lines = [f"- {failure.describe()}" for failure in result.failures]
            QMessageBox.warning(
                self,
                "QTI export",
                f"Exported {result.item_count} question(s). Skipped {len(result.failures)} malformed block(s):\n\n"
                + "\n".join(lines),
            )

    def _on_archive_failed(self, error_message: str):
        self.status_label.setText("QTI export failed")
        QMessageBox.warning(self, "QTI export failed", build_archive_error_message(error_message))

    def _on_archive_finished(self):
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(False)
        self.export_btn.setEnabled(True)
        self.settings_action.setEnabled(True)
        self._archive_worker = None

    def _on_file_written(self, path: str):
        self.last_output_dir = str(Path(path).parent)
        self.open_output_btn.setEnabled(True)
        self.status_label.setText(f"Saved: {path}")
        warning_text = (self.service.last_warning or "").strip()
        if warning_text:
            QMessageBox.warning(self, "Saved with warnings", warning_text)

    def clearAll(self):
        answer = QMessageBox.question(
            self,
            "Clear All",
            "Clear every tab and the converted output?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if answer != QMessageBox.Yes:
            return
        for editor in self.editors.values():
            editor.clear()
        self.output_view.clear()
        self.last_result = None
        self.copy_btn.setEnabled(False)
        self.save_btn.setEnabled(False)
        self.preview_btn.setEnabled(False)
        self.status_label.setText("Ready")

    def showSettings(self):
        if self._archive_worker and self._archive_worker.isRunning():
            QMessageBox.information(self, "Settings", "Settings cannot be changed during an export.")
            return
        settings = SettingsWindow(self.config_manager, self)
        if settings.exec_():
            self.service.reload_config()
            self.updateCounters()
            self.status_label.setText("Settings saved.")

    def showHelp(self):
        QMessageBox.information(
            self,
            "Help",
            "1) Paste numbered questions (\"1. ...\") into the tab for their type.\n"
            "2) Mark correct choices with a leading asterisk, e.g. \"*b) Paris\".\n"
            "3) Press Convert (Ctrl+Enter) for tab-delimited rows, or Export QTI for a ZIP package.\n\n"
            "Bracketed metadata such as (LO1) or [Module 2] is removed automatically.",
        )

    def openOutputFolder(self):
        output_dir = (self.last_output_dir or "").strip()
        if not output_dir or not Path(output_dir).exists():
            QMessageBox.information(self, "Open Folder", "Save a file first.")
            return
        QDesktopServices.openUrl(QUrl.fromLocalFile(output_dir))

    def applyStyle(self):
        self.setStyleSheet(APP_STYLE)
