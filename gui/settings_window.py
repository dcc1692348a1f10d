import json

from PyQt5.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLineEdit,
                             QPushButton, QFormLayout, QGroupBox, QSpinBox,
                             QFileDialog, QMessageBox, QCheckBox)

from converter.config_manager import ConfigManager


class SettingsWindow(QDialog):
    def __init__(self, config_manager: ConfigManager, parent=None):
        super().__init__(parent)
        self.config_manager = config_manager
        self.setWindowTitle("Settings")
        self.resize(560, 460)
        self.initUI()
        self.loadConfig()

    def initUI(self):
        layout = QVBoxLayout(self)

        path_group = QGroupBox("Output folder")
        path_layout = QHBoxLayout()
        self.path_edit = QLineEdit()
        self.path_edit.setPlaceholderText("output")
        self.path_btn = QPushButton("Browse")
        path_layout.addWidget(self.path_edit)
        path_layout.addWidget(self.path_btn)
        path_group.setLayout(path_layout)
        layout.addWidget(path_group)

        files_group = QGroupBox("Output files")
        files_form = QFormLayout()
        self.tab_name_edit = QLineEdit()
        files_form.addRow("Tab-delimited file:", self.tab_name_edit)
        self.archive_name_edit = QLineEdit()
        files_form.addRow("QTI archive:", self.archive_name_edit)
        self.test_title_edit = QLineEdit()
        files_form.addRow("Test title:", self.test_title_edit)
        self.batch_limit_spin = QSpinBox()
        self.batch_limit_spin.setRange(1, 10000)
        self.batch_limit_spin.setValue(250)
        files_form.addRow("Batch warning above:", self.batch_limit_spin)
        files_group.setLayout(files_form)
        layout.addWidget(files_group)

        parsing_group = QGroupBox("Parsing")
        parsing_form = QFormLayout()
        self.strip_metadata_check = QCheckBox("Remove metadata tags such as (LO1) or [Module 2]")
        parsing_form.addRow(self.strip_metadata_check)
        self.strict_single_check = QCheckBox("Reject multiple choice questions with more than one correct answer")
        parsing_form.addRow(self.strict_single_check)
        parsing_group.setLayout(parsing_form)
        layout.addWidget(parsing_group)

        btn_layout = QHBoxLayout()
        self.export_btn = QPushButton("Export settings")
        self.import_btn = QPushButton("Import settings")
        self.save_btn = QPushButton("Save")
        self.save_btn.setObjectName("PrimaryBtn")
        self.cancel_btn = QPushButton("Cancel")
        btn_layout.addWidget(self.export_btn)
        btn_layout.addWidget(self.import_btn)
        btn_layout.addStretch()
        btn_layout.addWidget(self.save_btn)
        btn_layout.addWidget(self.cancel_btn)
        layout.addLayout(btn_layout)

        self.path_btn.clicked.connect(self.pickOutputDirectory)
        self.export_btn.clicked.connect(self.exportConfig)
        self.import_btn.clicked.connect(self.importConfig)
        self.save_btn.clicked.connect(self.saveConfig)
        self.cancel_btn.clicked.connect(self.reject)

    def loadConfig(self):
        config = self.config_manager.all()

        output = config.get("output", {})
        self.path_edit.setText(str(output.get("directory", "")))
        self.tab_name_edit.setText(str(output.get("tab_filename", "")))
        self.archive_name_edit.setText(str(output.get("archive_filename", "")))
        self.test_title_edit.setText(str(output.get("test_title", "")))
        self.batch_limit_spin.setValue(int(output.get("batch_limit", 250)))

        parsing = config.get("parsing", {})
        self.strip_metadata_check.setChecked(bool(parsing.get("strip_metadata", True)))
        self.strict_single_check.setChecked(bool(parsing.get("strict_single_answer", False)))

    def pickOutputDirectory(self):
        selected = QFileDialog.getExistingDirectory(
            self,
            "Select output folder",
            self.path_edit.text() or "",
        )
        if selected:
            self.path_edit.setText(selected)

    def exportConfig(self):
        target_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export settings",
            "question_converter_settings.json",
            "JSON Files (*.json);;All Files (*)",
        )
        if not target_path:
            return

        try:
            with open(target_path, "w", encoding="utf-8") as file:
                json.dump(self.config_manager.all(), file, ensure_ascii=False, indent=2)
            QMessageBox.information(self, "Export complete", f"Settings saved to\n{target_path}")
        except OSError as exc:
            QMessageBox.warning(self, "Export failed", f"Could not write the settings file.\n{exc}")

    def importConfig(self):
        source_path, _ = QFileDialog.getOpenFileName(
            self,
            "Import settings",
            "",
            "JSON Files (*.json);;All Files (*)",
        )
        if not source_path:
            return

        try:
            with open(source_path, "r", encoding="utf-8") as file:
                payload = json.load(file)
            if not isinstance(payload, dict):
                raise ValueError("the root JSON value must be an object")

            self.config_manager.update(payload)
            self.loadConfig()
            QMessageBox.information(self, "Import complete", "Settings imported.")
        except (OSError, ValueError) as exc:
            QMessageBox.warning(self, "Import failed", f"Could not read the settings file.\n{exc}")

    def saveConfig(self):
        partial = {
            "output": {
                "directory": self.path_edit.text().strip() or "output",
                "tab_filename": self.tab_name_edit.text().strip(),
                "archive_filename": self.archive_name_edit.text().strip(),
                "test_title": self.test_title_edit.text().strip() or "Question Bank",
                "batch_limit": self.batch_limit_spin.value(),
            },
            "parsing": {
                "strip_metadata": self.strip_metadata_check.isChecked(),
                "strict_single_answer": self.strict_single_check.isChecked(),
            },
        }
        self.config_manager.update(partial)
        self.accept()
