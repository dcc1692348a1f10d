from PyQt5.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QListWidget,
                             QListWidgetItem, QTextEdit, QLabel, QPushButton,
                             QSplitter, QFrame)
from PyQt5.QtCore import Qt

from converter.models import ConversionResult, Question, QuestionKind


def describe_question(question: Question) -> str:
    lines = [f"[{question.kind.label}]", question.question_text, ""]
    kind = question.kind
    if kind in (QuestionKind.MULTIPLE_CHOICE, QuestionKind.MULTIPLE_ANSWER):
        for choice in question.choices:
            marker = "*" if choice.is_correct else " "
            lines.append(f"{marker} {choice.text}")
    elif kind == QuestionKind.TRUE_FALSE:
        lines.append(f"Answer: {'True' if question.correct_answer else 'False'}")
    elif kind == QuestionKind.FILL_IN_BLANK:
        lines.append("Accepted answers: " + ", ".join(question.accepted_answers))
    elif kind == QuestionKind.MATCHING:
        for pair in question.pairs:
            lines.append(f"{pair.left}  ->  {pair.right}")
    elif kind == QuestionKind.NUMERIC:
        lines.append(f"Answer: {question.answer}")
        if question.tolerance is not None:
            lines.append(f"Tolerance: {question.tolerance}")
    return "\n".join(lines).strip()


class PreviewWindow(QDialog):
    def __init__(self, result: ConversionResult, parent=None):
        super().__init__(parent)
        self.result = result

        self.setWindowTitle("Conversion preview")
        self.resize(900, 600)
        self.initUI()
        self.bindEvents()
        self.loadQuestions()

    def initUI(self):
        main_layout = QVBoxLayout(self)

        header_label = QLabel(
            f"{self.result.total} question(s) converted, {len(self.result.failures)} block(s) skipped."
        )
        header_label.setStyleSheet("font-weight: bold; color: #333; margin-bottom: 10px;")
        main_layout.addWidget(header_label)

        splitter = QSplitter(Qt.Horizontal)

        self.list_widget = QListWidget()
        self.list_widget.setObjectName("QuestionList")
        splitter.addWidget(self.list_widget)

        detail_container = QFrame()
        detail_layout = QVBoxLayout(detail_container)
        detail_layout.addWidget(QLabel("Details:"))
        self.detail_view = QTextEdit()
        self.detail_view.setReadOnly(True)
        detail_layout.addWidget(self.detail_view)
        splitter.addWidget(detail_container)
        splitter.setStretchFactor(1, 1)

        main_layout.addWidget(splitter)

        btn_layout = QHBoxLayout()
        self.close_btn = QPushButton("Close")
        btn_layout.addStretch()
        btn_layout.addWidget(self.close_btn)
        main_layout.addLayout(btn_layout)

    def bindEvents(self):
        self.list_widget.currentRowChanged.connect(self.onItemSelected)
        self.close_btn.clicked.connect(self.accept)

    def loadQuestions(self):
        self.list_widget.clear()
        for index, question in enumerate(self.result.questions, start=1):
            preview_line = question.question_text[:80] or "(no text)"
            self.list_widget.addItem(QListWidgetItem(f"✅ {index:02d}. [{question.kind.value}] {preview_line}"))
        for failure in self.result.failures:
            self.list_widget.addItem(QListWidgetItem(f"❌ {failure.describe()}"))

        if self.list_widget.count():
            self.list_widget.setCurrentRow(0)

    def onItemSelected(self, index: int):
        questions = self.result.questions
        if 0 <= index < len(questions):
            self.detail_view.setPlainText(describe_question(questions[index]))
            return
        failure_index = index - len(questions)
        if 0 <= failure_index < len(self.result.failures):
            failure = self.result.failures[failure_index]
            self.detail_view.setPlainText(f"Skipped block\n\n{failure.describe()}")
            return
        self.detail_view.clear()
