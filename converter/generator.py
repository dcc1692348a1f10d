from __future__ import annotations

from io import BytesIO
from pathlib import Path
import re
import unicodedata
import zipfile
from typing import Any, Optional

from .exceptions import ArchiveGenerationError
from .ids import IdGenerator
from .models import ArchiveResult, Question
from .qti import MANIFEST_FILENAME, QTI_DIRECTORY, QtiItemFile, QtiRenderer, bank_filename


DEFAULT_TAB_FILENAME = "blackboard_questions.txt"
DEFAULT_ARCHIVE_FILENAME = "blackboard_qti_2_1_export.zip"


class OutputGenerator:
    def __init__(self, config: dict[str, Any]) -> None:
        output = config.get("output", {})
        self.output_directory = str(output.get("directory", "") or "output")
        self.tab_filename = self._sanitize_filename_component(
            str(output.get("tab_filename", DEFAULT_TAB_FILENAME)), DEFAULT_TAB_FILENAME
        )
        self.archive_filename = self._sanitize_filename_component(
            str(output.get("archive_filename", DEFAULT_ARCHIVE_FILENAME)), DEFAULT_ARCHIVE_FILENAME
        )
        self.test_title = str(output.get("test_title", "Question Bank"))
        self.renderer = QtiRenderer()
        self.last_warning = ""
        self._run_warnings: list[str] = []

    def build_archive(self, questions: list[Question], ids: Optional[IdGenerator] = None) -> ArchiveResult:
        if not questions:
            raise ArchiveGenerationError("No questions to export.")
        ids = ids or IdGenerator()
        test_id = ids.next_id()

        items: list[QtiItemFile] = [self.renderer.render_item(question) for question in questions]
        test_xml = self.renderer.render_test(items, test_id, title=self.test_title)
        manifest_xml = self.renderer.render_manifest(items, test_id, manifest_id=ids.next_id())

        filenames: list[str] = []
        buffer = BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
                for item in items:
                    archive.writestr(item.archive_path, item.xml)
                    filenames.append(item.archive_path)
                test_path = f"{QTI_DIRECTORY}/{bank_filename(test_id)}"
                archive.writestr(test_path, test_xml)
                filenames.append(test_path)
                archive.writestr(MANIFEST_FILENAME, manifest_xml)
                filenames.append(MANIFEST_FILENAME)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise ArchiveGenerationError(f"Error generating ZIP file: {exc}") from exc

        return ArchiveResult(
            data=buffer.getvalue(),
            test_id=test_id,
            item_count=len(items),
            filenames=filenames,
        )

    def write_tab_file(self, text: str, output_dir: Optional[str] = None) -> str:
        self._run_warnings = []
        target_dir = self._prepare_directory(output_dir)
        path = target_dir / self.tab_filename
        try:
            path.write_text(text, encoding="utf-8")
        except OSError:
            if self.tab_filename == DEFAULT_TAB_FILENAME:
                raise
            path = target_dir / DEFAULT_TAB_FILENAME
            path.write_text(text, encoding="utf-8")
            self._warn(f"Could not use the configured file name; saved as {DEFAULT_TAB_FILENAME}.")
        self.last_warning = "\n".join(self._run_warnings).strip()
        return str(path)

    def write_archive(self, result: ArchiveResult, output_dir: Optional[str] = None) -> str:
        self._run_warnings = []
        try:
            target_dir = self._prepare_directory(output_dir)
            path = target_dir / self.archive_filename
            try:
                path.write_bytes(result.data)
            except OSError:
                if self.archive_filename == DEFAULT_ARCHIVE_FILENAME:
                    raise
                path = target_dir / DEFAULT_ARCHIVE_FILENAME
                path.write_bytes(result.data)
                self._warn(
                    f"Could not use the configured archive name; saved as {DEFAULT_ARCHIVE_FILENAME}."
                )
        except OSError as exc:
            raise ArchiveGenerationError(f"Could not save the QTI archive: {exc}") from exc
        self.last_warning = "\n".join(self._run_warnings).strip()
        return str(path)

    def _prepare_directory(self, output_dir: Optional[str]) -> Path:
        target = Path(output_dir or self.output_directory).expanduser().resolve()
        target.mkdir(parents=True, exist_ok=True)
        return target

    def _sanitize_filename_component(self, value: str, fallback: str) -> str:
        text = unicodedata.normalize("NFKC", value or "")
        text = "".join(ch for ch in text if ord(ch) >= 32 and not (127 <= ord(ch) <= 159))
        text = re.sub(r'[\\/:*?"<>|]+', "_", text)
        text = re.sub(r"\s+", " ", text).strip().strip(".")
        if not text:
            return fallback
        return text[:120]

    def _warn(self, message: str) -> None:
        text = message.strip()
        if text and text not in self._run_warnings:
            self._run_warnings.append(text)
