from __future__ import annotations

from typing import Mapping, Optional, Union

from .config_manager import ConfigManager
from .exceptions import ArchiveGenerationError, BlockParseError
from .formatter import TabFormatter, validate_tab_delimited
from .generator import OutputGenerator
from .ids import IdGenerator
from .logs import append_log
from .models import (
    KIND_ORDER,
    ArchiveResult,
    BlockFailure,
    ConversionResult,
    Question,
    QuestionKind,
)
from .normalizer import count_questions, split_blocks
from .parser import QuestionParser

Buffers = Mapping[Union[QuestionKind, str], str]


class ConversionService:
    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        self.config_manager = config_manager or ConfigManager()
        self.last_warning = ""
        self._refresh_dependencies()

    def _refresh_dependencies(self) -> None:
        config = self.config_manager.all()
        self.config = config
        self.formatter = TabFormatter()
        self.generator = OutputGenerator(config)
        self.batch_limit = int(config.get("output", {}).get("batch_limit", 250))
        self.log_dir = self.generator.output_directory

    def reload_config(self) -> None:
        self.config_manager.reload()
        self._refresh_dependencies()

    def convert(self, buffers: Buffers) -> ConversionResult:
        """Parse every buffer and render the tab-delimited rows.

        Malformed blocks are skipped and reported in ``failures``; the rows of
        every block that parsed are still returned.
        """
        questions, failures, _ = self.parse_buffers(buffers)
        result = ConversionResult(
            questions=questions,
            rows=self.formatter.to_rows(questions),
            failures=failures,
        )

        if result.rows and not validate_tab_delimited(result.rows):
            result.warnings.append(
                "Warning: Output format validation failed. Please review the converted questions."
            )
        if result.total > self.batch_limit:
            result.warnings.append(
                f"Warning: Batch size ({result.total}) exceeds recommended maximum "
                f"({self.batch_limit}). Consider splitting into smaller batches."
            )
        self.last_warning = "\n".join(result.warnings)

        append_log(
            f"tab conversion | converted={result.total} | failures={len(failures)} "
            f"| warnings={len(result.warnings)}",
            self.log_dir,
        )
        for failure in failures:
            append_log(f"block rejected | {failure.describe()}", self.log_dir)
        return result

    def build_archive(self, buffers: Buffers) -> ArchiveResult:
        questions, failures, ids = self.parse_buffers(buffers)
        try:
            result = self.generator.build_archive(questions, ids)
        except ArchiveGenerationError as exc:
            append_log(f"archive generation failed | {exc}", self.log_dir)
            raise
        result.failures = failures
        append_log(
            f"qti export | items={result.item_count} | failures={len(failures)} | test={result.test_id}",
            self.log_dir,
        )
        return result

    def parse_buffers(self, buffers: Buffers) -> tuple[list[Question], list[BlockFailure], IdGenerator]:
        ids = IdGenerator()
        parser = QuestionParser(self.config, ids)
        normalized = self._normalize_buffers(buffers)

        questions: list[Question] = []
        failures: list[BlockFailure] = []
        for kind in KIND_ORDER:
            text = normalized.get(kind, "")
            blocks = split_blocks(text, lettered=kind == QuestionKind.ESSAY)
            for index, block in enumerate(blocks, start=1):
                try:
                    questions.append(parser.parse(kind, block))
                except BlockParseError as exc:
                    failures.append(BlockFailure(kind=kind, index=index, reason=exc.reason))
        return questions, failures, ids

    def count_questions(self, buffers: Buffers) -> dict[QuestionKind, int]:
        normalized = self._normalize_buffers(buffers)
        return {
            kind: count_questions(normalized.get(kind, ""), lettered=kind == QuestionKind.ESSAY)
            for kind in KIND_ORDER
        }

    def export_tab_file(self, result: ConversionResult, output_dir: Optional[str] = None) -> str:
        path = self.generator.write_tab_file(result.rows, output_dir)
        self.last_warning = self.generator.last_warning
        return path

    def export_archive(self, result: ArchiveResult, output_dir: Optional[str] = None) -> str:
        path = self.generator.write_archive(result, output_dir)
        self.last_warning = self.generator.last_warning
        return path

    @staticmethod
    def _normalize_buffers(buffers: Buffers) -> dict[QuestionKind, str]:
        normalized: dict[QuestionKind, str] = {}
        for key, text in buffers.items():
            normalized[QuestionKind(key)] = text or ""
        return normalized
