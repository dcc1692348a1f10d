import io
import shutil
import unittest
import zipfile
from pathlib import Path
from uuid import uuid4

from converter.exceptions import ArchiveGenerationError
from converter.generator import DEFAULT_TAB_FILENAME, OutputGenerator
from converter.ids import IdGenerator
from converter.models import QuestionKind
from converter.parser import QuestionParser


def _make_generator(**output) -> OutputGenerator:
    return OutputGenerator({"output": output})


class ArchiveBuildTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.ids = IdGenerator()
        parser = QuestionParser({}, self.ids)
        self.questions = [
            parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Capital?\na) London\n*b) Paris"),
            parser.parse(QuestionKind.TRUE_FALSE, "1. Earth is round.\nTrue*\nFalse"),
            parser.parse(QuestionKind.NUMERIC, "1. 2 + 2?\n4"),
        ]

    def test_empty_question_list_is_rejected(self) -> None:
        with self.assertRaises(ArchiveGenerationError) as ctx:
            _make_generator().build_archive([])
        self.assertEqual(str(ctx.exception), "No questions to export.")

    def test_archive_layout(self) -> None:
        result = _make_generator().build_archive(self.questions, self.ids)
        self.assertEqual(result.item_count, 3)

        with zipfile.ZipFile(io.BytesIO(result.data)) as archive:
            names = archive.namelist()
            self.assertIn("manifest.xml", names)
            for question in self.questions:
                self.assertIn(f"qti21/item_{question.id}.xml", names)
            self.assertIn(f"qti21/question_bank_{result.test_id}.xml", names)
            self.assertEqual(sorted(names), sorted(result.filenames))
            manifest = archive.read("manifest.xml").decode("utf-8")
            for question in self.questions:
                self.assertIn(f"qti21/item_{question.id}.xml", manifest)
            self.assertEqual(archive.getinfo("manifest.xml").compress_type, zipfile.ZIP_DEFLATED)

    def test_test_identifier_is_distinct_from_items(self) -> None:
        result = _make_generator().build_archive(self.questions, self.ids)
        self.assertNotIn(result.test_id, {question.id for question in self.questions})
        self.assertTrue(result.test_id.startswith("id_"))

    def test_configured_title_is_used(self) -> None:
        result = _make_generator(test_title="Week 3 Quiz").build_archive(self.questions)
        with zipfile.ZipFile(io.BytesIO(result.data)) as archive:
            bank = archive.read(f"qti21/question_bank_{result.test_id}.xml").decode("utf-8")
        self.assertIn('title="Week 3 Quiz"', bank)


class OutputWriteTestCase(unittest.TestCase):
    def _make_base_dir(self, prefix: str) -> Path:
        base = Path(".tmp_generator_local") / f"{prefix}_{uuid4().hex}"
        base.mkdir(parents=True, exist_ok=True)
        self.addCleanup(shutil.rmtree, base, True)
        return base

    def test_write_tab_file(self) -> None:
        base = self._make_base_dir("tab")
        generator = _make_generator(directory=str(base))
        path = generator.write_tab_file("MC\tQ?\ta\tcorrect")
        self.assertEqual(Path(path).name, DEFAULT_TAB_FILENAME)
        self.assertEqual(Path(path).read_text(encoding="utf-8"), "MC\tQ?\ta\tcorrect")
        self.assertEqual(generator.last_warning, "")

    def test_write_archive(self) -> None:
        base = self._make_base_dir("zip")
        generator = _make_generator(directory=str(base), archive_filename="bank.zip")
        parser = QuestionParser({})
        result = generator.build_archive([parser.parse(QuestionKind.ESSAY, "1. Discuss.")])
        path = generator.write_archive(result)
        self.assertEqual(Path(path).name, "bank.zip")
        self.assertEqual(Path(path).read_bytes(), result.data)

    def test_unsafe_file_names_are_sanitized(self) -> None:
        generator = _make_generator(tab_filename='bad/na:me?.txt', archive_filename="   ")
        self.assertEqual(generator.tab_filename, "bad_na_me_.txt")
        self.assertEqual(generator.archive_filename, "blackboard_qti_2_1_export.zip")

    def test_unwritable_archive_target_raises(self) -> None:
        base = self._make_base_dir("blocked")
        blocker = base / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        generator = _make_generator()
        parser = QuestionParser({})
        result = generator.build_archive([parser.parse(QuestionKind.ESSAY, "1. Discuss.")])
        with self.assertRaises(ArchiveGenerationError):
            generator.write_archive(result, output_dir=str(blocker))


if __name__ == "__main__":
    unittest.main()
