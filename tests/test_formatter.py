import unittest

from converter.formatter import TabFormatter, validate_tab_delimited
from converter.models import QuestionKind
from converter.parser import QuestionParser


class TabFormatterTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = QuestionParser({})
        self.formatter = TabFormatter()

    def _row(self, kind: QuestionKind, block: str) -> str:
        return self.formatter.to_row(self.parser.parse(kind, block))

    def test_multiple_choice_row(self) -> None:
        row = self._row(
            QuestionKind.MULTIPLE_CHOICE,
            "1. Capital of France? (LO1)\na. London\nb. Paris*\nc. Berlin",
        )
        self.assertEqual(row, "MC\tCapital of France?\tLondon\tincorrect\tParis\tcorrect\tBerlin\tincorrect")

    def test_correct_tags_match_marked_lines(self) -> None:
        block = "1. Primes?\n*a) 2\n*b) 3\nc) 4\n*d) 5\ne) 9"
        row = self._row(QuestionKind.MULTIPLE_ANSWER, block)
        fields = row.split("\t")
        self.assertEqual(fields[0], "MA")
        self.assertEqual(fields.count("correct"), block.count("*"))
        self.assertEqual(fields.count("incorrect"), 2)

    def test_true_false_row(self) -> None:
        self.assertEqual(self._row(QuestionKind.TRUE_FALSE, "1. Earth is round.\nTrue*\nFalse"), "TF\tEarth is round.\ttrue")
        self.assertEqual(self._row(QuestionKind.TRUE_FALSE, "1. Moon is cheese.\nTrue\nFalse*"), "TF\tMoon is cheese.\tfalse")

    def test_essay_row_reserves_example_answer(self) -> None:
        self.assertEqual(self._row(QuestionKind.ESSAY, "1. Discuss."), "ESS\tDiscuss.\t")

    def test_fill_in_blank_row(self) -> None:
        self.assertEqual(self._row(QuestionKind.FILL_IN_BLANK, "1. Largest planet?\nJupiter"), "FIB\tLargest planet?\tJupiter")

    def test_matching_row(self) -> None:
        row = self._row(QuestionKind.MATCHING, "1. Match.\nFrance Paris\nJapan Tokyo")
        self.assertEqual(row, "MAT\tMatch.\tFrance\tParis\tJapan\tTokyo")

    def test_numeric_row_omits_missing_tolerance(self) -> None:
        row = self._row(QuestionKind.NUMERIC, "1. What is 2 + 2?\n4")
        self.assertEqual(row, "NUM\tWhat is 2 + 2?\t4")
        self.assertFalse(row.endswith("\t"))
        row = self._row(QuestionKind.NUMERIC, "1. Pi?\n3.14\n0.01")
        self.assertEqual(row, "NUM\tPi?\t3.14\t0.01")

    def test_rows_are_newline_joined(self) -> None:
        questions = [
            self.parser.parse(QuestionKind.ESSAY, "1. One."),
            self.parser.parse(QuestionKind.FILL_IN_BLANK, "2. Two?\n2"),
        ]
        self.assertEqual(self.formatter.to_rows(questions), "ESS\tOne.\t\nFIB\tTwo?\t2")
        self.assertEqual(self.formatter.to_rows([]), "")


class TabValidationTestCase(unittest.TestCase):
    def test_valid_rows(self) -> None:
        self.assertTrue(validate_tab_delimited("MC\tQ?\ta\tcorrect\nESS\tQ\t"))
        self.assertTrue(validate_tab_delimited(""))

    def test_row_without_fields_fails(self) -> None:
        self.assertFalse(validate_tab_delimited("MC\tQ?\ta\tcorrect\nbroken row"))


if __name__ == "__main__":
    unittest.main()
