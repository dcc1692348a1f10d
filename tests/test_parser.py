import unittest

from converter.exceptions import BlockParseError
from converter.models import QuestionKind
from converter.parser import QuestionParser


def _make_parser(**parsing) -> QuestionParser:
    return QuestionParser({"parsing": parsing})


class ChoiceParserTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = _make_parser()

    def test_single_answer_block_with_metadata(self) -> None:
        question = self.parser.parse(
            QuestionKind.MULTIPLE_CHOICE,
            "1. Capital of France? (LO1)\na. London\nb. Paris*\nc. Berlin",
        )
        self.assertEqual(question.kind, QuestionKind.MULTIPLE_CHOICE)
        self.assertEqual(question.question_text, "Capital of France?")
        self.assertEqual([choice.text for choice in question.choices], ["London", "Paris", "Berlin"])
        self.assertEqual([choice.is_correct for choice in question.choices], [False, True, False])

    def test_leading_asterisk_and_parenthesis_marker(self) -> None:
        question = self.parser.parse(
            QuestionKind.MULTIPLE_CHOICE,
            "2. Largest ocean?\na) Atlantic\n*b) Pacific\nc) Indian",
        )
        self.assertEqual(question.correct_choices[0].text, "Pacific")

    def test_arabic_choice_markers_are_removed(self) -> None:
        question = self.parser.parse(
            QuestionKind.MULTIPLE_CHOICE,
            "1. عاصمة فرنسا؟\nأ) لندن\n*ب) باريس",
        )
        self.assertEqual(question.question_text, "عاصمة فرنسا؟")
        self.assertEqual([choice.text for choice in question.choices], ["لندن", "باريس"])
        self.assertEqual(question.correct_choices[0].text, "باريس")

        question = self.parser.parse(
            QuestionKind.MULTIPLE_ANSWER,
            "2. مدن فرنسية؟\nأ. باريس*\nب. ليون*\nج. روما",
        )
        self.assertEqual([choice.text for choice in question.correct_choices], ["باريس", "ليون"])

    def test_unmarked_words_keep_their_first_letter(self) -> None:
        question = self.parser.parse(
            QuestionKind.MULTIPLE_CHOICE,
            "1. Pick a city\nLondon\n*Paris",
        )
        self.assertEqual([choice.text for choice in question.choices], ["London", "Paris"])

    def test_multiple_answer_keeps_every_marked_choice(self) -> None:
        question = self.parser.parse(
            QuestionKind.MULTIPLE_ANSWER,
            "1. Primary colors?\n*a) Red\n*b) Blue\nc) Green\n*d) Yellow",
        )
        self.assertEqual(len(question.correct_choices), 3)
        self.assertEqual(question.kind, QuestionKind.MULTIPLE_ANSWER)

    def test_missing_correct_answer_is_rejected(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Capital?\na) London\nb) Paris")
        self.assertIn("at least one correct answer", ctx.exception.reason)

    def test_question_without_choices_is_rejected(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Lonely question?")
        self.assertIn("at least a question and one choice", ctx.exception.reason)

    def test_empty_choice_lines_are_skipped(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Question?\n*\n(LO2)")
        self.assertIn("at least one choice", ctx.exception.reason)

    def test_multiple_correct_single_answer_is_accepted_by_default(self) -> None:
        question = self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Q?\n*a) x\n*b) y")
        self.assertEqual(len(question.correct_choices), 2)

    def test_strict_mode_limits_single_answer_questions(self) -> None:
        parser = _make_parser(strict_single_answer=True)
        with self.assertRaises(BlockParseError) as ctx:
            parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Q?\n*a) x\n*b) y")
        self.assertIn("exactly one correct answer", ctx.exception.reason)
        question = parser.parse(QuestionKind.MULTIPLE_ANSWER, "1. Q?\n*a) x\n*b) y")
        self.assertEqual(len(question.correct_choices), 2)

    def test_identifiers_are_unique(self) -> None:
        first = self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "1. Q?\n*a) x\nb) y\nc) z")
        second = self.parser.parse(QuestionKind.MULTIPLE_CHOICE, "2. Q?\n*a) x\nb) y")
        identifiers = [first.id, second.id]
        identifiers.extend(choice.id for choice in first.choices + second.choices)
        self.assertEqual(len(identifiers), len(set(identifiers)))
        self.assertTrue(all(identifier.startswith("id_") for identifier in identifiers))


class TrueFalseParserTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = _make_parser()

    def test_marked_true(self) -> None:
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Earth is round.\nTrue*\nFalse")
        self.assertEqual(question.question_text, "Earth is round.")
        self.assertTrue(question.correct_answer)

    def test_marked_false_in_second_position(self) -> None:
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. The sky is green.\na) True\n*b) False")
        self.assertFalse(question.correct_answer)

    def test_answer_follows_line_meaning_not_position(self) -> None:
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Water is wet.\n*a) False\nb) True")
        self.assertFalse(question.correct_answer)
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Water is wet.\na) False\n*b) True")
        self.assertTrue(question.correct_answer)

    def test_unmarked_defaults_to_false(self) -> None:
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Unsure.\nTrue\nFalse")
        self.assertFalse(question.correct_answer)

    def test_last_marked_line_wins(self) -> None:
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Both.\nTrue*\nFalse*")
        self.assertFalse(question.correct_answer)
        question = self.parser.parse(QuestionKind.TRUE_FALSE, "1. Both.\nFalse*\nTrue*")
        self.assertTrue(question.correct_answer)


class FreeResponseParserTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = _make_parser()

    def test_essay_joins_lines(self) -> None:
        question = self.parser.parse(QuestionKind.ESSAY, "1. Discuss the causes\nof the war. (LO4)")
        self.assertEqual(question.question_text, "Discuss the causes of the war.")

    def test_lettered_essay_prefix_is_removed(self) -> None:
        question = self.parser.parse(QuestionKind.ESSAY, "b) Explain magnetism.")
        self.assertEqual(question.question_text, "Explain magnetism.")

    def test_fill_in_blank_answers(self) -> None:
        question = self.parser.parse(QuestionKind.FILL_IN_BLANK, "1. Largest planet?\nJupiter\njupiter")
        self.assertEqual(question.question_text, "Largest planet?")
        self.assertEqual(question.accepted_answers, ("Jupiter", "jupiter"))

    def test_fill_in_blank_requires_answer(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.FILL_IN_BLANK, "1. Largest planet?")
        self.assertIn("at least one answer", ctx.exception.reason)

    def test_matching_skips_single_token_lines(self) -> None:
        question = self.parser.parse(
            QuestionKind.MATCHING,
            "1. Match the capitals.\nFrance Paris\nlonely\nJapan Tokyo City",
        )
        self.assertEqual(
            [(pair.left, pair.right) for pair in question.pairs],
            [("France", "Paris"), ("Japan", "Tokyo City")],
        )

    def test_matching_requires_a_pair(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.MATCHING, "1. Match.\nalone")
        self.assertIn("at least one answer pair", ctx.exception.reason)

    def test_numeric_with_and_without_tolerance(self) -> None:
        question = self.parser.parse(QuestionKind.NUMERIC, "1. What is 2 + 2?\n4")
        self.assertEqual(question.answer, "4")
        self.assertIsNone(question.tolerance)

        question = self.parser.parse(QuestionKind.NUMERIC, "1. Value of pi?\n3.14\n0.01")
        self.assertEqual(question.answer, "3.14")
        self.assertEqual(question.tolerance, "0.01")

    def test_numeric_requires_numeric_answer(self) -> None:
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.NUMERIC, "1. What is 2 + 2?")
        self.assertIn("must have an answer", ctx.exception.reason)
        with self.assertRaises(BlockParseError) as ctx:
            self.parser.parse(QuestionKind.NUMERIC, "1. What is 2 + 2?\nfour")
        self.assertIn("must be a number", ctx.exception.reason)

    def test_numeric_rejects_digit_grouping(self) -> None:
        for answer in ("1,000", "3,14"):
            with self.assertRaises(BlockParseError) as ctx:
                self.parser.parse(QuestionKind.NUMERIC, f"1. How many?\n{answer}")
            self.assertIn("must be a number", ctx.exception.reason)
        question = self.parser.parse(QuestionKind.NUMERIC, "1. How many?\n-1.5e3")
        self.assertEqual(question.answer, "-1.5e3")

    def test_question_made_only_of_metadata_is_rejected(self) -> None:
        for kind in (QuestionKind.FILL_IN_BLANK, QuestionKind.TRUE_FALSE, QuestionKind.NUMERIC):
            with self.assertRaises(BlockParseError) as ctx:
                self.parser.parse(kind, "1. (LO1)\nJupiter")
            self.assertEqual(ctx.exception.reason, "question text is required")

    def test_metadata_kept_when_stripping_disabled(self) -> None:
        parser = _make_parser(strip_metadata=False)
        question = parser.parse(QuestionKind.ESSAY, "1. Explain (LO1)")
        self.assertEqual(question.question_text, "Explain (LO1)")


if __name__ == "__main__":
    unittest.main()
