"""QTI 2.1 item, assessment-test and IMS content-package manifest rendering."""

from __future__ import annotations

from dataclasses import dataclass
import re
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

from .exceptions import ArchiveGenerationError
from .models import Question, QuestionKind


QTI_DIRECTORY = "qti21"
MANIFEST_FILENAME = "manifest.xml"

TRUE_CHOICE_ID = "choice-true"
FALSE_CHOICE_ID = "choice-false"
CORRECT_FEEDBACK_ID = "correct_fb"
INCORRECT_FEEDBACK_ID = "incorrect_fb"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
_QTI_NAMESPACES = (
    'xmlns="http://www.imsglobal.org/xsd/imsqti_v2p1"\n'
    '    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"\n'
    '    xsi:schemaLocation="http://www.imsglobal.org/xsd/imsqti_v2p1 '
    'http://www.imsglobal.org/xsd/qti/qtiv2p1/imsqti_v2p1.xsd"'
)
_SCORE_OUTCOMES = """  <outcomeDeclaration identifier="SCORE" cardinality="single" baseType="float">
    <defaultValue><value>0</value></defaultValue>
  </outcomeDeclaration>
  <outcomeDeclaration identifier="MAXSCORE" cardinality="single" baseType="float">
    <defaultValue><value>0</value></defaultValue>
  </outcomeDeclaration>"""
_FEEDBACK_OUTCOME = (
    '  <outcomeDeclaration identifier="FEEDBACKBASIC" cardinality="single" baseType="identifier"/>'
)
_MATCH_CORRECT_PROCESSING = f"""  <responseProcessing>
    <responseCondition>
      <responseIf>
        <match><variable identifier="RESPONSE"/><correct identifier="RESPONSE"/></match>
        <setOutcomeValue identifier="SCORE"><variable identifier="MAXSCORE"/></setOutcomeValue>
        <setOutcomeValue identifier="FEEDBACKBASIC"><baseValue baseType="identifier">{CORRECT_FEEDBACK_ID}</baseValue></setOutcomeValue>
      </responseIf>
      <responseElse>
        <setOutcomeValue identifier="FEEDBACKBASIC"><baseValue baseType="identifier">{INCORRECT_FEEDBACK_ID}</baseValue></setOutcomeValue>
      </responseElse>
    </responseCondition>
  </responseProcessing>"""

_TITLE_LIMIT = 60
# Characters outside the XML 1.0 Char production.
_INVALID_XML_CHARS_RE = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def escape_xml(text: str) -> str:
    """Escape the five reserved XML characters and drop ones XML cannot carry."""
    return escape(_INVALID_XML_CHARS_RE.sub("", text or ""), {'"': "&quot;", "'": "&apos;"})


def item_filename(item_id: str) -> str:
    return f"item_{item_id}.xml"


def bank_filename(test_id: str) -> str:
    return f"question_bank_{test_id}.xml"


@dataclass(frozen=True)
class QtiItemFile:
    identifier: str
    filename: str
    xml: str

    @property
    def archive_path(self) -> str:
        return f"{QTI_DIRECTORY}/{self.filename}"


def check_well_formed(xml_payload: str) -> None:
    try:
        ET.fromstring(xml_payload.encode("utf-8"))
    except ET.ParseError as exc:
        raise ArchiveGenerationError(f"generated XML is not well-formed: {exc}") from exc


class QtiRenderer:
    def render_item(self, question: Question) -> QtiItemFile:
        kind = question.kind
        if kind in (QuestionKind.MULTIPLE_CHOICE, QuestionKind.MULTIPLE_ANSWER):
            body = self._choice_item(question)
        elif kind == QuestionKind.TRUE_FALSE:
            body = self._true_false_item(question)
        elif kind == QuestionKind.ESSAY:
            body = self._essay_item(question)
        elif kind == QuestionKind.FILL_IN_BLANK:
            body = self._fill_in_blank_item(question)
        elif kind == QuestionKind.MATCHING:
            body = self._matching_item(question)
        elif kind == QuestionKind.NUMERIC:
            body = self._numeric_item(question)
        else:
            raise ValueError(f"unsupported question kind: {kind}")

        xml = "\n".join([_XML_DECLARATION, self._item_open(question), body, "</assessmentItem>"])
        check_well_formed(xml)
        return QtiItemFile(identifier=question.id, filename=item_filename(question.id), xml=xml)

    def render_test(self, items: list[QtiItemFile], test_id: str, title: str = "Question Bank") -> str:
        item_refs = "\n".join(
            f'      <assessmentItemRef identifier="{escape_xml(item.identifier)}" '
            f'href="{escape_xml(item.filename)}"/>'
            for item in items
        )
        xml = f"""{_XML_DECLARATION}
<assessmentTest {_QTI_NAMESPACES}
    identifier="{test_id}" title="{escape_xml(title)}">
  <testPart identifier="part_{test_id}" navigationMode="nonlinear" submissionMode="simultaneous">
    <assessmentSection identifier="section_{test_id}" visible="false" title="Section 1">
{item_refs}
    </assessmentSection>
  </testPart>
</assessmentTest>"""
        check_well_formed(xml)
        return xml

    def render_manifest(self, items: list[QtiItemFile], test_id: str, manifest_id: str) -> str:
        test_href = f"{QTI_DIRECTORY}/{bank_filename(test_id)}"
        dependencies = "\n".join(
            f'      <dependency identifierref="{escape_xml(item.identifier)}"/>' for item in items
        )
        item_resources = "\n".join(
            f'    <resource identifier="{escape_xml(item.identifier)}" type="imsqti_item_xmlv2p1" '
            f'href="{escape_xml(item.archive_path)}">\n'
            f'      <file href="{escape_xml(item.archive_path)}"/>\n'
            "    </resource>"
            for item in items
        )
        xml = f"""{_XML_DECLARATION}
<manifest xmlns="http://www.imsglobal.org/xsd/imscp_v1p1"
    xmlns:imsmd="http://ltsc.ieee.org/xsd/LOM"
    xmlns:imsqti="http://www.imsglobal.org/xsd/imsqti_metadata_v2p1"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xsi:schemaLocation="http://www.imsglobal.org/xsd/imscp_v1p1 http://www.imsglobal.org/xsd/imscp_v1p2.xsd http://ltsc.ieee.org/xsd/LOM imsmd_loose_v1p3.xsd http://www.imsglobal.org/xsd/imsqti_metadata_v2p1 http://www.imsglobal.org/xsd/qti/qtiv2p1/imsqti_metadata_v2p1.xsd"
    identifier="manifest-{manifest_id}">
  <metadata>
    <schema>QTIv2.1</schema>
    <schemaversion>2.0</schemaversion>
  </metadata>
  <organizations/>
  <resources>
    <resource identifier="resource-{test_id}" type="imsqti_test_xmlv2p1" href="{test_href}">
      <file href="{test_href}"/>
{dependencies}
    </resource>
{item_resources}
  </resources>
</manifest>"""
        check_well_formed(xml)
        return xml

    def _item_open(self, question: Question) -> str:
        title = question.question_text[:_TITLE_LIMIT]
        return (
            f"<assessmentItem {_QTI_NAMESPACES}\n"
            f'    identifier="{escape_xml(question.id)}" title="{escape_xml(title)}" '
            'adaptive="false" timeDependent="false">'
        )

    @staticmethod
    def _prompt(question: Question) -> str:
        return f"    <div>\n      <div>{escape_xml(question.question_text)}</div>\n    </div>"

    @staticmethod
    def _correct_response(cardinality: str, base_type: str, values: list[str]) -> str:
        value_lines = "\n".join(f"      <value>{escape_xml(value)}</value>" for value in values)
        return (
            f'  <responseDeclaration identifier="RESPONSE" cardinality="{cardinality}" '
            f'baseType="{base_type}">\n'
            "    <correctResponse>\n"
            f"{value_lines}\n"
            "    </correctResponse>\n"
            "  </responseDeclaration>"
        )

    def _choice_item(self, question: Question) -> str:
        max_choices = 1 if question.kind == QuestionKind.MULTIPLE_CHOICE else 0
        # Blackboard expects "multiple" cardinality for single-answer items as well.
        cardinality = "multiple"
        correct_ids = [choice.id for choice in question.correct_choices]
        choices = "\n".join(
            f'      <simpleChoice identifier="{escape_xml(choice.id)}" fixed="true">\n'
            f"        <div>{escape_xml(choice.text)}</div>\n"
            "      </simpleChoice>"
            for choice in question.choices
        )
        return "\n".join(
            [
                self._correct_response(cardinality, "identifier", correct_ids),
                _SCORE_OUTCOMES,
                _FEEDBACK_OUTCOME,
                "  <itemBody>",
                self._prompt(question),
                f'    <choiceInteraction responseIdentifier="RESPONSE" shuffle="false" maxChoices="{max_choices}">',
                choices,
                "    </choiceInteraction>",
                "  </itemBody>",
                _MATCH_CORRECT_PROCESSING,
            ]
        )

    def _true_false_item(self, question: Question) -> str:
        correct_id = TRUE_CHOICE_ID if question.correct_answer else FALSE_CHOICE_ID
        return "\n".join(
            [
                self._correct_response("single", "identifier", [correct_id]),
                _SCORE_OUTCOMES,
                _FEEDBACK_OUTCOME,
                "  <itemBody>",
                self._prompt(question),
                '    <choiceInteraction responseIdentifier="RESPONSE" shuffle="false" maxChoices="1">',
                f'      <simpleChoice identifier="{TRUE_CHOICE_ID}"><p>True</p></simpleChoice>',
                f'      <simpleChoice identifier="{FALSE_CHOICE_ID}"><p>False</p></simpleChoice>',
                "    </choiceInteraction>",
                "  </itemBody>",
                _MATCH_CORRECT_PROCESSING,
            ]
        )

    def _essay_item(self, question: Question) -> str:
        # Ungraded: no correct response and no response processing.
        return "\n".join(
            [
                '  <responseDeclaration identifier="RESPONSE" cardinality="single" baseType="string"/>',
                _SCORE_OUTCOMES,
                "  <itemBody>",
                self._prompt(question),
                '    <extendedTextInteraction responseIdentifier="RESPONSE"/>',
                "  </itemBody>",
            ]
        )

    def _fill_in_blank_item(self, question: Question) -> str:
        return "\n".join(
            [
                self._correct_response("single", "string", list(question.accepted_answers)),
                _SCORE_OUTCOMES,
                "  <itemBody>",
                self._prompt(question),
                '    <textEntryInteraction responseIdentifier="RESPONSE"/>',
                "  </itemBody>",
            ]
        )

    def _matching_item(self, question: Question) -> str:
        left_ids = [f"L{index}" for index in range(len(question.pairs))]
        right_ids = [f"R{index}" for index in range(len(question.pairs))]
        source = "\n".join(
            f'        <simpleAssociableChoice identifier="{left_ids[index]}" matchMax="1">'
            f"<p>{escape_xml(pair.left)}</p></simpleAssociableChoice>"
            for index, pair in enumerate(question.pairs)
        )
        target = "\n".join(
            f'        <simpleAssociableChoice identifier="{right_ids[index]}" matchMax="1">'
            f"<p>{escape_xml(pair.right)}</p></simpleAssociableChoice>"
            for index, pair in enumerate(question.pairs)
        )
        pair_values = [f"{left} {right}" for left, right in zip(left_ids, right_ids)]
        return "\n".join(
            [
                self._correct_response("multiple", "directedPair", pair_values),
                _SCORE_OUTCOMES,
                "  <itemBody>",
                self._prompt(question),
                '    <matchInteraction responseIdentifier="RESPONSE" shuffle="false" '
                f'maxAssociations="{len(question.pairs)}">',
                "      <simpleMatchSet>",
                source,
                "      </simpleMatchSet>",
                "      <simpleMatchSet>",
                target,
                "      </simpleMatchSet>",
                "    </matchInteraction>",
                "  </itemBody>",
            ]
        )

    def _numeric_item(self, question: Question) -> str:
        # TODO: encode question.tolerance once the grading semantics (absolute vs
        # percentage) are confirmed; the value is currently graded as an exact match.
        return "\n".join(
            [
                self._correct_response("single", "float", [question.answer]),
                _SCORE_OUTCOMES,
                "  <itemBody>",
                self._prompt(question),
                '    <textEntryInteraction responseIdentifier="RESPONSE" base="10"/>',
                "  </itemBody>",
            ]
        )
