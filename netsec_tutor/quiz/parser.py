"""
Parsers for the loosely formatted text the model returns.

Question prompts ask for a fixed layout ("Question: ...", "A) ...",
"Correct Answer: ..."), but the model often adds preamble, wraps lines or
leaks the answer into the stem. These helpers recover what they can and
fill in defaults for the rest. Only a missing question stem is treated as
a parse failure.
"""

import re
from dataclasses import dataclass

from netsec_tutor.config import NEUTRAL_SCORE

OPTION_LETTERS = ("A", "B", "C", "D")
DEFAULT_OPTIONS = [f"Option {letter}" for letter in OPTION_LETTERS]
SEE_DOCUMENT = "(See document)"

_NEWLINES = re.compile(r"[\r\n]+")
_SINGLE_LINE_QUESTION = re.compile(r"Question:\s*([^\n]+)")
_LEAKED_CORRECT = re.compile(r"\s*Correct Answer:.*$", re.IGNORECASE | re.DOTALL)
_LEAKED_EXPECTED = re.compile(r"\s*Expected Answer:.*$", re.IGNORECASE | re.DOTALL)
_TRAILING_LETTER = re.compile(r"\s*\([A-D]\)$", re.IGNORECASE)
_MCQ_ANSWER = re.compile(r"Correct Answer:\s*\(?([A-D])\b", re.IGNORECASE)
_TF_ANSWER = re.compile(r"Correct Answer:\s*(True|False)", re.IGNORECASE)
_EXPECTED_ANSWER = re.compile(r"Expected Answer:\s*(.+)", re.IGNORECASE | re.DOTALL)
_SCORE = re.compile(r"Score:\s*(\d+)", re.IGNORECASE)
_FEEDBACK = re.compile(r"Feedback:\s*(.+)", re.IGNORECASE | re.DOTALL)


class QuestionParseError(ValueError):
    """Raised when model output contains no recognizable question."""


@dataclass
class ParsedQuestion:
    question: str
    correct_answer: str
    options: list[str] | None = None


@dataclass
class ParsedGrade:
    score: int
    feedback: str


def _normalize(text: str) -> str:
    return _NEWLINES.sub("\n", text)


def _multiline_question(text: str, stop_label: str) -> str:
    """Question text that may wrap over several lines until `stop_label`."""
    pattern = re.compile(
        rf"Question:\s*([^\n]+(?:\n(?!{stop_label}:)[^\n]+)*)", re.IGNORECASE
    )
    match = pattern.search(text)
    if not match:
        raise QuestionParseError("No question found in model output")
    return match.group(1).strip().replace("\n", " ")


def parse_multiple_choice(text: str) -> ParsedQuestion:
    """
    Parse a multiple-choice question.

    Missing options become "Option A".."Option D"; a missing answer letter
    defaults to A. The returned `correct_answer` is the option text.

    Raises:
        QuestionParseError: If there is no "Question:" line
    """
    text = _normalize(text)
    match = _SINGLE_LINE_QUESTION.search(text)
    if not match:
        raise QuestionParseError("No question found in model output")

    question = _LEAKED_CORRECT.sub("", match.group(1).strip()).strip()
    question = _TRAILING_LETTER.sub("", question).strip()

    options = []
    for letter, default in zip(OPTION_LETTERS, DEFAULT_OPTIONS):
        option = re.search(rf"(?m)^\s*{letter}\)\s*([^\n]+)", text)
        options.append(option.group(1).strip() if option else default)

    answer = _MCQ_ANSWER.search(text)
    letter = answer.group(1).upper() if answer else "A"
    correct_answer = options[OPTION_LETTERS.index(letter)]

    return ParsedQuestion(question=question, correct_answer=correct_answer, options=options)


def parse_true_false(text: str) -> ParsedQuestion:
    """
    Parse a true/false question. The answer is "TRUE" or "FALSE" (default TRUE).

    Raises:
        QuestionParseError: If there is no "Question:" line
    """
    text = _normalize(text)
    question = _LEAKED_CORRECT.sub("", _multiline_question(text, "Correct Answer")).strip()

    answer = _TF_ANSWER.search(text)
    correct_answer = answer.group(1).upper() if answer else "TRUE"
    return ParsedQuestion(question=question, correct_answer=correct_answer)


def parse_open_ended(text: str) -> ParsedQuestion:
    """
    Parse an open-ended question and its expected answer.

    Raises:
        QuestionParseError: If there is no "Question:" line
    """
    text = _normalize(text)
    question = _multiline_question(text, "Expected Answer")
    question = _LEAKED_EXPECTED.sub("", question).strip()
    question = _LEAKED_CORRECT.sub("", question).strip()

    answer = _EXPECTED_ANSWER.search(text)
    correct_answer = answer.group(1).strip() if answer else SEE_DOCUMENT
    return ParsedQuestion(question=question, correct_answer=correct_answer or SEE_DOCUMENT)


PARSERS = {
    "multiple-choice": parse_multiple_choice,
    "true-false": parse_true_false,
    "open-ended": parse_open_ended,
}


def parse_question(text: str, question_type: str) -> ParsedQuestion:
    try:
        parser = PARSERS[question_type]
    except KeyError:
        raise ValueError(f"Unknown question type: {question_type}") from None
    return parser(text)


def parse_grade(text: str) -> ParsedGrade:
    """
    Parse "Score: N / Feedback: ..." grader output.

    A missing score becomes the neutral score; a missing feedback section
    falls back to the raw text. Scores are clamped to 0..100.
    """
    score_match = _SCORE.search(text)
    feedback_match = _FEEDBACK.search(text)

    score = int(score_match.group(1)) if score_match else NEUTRAL_SCORE
    score = max(0, min(100, score))
    feedback = feedback_match.group(1).strip() if feedback_match else text.strip()
    return ParsedGrade(score=score, feedback=feedback)


def split_sentences(text: str) -> list[str]:
    """Split on whitespace that follows ., ! or ?."""
    return [s for s in re.split(r"(?<=[.!?])\s+", text.strip()) if s]
