"""Parsing of question bank upload files.

One question per line, fields separated by ``;``, answer key lists by ``,``::

    FREE;q1;Paris
    RADIO;q2;a,b,c;b
    CHECK;q3;x,y,z;x,z

The first field is the question type; anything but FREE, RADIO or CHECK
aborts the whole upload.
"""
import logging
import re
import unicodedata
from typing import Callable, Optional, Union

from quiz_bank.loader.exceptions import ParseError, UnknownTypeError, ValidationError
from quiz_bank.loader.models import (
    CheckQuestion,
    FreeQuestion,
    Question,
    QuestionType,
    RadioQuestion,
)

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ";"
KEY_SEPARATOR = ","

_NON_WORD_RE = re.compile(r"\W", re.ASCII)

# Control, format, private-use, surrogate and separator characters
_INVISIBLE_CATEGORIES = frozenset({"Cc", "Cf", "Co", "Cs", "Zl", "Zp", "Zs"})


def parse_questions(payload: Union[bytes, str], strict: bool = False) -> list[Question]:
    """
    Parse an upload payload into questions.

    Args:
        payload: UTF-8 encoded file contents (or already decoded text)
        strict: Reject right answers that are not among the offered choices

    Returns:
        Questions in the order of their lines

    Raises:
        ParseError: Payload is not UTF-8
        ValidationError: A line has the wrong number of fields
        UnknownTypeError: A line has an unknown type tag
    """
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Upload is not valid UTF-8: {e}") from e
    else:
        text = payload

    questions = []
    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = _trim_invisible(raw_line)
        if not line:
            continue
        logger.debug("LINE %d: %s", line_number, line)
        questions.append(parse_line(line, line_number, strict=strict))

    return questions


def parse_line(line: str, line_number: Optional[int] = None, strict: bool = False) -> Question:
    """Turn one non-empty line into a question."""
    fields = line.split(FIELD_SEPARATOR)
    tag = normalize_tag(fields[0])

    builder = _BUILDERS.get(tag)
    if builder is None:
        raise UnknownTypeError(fields[0], line_number)

    return builder(fields, line, line_number, strict)


def normalize_tag(raw_tag: str) -> str:
    """Strip non-word characters and uppercase: '  radio! ' -> 'RADIO'."""
    return _NON_WORD_RE.sub("", raw_tag).upper()


def _make_free_question(fields: list[str], line: str, line_number, strict: bool) -> FreeQuestion:
    _check_field_count(QuestionType.FREE, fields, 3, line, line_number)
    return FreeQuestion(question_key=fields[1], answer=fields[2])


def _make_radio_question(fields: list[str], line: str, line_number, strict: bool) -> RadioQuestion:
    _check_field_count(QuestionType.RADIO, fields, 4, line, line_number)
    answer_keys = _split_keys(fields[2])
    right_answer_key = fields[3]

    if right_answer_key not in answer_keys:
        _report_unknown_answer(
            f"right answer {right_answer_key!r} is not one of {sorted(answer_keys)}",
            line, line_number, strict,
        )

    return RadioQuestion(
        question_key=fields[1],
        answer_keys=answer_keys,
        right_answer_key=right_answer_key,
    )


def _make_check_question(fields: list[str], line: str, line_number, strict: bool) -> CheckQuestion:
    _check_field_count(QuestionType.CHECK, fields, 4, line, line_number)
    answer_keys = _split_keys(fields[2])
    right_answer_keys = _split_keys(fields[3])

    unknown = right_answer_keys - answer_keys
    if unknown:
        _report_unknown_answer(
            f"right answers {sorted(unknown)} are not among {sorted(answer_keys)}",
            line, line_number, strict,
        )

    return CheckQuestion(
        question_key=fields[1],
        answer_keys=answer_keys,
        right_answer_keys=right_answer_keys,
    )


_BUILDERS: dict[str, Callable[..., Question]] = {
    QuestionType.FREE.value: _make_free_question,
    QuestionType.RADIO.value: _make_radio_question,
    QuestionType.CHECK.value: _make_check_question,
}


def _check_field_count(
    question_type: QuestionType,
    fields: list[str],
    expected: int,
    line: str,
    line_number,
) -> None:
    if len(fields) != expected:
        raise ValidationError(
            f"{question_type.value} question needs {expected} fields, got {len(fields)}",
            line,
            line_number,
        )


def _report_unknown_answer(message: str, line: str, line_number, strict: bool) -> None:
    if strict:
        raise ValidationError(message, line, line_number)
    logger.warning("Line %s: %s", line_number, message)


def _split_keys(value: str) -> frozenset[str]:
    return frozenset(value.split(KEY_SEPARATOR))


def _is_invisible(char: str) -> bool:
    return char.isspace() or unicodedata.category(char) in _INVISIBLE_CATEGORIES


def _trim_invisible(line: str) -> str:
    """Trim whitespace and invisible characters (BOM, CR, zero-width...) at both ends."""
    start, end = 0, len(line)
    while start < end and _is_invisible(line[start]):
        start += 1
    while end > start and _is_invisible(line[end - 1]):
        end -= 1
    return line[start:end]
