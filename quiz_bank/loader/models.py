"""Question types handled by the bank loader."""
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, FrozenSet, Union


class QuestionType(str, Enum):
    """Discriminator stored with every question."""
    FREE = "FREE"
    RADIO = "RADIO"
    CHECK = "CHECK"


@dataclass(frozen=True)
class FreeQuestion:
    """Question answered with free text."""
    question_key: str
    answer: str

    question_type: ClassVar[QuestionType] = QuestionType.FREE


@dataclass(frozen=True)
class RadioQuestion:
    """Single-choice question."""
    question_key: str
    answer_keys: FrozenSet[str]
    right_answer_key: str

    question_type: ClassVar[QuestionType] = QuestionType.RADIO


@dataclass(frozen=True)
class CheckQuestion:
    """Multiple-choice question with one or more right answers."""
    question_key: str
    answer_keys: FrozenSet[str]
    right_answer_keys: FrozenSet[str]

    question_type: ClassVar[QuestionType] = QuestionType.CHECK


Question = Union[FreeQuestion, RadioQuestion, CheckQuestion]


@dataclass
class UploadSummary:
    """Counts of questions stored by a successful upload."""
    total: int = 0
    free: int = 0
    radio: int = 0
    check: int = 0

    @classmethod
    def of(cls, questions: list[Question]) -> "UploadSummary":
        summary = cls(total=len(questions))
        for question in questions:
            if question.question_type is QuestionType.FREE:
                summary.free += 1
            elif question.question_type is QuestionType.RADIO:
                summary.radio += 1
            else:
                summary.check += 1
        return summary
