"""Purge-and-reload of the question bank.

The old bank (with every quiz result and wrong answer pointing at it) is
deleted and the uploaded questions are inserted in one transaction. If
anything fails, the transaction is rolled back and the old bank stays.
"""
import logging
from enum import Enum
from typing import Optional, Sequence, Union

import aiosqlite

from quiz_bank.config import settings
from quiz_bank.core.database import Database
from quiz_bank.database.crud import delete_all, insert_question
from quiz_bank.loader.exceptions import StorageError
from quiz_bank.loader.models import Question, UploadSummary
from quiz_bank.loader.parser import parse_questions

logger = logging.getLogger(__name__)

# Dependent records first: results and wrong answers reference questions
PURGE_ORDER = ("QuizResult", "WrongAnswer", "BaseQuestion")


class LoadState(str, Enum):
    IDLE = "idle"
    PURGING = "purging"
    INSERTING = "inserting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class QuestionBankLoader:
    """Replaces the stored question bank as one unit of work."""

    def __init__(self, db: Database):
        self.db = db
        self.state = LoadState.IDLE

    def _set_state(self, state: LoadState) -> None:
        logger.debug("Question bank load: %s -> %s", self.state.value, state.value)
        self.state = state

    async def replace_all(self, questions: Sequence[Question]) -> UploadSummary:
        """
        Delete the current bank and store the given questions.

        Questions are trusted as they come from the parser.

        Raises:
            StorageError: A delete or insert was rejected; nothing was changed
        """
        self.state = LoadState.IDLE
        try:
            async with self.db.transaction() as conn:
                self._set_state(LoadState.PURGING)
                for kind in PURGE_ORDER:
                    deleted = await delete_all(conn, kind)
                    logger.debug("Deleted %d %s rows", deleted, kind)

                self._set_state(LoadState.INSERTING)
                for question in questions:
                    await insert_question(conn, question)
        except aiosqlite.Error as e:
            self._set_state(LoadState.ROLLED_BACK)
            raise StorageError(f"Question bank was not replaced: {e}") from e
        except BaseException:
            self._set_state(LoadState.ROLLED_BACK)
            raise

        self._set_state(LoadState.COMMITTED)
        summary = UploadSummary.of(list(questions))
        logger.info(
            "Question bank replaced: %d questions (%d free, %d radio, %d check)",
            summary.total, summary.free, summary.radio, summary.check,
        )
        return summary


async def purge_and_upload(
    db: Database,
    payload: Union[bytes, str],
    strict: Optional[bool] = None,
) -> UploadSummary:
    """
    Parse an upload file and replace the question bank with its contents.

    Parsing happens before the transaction is opened, so a bad line never
    touches the store.

    Args:
        db: Database holding the question bank
        payload: Raw upload file (UTF-8)
        strict: Reject right answers missing from the choices;
            defaults to settings.STRICT_ANSWER_KEYS

    Raises:
        ParseError: The file could not be parsed (ValidationError, UnknownTypeError)
        StorageError: The store rejected the new bank
    """
    if strict is None:
        strict = settings.STRICT_ANSWER_KEYS

    questions = parse_questions(payload, strict=strict)
    return await QuestionBankLoader(db).replace_all(questions)
