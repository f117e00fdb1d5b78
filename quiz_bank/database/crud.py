"""CRUD operations for database."""
from typing import Iterable, List, Tuple

import aiosqlite

from quiz_bank.core.database import Database
from quiz_bank.loader.models import (
    CheckQuestion,
    FreeQuestion,
    Question,
    QuestionType,
    RadioQuestion,
)

# Record kind -> table. Purge order lives in the loader.
RECORD_KIND_TABLES = {
    "QuizResult": "quiz_results",
    "WrongAnswer": "wrong_answers",
    "BaseQuestion": "base_questions",
}


def _table_for(kind: str) -> str:
    try:
        return RECORD_KIND_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown record kind: {kind}") from None


# ============================================================================
# QUESTION BANK OPERATIONS (run inside Database.transaction())
# ============================================================================

async def delete_all(conn: aiosqlite.Connection, kind: str) -> int:
    """
    Delete every row of a record kind.

    Args:
        conn: Connection with an open transaction
        kind: QuizResult, WrongAnswer or BaseQuestion

    Returns:
        Number of deleted rows
    """
    table = _table_for(kind)
    cursor = await conn.execute(f"DELETE FROM {table}")
    return cursor.rowcount


async def insert_question(conn: aiosqlite.Connection, question: Question) -> int:
    """
    Persist one question with its answer keys.

    Returns:
        question id (autoincremented ID)
    """
    answer = question.answer if isinstance(question, FreeQuestion) else None
    right_answer_key = question.right_answer_key if isinstance(question, RadioQuestion) else None

    query = """
        INSERT INTO base_questions (question_key, question_type, answer, right_answer_key)
        VALUES (?, ?, ?, ?)
    """
    cursor = await conn.execute(query, (
        question.question_key,
        question.question_type.value,
        answer,
        right_answer_key,
    ))
    question_id = cursor.lastrowid

    if isinstance(question, (RadioQuestion, CheckQuestion)):
        await conn.executemany(
            "INSERT INTO question_answer_keys (question_id, answer_key) VALUES (?, ?)",
            [(question_id, key) for key in sorted(question.answer_keys)],
        )
    if isinstance(question, CheckQuestion):
        await conn.executemany(
            "INSERT INTO question_right_answer_keys (question_id, answer_key) VALUES (?, ?)",
            [(question_id, key) for key in sorted(question.right_answer_keys)],
        )

    return question_id


# ============================================================================
# READ OPERATIONS
# ============================================================================

async def get_all_questions(db: Database) -> List[Question]:
    """Get the whole question bank in insertion order."""
    async with db.read() as conn:
        async with conn.execute(
            """SELECT id, question_key, question_type, answer, right_answer_key
               FROM base_questions ORDER BY id"""
        ) as cursor:
            rows = await cursor.fetchall()
        answer_keys = await _load_keys(conn, "question_answer_keys")
        right_answer_keys = await _load_keys(conn, "question_right_answer_keys")

    questions: List[Question] = []
    for row in rows:
        question_type = QuestionType(row["question_type"])
        if question_type is QuestionType.FREE:
            questions.append(FreeQuestion(
                question_key=row["question_key"],
                answer=row["answer"],
            ))
        elif question_type is QuestionType.RADIO:
            questions.append(RadioQuestion(
                question_key=row["question_key"],
                answer_keys=frozenset(answer_keys.get(row["id"], ())),
                right_answer_key=row["right_answer_key"],
            ))
        else:
            questions.append(CheckQuestion(
                question_key=row["question_key"],
                answer_keys=frozenset(answer_keys.get(row["id"], ())),
                right_answer_keys=frozenset(right_answer_keys.get(row["id"], ())),
            ))

    return questions


async def _load_keys(conn: aiosqlite.Connection, table: str) -> dict:
    keys: dict = {}
    async with conn.execute(f"SELECT question_id, answer_key FROM {table}") as cursor:
        for row in await cursor.fetchall():
            keys.setdefault(row["question_id"], []).append(row["answer_key"])
    return keys


async def count_records(db: Database, kind: str) -> int:
    """Count rows of a record kind."""
    row = await db.fetchone(f"SELECT COUNT(*) FROM {_table_for(kind)}")
    return row[0]


# ============================================================================
# QUIZ RESULT OPERATIONS
# ============================================================================

async def save_quiz_result(
    db: Database,
    participant: str,
    score: int,
    total: int,
    wrong_answers: Iterable[Tuple[str, str]] = (),
) -> int:
    """
    Save a finished quiz and the questions answered wrongly.

    Args:
        participant: Who took the quiz
        score: Number of right answers
        total: Number of questions asked
        wrong_answers: (question_key, given_answer) pairs

    Returns:
        quiz result id
    """
    async with db.transaction() as conn:
        cursor = await conn.execute(
            "INSERT INTO quiz_results (participant, score, total) VALUES (?, ?, ?)",
            (participant, score, total),
        )
        result_id = cursor.lastrowid

        for question_key, given_answer in wrong_answers:
            await conn.execute(
                """INSERT INTO wrong_answers (quiz_result_id, question_id, given_answer)
                   VALUES (?, (SELECT id FROM base_questions WHERE question_key = ?), ?)""",
                (result_id, question_key, given_answer),
            )

    return result_id
