"""Общие фикстуры для тестов банка вопросов."""
import pytest

from quiz_bank.core.database import init_database
from quiz_bank.loader.models import CheckQuestion, FreeQuestion, RadioQuestion


@pytest.fixture
async def db(tmp_path):
    """Пустая БД со схемой во временном каталоге."""
    database = await init_database(str(tmp_path / "quiz_bank.db"))
    yield database
    await database.close()


@pytest.fixture
def sample_payload():
    """Файл с вопросами всех трёх типов."""
    return (
        "FREE;q1;Paris\n"
        "RADIO;q2;a,b,c;b\n"
        "CHECK;q3;x,y,z;x,z\n"
    ).encode("utf-8")


@pytest.fixture
def sample_questions():
    """Вопросы, которые должны получиться из sample_payload."""
    return [
        FreeQuestion(question_key="q1", answer="Paris"),
        RadioQuestion(
            question_key="q2",
            answer_keys=frozenset({"a", "b", "c"}),
            right_answer_key="b",
        ),
        CheckQuestion(
            question_key="q3",
            answer_keys=frozenset({"x", "y", "z"}),
            right_answer_keys=frozenset({"x", "z"}),
        ),
    ]


@pytest.fixture
def old_payload():
    """Прежний банк вопросов, который должен быть заменён."""
    return (
        "FREE;old1;Berlin\n"
        "RADIO;old2;yes,no;no\n"
    ).encode("utf-8")
