"""Тесты разбора файла с вопросами."""
import logging

import pytest

from quiz_bank.loader.exceptions import ParseError, UnknownTypeError, ValidationError
from quiz_bank.loader.models import CheckQuestion, FreeQuestion, QuestionType, RadioQuestion
from quiz_bank.loader.parser import normalize_tag, parse_line, parse_questions


# ============================================================================
# РАЗБОР КОРРЕКТНЫХ ФАЙЛОВ
# ============================================================================


class TestParseQuestions:
    """Тесты разбора корректных файлов."""

    def test_all_question_types(self, sample_payload, sample_questions):
        """Три строки разных типов — три вопроса в порядке строк."""
        result = parse_questions(sample_payload)

        assert result == sample_questions
        assert [q.question_type for q in result] == [
            QuestionType.FREE, QuestionType.RADIO, QuestionType.CHECK,
        ]

    def test_text_payload(self):
        """Уже декодированный текст принимается так же, как байты."""
        assert parse_questions("FREE;q1;Paris") == [FreeQuestion("q1", "Paris")]

    def test_empty_payload(self):
        """Пустой файл — пустой банк."""
        assert parse_questions(b"") == []
        assert parse_questions(b"\n \n\t\n") == []

    def test_blank_lines_and_crlf(self):
        """Пустые строки пропускаются, \\r в конце строки обрезается."""
        payload = b"\r\nFREE;q1;Paris\r\n\r\n   \r\nFREE;q2;Rome\r\n"

        result = parse_questions(payload)

        assert result == [FreeQuestion("q1", "Paris"), FreeQuestion("q2", "Rome")]

    def test_invisible_characters_trimmed(self):
        """BOM и символы нулевой ширины по краям строки обрезаются."""
        payload = "\ufeffFREE;q1;Paris\u200b\nFREE;q2;Rome\u00a0".encode("utf-8")

        result = parse_questions(payload)

        assert result == [FreeQuestion("q1", "Paris"), FreeQuestion("q2", "Rome")]

    def test_fields_not_trimmed(self):
        """Пробелы внутри строки сохраняются в полях как есть."""
        result = parse_questions("FREE; q1 ; Paris is nice")

        assert result == [FreeQuestion(" q1 ", " Paris is nice")]

    def test_answer_keys_collapsed_into_set(self):
        """Повторяющиеся варианты ответа схлопываются."""
        result = parse_questions("RADIO;q2;a,b,a,c,b;b")

        assert result[0].answer_keys == frozenset({"a", "b", "c"})

    def test_unicode_content(self):
        """Ответы на кириллице декодируются из UTF-8."""
        result = parse_questions("FREE;столица;Москва".encode("utf-8"))

        assert result == [FreeQuestion("столица", "Москва")]

    def test_empty_answer_keys(self):
        """Пустое поле вариантов даёт множество из одной пустой строки."""
        result = parse_questions("CHECK;q;;")

        assert result == [CheckQuestion("q", frozenset({""}), frozenset({""}))]


# ============================================================================
# НОРМАЛИЗАЦИЯ ТИПА
# ============================================================================


class TestTagNormalization:
    """Тесты нормализации тега типа вопроса."""

    @pytest.mark.parametrize("raw, expected", [
        ("RADIO", "RADIO"),
        ("  radio! ", "RADIO"),
        ("Free", "FREE"),
        ("[check]", "CHECK"),
        ("ch-eck", "CHECK"),
        ("", ""),
    ])
    def test_normalize_tag(self, raw, expected):
        assert normalize_tag(raw) == expected

    def test_decorated_tag_parses_like_plain(self):
        """'  radio! ' принимается так же, как 'RADIO'."""
        decorated = parse_line("  radio! ;q2;a,b,c;b")
        plain = parse_line("RADIO;q2;a,b,c;b")

        assert decorated == plain
        assert isinstance(decorated, RadioQuestion)


# ============================================================================
# ОШИБКИ
# ============================================================================


class TestFieldCount:
    """Тесты проверки количества полей."""

    @pytest.mark.parametrize("line", [
        "FREE;k;a;extra",
        "FREE;k",
        "RADIO;k;a,b",
        "RADIO;k;a,b;a;extra",
        "CHECK;k;a,b",
        "CHECK;k;a,b;a;b",
    ])
    def test_wrong_field_count(self, line):
        with pytest.raises(ValidationError) as exc_info:
            parse_questions(line)

        assert exc_info.value.line == line
        assert exc_info.value.line_number == 1

    def test_error_reports_line_number(self):
        """Номер строки считается с учётом пропущенных пустых строк."""
        payload = b"FREE;q1;Paris\n\nRADIO;k;a,b\n"

        with pytest.raises(ValidationError) as exc_info:
            parse_questions(payload)

        assert exc_info.value.line_number == 3
        assert exc_info.value.line == "RADIO;k;a,b"


class TestUnknownType:
    """Тесты неизвестного типа вопроса."""

    def test_unknown_tag(self):
        """ESSAY — UnknownTypeError с исходным текстом тега."""
        with pytest.raises(UnknownTypeError) as exc_info:
            parse_questions("ESSAY;k;x")

        assert exc_info.value.tag == "ESSAY"
        assert "ESSAY" in str(exc_info.value)

    def test_raw_tag_preserved(self):
        """В ошибке остаётся тег как в файле, не нормализованный."""
        with pytest.raises(UnknownTypeError) as exc_info:
            parse_questions("FREE;q1;Paris\n essay!;k;x")

        assert exc_info.value.tag == "essay!"
        assert exc_info.value.line_number == 2

    def test_unknown_tag_is_not_skipped(self):
        """Ошибка в последней строке прерывает разбор всего файла."""
        with pytest.raises(UnknownTypeError):
            parse_questions("FREE;q1;Paris\nRADIO;q2;a,b;a\nMATCH;q3;x")

    def test_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_questions("ESSAY;k;x")


class TestEncoding:
    """Тесты декодирования."""

    def test_invalid_utf8(self):
        """Байты не в UTF-8 — ParseError."""
        with pytest.raises(ParseError, match="UTF-8"):
            parse_questions(b"FREE;q1;\xff\xfe")


# ============================================================================
# ПРОВЕРКА ПРАВИЛЬНЫХ ОТВЕТОВ
# ============================================================================


class TestAnswerKeyMembership:
    """Правильный ответ вне списка вариантов: предупреждение или ошибка."""

    def test_radio_permissive(self, caplog):
        """По умолчанию строка принимается, в лог пишется предупреждение."""
        with caplog.at_level(logging.WARNING, logger="quiz_bank.loader.parser"):
            result = parse_questions("RADIO;q2;a,b;c")

        assert result == [RadioQuestion("q2", frozenset({"a", "b"}), "c")]
        assert "'c'" in caplog.text

    def test_radio_strict(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_questions("RADIO;q2;a,b;c", strict=True)

        assert exc_info.value.line == "RADIO;q2;a,b;c"

    def test_check_permissive(self):
        result = parse_questions("CHECK;q3;x,y;x,w")

        assert result[0].right_answer_keys == frozenset({"x", "w"})

    def test_check_strict(self):
        with pytest.raises(ValidationError, match="'w'"):
            parse_questions("CHECK;q3;x,y;x,w", strict=True)

    def test_strict_accepts_valid(self, sample_payload, sample_questions):
        assert parse_questions(sample_payload, strict=True) == sample_questions
