"""Обработчик команды /upload — полная перезагрузка банка вопросов из файла."""
import html
import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from quiz_bank.config import settings
from quiz_bank.core.database import get_db
from quiz_bank.loader.exceptions import (
    ParseError,
    StorageError,
    UnknownTypeError,
    ValidationError,
)
from quiz_bank.loader.models import UploadSummary
from quiz_bank.loader.upload import purge_and_upload

logger = logging.getLogger(__name__)

router = Router()

USAGE_MSG = (
    "Формат: отправьте файл с подписью /upload\n"
    "Одна строка — один вопрос:\n"
    "<code>FREE;ключ;ответ</code>\n"
    "<code>RADIO;ключ;a,b,c;b</code>\n"
    "<code>CHECK;ключ;a,b,c;a,c</code>\n\n"
    "⚠️ Все текущие вопросы и результаты будут удалены."
)


async def _check_admin(message: Message) -> bool:
    """Только главный администратор в личном чате может загружать вопросы."""
    if message.chat.type != "private":
        await message.answer("⚠️ Команда доступна только в личных сообщениях.")
        return False
    if settings.ADMIN_ID is None or message.from_user is None:
        return False
    return message.from_user.id == settings.ADMIN_ID


def _format_summary(summary: UploadSummary) -> str:
    return (
        f"✅ Банк вопросов загружен: {summary.total}\n"
        f"• FREE: {summary.free}\n"
        f"• RADIO: {summary.radio}\n"
        f"• CHECK: {summary.check}"
    )


def _format_error(error: Exception) -> str:
    """Текст ошибки для администратора; старые вопросы при этом не тронуты."""
    if isinstance(error, UnknownTypeError):
        text = f"Строка {error.line_number}: неизвестный тип вопроса «{html.escape(error.tag)}»"
    elif isinstance(error, ValidationError):
        text = (
            f"Строка {error.line_number}: {html.escape(str(error))}\n"
            f"<code>{html.escape(error.line)}</code>"
        )
    elif isinstance(error, StorageError):
        text = "База данных отклонила загрузку (повторяющийся ключ вопроса?)"
    else:
        text = html.escape(str(error))
    return f"❌ Файл не загружен, банк вопросов не изменён.\n{text}"


@router.message(Command("upload"))
async def cmd_upload(message: Message):
    if not await _check_admin(message):
        return

    document = message.document
    if document is None:
        await message.answer(USAGE_MSG, parse_mode="HTML")
        return

    if document.file_size and document.file_size > settings.MAX_UPLOAD_BYTES:
        await message.answer(
            f"❌ Файл слишком большой: {document.file_size} байт "
            f"(максимум {settings.MAX_UPLOAD_BYTES})."
        )
        return

    buffer = await message.bot.download(document)
    payload = buffer.read()
    logger.info(
        "Question bank upload by %s: %s (%d bytes)",
        message.from_user.id, document.file_name, len(payload),
    )

    try:
        summary = await purge_and_upload(get_db(), payload)
    except ParseError as e:
        logger.warning("Question bank upload rejected: %s", e)
        await message.answer(_format_error(e), parse_mode="HTML")
        return
    except StorageError as e:
        logger.exception("Question bank upload rolled back")
        await message.answer(_format_error(e), parse_mode="HTML")
        return

    await message.answer(_format_summary(summary))
