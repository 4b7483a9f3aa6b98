"""
Telegram calls that recover instead of raising.

Handlers send and edit messages only through these wrappers, always with
parse_mode='HTML'. Anything the user typed (usernames, game titles, questions,
answers) goes through html.escape() before it is embedded in a message:

    await safe_edit_text(query, f"<b>{html.escape(game.title)}</b>")
"""

import logging
from typing import Any

from telegram import CallbackQuery, InlineKeyboardMarkup, Message
from telegram.error import BadRequest, Forbidden, TimedOut, NetworkError

logger = logging.getLogger(__name__)


def _is_unmodified(error: BadRequest) -> bool:
    return "message is not modified" in str(error).lower()


async def safe_edit_text(
    query: CallbackQuery,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
    parse_mode: str = 'HTML',
) -> bool:
    """Edit the message behind a button press. Sends a new message if editing fails."""
    try:
        await query.edit_message_text(text, reply_markup=reply_markup, parse_mode=parse_mode)
        return True
    except BadRequest as e:
        if _is_unmodified(e):
            return True
        logger.warning(f"safe_edit_text BadRequest: {e}")
        return await _fallback_reply(query, text, reply_markup, parse_mode)
    except (TimedOut, NetworkError) as e:
        logger.warning(f"safe_edit_text network error: {e}")
        return False


async def safe_send_text(
    target: Message | tuple[int, Any],
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
    parse_mode: str = 'HTML',
) -> bool:
    """Send a text message. target is a Message or a (chat_id, bot) tuple."""
    try:
        if hasattr(target, 'reply_text'):
            await target.reply_text(text, reply_markup=reply_markup, parse_mode=parse_mode)  # type: ignore[union-attr]
        else:
            chat_id, bot = target
            await bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup, parse_mode=parse_mode)
        return True
    except Forbidden:
        logger.warning("Bot was blocked by user")
        return False
    except (TimedOut, NetworkError, BadRequest) as e:
        logger.warning(f"safe_send_text failed: {e}")
        return False


async def safe_delete(message: Message) -> bool:
    """Delete a message, e.g. one that carried a password. False if it is already gone."""
    try:
        await message.delete()
        return True
    except (BadRequest, TimedOut, NetworkError):
        return False


async def _fallback_reply(
    query: CallbackQuery,
    text: str,
    reply_markup: InlineKeyboardMarkup | None,
    parse_mode: str = 'HTML',
) -> bool:
    try:
        await query.message.reply_text(text, reply_markup=reply_markup, parse_mode=parse_mode)
        return True
    except Exception as e:
        logger.warning(f"_fallback_reply also failed: {e}")
        return False
