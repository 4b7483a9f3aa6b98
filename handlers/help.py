from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes

from utils.telegram_helpers import safe_edit_text, safe_send_text


HELP_TEXT = (
    "<b>\u2753 How it works</b>\n\n"
    "1. Register, then log in with your username and password\n"
    "2. Create a game: give it a title, then send cards as "
    "<code>question | answer</code>\n"
    "3. Play a game: tap to flip each card, arrows to move on\n"
    "4. Log in every day to grow your streak \U0001f525\n\n"
    "/start menu  \u00b7  /games saved games  \u00b7  /logout  \u00b7  /cancel"
)

_MARKUP = InlineKeyboardMarkup([
    [InlineKeyboardButton("Menu", callback_data='main_menu')]
])


async def help_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    await safe_edit_text(query, HELP_TEXT, reply_markup=_MARKUP)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await safe_send_text(update.message, HELP_TEXT, reply_markup=_MARKUP)
