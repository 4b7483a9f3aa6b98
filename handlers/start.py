import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler

from core.auth import SessionManager
from utils.constants import SESSION_KEYS, WELCOME_BUTTONS
from utils.telegram_helpers import safe_edit_text, safe_send_text
from utils.utils import plural


def session_for(update: Update) -> SessionManager:
    """Each Telegram account is one device with its own local settings."""
    return SessionManager(update.effective_user.id)


def build_welcome() -> tuple[str, InlineKeyboardMarkup]:
    text = (
        "\U0001f0cf <b>FlipWise</b>\n\n"
        "<i>Log in to study your games, or register a new account.</i>"
    )
    return text, InlineKeyboardMarkup(WELCOME_BUTTONS)


def build_home(session: SessionManager) -> tuple[str, InlineKeyboardMarkup]:
    """
    Returns (message_text, markup) for the home screen of a logged-in user.
    Text includes the login streak and the number of saved games.
    """
    username = session.current_username or ''
    streak = session.streak
    game_count = len(session.deck_store().games)

    text = f"Welcome back,\n<b>{html.escape(username)}</b>"
    if streak > 1:
        text += f"\n\n\U0001f525 {streak}-day streak"
    else:
        text += "\n\n\U0001f525 Day one \u2014 come back tomorrow to start a streak"
    text += f"\n<i>{plural(game_count, 'saved game')}</i>"

    markup = InlineKeyboardMarkup([
        [
            InlineKeyboardButton('\U0001f4da Saved games', callback_data='games'),
            InlineKeyboardButton('\u2795 New game', callback_data='new_game'),
        ],
        [
            InlineKeyboardButton('\u2753 How it works', callback_data='help'),
            InlineKeyboardButton('\U0001f6aa Log out', callback_data='logout'),
        ],
    ])
    return text, markup


def build_menu(session: SessionManager) -> tuple[str, InlineKeyboardMarkup]:
    if session.is_logged_in:
        return build_home(session)
    return build_welcome()


def clear_session_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in SESSION_KEYS:
        context.user_data.pop(key, None)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    logging.info("Started /start")

    text, markup = build_menu(session_for(update))
    await safe_send_text(update.message, text, reply_markup=markup)


async def force_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """ConversationHandler fallback: abort current flow and show the menu."""
    context.user_data.pop('draft', None)
    context.user_data.pop('draft_is_new', None)
    context.user_data.pop('auth_username', None)

    text, markup = build_menu(session_for(update))
    await safe_send_text(update.message, text, reply_markup=markup)
    return ConversationHandler.END


async def main_menu(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Callback handler for the 'Menu' button (outside conversations)."""
    query = update.callback_query
    await query.answer()

    text, markup = build_menu(session_for(update))
    await safe_edit_text(query, text, reply_markup=markup)


def _logout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[str, InlineKeyboardMarkup]:
    session = session_for(update)
    session.logout()
    # unsaved edits and the running study pass are dropped
    clear_session_data(context)

    _, markup = build_welcome()
    return "\U0001f44b Logged out.", markup


async def logout_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Log out button. Also an editor fallback, so it ends the conversation."""
    query = update.callback_query
    await query.answer()

    text, markup = _logout(update, context)
    await safe_edit_text(query, text, reply_markup=markup)
    return ConversationHandler.END


async def logout_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """/logout slash command."""
    text, markup = _logout(update, context)
    await safe_send_text(update.message, text, reply_markup=markup)
    return ConversationHandler.END
