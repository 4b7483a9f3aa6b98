import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import (
    ContextTypes, ConversationHandler,
    MessageHandler, CommandHandler, CallbackQueryHandler, filters,
)

from core.auth import PASSWORD_MAX_BYTES
from core.errors import DuplicateUser, InvalidCredentials
from handlers.start import build_home, build_welcome, force_start, session_for
from utils.constants import AuthState, PASSWORD_MIN, USERNAME_MAX
from utils.telegram_helpers import safe_delete, safe_edit_text, safe_send_text


def _check_username(username: str) -> str | None:
    """Returns an error message, or None when the username is usable."""
    if not username:
        return "Username can't be empty. Try again:"
    if len(username) > USERNAME_MAX:
        return f"Too long \u2014 {USERNAME_MAX} characters max. Try again:"
    if any(ch.isspace() for ch in username):
        return "No spaces in usernames, please. Try again:"
    return None


# ── Login conversation ────────────────────────────────────────

async def login_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    await safe_edit_text(query, "\U0001f511 <b>Login</b>\n\nUsername:\n<i>/cancel to abort</i>")
    return AuthState.LOGIN_USERNAME


async def receive_login_username(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data['auth_username'] = update.message.text.strip()

    await safe_send_text(
        update.message,
        "Password:\n<i>The message is deleted as soon as I've read it.</i>"
    )
    return AuthState.LOGIN_PASSWORD


async def receive_login_password(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    password = update.message.text
    await safe_delete(update.message)

    username = context.user_data.pop('auth_username', '')
    session = session_for(update)
    chat = (update.effective_chat.id, context.bot)

    try:
        session.login(username, password)
    except InvalidCredentials:
        await safe_send_text(
            chat,
            "\u26a0\ufe0f Invalid username or password.",
            reply_markup=InlineKeyboardMarkup([
                [InlineKeyboardButton("Try again", callback_data='login')],
                [InlineKeyboardButton("No account yet? Register", callback_data='register')],
            ])
        )
        return ConversationHandler.END

    # a new login starts from a clean slate
    context.user_data.pop('study', None)
    context.user_data.pop('draft', None)

    text, markup = build_home(session)
    await safe_send_text(chat, text, reply_markup=markup)
    return ConversationHandler.END


# ── Register conversation ─────────────────────────────────────

async def register_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    await safe_edit_text(
        query,
        "\U0001f4dd <b>Register</b>\n\nPick a username:\n<i>/cancel to abort</i>"
    )
    return AuthState.REGISTER_USERNAME


async def receive_register_username(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    username = update.message.text.strip()

    problem = _check_username(username)
    if problem:
        await safe_send_text(update.message, f"\u26a0\ufe0f {problem}")
        return AuthState.REGISTER_USERNAME

    context.user_data['auth_username'] = username
    await safe_send_text(
        update.message,
        f"Pick a password ({PASSWORD_MIN}+ characters):\n"
        "<i>The message is deleted as soon as I've read it.</i>"
    )
    return AuthState.REGISTER_PASSWORD


async def receive_register_password(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    password = update.message.text
    await safe_delete(update.message)
    chat = (update.effective_chat.id, context.bot)

    if len(password) < PASSWORD_MIN:
        await safe_send_text(chat, f"\u26a0\ufe0f At least {PASSWORD_MIN} characters. Try again:")
        return AuthState.REGISTER_PASSWORD

    if len(password.encode('utf-8')) > PASSWORD_MAX_BYTES:
        await safe_send_text(chat, "\u26a0\ufe0f That password is too long. Try a shorter one:")
        return AuthState.REGISTER_PASSWORD

    username = context.user_data.pop('auth_username', '')
    try:
        session_for(update).register(username, password)
    except DuplicateUser:
        await safe_send_text(
            chat,
            f"\u26a0\ufe0f <b>{html.escape(username)}</b> already exists.",
            reply_markup=InlineKeyboardMarkup([
                [InlineKeyboardButton("Try another name", callback_data='register')],
                [InlineKeyboardButton("Log in instead", callback_data='login')],
            ])
        )
        return ConversationHandler.END

    logging.info(f"New account for Telegram user {update.effective_user.id}")
    await safe_send_text(
        chat,
        f"\u2714\ufe0f Account <b>{html.escape(username)}</b> created. Log in to start.",
        reply_markup=InlineKeyboardMarkup([
            [InlineKeyboardButton("\U0001f511 Login", callback_data='login')],
        ])
    )
    return ConversationHandler.END


async def cancel_auth(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data.pop('auth_username', None)

    text, markup = build_welcome()
    await safe_send_text(update.message, text, reply_markup=markup)
    return ConversationHandler.END


# ── ConversationHandlers ──────────────────────────────────────

login_handler = ConversationHandler(
    entry_points=[CallbackQueryHandler(login_entry, pattern='^login$')],
    per_message=False,
    states={
        AuthState.LOGIN_USERNAME: [
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_login_username),
        ],
        AuthState.LOGIN_PASSWORD: [
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_login_password),
        ],
    },
    fallbacks=[CommandHandler('cancel', cancel_auth), CommandHandler('start', force_start)],
)

register_handler = ConversationHandler(
    entry_points=[CallbackQueryHandler(register_entry, pattern='^register$')],
    per_message=False,
    states={
        AuthState.REGISTER_USERNAME: [
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_register_username),
        ],
        AuthState.REGISTER_PASSWORD: [
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_register_password),
        ],
    },
    fallbacks=[CommandHandler('cancel', cancel_auth), CommandHandler('start', force_start)],
)
