import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, CallbackQuery
from telegram.ext import ContextTypes

from core.study import CardSide, StudySession
from handlers.games import require_store
from utils.telegram_helpers import safe_edit_text


def build_card_view(session: StudySession) -> tuple[str, InlineKeyboardMarkup]:
    side = session.side
    label = "\U0001f4a1 Answer" if side is CardSide.ANSWER else "\u2753 Question"

    text = (
        f"\U0001f3ae <b>{html.escape(session.game.title)}</b>  \u00b7  {session.position}/{session.total}\n\n"
        f"<i>{label}</i>\n"
        f"<b>{html.escape(session.visible_text)}</b>"
    )

    flip_label = "\U0001f504 Show question" if side is CardSide.ANSWER else "\U0001f504 Show answer"
    nav: list[InlineKeyboardButton] = []
    if session.index > 0:
        nav.append(InlineKeyboardButton("\u2190", callback_data='prev_card'))
    nav.append(InlineKeyboardButton("\u2192", callback_data='next_card'))

    markup = InlineKeyboardMarkup([
        [InlineKeyboardButton(flip_label, callback_data='flip_card')],
        nav,
        [InlineKeyboardButton("\u23f9 Stop", callback_data='stop_play')],
    ])
    return text, markup


def build_completed_view(session: StudySession) -> tuple[str, InlineKeyboardMarkup]:
    text = (
        f"\U0001f389 <b>Congratulations!</b>\n\n"
        f"You've seen all the cards of <b>{html.escape(session.game.title)}</b>."
    )
    markup = InlineKeyboardMarkup([
        [InlineKeyboardButton("\U0001f501 Play again", callback_data=f'play_{session.game.id}')],
        [InlineKeyboardButton("\U0001f4da Saved games", callback_data='games')],
    ])
    return text, markup


async def _render(query: CallbackQuery, context: ContextTypes.DEFAULT_TYPE, session: StudySession) -> None:
    if session.completed:
        context.user_data.pop('study', None)
        text, markup = build_completed_view(session)
    else:
        text, markup = build_card_view(session)
    await safe_edit_text(query, text, reply_markup=markup)


async def _current_session(query: CallbackQuery, context: ContextTypes.DEFAULT_TYPE) -> StudySession | None:
    session = context.user_data.get('study')
    if session is None:
        await safe_edit_text(
            query,
            "\u26a0\ufe0f This game is no longer running.",
            reply_markup=InlineKeyboardMarkup([
                [InlineKeyboardButton("\U0001f4da Saved games", callback_data='games')]
            ])
        )
    return session


# ── Standalone callbacks ──────────────────────────────────────

async def play_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        return

    game = store.get_game(query.data.removeprefix('play_'))
    if game is None:
        await safe_edit_text(query, "Game not found.", reply_markup=InlineKeyboardMarkup([
            [InlineKeyboardButton("\U0001f4da Saved games", callback_data='games')]
        ]))
        return

    session = StudySession(game)
    context.user_data['study'] = session
    logging.info(f"Playing game {game.id} with {session.total} cards")
    await _render(query, context, session)


async def flip_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    session = await _current_session(query, context)
    if session is None:
        return

    session.toggle()
    await _render(query, context, session)


async def next_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    session = await _current_session(query, context)
    if session is None:
        return

    session.next()
    await _render(query, context, session)


async def prev_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    session = await _current_session(query, context)
    if session is None:
        return

    session.previous()
    await _render(query, context, session)


async def stop_play(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    session: StudySession | None = context.user_data.pop('study', None)
    if session is not None:
        text = f"\u23f9 Stopped at card {session.position}/{session.total}"
    else:
        text = "\u23f9 Stopped"

    markup = InlineKeyboardMarkup([
        [InlineKeyboardButton("\U0001f4da Saved games", callback_data='games')],
        [InlineKeyboardButton("\U0001f3e0 Menu", callback_data='main_menu')],
    ])
    await safe_edit_text(query, text, reply_markup=markup)
