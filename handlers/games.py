import html

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, CallbackQuery
from telegram.ext import ContextTypes

from core.decks import DeckStore
from core.errors import NotLoggedIn
from core.study import overview
from handlers.start import build_welcome, session_for
from utils.telegram_helpers import safe_edit_text, safe_send_text
from utils.utils import get_game_buttons, plural, truncate

QUESTION_PREVIEW_MAX = 40

_MENU_ROW = [InlineKeyboardButton("\U0001f3e0 Menu", callback_data='main_menu')]


async def require_store(update: Update, query: CallbackQuery | None = None) -> DeckStore | None:
    """Deck store of the logged-in user. Shows the welcome screen and returns None otherwise."""
    try:
        return session_for(update).deck_store()
    except NotLoggedIn:
        text, markup = build_welcome()
        if query is not None:
            await safe_edit_text(query, text, reply_markup=markup)
        else:
            await safe_send_text(update.message, text, reply_markup=markup)
        return None


def build_games_list(store: DeckStore) -> tuple[str, InlineKeyboardMarkup]:
    games = store.games
    if not games:
        text = "\U0001f4da No saved games yet\n\n<i>Create your first game and it will show up here.</i>"
        buttons = [[InlineKeyboardButton("\u2795 New game", callback_data='new_game')]]
    else:
        text = f"\U0001f4da <b>Saved games</b> \u00b7 {len(games)}"
        buttons = get_game_buttons(games, 'game_open')
        buttons.append([InlineKeyboardButton("\u2795 New game", callback_data='new_game')])

    buttons.append(_MENU_ROW)
    return text, InlineKeyboardMarkup(buttons)


def build_game_detail(store: DeckStore, game_id: str) -> tuple[str, InlineKeyboardMarkup]:
    game = store.get_game(game_id)
    if game is None:
        return "Game not found.", InlineKeyboardMarkup([
            [InlineKeyboardButton("\U0001f4da Saved games", callback_data='games')]
        ])

    lines = [
        f"{i}. {html.escape(truncate(card.question, QUESTION_PREVIEW_MAX))}"
        for i, card in enumerate(game.cards, start=1)
    ]
    card_list = '\n'.join(lines) if lines else '<i>No cards yet</i>'
    text = (
        f"\U0001f3ae <b>{html.escape(game.title)}</b> \u00b7 {plural(len(game.cards), 'card')}\n\n"
        f"{card_list}"
    )

    buttons: list[list[InlineKeyboardButton]] = []
    if game.cards:
        buttons.append([
            InlineKeyboardButton("\u25b6 Play", callback_data=f'play_{game.id}'),
            InlineKeyboardButton("\U0001f4cb All cards", callback_data=f'overview_{game.id}'),
        ])
    buttons.append([InlineKeyboardButton("\u270f\ufe0f Edit", callback_data=f'edit_game_{game.id}')])
    buttons.append([InlineKeyboardButton("\u2190 Saved games", callback_data='games')])
    return text, InlineKeyboardMarkup(buttons)


# ── Standalone callbacks ──────────────────────────────────────

async def games_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        return

    text, markup = build_games_list(store)
    await safe_edit_text(query, text, reply_markup=markup)


async def games_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/games slash command: send a fresh saved games list."""
    store = await require_store(update)
    if store is None:
        return

    text, markup = build_games_list(store)
    await safe_send_text(update.message, text, reply_markup=markup)


async def game_open(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        return

    game_id = query.data.removeprefix('game_open_')
    text, markup = build_game_detail(store, game_id)
    await safe_edit_text(query, text, reply_markup=markup)


async def game_overview(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Every question with its answer in one message."""
    query = update.callback_query
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        return

    game_id = query.data.removeprefix('overview_')
    game = store.get_game(game_id)
    if game is None:
        text, markup = build_games_list(store)
        await safe_edit_text(query, text, reply_markup=markup)
        return

    blocks = [
        f"<b>{i}. {html.escape(question)}</b>\n\U0001f4a1 {html.escape(answer)}"
        for i, (question, answer) in enumerate(overview(game), start=1)
    ]
    text = f"\U0001f4cb <b>{html.escape(game.title)}</b>\n\n" + '\n\n'.join(blocks)

    await safe_edit_text(query, text, reply_markup=InlineKeyboardMarkup([
        [InlineKeyboardButton("\u2190 Back", callback_data=f'game_open_{game.id}')]
    ]))
