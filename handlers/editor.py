"""
Game editor: creating a new game and changing the cards of an existing one.

Both flows work on a draft Game kept in user_data['draft'] and end in a single
DeckStore.save_game() when the user taps Done. Cancelling drops the draft.
"""
import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, Message, CallbackQuery
from telegram.ext import (
    ContextTypes, ConversationHandler,
    MessageHandler, CommandHandler, CallbackQueryHandler, filters,
)

from core.models import Game
from handlers.games import build_game_detail, build_games_list, require_store
from handlers.start import build_menu, force_start, logout_command, logout_entry, session_for
from utils.constants import CARD_SIDE_MAX, TITLE_MAX, EditorState
from utils.telegram_helpers import safe_edit_text, safe_send_text
from utils.utils import parse_card, plural, truncate

BUTTON_LABEL_MAX = 30


def build_draft_view(draft: Game) -> tuple[str, InlineKeyboardMarkup]:
    lines = [
        f"{i}. {html.escape(card.question)}\n    <i>{html.escape(card.answer)}</i>"
        for i, card in enumerate(draft.cards, start=1)
    ]
    card_list = '\n'.join(lines) if lines else '<i>No cards yet</i>'

    text = (
        f"\u270f\ufe0f <b>{html.escape(draft.title)}</b> \u00b7 {plural(len(draft.cards), 'card')}\n\n"
        f"{card_list}\n\n"
        f"<i>Send a card as <code>question | answer</code> or two lines.\n"
        f"Tap a card below to remove it.</i>"
    )

    buttons = [
        [InlineKeyboardButton(
            f"\U0001f5d1 {i}. {truncate(card.question, BUTTON_LABEL_MAX)}",
            callback_data=f'del_card_{card.id}'
        )]
        for i, card in enumerate(draft.cards, start=1)
    ]
    buttons.append([
        InlineKeyboardButton("\u2705 Done", callback_data='draft_done'),
        InlineKeyboardButton("\u2716 Cancel", callback_data='draft_cancel'),
    ])
    return text, InlineKeyboardMarkup(buttons)


async def _show_draft(target: Message | CallbackQuery, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Works with both Message (sends) and CallbackQuery (edits)."""
    text, markup = build_draft_view(context.user_data['draft'])
    if hasattr(target, 'reply_text'):
        await safe_send_text(target, text, reply_markup=markup)
    else:
        await safe_edit_text(target, text, reply_markup=markup)
    return EditorState.EDITING_CARDS


def _clear_draft(context: ContextTypes.DEFAULT_TYPE) -> None:
    context.user_data.pop('draft', None)
    context.user_data.pop('draft_is_new', None)


async def _draft_expired(target: Message | CallbackQuery) -> int:
    """The draft is gone (logout from another screen). Ends the editor."""
    text = "\u26a0\ufe0f Session expired, please start over."
    markup = InlineKeyboardMarkup([[InlineKeyboardButton('Menu', callback_data='main_menu')]])
    if hasattr(target, 'reply_text'):
        await safe_send_text(target, text, reply_markup=markup)
    else:
        await safe_edit_text(target, text, reply_markup=markup)
    return ConversationHandler.END


# ── Entry points ──────────────────────────────────────────────

async def new_game_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    if await require_store(update, query) is None:
        return ConversationHandler.END

    context.user_data['draft'] = Game(title='')
    context.user_data['draft_is_new'] = True

    await safe_edit_text(query, "\u2795 <b>New game</b>\n\nTitle:\n<i>/cancel to abort</i>")
    return EditorState.AWAITING_TITLE


async def edit_game_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        return ConversationHandler.END

    game = store.get_game(query.data.removeprefix('edit_game_'))
    if game is None:
        text, markup = build_games_list(store)
        await safe_edit_text(query, text, reply_markup=markup)
        return ConversationHandler.END

    context.user_data['draft'] = game
    context.user_data['draft_is_new'] = False
    return await _show_draft(query, context)


# ── Draft editing ─────────────────────────────────────────────

async def receive_title(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    title = (update.message.text or '').strip()

    if not title:
        await safe_send_text(update.message, "\u26a0\ufe0f Title can't be empty. Try again:")
        return EditorState.AWAITING_TITLE

    if len(title) > TITLE_MAX:
        await safe_send_text(update.message, f"\u26a0\ufe0f Too long \u2014 {TITLE_MAX} characters max. Try again:")
        return EditorState.AWAITING_TITLE

    draft: Game | None = context.user_data.get('draft')
    if draft is None:
        return await _draft_expired(update.message)

    draft.title = title
    return await _show_draft(update.message, context)


async def receive_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    draft: Game | None = context.user_data.get('draft')
    if draft is None:
        return await _draft_expired(update.message)

    parsed = parse_card(update.message.text or '')

    if len(parsed['question']) > CARD_SIDE_MAX or len(parsed['answer']) > CARD_SIDE_MAX:
        await safe_send_text(
            update.message,
            f"\u26a0\ufe0f Too long \u2014 each side can be up to {CARD_SIDE_MAX} characters. Try again:"
        )
        return EditorState.EDITING_CARDS

    try:
        draft.add_card(parsed['question'], parsed['answer'])
    except ValueError:
        hint = html.escape(parsed['question'][:20]) or 'question'
        await safe_send_text(
            update.message,
            f"\u26a0\ufe0f Cards need a question and an answer.\n\n"
            f"Use <code>|</code> to separate them:\n"
            f"<code>{hint} | answer here</code>"
        )
        return EditorState.EDITING_CARDS

    return await _show_draft(update.message, context)


async def delete_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    draft: Game | None = context.user_data.get('draft')
    if draft is None:
        return await _draft_expired(query)

    draft.remove_card(query.data.removeprefix('del_card_'))
    return await _show_draft(query, context)


async def draft_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query

    draft: Game | None = context.user_data.get('draft')
    if draft is None:
        await query.answer()
        return await _draft_expired(query)

    if not draft.cards:
        await query.answer("Add at least one card first", show_alert=True)
        return EditorState.EDITING_CARDS
    await query.answer()

    store = await require_store(update, query)
    if store is None:
        _clear_draft(context)
        return ConversationHandler.END

    store.save_game(draft)
    logging.info(f"Game {draft.id} saved from editor")
    _clear_draft(context)

    text, markup = build_game_detail(store, draft.id)
    await safe_edit_text(query, f"\u2714\ufe0f Saved!\n\n{text}", reply_markup=markup)
    return ConversationHandler.END


async def draft_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    draft: Game | None = context.user_data.get('draft')
    is_new = context.user_data.get('draft_is_new', True)
    _clear_draft(context)

    store = await require_store(update, query)
    if store is None:
        return ConversationHandler.END

    if draft is not None and not is_new:
        text, markup = build_game_detail(store, draft.id)
    else:
        text, markup = build_games_list(store)
    await safe_edit_text(query, text, reply_markup=markup)
    return ConversationHandler.END


async def cancel_editor(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """/cancel inside the editor."""
    _clear_draft(context)

    text, markup = build_menu(session_for(update))
    await safe_send_text(update.message, text, reply_markup=markup)
    return ConversationHandler.END


# ── ConversationHandler ───────────────────────────────────────

editor_handler = ConversationHandler(
    entry_points=[
        CallbackQueryHandler(new_game_entry, pattern='^new_game$'),
        CallbackQueryHandler(edit_game_entry, pattern=r'^edit_game_[0-9a-f-]+$'),
    ],
    per_message=False,
    states={
        EditorState.AWAITING_TITLE: [
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_title),
        ],
        EditorState.EDITING_CARDS: [
            CallbackQueryHandler(delete_card, pattern=r'^del_card_[0-9a-f-]+$'),
            CallbackQueryHandler(draft_done, pattern='^draft_done$'),
            CallbackQueryHandler(draft_cancel, pattern='^draft_cancel$'),
            MessageHandler(filters.TEXT & ~filters.COMMAND, receive_card),
        ],
    },
    fallbacks=[
        CommandHandler('cancel', cancel_editor),
        CommandHandler('start', force_start),
        CommandHandler('logout', logout_command),
        CallbackQueryHandler(logout_entry, pattern='^logout$'),
    ],
)
