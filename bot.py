import logging

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)

from telegram import Update
from telegram.error import BadRequest, Forbidden, TimedOut, NetworkError
from telegram.ext import (
    ApplicationBuilder,
    CommandHandler,
    CallbackQueryHandler,
    ContextTypes,
)

from config import TG_BOT_TOKEN, PROXY_URL
from database.database import init_db
import handlers.auth as hand_auth
import handlers.editor as hand_editor
import handlers.games as hand_games
import handlers.help as hand_help
import handlers.play as hand_play
import handlers.start as hand_start

GAME_ID = r'[0-9a-f-]+'


def main() -> None:
    logging.info("Running main")

    builder = ApplicationBuilder().token(TG_BOT_TOKEN)
    if PROXY_URL:
        builder = builder.proxy(PROXY_URL).get_updates_proxy(PROXY_URL)
    application = builder.build()

    # Conversations
    application.add_handler(CommandHandler('start', hand_start.start))
    application.add_handler(hand_auth.login_handler)
    application.add_handler(hand_auth.register_handler)
    application.add_handler(hand_editor.editor_handler)

    # Slash commands
    application.add_handler(CommandHandler('games', hand_games.games_command))
    application.add_handler(CommandHandler('logout', hand_start.logout_command))
    application.add_handler(CommandHandler('help', hand_help.help_command))

    # Standalone callback handlers
    application.add_handler(CallbackQueryHandler(hand_start.main_menu, pattern='^main_menu$'))
    application.add_handler(CallbackQueryHandler(hand_start.logout_entry, pattern='^logout$'))
    application.add_handler(CallbackQueryHandler(hand_help.help_entry, pattern='^help$'))

    # Saved games
    application.add_handler(CallbackQueryHandler(hand_games.games_entry, pattern='^games$'))
    application.add_handler(CallbackQueryHandler(hand_games.game_open, pattern=f'^game_open_{GAME_ID}$'))
    application.add_handler(CallbackQueryHandler(hand_games.game_overview, pattern=f'^overview_{GAME_ID}$'))

    # Playing a game
    application.add_handler(CallbackQueryHandler(hand_play.play_entry, pattern=f'^play_{GAME_ID}$'))
    application.add_handler(CallbackQueryHandler(hand_play.flip_card, pattern='^flip_card$'))
    application.add_handler(CallbackQueryHandler(hand_play.next_card, pattern='^next_card$'))
    application.add_handler(CallbackQueryHandler(hand_play.prev_card, pattern='^prev_card$'))
    application.add_handler(CallbackQueryHandler(hand_play.stop_play, pattern='^stop_play$'))

    application.add_error_handler(error_handler)
    application.run_polling()


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Global error handler: logs the error and tries to notify the user."""
    error = context.error
    logging.error(f"Update {update} caused error: {error}", exc_info=error)

    if isinstance(error, Forbidden):
        logging.warning(f"Bot was blocked by user: {error}")
        return

    if isinstance(error, BadRequest):
        msg = str(error).lower()
        if "message is not modified" in msg:
            # same button tapped twice
            return
        if "message to edit not found" in msg or "message to delete not found" in msg:
            return
        logging.warning(f"Bad request: {error}")

    elif isinstance(error, (TimedOut, NetworkError)):
        logging.warning(f"Network issue: {error}")
        return

    if isinstance(update, Update) and update.effective_chat:
        try:
            await context.bot.send_message(
                chat_id=update.effective_chat.id,
                text="\u26a0\ufe0f Something went wrong. Try /start to reset."
            )
        except Exception as e:
            logging.warning(f"Could not notify chat about the error: {e}")


def run() -> None:
    logging.info("Init db...")
    init_db()

    logging.info("Starting app")
    main()


if __name__ == '__main__':
    run()
