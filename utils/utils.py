from telegram import InlineKeyboardButton

from core.models import Game


def parse_card(content: str) -> dict[str, str]:
    """
    returns: {'question': str, 'answer': str}
    """
    text = content.strip()

    if '|' in text:
        parts = text.split('|', 1)
        return {'question': parts[0].strip(), 'answer': parts[1].strip()}

    if '\n' in text:
        lines = [l.strip() for l in text.split('\n') if l.strip()]
        if len(lines) >= 2:
            return {'question': lines[0], 'answer': '\n'.join(lines[1:])}

    return {'question': text, 'answer': ''}


def truncate(text: str, max_len: int) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + '\u2026'


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def get_game_buttons(games: list[Game], prefix: str) -> list[list[InlineKeyboardButton]]:
    buttons: list[list[InlineKeyboardButton]] = []
    for game in games:
        buttons.append([
            InlineKeyboardButton(
                f"\U0001f3ae {truncate(game.title, 40)} \u00b7 {plural(len(game.cards), 'card')}",
                callback_data=f"{prefix}_{game.id}"
            )
        ])
    return buttons
