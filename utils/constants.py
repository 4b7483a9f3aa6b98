from enum import auto, IntEnum
from telegram import InlineKeyboardButton

USERNAME_MAX = 32
PASSWORD_MIN = 4
TITLE_MAX = 50
CARD_SIDE_MAX = 500


class AuthState(IntEnum):
    LOGIN_USERNAME = auto()
    LOGIN_PASSWORD = auto()
    REGISTER_USERNAME = auto()
    REGISTER_PASSWORD = auto()


class EditorState(IntEnum):
    AWAITING_TITLE = auto()
    EDITING_CARDS = auto()


# Keys in context.user_data that belong to one logged-in session
SESSION_KEYS = (
    'study', 'draft', 'draft_is_new',
    'auth_username',
)


WELCOME_BUTTONS = [
    [
        InlineKeyboardButton("\U0001f511 Login", callback_data='login'),
        InlineKeyboardButton("\U0001f4dd Register", callback_data='register'),
    ],
    [InlineKeyboardButton("\u2753 How it works", callback_data='help')],
]
