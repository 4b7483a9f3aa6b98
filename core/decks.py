import copy
import logging
from typing import Callable

import database.database as db
from core.errors import DeserializationFailure
from core.models import Game, games_from_json, games_to_json

logger = logging.getLogger(__name__)


def games_key(username: str) -> str:
    return f"games_{username}"


class DeckStore:
    """
    Ordered collection of one user's games, persisted on every save.

    Presentation code reads `games` synchronously and may `subscribe` to be
    called after each save.
    """

    def __init__(self, device_id: int, username: str):
        self.device_id = device_id
        self.username = username
        self._games: list[Game] = []
        self._listeners: list[Callable[['DeckStore'], None]] = []
        self.load_games(username)

    @property
    def games(self) -> list[Game]:
        return list(self._games)

    def load_games(self, username: str) -> list[Game]:
        """Replace the in-memory collection with the one stored for username."""
        self.username = username
        raw = db.get_raw_setting(self.device_id, games_key(username))

        if raw is None:
            self._games = []
        else:
            try:
                self._games = games_from_json(raw)
            except DeserializationFailure as e:
                logger.warning(f"Ignoring unreadable games for {username!r}: {e}")
                self._games = []

        return self.games

    def save_game(self, game: Game) -> None:
        stored = copy.deepcopy(game)

        for index, existing in enumerate(self._games):
            if existing.id == game.id:
                self._games[index] = stored
                break
        else:
            self._games.append(stored)

        db.set_raw_setting(self.device_id, games_key(self.username), games_to_json(self._games))
        logger.info(f"Saved game {game.id} ({len(game.cards)} cards) for {self.username!r}")

        for listener in list(self._listeners):
            listener(self)

    def get_game(self, game_id: str) -> Game | None:
        for game in self._games:
            if game.id == game_id:
                return copy.deepcopy(game)
        return None

    def subscribe(self, listener: Callable[['DeckStore'], None]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[['DeckStore'], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
