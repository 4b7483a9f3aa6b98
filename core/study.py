"""
One review pass over a game's cards.

Each card shows its question first and flips to the answer on `toggle()`.
Whenever the session moves onto a card, that card starts on its question
again, including cards that were flipped earlier in the same pass.
Nothing here is persisted.
"""
from enum import Enum

from core.models import Flashcard, Game


class CardSide(Enum):
    QUESTION = 'question'
    ANSWER = 'answer'


class StudySession:
    def __init__(self, game: Game):
        self.game = game
        self.index = 0
        self.flipped: dict[str, bool] = {}
        self.completed = not game.cards

        if game.cards:
            self._enter(0)

    @property
    def total(self) -> int:
        return len(self.game.cards)

    @property
    def position(self) -> int:
        """1-based position of the current card."""
        return self.index + 1

    @property
    def current_card(self) -> Flashcard | None:
        if self.completed:
            return None
        return self.game.cards[self.index]

    @property
    def side(self) -> CardSide:
        card = self.current_card
        if card is not None and self.flipped.get(card.id):
            return CardSide.ANSWER
        return CardSide.QUESTION

    @property
    def visible_text(self) -> str:
        card = self.current_card
        if card is None:
            return ''
        return card.answer if self.side is CardSide.ANSWER else card.question

    def toggle(self) -> CardSide:
        card = self.current_card
        if card is not None:
            self.flipped[card.id] = not self.flipped.get(card.id, False)
        return self.side

    def next(self) -> bool:
        """Move to the next card. Past the last card the session completes."""
        if self.completed:
            return False

        if self.index < self.total - 1:
            self._enter(self.index + 1)
            return True

        self.completed = True
        return False

    def previous(self) -> bool:
        if self.completed or self.index == 0:
            return False
        self._enter(self.index - 1)
        return True

    def _enter(self, index: int) -> None:
        self.index = index
        self.flipped[self.game.cards[index].id] = False


def overview(game: Game) -> list[tuple[str, str]]:
    """All cards at once, question and answer side by side. No completion state."""
    return [(card.question, card.answer) for card in game.cards]
