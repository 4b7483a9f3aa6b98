"""
Flashcard and Game records, plus their JSON shape.

Stored layout of one game:
    {"id": "...", "title": "...", "cards": [{"id": "...", "question": "...", "answer": "..."}]}
"""
import json
import uuid
from dataclasses import dataclass, field
from typing import Any

from core.errors import DeserializationFailure


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Flashcard:
    question: str
    answer: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, str]:
        return {'id': self.id, 'question': self.question, 'answer': self.answer}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Flashcard':
        try:
            return cls(
                id=str(data['id']),
                question=str(data['question']),
                answer=str(data['answer']),
            )
        except (KeyError, TypeError) as e:
            raise DeserializationFailure(f"Bad flashcard record: {data!r}") from e


@dataclass
class Game:
    title: str
    cards: list[Flashcard] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def add_card(self, question: str, answer: str) -> Flashcard:
        question = question.strip()
        answer = answer.strip()
        if not question or not answer:
            raise ValueError("A card needs both a question and an answer")

        card = Flashcard(question=question, answer=answer)
        self.cards.append(card)
        return card

    def remove_card(self, card_id: str) -> bool:
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                del self.cards[index]
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'cards': [card.to_dict() for card in self.cards],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Game':
        try:
            raw_cards = data['cards']
            game_id = str(data['id'])
            title = str(data['title'])
        except (KeyError, TypeError) as e:
            raise DeserializationFailure(f"Bad game record: {data!r}") from e

        if not isinstance(raw_cards, list):
            raise DeserializationFailure(f"Cards of game {game_id} are not a list")

        cards = [Flashcard.from_dict(c) for c in raw_cards]
        if len({card.id for card in cards}) != len(cards):
            raise DeserializationFailure(f"Duplicate card ids in game {game_id}")

        return cls(id=game_id, title=title, cards=cards)


def games_to_data(games: list[Game]) -> list[dict[str, Any]]:
    return [game.to_dict() for game in games]


def games_from_data(data: Any) -> list[Game]:
    if not isinstance(data, list):
        raise DeserializationFailure(f"Expected a list of games, got {type(data).__name__}")
    games = [Game.from_dict(item) for item in data]
    if len({game.id for game in games}) != len(games):
        raise DeserializationFailure("Duplicate game ids")
    return games


def games_to_json(games: list[Game]) -> str:
    return json.dumps(games_to_data(games), ensure_ascii=False)


def games_from_json(text: str) -> list[Game]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise DeserializationFailure("Stored games are not valid JSON") from e
    return games_from_data(data)
