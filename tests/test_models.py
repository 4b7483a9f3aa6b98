"""
Tests for core/models.py — pure Python, no DB, no Telegram.
"""
import json

import pytest

from core.errors import DeserializationFailure
from core.models import Flashcard, Game, games_from_json, games_to_json


def _game(n_cards, title='Capitals'):
    game = Game(title=title)
    for i in range(n_cards):
        game.add_card(f"question {i}", f"answer {i}")
    return game


class TestRoundTrip:
    @pytest.mark.parametrize('n_cards', [0, 1, 50])
    def test_game_survives_json(self, n_cards):
        game = _game(n_cards)
        [restored] = games_from_json(games_to_json([game]))

        assert restored.id == game.id
        assert restored.title == game.title
        assert [c.id for c in restored.cards] == [c.id for c in game.cards]
        assert [c.question for c in restored.cards] == [c.question for c in game.cards]
        assert [c.answer for c in restored.cards] == [c.answer for c in game.cards]

    def test_collection_order_kept(self):
        games = [_game(1, 'a'), _game(2, 'b'), _game(0, 'c')]
        restored = games_from_json(games_to_json(games))
        assert [g.title for g in restored] == ['a', 'b', 'c']

    def test_json_layout(self):
        game = Game(title='T', id='g1', cards=[Flashcard(question='q', answer='a', id='c1')])
        data = json.loads(games_to_json([game]))
        assert data == [{'id': 'g1', 'title': 'T', 'cards': [{'id': 'c1', 'question': 'q', 'answer': 'a'}]}]


class TestBadPayloads:
    @pytest.mark.parametrize('text', [
        '{not json',
        '{"id": "g1"}',
        '[{"id": "g1", "title": "T"}]',
        '[{"id": "g1", "title": "T", "cards": "nope"}]',
        '[{"id": "g1", "title": "T", "cards": [{"id": "c1"}]}]',
        '[42]',
        '[{"id": "g1", "title": "T", "cards": [{"id": "c1", "question": "q", "answer": "a"}, {"id": "c1", "question": "q2", "answer": "a2"}]}]',
        '[{"id": "g1", "title": "A", "cards": []}, {"id": "g1", "title": "B", "cards": []}]',
    ])
    def test_raises_deserialization_failure(self, text):
        with pytest.raises(DeserializationFailure):
            games_from_json(text)

    def test_empty_list_is_fine(self):
        assert games_from_json('[]') == []


class TestGameEditing:
    def test_ids_assigned_and_unique(self):
        game = _game(3)
        ids = [c.id for c in game.cards]
        assert len(set(ids)) == 3
        assert Game(title='x').id != Game(title='x').id

    def test_add_card_strips_and_appends(self):
        game = Game(title='T')
        game.add_card('  q1 ', ' a1  ')
        card = game.add_card('q2', 'a2')
        assert [c.question for c in game.cards] == ['q1', 'q2']
        assert game.cards[0].answer == 'a1'
        assert game.cards[-1] is card

    @pytest.mark.parametrize('question,answer', [('', 'a'), ('q', ''), ('  ', '  ')])
    def test_add_card_needs_both_sides(self, question, answer):
        game = Game(title='T')
        with pytest.raises(ValueError):
            game.add_card(question, answer)
        assert game.cards == []

    def test_remove_card(self):
        game = _game(3)
        middle = game.cards[1]
        assert game.remove_card(middle.id) is True
        assert [c.question for c in game.cards] == ['question 0', 'question 2']

    def test_remove_unknown_card(self):
        game = _game(1)
        assert game.remove_card('missing') is False
        assert len(game.cards) == 1
