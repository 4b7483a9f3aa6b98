"""
Tests for utils/utils.py — parse_card and friends (pure Python, no Telegram calls).
"""
from core.models import Game
from utils.utils import get_game_buttons, parse_card, plural, truncate


class TestParseCard:
    # ── Pipe separator ────────────────────────────────────────

    def test_pipe_basic(self):
        r = parse_card("Tokyo | Capital of Japan")
        assert r['question'] == 'Tokyo'
        assert r['answer'] == 'Capital of Japan'

    def test_pipe_strips_whitespace(self):
        r = parse_card("  Tokyo  |  Capital  ")
        assert r['question'] == 'Tokyo'
        assert r['answer'] == 'Capital'

    def test_pipe_splits_on_first_only(self):
        r = parse_card("a | b | c")
        assert r['question'] == 'a'
        assert r['answer'] == 'b | c'

    def test_pipe_empty_answer(self):
        r = parse_card("question |")
        assert r['question'] == 'question'
        assert r['answer'] == ''

    # ── Newline separator ─────────────────────────────────────

    def test_newline_two_lines(self):
        r = parse_card("Tokyo\nCapital of Japan")
        assert r['question'] == 'Tokyo'
        assert r['answer'] == 'Capital of Japan'

    def test_newline_multiple_answer_lines_joined(self):
        r = parse_card("Tokyo\nLine 2\nLine 3")
        assert r['answer'] == 'Line 2\nLine 3'

    def test_newline_ignores_blank_lines(self):
        r = parse_card("\n\nTokyo\n\nCapital\n\n")
        assert r['question'] == 'Tokyo'
        assert r['answer'] == 'Capital'

    # ── Single line ───────────────────────────────────────────

    def test_single_line_gives_empty_answer(self):
        r = parse_card("  Just a question  ")
        assert r['question'] == 'Just a question'
        assert r['answer'] == ''

    def test_empty_string(self):
        assert parse_card("") == {'question': '', 'answer': ''}

    def test_pipe_takes_priority_over_newline(self):
        r = parse_card("a | b\nc")
        assert r['question'] == 'a'
        assert r['answer'] == 'b\nc'


class TestFormatting:
    def test_truncate_short_text_untouched(self):
        assert truncate('abc', 5) == 'abc'

    def test_truncate_adds_ellipsis(self):
        assert truncate('abcdef', 4) == 'abc…'

    def test_plural(self):
        assert plural(1, 'card') == '1 card'
        assert plural(0, 'card') == '0 cards'
        assert plural(2, 'card') == '2 cards'

    def test_game_buttons_carry_ids(self):
        games = [Game(title='One'), Game(title='Two')]
        games[1].add_card('q', 'a')
        buttons = get_game_buttons(games, 'game_open')

        assert len(buttons) == 2
        assert buttons[0][0].callback_data == f'game_open_{games[0].id}'
        assert 'Two' in buttons[1][0].text
        assert '1 card' in buttons[1][0].text
