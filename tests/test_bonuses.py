"""
Unit tests for the Hot Streak and Arcinemico bonus rules.
"""

import pytest

from league.tournament.bonuses import (
    BonusSource,
    arcinemico_contributions,
    bonus_total,
    calculate_bonuses,
    hot_streak_contributions,
    hot_streak_earned,
)
from league.tournament.config import ScoringConfig
from league.tournament.meetings import MeetingsLedger
from league.tournament.models import Player, TableResult
from league.tournament.scoring import score_table


def make_table(positions, label='A'):
    return TableResult(table=label, players=list(positions), game='Azul', positions=dict(positions))


def fresh_players(*ids):
    return {pid: Player(id=pid, name=pid.upper()) for pid in ids}


def ledger_with(pairs, count):
    ledger = MeetingsLedger()
    for _ in range(count):
        ledger.record_round([list(pair) for pair in pairs])
    return ledger


@pytest.fixture
def config():
    return ScoringConfig()


class TestHotStreak:
    """Tests for the consecutive-win bonus."""

    def test_second_consecutive_win(self, config):
        """A round-1 winner who wins again gets the bonus."""
        players = fresh_players('x', 'y')
        players['x'].round_points = [7.0]
        players['x'].last_was_win = True
        table = make_table({'x': 1, 'y': 2})

        out = hot_streak_contributions(table, players, config)

        assert list(out) == ['x']
        assert out['x'][0].source == BonusSource.HOT_STREAK
        assert out['x'][0].amount == 1

    def test_fires_once_per_tournament(self, config):
        players = fresh_players('x', 'y')
        players['x'].round_points = [7.0, 8.0]
        players['x'].last_was_win = True
        players['x'].hot_streak_triggered = True
        table = make_table({'x': 1, 'y': 2})

        assert hot_streak_contributions(table, players, config) == {}

    def test_no_previous_round(self, config):
        """With no closed rounds there is no previous win to extend."""
        players = fresh_players('x', 'y')
        players['x'].last_was_win = True
        table = make_table({'x': 1, 'y': 2})

        assert hot_streak_contributions(table, players, config) == {}

    def test_previous_loss(self, config):
        players = fresh_players('x', 'y')
        players['x'].round_points = [3.0]
        table = make_table({'x': 1, 'y': 2})
        assert hot_streak_contributions(table, players, config) == {}

    def test_not_winning_now(self, config):
        players = fresh_players('x', 'y')
        players['x'].round_points = [7.0]
        players['x'].last_was_win = True
        table = make_table({'x': 2, 'y': 1})
        assert hot_streak_contributions(table, players, config) == {}

    def test_shared_win_counts(self, config):
        """A tie for first is still a win."""
        players = fresh_players('x', 'y')
        players['x'].round_points = [7.0]
        players['x'].last_was_win = True
        table = make_table({'x': 1, 'y': 1})
        assert 'x' in hot_streak_contributions(table, players, config)


class TestArcinemico:
    """Tests for the rivalry bonus."""

    def test_third_meeting(self, config):
        """Two prior meetings: better finisher +1, worse -1."""
        ledger = ledger_with([('a', 'b')], 2)
        table = make_table({'a': 1, 'b': 2})

        out = arcinemico_contributions(table, ledger, config)

        assert bonus_total(out['a']) == 1
        assert bonus_total(out['b']) == -1
        assert out['a'][0].opponent == 'b'
        assert out['b'][0].opponent == 'a'

    def test_second_meeting_no_bonus(self, config):
        ledger = ledger_with([('a', 'b')], 1)
        table = make_table({'a': 1, 'b': 2})
        assert arcinemico_contributions(table, ledger, config) == {}

    def test_tied_rivals_no_bonus(self, config):
        ledger = ledger_with([('a', 'b')], 3)
        table = make_table({'a': 2, 'b': 2})
        assert arcinemico_contributions(table, ledger, config) == {}

    def test_worse_seat_winner(self, config):
        """The rivalry goes to the better position, not the first seat."""
        ledger = ledger_with([('a', 'b')], 2)
        table = make_table({'a': 4, 'b': 3})
        out = arcinemico_contributions(table, ledger, config)
        assert bonus_total(out['b']) == 1
        assert bonus_total(out['a']) == -1

    def test_multiple_rivals_accumulate(self, config):
        """A winner facing three long-time rivals collects three contributions."""
        ledger = ledger_with([('a', 'b'), ('a', 'c'), ('a', 'd')], 2)
        table = make_table({'a': 1, 'b': 2, 'c': 3, 'd': 4})

        out = arcinemico_contributions(table, ledger, config)

        assert len(out['a']) == 3
        assert bonus_total(out['a']) == 3
        assert bonus_total(out['b']) == -1
        assert bonus_total(out['c']) == -1
        assert bonus_total(out['d']) == -1

    def test_custom_threshold(self):
        config = ScoringConfig(arcinemico_threshold=1, arcinemico_bonus=2)
        ledger = ledger_with([('a', 'b')], 1)
        out = arcinemico_contributions(make_table({'a': 1, 'b': 2}), ledger, config)
        assert bonus_total(out['a']) == 2


class TestCalculateBonuses:
    """Tests for combining both rules."""

    def test_rules_combine_before_cap(self, config):
        """Hot Streak +1 and three rivalries +3 give raw 4, capped to 3."""
        players = fresh_players('a', 'b', 'c', 'd')
        players['a'].round_points = [7.0]
        players['a'].last_was_win = True
        ledger = ledger_with([('a', 'b'), ('a', 'c'), ('a', 'd')], 2)
        table = make_table({'a': 1, 'b': 2, 'c': 3, 'd': 4})

        bonuses = calculate_bonuses([table], players, ledger, config)

        assert bonus_total(bonuses['a']) == 4
        assert hot_streak_earned(bonuses['a'])
        scores = score_table(table, 2, bonuses, config)
        assert scores['a'].capped_bonus == 3
        assert scores['a'].points == 10.0

    def test_tables_are_independent(self, config):
        players = fresh_players('a', 'b', 'c', 'd')
        ledger = ledger_with([('a', 'c')], 2)
        tables = [make_table({'a': 1, 'b': 2}, 'A'), make_table({'c': 1, 'd': 2}, 'B')]

        # a and c are rivals but sit at different tables
        assert calculate_bonuses(tables, players, ledger, config) == {}

    def test_players_without_bonus_absent(self, config):
        players = fresh_players('a', 'b')
        table = make_table({'a': 1, 'b': 2})
        assert calculate_bonuses([table], players, MeetingsLedger(), config) == {}
