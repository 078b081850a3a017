"""
Tests for standings: strength of schedule, head-to-head and ranking order.
"""

from league.tournament.models import Player, Round, TableResult
from league.tournament.standings import calculate_h2h, calculate_sos, calculate_standings


def table(label, positions):
    return TableResult(table=label, players=list(positions), game='Azul', positions=dict(positions))


def closed(index, *tables):
    return Round(index=index, tables=list(tables), finalized=True)


class TestStrengthOfSchedule:
    """Tests for SOS."""

    def test_sums_current_opponent_totals(self):
        players = {
            'a': Player('a', 'A', total=5),
            'b': Player('b', 'B', total=10),
            'c': Player('c', 'C', total=2),
        }
        rounds = [closed(1, table('A', {'a': 1, 'b': 2, 'c': 3}))]

        sos = calculate_sos(rounds, players)

        assert sos == {'a': 12, 'b': 7, 'c': 15}

    def test_counts_each_shared_round(self):
        players = {'a': Player('a', 'A', total=1), 'b': Player('b', 'B', total=3)}
        rounds = [
            closed(1, table('A', {'a': 1, 'b': 2})),
            closed(2, table('A', {'a': 2, 'b': 1})),
        ]
        assert calculate_sos(rounds, players)['a'] == 6

    def test_open_rounds_ignored(self):
        players = {'a': Player('a', 'A', total=1), 'b': Player('b', 'B', total=3)}
        rounds = [Round(index=1, tables=[table('A', {'a': None, 'b': None})])]
        assert calculate_sos(rounds, players) == {}


class TestHeadToHead:
    """Tests for the head-to-head tally."""

    def test_antisymmetric(self):
        rounds = [
            closed(1, table('A', {'a': 1, 'b': 2, 'c': 3})),
            closed(2, table('A', {'a': 3, 'b': 1, 'c': 2})),
        ]
        h2h = calculate_h2h(rounds)

        for p, row in h2h.items():
            for q, value in row.items():
                assert h2h[q][p] == -value

    def test_counts_once_per_round(self):
        rounds = [
            closed(1, table('A', {'a': 1, 'b': 2})),
            closed(2, table('A', {'a': 1, 'b': 2})),
            closed(3, table('A', {'a': 2, 'b': 1})),
        ]
        h2h = calculate_h2h(rounds)
        assert h2h['a']['b'] == 1
        assert h2h['b']['a'] == -1

    def test_ties_contribute_nothing(self):
        rounds = [closed(1, table('A', {'a': 1, 'b': 1}))]
        assert calculate_h2h(rounds) == {}


class TestRanking:
    """Tests for the tie-breaker chain."""

    def test_total_first(self):
        players = [Player('a', 'Ann', total=5), Player('b', 'Bob', total=9)]
        rows = calculate_standings(players, [])

        assert [r.id for r in rows] == ['b', 'a']
        assert [r.rank for r in rows] == [1, 2]

    def test_sos_breaks_total_tie(self):
        players = [
            Player('x', 'Xia', total=5),
            Player('y', 'Yann', total=5),
            Player('z', 'Zed', total=10),
            Player('w', 'Wes', total=2),
        ]
        rounds = [closed(1, table('A', {'z': 1, 'x': 2}), table('B', {'y': 1, 'w': 2}))]

        ids = [r.id for r in calculate_standings(players, rounds)]

        # x met z (10), y met w (2)
        assert ids.index('x') < ids.index('y')

    def test_wins_after_sos(self):
        players = [Player('a', 'Ann', total=5, wins=1), Player('b', 'Bob', total=5, wins=2)]
        assert [r.id for r in calculate_standings(players, [])] == ['b', 'a']

    def test_head_to_head_after_wins(self):
        """Bob finished ahead of Alice when they met, so he ranks above her."""
        players = [Player('alice', 'Alice', total=5), Player('bob', 'Bob', total=5)]
        rounds = [closed(1, table('A', {'alice': 2, 'bob': 1}))]

        rows = calculate_standings(players, rounds)

        assert rows[0].sos == rows[1].sos
        assert [r.id for r in rows] == ['bob', 'alice']

    def test_name_then_id(self):
        players = [
            Player('z2', 'Same', total=1),
            Player('z1', 'Same', total=1),
            Player('a9', 'Another', total=1),
        ]
        assert [r.id for r in calculate_standings(players, [])] == ['a9', 'z1', 'z2']

    def test_rows_show_adjusted_rounds(self):
        player = Player('a', 'Ann', total=11, round_points=[5.0, 7.0], manual_adjustments={2: -1.0})
        row = calculate_standings([player], [])[0]

        assert row.rounds == [5.0, 6.0]
        assert row.total == 11

    def test_games_listed(self):
        player = Player('a', 'Ann', games_played=['Azul', 'Root'])
        assert calculate_standings([player], [])[0].games == ['Azul', 'Root']
