"""
Tests for promotion, demotion, boundary tie-breaks and table rebalancing.
"""

import random

import pytest

from league.tournament.config import TournamentConfig
from league.tournament.models import Round, TableResult
from league.tournament.promotion import (
    PromotionEngine,
    compute_promotions,
    decide_winners_losers,
    pick_with_boundary,
)


class FirstPickRandom(random.Random):
    """Random source whose sample() always takes the first candidates."""

    def sample(self, population, k, **kwargs):
        return list(population)[:k]


def seat_order_table(label, players):
    """A finished table where seat order is finishing order."""
    return TableResult(
        table=label,
        players=list(players),
        game='Azul',
        positions={pid: i for i, pid in enumerate(players, 1)},
    )


def standard_round():
    tables = [
        seat_order_table(t, [f"{t.lower()}{i}" for i in range(1, 5)])
        for t in ('A', 'B', 'C', 'D')
    ]
    return Round(index=1, tables=tables, finalized=True)


class TestPickWithBoundary:
    """Tests for cuts that fall inside a tie."""

    def test_clean_cut(self):
        ranked = [('a', 1), ('b', 2), ('c', 3), ('d', 4)]
        assert pick_with_boundary(ranked, 2, {}, True, random.Random(0)) == ['a', 'b']

    def test_tie_at_second_broken_by_total(self):
        """Three tied 2nd with totals 10, 8, 8: the 10 takes the last slot."""
        ranked = [('a', 1), ('b', 2), ('c', 2), ('d', 2)]
        totals = {'b': 10, 'c': 8, 'd': 8}
        assert pick_with_boundary(ranked, 2, totals, True, random.Random(0)) == ['a', 'b']

    def test_tie_at_first_falls_back_to_random(self):
        """Totals [10, 8, 8] for two slots: 10 is in, one of the 8s is drawn."""
        ranked = [('x', 1), ('y', 1), ('z', 1), ('w', 4)]
        totals = {'x': 10, 'y': 8, 'z': 8}

        picked = pick_with_boundary(ranked, 2, totals, True, FirstPickRandom())

        assert picked == ['x', 'y']

    def test_losers_prefer_lower_total(self):
        ranked_worst_first = [('x', 4), ('y', 3), ('z', 3)]
        totals = {'y': 10, 'z': 5}

        assert pick_with_boundary(ranked_worst_first, 2, totals, False, random.Random(0)) == ['x', 'z']
        assert pick_with_boundary(ranked_worst_first, 2, totals, True, random.Random(0)) == ['x', 'y']

    def test_random_fallback_reproducible(self):
        ranked = [('a', 1), ('b', 1), ('c', 1)]
        totals = {'a': 5, 'b': 5, 'c': 5}

        first = pick_with_boundary(ranked, 2, totals, True, random.Random(3))
        second = pick_with_boundary(ranked, 2, totals, True, random.Random(3))

        assert first == second
        assert len(first) == 2
        assert set(first) <= {'a', 'b', 'c'}

    def test_random_fallback_varies_with_seed(self):
        ranked = [('a', 1), ('b', 1), ('c', 1)]
        totals = {'a': 5, 'b': 5, 'c': 5}
        outcomes = {
            frozenset(pick_with_boundary(ranked, 2, totals, True, random.Random(seed)))
            for seed in range(50)
        }
        assert len(outcomes) > 1

    def test_short_table_takes_everyone(self):
        assert pick_with_boundary([('a', 1)], 2, {}, True, random.Random(0)) == ['a']

    def test_zero_slots(self):
        assert pick_with_boundary([('a', 1), ('b', 2)], 0, {}, True, random.Random(0)) == []


class TestDecideWinnersLosers:
    """Tests for splitting one table."""

    def test_four_players(self):
        move = decide_winners_losers(seat_order_table('B', ['p1', 'p2', 'p3', 'p4']), {}, 2, random.Random(0))
        assert move.winners == ['p1', 'p2']
        assert move.losers == ['p4', 'p3']
        assert move.stayers == []

    def test_three_players_no_overlap(self):
        """A 3-player table never lists a player as both winner and loser."""
        move = decide_winners_losers(seat_order_table('B', ['p1', 'p2', 'p3']), {}, 2, random.Random(0))
        assert move.winners == ['p1', 'p2']
        assert move.losers == ['p3']
        assert move.stayers == []

    def test_five_players_one_stays(self):
        move = decide_winners_losers(
            seat_order_table('B', ['p1', 'p2', 'p3', 'p4', 'p5']), {}, 2, random.Random(0)
        )
        assert move.winners == ['p1', 'p2']
        assert move.losers == ['p5', 'p4']
        assert move.stayers == ['p3']

    def test_all_tied_split_by_total(self):
        table = TableResult(
            table='B', players=['p1', 'p2', 'p3', 'p4'], game='Azul',
            positions={'p1': 1, 'p2': 1, 'p3': 1, 'p4': 1},
        )
        totals = {'p1': 1, 'p2': 4, 'p3': 3, 'p4': 2}

        move = decide_winners_losers(table, totals, 2, random.Random(0))

        assert set(move.winners) == {'p2', 'p3'}
        assert set(move.losers) == {'p1', 'p4'}


class TestPromotionEngine:
    """Tests for next-round assignments."""

    def test_standard_flow(self):
        """Winners move up, losers down; top keeps winners, bottom keeps losers."""
        result = compute_promotions(standard_round(), {}, rng=random.Random(0))

        assert set(result.assignments['A']) == {'a1', 'a2', 'b1', 'b2'}
        assert set(result.assignments['B']) == {'a3', 'a4', 'c1', 'c2'}
        assert set(result.assignments['C']) == {'b3', 'b4', 'd1', 'd2'}
        assert set(result.assignments['D']) == {'c3', 'c4', 'd3', 'd4'}
        assert result.rebalance_moves == []
        assert result.diagnostics == []

    def test_movement_tags(self):
        result = compute_promotions(standard_round(), {}, rng=random.Random(0))

        assert result.movements['a1'] == 'stay'
        assert result.movements['b1'] == 'up'
        assert result.movements['a4'] == 'down'
        assert result.movements['d4'] == 'stay'
        assert len(result.movements) == 16

    def test_every_player_assigned_once(self):
        """Random finishing orders never lose or duplicate a player."""
        rng = random.Random(11)
        for _ in range(25):
            tables = []
            for label in ('A', 'B', 'C', 'D'):
                players = [f"{label}{i}" for i in range(4)]
                positions = {pid: rng.randint(1, 4) for pid in players}
                tables.append(TableResult(table=label, players=players, game='g', positions=positions))
            totals = {pid: rng.choice([1.0, 2.0, 3.0]) for t in tables for pid in t.players}

            result = compute_promotions(Round(index=1, tables=tables, finalized=True), totals, rng=rng)

            seated = [pid for pids in result.assignments.values() for pid in pids]
            assert sorted(seated) == sorted(totals)
            assert all(len(pids) == 4 for pids in result.assignments.values())

    def test_uneven_tables_rebalanced(self):
        """A 6/2 split over two tables evens out to 4/4."""
        config = TournamentConfig(tables=('A', 'B'))
        round_ = Round(index=1, finalized=True, tables=[
            seat_order_table('A', ['a1', 'a2', 'a3', 'a4', 'a5', 'a6']),
            seat_order_table('B', ['b1', 'b2']),
        ])

        result = PromotionEngine(config, random.Random(0)).compute(round_, {})

        assert len(result.assignments['A']) == 4
        assert len(result.assignments['B']) == 4
        assert len(result.rebalance_moves) == 2
        assert not result.guard_exhausted

    def test_guard_exhaustion_is_diagnostic(self):
        """Running out of rebalance steps reports a diagnostic instead of raising."""
        config = TournamentConfig(tables=('A', 'B'), max_rebalance_steps=1)
        round_ = Round(index=1, finalized=True, tables=[
            seat_order_table('A', ['a1', 'a2', 'a3', 'a4', 'a5', 'a6']),
            seat_order_table('B', ['b1', 'b2']),
        ])

        result = PromotionEngine(config, random.Random(0)).compute(round_, {})

        assert result.guard_exhausted
        assert result.diagnostics[0].code == 'rebalance_guard'
        assert len(result.rebalance_moves) == 1
        seated = [pid for pids in result.assignments.values() for pid in pids]
        assert len(seated) == len(set(seated)) == 8


class TestRebalance:
    """Tests for moving players between tables."""

    @pytest.fixture
    def engine(self):
        return PromotionEngine(TournamentConfig(), random.Random(0))

    def test_adjacent_donor_preferred(self, engine):
        nxt = {
            'A': ['a1', 'a2', 'a3', 'a4', 'a5', 'a6'],
            'B': ['b1', 'b2'],
            'C': ['c1', 'c2', 'c3', 'c4'],
            'D': ['d1', 'd2', 'd3', 'd4'],
        }
        moves, diagnostics = engine.rebalance(nxt)

        assert moves == [('a6', 'A', 'B'), ('a5', 'A', 'B')]
        assert diagnostics == []
        assert all(len(v) == 4 for v in nxt.values())

    def test_distant_donor(self, engine):
        nxt = {
            'A': ['a1', 'a2', 'a3', 'a4', 'a5', 'a6'],
            'B': ['b1', 'b2', 'b3', 'b4'],
            'C': ['c1', 'c2', 'c3', 'c4'],
            'D': ['d1', 'd2'],
        }
        moves, _ = engine.rebalance(nxt)

        assert [(src, dst) for _, src, dst in moves] == [('A', 'D'), ('A', 'D')]
        assert all(len(v) == 4 for v in nxt.values())

    def test_balanced_input_untouched(self, engine):
        nxt = {t: [f"{t}{i}" for i in range(4)] for t in ('A', 'B', 'C', 'D')}
        assert engine.rebalance(nxt) == ([], [])

    def test_size_bounds(self, engine):
        assert engine.size_bounds(16) == (4, 4)
        assert engine.size_bounds(17) == (4, 5)
        assert engine.size_bounds(12) == (3, 4)
