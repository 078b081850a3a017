"""
Balance simulator.

Plays many tournaments with random finishing orders through the real engine
and aggregates how starting seats, bonuses and wins shape the final table.
"""

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
from tqdm import tqdm

from league.tournament.bonuses import BonusSource
from league.tournament.config import TournamentConfig
from league.tournament.engine import Tournament
from league.tournament.models import StandingRow, TableResult
from league.utils.constants import DEFAULT_ROSTER_SIZE

SIMULATION_GAMES = [
    "7 Wonders", "Splendor", "Azul", "Harmonies",
    "Faraway", "Cities", "Heat: Pedal to the Metal", "Ticket to Ride Europe",
    "Brass Birmingham", "Wingspan", "Ark Nova", "Root",
    "Everdell", "Concordia", "Castles of Burgundy", "Lost Ruins of Arnak",
]


@dataclass
class TournamentSimulation:
    """One simulated tournament."""
    tournament: Tournament
    starting_positions: Dict[str, int]
    standings: List[StandingRow]
    hot_streak: Dict[str, float] = field(default_factory=dict)
    arcinemico: Dict[str, float] = field(default_factory=dict)


@dataclass
class SimulationSummary:
    """Aggregate statistics over many simulated tournaments."""
    num_tournaments: int
    num_players: int
    avg_final_by_start: np.ndarray
    start_final_matrix: np.ndarray
    points: Dict[str, float]
    avg_wins: float
    win_distribution: Dict[int, int]
    hot_streak_rate: float
    arcinemico_rate: float
    arcinemico_mean: float


def random_positions(table: TableResult, rng: random.Random, tie_rate: float = 0.0) -> Dict[str, int]:
    """
    A random finishing order for a table.

    With probability tie_rate one adjacent pair in the order shares a position.
    """
    order = list(table.players)
    rng.shuffle(order)
    positions = {pid: i for i, pid in enumerate(order, 1)}
    if len(order) > 1 and rng.random() < tie_rate:
        i = rng.randrange(len(order) - 1)
        positions[order[i + 1]] = positions[order[i]]
    return positions


def pick_game(table: TableResult, tournament: Tournament, rng: random.Random) -> str:
    """A random title none of the seated players has played, if one is left."""
    played = {g for pid in table.players for g in tournament.player(pid).games_played}
    fresh = [g for g in SIMULATION_GAMES if g not in played]
    return rng.choice(fresh or SIMULATION_GAMES)


def simulate_tournament(
    config: Optional[TournamentConfig] = None,
    rng: Optional[random.Random] = None,
    num_players: int = DEFAULT_ROSTER_SIZE,
    tie_rate: float = 0.0
) -> TournamentSimulation:
    """Run one full tournament with random results."""
    rng = rng or random.Random()
    tournament = Tournament(config, rng=rng)
    for i in range(1, num_players + 1):
        tournament.register_player(f"Player {i}", player_id=f"p{i:02d}")

    first = tournament.start()
    starting = {pid: seat for seat, pid in enumerate(first.player_ids(), 1)}
    hot_streak: Dict[str, float] = {pid: 0.0 for pid in starting}
    arcinemico: Dict[str, float] = {pid: 0.0 for pid in starting}

    while not tournament.is_complete:
        current = tournament.current_round
        for table in current.tables:
            tournament.set_game(current.index, table.table, pick_game(table, tournament, rng))
            for pid, pos in random_positions(table, rng, tie_rate).items():
                tournament.set_position(current.index, table.table, pid, pos)

        result = tournament.finalize_round()
        for pid, score in result.scores.items():
            for bonus in score.bonuses:
                if bonus.source == BonusSource.HOT_STREAK:
                    hot_streak[pid] += bonus.amount
                else:
                    arcinemico[pid] += bonus.amount

    return TournamentSimulation(
        tournament=tournament,
        starting_positions=starting,
        standings=tournament.standings(),
        hot_streak=hot_streak,
        arcinemico=arcinemico,
    )


def summarize(simulations: List[TournamentSimulation]) -> SimulationSummary:
    """Aggregate simulations with numpy."""
    num_players = len(simulations[0].starting_positions)
    matrix = np.zeros((num_players, num_players), dtype=int)
    totals = []
    wins = []
    hot = []
    arc = []

    for sim in simulations:
        for row in sim.standings:
            matrix[sim.starting_positions[row.id] - 1, row.rank - 1] += 1
            totals.append(row.total)
            wins.append(row.wins)
            hot.append(sim.hot_streak[row.id])
            arc.append(sim.arcinemico[row.id])

    totals = np.array(totals, dtype=float)
    arc = np.array(arc, dtype=float)
    counts = matrix.sum(axis=1)
    ranks = np.arange(1, num_players + 1)
    avg_final = (matrix * ranks).sum(axis=1) / np.maximum(counts, 1)

    return SimulationSummary(
        num_tournaments=len(simulations),
        num_players=num_players,
        avg_final_by_start=avg_final,
        start_final_matrix=matrix,
        points={
            'mean': float(np.mean(totals)),
            'median': float(np.median(totals)),
            'min': float(np.min(totals)),
            'max': float(np.max(totals)),
            'std': float(np.std(totals)),
        },
        avg_wins=float(np.mean(wins)),
        win_distribution=dict(sorted(Counter(wins).items())),
        hot_streak_rate=float(np.mean(np.array(hot) > 0)),
        arcinemico_rate=float(np.mean(arc != 0)),
        arcinemico_mean=float(np.mean(arc)),
    )


def run_simulations(
    num_tournaments: int,
    config: Optional[TournamentConfig] = None,
    seed: Optional[int] = None,
    num_players: int = DEFAULT_ROSTER_SIZE,
    tie_rate: float = 0.0,
    show_progress: bool = False
) -> SimulationSummary:
    """
    Simulate many tournaments and summarize them.

    Args:
        num_tournaments: How many tournaments to play
        config: Tournament configuration (defaults if None)
        seed: Seed for reproducible runs
        num_players: Roster size
        tie_rate: Chance per table of one shared position
        show_progress: Show a tqdm progress bar

    Raises:
        ValueError: If num_tournaments < 1
    """
    if num_tournaments < 1:
        raise ValueError("Need at least one tournament to simulate")

    rng = random.Random(seed)
    simulations = [
        simulate_tournament(config, rng, num_players, tie_rate)
        for _ in tqdm(range(num_tournaments), desc="Simulating", disable=not show_progress)
    ]
    return summarize(simulations)
