"""
Tournament aggregate: owns players, rounds and the meetings ledger and runs
every state-changing operation.

Finalizing a round is all-or-nothing: every table is validated first, the new
player state and ledger are computed on copies, and only then swapped in.
A re-entrant lock serializes writers; standings reads take the same lock so
they never interleave with a finalize.
"""

import copy
import json
import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from league.tournament.bonuses import calculate_bonuses, hot_streak_earned
from league.tournament.config import TournamentConfig
from league.tournament.errors import (
    DiagnosticWarning,
    InvalidPosition,
    RoundClosed,
    UndersizedRoster,
    UnknownPlayer,
    UnknownTable,
    ValidationError,
)
from league.tournament.meetings import MeetingsLedger
from league.tournament.models import Player, Round, StandingRow, TableResult, make_round
from league.tournament.promotion import PromotionEngine, PromotionResult
from league.tournament.scoring import RoundScore, score_round, validate_tables
from league.tournament.snapshot import build_snapshot, parse_snapshot, restore_state
from league.tournament.standings import calculate_standings

logger = logging.getLogger(__name__)


@dataclass
class FinalizeResult:
    """Outcome of finalizing one round."""
    round_index: int
    scores: Dict[str, RoundScore]
    players: List[Player]
    meetings: MeetingsLedger
    next_round: Optional[Round] = None
    promotion: Optional[PromotionResult] = None
    diagnostics: List[DiagnosticWarning] = field(default_factory=list)

    @property
    def tournament_complete(self) -> bool:
        return self.next_round is None


def partition_players(player_ids: Sequence[str], tables: Sequence[str], rng: random.Random) -> Dict[str, List[str]]:
    """Shuffle players into tables whose sizes differ by at most one (top tables get the extras)."""
    shuffled = list(player_ids)
    rng.shuffle(shuffled)
    base, extra = divmod(len(shuffled), len(tables))
    out: Dict[str, List[str]] = {}
    start = 0
    for i, t in enumerate(tables):
        size = base + (1 if i < extra else 0)
        out[t] = shuffled[start:start + size]
        start += size
    return out


class Tournament:
    """
    A ladder tournament from roster to final standings.

    Usage:
        t = Tournament(config, rng=random.Random(42))
        round1 = t.start(['ann', 'bob', ...])
        t.set_game(1, 'A', 'Azul')
        t.set_position(1, 'A', 'ann', 1)
        ...
        result = t.finalize_round()
    """

    def __init__(self, config: Optional[TournamentConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or TournamentConfig()
        self.rng = rng or random.Random()
        self.promotion = PromotionEngine(self.config, self.rng)

        self._players: Dict[str, Player] = {}
        self.rounds: List[Round] = []
        self.meetings = MeetingsLedger()
        self.active_round = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Roster

    @property
    def players(self) -> List[Player]:
        return list(self._players.values())

    def player(self, player_id: str) -> Player:
        try:
            return self._players[player_id]
        except KeyError:
            raise UnknownPlayer(f"Unknown player: {player_id}") from None

    @property
    def started(self) -> bool:
        return bool(self.rounds)

    @property
    def is_complete(self) -> bool:
        return self.started and self.active_round == 0

    def register_player(self, name: str, player_id: Optional[str] = None) -> Player:
        """Add a player before the tournament starts. The id defaults to the name."""
        with self._lock:
            if self.started:
                raise ValidationError("Cannot add players after the tournament has started")
            player_id = player_id or name
            if player_id in self._players:
                raise ValidationError(f"Duplicate player id: {player_id}")
            player = Player(id=player_id, name=name)
            self._players[player_id] = player
            return player

    def rename_player(self, player_id: str, name: str):
        with self._lock:
            self.player(player_id).name = name

    # ------------------------------------------------------------------
    # Rounds

    def start(self, player_ids: Optional[Sequence[str]] = None) -> Round:
        """
        Seat the roster at random and open round 1.

        Args:
            player_ids: Optional ids to register (named after their id) before starting

        Raises:
            ValidationError: player_ids repeats an id
            UndersizedRoster: Fewer than config.min_players players
        """
        with self._lock:
            if self.started:
                raise ValidationError("Tournament already started")
            new_ids = [pid for pid in player_ids or [] if pid not in self._players]
            repeated = sorted({pid for pid in new_ids if new_ids.count(pid) > 1})
            if repeated:
                raise ValidationError(f"Duplicate player ids in roster: {', '.join(repeated)}")

            roster_size = len(self._players) + len(new_ids)
            if roster_size < self.config.min_players:
                raise UndersizedRoster(roster_size, self.config.min_players)

            for pid in new_ids:
                self.register_player(pid, pid)

            assignments = partition_players(list(self._players), self.config.tables, self.rng)
            first = make_round(1, assignments, self.config.tables)
            self.rounds.append(first)
            self.active_round = 1
            logger.info("Tournament started with %d players over %d tables",
                        len(self._players), len(self.config.tables))
            return first

    def get_round(self, index: int) -> Round:
        for r in self.rounds:
            if r.index == index:
                return r
        raise ValidationError(f"Round {index} does not exist")

    @property
    def current_round(self) -> Optional[Round]:
        return self.get_round(self.active_round) if self.active_round else None

    def _open_table(self, round_index: int, table: str) -> TableResult:
        r = self.get_round(round_index)
        if r.finalized:
            raise RoundClosed(round_index)
        t = r.table(table)
        if t is None:
            raise UnknownTable(f"Round {round_index} has no table {table}")
        return t

    def set_position(self, round_index: int, table: str, player_id: str, position: Optional[int]):
        """Record (or clear, with None) a finishing position in an open round."""
        with self._lock:
            t = self._open_table(round_index, table)
            if player_id not in t.players:
                raise UnknownPlayer(f"Player {player_id} is not seated at table {table}")
            if position is not None and not 1 <= position <= t.size:
                raise InvalidPosition(f"Position {position} outside 1..{t.size} at table {table}")
            t.positions[player_id] = position

    def set_game(self, round_index: int, table: str, game_title: Optional[str]):
        with self._lock:
            self._open_table(round_index, table).game = game_title or None

    def finalize_round(self, round_index: Optional[int] = None) -> FinalizeResult:
        """
        Score the active round, update players and meetings, and open the next round.

        Raises:
            RoundClosed: The round was already finalized
            NoGameSelected, IncompleteRound: The round is not ready; nothing changed
        """
        with self._lock:
            index = round_index if round_index is not None else self.active_round
            if index == 0:
                raise ValidationError("No round is open")
            round_ = self.get_round(index)
            if round_.finalized:
                raise RoundClosed(index)
            if index != self.active_round:
                raise ValidationError(f"Round {index} is not the active round")

            validate_tables(round_.tables)
            diagnostics = self._table_diagnostics(round_)

            scoring = self.config.scoring
            bonuses = calculate_bonuses(round_.tables, self._players, self.meetings, scoring)
            scores = score_round(round_.tables, index, bonuses, scoring)

            players = copy.deepcopy(self._players)
            for table in round_.tables:
                for pid in table.players:
                    p = players[pid]
                    s = scores[pid]
                    p.round_points.append(s.points)
                    p.total = round(p.total + s.points, 2)
                    if s.is_win:
                        p.wins += 1
                    if hot_streak_earned(s.bonuses):
                        p.hot_streak_triggered = True
                    p.last_was_win = s.is_win
                    p.record_game(table.game)

            meetings = self.meetings.copy()
            meetings.record_round(round_.memberships())

            next_round = None
            promotion = None
            if index < self.config.num_rounds:
                promotion = self.promotion.compute(round_, {pid: p.total for pid, p in players.items()})
                diagnostics.extend(promotion.diagnostics)
                next_round = make_round(index + 1, promotion.assignments, self.config.tables)

            # Commit
            self._players = players
            self.meetings = meetings
            round_.finalized = True
            if next_round is not None:
                self.rounds.append(next_round)
                self.active_round = next_round.index
            else:
                self.active_round = 0

            for d in diagnostics:
                logger.warning("Round %d: %s", index, d.message)
            if next_round is None:
                logger.info("Round %d finalized; tournament complete", index)
            else:
                logger.info("Round %d finalized; round %d opened", index, next_round.index)

            return FinalizeResult(
                round_index=index,
                scores=scores,
                players=copy.deepcopy(self.players),
                meetings=self.meetings.copy(),
                next_round=copy.deepcopy(next_round),
                promotion=promotion,
                diagnostics=diagnostics,
            )

    def _table_diagnostics(self, round_: Round) -> List[DiagnosticWarning]:
        out = []
        for t in round_.tables:
            if t.size > self.config.target_table_size:
                out.append(DiagnosticWarning("oversized_table", f"Table {t.table} has {t.size} players"))
            repeats = [pid for pid in t.players if t.game in self._players[pid].games_played]
            if repeats:
                out.append(DiagnosticWarning(
                    "repeat_game",
                    f"Table {t.table}: {', '.join(repeats)} already played {t.game}",
                ))
        return out

    # ------------------------------------------------------------------
    # Adjustments and reads

    def set_manual_adjustment(self, player_id: str, round_index: int, delta: float):
        """
        Set a signed manual adjustment for a closed round (0 clears it).

        The total moves by the change in adjustment; round scores, meetings
        and bonus eligibility are untouched.
        """
        with self._lock:
            p = self.player(player_id)
            if not 1 <= round_index <= p.rounds_played:
                raise ValidationError(f"Round {round_index} is not a closed round for {player_id}")
            previous = p.manual_adjustments.get(round_index, 0.0)
            if delta:
                p.manual_adjustments[round_index] = delta
            else:
                p.manual_adjustments.pop(round_index, None)
            p.total = round(p.total - previous + delta, 2)

    def standings(self) -> List[StandingRow]:
        with self._lock:
            return calculate_standings(self.players, self.rounds)

    # ------------------------------------------------------------------
    # Snapshots

    def export_state(self) -> dict:
        """JSON-compatible snapshot of players, rounds, meetings and the active round."""
        with self._lock:
            snapshot = build_snapshot(self.players, self.rounds, self.meetings, self.active_round)
            return snapshot.model_dump(mode="json")

    def import_state(self, data):
        """
        Replace all state with a validated snapshot (dict or JSON string).

        Raises:
            ConsistencyError: The snapshot is invalid; current state is kept
        """
        snapshot = parse_snapshot(data)
        players, rounds, ledger, active = restore_state(snapshot, self.config)
        with self._lock:
            self._players = {p.id: p for p in players}
            self.rounds = rounds
            self.meetings = ledger
            self.active_round = active
        logger.info("Imported tournament: %d players, %d rounds", len(players), len(rounds))

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.export_state(), indent=indent)

    @classmethod
    def from_state(cls, data, config: Optional[TournamentConfig] = None,
                   rng: Optional[random.Random] = None) -> "Tournament":
        tournament = cls(config, rng)
        tournament.import_state(data)
        return tournament
