"""
Serializable tournament snapshots.

Pydantic models describe the exported shape; import validates the shape
first and then every cross-object invariant the engine relies on. Anything
wrong raises ConsistencyError and nothing is loaded.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from league.tournament.config import TournamentConfig
from league.tournament.errors import ConsistencyError
from league.tournament.meetings import MeetingsLedger
from league.tournament.models import Player, Round, TableResult
from league.utils.constants import SNAPSHOT_VERSION


class PlayerSnapshot(BaseModel):
    """A player's accumulated state."""
    id: str = Field(min_length=1)
    name: str
    total: float = 0.0
    round_points: List[float] = Field(default_factory=list)
    wins: int = Field(default=0, ge=0)
    games_played: List[str] = Field(default_factory=list)
    hot_streak_triggered: bool = False
    manual_adjustments: Dict[int, float] = Field(default_factory=dict)


class TableSnapshot(BaseModel):
    """One table of one round."""
    table: str
    game: Optional[str] = None
    players: List[str]
    positions: Dict[str, Optional[int]] = Field(default_factory=dict)


class RoundSnapshot(BaseModel):
    index: int = Field(ge=1)
    tables: List[TableSnapshot]
    finalized: bool = False


class MeetingSnapshot(BaseModel):
    players: Tuple[str, str]
    count: int = Field(ge=0)


class TournamentSnapshot(BaseModel):
    """Everything needed to resume a tournament."""
    version: int = SNAPSHOT_VERSION
    players: List[PlayerSnapshot]
    rounds: List[RoundSnapshot] = Field(default_factory=list)
    meetings: List[MeetingSnapshot] = Field(default_factory=list)
    active_round: int = Field(default=0, ge=0)


def build_snapshot(
    players: List[Player],
    rounds: List[Round],
    ledger: MeetingsLedger,
    active_round: int
) -> TournamentSnapshot:
    """Capture engine state as a TournamentSnapshot."""
    return TournamentSnapshot(
        players=[
            PlayerSnapshot(
                id=p.id,
                name=p.name,
                total=p.total,
                round_points=list(p.round_points),
                wins=p.wins,
                games_played=list(p.games_played),
                hot_streak_triggered=p.hot_streak_triggered,
                manual_adjustments=dict(p.manual_adjustments),
            )
            for p in players
        ],
        rounds=[
            RoundSnapshot(
                index=r.index,
                finalized=r.finalized,
                tables=[
                    TableSnapshot(
                        table=t.table,
                        game=t.game,
                        players=list(t.players),
                        positions=dict(t.positions),
                    )
                    for t in r.tables
                ],
            )
            for r in rounds
        ],
        meetings=[MeetingSnapshot(**record) for record in ledger.to_records()],
        active_round=active_round,
    )


def parse_snapshot(data) -> TournamentSnapshot:
    """Validate the shape of raw snapshot data (dict or JSON string)."""
    try:
        if isinstance(data, (str, bytes)):
            return TournamentSnapshot.model_validate_json(data)
        return TournamentSnapshot.model_validate(data)
    except SchemaError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConsistencyError(problems) from e


def _validate_rounds(snapshot: TournamentSnapshot, config: TournamentConfig, known: set) -> List[str]:
    problems = []
    rounds = snapshot.rounds

    for i, r in enumerate(rounds, 1):
        if r.index != i:
            problems.append(f"round {r.index} found where round {i} was expected")
        if r.index > config.num_rounds:
            problems.append(f"round {r.index} exceeds the configured {config.num_rounds} rounds")
        if not r.finalized and i != len(rounds):
            problems.append(f"round {r.index} is open but is not the latest round")

        labels = [t.table for t in r.tables]
        if len(set(labels)) != len(labels):
            problems.append(f"round {r.index} has duplicate table labels")

        seated: Dict[str, str] = {}
        for t in r.tables:
            if t.table not in config.tables:
                problems.append(f"round {r.index}: unknown table {t.table}")
            for pid in t.players:
                if pid not in known:
                    problems.append(f"round {r.index} table {t.table}: unknown player {pid}")
                if pid in seated:
                    problems.append(f"round {r.index}: player {pid} seated at {seated[pid]} and {t.table}")
                seated[pid] = t.table
            for pid, pos in t.positions.items():
                if pid not in t.players:
                    problems.append(f"round {r.index} table {t.table}: position for unseated player {pid}")
                elif pos is not None and not 1 <= pos <= len(t.players):
                    problems.append(
                        f"round {r.index} table {t.table}: position {pos} for {pid} outside 1..{len(t.players)}"
                    )
            if r.finalized:
                if not t.game:
                    problems.append(f"round {r.index} table {t.table} is finalized without a game")
                if any(t.positions.get(pid) is None for pid in t.players):
                    problems.append(f"round {r.index} table {t.table} is finalized with missing positions")

        missing = known - set(seated)
        if missing:
            problems.append(f"round {r.index}: players not seated: {', '.join(sorted(missing))}")

    open_rounds = [r for r in rounds if not r.finalized]
    if open_rounds:
        if snapshot.active_round != open_rounds[-1].index:
            problems.append(
                f"active_round {snapshot.active_round} does not point at open round {open_rounds[-1].index}"
            )
    else:
        if snapshot.active_round != 0:
            problems.append(f"active_round {snapshot.active_round} but no round is open")
        if rounds and len(rounds) < config.num_rounds:
            problems.append(f"round {len(rounds)} is closed but round {len(rounds) + 1} was never created")

    return problems


def _win_history(rounds: List[RoundSnapshot]) -> Dict[str, List[bool]]:
    history: Dict[str, List[bool]] = {}
    for r in rounds:
        for t in r.tables:
            for pid in t.players:
                history.setdefault(pid, []).append(t.positions.get(pid) == 1)
    return history


def _validate_players(snapshot: TournamentSnapshot, closed: List[RoundSnapshot]) -> List[str]:
    problems = []
    history = _win_history(closed)

    for p in snapshot.players:
        if len(p.round_points) != len(closed):
            problems.append(
                f"player {p.id} has {len(p.round_points)} round scores for {len(closed)} closed rounds"
            )
        for round_number in p.manual_adjustments:
            if not 1 <= round_number <= len(closed):
                problems.append(f"player {p.id} has an adjustment for round {round_number}, which is not closed")
        expected = round(sum(p.round_points) + sum(p.manual_adjustments.values()), 2)
        if abs(expected - p.total) > 0.01:
            problems.append(f"player {p.id} total {p.total} does not match scores and adjustments ({expected})")

        wins = history.get(p.id, [])
        if p.wins != sum(wins):
            problems.append(f"player {p.id} has {p.wins} wins but won {sum(wins)} closed rounds")
        streak = any(a and b for a, b in zip(wins, wins[1:]))
        if p.hot_streak_triggered != streak:
            problems.append(f"player {p.id} hot streak flag does not match consecutive wins")

    return problems


def _validate_meetings(snapshot: TournamentSnapshot, closed: List[RoundSnapshot], known: set) -> List[str]:
    problems = []
    try:
        imported = MeetingsLedger.from_records(m.model_dump() for m in snapshot.meetings)
    except ValueError as e:
        return [f"meetings: {e}"]

    for (a, b), _ in imported.pairs():
        if a not in known or b not in known:
            problems.append(f"meetings reference unknown player in {a}/{b}")

    expected = MeetingsLedger()
    for r in closed:
        expected.record_round(t.players for t in r.tables)
    if imported != expected:
        problems.append("meetings do not match the closed rounds")
    return problems


def validate_snapshot(snapshot: TournamentSnapshot, config: TournamentConfig) -> List[str]:
    """Every invariant violation in the snapshot (empty when it is consistent)."""
    problems = []
    if snapshot.version != SNAPSHOT_VERSION:
        problems.append(f"unsupported snapshot version {snapshot.version}")

    ids = [p.id for p in snapshot.players]
    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        problems.append(f"duplicate player ids: {', '.join(duplicates)}")
    known = set(ids)

    problems.extend(_validate_rounds(snapshot, config, known))
    closed = [r for r in snapshot.rounds if r.finalized]
    problems.extend(_validate_players(snapshot, closed))
    problems.extend(_validate_meetings(snapshot, closed, known))
    return problems


def restore_state(snapshot: TournamentSnapshot, config: TournamentConfig):
    """
    Turn a snapshot into engine objects after validating it.

    Returns:
        (players, rounds, ledger, active_round)

    Raises:
        ConsistencyError: If any invariant is violated
    """
    problems = validate_snapshot(snapshot, config)
    if problems:
        raise ConsistencyError(problems)

    closed = [r for r in snapshot.rounds if r.finalized]
    last_closed = closed[-1] if closed else None

    players = []
    for p in snapshot.players:
        last_was_win = False
        if last_closed is not None:
            for t in last_closed.tables:
                if p.id in t.players:
                    last_was_win = t.positions.get(p.id) == 1
        players.append(Player(
            id=p.id,
            name=p.name,
            total=p.total,
            round_points=list(p.round_points),
            wins=p.wins,
            games_played=list(dict.fromkeys(p.games_played)),
            hot_streak_triggered=p.hot_streak_triggered,
            manual_adjustments=dict(p.manual_adjustments),
            last_was_win=last_was_win,
        ))

    rounds = [
        Round(
            index=r.index,
            finalized=r.finalized,
            tables=[
                TableResult(table=t.table, players=list(t.players), game=t.game, positions=dict(t.positions))
                for t in r.tables
            ],
        )
        for r in snapshot.rounds
    ]

    ledger = MeetingsLedger.from_records(m.model_dump() for m in snapshot.meetings)
    return players, rounds, ledger, snapshot.active_round
