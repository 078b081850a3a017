"""
Display formatting for ladder results.

Provides ASCII standings, round sheets and simulation reports for terminal output.
"""

from typing import List, Optional

from league.tournament.models import Round, StandingRow
from league.tournament.promotion import PromotionResult


def _fmt_points(value: float) -> str:
    """Points without trailing zeros: 7, 6.5, 8.75."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_standings(rows: List[StandingRow], title: str = "STANDINGS") -> str:
    """
    Format standings as an ASCII table.

    Args:
        rows: Ranked standings rows
        title: Heading line

    Returns:
        Formatted string for terminal display
    """
    num_rounds = max((len(r.rounds) for r in rows), default=0)
    round_headers = "".join(f"{'R' + str(i):>8}" for i in range(1, num_rounds + 1))

    lines = []
    lines.append(f"=== {title} ===")
    lines.append("")
    lines.append(f"{'Rank':<6}{'Player':<22}{'Total':>8}{'SOS':>9}{'Wins':>6}{round_headers}")
    lines.append("-" * (51 + 8 * num_rounds))

    for row in rows:
        rounds = "".join(f"{_fmt_points(p):>8}" for p in row.rounds)
        rounds += " " * 8 * (num_rounds - len(row.rounds))
        lines.append(
            f"{row.rank:<6}{row.name[:21]:<22}{_fmt_points(row.total):>8}"
            f"{_fmt_points(row.sos):>9}{row.wins:>6}{rounds}"
        )

    return "\n".join(lines)


def format_round(round_: Round, names: Optional[dict] = None) -> str:
    """
    Format a round's tables: seats, game, and positions when recorded.

    Args:
        round_: The round to show
        names: Optional player id -> display name
    """
    names = names or {}
    status = "closed" if round_.finalized else "open"
    lines = [f"Round {round_.index} ({status})"]
    for t in round_.tables:
        lines.append(f"  Table {t.table} - {t.game or 'no game selected'}")
        seats = t.ranked() if not t.missing_positions() else [(pid, t.positions.get(pid)) for pid in t.players]
        for pid, pos in seats:
            pos_str = str(pos) if pos is not None else "-"
            lines.append(f"    {pos_str:>2}  {names.get(pid, pid)}")
    return "\n".join(lines)


def format_promotions(result: PromotionResult, names: Optional[dict] = None) -> str:
    """Format next-round assignments with each player's movement."""
    names = names or {}
    arrows = {"up": "^", "down": "v", "stay": "="}
    lines = ["Next round tables:"]
    for table, pids in result.assignments.items():
        seated = ", ".join(f"{arrows.get(result.movements.get(pid), ' ')}{names.get(pid, pid)}" for pid in pids)
        lines.append(f"  {table}: {seated}")
    for pid, src, dst in result.rebalance_moves:
        lines.append(f"  rebalanced {names.get(pid, pid)}: {src} -> {dst}")
    return "\n".join(lines)


def format_simulation_report(summary) -> str:
    """Format a SimulationSummary as a multi-section text report."""
    lines = []
    lines.append("=== TOURNAMENT BALANCE ANALYSIS ===")
    lines.append("")
    lines.append(f"Simulated {summary.num_tournaments} tournaments with random results")
    lines.append("")

    lines.append("1. STARTING POSITION IMPACT")
    lines.append("")
    expected = (summary.num_players + 1) / 2
    lines.append(f"{'Start Pos':<11}{'Avg Final Pos':>15}{'Expected':>10}{'Deviation':>11}")
    lines.append("-" * 47)
    for i, avg in enumerate(summary.avg_final_by_start, 1):
        deviation = avg - expected
        sign = "+" if deviation >= 0 else ""
        lines.append(f"{i:<11}{avg:>15.2f}{expected:>10.2f}{sign + format(deviation, '.2f'):>11}")

    lines.append("")
    lines.append("2. POINT DISTRIBUTION")
    lines.append("")
    p = summary.points
    lines.append(f"Average total points: {p['mean']:.2f}")
    lines.append(f"Median total points: {p['median']:.2f}")
    lines.append(f"Min total points: {p['min']:.2f}")
    lines.append(f"Max total points: {p['max']:.2f}")
    lines.append(f"Point spread (max-min): {p['max'] - p['min']:.2f}")
    lines.append(f"Standard deviation: {p['std']:.2f}")

    lines.append("")
    lines.append("3. WIN DISTRIBUTION")
    lines.append("")
    lines.append(f"Average wins per player: {summary.avg_wins:.2f}")
    lines.append(f"{'Wins':>4} | {'Count':>6} | Percentage")
    total = sum(summary.win_distribution.values()) or 1
    for wins in sorted(summary.win_distribution):
        count = summary.win_distribution[wins]
        lines.append(f"{wins:>4} | {count:>6} | {count / total:.1%}")

    lines.append("")
    lines.append("4. BONUS IMPACT")
    lines.append("")
    lines.append(f"Players triggering Hot Streak: {summary.hot_streak_rate:.1%}")
    lines.append(f"Players with any Arcinemico adjustment: {summary.arcinemico_rate:.1%}")
    lines.append(f"Average net Arcinemico per player: {summary.arcinemico_mean:+.2f}")

    return "\n".join(lines)
