#!/usr/bin/env python3
"""
Simulate ladder tournaments with random results to check scoring balance.

Usage:
    python scripts/simulate.py --tournaments 1000

Examples:
    # Reproducible run with a progress bar
    python scripts/simulate.py --tournaments 5000 --seed 7 --progress

    # Steeper late rounds and a bigger bonus cap
    python scripts/simulate.py --multipliers 1 1 1.5 2 --max-bonus 5

    # Also print and save one sample tournament
    python scripts/simulate.py --tournaments 200 --sample-out sample.json
"""

import argparse
import random
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from league.tournament.config import ScoringConfig, TournamentConfig
from league.tournament.display import format_simulation_report, format_standings
from league.tournament.simulation import run_simulations, simulate_tournament
from league.utils.constants import DEFAULT_ROSTER_SIZE, TABLES
from league.utils.logger import configure_root_logger


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Simulate ladder tournaments with random finishing orders.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--tournaments', '-n',
        type=int, default=1000,
        help='Number of tournaments to simulate (default: 1000)'
    )
    parser.add_argument(
        '--players', '-p',
        type=int, default=DEFAULT_ROSTER_SIZE,
        help=f'Roster size (default: {DEFAULT_ROSTER_SIZE})'
    )
    parser.add_argument(
        '--tables',
        type=str, nargs='+', default=list(TABLES),
        help='Table labels from top to bottom (default: A B C D)'
    )
    parser.add_argument(
        '--rounds',
        type=int, default=4,
        help='Rounds per tournament (default: 4)'
    )
    parser.add_argument(
        '--multipliers',
        type=float, nargs='+', default=None,
        help='Per-round multipliers, round 1 first (default: 1 1 1.25 1.5)'
    )
    parser.add_argument(
        '--max-bonus',
        type=float, default=None,
        help='Cap on the summed bonus per player per round (default: 3)'
    )
    parser.add_argument(
        '--tie-rate',
        type=float, default=0.0,
        help='Chance per table that two adjacent finishers tie (default: 0)'
    )
    parser.add_argument(
        '--seed',
        type=int, default=None,
        help='Random seed for reproducible runs'
    )
    parser.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar'
    )
    parser.add_argument(
        '--sample-out',
        type=str, default=None,
        help='Write one sample tournament snapshot to this JSON file and print its standings'
    )
    parser.add_argument(
        '--log-level',
        type=str, default='WARNING',
        help='Engine log level (default: WARNING)'
    )

    return parser.parse_args()


def build_config(args) -> TournamentConfig:
    """Tournament config from defaults plus command line overrides."""
    scoring = {}
    if args.multipliers:
        scoring['multipliers'] = {i: m for i, m in enumerate(args.multipliers, 1)}
    if args.max_bonus is not None:
        scoring['max_bonus'] = args.max_bonus

    return TournamentConfig(
        tables=tuple(args.tables),
        num_rounds=args.rounds,
        scoring=ScoringConfig.from_dict(scoring),
    )


def main():
    """Main entry point."""
    args = parse_args()
    configure_root_logger(level=args.log_level)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.players < config.min_players:
        print(f"Error: Need at least {config.min_players} players for {len(config.tables)} tables")
        return 1

    summary = run_simulations(
        args.tournaments,
        config=config,
        seed=args.seed,
        num_players=args.players,
        tie_rate=args.tie_rate,
        show_progress=args.progress,
    )
    print(format_simulation_report(summary))

    if args.sample_out:
        sample = simulate_tournament(config, random.Random(args.seed), args.players, args.tie_rate)
        print("\n" + format_standings(sample.standings, title="SAMPLE TOURNAMENT"))
        Path(args.sample_out).write_text(sample.tournament.to_json(), encoding='utf-8')
        print(f"\nSample snapshot written to {args.sample_out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
