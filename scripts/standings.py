#!/usr/bin/env python3
"""
Print standings (and the open round, if any) from a saved tournament snapshot.

Usage:
    python scripts/standings.py snapshot.json
    python scripts/standings.py snapshot.json --rounds
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from league.tournament.config import TournamentConfig
from league.tournament.display import format_round, format_standings
from league.tournament.engine import Tournament
from league.tournament.errors import ConsistencyError


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Show standings from a tournament snapshot.')
    parser.add_argument('snapshot', type=str, help='Path to a snapshot JSON file')
    parser.add_argument(
        '--tables',
        type=str, nargs='+', default=None,
        help='Table labels used by the tournament (default: A B C D)'
    )
    parser.add_argument(
        '--num-rounds',
        type=int, default=None,
        help='Rounds in the tournament (default: 4)'
    )
    parser.add_argument(
        '--rounds',
        action='store_true',
        help='Also print every round sheet'
    )
    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    path = Path(args.snapshot)
    if not path.exists():
        print(f"Error: {path} not found")
        return 1

    overrides = {}
    if args.tables:
        overrides['tables'] = args.tables
    if args.num_rounds:
        overrides['num_rounds'] = args.num_rounds
    config = TournamentConfig.from_dict(overrides)

    try:
        tournament = Tournament.from_state(path.read_text(encoding='utf-8'), config)
    except ConsistencyError as e:
        print("Error: snapshot rejected")
        for problem in e.problems:
            print(f"  - {problem}")
        return 1

    names = {p.id: p.name for p in tournament.players}
    print(format_standings(tournament.standings()))

    if args.rounds:
        for r in tournament.rounds:
            print("\n" + format_round(r, names))
    elif tournament.current_round is not None:
        print("\n" + format_round(tournament.current_round, names))

    if tournament.is_complete:
        print("\nTournament complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
