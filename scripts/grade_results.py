#!/usr/bin/env python3
"""
grade_results.py — Settle saved EV bets against College Football Data finals.

Reads one or more bet CSVs written by ``run_evaluation.py --save-csv``,
fetches final scores for the given week and prints a flat-stake record.

Usage
-----
  python scripts/grade_results.py --year 2025 --week 13 data/ncaaf_spread_ev.csv
  python scripts/grade_results.py --year 2025 --week 1 --season-type postseason data/*_ev.csv

Environment
-----------
  CFBD_API_KEY   required
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from cfb_edge.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

load_dotenv()

from cfb_edge.services.export import load_bets_csv
from cfb_edge.services.results import CFBDClient, grade_bets, summarize

logger = logging.getLogger("grade_results")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Grade saved bets against final scores")
    parser.add_argument("csv_paths", nargs="+", help="bet CSV files from run_evaluation.py --save-csv")
    parser.add_argument("--year", type=int, required=True)
    parser.add_argument("--week", type=int, required=True)
    parser.add_argument("--season-type", default="regular", choices=["regular", "postseason"])
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        bets = [bet for path in args.csv_paths for bet in load_bets_csv(path)]
        client = CFBDClient()
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    results = client.get_results(args.year, args.week, args.season_type)
    graded = grade_bets(bets, results)

    for g in graded:
        outcome = g.outcome or "no score"
        print(f"  {outcome:<8} {g.profit_units:+.2f}u  {g.bet.market:<9} {g.bet.team} "
              f"({g.bet.away_team} @ {g.bet.home_team})")

    record = summarize(graded)
    print(
        f"\n{record['wins']}-{record['losses']}-{record['pushes']}  "
        f"units {record['units']:+.2f}  ROI {record['roi']:+.1%}  "
        f"ungraded {record['ungraded']}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
