#!/usr/bin/env python3
"""
run_evaluation.py — One evaluation pass over the current slate.

Fetches odds (The Odds API) and predictions (Prediction Tracker), runs the
engine, and prints ranked EV bets and arbitrage opportunities.

Usage
-----
  python scripts/run_evaluation.py                       # live fetch, print tables
  python scripts/run_evaluation.py --use-cache           # re-run on cached JSON
  python scripts/run_evaluation.py --save-csv --top-n 50
  python scripts/run_evaluation.py --sport ncaab --sigma 11 --min-edge 0.02

Environment
-----------
  THE_ODDS_API_KEY   required for a live fetch
  EDGE_*             engine overrides (see cfb_edge/core/engine_config.py)
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from cfb_edge.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

load_dotenv()

from cfb_edge.core.engine_config import AMBIGUOUS_POLICIES, SPORT_ID_NCAAB, SPORT_ID_NCAAF, EngineConfig
from cfb_edge.services.engine import UNMATCHED_GAME, EvaluationEngine
from cfb_edge.services.export import (
    format_arbitrage,
    format_bet,
    load_odds_cache,
    load_predictions_cache,
    save_odds_cache,
    save_predictions_cache,
    write_arbitrage_csv,
    write_bets_csv,
)
from cfb_edge.services.odds import OddsAPIClient
from cfb_edge.services.predictions import PredictionTrackerScraper
from cfb_edge.services.ranking import positive_ev

logger = logging.getLogger("run_evaluation")


def _build_config(args: argparse.Namespace) -> EngineConfig:
    cfg = EngineConfig.from_env(EngineConfig.for_sport(args.sport))
    overrides = {}
    if args.sigma is not None:
        overrides["sigma"] = args.sigma
    if args.top_n is not None:
        overrides["top_n"] = args.top_n
    if args.min_edge is not None:
        overrides["min_edge"] = args.min_edge
    if args.ambiguous_policy is not None:
        overrides["ambiguous_policy"] = args.ambiguous_policy
    if args.allow_swapped_sides:
        overrides["allow_swapped_sides"] = True
    return replace(cfg, **overrides) if overrides else cfg


def _load_inputs(args: argparse.Namespace, cfg: EngineConfig):
    cache_dir = Path(args.cache_dir)
    odds_path = cache_dir / f"{cfg.sport_id}_odds.json"
    preds_path = cache_dir / f"{cfg.sport_id}_predictions.json"

    if args.use_cache:
        return load_odds_cache(odds_path), load_predictions_cache(preds_path)

    odds = OddsAPIClient(sport_key=cfg.odds_api_sport_key).get_games()
    predictions = PredictionTrackerScraper().fetch_predictions()
    save_odds_cache(odds, odds_path)
    save_predictions_cache(predictions, preds_path)
    return odds, predictions


def _print_section(title: str, lines) -> None:
    print(f"\n{title}")
    print("-" * len(title))
    if not lines:
        print("  (none)")
    for i, line in enumerate(lines, 1):
        print(f"{i:>3}. {line}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="College betting edge engine")
    parser.add_argument("--sport", choices=[SPORT_ID_NCAAF, SPORT_ID_NCAAB], default=SPORT_ID_NCAAF)
    parser.add_argument("--use-cache", action="store_true", help="read cached JSON instead of fetching")
    parser.add_argument("--cache-dir", default="data", help="cache / CSV directory (default: data)")
    parser.add_argument("--save-csv", action="store_true", help="write ranked lists as CSV")
    parser.add_argument("--top-n", type=int, default=None)
    parser.add_argument("--sigma", type=float, default=None)
    parser.add_argument("--min-edge", type=float, default=None)
    parser.add_argument("--all-ev", action="store_true", help="include negative-EV bets in the printout")
    parser.add_argument("--ambiguous-policy", choices=sorted(AMBIGUOUS_POLICIES), default=None)
    parser.add_argument("--allow-swapped-sides", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = _build_config(args)
        odds, predictions = _load_inputs(args, cfg)
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    result = EvaluationEngine(cfg).evaluate(odds, predictions)

    ml_bets = list(result.moneyline_bets)
    sp_bets = list(result.spread_bets)
    if not args.all_ev:
        ml_bets = positive_ev(ml_bets)
        sp_bets = positive_ev(sp_bets)

    _print_section("MONEYLINE EV", [format_bet(b) for b in ml_bets])
    _print_section("SPREAD EV", [format_bet(b) for b in sp_bets])
    _print_section("MONEYLINE ARBITRAGE", [format_arbitrage(o) for o in result.moneyline_arbitrage])
    _print_section("SPREAD ARBITRAGE", [format_arbitrage(o) for o in result.spread_arbitrage])

    kinds = {}
    for diag in result.diagnostics:
        kinds[diag.kind] = kinds.get(diag.kind, 0) + 1
    print(f"\nDiagnostics: {kinds or 'none'}")
    if kinds.get(UNMATCHED_GAME):
        print("  Run scripts/map_teams.py to find alias candidates for unmatched games.")

    if args.save_csv:
        out = Path(args.cache_dir)
        write_bets_csv(ml_bets, out / f"{cfg.sport_id}_moneyline_ev.csv")
        write_bets_csv(sp_bets, out / f"{cfg.sport_id}_spread_ev.csv")
        write_arbitrage_csv(result.moneyline_arbitrage, out / f"{cfg.sport_id}_moneyline_arb.csv")
        write_arbitrage_csv(result.spread_arbitrage, out / f"{cfg.sport_id}_spread_arb.csv")

    return 0


if __name__ == "__main__":
    sys.exit(main())
