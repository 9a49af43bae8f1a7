# scripts/map_teams.py
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

# Load environment variables from .env in the root directory
load_dotenv()

from cfb_edge.core.engine_config import SPORT_ID_NCAAB, SPORT_ID_NCAAF, EngineConfig
from cfb_edge.services.export import load_odds_cache, load_predictions_cache
from cfb_edge.services.odds import OddsAPIClient
from cfb_edge.services.predictions import PredictionTrackerScraper
from cfb_edge.services.team_mapping import TeamMatcher, suggest_alias

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_mapping_exercise(sport: str = SPORT_ID_NCAAF, use_cache: bool = False, cache_dir: str = "data"):
    """
    Find odds-source team names that no prediction-source name matches and
    suggest alias entries for them.  Paste the output into DEFAULT_ALIASES
    (cfb_edge/services/team_mapping.py) or pass it as EngineConfig.team_aliases.
    """
    cfg = EngineConfig.for_sport(sport)

    if use_cache:
        odds_games = load_odds_cache(Path(cache_dir) / f"{cfg.sport_id}_odds.json")
        predictions = load_predictions_cache(Path(cache_dir) / f"{cfg.sport_id}_predictions.json")
    else:
        try:
            odds_client = OddsAPIClient(sport_key=cfg.odds_api_sport_key)
        except ValueError as e:
            print(f"Error: {e}")
            return
        print("Fetching fresh data from The Odds API and Prediction Tracker...")
        odds_games = odds_client.get_games()
        predictions = PredictionTrackerScraper().fetch_predictions()

    prediction_teams = sorted({p.home_team for p in predictions} | {p.away_team for p in predictions})
    if not prediction_teams:
        print("Could not fetch any predictions.")
        return

    odds_teams = sorted({g.home_team for g in odds_games} | {g.away_team for g in odds_games})

    matcher = TeamMatcher()
    new_mappings = {}
    print(f"Analyzing {len(odds_teams)} teams from The Odds API...")
    print("-" * 50)

    for team in odds_teams:
        # Already matched by the normalizer / alias table
        if any(matcher.match_team(team, p) for p in prediction_teams):
            continue

        suggestion = suggest_alias(team, prediction_teams, score_cutoff=70.0)
        if suggestion is None:
            print(f"No clear match for: '{team}'")
            continue

        match_name, score = suggestion
        if score >= 90:
            new_mappings[team] = match_name
            print(f"Suggestion: '{team}' -> '{match_name}' (Score: {score:.0f})")
        else:
            print(f"Review needed: '{team}' (Best guess: '{match_name}', Score: {score:.0f})")

    print("-" * 50)
    if new_mappings:
        print("\nCOPY AND PASTE THESE INTO DEFAULT_ALIASES (team_mapping.py):")
        for k, v in new_mappings.items():
            print(f'    "{k}": "{v}",')
    else:
        print("\nNo new mappings needed for today's games!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Suggest team alias entries")
    parser.add_argument("--sport", choices=[SPORT_ID_NCAAF, SPORT_ID_NCAAB], default=SPORT_ID_NCAAF)
    parser.add_argument("--use-cache", action="store_true")
    parser.add_argument("--cache-dir", default="data")
    args = parser.parse_args()
    run_mapping_exercise(args.sport, args.use_cache, args.cache_dir)
