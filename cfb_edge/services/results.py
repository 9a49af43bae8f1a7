"""
Settle recommendations against final scores.

Cover condition (spread bet)::

    side_margin + line > 0  →  win
                      = 0  →  push
                      < 0  →  loss

where ``side_margin`` is the bet side's points minus the opponent's and
``line`` is the line the bet was taken at (favourite negative).  Moneyline
bets win when the bet side outscores the other; a tie is a push.

Profit is in units of one stake: win → payout multiplier, loss → -1,
push → 0.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import requests

from cfb_edge.core.odds_math import payout_multiplier
from cfb_edge.core.records import HOME, MONEYLINE, SPREAD, BetRecommendation
from cfb_edge.services.team_mapping import TeamMatcher

logger = logging.getLogger(__name__)

CFBD_BASE_URL = "https://api.collegefootballdata.com"

WIN = "win"
LOSS = "loss"
PUSH = "push"

_PUSH_TOLERANCE = 1e-9


@dataclass(frozen=True)
class GameResult:
    home_team: str
    away_team: str
    home_points: int
    away_points: int

    @property
    def home_margin(self) -> int:
        return self.home_points - self.away_points

    def reversed(self) -> "GameResult":
        return GameResult(self.away_team, self.home_team, self.away_points, self.home_points)


@dataclass(frozen=True)
class GradedBet:
    """``outcome`` is None when no final score could be found for the game."""

    bet: BetRecommendation
    outcome: Optional[str]
    profit_units: float = 0.0
    result: Optional[GameResult] = None


# ---------------------------------------------------------------------------
# Score sources
# ---------------------------------------------------------------------------

def _first(row: Dict, *keys: str):
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def parse_cfbd_game(row: Dict) -> Optional[GameResult]:
    """
    College Football Data ``/games`` row → :class:`GameResult`.

    Accepts both the camelCase (v2) and snake_case (v1) payloads.  Returns
    None for games that are not completed or have no score.
    """
    if row.get("completed") is False:
        return None
    home = _first(row, "homeTeam", "home_team")
    away = _first(row, "awayTeam", "away_team")
    home_points = _first(row, "homePoints", "home_points")
    away_points = _first(row, "awayPoints", "away_points")
    if not home or not away or home_points is None or away_points is None:
        return None
    try:
        return GameResult(home, away, int(home_points), int(away_points))
    except (TypeError, ValueError):
        logger.debug("Unparseable CFBD score for %s @ %s", away, home)
        return None


def parse_odds_api_score(score_data: Dict) -> Optional[GameResult]:
    """
    The Odds API ``/scores`` entry → :class:`GameResult`.

    The API returns::

        {"home_team": "Duke", "completed": true,
         "scores": [{"name": "Duke", "score": "83"}, ...]}
    """
    if not score_data.get("completed"):
        return None
    home_name = score_data.get("home_team")
    away_name = score_data.get("away_team")
    home_points: Optional[int] = None
    away_points: Optional[int] = None

    for entry in score_data.get("scores") or []:
        try:
            val = int(entry.get("score", 0))
        except (TypeError, ValueError):
            continue
        if entry.get("name") == home_name:
            home_points = val
        else:
            away_points = val

    if not home_name or not away_name or home_points is None or away_points is None:
        return None
    return GameResult(home_name, away_name, home_points, away_points)


class CFBDClient:
    """Minimal College Football Data API client (final scores only)."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("CFBD_API_KEY")
        if not self.api_key:
            raise ValueError("CFBD_API_KEY not set in environment")

    def get_results(self, year: int, week: int, season_type: str = "regular") -> List[GameResult]:
        url = f"{CFBD_BASE_URL}/games"
        params = {"year": year, "week": week, "seasonType": season_type}
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            resp = requests.get(url, params=params, headers=headers, timeout=15)
            resp.raise_for_status()
            rows = resp.json()
        except requests.exceptions.RequestException as e:
            logger.error("CFBD API error: %s", e)
            return []

        results = [r for r in (parse_cfbd_game(row) for row in rows) if r is not None]
        logger.info("CFBD: %d rows, %d completed (year=%d week=%d)", len(rows), len(results), year, week)
        return results


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------

def _find_result(
    bet: BetRecommendation,
    results: Sequence[GameResult],
    matcher: TeamMatcher,
) -> Optional[GameResult]:
    for result in results:
        if matcher.match_team(bet.home_team, result.home_team) and matcher.match_team(
            bet.away_team, result.away_team
        ):
            return result
    # Neutral-site games are sometimes listed the other way round.
    for result in results:
        if matcher.match_team(bet.home_team, result.away_team) and matcher.match_team(
            bet.away_team, result.home_team
        ):
            return result.reversed()
    return None


def grade_bet(bet: BetRecommendation, result: GameResult) -> GradedBet:
    """Settle one bet against a result already oriented to the bet's game."""
    side_margin = result.home_margin if bet.side == HOME else -result.home_margin

    if bet.market == MONEYLINE:
        cover_margin = float(side_margin)
    elif bet.market == SPREAD:
        cover_margin = side_margin + (bet.point or 0.0)
    else:
        raise ValueError(f"Cannot grade market {bet.market!r}")

    if abs(cover_margin) < _PUSH_TOLERANCE:
        return GradedBet(bet, PUSH, 0.0, result)
    if cover_margin > 0:
        return GradedBet(bet, WIN, payout_multiplier(bet.price), result)
    return GradedBet(bet, LOSS, -1.0, result)


def grade_bets(
    bets: Iterable[BetRecommendation],
    results: Sequence[GameResult],
    matcher: Optional[TeamMatcher] = None,
) -> List[GradedBet]:
    """Grade every bet; bets with no matching final score get ``outcome=None``."""
    matcher = matcher or TeamMatcher()
    graded: List[GradedBet] = []
    for bet in bets:
        result = _find_result(bet, results, matcher)
        if result is None:
            logger.debug("No final score for %s @ %s", bet.away_team, bet.home_team)
            graded.append(GradedBet(bet, None))
            continue
        graded.append(grade_bet(bet, result))
    return graded


def summarize(graded: Iterable[GradedBet]) -> Dict:
    """Flat-stake record: one unit per bet, pushes count as risked."""
    graded = list(graded)
    wins = sum(1 for g in graded if g.outcome == WIN)
    losses = sum(1 for g in graded if g.outcome == LOSS)
    pushes = sum(1 for g in graded if g.outcome == PUSH)
    settled = wins + losses + pushes
    units = sum(g.profit_units for g in graded if g.outcome is not None)
    return {
        "count": settled,
        "ungraded": len(graded) - settled,
        "wins": wins,
        "losses": losses,
        "pushes": pushes,
        "units": round(units, 4),
        "roi": round(units / settled, 4) if settled > 0 else 0.0,
    }
