"""
The Odds API integration for college football / basketball lines.
https://the-odds-api.com/

Every bookmaker's price is kept as its own :class:`Quote`; no best-line
collapsing happens here.  Line shopping is the arbitrage detector's job,
and the EV evaluator prices each book against its own number.

Markets
-------
``h2h``      → :data:`MONEYLINE` quotes
``spreads``  → :data:`SPREAD` quotes (``point`` = that side's line)

Outcomes whose name is neither the home nor the away team (draw lines on
some European books) are ignored.
"""

import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

import requests

from cfb_edge.core.records import AWAY, HOME, MONEYLINE, SPREAD, GameOddsRecord, Quote

logger = logging.getLogger(__name__)

BASE_URL = "https://api.the-odds-api.com/v4"

SPORT_KEY_NCAAF = "americanfootball_ncaaf"
SPORT_KEY_NCAAB = "basketball_ncaab"

_MARKET_KEYS: Dict[str, str] = {
    "h2h": MONEYLINE,
    "spreads": SPREAD,
}


def _parse_commence_time(value: Optional[str]) -> Optional[datetime]:
    """ISO-8601 → aware datetime.  ``fromisoformat`` rejects a bare ``Z``."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable commence_time %r", value)
        return None


def parse_odds_for_game(game_data: Dict) -> GameOddsRecord:
    """
    Convert one raw Odds API game into a :class:`GameOddsRecord`.

    Prices and points are passed through untouched; malformed values are
    reported by the engine as diagnostics rather than dropped here.

    Args:
        game_data: Raw game dict (``id``, ``commence_time``, ``home_team``,
            ``away_team``, ``bookmakers[].markets[].outcomes[]``).
    """
    home_team = game_data.get("home_team") or ""
    away_team = game_data.get("away_team") or ""

    quotes: List[Quote] = []
    for bookmaker in game_data.get("bookmakers", []):
        book_key = (bookmaker.get("key") or bookmaker.get("title") or "").lower()

        for market in bookmaker.get("markets", []):
            market_id = _MARKET_KEYS.get(market.get("key"))
            if market_id is None:
                continue

            for outcome in market.get("outcomes", []):
                name = outcome.get("name")
                if name == home_team:
                    side = HOME
                elif name == away_team:
                    side = AWAY
                else:
                    continue
                quotes.append(
                    Quote(
                        bookmaker=book_key,
                        market=market_id,
                        side=side,
                        price=outcome.get("price"),
                        point=outcome.get("point") if market_id == SPREAD else None,
                    )
                )

    return GameOddsRecord(
        home_team=home_team,
        away_team=away_team,
        commence_time=_parse_commence_time(game_data.get("commence_time")),
        quotes=tuple(quotes),
        game_id=str(game_data.get("id") or ""),
    )


class OddsAPIClient:
    """Client for The Odds API"""

    def __init__(self, api_key: Optional[str] = None, sport_key: str = SPORT_KEY_NCAAF):
        self.api_key = api_key or os.getenv("THE_ODDS_API_KEY")
        if not self.api_key:
            raise ValueError("THE_ODDS_API_KEY not set in environment")
        self.sport_key = sport_key

    def get_odds(
        self,
        markets: str = "h2h,spreads",
        regions: str = os.getenv("ODDS_API_REGIONS", "us"),
        odds_format: str = "american",
    ) -> List[Dict]:
        """
        Fetch current odds for ``self.sport_key``.

        Returns the raw JSON list, or ``[]`` on any request failure.
        """
        url = f"{BASE_URL}/sports/{self.sport_key}/odds"

        params = {
            "apiKey": self.api_key,
            "regions": regions,
            "markets": markets,
            "oddsFormat": odds_format,
        }

        try:
            response = requests.get(url, params=params, timeout=10)
            response.raise_for_status()

            data = response.json()

            remaining = response.headers.get("x-requests-remaining")
            used = response.headers.get("x-requests-used")
            logger.info(
                "Odds API (%s): %d games fetched. Quota: %s used, %s remaining",
                self.sport_key, len(data), used, remaining,
            )

            return data

        except requests.exceptions.RequestException as e:
            logger.error("Odds API error: %s", e)
            return []

    def get_games(self) -> List[GameOddsRecord]:
        """Fetch and parse the current slate."""
        games = [parse_odds_for_game(game) for game in self.get_odds()]
        logger.info(
            "Parsed %d games (%d quotes)",
            len(games), sum(len(g.quotes) for g in games),
        )
        return games
