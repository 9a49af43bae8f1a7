"""
Cross-bookmaker two-way arbitrage detection.

Model-free: only quotes are compared.  For one game and one market, every
(home quote, away quote) pair is a candidate when the two implied
probabilities sum strictly below 1.0.  Staking each leg in proportion to
its implied probability returns the same amount whichever side wins::

    stake_home = p_home / (p_home + p_away)
    stake_away = p_away / (p_home + p_away)
    profit     = 1 / (p_home + p_away) − 1

Spread pairs must sit on exact opposite numbers (home -3.5 with away +3.5).
Home -3 against away +7 leaves a 4-point window in which both bets lose, so
it is never an arbitrage regardless of price.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from cfb_edge.core.odds_math import implied_probability
from cfb_edge.core.records import (
    AWAY,
    HOME,
    MONEYLINE,
    SPREAD,
    ArbitrageLeg,
    ArbitrageOpportunity,
    GameOddsRecord,
    Quote,
)

logger = logging.getLogger(__name__)

# Lines are quoted in half points; this only absorbs float noise from
# upstream parsing ("3.5" vs 3.4999999999).
_LINE_TOLERANCE = 1e-9


def _lines_oppose(home: Quote, away: Quote) -> bool:
    if home.point is None or away.point is None:
        return False
    return math.isclose(home.point, -away.point, rel_tol=0.0, abs_tol=_LINE_TOLERANCE)


def _leg(quote: Quote, team: str, implied: float, total: float) -> ArbitrageLeg:
    return ArbitrageLeg(
        bookmaker=quote.bookmaker,
        side=quote.side,
        team=team,
        price=quote.price,
        implied_prob=implied,
        stake_fraction=implied / total,
        point=quote.point,
    )


def find_arbitrage(
    quotes: Sequence[Quote],
    market: str,
    *,
    home_team: str = "",
    away_team: str = "",
    game_id: str = "",
) -> Optional[ArbitrageOpportunity]:
    """
    Best arbitrage pair among ``quotes`` for one game and one market.

    Args:
        quotes: All quotes for the game; other markets are ignored.
        market: :data:`MONEYLINE` or :data:`SPREAD`.
        home_team / away_team / game_id: Identity copied onto the result.

    Returns:
        The pair with the highest profit fraction, or None when no pair sums
        below 1.0.  Ties keep the earliest pair in input order (home quotes
        in the outer loop, away quotes in the inner loop).

    Raises:
        InvalidOddsError: A quote carries a malformed price.
    """
    home_quotes = [q for q in quotes if q.market == market and q.side == HOME]
    away_quotes = [q for q in quotes if q.market == market and q.side == AWAY]
    if not home_quotes or not away_quotes:
        return None

    away_implied = [implied_probability(q.price) for q in away_quotes]

    best: Optional[Tuple[float, Quote, float, Quote, float, float]] = None
    for home_q in home_quotes:
        p_home = implied_probability(home_q.price)
        for away_q, p_away in zip(away_quotes, away_implied):
            if market == SPREAD and not _lines_oppose(home_q, away_q):
                continue
            total = p_home + p_away
            if total >= 1.0:
                continue
            profit = 1.0 / total - 1.0
            # Strictly greater: an equal later pair never displaces an earlier one.
            if best is None or profit > best[0]:
                best = (profit, home_q, p_home, away_q, p_away, total)

    if best is None:
        return None

    profit, home_q, p_home, away_q, p_away, total = best
    logger.debug(
        "Arbitrage %s %s @ %s: %s %+g / %s %+g → %.2f%%",
        market, away_team, home_team,
        home_q.bookmaker, home_q.price, away_q.bookmaker, away_q.price, profit * 100.0,
    )
    return ArbitrageOpportunity(
        home_team=home_team,
        away_team=away_team,
        market=market,
        home_leg=_leg(home_q, home_team, p_home, total),
        away_leg=_leg(away_q, away_team, p_away, total),
        implied_sum=total,
        profit_fraction=profit,
        game_id=game_id,
    )


def find_game_arbitrage(
    record: GameOddsRecord,
) -> Tuple[Optional[ArbitrageOpportunity], Optional[ArbitrageOpportunity]]:
    """``(moneyline, spread)`` arbitrage for one game; either may be None."""
    identity = dict(home_team=record.home_team, away_team=record.away_team, game_id=record.game_id)
    return (
        find_arbitrage(record.quotes, MONEYLINE, **identity),
        find_arbitrage(record.quotes, SPREAD, **identity),
    )


def find_all_arbitrage(
    records: Sequence[GameOddsRecord],
) -> Tuple[List[ArbitrageOpportunity], List[ArbitrageOpportunity]]:
    """Unranked moneyline and spread opportunities across a slate, in game order."""
    moneyline: List[ArbitrageOpportunity] = []
    spread: List[ArbitrageOpportunity] = []
    for record in records:
        ml_opp, sp_opp = find_game_arbitrage(record)
        if ml_opp is not None:
            moneyline.append(ml_opp)
        if sp_opp is not None:
            spread.append(sp_opp)
    return moneyline, spread
