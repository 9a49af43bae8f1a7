"""
Single-sided EV evaluation for matched games.

Every quote in the market produces exactly one :class:`BetRecommendation`,
including negative-EV ones: filtering to positive EV is a presentation
concern (see :func:`cfb_edge.services.ranking.positive_ev`).

Moneyline: model probability is the prediction's home win probability (or
its complement for the away side).

Spread: model probability is the cover probability of *that bookmaker's*
posted line.  Books routinely hang -6.5 and -7 on the same game; each quote
is priced against its own number, never a consensus line.
"""

import logging
import math
from typing import List, Optional

from cfb_edge.core.errors import InvalidInputError
from cfb_edge.core.odds_math import expected_value, implied_probability
from cfb_edge.core.records import (
    AWAY,
    HOME,
    MONEYLINE,
    SPREAD,
    BetRecommendation,
    MatchedGame,
    Quote,
)
from cfb_edge.core.spread_model import DEFAULT_SIGMA, away_cover_probability, cover_probability

logger = logging.getLogger(__name__)


def _require_matched_game(matched_game: object) -> None:
    if not isinstance(matched_game, MatchedGame):
        raise TypeError(
            f"Expected a MatchedGame, got {type(matched_game).__name__}. "
            "Run TeamMatcher.match_games before evaluating."
        )


def _side_team(matched_game: MatchedGame, side: str) -> str:
    if side == HOME:
        return matched_game.home_team
    if side == AWAY:
        return matched_game.away_team
    raise InvalidInputError(f"Unknown side {side!r}; expected 'home' or 'away'.")


def _recommendation(
    matched_game: MatchedGame,
    quote: Quote,
    model_prob: float,
    model_margin: Optional[float] = None,
) -> BetRecommendation:
    implied = implied_probability(quote.price)
    return BetRecommendation(
        home_team=matched_game.home_team,
        away_team=matched_game.away_team,
        market=quote.market,
        side=quote.side,
        team=_side_team(matched_game, quote.side),
        bookmaker=quote.bookmaker,
        price=quote.price,
        implied_prob=implied,
        model_prob=model_prob,
        edge=model_prob - implied,
        expected_value=expected_value(model_prob, quote.price),
        point=quote.point,
        model_margin=model_margin,
        game_id=matched_game.odds.game_id,
    )


def evaluate_moneyline(
    matched_game: MatchedGame,
    model_home_prob: Optional[float] = None,
) -> List[BetRecommendation]:
    """
    One recommendation per moneyline quote (bookmaker × side).

    Args:
        matched_game: Output of :meth:`TeamMatcher.match_games`.
        model_home_prob: Home win probability.  Defaults to the attached
            prediction's value.

    Returns:
        Recommendations in quote order; ``[]`` for arbitrage-only games.

    Raises:
        TypeError: ``matched_game`` is not a :class:`MatchedGame`.
        InvalidInputError: Probability outside (0, 1).
        InvalidOddsError: A quote carries a malformed price.
    """
    _require_matched_game(matched_game)
    if not matched_game.has_model:
        return []

    p_home = matched_game.prediction.home_win_prob if model_home_prob is None else model_home_prob
    if not math.isfinite(p_home) or not 0.0 < p_home < 1.0:
        raise InvalidInputError(f"Model home probability {p_home!r} must lie in (0, 1).")

    recs = []
    for quote in matched_game.odds.quotes_for(MONEYLINE):
        model_prob = p_home if quote.side == HOME else 1.0 - p_home
        recs.append(_recommendation(matched_game, quote, model_prob))
    return recs


def evaluate_spread(
    matched_game: MatchedGame,
    predicted_margin: Optional[float] = None,
    sigma: float = DEFAULT_SIGMA,
) -> List[BetRecommendation]:
    """
    One recommendation per spread quote, each priced at its own line.

    Home quotes use ``Φ((margin + line) / σ)``; away quotes use the
    complement at the negated line (see :mod:`cfb_edge.core.spread_model`).

    Raises:
        TypeError: ``matched_game`` is not a :class:`MatchedGame`.
        InvalidInputError: Non-finite margin, ``sigma <= 0``, or a spread
            quote without a line.
        InvalidOddsError: A quote carries a malformed price.
    """
    _require_matched_game(matched_game)
    if not matched_game.has_model:
        return []

    margin = matched_game.prediction.predicted_margin if predicted_margin is None else predicted_margin

    recs = []
    for quote in matched_game.odds.quotes_for(SPREAD):
        if quote.point is None:
            raise InvalidInputError(
                f"Spread quote from {quote.bookmaker!r} ({quote.side}) has no line."
            )
        if quote.side == HOME:
            cover = cover_probability(margin, quote.point, sigma)
        elif quote.side == AWAY:
            cover = away_cover_probability(margin, quote.point, sigma)
        else:
            raise InvalidInputError(f"Unknown side {quote.side!r} on spread quote.")
        recs.append(_recommendation(matched_game, quote, cover, model_margin=margin))
    return recs
