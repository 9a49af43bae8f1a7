"""
Evaluation engine — one synchronous pass over an already-fetched slate.

Pipeline
--------
1. Validate prediction records; malformed ones are skipped with an
   ``InvalidInputError`` diagnostic.
2. Validate every quote; a corrupt quote is dropped with an
   ``InvalidOddsError`` / ``InvalidInputError`` diagnostic and the rest of
   its game is still evaluated.
3. Match odds records to predictions (:class:`TeamMatcher`).
4. EV for every matched game (moneyline + spread).
5. Arbitrage for every game, matched or not.
6. Rank and truncate each list.

The engine holds no state between passes and performs no I/O; retrieval,
caching and rendering live in the outer adapters.  Identical inputs give
identical ordered outputs.
"""

import logging
import math
from dataclasses import replace
from numbers import Real
from typing import Iterable, List, Optional

from cfb_edge.core.engine_config import EngineConfig
from cfb_edge.core.errors import AmbiguousMatchWarning, EdgeEngineError, InvalidInputError
from cfb_edge.core.odds_math import implied_probability
from cfb_edge.core.records import (
    MARKETS,
    SIDES,
    SPREAD,
    Diagnostic,
    EvaluationResult,
    GameOddsRecord,
    ModelPredictionRecord,
    Quote,
)
from cfb_edge.services.arbitrage import find_all_arbitrage
from cfb_edge.services.ev_evaluator import evaluate_moneyline, evaluate_spread
from cfb_edge.services.ranking import rank_arbitrage, rank_bets
from cfb_edge.services.team_mapping import TeamMatcher

logger = logging.getLogger(__name__)

#: Diagnostic kind for odds records with no matching prediction.
UNMATCHED_GAME = "UnmatchedGame"


def _is_finite_number(value: object) -> bool:
    # bool is a Real subclass; True/False are never lines or probabilities.
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def validate_quote(quote: Quote) -> None:
    """Raise if ``quote`` cannot be priced.

    Raises:
        InvalidOddsError: Malformed American odds.
        InvalidInputError: Unknown market/side, or a spread quote whose
            line is missing, non-numeric or not finite.
    """
    if quote.market not in MARKETS:
        raise InvalidInputError(f"Unknown market {quote.market!r}.")
    if quote.side not in SIDES:
        raise InvalidInputError(f"Unknown side {quote.side!r}.")
    implied_probability(quote.price)
    if quote.market == SPREAD:
        if not _is_finite_number(quote.point):
            raise InvalidInputError(f"Spread quote has invalid line {quote.point!r}.")


def validate_prediction(prediction: ModelPredictionRecord) -> None:
    """Raise :class:`InvalidInputError` if ``prediction`` is unusable."""
    if not prediction.home_team or not prediction.away_team:
        raise InvalidInputError("Prediction record is missing a team name.")
    p = prediction.home_win_prob
    if not _is_finite_number(p) or not 0.0 < p < 1.0:
        raise InvalidInputError(f"Home win probability {p!r} must lie in (0, 1).")
    if not _is_finite_number(prediction.predicted_margin):
        raise InvalidInputError(
            f"Predicted margin {prediction.predicted_margin!r} is not finite."
        )


class EvaluationEngine:
    """Probability & opportunity engine for one batch of records.

    Build a fresh instance per pass; the only state it carries is its
    configuration and the matcher derived from it.
    """

    def __init__(self, config: Optional[EngineConfig] = None, matcher: Optional[TeamMatcher] = None):
        self.config = config or EngineConfig()
        self.matcher = matcher or TeamMatcher(self.config.team_aliases)

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def _valid_predictions(
        self,
        prediction_records: Iterable[ModelPredictionRecord],
        diagnostics: List[Diagnostic],
    ) -> List[ModelPredictionRecord]:
        valid = []
        for prediction in prediction_records:
            try:
                validate_prediction(prediction)
            except EdgeEngineError as exc:
                logger.debug(
                    "Skipping prediction %s @ %s: %s",
                    prediction.away_team, prediction.home_team, exc,
                )
                diagnostics.append(
                    Diagnostic(
                        kind=type(exc).__name__,
                        message=f"prediction skipped: {exc}",
                        home_team=prediction.home_team,
                        away_team=prediction.away_team,
                    )
                )
                continue
            valid.append(prediction)
        return valid

    def _clean_game(self, record: GameOddsRecord, diagnostics: List[Diagnostic]) -> GameOddsRecord:
        kept = []
        for quote in record.quotes:
            try:
                validate_quote(quote)
            except EdgeEngineError as exc:
                logger.debug(
                    "Dropping %s %s quote from %s for %s @ %s: %s",
                    quote.market, quote.side, quote.bookmaker,
                    record.away_team, record.home_team, exc,
                )
                diagnostics.append(
                    Diagnostic(
                        kind=type(exc).__name__,
                        message=f"{quote.bookmaker} {quote.market}/{quote.side} quote dropped: {exc}",
                        home_team=record.home_team,
                        away_team=record.away_team,
                    )
                )
                continue
            kept.append(quote)
        if len(kept) == len(record.quotes):
            return record
        return replace(record, quotes=tuple(kept))

    # -----------------------------------------------------------------------
    # Pass
    # -----------------------------------------------------------------------

    def evaluate(
        self,
        odds_records: Iterable[GameOddsRecord],
        prediction_records: Iterable[ModelPredictionRecord],
    ) -> EvaluationResult:
        """Run one evaluation pass.

        Returns:
            :class:`EvaluationResult` with ranked bet and arbitrage lists
            (``config.top_n`` each, bets filtered by ``config.min_edge``)
            and the pass diagnostics.
        """
        cfg = self.config
        diagnostics: List[Diagnostic] = []

        predictions = self._valid_predictions(prediction_records, diagnostics)
        games = [self._clean_game(record, diagnostics) for record in odds_records]

        matched = self.matcher.match_games(
            games,
            predictions,
            ambiguous_policy=cfg.ambiguous_policy,
            allow_swapped_sides=cfg.allow_swapped_sides,
        )

        moneyline_bets = []
        spread_bets = []
        for game in matched:
            if game.is_ambiguous:
                diagnostics.append(
                    Diagnostic(
                        kind=AmbiguousMatchWarning.__name__,
                        message=(
                            f"{game.candidates} prediction records matched; "
                            f"policy={cfg.ambiguous_policy}"
                        ),
                        home_team=game.home_team,
                        away_team=game.away_team,
                    )
                )
            if not game.has_model:
                if not game.is_ambiguous:
                    diagnostics.append(
                        Diagnostic(
                            kind=UNMATCHED_GAME,
                            message="no prediction record; arbitrage only",
                            home_team=game.home_team,
                            away_team=game.away_team,
                        )
                    )
                continue
            moneyline_bets.extend(evaluate_moneyline(game))
            spread_bets.extend(evaluate_spread(game, sigma=cfg.sigma))

        moneyline_arbs, spread_arbs = find_all_arbitrage(games)

        result = EvaluationResult(
            moneyline_bets=tuple(rank_bets(moneyline_bets, cfg.top_n, cfg.min_edge)),
            spread_bets=tuple(rank_bets(spread_bets, cfg.top_n, cfg.min_edge)),
            moneyline_arbitrage=tuple(rank_arbitrage(moneyline_arbs, cfg.top_n)),
            spread_arbitrage=tuple(rank_arbitrage(spread_arbs, cfg.top_n)),
            diagnostics=tuple(diagnostics),
            matched_games=tuple(matched),
        )

        logger.info(
            "Evaluated %d games (%d with model, %d predictions): "
            "%d/%d moneyline/spread bets, %d/%d arbs, %d diagnostics",
            len(games), sum(1 for g in matched if g.has_model), len(predictions),
            len(moneyline_bets), len(spread_bets),
            len(moneyline_arbs), len(spread_arbs), len(diagnostics),
        )
        return result


def evaluate(
    odds_records: Iterable[GameOddsRecord],
    prediction_records: Iterable[ModelPredictionRecord],
    config: Optional[EngineConfig] = None,
) -> EvaluationResult:
    """Build a fresh :class:`EvaluationEngine` and run one pass."""
    return EvaluationEngine(config).evaluate(odds_records, prediction_records)
