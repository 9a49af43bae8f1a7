"""Value records that flow through one evaluation pass.

Every record is a frozen, slotted dataclass: the retrieval adapters build
them, the engine reads them, and nothing mutates them afterwards.  No record
outlives the pass that produced it.

Data flow::

    GameOddsRecord ─┐
                    ├─ TeamMatcher.match_games ─→ MatchedGame
    ModelPredictionRecord ┘                          │
                                   ┌─────────────────┴────────────────┐
                          evaluate_moneyline / evaluate_spread   find_arbitrage
                                   │                                  │
                           BetRecommendation              ArbitrageOpportunity
                                   └──────────── ranking ─────────────┘
                                                   │
                                            EvaluationResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Optional

# ---------------------------------------------------------------------------
# Market / side identifiers
# ---------------------------------------------------------------------------

MONEYLINE: Final[str] = "moneyline"
SPREAD: Final[str] = "spread"
MARKETS: Final[tuple[str, ...]] = (MONEYLINE, SPREAD)

HOME: Final[str] = "home"
AWAY: Final[str] = "away"
SIDES: Final[tuple[str, ...]] = (HOME, AWAY)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Quote:
    """One bookmaker's price on one side of one market.

    Attributes:
        bookmaker: Bookmaker key as reported by the odds source
            (``"draftkings"``, ``"fanduel"``...).
        market: :data:`MONEYLINE` or :data:`SPREAD`.
        side: :data:`HOME` or :data:`AWAY`.
        price: American odds (signed, |price| ≥ 100).  Not validated here;
            the engine reports malformed prices as diagnostics.
        point: Spread line from this side's perspective (favourite
            negative).  ``None`` for moneyline quotes.
    """

    bookmaker: str
    market: str
    side: str
    price: int | float
    point: Optional[float] = None


@dataclass(frozen=True, slots=True)
class GameOddsRecord:
    """One game as seen by the odds source."""

    home_team: str
    away_team: str
    commence_time: Optional[datetime] = None
    quotes: tuple[Quote, ...] = ()
    game_id: str = ""

    def quotes_for(self, market: str) -> list[Quote]:
        """Quotes for ``market`` in input order."""
        return [q for q in self.quotes if q.market == market]


@dataclass(frozen=True, slots=True)
class ModelPredictionRecord:
    """One game as seen by the prediction source.

    Team names use the prediction source's spelling, which routinely differs
    from the odds source ("Ohio St" vs "Ohio State Buckeyes").

    Attributes:
        predicted_margin: Home-perspective margin; positive = home favoured.
        home_win_prob: Model probability that the home team wins, in (0, 1).
        source: Free-text label of the model ("prediction_tracker").
    """

    home_team: str
    away_team: str
    predicted_margin: float
    home_win_prob: float
    source: str = ""


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MatchedGame:
    """An odds record joined to at most one prediction record.

    ``prediction`` is ``None`` for arbitrage-only games.  ``candidates``
    counts how many prediction records passed the matcher; more than one
    means the match was ambiguous.  ``sides_swapped`` is set when the
    prediction listed home/away the other way round and was re-oriented.
    """

    odds: GameOddsRecord
    prediction: Optional[ModelPredictionRecord] = None
    candidates: int = 0
    sides_swapped: bool = False

    @property
    def has_model(self) -> bool:
        return self.prediction is not None

    @property
    def is_ambiguous(self) -> bool:
        return self.candidates > 1

    @property
    def home_team(self) -> str:
        return self.odds.home_team

    @property
    def away_team(self) -> str:
        return self.odds.away_team


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BetRecommendation:
    """One candidate single-sided wager, positive or negative EV."""

    home_team: str
    away_team: str
    market: str
    side: str
    team: str
    bookmaker: str
    price: int | float
    implied_prob: float
    model_prob: float
    edge: float
    expected_value: float
    point: Optional[float] = None
    model_margin: Optional[float] = None
    game_id: str = ""

    @property
    def is_positive_ev(self) -> bool:
        return self.expected_value > 0.0


@dataclass(frozen=True, slots=True)
class ArbitrageLeg:
    bookmaker: str
    side: str
    team: str
    price: int | float
    implied_prob: float
    stake_fraction: float
    point: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ArbitrageOpportunity:
    """A guaranteed-profit home/away pair across two quotes.

    ``profit_fraction`` is the return on total stake when both legs are
    staked per ``stake_fraction`` (which sum to 1).
    """

    home_team: str
    away_team: str
    market: str
    home_leg: ArbitrageLeg
    away_leg: ArbitrageLeg
    implied_sum: float
    profit_fraction: float
    game_id: str = ""

    @property
    def profit_pct(self) -> float:
        return self.profit_fraction * 100.0


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Non-fatal, informational note produced during a pass.

    ``kind`` is the name of the error class that caused it
    (``"InvalidOddsError"``, ``"AmbiguousMatchWarning"``...) or
    ``"UnmatchedGame"`` for odds records with no prediction.
    """

    kind: str
    message: str
    home_team: str = ""
    away_team: str = ""


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    moneyline_bets: tuple[BetRecommendation, ...] = ()
    spread_bets: tuple[BetRecommendation, ...] = ()
    moneyline_arbitrage: tuple[ArbitrageOpportunity, ...] = ()
    spread_arbitrage: tuple[ArbitrageOpportunity, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    matched_games: tuple[MatchedGame, ...] = field(default=(), repr=False)

    def diagnostics_of(self, kind: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]
