"""Fundamental odds mathematics — the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services.  The
moneyline and spread evaluators and the arbitrage detector all price quotes
through the same two functions, :func:`implied_probability` and
:func:`payout_multiplier`.

Design decisions
----------------
* All functions accept American odds because The Odds API is queried with
  ``oddsFormat=american``.  Decimal or fractional odds must be converted by
  the caller before passing in.
* Implied probabilities are **vig-inclusive**.  The engine deliberately does
  not de-vig: the two sides of a real market sum to more than 1.0, and only
  a sum strictly below 1.0 (usually across two books) is an arbitrage.
* Validation raises :class:`~cfb_edge.core.errors.InvalidOddsError` so the
  engine can skip a single corrupt quote and keep evaluating the slate.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Final

from cfb_edge.core.errors import InvalidInputError, InvalidOddsError

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: American-odds magnitude floor.  Values inside (-100, 100) are not a valid
#: American encoding; even money is +100 / -100.
_MIN_ODDS_MAGNITUDE: Final[int] = 100


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _checked_odds(american: object) -> float:
    """Return ``american`` as a float or raise :class:`InvalidOddsError`."""
    # bool is a Real subclass; True/False are never prices.
    if isinstance(american, bool) or not isinstance(american, Real):
        raise InvalidOddsError(
            f"Invalid American odds {american!r}: expected a signed number."
        )
    value = float(american)
    if not math.isfinite(value):
        raise InvalidOddsError(f"Invalid American odds {american!r}: not finite.")
    if abs(value) < _MIN_ODDS_MAGNITUDE:
        raise InvalidOddsError(
            f"Invalid American odds {american!r}: magnitude must be ≥ 100. "
            "Check upstream odds parsing for data errors."
        )
    return value


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def implied_probability(american: int | float) -> float:
    """Raw implied probability from American odds (vig-inclusive).

    Args:
        american: American odds.  Positive = underdog (profit per 100
            staked), negative = favourite (stake required to win 100).

    Returns:
        Break-even win probability in ``(0, 1)``.

    Raises:
        InvalidOddsError: For odds in ``(-100, 100)``, zero, NaN/inf or a
            non-numeric value.

    Examples::

        implied_probability(+150) → 0.4000
        implied_probability(-150) → 0.6000
        implied_probability(-110) → 0.5238   (52.38% implied)
    """
    value = _checked_odds(american)
    if value > 0:
        return 100.0 / (value + 100.0)
    return -value / (-value + 100.0)


def payout_multiplier(american: int | float) -> float:
    """Profit per unit stake on a winning bet.

    ``+150 → 1.5`` (risk 1 to win 1.5), ``-200 → 0.5`` (risk 1 to win 0.5).

    Raises:
        InvalidOddsError: Same contract as :func:`implied_probability`.
    """
    value = _checked_odds(american)
    if value > 0:
        return value / 100.0
    return 100.0 / -value


def american_to_decimal(american: int | float) -> float:
    """Decimal (European) odds: total return per unit staked, stake included."""
    return payout_multiplier(american) + 1.0


def fair_opposite(american: int | float) -> float:
    """No-vig price for the other side of a two-way market.

    For any valid American price the fair opposite is its negation
    (``+150`` ↔ ``-150``, ``+100`` ↔ ``-100``), so that
    ``implied_probability(o) + implied_probability(fair_opposite(o)) == 1``.
    Used to build no-vig fixtures; real quotes carry vig and sum above 1.
    """
    return -_checked_odds(american)


def implied_sum(price_a: int | float, price_b: int | float) -> float:
    """Combined implied probability of two opposite quotes (the book sum).

    Above 1.0 is the bookmaker margin; strictly below 1.0 is an arbitrage.
    """
    return implied_probability(price_a) + implied_probability(price_b)


# ---------------------------------------------------------------------------
# Expected value
# ---------------------------------------------------------------------------


def expected_value(model_prob: float, american: int | float) -> float:
    """Expected profit per unit stake under the model's win probability.

    ``EV = p × payout_multiplier(odds) − (1 − p)``

    Examples::

        expected_value(0.60, +150) → +0.50
        expected_value(0.40, -150) → -0.333

    Raises:
        InvalidInputError: If ``model_prob`` is not a finite value in [0, 1].
        InvalidOddsError: If ``american`` is not a valid price.
    """
    if not math.isfinite(model_prob) or not 0.0 <= model_prob <= 1.0:
        raise InvalidInputError(
            f"Model probability {model_prob!r} must be a finite value in [0, 1]."
        )
    return model_prob * payout_multiplier(american) - (1.0 - model_prob)
