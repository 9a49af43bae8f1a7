"""Point-spread cover probability under a fixed-sigma normal margin model.

The final home margin is modelled as ``Normal(predicted_margin, sigma)``.
A home line ``L`` (negative when the home side lays points) covers when the
actual margin exceeds ``-L``::

    P(cover_home) = Φ((predicted_margin + L) / sigma)

The away side holding line ``L_away`` covers when the home margin is below
``L_away``, i.e. the complement of a home cover at ``-L_away``.  The model is
continuous, so pushes on whole-number lines are treated as zero-probability
events and the two sides of the same line sum to exactly 1.0.

``sigma`` is a configuration constant, not re-estimated from data.  12.0 is
the college-football residual SD; override it through
:class:`~cfb_edge.core.engine_config.EngineConfig`.
"""

from __future__ import annotations

import math
from typing import Final

from scipy.stats import norm

from cfb_edge.core.errors import InvalidInputError

#: Default margin standard deviation in points.
DEFAULT_SIGMA: Final[float] = 12.0


def _check_inputs(predicted_margin: float, line: float, sigma: float) -> None:
    if not math.isfinite(sigma) or sigma <= 0.0:
        raise InvalidInputError(f"sigma must be a positive finite number, got {sigma!r}.")
    if not math.isfinite(predicted_margin):
        raise InvalidInputError(f"Predicted margin {predicted_margin!r} is not finite.")
    if not math.isfinite(line):
        raise InvalidInputError(f"Spread line {line!r} is not finite.")


def cover_probability(
    predicted_margin: float,
    line: float,
    sigma: float = DEFAULT_SIGMA,
) -> float:
    """Probability that the home side covers ``line``.

    Args:
        predicted_margin: Model margin, home perspective (positive = home
            favoured by that many points).
        line: Home spread line as posted (``-7.0`` = home lays 7).
        sigma: Margin standard deviation in points.  Must be positive.

    Returns:
        Cover probability in ``(0, 1)``.

    Raises:
        InvalidInputError: If ``sigma <= 0`` or any input is NaN/infinite.

    Examples::

        cover_probability(0.0, 0.0)    → 0.5
        cover_probability(7.0, -7.0)   → 0.5   (model agrees with the line)
        cover_probability(10.0, -7.0)  → 0.599
    """
    _check_inputs(predicted_margin, line, sigma)
    return float(norm.cdf((predicted_margin + line) / sigma))


def away_cover_probability(
    predicted_margin: float,
    away_line: float,
    sigma: float = DEFAULT_SIGMA,
) -> float:
    """Probability that the away side covers its own posted ``away_line``.

    ``predicted_margin`` stays in home perspective; ``away_line`` is the
    away team's line (``+3.5`` = away receives 3.5).
    """
    _check_inputs(predicted_margin, away_line, sigma)
    return 1.0 - cover_probability(predicted_margin, -away_line, sigma)
