"""Engine configuration — every tunable of an evaluation pass in one place.

:class:`EngineConfig` is a frozen dataclass.  Named constructors return
pre-populated instances per sport; :meth:`EngineConfig.from_env` layers
environment overrides on top.  Override a single option with
:func:`dataclasses.replace`::

    from dataclasses import replace
    from cfb_edge.core.engine_config import EngineConfig

    cfg = EngineConfig.college_football()
    strict = replace(cfg, ambiguous_policy="reject", min_edge=0.02)

Recognised environment variables (all optional):

    EDGE_SIGMA                 margin SD in points
    EDGE_TOP_N                 rows kept per ranked list
    EDGE_MIN_EDGE              edge floor for bet lists (e.g. 0.02)
    EDGE_AMBIGUOUS_POLICY      "first" or "reject"
    EDGE_ALLOW_SWAPPED_SIDES   "1" / "true" to accept reversed home/away
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Final, Mapping, Optional

from cfb_edge.core.errors import InvalidInputError
from cfb_edge.core.spread_model import DEFAULT_SIGMA

SPORT_ID_NCAAF: Final[str] = "ncaaf"
SPORT_ID_NCAAB: Final[str] = "ncaab"

#: First prediction record wins when several match one odds record.
POLICY_FIRST: Final[str] = "first"
#: Ambiguous matches attach no prediction (the game becomes arbitrage-only).
POLICY_REJECT: Final[str] = "reject"
AMBIGUOUS_POLICIES: Final[frozenset[str]] = frozenset({POLICY_FIRST, POLICY_REJECT})

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class EngineConfig:
    """Immutable option bundle for one evaluation pass.

    Attributes:
        sigma: Standard deviation of the final margin, in points.  Fixed,
            not re-estimated from data.  Must be positive.
        top_n: Rows kept in each ranked output list.  ``0`` keeps none.
        min_edge: Optional floor on ``edge`` (model − implied) applied to
            the bet lists before truncation.  ``None`` disables it.
        ambiguous_policy: :data:`POLICY_FIRST` (attach the first matching
            prediction in input order) or :data:`POLICY_REJECT`.
        allow_swapped_sides: Accept a prediction that lists the two teams
            the other way round (neutral-site games) and re-orient it.
        team_aliases: Extra alias table merged over the matcher defaults,
            e.g. ``{"Ole Miss": "Mississippi"}``.
        sport_id: Short sport identifier used in logs and cache names.
        odds_api_sport_key: Sport key passed to The Odds API.
    """

    sigma: float = DEFAULT_SIGMA
    top_n: int = 30
    min_edge: Optional[float] = None
    ambiguous_policy: str = POLICY_FIRST
    allow_swapped_sides: bool = False
    team_aliases: Mapping[str, str] = field(default_factory=dict)
    sport_id: str = SPORT_ID_NCAAF
    odds_api_sport_key: str = "americanfootball_ncaaf"

    def __post_init__(self) -> None:
        if not math.isfinite(self.sigma) or self.sigma <= 0.0:
            raise InvalidInputError(f"sigma must be positive, got {self.sigma!r}.")
        if self.top_n < 0:
            raise InvalidInputError(f"top_n must be ≥ 0, got {self.top_n!r}.")
        if self.min_edge is not None and not math.isfinite(self.min_edge):
            raise InvalidInputError(f"min_edge must be finite, got {self.min_edge!r}.")
        if self.ambiguous_policy not in AMBIGUOUS_POLICIES:
            raise InvalidInputError(
                f"ambiguous_policy must be one of {sorted(AMBIGUOUS_POLICIES)}, "
                f"got {self.ambiguous_policy!r}."
            )
        # Freeze the alias table so a shared config cannot be mutated mid-pass.
        object.__setattr__(self, "team_aliases", MappingProxyType(dict(self.team_aliases)))

    # ------------------------------------------------------------------ #
    #  Named constructors                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def college_football(cls) -> EngineConfig:
        """FBS football: σ = 12.0 points."""
        return cls(
            sigma=12.0,
            sport_id=SPORT_ID_NCAAF,
            odds_api_sport_key="americanfootball_ncaaf",
        )

    @classmethod
    def college_basketball(cls) -> EngineConfig:
        """D1 basketball: σ = 11.0 points (historical flat spread SD)."""
        return cls(
            sigma=11.0,
            sport_id=SPORT_ID_NCAAB,
            odds_api_sport_key="basketball_ncaab",
        )

    @classmethod
    def for_sport(cls, sport_id: str) -> EngineConfig:
        if sport_id == SPORT_ID_NCAAB:
            return cls.college_basketball()
        if sport_id == SPORT_ID_NCAAF:
            return cls.college_football()
        raise ValueError(f"Unknown sport {sport_id!r}; expected 'ncaaf' or 'ncaab'.")

    @classmethod
    def from_env(cls, base: Optional[EngineConfig] = None) -> EngineConfig:
        """Apply ``EDGE_*`` environment overrides to ``base`` (default config)."""
        cfg = base if base is not None else cls()
        overrides: dict = {}

        sigma = os.getenv("EDGE_SIGMA")
        if sigma:
            overrides["sigma"] = float(sigma)
        top_n = os.getenv("EDGE_TOP_N")
        if top_n:
            overrides["top_n"] = int(top_n)
        min_edge = os.getenv("EDGE_MIN_EDGE")
        if min_edge:
            overrides["min_edge"] = float(min_edge)
        policy = os.getenv("EDGE_AMBIGUOUS_POLICY")
        if policy:
            overrides["ambiguous_policy"] = policy.strip().lower()
        swapped = os.getenv("EDGE_ALLOW_SWAPPED_SIDES")
        if swapped:
            overrides["allow_swapped_sides"] = swapped.strip().lower() in _TRUTHY

        return replace(cfg, **overrides) if overrides else cfg
