"""
Tests for EngineConfig defaults, validation and environment overrides.
Run with: pytest tests/test_engine_config.py -v
"""

from dataclasses import FrozenInstanceError, replace
from unittest.mock import patch

import pytest

from cfb_edge.core.engine_config import EngineConfig
from cfb_edge.core.errors import InvalidInputError


class TestDefaults:
    def test_documented_defaults(self):
        cfg = EngineConfig()
        assert cfg.sigma == 12.0
        assert cfg.top_n == 30
        assert cfg.min_edge is None
        assert cfg.ambiguous_policy == "first"
        assert cfg.allow_swapped_sides is False
        assert dict(cfg.team_aliases) == {}

    def test_frozen(self):
        cfg = EngineConfig()
        with pytest.raises(FrozenInstanceError):
            cfg.sigma = 10.0

    def test_aliases_read_only(self):
        aliases = {"The U": "Miami FL"}
        cfg = EngineConfig(team_aliases=aliases)
        aliases["Other"] = "Team"
        assert "Other" not in cfg.team_aliases
        with pytest.raises(TypeError):
            cfg.team_aliases["x"] = "y"

    def test_replace_revalidates(self):
        with pytest.raises(InvalidInputError):
            replace(EngineConfig(), sigma=-1.0)


class TestSports:
    def test_football(self):
        cfg = EngineConfig.for_sport("ncaaf")
        assert cfg.sigma == 12.0
        assert cfg.odds_api_sport_key == "americanfootball_ncaaf"

    def test_basketball(self):
        cfg = EngineConfig.for_sport("ncaab")
        assert cfg.sigma == 11.0
        assert cfg.odds_api_sport_key == "basketball_ncaab"

    def test_unknown_sport(self):
        with pytest.raises(ValueError):
            EngineConfig.for_sport("nfl")


class TestValidation:
    @pytest.mark.parametrize("kwargs", [
        {"sigma": 0.0},
        {"sigma": float("nan")},
        {"top_n": -1},
        {"min_edge": float("inf")},
        {"ambiguous_policy": "random"},
    ])
    def test_rejected(self, kwargs):
        with pytest.raises(InvalidInputError):
            EngineConfig(**kwargs)

    def test_zero_top_n_allowed(self):
        assert EngineConfig(top_n=0).top_n == 0


class TestFromEnv:
    def test_no_env_returns_base(self):
        base = EngineConfig.college_basketball()
        with patch.dict("os.environ", {}, clear=True):
            assert EngineConfig.from_env(base) is base

    def test_overrides(self):
        env = {
            "EDGE_SIGMA": "13.5",
            "EDGE_TOP_N": "10",
            "EDGE_MIN_EDGE": "0.02",
            "EDGE_AMBIGUOUS_POLICY": "Reject",
            "EDGE_ALLOW_SWAPPED_SIDES": "true",
        }
        with patch.dict("os.environ", env, clear=True):
            cfg = EngineConfig.from_env()
        assert cfg.sigma == 13.5
        assert cfg.top_n == 10
        assert cfg.min_edge == pytest.approx(0.02)
        assert cfg.ambiguous_policy == "reject"
        assert cfg.allow_swapped_sides is True

    def test_bad_env_value_rejected(self):
        with patch.dict("os.environ", {"EDGE_SIGMA": "-2"}, clear=True):
            with pytest.raises(InvalidInputError):
                EngineConfig.from_env()
