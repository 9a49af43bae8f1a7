"""
Tests for JSON caches, CSV output and console formatting.
Run with: pytest tests/test_export.py -v
"""

import csv
from datetime import datetime, timezone

import pytest

from cfb_edge.core.records import (
    AWAY,
    HOME,
    MONEYLINE,
    SPREAD,
    ArbitrageLeg,
    ArbitrageOpportunity,
    BetRecommendation,
    GameOddsRecord,
    ModelPredictionRecord,
    Quote,
)
from cfb_edge.services.export import (
    ARB_COLUMNS,
    BET_COLUMNS,
    format_arbitrage,
    format_bet,
    load_bets_csv,
    load_odds_cache,
    load_predictions_cache,
    save_odds_cache,
    save_predictions_cache,
    write_arbitrage_csv,
    write_bets_csv,
)

BET = BetRecommendation(
    home_team="Ohio State", away_team="Michigan", market=SPREAD, side=AWAY, team="Michigan",
    bookmaker="fanduel", price=105, implied_prob=0.48780, model_prob=0.55123,
    edge=0.06343, expected_value=0.13002, point=3.5, model_margin=2.0, game_id="g1",
)

ARB = ArbitrageOpportunity(
    home_team="Alabama", away_team="Auburn", market=MONEYLINE,
    home_leg=ArbitrageLeg("betmgm", HOME, "Alabama", -120, 0.54545, 0.55102),
    away_leg=ArbitrageLeg("caesars", AWAY, "Auburn", 125, 0.44444, 0.44898),
    implied_sum=0.98990, profit_fraction=0.010204, game_id="g2",
)


class TestCache:
    def test_odds_cache(self, tmp_path):
        records = [
            GameOddsRecord(
                "Ohio State", "Michigan",
                commence_time=datetime(2025, 11, 29, 17, 0, tzinfo=timezone.utc),
                quotes=(
                    Quote("draftkings", MONEYLINE, HOME, -200),
                    Quote("draftkings", SPREAD, AWAY, -110, point=4.5),
                ),
                game_id="g1",
            ),
            GameOddsRecord("Alabama", "Auburn"),
        ]
        path = tmp_path / "cache" / "odds.json"
        save_odds_cache(records, path)
        assert load_odds_cache(path) == records

    def test_predictions_cache(self, tmp_path):
        records = [ModelPredictionRecord("Ohio St", "Michigan", 4.0, 0.689, "prediction_tracker")]
        path = tmp_path / "preds.json"
        save_predictions_cache(records, path)
        assert load_predictions_cache(path) == records


class TestCSV:
    def test_bets(self, tmp_path):
        path = tmp_path / "bets.csv"
        assert write_bets_csv([BET], path) == 1
        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0].keys()) == BET_COLUMNS
        assert rows[0]["team"] == "Michigan"
        assert rows[0]["point"] == "3.5"
        assert rows[0]["edge_pct"] == "6.34"
        assert rows[0]["ev_pct"] == "13.0"

    def test_arbitrage(self, tmp_path):
        path = tmp_path / "arb.csv"
        write_arbitrage_csv([ARB], path)
        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0].keys()) == ARB_COLUMNS
        assert rows[0]["profit_pct"] == "1.02"
        assert rows[0]["home_bookmaker"] == "betmgm"
        assert rows[0]["home_point"] == ""

    def test_empty_writes_header(self, tmp_path):
        path = tmp_path / "empty.csv"
        assert write_bets_csv([], path) == 0
        with open(path) as f:
            assert f.readline().strip().split(",") == BET_COLUMNS

    def test_bets_read_back_for_grading(self, tmp_path):
        path = tmp_path / "bets.csv"
        ml = BetRecommendation(
            home_team="Alabama", away_team="Auburn", market=MONEYLINE, side=HOME, team="Alabama",
            bookmaker="betmgm", price=-120, implied_prob=0.54545, model_prob=0.6,
            edge=0.05455, expected_value=0.1,
        )
        write_bets_csv([BET, ml], path)
        loaded = load_bets_csv(path)
        assert [b.team for b in loaded] == ["Michigan", "Alabama"]
        assert loaded[0].market == SPREAD
        assert loaded[0].side == AWAY
        assert loaded[0].point == 3.5
        assert loaded[0].price == 105
        assert loaded[0].edge == pytest.approx(0.0634)
        assert loaded[0].model_margin == 2.0
        assert loaded[1].point is None
        assert loaded[1].model_margin is None


class TestFormat:
    def test_bet(self):
        line = format_bet(BET)
        assert "Michigan +3.5" in line
        assert "+105 @ fanduel" in line
        assert "EV +13.0%" in line

    def test_moneyline_bet_has_no_line(self):
        bet = BetRecommendation(
            home_team="A", away_team="B", market=MONEYLINE, side=HOME, team="A",
            bookmaker="dk", price=-150, implied_prob=0.6, model_prob=0.65, edge=0.05, expected_value=0.083,
        )
        assert "A (-150 @ dk)" in format_bet(bet)

    def test_arbitrage(self):
        line = format_arbitrage(ARB)
        assert "Auburn @ Alabama" in line
        assert "profit 1.02%" in line
        assert "-120 @ betmgm" in line
        assert "+125 @ caesars" in line
