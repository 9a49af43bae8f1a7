"""
Tests for grading recommendations against final scores.
Run with: pytest tests/test_results.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from cfb_edge.core.records import AWAY, HOME, MONEYLINE, SPREAD, BetRecommendation
from cfb_edge.services.export import write_bets_csv
from cfb_edge.services.results import (
    LOSS,
    PUSH,
    WIN,
    CFBDClient,
    GameResult,
    grade_bet,
    grade_bets,
    parse_cfbd_game,
    parse_odds_api_score,
    summarize,
)
from scripts.grade_results import main as grade_main


def _bet(market=MONEYLINE, side=HOME, price=-110, point=None, home="Ohio State Buckeyes", away="Michigan Wolverines"):
    return BetRecommendation(
        home_team=home, away_team=away, market=market, side=side,
        team=home if side == HOME else away, bookmaker="draftkings", price=price,
        implied_prob=0.5, model_prob=0.55, edge=0.05, expected_value=0.05, point=point,
    )


RESULT = GameResult("Ohio State", "Michigan", 27, 20)


class TestGradeBet:
    def test_moneyline_win(self):
        graded = grade_bet(_bet(price=150), RESULT)
        assert graded.outcome == WIN
        assert graded.profit_units == pytest.approx(1.5)

    def test_moneyline_loss(self):
        graded = grade_bet(_bet(side=AWAY), RESULT)
        assert graded.outcome == LOSS
        assert graded.profit_units == -1.0

    def test_moneyline_tie_is_push(self):
        graded = grade_bet(_bet(), GameResult("Ohio State", "Michigan", 20, 20))
        assert graded.outcome == PUSH
        assert graded.profit_units == 0.0

    def test_home_favourite_covers(self):
        # Won by 7, laid 6.5
        assert grade_bet(_bet(SPREAD, HOME, point=-6.5), RESULT).outcome == WIN

    def test_home_favourite_fails_to_cover(self):
        assert grade_bet(_bet(SPREAD, HOME, point=-7.5), RESULT).outcome == LOSS

    def test_spread_push(self):
        assert grade_bet(_bet(SPREAD, HOME, point=-7.0), RESULT).outcome == PUSH
        assert grade_bet(_bet(SPREAD, AWAY, point=7.0), RESULT).outcome == PUSH

    def test_away_dog_covers(self):
        graded = grade_bet(_bet(SPREAD, AWAY, price=-110, point=7.5), RESULT)
        assert graded.outcome == WIN
        assert graded.profit_units == pytest.approx(100 / 110)

    def test_away_dog_fails(self):
        assert grade_bet(_bet(SPREAD, AWAY, point=3.5), RESULT).outcome == LOSS


class TestGradeBets:
    def test_matches_by_team_name(self):
        graded = grade_bets([_bet()], [GameResult("Alabama", "Auburn", 10, 3), RESULT])
        assert graded[0].outcome == WIN
        assert graded[0].result == RESULT

    def test_reversed_listing(self):
        graded = grade_bets([_bet(side=AWAY)], [GameResult("Michigan", "Ohio State", 20, 27)])
        assert graded[0].outcome == LOSS
        assert graded[0].result.home_team == "Ohio State"

    def test_missing_result_is_ungraded(self):
        graded = grade_bets([_bet()], [GameResult("Alabama", "Auburn", 10, 3)])
        assert graded[0].outcome is None
        assert graded[0].profit_units == 0.0


class TestSummarize:
    def test_record(self):
        graded = grade_bets(
            [
                _bet(price=150),
                _bet(side=AWAY),
                _bet(SPREAD, HOME, point=-7.0),
                _bet(home="Oregon", away="Washington"),
            ],
            [RESULT],
        )
        summary = summarize(graded)
        assert summary["count"] == 3
        assert summary["ungraded"] == 1
        assert (summary["wins"], summary["losses"], summary["pushes"]) == (1, 1, 1)
        assert summary["units"] == pytest.approx(0.5)
        assert summary["roi"] == pytest.approx(0.1667, abs=1e-4)

    def test_empty(self):
        summary = summarize([])
        assert summary["count"] == 0
        assert summary["roi"] == 0.0


class TestScoreParsing:
    def test_cfbd_camel_case(self):
        row = {"completed": True, "homeTeam": "Ohio State", "awayTeam": "Michigan",
               "homePoints": 27, "awayPoints": 20}
        assert parse_cfbd_game(row) == RESULT

    def test_cfbd_snake_case(self):
        row = {"home_team": "Ohio State", "away_team": "Michigan", "home_points": 27, "away_points": 20}
        assert parse_cfbd_game(row) == RESULT

    def test_cfbd_incomplete(self):
        row = {"completed": False, "homeTeam": "A", "awayTeam": "B", "homePoints": 7, "awayPoints": 0}
        assert parse_cfbd_game(row) is None
        assert parse_cfbd_game({"homeTeam": "A", "awayTeam": "B"}) is None

    def test_odds_api_scores(self):
        data = {
            "completed": True, "home_team": "Duke", "away_team": "UNC",
            "scores": [{"name": "UNC", "score": "70"}, {"name": "Duke", "score": "83"}],
        }
        assert parse_odds_api_score(data) == GameResult("Duke", "UNC", 83, 70)
        assert parse_odds_api_score(dict(data, completed=False)) is None


class TestCFBDClient:
    def test_missing_key(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError):
                CFBDClient()

    def test_get_results(self):
        response = MagicMock()
        response.json.return_value = [
            {"completed": True, "homeTeam": "Ohio State", "awayTeam": "Michigan", "homePoints": 27, "awayPoints": 20},
            {"completed": False, "homeTeam": "A", "awayTeam": "B"},
        ]
        with patch("cfb_edge.services.results.requests.get", return_value=response) as get:
            results = CFBDClient(api_key="k").get_results(2025, 14)
        assert results == [RESULT]
        assert get.call_args[1]["headers"]["Authorization"] == "Bearer k"

    def test_request_error(self):
        with patch(
            "cfb_edge.services.results.requests.get",
            side_effect=requests.exceptions.HTTPError("401"),
        ):
            assert CFBDClient(api_key="k").get_results(2025, 14) == []


class TestGradeScript:
    def test_grades_saved_csv(self, tmp_path, capsys):
        path = tmp_path / "ncaaf_spread_ev.csv"
        write_bets_csv([_bet(market=SPREAD, side=HOME, point=-7.5)], path)
        client = MagicMock()
        client.get_results.return_value = [GameResult("Ohio State", "Michigan", 30, 20)]
        with patch("scripts.grade_results.CFBDClient", return_value=client):
            assert grade_main(["--year", "2025", "--week", "14", str(path)]) == 0
        client.get_results.assert_called_once_with(2025, 14, "regular")
        out = capsys.readouterr().out
        assert "win" in out
        assert "1-0-0" in out

    def test_missing_key_exits_nonzero(self, tmp_path):
        path = tmp_path / "bets.csv"
        write_bets_csv([], path)
        with patch.dict("os.environ", {}, clear=True):
            assert grade_main(["--year", "2025", "--week", "14", str(path)]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
