"""
Tests for cross-bookmaker arbitrage detection.
Run with: pytest tests/test_arbitrage.py -v
"""

import pytest

from cfb_edge.core.errors import InvalidOddsError
from cfb_edge.core.odds_math import implied_probability
from cfb_edge.core.records import AWAY, HOME, MONEYLINE, SPREAD, GameOddsRecord, Quote
from cfb_edge.services.arbitrage import find_all_arbitrage, find_arbitrage, find_game_arbitrage


class TestMoneylineArbitrage:
    def test_classic_two_book_arb(self):
        quotes = [
            Quote("A", MONEYLINE, HOME, -120),
            Quote("B", MONEYLINE, AWAY, 125),
        ]
        opp = find_arbitrage(quotes, MONEYLINE, home_team="Home U", away_team="Away U")
        assert opp is not None
        total = implied_probability(-120) + implied_probability(125)
        assert opp.implied_sum == pytest.approx(total)
        assert opp.profit_fraction == pytest.approx(1.0 / total - 1.0)
        assert opp.profit_fraction > 0
        assert opp.home_leg.stake_fraction + opp.away_leg.stake_fraction == pytest.approx(1.0, abs=1e-9)
        assert opp.home_leg.bookmaker == "A"
        assert opp.away_leg.bookmaker == "B"
        assert opp.home_leg.team == "Home U"
        assert opp.away_leg.team == "Away U"

    def test_equal_payout_either_way(self):
        quotes = [Quote("A", MONEYLINE, HOME, -120), Quote("B", MONEYLINE, AWAY, 125)]
        opp = find_arbitrage(quotes, MONEYLINE)
        home_return = opp.home_leg.stake_fraction * (1 + 100 / 120)
        away_return = opp.away_leg.stake_fraction * (1 + 125 / 100)
        assert home_return == pytest.approx(away_return)
        assert home_return - 1.0 == pytest.approx(opp.profit_fraction)

    def test_standard_juice_is_not_arb(self):
        quotes = [Quote("A", MONEYLINE, HOME, -110), Quote("B", MONEYLINE, AWAY, -110)]
        assert find_arbitrage(quotes, MONEYLINE) is None

    def test_exactly_one_is_not_arb(self):
        quotes = [Quote("A", MONEYLINE, HOME, -150), Quote("B", MONEYLINE, AWAY, 150)]
        assert find_arbitrage(quotes, MONEYLINE) is None

    def test_best_pair_chosen(self):
        quotes = [
            Quote("A", MONEYLINE, HOME, -120),
            Quote("C", MONEYLINE, HOME, -105),
            Quote("B", MONEYLINE, AWAY, 125),
            Quote("D", MONEYLINE, AWAY, 110),
        ]
        opp = find_arbitrage(quotes, MONEYLINE)
        assert opp.home_leg.bookmaker == "C"
        assert opp.away_leg.bookmaker == "B"

    def test_tie_keeps_earliest_pair(self):
        quotes = [
            Quote("A", MONEYLINE, HOME, -120),
            Quote("B", MONEYLINE, HOME, -120),
            Quote("C", MONEYLINE, AWAY, 125),
            Quote("D", MONEYLINE, AWAY, 125),
        ]
        opp = find_arbitrage(quotes, MONEYLINE)
        assert (opp.home_leg.bookmaker, opp.away_leg.bookmaker) == ("A", "C")

    def test_same_book_pair_allowed(self):
        quotes = [Quote("A", MONEYLINE, HOME, 105), Quote("A", MONEYLINE, AWAY, 105)]
        assert find_arbitrage(quotes, MONEYLINE) is not None

    def test_one_sided_market(self):
        quotes = [Quote("A", MONEYLINE, HOME, 200), Quote("B", MONEYLINE, HOME, 250)]
        assert find_arbitrage(quotes, MONEYLINE) is None

    def test_other_markets_ignored(self):
        quotes = [Quote("A", SPREAD, HOME, 110, point=-3.0), Quote("B", SPREAD, AWAY, 110, point=3.0)]
        assert find_arbitrage(quotes, MONEYLINE) is None

    def test_bad_price_raises(self):
        quotes = [Quote("A", MONEYLINE, HOME, 50), Quote("B", MONEYLINE, AWAY, 125)]
        with pytest.raises(InvalidOddsError):
            find_arbitrage(quotes, MONEYLINE)


class TestSpreadArbitrage:
    def test_opposite_lines_qualify(self):
        quotes = [
            Quote("A", SPREAD, HOME, 105, point=-3.5),
            Quote("B", SPREAD, AWAY, 105, point=3.5),
        ]
        opp = find_arbitrage(quotes, SPREAD)
        assert opp is not None
        assert opp.home_leg.point == -3.5
        assert opp.away_leg.point == 3.5

    def test_mismatched_lines_never_reported(self):
        # -3 / +7 leaves a window where both bets lose
        quotes = [
            Quote("A", SPREAD, HOME, 150, point=-3.0),
            Quote("B", SPREAD, AWAY, 150, point=7.0),
        ]
        assert find_arbitrage(quotes, SPREAD) is None

    def test_picks_matching_line_among_many(self):
        quotes = [
            Quote("A", SPREAD, HOME, 120, point=-3.0),
            Quote("B", SPREAD, AWAY, 130, point=7.0),
            Quote("C", SPREAD, AWAY, -105, point=3.0),
        ]
        opp = find_arbitrage(quotes, SPREAD)
        assert opp.away_leg.bookmaker == "C"

    def test_missing_point_skipped(self):
        quotes = [Quote("A", SPREAD, HOME, 120), Quote("B", SPREAD, AWAY, 120, point=0.0)]
        assert find_arbitrage(quotes, SPREAD) is None


class TestGameLevel:
    def _record(self, game_id="g1"):
        return GameOddsRecord(
            "Home U", "Away U", game_id=game_id,
            quotes=(
                Quote("A", MONEYLINE, HOME, -120),
                Quote("B", MONEYLINE, AWAY, 125),
                Quote("A", SPREAD, HOME, -110, point=-3.0),
                Quote("B", SPREAD, AWAY, -110, point=3.0),
            ),
        )

    def test_game_arbitrage_pair(self):
        ml, sp = find_game_arbitrage(self._record())
        assert ml is not None and ml.game_id == "g1" and ml.market == MONEYLINE
        assert sp is None

    def test_all_arbitrage_keeps_game_order(self):
        ml, sp = find_all_arbitrage([self._record("g1"), self._record("g2")])
        assert [o.game_id for o in ml] == ["g1", "g2"]
        assert sp == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
