"""
Ordering and truncation of engine outputs.

Python's sort is stable, including with ``reverse=True``: items with equal
keys keep their input order, so identical inputs always produce identical
ranked output.
"""

from typing import Callable, Iterable, List, Optional, TypeVar

from cfb_edge.core.records import ArbitrageOpportunity, BetRecommendation

T = TypeVar("T")


def top_n(items: Iterable[T], n: Optional[int], key: Callable[[T], float]) -> List[T]:
    """Stable descending sort by ``key``, truncated to ``n`` (None = all)."""
    ranked = sorted(items, key=key, reverse=True)
    if n is None:
        return ranked
    return ranked[:max(n, 0)]


def rank_bets(
    bets: Iterable[BetRecommendation],
    n: Optional[int],
    min_edge: Optional[float] = None,
) -> List[BetRecommendation]:
    """Bets by EV, optionally dropping those with ``edge < min_edge`` first."""
    if min_edge is not None:
        bets = [b for b in bets if b.edge >= min_edge]
    return top_n(bets, n, key=lambda b: b.expected_value)


def rank_arbitrage(
    opportunities: Iterable[ArbitrageOpportunity],
    n: Optional[int],
) -> List[ArbitrageOpportunity]:
    return top_n(opportunities, n, key=lambda o: o.profit_fraction)


def positive_ev(bets: Iterable[BetRecommendation]) -> List[BetRecommendation]:
    """Presentation filter: keep EV > 0, order preserved."""
    return [b for b in bets if b.is_positive_ev]
