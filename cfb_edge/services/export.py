"""
Cache and rendering helpers around an evaluation pass.

JSON caches let a pass be re-run offline against the exact slate that was
fetched (``--use-cache`` in ``scripts/run_evaluation.py``).  CSV and console
rendering are presentation only; nothing here feeds back into the engine.
"""

import csv
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from cfb_edge.core.records import (
    ArbitrageOpportunity,
    BetRecommendation,
    GameOddsRecord,
    ModelPredictionRecord,
    Quote,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BET_COLUMNS = [
    "market", "away_team", "home_team", "team", "side", "point", "bookmaker",
    "price", "implied_pct", "model_pct", "edge_pct", "ev_pct", "model_margin",
]
ARB_COLUMNS = [
    "market", "away_team", "home_team", "profit_pct", "implied_sum",
    "home_bookmaker", "home_price", "home_point", "home_stake_pct",
    "away_bookmaker", "away_price", "away_point", "away_stake_pct",
]


# ---------------------------------------------------------------------------
# JSON cache
# ---------------------------------------------------------------------------

def _odds_to_dict(record: GameOddsRecord) -> Dict:
    data = asdict(record)
    data["commence_time"] = record.commence_time.isoformat() if record.commence_time else None
    return data


def _odds_from_dict(data: Dict) -> GameOddsRecord:
    commence = data.get("commence_time")
    return GameOddsRecord(
        home_team=data["home_team"],
        away_team=data["away_team"],
        commence_time=datetime.fromisoformat(commence) if commence else None,
        quotes=tuple(Quote(**q) for q in data.get("quotes", [])),
        game_id=data.get("game_id", ""),
    )


def _write_json(payload: List[Dict], path: PathLike) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def _read_json(path: PathLike) -> List[Dict]:
    with open(path) as f:
        return json.load(f)


def save_odds_cache(records: Iterable[GameOddsRecord], path: PathLike) -> None:
    payload = [_odds_to_dict(r) for r in records]
    _write_json(payload, path)
    logger.info("Cached %d odds records → %s", len(payload), path)


def load_odds_cache(path: PathLike) -> List[GameOddsRecord]:
    records = [_odds_from_dict(d) for d in _read_json(path)]
    logger.info("Loaded %d odds records from %s", len(records), path)
    return records


def save_predictions_cache(records: Iterable[ModelPredictionRecord], path: PathLike) -> None:
    payload = [asdict(r) for r in records]
    _write_json(payload, path)
    logger.info("Cached %d predictions → %s", len(payload), path)


def load_predictions_cache(path: PathLike) -> List[ModelPredictionRecord]:
    records = [ModelPredictionRecord(**d) for d in _read_json(path)]
    logger.info("Loaded %d predictions from %s", len(records), path)
    return records


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def _pct(value: float) -> float:
    return round(value * 100.0, 2)


def bet_row(bet: BetRecommendation) -> Dict:
    return {
        "market": bet.market,
        "away_team": bet.away_team,
        "home_team": bet.home_team,
        "team": bet.team,
        "side": bet.side,
        "point": bet.point,
        "bookmaker": bet.bookmaker,
        "price": bet.price,
        "implied_pct": _pct(bet.implied_prob),
        "model_pct": _pct(bet.model_prob),
        "edge_pct": _pct(bet.edge),
        "ev_pct": _pct(bet.expected_value),
        "model_margin": bet.model_margin,
    }


def arbitrage_row(opp: ArbitrageOpportunity) -> Dict:
    return {
        "market": opp.market,
        "away_team": opp.away_team,
        "home_team": opp.home_team,
        "profit_pct": round(opp.profit_pct, 2),
        "implied_sum": round(opp.implied_sum, 4),
        "home_bookmaker": opp.home_leg.bookmaker,
        "home_price": opp.home_leg.price,
        "home_point": opp.home_leg.point,
        "home_stake_pct": _pct(opp.home_leg.stake_fraction),
        "away_bookmaker": opp.away_leg.bookmaker,
        "away_price": opp.away_leg.price,
        "away_point": opp.away_leg.point,
        "away_stake_pct": _pct(opp.away_leg.stake_fraction),
    }


def _write_csv(rows: List[Dict], columns: List[str], path: PathLike) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
    logger.info("Wrote %d rows → %s", len(rows), path)
    return len(rows)


def write_bets_csv(bets: Iterable[BetRecommendation], path: PathLike) -> int:
    return _write_csv([bet_row(b) for b in bets], BET_COLUMNS, path)


def _optional_float(value: str) -> Optional[float]:
    return float(value) if value not in ("", None) else None


def load_bets_csv(path: PathLike) -> List[BetRecommendation]:
    """Read back a file written by :func:`write_bets_csv` (e.g. for grading)."""
    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))
    bets = [
        BetRecommendation(
            home_team=row["home_team"],
            away_team=row["away_team"],
            market=row["market"],
            side=row["side"],
            team=row["team"],
            bookmaker=row["bookmaker"],
            price=float(row["price"]),
            implied_prob=float(row["implied_pct"]) / 100.0,
            model_prob=float(row["model_pct"]) / 100.0,
            edge=float(row["edge_pct"]) / 100.0,
            expected_value=float(row["ev_pct"]) / 100.0,
            point=_optional_float(row["point"]),
            model_margin=_optional_float(row["model_margin"]),
        )
        for row in rows
    ]
    logger.info("Loaded %d bets from %s", len(bets), path)
    return bets


def write_arbitrage_csv(opportunities: Iterable[ArbitrageOpportunity], path: PathLike) -> int:
    return _write_csv([arbitrage_row(o) for o in opportunities], ARB_COLUMNS, path)


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

def _price(price: Union[int, float]) -> str:
    return f"{price:+g}"


def _line(point) -> str:
    return "" if point is None else f" {point:+g}"


def format_bet(bet: BetRecommendation) -> str:
    """``"spread  Michigan +3.5 (+105 @ fanduel)  model 55.1% vs 48.8%  edge +6.3%  EV +12.9%"``"""
    return (
        f"{bet.market:<9} {bet.team}{_line(bet.point)} "
        f"({_price(bet.price)} @ {bet.bookmaker})  "
        f"model {bet.model_prob:.1%} vs {bet.implied_prob:.1%}  "
        f"edge {bet.edge:+.1%}  EV {bet.expected_value:+.1%}"
    )


def format_arbitrage(opp: ArbitrageOpportunity) -> str:
    home, away = opp.home_leg, opp.away_leg
    return (
        f"{opp.market:<9} {opp.away_team} @ {opp.home_team}  profit {opp.profit_pct:.2f}%  "
        f"{home.team}{_line(home.point)} {_price(home.price)} @ {home.bookmaker} ({home.stake_fraction:.1%}) / "
        f"{away.team}{_line(away.point)} {_price(away.price)} @ {away.bookmaker} ({away.stake_fraction:.1%})"
    )
