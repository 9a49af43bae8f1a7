"""
Prediction Tracker scraper.
https://www.thepredictiontracker.com/

The site publishes its consensus predictions as fixed-width text inside
``<pre>`` blocks::

    Home            Visitor          Opening  Updated  Midweek  PredAvg ...  ProbWin  ProbCover
    Ohio St.        Michigan            3.5      4.0      4.0     6.12  ...   0.689    0.551

Columns used:

    team names        split on runs of 2+ spaces (home first)
    numeric[1]        updated line → predicted home margin, positive when home is favored
    numeric[-2]       home win probability, already a fraction

Header, blank and short rows are skipped, as are rows whose probability
does not lie strictly inside (0, 1).
"""

import logging
import os
import re
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from cfb_edge.core.records import ModelPredictionRecord

logger = logging.getLogger(__name__)

PREDICTION_TRACKER_URL = os.getenv(
    "PREDICTION_TRACKER_URL", "https://www.thepredictiontracker.com/predncaa.html"
)
SOURCE_NAME = "prediction_tracker"

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}

_MIN_NUMERIC_COLUMNS = 6

# First whitespace-delimited token that starts like a number ("-3.5", "0.61", ".5").
_NUMERIC_START = re.compile(r"(?:^|\s)(?=[-+]?\.?\d)")
_COLUMN_GAP = re.compile(r"\s{2,}")


def parse_prediction_line(line: str) -> Optional[ModelPredictionRecord]:
    """One fixed-width row → record, or None for anything that is not a game."""
    if not line.strip() or "Home" in line or "Visitor" in line:
        return None

    match = _NUMERIC_START.search(line)
    if match is None:
        return None

    teams = [t.strip().replace(".", "") for t in _COLUMN_GAP.split(line[:match.start()].strip())]
    teams = [t for t in teams if t]
    if len(teams) < 2:
        return None

    numeric = line[match.start():].split()
    if len(numeric) < _MIN_NUMERIC_COLUMNS:
        return None

    try:
        margin = float(numeric[1])
        home_win_prob = float(numeric[-2])
    except ValueError:
        return None

    if not 0.0 < home_win_prob < 1.0:
        return None

    return ModelPredictionRecord(
        home_team=teams[0],
        away_team=teams[1],
        predicted_margin=margin,
        home_win_prob=home_win_prob,
        source=SOURCE_NAME,
    )


def parse_prediction_page(html: str) -> List[ModelPredictionRecord]:
    """Every parseable row of every ``<pre>`` block, in page order."""
    soup = BeautifulSoup(html, "lxml")
    records: List[ModelPredictionRecord] = []
    for pre in soup.find_all("pre"):
        for line in pre.get_text().splitlines():
            record = parse_prediction_line(line)
            if record is not None:
                records.append(record)
    return records


class PredictionTrackerScraper:
    """Fetches and parses the Prediction Tracker consensus page."""

    def __init__(self, url: str = PREDICTION_TRACKER_URL, timeout: int = 15):
        self.url = url
        self.timeout = timeout

    def fetch_predictions(self) -> List[ModelPredictionRecord]:
        """Current predictions, or ``[]`` when the page cannot be fetched."""
        try:
            response = requests.get(self.url, headers=_HEADERS, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error("Prediction Tracker error: %s", e)
            return []

        records = parse_prediction_page(response.text)
        if not records:
            logger.warning("Prediction Tracker: page fetched but no rows parsed (%s)", self.url)
        else:
            logger.info("Prediction Tracker: %d predictions", len(records))
        return records
