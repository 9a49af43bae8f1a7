"""
Team-name matching between the odds source and the prediction source.
This is the single source of truth for name normalization.

The Odds API reports full names with mascots ("Ohio State Buckeyes"), the
prediction source uses short forms ("Ohio St").  Matching is a boolean
acceptance gate, not a similarity score:

1. Both names are normalized: case-folded, punctuation dropped, common
   abbreviations unified (State → St, Saint → St), filler words removed
   ("University of"), one trailing mascot stripped, alias table applied.
2. Two names match when their normalized forms are equal, or when one token
   set contains the other and none of the extra tokens is a *qualifier*
   (directional or campus words such as "State", "Tech", "Western" that
   turn one school into a different one).

Fuzzy scoring (rapidfuzz) is only used offline, by :func:`suggest_alias`,
to propose new alias-table entries for names that failed to match.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Optional, Sequence

from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process

from cfb_edge.core.engine_config import POLICY_FIRST, POLICY_REJECT
from cfb_edge.core.records import GameOddsRecord, MatchedGame, ModelPredictionRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Alias table: production-confirmed abbreviations and nicknames whose token
# overlap with the official name is zero, so neither equality nor the
# superset rule can catch them.  Keys and values are raw names; both are
# normalized when a TeamMatcher is built.
# ---------------------------------------------------------------------------
DEFAULT_ALIASES: dict[str, str] = {
    # Football
    "UConn":                "Connecticut",
    "Ole Miss":             "Mississippi",
    "UCF":                  "Central Florida",
    "UTSA":                 "Texas San Antonio",
    "UT San Antonio":       "Texas San Antonio",
    "UTEP":                 "Texas El Paso",
    "LSU":                  "Louisiana State",
    "SMU":                  "Southern Methodist",
    "TCU":                  "Texas Christian",
    "BYU":                  "Brigham Young",
    "USC":                  "Southern California",
    "UNLV":                 "Nevada Las Vegas",
    "FIU":                  "Florida International",
    "Florida Int'l":        "Florida International",
    "FAU":                  "Florida Atlantic",
    "UAB":                  "Alabama Birmingham",
    "NC State":             "North Carolina State",
    "Southern Miss":        "Southern Mississippi",
    "Kent":                 "Kent State",
    "App State":            "Appalachian State",
    "UMass":                "Massachusetts",
    "Pitt":                 "Pittsburgh",
    "ULM":                  "Louisiana Monroe",
    "UL Monroe":            "Louisiana Monroe",
    "UL Lafayette":         "Louisiana",
    "Louisiana Lafayette":  "Louisiana",
    "Miami":                "Miami FL",
    "Miami Florida":        "Miami FL",
    "Miami Ohio":           "Miami OH",
    "Hawai'i":              "Hawaii",
    "San José State":       "San Jose State",
    "Sam Houston":          "Sam Houston State",
    # Basketball
    "St. Thomas (MN)":      "St. Thomas Minnesota",
    "CSU Northridge":       "Cal State Northridge",
    "CSU Fullerton":        "Cal State Fullerton",
    "CSU Bakersfield":      "Cal State Bakersfield",
    "Cal Baptist":          "California Baptist",
    "Tenn-Martin":          "UT Martin",
    "IUPUI":                "IU Indianapolis",
    "VCU":                  "Virginia Commonwealth",
    "ETSU":                 "East Tennessee State",
    "FGCU":                 "Florida Gulf Coast",
    "LMU":                  "Loyola Marymount",
    "SFA":                  "Stephen F. Austin",
    "UTRGV":                "UT Rio Grande Valley",
}

# A list of mascots, stripped from the end of a name before comparison.
# Multi-word mascots are matched before their single-word tails.
COMMON_MASCOTS: list[str] = [
    "49ers", "Aggies", "Anteaters", "Antelopes", "Aztecs", "Badgers", "Bearcats", "Bearkats",
    "Bears", "Beavers", "Big Green", "Big Red", "Billikens", "Bison", "Black Knights", "Blazers",
    "Blue Devils", "Blue Hens", "Blue Raiders", "Bluejays", "Bobcats", "Boilermakers",
    "Bonnies", "Braves", "Broncos", "Bruins", "Buccaneers", "Buckeyes", "Buffaloes",
    "Bulldogs", "Bulls", "Camels", "Cardinal", "Cardinals", "Catamounts", "Cavaliers",
    "Chanticleers", "Chippewas", "Commodores", "Cornhuskers", "Cougars", "Cowboys",
    "Crimson Tide", "Crusaders", "Cyclones", "Demon Deacons", "Dolphins", "Dons", "Dragons",
    "Ducks", "Dukes", "Eagles", "Falcons", "Fighting Hawks", "Fighting Illini",
    "Fighting Irish", "Flames", "Flyers", "Friars", "Gaels", "Gamecocks", "Gators",
    "Gauchos", "Golden Bears", "Golden Eagles", "Golden Flashes", "Golden Gophers",
    "Golden Griffins", "Golden Grizzlies", "Golden Hurricane", "Golden Panthers",
    "Great Danes", "Green Wave", "Griffins", "Grizzlies", "Hawkeyes", "Hawks", "Highlanders",
    "Hilltoppers", "Hokies", "Hoosiers", "Horned Frogs", "Hornets", "Huskies", "Hurricanes",
    "Islanders", "Jackrabbits", "Jaguars", "Jaspers", "Jayhawks", "Kangaroos", "Keydets",
    "Knights", "Lancers", "Leopards", "Lions", "Lobos", "Longhorns", "Lumberjacks",
    "Marauders", "Matadors", "Mavericks", "Mean Green", "Midshipmen", "Miners",
    "Minutemen", "Monarchs", "Mountain Hawks", "Mountaineers", "Musketeers", "Mustangs",
    "Nittany Lions", "Orange", "Ospreys", "Owls", "Paladins", "Panthers", "Peacocks",
    "Penguins", "Pirates", "Privateers", "Quakers", "Racers", "Ragin' Cajuns", "Raiders",
    "Ramblers", "Rams", "Razorbacks", "Rebels", "Red Raiders", "Red Storm", "Red Wolves",
    "Redbirds", "RedHawks", "Retrievers", "Revolutionaries", "River Hawks", "Roadrunners",
    "Rockets", "Runnin' Bulldogs", "Salukis", "Scarlet Knights", "Seahawks", "Seawolves",
    "Seminoles", "Shockers", "Skyhawks", "Sooners", "Spartans", "Spiders", "Stags",
    "Sun Devils", "Sycamores", "Tar Heels", "Terrapins", "Terriers", "Texans",
    "Thundering Herd", "Thunderbirds", "Tigers", "Titans", "Tommies", "Toreros", "Tribe",
    "Tritons", "Trojans", "Utes", "Vandals", "Vaqueros", "Vikings", "Volunteers",
    "Warhawks", "Wildcats", "Wolf Pack", "Wolfpack", "Wolverines", "Yellow Jackets", "Zips",
]

# Token-level rewrites applied after punctuation removal.
_TOKEN_ABBREVIATIONS: dict[str, str] = {
    "state": "st",
    "saint": "st",
    "international": "intl",
    "univ": "university",
}

# Tokens that carry no identity ("University of Alabama" == "Alabama").
_FILLER_TOKENS: frozenset[str] = frozenset({"university", "of", "the"})

# Tokens that turn one school into a different one.  A token-superset match
# is refused when any extra token is a qualifier, so "Michigan" never
# matches "Michigan St" and "Texas A&M" never matches "Texas".
_QUALIFIER_TOKENS: frozenset[str] = frozenset({
    "north", "south", "east", "west", "northern", "southern", "eastern", "western",
    "central", "st", "tech", "am", "intl", "poly", "christian", "baptist", "methodist",
    "atlantic", "gulf", "coast", "birmingham", "vegas", "monroe", "lafayette",
    "chattanooga", "martin", "paso", "antonio", "christi", "commerce", "upstate",
    "wilmington", "greensboro", "asheville", "charlotte", "kearney", "omaha",
    "middle", "valley", "college", "city", "commonwealth", "coastal", "marymount",
    "chicago", "maryland", "tyler", "arlington", "fullerton", "northridge", "bakersfield",
})

# Apostrophes and periods are deleted rather than spaced ("Int'l" → "intl").
_DELETED_CHARS = re.compile(r"['’`.]")


def _tokenize(name: str) -> list[str]:
    """Punctuation-free, abbreviation-unified tokens of ``name``."""
    text = _DELETED_CHARS.sub("", name.casefold()).replace("&", "")
    tokens = [_TOKEN_ABBREVIATIONS.get(t, t) for t in default_process(text).split()]
    return [t for t in tokens if t not in _FILLER_TOKENS]


# Sort mascots by token count, longest first, to handle multi-word mascots.
_MASCOT_TOKENS: tuple[tuple[str, ...], ...] = tuple(
    sorted(
        {tuple(_tokenize(m)) for m in COMMON_MASCOTS},
        key=lambda toks: (len(toks), sum(map(len, toks))),
        reverse=True,
    )
)


def _strip_mascot(tokens: list[str]) -> list[str]:
    """Helper to remove one known mascot from the end of a token list."""
    for mascot in _MASCOT_TOKENS:
        n = len(mascot)
        if len(tokens) > n and tuple(tokens[-n:]) == mascot:
            return tokens[:-n]
    return tokens


def _is_qualifier(token: str) -> bool:
    # Short tokens are state codes or campus initials: "oh", "fl", "cc", "la".
    return token in _QUALIFIER_TOKENS or len(token) <= 2


class TeamMatcher:
    """Boolean team-name matcher with a configurable alias table.

    Args:
        aliases: Extra alias entries merged over :data:`DEFAULT_ALIASES`.
            Either side may be written in any spelling; both are normalized.
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        table = dict(DEFAULT_ALIASES)
        if aliases:
            table.update(aliases)
        self._aliases: dict[str, str] = {}
        for raw_alias, raw_target in table.items():
            key = " ".join(_strip_mascot(_tokenize(raw_alias)))
            target = " ".join(_strip_mascot(_tokenize(raw_target)))
            if key and target and key != target:
                self._aliases[key] = target

    # -----------------------------------------------------------------------
    # Names
    # -----------------------------------------------------------------------

    def normalize(self, name: str) -> str:
        """Canonical form of a team name ("" for blank input).

        Examples::

            normalize("Ohio State Buckeyes") → "ohio st"
            normalize("UConn Huskies")       → "connecticut"
            normalize("Texas A&M")           → "texas am"
        """
        tokens = _strip_mascot(_tokenize(name or ""))
        joined = " ".join(tokens)
        return self._aliases.get(joined, joined)

    def match_team(self, name_a: str, name_b: str) -> bool:
        """True when both names refer to the same school.  Symmetric."""
        return self._match_normalized(self.normalize(name_a), self.normalize(name_b))

    @staticmethod
    def _match_normalized(norm_a: str, norm_b: str) -> bool:
        if not norm_a or not norm_b:
            return False
        if norm_a == norm_b:
            return True
        tokens_a = set(norm_a.split())
        tokens_b = set(norm_b.split())
        if tokens_a <= tokens_b:
            extra = tokens_b - tokens_a
        elif tokens_b <= tokens_a:
            extra = tokens_a - tokens_b
        else:
            return False
        return not any(_is_qualifier(t) for t in extra)

    # -----------------------------------------------------------------------
    # Games
    # -----------------------------------------------------------------------

    def match_games(
        self,
        odds_records: Iterable[GameOddsRecord],
        prediction_records: Iterable[ModelPredictionRecord],
        *,
        ambiguous_policy: str = POLICY_FIRST,
        allow_swapped_sides: bool = False,
    ) -> List[MatchedGame]:
        """Pair every odds record with at most one prediction record.

        One :class:`MatchedGame` is returned per odds record, in input order.
        Kickoff time is not a key: the two sources disagree on exact start
        times, so a rematch inside one slate would be ambiguous.

        Args:
            odds_records: Games from the odds source.
            prediction_records: Games from the prediction source.
            ambiguous_policy: ``"first"`` attaches the first matching
                prediction in input order; ``"reject"`` attaches none.  Either
                way ``candidates`` reports the count.
            allow_swapped_sides: When no prediction matches home↔home and
                away↔away, accept one that matches with the teams reversed
                and re-orient it to the odds source's home team.
        """
        keyed = [
            (self.normalize(p.home_team), self.normalize(p.away_team), p)
            for p in prediction_records
        ]

        matched: List[MatchedGame] = []
        for record in odds_records:
            home_key = self.normalize(record.home_team)
            away_key = self.normalize(record.away_team)

            hits = [
                p for h, a, p in keyed
                if self._match_normalized(home_key, h) and self._match_normalized(away_key, a)
            ]
            swapped = False
            if not hits and allow_swapped_sides:
                hits = [
                    _reorient(p) for h, a, p in keyed
                    if self._match_normalized(home_key, a) and self._match_normalized(away_key, h)
                ]
                swapped = bool(hits)

            if not hits:
                logger.debug(
                    "No prediction found for %s @ %s (keys: %r / %r)",
                    record.away_team, record.home_team, away_key, home_key,
                )
                matched.append(MatchedGame(odds=record))
                continue

            prediction: Optional[ModelPredictionRecord] = hits[0]
            if len(hits) > 1:
                logger.warning(
                    "Ambiguous match for %s @ %s: %d prediction records (%s); policy=%s",
                    record.away_team, record.home_team, len(hits),
                    ", ".join(f"{p.away_team} @ {p.home_team}" for p in hits),
                    ambiguous_policy,
                )
                if ambiguous_policy == POLICY_REJECT:
                    prediction = None

            matched.append(
                MatchedGame(
                    odds=record,
                    prediction=prediction,
                    candidates=len(hits),
                    sides_swapped=swapped and prediction is not None,
                )
            )
        return matched


def _reorient(prediction: ModelPredictionRecord) -> ModelPredictionRecord:
    """Flip a prediction so its home team becomes the away team."""
    return ModelPredictionRecord(
        home_team=prediction.away_team,
        away_team=prediction.home_team,
        predicted_margin=-prediction.predicted_margin,
        home_win_prob=1.0 - prediction.home_win_prob,
        source=prediction.source,
    )


_default_matcher = TeamMatcher()


def normalize_team_name(name: str) -> str:
    return _default_matcher.normalize(name)


def match_team(name_a: str, name_b: str) -> bool:
    """Module-level :meth:`TeamMatcher.match_team` with the default aliases."""
    return _default_matcher.match_team(name_a, name_b)


def suggest_alias(
    name: str,
    candidates: Sequence[str],
    score_cutoff: float = 85.0,
) -> Optional[tuple[str, float]]:
    """Best fuzzy candidate for a name the matcher rejected, or None.

    Offline helper for growing the alias table (see ``scripts/map_teams.py``);
    the engine itself never accepts a match on score alone.  Uses
    ``token_set_ratio`` on mascot-stripped names, so word order and extra
    tokens do not dominate the score.
    """
    if not name or not candidates:
        return None
    query = " ".join(_strip_mascot(_tokenize(name)))
    choices = {c: " ".join(_strip_mascot(_tokenize(c))) for c in candidates}
    result = process.extractOne(
        query,
        choices,
        scorer=fuzz.token_set_ratio,
        score_cutoff=score_cutoff,
    )
    if result is None:
        return None
    # With a dict of choices extractOne returns (value, score, key).
    _, score, key = result
    return key, float(score)
