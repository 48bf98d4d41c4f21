# homescore/filtering.py
"""Conjunctive listing filters.

A ``FilterCriteria`` is an AND of independent predicates. Every predicate is
optional: an empty set (or the ``"all"`` token) for rating/status/flood risk
and an unset bound for numeric ranges match everything. An active numeric
range never matches a listing whose value is unknown.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .domain import Listing, Rating
from .flood import RiskLevel, classify, parse_risk_level
from .utils import is_missing

ALL = "all"


@dataclass(frozen=True)
class NumericRange:
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.min is not None or self.max is not None

    def matches(self, value) -> bool:
        if not self.active:
            return True
        if is_missing(value):
            return False
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


RANGE_FIELDS: Dict[str, Callable[[Listing], Optional[float]]] = {
    "price": lambda l: l.price_num,
    "price_per_sqft": lambda l: l.price_per_sqft_num,
    "year_built": lambda l: l.year_built,
    "beds": lambda l: l.beds,
    "baths": lambda l: l.baths,
    "sqft": lambda l: l.sqft_num,
    "commute_am": lambda l: l.commute_time,
    "commute_pm": lambda l: l.commute_time_pm,
    "distance": lambda l: l.distance_miles,
    "elementary_rating": lambda l: l.elementary_school_rating,
    "middle_rating": lambda l: l.middle_school_rating,
    "high_rating": lambda l: l.high_school_rating,
}

Selection = Union[None, str, Iterable[str]]


def _selection(value: Selection) -> Set[str]:
    """Normalise a single value or iterable into a set; "all" means no filter."""
    if value is None:
        return set()
    values = [value] if isinstance(value, str) else list(value)
    values = [v for v in values if v is not None and v != ""]
    if ALL in values:
        return set()
    return set(values)


@dataclass(frozen=True)
class FilterCriteria:
    ratings: Set[str] = field(default_factory=set)
    statuses: Set[str] = field(default_factory=set)
    flood_risks: Set[RiskLevel] = field(default_factory=set)
    ranges: Dict[str, NumericRange] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.ranges) - set(RANGE_FIELDS)
        if unknown:
            raise ValueError(f"unknown range filters: {sorted(unknown)}")
        bad = set(self.ratings) - set(Rating.ALL)
        if bad:
            raise ValueError(f"unknown ratings: {sorted(bad)}")

    @classmethod
    def from_options(cls, rating: Selection = None, status: Selection = None,
                     flood_risk: Selection = None, **ranges) -> "FilterCriteria":
        """Build criteria from UI-style options.

        ``ranges`` takes ``name=(min, max)`` tuples or ``NumericRange`` values;
        ``None`` bounds are unset.
        """
        parsed = {}
        for name, bounds in ranges.items():
            if bounds is None:
                continue
            rng = bounds if isinstance(bounds, NumericRange) else NumericRange(*bounds)
            if rng.active:
                parsed[name] = rng
        return cls(
            ratings=_selection(rating),
            statuses=_selection(status),
            flood_risks={parse_risk_level(r) for r in _selection(flood_risk)},
            ranges=parsed,
        )

    @property
    def active(self) -> bool:
        return bool(self.ratings or self.statuses or self.flood_risks or self.ranges)

    def matches(self, listing: Listing) -> bool:
        if self.ratings and listing.rating_or_unrated not in self.ratings:
            return False
        if self.statuses and listing.status not in self.statuses:
            return False
        if self.flood_risks and classify(listing.flood_zone) not in self.flood_risks:
            return False
        for name, rng in self.ranges.items():
            if not rng.matches(RANGE_FIELDS[name](listing)):
                return False
        return True


def filter_listings(listings: Sequence[Listing], criteria: Optional[FilterCriteria] = None) -> List[Listing]:
    """Return a new list with the listings matching every active predicate."""
    if criteria is None or not criteria.active:
        return list(listings)
    return [l for l in listings if criteria.matches(l)]


def rating_counts(listings: Sequence[Listing]) -> Dict[str, int]:
    counts = Counter(l.rating_or_unrated for l in listings)
    out = {"total": len(listings)}
    out.update({r: counts.get(r, 0) for r in Rating.ALL})
    return out


def status_options(listings: Sequence[Listing]) -> List[Tuple[str, int]]:
    """Observed status strings with their counts, most common first."""
    counts = Counter(l.status for l in listings if l.status)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
