# homescore/sorting.py
"""Listing sort keys.

Sort keys look like ``price-asc`` or ``score-desc``. Sorting is stable and
listings with no value for the chosen field always come last, in their
original order, whichever direction is requested.
"""
from typing import Any, Callable, Dict, List, Sequence, Tuple

from .domain import Listing
from .flood import RISK_ORDER, classify
from .utils import is_missing

DEFAULT_SORT = "score-desc"
DIRECTIONS = ("asc", "desc")


def _text(value):
    return value.strip().lower() if isinstance(value, str) and value.strip() else None


SORT_FIELDS: Dict[str, Callable[[Listing], Any]] = {
    "score": lambda l: l.total_score,
    "price": lambda l: l.price_num,
    "sqft": lambda l: l.sqft_num,
    "days_on_market": lambda l: l.days_on_market,
    "address": lambda l: _text(l.address),
    "status": lambda l: _text(l.status),
    "beds": lambda l: l.beds,
    "baths": lambda l: l.baths,
    "price_cut": lambda l: l.price_cut_amount,
    "price_per_sqft": lambda l: l.price_per_sqft_num,
    "garage": lambda l: l.garage_spots,
    "commute": lambda l: l.commute_time,
    "commute_pm": lambda l: l.commute_time_pm,
    "elementary_school": lambda l: l.elementary_school_rating,
    "middle_school": lambda l: l.middle_school_rating,
    "high_school": lambda l: l.high_school_rating,
    "walk_score": lambda l: l.walk_score,
    "bike_score": lambda l: l.bike_score,
    "flood_risk": lambda l: RISK_ORDER[classify(l.flood_zone)],
    "neighborhood": lambda l: _text(l.neighborhood),
    "date": lambda l: l.scraped_at,
    "year_built": lambda l: l.year_built,
    "distance": lambda l: l.distance_miles,
}

SORT_KEYS = [f"{name}-{d}" for name in SORT_FIELDS for d in DIRECTIONS]


def parse_sort_key(key: str) -> Tuple[str, bool]:
    """Split ``field-direction`` into (field, descending)."""
    name, sep, direction = (key or "").strip().rpartition("-")
    if not sep or name not in SORT_FIELDS or direction not in DIRECTIONS:
        raise ValueError(f"unknown sort key: {key!r}")
    return name, direction == "desc"


def sort_listings(listings: Sequence[Listing], key: str = DEFAULT_SORT) -> List[Listing]:
    name, descending = parse_sort_key(key)
    extract = SORT_FIELDS[name]
    present, missing = [], []
    for listing in listings:
        value = extract(listing)
        (missing if is_missing(value) else present).append((value, listing))
    # sorted() keeps ties in input order for reverse=True as well
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [l for _, l in present] + [l for _, l in missing]
