# homescore/scoring.py
"""Weighted, population-relative listing scores.

Each scorable attribute is normalised to [0, 1] against the min/max observed
in the current population, multiplied by its weight and averaged over the
configured weights. Because the bounds come from the population, adding or
removing any listing can change every other listing's score: the score is a
relative ranking within the working set, not an absolute valuation.

Two weight schemas share the same engine. ``ScoringWeights`` covers the
structured listing facts; ``AIFeatureWeights`` replaces the location and
safety attributes with the ten LLM-rated photo qualities.
"""
import math
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from .domain import AIFeatures, Listing
from .flood import flood_risk_score

NEUTRAL = 0.5


class Direction(str, Enum):
    HIGHER_IS_BETTER = "higher-is-better"
    LOWER_IS_BETTER = "lower-is-better"


@dataclass
class ScoringWeights:
    price: int = 10
    size: int = 8
    beds: int = 6
    baths: int = 5
    price_per_sqft: int = 5
    avg_school_rating: int = 6
    commute_time: int = 7
    garage_size: int = 3
    flood_risk: int = 5

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class AIFeatureWeights:
    price: int = 10
    size: int = 8
    beds: int = 6
    baths: int = 5
    kitchen_quality: int = 9
    bathroom_quality: int = 7
    overall_condition: int = 8
    natural_light: int = 6
    layout_flow: int = 5
    curb_appeal: int = 4
    privacy_level: int = 5
    yard_usability: int = 4
    storage_space: int = 3
    modern_updates: int = 6

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


WEIGHT_SCHEMAS = {
    "structured": ScoringWeights,
    "ai": AIFeatureWeights,
}

Weights = Union[ScoringWeights, AIFeatureWeights, Mapping[str, float]]
Extractor = Callable[[Listing], Optional[float]]


def weights_for_mode(mode: str, values: Optional[Mapping[str, int]] = None):
    """Build the weight record for a scoring mode, ignoring unknown keys."""
    try:
        cls = WEIGHT_SCHEMAS[mode]
    except KeyError:
        raise ValueError(f"unknown scoring mode: {mode!r}") from None
    if not values:
        return cls()
    known = set(cls().as_dict())
    return cls(**{k: int(v) for k, v in values.items() if k in known})


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and not math.isnan(v)


def _present(v, magnitude: bool) -> bool:
    if not _is_number(v):
        return False
    return v > 0 if magnitude else True


@dataclass(frozen=True)
class Bounds:
    lo: float = 0.0
    hi: float = 1.0

    @property
    def span(self) -> float:
        return (self.hi - self.lo) or 1.0

    @classmethod
    def of(cls, values: Sequence[float]) -> "Bounds":
        return cls(min(values, default=0.0), max(values, default=1.0))


def population_values(population: Sequence[Listing], extractor: Extractor, magnitude: bool = False) -> List[float]:
    values = (extractor(l) for l in population)
    return [float(v) for v in values if _present(v, magnitude)]


def _scale(value, bounds: Bounds, direction: Direction, magnitude: bool) -> float:
    if not _present(value, magnitude):
        return NEUTRAL
    ratio = (float(value) - bounds.lo) / bounds.span
    if direction == Direction.LOWER_IS_BETTER:
        ratio = 1 - ratio
    return min(1.0, max(0.0, ratio))


def normalize(listing: Listing, population: Sequence[Listing], extractor: Extractor,
              direction: Direction, magnitude: bool = False) -> float:
    """Min-max normalise one attribute of ``listing`` against ``population``.

    ``magnitude`` attributes (price, area, commute...) treat values <= 0 as
    absent. An absent value on the listing itself scores a neutral 0.5.
    """
    bounds = Bounds.of(population_values(population, extractor, magnitude))
    return _scale(extractor(listing), bounds, direction, magnitude)


def average_school_rating(listing: Listing) -> Optional[float]:
    ratings = [
        r for r in (listing.elementary_school_rating, listing.middle_school_rating, listing.high_school_rating)
        if _is_number(r)
    ]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def normalize_school_rating(listing: Listing, population: Sequence[Listing]) -> float:
    return normalize(listing, population, average_school_rating, Direction.HIGHER_IS_BETTER)


def normalize_flood_risk(listing: Listing, population: Sequence[Listing] = ()) -> float:
    return flood_risk_score(listing.flood_zone)


# Attributes prepare a per-population scorer so bounds are computed once per
# scoring pass rather than once per listing.

@dataclass(frozen=True)
class MinMaxAttribute:
    extractor: Extractor
    direction: Direction
    magnitude: bool = False

    def prepare(self, population: Sequence[Listing]) -> Callable[[Listing], float]:
        bounds = Bounds.of(population_values(population, self.extractor, self.magnitude))
        return lambda listing: _scale(self.extractor(listing), bounds, self.direction, self.magnitude)


class GarageAttribute:
    """No garage scores 0; spots are scaled against the population's largest garage."""

    def prepare(self, population):
        top = max(population_values(population, lambda l: l.garage_spots, magnitude=True), default=1.0)

        def scorer(listing):
            if listing.has_garage is False:
                return 0.0
            if _present(listing.garage_spots, magnitude=True):
                return min(1.0, listing.garage_spots / top)
            return NEUTRAL
        return scorer


def normalize_garage(listing: Listing, population: Sequence[Listing]) -> float:
    return GarageAttribute().prepare(population)(listing)


class FloodRiskAttribute:
    def prepare(self, population):
        return normalize_flood_risk


def _ai_feature(name: str) -> Extractor:
    def extract(listing: Listing):
        features: Optional[AIFeatures] = listing.ai_features
        return getattr(features, name) if features is not None else None
    return extract


ATTRIBUTES = {
    "price": MinMaxAttribute(lambda l: l.price_num, Direction.LOWER_IS_BETTER, magnitude=True),
    "size": MinMaxAttribute(lambda l: l.sqft_num, Direction.HIGHER_IS_BETTER, magnitude=True),
    "beds": MinMaxAttribute(lambda l: l.beds, Direction.HIGHER_IS_BETTER),
    "baths": MinMaxAttribute(lambda l: l.baths, Direction.HIGHER_IS_BETTER),
    "price_per_sqft": MinMaxAttribute(lambda l: l.price_per_sqft_num, Direction.LOWER_IS_BETTER, magnitude=True),
    "avg_school_rating": MinMaxAttribute(average_school_rating, Direction.HIGHER_IS_BETTER),
    "commute_time": MinMaxAttribute(lambda l: l.commute_time, Direction.LOWER_IS_BETTER, magnitude=True),
    "garage_size": GarageAttribute(),
    "flood_risk": FloodRiskAttribute(),
}
for _name in AIFeatures.rating_names():
    ATTRIBUTES[_name] = MinMaxAttribute(_ai_feature(_name), Direction.HIGHER_IS_BETTER)


def _weights_dict(weights: Weights) -> Dict[str, float]:
    raw = weights.as_dict() if hasattr(weights, "as_dict") else dict(weights)
    unknown = set(raw) - set(ATTRIBUTES)
    if unknown:
        raise ValueError(f"unknown scoring attributes: {sorted(unknown)}")
    return {k: max(0.0, float(v or 0)) for k, v in raw.items()}


class _ScorePass:
    """Scores listings against one fixed population and weight set."""

    def __init__(self, population: Sequence[Listing], weights: Weights):
        self.weights = _weights_dict(weights)
        self.total_weight = sum(self.weights.values())
        self.scorers = {
            name: ATTRIBUTES[name].prepare(population)
            for name, w in self.weights.items() if w > 0
        }

    def breakdown(self, listing: Listing) -> Dict[str, float]:
        return {name: scorer(listing) for name, scorer in self.scorers.items()}

    def score(self, listing: Listing) -> int:
        if self.total_weight <= 0:
            return 0
        weighted = sum(v * self.weights[name] for name, v in self.breakdown(listing).items())
        # round half up, matching how scores are displayed
        return int(math.floor(weighted / self.total_weight * 100 + 0.5))


def score(listing: Listing, population: Sequence[Listing], weights: Weights) -> int:
    """Score ``listing`` 0..100 relative to ``population``. Zero total weight scores 0."""
    return _ScorePass(population, weights).score(listing)


def score_breakdown(listing: Listing, population: Sequence[Listing], weights: Weights) -> Dict[str, float]:
    """Normalised value of every attribute with a non-zero weight."""
    return _ScorePass(population, weights).breakdown(listing)


def score_listings(population: Sequence[Listing], weights: Weights) -> List[Listing]:
    """Return copies of ``population`` with ``total_score`` filled in."""
    scoring = _ScorePass(population, weights)
    return [replace(l, total_score=scoring.score(l)) for l in population]
