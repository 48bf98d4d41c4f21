# homescore/domain.py
"""In-memory listing values consumed by the scoring, filtering and sorting engines.

Every optional attribute is either a number or ``None``; ``None`` means the
value is unknown, which the engines treat differently from zero.
"""
import math
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional

from .flood import classify


class Rating:
    YES = "yes"
    MAYBE = "maybe"
    NO = "no"
    # filter token for "no stored rating"; never persisted
    UNRATED = "unrated"

    STORED = (YES, MAYBE, NO)
    ALL = (YES, MAYBE, NO, UNRATED)


@dataclass(frozen=True)
class AIFeatures:
    kitchen_quality: float = 5
    bathroom_quality: float = 5
    overall_condition: float = 5
    natural_light: float = 5
    layout_flow: float = 5
    curb_appeal: float = 5
    privacy_level: float = 5
    yard_usability: float = 5
    storage_space: float = 5
    modern_updates: float = 5
    summary: str = ""

    @classmethod
    def rating_names(cls):
        return [f.name for f in fields(cls) if f.name != "summary"]

    @classmethod
    def from_dict(cls, data):
        if not data:
            return None
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Listing:
    id: int
    url: str
    address: str = ""
    price: str = ""
    price_num: Optional[float] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft: str = ""
    sqft_num: Optional[float] = None
    property_type: str = ""
    year_built: Optional[int] = None
    lot_size: str = ""
    zestimate: str = ""
    description: str = ""
    status: str = ""
    neighborhood: str = ""
    days_on_market: Optional[int] = None
    hoa_fee: str = ""
    has_garage: Optional[bool] = None
    garage_spots: Optional[int] = None
    elementary_school_rating: Optional[float] = None
    middle_school_rating: Optional[float] = None
    high_school_rating: Optional[float] = None
    commute_time: Optional[float] = None
    commute_time_pm: Optional[float] = None
    distance_miles: Optional[float] = None
    price_cut_amount: Optional[float] = None
    price_cut_percent: Optional[float] = None
    price_cut_date: Optional[str] = None
    walk_score: Optional[int] = None
    bike_score: Optional[int] = None
    flood_zone: Optional[str] = None
    image_url: Optional[str] = None
    ai_features: Optional[AIFeatures] = None
    scraped_at: Optional[datetime] = None
    rating: Optional[str] = None
    notes: str = ""
    total_score: Optional[int] = None

    @property
    def price_per_sqft_num(self) -> Optional[int]:
        if self.price_num and self.sqft_num and self.price_num > 0 and self.sqft_num > 0:
            return int(math.floor(self.price_num / self.sqft_num + 0.5))
        return None

    @property
    def price_per_sqft(self) -> str:
        ppsf = self.price_per_sqft_num
        return f"${ppsf}" if ppsf is not None else ""

    @property
    def flood_risk(self) -> str:
        return classify(self.flood_zone).value

    @property
    def rating_or_unrated(self) -> str:
        return self.rating if self.rating in Rating.STORED else Rating.UNRATED
