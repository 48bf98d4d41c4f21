# homescore/schemas.py
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from typing import Annotated, Dict, List, Literal, Optional
from datetime import datetime

RatingValue = Literal["yes", "maybe", "no"]
ScoringMode = Literal["structured", "ai"]
Weight = Annotated[int, Field(ge=0, le=10)]

class AIFeaturesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    kitchen_quality: float
    bathroom_quality: float
    overall_condition: float
    natural_light: float
    layout_flow: float
    curb_appeal: float
    privacy_level: float
    yard_usability: float
    storage_space: float
    modern_updates: float
    summary: str = ""

class ListingBase(BaseModel):
    url: str = Field(..., max_length=2048)
    address: Optional[str] = None
    price: Optional[str] = None
    price_num: Optional[float] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft_num: Optional[float] = None
    property_type: Optional[str] = None
    year_built: Optional[int] = None
    lot_size: Optional[str] = None
    status: Optional[str] = None
    neighborhood: Optional[str] = None
    days_on_market: Optional[int] = None
    has_garage: Optional[bool] = None
    garage_spots: Optional[int] = None
    elementary_school_rating: Optional[float] = Field(None, ge=0, le=10)
    middle_school_rating: Optional[float] = Field(None, ge=0, le=10)
    high_school_rating: Optional[float] = Field(None, ge=0, le=10)
    commute_time: Optional[float] = None
    commute_time_pm: Optional[float] = None
    distance_miles: Optional[float] = None
    walk_score: Optional[int] = Field(None, ge=0, le=100)
    bike_score: Optional[int] = Field(None, ge=0, le=100)
    flood_zone: Optional[str] = None

class ListingCreate(BaseModel):
    url: HttpUrl

class ListingImport(BaseModel):
    search_url: HttpUrl

class ListingUpdate(BaseModel):
    price: Optional[str] = None
    price_num: Optional[float] = None
    status: Optional[str] = None
    days_on_market: Optional[int] = None
    neighborhood: Optional[str] = None
    has_garage: Optional[bool] = None
    garage_spots: Optional[int] = None
    commute_time: Optional[float] = None
    commute_time_pm: Optional[float] = None
    distance_miles: Optional[float] = None
    walk_score: Optional[int] = Field(None, ge=0, le=100)
    bike_score: Optional[int] = Field(None, ge=0, le=100)
    flood_zone: Optional[str] = None

class ListingOut(ListingBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sqft: Optional[str] = None
    zestimate: Optional[str] = None
    description: Optional[str] = None
    hoa_fee: Optional[str] = None
    image_url: Optional[str] = None
    price_per_sqft_num: Optional[int] = None
    price_cut_amount: Optional[float] = None
    price_cut_percent: Optional[float] = None
    price_cut_date: Optional[str] = None
    ai_features: Optional[AIFeaturesOut] = None
    scraped_at: Optional[datetime] = None
    rating: Optional[RatingValue] = None
    notes: str = ""
    total_score: Optional[int] = None
    flood_risk: str = "undetermined"

class ListingDetail(ListingOut):
    score_breakdown: Dict[str, float] = {}

class RatingUpdate(BaseModel):
    rating: Optional[RatingValue] = None

class NotesUpdate(BaseModel):
    notes: str = Field("", max_length=5000)

class RangeFilter(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None

class FilterSettings(BaseModel):
    rating: List[str] = []
    status: List[str] = []
    flood_risk: List[str] = []
    ranges: Dict[str, RangeFilter] = {}

class Preferences(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    scoring_mode: ScoringMode = "structured"
    weights: Dict[str, Weight] = {}
    sort_key: str = "score-desc"
    filters: FilterSettings = FilterSettings()

class StatusOption(BaseModel):
    status: str
    count: int

class ListingSummary(BaseModel):
    counts: Dict[str, int]
    statuses: List[StatusOption]

class ImportResult(BaseModel):
    found: int
    added: int
    failed: List[str] = []
