# homescore/extract.py
"""Heuristic extraction of listing fields from Zillow page text.

Every field that cannot be found is returned as ``None`` (never 0), so the
scoring engine can tell an unknown value from a real zero.
"""
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

from .utils import to_float, to_int

RE_PRICE = re.compile(r"\$\s?([\d,]+(?:\.\d{2})?)(?!\d)(?!,\d)(?!\s*(?:/\s*mo|per month))", re.I)
RE_ADDRESS = (
    re.compile(r"^#\s*(.+(?:St|Street|Ave|Avenue|Rd|Road|Dr|Drive|Ln|Lane|Blvd|Boulevard|Ct|Court|Way|Pl|Place)[^#\n]*)", re.I | re.M),
    re.compile(r"(\d+\s+[A-Za-z\s]+(?:St|Street|Ave|Avenue|Rd|Road|Dr|Drive|Ln|Lane|Blvd|Boulevard|Ct|Court|Way|Pl|Place)[^,\n]*,\s*[A-Za-z\s]+,\s*[A-Z]{2}\s*\d{5})", re.I),
)
RE_BEDS = re.compile(r"(\d+)\s*(?:bd|beds?|bedrooms?)\b", re.I)
RE_BATHS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:ba|baths?|bathrooms?)\b", re.I)
RE_SQFT = re.compile(r"([\d,]+)\s*(?:sq\.?\s*ft|sqft|square\s*feet)(?!\s*lot)", re.I)
RE_YEAR = re.compile(r"(?:built\s+in|year\s*built)[:\s]*(\d{4})", re.I)
RE_LOT = re.compile(r"([\d,.]+)\s*(acres?|sq\s*ft\s*lot|sqft\s*lot)", re.I)
RE_ZESTIMATE = re.compile(r"zestimate[^$\d\n]{0,20}\$?\s?([\d,]{4,})", re.I)
RE_DAYS = re.compile(r"(\d+)\s*days?\s*on\s*(?:zillow|market)", re.I)
RE_HOA = (
    re.compile(r"hoa[^$\d\n]{0,20}\$\s?([\d,]+)", re.I),
    re.compile(r"\$\s?([\d,]+)(?:\s*/\s*mo(?:nthly)?)?\s*hoa", re.I),
)
RE_GARAGE_SPOTS = (
    re.compile(r"(\d+)\s*(?:car\s*)?garage", re.I),
    re.compile(r"garage\s*spaces?[:\s]*(\d+)", re.I),
)
RE_NO_GARAGE = re.compile(r"\bno\s+garage\b|garage\s*spaces?[:\s]*0\b", re.I)
RE_GARAGE = re.compile(r"\b(?:attached|detached)\s+garage\b|\bgarage\b", re.I)
RE_NEIGHBORHOOD = re.compile(r"(?:neighborhood|subdivision)[:\s]+([^,\n]+)", re.I)
RE_WALK = re.compile(r"walk\s*score[^\d\n]{0,20}(\d{1,3})", re.I)
RE_BIKE = re.compile(r"bike\s*score[^\d\n]{0,20}(\d{1,3})", re.I)
RE_FLOOD_ZONE = (
    re.compile(r"flood\s*zone[:\s]+([^\n]{1,80})", re.I),
    re.compile(r"flood\s*(?:factor|risk)[:\s]+([^\n]{1,60})", re.I),
)
RE_IMAGE = re.compile(r"(https?://[^\s\"')]+\.(?:jpg|jpeg|png|webp)[^\s\"')]*)", re.I)

PROPERTY_TYPES = ("Single Family", "Condo", "Townhouse", "Multi-Family", "Land", "Apartment", "Mobile", "Manufactured")

# checked in order; the first hit wins
STATUS_PATTERNS = (
    ("Active Contingent", re.compile(r"\bactive\s+contingent\b|\bcontingent\b", re.I)),
    ("Pending", re.compile(r"\bpending\b", re.I)),
    ("Off Market", re.compile(r"\boff\s+market\b", re.I)),
    ("For Rent", re.compile(r"\bfor\s+rent\b", re.I)),
    ("Sold", re.compile(r"\bsold\s+(?:on|for)\b", re.I)),
)

LISTING_URL_PATTERNS = (
    re.compile(r"https?://(?:www\.)?zillow\.com/homedetails/[^\s\"'\)\]>]+", re.I),
    re.compile(r"https?://(?:www\.)?zillow\.com/[^\s\"'\)\]>]*\d+_zpid[^\s\"'\)\]>]*", re.I),
)

MIN_LISTING_PRICE = 50_000
MAX_LISTING_PRICE = 50_000_000


def is_zillow_url(url: str) -> bool:
    try:
        host = urlparse(str(url)).netloc.lower()
    except ValueError:
        return False
    return host == "zillow.com" or host.endswith(".zillow.com")


def _first(patterns, text) -> Optional[re.Match]:
    for p in patterns:
        m = p.search(text)
        if m:
            return m
    return None


def _format_price(amount: float) -> str:
    return f"${amount:,.0f}"


def extract_price(text: str):
    """First dollar amount that looks like a sale price, as (display, number)."""
    for m in RE_PRICE.finditer(text):
        amount = to_float(m.group(1))
        if amount is not None and amount >= 10_000:
            return _format_price(amount), amount
    return None, None


def extract_price_fallback(text: str):
    """Largest plausible listing price on the page, used by price checks."""
    best = 0.0
    for m in RE_PRICE.finditer(text):
        amount = to_float(m.group(1)) or 0.0
        if MIN_LISTING_PRICE <= amount <= MAX_LISTING_PRICE and amount > best:
            best = amount
    if best:
        return _format_price(best), best
    return None


def address_from_url(url: str) -> Optional[str]:
    m = re.search(r"/homedetails/([^/]+)", url)
    if not m:
        return None
    return m.group(1).replace("-", " ").replace("_", ", ")


def _school_rating(text: str, level: str) -> Optional[float]:
    m = re.search(rf"(\d{{1,2}})\s*/\s*10\b[^\d]{{0,120}}?\b{level}\b", text, re.I)
    if not m:
        return None
    rating = int(m.group(1))
    return float(rating) if 1 <= rating <= 10 else None


def _status(text: str) -> str:
    for label, pattern in STATUS_PATTERNS:
        if pattern.search(text):
            return label
    return "For Sale"


def _garage(text: str):
    if RE_NO_GARAGE.search(text):
        return False, None
    m = _first(RE_GARAGE_SPOTS, text)
    if m:
        spots = int(m.group(1))
        return spots > 0, spots
    if RE_GARAGE.search(text):
        return True, None
    return None, None


def _description(text: str) -> Optional[str]:
    for p in re.split(r"\n\s*\n|\n", text):
        cleaned = re.sub(r"[#*\[\]]", "", p).strip()
        if len(cleaned) > 80 and not cleaned.startswith("$") and not re.match(r"^\d+\s*(bed|bath)", cleaned, re.I):
            return cleaned[:800] + ("..." if len(cleaned) > 800 else "")
    return None


def extract_listing_data(text: str, url: str) -> Dict:
    """Parse page text into a payload keyed by ``models.Listing`` column names."""
    lower = text.lower()
    price, price_num = extract_price(text)

    m = _first(RE_ADDRESS, text)
    address = m.group(1).strip() if m else address_from_url(url)

    beds = RE_BEDS.search(text)
    baths = RE_BATHS.search(text)
    sqft = RE_SQFT.search(text)
    year = RE_YEAR.search(text)
    lot = RE_LOT.search(text)
    zestimate = RE_ZESTIMATE.search(text)
    days = RE_DAYS.search(text)
    hoa = _first(RE_HOA, text)
    neighborhood = RE_NEIGHBORHOOD.search(text)
    walk = RE_WALK.search(text)
    bike = RE_BIKE.search(text)
    flood = _first(RE_FLOOD_ZONE, text)
    image = RE_IMAGE.search(text)
    has_garage, garage_spots = _garage(text)

    property_type = next((t for t in PROPERTY_TYPES if t.lower() in lower), None)
    lot_size = None
    if lot:
        lot_size = lot.group(1) + (" acres" if "acre" in lot.group(2).lower() else " sqft")

    return {
        "url": url,
        "address": address,
        "price": price,
        "price_num": price_num,
        "beds": to_int(beds.group(1)) if beds else None,
        "baths": to_float(baths.group(1)) if baths else None,
        "sqft": to_int(sqft.group(1)) if sqft else None,
        "property_type": property_type,
        "year_built": int(year.group(1)) if year else None,
        "lot_size": lot_size,
        "zestimate": "$" + zestimate.group(1) if zestimate else None,
        "status": _status(text),
        "days_on_market": int(days.group(1)) if days else None,
        "hoa": "$" + hoa.group(1) + "/mo" if hoa else None,
        "has_garage": has_garage,
        "garage_spots": garage_spots,
        "neighborhood": neighborhood.group(1).strip()[:50] if neighborhood else None,
        "elementary_school_rating": _school_rating(text, "elementary"),
        "middle_school_rating": _school_rating(text, "middle"),
        "high_school_rating": _school_rating(text, "high"),
        "walk_score": to_int(walk.group(1)) if walk else None,
        "bike_score": to_int(bike.group(1)) if bike else None,
        "flood_zone": flood.group(1).strip() if flood else None,
        "description": _description(text),
        "thumbnail": image.group(1) if image else None,
    }


def extract_listing_urls(content: str, links: Optional[List[str]] = None) -> List[str]:
    """Zillow property URLs found on a search results page, in first-seen order."""
    found = []
    candidates = []
    for pattern in LISTING_URL_PATTERNS:
        candidates.extend(m.group(0) for m in pattern.finditer(content))
    candidates.extend(l for l in (links or []) if isinstance(l, str))
    for raw in candidates:
        url = re.sub(r"[\]\)\"'>]+$", "", raw).split("?")[0].split("#")[0]
        if ("/homedetails/" in url or "_zpid" in url) and url not in found:
            found.append(url)
    return found
