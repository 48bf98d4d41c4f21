# homescore/services.py
"""Glue between persistence, the scrape collaborators and the ranking engines."""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from . import crud, models
from .ai_features import extract_ai_features
from .domain import AIFeatures, Listing
from .extract import extract_listing_data, extract_listing_urls, extract_price_fallback, is_zillow_url
from .filtering import FilterCriteria, filter_listings
from .scoring import Weights, score_listings, weights_for_mode
from .scrape import ScrapeError, fetch_page
from .sorting import DEFAULT_SORT, parse_sort_key, sort_listings
from .utils import logger


class ListingNotFound(Exception):
    pass


class DuplicateListingError(Exception):
    pass


def _num(value) -> Optional[float]:
    if value is None:
        return None
    return float(value) if isinstance(value, Decimal) else value


def to_domain(row: models.Listing, overlay: Optional[models.UserRating] = None) -> Listing:
    """Map a stored row plus the user's rating overlay to a domain ``Listing``."""
    return Listing(
        id=row.id,
        url=row.url,
        address=row.address or "",
        price=row.price or "",
        price_num=_num(row.price_num),
        beds=row.beds,
        baths=_num(row.baths),
        sqft=str(row.sqft) if row.sqft is not None else "",
        sqft_num=_num(row.sqft),
        property_type=row.property_type or "",
        year_built=row.year_built,
        lot_size=row.lot_size or "",
        zestimate=row.zestimate or "",
        description=row.description or "",
        status=row.status or "",
        neighborhood=row.neighborhood or "",
        days_on_market=row.days_on_market,
        hoa_fee=row.hoa or "",
        has_garage=row.has_garage,
        garage_spots=row.garage_spots,
        elementary_school_rating=_num(row.elementary_school_rating),
        middle_school_rating=_num(row.middle_school_rating),
        high_school_rating=_num(row.high_school_rating),
        commute_time=_num(row.am_commute_pessimistic),
        commute_time_pm=_num(row.pm_commute_pessimistic),
        distance_miles=_num(row.distance_miles),
        price_cut_amount=_num(row.price_cut_amount),
        price_cut_percent=_num(row.price_cut_percentage),
        price_cut_date=row.price_cut_date,
        walk_score=row.walk_score,
        bike_score=row.bike_score,
        flood_zone=row.flood_zone,
        image_url=row.thumbnail,
        ai_features=AIFeatures.from_dict(row.ai_features),
        scraped_at=row.created_at,
        rating=overlay.rating if overlay is not None else None,
        notes=(overlay.notes or "") if overlay is not None else "",
    )


# API field names that are stored under a different column name
_UPDATE_COLUMNS = {
    "commute_time": "am_commute_pessimistic",
    "commute_time_pm": "pm_commute_pessimistic",
}


def to_columns(updates: Dict) -> Dict:
    return {_UPDATE_COLUMNS.get(k, k): v for k, v in updates.items()}


def load_population(db: Session, user_id: str) -> List[Listing]:
    """The user's working set: every stored listing with their ratings merged in."""
    overlay = crud.get_ratings_for_user(db, user_id)
    return [to_domain(row, overlay.get(row.id)) for row in crud.all_listings(db)]


def get_listing(db: Session, listing_id: int, user_id: str) -> Listing:
    row = crud.get_listing(db, listing_id)
    if row is None:
        raise ListingNotFound(listing_id)
    return to_domain(row, crud.get_rating(db, user_id, listing_id))


def rank_listings(population: Sequence[Listing], weights: Weights,
                  criteria: Optional[FilterCriteria] = None, sort_key: str = DEFAULT_SORT) -> List[Listing]:
    """Score against the whole population, then filter, then sort."""
    parse_sort_key(sort_key)
    scored = score_listings(population, weights)
    return sort_listings(filter_listings(scored, criteria), sort_key)


def scrape_listing(url: str) -> Dict:
    """Fetch and parse one listing page into a ``models.Listing`` payload."""
    if not is_zillow_url(url):
        raise ValueError("Please provide a valid Zillow URL")
    page = fetch_page(url)
    text = page.text
    if not text:
        raise ScrapeError(f"No content found on {url}")
    payload = extract_listing_data(text, url)
    if payload["price_num"] is None and payload["sqft"] is None:
        raise ScrapeError(f"Could not extract listing data from {url}")
    features = extract_ai_features(payload.get("description") or "", text)
    # no analysis: leave any stored ratings untouched
    if features is not None:
        payload["ai_features"] = features.to_dict()
    logger.info("Scraped %s: %s", url, payload.get("address"))
    return payload


def add_listing_from_url(db: Session, url: str) -> models.Listing:
    url = str(url).strip()
    if crud.get_listing_by_url(db, url) is not None:
        raise DuplicateListingError(url)
    payload = scrape_listing(url)
    row = crud.create_listing(db, payload)
    if row is None:
        raise DuplicateListingError(url)
    logger.info("Added listing %s (%s)", row.id, url)
    return row


def ingest_listing(db: Session, payload: Dict) -> models.Listing:
    """Store an already-extracted payload, updating the row when the URL is known."""
    if not payload.get("url"):
        raise ValueError("url missing")
    row = crud.upsert_listing(db, payload)
    logger.info("Ingested listing %s", payload["url"])
    return row


def import_search_results(db: Session, search_url: str) -> Dict:
    """Add every listing linked from a search results page that is not stored yet."""
    search_url = str(search_url).strip()
    if not is_zillow_url(search_url):
        raise ValueError("Please provide a valid Zillow URL")
    page = fetch_page(search_url)
    urls = extract_listing_urls(page.html, page.links)
    if not urls:
        raise ScrapeError("No property listings found on this page")
    known = crud.existing_urls(db)
    added, failed = 0, []
    for url in urls:
        if url in known:
            continue
        try:
            add_listing_from_url(db, url)
            added += 1
        except (ScrapeError, DuplicateListingError, ValueError) as e:
            logger.warning("Skipping %s: %s", url, e)
            failed.append(url)
    logger.info("Imported %d of %d listings from %s", added, len(urls), search_url)
    return {"found": len(urls), "added": added, "failed": failed}


def refresh_listing(db: Session, listing_id: int) -> models.Listing:
    """Re-scrape a listing, replacing its scraped fields; id and user overlay are kept."""
    row = crud.get_listing(db, listing_id)
    if row is None:
        raise ListingNotFound(listing_id)
    payload = scrape_listing(row.url)
    return crud.replace_listing_fields(db, listing_id, payload)


def record_price(db: Session, row: models.Listing, price: str, price_num: float) -> models.Listing:
    """Update the price, recording a price cut when it dropped."""
    old = _num(row.price_num)
    updates = {"price": price, "price_num": price_num}
    if old and price_num < old:
        cut = old - price_num
        updates.update({
            "price_cut_amount": cut,
            "price_cut_percentage": round(cut / old * 100, 2),
            "price_cut_date": date.today().isoformat(),
        })
        logger.info("Price cut on listing %s: %s -> %s", row.id, old, price_num)
    return crud.update_listing(db, row.id, updates)


def check_price(db: Session, listing_id: int) -> models.Listing:
    row = crud.get_listing(db, listing_id)
    if row is None:
        raise ListingNotFound(listing_id)
    page = fetch_page(row.url)
    found = extract_price_fallback(page.text)
    if found is None:
        raise ScrapeError(f"Could not extract price from {row.url}")
    return record_price(db, row, *found)


def check_all_prices(session_factory) -> int:
    """Scheduler job: price-check every stored listing in its own session."""
    db = session_factory()
    checked = 0
    try:
        for row_id in [r.id for r in crud.all_listings(db)]:
            try:
                check_price(db, row_id)
                checked += 1
            except (ScrapeError, ListingNotFound) as e:
                logger.warning("Price check failed for listing %s: %s", row_id, e)
    finally:
        db.close()
    logger.info("Price check finished: %d listings updated", checked)
    return checked


def criteria_from_settings(filters: Optional[Dict]) -> FilterCriteria:
    filters = filters or {}
    ranges = {
        name: (bounds.get("min"), bounds.get("max"))
        for name, bounds in (filters.get("ranges") or {}).items()
    }
    return FilterCriteria.from_options(
        rating=filters.get("rating"),
        status=filters.get("status"),
        flood_risk=filters.get("flood_risk"),
        **ranges,
    )


def preferences_for(db: Session, user_id: str) -> Dict:
    """Stored preferences for a user, with defaults for anything unset."""
    obj = crud.get_preferences(db, user_id)
    mode = (obj.scoring_mode if obj else None) or "structured"
    weights = weights_for_mode(mode, obj.weights if obj else None)
    return {
        "scoring_mode": mode,
        "weights": weights.as_dict(),
        "sort_key": (obj.sort_key if obj else None) or DEFAULT_SORT,
        "filters": (obj.filters if obj else None) or {},
    }


def save_preferences(db: Session, user_id: str, values: Dict) -> Dict:
    parse_sort_key(values.get("sort_key") or DEFAULT_SORT)
    criteria_from_settings(values.get("filters"))
    weights = weights_for_mode(values.get("scoring_mode") or "structured", values.get("weights"))
    crud.save_preferences(db, user_id, {
        "scoring_mode": values.get("scoring_mode") or "structured",
        "weights": weights.as_dict(),
        "sort_key": values.get("sort_key") or DEFAULT_SORT,
        "filters": values.get("filters") or {},
    })
    return preferences_for(db, user_id)
