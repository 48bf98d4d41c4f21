# homescore/api/routes.py
import os
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from .. import crud, schemas, services
from ..db import get_db
from ..filtering import RANGE_FIELDS, FilterCriteria, NumericRange, rating_counts, status_options
from ..scoring import score_breakdown, weights_for_mode
from ..scrape import ScrapeError
from ..utils import logger, to_float

router = APIRouter()

DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "local")

def current_user(x_user_id: Optional[str] = Header(None)) -> str:
    return (x_user_id or "").strip() or DEFAULT_USER_ID

def range_params(request: Request) -> Dict[str, NumericRange]:
    """Collect ``min_<field>`` / ``max_<field>`` query parameters."""
    ranges = {}
    for name in RANGE_FIELDS:
        bounds = []
        for prefix in ("min", "max"):
            raw = request.query_params.get(f"{prefix}_{name}")
            value = to_float(raw) if raw not in (None, "") else None
            if raw not in (None, "") and value is None:
                raise HTTPException(status_code=400, detail=f"{prefix}_{name} must be a number")
            bounds.append(value)
        rng = NumericRange(*bounds)
        if rng.active:
            ranges[name] = rng
    return ranges

def _not_found():
    return HTTPException(status_code=404, detail="Listing not found")

def _to_out(listing) -> schemas.ListingOut:
    return schemas.ListingOut.model_validate(listing)

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/listings", response_model=List[schemas.ListingOut])
def listings(
    sort: Optional[str] = Query(None),
    mode: Optional[str] = Query(None),
    rating: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
    flood_risk: Optional[List[str]] = Query(None),
    use_saved_filters: bool = Query(False),
    ranges: Dict[str, NumericRange] = Depends(range_params),
    user_id: str = Depends(current_user),
    db: Session = Depends(get_db)
):
    prefs = services.preferences_for(db, user_id)
    try:
        scoring_mode = mode or prefs["scoring_mode"]
        saved_weights = prefs["weights"] if scoring_mode == prefs["scoring_mode"] else None
        weights = weights_for_mode(scoring_mode, saved_weights)
        if use_saved_filters:
            criteria = services.criteria_from_settings(prefs["filters"])
        else:
            criteria = FilterCriteria.from_options(
                rating=rating, status=status, flood_risk=flood_risk, **ranges
            )
        population = services.load_population(db, user_id)
        ranked = services.rank_listings(population, weights, criteria, sort or prefs["sort_key"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [_to_out(l) for l in ranked]

@router.get("/listings/summary", response_model=schemas.ListingSummary)
def listings_summary(user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    population = services.load_population(db, user_id)
    return {
        "counts": rating_counts(population),
        "statuses": [{"status": s, "count": n} for s, n in status_options(population)],
    }

@router.get("/listings/{listing_id}", response_model=schemas.ListingDetail)
def get_listing(listing_id: int, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    prefs = services.preferences_for(db, user_id)
    weights = weights_for_mode(prefs["scoring_mode"], prefs["weights"])
    population = services.rank_listings(services.load_population(db, user_id), weights)
    listing = next((l for l in population if l.id == listing_id), None)
    if listing is None:
        raise _not_found()
    detail = schemas.ListingDetail.model_validate(listing)
    detail.score_breakdown = score_breakdown(listing, population, weights)
    return detail

@router.post("/listings", response_model=schemas.ListingOut, status_code=201)
def create_listing(payload: schemas.ListingCreate, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    try:
        row = services.add_listing_from_url(db, str(payload.url))
    except services.DuplicateListingError:
        raise HTTPException(status_code=409, detail="This listing has already been added")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeError as e:
        logger.warning("Scrape failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))
    return _to_out(services.get_listing(db, row.id, user_id))

@router.post("/listings/import", response_model=schemas.ImportResult)
def import_listings(payload: schemas.ListingImport, db: Session = Depends(get_db)):
    try:
        return services.import_search_results(db, str(payload.search_url))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeError as e:
        logger.warning("Import failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

@router.patch("/listings/{listing_id}", response_model=schemas.ListingOut)
def update_listing(listing_id: int, payload: schemas.ListingUpdate, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    obj = crud.update_listing(db, listing_id, updates=services.to_columns(payload.model_dump(exclude_unset=True)))
    if not obj:
        raise _not_found()
    return _to_out(services.get_listing(db, listing_id, user_id))

@router.delete("/listings/{listing_id}")
def delete_listing(listing_id: int, db: Session = Depends(get_db)):
    ok = crud.delete_listing(db, listing_id)
    if not ok:
        raise _not_found()
    return {"status": "deleted"}

@router.post("/listings/{listing_id}/refresh", response_model=schemas.ListingOut)
def refresh_listing(listing_id: int, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    try:
        services.refresh_listing(db, listing_id)
    except services.ListingNotFound:
        raise _not_found()
    except ScrapeError as e:
        logger.exception("Refresh failed: %s", e)
        raise HTTPException(status_code=502, detail="Refresh failed")
    return _to_out(services.get_listing(db, listing_id, user_id))

@router.post("/listings/{listing_id}/check-price", response_model=schemas.ListingOut)
def check_price(listing_id: int, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    try:
        services.check_price(db, listing_id)
    except services.ListingNotFound:
        raise _not_found()
    except ScrapeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _to_out(services.get_listing(db, listing_id, user_id))

@router.put("/listings/{listing_id}/rating", response_model=schemas.ListingOut)
def set_rating(listing_id: int, payload: schemas.RatingUpdate, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    if crud.get_listing(db, listing_id) is None:
        raise _not_found()
    crud.set_rating(db, user_id, listing_id, payload.rating)
    return _to_out(services.get_listing(db, listing_id, user_id))

@router.put("/listings/{listing_id}/notes", response_model=schemas.ListingOut)
def set_notes(listing_id: int, payload: schemas.NotesUpdate, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    if crud.get_listing(db, listing_id) is None:
        raise _not_found()
    crud.set_notes(db, user_id, listing_id, payload.notes)
    return _to_out(services.get_listing(db, listing_id, user_id))

@router.get("/preferences", response_model=schemas.Preferences)
def get_preferences(user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    return services.preferences_for(db, user_id)

@router.put("/preferences", response_model=schemas.Preferences)
def save_preferences(payload: schemas.Preferences, user_id: str = Depends(current_user), db: Session = Depends(get_db)):
    try:
        return services.save_preferences(db, user_id, payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
