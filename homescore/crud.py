# homescore/crud.py
"""CRUD operations for listings, per-user ratings and per-user preferences.

Listing helpers mirror the scrape payload: keys are ``models.Listing``
column names. Lookups return ``None``/``False`` for missing rows and leave
raising to the service layer.
"""
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from .models import Listing, UserPreference, UserRating
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional

# listing columns a refresh may overwrite; id and timestamps are managed here
_FIXED_COLUMNS = ("id", "url", "created_at", "updated_at", "last_seen_at")

def _listing_columns() -> List[str]:
    return [c.name for c in Listing.__table__.columns]

def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    columns = set(_listing_columns())
    return {k: v for k, v in data.items() if k in columns}

def _insert_for(db: Session):
    return pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert

def upsert_listing(db: Session, data: Dict[str, Any]) -> Listing:
    table = Listing.__table__
    stmt = _insert_for(db)(table).values(**_clean(data))
    # copy all updatable columns from EXCLUDED, but override timestamps
    excluded = {c.name: stmt.excluded[c.name] for c in table.columns if c.name in data and c.name not in _FIXED_COLUMNS}
    # ensure refresh semantics on re-run
    excluded["updated_at"] = func.now()
    excluded["last_seen_at"] = func.now()
    stmt = stmt.on_conflict_do_update(index_elements=["url"], set_=excluded)
    db.execute(stmt)
    db.commit()
    return get_listing_by_url(db, data["url"])

def create_listing(db: Session, data: Dict[str, Any]) -> Optional[Listing]:
    """Insert a new listing; returns None when the URL is already stored."""
    obj = Listing(**_clean(data))
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    db.refresh(obj)
    return obj

def get_listing(db: Session, listing_id: int) -> Optional[Listing]:
    return db.get(Listing, listing_id)

def get_listing_by_url(db: Session, url: str) -> Optional[Listing]:
    return db.query(Listing).filter(Listing.url == url).first()

def existing_urls(db: Session) -> set:
    return set(db.scalars(select(Listing.url)))

def all_listings(db: Session) -> List[Listing]:
    return db.query(Listing).order_by(Listing.created_at.desc(), Listing.id.desc()).all()

def update_listing(db: Session, listing_id: int, updates: Dict[str, Any]) -> Optional[Listing]:
    obj = db.get(Listing, listing_id)
    if not obj:
        return None
    for k, v in _clean(updates).items():
        if k in _FIXED_COLUMNS:
            continue
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def replace_listing_fields(db: Session, listing_id: int, data: Dict[str, Any]) -> Optional[Listing]:
    """Overwrite every column present in ``data``, None values included.

    Columns the scrape does not produce (commute, distance, price cut) keep
    their stored values.
    """
    obj = update_listing(db, listing_id, data)
    if obj is not None:
        obj.last_seen_at = func.now()
        db.commit()
        db.refresh(obj)
    return obj

def delete_listing(db: Session, listing_id: int) -> bool:
    obj = db.get(Listing, listing_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True

def get_ratings_for_user(db: Session, user_id: str) -> Dict[int, UserRating]:
    rows = db.query(UserRating).filter(UserRating.user_id == user_id).all()
    return {r.listing_id: r for r in rows}

def get_rating(db: Session, user_id: str, listing_id: int) -> Optional[UserRating]:
    return db.query(UserRating).filter(
        UserRating.user_id == user_id, UserRating.listing_id == listing_id
    ).first()

def set_rating(db: Session, user_id: str, listing_id: int, rating: Optional[str]) -> Optional[UserRating]:
    """Store a rating; ``None`` clears it and drops the row when no notes remain."""
    obj = get_rating(db, user_id, listing_id)
    if obj is None:
        if rating is None:
            return None
        obj = UserRating(user_id=user_id, listing_id=listing_id, rating=rating)
        db.add(obj)
    elif rating is None and not obj.notes:
        db.delete(obj)
        db.commit()
        return None
    else:
        obj.rating = rating
    db.commit()
    db.refresh(obj)
    return obj

def set_notes(db: Session, user_id: str, listing_id: int, notes: str) -> UserRating:
    obj = get_rating(db, user_id, listing_id)
    if obj is None:
        obj = UserRating(user_id=user_id, listing_id=listing_id, notes=notes)
        db.add(obj)
    else:
        obj.notes = notes
    db.commit()
    db.refresh(obj)
    return obj

def get_preferences(db: Session, user_id: str) -> Optional[UserPreference]:
    return db.get(UserPreference, user_id)

def save_preferences(db: Session, user_id: str, values: Dict[str, Any]) -> UserPreference:
    obj = db.get(UserPreference, user_id)
    if obj is None:
        obj = UserPreference(user_id=user_id)
        db.add(obj)
    for k, v in values.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj
