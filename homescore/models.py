# homescore/models.py
"""SQLAlchemy ORM models for persisted entities.

Listings are shared; ratings, notes and preferences are stored per user.
"""
from sqlalchemy import (
    Boolean, Column, Float, ForeignKey, Integer, Text, Numeric, TIMESTAMP, JSON,
    UniqueConstraint, func, Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .db import Base

JSONType = JSON().with_variant(JSONB, "postgresql")

class Listing(Base):
    __tablename__ = "listings"
    id = Column(Integer, primary_key=True, index=True)
    url = Column(Text, nullable=False, unique=True, index=True)
    address = Column(Text)
    price = Column(Text)
    price_num = Column(Numeric)
    beds = Column(Integer)
    baths = Column(Float)
    sqft = Column(Integer)
    lot_size = Column(Text)
    year_built = Column(Integer)
    property_type = Column(Text)
    status = Column(Text)
    days_on_market = Column(Integer)
    neighborhood = Column(Text)
    has_garage = Column(Boolean)
    garage_spots = Column(Integer)
    price_cut_amount = Column(Numeric)
    price_cut_percentage = Column(Numeric)
    price_cut_date = Column(Text)
    hoa = Column(Text)
    zestimate = Column(Text)
    am_commute_pessimistic = Column(Float)
    pm_commute_pessimistic = Column(Float)
    distance_miles = Column(Float)
    elementary_school_rating = Column(Float)
    middle_school_rating = Column(Float)
    high_school_rating = Column(Float)
    flood_zone = Column(Text)
    walk_score = Column(Integer)
    bike_score = Column(Integer)
    description = Column(Text)
    thumbnail = Column(Text)
    ai_features = Column(JSONType)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
    last_seen_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    ratings = relationship("UserRating", back_populates="listing", cascade="all, delete-orphan")

class UserRating(Base):
    __tablename__ = "user_ratings"
    id = Column(Integer, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Text)
    notes = Column(Text)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    listing = relationship("Listing", back_populates="ratings")

    __table_args__ = (UniqueConstraint("user_id", "listing_id", name="uq_user_ratings_user_listing"),)

class UserPreference(Base):
    __tablename__ = "user_preferences"
    user_id = Column(Text, primary_key=True)
    scoring_mode = Column(Text, nullable=False, default="structured")
    weights = Column(JSONType)
    sort_key = Column(Text)
    filters = Column(JSONType)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

Index("idx_listings_price_num", Listing.price_num)
Index("idx_listings_status", Listing.status)
