from datetime import datetime
import pytest
from homescore.sorting import DEFAULT_SORT, SORT_KEYS, parse_sort_key, sort_listings

def ids(listings):
    return [l.id for l in listings]

def test_price_ascending_orders_adjacent_pairs(make_listing):
    listings = [make_listing(price_num=p) for p in (520_000, 310_000, 975_000, 480_000)]
    ordered = sort_listings(listings, "price-asc")
    prices = [l.price_num for l in ordered]
    assert all(a <= b for a, b in zip(prices, prices[1:]))

def test_missing_values_last_in_both_directions(make_listing):
    listings = [
        make_listing(price_num=None),
        make_listing(price_num=300_000),
        make_listing(price_num=None),
        make_listing(price_num=500_000),
    ]
    assert ids(sort_listings(listings, "price-asc")) == [2, 4, 1, 3]
    assert ids(sort_listings(listings, "price-desc")) == [4, 2, 1, 3]

def test_sort_is_stable(make_listing):
    listings = [make_listing(beds=3), make_listing(beds=2), make_listing(beds=3), make_listing(beds=2)]
    assert ids(sort_listings(listings, "beds-asc")) == [2, 4, 1, 3]
    assert ids(sort_listings(listings, "beds-desc")) == [1, 3, 2, 4]

def test_text_fields_sort_case_insensitively(make_listing):
    listings = [
        make_listing(address="elm St"),
        make_listing(address="Adams Ave"),
        make_listing(address=""),
        make_listing(address="birch Rd"),
    ]
    assert ids(sort_listings(listings, "address-asc")) == [2, 4, 1, 3]

def test_flood_risk_uses_ordinal(make_listing):
    listings = [
        make_listing(flood_zone="Zone VE"),
        make_listing(flood_zone="Zone X"),
        make_listing(),
        make_listing(flood_zone="Zone AE"),
    ]
    assert ids(sort_listings(listings, "flood_risk-asc")) == [3, 2, 4, 1]

def test_score_default_and_date(make_listing):
    listings = [
        make_listing(total_score=40, scraped_at=datetime(2024, 5, 1)),
        make_listing(total_score=90, scraped_at=datetime(2024, 3, 1)),
        make_listing(total_score=None),
    ]
    assert ids(sort_listings(listings)) == [2, 1, 3]
    assert DEFAULT_SORT == "score-desc"
    assert ids(sort_listings(listings, "date-asc")) == [2, 1, 3]

def test_zero_is_a_value_not_missing(make_listing):
    listings = [make_listing(days_on_market=None), make_listing(days_on_market=0), make_listing(days_on_market=7)]
    assert ids(sort_listings(listings, "days_on_market-asc")) == [2, 3, 1]

def test_sorting_is_idempotent(make_listing):
    listings = [make_listing(sqft_num=s) for s in (1500, None, 900, 2100, 900)]
    once = sort_listings(listings, "sqft-desc")
    assert ids(sort_listings(once, "sqft-desc")) == ids(once)

def test_unknown_sort_keys():
    for key in ("price", "price-up", "pool-asc", "", None):
        with pytest.raises(ValueError):
            parse_sort_key(key)
    assert parse_sort_key("commute_pm-asc") == ("commute_pm", False)
    assert "days_on_market-desc" in SORT_KEYS

def test_sort_returns_new_list(make_listing):
    listings = [make_listing(price_num=p) for p in (500_000, None, 300_000)]
    ordered = sort_listings(listings, "price-asc")
    assert ids(ordered) == [3, 1, 2]
    assert ids(listings) == [1, 2, 3]
    assert ordered is not listings
