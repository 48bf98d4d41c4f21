from types import SimpleNamespace
from openai import OpenAIError
from homescore import ai_features
from homescore.extract import (
    extract_listing_data, extract_listing_urls, extract_price, extract_price_fallback, is_zillow_url,
)

URL = "https://www.zillow.com/homedetails/123-Main-St-Springfield-IL-62704/12345_zpid/"

PAGE = """# 123 Main St, Springfield, IL 62704
$425,000
3 bd 2 ba 1,850 sqft
Single Family Residence
Built in 1998
0.25 acres lot
Zestimate: $430,100
12 days on Zillow
HOA: $150 monthly
2 car garage
Neighborhood: Oak Park
Walk Score: 72
Bike Score: 55
Flood Zone: Zone X (Unshaded)
GreatSchools 8/10 Lincoln Elementary
6/10 Jefferson Middle
9/10 Central High
This charming single family home sits on a quiet tree-lined street and features an updated kitchen with granite counters.
Est. payment $2,650/mo
"""

def test_extract_listing_data():
    data = extract_listing_data(PAGE, URL)
    assert data["url"] == URL
    assert data["address"] == "123 Main St, Springfield, IL 62704"
    assert data["price"] == "$425,000"
    assert data["price_num"] == 425_000
    assert data["beds"] == 3
    assert data["baths"] == 2
    assert data["sqft"] == 1850
    assert data["year_built"] == 1998
    assert data["lot_size"] == "0.25 acres"
    assert data["zestimate"] == "$430,100"
    assert data["days_on_market"] == 12
    assert data["hoa"] == "$150/mo"
    assert data["has_garage"] is True
    assert data["garage_spots"] == 2
    assert data["neighborhood"] == "Oak Park"
    assert data["walk_score"] == 72
    assert data["bike_score"] == 55
    assert data["flood_zone"] == "Zone X (Unshaded)"
    assert data["elementary_school_rating"] == 8
    assert data["middle_school_rating"] == 6
    assert data["high_school_rating"] == 9
    assert data["property_type"] == "Single Family"
    assert data["status"] == "For Sale"
    assert data["description"].startswith("This charming single family home")
    assert data["thumbnail"] is None

def test_missing_fields_are_none_not_zero():
    url = "https://www.zillow.com/homedetails/42-Elm-St-Austin-TX-78701/999_zpid/"
    data = extract_listing_data("Nothing useful here.", url)
    assert data["address"] == "42 Elm St Austin TX 78701"
    for field in ("price_num", "beds", "baths", "sqft", "year_built", "garage_spots", "has_garage",
                  "elementary_school_rating", "walk_score", "flood_zone", "description"):
        assert data[field] is None, field
    assert data["status"] == "For Sale"

def test_garage_and_status_variants():
    assert extract_listing_data("No garage. Pending sale.", URL)["has_garage"] is False
    assert extract_listing_data("No garage. Pending sale.", URL)["status"] == "Pending"
    detached = extract_listing_data("Detached garage out back. Sold on 3/1/2024", URL)
    assert detached["has_garage"] is True
    assert detached["garage_spots"] is None
    assert detached["status"] == "Sold"

def test_extract_price_skips_small_and_monthly_amounts():
    assert extract_price("HOA $250 | Rent est. $3,100/mo | List $615,000") == ("$615,000", 615_000)
    assert extract_price("no price") == (None, None)

def test_extract_price_fallback_takes_largest_plausible():
    text = "Was $899,000. Now $849,500. Taxes $8,200. Land value $75,000,000"
    assert extract_price_fallback(text) == ("$899,000", 899_000)
    assert extract_price_fallback("$4,000 only") is None

def test_is_zillow_url():
    assert is_zillow_url(URL)
    assert is_zillow_url("https://zillow.com/homes/")
    assert not is_zillow_url("https://zillow.com.example.org/homedetails/1_zpid/")
    assert not is_zillow_url("https://www.redfin.com/CA/home/1")

def test_extract_listing_urls():
    content = (
        'see https://www.zillow.com/homedetails/1-A-St/111_zpid/?src=search and '
        '"https://www.zillow.com/homedetails/2-B-Rd/222_zpid/"'
    )
    links = [
        "https://www.zillow.com/homedetails/1-A-St/111_zpid/",
        "https://www.zillow.com/b/333_zpid/",
        "https://www.zillow.com/homes/for_sale/",
    ]
    assert extract_listing_urls(content, links) == [
        "https://www.zillow.com/homedetails/1-A-St/111_zpid/",
        "https://www.zillow.com/homedetails/2-B-Rd/222_zpid/",
        "https://www.zillow.com/b/333_zpid/",
    ]

def test_parse_ai_features_clamps_ratings():
    reply = 'Sure! {"kitchen_quality": 12, "bathroom_quality": "great", "natural_light": 7.5, "curb_appeal": 0, "summary": "Bright"} Thanks'
    features = ai_features.parse_ai_features(reply)
    assert features.kitchen_quality == 10
    assert features.bathroom_quality == 5
    assert features.natural_light == 7.5
    assert features.curb_appeal == 1
    assert features.overall_condition == 5
    assert features.summary == "Bright"
    assert ai_features.parse_ai_features("I could not rate this listing") is None

def test_ai_features_absent_without_key():
    assert ai_features.extract_ai_features("desc", "page") is None

def test_ai_features_absent_on_client_error(monkeypatch):
    def create(**kwargs):
        raise OpenAIError("rate limited")
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    monkeypatch.setattr(ai_features, "_get_client", lambda: client)
    assert ai_features.extract_ai_features("desc", "page") is None

def test_ai_features_from_model_reply(monkeypatch):
    reply = SimpleNamespace(message=SimpleNamespace(content='{"kitchen_quality": 9, "summary": "Nice kitchen"}'))
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
        create=lambda **kwargs: SimpleNamespace(choices=[reply]))))
    monkeypatch.setattr(ai_features, "_get_client", lambda: client)
    features = ai_features.extract_ai_features("desc", "page")
    assert features.kitchen_quality == 9
    assert features.summary == "Nice kitchen"
