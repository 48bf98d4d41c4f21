import pytest
from homescore.domain import AIFeatures
from homescore.scoring import (
    AIFeatureWeights, Direction, ScoringWeights, average_school_rating, normalize,
    normalize_flood_risk, normalize_garage, normalize_school_rating, score, score_breakdown,
    score_listings, weights_for_mode,
)

PRICE_ONLY = {"price": 10}

def price(l):
    return l.price_num

def test_normalize_bounds_higher_is_better(make_listing):
    population = [make_listing(sqft_num=s) for s in (900, 1500, 2400, 1200)]
    values = [normalize(l, population, lambda l: l.sqft_num, Direction.HIGHER_IS_BETTER, magnitude=True) for l in population]
    assert all(0 <= v <= 1 for v in values)
    assert values[0] == 0
    assert values[2] == 1

def test_normalize_lower_is_better(make_listing):
    population = [make_listing(price_num=p) for p in (300_000, 500_000, 700_000)]
    values = [normalize(l, population, price, Direction.LOWER_IS_BETTER, magnitude=True) for l in population]
    assert values == [1.0, 0.5, 0.0]

def test_absent_value_is_neutral(make_listing):
    population = [make_listing(price_num=300_000), make_listing(price_num=700_000), make_listing()]
    assert normalize(population[2], population, price, Direction.LOWER_IS_BETTER, magnitude=True) == 0.5

def test_magnitude_attributes_treat_non_positive_as_absent(make_listing):
    population = [make_listing(price_num=0), make_listing(price_num=-5), make_listing(price_num=200_000), make_listing(price_num=400_000)]
    assert normalize(population[0], population, price, Direction.LOWER_IS_BETTER, magnitude=True) == 0.5
    assert normalize(population[1], population, price, Direction.LOWER_IS_BETTER, magnitude=True) == 0.5
    # the non-positive values do not stretch the bounds
    assert normalize(population[2], population, price, Direction.LOWER_IS_BETTER, magnitude=True) == 1.0

def test_zero_is_a_real_value_for_counts(make_listing):
    population = [make_listing(beds=0), make_listing(beds=2), make_listing(beds=4)]
    assert normalize(population[0], population, lambda l: l.beds, Direction.HIGHER_IS_BETTER) == 0.0
    assert normalize(population[1], population, lambda l: l.beds, Direction.HIGHER_IS_BETTER) == 0.5

def test_degenerate_populations(make_listing):
    tied = [make_listing(beds=3), make_listing(beds=3)]
    assert normalize(tied[0], tied, lambda l: l.beds, Direction.HIGHER_IS_BETTER) == 0.0
    lone = make_listing(price_num=250_000)
    assert 0 <= normalize(lone, [lone], price, Direction.LOWER_IS_BETTER, magnitude=True) <= 1
    assert 0 <= normalize(lone, [], price, Direction.LOWER_IS_BETTER, magnitude=True) <= 1

def test_garage_without_garage_is_zero(make_listing):
    population = [make_listing(has_garage=False), make_listing(has_garage=True, garage_spots=4), make_listing(has_garage=True, garage_spots=2)]
    assert normalize_garage(population[0], population) == 0
    assert normalize_garage(population[1], population) == 1
    assert normalize_garage(population[2], population) == 0.5

def test_garage_unknown_is_neutral(make_listing):
    population = [make_listing(), make_listing(has_garage=True), make_listing(garage_spots=3)]
    assert normalize_garage(population[0], population) == 0.5
    assert normalize_garage(population[1], population) == 0.5

def test_flood_risk_is_not_population_relative(make_listing):
    high = make_listing(flood_zone="Zone AE")
    low = make_listing(flood_zone="Zone X")
    assert normalize_flood_risk(high, [high]) == 0.2
    assert normalize_flood_risk(low, [high, low]) == 1.0

def test_school_average(make_listing):
    a = make_listing(elementary_school_rating=8, middle_school_rating=6)
    b = make_listing(elementary_school_rating=4, middle_school_rating=4, high_school_rating=4)
    c = make_listing()
    d = make_listing(high_school_rating=10)
    population = [a, b, c, d]
    assert average_school_rating(a) == 7
    assert average_school_rating(c) is None
    assert normalize_school_rating(a, population) == 0.5
    assert normalize_school_rating(b, population) == 0.0
    assert normalize_school_rating(c, population) == 0.5
    assert normalize_school_rating(d, population) == 1.0

def test_end_to_end_price_only_scores(make_listing):
    population = [make_listing(price_num=p) for p in (500_000, 700_000, 300_000)]
    scored = score_listings(population, PRICE_ONLY)
    assert [l.total_score for l in scored] == [50, 0, 100]

def test_scores_are_population_relative(make_listing):
    cheap, mid, dear = (make_listing(price_num=p) for p in (300_000, 500_000, 700_000))
    assert score(mid, [cheap, mid, dear], PRICE_ONLY) == 50
    assert score(mid, [cheap, mid], PRICE_ONLY) == 0
    assert score(cheap, [cheap, mid], PRICE_ONLY) == 100

def test_zero_weight_removes_attribute(make_listing):
    a = make_listing(price_num=400_000, sqft_num=1000)
    b = make_listing(price_num=400_000, sqft_num=3000)
    weights = {"price": 10, "size": 0}
    assert score(a, [a, b], weights) == score(b, [a, b], weights)
    assert "size" not in score_breakdown(a, [a, b], weights)
    assert score(a, [a, b], {"price": 10, "size": 8}) < score(b, [a, b], {"price": 10, "size": 8})

def test_zero_total_weight_scores_zero(make_listing):
    a = make_listing(price_num=100_000)
    zero = {name: 0 for name in ScoringWeights().as_dict()}
    assert score(a, [a], zero) == 0

def test_negative_weights_are_ignored(make_listing):
    a = make_listing(price_num=300_000, sqft_num=1000)
    b = make_listing(price_num=500_000, sqft_num=2000)
    assert score(a, [a, b], {"price": 10, "size": -10}) == 100

def test_unknown_attribute_rejected(make_listing):
    a = make_listing()
    with pytest.raises(ValueError):
        score(a, [a], {"pool": 5})

def test_scores_stay_in_range(make_listing):
    population = [
        make_listing(price_num=350_000, sqft_num=1800, beds=3, baths=2, commute_time=25, flood_zone="Zone X",
                     has_garage=True, garage_spots=2, elementary_school_rating=7),
        make_listing(price_num=720_000, sqft_num=-40, beds=5, baths=3.5, flood_zone="Zone VE", has_garage=False),
        make_listing(),
    ]
    for l in score_listings(population, ScoringWeights()):
        assert 0 <= l.total_score <= 100

def test_ai_feature_mode(make_listing):
    rated = make_listing(price_num=400_000, ai_features=AIFeatures(kitchen_quality=9, modern_updates=8))
    poor = make_listing(price_num=400_000, ai_features=AIFeatures(kitchen_quality=2, modern_updates=3))
    unknown = make_listing(price_num=400_000)
    population = [rated, poor, unknown]
    weights = AIFeatureWeights()
    breakdown = score_breakdown(unknown, population, weights)
    assert breakdown["kitchen_quality"] == 0.5
    assert "flood_risk" not in breakdown
    assert score_breakdown(rated, population, weights)["kitchen_quality"] == 1.0
    assert score(rated, population, weights) > score(poor, population, weights)

def test_score_listings_returns_copies(make_listing):
    population = [make_listing(price_num=p) for p in (1, 2)]
    scored = score_listings(population, PRICE_ONLY)
    assert all(l.total_score is None for l in population)
    assert scored[0] is not population[0]

def test_weights_for_mode():
    assert isinstance(weights_for_mode("ai"), AIFeatureWeights)
    w = weights_for_mode("structured", {"price": 3, "kitchen_quality": 9})
    assert w.price == 3
    assert w.size == ScoringWeights().size
    with pytest.raises(ValueError):
        weights_for_mode("vibes")

def test_price_per_sqft_rounds_half_up(make_listing):
    listing = make_listing(price_num=250_500, sqft_num=1000)
    assert listing.price_per_sqft_num == 251
    assert listing.price_per_sqft == "$251"
    assert make_listing(price_num=249_500, sqft_num=1000).price_per_sqft_num == 250
    assert make_listing(price_num=250_000, sqft_num=None).price_per_sqft_num is None
