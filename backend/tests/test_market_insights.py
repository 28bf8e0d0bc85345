from brgy_analytics.services.market_insights import (
    average_days_on_market,
    market_analytics,
    popular_property_types,
    price_range,
)
from brgy_analytics.services.property_booking import count_property_types
from brgy_analytics.services.records import Listing

from factories import NOW, days_ago, listing


def _listings(*rows):
    return [Listing.model_validate(row) for row in rows]


def test_median_takes_lower_middle_for_even_counts():
    result = price_range([8000, 2000, 6000, 4000])
    assert (result.min, result.max, result.median) == (2000, 8000, 4000)


def test_median_of_odd_count_is_middle():
    assert price_range([3000, 1000, 2000]).median == 2000


def test_price_range_ignores_non_positive_rents():
    result = price_range([0, None, -500, 4500])
    assert (result.min, result.max, result.median) == (4500, 4500, 4500)
    assert price_range([]).median == 0


def test_days_on_market_uses_published_then_created():
    listings = _listings(
        listing("p1", published_days_ago=10),
        listing("p2", publishedAt=None, createdAt=days_ago(20.5)),
        listing("p3", publishedAt=None),
        listing("p4", published_days_ago=-3),
    )
    # (10 + 20 + 0) / 3
    assert average_days_on_market(listings, NOW) == 10


def test_days_on_market_without_dates_is_zero():
    assert average_days_on_market(_listings(listing("p1", publishedAt="whenever")), NOW) == 0


def test_popular_types_carry_average_rent_and_sort_by_count():
    listings = _listings(
        listing("p1", property_type="Apartment", rent=6000),
        listing("p2", property_type="Condo", rent=3000),
        listing("p3", property_type="Boarding House", rent=2000),
        listing("p4", property_type="boarding house", rent=0),
        listing("p5", property_type="Apartment", rent=8000),
        listing("p6", property_type="House", rent=None),
    )
    types = count_property_types(listings)
    popular = popular_property_types(listings, types)

    assert [(p.property_type, p.count, p.average_rent) for p in popular] == [
        ("Boarding House", 3, 2500),
        ("Apartment", 2, 7000),
        ("House", 1, 0),
    ]


def test_market_analytics_for_no_listings_is_zero():
    market = market_analytics([], 0, {}, NOW)
    assert market.occupancy_rate == 0
    assert market.average_days_on_market == 0
    assert market.popular_property_types == ()
    assert market.price_range.max == 0


def test_occupancy_rate():
    listings = _listings(
        listing("p1", status="occupied"),
        listing("p2", status="occupied"),
        listing("p3"),
    )
    assert market_analytics(listings, 2, count_property_types(listings), NOW).occupancy_rate == 67
