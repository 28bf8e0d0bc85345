from brgy_analytics.services.activity import engagement, financial_summary, recent_activity
from brgy_analytics.services.records import Booking, Listing, ListingInquiry, OwnerApplication

from factories import NOW, application, booking, days_ago, listing


def _listings(*rows):
    return [Listing.model_validate(row) for row in rows]


def _bookings(*rows):
    return [Booking.model_validate(row) for row in rows]


def test_revenue_counts_approved_live_bookings_only():
    summary = financial_summary(_bookings(
        booking("b1", "p1", "t1", total=12000),
        booking("b2", "p1", "t2", total=8000),
        booking("b3", "p1", "t3", total=5000, deleted=True),
        booking("b4", "p1", "t4", status="pending", total=9000),
    ))
    assert summary.total_revenue == 20000
    assert summary.average_booking_value == 10000


def test_revenue_without_bookings_is_zero():
    summary = financial_summary([])
    assert summary.total_revenue == 0
    assert summary.average_booking_value == 0


def test_inquiries_fall_back_to_booking_count():
    listings = _listings(listing("p1", views=10), listing("p2", views=5), listing("p3", views=None))
    engaged = engagement(listings, None, total_bookings=4)
    assert engaged.total_views == 15
    assert engaged.average_views_per_property == 5.0
    assert engaged.total_inquiries == 4


def test_inquiries_are_counted_when_collection_exists():
    inquiries = [ListingInquiry.model_validate({"id": "i1", "listingId": "p1"})]
    assert engagement([], inquiries, total_bookings=9).total_inquiries == 1
    assert engagement([], [], total_bookings=9).total_inquiries == 0


def test_recent_activity_window():
    listings = _listings(listing("p1", published_days_ago=3), listing("p2", published_days_ago=30))
    bookings = _bookings(
        booking("b1", "p1", "t1", created_days_ago=1),
        booking("b2", "p1", "t1", created_days_ago=6),
        booking("b3", "p1", "t2", created_days_ago=8),
    )
    applications = [
        OwnerApplication.model_validate(application("o1", reviewed_days_ago=2)),
        OwnerApplication.model_validate(application("o2", reviewed_days_ago=20)),
        OwnerApplication.model_validate(application("o3", status="pending", reviewed_days_ago=1)),
        OwnerApplication.model_validate(application("o4", reviewedAt=None, createdAt=days_ago(4))),
    ]
    inquiries = [
        ListingInquiry.model_validate({"id": "i1", "listingId": "p1", "createdAt": days_ago(2)}),
        ListingInquiry.model_validate({"id": "i2", "listingId": "p1", "createdAt": days_ago(12)}),
    ]

    recent = recent_activity(listings, bookings, applications, inquiries, NOW)
    assert recent.new_bookings == 2
    assert recent.new_properties == 1
    assert recent.new_owners == 2
    assert recent.new_tenants == 1
    assert recent.new_inquiries == 1


def test_recent_inquiries_fall_back_to_recent_bookings():
    bookings = _bookings(booking("b1", "p1", "t1", created_days_ago=1), booking("b2", "p1", "t2", created_days_ago=9))
    recent = recent_activity([], bookings, [], None, NOW, days=7)
    assert recent.new_inquiries == 1
