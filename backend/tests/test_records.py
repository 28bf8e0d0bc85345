from datetime import datetime, timezone

from brgy_analytics.services.records import (
    Booking,
    BookingStatus,
    DataQualityCounter,
    Gender,
    Listing,
    PaymentStatus,
    User,
    parse_records,
)
from brgy_analytics.services.snapshot import DataQuality


def test_booking_accepts_camel_and_snake_case():
    camel = Booking.model_validate({"id": "b1", "propertyId": "p1", "tenantId": "t1", "isDeleted": True})
    snake = Booking.model_validate({"id": "b1", "property_id": "p1", "tenant_id": "t1", "is_deleted": True})
    assert camel == snake
    assert camel.property_id == "p1"
    assert camel.is_deleted is True


def test_malformed_numbers_become_none():
    listing = Listing.model_validate({"id": "p1", "monthlyRent": "abc", "viewCount": float("nan")})
    assert listing.monthly_rent is None
    assert listing.view_count is None

    priced = Listing.model_validate({"id": "p2", "monthlyRent": "₱12,500"})
    assert priced.monthly_rent == 12500.0


def test_unknown_enum_values_are_tagged():
    booking = Booking.model_validate({"status": " APPROVED ", "paymentStatus": "bogus"})
    assert booking.status == BookingStatus.APPROVED
    assert booking.payment_status == PaymentStatus.UNKNOWN

    assert User.model_validate({"id": "u1", "gender": "Female"}).gender == Gender.FEMALE
    assert User.model_validate({"id": "u1", "gender": "other"}).gender == Gender.UNKNOWN
    assert User.model_validate({"id": "u1"}).gender == Gender.UNKNOWN


def test_dates_are_lenient():
    booking = Booking.model_validate({"createdAt": "2026-10-01T08:30:00.000Z"})
    assert booking.created_at == datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)

    naive = Booking.model_validate({"createdAt": "2026-10-01"})
    assert naive.created_at.tzinfo is not None

    assert Booking.model_validate({"createdAt": "not a date"}).created_at is None


def test_listing_falls_back_to_created_at():
    listing = Listing.model_validate({"createdAt": "2026-09-01T00:00:00Z"})
    assert listing.listed_at == datetime(2026, 9, 1, tzinfo=timezone.utc)


def test_resident_requires_approved_and_paid():
    assert Booking.model_validate({"status": "approved", "paymentStatus": "paid"}).is_resident
    assert not Booking.model_validate({"status": "approved", "paymentStatus": "partial"}).is_resident
    assert not Booking.model_validate({"status": "pending", "paymentStatus": "paid"}).is_resident


def test_parse_records_skips_rows_that_are_not_mappings():
    quality = DataQualityCounter()
    users = parse_records(User, [{"id": "u1"}, "garbage", None, {"id": "u2"}], "users", quality)
    assert [u.id for u in users] == ["u1", "u2"]
    assert quality.malformed_records == 2


def test_numbers_too_large_for_a_float_become_none():
    listing = Listing.model_validate({"id": "p1", "monthlyRent": 10**400, "viewCount": -(10**400)})
    assert listing.id == "p1"
    assert listing.monthly_rent is None
    assert listing.view_count is None


def test_timestamps_too_large_for_a_float_become_none():
    booking = Booking.model_validate({"id": "b1", "createdAt": 10**400, "status": "approved"})
    assert booking.created_at is None
    assert booking.status == BookingStatus.APPROVED
    assert Booking.model_validate({"createdAt": 1.0e300}).created_at is None


def test_quality_counter_snapshot_copy():
    quality = DataQualityCounter()
    quality.orphan_bookings += 2
    quality.near_miss_barangays += 1

    frozen = quality.to_model()
    assert frozen.orphan_bookings == 2
    assert frozen.near_miss_barangays == 1
    assert frozen.malformed_records == 0
    assert type(frozen) is DataQuality
    assert set(DataQuality.model_fields) == set(DataQualityCounter.model_fields)
