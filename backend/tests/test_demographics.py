import asyncio

from brgy_analytics.core.store import InMemoryRecordStore
from brgy_analytics.services.barangay_resolver import BarangayResolver
from brgy_analytics.services.demographics import (
    GenderCache,
    approved_owner_ids,
    build_gender_analytics,
    owner_gender_analytics,
    tenant_gender_analytics,
)
from brgy_analytics.services.records import Booking, DataQualityCounter, Gender, OwnerApplication, User

from factories import application, booking, user


def _users(*rows):
    return {row["id"]: User.model_validate(row) for row in rows}


def _bookings(*rows):
    return [Booking.model_validate(row) for row in rows]


def test_only_approved_and_paid_bookings_count():
    users = _users(user("t1", gender="male"), user("t2", gender="female"), user("t3", gender="female"))
    bookings = _bookings(
        booking("b1", "p1", "t1"),
        booking("b2", "p1", "t2", payment="partial"),
        booking("b3", "p1", "t3", status="pending"),
    )
    analytics = tenant_gender_analytics(bookings, GenderCache(users))
    assert analytics.total == 1
    assert analytics.male == 1
    assert analytics.male_percentage == 100


def test_same_tenant_counts_once():
    users = _users(user("t1", gender="female"))
    bookings = _bookings(booking("b1", "p1", "t1"), booking("b2", "p2", "t1"))
    analytics = tenant_gender_analytics(bookings, GenderCache(users))
    assert analytics.total == 1
    assert analytics.female == 1


def test_unknown_bucket_is_part_of_total():
    quality = DataQualityCounter()
    users = _users(user("t1", gender="male"), user("t2"), user("t3", gender="female"), user("t4", gender="male"))
    bookings = _bookings(*(booking(f"b{i}", "p1", f"t{i}") for i in range(1, 5)))
    analytics = tenant_gender_analytics(bookings, GenderCache(users), quality)

    assert analytics.male + analytics.female + analytics.unknown == analytics.total == 4
    assert analytics.unknown == 1
    assert analytics.male_percentage == 50
    assert analytics.female_percentage == 25
    assert analytics.unknown_percentage == 25
    assert quality.unresolved_genders == 1


def test_percentages_round_half_up():
    analytics = build_gender_analytics([Gender.MALE, Gender.FEMALE, Gender.FEMALE, Gender.UNKNOWN,
                                        Gender.UNKNOWN, Gender.UNKNOWN, Gender.UNKNOWN, Gender.UNKNOWN])
    # 1/8 = 12.5%
    assert analytics.male_percentage == 13


def test_empty_distribution_is_zero():
    analytics = build_gender_analytics([])
    assert analytics.total == 0
    assert analytics.male_percentage == analytics.female_percentage == 0


def test_profile_fallback_is_queued_for_write_back():
    users = _users(user("t1"), user("t2"))
    store = InMemoryRecordStore.from_lists(tenants=[{"userId": "t1", "gender": "female"}])
    cache = GenderCache(users)
    asyncio.run(cache.prefetch(store, ["t1", "t2"]))

    resolution = cache.resolve("t1")
    assert resolution.gender == Gender.FEMALE
    assert resolution.should_persist

    analytics = tenant_gender_analytics(_bookings(booking("b1", "p1", "t1"), booking("b2", "p1", "t2")), cache)
    assert analytics.female == 1
    assert analytics.unknown == 1
    assert cache.pending_writes == {"t1": Gender.FEMALE}
    # The aggregator never writes to the store itself
    assert store.writes == []


def test_user_gender_wins_over_profile():
    users = _users(user("t1", gender="male"))
    cache = GenderCache(users, profiles={"t1": Gender.FEMALE})
    assert cache.resolve("t1").gender == Gender.MALE
    assert not cache.resolve("t1").should_persist


def test_missing_profile_collection_is_tolerated():
    cache = GenderCache(_users(user("t1")))
    asyncio.run(cache.prefetch(InMemoryRecordStore(), ["t1"]))
    assert cache.gender_of("t1") == Gender.UNKNOWN


def test_owner_demographics_use_approved_applications_for_the_barangay():
    resolver = BarangayResolver("TALOLONG")
    applications = [
        OwnerApplication.model_validate(row)
        for row in (
            application("o1"),
            application("o2", status="pending"),
            application("o3", barangay="RIZAL"),
            application("o4", barangay=" talolong "),
        )
    ]
    owner_ids = approved_owner_ids(applications, resolver)
    assert owner_ids == ["o1", "o4"]

    users = _users(user("o1", gender="male", role="owner"), user("o4", gender="female", role="owner"))
    analytics = owner_gender_analytics(owner_ids, GenderCache(users))
    assert (analytics.total, analytics.male, analytics.female) == (2, 1, 1)
