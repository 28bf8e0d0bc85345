from brgy_analytics.services.barangay_resolver import BarangayResolver, is_in_barangay, normalize_barangay
from brgy_analytics.services.records import DataQualityCounter, Listing, OwnerApplication, User

from factories import listing, user


def test_normalize_collapses_case_and_whitespace():
    assert normalize_barangay("  san   Isidro ") == "SAN ISIDRO"
    assert normalize_barangay(None) == ""


def test_listing_barangay_is_compared_normalized():
    resolver = BarangayResolver("Talolong")
    assert resolver.listing_in_barangay(Listing.model_validate(listing("p1", barangay=" talolong ")))
    assert not resolver.listing_in_barangay(Listing.model_validate(listing("p2", barangay="RIZAL")))


def test_listing_without_barangay_falls_back_to_owner():
    owners = {
        "owner1": User.model_validate(user("owner1", barangay="TALOLONG", role="owner")),
        "owner2": User.model_validate(user("owner2", barangay="GOMEZ", role="owner")),
    }
    resolver = BarangayResolver("TALOLONG", owners)
    assert resolver.listing_in_barangay(Listing.model_validate(listing("p1", user_id="owner1", barangay=None)))
    assert not resolver.listing_in_barangay(Listing.model_validate(listing("p2", user_id="owner2", barangay=None)))


def test_own_barangay_wins_over_owner_barangay():
    owners = {"owner1": User.model_validate(user("owner1", barangay="TALOLONG"))}
    resolver = BarangayResolver("TALOLONG", owners)
    assert not resolver.listing_in_barangay(Listing.model_validate(listing("p1", barangay="RIZAL")))


def test_absent_values_never_match():
    resolver = BarangayResolver("TALOLONG", {})
    orphan = Listing.model_validate(listing("p1", user_id="ghost", barangay=None))
    assert not resolver.listing_in_barangay(orphan)
    assert not resolver.user_in_barangay(User.model_validate({"id": "u1"}))


def test_blank_target_matches_nothing():
    for target in ("", "   ", None):
        resolver = BarangayResolver(target)
        assert not resolver.matches("TALOLONG")
        assert not resolver.matches("")


def test_near_miss_is_counted_once_but_not_matched():
    quality = DataQualityCounter()
    resolver = BarangayResolver("TALOLONG", quality=quality)
    assert not resolver.matches("TALOLANG")
    assert not resolver.matches("talolang")
    assert not resolver.matches("RIZAL")
    assert quality.near_miss_barangays == 1


def test_is_in_barangay_handles_any_record():
    assert is_in_barangay(User.model_validate(user("u1", barangay="Talolong")), "TALOLONG")
    assert is_in_barangay(OwnerApplication.model_validate({"userId": "u1", "barangay": "TALOLONG"}), "talolong")
    assert not is_in_barangay({"barangay": "TALOLONG"}, "TALOLONG")
