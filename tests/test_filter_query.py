import pytest

from tawsila_admin.services.filter_query import (
    INVENTORIES, ORDERS, PROFILES, SETTLEMENTS, USERS, WALLETS,
    build_filter_fragments, build_filter_query, normalize_date_range
)


def fragments(query):
    """Sorted fragments of a built query, ignoring the leading '&'"""
    assert query == "" or query.startswith("&")
    return sorted(part for part in query.split("&") if part)


def test_empty_map_returns_empty_string():
    assert build_filter_query({}) == ""
    assert build_filter_query(None) == ""


def test_empty_and_none_values_are_omitted():
    with_blanks = {"status": "pending", "vendor_id": "", "tracking_number": None}
    without_blanks = {"status": "pending"}

    assert build_filter_query(with_blanks) == build_filter_query(without_blanks)
    assert build_filter_query({"status": "", "vendor_id": None}) == ""


@pytest.mark.parametrize("profile", list(PROFILES.values()), ids=list(PROFILES))
def test_unsupported_keys_never_reach_the_query(profile):
    for key in profile.unsupported:
        query = build_filter_query({key: "value", "status": "pending"}, profile)

        assert f"filter[{key}]" not in query
        assert f"filter[{profile.backend_key(key)}]" not in query
        assert "filter[status]=pending" in query


def test_orders_unsupported_keys():
    query = build_filter_query({"customer_name": "John", "governorate_id": "3", "city_id": "9"})
    assert query == ""


def test_date_range_missing_side_is_dropped():
    assert "created_between" not in build_filter_query({"created_at_between": "2024-01-01,"})
    assert "created_between" not in build_filter_query({"created_at_between": ",2024-12-31"})
    assert "created_between" not in build_filter_query({"created_at_between": "2024-01-01"})


def test_date_range_valid_is_encoded_as_single_value():
    query = build_filter_query({"created_at_between": "2024-01-01,2024-12-31"})
    assert query == "&filter[created_between]=2024-01-01%2C2024-12-31"


def test_date_range_wrong_format_is_dropped():
    assert build_filter_query({"created_at_between": "01-01-2024,2024-12-31"}) == ""
    assert build_filter_query({"created_at_between": "2024-1-01,2024-12-31"}) == ""
    assert build_filter_query({"created_at_between": "2024-01-01,2024-12-31,2025-01-01"}) == ""


@pytest.mark.parametrize("value", [
    "٢٠٢٤-٠١-٠١,٢٠٢٤-١٢-٣١",
    "２０２４-０１-０１,2024-12-31",
    "2024-01-01,٢٠٢٤-١٢-٣١",
])
def test_date_range_non_ascii_digits_are_dropped(value):
    assert build_filter_query({"created_at_between": value}) == ""
    assert normalize_date_range(value) is None


def test_date_range_parts_are_trimmed():
    assert normalize_date_range(" 2024-01-01 , 2024-12-31 ") == "2024-01-01,2024-12-31"
    assert normalize_date_range("2024-01-01T00:00,2024-12-31") is None


def test_created_between_key_is_validated_without_alias():
    assert build_filter_query({"created_between": "2024-01-01,"}) == ""
    assert build_filter_query({"created_between": "2024-01-01,2024-01-31"}) == \
        "&filter[created_between]=2024-01-01%2C2024-01-31"


@pytest.mark.parametrize("value, expected", [
    ("1", "true"),
    ("0", "false"),
    ("true", "true"),
    ("false", "false"),
    ("yes", "yes"),
])
def test_boolean_normalization(value, expected):
    assert build_filter_query({"is_in_phase1": value}) == f"&filter[is_in_phase1]={expected}"
    assert build_filter_query({"is_in_phase2": value}) == f"&filter[is_in_phase2]={expected}"


def test_boolean_values_of_other_keys_pass_through():
    assert build_filter_query({"status": "1"}) == "&filter[status]=1"


def test_key_renaming():
    query = build_filter_query({"tracking_number": "TRK123"})
    assert "filter[track_number]=TRK123" in query
    assert "filter[tracking_number]" not in query

    assert "filter[assignments.assigned_to]=7" in build_filter_query({"agent_id": "7"})
    assert "filter[customer.mobile]=01012345678" in build_filter_query({"customer_mobile": "01012345678"})


def test_renaming_depends_on_entity_type():
    # agent_id only means an assignment for orders
    assert build_filter_query({"agent_id": "7"}, SETTLEMENTS) == "&filter[agent_id]=7"
    assert build_filter_query({"createdAtBetween": "2024-01-01,2024-01-31"}, USERS) == \
        "&filter[created_between]=2024-01-01%2C2024-01-31"
    assert build_filter_query({"createdAtBetween": "2024-01-01,2024-01-31"}, ORDERS) == \
        "&filter[createdAtBetween]=2024-01-01%2C2024-01-31"


def test_numeric_values_are_not_coerced():
    assert build_filter_query({"vendor_id": "007"}) == "&filter[vendor_id]=007"
    assert build_filter_query({"vendor_id": 7}) == "&filter[vendor_id]=7"


def test_values_are_uri_encoded():
    query = build_filter_query({"status": "a b&c=d/é", "note": "it's (ok)!*"})
    assert fragments(query) == sorted([
        "filter[status]=a%20b%26c%3Dd%2F%C3%A9",
        "filter[note]=it's%20(ok)!*",
    ])


def test_determinism():
    filters = {"status": "pending", "vendor_id": "3", "is_in_phase1": "1"}
    results = {tuple(fragments(build_filter_query(filters))) for _ in range(5)}
    assert len(results) == 1


def test_end_to_end_orders_scenario():
    query = build_filter_query({
        "status": "pending",
        "tracking_number": "ABC-1",
        "created_at_between": "2024-03-01,2024-03-31",
        "customer_name": "John",
    })

    assert fragments(query) == sorted([
        "filter[status]=pending",
        "filter[track_number]=ABC-1",
        "filter[created_between]=2024-03-01%2C2024-03-31",
    ])
    assert "customer_name" not in query


def test_wallet_and_inventory_profiles():
    assert build_filter_query({"owner_type": "vendor", "search": "x", "walletable_id": "4"}, WALLETS) == \
        "&filter[walletable_id]=4"
    assert build_filter_query({"search": "main", "is_active": "1"}, INVENTORIES) == "&filter[is_active]=1"


def test_fragments_list_matches_query():
    filters = {"status": "pending", "agent_id": "2"}
    assert "&" + "&".join(build_filter_fragments(filters)) == build_filter_query(filters)
