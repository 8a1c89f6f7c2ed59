import pytest

from fleetops.errors import CountryNotFound, FormatError
from fleetops.models.domain import EntityKind
from fleetops.services.normalization import normalize_phone, normalize_row, resolve_country_code


def test_created_at_and_id_are_renamed() -> None:
    record, warnings = normalize_row(
        {"id": "P-1", "name": "Depot", "created at": "2024-05-01"},
        EntityKind.PLACE,
    )

    assert record["public_id"] == "P-1"
    assert record["created_at"] == "2024-05-01"
    assert "id" not in record
    assert "created at" not in record
    assert warnings == []


def test_vehicle_rows_get_status_and_online_defaults() -> None:
    record, _ = normalize_row({"name": "Truck 7", "plate": "ABC-123"}, EntityKind.VEHICLE)

    assert record["status"] == "active"
    assert record["online"] is False
    assert record["plate"] == "ABC-123"


def test_vehicle_status_and_online_are_forced_regardless_of_input() -> None:
    record, _ = normalize_row(
        {"name": "Truck 9", "status": "retired", "online": True}, EntityKind.VEHICLE
    )

    assert record["status"] == "active"
    assert record["online"] is False


def test_place_rows_are_not_seeded_with_vehicle_fields() -> None:
    record, _ = normalize_row({"name": "Warehouse"}, EntityKind.PLACE)

    assert "status" not in record
    assert "online" not in record


def test_mixed_case_headings_are_canonicalized_before_rules() -> None:
    record, warnings = normalize_row(
        {
            "ID": "P-1",
            " Created   At": "2024-05-01",
            "Country": "Germany",
            "Phone": "+1 (415) 555-2671",
            "Postal Code": "10117",
        },
        EntityKind.PLACE,
    )

    assert record == {
        "public_id": "P-1",
        "created_at": "2024-05-01",
        "country": "DE",
        "phone": "+14155552671",
        "postal_code": "10117",
    }
    assert warnings == []


def test_country_names_become_iso_codes() -> None:
    record, _ = normalize_row({"country": "United States"}, EntityKind.PLACE)
    assert record["country"] == "US"

    record, _ = normalize_row({"country": "  germany "}, EntityKind.PLACE)
    assert record["country"] == "DE"

    record, _ = normalize_row({"country": "UK"}, EntityKind.PLACE)
    assert record["country"] == "UK"


def test_unknown_country_warns_and_keeps_value() -> None:
    record, warnings = normalize_row({"name": "Lost", "country": "Atlantis"}, EntityKind.PLACE)

    assert record["country"] == "Atlantis"
    assert warnings == ["Unknown country 'Atlantis'"]


def test_resolve_country_code_aliases_and_failures() -> None:
    assert resolve_country_code("USA") == "US"
    assert resolve_country_code("Great Britain") == "GB"
    assert resolve_country_code("FRA") == "FR"
    with pytest.raises(CountryNotFound):
        resolve_country_code("Narnia")


def test_phone_is_normalized_to_e164() -> None:
    record, _ = normalize_row({"phone": "+1 (415) 555-2671"}, EntityKind.PLACE)

    assert record["phone"] == "+14155552671"


def test_normalize_phone_uses_region_for_national_numbers() -> None:
    assert normalize_phone("020 7946 0958", "GB") == "+442079460958"
    assert normalize_phone(4155552671.0, "US") == "+14155552671"


def test_normalize_phone_never_raises() -> None:
    assert normalize_phone("n/a") == "n/a"
    assert normalize_phone("") == ""
    assert normalize_phone("0044 20 7946 0958", "US") == "+442079460958"


def test_coordinates_are_coerced_and_invalid_values_warn() -> None:
    record, warnings = normalize_row(
        {"latitude": "40.7128", "longitude": -74.006}, EntityKind.PLACE
    )
    assert record["latitude"] == pytest.approx(40.7128)
    assert record["longitude"] == pytest.approx(-74.006)
    assert warnings == []

    record, warnings = normalize_row({"latitude": "north", "longitude": 200}, EntityKind.PLACE)
    assert record["latitude"] == "north"
    assert record["longitude"] == 200
    assert len(warnings) == 2


def test_whitespace_headings_become_snake_case() -> None:
    record, _ = normalize_row({"postal code": "10001", "street 2": "Suite 4"}, EntityKind.PLACE)

    assert record == {"postal_code": "10001", "street_2": "Suite 4"}


def test_normalization_is_idempotent() -> None:
    raw = {
        "id": "V-9",
        "name": "Van",
        "phone": "+44 20 7946 0958",
        "country": "France",
        "created at": "2024-01-01",
        "latitude": "48.85",
        "longitude": "2.35",
    }
    once, _ = normalize_row(raw, EntityKind.VEHICLE)
    twice, _ = normalize_row(once, EntityKind.VEHICLE)

    assert once == twice


def test_non_mapping_rows_raise_format_error() -> None:
    with pytest.raises(FormatError):
        normalize_row(["Depot", "Main St"], EntityKind.PLACE)
