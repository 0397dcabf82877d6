"""
Name: User Record Mapper Tests

Responsibilities:
  - Storage row -> API record (name split, roles decode, timestamp aliases)
  - API patch -> column assignments (name recombination, roles encode)
  - "No fields to update" is reported as None
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from rfm_api.mappers.names import NameCasePolicy
from rfm_api.mappers.roles import RolesFormat
from rfm_api.mappers.user_mapper import from_storage_row, to_storage_assignment

pytestmark = pytest.mark.unit


def test_row_maps_to_api_record():
    row = {"FullName": "LEO ESPINOSA", "Roles": '["Seamster","Cutter"]', "Status": "Active"}

    record = from_storage_row(row)

    assert record["firstName"] == "LEO"
    assert record["lastName"] == "ESPINOSA"
    assert record["roles"] == ["Seamster", "Cutter"]
    assert record["status"] == "Active"
    assert "middleName" not in record


def test_row_with_middle_name_and_scalars():
    created = datetime(2024, 1, 2, 3, 4, 5)
    row = {
        "UserId": 7,
        "FullName": "Jane Q Public",
        "Email": "jane@example.com",
        "Phone": "555",
        "Roles": "Cutter, Designer",
        "Status": "Inactive",
        "hired_date": "2023-05-01",
        "last_login": None,
        "created_at": created,
        "updated_at": created,
    }

    record = from_storage_row(row)

    assert record == {
        "id": 7,
        "firstName": "Jane",
        "middleName": "Q",
        "lastName": "Public",
        "email": "jane@example.com",
        "phone": "555",
        "roles": ["Cutter", "Designer"],
        "status": "Inactive",
        "hiredDate": "2023-05-01",
        "lastLogin": None,
        "created_at": created,
        "updated_at": created,
        "createdAt": created,
        "updatedAt": created,
    }


def test_updated_at_comes_from_updated_at_column():
    row = {"UserId": 1, "FullName": "A B", "updated_at": "real", "update_at": "typo"}
    record = from_storage_row(row)
    assert record["updated_at"] == "real"
    assert record["updatedAt"] == "real"


def test_updated_at_is_not_read_from_misspelled_column():
    row = {"UserId": 1, "FullName": "A B", "update_at": "typo"}
    assert from_storage_row(row)["updated_at"] is None


def test_id_tolerates_legacy_column_spelling():
    assert from_storage_row({"UserID": 3})["id"] == 3


def test_missing_status_defaults_to_active():
    assert from_storage_row({"UserId": 1, "Status": None})["status"] == "Active"


def test_empty_patch_is_no_fields_to_update():
    assert to_storage_assignment({}) is None


def test_unrecognized_fields_only_is_no_fields_to_update():
    assert to_storage_assignment({"password": "x", "id": 3}) is None


def test_partial_name_fills_from_stored_name():
    load = Mock(return_value="Jane Public")

    assignment = to_storage_assignment({"middleName": "Q"}, load_current_name=load)

    load.assert_called_once_with()
    assert assignment.columns == ["FullName"]
    assert assignment.values == ["Jane Q Public"]


def test_partial_name_with_upper_policy():
    assignment = to_storage_assignment(
        {"middleName": "Q"},
        load_current_name=lambda: "Jane Public",
        case_policy=NameCasePolicy.UPPER,
    )
    assert assignment.values == ["JANE Q PUBLIC"]


def test_full_name_patch_skips_lookup():
    load = Mock(return_value="Old Name")

    assignment = to_storage_assignment(
        {"firstName": "Leo", "middleName": None, "lastName": "Espinosa"},
        load_current_name=load,
    )

    load.assert_not_called()
    assert assignment.values == ["Leo Espinosa"]


def test_clearing_middle_name_keeps_other_parts():
    assignment = to_storage_assignment({"middleName": ""}, load_current_name=lambda: "Jane Q Public")
    assert assignment.values == ["Jane Public"]


def test_null_first_and_last_name_keep_stored_parts():
    load = Mock(return_value="Jane Q Public")

    assignment = to_storage_assignment({"firstName": None, "middleName": None, "lastName": None}, load_current_name=load)

    load.assert_called_once_with()
    assert assignment.values == ["Jane Public"]


def test_null_last_name_keeps_stored_last_name():
    assignment = to_storage_assignment({"lastName": None}, load_current_name=lambda: "Jane Q Public")
    assert assignment.values == ["Jane Q Public"]


def test_blank_first_name_keeps_stored_first_name():
    assignment = to_storage_assignment({"firstName": "  ", "lastName": "Doe"}, load_current_name=lambda: "Jane Public")
    assert assignment.values == ["Jane Doe"]


def test_empty_recombined_name_is_not_written():
    assert to_storage_assignment({"firstName": None, "middleName": None, "lastName": None}) is None
    assert to_storage_assignment({"firstName": None}, load_current_name=lambda: "") is None


def test_empty_recombined_name_still_writes_other_fields():
    assignment = to_storage_assignment({"firstName": None, "status": "Inactive"})
    assert assignment.columns == ["Status"]


def test_no_name_fields_means_no_lookup_and_no_full_name():
    load = Mock()

    assignment = to_storage_assignment({"email": "new@example.com"}, load_current_name=load)

    load.assert_not_called()
    assert assignment.columns == ["Email"]
    assert assignment.values == ["new@example.com"]


def test_roles_are_encoded_in_configured_format():
    assert to_storage_assignment({"roles": ["Seamster", "Cutter"]}).values == ['["Seamster","Cutter"]']
    assert to_storage_assignment({"roles": ["Seamster", "Cutter"]}, roles_format=RolesFormat.CSV).values == [
        "Seamster,Cutter"
    ]


def test_null_phone_is_written_but_null_email_is_ignored():
    assignment = to_storage_assignment({"phone": None, "email": None})
    assert assignment.columns == ["Phone"]
    assert assignment.values == [None]


def test_column_order_and_clauses():
    assignment = to_storage_assignment(
        {
            "status": "Inactive",
            "roles": ["Cutter"],
            "lastName": "Doe",
            "firstName": "Jane",
            "email": "jane@example.com",
        }
    )

    assert assignment.columns == ["FullName", "Email", "Roles", "Status"]
    assert assignment.set_clause() == "FullName = %s, Email = %s, Roles = %s, Status = %s"
    assert assignment.insert_clause() == "(FullName, Email, Roles, Status) VALUES (%s, %s, %s, %s)"


def test_mapping_is_referentially_transparent():
    patch = {"firstName": "Jane", "lastName": "Doe", "roles": ["Cutter"]}
    first = to_storage_assignment(patch)
    second = to_storage_assignment(patch)
    assert (first.columns, first.values) == (second.columns, second.values)
    assert patch == {"firstName": "Jane", "lastName": "Doe", "roles": ["Cutter"]}
