"""
Translation between Users table rows and API-facing user records.

Reads: ``from_storage_row`` turns a DictCursor row (UserId, FullName, Roles, ...)
into the camelCase record the admin UI consumes.
Writes: ``to_storage_assignment`` turns a sparse camelCase patch into the
column/value pairs of a parameterized INSERT or UPDATE.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from rfm_api.mappers.names import NameCasePolicy, PersonName, join_full_name, split_full_name
from rfm_api.mappers.roles import RolesFormat, decode_roles, encode_roles

NAME_FIELDS = ("firstName", "middleName", "lastName")

# API field -> Users column, in emission order
FIELD_COLUMNS = (
    ("email", "Email"),
    ("phone", "Phone"),
    ("roles", "Roles"),
    ("status", "Status"),
    ("hiredDate", "hired_date"),
)

# Columns declared NOT NULL; an explicit null in a patch is ignored for these
NOT_NULL_FIELDS = {"email", "status"}


@dataclass
class StorageAssignment:
    columns: List[str] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)

    def add(self, column: str, value: Any):
        self.columns.append(column)
        self.values.append(value)

    def set_clause(self) -> str:
        return ", ".join(f"{column} = %s" for column in self.columns)

    def insert_clause(self) -> str:
        return f"({', '.join(self.columns)}) VALUES ({', '.join(['%s'] * len(self.columns))})"


def _row_id(row: Mapping[str, Any]):
    for key in ("UserId", "UserID", "id"):
        if key in row:
            return row[key]
    return None


def from_storage_row(row: Mapping[str, Any]) -> dict:
    name = split_full_name(row.get("FullName"))
    record = {
        "id": _row_id(row),
        "firstName": name.first,
        "lastName": name.last,
        "email": row.get("Email"),
        "phone": row.get("Phone"),
        "roles": decode_roles(row.get("Roles")),
        "status": row.get("Status") or "Active",
        "hiredDate": row.get("hired_date"),
        "lastLogin": row.get("last_login"),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }
    # Admin screens read both spellings
    record["createdAt"] = record["created_at"]
    record["updatedAt"] = record["updated_at"]
    if name.middle:
        record["middleName"] = name.middle
    return record


def to_storage_assignment(
    patch: Mapping[str, Any],
    load_current_name: Optional[Callable[[], Optional[str]]] = None,
    case_policy: NameCasePolicy = NameCasePolicy.PRESERVE,
    roles_format: RolesFormat = RolesFormat.JSON,
) -> Optional[StorageAssignment]:
    """
    Build column assignments for the fields present in ``patch``.

    Returns None when the patch holds no recognized field, which callers report
    as "No fields to update" (not as a missing row).

    Name parts are recombined into a single FullName. When some of them are
    missing, ``load_current_name`` is called once to fetch the stored FullName
    and the missing parts are taken from it. A null or blank first/last name
    keeps the stored part; only the middle name can be cleared. A name that
    would come out empty is not written.
    """
    assignment = StorageAssignment()

    if any(key in patch for key in NAME_FIELDS):
        given = {key: (patch.get(key) or "").strip() for key in NAME_FIELDS}
        needs_current = "middleName" not in patch or not given["firstName"] or not given["lastName"]

        current = PersonName(first="", last="")
        if load_current_name is not None and needs_current:
            current = split_full_name(load_current_name())

        middle = given["middleName"] if "middleName" in patch else current.middle
        name = PersonName(
            first=given["firstName"] or current.first,
            middle=middle or "",
            last=given["lastName"] or current.last,
        )
        full_name = join_full_name(name, case_policy)
        if full_name:
            assignment.add("FullName", full_name)

    for key, column in FIELD_COLUMNS:
        if key not in patch:
            continue
        value = patch[key]
        if key == "roles":
            value = encode_roles(value, roles_format)
        elif value is None and key in NOT_NULL_FIELDS:
            continue
        assignment.add(column, value)

    if not assignment.columns:
        return None
    return assignment
