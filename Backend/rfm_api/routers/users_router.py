from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging
import pymysql

from rfm_api.config import NAME_CASE_POLICY, USERS_ROLES_FORMAT
from rfm_api.database import get_connection
from rfm_api.mappers.names import NameCasePolicy
from rfm_api.mappers.roles import RolesFormat
from rfm_api.mappers.user_mapper import from_storage_row, to_storage_assignment
from rfm_api.schemas.user import UserCreate, UserUpdate
from rfm_api.utils import success_resp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

CASE_POLICY = NameCasePolicy(NAME_CASE_POLICY)
ROLES_FORMAT = RolesFormat(USERS_ROLES_FORMAT)

USER_COLUMNS = "UserId, FullName, Email, Phone, Roles, Status, hired_date, last_login, created_at, updated_at"

# Filter values the admin UI sends for "no filter"
ALL_FILTER = "All Employees"
STATUS_VALUES = ("Active", "Inactive")


def _fetch_user(cursor, user_id: int):
    cursor.execute(f"SELECT {USER_COLUMNS} FROM Users WHERE UserId = %s", (user_id,))
    return cursor.fetchone()


@router.get("")
def get_all_users(
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    connection=Depends(get_connection),
):
    """Get all users, optionally filtered by role and status"""
    try:
        conditions = []
        params = []
        if status and status != ALL_FILTER:
            conditions.append("Status = %s")
            params.append(status)
        # The role dropdown shares options with the status dropdown
        if role and role != ALL_FILTER and role not in STATUS_VALUES:
            conditions.append("Roles LIKE %s")
            params.append(f"%{role}%")

        sql = f"SELECT {USER_COLUMNS} FROM Users"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC"

        with connection.cursor() as cursor:
            cursor.execute(sql, params)
            rows = cursor.fetchall() or []

        return success_resp("Users retrieved successfully", [from_storage_row(r) for r in rows])
    except Exception as e:
        logger.exception("Error fetching users")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{user_id}")
def get_user(user_id: int, connection=Depends(get_connection)):
    """Get user by ID"""
    try:
        with connection.cursor() as cursor:
            user = _fetch_user(cursor, user_id)

        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        return success_resp("User retrieved successfully", from_storage_row(user))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error fetching user %s", user_id)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", status_code=201)
def create_user(payload: UserCreate, connection=Depends(get_connection)):
    """Create an employee record"""
    try:
        assignment = to_storage_assignment(
            payload.model_dump(),
            case_policy=CASE_POLICY,
            roles_format=ROLES_FORMAT,
        )

        with connection.cursor() as cursor:
            cursor.execute("SELECT UserId FROM Users WHERE Email = %s", (payload.email,))
            if cursor.fetchone():
                raise HTTPException(status_code=409, detail="User already exists")

            cursor.execute(f"INSERT INTO Users {assignment.insert_clause()}", assignment.values)
            connection.commit()
            user = _fetch_user(cursor, cursor.lastrowid)

        return success_resp("User created successfully", from_storage_row(user), status_code=201)
    except HTTPException:
        raise
    except pymysql.err.IntegrityError:
        connection.rollback()
        raise HTTPException(status_code=409, detail="User already exists")
    except Exception as e:
        logger.exception("Error creating user")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{user_id}")
def update_user(user_id: int, user_data: UserUpdate, connection=Depends(get_connection)):
    """Update user by ID; only the fields present in the body are written"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT UserId, FullName FROM Users WHERE UserId = %s", (user_id,))
            existing_user = cursor.fetchone()

        if not existing_user:
            raise HTTPException(status_code=404, detail="User not found")

        assignment = to_storage_assignment(
            user_data.model_dump(exclude_unset=True),
            load_current_name=lambda: existing_user.get("FullName"),
            case_policy=CASE_POLICY,
            roles_format=ROLES_FORMAT,
        )
        if assignment is None:
            raise HTTPException(status_code=400, detail="No fields to update")

        with connection.cursor() as cursor:
            # Always update updated_at
            sql = f"UPDATE Users SET {assignment.set_clause()}, updated_at = CURRENT_TIMESTAMP WHERE UserId = %s"
            cursor.execute(sql, assignment.values + [user_id])
            connection.commit()

            if cursor.rowcount == 0:
                raise HTTPException(status_code=404, detail="User not found or no changes made")

            updated_user = _fetch_user(cursor, user_id)

        return success_resp("User updated successfully", from_storage_row(updated_user))
    except HTTPException:
        raise
    except pymysql.err.IntegrityError:
        connection.rollback()
        raise HTTPException(status_code=409, detail="Email already in use")
    except Exception as e:
        logger.exception("Error updating user %s", user_id)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{user_id}")
def delete_user(user_id: int, connection=Depends(get_connection)):
    """Delete user by ID"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT UserId, FullName FROM Users WHERE UserId = %s", (user_id,))
            user = cursor.fetchone()

            if not user:
                raise HTTPException(status_code=404, detail="User not found")

            cursor.execute("DELETE FROM Users WHERE UserId = %s", (user_id,))
            connection.commit()

            if cursor.rowcount == 0:
                raise HTTPException(status_code=404, detail="User not found")

        return success_resp(f"User '{user['FullName']}' (id: {user_id}) deleted successfully", {"id": user_id})
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error deleting user %s", user_id)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{user_id}/last-login")
@router.patch("/{user_id}/login")
def update_last_login(user_id: int, connection=Depends(get_connection)):
    """Stamp last_login with the current time"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("UPDATE Users SET last_login = CURRENT_TIMESTAMP WHERE UserId = %s", (user_id,))
            connection.commit()
            if cursor.rowcount == 0:
                raise HTTPException(status_code=404, detail="User not found")

        return success_resp("User last login updated successfully", {"id": user_id})
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error updating last login for user %s", user_id)
        raise HTTPException(status_code=500, detail=str(e))
