# auth_router.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from datetime import datetime, timedelta, timezone
import logging
import bcrypt
import jwt

from rfm_api.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXP_DAYS, NAME_CASE_POLICY
from rfm_api.database import get_connection
from rfm_api.mappers.names import NameCasePolicy, join_full_name, split_full_name
from rfm_api.mappers.roles import decode_roles
from rfm_api.schemas.auth import LoginRequest, RegisterRequest
from rfm_api.utils import success_resp, error_resp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

CASE_POLICY = NameCasePolicy(NAME_CASE_POLICY)

# Same cost factor the stored hashes were created with
BCRYPT_ROUNDS = 10
# bcrypt ignores input past 72 bytes
BCRYPT_MAX_BYTES = 72
ADMIN_ROLE = "admin"


def _password_bytes(password: str) -> bytes:
    return password.encode()[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash; malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode())
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_jwt_token(payload: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = payload.copy()
    if expires_delta is None:
        expires_delta = timedelta(days=JWT_EXP_DAYS)
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + expires_delta, "iat": now})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def has_admin_role(roles) -> bool:
    return any(str(r).strip().lower() == ADMIN_ROLE for r in roles)


def _customer_user(row: dict) -> dict:
    return {
        "id": row["CustomerId"],
        "email": row["CustomerEmail"],
        "name": row["CustomerFullName"],
        "role": "customer",
        "phone": row.get("CustomerPhone"),
        "address": row.get("CustomerAddress"),
    }


def _employee_user(row: dict) -> dict:
    return {
        "id": row["UserId"],
        "email": row["Email"],
        "name": row["FullName"],
        "role": "employee",
        "phone": row.get("Phone"),
        "roles": decode_roles(row.get("Roles")),
    }


@router.post("/register", status_code=201)
def register_customer(body: RegisterRequest, connection=Depends(get_connection)):
    email = body.email.strip().lower()
    full_name = join_full_name(split_full_name(body.fullName), CASE_POLICY)
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT CustomerId FROM customer_accounts WHERE CustomerEmail = %s", (email,))
            if cursor.fetchone():
                return error_resp("Email already registered", status_code=400, error="DUPLICATE_EMAIL")

            cursor.execute("""
                INSERT INTO customer_accounts
                    (CustomerEmail, CustomerPasswordHash, CustomerFullName, CustomerPhone, CustomerAddress)
                VALUES (%s, %s, %s, %s, %s)
            """, (email, hash_password(body.password), full_name, body.phone or None, body.address or None))
            connection.commit()
            customer_id = cursor.lastrowid

        user = {
            "id": customer_id,
            "email": email,
            "name": full_name,
            "role": "customer",
            "phone": body.phone,
            "address": body.address,
        }
        return success_resp("Customer registered successfully", {"user": user}, status_code=201)
    except Exception as e:
        logger.exception("Error registering customer")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/login")
def login_user(body: LoginRequest, connection=Depends(get_connection)):
    """
    Login for customers and employees.
    - customer_accounts is checked first, then Users (employees)
    - employees must hold the "admin" role to sign in to the admin area
    - a successful login stamps last_login and returns the user plus a JWT
    """
    email = body.email.strip().lower()
    try:
        with connection.cursor() as cursor:
            cursor.execute("""
                SELECT CustomerId, CustomerEmail, CustomerPasswordHash, CustomerFullName,
                       CustomerPhone, CustomerAddress
                FROM customer_accounts
                WHERE CustomerEmail = %s
            """, (email,))
            customer = cursor.fetchone()

            if customer:
                if not verify_password(body.password, customer.get("CustomerPasswordHash")):
                    return error_resp("Invalid password", status_code=401, error="INVALID_PASSWORD")

                cursor.execute(
                    "UPDATE customer_accounts SET last_login = CURRENT_TIMESTAMP WHERE CustomerId = %s",
                    (customer["CustomerId"],),
                )
                connection.commit()
                user = _customer_user(customer)
            else:
                cursor.execute("""
                    SELECT UserId, Email, PasswordHash, FullName, Phone, Roles
                    FROM Users
                    WHERE Email = %s
                """, (email,))
                employee = cursor.fetchone()

                if not employee:
                    return error_resp("Email not found", status_code=401, error="USER_NOT_FOUND")

                if not verify_password(body.password, employee.get("PasswordHash")):
                    return error_resp("Invalid password", status_code=401, error="INVALID_PASSWORD")

                user = _employee_user(employee)
                if not has_admin_role(user["roles"]):
                    return error_resp("Access denied. Admin role required.", status_code=403, error="NO_ADMIN_ROLE")

                cursor.execute(
                    "UPDATE Users SET last_login = CURRENT_TIMESTAMP WHERE UserId = %s",
                    (employee["UserId"],),
                )
                connection.commit()

        token = create_jwt_token({"sub": str(user["id"]), "email": user["email"], "role": user["role"]})
        return success_resp("Login successful", {"user": user, "token": token})
    except Exception as e:
        logger.exception("Error during login")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/logout")
def logout_user():
    # Sessions live client-side; nothing to clean up server-side yet
    return success_resp("Logged out successfully")


@router.get("/me")
def get_profile(
    id: int = Query(...),
    role: str = Query(...),
    connection=Depends(get_connection),
):
    """Get the profile of a customer or employee by ID"""
    if role not in ("customer", "employee"):
        raise HTTPException(status_code=400, detail='Invalid role. Must be "customer" or "employee"')

    try:
        with connection.cursor() as cursor:
            if role == "customer":
                cursor.execute("""
                    SELECT CustomerId, CustomerEmail, CustomerFullName, CustomerPhone,
                           CustomerAddress, created_at, last_login
                    FROM customer_accounts
                    WHERE CustomerId = %s
                """, (id,))
            else:
                cursor.execute("""
                    SELECT UserId, Email, FullName, Phone, Roles, Status, hired_date, last_login
                    FROM Users
                    WHERE UserId = %s
                """, (id,))
            row = cursor.fetchone()

        if not row:
            raise HTTPException(status_code=404, detail="Customer not found" if role == "customer" else "Employee not found")

        user = _customer_user(row) if role == "customer" else _employee_user(row)
        return success_resp("Profile retrieved successfully", {"user": user})
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error fetching %s profile %s", role, id)
        raise HTTPException(status_code=500, detail=str(e))
