import pymysql
from pymysql.constants import CLIENT
from pymysql.cursors import DictCursor
from fastapi import Request
from sqlalchemy.pool import QueuePool
from typing import Generator
import traceback
import logging

from rfm_api.config import (
    DB_HOST,
    DB_USER,
    DB_PASSWORD,
    DB_NAME,
    DB_PORT,
    DB_SSL_CA,
    DB_POOL_SIZE,
    DB_POOL_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_POOL_RECYCLE,
)

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


# ---------------------------------------------------------------------------
# pymysql direct helpers
# ---------------------------------------------------------------------------

def get_db_connection(use_db=True):
    """Create and return a raw database connection (not pooled)"""
    conn_params = dict(
        host=DB_HOST,
        user=DB_USER,
        password=DB_PASSWORD,
        port=DB_PORT,
        cursorclass=DictCursor,
        autocommit=False,
        # rowcount reports matched rows, so an UPDATE that changes nothing is not a miss
        client_flag=CLIENT.FOUND_ROWS,
    )
    if use_db:
        conn_params["database"] = DB_NAME
    if DB_SSL_CA:
        conn_params["ssl"] = {"ca": DB_SSL_CA}
    return pymysql.connect(**conn_params)


def create_pool() -> QueuePool:
    """
    Build the process-wide bounded connection pool.

    Connections handed out by the pool are pymysql connections with DictCursor
    as their default cursor class; calling ``close()`` on them returns them to
    the pool instead of closing the socket.
    """
    return QueuePool(
        get_db_connection,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_POOL_MAX_OVERFLOW,
        timeout=DB_POOL_TIMEOUT,
        recycle=DB_POOL_RECYCLE,
    )


def get_connection(request: Request) -> Generator:
    """FastAPI dependency: borrow one pooled connection for the request."""
    connection = request.app.state.pool.connect()
    try:
        yield connection
    finally:
        connection.close()


def ping(connection) -> bool:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1 AS ok")
        row = cursor.fetchone()
    return bool(row and row.get("ok") == 1)


# ---------------------------------------------------------------------------
# init_db: Create database and bootstrap tables
# ---------------------------------------------------------------------------

USERS_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS `Users` (
        `UserId` INT NOT NULL AUTO_INCREMENT PRIMARY KEY,
        `FullName` VARCHAR(255) NOT NULL,
        `Email` VARCHAR(150) NOT NULL UNIQUE,
        `Phone` VARCHAR(50) NULL,
        `Roles` TEXT NULL,
        `Status` VARCHAR(20) NOT NULL DEFAULT 'Active',
        `PasswordHash` VARCHAR(255) NULL,
        `hired_date` DATE NULL,
        `last_login` TIMESTAMP NULL,
        `created_at` TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        `updated_at` TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        INDEX (`Status`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
"""

CUSTOMER_ACCOUNTS_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS `customer_accounts` (
        `CustomerId` INT NOT NULL AUTO_INCREMENT PRIMARY KEY,
        `CustomerEmail` VARCHAR(150) NOT NULL UNIQUE,
        `CustomerPasswordHash` VARCHAR(255) NOT NULL,
        `CustomerFullName` VARCHAR(255) NOT NULL,
        `CustomerPhone` VARCHAR(50) NULL,
        `CustomerAddress` TEXT NULL,
        `last_login` TIMESTAMP NULL,
        `created_at` TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
"""


def init_db(pool: QueuePool):
    # 1) Create database if missing (connect without database)
    try:
        conn = get_db_connection(use_db=False)
    except Exception:
        logger.error("ERROR: Could not connect to MySQL server to create database.")
        logger.error(traceback.format_exc())
        return

    try:
        with conn.cursor() as cur:
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{DB_NAME}` "
                "DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
            )
        conn.commit()
        logger.info("Database `%s` ensured.", DB_NAME)
    except Exception:
        logger.error("ERROR: Could not create database `%s`.", DB_NAME)
        logger.error(traceback.format_exc())
        conn.rollback()
    finally:
        conn.close()

    # 2) Bootstrap the tables the API reads and writes
    conn = pool.connect()
    try:
        with conn.cursor() as cur:
            for table, ddl in (("Users", USERS_TABLE_DDL), ("customer_accounts", CUSTOMER_ACCOUNTS_TABLE_DDL)):
                try:
                    cur.execute(ddl)
                    logger.info("Table `%s` ensured.", table)
                except Exception:
                    logger.warning("Warning: Could not create table `%s`.", table)
                    logger.debug(traceback.format_exc())
        conn.commit()
    finally:
        conn.close()
