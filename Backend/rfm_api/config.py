import os
from dotenv import load_dotenv

load_dotenv()

# Database configuration (env defaults)
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "rfm_db")
DB_PORT = int(os.getenv("DB_PORT", 3306))
# Optional CA bundle for hosted MySQL (e.g. Aiven requires TLS)
DB_SSL_CA = os.getenv("DB_SSL_CA", "")

# Connection pool sizing
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_POOL_MAX_OVERFLOW = int(os.getenv("DB_POOL_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 60))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", 3600))

# JWT settings
JWT_SECRET = os.getenv("JWT_SECRET", "change_this_in_production")
JWT_ALGORITHM = "HS256"
JWT_EXP_DAYS = int(os.getenv("JWT_EXP_DAYS", "1"))

# How recombined names are cased before they hit FullName columns: "preserve" | "upper"
NAME_CASE_POLICY = os.getenv("NAME_CASE_POLICY", "preserve").strip().lower()

# Storage format of Users.Roles: "json" | "csv"
USERS_ROLES_FORMAT = os.getenv("USERS_ROLES_FORMAT", "json").strip().lower()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
