
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me-in-production")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

    # hourly slots, both ends inclusive
    FIRST_SLOT_HOUR = int(os.getenv("FIRST_SLOT_HOUR", "9"))
    LAST_SLOT_HOUR = int(os.getenv("LAST_SLOT_HOUR", "22"))
    MAX_PARTY_SIZE = int(os.getenv("MAX_PARTY_SIZE", "20"))

    BOOKING_RATE_MAX = int(os.getenv("BOOKING_RATE_MAX", "12"))
    BOOKING_RATE_WINDOW = int(os.getenv("BOOKING_RATE_WINDOW", "60"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # (table_number, capacity) pairs created by `flask seed`
    SEED_TABLES = [(1, 2), (2, 2), (3, 4), (4, 4), (5, 4), (6, 6), (7, 8)]
    SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")


class TestConfig(Config):
    TESTING = True
    JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BOOKING_RATE_MAX = 0
    LOG_LEVEL = "WARNING"
