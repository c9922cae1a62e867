"""Application configuration module."""

import os


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///bookloop.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_URL = os.getenv("APP_URL", "http://localhost:3000")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")

    # Email (logged instead of sent when EMAIL_HOST is unset)
    EMAIL_HOST = os.getenv("EMAIL_HOST")
    EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
    EMAIL_USER = os.getenv("EMAIL_USER")
    EMAIL_PASS = os.getenv("EMAIL_PASS")
    EMAIL_FROM = os.getenv("EMAIL_FROM") or EMAIL_USER or "no-reply@bookloop.local"
    PASSWORD_RESET_TTL_MINUTES = 60

    # Page access policy
    HOME_PATH = "/"
    SIGN_IN_PATH = "/signin"
    ROLE_SELECTION_PATH = "/role"
    VERIFICATION_PATH = "/verify"
    FORBIDDEN_PATH = "/403"
    ADMIN_PATH = "/admin"
    PUBLIC_PATH_PREFIXES = (
        "/auth",
        "/forgot-password",
        "/reset-password",
        "/search",
    )
    PROVIDER_PATH_PREFIXES = ("/my-listings", "/approvals", "/dashboard")
    # Requests under these prefixes bypass the page access hook.
    UNGUARDED_PATH_PREFIXES = ("/api", "/health", "/static")
