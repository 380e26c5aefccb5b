"""Configuration module for the MTSS school portal.

This module provides centralized configuration management, including directory
paths, API server settings, AI gateway configuration, and application defaults.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

# Blob buckets (report cards) live under this directory, one folder per bucket
STORAGE_DIR = Path(os.getenv("STORAGE_DIR", str(DATA_DIR / "storage")))

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/mtss.db")

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))
)

# Admin token for admin registration (set via ADMIN_TOKEN environment variable)
ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

MIN_PASSWORD_LENGTH = 8

# --- Teacher Invitation Configuration ---

INVITATION_EXPIRY_DAYS: int = int(os.getenv("INVITATION_EXPIRY_DAYS", "7"))

# Used to build the sign-up link when the request carries no Origin header
APP_ORIGIN: str = os.getenv("APP_ORIGIN", "http://localhost:5173")

SCHOOL_NAME: str = os.getenv("SCHOOL_NAME", "Mogwase Technical Secondary School")

# --- Email Configuration ---

SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER: Optional[str] = os.getenv("SMTP_USER")
SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
EMAIL_FROM: str = os.getenv("EMAIL_FROM", "MTSS <onboarding@mtss.local>")

# --- AI Gateway Configuration ---

# OpenAI-compatible chat completion endpoint
AI_GATEWAY_BASE_URL: str = os.getenv(
    "AI_GATEWAY_BASE_URL", "https://ai.gateway.lovable.dev/v1"
)
AI_GATEWAY_API_KEY: Optional[str] = os.getenv("AI_GATEWAY_API_KEY")
AI_MODEL: str = os.getenv("AI_MODEL", "google/gemini-3-flash-preview")
AI_MAX_TOKENS: int = int(os.getenv("AI_MAX_TOKENS", "4000"))

LESSON_PLAN_TEMPERATURE: float = float(os.getenv("LESSON_PLAN_TEMPERATURE", "0.7"))
EXTRACTION_TEMPERATURE: float = float(os.getenv("EXTRACTION_TEMPERATURE", "0.3"))

# --- Storage Buckets ---

REPORT_CARDS_BUCKET = "report-cards"