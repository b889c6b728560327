"""
Configuration settings for the hospital feedback portal.

Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("PORTAL_DATA_DIR", str(PROJECT_ROOT / "data")))

# Persisted state lives under a single key in the blob store
STORAGE_KEY = os.getenv("STORAGE_KEY", "hospital_feedbacks")

# Debug mode
DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Hospital details
HOSPITAL_NAME = os.getenv("HOSPITAL_NAME", "BỆNH VIỆN ĐA KHOA NINH THUẬN")

DEFAULT_DEPARTMENTS = [
    "Khoa Yêu cầu",
    "Khoa Khám bệnh",
    "Khoa Cấp cứu",
    "Khoa Nội",
    "Khoa Ngoại",
    "Khoa Sản",
    "Khoa Nhi",
    "Khoa Hồi sức tích cực",
    "Khoa Xét nghiệm",
    "Khoa Chẩn đoán hình ảnh",
]

# Override with a "|" separated list, e.g. PORTAL_DEPARTMENTS="Khoa Nội|Khoa Nhi"
_departments_env = os.getenv("PORTAL_DEPARTMENTS", "")
DEPARTMENTS = [d.strip() for d in _departments_env.split("|") if d.strip()] or DEFAULT_DEPARTMENTS

# Submission limits
MAX_IMAGES = int(os.getenv("MAX_IMAGES", "2"))
ID_LENGTH = int(os.getenv("ID_LENGTH", "6"))

# Placeholder admin credential (development only, not a security boundary)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
# Oldest HTTP admin sessions are dropped beyond this many
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "100"))

# Suggestion service (Ollama)
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1")
SUGGESTION_TIMEOUT = float(os.getenv("SUGGESTION_TIMEOUT", "10"))

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging for the API and the admin console."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def validate_config():
    """Validate the configuration settings."""
    errors = []

    if MAX_IMAGES < 0:
        errors.append(f"MAX_IMAGES must not be negative: {MAX_IMAGES}")

    if ID_LENGTH < 4:
        errors.append(f"ID_LENGTH is too short to be unique: {ID_LENGTH}")

    if len(set(DEPARTMENTS)) != len(DEPARTMENTS):
        errors.append("DEPARTMENTS contains duplicates")

    if not ADMIN_USERNAME or not ADMIN_PASSWORD:
        errors.append("ADMIN_USERNAME and ADMIN_PASSWORD must both be set")

    if SUGGESTION_TIMEOUT <= 0:
        errors.append(f"SUGGESTION_TIMEOUT must be positive: {SUGGESTION_TIMEOUT}")

    if errors:
        for error in errors:
            print(f"Config Error: {error}")
        return False

    return True


if __name__ == "__main__":
    print("Configuration Settings")
    print("=" * 50)
    print(f"PROJECT_ROOT: {PROJECT_ROOT}")
    print(f"DATA_DIR: {DATA_DIR}")
    print(f"STORAGE_KEY: {STORAGE_KEY}")
    print(f"HOSPITAL_NAME: {HOSPITAL_NAME}")
    print(f"DEPARTMENTS: {len(DEPARTMENTS)}")
    for department in DEPARTMENTS:
        print(f"  - {department}")
    print(f"MAX_IMAGES: {MAX_IMAGES}")
    print(f"ID_LENGTH: {ID_LENGTH}")
    print(f"MAX_SESSIONS: {MAX_SESSIONS}")
    print(f"DEBUG: {DEBUG}")
    print(f"LOG_LEVEL: {LOG_LEVEL}")
    print(f"OLLAMA_HOST: {OLLAMA_HOST}")
    print(f"OLLAMA_MODEL: {OLLAMA_MODEL}")
    print(f"SUGGESTION_TIMEOUT: {SUGGESTION_TIMEOUT}")
    print(f"API_HOST: {API_HOST}")
    print(f"API_PORT: {API_PORT}")
    print("=" * 50)
    print(f"Config valid: {validate_config()}")
