"""
Foot Clinic Configuration
=========================
Centralised runtime settings. Loads the project-level .env file and exposes
plain module constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# Empty path keeps the clinic state in memory only
DATA_PATH: str = os.getenv("FOOTCLINIC_DATA_PATH", "")

LOG_LEVEL: str = os.getenv("FOOTCLINIC_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("FOOTCLINIC_LOG_FILE", "")

# ── Worklist ────────────────────────────────────────────────────────────
PHOTO_STALE_DAYS: int = int(os.getenv("FOOTCLINIC_PHOTO_STALE_DAYS", "7"))

# ── HTTP ────────────────────────────────────────────────────────────────
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FOOTCLINIC_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
