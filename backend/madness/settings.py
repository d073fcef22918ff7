"""Shared settings read from the environment."""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./madness.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

OPTIONS_PATH = Path(os.getenv("OPTIONS_PATH", str(PROJECT_ROOT / "data" / "options.json")))

DEFAULT_TENANTS = [
    "Andrew King",
    "Paul Morse",
    "John Wainwright",
    "Joe Wainwright",
    "Job Gregory",
    "JJ Greco",
]


def _tenant_names() -> List[str]:
    raw = os.getenv("MADNESS_TENANTS", "")
    names = [n.strip() for n in raw.split(",") if n.strip()]
    return names or list(DEFAULT_TENANTS)


TENANT_NAMES = _tenant_names()

UNDO_LIMIT = int(os.getenv("MADNESS_UNDO_LIMIT", "50"))

BALLOT_SIZE = 5
TARGET_TIMES_RANKED = 2
RAW_DEFAULT_LIMIT = 5000
RAW_MAX_LIMIT = 20000
