import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TABLE_PATH = Path(__file__).resolve().parent / "data" / "round_of_32_combinations.json"

APP_NAME = "WC26 Bracket API"

# Offline-generated combination table (see backend/build_combination_table.py)
COMBINATION_TABLE_PATH = Path(os.getenv("COMBINATION_TABLE_PATH", str(DEFAULT_TABLE_PATH)))

# Team name shown for any slot that has no binding yet
UNRESOLVED_TEAM_LABEL = os.getenv("UNRESOLVED_TEAM_LABEL", "TBD")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())
