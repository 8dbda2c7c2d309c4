import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, DEFAULT_BUSY_TIMEOUT_S

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = Path(os.environ.get("STOCK_LEDGER_DB", DATA_PATH / DB_FILE_NAME))

BUSY_TIMEOUT_S = float(os.environ.get("STOCK_LEDGER_BUSY_TIMEOUT", DEFAULT_BUSY_TIMEOUT_S))

# optional JSON-lines log file for sale events; stderr only when unset
LOG_FILE = os.environ.get("STOCK_LEDGER_LOG_FILE") or None
