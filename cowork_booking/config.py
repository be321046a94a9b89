import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

API_URL = os.getenv("COWORK_API_URL", "http://localhost:1010").rstrip("/") + "/"

try:
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "5"))
except ValueError as e:
    raise ValueError("REQUEST_TIMEOUT and PAGE_SIZE must be numeric") from e

SESSION_FILE = Path(
    os.getenv("SESSION_FILE", str(Path.home() / ".cowork_booking" / "currentUser.json"))
).expanduser()

DOWNLOAD_DIR = Path(os.getenv("DOWNLOAD_DIR", ".")).expanduser()

# Used when the plan catalog has no entry for the requested type
MONTHLY_FALLBACK_PRICE = 650
YEARLY_FALLBACK_PRICE = 7000

EVENT_PLACEHOLDER_EMAIL = "evenement@coworkspace.com"

SIGNIN_ROUTE = "/signin"
HOME_ROUTE = "/"
