"""Environment-driven settings shared by the Koha locustfiles.

Every knob is read once at import time. Override with environment variables:

    STAFF_URL=http://koha-intra.example.org OPAC_URL=http://koha.example.org \
        STAFF_USER=koha STAFF_PASS=koha locust -f locust_circulation.py
"""

import logging
import os

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def env_bool(name, default=False):
    return os.environ.get(name, str(default)).strip().lower() in ("true", "yes", "on", "1")


def split_url(url):
    """Split ``proto://host[/path]`` into ``(proto, host[/path])``."""
    if "://" not in url:
        raise ValueError(f"URL has no protocol: {url!r}")
    protocol, host = url.split("://", 1)
    return protocol, host.rstrip("/")


def api_root(staff_url, user, password):
    """Staff base URL with basic-auth credentials embedded in it."""
    protocol, host = split_url(staff_url)
    return f"{protocol}://{user}:{password}@{host}"


# ── Targets ────────────────────────────────────────────────────────────────
STAFF_URL = os.environ.get("STAFF_URL", "http://kohadev-intra.localhost").rstrip("/")
OPAC_URL = os.environ.get("OPAC_URL", "http://kohadev.localhost").rstrip("/")
STAFF_USER = os.environ.get("STAFF_USER", "koha")
STAFF_PASS = os.environ.get("STAFF_PASS", "koha")

API_PREFIX = "/api/v1"
API_ROOT = api_root(STAFF_URL, STAFF_USER, STAFF_PASS)

# ── Pacing ─────────────────────────────────────────────────────────────────
SETUP_PAUSE = env_float("KOHA_SETUP_PAUSE", 10.0)
CIRC_PAUSE = env_float("KOHA_CIRC_PAUSE", 3.0)
WAIT_MIN = env_float("KOHA_WAIT_MIN", 1.0)
WAIT_MAX = env_float("KOHA_WAIT_MAX", 3.0)

# ── Data / verification ────────────────────────────────────────────────────
PER_PAGE = env_int("KOHA_PER_PAGE", 500)
LIBRARY_INDEX = env_int("KOHA_LIBRARY_INDEX", 1)
VERIFY_CHECKIN = env_bool("KOHA_VERIFY_CHECKIN", False)
CHECK_PASS_RATE = env_float("KOHA_CHECK_PASS_RATE", 1.0)
WORDS_FILE = os.environ.get("KOHA_WORDS_FILE", os.path.join(BASE_DIR, "words_alpha.txt"))
SCREENSHOT_DIR = os.environ.get("KOHA_SCREENSHOT_DIR", ".")

logger.info("Staff URL: %s", STAFF_URL)
logger.info("Staff user: %s", STAFF_USER)
logger.info("OPAC URL: %s", OPAC_URL)
