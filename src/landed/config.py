import os
import dotenv
import logging

dotenv.load_dotenv()

GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")

DEFAULT_REPO_OWNER = os.environ.get("DEFAULT_REPO_OWNER", "esphome")
DEFAULT_REPO_NAME = os.environ.get("DEFAULT_REPO_NAME", "esphome")

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "WARNING"))

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")

# release identifiers ending in this suffix are checked against MOVING_BRANCH
MOVING_BRANCH_SUFFIX = os.environ.get("MOVING_BRANCH_SUFFIX", "dev")
MOVING_BRANCH = os.environ.get("MOVING_BRANCH", "dev")

STALE_AFTER_HOURS = float(os.environ.get("STALE_AFTER_HOURS", 24))

REVALIDATE_STATUSES = [
    s.strip()
    for s in os.environ.get("REVALIDATE_STATUSES", "not-yet").split(",")
    if s.strip()
]

MAX_CONCURRENCY = int(os.environ.get("MAX_CONCURRENCY", 8))

API_RATE_LIMIT = float(os.environ.get("API_RATE_LIMIT", 10))

DISKCACHE_DIR = os.environ.get("DISKCACHE_DIR", ".landed-cache")
