"""Configuration settings module."""
import os
from collections import namedtuple
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

TrackedUser = namedtuple('TrackedUser', 'name pronouns')

DEFAULT_PRONOUNS = "he/him"


def parse_contests(raw):
    """Parse a comma separated list of contest ids."""
    if not raw:
        return []
    return [int(part) for part in raw.split(",") if part.strip()]


def parse_users(raw):
    """Parse 'name:pronouns' pairs, e.g. 'alice:she/her,bob:he/him'."""
    users = []
    if not raw:
        return users
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        name, _, pronouns = part.partition(":")
        users.append(TrackedUser(name.strip(), pronouns.strip() or DEFAULT_PRONOUNS))
    return users


# SIM credentials
SIM_URL = os.environ.get("SIM_URL", "https://sim.13lo.pl")
SIM_USERNAME = os.environ.get("SIM_USERNAME")
SIM_PASSWORD = os.environ.get("SIM_PASSWORD")

# Discord notification sink
DISCORD_API_URL = os.environ.get("DISCORD_API_URL", "https://discord.com/api")
DISCORD_TOKEN = os.environ.get("DISCORD_TOKEN")
DISCORD_CHANNEL_ID = os.environ.get("DISCORD_CHANNEL_ID")
DISCORD_REACTION = os.environ.get("DISCORD_REACTION", "✅")

# What to watch
TRACKED_CONTESTS = parse_contests(os.environ.get("TRACKED_CONTESTS", ""))
TRACKED_USERS = parse_users(os.environ.get("TRACKED_USERS", ""))

# Polling interval in seconds, also used as the re-authentication backoff
POLLING_INTERVAL = int(os.environ.get("POLLING_INTERVAL", "60"))
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "10"))

# State management
STATE_PATH = os.environ.get("STATE_PATH", "/data/state.json")

# Keep a problem unseen when its notification fails so the next cycle retries it
AT_LEAST_ONCE_DELIVERY = os.environ.get(
    "AT_LEAST_ONCE_DELIVERY", "false").lower() == "true"

# Logging
LOG_DIR = os.environ.get("LOG_DIR", "/app/logs")
DEBUG = os.environ.get("DEBUG", "false").lower() == "true"
