import os
import json
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """A required setting is missing; the feature that needs it is disabled."""

    def __init__(self, setting: str, feature: str):
        self.setting = setting
        self.feature = feature
        super().__init__(f"{setting} is not set, {feature} is unavailable")


# --- Database ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "serenmind")

# --- Google / Gemini ---
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-2.0-flash")
GEMINI_ANALYSIS_MODEL = os.getenv("GEMINI_ANALYSIS_MODEL", "gemini-2.0-flash")

# --- Chat ---
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "512"))
CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", "10"))
CHAT_TIMEOUT_SECONDS = float(os.getenv("CHAT_TIMEOUT_SECONDS", "30"))
SAFETY_THRESHOLD = os.getenv("SAFETY_THRESHOLD", "BLOCK_MEDIUM_AND_ABOVE")

# --- JWT sessions ---
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "168"))

# --- Metrics stream ---
METRICS_POLL_SECONDS = float(os.getenv("METRICS_POLL_SECONDS", "2.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MOOD_DISPLAY_FILE = os.getenv("MOOD_DISPLAY_FILE", "")

# Anxious, Sad, Angry, Tired and Confused share one colour in the app's
# palette. Override with MOOD_DISPLAY_FILE to give them their own.
DEFAULT_MOOD_DISPLAY = {
    "Happy": {"color": "#6A9FB5", "height": 90, "valence": 9},
    "Calm": {"color": "#A3D9A5", "height": 70, "valence": 7},
    "Neutral": {"color": "#F5E1DA", "height": 50, "valence": 5},
    "Anxious": {"color": "#F5E1DA", "height": 30, "valence": 3},
    "Stressed": {"color": "#F5E1DA", "height": 30, "valence": 3},
    "Sad": {"color": "#F5E1DA", "height": 20, "valence": 2},
    "Angry": {"color": "#F5E1DA", "height": 25, "valence": 2},
    "Tired": {"color": "#F5E1DA", "height": 35, "valence": 4},
    "Confused": {"color": "#F5E1DA", "height": 40, "valence": 4},
    "Hopeful": {"color": "#A3D9A5", "height": 75, "valence": 8},
}
DEFAULT_MOOD_STYLE = {"color": "#F5E1DA", "height": 50, "valence": 5}


def load_mood_display(path: str = MOOD_DISPLAY_FILE) -> dict:
    table = {mood: dict(style) for mood, style in DEFAULT_MOOD_DISPLAY.items()}
    if not path:
        return table
    try:
        with open(path, encoding="utf-8") as fh:
            overrides = json.load(fh)
    except (OSError, ValueError) as e:
        logger.warning("Could not read mood display file %s: %s", path, e)
        return table

    for mood, style in overrides.items():
        if not isinstance(style, dict):
            continue
        table.setdefault(mood, dict(DEFAULT_MOOD_STYLE)).update(style)
    return table


def require(value: str, setting: str, feature: str) -> str:
    if not value:
        raise ConfigurationError(setting, feature)
    return value
