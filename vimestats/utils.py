import os
import logging
import urllib.parse
import streamlit as st
from .config import SKIN_URL, DEFAULT_SKIN, LOG_FORMAT

logger = logging.getLogger(__name__)

PLURAL_DAYS = ('день', 'дня', 'дней')
PLURAL_HOURS = ('час', 'часа', 'часов')
PLURAL_MINUTES = ('минута', 'минуты', 'минут')
PLURAL_SECONDS = ('секунда', 'секунды', 'секунд')

def get_secret(key, default=None):
    # st.secrets raises when no secrets.toml is present at all
    try:
        if key in st.secrets:
            return st.secrets[key]

        # Check specifically in 'vimestats' section if not found at root
        if "vimestats" in st.secrets and key in st.secrets["vimestats"]:
            return st.secrets["vimestats"][key]
    except Exception:
        pass

    # Fallback to env
    return os.getenv(key, default)

def get_bool_secret(key, default=False):
    val = get_secret(key, None)
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "yes", "on")

def configure_logging(level=None):
    level = level or get_secret("LOG_LEVEL", "INFO")
    root = logging.getLogger("vimestats")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(str(level).upper())
    return root

def get_ending(number, endings):
    """
    Picks the Russian plural form for `number`.
    `endings` is (form for 1, form for 2-4, form for 5-20).
    """
    if number == 0:
        return endings[2]
    last_digit = number % 10
    last_two_digits = number % 100

    if 11 <= last_two_digits <= 19:
        return endings[2]
    if last_digit == 1:
        return endings[0]
    if 2 <= last_digit <= 4:
        return endings[1]
    return endings[2]

def format_playtime(seconds, full=False):
    """
    Formats played seconds in Russian.
    Short form keeps only the largest non-zero unit, full form lists every
    unit from the largest non-zero one down to seconds.
    """
    seconds = int(seconds or 0)
    days = seconds // (3600 * 24)
    hours = (seconds % (3600 * 24)) // 3600
    minutes = (seconds % 3600) // 60
    remaining = seconds % 60

    if not full:
        if days > 0:
            return f"{days} {get_ending(days, PLURAL_DAYS)}"
        if hours > 0:
            return f"{hours} {get_ending(hours, PLURAL_HOURS)}"
        if minutes > 0:
            return f"{minutes} {get_ending(minutes, PLURAL_MINUTES)}"
        return f"{remaining} {get_ending(remaining, PLURAL_SECONDS)}"

    parts = []
    if days > 0:
        parts.append(f"{days} {get_ending(days, PLURAL_DAYS)}")
    if hours > 0 or days > 0:
        parts.append(f"{hours} {get_ending(hours, PLURAL_HOURS)}")
    if minutes > 0 or hours > 0 or days > 0:
        parts.append(f"{minutes} {get_ending(minutes, PLURAL_MINUTES)}")
    parts.append(f"{remaining} {get_ending(remaining, PLURAL_SECONDS)}")
    return " ".join(parts)

def format_play_time_short(seconds):
    # Directory column: "0ч", "5ч", "2д 3ч"
    if not seconds:
        return "0ч"
    hours = int(seconds) // 3600
    days = hours // 24
    if days > 0:
        return f"{days}д {hours % 24}ч"
    return f"{hours}ч"

def format_count(number):
    return f"{int(number or 0):,}".replace(",", " ")

def normalize_colors(value):
    if not value:
        return []
    if isinstance(value, str):
        return [c.strip().lstrip('#') for c in value.split(',') if c.strip()]
    if isinstance(value, (list, tuple)):
        return [str(c).strip().lstrip('#') for c in value if c and str(c).strip()]
    logger.warning("Ignoring custom colors of unexpected type %s", type(value).__name__)
    return []

def helm_url(username):
    return f"{SKIN_URL}/helm/3d/{urllib.parse.quote(username or DEFAULT_SKIN)}.png"

def head_url(username):
    return f"{SKIN_URL}/head/{urllib.parse.quote(username or DEFAULT_SKIN)}.png"

def default_helm_url():
    return helm_url(DEFAULT_SKIN)

def player_url(username):
    return "?username=" + urllib.parse.quote(username, safe="")
