"""
Visitor-side cache: player lookups with a flat TTL, and the recent
nicknames list shown under the quick search box.

Both live in a key-value storage backend (see storage.py) as JSON strings
under the keys "playerCache" and "recentNicks". Storage and parse errors are
logged and swallowed; callers always get a usable value back.

Lookups that failed are remembered in memory for a minute so the views do
not repeat them on every rerun.
"""
import json
import time
import logging
from .config import (
    CACHE_DURATION_MS, CACHE_SWEEP_INTERVAL_MS, FAILED_LOOKUP_TTL_MS, MAX_RECENT_NICKS,
    PLAYER_CACHE_KEY, RECENT_NICKS_KEY
)
from .storage import StorageError

logger = logging.getLogger(__name__)

def now_ms():
    return int(time.time() * 1000)


class LocalCache:
    def __init__(self, storage, clock=None, ttl_ms=CACHE_DURATION_MS, max_recent=MAX_RECENT_NICKS,
                 failed_ttl_ms=FAILED_LOOKUP_TTL_MS):
        self.storage = storage
        self.clock = clock or now_ms
        self.ttl_ms = ttl_ms
        self.max_recent = max_recent
        self.failed_ttl_ms = failed_ttl_ms
        # nick -> time of the last failed lookup; memory only, never persisted
        self._failed_lookups = {}

    # Raw JSON access

    def safe_get_item(self, key, default=None):
        try:
            raw = self.storage.get_item(key)
        except StorageError as e:
            logger.warning("Storage read failed for %s: %s", key, e)
            return default
        if not raw:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed JSON stored under %s", key)
            return default

    def safe_set_item(self, key, value):
        try:
            self.storage.set_item(key, json.dumps(value, ensure_ascii=False))
            return True
        except (StorageError, TypeError, ValueError) as e:
            logger.warning("Storage write failed for %s: %s", key, e)
            return False

    # Player cache

    def _load_player_cache(self):
        blob = self.safe_get_item(PLAYER_CACHE_KEY, {})
        return blob if isinstance(blob, dict) else {}

    def _is_fresh(self, entry, now):
        if not isinstance(entry, dict):
            return False
        ts = entry.get("timestamp")
        if not isinstance(ts, (int, float)) or isinstance(ts, bool):
            return False
        return now - ts < self.ttl_ms

    def save_player_data(self, nick, data):
        cache = self._load_player_cache()
        entry = dict(data)
        entry["timestamp"] = self.clock()
        cache[nick] = entry
        self.safe_set_item(PLAYER_CACHE_KEY, cache)

    def get_player_data(self, nick):
        entry = self._load_player_cache().get(nick)
        if self._is_fresh(entry, self.clock()):
            return entry
        return None

    def clean_expired_cache(self):
        cache = self._load_player_cache()
        now = self.clock()
        expired = [nick for nick, entry in cache.items() if not self._is_fresh(entry, now)]
        for nick in expired:
            del cache[nick]
        if expired:
            self.safe_set_item(PLAYER_CACHE_KEY, cache)
            logger.debug("Removed %d expired player cache entries", len(expired))
        return len(expired)

    # Failed lookups

    def remember_failed_lookup(self, nick):
        self._failed_lookups[nick] = self.clock()

    def lookup_recently_failed(self, nick):
        failed_at = self._failed_lookups.get(nick)
        if failed_at is None:
            return False
        if self.clock() - failed_at >= self.failed_ttl_ms:
            del self._failed_lookups[nick]
            return False
        return True

    def forget_failed_lookup(self, nick):
        self._failed_lookups.pop(nick, None)

    # Recent nicknames

    def load_recent_nicks(self):
        data = self.safe_get_item(RECENT_NICKS_KEY, [])
        if not isinstance(data, list):
            return []
        return [n for n in data if isinstance(n, str)]

    def save_recent_nick_sync(self, nick):
        lowered = nick.lower()
        nicks = [n for n in self.load_recent_nicks() if n.lower() != lowered]
        nicks.insert(0, nick)
        nicks = nicks[:self.max_recent]
        self.safe_set_item(RECENT_NICKS_KEY, nicks)
        return nicks


class CacheJanitor:
    """Runs clean_expired_cache at most once per interval."""

    def __init__(self, cache, interval_ms=CACHE_SWEEP_INTERVAL_MS, clock=None):
        self.cache = cache
        self.interval_ms = interval_ms
        self.clock = clock or cache.clock
        self.last_run = None

    def due(self):
        return self.last_run is None or self.clock() - self.last_run >= self.interval_ms

    def maybe_run(self):
        if not self.due():
            return None
        self.last_run = self.clock()
        return self.cache.clean_expired_cache()
