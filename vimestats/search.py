"""
Quick player search: resolves what the visitor typed (a nickname or
"id:<number>") to the canonical username, records it in the recent
nicknames list and produces the player page URL to navigate to.
"""
import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .api import ApiError
from .utils import player_url

logger = logging.getLogger(__name__)

ID_PREFIX = "id:"
DIGITS_RE = re.compile(r"^\d+$")

MSG_ID_DIGITS_ONLY = 'После "id:" должны быть только цифры'
MSG_ID_NOT_FOUND = 'Игрок с таким ID не найден'
MSG_NOT_FOUND = 'Игрок не найден'
MSG_ID_ERROR = 'Произошла ошибка при поиске игрока по ID'
MSG_ERROR = 'Произошла ошибка при поиске игрока'

NOOP = "noop"
REDIRECT = "redirect"
INVALID = "invalid"
NOT_FOUND = "not_found"
ERROR = "error"


@dataclass
class SearchOutcome:
    kind: str
    username: Optional[str] = None
    url: Optional[str] = None
    message: Optional[str] = None
    recent_nicks: List[str] = field(default_factory=list)

    @property
    def ok(self):
        return self.kind == REDIRECT


class SearchService:
    def __init__(self, client, cache):
        self.client = client
        self.cache = cache

    def get_original_username(self, input_name):
        try:
            player = self.client.get_user_by_name(input_name)
        except ApiError as e:
            logger.error("Could not resolve nickname %r: %s", input_name, e)
            return None
        return player.username if player else None

    def get_player_by_id(self, player_id):
        try:
            return self.client.get_user_by_id(player_id)
        except ApiError as e:
            logger.error("Could not load player id %s: %s", player_id, e)
            return None

    def fetch_player_online_status(self, username):
        try:
            return self.client.get_online_status(username)
        except ApiError as e:
            logger.warning("Online status unavailable for %s: %s", username, e)
            return None

    def load_player(self, nick):
        """
        Fetches a player and stores its rank and colors in the local cache.
        Returns None when no such player exists; ApiError propagates.
        """
        player = self.client.get_user_by_name(nick)
        if player:
            self.cache.forget_failed_lookup(nick)
            self.cache.save_player_data(nick, player.cache_entry())
        return player

    def refresh_player_data(self, nick):
        """Like load_player, but never raises and skips nicks that just failed."""
        if self.cache.lookup_recently_failed(nick):
            return None
        try:
            player = self.load_player(nick)
        except ApiError as e:
            logger.error("Could not refresh player data for %s: %s", nick, e)
            player = None
        if player is None:
            self.cache.remember_failed_lookup(nick)
        return player

    def save_recent_nick(self, nick, on_update=None):
        """
        Records a nickname using its canonical spelling. If the lookup fails
        on the network the typed nickname is stored instead; an empty lookup
        result stores nothing.
        """
        try:
            player = self.client.get_user_by_name(nick)
        except ApiError as e:
            logger.error("Could not resolve nickname %r, saving as typed: %s", nick, e)
            nicks = self.cache.save_recent_nick_sync(nick)
        else:
            if not player:
                return None
            nicks = self.cache.save_recent_nick_sync(player.username)
        if on_update:
            on_update(nicks)
        return nicks

    def search_and_redirect(self, input_name, input_control=None, on_update=None):
        if not input_name or not input_name.strip():
            return SearchOutcome(NOOP)

        if input_control is not None:
            input_control.disabled = True
        try:
            if input_name.lower().startswith(ID_PREFIX):
                return self._search_by_id(input_name[len(ID_PREFIX):].strip(), on_update)
            return self._search_by_name(input_name.strip(), on_update)
        finally:
            if input_control is not None:
                input_control.disabled = False

    def _search_by_id(self, player_id, on_update):
        if not DIGITS_RE.match(player_id):
            return SearchOutcome(INVALID, message=MSG_ID_DIGITS_ONLY)
        try:
            player = self.client.get_user_by_id(player_id)
            if not player:
                return SearchOutcome(NOT_FOUND, message=MSG_ID_NOT_FOUND)
            return self._redirect(player.username, on_update)
        except Exception:
            logger.exception("Search by id %s failed", player_id)
            return SearchOutcome(ERROR, message=MSG_ID_ERROR)

    def _search_by_name(self, input_name, on_update):
        try:
            player = self.client.get_user_by_name(input_name)
            if not player:
                return SearchOutcome(NOT_FOUND, message=MSG_NOT_FOUND)
            return self._redirect(player.username, on_update)
        except Exception:
            logger.exception("Search for %r failed", input_name)
            return SearchOutcome(ERROR, message=MSG_ERROR)

    def _redirect(self, username, on_update):
        nicks = self.cache.save_recent_nick_sync(username)
        if on_update:
            on_update(nicks)
        return SearchOutcome(REDIRECT, username=username, url=player_url(username), recent_nicks=nicks)
