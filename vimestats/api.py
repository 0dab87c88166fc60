"""
HTTP clients for the two upstream services:

- the public VimeWorld API (player lookup by name/id, online session);
- the player directory API (paginated player list and per-rank counts),
  normally reached through a public CORS proxy.

Low-level calls raise ApiError subclasses; callers decide how to surface
them. Nothing here retries.
"""
import logging
import urllib.parse
import requests
from .config import (
    VIMEWORLD_API_URL, DIRECTORY_API_URL, CORS_PROXY_URL, HTTP_TIMEOUT, PAGE_SIZE
)
from .models import Player, Pagination, DirectoryPage

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Accept': 'application/json, text/plain, */*',
    'User-Agent': 'vimestats-portal/1.0',
}


class ApiError(Exception):
    pass


class TransportError(ApiError):
    pass


class HttpStatusError(ApiError):
    def __init__(self, status_code, url):
        super().__init__(f"HTTP error! status: {status_code}")
        self.status_code = status_code
        self.url = url


class UnexpectedResponseShape(ApiError):
    def __init__(self, message, payload=None):
        super().__init__(message)
        self.payload = payload


def _get_json(session, url, timeout, params=None):
    try:
        r = session.get(url, params=params, headers=DEFAULT_HEADERS, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}") from e
    if not r.ok:
        raise HttpStatusError(r.status_code, url)
    try:
        return r.json()
    except ValueError as e:
        raise UnexpectedResponseShape(f"Response from {url} is not JSON") from e


def parse_directory_response(payload):
    """
    Normalizes a directory API payload into a DirectoryPage.

    Accepted shape: {"success": true, "response": R} where R is either a list
    of players or {"pagination": {...}, "data": [...]} (or "players" instead
    of "data"). Anything else raises UnexpectedResponseShape.
    """
    if not isinstance(payload, dict) or not payload.get("success") or payload.get("response") is None:
        raise UnexpectedResponseShape("Unexpected directory payload", payload)

    response = payload["response"]
    pagination = None
    if isinstance(response, list):
        records = response
    elif isinstance(response, dict):
        if isinstance(response.get("pagination"), dict):
            pagination = Pagination.from_api(response["pagination"])
        if isinstance(response.get("data"), list):
            records = response["data"]
        elif isinstance(response.get("players"), list):
            records = response["players"]
        else:
            raise UnexpectedResponseShape("Directory response has no player list", response)
    else:
        raise UnexpectedResponseShape("Unexpected directory response type", response)

    players = []
    for record in records:
        try:
            players.append(Player.from_api(record))
        except ValueError as e:
            raise UnexpectedResponseShape(f"Malformed player record: {e}", record) from e
    return DirectoryPage(players=players, pagination=pagination)


class VimeWorldClient:
    def __init__(self, session=None, base_url=VIMEWORLD_API_URL, timeout=HTTP_TIMEOUT):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _lookup(self, path):
        data = _get_json(self.session, f"{self.base_url}{path}", self.timeout)
        if not isinstance(data, list):
            raise UnexpectedResponseShape(f"Expected a list from {path}", data)
        if not data:
            return None
        return Player.from_api(data[0])

    def get_user_by_name(self, username):
        """First match for a nickname, or None when the API returns []."""
        return self._lookup(f"/user/name/{urllib.parse.quote(str(username), safe='')}")

    def get_user_by_id(self, player_id):
        return self._lookup(f"/user/{urllib.parse.quote(str(player_id), safe='')}")

    def get_online_status(self, username):
        data = _get_json(
            self.session,
            f"{self.base_url}/user/name/{urllib.parse.quote(str(username), safe='')}/session",
            self.timeout,
        )
        online = data.get("online") if isinstance(data, dict) else None
        if not isinstance(online, dict) or "value" not in online:
            return None
        return bool(online["value"])


class DirectoryClient:
    def __init__(self, session=None, base_url=DIRECTORY_API_URL, proxy_url=CORS_PROXY_URL,
                 use_proxy=True, timeout=HTTP_TIMEOUT):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip('/')
        self.proxy_url = proxy_url
        self.use_proxy = use_proxy
        self.timeout = timeout

    def target_url(self, path, params=None):
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        if params:
            url += "?" + urllib.parse.urlencode(params)
        return url

    def build_url(self, path, params=None):
        target = self.target_url(path, params)
        if self.use_proxy and self.proxy_url:
            return self.proxy_url + urllib.parse.quote(target, safe='')
        return target

    def fetch_players(self, page=1, limit=PAGE_SIZE, rank=None, search=None):
        params = {"page": page, "limit": limit, "search": search, "rank": rank}
        logger.info("Loading players from %s", self.target_url("/players", params))
        payload = _get_json(self.session, self.build_url("/players", params), self.timeout)
        return parse_directory_response(payload)

    def fetch_stats(self):
        """Aggregate player counts per rank code."""
        payload = _get_json(self.session, self.build_url("/players/stats"), self.timeout)
        if not isinstance(payload, dict) or not payload.get("success") or not payload.get("response"):
            raise UnexpectedResponseShape("Unexpected stats payload", payload)
        response = payload["response"]
        counts = response.get("ranks", response) if isinstance(response, dict) else None
        if not isinstance(counts, dict):
            raise UnexpectedResponseShape("Stats response has no rank counts", response)
        result = {}
        for code, count in counts.items():
            try:
                result[str(code)] = int(count)
            except (TypeError, ValueError):
                logger.warning("Skipping non-numeric count for rank %s: %r", code, count)
        return result

    def fetch_rank_count(self, rank):
        page = self.fetch_players(page=1, limit=1, rank=rank)
        if page.pagination is None:
            raise UnexpectedResponseShape(f"No pagination in count response for {rank}")
        return page.pagination.total
