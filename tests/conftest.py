import pytest
import requests

from vimestats.api import TransportError
from vimestats.cache import LocalCache
from vimestats.models import Player, Pagination, DirectoryPage
from vimestats.storage import MemoryStorage


class FakeClock:
    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self.invalid_json:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Maps exact URLs to responses (or exceptions) and records requests."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append(url)
        result = self.routes.get(url)
        if result is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(result, Exception):
            raise result
        return result


class FakeVimeWorldClient:
    def __init__(self, by_name=None, by_id=None, online=None, fail=False):
        self.by_name = {k.lower(): v for k, v in (by_name or {}).items()}
        self.by_id = by_id or {}
        self.online = online or {}
        self.fail = fail
        self.calls = []

    def get_user_by_name(self, username):
        self.calls.append(("name", username))
        if self.fail:
            raise TransportError("network down")
        return self.by_name.get(username.lower())

    def get_user_by_id(self, player_id):
        self.calls.append(("id", player_id))
        if self.fail:
            raise TransportError("network down")
        return self.by_id.get(str(player_id))

    def get_online_status(self, username):
        if self.fail:
            raise TransportError("network down")
        return self.online.get(username)


class FakeDirectoryClient:
    """Replays queued results, then echoes the requested page of `total_pages`."""

    def __init__(self, results=None, total_pages=1):
        self.results = list(results or [])
        self.total_pages = total_pages
        self.calls = []

    def fetch_players(self, page=1, limit=100, rank=None, search=None):
        self.calls.append({"page": page, "limit": limit, "rank": rank, "search": search})
        if self.results:
            result = self.results.pop(0)
        else:
            result = make_page([make_player(f"p{page}")], page=page, total_pages=self.total_pages,
                               has_next=page < self.total_pages, has_prev=page > 1,
                               total=self.total_pages * limit)
        if isinstance(result, Exception):
            raise result
        return result


def make_player(username, level=1, **kwargs):
    return Player(username=username, level=level, **kwargs)


def make_page(players, page=1, total_pages=1, has_next=False, has_prev=False, total=None):
    return DirectoryPage(
        players=players,
        pagination=Pagination(
            page=page,
            total_pages=total_pages,
            has_next=has_next,
            has_prev=has_prev,
            total=len(players) if total is None else total,
        ),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return LocalCache(storage, clock=clock)
