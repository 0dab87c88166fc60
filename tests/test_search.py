import pytest

from vimestats.search import (
    SearchService, NOOP, REDIRECT, INVALID, NOT_FOUND, ERROR,
    MSG_ID_DIGITS_ONLY, MSG_ID_NOT_FOUND, MSG_NOT_FOUND, MSG_ERROR
)
from tests.conftest import FakeVimeWorldClient, make_player


class Control:
    def __init__(self):
        self.disabled = False
        self.history = []

    def __setattr__(self, name, value):
        if name == "disabled" and hasattr(self, "history"):
            self.history.append(value)
        object.__setattr__(self, name, value)


@pytest.fixture
def client():
    return FakeVimeWorldClient(
        by_name={"alice": make_player("Alice", rank="VIP", custom_colors=["ff0000"])},
        by_id={"42": make_player("Bob")},
    )


@pytest.fixture
def service(client, cache):
    return SearchService(client, cache)


@pytest.mark.parametrize("text", ["", "   ", None])
def test_blank_input_is_noop(service, client, text):
    control = Control()
    outcome = service.search_and_redirect(text, control)
    assert outcome.kind == NOOP
    assert client.calls == []
    assert control.history == []


def test_search_by_name_uses_canonical_username(service, cache):
    updates = []
    outcome = service.search_and_redirect("ALICE", on_update=updates.append)
    assert outcome.kind == REDIRECT
    assert outcome.username == "Alice"
    assert outcome.url == "?username=Alice"
    assert updates == [["Alice"]]
    assert cache.load_recent_nicks() == ["Alice"]


def test_search_by_id(service, client):
    outcome = service.search_and_redirect("ID: 42")
    assert outcome.kind == REDIRECT
    assert outcome.username == "Bob"
    assert client.calls == [("id", "42")]


@pytest.mark.parametrize("text", ["id:abc", "id:", "Id:12a", "id:-5"])
def test_id_prefix_requires_digits(service, client, cache, text):
    control = Control()
    outcome = service.search_and_redirect(text, control)
    assert outcome.kind == INVALID
    assert outcome.message == MSG_ID_DIGITS_ONLY
    assert client.calls == []
    assert control.history == [True, False]
    assert cache.load_recent_nicks() == []


def test_not_found_messages(service, cache):
    by_name = service.search_and_redirect("nobody")
    by_id = service.search_and_redirect("id:999")
    assert (by_name.kind, by_name.message) == (NOT_FOUND, MSG_NOT_FOUND)
    assert (by_id.kind, by_id.message) == (NOT_FOUND, MSG_ID_NOT_FOUND)
    assert cache.load_recent_nicks() == []


def test_network_failure_is_reported_distinctly(cache):
    service = SearchService(FakeVimeWorldClient(fail=True), cache)
    control = Control()
    outcome = service.search_and_redirect("alice", control)
    assert outcome.kind == ERROR
    assert outcome.message == MSG_ERROR
    assert control.history == [True, False]


def test_control_reenabled_when_callback_raises(service):
    control = Control()

    def broken(_nicks):
        raise RuntimeError("ui gone")

    outcome = service.search_and_redirect("alice", control, on_update=broken)
    assert outcome.kind == ERROR
    assert control.disabled is False


def test_lookup_helpers_return_none_on_failure(cache):
    service = SearchService(FakeVimeWorldClient(fail=True), cache)
    assert service.get_original_username("alice") is None
    assert service.get_player_by_id("1") is None
    assert service.fetch_player_online_status("alice") is None
    assert service.refresh_player_data("alice") is None


def test_save_recent_nick_falls_back_to_typed_nick(cache):
    offline = SearchService(FakeVimeWorldClient(fail=True), cache)
    assert offline.save_recent_nick("aLiCe") == ["aLiCe"]


def test_save_recent_nick_prefers_canonical(service, cache):
    updates = []
    assert service.save_recent_nick("alice", on_update=updates.append) == ["Alice"]
    assert updates == [["Alice"]]
    assert service.save_recent_nick("nobody") is None


def test_refresh_player_data_fills_cache(service, cache):
    player = service.refresh_player_data("alice")
    assert player.username == "Alice"
    cached = cache.get_player_data("alice")
    assert cached["rank"] == "VIP"
    assert cached["customColors"] == ["ff0000"]
    assert cached["username"] == "Alice"


def test_failed_refresh_is_not_retried_for_a_minute(cache, clock):
    client = FakeVimeWorldClient(fail=True)
    service = SearchService(client, cache)

    assert service.refresh_player_data("alice") is None
    assert service.refresh_player_data("alice") is None
    assert client.calls == [("name", "alice")]

    clock.advance(60 * 1000)
    client.fail = False
    client.by_name["alice"] = make_player("Alice")
    assert service.refresh_player_data("alice").username == "Alice"
    assert len(client.calls) == 2
    assert not cache.lookup_recently_failed("alice")


def test_unknown_nick_refresh_is_remembered(service, client):
    assert service.refresh_player_data("nobody") is None
    assert service.refresh_player_data("nobody") is None
    assert client.calls == [("name", "nobody")]
