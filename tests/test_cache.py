import json
import threading
import pytest

from vimestats.cache import LocalCache, CacheJanitor
from vimestats.storage import MemoryStorage, FileStorage, SessionStateStorage

MINUTE = 60 * 1000


def test_recent_nicks_dedup_case_insensitive(cache):
    cache.save_recent_nick_sync("Nick")
    cache.save_recent_nick_sync("OTHER")
    assert cache.save_recent_nick_sync("nick") == ["nick", "OTHER"]
    assert cache.load_recent_nicks() == ["nick", "OTHER"]


def test_recent_nicks_bounded_most_recent_first(cache):
    for i in range(8):
        nicks = cache.save_recent_nick_sync(f"player{i}")
    assert nicks == ["player7", "player6", "player5", "player4", "player3"]


def test_recent_nicks_invariants_hold_for_any_sequence(cache):
    seq = ["a", "B", "c", "A", "d", "e", "f", "b", "C", "g", "a"]
    for nick in seq:
        nicks = cache.save_recent_nick_sync(nick)
        assert len(nicks) <= 5
        assert len({n.lower() for n in nicks}) == len(nicks)
        assert nicks[0] == nick


@pytest.mark.parametrize("raw", [None, "", "invalid json", "123", "{}", '"text"', "null"])
def test_load_recent_nicks_degrades_to_empty(raw, clock):
    initial = {} if raw is None else {"recentNicks": raw}
    cache = LocalCache(MemoryStorage(initial), clock=clock)
    assert cache.load_recent_nicks() == []


def test_player_cache_ttl(cache, storage, clock):
    cache.save_player_data("Nick", {"rank": "VIP", "customColors": [], "username": "Nick"})
    stored = json.loads(storage.get_item("playerCache"))
    assert stored["Nick"]["timestamp"] == clock.now

    clock.advance(2 * MINUTE)
    assert cache.get_player_data("Nick") == {
        "rank": "VIP", "customColors": [], "username": "Nick", "timestamp": clock.now - 2 * MINUTE,
    }

    clock.advance(4 * MINUTE)
    assert cache.get_player_data("Nick") is None


def test_player_cache_expires_exactly_at_ttl(cache, clock):
    cache.save_player_data("Nick", {"rank": "VIP"})
    clock.advance(5 * MINUTE - 1)
    assert cache.get_player_data("Nick") is not None
    clock.advance(1)
    assert cache.get_player_data("Nick") is None


def test_player_cache_keys_are_case_sensitive(cache):
    cache.save_player_data("Nick", {"rank": "VIP"})
    assert cache.get_player_data("nick") is None


def test_player_cache_ignores_entries_without_timestamp(clock):
    storage = MemoryStorage({"playerCache": json.dumps({"Nick": {"rank": "VIP"}})})
    assert LocalCache(storage, clock=clock).get_player_data("Nick") is None


def test_clean_expired_cache(cache, storage, clock):
    cache.save_player_data("Old", {"rank": "VIP"})
    clock.advance(4 * MINUTE)
    cache.save_player_data("Fresh", {"rank": "HOLY"})
    clock.advance(2 * MINUTE)

    assert cache.clean_expired_cache() == 1
    assert set(json.loads(storage.get_item("playerCache"))) == {"Fresh"}


def test_clean_expired_cache_skips_write_when_nothing_expired(cache, clock):
    cache.save_player_data("Fresh", {"rank": "HOLY"})

    class CountingStorage(MemoryStorage):
        writes = 0

        def set_item(self, key, value):
            CountingStorage.writes += 1
            super().set_item(key, value)

    counting = CountingStorage({"playerCache": cache.storage.get_item("playerCache")})
    assert LocalCache(counting, clock=clock).clean_expired_cache() == 0
    assert CountingStorage.writes == 0


def test_storage_quota_errors_are_swallowed(clock):
    cache = LocalCache(MemoryStorage(max_bytes=10), clock=clock)
    cache.save_player_data("Nick", {"rank": "VIP", "username": "Nick"})
    assert cache.get_player_data("Nick") is None
    assert cache.save_recent_nick_sync("SomeVeryLongNickname") == ["SomeVeryLongNickname"]
    assert cache.load_recent_nicks() == []


def test_janitor_runs_once_per_interval(cache, clock):
    cache.save_player_data("Old", {"rank": "VIP"})
    janitor = CacheJanitor(cache, interval_ms=MINUTE)

    assert janitor.maybe_run() == 0
    clock.advance(30 * 1000)
    assert janitor.maybe_run() is None

    clock.advance(6 * MINUTE)
    assert janitor.maybe_run() == 1


def test_file_storage_persists_between_instances(tmp_path, clock):
    path = str(tmp_path / "store" / "local.json")
    LocalCache(FileStorage(path), clock=clock).save_recent_nick_sync("Nick")
    assert LocalCache(FileStorage(path), clock=clock).load_recent_nicks() == ["Nick"]


def test_file_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "local.json"
    path.write_text("{not json", encoding="utf-8")
    storage = FileStorage(str(path))
    assert storage.get_item("recentNicks") is None
    storage.set_item("recentNicks", "[]")
    assert storage.get_item("recentNicks") == "[]"


def test_session_state_storage_uses_namespace():
    state = {}
    storage = SessionStateStorage(state=state)
    storage.set_item("recentNicks", '["Nick"]')
    assert state == {"local_storage": {"recentNicks": '["Nick"]'}}
    storage.remove_item("recentNicks")
    assert storage.get_item("recentNicks") is None


def test_file_storage_concurrent_writers_keep_every_key(tmp_path):
    path = str(tmp_path / "local.json")
    writers = [FileStorage(path, namespace="shared"), FileStorage(path, namespace="shared")]

    def write(storage, prefix):
        for i in range(200):
            storage.set_item(f"{prefix}{i}", str(i))

    threads = [threading.Thread(target=write, args=(s, p)) for s, p in zip(writers, ("a", "b"))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(FileStorage(path, namespace="shared").keys()) == 400
    assert [p.name for p in tmp_path.iterdir()] == ["local.json"]


def test_file_storage_namespaces_are_isolated(tmp_path):
    path = str(tmp_path / "local.json")
    first = LocalCache(FileStorage(path, namespace="visitor-1"))
    second = LocalCache(FileStorage(path, namespace="visitor-2"))

    first.save_recent_nick_sync("Alice")
    second.save_recent_nick_sync("Bob")

    assert first.load_recent_nicks() == ["Alice"]
    assert second.load_recent_nicks() == ["Bob"]
    second.storage.remove_item("recentNicks")
    assert first.load_recent_nicks() == ["Alice"]
