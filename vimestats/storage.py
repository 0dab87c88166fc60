"""
Key-value stores standing in for browser local storage.

Every backend exposes get_item / set_item / remove_item over string values,
so LocalCache can run against the Streamlit session, a shared JSON file or a plain
dict in tests.
"""
import os
import json
import logging
import tempfile
import threading

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class QuotaExceededError(StorageError):
    pass


class MemoryStorage:
    def __init__(self, initial=None, max_bytes=None):
        self._data = dict(initial or {})
        self.max_bytes = max_bytes

    def get_item(self, key):
        return self._data.get(key)

    def set_item(self, key, value):
        value = str(value)
        if self.max_bytes is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.max_bytes:
                raise QuotaExceededError(f"Storage quota of {self.max_bytes} bytes exceeded")
        self._data[key] = value

    def remove_item(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class SessionStateStorage:
    """Per-visitor storage kept in st.session_state."""

    def __init__(self, namespace="local_storage", state=None):
        if state is None:
            import streamlit as st
            state = st.session_state
        if namespace not in state:
            state[namespace] = {}
        self._state = state
        self._namespace = namespace

    @property
    def _data(self):
        return self._state[self._namespace]

    def get_item(self, key):
        return self._data.get(key)

    def set_item(self, key, value):
        self._data[key] = str(value)

    def remove_item(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())




# One lock per resolved path, shared by every FileStorage on that file
_path_locks = {}
_path_locks_guard = threading.Lock()


def _lock_for(path):
    key = os.path.abspath(path)
    with _path_locks_guard:
        if key not in _path_locks:
            _path_locks[key] = threading.Lock()
        return _path_locks[key]


class FileStorage:
    """
    JSON document on disk shared by all visitors of the process.

    Each instance reads and writes only its own namespace (one per visitor),
    stored as {namespace: {key: value}}. Writes go to a unique temp file that
    replaces the document atomically.
    """

    def __init__(self, path, namespace="default"):
        self.path = path
        self.namespace = namespace
        self._lock = _lock_for(path)

    def _read_all(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory,
                                             suffix=".tmp", delete=False) as f:
                tmp_path = f.name
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def _own(self, data):
        section = data.get(self.namespace)
        return section if isinstance(section, dict) else {}

    def get_item(self, key):
        with self._lock:
            return self._own(self._read_all()).get(key)

    def set_item(self, key, value):
        with self._lock:
            data = self._read_all()
            section = self._own(data)
            section[key] = str(value)
            data[self.namespace] = section
            self._write_all(data)

    def remove_item(self, key):
        with self._lock:
            data = self._read_all()
            section = self._own(data)
            if key in section:
                del section[key]
                data[self.namespace] = section
                self._write_all(data)

    def keys(self):
        with self._lock:
            return list(self._own(self._read_all()).keys())
