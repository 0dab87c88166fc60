import uuid
import logging
import requests
import streamlit as st
from .config import (
    VIMEWORLD_API_URL, DIRECTORY_API_URL, CORS_PROXY_URL, HTTP_TIMEOUT,
    DEFAULT_STORAGE_FILE
)
from .utils import get_secret, get_bool_secret
from .api import VimeWorldClient, DirectoryClient
from .storage import SessionStateStorage, FileStorage
from .cache import LocalCache, CacheJanitor
from .search import SearchService
from .directory import DirectoryController

logger = logging.getLogger(__name__)

@st.cache_resource(ttl=3600)
def get_http_session():
    return requests.Session()

def _timeout():
    try:
        return float(get_secret("HTTP_TIMEOUT", HTTP_TIMEOUT))
    except (TypeError, ValueError):
        return HTTP_TIMEOUT

def get_vimeworld_client():
    return VimeWorldClient(
        session=get_http_session(),
        base_url=get_secret("VIMEWORLD_API_URL", VIMEWORLD_API_URL),
        timeout=_timeout(),
    )

def get_directory_client():
    return DirectoryClient(
        session=get_http_session(),
        base_url=get_secret("DIRECTORY_API_URL", DIRECTORY_API_URL),
        proxy_url=get_secret("CORS_PROXY_URL", CORS_PROXY_URL),
        use_proxy=get_bool_secret("USE_CORS_PROXY", True),
        timeout=_timeout(),
    )

def get_visitor_id():
    if 'visitor_id' not in st.session_state:
        st.session_state['visitor_id'] = uuid.uuid4().hex
    return st.session_state['visitor_id']

def get_storage():
    backend = str(get_secret("STORAGE_BACKEND", "session")).lower()
    if backend == "file":
        return FileStorage(get_secret("STORAGE_PATH", DEFAULT_STORAGE_FILE), namespace=get_visitor_id())
    if backend != "session":
        logger.warning("Unknown STORAGE_BACKEND %r, using session storage", backend)
    return SessionStateStorage()

def get_local_cache():
    if 'local_cache' not in st.session_state:
        st.session_state['local_cache'] = LocalCache(get_storage())
    return st.session_state['local_cache']

def get_cache_janitor():
    if 'cache_janitor' not in st.session_state:
        st.session_state['cache_janitor'] = CacheJanitor(get_local_cache())
    return st.session_state['cache_janitor']

def get_search_service():
    return SearchService(get_vimeworld_client(), get_local_cache())

def get_directory_controller():
    if 'directory' not in st.session_state:
        st.session_state['directory'] = DirectoryController(get_directory_client())
    return st.session_state['directory']
