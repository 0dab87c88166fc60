import streamlit as st
import os
import sys

# Add project root to path to allow 'vimestats' package imports
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from vimestats.config import GLOBAL_STYLES, FONTS_HTML
from vimestats.utils import configure_logging
from vimestats.session import get_cache_janitor

# View Imports
from vimestats.views.directory import show_directory
from vimestats.views.profile import show_profile
from vimestats.views.search import show_quick_search

# Page Config
st.set_page_config(
    page_title="VimeStats",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="collapsed"
)

logger = configure_logging()

# Inject CSS
st.markdown(FONTS_HTML, unsafe_allow_html=True)
st.markdown(GLOBAL_STYLES, unsafe_allow_html=True)

# Sweep expired player cache entries (rate-limited per visitor)
get_cache_janitor().maybe_run()

# Top Navigation Bar
nav_logo, nav_links, nav_search = st.columns([1, 1, 2])
with nav_logo:
    st.markdown('<div class="nav-logo">VimeStats</div>', unsafe_allow_html=True)
with nav_links:
    if st.button("🏆 Игроки", key="nav_players", use_container_width=True):
        st.query_params.clear()
        st.rerun()
with nav_search:
    show_quick_search()

st.markdown("---")

# Render Page Content
username = st.query_params.get("username")
if username:
    show_profile(username)
else:
    show_directory()
