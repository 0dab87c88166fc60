import streamlit as st
import html
from ..directory import name_style
from ..ranks import get_rank_name, rank_background, DEFAULT_RANK
from ..search import REDIRECT, NOOP
from ..session import get_search_service, get_local_cache
from ..utils import head_url


class SessionInputControl:
    """Exposes a session_state flag as the `disabled` attribute of an input."""

    def __init__(self, key):
        self.key = key

    @property
    def disabled(self):
        return st.session_state.get(self.key, False)

    @disabled.setter
    def disabled(self, value):
        st.session_state[self.key] = bool(value)


def _go_to_player(username):
    st.query_params["username"] = username
    st.rerun()

def _run_search(service, query):
    control = SessionInputControl('quick_search_disabled')
    outcome = service.search_and_redirect(query, control)
    if outcome.kind == REDIRECT:
        _go_to_player(outcome.username)
    elif outcome.kind != NOOP:
        st.error(outcome.message)

def _recent_nick_html(nick, data):
    style = ""
    badge = ""
    if data:
        style = name_style(data.get('customColors') or [])
        rank = data.get('rank') or DEFAULT_RANK
        if rank != DEFAULT_RANK:
            badge = (f'<span class="player-rank" style="background: {rank_background(rank)};">'
                     f'{html.escape(get_rank_name(rank))}</span>')
    return (f'<ul class="recent-nicks"><li><img class="mini-head" src="{html.escape(head_url(nick))}" alt="">'
            f'<span style="color: #2c3e50; {style}">{html.escape(nick)}</span>{badge}</li></ul>')

def show_recent_nicks(service, cache):
    nicks = cache.load_recent_nicks()
    if not nicks:
        st.caption("Пока пусто")
        return
    for nick in nicks:
        data = cache.get_player_data(nick)
        if data is None:
            player = service.refresh_player_data(nick)
            data = player.cache_entry() if player else None
        c1, c2 = st.columns([5, 1])
        with c1:
            st.markdown(_recent_nick_html(nick, data), unsafe_allow_html=True)
        with c2:
            if st.button("→", key=f"recent_{nick}"):
                _run_search(service, nick)

def show_quick_search():
    service = get_search_service()
    cache = get_local_cache()
    disabled = SessionInputControl('quick_search_disabled').disabled

    with st.form("quick_search", border=False, clear_on_submit=False):
        c1, c2 = st.columns([5, 1])
        with c1:
            q = st.text_input("Поиск игрока", placeholder="Ник или id:12345",
                              label_visibility="collapsed", disabled=disabled)
        with c2:
            submitted = st.form_submit_button("🔍", use_container_width=True, disabled=disabled)
    if submitted:
        _run_search(service, q)

    with st.expander("Недавние поиски", expanded=False):
        show_recent_nicks(service, cache)
