import logging
import streamlit as st
import html
from ..api import ApiError
from ..directory import name_style
from ..ranks import get_rank_name, rank_background, DEFAULT_RANK
from ..search import MSG_ERROR, MSG_NOT_FOUND
from ..session import get_search_service
from ..utils import format_playtime, helm_url, default_helm_url

logger = logging.getLogger(__name__)

def _metric_card(label, value, color="var(--text-main)"):
    return f"""<div class="custom-card" style="text-align: center;">
<div style="color: var(--text-dim); font-size: 0.8rem; text-transform: uppercase; letter-spacing: 1px;">{html.escape(label)}</div>
<div style="font-size: 1.6rem; color: {color}; margin: 10px 0;">{html.escape(str(value))}</div>
</div>"""

def show_profile(username):
    service = get_search_service()

    if st.button("← К списку игроков"):
        st.query_params.clear()
        st.rerun()

    try:
        player = service.load_player(username)
    except ApiError as e:
        logger.error("Profile lookup for %s failed: %s", username, e)
        st.error(MSG_ERROR)
        return
    if not player:
        st.error(MSG_NOT_FOUND)
        return

    badges = ""
    rank = player.rank or DEFAULT_RANK
    if rank != DEFAULT_RANK:
        badges += (f'<span class="player-rank-badge" style="background: {rank_background(rank)};">'
                   f'{html.escape(get_rank_name(rank))}</span> ')
    if player.is_prime:
        badges += '<span class="player-prime-badge">Prime</span>'

    guild_html = ""
    if player.guild:
        color = f"#{player.guild.color}" if player.guild.color else "var(--text-dim)"
        guild_html = (f'<div class="player-guild" style="font-size: 1rem;"><b style="color: {html.escape(color)};">'
                      f'[{html.escape(player.guild.tag)}]</b> {html.escape(player.guild.name)}</div>')

    # Header Card
    st.markdown(f"""<div class="custom-card" style="margin-bottom: 2rem;">
<div style="display: flex; align-items: center; gap: 20px;">
<img src="{html.escape(helm_url(player.username))}" width="72" height="72" alt="" onerror="this.src='{default_helm_url()}'">
<div>
<h2 style="margin: 0; {name_style(player.custom_colors)}">{html.escape(player.username)}</h2>
<div>{badges}</div>
{guild_html}
</div>
</div>
</div>""", unsafe_allow_html=True)

    online = service.fetch_player_online_status(player.username)
    if online is None:
        status, status_color = "Неизвестно", "var(--text-dim)"
    elif online:
        status, status_color = "Онлайн", "#2ecc71"
    else:
        status, status_color = "Оффлайн", "#e74c3c"

    # Metrics Grid
    m1, m2, m3 = st.columns(3)
    with m1:
        st.markdown(_metric_card("Уровень", player.level, "var(--primary-blue)"), unsafe_allow_html=True)
    with m2:
        st.markdown(_metric_card("Статус", status, status_color), unsafe_allow_html=True)
    with m3:
        st.markdown(_metric_card("ID", player.id if player.id is not None else "—"), unsafe_allow_html=True)

    st.markdown("<br>", unsafe_allow_html=True)
    st.markdown(_metric_card("Наиграно", format_playtime(player.played_seconds, full=True)), unsafe_allow_html=True)
