import streamlit as st
import plotly.express as px
import html
from ..config import apply_plotly_theme
from ..directory import (
    load_rank_counts, rank_stats_frame, IDLE, ERROR,
    MSG_NO_PLAYERS, MSG_LOADING, LOADING
)
from ..ranks import get_all_rank_codes, get_rank_name
from ..session import get_directory_controller, get_directory_client
from ..utils import format_count, default_helm_url

ALL_RANKS_LABEL = "Все ранги"

@st.cache_data(ttl=300)
def get_rank_stats():
    return load_rank_counts(get_directory_client())

def _rank_label(code, stats):
    if not code:
        return ALL_RANKS_LABEL
    label = get_rank_name(code)
    if code in stats:
        label += f" ({format_count(stats[code])})"
    return label

def _message_row(message, css_class=""):
    return f'<tr><td colspan="4"><div class="table-message {css_class}">{html.escape(message)}</div></td></tr>'

def _player_row(row):
    name = html.escape(row['username'])
    parts = [f'<span style="{row["name_style"]}">{name}</span>']
    if row['rank_badge']:
        badge = row['rank_badge']
        parts.append(f'<span class="player-rank-badge" style="background: {badge["background"]};">{html.escape(badge["name"])}</span>')
    if row['is_prime']:
        parts.append('<span class="player-prime-badge">Prime</span>')

    guild_html = ""
    if row['guild']:
        g = row['guild']
        guild_html = (f'<div class="player-guild"><b style="color: #{html.escape(g["color"])};">'
                      f'[{html.escape(g["tag"])}]</b> {html.escape(g["name"])}</div>')

    return f"""<tr>
<td>{row['number']}</td>
<td><a href="{html.escape(row['url'])}" target="_self"><div class="player-name-cell">
<img class="player-head" src="{html.escape(row['head'])}" alt="{name}" onerror="this.src='{default_helm_url()}'">
<div><div style="display: flex; align-items: center; gap: 6px;">{''.join(parts)}</div>{guild_html}</div>
</div></a></td>
<td>{row['level']}</td>
<td>{html.escape(row['played'])}</td>
</tr>"""

def _players_table(ctrl):
    if ctrl.status == ERROR:
        body = _message_row(ctrl.error or "", "error")
    elif ctrl.status == LOADING:
        body = _message_row(MSG_LOADING)
    else:
        rows = ctrl.rows()
        body = "".join(_player_row(r) for r in rows) if rows else _message_row(MSG_NO_PLAYERS)
    return f"""<table class="players-table">
<thead><tr><th>#</th><th>Игрок</th><th>Уровень</th><th>Наиграно</th></tr></thead>
<tbody>{body}</tbody>
</table>"""

def _pagination_controls(ctrl):
    states = ctrl.button_states()
    window = ctrl.page_window()
    cols = st.columns([1, 1] + [0.6] * len(window) + [1, 1])

    clicked = False
    with cols[0]:
        if st.button("« Первая", key="page_first", disabled=states['first'], use_container_width=True):
            clicked = ctrl.first_page()
    with cols[1]:
        if st.button("‹ Назад", key="page_prev", disabled=states['prev'], use_container_width=True):
            clicked = ctrl.prev_page()
    for i, page in enumerate(window):
        with cols[2 + i]:
            is_current = page == ctrl.current_page
            if st.button(str(page), key=f"page_num_{page}", disabled=is_current,
                         type="primary" if is_current else "secondary", use_container_width=True):
                clicked = ctrl.go_to_page(page)
    with cols[-2]:
        if st.button("Вперёд ›", key="page_next", disabled=states['next'], use_container_width=True):
            clicked = ctrl.next_page()
    with cols[-1]:
        if st.button("Последняя »", key="page_last", disabled=states['last'], use_container_width=True):
            clicked = ctrl.last_page()

    st.caption(ctrl.page_info())
    with st.form("page_jump", border=False):
        j1, j2 = st.columns([3, 1])
        with j1:
            target = st.number_input("Страница", min_value=1, max_value=max(ctrl.total_pages, 1),
                                     value=ctrl.current_page, step=1, label_visibility="collapsed")
        with j2:
            if st.form_submit_button("Перейти", use_container_width=True):
                clicked = ctrl.go_to_page(target)

    if clicked:
        st.rerun()

def _rank_distribution(stats):
    df = rank_stats_frame(stats)
    if df.empty:
        st.info("Статистика по рангам недоступна.")
        return
    fig = px.bar(df, x='rank', y='players', title="Игроки по рангам",
                 color='code', color_discrete_map=dict(zip(df['code'], df['color'])))
    fig.update_layout(showlegend=False, xaxis_title=None, yaxis_title=None)
    st.plotly_chart(apply_plotly_theme(fig), use_container_width=True)

def show_directory():
    st.markdown('<h1 class="main-header">ИГРОКИ</h1>', unsafe_allow_html=True)

    ctrl = get_directory_controller()
    # Counts from the previous run; refreshed below once the table is out
    stats = ctrl.rank_stats

    with st.container():
        st.markdown('<div class="custom-card">', unsafe_allow_html=True)
        c1, c2 = st.columns([1, 2])
        with c1:
            codes = [""] + get_all_rank_codes()
            rank = st.selectbox("Ранг", codes, index=codes.index(ctrl.filters['rank']),
                                format_func=lambda c: _rank_label(c, stats), key="rank_filter")
            if rank != ctrl.filters['rank']:
                ctrl.select_rank(rank)
            if ctrl.rank_accent:
                st.markdown(f'<div class="rank-accent" style="background: {ctrl.rank_accent};"></div>', unsafe_allow_html=True)
        with c2:
            # text_input commits on Enter or blur, so every change is a finished term
            q = st.text_input("Поиск по нику", placeholder="Введите ник...", key="player_search")
            if q.lower().strip() != ctrl.filters['search']:
                ctrl.submit_search(q)
        st.markdown('</div>', unsafe_allow_html=True)

    if ctrl.status == IDLE:
        ctrl.load_players()

    st.markdown(_players_table(ctrl), unsafe_allow_html=True)
    _pagination_controls(ctrl)

    with st.expander("Распределение по рангам"):
        with st.spinner("Подсчёт игроков по рангам..."):
            ctrl.rank_stats = get_rank_stats()
        _rank_distribution(ctrl.rank_stats)
