import os
import sys

# Path management
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.dirname(CURRENT_DIR)
DATA_DIR = os.path.join(ROOT_DIR, "data")
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Upstream endpoints
VIMEWORLD_API_URL = "https://api.vimeworld.com"
DIRECTORY_API_URL = "https://vimetop.ru/api/v1"
CORS_PROXY_URL = "https://corsproxy.io/?"
SKIN_URL = "https://skin.vimeworld.com"
DEFAULT_SKIN = "Steve"
HTTP_TIMEOUT = 10

# Directory
PAGE_SIZE = 100
PAGE_WINDOW = 5
SEARCH_DEBOUNCE_MS = 500
RANK_COUNT_WORKERS = 8

# Local cache (milliseconds, like browser Date.now())
CACHE_DURATION_MS = 5 * 60 * 1000
CACHE_SWEEP_INTERVAL_MS = 60 * 1000
FAILED_LOOKUP_TTL_MS = 60 * 1000
MAX_RECENT_NICKS = 5
PLAYER_CACHE_KEY = "playerCache"
RECENT_NICKS_KEY = "recentNicks"
DEFAULT_STORAGE_FILE = os.path.join(DATA_DIR, "local_storage.json")

DEFAULT_RANK_COLOR = "cccccc"
GUILD_TEXT_COLOR = "7f8c8d"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# CSS Styles
GLOBAL_STYLES = """
<style>
/* Hide Streamlit elements */
#MainMenu {visibility: hidden;}
footer {visibility: hidden;}
.stAppDeployButton {display:none;}
[data-testid="stSidebar"] {display: none;}
[data-testid="stSidebarCollapsedControl"] {display: none;}

:root {
    --primary-blue: #3498db;
    --light-blue: #e6f3ff;
    --bg-main: #f4f8fb;
    --card-bg: #ffffff;
    --text-main: #2c3e50;
    --text-dim: #7f8c8d;
    --error-red: #e74c3c;
}
.stApp {
    background-color: var(--bg-main);
    color: var(--text-main);
    font-family: 'VimeArtBold', 'Rubik', sans-serif;
}
.nav-logo {
    font-family: 'VimeArtBold', 'Rubik', sans-serif;
    font-size: 1.4rem;
    color: var(--primary-blue);
    letter-spacing: 1px;
    margin: 0;
    padding: 10px 0;
}
.main-header {
    color: var(--primary-blue);
    font-family: 'VimeArtBold', 'Rubik', sans-serif;
    letter-spacing: 1px;
}
.custom-card {
    background: var(--card-bg);
    border-radius: 10px;
    padding: 1.2rem;
    box-shadow: 0 2px 8px rgba(52, 152, 219, 0.08);
}

/* Players table */
.players-table {
    width: 100%;
    border-collapse: separate;
    border-spacing: 0 4px;
    margin: 12px 0;
}
.players-table th {
    text-align: left;
    padding: 10px 16px;
    color: var(--text-dim);
    font-size: 0.8rem;
    text-transform: uppercase;
    border-bottom: 2px solid var(--primary-blue);
}
.players-table td {
    padding: 10px 16px;
    background: var(--card-bg);
    color: var(--text-main);
    font-size: 0.95rem;
}
.players-table tr:hover td {
    background: var(--light-blue);
}
.players-table td:first-child {
    border-top-left-radius: 8px;
    border-bottom-left-radius: 8px;
    font-weight: bold;
    color: var(--primary-blue);
}
.players-table td:last-child {
    border-top-right-radius: 8px;
    border-bottom-right-radius: 8px;
}
.players-table a {
    color: inherit;
    text-decoration: none;
}
.player-name-cell {
    display: flex;
    align-items: center;
    gap: 10px;
}
.player-head {
    width: 32px;
    height: 32px;
}
.player-rank-badge, .player-prime-badge {
    font-size: 0.7rem;
    padding: 2px 6px;
    border-radius: 4px;
    color: #fff;
}
.player-prime-badge {
    background: rgba(52, 152, 219, 0.2);
    color: var(--primary-blue);
}
.player-guild {
    font-size: 0.7rem;
    color: var(--text-dim);
}
.table-message {
    text-align: center;
    padding: 2rem;
    color: var(--text-dim);
}
.table-message.error {
    color: var(--error-red);
}

/* Rank filter accent */
.rank-accent {
    height: 6px;
    border-radius: 3px;
    margin: 4px 0 12px 0;
}

/* Recent nicknames */
.recent-nicks {
    list-style: none;
    padding: 0;
    margin: 0;
}
.recent-nicks li {
    display: flex;
    align-items: center;
    gap: 6px;
    padding: 4px 0;
}
.mini-head {
    width: 25px;
    height: 25px;
}
.player-rank {
    font-size: 0.65rem;
    padding: 1px 5px;
    border-radius: 4px;
    color: #fff;
}
.online-status {
    display: inline-block;
    width: 8px;
    height: 8px;
    border-radius: 50%;
    background: #bdc3c7;
}
.online-status.online { background: #2ecc71; }
.online-status.offline { background: #e74c3c; }

@media (max-width: 768px) {
.players-table td, .players-table th { padding: 6px 8px; font-size: 0.8rem; }
.nav-logo { font-size: 1rem; }
}
</style>
"""

FONTS_HTML = """<link href='https://fonts.googleapis.com/css2?family=Rubik:wght@400;700&display=swap' rel='stylesheet'>"""

def apply_plotly_theme(fig):
    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        font=dict(color='#2c3e50', family="Rubik"),
        title_font=dict(color='#3498db', family="Rubik"),
        xaxis=dict(
            gridcolor='rgba(0,0,0,0.05)',
            zerolinecolor='rgba(0,0,0,0.1)'
        ),
        yaxis=dict(
            gridcolor='rgba(0,0,0,0.05)',
            zerolinecolor='rgba(0,0,0,0.1)'
        ),
        margin=dict(l=40, r=40, t=40, b=40),
        legend=dict(
            bgcolor='rgba(0,0,0,0)',
            bordercolor='rgba(0,0,0,0.1)'
        )
    )
    return fig
