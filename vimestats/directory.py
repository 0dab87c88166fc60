"""
Player directory: pagination, rank/search filters and the
fetch -> filter -> sort pipeline behind the players table.

DirectoryController holds the page state for one visitor. Data shaping
(filter_and_sort_players, build_rows, rank_stats_frame) is kept in plain
functions so it can be tested without Streamlit.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
import pandas as pd

from .api import ApiError, UnexpectedResponseShape
from .config import PAGE_SIZE, PAGE_WINDOW, SEARCH_DEBOUNCE_MS, GUILD_TEXT_COLOR, RANK_COUNT_WORKERS
from .cache import now_ms
from .ranks import (
    DEFAULT_RANK, get_rank_name, get_rank_colors, get_rank_priority,
    get_all_rank_codes, is_valid_rank, rank_background, colors_to_css
)
from .utils import format_play_time_short, format_count, helm_url, player_url

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
LOADED = "loaded"
ERROR = "error"

MSG_BAD_SHAPE = "Неверная структура данных от API"
MSG_LOAD_ERROR = "Ошибка при загрузке данных: {}"
MSG_NO_PLAYERS = "Игроки не найдены"
MSG_LOADING = "Загрузка игроков..."


def filter_and_sort_players(players, search=""):
    """Case-insensitive username substring filter, then level descending."""
    term = (search or "").lower().strip()
    if term:
        players = [p for p in players if term in p.username.lower()]
    # sorted() is stable, so equal levels keep the API order
    return sorted(players, key=lambda p: p.level, reverse=True)


def name_style(colors):
    if not colors:
        return ""
    if len(colors) == 1:
        return f"color: #{colors[0]};"
    return (f"background: {colors_to_css(colors)}; "
            "-webkit-background-clip: text; -webkit-text-fill-color: transparent;")


def build_rows(players, current_page, page_size=PAGE_SIZE):
    rows = []
    start = (current_page - 1) * page_size
    for index, player in enumerate(players):
        rank = player.rank or DEFAULT_RANK
        badge = None
        if rank != DEFAULT_RANK:
            badge = {"name": get_rank_name(rank), "background": rank_background(rank)}
        guild = None
        if player.guild:
            guild = {
                "tag": player.guild.tag,
                "name": player.guild.name,
                "color": player.guild.color or GUILD_TEXT_COLOR,
            }
        rows.append({
            "number": start + index + 1,
            "username": player.username,
            "url": player_url(player.username),
            "head": helm_url(player.username),
            "name_style": name_style(player.custom_colors),
            "rank_badge": badge,
            "is_prime": player.is_prime,
            "guild": guild,
            "level": player.level,
            "played": format_play_time_short(player.played_seconds),
        })
    return rows


def load_rank_counts(client, max_workers=RANK_COUNT_WORKERS):
    """
    Player count per rank. Uses the aggregate stats endpoint when it works,
    otherwise asks the list endpoint for one player per rank (in parallel)
    and reads the reported total.
    """
    try:
        return client.fetch_stats()
    except ApiError as e:
        logger.info("Rank stats endpoint unavailable, counting per rank: %s", e)

    codes = get_all_rank_codes()
    found = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(codes))) as exe:
        futures = {exe.submit(client.fetch_rank_count, code): code for code in codes}
        for fut in as_completed(futures):
            code = futures[fut]
            try:
                found[code] = fut.result()
            except ApiError as e:
                logger.error("Could not count players for rank %s: %s", code, e)
    # Catalog order regardless of completion order
    return {code: found[code] for code in codes if code in found}


def rank_stats_frame(stats):
    rows = [
        {
            "code": code,
            "rank": get_rank_name(code),
            "players": int(count),
            "color": "#" + get_rank_colors(code)[0],
            "priority": get_rank_priority(code),
        }
        for code, count in (stats or {}).items()
        if is_valid_rank(code)
    ]
    df = pd.DataFrame(rows, columns=["code", "rank", "players", "color", "priority"])
    if df.empty:
        return df
    return df.sort_values("priority", ascending=False).reset_index(drop=True)


class DirectoryController:
    def __init__(self, client, clock=None, page_size=PAGE_SIZE, debounce_ms=SEARCH_DEBOUNCE_MS):
        self.client = client
        self.clock = clock or now_ms
        self.page_size = page_size
        self.debounce_ms = debounce_ms

        self.players = []
        self.filtered_players = []
        self.is_loading = False
        self.status = IDLE
        self.error = None

        self.current_page = 1
        self.total_pages = 1
        self.has_next = False
        self.has_prev = False
        self.total_players = 0

        self.rank_stats = {}
        self.rank_accent = None
        self.filters = {"rank": "", "search": ""}

        self._dispatched_seq = 0
        self._applied_seq = 0
        self._search_due_at = None

    # Fetching

    def _next_seq(self):
        self._dispatched_seq += 1
        return self._dispatched_seq

    def load_players(self):
        if self.is_loading:
            return False

        self.is_loading = True
        self.status = LOADING
        seq = self._next_seq()
        try:
            page = self.client.fetch_players(
                page=self.current_page,
                limit=self.page_size,
                rank=self.filters["rank"] or None,
            )
        except UnexpectedResponseShape as e:
            logger.error("Unexpected directory response: %s", e)
            self._fail(seq, MSG_BAD_SHAPE)
        except ApiError as e:
            logger.error("Failed to load players: %s", e)
            self._fail(seq, MSG_LOAD_ERROR.format(e))
        else:
            self.apply_response(seq, page)
        finally:
            self.is_loading = False
        return True

    def search_players(self):
        if not self.filters["search"]:
            self.apply_filters()
            return

        self.is_loading = True
        self.status = LOADING
        seq = self._next_seq()
        try:
            page = self.client.fetch_players(
                page=1,
                limit=self.page_size,
                rank=self.filters["rank"] or None,
                search=self.filters["search"],
            )
        except ApiError as e:
            # Server-side search is optional; filter what is already loaded
            logger.warning("Player search failed, filtering locally: %s", e)
            self.apply_filters()
            self.status = LOADED
        else:
            self.apply_response(seq, page)
        finally:
            self.is_loading = False

    def apply_response(self, seq, page):
        """Applies a fetched page unless a newer response was already applied."""
        if seq < self._applied_seq:
            logger.info("Discarding stale directory response #%d (latest #%d)", seq, self._applied_seq)
            return False
        self._applied_seq = seq

        if page.pagination is not None:
            p = page.pagination
            self.total_pages = max(p.total_pages, 1)
            self.current_page = self.clamp_page(p.page)
            self.has_next = p.has_next
            self.has_prev = p.has_prev
            self.total_players = p.total

        self.players = list(page.players)
        self.apply_filters()
        self.status = LOADED
        self.error = None
        logger.debug("Loaded %d players (page %d/%d)", len(self.players), self.current_page, self.total_pages)
        return True

    def _fail(self, seq, message):
        if seq < self._applied_seq:
            return
        self._applied_seq = seq
        self.status = ERROR
        self.error = message

    def apply_filters(self):
        self.filtered_players = filter_and_sort_players(self.players, self.filters["search"])
        return self.filtered_players

    # Search input

    def set_search(self, term):
        self.filters["search"] = (term or "").lower().strip()
        if not self.filters["search"]:
            self._search_due_at = None
            self.apply_filters()
            return
        self._search_due_at = self.clock() + self.debounce_ms

    @property
    def search_pending(self):
        return self._search_due_at is not None

    def poll_search(self):
        """Runs the debounced search once its quiet period has passed."""
        if self._search_due_at is None or self.clock() < self._search_due_at:
            return False
        self._search_due_at = None
        self.search_players()
        return True

    def submit_search(self, term):
        """Searches right away for a term the visitor already committed."""
        self.set_search(term)
        if self._search_due_at is None:
            return False
        self._search_due_at = None
        self.search_players()
        return True

    # Filters

    def select_rank(self, rank_code):
        rank_code = rank_code or ""
        if rank_code and not is_valid_rank(rank_code):
            logger.warning("Ignoring unknown rank filter %r", rank_code)
            return False
        self.filters["rank"] = rank_code
        self.rank_accent = rank_background(rank_code) if rank_code else None
        self.current_page = 1
        self.load_players()
        return True

    def load_rank_stats(self):
        self.rank_stats = load_rank_counts(self.client)
        return self.rank_stats

    # Pagination

    def clamp_page(self, page):
        return min(max(int(page), 1), max(self.total_pages, 1))

    def first_page(self):
        if self.current_page == 1:
            return False
        self.current_page = 1
        return self.load_players()

    def last_page(self):
        if self.current_page == self.total_pages:
            return False
        self.current_page = self.clamp_page(self.total_pages)
        return self.load_players()

    def prev_page(self):
        if not self.has_prev:
            return False
        self.current_page = self.clamp_page(self.current_page - 1)
        return self.load_players()

    def next_page(self):
        if not self.has_next:
            return False
        self.current_page = self.clamp_page(self.current_page + 1)
        return self.load_players()

    def go_to_page(self, page):
        try:
            page = int(page)
        except (TypeError, ValueError):
            return False
        if page < 1 or page > self.total_pages:
            return False
        self.current_page = page
        return self.load_players()

    def row_number(self, index):
        return (self.current_page - 1) * self.page_size + index + 1

    def button_states(self):
        return {
            "first": self.current_page == 1,
            "prev": not self.has_prev,
            "next": not self.has_next,
            "last": self.current_page == self.total_pages,
        }

    def page_window(self, size=PAGE_WINDOW):
        start = max(1, self.current_page - 2)
        end = min(self.total_pages, start + size - 1)
        if end - start < size - 1:
            start = max(1, end - size + 1)
        return list(range(start, end + 1))

    def page_info(self):
        return (f"Страница {self.current_page} из {format_count(self.total_pages)} "
                f"(всего игроков: {format_count(self.total_players)})")

    def rows(self):
        return build_rows(self.filtered_players, self.current_page, self.page_size)
