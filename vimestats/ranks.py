from .config import DEFAULT_RANK_COLOR

# VimeWorld rank catalog: code -> display name and name/badge colors
RANKS = {
    "PLAYER": {"name": "Игрок", "colors": []},
    "VIP": {"name": "VIP", "colors": ["3dff80"]},
    "PREMIUM": {"name": "Premium", "colors": ["3decff"]},
    "HOLY": {"name": "Holy", "colors": ["fff8a9", "ffa317"]},
    "IMMORTAL": {"name": "Immortal", "colors": ["ff70d1", "ff5d6d"]},
    "DIVINE": {"name": "Divine", "colors": ["b451ff", "84b5ff"]},
    "THANE": {"name": "Thane", "colors": ["30ff87", "1cffe4", "3594ff"]},
    "ELITE": {"name": "Elite", "colors": ["ffa51e", "ff5619", "ff314a"]},
    "ETERNAL": {"name": "Eternal", "colors": ["2688ed", "8b00d7", "ff4161"]},
    "CELESTIAL": {"name": "Celestial", "colors": ["e0f3ff", "bfdeff", "96c6ff", "6895d6"]},
    "ABSOLUTE": {"name": "Absolute", "colors": ["f200ff", "972a6e", "632f59", "dd57bc"]},
    "IMPERIAL": {"name": "Imperial", "colors": ["fdbd05", "ffa630", "fffabd", "fdbd05"]},
    "ULTIMATE": {"name": "Ultimate", "colors": ["4f4f4f", "737272", "fbf7ff", "3a3a3a"]},
    "VIME": {"name": "Vime", "colors": ["2599d4", "1d7cab"]},
    "JRBUILDER": {"name": "Мл. Билдер", "colors": ["bdecb6", "67ff54"]},
    "BUILDER": {"name": "Билдер", "colors": ["67ff54", "57c22d"]},
    "SRBUILDER": {"name": "Ст. Билдер", "colors": ["57c22d", "55961a"]},
    "MAPLEAD": {"name": "Гл. Билдер", "colors": ["55961a", "3f6e13"]},
    "YOUTUBE": {"name": "Media", "colors": ["bf2dff", "f33fd7"]},
    "DEV": {"name": "Разработчик", "colors": ["d61753"]},
    "ORGANIZER": {"name": "Организатор", "colors": ["0d83ae", "00c0eb"]},
    "HELPER": {"name": "Хелпер", "colors": ["76a6ff"]},
    "MODER": {"name": "Модератор", "colors": ["4e62eb"]},
    "WARDEN": {"name": "Пр. Модератор", "colors": ["3c36de"]},
    "CHIEF": {"name": "Админ", "colors": ["ff5e43", "db2100"]},
    "ADMIN": {"name": "Гл. Админ", "colors": ["ff2030", "d40048", "c1006b"]},
}

# Higher = more important; used to order staff lists
RANK_PRIORITIES = {
    "ADMIN": 100,
    "CHIEF": 90,
    "WARDEN": 80,
    "MODER": 70,
    "HELPER": 60,
    "ORGANIZER": 55,
    "DEV": 50,
    "MAPLEAD": 45,
    "SRBUILDER": 44,
    "BUILDER": 43,
    "JRBUILDER": 42,
    "YOUTUBE": 40,
    "VIME": 35,
    "ULTIMATE": 34,
    "IMPERIAL": 33,
    "ABSOLUTE": 32,
    "CELESTIAL": 31,
    "ETERNAL": 30,
    "ELITE": 28,
    "THANE": 26,
    "DIVINE": 24,
    "IMMORTAL": 22,
    "HOLY": 20,
    "PREMIUM": 15,
    "VIP": 10,
    "PLAYER": 0,
}

DEFAULT_RANK = "PLAYER"

def get_rank_info(rank_code):
    """Returns {name, colors} for a rank code; unknown codes map to PLAYER."""
    info = RANKS.get(rank_code) if isinstance(rank_code, str) else None
    if info is None:
        info = RANKS[DEFAULT_RANK]
    return {"name": info["name"], "colors": list(info["colors"])}

def get_rank_colors(rank_code):
    colors = get_rank_info(rank_code)["colors"]
    return colors if colors else [DEFAULT_RANK_COLOR]

def get_rank_name(rank_code):
    return get_rank_info(rank_code)["name"]

def get_rank_priority(rank_code):
    return RANK_PRIORITIES.get(rank_code, 0) if isinstance(rank_code, str) else 0

def is_valid_rank(rank_code):
    return isinstance(rank_code, str) and rank_code in RANKS

def get_all_rank_codes():
    return list(RANKS.keys())

def colors_to_css(colors):
    """Solid color for one entry, left-to-right gradient for several."""
    if not colors:
        return None
    if len(colors) == 1:
        return f"#{colors[0]}"
    return "linear-gradient(to right, " + ", ".join(f"#{c}" for c in colors) + ")"

def rank_background(rank_code):
    return colors_to_css(get_rank_colors(rank_code))

def sort_by_priority(players):
    # Stable: players sharing a rank keep their incoming order
    return sorted(players, key=lambda p: get_rank_priority(getattr(p, "rank", None)), reverse=True)
