import pytest

from vimestats.ranks import (
    get_rank_info, get_rank_colors, get_rank_name, get_rank_priority,
    is_valid_rank, get_all_rank_codes, colors_to_css, rank_background,
    sort_by_priority
)
from tests.conftest import make_player


@pytest.mark.parametrize("code", [None, "", "UNKNOWN", "vip", "GOD", 42, ["VIP"], {"code": "VIP"}])
def test_unknown_rank_falls_back_to_player(code):
    assert get_rank_info(code) == {"name": "Игрок", "colors": []}
    assert get_rank_colors(code) == ["cccccc"]
    assert get_rank_priority(code) == 0
    assert not is_valid_rank(code)
    assert rank_background(code) == "#cccccc"


def test_catalog_has_all_ranks():
    codes = get_all_rank_codes()
    assert len(codes) == 26
    assert codes[0] == "PLAYER"
    assert "ADMIN" in codes
    assert all(is_valid_rank(c) for c in codes)
    assert not is_valid_rank("NOBODY")


def test_rank_colors_never_empty():
    for code in get_all_rank_codes():
        colors = get_rank_colors(code)
        assert colors
        assert all(len(c) == 6 for c in colors)


def test_rank_info_is_a_copy():
    info = get_rank_info("VIP")
    info["colors"].append("000000")
    assert get_rank_colors("VIP") == ["3dff80"]


def test_known_rank_lookup():
    assert get_rank_name("MODER") == "Модератор"
    assert get_rank_colors("HOLY") == ["fff8a9", "ffa317"]
    assert get_rank_priority("ADMIN") == 100
    assert get_rank_priority("VIP") == 10


def test_colors_to_css():
    assert colors_to_css([]) is None
    assert colors_to_css(["3dff80"]) == "#3dff80"
    assert colors_to_css(["aa0000", "00bb00"]) == "linear-gradient(to right, #aa0000, #00bb00)"
    assert rank_background("PLAYER") == "#cccccc"


def test_sort_by_priority_orders_staff_first():
    players = [
        make_player("a", rank="VIP"),
        make_player("b", rank="ADMIN"),
        make_player("c", rank="PLAYER"),
        make_player("d", rank="MODER"),
        make_player("e", rank="VIP"),
    ]
    assert [p.username for p in sort_by_priority(players)] == ["b", "d", "a", "e", "c"]
