from dataclasses import dataclass, field
from typing import List, Optional

from .utils import normalize_colors


@dataclass(frozen=True)
class Guild:
    tag: str
    name: str
    color: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        if not isinstance(data, dict) or not data.get("name"):
            return None
        color = data.get("color")
        return cls(
            tag=str(data.get("tag") or ""),
            name=str(data["name"]),
            color=str(color).lstrip('#') if color else None,
        )


@dataclass
class Player:
    username: str
    rank: str = "PLAYER"
    level: int = 0
    played_seconds: int = 0
    custom_colors: List[str] = field(default_factory=list)
    guild: Optional[Guild] = None
    is_prime: bool = False
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data):
        """
        Builds a Player from either upstream payload.
        The directory API names the colors `custom_colors`, the VimeWorld
        lookup API names them `customColors`; both land in `custom_colors`.
        """
        if not isinstance(data, dict) or not data.get("username"):
            raise ValueError("player record without username")
        colors = data.get("custom_colors")
        if colors is None:
            colors = data.get("customColors")
        rank = data.get("rank")
        player_id = data.get("id")
        return cls(
            username=str(data["username"]),
            rank=rank if isinstance(rank, str) and rank else "PLAYER",
            level=_as_int(data.get("level")),
            played_seconds=_as_int(data.get("played_seconds", data.get("playedSeconds"))),
            custom_colors=normalize_colors(colors),
            guild=Guild.from_api(data.get("guild")),
            is_prime=bool(data.get("is_prime", data.get("isPrime", False))),
            id=_as_int(player_id) if player_id is not None else None,
        )

    def cache_entry(self):
        # Field names of the persisted playerCache entries
        return {
            "rank": self.rank or "PLAYER",
            "customColors": list(self.custom_colors),
            "username": self.username,
        }


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    total_pages: int = 1
    has_next: bool = False
    has_prev: bool = False
    total: int = 0

    @classmethod
    def from_api(cls, data):
        return cls(
            page=max(_as_int(data.get("page"), 1), 1),
            total_pages=max(_as_int(data.get("total_pages"), 1), 1),
            has_next=bool(data.get("has_next", False)),
            has_prev=bool(data.get("has_prev", False)),
            total=_as_int(data.get("total")),
        )


@dataclass
class DirectoryPage:
    players: List[Player]
    pagination: Optional[Pagination] = None


def _as_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
