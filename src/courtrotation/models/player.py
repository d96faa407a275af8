"""A player on the session roster."""

# Court Rotation
# Copyright (C) 2025  Court Rotation developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from courtrotation.constants import (
    DEFAULT_LEVEL,
    LEVEL_OPTIONS,
    LEVEL_SEPARATOR,
)
from courtrotation.exceptions import InvalidLevelException
from courtrotation.type_hints import HistoryCounts, LevelSymbol, LevelTag


def level_symbols(level: str) -> FrozenSet[LevelSymbol]:
    """Return the base skill symbols a level tag belongs to.

    >>> sorted(level_symbols("A/B"))
    ['A', 'B']
    """
    if level not in LEVEL_OPTIONS:
        raise InvalidLevelException(f"Unknown level tag: {level!r}")
    return frozenset(level.split(LEVEL_SEPARATOR))


def levels_compatible(level_a: str, level_b: str) -> bool:
    """Two level tags are compatible when their symbol sets intersect."""
    return bool(level_symbols(level_a) & level_symbols(level_b))


@dataclass
class Player:
    """Per-player state for one continuous session.

    Attributes
    ----------
    id : int
        Stable identity for the session.
    name : str
        Display name.
    level : str
        One of the six level tags, see ``LEVEL_OPTIONS``.
    active : bool
        Whether the player takes part in future assignments.
    play_count : int
        Matches played, including the imputed adjustment.
    imputed_play_count : int
        Total increment applied while the player was inactive or joined late.
    last_played_at : float
        Timestamp of the last match start, 0 if never played.
    match_history : dict of int to int
        Opponent id -> times played against.
    pair_history : dict of int to int
        Partner id -> times played together.
    fixed_partner_id : int or None
        Mutual fixed partnership; maintained symmetric by the Roster.
    order : int
        Display order index, ignored by fairness logic.
    memo : str
        Free text note.
    """

    id: int
    name: str
    level: LevelTag = DEFAULT_LEVEL
    active: bool = True
    play_count: int = 0
    imputed_play_count: int = 0
    last_played_at: float = 0
    match_history: HistoryCounts = field(default_factory=dict)
    pair_history: HistoryCounts = field(default_factory=dict)
    fixed_partner_id: Optional[int] = None
    order: int = 0
    memo: str = ""

    def __post_init__(self) -> None:
        # Fail early on a bad tag rather than inside a scheduling pass
        level_symbols(self.level)

    @property
    def symbols(self) -> FrozenSet[str]:
        return level_symbols(self.level)

    def is_level_compatible(self, other: "Player") -> bool:
        return bool(self.symbols & other.symbols)

    def pair_count(self, other_id: int) -> int:
        """Times this player has partnered ``other_id``."""
        return self.pair_history.get(other_id, 0)

    def match_count(self, other_id: int) -> int:
        """Times this player has faced ``other_id``."""
        return self.match_history.get(other_id, 0)

    def encounter_count(self, other_id: int) -> int:
        """Combined partner and opponent history with ``other_id``."""
        return self.pair_count(other_id) + self.match_count(other_id)

    def reset_counters(self) -> None:
        """Zero counters and both history maps together."""
        self.play_count = 0
        self.imputed_play_count = 0
        self.last_played_at = 0
        self.match_history = {}
        self.pair_history = {}

    def forget(self, other_id: int) -> None:
        """Drop every reference to another player (used on deletion)."""
        self.match_history.pop(other_id, None)
        self.pair_history.pop(other_id, None)
        if self.fixed_partner_id == other_id:
            self.fixed_partner_id = None

    def copy(self) -> "Player":
        """Independent copy; history maps are not shared."""
        return Player(
            id=self.id,
            name=self.name,
            level=self.level,
            active=self.active,
            play_count=self.play_count,
            imputed_play_count=self.imputed_play_count,
            last_played_at=self.last_played_at,
            match_history=dict(self.match_history),
            pair_history=dict(self.pair_history),
            fixed_partner_id=self.fixed_partner_id,
            order=self.order,
            memo=self.memo,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to dictionary.

        History keys become strings so the result survives a JSON round trip.
        """
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "active": self.active,
            "play_count": self.play_count,
            "imputed_play_count": self.imputed_play_count,
            "last_played_at": self.last_played_at,
            "match_history": {str(k): v for k, v in self.match_history.items()},
            "pair_history": {str(k): v for k, v in self.pair_history.items()},
            "fixed_partner_id": self.fixed_partner_id,
            "order": self.order,
            "memo": self.memo,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Deserialize player from dictionary."""
        return cls(
            id=int(data["id"]),
            name=data.get("name", str(data["id"])),
            level=data.get("level", DEFAULT_LEVEL),
            active=bool(data.get("active", True)),
            play_count=int(data.get("play_count", 0)),
            imputed_play_count=int(data.get("imputed_play_count", 0)),
            last_played_at=data.get("last_played_at", 0),
            match_history={
                int(k): int(v) for k, v in data.get("match_history", {}).items()
            },
            pair_history={
                int(k): int(v) for k, v in data.get("pair_history", {}).items()
            },
            fixed_partner_id=data.get("fixed_partner_id"),
            order=int(data.get("order", 0)),
            memo=data.get("memo", ""),
        )

    def __str__(self) -> str:
        return f"{self.name} [{self.level}]"
