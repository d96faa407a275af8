"""Match, court and history ledger records."""

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

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from courtrotation.exceptions import InvalidMatchException
from courtrotation.type_hints import Quad, Team
from courtrotation.utils import generate_id


@dataclass(frozen=True)
class Match:
    """Four distinct players split into ``(p1, p2)`` vs ``(p3, p4)``.

    Attributes
    ----------
    p1, p2 : int
        First team.
    p3, p4 : int
        Second team.
    level : str or None
        Level tag the match is recorded under, None when levels were ignored.
    """

    p1: int
    p2: int
    p3: int
    p4: int
    level: Optional[str] = None

    def __post_init__(self) -> None:
        if len(set(self.player_ids)) != 4:
            raise InvalidMatchException(
                f"A match needs four distinct players: {self.player_ids}"
            )

    @property
    def player_ids(self) -> Quad:
        return (self.p1, self.p2, self.p3, self.p4)

    @property
    def team_a(self) -> Team:
        return (self.p1, self.p2)

    @property
    def team_b(self) -> Team:
        return (self.p3, self.p4)

    def __contains__(self, player_id: int) -> bool:
        return player_id in self.player_ids

    def partner_of(self, player_id: int) -> int:
        """Return the teammate of ``player_id``."""
        if player_id == self.p1:
            return self.p2
        if player_id == self.p2:
            return self.p1
        if player_id == self.p3:
            return self.p4
        if player_id == self.p4:
            return self.p3
        raise KeyError(player_id)

    def opponents_of(self, player_id: int) -> Team:
        """Return the two players on the other team."""
        if player_id in self.team_a:
            return self.team_b
        if player_id in self.team_b:
            return self.team_a
        raise KeyError(player_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "p1": self.p1,
            "p2": self.p2,
            "p3": self.p3,
            "p4": self.p4,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        return cls(
            p1=int(data["p1"]),
            p2=int(data["p2"]),
            p3=int(data["p3"]),
            p4=int(data["p4"]),
            level=data.get("level"),
        )


@dataclass
class Court:
    """A playing area holding at most one match."""

    id: int
    match: Optional[Match] = None

    @property
    def is_free(self) -> bool:
        return self.match is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "match": self.match.to_dict() if self.match else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Court":
        match = data.get("match")
        return cls(id=int(data["id"]), match=Match.from_dict(match) if match else None)


def empty_courts(count: int) -> List[Court]:
    """Courts numbered 1..count with no match."""
    return [Court(id=i + 1) for i in range(count)]


def busy_player_ids(courts: List[Court]) -> set:
    """Ids of every player currently placed on one of ``courts``."""
    busy = set()
    for court in courts:
        if court.match is not None:
            busy.update(court.match.player_ids)
    return busy


@dataclass(frozen=True)
class HistoryRecord:
    """Immutable ledger entry for one committed match."""

    timestamp: float
    court_id: int
    player_ids: Quad
    player_names: Tuple[str, str, str, str]
    level: Optional[str] = None
    id: str = ""

    @classmethod
    def create(
        cls,
        timestamp: float,
        court_id: int,
        player_ids: Quad,
        player_names: Tuple[str, str, str, str],
        level: Optional[str] = None,
    ) -> "HistoryRecord":
        """Build a record with a freshly generated id."""
        return cls(
            timestamp=timestamp,
            court_id=court_id,
            player_ids=tuple(player_ids),
            player_names=tuple(player_names),
            level=level,
            id=generate_id(cls.__name__),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "court_id": self.court_id,
            "player_ids": list(self.player_ids),
            "player_names": list(self.player_names),
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryRecord":
        return cls(
            timestamp=data.get("timestamp", 0),
            court_id=int(data["court_id"]),
            player_ids=tuple(int(x) for x in data["player_ids"]),
            player_names=tuple(data.get("player_names", ["?"] * 4)),
            level=data.get("level"),
            id=data.get("id", ""),
        )
