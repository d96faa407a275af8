"""The roster: canonical per-player state for one session."""

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

from typing import Any, Dict, Iterable, Iterator, List, Optional

from courtrotation.constants import DEFAULT_LEVEL
from courtrotation.exceptions import (
    DuplicatePlayerException,
    InvalidFixedPartnerException,
    PlayerNotFoundException,
)
from courtrotation.models.player import Player, level_symbols
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


class Roster:
    """Ordered collection of players keyed by id.

    The roster is the only place that mutates fixed partnerships, so the
    relation stays symmetric: either both sides point at each other or both
    are None.
    """

    def __init__(self, players: Optional[Iterable[Player]] = None) -> None:
        self._players: Dict[int, Player] = {}
        for player in players or []:
            self.add(player)

    # ========== Collection protocol ==========

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def __getitem__(self, player_id: int) -> Player:
        try:
            return self._players[player_id]
        except KeyError:
            raise PlayerNotFoundException(f"No player with id {player_id}") from None

    def get(self, player_id: Optional[int]) -> Optional[Player]:
        if player_id is None:
            return None
        return self._players.get(player_id)

    @property
    def players(self) -> List[Player]:
        return list(self._players.values())

    @property
    def ids(self) -> List[int]:
        return list(self._players.keys())

    def active_players(self) -> List[Player]:
        return [p for p in self._players.values() if p.active]

    def by_display_order(self) -> List[Player]:
        return sorted(self._players.values(), key=lambda p: (p.order, p.id))

    def next_id(self) -> int:
        return max(self._players, default=0) + 1

    def copy(self) -> "Roster":
        """Deep copy; mutating the copy never touches this roster."""
        return Roster(p.copy() for p in self._players.values())

    # ========== Membership ==========

    def add(self, player: Player) -> Player:
        """Add an existing Player object."""
        if player.id in self._players:
            raise DuplicatePlayerException(f"Player id {player.id} already exists")
        self._players[player.id] = player
        return player

    def add_player(self, name: str, level: str = DEFAULT_LEVEL, memo: str = "") -> Player:
        """Create and add a newcomer.

        A newcomer starts at the active average play count so they are not
        immediately first in line; the same amount is recorded as imputed.
        """
        level_symbols(level)
        average = self.active_average_play_count()
        player = Player(
            id=self.next_id(),
            name=name,
            level=level,
            play_count=average,
            imputed_play_count=average,
            order=len(self._players),
            memo=memo,
        )
        self.add(player)
        logger.info("Added player %s (id=%s, start count=%s)", name, player.id, average)
        return player

    def remove(self, player_id: int) -> Player:
        """Delete a player and every reference other players hold to it."""
        player = self[player_id]
        del self._players[player_id]
        for other in self._players.values():
            other.forget(player_id)
        logger.info("Removed player %s (id=%s)", player.name, player_id)
        return player

    def reorder(self, ordered_ids: List[int]) -> None:
        """Persist a new display order; ids not listed keep their relative order after."""
        missing = [pid for pid in ordered_ids if pid not in self._players]
        if missing:
            raise PlayerNotFoundException(f"Cannot reorder unknown players {missing}")
        listed = set(ordered_ids)
        rest = [p.id for p in self.by_display_order() if p.id not in listed]
        for index, pid in enumerate(list(ordered_ids) + rest):
            self._players[pid].order = index

    # ========== Fixed partners ==========

    def set_fixed_partner(self, player_id: int, partner_id: Optional[int]) -> None:
        """Link two players as fixed partners, or unlink with ``partner_id=None``.

        Any previous partnership on either side is cleared on both ends first.
        """
        player = self[player_id]
        if partner_id is None:
            self.clear_fixed_partner(player_id)
            return
        if partner_id == player_id:
            raise InvalidFixedPartnerException("A player cannot be their own partner")
        if partner_id not in self._players:
            raise InvalidFixedPartnerException(f"Unknown partner id {partner_id}")
        partner = self._players[partner_id]

        self.clear_fixed_partner(player_id)
        self.clear_fixed_partner(partner_id)
        player.fixed_partner_id = partner_id
        partner.fixed_partner_id = player_id
        logger.debug("Linked fixed partners %s and %s", player_id, partner_id)

    def clear_fixed_partner(self, player_id: int) -> None:
        """Unlink ``player_id`` and whoever points at it."""
        player = self[player_id]
        old = player.fixed_partner_id
        player.fixed_partner_id = None
        for other in self._players.values():
            if other.fixed_partner_id == player_id:
                other.fixed_partner_id = None
        if old is not None:
            logger.debug("Cleared fixed partnership %s <-> %s", player_id, old)

    def fixed_partner(self, player: Player) -> Optional[Player]:
        """Return the mutual fixed partner of ``player``, or None.

        A reference that is dangling or not returned is treated as absent.
        """
        partner = self.get(player.fixed_partner_id)
        if partner is None or partner.fixed_partner_id != player.id:
            return None
        return partner

    def repair_fixed_partners(self) -> List[int]:
        """Clear one-sided or dangling fixed partner links on both ends.

        Returns:
            Ids of players whose link was cleared
        """
        repaired: List[int] = []
        for player in self._players.values():
            if player.fixed_partner_id is None:
                continue
            if self.fixed_partner(player) is None:
                logger.warning(
                    "Clearing asymmetric fixed partner link %s -> %s",
                    player.id,
                    player.fixed_partner_id,
                )
                repaired.append(player.id)
        for pid in repaired:
            stale = self._players[pid].fixed_partner_id
            self._players[pid].fixed_partner_id = None
            other = self._players.get(stale)
            if other is not None and other.fixed_partner_id == pid:
                other.fixed_partner_id = None
        return repaired

    # ========== Counters ==========

    def active_average_play_count(self) -> int:
        """Floor of the mean play count over active players, 0 if none."""
        active = self.active_players()
        if not active:
            return 0
        return sum(p.play_count for p in active) // len(active)

    def reset_counters(self) -> None:
        """Zero counters and histories for everyone; fixed partners are kept."""
        for player in self._players.values():
            player.reset_counters()
        logger.info("Reset play counts for %s players", len(self._players))

    # ========== Serialization ==========

    def to_list(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self._players.values()]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "Roster":
        roster = cls(Player.from_dict(item) for item in data)
        roster.repair_fixed_partners()
        return roster
