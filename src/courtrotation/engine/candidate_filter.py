"""Candidate filter: players eligible for a new match."""

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

from typing import Iterable, List

from courtrotation.models.roster import Roster
from courtrotation.models.player import Player


def eligible_candidates(roster: Roster, busy_ids: Iterable[int] = ()) -> List[Player]:
    """Active players not on any occupied court, in roster order."""
    busy = set(busy_ids)
    return [p for p in roster if p.active and p.id not in busy]
