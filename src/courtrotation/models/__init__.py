"""Data models for a court rotation session."""

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

from courtrotation.models.config import SessionConfig
from courtrotation.models.match import (
    Court,
    HistoryRecord,
    Match,
    busy_player_ids,
    empty_courts,
)
from courtrotation.models.player import Player, level_symbols, levels_compatible
from courtrotation.models.roster import Roster

__all__ = [
    "Court",
    "HistoryRecord",
    "Match",
    "Player",
    "Roster",
    "SessionConfig",
    "busy_player_ids",
    "empty_courts",
    "level_symbols",
    "levels_compatible",
]
