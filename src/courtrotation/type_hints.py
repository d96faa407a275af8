"""Type hints used in Court Rotation."""

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

from typing import Callable, Dict, Literal, Tuple

# One of the six level patterns
LevelTag = Literal["A/B/C", "A", "A/B", "B", "B/C", "C"]
# A base skill symbol
LevelSymbol = Literal["A", "B", "C"]

PriorityMode = Literal["none", "weak", "strong"]

# player id -> number of matches together / against
HistoryCounts = Dict[int, int]
# (p1, p2) vs (p3, p4)
Team = Tuple[int, int]
Quad = Tuple[int, int, int, int]

# Zero-argument callable returning the current timestamp
Clock = Callable[[], float]
