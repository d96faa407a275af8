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

# --- Levels ---
# Base skill symbols a level tag is made of
LEVEL_SYMBOLS = ("A", "B", "C")

# The six level tags, in the order they are offered for selection
LEVEL_OPTIONS = ("A/B/C", "A", "A/B", "B", "B/C", "C")
DEFAULT_LEVEL = "A/B/C"
LEVEL_SEPARATOR = "/"

# --- Priority modes ---
PRIORITY_NONE = "none"
PRIORITY_WEAK = "weak"
PRIORITY_STRONG = "strong"
PRIORITY_MODES = (PRIORITY_NONE, PRIORITY_WEAK, PRIORITY_STRONG)
DEFAULT_PRIORITY = PRIORITY_NONE

# --- Courts ---
MIN_COURTS = 1
MAX_COURTS = 8
DEFAULT_COURT_COUNT = 4
PLAYERS_PER_MATCH = 4

# --- Unconstrained selector ---
# Number of W/X/Y/Z quads built before the cheapest is kept
QUAD_ATTEMPTS = 4

# --- Level-priority selector ---
# Players considered per selection, bounds the search at C(16,4) x 3 splits
LEVEL_POOL_SIZE = 16
# Players more than this many matches above the pool minimum are left out
FAIRNESS_SPREAD = 1
FIXED_PAIR_PENALTY = 100000
FAIRNESS_WEIGHT = 5000
TEAMMATE_REPEAT_WEIGHT = 20
OPPONENT_REPEAT_WEIGHT = 1
STRONG_LEVEL_WEIGHT = 1000
WEAK_SCATTER_WEIGHT = 100
# Jitter is scaled to stay strictly below 0.1
JITTER_SCALE = 0.09
GOOD_ENOUGH_COST = 100

# --- Replan states ---
REPLAN_STABLE = "stable"
REPLAN_NEEDS_REGENERATION = "needs-regeneration"

# --- Persistence ---
SCHEMA_VERSION = 2
SAVE_FILE_EXTENSION = ".json"
