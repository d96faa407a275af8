"""Match assignment engine: selection, scheduling, state updates and replanning."""

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

from courtrotation.engine.candidate_filter import eligible_candidates
from courtrotation.engine.randomness import (
    RandomSource,
    SeededRandom,
    SequenceRandom,
    choose,
    shuffled,
)
from courtrotation.engine.replan import ReplanTrigger, member_fingerprint
from courtrotation.engine.scheduler import CourtScheduler, SchedulePass
from courtrotation.engine.selector import (
    select_by_level,
    select_first_by_list,
    select_match,
    select_unconstrained,
)
from courtrotation.engine.state_updater import (
    apply_match,
    commit_match,
    impute_inactive,
    make_history_record,
)

__all__ = [
    "CourtScheduler",
    "RandomSource",
    "ReplanTrigger",
    "SchedulePass",
    "SeededRandom",
    "SequenceRandom",
    "apply_match",
    "choose",
    "commit_match",
    "eligible_candidates",
    "impute_inactive",
    "make_history_record",
    "member_fingerprint",
    "select_by_level",
    "select_first_by_list",
    "select_match",
    "select_unconstrained",
    "shuffled",
]
