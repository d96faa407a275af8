"""Court scheduler: fill several courts in one pass."""

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

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from courtrotation.engine.candidate_filter import eligible_candidates
from courtrotation.engine.randomness import RandomSource, SeededRandom
from courtrotation.engine.selector import select_match
from courtrotation.engine.state_updater import commit_match, make_history_record
from courtrotation.models.config import SessionConfig
from courtrotation.models.match import Court, HistoryRecord, Match
from courtrotation.models.roster import Roster
from courtrotation.type_hints import Clock
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class SchedulePass:
    """Result of one scheduling pass.

    Attributes
    ----------
    roster : Roster
        Roster after the pass; a fresh copy, the input is never mutated.
    courts : list of Court
        One entry per requested court id, empty where no match could be formed.
    records : list of HistoryRecord
        One record per committed match, in court order. Empty when planning.
    """

    roster: Roster
    courts: List[Court] = field(default_factory=list)
    records: List[HistoryRecord] = field(default_factory=list)

    @property
    def matches(self) -> List[Match]:
        return [c.match for c in self.courts if c.match is not None]

    @property
    def empty_court_ids(self) -> List[int]:
        return [c.id for c in self.courts if c.match is None]


class CourtScheduler:
    """Fills courts in order, one match selection per court.

    Players placed on an earlier court in the same pass are excluded from
    later courts. A court that cannot be filled is left empty and the pass
    carries on with the next one.
    """

    def __init__(
        self,
        config: SessionConfig,
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else SeededRandom()
        self.clock = clock if clock is not None else time.time

    def run(
        self,
        roster: Roster,
        court_ids: Iterable[int],
        busy_ids: Iterable[int] = (),
        commit: bool = True,
    ) -> SchedulePass:
        """Run one pass.

        Args:
            roster: Current roster, left untouched
            court_ids: Courts to fill, in order
            busy_ids: Players already on occupied courts
            commit: Apply each match to the roster and record it; when False
                the pass only plans

        Returns:
            SchedulePass with the updated roster copy, courts and records
        """
        working = roster.copy()
        working.repair_fixed_partners()
        busy = set(busy_ids)
        now = self.clock()
        result = SchedulePass(roster=working)

        for court_id in court_ids:
            candidates = eligible_candidates(working, busy)
            match = select_match(
                candidates,
                self.config.level_priority,
                self.rng,
                order_first_by_list=self.config.order_first_match_by_list,
            )
            if match is None:
                logger.debug(
                    "Court %s left empty: %s candidates", court_id, len(candidates)
                )
                result.courts.append(Court(id=court_id))
                continue

            busy.update(match.player_ids)
            result.courts.append(Court(id=court_id, match=match))
            if commit:
                commit_match(working, match, now)
                result.records.append(
                    make_history_record(working, match, court_id, now)
                )

        logger.debug(
            "Scheduling pass (%s): %s matches, empty courts %s",
            "commit" if commit else "plan",
            len(result.matches),
            result.empty_court_ids,
        )
        return result

    def plan(
        self, roster: Roster, court_ids: Iterable[int], busy_ids: Iterable[int] = ()
    ) -> SchedulePass:
        """Planning pass: choose matches without touching counters or history."""
        return self.run(roster, court_ids, busy_ids, commit=False)
