"""Session facade coordinating the engine for one playing session."""

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
from typing import Any, Dict, List, Optional

from courtrotation.constants import DEFAULT_LEVEL, MAX_COURTS, MIN_COURTS
from courtrotation.engine.randomness import RandomSource, SeededRandom
from courtrotation.engine.replan import ReplanTrigger
from courtrotation.engine.scheduler import CourtScheduler
from courtrotation.engine.state_updater import commit_match, make_history_record
from courtrotation.exceptions import (
    CourtNotFoundException,
    CourtOccupiedException,
    InvalidConfigurationException,
    PlanAheadActiveException,
)
from courtrotation.models.config import SessionConfig
from courtrotation.models.match import (
    Court,
    HistoryRecord,
    Match,
    busy_player_ids,
    empty_courts,
)
from courtrotation.models.player import Player, level_symbols
from courtrotation.models.roster import Roster
from courtrotation.type_hints import Clock
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


class Session:
    """One continuous playing session.

    The session owns the roster, the courts currently in play, the planned
    next batch (when plan-ahead is on) and the history ledger, newest record
    first. Every engine call goes through here so only one pass runs at a
    time.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        roster: Optional[Roster] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize a new session.

        Args
        ----
        config: Session settings, defaults to ``SessionConfig()``
        roster: Starting roster, defaults to an empty one
        rng: Random source shared by every selection
        clock: Zero-argument callable returning the commit timestamp
        """
        self.config = config if config is not None else SessionConfig()
        self.config.validate()
        self.roster = roster if roster is not None else Roster()
        self.rng = rng if rng is not None else SeededRandom()
        self.clock = clock if clock is not None else time.time

        self.courts: List[Court] = empty_courts(self.config.court_count)
        self.planned: List[Court] = []
        self.history: List[HistoryRecord] = []

        self.scheduler = CourtScheduler(self.config, self.rng, self.clock)
        self.trigger = ReplanTrigger()

    # ========== Properties ==========

    @property
    def players(self) -> List[Player]:
        return self.roster.by_display_order()

    @property
    def court_ids(self) -> List[int]:
        return [c.id for c in self.courts]

    @property
    def planned_player_ids(self) -> List[int]:
        return sorted(busy_player_ids(self.planned))

    @property
    def playing_player_ids(self) -> List[int]:
        return sorted(busy_player_ids(self.courts))

    def get_court(self, court_id: int) -> Court:
        for court in self.courts:
            if court.id == court_id:
                return court
        raise CourtNotFoundException(f"No court with id {court_id}")

    # ========== Player Management ==========

    def add_player(self, name: str, level: str = DEFAULT_LEVEL, memo: str = "") -> Player:
        """Add a newcomer at the active average play count."""
        player = self.roster.add_player(name, level, memo)
        self._after_change()
        return player

    def remove_player(self, player_id: int) -> Player:
        """Delete a player and empty any current or planned court they are on."""
        player = self.roster.remove(player_id)
        for court in self.courts + self.planned:
            if court.match is not None and player_id in court.match:
                logger.info("Court %s emptied, %s was removed", court.id, player.name)
                court.match = None
        self._after_change()
        return player

    def set_active(self, player_id: int, active: bool) -> None:
        player = self.roster[player_id]
        player.active = active
        logger.info("Set %s active status to: %s", player.name, active)
        self._after_change()

    def set_level(self, player_id: int, level: str) -> None:
        level_symbols(level)
        player = self.roster[player_id]
        player.level = level
        logger.info("Set %s level to %s", player.name, level)
        self._after_change()

    def set_fixed_partner(self, player_id: int, partner_id: Optional[int]) -> None:
        """Link two players as fixed partners; ``None`` unlinks."""
        self.roster.set_fixed_partner(player_id, partner_id)
        self._after_change()

    def reorder(self, ordered_ids: List[int]) -> None:
        self.roster.reorder(ordered_ids)
        self._after_change()

    def set_memo(self, player_id: int, memo: str) -> None:
        self.roster[player_id].memo = memo

    # ========== Configuration ==========

    def set_court_count(self, count: int) -> None:
        """Resize the court list, keeping ids 1..count.

        Matches on dropped courts are discarded without counter changes.
        """
        if not isinstance(count, int) or not MIN_COURTS <= count <= MAX_COURTS:
            raise InvalidConfigurationException(
                f"court_count must be between {MIN_COURTS} and {MAX_COURTS}, got {count!r}"
            )
        self.config.court_count = count
        self.courts = self._resized(self.courts, count)
        if self.planned:
            self.planned = self._resized(self.planned, count)
        logger.info("Court count set to %s", count)
        self._after_change()

    def set_level_priority(self, priority: str) -> None:
        previous = self.config.level_priority
        self.config.level_priority = priority
        try:
            self.config.validate()
        except InvalidConfigurationException:
            self.config.level_priority = previous
            raise
        logger.info("Level priority set to %s", priority)
        self._after_change()

    def set_order_first_match_by_list(self, enabled: bool) -> None:
        self.config.order_first_match_by_list = enabled
        self._after_change()

    def set_plan_ahead(self, enabled: bool) -> None:
        """Turn plan-ahead on (computes a plan) or off (drops it)."""
        self.config.plan_ahead = enabled
        if enabled:
            self.regenerate_plan()
        else:
            self.planned = []
            self.trigger.reset()

    # ========== Court Operations ==========

    def assign_court(self, court_id: int) -> Optional[Match]:
        """Fill one empty court and commit the match.

        Players on other occupied courts are not eligible. Returns the Match,
        or None when fewer than four players are available.

        Raises:
            CourtNotFoundException: unknown court id
            CourtOccupiedException: the court already holds a match
            PlanAheadActiveException: plan-ahead is on; use rotate
        """
        if self.config.plan_ahead:
            raise PlanAheadActiveException(
                "Single-court assignment is disabled while planning ahead"
            )
        court = self.get_court(court_id)
        if not court.is_free:
            raise CourtOccupiedException(f"Court {court_id} is in use")

        result = self.scheduler.run(
            self.roster, [court_id], busy_ids=busy_player_ids(self.courts)
        )
        self.roster = result.roster
        court.match = result.courts[0].match
        self._record(result.records)
        if court.match is None:
            logger.info("Court %s: not enough available players", court_id)
        self._after_change()
        return court.match

    def finish_match(self, court_id: int) -> Optional[Match]:
        """Empty a court; counters were already updated at commit."""
        court = self.get_court(court_id)
        match, court.match = court.match, None
        if match is not None:
            logger.info("Court %s finished", court_id)
        return match

    def rotate(self) -> List[Court]:
        """Replace every court with a new batch.

        Without plan-ahead all courts are emptied and refilled in one
        committing pass. With plan-ahead the planned batch is committed onto
        the courts and a new plan is computed from the updated roster.
        """
        if not self.config.plan_ahead:
            for court in self.courts:
                court.match = None
            result = self.scheduler.run(self.roster, self.court_ids)
            self.roster = result.roster
            self.courts = result.courts
            self._record(result.records)
            logger.info("Rotated: %s matches", len(result.matches))
            return self.courts

        self.refresh_plan()
        now = self.clock()
        records = []
        for court, planned in zip(self.courts, self.planned):
            court.match = planned.match
            if planned.match is not None:
                commit_match(self.roster, planned.match, now)
                records.append(
                    make_history_record(self.roster, planned.match, court.id, now)
                )
        self._record(records)
        logger.info("Rotated planned batch: %s matches", len(records))
        self.regenerate_plan()
        return self.courts

    # ========== Planning ==========

    def regenerate_plan(self) -> List[Court]:
        """Compute the next batch without touching counters or history."""
        result = self.scheduler.plan(self.roster, self.court_ids)
        self.planned = result.courts
        self.trigger.mark_regenerated(self.roster, self.config, self.planned_player_ids)
        logger.info("Plan regenerated: %s matches", len(result.matches))
        return self.planned

    def refresh_plan(self) -> bool:
        """Regenerate the plan if it went stale.

        Returns:
            True if a replan occurred
        """
        if not self.config.plan_ahead:
            return False
        self.trigger.observe(self.roster, self.config, self.planned_player_ids)
        if self.trigger.needs_regeneration:
            self.regenerate_plan()
            return True
        return False

    # ========== Counters ==========

    def reset_play_counts(self) -> None:
        """Zero all counters and histories, clear courts and the ledger."""
        self.roster.reset_counters()
        self.history = []
        for court in self.courts:
            court.match = None
        if self.config.plan_ahead:
            self.regenerate_plan()
        else:
            self.planned = []

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "players": self.roster.to_list(),
            "courts": [c.to_dict() for c in self.courts],
            "planned": [c.to_dict() for c in self.planned],
            "history": [r.to_dict() for r in self.history],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
    ) -> "Session":
        session = cls(
            config=SessionConfig.from_dict(data.get("config", {})),
            roster=Roster.from_list(data.get("players", [])),
            rng=rng,
            clock=clock,
        )
        courts = session._known([Court.from_dict(c) for c in data.get("courts", [])])
        if courts:
            session.courts = cls._resized(courts, session.config.court_count)
        session.history = [HistoryRecord.from_dict(r) for r in data.get("history", [])]
        planned = session._known([Court.from_dict(c) for c in data.get("planned", [])])
        if session.config.plan_ahead:
            if planned:
                session.planned = cls._resized(planned, session.config.court_count)
                session.trigger.mark_regenerated(
                    session.roster, session.config, session.planned_player_ids
                )
                session.refresh_plan()
            else:
                session.regenerate_plan()
        return session

    # ========== Internals ==========

    @staticmethod
    def _resized(courts: List[Court], count: int) -> List[Court]:
        by_id = {c.id: c for c in courts}
        return [by_id.get(i, Court(id=i)) for i in range(1, count + 1)]

    def _known(self, courts: List[Court]) -> List[Court]:
        """Empty courts whose match names a player missing from the roster."""
        for court in courts:
            if court.match is not None and any(
                pid not in self.roster for pid in court.match.player_ids
            ):
                logger.warning("Dropping stale match on court %s", court.id)
                court.match = None
        return courts

    def _record(self, records: List[HistoryRecord]) -> None:
        for record in records:
            self.history.insert(0, record)
            logger.info(
                "Court %s: %s & %s vs %s & %s",
                record.court_id,
                *record.player_names,
            )

    def _after_change(self) -> None:
        if self.config.plan_ahead:
            self.refresh_plan()
