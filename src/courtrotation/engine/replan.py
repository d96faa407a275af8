"""Replan trigger: decide when a planned batch has gone stale."""

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
from typing import Dict, Iterable, Optional, Set

from courtrotation.constants import REPLAN_NEEDS_REGENERATION, REPLAN_STABLE
from courtrotation.models.config import SessionConfig
from courtrotation.models.roster import Roster
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


def member_fingerprint(
    roster: Roster, config: SessionConfig, planned_ids: Iterable[int]
) -> str:
    """Fingerprint of the roster and config state a plan depends on.

    Planned players contribute their active flag and level tag, everyone else
    only whether they are active. Every player contributes id and fixed
    partner. The config suffix comes last.
    """
    planned = set(planned_ids)
    parts = []
    for player in roster:
        part = f"{player.id}-{player.fixed_partner_id or 'none'}"
        if player.id in planned:
            part += f"-{player.active}-{player.level}"
        else:
            part += "-active" if player.active else "-inactive"
        parts.append(part)
    return "|".join(sorted(parts)) + config.fingerprint_suffix()


@dataclass(frozen=True)
class _Snapshot:
    fixed_partner_id: Optional[int]
    active: bool
    level: str


class ReplanTrigger:
    """Two-state machine: ``stable`` or ``needs-regeneration``.

    ``observe`` is called whenever roster or config may have changed. Changes
    that cannot affect the plan only move the baseline forward; changes that
    can flip the state until ``mark_regenerated`` records a fresh baseline.
    """

    def __init__(self) -> None:
        self.state = REPLAN_STABLE
        self._fingerprint = ""
        self._config_suffix = ""
        self._snapshot: Dict[int, _Snapshot] = {}
        self._planned: Set[int] = set()
        self._has_baseline = False

    @property
    def needs_regeneration(self) -> bool:
        return self.state == REPLAN_NEEDS_REGENERATION

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    def observe(
        self, roster: Roster, config: SessionConfig, planned_ids: Iterable[int]
    ) -> str:
        """Compare current state against the baseline and return the new state."""
        planned = set(planned_ids)
        if not self._has_baseline:
            self.state = REPLAN_NEEDS_REGENERATION
            return self.state

        current = member_fingerprint(roster, config, planned)
        if current == self._fingerprint:
            return self.state

        if self._requires_regeneration(roster, config, planned):
            if not self.needs_regeneration:
                logger.info("Planned matches are stale, regeneration required")
            self.state = REPLAN_NEEDS_REGENERATION
        elif not self.needs_regeneration:
            self._remember(roster, config, planned, current)
        return self.state

    def mark_regenerated(
        self, roster: Roster, config: SessionConfig, planned_ids: Iterable[int]
    ) -> None:
        """Record the state right after a plan was rebuilt."""
        planned = set(planned_ids)
        self._remember(
            roster, config, planned, member_fingerprint(roster, config, planned)
        )
        self._has_baseline = True
        self.state = REPLAN_STABLE

    def reset(self) -> None:
        """Forget the baseline; the next observation requires regeneration."""
        self.__init__()

    def _remember(
        self,
        roster: Roster,
        config: SessionConfig,
        planned: Set[int],
        fingerprint: str,
    ) -> None:
        self._fingerprint = fingerprint
        self._config_suffix = config.fingerprint_suffix()
        self._planned = set(planned)
        self._snapshot = {
            p.id: _Snapshot(p.fixed_partner_id, p.active, p.level) for p in roster
        }

    def _requires_regeneration(
        self, roster: Roster, config: SessionConfig, planned: Set[int]
    ) -> bool:
        if config.fingerprint_suffix() != self._config_suffix:
            return True

        # Planned players deleted since the baseline
        if any(pid not in roster for pid in planned | self._planned):
            return True

        for player in roster:
            previous = self._snapshot.get(player.id)
            in_plan = player.id in planned
            if previous is None:
                # New players count as previously inactive
                if player.active and not in_plan:
                    return True
                continue
            if in_plan:
                if previous.fixed_partner_id != player.fixed_partner_id:
                    return True
                if previous.level != player.level:
                    return True
                if previous.active and not player.active:
                    return True
            elif player.active and not previous.active:
                return True
        return False
