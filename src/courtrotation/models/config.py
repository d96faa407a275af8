"""SessionConfig data class."""

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
from typing import Any, Dict

from courtrotation.constants import (
    DEFAULT_COURT_COUNT,
    DEFAULT_PRIORITY,
    MAX_COURTS,
    MIN_COURTS,
    PRIORITY_MODES,
)
from courtrotation.exceptions import InvalidConfigurationException
from courtrotation.type_hints import PriorityMode


@dataclass
class SessionConfig:
    """Session configuration settings.

    Attributes
    ----------
    court_count : int
        Number of concurrent courts, 1 to 8.
    level_priority : str
        ``"none"``, ``"weak"`` or ``"strong"``; how strongly level
        compatibility is weighed against partner/opponent variety.
    order_first_match_by_list : bool
        Fill first matches from display order while four or more players
        have not played yet.
    plan_ahead : bool
        Keep a precomputed next batch that the replan trigger keeps fresh.
    """

    court_count: int = DEFAULT_COURT_COUNT
    level_priority: PriorityMode = DEFAULT_PRIORITY
    order_first_match_by_list: bool = False
    plan_ahead: bool = False

    def validate(self) -> None:
        """Raise InvalidConfigurationException if a value is out of range.

        The engine trusts its config; callers validate at the boundary.
        """
        if not isinstance(self.court_count, int) or not (
            MIN_COURTS <= self.court_count <= MAX_COURTS
        ):
            raise InvalidConfigurationException(
                f"court_count must be between {MIN_COURTS} and {MAX_COURTS}, "
                f"got {self.court_count!r}"
            )
        if self.level_priority not in PRIORITY_MODES:
            raise InvalidConfigurationException(
                f"level_priority must be one of {', '.join(PRIORITY_MODES)}, "
                f"got {self.level_priority!r}"
            )

    def fingerprint_suffix(self) -> str:
        """Config part of the replan fingerprint."""
        return (
            f"_C{self.court_count}"
            f"_P{self.level_priority}"
            f"_F{self.order_first_match_by_list}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "court_count": self.court_count,
            "level_priority": self.level_priority,
            "order_first_match_by_list": self.order_first_match_by_list,
            "plan_ahead": self.plan_ahead,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            court_count=int(data.get("court_count", DEFAULT_COURT_COUNT)),
            level_priority=data.get("level_priority", DEFAULT_PRIORITY),
            order_first_match_by_list=bool(
                data.get("order_first_match_by_list", False)
            ),
            plan_ahead=bool(data.get("plan_ahead", False)),
        )
