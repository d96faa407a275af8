"""Saving, loading and migrating session files."""

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

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from courtrotation.constants import (
    DEFAULT_COURT_COUNT,
    DEFAULT_LEVEL,
    LEVEL_OPTIONS,
    PRIORITY_NONE,
    PRIORITY_STRONG,
    SCHEMA_VERSION,
)
from courtrotation.engine.randomness import RandomSource
from courtrotation.exceptions import (
    CourtRotationException,
    MalformedSessionException,
    PersistenceException,
    SchemaVersionException,
)
from courtrotation.models.player import Player
from courtrotation.models.roster import Roster
from courtrotation.session import Session
from courtrotation.type_hints import Clock
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]


# ========== Migration ==========


def migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade a saved payload to the current schema.

    Payloads without a ``version`` key use the first camelCase layout
    (version 1). Unknown level labels fall back to ``"A/B/C"`` and missing
    history maps default to empty.

    Raises:
        SchemaVersionException: payload written by a newer release
        MalformedSessionException: payload is not a mapping, or a version 1
            entry lacks a required field
    """
    if not isinstance(data, dict):
        raise MalformedSessionException("Session data must be a JSON object")
    version = data.get("version", 1)
    if not isinstance(version, int) or version < 1:
        raise SchemaVersionException(f"Unknown session schema version {version!r}")
    if version > SCHEMA_VERSION:
        raise SchemaVersionException(
            f"Session schema version {version} is newer than supported "
            f"version {SCHEMA_VERSION}"
        )
    if version == 1:
        logger.info("Migrating session data from schema version 1")
        try:
            data = _migrate_v1(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedSessionException(
                f"Version 1 session data is incomplete: {e!r}"
            ) from e
    return data


def _migrate_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    config = data.get("config") or {}
    court_count = config.get("courtCount", DEFAULT_COURT_COUNT)

    players = []
    for index, member in enumerate(data.get("members") or []):
        level = member.get("level")
        if level not in LEVEL_OPTIONS:
            level = DEFAULT_LEVEL
        players.append(
            {
                "id": member["id"],
                "name": member.get("name") or "?",
                "level": level,
                "active": member.get("isActive", True),
                "play_count": member.get("playCount", 0),
                "imputed_play_count": member.get("imputedPlayCount", 0),
                # Milliseconds in version 1
                "last_played_at": member.get("lastPlayedTime", 0) / 1000,
                "match_history": member.get("matchHistory") or {},
                "pair_history": member.get("pairHistory") or {},
                "fixed_partner_id": member.get("fixedPairMemberId"),
                "order": member.get("sortOrder", index),
                "memo": member.get("memo", ""),
            }
        )

    history = []
    for record in data.get("matchHistory") or []:
        history.append(
            {
                "id": str(record.get("id", "")),
                # Version 1 stored only a wall clock label
                "timestamp": 0,
                "court_id": record["courtId"],
                "player_ids": record["playerIds"],
                "player_names": record.get("players", ["?"] * 4),
                "level": record.get("level"),
            }
        )

    return {
        "version": SCHEMA_VERSION,
        "config": {
            "court_count": court_count,
            "level_priority": PRIORITY_STRONG if config.get("levelStrict") else PRIORITY_NONE,
            "order_first_match_by_list": config.get("orderFirstMatchByList", False),
            "plan_ahead": config.get("bulkOnlyMode", False),
        },
        "players": players,
        "courts": data.get("courts") or [],
        "planned": data.get("nextMatches") or [],
        "history": history,
    }


# ========== Sessions ==========


def dump_session(session: Session) -> str:
    """Serialize a session to a JSON string."""
    data = {"version": SCHEMA_VERSION}
    data.update(session.to_dict())
    return json.dumps(data, indent=2, ensure_ascii=False)


def parse_session(
    text: str, rng: Optional[RandomSource] = None, clock: Optional[Clock] = None
) -> Session:
    """Build a session from a JSON string, migrating older layouts.

    Raises:
        MalformedSessionException: not JSON, or fields missing or invalid
        SchemaVersionException: unsupported schema version
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSessionException(f"Session file is not valid JSON: {e}") from e

    data = migrate(data)
    try:
        session = Session.from_dict(data, rng=rng, clock=clock)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedSessionException(f"Session data is incomplete: {e}") from e
    except CourtRotationException as e:
        raise MalformedSessionException(f"Session data is invalid: {e}") from e
    return session


def save_session(session: Session, path: PathLike) -> Path:
    """Write a session file and return its path."""
    path = Path(path)
    try:
        path.write_text(dump_session(session), encoding="utf-8")
    except OSError as e:
        raise PersistenceException(f"Could not save session to {path}: {e}") from e
    logger.info("Session saved to %s", path)
    return path


def load_session(
    path: PathLike, rng: Optional[RandomSource] = None, clock: Optional[Clock] = None
) -> Session:
    """Read a session file written by ``save_session`` or an older release."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PersistenceException(f"Could not read session from {path}: {e}") from e
    session = parse_session(text, rng=rng, clock=clock)
    logger.info("Session loaded from %s (%s players)", path, len(session.roster))
    return session


# ========== Member lists ==========


def export_members(roster: Roster) -> List[Dict[str, Any]]:
    """Membership-only backup: no counters, histories or active flags."""
    return [
        {
            "id": p.id,
            "name": p.name,
            "level": p.level,
            "fixed_partner_id": p.fixed_partner_id,
            "order": p.order,
            "memo": p.memo,
        }
        for p in roster.by_display_order()
    ]


def import_members(data: Any) -> Roster:
    """Rebuild a roster from ``export_members`` output.

    Everyone comes back active with fresh counters. Unknown levels fall back
    to ``"A/B/C"`` and one-sided partner links are cleared.
    """
    if not isinstance(data, list):
        raise MalformedSessionException("Member list must be a JSON array")
    players = []
    try:
        for index, item in enumerate(data):
            level = item.get("level")
            players.append(
                Player(
                    id=int(item["id"]),
                    name=item.get("name") or "?",
                    level=level if level in LEVEL_OPTIONS else DEFAULT_LEVEL,
                    fixed_partner_id=item.get("fixed_partner_id"),
                    order=int(item.get("order", index)),
                    memo=item.get("memo", ""),
                )
            )
        roster = Roster(players)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MalformedSessionException(f"Member list entry is invalid: {e}") from e
    except CourtRotationException as e:
        raise MalformedSessionException(f"Member list is invalid: {e}") from e
    roster.repair_fixed_partners()
    logger.info("Imported %s members", len(roster))
    return roster
