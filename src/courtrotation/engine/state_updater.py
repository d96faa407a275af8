"""State updater: apply a confirmed match to the roster."""

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

from typing import Dict

from courtrotation.models.match import HistoryRecord, Match
from courtrotation.models.roster import Roster
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


def commit_match(roster: Roster, match: Match, now: float) -> Dict[int, int]:
    """Apply ``match`` to ``roster`` in place.

    Each of the four players gains one play, ``last_played_at = now``, one
    partner count and one opponent count per opponent; both sides of every
    relationship move together. Inactive players are then raised to the
    active average.

    Args:
        roster: Roster to mutate
        match: The confirmed match
        now: Commit timestamp

    Returns:
        Mapping of inactive player id -> amount imputed by this commit
    """
    for player_id in match.player_ids:
        player = roster[player_id]
        partner_id = match.partner_of(player_id)
        player.play_count += 1
        player.last_played_at = now
        player.pair_history[partner_id] = player.pair_count(partner_id) + 1
        for opponent_id in match.opponents_of(player_id):
            player.match_history[opponent_id] = player.match_count(opponent_id) + 1

    imputed = impute_inactive(roster)
    logger.debug("Committed match %s, imputed %s", match.player_ids, imputed)
    return imputed


def impute_inactive(roster: Roster) -> Dict[int, int]:
    """Raise inactive players below the active average up to it.

    The raised amount is added to ``imputed_play_count`` so a returning
    player is not treated as overdue.
    """
    if not roster.active_players():
        return {}
    average = roster.active_average_play_count()
    raised: Dict[int, int] = {}
    for player in roster:
        if not player.active and player.play_count < average:
            gap = average - player.play_count
            player.play_count = average
            player.imputed_play_count += gap
            raised[player.id] = gap
    return raised


def apply_match(roster: Roster, match: Match, now: float) -> Roster:
    """Pure form of ``commit_match``: returns an updated copy."""
    updated = roster.copy()
    commit_match(updated, match, now)
    return updated


def make_history_record(
    roster: Roster, match: Match, court_id: int, now: float
) -> HistoryRecord:
    """Ledger entry for ``match`` with the players' current names."""
    names = tuple(
        roster.get(pid).name if pid in roster else "?" for pid in match.player_ids
    )
    return HistoryRecord.create(
        timestamp=now,
        court_id=court_id,
        player_ids=match.player_ids,
        player_names=names,
        level=match.level,
    )
