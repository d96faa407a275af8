"""Match selector: choose one group of four from a candidate pool.

Three interchangeable strategies share one entry point, ``select_match``:

* ``none``   - four greedy role picks (W, X, Y, Z) repeated a few times, the
  quad with the least shared history wins.
* ``weak`` / ``strong`` - exhaustive scoring of every four-player subset and
  team split among the most urgent sixteen players. ``strong`` ranks level
  compatibility above variety, ``weak`` the reverse.

A "first timers by list" override takes precedence over all of them.
"""

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

from itertools import combinations
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from courtrotation.constants import (
    FAIRNESS_SPREAD,
    FAIRNESS_WEIGHT,
    FIXED_PAIR_PENALTY,
    GOOD_ENOUGH_COST,
    JITTER_SCALE,
    LEVEL_POOL_SIZE,
    OPPONENT_REPEAT_WEIGHT,
    PLAYERS_PER_MATCH,
    PRIORITY_NONE,
    PRIORITY_STRONG,
    QUAD_ATTEMPTS,
    STRONG_LEVEL_WEIGHT,
    TEAMMATE_REPEAT_WEIGHT,
    WEAK_SCATTER_WEIGHT,
)
from courtrotation.engine.randomness import RandomSource, choose, shuffled
from courtrotation.models.match import Match
from courtrotation.models.player import Player
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)

TeamSplit = Tuple[Tuple[Player, Player], Tuple[Player, Player]]


class CandidatePool:
    """Read-only view of the candidates for one selection.

    Holds the pool-wide minima used by the role criteria and resolves fixed
    partners that are present in the pool.
    """

    def __init__(self, candidates: Sequence[Player]) -> None:
        self.players: List[Player] = list(candidates)
        self.by_id: Dict[int, Player] = {p.id: p for p in self.players}
        self.min_play_count = min((p.play_count for p in self.players), default=0)
        self.min_last_played = min((p.last_played_at for p in self.players), default=0)

    def __len__(self) -> int:
        return len(self.players)

    def partner_in_pool(self, player: Player) -> Optional[Player]:
        """Mutual fixed partner of ``player`` if that partner is a candidate."""
        partner = self.by_id.get(player.fixed_partner_id)
        if partner is None or partner.fixed_partner_id != player.id:
            return None
        return partner

    def at_minimum(self, player: Player) -> int:
        """0 when the player sits at the pool minimum play count or last-played time."""
        if (
            player.play_count == self.min_play_count
            or player.last_played_at == self.min_last_played
        ):
            return 0
        return 1


# ========== Unconstrained role criteria ==========


def _has_other_free_partner(
    player: Player, anchor: Player, pool: CandidatePool, remaining: Set[int]
) -> int:
    partner = pool.partner_in_pool(player)
    if partner is None or partner.id == anchor.id or partner.id not in remaining:
        return 0
    return 1


def w_key(player: Player) -> tuple:
    """W: least played, then longest waiting."""
    return (player.play_count, player.last_played_at)


def x_key(player: Player, w: Player, pool: CandidatePool, remaining: Set[int]) -> tuple:
    """X: W's fixed partner first, keep other pairs intact, then freshest partner for W."""
    return (
        0 if pool.partner_in_pool(w) is player else 1,
        _has_other_free_partner(player, w, pool, remaining),
        pool.at_minimum(player),
        w.pair_count(player.id),
        w.match_count(player.id),
    )


def y_key(player: Player, w: Player, x: Player, pool: CandidatePool) -> tuple:
    """Y: due players first, then least history with W, then with X."""
    return (
        pool.at_minimum(player),
        w.encounter_count(player.id),
        x.encounter_count(player.id),
    )


def z_key(
    player: Player,
    w: Player,
    x: Player,
    y: Player,
    pool: CandidatePool,
    remaining: Set[int],
) -> tuple:
    """Z: mirror of X relative to Y, then least combined history with W and X."""
    return (
        0 if pool.partner_in_pool(y) is player else 1,
        _has_other_free_partner(player, y, pool, remaining),
        pool.at_minimum(player),
        y.pair_count(player.id),
        y.match_count(player.id),
        w.encounter_count(player.id) + x.encounter_count(player.id),
    )


def pick_best(
    remaining: Sequence[Player], key: Callable[[Player], tuple], rng: RandomSource
) -> Optional[Player]:
    """Pick uniformly among the players tying on the lowest key."""
    if not remaining:
        return None
    keyed = [(key(p), p) for p in remaining]
    best = min(k for k, _ in keyed)
    top = [p for k, p in keyed if k == best]
    return choose(rng, top)


def build_quad(pool: CandidatePool, rng: RandomSource) -> Optional[List[Player]]:
    """One W, X, Y, Z pass; None if the pool runs out."""
    remaining = list(pool.players)

    def take(key: Callable[[Player], tuple]) -> Optional[Player]:
        chosen = pick_best(remaining, key, rng)
        if chosen is not None:
            remaining.remove(chosen)
        return chosen

    def remaining_ids() -> Set[int]:
        return {p.id for p in remaining}

    w = take(w_key)
    if w is None:
        return None
    free = remaining_ids()
    x = take(lambda p: x_key(p, w, pool, free))
    if x is None:
        return None
    y = take(lambda p: y_key(p, w, x, pool))
    if y is None:
        return None
    free = remaining_ids()
    z = take(lambda p: z_key(p, w, x, y, pool, free))
    if z is None:
        return None
    return [w, x, y, z]


def _is_honored_pair(a: Player, b: Player) -> bool:
    return a.fixed_partner_id == b.id and b.fixed_partner_id == a.id


def quad_pairing_cost(quad: Sequence[Player]) -> int:
    """Shared history over the six pairs of a W, X, Y, Z quad.

    Teammate pairs that honor a fixed partnership are left out. A fixed pair
    split across the two teams is still counted.
    """
    total = 0
    teams = {(0, 1), (2, 3)}
    for i, j in combinations(range(4), 2):
        if (i, j) in teams and _is_honored_pair(quad[i], quad[j]):
            continue
        total += quad[i].encounter_count(quad[j].id)
    return total


def select_unconstrained(
    candidates: Sequence[Player], rng: RandomSource
) -> Optional[Match]:
    """Priority ``none``: cheapest of up to four greedy quads."""
    pool = CandidatePool(candidates)
    if len(pool) < PLAYERS_PER_MATCH:
        return None

    quads = []
    for _ in range(QUAD_ATTEMPTS):
        quad = build_quad(pool, rng)
        if quad is not None:
            quads.append(quad)
    if not quads:
        return None

    best = min(quads, key=quad_pairing_cost)
    w, x, y, z = best
    logger.debug(
        "Unconstrained pick %s/%s vs %s/%s (cost %s of %s attempts)",
        w.id,
        x.id,
        y.id,
        z.id,
        quad_pairing_cost(best),
        len(quads),
    )
    return Match(w.id, x.id, y.id, z.id)


# ========== Level-priority scoring ==========


def urgency_key(player: Player) -> tuple:
    """Least played first, then most imputed, then longest waiting."""
    return (player.play_count, -player.imputed_play_count, player.last_played_at)


def restrict_level_pool(candidates: Sequence[Player], rng: RandomSource) -> List[Player]:
    """The most urgent players within one match of the pool minimum, at most sixteen."""
    if not candidates:
        return []
    minimum = min(p.play_count for p in candidates)
    within = [p for p in candidates if p.play_count <= minimum + FAIRNESS_SPREAD]
    # Shuffle before the stable sort so equal-urgency players rotate
    ordered = sorted(shuffled(rng, within), key=urgency_key)
    return ordered[:LEVEL_POOL_SIZE]


def team_splits(quad: Sequence[Player]) -> List[TeamSplit]:
    """The three ways to split four players into two unordered teams."""
    a, b, c, d = quad
    return [
        ((a, b), (c, d)),
        ((a, c), (b, d)),
        ((a, d), (b, c)),
    ]


def fixed_pair_violations(split: TeamSplit, pool: CandidatePool) -> int:
    """Players in the split whose available fixed partner is not their teammate."""
    violations = 0
    for team in split:
        for player, mate in (team, team[::-1]):
            partner = pool.partner_in_pool(player)
            if partner is not None and partner.id != mate.id:
                violations += 1
    return violations


def fairness_penalty(split: TeamSplit, min_play_count: int) -> int:
    total = sum(p.play_count for team in split for p in team)
    return (total - PLAYERS_PER_MATCH * min_play_count) * FAIRNESS_WEIGHT


def scatter_penalty(split: TeamSplit) -> int:
    """Repeat partners weigh twenty times a repeat opponent."""
    (a, b), (c, d) = split
    teammates = a.pair_count(b.id) + c.pair_count(d.id)
    opponents = (
        a.match_count(c.id)
        + a.match_count(d.id)
        + b.match_count(c.id)
        + b.match_count(d.id)
    )
    return teammates * TEAMMATE_REPEAT_WEIGHT + opponents * OPPONENT_REPEAT_WEIGHT


def level_penalty(split: TeamSplit) -> int:
    """Incompatible pairs among both teams and one cross-team reference pair."""
    (a, b), (c, d) = split
    checks = [(a, b), (c, d), (a, c)]
    return sum(0 if x.is_level_compatible(y) else 1 for x, y in checks)


def split_cost(
    split: TeamSplit, priority: str, pool: CandidatePool, min_play_count: int
) -> float:
    """Deterministic part of the cost of one quad with one team split."""
    scatter = scatter_penalty(split)
    level = level_penalty(split)
    if priority == PRIORITY_STRONG:
        combined = level * STRONG_LEVEL_WEIGHT + scatter
    else:
        combined = scatter * WEAK_SCATTER_WEIGHT + level
    return (
        fixed_pair_violations(split, pool) * FIXED_PAIR_PENALTY
        + fairness_penalty(split, min_play_count)
        + combined
    )


def _scored_splits(
    players: Sequence[Player],
    priority: str,
    pool: CandidatePool,
    min_play_count: int,
    rng: RandomSource,
) -> Iterator[Tuple[float, TeamSplit]]:
    for quad in combinations(players, PLAYERS_PER_MATCH):
        for split in team_splits(quad):
            jitter = rng.next() * JITTER_SCALE
            yield split_cost(split, priority, pool, min_play_count) + jitter, split


def select_by_level(
    candidates: Sequence[Player], priority: str, rng: RandomSource
) -> Optional[Match]:
    """Priority ``weak`` or ``strong``: lowest-cost split in the bounded pool."""
    restricted = restrict_level_pool(candidates, rng)
    if len(restricted) < PLAYERS_PER_MATCH:
        return None
    # Only partners who made the restricted pool can be charged
    pool = CandidatePool(restricted)
    min_play_count = pool.min_play_count

    best_cost: Optional[float] = None
    best_split: Optional[TeamSplit] = None
    examined = 0
    for cost, split in _scored_splits(restricted, priority, pool, min_play_count, rng):
        examined += 1
        if best_cost is None or cost < best_cost:
            best_cost, best_split = cost, split
            if best_cost < GOOD_ENOUGH_COST:
                break

    (a, b), (c, d) = best_split
    logger.debug(
        "%s-priority pick %s/%s vs %s/%s cost %.2f after %s splits",
        priority,
        a.id,
        b.id,
        c.id,
        d.id,
        best_cost,
        examined,
    )
    return Match(a.id, b.id, c.id, d.id, level=a.level)


# ========== Entry point ==========


def select_first_by_list(
    candidates: Sequence[Player], priority: str
) -> Optional[Match]:
    """First four players in display order who have not played yet."""
    first_timers = sorted(
        (p for p in candidates if p.play_count == 0), key=lambda p: (p.order, p.id)
    )
    if len(first_timers) < PLAYERS_PER_MATCH:
        return None
    a, b, c, d = first_timers[:PLAYERS_PER_MATCH]
    level = None if priority == PRIORITY_NONE else a.level
    return Match(a.id, b.id, c.id, d.id, level=level)


def select_match(
    candidates: Sequence[Player],
    priority: str,
    rng: RandomSource,
    order_first_by_list: bool = False,
) -> Optional[Match]:
    """Choose one match from ``candidates`` or return None.

    Parameters
    ----------
    candidates : sequence of Player
        Output of the candidate filter.
    priority : str
        ``"none"``, ``"weak"`` or ``"strong"``.
    rng : RandomSource
        Source for every tie-break.
    order_first_by_list : bool
        Apply the first-timers-by-list override when it can fill a court.
    """
    if len(candidates) < PLAYERS_PER_MATCH:
        return None
    if order_first_by_list:
        match = select_first_by_list(candidates, priority)
        if match is not None:
            return match
    if priority == PRIORITY_NONE:
        return select_unconstrained(candidates, rng)
    return select_by_level(candidates, priority, rng)
