import itertools

import pytest

from courtrotation.engine.randomness import SeededRandom
from courtrotation.exceptions import (
    CourtNotFoundException,
    CourtOccupiedException,
    InvalidConfigurationException,
    InvalidLevelException,
    PlanAheadActiveException,
    PlayerNotFoundException,
)
from courtrotation.models import SessionConfig
from courtrotation.session import Session


def _session(players=8, seed=3, **config):
    ticks = itertools.count(1)
    session = Session(
        SessionConfig(**config),
        rng=SeededRandom(seed),
        clock=lambda: float(next(ticks)),
    )
    for i in range(players):
        session.add_player(f"P{i + 1}")
    return session


def _court_players(courts):
    return [pid for c in courts if c.match for pid in c.match.player_ids]


def test_rotate_fills_every_court():
    session = _session(players=9, court_count=2)
    courts = session.rotate()

    placed = _court_players(courts)
    assert len(placed) == 8
    assert len(set(placed)) == 8
    assert len(session.history) == 2
    assert sum(p.play_count for p in session.players) == 8


def test_history_is_newest_first():
    session = _session(court_count=1)
    session.rotate()
    session.rotate()
    assert session.history[0].timestamp > session.history[1].timestamp


def test_assign_court_skips_players_on_other_courts():
    session = _session(court_count=2)
    first = session.assign_court(1)
    second = session.assign_court(2)

    assert first is not None and second is not None
    assert not set(first.player_ids) & set(second.player_ids)

    session.finish_match(1)
    again = session.assign_court(1)
    assert set(again.player_ids) == set(first.player_ids)


def test_assign_court_errors():
    session = _session(court_count=2)
    session.assign_court(1)
    with pytest.raises(CourtOccupiedException):
        session.assign_court(1)
    with pytest.raises(CourtNotFoundException):
        session.assign_court(5)


def test_player_with_far_ahead_partner_still_gets_courts():
    session = _session(players=9, court_count=1, level_priority="strong")
    session.set_fixed_partner(1, 2)
    for player in session.players:
        player.play_count = 3 if player.id in (2, 7, 8, 9) else 0

    for _ in range(4):
        session.rotate()

    assert session.roster[1].play_count > 0


def test_assign_court_refused_while_planning_ahead():
    session = _session(court_count=2)
    session.set_plan_ahead(True)
    planned = [c.match for c in session.planned]

    with pytest.raises(PlanAheadActiveException):
        session.assign_court(1)
    assert session.history == []
    assert [c.match for c in session.planned] == planned


def test_assign_court_without_enough_players_returns_none():
    session = _session(players=6, court_count=2)
    session.assign_court(1)
    assert session.assign_court(2) is None
    assert len(session.history) == 1


def test_returning_player_is_not_overdue():
    session = _session(players=5, court_count=1)
    session.set_active(5, False)
    for _ in range(2):
        session.assign_court(1)
        session.finish_match(1)

    session.set_active(5, True)
    returning = session.roster[5]
    assert returning.play_count == 2
    assert returning.imputed_play_count == 2


def test_newcomer_joins_at_average():
    session = _session(players=4, court_count=1)
    session.rotate()
    session.rotate()
    late = session.add_player("late", "B/C", memo="guest")
    assert late.play_count == 2
    assert late.imputed_play_count == 2
    assert late.memo == "guest"


def test_removing_partner_clears_link_and_court():
    session = _session(court_count=2)
    session.set_fixed_partner(1, 2)
    session.rotate()
    on_court = next(c for c in session.courts if c.match and 1 in c.match)

    session.remove_player(1)

    assert session.roster[2].fixed_partner_id is None
    assert on_court.match is None
    assert all(1 not in p.pair_history for p in session.players)
    with pytest.raises(PlayerNotFoundException):
        session.remove_player(1)


def test_fixed_partners_play_together():
    session = _session(players=12, court_count=2)
    session.set_fixed_partner(3, 7)
    for _ in range(5):
        session.rotate()
        for court in session.courts:
            if court.match and 3 in court.match:
                assert court.match.partner_of(3) == 7


def test_plan_ahead_commits_the_planned_batch():
    session = _session(court_count=2)
    session.set_plan_ahead(True)
    planned = [c.match for c in session.planned]

    assert all(m is not None for m in planned)
    assert all(p.play_count == 0 for p in session.players)

    session.rotate()

    assert [c.match for c in session.courts] == planned
    assert len(session.history) == 2
    assert all(c.match is not None for c in session.planned)


def test_deactivating_a_planned_player_replans():
    session = _session(players=10, court_count=2)
    session.set_plan_ahead(True)
    leaving = session.planned_player_ids[0]

    session.set_active(leaving, False)

    assert leaving not in session.planned_player_ids
    assert session.refresh_plan() is False


def test_refresh_plan_reports_replan():
    session = _session(players=10, court_count=2)
    session.set_plan_ahead(True)
    session.roster[session.planned_player_ids[0]].active = False

    assert session.refresh_plan() is True
    assert session.refresh_plan() is False


def test_refresh_plan_is_noop_without_plan_ahead():
    session = _session()
    assert session.refresh_plan() is False
    assert session.planned == []


def test_court_count_changes_resize_courts():
    session = _session(court_count=3)
    session.rotate()
    session.set_court_count(2)
    assert session.court_ids == [1, 2]
    session.set_court_count(4)
    assert session.court_ids == [1, 2, 3, 4]
    assert session.courts[3].match is None
    with pytest.raises(InvalidConfigurationException):
        session.set_court_count(9)


def test_invalid_priority_keeps_previous_value():
    session = _session()
    session.set_level_priority("strong")
    with pytest.raises(InvalidConfigurationException):
        session.set_level_priority("extreme")
    assert session.config.level_priority == "strong"


def test_invalid_level_is_rejected():
    session = _session()
    with pytest.raises(InvalidLevelException):
        session.set_level(1, "Z")
    session.set_level(1, "A/B")
    assert session.roster[1].level == "A/B"


def test_reset_play_counts_clears_everything_but_the_roster():
    session = _session(court_count=2)
    session.set_fixed_partner(1, 2)
    session.rotate()
    session.reset_play_counts()

    assert session.history == []
    assert all(c.match is None for c in session.courts)
    assert all(p.play_count == 0 and p.pair_history == {} for p in session.players)
    assert session.roster[1].fixed_partner_id == 2


def test_reorder_and_memo():
    session = _session(players=3)
    session.reorder([3, 2, 1])
    session.set_memo(2, "left early")
    assert [p.id for p in session.players] == [3, 2, 1]
    assert session.roster[2].memo == "left early"


def test_session_round_trips_through_dict():
    session = _session(court_count=2, level_priority="weak")
    session.set_fixed_partner(1, 2)
    session.rotate()

    restored = Session.from_dict(session.to_dict())

    assert restored.config == session.config
    assert [c.match for c in restored.courts] == [c.match for c in session.courts]
    assert restored.history == session.history
    assert restored.roster.to_list() == session.roster.to_list()
