from courtrotation.engine.randomness import SeededRandom
from courtrotation.engine.scheduler import CourtScheduler
from courtrotation.models import Player, Roster, SessionConfig


def _roster(count, **overrides):
    return Roster(
        Player(id=i, name=f"P{i}", order=i - 1, **overrides) for i in range(1, count + 1)
    )


def _scheduler(courts=4, priority="none", seed=1, **config):
    return CourtScheduler(
        SessionConfig(court_count=courts, level_priority=priority, **config),
        rng=SeededRandom(seed),
        clock=lambda: 100.0,
    )


def _placed(result):
    return [pid for match in result.matches for pid in match.player_ids]


def test_no_player_is_placed_twice_in_one_pass():
    for priority in ("none", "weak", "strong"):
        result = _scheduler(priority=priority).run(_roster(18), [1, 2, 3, 4])
        placed = _placed(result)
        assert len(result.matches) == 4
        assert len(placed) == len(set(placed))


def test_short_pool_leaves_later_courts_empty():
    result = _scheduler().run(_roster(10), [1, 2, 3])

    assert [c.id for c in result.courts] == [1, 2, 3]
    assert len(result.matches) == 2
    assert result.empty_court_ids == [3]


def test_busy_players_are_excluded():
    result = _scheduler().run(_roster(8), [2], busy_ids=[1, 2, 3, 4])
    assert set(_placed(result)) == {5, 6, 7, 8}


def test_inactive_players_are_never_scheduled():
    roster = _roster(8)
    roster[3].active = False
    result = _scheduler().run(roster, [1, 2])
    assert 3 not in _placed(result)
    assert len(result.matches) == 1


def test_commit_pass_updates_a_copy_and_records_matches():
    roster = _roster(8)
    result = _scheduler().run(roster, [1, 2])

    assert all(p.play_count == 0 for p in roster)
    assert all(p.play_count == 1 for p in result.roster)
    assert [r.court_id for r in result.records] == [1, 2]
    assert all(r.timestamp == 100.0 for r in result.records)


def test_plan_pass_changes_nothing():
    roster = _roster(8)
    result = _scheduler().plan(roster, [1, 2])

    assert len(result.matches) == 2
    assert result.records == []
    assert all(p.play_count == 0 for p in result.roster)


def test_same_seed_gives_same_schedule():
    for priority in ("none", "weak", "strong"):
        first = _scheduler(priority=priority, seed=11).run(_roster(14), [1, 2, 3])
        second = _scheduler(priority=priority, seed=11).run(_roster(14), [1, 2, 3])
        assert first.matches == second.matches


def test_asymmetric_partner_is_repaired_before_scheduling():
    roster = _roster(8)
    roster[1].fixed_partner_id = 2
    result = _scheduler().run(roster, [1])

    assert result.roster[1].fixed_partner_id is None
    assert len(result.matches) == 1


def test_list_order_override_fills_first_court_in_order():
    roster = _roster(8)
    result = _scheduler(order_first_match_by_list=True).run(roster, [1, 2])

    assert result.courts[0].match.player_ids == (1, 2, 3, 4)
    assert result.courts[1].match.player_ids == (5, 6, 7, 8)
