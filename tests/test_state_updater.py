import pytest

from courtrotation.engine.state_updater import (
    apply_match,
    commit_match,
    impute_inactive,
    make_history_record,
)
from courtrotation.exceptions import InvalidMatchException
from courtrotation.models import Match, Player, Roster


def _roster(count, **overrides):
    return Roster(Player(id=i, name=f"P{i}", **overrides) for i in range(1, count + 1))


def test_commit_updates_four_players_symmetrically():
    roster = _roster(4)
    commit_match(roster, Match(1, 2, 3, 4), now=50.0)

    for player in roster:
        assert player.play_count == 1
        assert player.last_played_at == 50.0

    assert roster[1].pair_history == {2: 1}
    assert roster[2].pair_history == {1: 1}
    assert roster[3].pair_history == {4: 1}
    assert roster[4].pair_history == {3: 1}
    assert roster[1].match_history == {3: 1, 4: 1}
    assert roster[3].match_history == {1: 1, 2: 1}
    for a in roster:
        for b in roster:
            assert a.pair_count(b.id) == b.pair_count(a.id)
            assert a.match_count(b.id) == b.match_count(a.id)


def test_commit_leaves_other_active_players_untouched():
    roster = _roster(6)
    roster[5].play_count = 0
    commit_match(roster, Match(1, 2, 3, 4), now=1.0)

    assert roster[5].play_count == 0
    assert roster[6].play_count == 0
    assert roster[5].last_played_at == 0


def test_inactive_player_is_raised_to_active_average():
    roster = _roster(5)
    roster[5].active = False

    commit_match(roster, Match(1, 2, 3, 4), now=1.0)
    commit_match(roster, Match(1, 3, 2, 4), now=2.0)

    assert roster[5].play_count == 2
    assert roster[5].imputed_play_count == 2
    assert roster[5].pair_history == {}


def test_imputation_never_overshoots_or_lowers():
    roster = _roster(6)
    roster[5].active = False
    roster[5].play_count = 7
    roster[6].active = False
    roster[6].play_count = 1
    for pid in (1, 2, 3, 4):
        roster[pid].play_count = 3

    raised = impute_inactive(roster)

    assert raised == {6: 2}
    assert roster[5].play_count == 7
    assert roster[5].imputed_play_count == 0
    assert roster[6].play_count == 3


def test_imputation_waits_for_active_players():
    roster = _roster(2, active=False)
    assert impute_inactive(roster) == {}


def test_apply_match_returns_a_new_roster():
    roster = _roster(4)
    updated = apply_match(roster, Match(1, 2, 3, 4), now=3.0)

    assert updated[1].play_count == 1
    assert roster[1].play_count == 0


def test_history_record_carries_names_and_level():
    roster = _roster(4)
    record = make_history_record(roster, Match(4, 3, 2, 1, level="B"), court_id=2, now=9.0)

    assert record.player_ids == (4, 3, 2, 1)
    assert record.player_names == ("P4", "P3", "P2", "P1")
    assert record.level == "B"
    assert record.court_id == 2
    assert record.id.startswith("HistoryRecord-")


def test_match_rejects_repeated_players():
    with pytest.raises(InvalidMatchException):
        Match(1, 2, 3, 1)
