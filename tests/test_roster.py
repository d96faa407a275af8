import pytest

from courtrotation.exceptions import (
    DuplicatePlayerException,
    InvalidFixedPartnerException,
    InvalidLevelException,
    PlayerNotFoundException,
)
from courtrotation.models import Player, Roster, levels_compatible


def _roster(count, **overrides):
    return Roster(Player(id=i, name=f"P{i}", order=i - 1, **overrides) for i in range(1, count + 1))


def test_level_compatibility_is_symbol_intersection():
    assert levels_compatible("A", "A/B")
    assert levels_compatible("A/B/C", "C")
    assert levels_compatible("B/C", "A/B")
    assert not levels_compatible("A", "B/C")
    assert not levels_compatible("A", "C")


def test_unknown_level_is_rejected():
    with pytest.raises(InvalidLevelException):
        Player(id=1, name="x", level="D")


def test_duplicate_id_is_rejected():
    roster = _roster(2)
    with pytest.raises(DuplicatePlayerException):
        roster.add(Player(id=1, name="again"))


def test_missing_player_raises():
    roster = _roster(2)
    with pytest.raises(PlayerNotFoundException):
        roster[99]
    assert roster.get(99) is None


def test_fixed_partner_is_symmetric():
    roster = _roster(4)
    roster.set_fixed_partner(1, 2)
    assert roster[1].fixed_partner_id == 2
    assert roster[2].fixed_partner_id == 1


def test_relinking_clears_previous_partners_on_both_sides():
    roster = _roster(4)
    roster.set_fixed_partner(1, 2)
    roster.set_fixed_partner(3, 4)
    roster.set_fixed_partner(1, 3)

    assert roster[1].fixed_partner_id == 3
    assert roster[3].fixed_partner_id == 1
    assert roster[2].fixed_partner_id is None
    assert roster[4].fixed_partner_id is None


def test_clearing_one_side_clears_the_other():
    roster = _roster(2)
    roster.set_fixed_partner(1, 2)
    roster.set_fixed_partner(2, None)
    assert roster[1].fixed_partner_id is None
    assert roster[2].fixed_partner_id is None


def test_self_and_unknown_partners_are_rejected():
    roster = _roster(2)
    with pytest.raises(InvalidFixedPartnerException):
        roster.set_fixed_partner(1, 1)
    with pytest.raises(InvalidFixedPartnerException):
        roster.set_fixed_partner(1, 42)


def test_repair_clears_one_sided_and_dangling_links():
    roster = Roster(
        [
            Player(id=1, name="a", fixed_partner_id=2),
            Player(id=2, name="b", fixed_partner_id=None),
            Player(id=3, name="c", fixed_partner_id=99),
        ]
    )
    repaired = roster.repair_fixed_partners()

    assert sorted(repaired) == [1, 3]
    assert all(p.fixed_partner_id is None for p in roster)


def test_deleting_fixed_partner_leaves_no_dangling_reference():
    roster = _roster(3)
    roster.set_fixed_partner(1, 2)
    roster[2].pair_history[1] = 3
    roster[3].match_history[1] = 2

    roster.remove(1)

    assert 1 not in roster
    assert roster[2].fixed_partner_id is None
    assert 1 not in roster[2].pair_history
    assert 1 not in roster[3].match_history


def test_newcomer_starts_at_active_average():
    roster = _roster(3)
    roster[1].play_count = 4
    roster[2].play_count = 3
    roster[3].play_count = 9
    roster[3].active = False

    player = roster.add_player("late", "B")

    assert player.id == 4
    assert player.play_count == 3
    assert player.imputed_play_count == 3
    assert player.order == 3


def test_active_average_is_zero_without_active_players():
    roster = _roster(2, active=False)
    assert roster.active_average_play_count() == 0


def test_reorder_puts_unlisted_players_last():
    roster = _roster(4)
    roster.reorder([3, 1])
    assert [p.id for p in roster.by_display_order()] == [3, 1, 2, 4]


def test_reorder_rejects_unknown_ids():
    roster = _roster(2)
    with pytest.raises(PlayerNotFoundException):
        roster.reorder([1, 7])


def test_reset_zeroes_counters_but_keeps_partners():
    roster = _roster(2)
    roster.set_fixed_partner(1, 2)
    player = roster[1]
    player.play_count = 5
    player.imputed_play_count = 2
    player.last_played_at = 100.0
    player.pair_history[2] = 1
    player.match_history[2] = 1

    roster.reset_counters()

    assert player.play_count == 0
    assert player.imputed_play_count == 0
    assert player.last_played_at == 0
    assert player.pair_history == {}
    assert player.match_history == {}
    assert player.fixed_partner_id == 2


def test_copy_does_not_share_histories():
    roster = _roster(2)
    clone = roster.copy()
    clone[1].pair_history[2] = 1
    clone[1].play_count = 3

    assert roster[1].pair_history == {}
    assert roster[1].play_count == 0


def test_serialized_roster_keeps_integer_history_keys():
    roster = _roster(2)
    roster[1].pair_history[2] = 2
    roster.set_fixed_partner(1, 2)

    restored = Roster.from_list(roster.to_list())

    assert restored[1].pair_history == {2: 2}
    assert restored[2].fixed_partner_id == 1
