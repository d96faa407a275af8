import json

import pytest

from courtrotation.engine.randomness import SeededRandom
from courtrotation.exceptions import (
    MalformedSessionException,
    PersistenceException,
    SchemaVersionException,
)
from courtrotation.models import SessionConfig
from courtrotation.persistence import (
    dump_session,
    export_members,
    import_members,
    load_session,
    migrate,
    parse_session,
    save_session,
)
from courtrotation.session import Session

LEGACY_PAYLOAD = {
    "members": [
        {
            "id": 1,
            "name": "Aki",
            "level": "A",
            "isActive": True,
            "playCount": 3,
            "imputedPlayCount": 1,
            "lastPlayedTime": 1700000000000,
            "matchHistory": {"2": 1},
            "pairHistory": {"3": 1},
            "fixedPairMemberId": 3,
            "sortOrder": 0,
            "memo": "2401",
        },
        {"id": 2, "name": "Ben", "level": "beginner", "isActive": False, "playCount": 2},
        {"id": 3, "name": "Cho", "level": "B/C", "fixedPairMemberId": 1, "sortOrder": 2},
    ],
    "courts": [{"id": 1, "match": None}, {"id": 2, "match": None}],
    "nextMatches": [],
    "matchHistory": [
        {
            "id": "17000000000001",
            "timestamp": "19:05",
            "courtId": 1,
            "players": ["Aki", "Ben", "Cho", "Dai"],
            "playerIds": [1, 2, 3, 4],
            "level": "A",
        }
    ],
    "config": {
        "courtCount": 2,
        "levelStrict": True,
        "zoomLevel": 1.0,
        "bulkOnlyMode": False,
        "orderFirstMatchByList": True,
    },
    "nextMemberId": 4,
}


def _session():
    session = Session(SessionConfig(court_count=2), rng=SeededRandom(5), clock=lambda: 10.0)
    for name in ("Aki", "Ben", "Cho", "Dai", "Eri", "Fum"):
        session.add_player(name)
    session.set_fixed_partner(1, 2)
    session.rotate()
    return session


def test_dump_then_parse_restores_session():
    session = _session()
    text = dump_session(session)

    assert json.loads(text)["version"] == 2
    restored = parse_session(text)
    assert restored.to_dict() == session.to_dict()


def test_save_and_load_file(tmp_path):
    session = _session()
    path = save_session(session, tmp_path / "club.json")

    restored = load_session(path)

    assert len(restored.roster) == 6
    assert restored.roster[2].fixed_partner_id == 1
    assert len(restored.history) == 1


def test_missing_file_is_a_persistence_error(tmp_path):
    with pytest.raises(PersistenceException):
        load_session(tmp_path / "nothing.json")


def test_legacy_payload_is_migrated():
    data = migrate(json.loads(json.dumps(LEGACY_PAYLOAD)))

    assert data["version"] == 2
    assert data["config"] == {
        "court_count": 2,
        "level_priority": "strong",
        "order_first_match_by_list": True,
        "plan_ahead": False,
    }
    aki, ben, cho = data["players"]
    assert aki["last_played_at"] == 1700000000.0
    assert ben["level"] == "A/B/C"
    assert ben["match_history"] == {}
    assert cho["order"] == 2
    assert data["history"][0]["player_ids"] == [1, 2, 3, 4]


def test_legacy_session_loads():
    session = parse_session(json.dumps(LEGACY_PAYLOAD))

    assert session.config.level_priority == "strong"
    assert session.roster[1].pair_history == {3: 1}
    assert session.roster[3].fixed_partner_id == 1
    assert session.roster[2].active is False
    assert session.history[0].player_names == ("Aki", "Ben", "Cho", "Dai")


def test_strict_flag_off_maps_to_no_priority():
    payload = dict(LEGACY_PAYLOAD, config={"courtCount": 3, "levelStrict": False})
    assert migrate(payload)["config"]["level_priority"] == "none"


def test_newer_schema_is_refused():
    with pytest.raises(SchemaVersionException):
        migrate({"version": 3})
    with pytest.raises(SchemaVersionException):
        parse_session(json.dumps({"version": "two"}))


def test_garbage_is_malformed():
    with pytest.raises(MalformedSessionException):
        parse_session("{not json")
    with pytest.raises(MalformedSessionException):
        parse_session("[1, 2]")
    with pytest.raises(MalformedSessionException):
        parse_session(json.dumps({"version": 2, "players": [{"name": "no id"}]}))
    with pytest.raises(MalformedSessionException):
        parse_session(json.dumps({"version": 2, "players": [{"id": 1, "level": "Z"}]}))


@pytest.mark.parametrize(
    "payload",
    [
        {"members": [{"name": "x"}]},
        {"members": [{"id": 1, "lastPlayedTime": None}]},
        {"members": ["not a member"]},
        {"matchHistory": [{"id": 1, "playerIds": [1, 2, 3, 4]}]},
        {"config": "strict"},
    ],
)
def test_incomplete_legacy_payload_is_malformed(payload):
    with pytest.raises(MalformedSessionException):
        parse_session(json.dumps(payload))


def test_member_export_drops_counters():
    session = _session()
    exported = export_members(session.roster)

    assert len(exported) == 6
    assert set(exported[0]) == {"id", "name", "level", "fixed_partner_id", "order", "memo"}


def test_member_import_starts_fresh():
    session = _session()
    session.set_active(4, False)
    roster = import_members(export_members(session.roster))

    assert all(p.active for p in roster)
    assert all(p.play_count == 0 and p.pair_history == {} for p in roster)
    assert roster[1].fixed_partner_id == 2


def test_member_import_repairs_links_and_levels():
    roster = import_members(
        [
            {"id": 1, "name": "a", "level": "X", "fixed_partner_id": 2},
            {"id": 2, "name": "b"},
        ]
    )
    assert roster[1].level == "A/B/C"
    assert roster[1].fixed_partner_id is None


def test_member_import_rejects_non_lists():
    with pytest.raises(MalformedSessionException):
        import_members({"id": 1})
    with pytest.raises(MalformedSessionException):
        import_members([{"name": "missing id"}])
