import pytest

from courtrotation.cli import (
    build_simulation,
    create_parser,
    main,
    most_repeated_pairs,
    run_simulation,
)
from courtrotation.console import COMMANDS, Console, create_completer
from courtrotation.engine.randomness import SeededRandom
from courtrotation.session import Session


def _console(players=0):
    console = Console(Session(rng=SeededRandom(1), clock=lambda: 5.0))
    for i in range(players):
        console.execute(f"add P{i + 1}")
    return console


def test_simulate_prints_summary(capsys):
    code = main(
        ["simulate", "--players", "12", "--courts", "2", "--rounds", "3", "--seed", "1"]
    )
    out = capsys.readouterr().out

    assert code == 0
    assert "Matches played: 6" in out
    assert "P12" in out


def test_simulate_rejects_bad_values():
    assert main(["simulate", "--players", "-1"]) == 1
    with pytest.raises(SystemExit):
        main(["simulate", "--courts", "9"])
    with pytest.raises(SystemExit):
        main(["simulate", "--priority", "extreme"])


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "simulate" in capsys.readouterr().out


def test_late_arrivals_are_imputed():
    args = create_parser().parse_args(
        ["simulate", "--players", "8", "--courts", "1", "--rounds", "4", "--inactive", "2", "--seed", "2"]
    )
    session = build_simulation(args)
    late_ids = [p.id for p in session.players[: args.inactive]]
    assert late_ids == [1, 2]
    assert not session.roster[1].active

    run_simulation(session, args.rounds, late_ids)

    assert len(session.history) == 4
    for player_id in late_ids:
        assert session.roster[player_id].active
        assert session.roster[player_id].imputed_play_count == 1


def test_repeated_pairs_are_sorted_by_count():
    session = Session(rng=SeededRandom(4))
    for name in ("a", "b", "c", "d"):
        session.add_player(name)
    for _ in range(3):
        session.rotate()

    pairs = most_repeated_pairs(session, limit=10)
    counts = [count for _, _, count in pairs]
    assert counts == sorted(counts, reverse=True)
    assert sum(counts) == 6


def test_console_adds_and_shows_players():
    console = _console()
    assert "Added #1" in console.execute("add Aki A")
    assert "Added #2" in console.execute('add "Ben Ito" B/C')
    shown = console.execute("show")
    assert "Aki" in shown
    assert "Ben Ito" in shown


def test_console_reports_usage_and_errors():
    console = _console(players=2)
    assert "Usage: add NAME [LEVEL]" in console.execute("add")
    assert "Usage: remove ID" in console.execute("remove one")
    assert "Unknown command" in console.execute("serve")
    assert "Error" in console.execute("pair 1 1")
    assert "Error" in console.execute("add Cy Z")
    assert "Error" in console.execute("courts 12")


def test_console_runs_a_rotation():
    console = _console(players=9)
    console.execute("courts 2")
    out = console.execute("rotate")

    assert "Court 1:" in out
    assert "Court 2:" in out
    assert len(console.session.history) == 2
    assert "Court 1:" in console.execute("history")


def test_console_plan_ahead():
    console = _console(players=8)
    assert "Plan-ahead is off" in console.execute("plan")
    out = console.execute("planahead on")
    assert "Next batch" in out
    assert "Next batch" in console.execute("plan new")
    assert console.execute("planahead off") == "Plan-ahead off"


def test_console_assign_and_finish():
    console = _console(players=4)
    assert "Court 1:" in console.execute("assign 1")
    assert "finished" in console.execute("finish 1")
    assert "already empty" in console.execute("finish 1")
    assert "Error" in console.execute("assign 9")


def test_console_load_of_broken_legacy_file_exits_with_error(tmp_path):
    path = tmp_path / "old.json"
    path.write_text('{"members": [{"name": "x"}]}', encoding="utf-8")

    assert main(["console", "--load", str(path)]) == 1


def test_console_assign_refused_while_planning_ahead():
    console = _console(players=8)
    console.execute("planahead on")
    assert "disabled while planning ahead" in console.execute("assign 1")
    assert console.session.history == []


def test_console_save_and_load(tmp_path):
    console = _console(players=4)
    path = tmp_path / "session.json"
    assert "saved" in console.execute(f"save {path}")

    other = _console()
    assert "Loaded 4 players" in other.execute(f"load {path}")
    assert len(other.session.roster) == 4


def test_console_help_lists_every_command():
    out = _console().execute("help")
    for command in COMMANDS:
        assert command in out
    assert "pair ID PARTNER_ID" in _console().execute("help pair")


def test_completer_knows_commands():
    assert create_completer() is not None
