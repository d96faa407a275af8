"""Interactive console for running a session at the courts."""

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

import shlex
from typing import Callable, Dict, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter, WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from courtrotation.constants import LEVEL_OPTIONS, PRIORITY_MODES
from courtrotation.exceptions import CommandUsageException, CourtRotationException
from courtrotation.models.match import Court, Match
from courtrotation.persistence import load_session, save_session
from courtrotation.session import Session
from courtrotation.utils import setup_logger

logger = setup_logger(__name__)


# ANSI color codes for terminal output
class Colors:
    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


_ON_OFF = {"on": None, "off": None}

COMMANDS: Dict[str, Dict] = {
    "add": {"usage": "add NAME [LEVEL]", "description": "Add a player", "options": dict.fromkeys(LEVEL_OPTIONS)},
    "remove": {"usage": "remove ID", "description": "Remove a player", "options": {}},
    "on": {"usage": "on ID", "description": "Mark a player active", "options": {}},
    "off": {"usage": "off ID", "description": "Mark a player inactive", "options": {}},
    "level": {"usage": "level ID LEVEL", "description": "Change a player's level", "options": {}},
    "pair": {"usage": "pair ID PARTNER_ID", "description": "Make two players fixed partners", "options": {}},
    "unpair": {"usage": "unpair ID", "description": "Dissolve a fixed partnership", "options": {}},
    "courts": {"usage": "courts N", "description": "Set the number of courts (1-8)", "options": {}},
    "priority": {"usage": "priority MODE", "description": "Level priority: none, weak or strong", "options": dict.fromkeys(PRIORITY_MODES)},
    "listfirst": {"usage": "listfirst on|off", "description": "Fill first matches in list order", "options": _ON_OFF},
    "planahead": {"usage": "planahead on|off", "description": "Keep the next batch planned", "options": _ON_OFF},
    "assign": {"usage": "assign COURT", "description": "Fill one empty court", "options": {}},
    "finish": {"usage": "finish COURT", "description": "Clear a court", "options": {}},
    "rotate": {"usage": "rotate", "description": "Start the next batch on every court", "options": {}},
    "plan": {"usage": "plan [new]", "description": "Show the planned batch, 'new' regenerates it", "options": {"new": None}},
    "show": {"usage": "show", "description": "Show players and courts", "options": {}},
    "history": {"usage": "history [N]", "description": "Show the last N matches", "options": {}},
    "save": {"usage": "save FILE", "description": "Save the session", "options": {}},
    "load": {"usage": "load FILE", "description": "Load a session", "options": {}},
    "reset": {"usage": "reset", "description": "Reset play counts and history", "options": {}},
    "help": {"usage": "help [COMMAND]", "description": "Show commands", "options": {}},
    "exit": {"usage": "exit", "description": "Leave the console", "options": {}},
}


def create_completer() -> NestedCompleter:
    """Create autocomplete completer for the console."""
    completions = {}
    for cmd, info in COMMANDS.items():
        completions[cmd] = WordCompleter(list(info["options"])) if info["options"] else None
    completions["help"] = WordCompleter(list(COMMANDS))
    return NestedCompleter.from_nested_dict(completions)


def _int_arg(args: List[str], index: int, command: str) -> int:
    try:
        return int(args[index])
    except (IndexError, ValueError):
        raise CommandUsageException(f"Usage: {COMMANDS[command]['usage']}") from None


def _str_arg(args: List[str], index: int, command: str) -> str:
    if index >= len(args):
        raise CommandUsageException(f"Usage: {COMMANDS[command]['usage']}")
    return args[index]


def _flag_arg(args: List[str], command: str) -> bool:
    value = _str_arg(args, 0, command).lower()
    if value not in ("on", "off"):
        raise CommandUsageException(f"Usage: {COMMANDS[command]['usage']}")
    return value == "on"


class Console:
    """Command dispatcher bound to one session.

    ``execute`` turns one input line into printable text, so the console
    can be driven without a terminal.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        self.session = session if session is not None else Session()
        self._handlers: Dict[str, Callable[[List[str]], str]] = {
            "add": self._add,
            "remove": self._remove,
            "on": lambda args: self._set_active(args, True, "on"),
            "off": lambda args: self._set_active(args, False, "off"),
            "level": self._level,
            "pair": self._pair,
            "unpair": self._unpair,
            "courts": self._courts,
            "priority": self._priority,
            "listfirst": self._listfirst,
            "planahead": self._planahead,
            "assign": self._assign,
            "finish": self._finish,
            "rotate": self._rotate,
            "plan": self._plan,
            "show": self._show,
            "history": self._history,
            "save": self._save,
            "load": self._load,
            "reset": self._reset,
            "help": self._help,
        }

    def execute(self, line: str) -> str:
        """Run one command line and return its output."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            return f"{Colors.FAIL}Error: {e}{Colors.ENDC}"
        if not parts:
            return ""
        command, args = parts[0].lower(), parts[1:]
        handler = self._handlers.get(command)
        if handler is None:
            return (
                f"{Colors.FAIL}Unknown command: {command}{Colors.ENDC}\n"
                f"Type {Colors.BOLD}help{Colors.ENDC} to see available commands"
            )
        try:
            return handler(args)
        except CommandUsageException as e:
            return f"{Colors.WARNING}{e}{Colors.ENDC}"
        except CourtRotationException as e:
            logger.debug("Command %r failed: %s", line, e)
            return f"{Colors.FAIL}Error: {e}{Colors.ENDC}"

    # ========== Formatting ==========

    def _name(self, player_id: int) -> str:
        player = self.session.roster.get(player_id)
        return player.name if player is not None else "?"

    def format_match(self, match: Match) -> str:
        text = (
            f"{self._name(match.p1)} & {self._name(match.p2)} vs "
            f"{self._name(match.p3)} & {self._name(match.p4)}"
        )
        if match.level:
            text += f" [{match.level}]"
        return text

    def format_courts(self, courts: List[Court]) -> str:
        lines = []
        for court in courts:
            body = self.format_match(court.match) if court.match else "(empty)"
            lines.append(f"  Court {court.id}: {body}")
        return "\n".join(lines)

    # ========== Roster commands ==========

    def _add(self, args: List[str]) -> str:
        name = _str_arg(args, 0, "add")
        level = args[1] if len(args) > 1 else LEVEL_OPTIONS[0]
        player = self.session.add_player(name, level)
        return (
            f"{Colors.OKGREEN}Added #{player.id} {player}{Colors.ENDC} "
            f"(starts at {player.play_count} plays)"
        )

    def _remove(self, args: List[str]) -> str:
        player = self.session.remove_player(_int_arg(args, 0, "remove"))
        return f"Removed {player.name}"

    def _set_active(self, args: List[str], active: bool, command: str) -> str:
        player_id = _int_arg(args, 0, command)
        self.session.set_active(player_id, active)
        state = "active" if active else "inactive"
        return f"{self._name(player_id)} is now {state}"

    def _level(self, args: List[str]) -> str:
        player_id = _int_arg(args, 0, "level")
        self.session.set_level(player_id, _str_arg(args, 1, "level"))
        return f"{self.session.roster[player_id]}"

    def _pair(self, args: List[str]) -> str:
        player_id = _int_arg(args, 0, "pair")
        partner_id = _int_arg(args, 1, "pair")
        self.session.set_fixed_partner(player_id, partner_id)
        return f"{self._name(player_id)} and {self._name(partner_id)} are fixed partners"

    def _unpair(self, args: List[str]) -> str:
        player_id = _int_arg(args, 0, "unpair")
        self.session.set_fixed_partner(player_id, None)
        return f"{self._name(player_id)} has no fixed partner"

    # ========== Settings commands ==========

    def _courts(self, args: List[str]) -> str:
        self.session.set_court_count(_int_arg(args, 0, "courts"))
        return f"{self.session.config.court_count} courts"

    def _priority(self, args: List[str]) -> str:
        self.session.set_level_priority(_str_arg(args, 0, "priority").lower())
        return f"Level priority: {self.session.config.level_priority}"

    def _listfirst(self, args: List[str]) -> str:
        enabled = _flag_arg(args, "listfirst")
        self.session.set_order_first_match_by_list(enabled)
        return f"List order for first matches: {'on' if enabled else 'off'}"

    def _planahead(self, args: List[str]) -> str:
        enabled = _flag_arg(args, "planahead")
        self.session.set_plan_ahead(enabled)
        if enabled:
            return "Next batch:\n" + self.format_courts(self.session.planned)
        return "Plan-ahead off"

    # ========== Court commands ==========

    def _assign(self, args: List[str]) -> str:
        court_id = _int_arg(args, 0, "assign")
        match = self.session.assign_court(court_id)
        if match is None:
            return f"{Colors.WARNING}Court {court_id}: not enough available players{Colors.ENDC}"
        return f"Court {court_id}: {self.format_match(match)}"

    def _finish(self, args: List[str]) -> str:
        court_id = _int_arg(args, 0, "finish")
        match = self.session.finish_match(court_id)
        if match is None:
            return f"Court {court_id} was already empty"
        return f"Court {court_id} finished"

    def _rotate(self, args: List[str]) -> str:
        courts = self.session.rotate()
        text = f"{Colors.BOLD}Now playing:{Colors.ENDC}\n" + self.format_courts(courts)
        if self.session.config.plan_ahead:
            text += "\nNext batch:\n" + self.format_courts(self.session.planned)
        return text

    def _plan(self, args: List[str]) -> str:
        if not self.session.config.plan_ahead:
            return "Plan-ahead is off; use 'planahead on'"
        if args and args[0] == "new":
            self.session.regenerate_plan()
            note = " (regenerated)"
        else:
            note = " (updated)" if self.session.refresh_plan() else ""
        return f"Next batch{note}:\n" + self.format_courts(self.session.planned)

    # ========== Display commands ==========

    def _show(self, args: List[str]) -> str:
        playing = set(self.session.playing_player_ids)
        lines = [f"{Colors.BOLD}{'#':>3}  {'Name':<16}{'Level':<7}{'Plays':>6}  Partner{Colors.ENDC}"]
        for player in self.session.players:
            partner = self.session.roster.fixed_partner(player)
            marks = ("*" if player.id in playing else " ") + (" " if player.active else "-")
            lines.append(
                f"{player.id:>3}{marks}{player.name:<16}{player.level:<7}"
                f"{player.play_count:>6}  {partner.name if partner else ''}"
            )
        lines.append(f"{Colors.BOLD}Courts:{Colors.ENDC}")
        lines.append(self.format_courts(self.session.courts))
        return "\n".join(lines)

    def _history(self, args: List[str]) -> str:
        count = _int_arg(args, 0, "history") if args else 10
        records = self.session.history[:count]
        if not records:
            return "No matches played yet"
        lines = []
        for record in records:
            names = record.player_names
            level = f" [{record.level}]" if record.level else ""
            lines.append(
                f"  Court {record.court_id}: {names[0]} & {names[1]} vs "
                f"{names[2]} & {names[3]}{level}"
            )
        return "\n".join(lines)

    # ========== Session commands ==========

    def _save(self, args: List[str]) -> str:
        path = save_session(self.session, _str_arg(args, 0, "save"))
        return f"Session saved to {path}"

    def _load(self, args: List[str]) -> str:
        self.session = load_session(
            _str_arg(args, 0, "load"), rng=self.session.rng, clock=self.session.clock
        )
        return f"Loaded {len(self.session.roster)} players"

    def _reset(self, args: List[str]) -> str:
        self.session.reset_play_counts()
        return "Play counts and history reset"

    def _help(self, args: List[str]) -> str:
        if args:
            info = COMMANDS.get(args[0].lower())
            if info is None:
                return f"{Colors.FAIL}Unknown command: {args[0]}{Colors.ENDC}"
            return f"{Colors.BOLD}{info['usage']}{Colors.ENDC}\n  {info['description']}"
        lines = [f"{Colors.BOLD}Available Commands:{Colors.ENDC}"]
        for cmd, info in COMMANDS.items():
            lines.append(f"  {Colors.OKGREEN}{info['usage']:22}{Colors.ENDC} - {info['description']}")
        return "\n".join(lines)


def print_banner() -> None:
    """Print the console banner."""
    print(
        f"{Colors.OKBLUE}Court Rotation console{Colors.ENDC}\n"
        f"Type {Colors.BOLD}help{Colors.ENDC} to see all available commands, "
        f"{Colors.BOLD}exit{Colors.ENDC} to leave\n"
    )


def run_interactive(session: Optional[Session] = None) -> int:
    """Run the console with autocomplete until the user exits."""
    console = Console(session)
    print_banner()

    style = Style.from_dict({"prompt": "#00aa00 bold"})
    prompt = PromptSession(
        completer=create_completer(),
        history=InMemoryHistory(),
        style=style,
    )

    while True:
        try:
            user_input = prompt.prompt("courts> ").strip()
            if not user_input:
                continue
            if user_input.lower() in ("exit", "quit", "q"):
                print(f"\n{Colors.OKGREEN}Goodbye!{Colors.ENDC}\n")
                break
            output = console.execute(user_input)
            if output:
                print(output)
        except KeyboardInterrupt:
            print(f"\n{Colors.WARNING}Use 'exit' or 'quit' to leave{Colors.ENDC}")
        except EOFError:
            print(f"\n{Colors.OKGREEN}Goodbye!{Colors.ENDC}\n")
            break
    return 0
