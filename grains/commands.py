"""The report commands grains understands, with their help text."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from grains.config import CONFIG_FIELD_MAP, CONFIG_FIELDS, Config
from grains.errors import CommandError

_TAIL_DIGITS_RE = re.compile(r"[0-9]+$")


@dataclass(frozen=True)
class Command:
    description: str
    usage: str = ""
    has_param: bool = False

    def help(self) -> str:
        message = self.description + "\n"
        if self.usage:
            message += "  Usage:\n"
            for line in self.usage.split("\n"):
                message += f"    {line}\n"
        return message + "\n"


def _report_help(name: str, param: str = "") -> str:
    first = f"{name} {param}".rstrip() + " [>f]"
    return "\n".join([first, "Optionally save the report on the file f"])


COMMANDS: dict[str, Command] = {
    "summary": Command(
        "Count blocked goroutines per reason and flag suspected deadlocks",
        _report_help("summary"),
    ),
    "trim": Command(
        "Summary of the dump under a banner, with suspected deadlocks",
        _report_help("trim"),
    ),
    "show": Command(
        "Show the stack of one goroutine",
        _report_help("show", "<gid>"),
        has_param=True,
    ),
    "dump": Command(
        "Write the trimmed dump to trimed.<unixtime>.log",
        "dump\nGoroutines with identical stacks are written once per reason",
    ),
}


def _fmt_help(name: str, text: str) -> str:
    first_line = text.split("\n", 1)[0]
    return f"    {name:<16} {first_line}"


def usage() -> str:
    """Describe the commands and options of the interactive shell."""
    commands = sorted(_fmt_help(name, cmd.description) for name, cmd in COMMANDS.items())
    commands.append(_fmt_help("o/options", "List options and their current values"))
    commands.append(_fmt_help("q/quit/exit/^D", "Exit grains"))
    variables = sorted(_fmt_help(f.name, f.help) for f in CONFIG_FIELDS)
    return "  Commands:\n" + "\n".join(commands) + "\n\n  Options:\n" + "\n".join(variables) + "\n"


def parse_command_line(tokens: list[str], cfg: Config) -> tuple[list[str], Config]:
    """
    Turn the tokens of an interactive command into a report command.

    Returns the command with its argument and a copy of cfg carrying any
    per-command settings, such as an output redirection.
    """
    name, args = tokens[0], list(tokens[1:])
    cmd = COMMANDS.get(name)
    if cmd is None:
        # Abbreviated commands with a trailing number, e.g. show12.
        digits = _TAIL_DIGITS_RE.search(name)
        if digits and digits.group(0) != name:
            name = name[: digits.start()]
            args.insert(0, digits.group(0))
            cmd = COMMANDS.get(name)
    if cmd is None:
        if name in CONFIG_FIELD_MAP:
            value = args[0] if args else "<val>"
            raise CommandError(f"did you mean: {name}={value}")
        raise CommandError(f"unrecognized command: {name!r}")

    command = [name]
    if cmd.has_param:
        if not args:
            raise CommandError(f"command {name} requires an argument")
        command.append(args.pop(0))

    i = 0
    while i < len(args):
        token = args[i]
        if not token.startswith(">"):
            raise CommandError(f"unexpected argument {token!r} for command {name}")
        output = token[1:]
        if not output:
            i += 1
            if i >= len(args):
                raise CommandError("unexpected end of line after >")
            output = args[i]
        cfg = replace(cfg, output=output)
        i += 1
    return command, cfg


def command_help(topic: str) -> str | None:
    """Help for a command or option, or None when topic names neither."""
    if topic in COMMANDS:
        return COMMANDS[topic].help()
    if topic in CONFIG_FIELD_MAP:
        return CONFIG_FIELD_MAP[topic].help + "\n"
    return None
