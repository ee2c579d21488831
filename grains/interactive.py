"""Interactive shell for exploring a dump."""

from __future__ import annotations

from typing import Callable

from grains.commands import command_help, parse_command_line, usage
from grains.config import Config, configure, format_options, is_configurable
from grains.dump import Dump
from grains.errors import GrainsError
from grains.ui import UI

PROMPT = "(grains) "
# Starts a trailing comment on option assignments.
COMMENT_START = "//:"

ReportFn = Callable[[Dump, list[str], Config, UI], None]


def greetings(dump: Dump, ui: UI) -> None:
    ui.print(
        f"Loaded {len(dump.raw_frames)} goroutines in {len(dump.trimmed_groups)} distinct stacks"
    )
    ui.print('Entering interactive mode (type "help" for commands, "o" for options)')


def _assignment(line: str) -> tuple[str, str] | None:
    if "=" not in line:
        return None
    name, value = line.split("=", 1)
    name = name.strip()
    if not is_configurable(name):
        return None
    comment = value.rfind(COMMENT_START)
    if comment != -1:
        value = value[:comment]
    return name, value.strip()


def command_help_text(topic: str) -> str:
    if not topic:
        return usage() + '\n  type "help <cmd|option>" for more information\n'
    return command_help(topic) or ""


def interactive(dump: Dump, cfg: Config, ui: UI, report: ReportFn) -> Config:
    """
    Read and run commands until the user quits or input runs out.

    Option assignments persist for the session; errors are shown and the
    loop carries on. Returns the configuration in effect at exit.
    """
    greetings(dump, ui)
    while True:
        try:
            line = ui.read_line(PROMPT).strip()
        except EOFError:
            return cfg
        if not line:
            continue

        try:
            assignment = _assignment(line)
            if assignment is not None:
                cfg = configure(cfg, *assignment)
                continue

            tokens = line.split()
            name = tokens[0]
            if name in ("o", "options"):
                ui.print(format_options(cfg))
                continue
            if name in ("exit", "quit", "q"):
                return cfg
            if name == "help":
                topic = " ".join(tokens[1:])
                text = command_help_text(topic)
                if text:
                    ui.print(text)
                else:
                    ui.print_err("Unknown command: " + topic)
                continue

            cmd, command_cfg = parse_command_line(tokens, cfg)
            report(dump, cmd, command_cfg, ui)
        except GrainsError as exc:
            ui.print_err(str(exc))
