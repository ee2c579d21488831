"""Text reports over a parsed goroutine dump."""

from __future__ import annotations

import logging
import os
import time
from typing import TextIO

from grains.config import Config, default_config
from grains.deadlock import find_suspected_deadlocks
from grains.dump import Dump
from grains.errors import CommandError
from grains.model import Frame, StackEntry, TrimmedGroup

logger = logging.getLogger(__name__)

BANNER = "================="


class Report:
    """A dump together with the options used to render it."""

    def __init__(self, dump: Dump, config: Config | None = None):
        self.dump = dump
        self.config = config or default_config()


def generate(w: TextIO, rpt: Report, cmd: list[str]) -> None:
    """
    Render the report selected by cmd to w.

    Args:
        w: Destination for the report text
        rpt: Report to render
        cmd: Command name followed by its arguments, e.g. ["show", "12"]
    """
    if not cmd:
        raise CommandError("no report command given")
    name = cmd[0]
    if name == "summary":
        print_summary(w, rpt)
    elif name == "trim":
        w.write(f"{BANNER} Summary {BANNER}\n")
        print_summary(w, rpt)
    elif name == "show":
        if len(cmd) < 2:
            raise CommandError("command show requires an argument")
        print_frame(w, rpt, cmd[1])
    elif name == "dump":
        save_trimmed(w, rpt)
    else:
        raise CommandError(f"unrecognized command: {name!r}")


def _format_holders(holders: list[str]) -> str:
    return "[" + " ".join(holders) + "]"


def print_summary(w: TextIO, rpt: Report) -> None:
    dump = rpt.dump
    w.write("blocked goroutine types:\n")
    for reason in dump.reasons():
        w.write(f"{reason}: {dump.reason_counts[reason]}\n")
        for a, b in find_suspected_deadlocks(dump, reason):
            w.write(f"{BANNER} WARNING DEAD LOCK {reason} {BANNER}\n")
            w.write(
                f"goroutine {a.task_id} has suspicious DEAD LOCK with goroutine {b.task_id}"
                " (heuristic, not proven)\n"
            )
            w.write(f"LockHolders of goroutine {a.task_id}: {_format_holders(a.lock_info.lock_holders)}\n")
            w.write(f"LockHolders of goroutine {b.task_id}: {_format_holders(b.lock_info.lock_holders)}\n")


def _format_call(entry: StackEntry) -> str:
    if entry.params:
        return f"{entry.function_name}({entry.params})"
    return entry.function_name


def print_frame(w: TextIO, rpt: Report, gid: str) -> None:
    frame: Frame | None = None
    if gid.isdigit():
        frame = rpt.dump.frame_by_task(int(gid))
    if frame is None:
        w.write(f"no such goroutine {gid}\n")
        return

    w.write(f"{BANNER} goroutine {gid} {BANNER}\n")
    w.write(f"goroutine {frame.task_id} [{frame.reason}, {frame.blocked_minutes} minutes]:\n")
    for entry in frame.stack:
        w.write(f"{_format_call(entry)}\n\t{entry.location}\n")


def trimmed_file_name(rpt: Report) -> str:
    return os.path.join(rpt.config.trim_path, f"trimed.{int(time.time())}.log")


def save_trimmed(w: TextIO, rpt: Report) -> None:
    """Write the trimmed dump to a new timestamped file and report where it went."""
    path = trimmed_file_name(rpt)
    try:
        with open(path, "w", encoding="utf-8") as f:
            print_trimmed(f, rpt)
    except OSError as exc:
        logger.warning("could not write trimmed dump %s: %s", path, exc)
        w.write(f"failed to write trimmed dump {path}: {exc}\n")
        return
    w.write(f"trimmed dump written to {path}\n")


def _print_group(w: TextIO, key: tuple[str, int], group: TrimmedGroup) -> None:
    reason, index = key
    frame = group.representative
    w.write(f"[{reason}_{index}]:\n")
    held_at = frame.held_at_entry()
    if held_at is not None:
        w.write(
            f"[LockType: {frame.lock_info.lock_type}, FuncName: {held_at.function_name}, "
            f"Location: {held_at.location}]\n"
        )
    w.write("".join(f"{{gid: {h.task_id}, duration: {h.blocked_minutes} min}}, " for h in group.heads))
    w.write("\n")
    for entry in frame.stack:
        w.write(f"\t{entry.function_name} {entry.params}\n{entry.location}\n")
    w.write("\n")


def print_trimmed(w: TextIO, rpt: Report) -> None:
    for key, group in rpt.dump.groups():
        _print_group(w, key, group)
