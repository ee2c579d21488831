"""Parsing of goroutine dump text into frames."""

from __future__ import annotations

import re
from typing import Iterable

from grains.model import Frame, Head, LockInfo, StackEntry

HEADER_PREFIX = "goroutine"

# goroutine 42 [chan receive, 5 minutes]:
_HEAD_WITH_DURATION_RE = re.compile(r"goroutine (\d+) \[([\w ._]+), (\d+) minutes\]:")
# goroutine 42 [running]:
_HEAD_RE = re.compile(r"goroutine (\d+) \[([\w ._]+)\]:")
# main.(*Server).handle(0xc000010000, 0x1)
_CALL_RE = re.compile(r"(.+)\(([\w, ]+)\)")
# /go/src/main.go:42 +0x1d
_LOCATION_RE = re.compile(r"([\w.\-/:\d]+) (\+0x[0-9a-fA-F]+)")
# the receiver in main.(*Server).handle
_HOLDER_RE = re.compile(r"\(([\w.*]+)\)")

_LOCK_MARKER = ".lock"


def split_blocks(text: str) -> list[list[str]]:
    """
    Split a dump into blocks of consecutive non-blank lines.

    Both \\n and \\r\\n line endings are accepted.
    """
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line)
            continue
        if current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def decode_head(frame: Frame, header: str) -> None:
    match = _HEAD_WITH_DURATION_RE.search(header)
    if match:
        frame.head = Head(task_id=int(match.group(1)), blocked_minutes=int(match.group(3)))
        frame.reason = match.group(2)
        return

    match = _HEAD_RE.search(header)
    if match:
        frame.head = Head(task_id=int(match.group(1)))
        frame.reason = match.group(2)


def _decode_entry(call_line: str, location_line: str) -> StackEntry:
    entry = StackEntry()
    match = _CALL_RE.search(call_line)
    if match:
        entry.function_name = match.group(1)
        entry.params = match.group(2)
    else:
        entry.function_name = call_line

    if location_line:
        stripped = location_line[1:]
        match = _LOCATION_RE.search(stripped)
        entry.location = match.group(0) if match else stripped
    return entry


def decode_body(frame: Frame, body: list[str]) -> None:
    for i in range(0, len(body) - 1, 2):
        frame.stack.append(_decode_entry(body[i], body[i + 1]))
    frame.size = len(body)
    check_hold_lock(frame)


def check_hold_lock(frame: Frame) -> None:
    """
    Record the innermost lock call of the stack and the receivers above it.

    The stack is scanned from the root inwards; the first function whose name
    contains ".lock" (case-insensitive) wins. The entry just above it is the
    caller holding the lock, and every receiver from there to the root joins
    the holder chain once.
    """
    stack = frame.stack
    if len(stack) < 2:
        return
    for i in range(len(stack) - 2, -1, -1):
        function_name = stack[i].function_name
        if _LOCK_MARKER not in function_name.lower():
            continue
        holders: list[str] = []
        for entry in stack[i + 1:]:
            match = _HOLDER_RE.search(entry.function_name)
            if match and match.group(1) not in holders:
                holders.append(match.group(1))
        frame.lock_info = LockInfo(held_at=i + 1, lock_type=function_name, lock_holders=holders)
        return


def parse_frame(block: str | Iterable[str]) -> Frame | None:
    """
    Parse one goroutine block.

    Returns None when the block has no goroutine header line. A frame whose
    header does not match the expected grammar comes back with task id 0.
    """
    lines = block.splitlines() if isinstance(block, str) else list(block)
    for index, line in enumerate(lines):
        if line.startswith(HEADER_PREFIX):
            frame = Frame()
            decode_head(frame, line)
            decode_body(frame, lines[index + 1:])
            return frame
    return None
