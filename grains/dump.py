"""In-memory store of a parsed goroutine dump, with stack grouping."""

from __future__ import annotations

import gzip
import logging
import zlib
from typing import BinaryIO, Iterator

from grains.errors import EmptyInputError, UnparsableInputError
from grains.model import Frame, TrimmedGroup
from grains.parser import parse_frame, split_blocks

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

# Upper bound on distinct stack shapes kept under a single reason.
MAX_GROUPS_PER_REASON = 1 << 16


class Dump:
    """
    Parsed goroutines indexed by (task id, blocked minutes), plus the
    trimmed view that groups goroutines with identical stacks per reason.
    """

    def __init__(self):
        self.raw_frames: dict[tuple[int, int], Frame] = {}
        self.trimmed_groups: dict[tuple[str, int], TrimmedGroup] = {}
        self.reason_counts: dict[str, int] = {}
        self.last_duration_by_task: dict[int, int] = {}

    def _trimmed_key(self, frame: Frame) -> tuple[str, int]:
        for index in range(MAX_GROUPS_PER_REASON):
            key = (frame.reason, index)
            group = self.trimmed_groups.get(key)
            if group is None or group.representative.has_same_shape(frame):
                return key
        raise UnparsableInputError(
            f"more than {MAX_GROUPS_PER_REASON} distinct stacks for reason {frame.reason!r}"
        )

    def insert_trimmed(self, frame: Frame) -> None:
        key = self._trimmed_key(frame)
        group = self.trimmed_groups.get(key)
        if group is None:
            group = TrimmedGroup(representative=frame)
            self.trimmed_groups[key] = group
        group.heads.append(frame.head)

    def insert_raw(self, frame: Frame) -> None:
        self.raw_frames[(frame.task_id, frame.blocked_minutes)] = frame
        self.reason_counts[frame.reason] = self.reason_counts.get(frame.reason, 0) + 1
        # Repeated task ids keep only the last duration seen.
        self.last_duration_by_task[frame.task_id] = frame.blocked_minutes

    def frame_by_task(self, task_id: int) -> Frame | None:
        duration = self.last_duration_by_task.get(task_id)
        if duration is None:
            return None
        return self.raw_frames.get((task_id, duration))

    def frames_by_reason(self, reason: str) -> list[Frame]:
        """All frames grouped under reason, in group order then head order."""
        frames: list[Frame] = []
        index = 0
        while (reason, index) in self.trimmed_groups:
            for head in self.trimmed_groups[(reason, index)].heads:
                frame = self.raw_frames.get((head.task_id, head.blocked_minutes))
                if frame is not None:
                    frames.append(frame)
            index += 1
        return frames

    def reasons(self) -> list[str]:
        return sorted(self.reason_counts)

    def groups(self) -> Iterator[tuple[tuple[str, int], TrimmedGroup]]:
        return iter(self.trimmed_groups.items())

    def _unmarshal(self, text: str) -> None:
        blocks = split_blocks(text)
        if len(blocks) <= 1:
            return
        for block in blocks:
            if len(block) < 2:
                continue
            frame = parse_frame(block)
            if frame is None or frame.task_id <= 0:
                continue
            self.insert_trimmed(frame)
            self.insert_raw(frame)

    def parse_data(self, data: bytes) -> None:
        """
        Parse a dump from a buffer and check that it is usable.

        The buffer may be gzip-compressed text.

        Raises:
            EmptyInputError: data is empty
            UnparsableInputError: fewer than two goroutines could be parsed
        """
        if data[:2] == GZIP_MAGIC:
            try:
                data = gzip.decompress(data)
            except (OSError, EOFError, zlib.error) as exc:
                raise UnparsableInputError(f"decompressing dump: {exc}") from exc
        if not data:
            raise EmptyInputError("empty input")

        self._unmarshal(data.decode("utf-8", errors="replace"))
        if len(self.raw_frames) <= 1:
            raise UnparsableInputError("cannot unmarshal input")
        logger.debug(
            "parsed %d goroutines into %d trimmed groups",
            len(self.raw_frames),
            len(self.trimmed_groups),
        )

    def parse(self, reader: BinaryIO) -> None:
        self.parse_data(reader.read())


def parse_dump(data: bytes) -> Dump:
    dump = Dump()
    dump.parse_data(data)
    return dump
