"""Data types for parsed goroutine dumps."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Head:
    """Identifies one goroutine snapshot and how long it has been blocked."""

    task_id: int = 0
    blocked_minutes: int = 0


@dataclass
class StackEntry:
    location: str = ""
    function_name: str = ""
    params: str = ""

    def signature(self) -> tuple[str, str]:
        return self.function_name, self.location


@dataclass
class LockInfo:
    """
    The innermost lock call found in a stack.

    held_at is the index (into the owning frame's stack) of the function that
    called the lock, and lock_holders are the receiver identifiers seen from
    there out to the stack root, in first-seen order.
    """

    held_at: int | None = None
    lock_type: str = ""
    lock_holders: list[str] = field(default_factory=list)


@dataclass
class Frame:
    reason: str = ""
    size: int = 0
    head: Head = field(default_factory=Head)
    stack: list[StackEntry] = field(default_factory=list)
    lock_info: LockInfo = field(default_factory=LockInfo)

    @property
    def task_id(self) -> int:
        return self.head.task_id

    @property
    def blocked_minutes(self) -> int:
        return self.head.blocked_minutes

    def held_at_entry(self) -> StackEntry | None:
        if self.lock_info.held_at is None:
            return None
        return self.stack[self.lock_info.held_at]

    def has_same_shape(self, other: Frame) -> bool:
        """Two frames match when their stacks agree on every function name and location."""
        if len(self.stack) != len(other.stack):
            return False
        return all(
            mine.signature() == theirs.signature()
            for mine, theirs in zip(self.stack, other.stack)
        )


@dataclass
class TrimmedGroup:
    representative: Frame
    heads: list[Head] = field(default_factory=list)
