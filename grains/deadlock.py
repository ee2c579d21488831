"""Heuristic detection of lock-ordering inversions between goroutines."""

from __future__ import annotations

from grains.dump import Dump
from grains.model import Frame


def is_suspected_deadlock(a: Frame, b: Frame) -> bool:
    """
    Report whether two frames hold two common lock holders in crossed order.

    For each holder shared by both chains, look for a second holder that
    comes after it in b's chain and before it in a's chain (a's first
    holder is never considered). This is a best-effort heuristic over
    textual receiver names: it can miss real deadlocks and flag harmless
    stacks, and it is not symmetric in its arguments.
    """
    holders_a = a.lock_info.lock_holders
    holders_b = b.lock_info.lock_holders
    if not holders_a or not holders_b:
        return False

    for i, holder_a in enumerate(holders_a):
        for j, holder_b in enumerate(holders_b):
            if holder_a != holder_b:
                continue
            for later in holders_b[j + 1:]:
                for k in range(i - 1, 0, -1):
                    if holders_a[k] == later:
                        return True
    return False


def find_suspected_deadlocks(dump: Dump, reason: str) -> list[tuple[Frame, Frame]]:
    """Check every unordered pair of goroutines blocked for the same reason."""
    if dump.reason_counts.get(reason, 0) <= 1:
        return []
    frames = dump.frames_by_reason(reason)
    suspects = []
    for i in range(len(frames)):
        for j in range(i + 1, len(frames)):
            if is_suspected_deadlock(frames[i], frames[j]):
                suspects.append((frames[i], frames[j]))
    return suspects
