"""Goroutine dump analysis: blocked-goroutine summaries, trimmed stacks and deadlock hints."""

from grains.deadlock import find_suspected_deadlocks, is_suspected_deadlock
from grains.dump import Dump, parse_dump
from grains.model import Frame, Head, LockInfo, StackEntry, TrimmedGroup
from grains.parser import parse_frame

__all__ = [
    "Dump",
    "Frame",
    "Head",
    "LockInfo",
    "StackEntry",
    "TrimmedGroup",
    "find_suspected_deadlocks",
    "is_suspected_deadlock",
    "parse_dump",
    "parse_frame"
]
