import gzip
import io
import unittest
from unittest import mock

from grains.dump import Dump, parse_dump
from grains.errors import EmptyInputError, UnparsableInputError
from grains.parser import parse_frame
from tests.helpers import SAMPLE_DUMP, TWO_GOROUTINES


def _frame(task_id, minutes=5, reason="chan receive", calls=("foo",)):
    lines = [f"goroutine {task_id} [{reason}, {minutes} minutes]:"]
    for i, call in enumerate(calls):
        lines.append(f"{call}(0x{task_id})")
        lines.append(f"\t/a.go:{10 + i} +0x1")
    return parse_frame(lines)


def _store(*frames):
    dump = Dump()
    for frame in frames:
        dump.insert_trimmed(frame)
        dump.insert_raw(frame)
    return dump


class TestGrouping(unittest.TestCase):
    def test_identical_stacks_share_a_group(self):
        dump = parse_dump(TWO_GOROUTINES.encode())
        self.assertEqual(list(dump.trimmed_groups), [("chan receive", 0)])
        heads = dump.trimmed_groups[("chan receive", 0)].heads
        self.assertEqual([h.task_id for h in heads], [1, 2])
        self.assertEqual(dump.reason_counts["chan receive"], 2)

    def test_params_do_not_affect_grouping(self):
        dump = _store(_frame(1), _frame(2))
        self.assertEqual(len(dump.trimmed_groups), 1)

    def test_different_function_starts_new_group(self):
        dump = _store(_frame(1), _frame(2, calls=("bar",)), _frame(3))
        self.assertEqual(
            list(dump.trimmed_groups),
            [("chan receive", 0), ("chan receive", 1)],
        )
        self.assertEqual([h.task_id for h in dump.trimmed_groups[("chan receive", 0)].heads], [1, 3])
        self.assertEqual([h.task_id for h in dump.trimmed_groups[("chan receive", 1)].heads], [2])

    def test_different_length_starts_new_group(self):
        dump = _store(_frame(1), _frame(2, calls=("foo", "main")))
        self.assertIn(("chan receive", 1), dump.trimmed_groups)

    def test_offsets_differing_in_hex_digits_start_new_group(self):
        a = parse_frame("goroutine 1 [select, 2 minutes]:\nfoo(0x1)\n\t/a.go:10 +0x5d")
        b = parse_frame("goroutine 2 [select, 2 minutes]:\nfoo(0x1)\n\t/a.go:10 +0x5e")
        dump = _store(a, b)
        self.assertEqual(list(dump.trimmed_groups), [("select", 0), ("select", 1)])
        self.assertEqual(dump.trimmed_groups[("select", 1)].representative.stack[0].location, "/a.go:10 +0x5e")

    def test_groups_are_per_reason(self):
        dump = _store(_frame(1), _frame(2, reason="select"))
        self.assertEqual(list(dump.trimmed_groups), [("chan receive", 0), ("select", 0)])

    def test_group_index_is_bounded(self):
        dump = Dump()
        with mock.patch("grains.dump.MAX_GROUPS_PER_REASON", 2):
            dump.insert_trimmed(_frame(1, calls=("a",)))
            dump.insert_trimmed(_frame(2, calls=("b",)))
            with self.assertRaises(UnparsableInputError):
                dump.insert_trimmed(_frame(3, calls=("c",)))


class TestLookups(unittest.TestCase):
    def test_frame_by_task_round_trip(self):
        frame = _frame(9, minutes=4)
        dump = _store(_frame(1), frame)
        self.assertIs(dump.frame_by_task(9), frame)

    def test_frame_by_task_unknown(self):
        dump = _store(_frame(1), _frame(2))
        self.assertIsNone(dump.frame_by_task(99))

    def test_repeated_task_id_keeps_last_duration(self):
        first = _frame(1, minutes=5)
        second = _frame(1, minutes=7, reason="select")
        dump = _store(first, second)
        self.assertIs(dump.frame_by_task(1), second)
        self.assertEqual(dump.last_duration_by_task, {1: 7})
        # Both snapshots are still reachable through their reasons.
        self.assertEqual(dump.frames_by_reason("chan receive"), [first])
        self.assertEqual(dump.frames_by_reason("select"), [second])

    def test_frames_by_reason_in_group_then_head_order(self):
        f1, f2, f3 = _frame(1), _frame(2, calls=("bar",)), _frame(3)
        dump = _store(f1, f2, f3)
        self.assertEqual(dump.frames_by_reason("chan receive"), [f1, f3, f2])
        self.assertEqual(dump.frames_by_reason("select"), [])

    def test_reason_counts_match_inserted_frames(self):
        dump = _store(_frame(1), _frame(2, reason="select"), _frame(3, calls=("bar",)))
        self.assertEqual(dump.reason_counts, {"chan receive": 2, "select": 1})
        self.assertEqual(sum(dump.reason_counts.values()), len(dump.raw_frames))


class TestParseData(unittest.TestCase):
    def test_sample_dump(self):
        dump = parse_dump(SAMPLE_DUMP.read_bytes())
        self.assertEqual(len(dump.raw_frames), 7)
        self.assertEqual(
            dump.reason_counts,
            {"chan receive": 2, "running": 1, "semacquire": 3, "select": 1},
        )
        self.assertEqual(dump.reasons(), ["chan receive", "running", "select", "semacquire"])
        heads = dump.trimmed_groups[("semacquire", 0)].heads
        self.assertEqual([h.task_id for h in heads], [10, 12])
        self.assertEqual([h.task_id for h in dump.trimmed_groups[("semacquire", 1)].heads], [11])

    def test_every_frame_in_exactly_one_group(self):
        dump = parse_dump(SAMPLE_DUMP.read_bytes())
        heads = [(h.task_id, h.blocked_minutes) for _, g in dump.groups() for h in g.heads]
        self.assertEqual(sorted(heads), sorted(dump.raw_frames))

    def test_group_members_match_representative(self):
        dump = parse_dump(SAMPLE_DUMP.read_bytes())
        for _, group in dump.groups():
            for head in group.heads:
                frame = dump.raw_frames[(head.task_id, head.blocked_minutes)]
                self.assertTrue(group.representative.has_same_shape(frame))

    def test_crlf_dump(self):
        dump = parse_dump(TWO_GOROUTINES.replace("\n", "\r\n").encode())
        self.assertEqual(dump.reason_counts, {"chan receive": 2})

    def test_gzip_dump(self):
        dump = parse_dump(gzip.compress(TWO_GOROUTINES.encode()))
        self.assertEqual(len(dump.raw_frames), 2)

    def test_corrupt_gzip(self):
        with self.assertRaises(UnparsableInputError):
            parse_dump(b"\x1f\x8bnot really gzip")

    def test_empty_input(self):
        with self.assertRaises(EmptyInputError):
            parse_dump(b"")

    def test_single_line_input(self):
        with self.assertRaises(UnparsableInputError):
            parse_dump(b"single line")

    def test_single_goroutine_is_not_enough(self):
        text = "goroutine 1 [select]:\nfoo(0x1)\n\t/a.go:1 +0x1\n\nnoise\nmore noise\n"
        with self.assertRaises(UnparsableInputError):
            parse_dump(text.encode())

    def test_blocks_with_bad_headers_are_dropped(self):
        text = TWO_GOROUTINES + "\ngoroutine 3 [IO wait, locked to thread]:\nfoo(0x1)\n\t/a.go:1 +0x1\n"
        dump = parse_dump(text.encode())
        self.assertEqual(sorted(dump.raw_frames), [(1, 5), (2, 5)])

    def test_parse_reads_file_object(self):
        dump = Dump()
        dump.parse(io.BytesIO(TWO_GOROUTINES.encode()))
        self.assertEqual(len(dump.raw_frames), 2)


if __name__ == "__main__":
    unittest.main()
