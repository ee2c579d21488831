from pathlib import Path

from grains.model import Frame, Head, LockInfo

BASE_DIR = Path(__file__).parent
SAMPLE_DUMP = BASE_DIR / "data" / "goroutines.txt"

TWO_GOROUTINES = (
    "goroutine 1 [chan receive, 5 minutes]:\nfoo(0x1)\n\t/a.go:10 +0x1\n"
    "\n\n"
    "goroutine 2 [chan receive, 5 minutes]:\nfoo(0x1)\n\t/a.go:10 +0x1\n"
)


def holder_frame(task_id: int, holders: list[str], reason: str = "semacquire") -> Frame:
    return Frame(
        reason=reason,
        head=Head(task_id=task_id, blocked_minutes=1),
        lock_info=LockInfo(held_at=0, lock_type="sync.(*Mutex).Lock", lock_holders=list(holders)),
    )


class FakeUI:
    def __init__(self, lines=()):
        self.lines = list(lines)
        self.prompts = []
        self.messages = []
        self.errors = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    def print(self, *args):
        self.messages.append("".join(str(a) for a in args))

    def print_err(self, *args):
        self.errors.append("".join(str(a) for a in args))
