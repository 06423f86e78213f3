"""Per-run state threaded through evaluation: cooperative cancellation, the console and the random source."""

import random
import sys
import time
from collections import deque


class RunContext:
    """Everything the evaluator needs from the outside world. One RunContext per Session (or per test)."""

    def __init__(self, stdin=None, stdout=None, seed=None, sleep=time.sleep):
        self._stdin = stdin
        self._stdout = stdout
        self.random = random.Random(seed)
        self.sleep = sleep
        self.stopped = False
        self._pending = deque()  # tokens read from stdin but not consumed yet

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    def stop(self):
        """Requests cancellation: every node evaluated from now on fails with a silent Stop error."""
        self.stopped = True

    def reset(self):
        self.stopped = False

    def write_line(self, text):
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def read_token(self):
        """Blocks until a whitespace-delimited token is available on stdin. Returns None at end of input."""
        while not self._pending:
            line = self.stdin.readline()
            if not line:
                return None
            self._pending.extend(line.split())
        return self._pending.popleft()
