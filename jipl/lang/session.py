"""Session control for JIPL. A session owns one root environment and one run context, so that every chunk of source it
runs (a whole file, or one shell entry after another) sees the bindings left by the previous ones.
"""

import logging
import time

from jipl.interpreter import run
from jipl.lang.error import GenericException
from jipl.runtime.context import RunContext
from jipl.runtime.stdlib import global_environment

logger = logging.getLogger(__name__)

OPENING = "([{"
CLOSING = ")]}"


class Session:
    """Governs a JIPL session, either in command-line mode or file interpretation mode."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, context=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.context = context if context is not None else RunContext()
        self.environment = global_environment()

        self.to_run = []   # sources waiting for run()
        self.results = []  # one List value per successful run, holding the value of each top-level statement

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path)

            if source.strip():
                self.add(source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def depth(source):
        """Returns how many brackets are left open at the end of source. Brackets inside strings and comments do not
        count.
        """
        depth = 0
        in_string = in_comment = False

        chars = iter(source)
        for char in chars:
            if in_comment:
                in_comment = char != "\n"
            elif in_string:
                if char == "\\":
                    next(chars, None)
                elif char in "\"\n":
                    in_string = False
            elif char == "\"":
                in_string = True
            elif char == "#":
                in_comment = True
            elif char in OPENING:
                depth += 1
            elif char in CLOSING:
                depth -= 1

        return depth

    @staticmethod
    def preprocess_line(line, pending=""):
        """Appends line to the source pending from previous lines. Returns the joined source and whether or not a line
        continuation is necessary (some bracket is still open).
        """
        source = pending + line + "\n" if pending else line + "\n"
        return source, Session.depth(source) > 0

    def add(self, source):
        """Queues source. Nothing is evaluated until run is called. Raises ValueError if source is blank."""
        if not source.strip():
            raise ValueError("nothing to run")
        self.to_run.append(source)

    def run(self):
        """Runs queued sources in order. Errors are reported to the error handler. Returns whether or not every source
        ran without error.
        """
        ok = True
        while self.to_run:
            source = self.to_run.pop(0)

            start = time.perf_counter()
            result = run(source, self.environment, self.context, self.error_handler)
            logger.debug("ran %s in %.3fs", self.path, time.perf_counter() - start)

            if result.is_error:
                ok = False
            else:
                self.results.append(result.value)

        return ok

    def pop(self):
        """Removes and returns the result of the most recent successful run."""
        return self.results.pop()
