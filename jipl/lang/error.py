"""Error handling for the JIPL language.

Two families of errors exist:
- language diagnostics (Error): produced by the lexer, parser and evaluator and passed around as plain values. They
  never travel as Python exceptions, so that return/break/continue/error propagation stays uniform.
- host errors (GenericException): unreadable files, internal interpreter defects. These are raised and end up in an
  ErrorHandler, which is assumed to wrap every entry point.
"""

import enum
import sys

from termcolor import colored


class ErrorKind(enum.Enum):
    """Kinds of language diagnostics. The value is the display name."""
    ILLEGAL_CHARACTER = "Illegal Character Error"
    EXPECTED_CHARACTER = "Expected Character Error"
    SYNTAX = "Syntax Error"
    RUNTIME = "Runtime Error"
    STOP = "Stop"


class Error:
    """A language diagnostic: kind, message and (optionally) the span that caused it."""

    def __init__(self, kind, message, span=None):
        self.kind = kind
        self.message = message
        self.span = span

    @property
    def silent(self):
        """Stop is a cancellation signal, not a failure: it is never displayed."""
        return self.kind is ErrorKind.STOP

    def at(self, span):
        """Attaches span if this error does not carry one yet. Returns self."""
        if self.span is None:
            self.span = span
        return self

    def __repr__(self):
        return f"Error({self.kind.name}, {self.message!r}, {self.span!r})"

    def __str__(self):
        text = f"{self.kind.value} : {self.message}"
        if self.span is not None:
            text += f" at {self.span}"
        return text


def illegal_character(char, span):
    return Error(ErrorKind.ILLEGAL_CHARACTER, f"Illegal character '{char}'", span)


def syntax_error(message, span):
    return Error(ErrorKind.SYNTAX, message, span)


def runtime_error(message, span=None):
    return Error(ErrorKind.RUNTIME, message, span)


def stop_error():
    return Error(ErrorKind.STOP, "Stop.")


class GenericException(Exception):
    """Host-level error (as opposed to a language diagnostic). Essentially just a templated message: every '{}' in msg
    is filled with the matching entry of exprs, in bold.
    """

    def __init__(self, msg, exprs=None, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))
        self.internal = internal


class ErrorHandler:
    """Context manager that reports language diagnostics and turns host errors into readable messages."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.path = None
        self.reported = []

    def register_file(self, path):
        """Registers the file that subsequent diagnostics belong to."""
        self.path = path

    def _print(self, text):
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    @staticmethod
    def diagnose(span, source, warning=False):
        """Returns the source line containing span, with the offending part bolded and underlined by carets."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        start = source.rfind("\n", 0, span.offset) + 1
        end = source.find("\n", span.offset)
        if end == -1:
            end = len(source)

        line = source[start:end]
        col = span.offset - start
        width = max(span.length, 1)

        diagnosis = "  " + line[:col]
        diagnosis += colored(line[col:col + width], color, attrs=["bold"])
        diagnosis += line[col + width:] + "\n"

        diagnosis += "  " + " " * col
        diagnosis += colored("^" + "~" * (width - 1), color, attrs=["bold"])

        return diagnosis

    def report(self, error, source=None):
        """Prints error (a language diagnostic). Stop errors are swallowed silently."""
        if error.silent:
            return
        self.reported.append(error)

        header = ""
        if self.path is not None:
            line = f":{error.span.line}" if error.span is not None else ""
            header = colored(f"{self.path}{line}: ", attrs=["bold"])

        self._print(header + colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + str(error))

        if source and error.span is not None and error.span.offset < len(source):
            self._print(ErrorHandler.diagnose(error.span, source))

        if self.fatal:
            sys.exit(1)

    def warn(self, msg):
        """Prints a warning message."""
        self._print(colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + msg)

    def throw(self, error):
        """Prints a GenericException, then exits if fatal."""
        error_msg = ""
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is GenericException:
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
