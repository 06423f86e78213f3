"""Evaluation results. Every evaluation step returns an RTResult, which is exactly one of:

- a success, carrying a Value
- a return, carrying the returned Value
- a break or a continue
- an error, carrying a jipl.lang.error.Error

Anything but a success must be passed upward unchanged by the caller (see RTResult.should_unwind). This is how
return/break/continue and errors travel through arbitrarily nested constructs without Python exceptions.
"""

import enum


class Outcome(enum.Enum):
    SUCCESS = "success"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"
    ERROR = "error"


class RTResult:
    __slots__ = ("outcome", "value", "error")

    def __init__(self, outcome, value=None, error=None):
        self.outcome = outcome
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value):
        return cls(Outcome.SUCCESS, value=value)

    @classmethod
    def early_return(cls, value):
        return cls(Outcome.RETURN, value=value)

    @classmethod
    def brk(cls):
        return cls(Outcome.BREAK)

    @classmethod
    def cont(cls):
        return cls(Outcome.CONTINUE)

    @classmethod
    def failure(cls, error):
        return cls(Outcome.ERROR, error=error)

    @property
    def should_unwind(self):
        """Whether or not the caller must stop evaluating siblings and hand this result upward."""
        return self.outcome is not Outcome.SUCCESS

    @property
    def is_error(self):
        return self.outcome is Outcome.ERROR

    @property
    def is_return(self):
        return self.outcome is Outcome.RETURN

    @property
    def is_loop_signal(self):
        """break or continue: consumed by the innermost loop."""
        return self.outcome in (Outcome.BREAK, Outcome.CONTINUE)

    def __repr__(self):
        if self.outcome is Outcome.ERROR:
            return f"RTResult(error={self.error!r})"
        return f"RTResult({self.outcome.value}, {self.value!r})"
