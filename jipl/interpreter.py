"""JIPL interpreter.

JIPL is a small dynamically typed scripting language: numbers (which double as booleans), strings, lists, closures and
prototype-less objects. Basic program flow:
    1. Lexer: turns the source into a flat list of tokens, see jipl/lang/lexical.py
    2. Parser: builds an AST from the tokens by recursive descent, see jipl/grammar/parser.py
    3. Evaluator: walks the AST against a root environment, see jipl/runtime/evaluator.py

A lexical or syntax error stops the pipeline before anything is evaluated. Every error is reported to the error
handler (when one is given) along with the source, so that it can point at the offending span.
"""

import logging
import sys

from jipl.grammar.parser import parse
from jipl.lang.error import runtime_error
from jipl.lang.lexical import tokenize
from jipl.runtime.context import RunContext
from jipl.runtime.evaluator import Evaluator
from jipl.runtime.result import RTResult
from jipl.runtime.values import Number

logging.getLogger("jipl").addHandler(logging.NullHandler())
logger = logging.getLogger(__name__)

# Python frames available to a running program. Each JIPL call nests about a dozen evaluator frames.
RECURSION_LIMIT = 10000


def run(source, environment, context=None, error_handler=None):
    """Runs source against environment. Returns an RTResult: on success its value is a List holding the value of each
    top-level statement.
    """
    if context is None:
        context = RunContext()
    context.reset()

    tokens, error = tokenize(source)
    if error is None:
        root, error = parse(tokens)

    if error is not None:
        result = RTResult.failure(error)
    else:
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, RECURSION_LIMIT))
        try:
            result = Evaluator(context).visit(root, environment)
        except RecursionError:
            result = RTResult.failure(runtime_error("Maximum recursion depth exceeded"))
        finally:
            sys.setrecursionlimit(limit)

    if result.is_error:
        logger.debug("run failed: %r", result.error)
        if error_handler is not None:
            error_handler.report(result.error, source)
    elif result.should_unwind:
        # return/break/continue outside of any function or loop: ends the program
        result = RTResult.success(result.value if result.value is not None else Number.NULL)

    return result
