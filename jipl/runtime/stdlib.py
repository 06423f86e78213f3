"""The root environment: constants and builtins every JIPL program starts with.

Builtins are ordinary BuiltinFunction values; the console ones go through the evaluator's RunContext, so tests can
swap stdin/stdout, the random source and sleep for deterministic stand-ins.
"""

import math

from jipl.lang.error import runtime_error
from jipl.runtime.environment import Environment
from jipl.runtime.values import BuiltinFunction, Number, ObjectClass, String, number_args

PI = 3.1415927
PHI = 1.618034
NAN = float("nan")


def _print(evaluator, env, text):
    evaluator.context.write_line(str(text))
    return text


def _wait(evaluator, env, value):
    millis = number_args([value], "wait")
    if not isinstance(millis, list):
        return millis
    if not math.isfinite(millis[0]):
        return runtime_error(f"Cannot wait for {value} milliseconds")
    evaluator.context.sleep(max(millis[0], 0) / 1000)
    return Number.NULL


def _input(evaluator, env):
    token = evaluator.context.read_token()
    if token is None:
        return runtime_error("End of input")
    return String(token)


def _input_number(evaluator, env):
    token = evaluator.context.read_token()
    if token is None:
        return runtime_error("End of input")
    try:
        return Number(int(token))
    except ValueError:
        return runtime_error(f"Expected an integer, got '{token}'")


def math_function(name, function, *params):
    """Wraps a float function into a builtin that rejects non-Number arguments. function must follow IEEE float
    semantics (NaN and infinities in, NaN and infinities out) rather than raise.
    """
    if not params:
        params = ("value",)

    def native(evaluator, env, *args):
        values = number_args(args, name)
        if not isinstance(values, list):
            return values
        return Number(function(*values))

    return BuiltinFunction(name, params, native)


def _finite_only(function):
    """NaN for infinite arguments, where the math module raises instead."""
    return lambda value: function(value) if math.isfinite(value) else NAN


def _rounding(function):
    """Rounds finite values; infinities and NaN are returned as is."""
    return lambda value: float(function(value)) if math.isfinite(value) else value


def _sqrt(value):
    return math.sqrt(value) if value >= 0 else NAN


def _modulo(value, divisor):
    if divisor == 0 or not math.isfinite(value):
        return NAN
    return math.fmod(value, divisor)


def _distance(x1, y1, x2, y2):
    return math.hypot(x1 - x2, y1 - y2)


def _random_between(evaluator, env, low_arg, high_arg):
    values = number_args([low_arg, high_arg], "randomBetween")
    if not isinstance(values, list):
        return values

    low, high = values
    if not math.isfinite(low) or not math.isfinite(high):
        return runtime_error(f"Invalid bounds {low_arg}, {high_arg} for the function 'randomBetween'")
    if high < low:
        return Number(0)
    return Number(low + evaluator.context.random.randint(0, int(high - low)))


def _random(evaluator, env):
    return Number(evaluator.context.random.random())


def builtins():
    """Returns every builtin function and class, keyed by name."""
    functions = [
        BuiltinFunction("print", ("text",), _print),
        BuiltinFunction("wait", ("value",), _wait),
        BuiltinFunction("input", (), _input),
        BuiltinFunction("inputNumber", (), _input_number),
        math_function("sin", _finite_only(math.sin)),
        math_function("cos", _finite_only(math.cos)),
        math_function("abs", abs),
        math_function("floor", _rounding(math.floor)),
        math_function("ceil", _rounding(math.ceil)),
        math_function("toRadians", math.radians),
        math_function("toDegrees", math.degrees),
        math_function("sqrt", _sqrt),
        math_function("distance", _distance, "x1", "y1", "x2", "y2"),
        math_function("modulo", _modulo, "value", "divisor"),
        BuiltinFunction("random", (), _random),
        BuiltinFunction("randomBetween", ("min", "max"), _random_between),
        ObjectClass("Object", ()),
    ]
    return {function.name: function for function in functions}


def global_environment():
    """Builds a fresh root environment."""
    env = Environment(name="<global>")

    env.declare("PI", Number(PI))
    env.declare("PHI", Number(PHI))
    env.declare("true", Number(1))
    env.declare("false", Number(0))
    env.declare("null", Number.NULL)

    for name, value in builtins().items():
        env.declare(name, value)

    return env
