"""Runtime values of JIPL.

Every value implements the same operator table (add, sub, mult, div, equals, not_equals, less, greater, less_equals,
greater_equals, and_, or_, not_, is_true, copy) plus str() for display. The base class rejects every operation with an
"Illegal operation" error except add, which falls back to string concatenation, and equals, which is identity.
Subclasses override what is meaningful for them. Operators return either a Value or a jipl.lang.error.Error; they
never raise.

Numbers double as booleans: 0 is false, anything else is true, and equality is tested within EPSILON.

Member access (`value.name`) evaluates `name` inside the value's member namespace: a mapping built on first access
and cached, holding `this` and the builtin methods of the value's type. It is linked to the calling scope on every
access, so that arguments of a method call resolve where the call is written. Number.NULL is shared by every program
in the process, so its namespace is rebuilt on each access instead of cached.
"""

import math

from jipl.lang.error import runtime_error
from jipl.runtime.environment import Environment
from jipl.runtime.result import RTResult

EPSILON = 0.00025


class Value:
    """Superclass of every runtime value."""
    shared = False  # process-wide constants never keep a member namespace

    def __init__(self):
        self.span = None  # span of the literal this value came from, if any
        self._members = None

    def set_span(self, span):
        self.span = span
        return self

    def illegal_operation(self, other):
        return runtime_error(f"Illegal operation with {other}", self.span)

    def add(self, other):
        return String(str(self) + str(other))

    def sub(self, other):
        return self.illegal_operation(other)

    def mult(self, other):
        return self.illegal_operation(other)

    def div(self, other):
        return self.illegal_operation(other)

    def equals(self, other):
        return Number.from_bool(self is other)

    def not_equals(self, other):
        return self.illegal_operation(other)

    def less(self, other):
        return self.illegal_operation(other)

    def greater(self, other):
        return self.illegal_operation(other)

    def less_equals(self, other):
        return self.illegal_operation(other)

    def greater_equals(self, other):
        return self.illegal_operation(other)

    def and_(self, other):
        return self.illegal_operation(other)

    def or_(self, other):
        return self.illegal_operation(other)

    def is_true(self):
        return False

    def not_(self):
        return Number.from_bool(not self.is_true())

    def copy(self):
        return self

    def build_members(self):
        """Builtin members of this value, besides `this`. Called at most once per value, unless it is shared."""
        return {}

    def members(self):
        if self._members is not None:
            return self._members

        members = {"this": self}
        members.update(self.build_members())
        if not self.shared:
            self._members = members
        return members

    def member_environment(self, calling):
        """Scope in which the right-hand side of `self.<...>` is evaluated."""
        return Environment(calling, self.members(), name="<value>")


class Number(Value):
    NULL = None

    def __init__(self, value):
        super().__init__()
        self.value = float(value)

    @staticmethod
    def from_bool(flag):
        return Number(1 if flag else 0)

    def is_equal_to(self, number):
        return abs(self.value - number) < EPSILON

    def add(self, other):
        if isinstance(other, Number):
            return Number(self.value + other.value)
        if isinstance(other, String):
            return String(str(self) + other.value)
        return self.illegal_operation(other)

    def sub(self, other):
        if isinstance(other, Number):
            return Number(self.value - other.value)
        return self.illegal_operation(other)

    def mult(self, other):
        if isinstance(other, Number):
            return Number(self.value * other.value)
        return self.illegal_operation(other)

    def div(self, other):
        if isinstance(other, Number):
            if other.value == 0:
                return runtime_error("Division by zero")
            return Number(self.value / other.value)
        return self.illegal_operation(other)

    def _compare(self, other, predicate):
        if isinstance(other, Number):
            return Number.from_bool(predicate(self, other))
        return self.illegal_operation(other)

    def equals(self, other):
        return self._compare(other, lambda a, b: a.is_equal_to(b.value))

    def not_equals(self, other):
        return self._compare(other, lambda a, b: not a.is_equal_to(b.value))

    def less(self, other):
        return self._compare(other, lambda a, b: a.value < b.value)

    def greater(self, other):
        return self._compare(other, lambda a, b: a.value > b.value)

    def less_equals(self, other):
        return self._compare(other, lambda a, b: a.value <= b.value)

    def greater_equals(self, other):
        return self._compare(other, lambda a, b: a.value >= b.value)

    def and_(self, other):
        return self._compare(other, lambda a, b: a.is_true() and b.is_true())

    def or_(self, other):
        return self._compare(other, lambda a, b: a.is_true() or b.is_true())

    def is_true(self):
        return not self.is_equal_to(0)

    def copy(self):
        return Number(self.value)

    def __repr__(self):
        return f"Number({str(self)})"

    def __str__(self):
        if self.value.is_integer():
            return str(int(self.value))
        return repr(self.value)


Number.NULL = Number(0)
Number.NULL.shared = True


def _invalid_argument(arg, name):
    return runtime_error(f"Invalid argument type, {arg} is not allowed to the function '{name}'")


def _index(arg, name):
    """Returns arg as an int index, or an Error if arg is not a finite Number."""
    if not isinstance(arg, Number):
        return _invalid_argument(arg, name)
    if not math.isfinite(arg.value):
        return runtime_error(f"Index out of bounds {arg}")
    return int(arg.value)


class String(Value):

    def __init__(self, value):
        super().__init__()
        self.value = value

    def add(self, other):
        return String(self.value + str(other))

    def equals(self, other):
        return Number.from_bool(self.value.lower() == str(other).lower())

    def not_equals(self, other):
        return Number.from_bool(self.value.lower() != str(other).lower())

    def is_true(self):
        return len(self.value) > 0

    def build_members(self):
        value = self.value

        def split(evaluator, env, separator):
            separator = str(separator)
            if separator == " ":
                parts = value.split()
            elif separator == "":
                parts = list(value)
            else:
                parts = value.split(separator)
            return List(String(part) for part in parts)

        def char_at(evaluator, env, index):
            index = _index(index, "charAt")
            if not isinstance(index, int):
                return index
            if index < 0 or index >= len(value):
                return runtime_error(f"Index out of bounds {index}.")
            return String(value[index])

        def substring(evaluator, env, start, end):
            if not isinstance(start, Number) or not isinstance(end, Number):
                return _invalid_argument(f"{start}::{end}", "substring")
            start, end = _index(start, "substring"), _index(end, "substring")
            for index in (start, end):
                if not isinstance(index, int):
                    return index
                if index < 0 or index > len(value):
                    return runtime_error(f"Index out of bounds {index}.")
            if start > end:
                return runtime_error(f"Index out of bounds {start}.")
            return String(value[start:end])

        return {
            "length": Number(len(value)),
            "split": BuiltinFunction("split", ("text",), split),
            "charAt": BuiltinFunction("charAt", ("index",), char_at),
            "substring": BuiltinFunction("substring", ("start", "end"), substring),
        }

    def __repr__(self):
        return f"String({self.value!r})"

    def __str__(self):
        return self.value


class List(Value):

    def __init__(self, elements=()):
        super().__init__()
        self.elements = list(elements)

    def copy(self):
        return List(element.copy() for element in self.elements)

    def add(self, other):
        result = self.copy()
        if isinstance(other, List):
            result.elements.extend(other.elements)
        else:
            result.elements.append(other)
        return result

    def mult(self, other):
        result = self.copy()
        result.elements.append(other)
        return result

    def build_members(self):
        elements = self.elements

        def add(evaluator, env, element):
            elements.append(element)
            return element

        def get(evaluator, env, index):
            index = _index(index, "get")
            if not isinstance(index, int):
                return index
            if index < 0 or index >= len(elements):
                return runtime_error(f"Index out of bounds {index}")
            return elements[index]

        def set_(evaluator, env, index, element):
            index = _index(index, "set")
            if not isinstance(index, int):
                return index
            if index < 0 or index >= len(elements):
                return runtime_error(f"Index out of bounds {index}")
            elements[index] = element
            return element

        def insert(evaluator, env, index, element):
            index = _index(index, "insert")
            if not isinstance(index, int):
                return index
            if index < 0 or index > len(elements):
                return runtime_error(f"Index out of bounds {index}")
            elements.insert(index, element)
            return element

        def join(evaluator, env, separator):
            return String(str(separator).join(str(element) for element in elements))

        def clear(evaluator, env):
            elements.clear()
            return Number.NULL

        def foreach(evaluator, env, function):
            if not isinstance(function, BaseFunction):
                return _invalid_argument(function, "foreach")

            mapped = List()
            for element in list(elements):
                result = function.execute(evaluator, [element], env)
                if result.should_unwind:
                    return result
                mapped.elements.append(result.value)
            return mapped

        def size(evaluator, env):
            return Number(len(elements))

        return {
            "add": BuiltinFunction("add", ("element",), add),
            "get": BuiltinFunction("get", ("index",), get),
            "set": BuiltinFunction("set", ("index", "object"), set_),
            "insert": BuiltinFunction("insert", ("index", "object"), insert),
            "join": BuiltinFunction("join", ("by",), join),
            "clear": BuiltinFunction("clear", (), clear),
            "foreach": BuiltinFunction("foreach", ("function",), foreach),
            "size": BuiltinFunction("size", (), size),
        }

    def __repr__(self):
        return f"List({self.elements!r})"

    def __str__(self):
        return "[" + ", ".join(str(element) for element in self.elements) + "]"


class BaseFunction(Value):
    """Anything that can be called: user functions, builtins, object classes."""

    def __init__(self, name, params):
        super().__init__()
        self.name = name if name is not None else "<anonymous>"
        self.params = tuple(params)

    def check_args(self, args):
        """Returns an Error if args does not match self.params, else None."""
        if len(args) != len(self.params):
            return runtime_error(f"Incorrect number of arguments passed to '{self.name}': expected "
                                 f"{len(self.params)}, got {len(args)}")
        return None

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, {list(self.params)!r})"

    def populate_args(self, env, args):
        for name, value in zip(self.params, args):
            env.declare(name, value)

    def execute(self, evaluator, args, env):
        """Calls this function with already evaluated args. env is the scope of the call site. Returns an
        RTResult.
        """
        raise NotImplementedError()


class Function(BaseFunction):
    """User-defined function. Closes over the scope it was defined in."""

    def __init__(self, name, params, body, auto_return, closure):
        super().__init__(name, params)
        self.body = body
        self.auto_return = auto_return
        self.closure = closure

    def execute(self, evaluator, args, env):
        error = self.check_args(args)
        if error is not None:
            return RTResult.failure(error)

        call_env = self.closure.child(self.name)
        self.populate_args(call_env, args)

        result = evaluator.visit(self.body, call_env)
        if result.is_return:
            return RTResult.success(result.value)
        if result.should_unwind:
            return result

        return RTResult.success(result.value if self.auto_return else Number.NULL)

    def __str__(self):
        return f"<function {self.name}>"


class BuiltinFunction(BaseFunction):
    """Function implemented in Python. native is called as native(evaluator, env, *args), where env is a fresh scope
    holding the arguments, and returns a Value, an Error or an RTResult.
    """

    def __init__(self, name, params, native):
        super().__init__(name, params)
        self.native = native

    def execute(self, evaluator, args, env):
        error = self.check_args(args)
        if error is not None:
            return RTResult.failure(error)

        call_env = env.child(self.name)
        self.populate_args(call_env, args)

        output = self.native(evaluator, call_env, *args)
        if isinstance(output, RTResult):
            return output
        if isinstance(output, Value):
            return RTResult.success(output)
        return RTResult.failure(output)

    def __str__(self):
        return f"<built-in function {self.name}>"


class ObjectClass(BaseFunction):
    """A constructible type. Instantiating it runs body in a fresh scope holding the constructor arguments, `this`
    (the new instance) and `type` (the class); that scope becomes the instance's member namespace. A class without a
    body (such as the builtin Object) produces empty instances.
    """

    def __init__(self, name, params, body=None):
        super().__init__(name, params)
        self.body = body

    def execute(self, evaluator, args, env):
        error = self.check_args(args)
        if error is not None:
            return RTResult.failure(error)

        object_env = env.child(self.name)
        self.populate_args(object_env, args)

        instance = ObjectInstance(self, object_env)
        object_env.declare("this", instance)
        object_env.declare("type", self)

        if self.body is not None:
            result = evaluator.visit(self.body, object_env)
            if result.is_error:
                return result

        return RTResult.success(instance)

    def __str__(self):
        return f"<object {self.name}>"


class ObjectInstance(Value):

    def __init__(self, object_class, environment):
        super().__init__()
        self.object_class = object_class
        self.environment = environment

    def members(self):
        return self.environment.bindings

    def __repr__(self):
        return f"ObjectInstance({self.object_class.name!r})"

    def __str__(self):
        names = ", ".join(name for name in self.environment.bindings if name not in ("this", "type"))
        return f"<{self.object_class.name} object [{names}]>"


def number_args(args, name):
    """Returns the float values of args, or an Error naming the first argument that is not a Number."""
    values = []
    for arg in args:
        if not isinstance(arg, Number):
            return _invalid_argument(arg, name)
        values.append(arg.value)
    return values
