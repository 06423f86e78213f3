import unittest

from jipl.lang.error import Error, ErrorKind
from jipl.runtime.environment import Environment
from jipl.runtime.values import BuiltinFunction, Function, List, Number, ObjectClass, ObjectInstance, String


class NumberTestCase(unittest.TestCase):

    def test_display(self):
        should_pass = {3: "3", 3.0: "3", 3.5: "3.5", -2: "-2", 0.25: "0.25"}
        for case, result in should_pass.items():
            self.assertEqual(result, str(Number(case)))

    def test_epsilon_equality(self):
        should_pass = {(3.00024, 3): True, (3.0003, 3): False, (2.99976, 3): True, (0.0001, 0): True, (1, 2): False}
        for (left, right), result in should_pass.items():
            self.assertEqual(int(result), Number(left).equals(Number(right)).value, (left, right))
            self.assertEqual(int(not result), Number(left).not_equals(Number(right)).value, (left, right))

    def test_arithmetic(self):
        self.assertEqual(5, Number(2).add(Number(3)).value)
        self.assertEqual(-1, Number(2).sub(Number(3)).value)
        self.assertEqual(6, Number(2).mult(Number(3)).value)
        self.assertEqual(2.5, Number(5).div(Number(2)).value)

    def test_division_by_zero(self):
        error = Number(5).div(Number(0))
        self.assertIsInstance(error, Error)
        self.assertIs(ErrorKind.RUNTIME, error.kind)
        self.assertEqual("Division by zero", error.message)

    def test_truthiness(self):
        should_pass = {0: False, 0.0001: False, 1: True, -1: True, 0.5: True}
        for case, result in should_pass.items():
            self.assertEqual(result, Number(case).is_true(), case)
            self.assertEqual(int(not result), Number(case).not_().value, case)

    def test_logic(self):
        self.assertEqual(1, Number(1).and_(Number(2)).value)
        self.assertEqual(0, Number(1).and_(Number(0)).value)
        self.assertEqual(1, Number(0).or_(Number(2)).value)
        self.assertEqual(0, Number(0).or_(Number(0)).value)

    def test_comparisons(self):
        self.assertEqual(1, Number(1).less(Number(2)).value)
        self.assertEqual(0, Number(2).greater(Number(2)).value)
        self.assertEqual(1, Number(2).greater_equals(Number(2)).value)
        self.assertEqual(1, Number(2).less_equals(Number(2)).value)

    def test_string_coercion(self):
        result = Number(1).add(String("a"))
        self.assertIsInstance(result, String)
        self.assertEqual("1a", result.value)

    def test_illegal_operations(self):
        should_fail = [lambda: Number(1).sub(String("a")), lambda: Number(1).less(String("a")),
                       lambda: Number(1).mult(List()), lambda: Number(1).and_(String("a"))]
        for case in should_fail:
            error = case()
            self.assertIsInstance(error, Error)
            self.assertTrue(error.message.startswith("Illegal operation"))

    def test_null_is_distinct_from_false(self):
        false = Number.from_bool(False)
        self.assertIsNot(Number.NULL, false)
        self.assertEqual(1, Number.NULL.equals(false).value)

    def test_booleans_are_fresh(self):
        self.assertIsNot(Number.from_bool(True), Number.from_bool(True))
        self.assertIsNot(Number(1).less(Number(2)), Number(1).less(Number(2)))

    def test_null_members_are_not_cached(self):
        members = Number.NULL.members()
        members["leaked"] = Number(1)
        self.assertNotIn("leaked", Number.NULL.members())
        self.assertIs(Number.NULL, Number.NULL.members()["this"])

        number = Number(1)
        self.assertIs(number.members(), number.members())


class StringTestCase(unittest.TestCase):

    def test_concatenation(self):
        self.assertEqual("ab", String("a").add(String("b")).value)
        self.assertEqual("a1", String("a").add(Number(1)).value)
        self.assertEqual("a[1, 2]", String("a").add(List([Number(1), Number(2)])).value)

    def test_case_insensitive_equality(self):
        self.assertEqual(1, String("Hello").equals(String("hELLO")).value)
        self.assertEqual(0, String("Hello").equals(String("world")).value)
        self.assertEqual(1, String("3").equals(Number(3)).value)
        self.assertEqual(1, String("a").not_equals(String("b")).value)

    def test_truthiness(self):
        self.assertTrue(String("x").is_true())
        self.assertFalse(String("").is_true())
        self.assertEqual(1, String("").not_().value)

    def test_unsupported_operators(self):
        for operation in ("sub", "mult", "div", "less", "and_"):
            self.assertIsInstance(getattr(String("a"), operation)(String("b")), Error, operation)

    def test_members(self):
        members = String("abc").members()
        self.assertEqual(3, members["length"].value)
        self.assertIsInstance(members["this"], String)
        for name in ("split", "charAt", "substring"):
            self.assertIsInstance(members[name], BuiltinFunction, name)


class ListTestCase(unittest.TestCase):

    def test_display(self):
        self.assertEqual("[]", str(List()))
        self.assertEqual("[1, a, [2]]", str(List([Number(1), String("a"), List([Number(2)])])))

    def test_add_copies(self):
        original = List([Number(1)])
        extended = original.add(List([Number(2), Number(3)]))
        appended = original.add(Number(4))

        self.assertEqual("[1]", str(original))
        self.assertEqual("[1, 2, 3]", str(extended))
        self.assertEqual("[1, 4]", str(appended))

    def test_mult_appends(self):
        self.assertEqual("[1, [2]]", str(List([Number(1)]).mult(List([Number(2)]))))

    def test_copy_is_deep_for_lists(self):
        inner = List([Number(1)])
        copy = List([inner]).copy()
        self.assertIsNot(inner, copy.elements[0])
        self.assertEqual(str(inner), str(copy.elements[0]))

    def test_equality_is_identity(self):
        lst = List()
        self.assertEqual(1, lst.equals(lst).value)
        self.assertEqual(0, lst.equals(List()).value)

    def test_illegal_operations(self):
        self.assertIsInstance(List().sub(Number(1)), Error)
        self.assertIsInstance(List().div(Number(1)), Error)


class FunctionTestCase(unittest.TestCase):

    def test_copy_keeps_identity(self):
        function = Function("f", [], None, True, Environment())
        self.assertIs(function, function.copy())

        object_class = ObjectClass("A", [])
        self.assertIs(object_class, object_class.copy())

    def test_repr(self):
        self.assertEqual("Function('f', ['a'])", repr(Function("f", ["a"], None, True, Environment())))
        self.assertEqual("BuiltinFunction('print', ['text'])", repr(BuiltinFunction("print", ("text",), None)))
        self.assertEqual("ObjectInstance('A')", repr(ObjectInstance(ObjectClass("A", []), Environment())))

    def test_argument_count(self):
        function = Function("f", ["a", "b"], None, True, Environment())
        self.assertIsNone(function.check_args([Number(1), Number(2)]))

        error = function.check_args([Number(1)])
        self.assertIs(ErrorKind.RUNTIME, error.kind)
        self.assertIn("Incorrect number of arguments", error.message)

    def test_display(self):
        self.assertEqual("<function f>", str(Function("f", [], None, True, Environment())))
        self.assertEqual("<function <anonymous>>", str(Function(None, [], None, True, Environment())))
        self.assertEqual("<built-in function g>", str(BuiltinFunction("g", [], None)))


class MemberEnvironmentTestCase(unittest.TestCase):

    def test_members_are_built_once(self):
        value = String("abc")
        self.assertIs(value.members(), value.members())
        self.assertIs(value.members()["split"], value.members()["split"])

    def test_member_environment_links_to_calling_scope(self):
        value = List()
        calling = Environment()
        calling.declare("i", Number(1))

        env = value.member_environment(calling)
        self.assertIs(calling, env.parent)
        self.assertEqual(1, env.lookup("i").value)
        self.assertIs(value, env.lookup("this"))

        env.declare("extra", Number(2))
        self.assertEqual(2, value.member_environment(Environment()).lookup("extra").value)


if __name__ == '__main__':
    unittest.main()
