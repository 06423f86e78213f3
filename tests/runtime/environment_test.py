import unittest

from jipl.runtime.environment import Environment
from jipl.runtime.values import Number


class EnvironmentTestCase(unittest.TestCase):

    def setUp(self):
        self.root = Environment(name="<global>")
        self.root.declare("x", Number(1))
        self.middle = self.root.child()
        self.inner = self.middle.child()

    def test_lookup_walks_parents(self):
        self.assertEqual(1, self.inner.lookup("x").value)
        self.assertIsNone(self.inner.lookup("missing"))
        self.assertIn("x", self.inner)
        self.assertNotIn("missing", self.inner)

    def test_declare_binds_innermost(self):
        self.inner.declare("x", Number(2))
        self.assertEqual(2, self.inner.lookup("x").value)
        self.assertEqual(1, self.root.lookup("x").value)

    def test_assign_writes_through_to_declaring_scope(self):
        self.middle.declare("y", Number(1))
        self.inner.assign("y", Number(5))

        self.assertEqual(5, self.middle.lookup("y").value)
        self.assertNotIn("y", self.inner.bindings)

    def test_assign_undeclared_falls_back_to_outermost(self):
        self.inner.assign("z", Number(3))
        self.assertIs(self.root, self.inner.source("z"))
        self.assertIn("z", self.root.bindings)

    def test_is_root(self):
        self.assertTrue(self.root.is_root)
        self.assertFalse(self.inner.is_root)


if __name__ == '__main__':
    unittest.main()
