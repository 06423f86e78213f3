"""Tree-walking evaluator for JIPL.

Evaluator.visit dispatches on the type of the node to the matching visit_<NodeType> method. Every visit returns an
RTResult; composite nodes check RTResult.should_unwind after each child and hand the result upward untouched when it
is set, which is all it takes for return/break/continue/errors to cross any number of nested constructs.

Before dispatching anything, visit checks the run context's stop flag so that a stop request interrupts evaluation at
the very next node, however deep.
"""

import logging

from jipl.grammar.nodes import Node
from jipl.lang.error import Error, GenericException, runtime_error, stop_error
from jipl.lang.lexical import TokenKind
from jipl.runtime.context import RunContext
from jipl.runtime.result import Outcome, RTResult
from jipl.runtime.values import BaseFunction, Function, List, Number, ObjectClass, String

logger = logging.getLogger(__name__)

BINARY_OPERATIONS = {
    TokenKind.PLUS: "add",
    TokenKind.MINUS: "sub",
    TokenKind.MULT: "mult",
    TokenKind.DIV: "div",
    TokenKind.DOUBLE_EQUALS: "equals",
    TokenKind.NOT_EQUALS: "not_equals",
    TokenKind.LESS: "less",
    TokenKind.GREATER: "greater",
    TokenKind.LESS_EQUALS: "less_equals",
    TokenKind.GREATER_EQUALS: "greater_equals",
}

KEYWORD_OPERATIONS = {
    "and": "and_",
    "or": "or_",
}


class Evaluator:

    def __init__(self, context=None):
        self.context = context if context is not None else RunContext()

    def visit(self, node, env):
        """Evaluates node in env. Returns an RTResult."""
        if self.context.stopped:
            return RTResult.failure(stop_error())

        method = getattr(self, "visit_" + type(node).__name__, None)
        if method is None or not isinstance(node, Node):
            raise GenericException("cannot evaluate node of type {}", type(node).__name__, internal=True)
        return method(node, env)

    def call(self, function, args, env):
        """Calls function with already evaluated args from env. Non-callable values are returned unchanged."""
        if not isinstance(function, BaseFunction):
            return RTResult.success(function)
        return function.execute(self, list(args), env)

    def _condition(self, result, node):
        """Returns the truth of an evaluated condition, or an Error if it is not a Number."""
        if not isinstance(result.value, Number):
            return runtime_error(f"Condition must be a number, not {result.value}", node.span)
        return result.value.is_true()

    def _number(self, node, env):
        """Evaluates node, which must produce a Number. Returns (result, value)."""
        result = self.visit(node, env)
        if result.should_unwind:
            return result, None
        if not isinstance(result.value, Number):
            return RTResult.failure(runtime_error(f"Expected a number, got {result.value}", node.span)), None
        return result, result.value.value

    # ---------------------------------------------------------------------------------------------------------------
    # literals and variables

    def visit_NumberNode(self, node, env):
        return RTResult.success(Number(float(node.token.literal)).set_span(node.span))

    def visit_StringNode(self, node, env):
        return RTResult.success(String(node.token.literal).set_span(node.span))

    def visit_ListNode(self, node, env):
        elements = []
        for element in node.elements:
            result = self.visit(element, env)
            if result.should_unwind:
                return result
            elements.append(result.value)
        return RTResult.success(List(elements).set_span(node.span))

    def visit_VarAccessNode(self, node, env):
        name = node.name.literal
        value = env.lookup(name)
        if value is None:
            return RTResult.failure(runtime_error(f"{name} is not defined", node.span))
        return RTResult.success(value)

    def visit_VarAssignNode(self, node, env):
        result = self.visit(node.value, env)
        if result.should_unwind:
            return result

        env.declare(node.name.literal, result.value)
        return RTResult.success(result.value)

    def visit_VarModifyNode(self, node, env):
        result = self.visit(node.value, env)
        if result.should_unwind:
            return result

        name = node.name.literal
        if name == "this" and not env.is_root:
            # rebinding `this` from inside an object is ignored
            return RTResult.success(result.value)

        env.assign(name, result.value)
        return RTResult.success(result.value)

    # ---------------------------------------------------------------------------------------------------------------
    # operators

    def visit_BinaryOpNode(self, node, env):
        left = self.visit(node.left, env)
        if left.should_unwind:
            return left

        right = self.visit(node.right, env)
        if right.should_unwind:
            return right

        if node.op.matches(TokenKind.KEYWORD):
            operation = KEYWORD_OPERATIONS[node.op.literal]
        else:
            operation = BINARY_OPERATIONS.get(node.op.kind)
        if operation is None:
            raise GenericException("unknown binary operator {}", str(node.op), internal=True)

        value = getattr(left.value, operation)(right.value)
        if isinstance(value, Error):
            return RTResult.failure(value.at(node.span))
        return RTResult.success(value)

    def visit_UnaryOpNode(self, node, env):
        result = self.visit(node.operand, env)
        if result.should_unwind:
            return result

        operand = result.value
        if node.op.matches(TokenKind.MINUS):
            value = operand.mult(Number(-1))
        elif node.op.is_keyword("not"):
            value = operand.not_()
        else:
            value = operand

        if isinstance(value, Error):
            return RTResult.failure(value.at(node.span))
        return RTResult.success(value)

    # ---------------------------------------------------------------------------------------------------------------
    # control flow

    def _clause(self, case, env):
        result = self.visit(case.body, env.child("<if>"))
        if result.should_unwind:
            return result
        return RTResult.success(Number.NULL if case.returns_null else result.value)

    def visit_IfNode(self, node, env):
        for case in node.cases:
            condition = self.visit(case.condition, env)
            if condition.should_unwind:
                return condition

            truth = self._condition(condition, case.condition)
            if isinstance(truth, Error):
                return RTResult.failure(truth)
            if truth:
                return self._clause(case, env)

        if node.else_case is not None:
            return self._clause(node.else_case, env)
        return RTResult.success(Number.NULL)

    def _iterate(self, body, env, values):
        """Evaluates one loop iteration. Returns (result, keep_going); result is set only if the loop must unwind."""
        result = self.visit(body, env)
        if result.is_error or result.is_return:
            return result, False
        if result.outcome is Outcome.BREAK:
            return None, False
        if result.outcome is not Outcome.CONTINUE:
            values.append(result.value)
        return None, True

    def visit_ForNode(self, node, env):
        result, start = self._number(node.start, env)
        if result.should_unwind:
            return result
        result, end = self._number(node.end, env)
        if result.should_unwind:
            return result

        if node.step is not None:
            result, step = self._number(node.step, env)
            if result.should_unwind:
                return result
        else:
            step = 1 if start < end else -1

        name = node.var_name.literal
        values = []
        i = start
        while i < end if step >= 0 else i > end:
            loop_env = env.child("<for>")
            loop_env.declare(name, Number(i))
            i += step

            result, keep_going = self._iterate(node.body, loop_env, values)
            if result is not None:
                return result
            if not keep_going:
                break

        return RTResult.success(Number.NULL if node.returns_null else List(values))

    def visit_WhileNode(self, node, env):
        values = []
        while True:
            condition = self.visit(node.condition, env)
            if condition.should_unwind:
                return condition

            truth = self._condition(condition, node.condition)
            if isinstance(truth, Error):
                return RTResult.failure(truth)
            if not truth:
                break

            result, keep_going = self._iterate(node.body, env.child("<while>"), values)
            if result is not None:
                return result
            if not keep_going:
                break

        return RTResult.success(Number.NULL if node.returns_null else List(values))

    def visit_ReturnNode(self, node, env):
        value = Number.NULL
        if node.value is not None:
            result = self.visit(node.value, env)
            if result.should_unwind:
                return result
            value = result.value
        return RTResult.early_return(value)

    def visit_ContinueNode(self, node, env):
        return RTResult.cont()

    def visit_BreakNode(self, node, env):
        return RTResult.brk()

    # ---------------------------------------------------------------------------------------------------------------
    # functions and objects

    def visit_FunctionDefNode(self, node, env):
        name = node.name.literal if node.name is not None else None
        params = [param.literal for param in node.params]

        function = Function(name, params, node.body, node.auto_return, env).set_span(node.span)
        if name is not None:
            env.declare(name, function)
        return RTResult.success(function)

    def _arguments(self, nodes, env):
        """Evaluates argument nodes. Returns (result, args); result is set only if evaluation must unwind."""
        args = []
        for arg in nodes:
            result = self.visit(arg, env)
            if result.should_unwind:
                return result, None
            args.append(result.value)
        return None, args

    def visit_CallNode(self, node, env):
        callee = self.visit(node.callee, env)
        if callee.should_unwind:
            return callee
        if not isinstance(callee.value, BaseFunction):
            return callee

        result, args = self._arguments(node.args, env)
        if result is not None:
            return result

        result = self.call(callee.value, args, env)
        if result.is_error:
            result.error.at(node.span)
        return result

    def visit_ObjectDefNode(self, node, env):
        name = node.name.literal
        params = [param.literal for param in node.params]

        object_class = ObjectClass(name, params, node.body).set_span(node.span)
        env.declare(name, object_class)
        return RTResult.success(object_class)

    def visit_InstantiateNode(self, node, env):
        target = self.visit(node.class_node, env)
        if target.should_unwind:
            return target
        if not isinstance(target.value, ObjectClass):
            return RTResult.failure(runtime_error(f"{target.value} is not an object", node.span))

        result, args = self._arguments(node.args, env)
        if result is not None:
            return result

        logger.debug("instantiating %s", target.value.name)
        result = self.call(target.value, args, env)
        if result.is_error:
            result.error.at(node.span)
        return result

    def visit_PointAccessNode(self, node, env):
        value = None
        scope = env
        for member in node.nodes:
            if value is not None:
                scope = value.member_environment(scope)
            result = self.visit(member, scope)
            if result.should_unwind:
                return result
            value = result.value
        return RTResult.success(value if value is not None else Number.NULL)
