"""Abstract syntax tree for JIPL. Nodes are built once by the parser and never mutated afterwards; the evaluator may
visit the same node many times (loop bodies, function bodies).

Every node carries the span of the token it was derived from, for diagnostics.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Optional, Tuple

from jipl.lang.lexical import Span, Token


class Node(ABC):
    """Superclass of every AST node."""
    span: Optional[Span]


@dataclass(frozen=True)
class NumberNode(Node):
    token: Token

    @property
    def span(self):
        return self.token.span


@dataclass(frozen=True)
class StringNode(Node):
    token: Token

    @property
    def span(self):
        return self.token.span


@dataclass(frozen=True)
class ListNode(Node):
    """Both list literals and statement blocks: evaluates every element and yields a List value."""
    elements: Tuple[Node, ...]
    span: Optional[Span] = None


@dataclass(frozen=True)
class BinaryOpNode(Node):
    left: Node
    op: Token
    right: Node

    @property
    def span(self):
        return self.op.span


@dataclass(frozen=True)
class UnaryOpNode(Node):
    op: Token
    operand: Node

    @property
    def span(self):
        return self.op.span


@dataclass(frozen=True)
class VarAccessNode(Node):
    name: Token

    @property
    def span(self):
        return self.name.span


@dataclass(frozen=True)
class VarAssignNode(Node):
    """`var name = value`: always binds in the innermost scope."""
    name: Token
    value: Node

    @property
    def span(self):
        return self.name.span


@dataclass(frozen=True)
class VarModifyNode(Node):
    """`name = value`: writes through to the scope that declares name."""
    name: Token
    value: Node

    @property
    def span(self):
        return self.name.span


@dataclass(frozen=True)
class CaseNode(Node):
    """One clause of an if chain. condition is None for the else clause. returns_null is set for brace-delimited
    bodies, whose value is discarded.
    """
    condition: Optional[Node]
    body: Node
    returns_null: bool
    span: Optional[Span] = None


@dataclass(frozen=True)
class IfNode(Node):
    cases: Tuple[CaseNode, ...]
    else_case: Optional[CaseNode]
    span: Optional[Span] = None


@dataclass(frozen=True)
class ForNode(Node):
    var_name: Token
    start: Node
    end: Node
    step: Optional[Node]
    body: Node
    returns_null: bool

    @property
    def span(self):
        return self.var_name.span


@dataclass(frozen=True)
class WhileNode(Node):
    condition: Node
    body: Node
    returns_null: bool
    span: Optional[Span] = None


@dataclass(frozen=True)
class FunctionDefNode(Node):
    name: Optional[Token]
    params: Tuple[Token, ...]
    body: Node
    auto_return: bool
    span: Optional[Span] = None


@dataclass(frozen=True)
class CallNode(Node):
    callee: Node
    args: Tuple[Node, ...]
    span: Optional[Span] = None


@dataclass(frozen=True)
class ReturnNode(Node):
    value: Optional[Node]
    span: Optional[Span] = None


@dataclass(frozen=True)
class ContinueNode(Node):
    span: Optional[Span] = None


@dataclass(frozen=True)
class BreakNode(Node):
    span: Optional[Span] = None


@dataclass(frozen=True)
class ObjectDefNode(Node):
    name: Token
    params: Tuple[Token, ...]
    body: Node

    @property
    def span(self):
        return self.name.span


@dataclass(frozen=True)
class InstantiateNode(Node):
    class_node: Node
    args: Tuple[Node, ...]
    span: Optional[Span] = None


@dataclass(frozen=True)
class PointAccessNode(Node):
    """`a.b.c`: every node after the first is evaluated inside the member namespace of the previous value."""
    nodes: Tuple[Node, ...]
    span: Optional[Span] = None
