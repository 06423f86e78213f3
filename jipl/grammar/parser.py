"""Recursive-descent parser for JIPL.

Grammar, from lowest to highest precedence:

```
<statements>  ::= <nline>* <statement> (<nline>+ <statement>)* <nline>*
<statement>   ::= "return" <expression>? | "continue" | "break" | <expression>
<expression>  ::= "var" IDENT "=" <expression> | <comp_binop>
<comp_binop>  ::= <comp_expr> (("and" | "or") <comp_expr>)*
<comp_expr>   ::= "not" <comp_expr> | <comp_arith>
<comp_arith>  ::= <arithmetic> (("==" | "!=" | "<" | "<=" | ">" | ">=") <arithmetic>)*
<arithmetic>  ::= <term> (("+" | "-") <term>)*
<term>        ::= <call> (("*" | "/") <call>)*
<call>        ::= <factor> ("(" <args> ")" | ("." ("{" <statements> "}" | <call>))*)?
<factor>      ::= INT | FLOAT | STRING | IDENT ("=" <expression>)? | "(" <expression> ")" | "[" <args> "]"
                | ("+" | "-") <call> | <if> | <for> | <while> | <function> | "object" <object> | "new" <new>
```

Newlines are statement separators, but most constructs tolerate newlines wherever a separator would make no sense
(after an operator, an opening bracket, a comma, a keyword).

Speculative parses go through attempt(), which rolls the cursor back when the rule fails instead of surfacing the
error. Statement sequences use it to stop at the first thing that is not a statement, so that the closing brace of a
block (or any other trailing construct) is left for the enclosing rule.
"""

import logging

from jipl.grammar.nodes import (BinaryOpNode, BreakNode, CallNode, CaseNode, ContinueNode, ForNode, FunctionDefNode,
                                IfNode, InstantiateNode, ListNode, NumberNode, ObjectDefNode, PointAccessNode,
                                ReturnNode, StringNode, UnaryOpNode, VarAccessNode, VarAssignNode, VarModifyNode,
                                WhileNode)
from jipl.lang.error import syntax_error
from jipl.lang.lexical import TokenKind

logger = logging.getLogger(__name__)

COMPARISONS = (TokenKind.DOUBLE_EQUALS, TokenKind.NOT_EQUALS, TokenKind.LESS, TokenKind.LESS_EQUALS,
               TokenKind.GREATER, TokenKind.GREATER_EQUALS)


class ParseError(Exception):
    """Raised inside the parser to unwind to the nearest attempt() or to parse(). Never escapes parse()."""

    def __init__(self, error):
        super().__init__(str(error))
        self.error = error


class Parser:
    """Parses a token list (as produced by jipl.lang.lexical.tokenize) into an AST."""

    def __init__(self, tokens):
        if not tokens or not tokens[-1].matches(TokenKind.END_OF_CODE):
            raise ValueError("tokens must end with END_OF_CODE")
        self.tokens = tokens
        self.index = 0

    # ---------------------------------------------------------------------------------------------------------------
    # cursor

    @property
    def current(self):
        return self.tokens[self.index]

    def advance(self):
        """Consumes the current token and returns it. END_OF_CODE is never consumed."""
        token = self.current
        if self.index < len(self.tokens) - 1:
            self.index += 1
        return token

    def rewind(self, mark):
        self.index = mark

    def skip_newlines(self):
        """Consumes any NLINE tokens. Returns how many were consumed."""
        count = 0
        while self.current.matches(TokenKind.NLINE):
            self.advance()
            count += 1
        return count

    def fail(self, message, token=None):
        raise ParseError(syntax_error(message, (token or self.current).span))

    def expect(self, kind, message):
        if not self.current.matches(kind):
            self.fail(message)
        return self.advance()

    def expect_keyword(self, word):
        if not self.current.is_keyword(word):
            self.fail(f"Expected '{word}'")
        return self.advance()

    def attempt(self, rule, *args):
        """Runs rule speculatively: returns its node, or None after rolling the cursor back if it failed."""
        mark = self.index
        try:
            return rule(*args)
        except ParseError:
            self.rewind(mark)
            return None

    def newlines_then(self, test):
        """Skips newlines only if the token after them passes test; otherwise leaves the cursor untouched."""
        mark = self.index
        self.skip_newlines()
        if test(self.current):
            return True
        self.rewind(mark)
        return False

    # ---------------------------------------------------------------------------------------------------------------
    # entry point

    def parse(self):
        """Returns (root, error). root is a ListNode of the top-level statements."""
        try:
            root = self.statements()
            if not self.current.matches(TokenKind.END_OF_CODE):
                leftover = self.current
                self.statement()  # surfaces the actual error, if the leftover is not a statement at all
                self.fail(f"Expected newline or ';' before <{leftover}>", leftover)
        except ParseError as exc:
            return None, exc.error
        return root, None

    # ---------------------------------------------------------------------------------------------------------------
    # statements

    def statements(self):
        self.skip_newlines()
        start = self.current
        if start.matches(TokenKind.RBRA, TokenKind.END_OF_CODE):
            return ListNode((), start.span)

        statements = [self.statement()]
        while self.skip_newlines():
            statement = self.attempt(self.statement)
            if statement is None:
                break
            statements.append(statement)

        return ListNode(tuple(statements), start.span)

    def statement(self):
        token = self.current

        if token.is_keyword("return"):
            self.advance()
            value = None
            if not self.current.matches(TokenKind.NLINE):
                value = self.attempt(self.expression)
            return ReturnNode(value, token.span)

        if token.is_keyword("continue"):
            self.advance()
            return ContinueNode(token.span)

        if token.is_keyword("break"):
            self.advance()
            return BreakNode(token.span)

        return self.expression()

    def block(self):
        """Parses `"{" <statements> "}"`."""
        self.expect(TokenKind.LBRA, "Expected '{'")
        body = self.statements()
        self.expect(TokenKind.RBRA, "Expected '}'")
        return body

    def clause_body(self):
        """Body of if/elseif/else/for/while: an optional ':' then either a block or a single statement. Returns
        (body, returns_null): the value of a block is discarded, the value of a single statement is kept.
        """
        if self.current.matches(TokenKind.COLON):
            self.advance()
        self.skip_newlines()

        if self.current.matches(TokenKind.LBRA):
            return self.block(), True
        return self.statement(), False

    # ---------------------------------------------------------------------------------------------------------------
    # expressions

    def expression(self):
        if self.current.is_keyword("var"):
            self.advance()
            self.skip_newlines()

            if not self.current.matches(TokenKind.IDENTIFIER):
                self.fail("Expected identifier for the variable")
            name = self.advance()
            self.skip_newlines()

            self.expect(TokenKind.EQUALS, "Expected '='")
            self.skip_newlines()

            return VarAssignNode(name, self.expression())

        return self.comp_binop()

    def _binary_op(self, operand, test):
        left = operand()
        while test(self.current):
            op = self.advance()
            self.skip_newlines()
            left = BinaryOpNode(left, op, operand())
        return left

    def comp_binop(self):
        return self._binary_op(self.comp_expr, lambda token: token.is_keyword("and", "or"))

    def comp_expr(self):
        if self.current.is_keyword("not"):
            op = self.advance()
            self.skip_newlines()
            return UnaryOpNode(op, self.comp_expr())
        return self.comp_arith()

    def comp_arith(self):
        return self._binary_op(self.arithmetic, lambda token: token.matches(*COMPARISONS))

    def arithmetic(self):
        return self._binary_op(self.term, lambda token: token.matches(TokenKind.PLUS, TokenKind.MINUS))

    def term(self):
        return self._binary_op(self.call, lambda token: token.matches(TokenKind.MULT, TokenKind.DIV))

    def arguments(self, closing, message):
        """Parses `(<expression> ("," <expression>)*)? closing`, right after the opening bracket."""
        self.skip_newlines()
        if self.current.matches(closing):
            self.advance()
            return ()

        args = [self.expression()]
        self.skip_newlines()
        while self.current.matches(TokenKind.COMMA):
            self.advance()
            self.skip_newlines()
            args.append(self.expression())
            self.skip_newlines()

        self.expect(closing, message)
        return tuple(args)

    def parameters(self):
        """Parses `(IDENT ("," IDENT)*)? ")"`, right after the opening parenthesis."""
        self.skip_newlines()
        if not self.current.matches(TokenKind.IDENTIFIER):
            self.expect(TokenKind.RPAREN, "Expected identifier or ')'")
            return ()

        params = [self.advance()]
        self.skip_newlines()
        while self.current.matches(TokenKind.COMMA):
            self.advance()
            self.skip_newlines()
            if not self.current.matches(TokenKind.IDENTIFIER):
                self.fail("Expected identifier")
            params.append(self.advance())
            self.skip_newlines()

        self.expect(TokenKind.RPAREN, "Expected ',' or ')'")
        return tuple(params)

    def call(self):
        atom = self.factor()

        if self.current.matches(TokenKind.LPAREN):
            paren = self.advance()
            return CallNode(atom, self.arguments(TokenKind.RPAREN, "Expected ',' or ')'"), paren.span)

        if self.current.matches(TokenKind.POINT):
            start = self.current
            nodes = [atom]
            while self.current.matches(TokenKind.POINT):
                self.advance()
                self.skip_newlines()
                if self.current.matches(TokenKind.LBRA):
                    nodes.append(self.block())
                else:
                    nodes.append(self.call())
            return PointAccessNode(tuple(nodes), start.span)

        return atom

    def factor(self):
        self.skip_newlines()
        token = self.current

        if token.matches(TokenKind.INT, TokenKind.FLOAT):
            self.advance()
            return NumberNode(token)

        if token.matches(TokenKind.STRING):
            self.advance()
            return StringNode(token)

        if token.matches(TokenKind.IDENTIFIER):
            self.advance()
            if self.current.matches(TokenKind.EQUALS):
                self.advance()
                return VarModifyNode(token, self.expression())
            return VarAccessNode(token)

        if token.matches(TokenKind.LSQUARE):
            self.advance()
            return ListNode(self.arguments(TokenKind.RSQUARE, "Expected ',' or ']'"), token.span)

        if token.matches(TokenKind.PLUS, TokenKind.MINUS):
            self.advance()
            self.skip_newlines()
            return UnaryOpNode(token, self.call())

        if token.matches(TokenKind.LPAREN):
            self.advance()
            self.skip_newlines()
            expr = self.expression()
            self.skip_newlines()
            self.expect(TokenKind.RPAREN, "Expected ')'")
            return expr

        if token.is_keyword("if"):
            return self.if_expression()
        if token.is_keyword("for"):
            return self.for_expression()
        if token.is_keyword("while"):
            return self.while_expression()
        if token.is_keyword("function"):
            return self.function_expression()
        if token.is_keyword("object"):
            return self.object_expression()
        if token.is_keyword("new"):
            return self.new_expression()

        self.fail(f"Unexpected <{token}>")

    # ---------------------------------------------------------------------------------------------------------------
    # keyword-led constructs

    def if_expression(self):
        start = self.current
        cases = []
        else_case = self._if_case("if", cases)
        return IfNode(tuple(cases), else_case, start.span)

    def _if_case(self, keyword, cases):
        """Parses one if/elseif clause into cases, then the clauses chained after it. Returns the else clause."""
        token = self.expect_keyword(keyword)
        self.skip_newlines()

        condition = self.expression()
        body, returns_null = self.clause_body()
        cases.append(CaseNode(condition, body, returns_null, token.span))

        if self.newlines_then(lambda tok: tok.is_keyword("elseif")):
            return self._if_case("elseif", cases)

        if self.newlines_then(lambda tok: tok.is_keyword("else")):
            token = self.advance()
            body, returns_null = self.clause_body()
            return CaseNode(None, body, returns_null, token.span)

        return None

    def for_expression(self):
        logger.debug("parsing for at %s", self.current.span)
        self.expect_keyword("for")
        self.skip_newlines()

        if not self.current.matches(TokenKind.IDENTIFIER):
            self.fail("Expected identifier")
        var_name = self.advance()
        self.skip_newlines()

        self.expect(TokenKind.EQUALS, "Expected '='")
        self.skip_newlines()

        start = self.expression()
        self.skip_newlines()

        self.expect_keyword("to")
        self.skip_newlines()

        end = self.expression()
        self.skip_newlines()

        step = None
        if self.current.is_keyword("by"):
            self.advance()
            step = self.expression()
            self.skip_newlines()

        body, returns_null = self.clause_body()
        return ForNode(var_name, start, end, step, body, returns_null)

    def while_expression(self):
        logger.debug("parsing while at %s", self.current.span)
        token = self.expect_keyword("while")
        self.skip_newlines()

        condition = self.expression()
        self.skip_newlines()

        body, returns_null = self.clause_body()
        return WhileNode(condition, body, returns_null, token.span)

    def function_expression(self):
        logger.debug("parsing function at %s", self.current.span)
        token = self.expect_keyword("function")
        self.skip_newlines()

        name = None
        if self.current.matches(TokenKind.IDENTIFIER):
            name = self.advance()
            self.skip_newlines()
            self.expect(TokenKind.LPAREN, "Expected '('")
        else:
            self.expect(TokenKind.LPAREN, "Expected '(' or identifier")

        params = self.parameters()
        self.skip_newlines()

        if self.current.matches(TokenKind.COLON):
            self.advance()
            self.skip_newlines()
            return FunctionDefNode(name, params, self.expression(), True, token.span)

        if not self.current.matches(TokenKind.LBRA):
            self.fail("Expected ':' or '{'")
        return FunctionDefNode(name, params, self.block(), False, token.span)

    def object_expression(self):
        logger.debug("parsing object at %s", self.current.span)
        self.expect_keyword("object")
        self.skip_newlines()

        if not self.current.matches(TokenKind.IDENTIFIER):
            self.fail("Expected identifier for the object")
        name = self.advance()
        self.skip_newlines()

        self.expect(TokenKind.LPAREN, "Expected '('")
        params = self.parameters()
        self.skip_newlines()

        return ObjectDefNode(name, params, self.block())

    def new_expression(self):
        token = self.expect_keyword("new")
        self.skip_newlines()

        if not self.current.matches(TokenKind.IDENTIFIER):
            self.fail("Expected identifier")
        name = self.advance()
        self.skip_newlines()

        self.expect(TokenKind.LPAREN, "Expected '('")
        args = self.arguments(TokenKind.RPAREN, "Expected ',' or ')'")
        return InstantiateNode(VarAccessNode(name), args, token.span)


def parse(tokens):
    """Parses tokens. Returns (root, error): exactly one of them is None."""
    return Parser(tokens).parse()
