import unittest

from jipl.lang.error import ErrorKind
from jipl.lang import lexical
from jipl.lang.lexical import TokenKind, tokenize


def kinds(source):
    tokens, error = tokenize(source)
    assert error is None, error
    return [token.kind for token in tokens]


class LexicalTestCase(unittest.TestCase):

    def test_legal_sources_end_with_end_of_code(self):
        should_pass = ["", "var x = 1", "x.y.z()", "\"unterminated", "# only a comment", "a;b\nc", "1.2.3",
                       "if a <= b and not c { print(\"x\") } else: 0", "[1, 2] * 3 ^ 4", "\"\\q\\\"\""]
        for case in should_pass:
            tokens, error = tokenize(case)
            self.assertIsNone(error, case)
            self.assertIs(tokens[-1].kind, TokenKind.END_OF_CODE, case)

    def test_illegal_characters(self):
        should_fail = {"1 ! 2": "!", "var x = 1\n!": "!", "a @ b": "@", "x = $": "$", "'a'": "'"}
        for case, char in should_fail.items():
            tokens, error = tokenize(case)
            self.assertIs(error.kind, ErrorKind.ILLEGAL_CHARACTER, case)
            self.assertIn(f"'{char}'", error.message)
            self.assertFalse(any(token.matches(TokenKind.END_OF_CODE) for token in tokens), case)

    def test_lexing_stops_at_first_illegal_character(self):
        tokens, error = tokenize("a ! b")
        self.assertIsNotNone(error)
        self.assertEqual(["a"], [token.literal for token in tokens])

    def test_operators(self):
        should_pass = {
            "= == != < <= > >=": [TokenKind.EQUALS, TokenKind.DOUBLE_EQUALS, TokenKind.NOT_EQUALS, TokenKind.LESS,
                                  TokenKind.LESS_EQUALS, TokenKind.GREATER, TokenKind.GREATER_EQUALS],
            "+-*/^": [TokenKind.PLUS, TokenKind.MINUS, TokenKind.MULT, TokenKind.DIV, TokenKind.POW],
            "()[]{}:,.": [TokenKind.LPAREN, TokenKind.RPAREN, TokenKind.LSQUARE, TokenKind.RSQUARE, TokenKind.LBRA,
                          TokenKind.RBRA, TokenKind.COLON, TokenKind.COMMA, TokenKind.POINT],
        }
        for case, result in should_pass.items():
            self.assertEqual(result + [TokenKind.END_OF_CODE], kinds(case))

    def test_newline_and_semicolon_are_interchangeable(self):
        self.assertEqual(kinds("a\nb"), kinds("a;b"))

    def test_numbers(self):
        tokens, __ = tokenize("12 3.5 7.")
        self.assertEqual([(TokenKind.INT, "12"), (TokenKind.FLOAT, "3.5"), (TokenKind.FLOAT, "7.")],
                         [(token.kind, token.literal) for token in tokens[:-1]])

        tokens, __ = tokenize("1.2.3")
        self.assertEqual([TokenKind.FLOAT, TokenKind.POINT, TokenKind.INT, TokenKind.END_OF_CODE],
                         [token.kind for token in tokens])
        self.assertEqual("1.2", tokens[0].literal)

    def test_strings(self):
        should_pass = {
            "\"abc\"": "abc",
            "\"a\\nb\"": "a\nb",
            "\"a\\tb\"": "a\tb",
            "\"a\\\\b\"": "a\\b",
            "\"say \\\"hi\\\"\"": "say \"hi\"",
            "\"\\q\"": "q",
            "\"open": "open",
        }
        for case, result in should_pass.items():
            tokens, error = tokenize(case)
            self.assertIsNone(error, case)
            self.assertIs(tokens[0].kind, TokenKind.STRING, case)
            self.assertEqual(result, tokens[0].literal, case)

    def test_unterminated_string_closes_at_end_of_line(self):
        tokens, error = tokenize("\"abc\nx")
        self.assertIsNone(error)
        self.assertEqual([TokenKind.STRING, TokenKind.NLINE, TokenKind.IDENTIFIER, TokenKind.END_OF_CODE],
                         [token.kind for token in tokens])
        self.assertEqual("abc", tokens[0].literal)

    def test_comments(self):
        self.assertEqual([TokenKind.IDENTIFIER, TokenKind.NLINE, TokenKind.IDENTIFIER, TokenKind.END_OF_CODE],
                         kinds("a # comment (\nb"))

    def test_keywords_and_identifiers(self):
        tokens, __ = tokenize("var variable if_ elseif new_thing object")
        self.assertEqual([TokenKind.KEYWORD, TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.KEYWORD,
                          TokenKind.IDENTIFIER, TokenKind.KEYWORD],
                         [token.kind for token in tokens[:-1]])
        self.assertTrue(tokens[0].is_keyword("var"))
        self.assertFalse(tokens[1].is_keyword("var"))

    def test_spans(self):
        tokens, __ = tokenize("a\n  bc")
        self.assertEqual(1, tokens[0].span.line)
        self.assertEqual(2, tokens[2].span.line)
        self.assertEqual(4, tokens[2].span.offset)
        self.assertEqual(2, tokens[2].span.length)
        self.assertEqual("line 2", str(tokens[2].span))

    def test_documented_escapes(self):
        self.assertIn('"\\x" is x', lexical.__doc__)
        self.assertIn('\\n, \\t and \\\\ are escapes', lexical.__doc__)
        tokens, __ = tokenize('"\\x\\n"')
        self.assertEqual("x\n", tokens[0].literal)


if __name__ == '__main__':
    unittest.main()
