"""
Integration tests for rvexpr.

Compiles expressions end to end and checks the generated programs on the
interpreter against a direct evaluation of the same expression.
"""

import random
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api import Context
from compiler import compile_source, Lexer
from compiler.target import to_word


def c_div(a, b):
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


OPS = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": c_div,
    "==": lambda a, b: int(a == b),
    "!=": lambda a, b: int(a != b),
    "<": lambda a, b: int(a < b),
    "<=": lambda a, b: int(a <= b),
    ">": lambda a, b: int(a > b),
    ">=": lambda a, b: int(a >= b),
}


def random_expression(rng, depth):
    """Return (text, value) for a fully parenthesized random expression."""
    if depth == 0 or rng.random() < 0.25:
        n = rng.randint(0, 50)
        return str(n), n
    if rng.random() < 0.15:
        text, value = random_expression(rng, depth - 1)
        sign = rng.choice(["-", "+"])
        return f"{sign}({text})", to_word(-value) if sign == "-" else value

    op = rng.choice(list(OPS))
    left, lv = random_expression(rng, depth - 1)
    right, rv = random_expression(rng, depth - 1)
    if op == "/" and rv == 0:
        op = "+"
    return f"({left} {op} {right})", to_word(OPS[op](lv, rv))


@pytest.fixture
def ctx():
    return Context()


class TestExamples:
    """Expressions with known results."""

    @pytest.mark.parametrize("source,expected", [
        ("0", 0),
        ("42", 42),
        ("5+20-4", 21),
        (" 12 + 34 - 5 ", 41),
        ("1+2*3", 7),
        ("(1+2)*3", 9),
        ("8-4-2", 2),
        ("100/10/5", 2),
        ("5+6*7", 47),
        ("5*(9-6)", 15),
        ("(3+5)/2", 4),
        ("-10+20", 10),
        ("- -10", 10),
        ("- - +10", 10),
        ("-7/2", -3),
        ("7/-2", -3),
        ("0==1", 0),
        ("42==42", 1),
        ("0!=1", 1),
        ("42!=42", 0),
        ("0<1", 1),
        ("1<1", 0),
        ("2<1", 0),
        ("0<=1", 1),
        ("1<=1", 1),
        ("2<=1", 0),
        ("1>0", 1),
        ("1>1", 0),
        ("1>2", 0),
        ("1>=0", 1),
        ("1>=1", 1),
        ("1>=2", 0),
        ("1<2==1", 1),
        ("3>2>1", 0),
        ("1+1<3-0==1", 1),
    ])
    def test_evaluate(self, ctx, source, expected):
        assert ctx.evaluate(source) == expected

    def test_literal_wraps(self, ctx):
        assert ctx.evaluate("9223372036854775807+1") == -9223372036854775808
        assert ctx.evaluate("18446744073709551615") == -1


class TestProperties:
    """Properties that hold for every well-formed expression."""

    @pytest.mark.parametrize("seed", range(40))
    def test_matches_reference(self, ctx, seed):
        rng = random.Random(seed)
        source, expected = random_expression(rng, 5)
        assert ctx.evaluate(source) == expected, source

    @pytest.mark.parametrize("op", ["==", "!=", "<", "<=", ">", ">="])
    def test_comparisons_are_boolean(self, ctx, op):
        for a in (-3, 0, 3):
            for b in (-3, 0, 3):
                assert ctx.evaluate(f"({a}) {op} ({b})") in (0, 1)

    @pytest.mark.parametrize("seed", range(10))
    def test_tokens_reproduce_source(self, seed):
        source, _ = random_expression(random.Random(seed), 4)
        tokens = Lexer(source).tokenize()
        assert "".join(t.lexeme for t in tokens) == source.replace(" ", "")

    @pytest.mark.parametrize("seed", range(10))
    def test_stack_balanced(self, seed):
        source, _ = random_expression(random.Random(seed), 5)
        assembly = compile_source(source)
        assert assembly.count("addi", "sp", "sp", "-8") == assembly.count("addi", "sp", "sp", "8")
        assert assembly.count("sd") == assembly.count("ld")

    def test_stack_restored_after_run(self):
        from api.interpreter import Interpreter
        interp = Interpreter()
        interp.run(compile_source("((1+2)*(3+4))-((5-6)/(7+8))").to_text())
        assert interp.registers["sp"] == interp.stack_words * 8
        assert interp.max_stack_depth >= 2

    def test_deep_nesting(self, ctx):
        source = "(" * 90 + "1" + ")" * 90
        assert ctx.evaluate(source) == 1

    def test_long_chain(self, ctx):
        assert ctx.evaluate("+".join(["1"] * 1000)) == 1000

    def test_long_mixed_chain(self, ctx):
        source = "2000" + "-1" * 999
        assert ctx.evaluate(source) == 1001

    def test_long_comparison_chain(self, ctx):
        # Each comparison yields 1, which stays above 0 and below 2
        assert ctx.evaluate("1" + ">0" * 1000) == 1
        assert ctx.evaluate("0" + "<2" * 1000) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
