"""
Unit tests for the rvexpr Python API.

Tests for Context, Script and the module-level helpers.
"""

import os
import tempfile
import unittest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api import Context, Script, create_context, run
from compiler import compile_source, compile_file
from compiler.errors import CompileError, ExpectedTokenError, NestingTooDeepError, MachineError


class TestContextBasic(unittest.TestCase):
    """Test basic Context functionality."""

    def test_create_context_default(self):
        """Test creating context with default options."""
        ctx = Context()
        self.assertEqual(ctx.max_depth, 100)
        self.assertEqual(ctx.stack_words, 1024)
        self.assertFalse(ctx.debug)

    def test_create_context_kwargs(self):
        ctx = create_context(max_depth=5, debug=True)
        self.assertEqual(ctx.max_depth, 5)
        self.assertTrue(ctx.debug)

    def test_compile_simple(self):
        """Test compiling simple expression."""
        ctx = Context()
        script = ctx.compile("1 + 2")
        self.assertIsInstance(script, Script)
        self.assertEqual(script.source, "1 + 2")
        self.assertTrue(script.text.startswith("  .globl main\nmain:\n"))

    def test_execute(self):
        ctx = Context()
        self.assertEqual(ctx.execute(ctx.compile("1+2*3")), 7)

    def test_evaluate(self):
        self.assertEqual(Context().evaluate("(1+2)*3"), 9)

    def test_run_helper(self):
        self.assertEqual(run("8-4-2"), 2)

    def test_max_depth_applies(self):
        ctx = Context(max_depth=3)
        with self.assertRaises(NestingTooDeepError):
            ctx.compile("((((1))))")

    def test_max_depth_out_of_range(self):
        with self.assertRaises(ValueError):
            Context(max_depth=2000)
        with self.assertRaises(ValueError):
            create_context(max_depth=0)

    def test_small_stack_faults(self):
        ctx = Context(stack_words=1)
        self.assertEqual(ctx.evaluate("1+2"), 3)
        with self.assertRaises(MachineError):
            ctx.evaluate("(1+2)+3")


class TestScript(unittest.TestCase):
    """Test Script helpers."""

    def test_disassemble(self):
        script = Context().compile("-4")
        listing = script.disassemble()
        self.assertIn("0000  li a0, 4", listing)
        self.assertIn("0001  neg a0, a0", listing)
        self.assertIn("0002  ret", listing)

    def test_dump_ast(self):
        script = Context().compile("2>1")
        self.assertEqual(script.dump_ast(), "Binary(LT)\n  Number(1)\n  Number(2)")

    def test_save(self):
        script = Context().compile("5")
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out.s")
            script.save(path)
            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), "  .globl main\nmain:\n  li a0, 5\n  ret\n")


class TestCompileFile(unittest.TestCase):
    """Test compiling from files."""

    def test_compile_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "expr.txt")
            with open(path, "w", encoding="utf-8") as f:
                f.write("6/3\n")
            ctx = Context()
            script = ctx.compile_file(path)
            self.assertEqual(script.filename, path)
            self.assertEqual(script.source, "6/3")
            self.assertEqual(ctx.execute(script), 2)
            self.assertEqual(compile_file(path).to_text(), script.text)


class TestErrors(unittest.TestCase):
    """Test error reporting through the API."""

    def test_compile_error_propagates(self):
        with self.assertRaises(CompileError):
            Context().compile("1 +")

    def test_format_error(self):
        ctx = Context()
        with self.assertRaises(ExpectedTokenError) as cm:
            ctx.compile("(1")
        self.assertEqual(ctx.format_error("(1", cm.exception), "(1\n  ^ expected ')'\n")

    def test_compile_source_output(self):
        expected = (
            "  .globl main\n"
            "main:\n"
            "  li a0, 2\n"
            "  addi sp, sp, -8\n"
            "  sd a0, 0(sp)\n"
            "  li a0, 1\n"
            "  ld a1, 0(sp)\n"
            "  addi sp, sp, 8\n"
            "  add a0, a0, a1\n"
            "  ret\n"
        )
        self.assertEqual(compile_source("1+2").to_text(), expected)


if __name__ == '__main__':
    unittest.main()
