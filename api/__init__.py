"""
rvexpr Python API

Provides the Python interface for compiling expressions and running the
generated assembly on the register-machine interpreter.
"""

from .context import Context, Script, create_context, run
from .interpreter import Interpreter, execute

__all__ = [
    'Context',
    'Script',
    'create_context',
    'run',
    'Interpreter',
    'execute',
]
