"""
rvexpr Diagnostics

Renders compile errors as the offending source line followed by a caret
line, and terminates the run.
"""

import sys
from typing import NoReturn, Optional, TextIO

from .errors import RVExprError


class Diagnostics:
    """Error reporter bound to one source text."""

    def __init__(self, source: str):
        """
        Initialize the reporter.

        Args:
            source: The original expression text
        """
        self.source = source

    def render(self, offset: int, message: str) -> str:
        """
        Format a caret-annotated message.

        The first line echoes the source, the second puts a caret under
        `offset` followed by the message.
        """
        return f"{self.source}\n{' ' * offset}^ {message}\n"

    def format_error(self, error: RVExprError) -> str:
        """Render a structured error."""
        if error.offset is None:
            return f"{error.message}\n"
        return self.render(error.offset, error.message)

    def report(self, offset: int, message: str,
               stream: Optional[TextIO] = None) -> NoReturn:
        """Write the diagnostic and exit with status 1."""
        if stream is None:
            stream = sys.stderr
        stream.write(self.render(offset, message))
        stream.flush()
        raise SystemExit(1)

    def fail(self, error: RVExprError, stream: Optional[TextIO] = None) -> NoReturn:
        """Report a structured error and exit with status 1."""
        if stream is None:
            stream = sys.stderr
        stream.write(self.format_error(error))
        stream.flush()
        raise SystemExit(1)
