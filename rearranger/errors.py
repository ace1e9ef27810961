"""Exceptions raised by the Rearranger engine.

Both concrete errors derive from ``ValueError`` so callers that already
treat bad user input as ``ValueError`` (the CLI, the HTTP layer) keep
working without knowing the finer taxonomy.
"""


class EquationError(ValueError):
    """Base class for every error the engine raises on purpose."""


class MalformedEquationError(EquationError):
    """The equation text cannot be turned into two sides."""


class DivisionByZeroError(EquationError, ZeroDivisionError):
    """A divide operation was requested with a zero operand."""
