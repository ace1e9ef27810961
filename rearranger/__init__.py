"""Rearranger: move terms and apply operations to linear equations."""

from rearranger.engine import (
    apply_operation,
    create_term_group,
    describe_move,
    describe_operation,
    move_terms,
    parse_equation,
    parse_side,
    parse_term,
    serialize,
)
from rearranger.errors import DivisionByZeroError, EquationError, MalformedEquationError
from rearranger.history import HistoryLog, HistoryStep
from rearranger.model import Equation, EquationSide, Operation, Selection, Term, TermGroup
from rearranger.session import EquationSession

__all__ = [
    "DivisionByZeroError",
    "Equation",
    "EquationError",
    "EquationSession",
    "EquationSide",
    "HistoryLog",
    "HistoryStep",
    "MalformedEquationError",
    "Operation",
    "Selection",
    "Term",
    "TermGroup",
    "apply_operation",
    "create_term_group",
    "describe_move",
    "describe_operation",
    "move_terms",
    "parse_equation",
    "parse_side",
    "parse_term",
    "serialize",
]
