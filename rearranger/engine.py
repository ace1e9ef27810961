"""Term-level equation engine.

Parses equations such as ``2x + 3 = 7`` into :class:`Equation` trees,
applies operations (``- 3 both sides``) and term moves across the equals
sign, and serializes trees back to text.

Every public function is pure: the input tree is never modified and a new
tree is returned.  The engine performs exactly the arithmetic it is asked
for; it does not simplify, solve, or check that two states are equivalent.
"""

import logging
import math
import re
from dataclasses import replace
from typing import Iterable, Optional

import numpy as np

from rearranger.errors import DivisionByZeroError, MalformedEquationError
from rearranger.model import (
    Equation,
    EquationSide,
    Item,
    Operation,
    Term,
    TermGroup,
    _check_side,
)

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^(?:\d+\.?\d*|\.\d+)$")
_COEFF_VAR_RE = re.compile(r"^(\d+\.?\d*|\.\d+)?([a-zA-Z]+)$")

_OP_SYMBOLS = {
    "add": "+",
    "subtract": "-",
    "multiply": "×",
    "divide": "÷",
}


# ── Parsing ─────────────────────────────────────────────────────────────

def parse_equation(text: str, strict: bool = False) -> Equation:
    """Parse ``<side> = <side>`` into an :class:`Equation`.

    Raises :class:`MalformedEquationError` unless *text* contains exactly
    one ``=``.
    """
    sides = text.split("=")
    if len(sides) != 2:
        raise MalformedEquationError(
            "Equation must contain exactly one '=' sign. Example: 2x + 3 = 7"
        )
    equation = Equation(
        left=parse_side(sides[0].strip(), strict),
        right=parse_side(sides[1].strip(), strict),
    )
    logger.debug("Parsed %r into %d + %d items", text,
                 len(equation.left), len(equation.right))
    return equation


def _split_side(text: str) -> list[str]:
    """Split a side before every top-level ``+`` or ``-``.

    Signs inside a parenthesised group stay with the group.
    """
    chunks = []
    current = []
    depth = 0
    for ch in text:
        if ch == "(":
            if depth:
                raise MalformedEquationError(
                    f"Nested parentheses are not supported: '{text}'."
                )
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch in "+-" and not depth:
            chunks.append("".join(current))
            current = []
        current.append(ch)
    chunks.append("".join(current))
    return [c.strip() for c in chunks if c.strip()]


def parse_side(text: str, strict: bool = False) -> EquationSide:
    """Parse one side of an equation.

    An empty side is never structurally empty: it becomes a single zero
    constant.
    """
    items: list[Item] = []
    for chunk in _split_side(text):
        group = _parse_group(chunk, strict)
        items.append(group if group is not None else parse_term(chunk, strict))
    if not items:
        items.append(Term(0.0))
    return EquationSide(tuple(items))


def _parse_group(chunk: str, strict: bool) -> Optional[TermGroup]:
    """Parse ``(…)``, ``+(…)`` or ``-(…)``; return None for anything else."""
    sign = 1
    body = chunk
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:].strip()
    if not (body.startswith("(") and body.endswith(")")):
        return None
    # _split_side already rejected nesting, so the inner side holds only terms.
    inner = parse_side(body[1:-1].strip(), strict)
    if sign < 0:
        return create_term_group(replace(t, coefficient=-t.coefficient) for t in inner)
    return create_term_group(inner)


def _to_float(digits: str, text: str) -> float:
    """Numerals too long for a float would overflow to ``inf``."""
    value = float(digits)
    if not math.isfinite(value):
        raise MalformedEquationError(f"Number too large in term: '{text}'.")
    return value


def parse_term(text: str, strict: bool = False) -> Term:
    """Parse a single signed term such as ``-3``, ``x`` or ``+2.5y``.

    Unrecognised text degrades to a variable named by the raw text with a
    coefficient equal to the sign.  With *strict* it raises
    :class:`MalformedEquationError` instead.
    """
    sign = 1
    body = text.strip()
    if body.startswith("+"):
        body = body[1:]
    elif body.startswith("-"):
        sign = -1
        body = body[1:]
    body = body.strip()

    # A bare sign (``x - = 1``) counts as a zero constant.
    if not body or _NUMBER_RE.match(body):
        return Term(sign * _to_float(body or "0", text))

    match = _COEFF_VAR_RE.match(body)
    if match:
        coeff_str, variable = match.groups()
        coefficient = sign * _to_float(coeff_str, text) if coeff_str else float(sign)
        return Term(coefficient, variable)

    if strict:
        raise MalformedEquationError(f"Could not parse term: '{text}'.")
    logger.warning("Unrecognised term %r, treating it as a variable", text)
    return Term(float(sign), body)


def create_term_group(terms: Iterable[Term]) -> TermGroup:
    """Wrap *terms* in a new group with its own id."""
    return TermGroup(tuple(terms))


# ── Serialization ───────────────────────────────────────────────────────

def _fmt_coefficient(value: float) -> str:
    """Format an absolute coefficient positionally.

    ``2.0`` → ``2``, ``1e-05`` → ``0.00001``.  NumPy picks the shortest
    digits that read back as the same float, so the text re-parses exactly.
    """
    return np.format_float_positional(abs(value), trim="-")


def _term_body(term: Term) -> str:
    if term.is_constant:
        return _fmt_coefficient(term.coefficient)
    if abs(term.coefficient) == 1:
        return term.variable
    return f"{_fmt_coefficient(term.coefficient)}{term.variable}"


def _side_to_str(items) -> str:
    if not items:
        return "0"
    parts = []
    for index, item in enumerate(items):
        if isinstance(item, TermGroup):
            prefix = "(" if index == 0 else " + ("
            parts.append(f"{prefix}{_side_to_str(item.terms)})")
            continue
        if index == 0:
            sign = "-" if item.coefficient < 0 else ""
        else:
            sign = " - " if item.coefficient < 0 else " + "
        parts.append(sign + _term_body(item))
    return "".join(parts)


def serialize(equation: Equation) -> str:
    """Render an equation as text, e.g. ``2x + 3 - 3 = 7 - 3``."""
    return f"{_side_to_str(equation.left.items)} = {_side_to_str(equation.right.items)}"


# ── Transformations ─────────────────────────────────────────────────────

def _scale_item(item: Item, factor: float) -> Item:
    if isinstance(item, TermGroup):
        return replace(item, terms=tuple(
            replace(t, coefficient=t.coefficient * factor) for t in item.terms
        ))
    return replace(item, coefficient=item.coefficient * factor)


def _with_side(equation: Equation, name: str, side: EquationSide) -> Equation:
    return replace(equation, **{name: side})


def apply_operation(equation: Equation, operation: Operation,
                    strict: bool = False) -> Equation:
    """Apply *operation* to the side(s) it names and return a new equation.

    ``add`` and ``subtract`` append the operand as a new term;
    ``multiply`` and ``divide`` scale every coefficient on the side,
    including the terms inside groups.  Raises
    :class:`DivisionByZeroError` for a zero divisor.
    """
    result = equation
    for name in operation.sides:
        operand = parse_term(operation.value, strict)
        items = result.side(name).items

        if operation.type == "add":
            items = items + (operand,)
        elif operation.type == "subtract":
            items = items + (replace(operand, coefficient=-operand.coefficient),)
        elif operation.type == "multiply":
            items = tuple(_scale_item(i, operand.coefficient) for i in items)
        else:
            if operand.coefficient == 0:
                raise DivisionByZeroError("Cannot divide by zero.")
            factor = 1 / operand.coefficient
            items = tuple(_scale_item(i, factor) for i in items)

        result = _with_side(result, name, EquationSide(items))

    logger.debug("Applied %s %r on %s", operation.type, operation.value, operation.side)
    return result


def move_terms(equation: Equation, term_ids: Iterable[str],
               from_side: str, to_side: str) -> Equation:
    """Move terms across the equals sign, flipping their signs.

    Only individual terms match by id; groups are never split.  Ids that
    are not on *from_side* are ignored, so a request naming only unknown
    ids returns an equal equation.
    """
    _check_side(from_side)
    _check_side(to_side)
    wanted = set(term_ids)

    kept, moved = [], []
    for item in equation.side(from_side):
        if isinstance(item, Term) and item.id in wanted:
            moved.append(replace(item, coefficient=-item.coefficient))
        else:
            kept.append(item)

    if not moved:
        return equation

    result = _with_side(equation, from_side, EquationSide(tuple(kept)))
    target = result.side(to_side).items + tuple(moved)
    result = _with_side(result, to_side, EquationSide(target))
    logger.debug("Moved %d term(s) from %s to %s", len(moved), from_side, to_side)
    return result


# ── Lookup helpers ──────────────────────────────────────────────────────

def iter_terms(side: EquationSide):
    """Yield every term on *side*, descending into groups."""
    for item in side:
        if isinstance(item, TermGroup):
            yield from item.terms
        else:
            yield item


def find_item(equation: Equation, item_id: str):
    """Return ``(side_name, item)`` for *item_id*, or ``(None, None)``."""
    for name in ("left", "right"):
        for item in equation.side(name):
            if item.id == item_id:
                return name, item
    return None, None


# ── Descriptions ────────────────────────────────────────────────────────

def describe_operation(operation: Operation) -> str:
    """Human-readable label such as ``"- 3 both sides"`` or ``"× 2 left side"``."""
    where = "both sides" if operation.side == "both" else f"{operation.side} side"
    return f"{_OP_SYMBOLS[operation.type]} {operation.value} {where}"


def describe_move(equation: Equation, term_ids: Iterable[str],
                  from_side: str, to_side: str) -> str:
    """Describe a move in terms of the equation *before* the move."""
    wanted = set(term_ids)
    labels = [
        _term_body(item) for item in equation.side(from_side)
        if isinstance(item, Term) and item.id in wanted
    ]
    return f"Moved {', '.join(labels)} from {from_side} to {to_side}"
