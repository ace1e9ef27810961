"""Data model for equations that can be rearranged term by term.

Every structure here is a frozen dataclass made of tuples, floats and
strings, so a value handed out by the engine can be kept, shared or
discarded by the caller without any aliasing concerns.  Transforms build
new trees with :func:`dataclasses.replace` instead of mutating.

Presentation state (which items are selected, which groups are collapsed) lives in :class:`Selection`,
a side table keyed by item id, not inside the terms themselves.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Union

SIDES = ("left", "right")
OPERATION_TYPES = ("add", "subtract", "multiply", "divide")
OPERATION_SIDES = ("both", "left", "right")


def new_id() -> str:
    """Return a fresh opaque identifier for a term, group or equation."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Term:
    """A signed constant (``variable is None``) or coefficient-variable pair."""

    coefficient: float
    variable: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def is_constant(self) -> bool:
        return self.variable is None


@dataclass(frozen=True)
class TermGroup:
    """One parenthesised level of terms, moved and scaled as a unit."""

    terms: tuple = ()
    id: str = field(default_factory=new_id)


Item = Union[Term, TermGroup]


@dataclass(frozen=True)
class EquationSide:
    items: tuple = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Equation:
    left: EquationSide
    right: EquationSide
    id: str = field(default_factory=new_id)

    def side(self, name: str) -> EquationSide:
        """Return the ``"left"`` or ``"right"`` side."""
        _check_side(name)
        return self.left if name == "left" else self.right


@dataclass(frozen=True)
class Operation:
    """A requested add/subtract/multiply/divide on one or both sides.

    ``value`` is raw term text such as ``"5"``, ``"x"`` or ``"2y"``; it is
    parsed when the operation is applied.
    """

    type: str
    value: str
    side: str = "both"

    def __post_init__(self):
        if self.type not in OPERATION_TYPES:
            raise ValueError(
                f"Unknown operation '{self.type}'. "
                f"Expected one of: {', '.join(OPERATION_TYPES)}."
            )
        if self.side not in OPERATION_SIDES:
            raise ValueError(
                f"Unknown side '{self.side}'. "
                f"Expected one of: {', '.join(OPERATION_SIDES)}."
            )

    @property
    def sides(self) -> tuple:
        return SIDES if self.side == "both" else (self.side,)


def _check_side(name: str) -> None:
    if name not in SIDES:
        raise ValueError(f"Side must be 'left' or 'right', got '{name}'.")


class Selection:
    """Which terms or groups are currently selected, keyed by item id.

    Also records which groups are collapsed; a group is expanded unless
    its id has been toggled.
    """

    def __init__(self):
        self._ids: set[str] = set()
        self._collapsed: set[str] = set()

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> frozenset:
        return frozenset(self._ids)

    def toggle(self, item_id: str, multi: bool = False) -> bool:
        """Click semantics: a plain click selects only *item_id*; with
        *multi* the item is toggled and the rest of the selection is kept.

        Returns the new selection state of *item_id*.
        """
        if not multi:
            self._ids = {item_id}
            return True
        if item_id in self._ids:
            self._ids.discard(item_id)
            return False
        self._ids.add(item_id)
        return True

    def is_expanded(self, group_id: str) -> bool:
        return group_id not in self._collapsed

    def toggle_expanded(self, group_id: str) -> bool:
        """Flip a group between expanded and collapsed; returns the new state."""
        if group_id in self._collapsed:
            self._collapsed.discard(group_id)
            return True
        self._collapsed.add(group_id)
        return False

    def discard(self, ids) -> None:
        self._ids.difference_update(ids)

    def clear(self) -> None:
        self._ids.clear()


# ── Plain-dict views (used by the HTTP layer and snapshots) ─────────────

def term_to_dict(term: Term, selection: Optional[Selection] = None) -> dict:
    return {
        "id": term.id,
        "coefficient": term.coefficient,
        "variable": term.variable,
        "is_constant": term.is_constant,
        "is_selected": bool(selection) and term.id in selection,
    }


def item_to_dict(item: Item, selection: Optional[Selection] = None) -> dict:
    if isinstance(item, TermGroup):
        return {
            "id": item.id,
            "terms": [term_to_dict(t, selection) for t in item.terms],
            "is_selected": bool(selection) and item.id in selection,
            "is_expanded": selection is None or selection.is_expanded(item.id),
        }
    return term_to_dict(item, selection)


def equation_to_dict(equation: Equation, selection: Optional[Selection] = None) -> dict:
    return {
        "id": equation.id,
        "left": [item_to_dict(i, selection) for i in equation.left],
        "right": [item_to_dict(i, selection) for i in equation.right],
    }


def operation_to_dict(operation: Optional[Operation]) -> Optional[dict]:
    if operation is None:
        return None
    return {"type": operation.type, "value": operation.value, "side": operation.side}
