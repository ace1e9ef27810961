"""One interactive rearranging session: current equation, history, selection.

Wires the pure engine functions to a :class:`HistoryLog` the same way the
interactive front ends do, so the CLI and the HTTP backend share one
controller.
"""

import logging
from typing import Iterable, Optional

from rearranger import config, engine
from rearranger.history import HistoryLog, HistoryStep
from rearranger.model import (
    Equation,
    Operation,
    Selection,
    TermGroup,
    equation_to_dict,
    operation_to_dict,
)
from rearranger.symbolic import to_latex

logger = logging.getLogger(__name__)

INITIAL_DESCRIPTION = "Initial equation"


class EquationSession:
    def __init__(self, text: Optional[str] = None, settings: Optional[dict] = None):
        self.settings = dict(config.DEFAULT_SETTINGS)
        if settings:
            self.settings.update(settings)
        self.strict = bool(self.settings["strict_terms"])
        self.history = HistoryLog(
            capacity=int(self.settings["history_size"]),
            clamp_cursor=bool(self.settings["clamp_history_cursor"]),
        )
        self.selection = Selection()
        self.equation: Optional[Equation] = None
        self.load(text if text is not None else self.settings["default_equation"])

    @property
    def text(self) -> str:
        return engine.serialize(self.equation)

    def load(self, text: str) -> Equation:
        """Start over from *text*; the history restarts with one step."""
        equation = engine.parse_equation(text, self.strict)
        self.equation = equation
        self.selection = Selection()
        self.history.clear()
        self.history.add_step(equation, None, INITIAL_DESCRIPTION)
        logger.info("Loaded equation %s", self.text)
        return equation

    def apply(self, operation: Operation) -> Equation:
        equation = engine.apply_operation(self.equation, operation, self.strict)
        self.equation = equation
        self.history.add_step(equation, operation, engine.describe_operation(operation))
        return equation

    def move(self, term_ids: Iterable[str], from_side: str, to_side: str) -> Equation:
        """Move terms to the other side; a move of nothing is not recorded."""
        term_ids = list(term_ids)
        equation = engine.move_terms(self.equation, term_ids, from_side, to_side)
        if equation is self.equation:
            return equation
        description = engine.describe_move(self.equation, term_ids, from_side, to_side)
        self.equation = equation
        self.selection.discard(term_ids)
        self.history.add_step(equation, None, description)
        return equation

    def undo(self) -> Optional[HistoryStep]:
        return self._restore(self.history.undo())

    def redo(self) -> Optional[HistoryStep]:
        return self._restore(self.history.redo())

    def _restore(self, step: Optional[HistoryStep]) -> Optional[HistoryStep]:
        if step is not None:
            self.equation = step.equation
            self.selection.clear()
        return step

    def select(self, item_id: str, multi: bool = False) -> bool:
        """Toggle selection of a term or group on the current equation."""
        side, _ = engine.find_item(self.equation, item_id)
        if side is None:
            raise KeyError(item_id)
        return self.selection.toggle(item_id, multi)

    def toggle_expanded(self, group_id: str) -> bool:
        """Collapse or expand a group; returns True when it is now expanded."""
        _, item = engine.find_item(self.equation, group_id)
        if not isinstance(item, TermGroup):
            raise KeyError(group_id)
        return self.selection.toggle_expanded(group_id)

    def clear_selection(self) -> None:
        self.selection.clear()

    def snapshot(self) -> dict:
        """Plain-dict view of the session for display or JSON responses."""
        return {
            "text": self.text,
            "latex": to_latex(self.equation),
            "equation": equation_to_dict(self.equation, self.selection),
            "history": [
                {
                    "description": step.description,
                    "text": engine.serialize(step.equation),
                    "operation": operation_to_dict(step.operation),
                }
                for step in self.history.get_history()
            ],
            "current_index": self.history.current_index,
            "can_undo": self.history.can_undo(),
            "can_redo": self.history.can_redo(),
        }
