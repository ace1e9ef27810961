"""Bounded undo/redo history of equation states.

The log keeps at most ``capacity`` steps and a cursor pointing at the
current one.  Recording a new step while the cursor is behind the tail
discards the redo branch instead of forking it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from rearranger.model import Equation, Operation

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5


@dataclass(frozen=True)
class HistoryStep:
    equation: Equation
    operation: Optional[Operation]
    description: str


class HistoryLog:
    """Fixed-capacity history with a movable cursor.

    Parameters
    ----------
    capacity : int
        Maximum number of retained steps; the oldest is evicted first.
    clamp_cursor : bool
        After an eviction, ``True`` pins the cursor to the last step.
        ``False`` leaves the cursor index untouched by the eviction.
        Since the redo branch is always dropped before appending, both
        land on the newest step.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, clamp_cursor: bool = True):
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}.")
        self.capacity = capacity
        self.clamp_cursor = clamp_cursor
        self._steps: list[HistoryStep] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def current_index(self) -> int:
        """Cursor position; ``-1`` means the log is empty."""
        return self._index

    def add_step(self, equation: Equation, operation: Optional[Operation],
                 description: str) -> HistoryStep:
        # Equations are immutable, so storing the reference is a snapshot.
        if self._index < len(self._steps) - 1:
            dropped = len(self._steps) - self._index - 1
            del self._steps[self._index + 1:]
            logger.debug("Discarded %d redo step(s)", dropped)

        step = HistoryStep(equation, operation, description)
        self._steps.append(step)

        if len(self._steps) > self.capacity:
            evicted = self._steps.pop(0)
            logger.info("History full, evicted %r", evicted.description)
            if self.clamp_cursor:
                self._index = len(self._steps) - 1
        else:
            self._index = len(self._steps) - 1
        return step

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._steps) - 1

    def undo(self) -> Optional[HistoryStep]:
        """Step back; returns None when already at the first step."""
        if not self.can_undo():
            return None
        self._index -= 1
        return self._steps[self._index]

    def redo(self) -> Optional[HistoryStep]:
        """Step forward; returns None when already at the last step."""
        if not self.can_redo():
            return None
        self._index += 1
        return self._steps[self._index]

    def current_step(self) -> Optional[HistoryStep]:
        if 0 <= self._index < len(self._steps):
            return self._steps[self._index]
        return None

    def get_history(self) -> list[HistoryStep]:
        """Steps up to and including the cursor."""
        return self._steps[:self._index + 1]

    def clear(self) -> None:
        self._steps = []
        self._index = -1
