"""
Rearranger — Entry point.

Interactive text loop for rearranging one equation step by step.
"""

import sys

from rearranger import EquationSession, Operation, config
from rearranger.logging_config import setup_logging
from rearranger.engine import serialize
from rearranger.symbolic import to_latex

_OP_ALIASES = {
    "add": "add",
    "sub": "subtract",
    "subtract": "subtract",
    "mul": "multiply",
    "multiply": "multiply",
    "div": "divide",
    "divide": "divide",
}

HELP = """Commands:
  load <equation>               start over, e.g.  load 2x + 3 = 7
  add|sub|mul|div <value> [side] apply to both (default), left or right
  move <left|right> <n> [n ...] move terms at positions n to the other side
  undo / redo                   step through history
  history                       list recorded steps
  show / latex                  print the equation
  help / quit"""


def _terms_at(session: EquationSession, side: str, positions: list[str]) -> list[str]:
    items = session.equation.side(side).items
    ids = []
    for pos in positions:
        index = int(pos) - 1
        if not 0 <= index < len(items):
            raise ValueError(f"No item {pos} on the {side} side.")
        ids.append(items[index].id)
    return ids


def _print_history(session: EquationSession) -> None:
    for i, step in enumerate(session.history.get_history()):
        marker = "*" if i == session.history.current_index else " "
        print(f"{marker} {i + 1}. {step.description:<28} {serialize(step.equation)}")


def run_command(session: EquationSession, line: str) -> bool:
    """Execute one command line; returns False when the loop should stop."""
    parts = line.split()
    if not parts:
        return True
    cmd, args = parts[0].lower(), parts[1:]

    if cmd in ("quit", "exit", "q"):
        return False
    if cmd == "help":
        print(HELP)
    elif cmd == "load":
        session.load(line.split(None, 1)[1] if args else "")
        print(session.text)
    elif cmd in _OP_ALIASES:
        if not args:
            raise ValueError(f"Usage: {cmd} <value> [both|left|right]")
        side = args[1] if len(args) > 1 else "both"
        session.apply(Operation(_OP_ALIASES[cmd], args[0], side))
        print(session.text)
    elif cmd == "move":
        if len(args) < 2:
            raise ValueError("Usage: move <left|right> <n> [n ...]")
        from_side = args[0]
        to_side = "right" if from_side == "left" else "left"
        session.move(_terms_at(session, from_side, args[1:]), from_side, to_side)
        print(session.text)
    elif cmd == "undo":
        print(session.text if session.undo() else "Nothing to undo.")
    elif cmd == "redo":
        print(session.text if session.redo() else "Nothing to redo.")
    elif cmd == "history":
        _print_history(session)
    elif cmd == "latex":
        print(to_latex(session.equation))
    elif cmd == "show":
        print(session.text)
    else:
        print(f"Unknown command '{cmd}'. Type 'help' for a list.")
    return True


def main(argv=None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    settings = config.get_settings()
    setup_logging(settings["log_level"])

    session = EquationSession(" ".join(argv) if argv else None, settings)
    print(session.text)
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        try:
            if not run_command(session, line.strip()):
                break
        except ValueError as exc:
            print(f"Error: {exc}")


if __name__ == "__main__":
    main()
