"""SymPy bridge: turn term trees into SymPy expressions and LaTeX.

The engine keeps coefficients as floats; here they are converted to small
rationals (``0.3333333333333333`` → ``1/3``) so the symbolic form reads the
way a student would write it.
"""

from sympy import Add, Eq, Mul, Rational, Symbol, latex

from rearranger.model import Equation, EquationSide, Term, TermGroup

_MAX_DENOMINATOR = 10 ** 6


def _to_rational(value: float) -> Rational:
    return Rational(value).limit_denominator(_MAX_DENOMINATOR)


def term_to_expr(term: Term):
    coefficient = _to_rational(term.coefficient)
    if term.is_constant:
        return coefficient
    return Mul(coefficient, Symbol(term.variable))


def side_to_expr(side: EquationSide):
    """Sum the side without collecting like terms (``x + 3 - 3`` stays)."""
    exprs = []
    for item in side:
        if isinstance(item, TermGroup):
            exprs.extend(term_to_expr(t) for t in item.terms)
        else:
            exprs.append(term_to_expr(item))
    if not exprs:
        return Rational(0)
    if len(exprs) == 1:
        return exprs[0]
    return Add(*exprs, evaluate=False)


def to_sympy(equation: Equation) -> Eq:
    return Eq(side_to_expr(equation.left), side_to_expr(equation.right),
              evaluate=False)


def free_variables(equation: Equation) -> list[str]:
    """Sorted variable names appearing anywhere in *equation*."""
    names = set()
    for side in (equation.left, equation.right):
        for item in side:
            terms = item.terms if isinstance(item, TermGroup) else (item,)
            names.update(t.variable for t in terms if not t.is_constant)
    return sorted(names)


# ── LaTeX ────────────────────────────────────────────────────────────────

def _term_latex(term: Term) -> str:
    return latex(term_to_expr(
        Term(abs(term.coefficient), term.variable, term.id)
    ))


def _side_latex(items) -> str:
    if not items:
        return "0"
    parts = []
    for index, item in enumerate(items):
        if isinstance(item, TermGroup):
            inner = _side_latex(item.terms)
            parts.append(("" if index == 0 else " + ") + rf"\left({inner}\right)")
            continue
        if index == 0:
            sign = "-" if item.coefficient < 0 else ""
        else:
            sign = " - " if item.coefficient < 0 else " + "
        parts.append(sign + _term_latex(item))
    return "".join(parts)


def to_latex(equation: Equation) -> str:
    """LaTeX for *equation* keeping the term order and every listed term."""
    return f"{_side_latex(equation.left.items)} = {_side_latex(equation.right.items)}"
