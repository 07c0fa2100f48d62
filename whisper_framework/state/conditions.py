"""
Condition expressions evaluated against the variable store.

Grammar:
    condition  := atom (("&&" atom)* | ("||" atom)*)
    atom       := ["!"] flagName | varName comparator value
    comparator := ">=" | ">" | "<=" | "<" | "==" | "!="

Chains are flat: an expression is either all-&& or all-||, never
mixed, and there are no parentheses. Ordering comparators need an
integer literal; == and != also accept true/false (flag comparison)
or a bare word (case-insensitive string comparison).

An empty expression is true. A malformed expression is false.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol, Union

logger = logging.getLogger(__name__)

AND = "&&"
OR = "||"

_FLAG_ATOM = re.compile(r'^(!?)\s*([A-Za-z_][\w.]*)$')
_COMPARE_ATOM = re.compile(r'^([A-Za-z_][\w.]*)\s*(>=|<=|==|!=|>|<)\s*(.+)$')
_INT_LITERAL = re.compile(r'^[+-]?\d+$')
_WORD_LITERAL = re.compile(r'^[\w.\-]+$')

ORDERING = (">=", ">", "<=", "<")

Literal = Union[bool, int, str]


class VariableSource(Protocol):
    """Read side of the variable store."""

    def get_bool(self, key: str) -> bool: ...

    def get_int(self, key: str) -> int: ...

    def get_string(self, key: str) -> str: ...


class ConditionSyntaxError(ValueError):
    """Raised by parse_condition for malformed expressions."""


@dataclass(frozen=True)
class FlagAtom:
    """`flag` or `!flag`."""
    name: str
    negated: bool = False

    def evaluate(self, state: VariableSource) -> bool:
        value = state.get_bool(self.name)
        return not value if self.negated else value


@dataclass(frozen=True)
class CompareAtom:
    """`name <op> literal`."""
    name: str
    op: str
    value: Literal

    def evaluate(self, state: VariableSource) -> bool:
        if isinstance(self.value, bool):
            equal = state.get_bool(self.name) == self.value
            return equal if self.op == "==" else not equal

        if isinstance(self.value, int):
            return _compare(state.get_int(self.name), self.op, self.value)

        equal = state.get_string(self.name).casefold() == self.value.casefold()
        return equal if self.op == "==" else not equal


Atom = Union[FlagAtom, CompareAtom]


@dataclass(frozen=True)
class Condition:
    """A parsed expression. Holds no results; evaluate() reads live state."""
    expression: str
    atoms: tuple[Atom, ...]
    any_of: bool = False

    def evaluate(self, state: VariableSource) -> bool:
        if not self.atoms:
            return True
        if self.any_of:
            return any(atom.evaluate(state) for atom in self.atoms)
        return all(atom.evaluate(state) for atom in self.atoms)

    @property
    def variables(self) -> set[str]:
        """Names of all variables the expression reads."""
        return {atom.name for atom in self.atoms}


def _compare(left: int, op: str, right: int) -> bool:
    if op == ">=":
        return left >= right
    if op == ">":
        return left > right
    if op == "<=":
        return left <= right
    if op == "<":
        return left < right
    if op == "==":
        return left == right
    return left != right


def _parse_literal(op: str, text: str) -> Literal:
    text = text.strip()
    if _INT_LITERAL.match(text):
        return int(text)

    if op in ORDERING:
        raise ConditionSyntaxError(f"'{op}' needs an integer, got '{text}'")

    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]

    if _WORD_LITERAL.match(text):
        return text

    raise ConditionSyntaxError(f"cannot read value '{text}'")


def _parse_atom(text: str) -> Atom:
    text = text.strip()
    if not text:
        raise ConditionSyntaxError("empty term")

    match = _COMPARE_ATOM.match(text)
    if match:
        name, op, rhs = match.groups()
        return CompareAtom(name=name.lower(), op=op, value=_parse_literal(op, rhs))

    match = _FLAG_ATOM.match(text)
    if match:
        bang, name = match.groups()
        return FlagAtom(name=name.lower(), negated=bool(bang))

    raise ConditionSyntaxError(f"cannot read term '{text}'")


def parse_condition(expression: str | None) -> Condition:
    """
    Parse an expression.

    Raises:
        ConditionSyntaxError: if the expression is malformed
    """
    expression = (expression or "").strip()
    if not expression:
        return Condition(expression="", atoms=())

    has_and = AND in expression
    has_or = OR in expression
    if has_and and has_or:
        raise ConditionSyntaxError("mixes '&&' and '||'")

    if has_and:
        parts, any_of = expression.split(AND), False
    elif has_or:
        parts, any_of = expression.split(OR), True
    else:
        parts, any_of = [expression], False

    atoms = tuple(_parse_atom(part) for part in parts)
    return Condition(expression=expression, atoms=atoms, any_of=any_of)


class ConditionEvaluator:
    """
    Caches parsed expressions and reports each malformed one once.

    Only the parse is cached; every evaluate() reads current state.
    """

    def __init__(self):
        self._parsed: dict[str, Condition] = {}
        self._errors: dict[str, str] = {}

    def compile(self, expression: str | None) -> Condition | None:
        """Parsed condition, or None (logged once) when malformed."""
        key = (expression or "").strip()

        if key in self._parsed:
            return self._parsed[key]
        if key in self._errors:
            return None

        try:
            condition = parse_condition(key)
        except ConditionSyntaxError as e:
            self._errors[key] = str(e)
            logger.warning(f"Malformed condition '{key}': {e}")
            return None

        self._parsed[key] = condition
        return condition

    def evaluate(self, expression: str | None, state: VariableSource) -> bool:
        condition = self.compile(expression)
        if condition is None:
            return False
        return condition.evaluate(state)

    def is_valid(self, expression: str | None) -> bool:
        return self.compile(expression) is not None

    @property
    def malformed(self) -> dict[str, str]:
        """Expressions that failed to parse, with the reason."""
        return dict(self._errors)
