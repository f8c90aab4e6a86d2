"""Improve a model so that more clauses are satisfied by unprotected variables.

A refiner holds a CNF formula and a set of *protected* variables. Given a
set of assumption literals and a complete model, it can move pure literals
into the assumptions, flip unprotected variables so that more clauses are
satisfied by unprotected literals, and find unprotected variables that can
be relaxed.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from cnfkit.cnf import Literal, Variable

ModelValue = Optional[bool]


def _var(literal: Literal) -> int:
    return literal.code >> 1


def _negated(literal: Literal) -> bool:
    return bool(literal.code & 1)


def _true_under(literal: Literal, model: Sequence[ModelValue]) -> bool:
    value = model[_var(literal)]
    return value is not None and value != _negated(literal)


class InterpretationRefiner:
    """Counts, per clause, the unprotected literals that a model makes true."""

    def __init__(
        self, protected: Iterable[bool], formula: Iterable[Iterable[Literal]] = ()
    ) -> None:
        self._protected = [bool(flag) for flag in protected]
        self._clauses: list[tuple[Literal, ...]] = []
        self._occurrences: list[list[int]] = []
        self._nb_true: list[int] = []
        self._satisfied: list[bool] = []
        self._selector_clause: dict[int, int] = {}
        self._nb_exist: dict[int, int] = {}
        self._with_exist: list[int] = []
        for clause in formula:
            self.add_clause(clause)

    def add_clause(self, clause: Iterable[Literal]) -> None:
        """Append a clause to the formula."""
        literals = tuple(clause)
        position = len(self._clauses)
        self._nb_true.append(0)
        self._satisfied.append(False)
        for literal in literals:
            needed = (_var(literal) + 1) << 1
            if needed > len(self._occurrences):
                self._occurrences.extend([] for _ in range(needed - len(self._occurrences)))
            self._occurrences[literal.code].append(position)
        self._clauses.append(literals)

    def init_clauses_with_exist(
        self, num_vars: int, indices: Iterable[int], selectors: Iterable[Literal]
    ) -> None:
        """Record the clauses holding unprotected variables and their selectors.

        ``selectors[i]`` is the selector variable of clause ``indices[i]``.
        """
        indices = list(indices)
        selectors = list(selectors)
        if len(selectors) > len(indices):
            raise ValueError("more selectors than clause indices")
        self._with_exist = indices
        self._nb_exist = {
            position: sum(
                1 for literal in self._clauses[position]
                if not self._protected[_var(literal)]
            )
            for position in indices
        }
        self._selector_clause = {}
        for selector, position in zip(selectors, indices):
            v = _var(selector)
            if not 0 <= v < num_vars:
                raise ValueError(f"selector {selector} is outside the {num_vars} variables")
            self._selector_clause[v] = position

    def init(
        self, assumptions: Iterable[Literal], model: Sequence[ModelValue]
    ) -> None:
        """Count true unprotected literals under ``model`` and mark clauses the assumptions satisfy."""
        self._nb_true = [
            sum(
                1
                for literal in clause
                if not self._protected[_var(literal)] and _true_under(literal, model)
            )
            for clause in self._clauses
        ]
        self._satisfied = [False] * len(self._clauses)
        for literal in assumptions:
            v = _var(literal)
            if v in self._selector_clause and not _negated(literal):
                self._satisfied[self._selector_clause[v]] = True
            if literal.code >= len(self._occurrences):
                continue
            for position in self._occurrences[literal.code]:
                self._satisfied[position] = True

    def transfer_pure_literals(
        self, assumptions: Iterable[Literal], model: Sequence[ModelValue]
    ) -> tuple[list[Literal], list[ModelValue]]:
        """Move pure unprotected literals into the assumptions.

        Returns the extended assumptions and the model with every moved
        literal made true.
        """
        assumptions = list(assumptions)
        model = list(model)
        nb_var = len(model)
        counts = [0] * (2 * nb_var)
        for position, clause in enumerate(self._clauses):
            if self._satisfied[position]:
                continue
            for literal in clause:
                if not self._protected[_var(literal)]:
                    counts[literal.code] += 1

        marked = {_var(literal) for literal in assumptions}
        while True:
            pure: list[Literal] = []
            for v in range(nb_var):
                if self._protected[v] or v in marked:
                    continue
                positive = Literal(v << 1)
                negative = ~positive
                if not counts[positive.code] and not counts[negative.code]:
                    continue
                if not counts[positive.code]:
                    pure.append(negative)
                if not counts[negative.code]:
                    pure.append(positive)
            if not pure:
                break
            for literal in pure:
                assumptions.append(literal)
                marked.add(_var(literal))
                for position in self._occurrences[literal.code]:
                    if self._satisfied[position]:
                        continue
                    self._satisfied[position] = True
                    for other in self._clauses[position]:
                        if not self._protected[_var(other)]:
                            counts[other.code] -= 1
                model[_var(literal)] = not _negated(literal)
        return assumptions, model

    def refine(
        self, assumptions: Iterable[Literal], model: Sequence[ModelValue]
    ) -> list[ModelValue]:
        """Return ``model`` after flips that satisfy more clauses with unprotected literals.

        A variable is flipped only when no clause loses its last true
        unprotected literal and at least one unsatisfied clause gains one.
        Assumption variables and protected variables are never flipped.
        """
        model = list(model)
        marked = {_var(literal) for literal in assumptions}
        size = len(self._protected)
        covered = len(self._occurrences) >> 1
        limit = size
        v = 0
        while v != limit:
            if v == size:
                v = 0
            if v == limit:
                break
            if v not in marked and not self._protected[v] and v < covered:
                literal = Literal((v << 1) | (0 if model[v] is True else 1))
                kept = self._occurrences[literal.code]
                gained = self._occurrences[(~literal).code]
                creates_unsat = any(
                    not self._satisfied[position] and self._nb_true[position] == 1
                    for position in kept
                )
                if not creates_unsat and any(
                    not self._satisfied[position] and self._nb_true[position] == 0
                    for position in gained
                ):
                    for position in kept:
                        self._nb_true[position] -= 1
                    for position in gained:
                        self._nb_true[position] += 1
                    model[v] = model[v] is not True
                    limit = v
            v += 1
        return model

    def should_be_relaxed(self) -> list[Variable]:
        """Return unprotected variables of still unsatisfied clauses that can be relaxed."""
        marked: set[int] = set()
        candidates: list[Literal] = []
        for position in self._with_exist:
            if self._satisfied[position] or self._nb_true[position]:
                continue
            for literal in self._clauses[position]:
                v = _var(literal)
                if not self._protected[v] and v not in marked:
                    marked.add(v)
                    candidates.append(literal)

        counts = list(self._nb_true)

        def tolerant(position: int) -> bool:
            return counts[position] > 1 or self._nb_exist.get(position, 0) == 1

        relaxed: list[Variable] = []
        for literal in candidates:
            opposite = self._occurrences[(~literal).code]
            if all(tolerant(p) for p in self._occurrences[literal.code]) and all(
                tolerant(p) for p in opposite
            ):
                relaxed.append(Variable(_var(literal)))
                for position in opposite:
                    counts[position] -= 1
        return relaxed