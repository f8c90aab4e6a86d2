"""Local search for a renaming that makes as many clauses as possible Horn.

A variable that is *renamed* has its polarity swapped. A clause is Horn
under a renaming when at most one of its literals is positive after the
swap. The search is a walk that flips variables of non-Horn clauses. Each
step picks the flip with the best make/break balance.
"""

from __future__ import annotations

import random
from typing import Iterable, Sequence

from cnfkit.cnf import Literal, Variable


def _var(literal: Literal) -> int:
    return literal.code >> 1


def _negated(literal: Literal) -> bool:
    return bool(literal.code & 1)


class RenamableHorn:
    """Incremental bookkeeping of positive literals under a variable renaming."""

    def __init__(self, num_vars: int, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._num_vars = num_vars
        self._clauses: list[tuple[Literal, ...]] = []
        self._occurrences: list[list[int]] = [[] for _ in range(2 * num_vars)]
        self._renamed = [False] * num_vars
        self._count_positive: list[int] = []
        self._where: list[int] = []
        self._not_horn: list[int] = []
        self._make = [0] * num_vars
        self._break = [0] * num_vars
        self._changed = [0] * num_vars
        self._best_renaming: list[bool] = []
        self._best_not_horn: list[int] = []

    # ------------------------------------------------------------------ formula

    def add_clause(self, clause: Iterable[Literal]) -> None:
        """Add a clause to the formula."""
        literals = tuple(clause)
        for literal in literals:
            if not 0 <= literal.code < len(self._occurrences):
                raise ValueError(f"literal {literal} is outside the declared variables")
        position = len(self._clauses)
        self._clauses.append(literals)
        self._count_positive.append(0)
        self._where.append(0)
        for literal in literals:
            self._occurrences[literal.code].append(position)

    def reinit(self) -> None:
        """Remove every clause, keeping the variables and the renaming."""
        self._clauses.clear()
        self._count_positive.clear()
        self._where.clear()
        self._not_horn.clear()
        for occurrence in self._occurrences:
            occurrence.clear()

    def clause(self, index: int) -> tuple[Literal, ...]:
        """Return the literals of the clause at ``index``."""
        return self._clauses[index]

    # ---------------------------------------------------------------- renaming

    def is_positive(self, literal: Literal) -> bool:
        """Return True when ``literal`` is positive under the current renaming."""
        return _negated(literal) == self._renamed[_var(literal)]

    def heuristic_interpretation(self) -> None:
        """Make every literal of a few random clauses negative, sometimes keeping one positive."""
        if not self._clauses:
            return
        for _ in range(len(self._clauses) >> 5):
            chosen = self._clauses[self._rng.randrange(len(self._clauses))]
            for literal in chosen:
                self._renamed[_var(literal)] = not _negated(literal)
            if chosen and self._rng.getrandbits(1):
                literal = chosen[self._rng.randrange(len(chosen))]
                self._renamed[_var(literal)] = _negated(literal)

    def random_interpretation(self) -> None:
        """Rename each variable with probability one half."""
        self._renamed = [bool(self._rng.getrandbits(1)) for _ in self._renamed]

    def init(self, init_random: bool = True) -> None:
        """Choose a starting renaming and rebuild every counter from scratch."""
        if init_random:
            self.random_interpretation()
        else:
            self.heuristic_interpretation()

        self._count_positive = [0] * len(self._clauses)
        self._where = [0] * len(self._clauses)
        self._make = [0] * self._num_vars
        self._break = [0] * self._num_vars
        self._not_horn = []

        for position, literals in enumerate(self._clauses):
            positives = sum(1 for literal in literals if self.is_positive(literal))
            self._count_positive[position] = positives
            if positives > 1:
                self._add_not_horn(position)
            if positives == 1:
                for literal in literals:
                    if not self.is_positive(literal):
                        self._break[_var(literal)] += 1
            if positives == 2:
                for literal in literals:
                    if self.is_positive(literal):
                        self._make[_var(literal)] += 1

    def _add_not_horn(self, position: int) -> None:
        self._not_horn.append(position)
        self._where[position] = len(self._not_horn) - 1

    def _remove_not_horn(self, position: int) -> None:
        last = self._not_horn[-1]
        slot = self._where[position]
        self._not_horn[slot] = last
        self._where[last] = slot
        self._not_horn.pop()

    def flip(self, variable: Variable | int) -> None:
        """Toggle the renaming of ``variable`` and update every counter."""
        v = variable.index if isinstance(variable, Variable) else variable
        # The literal of v that is positive before the flip.
        literal = Literal((v << 1) | int(self._renamed[v]))
        self._renamed[v] = not self._renamed[v]

        for position in self._occurrences[literal.code]:
            self._count_positive[position] -= 1
            count = self._count_positive[position]
            members = self._clauses[position]
            if count == 0:
                for other in members:
                    if _var(other) != v and not self.is_positive(other):
                        self._break[_var(other)] -= 1
            if count == 1:
                self._remove_not_horn(position)
                self._make[v] -= 1
                for other in members:
                    if self.is_positive(other):
                        self._make[_var(other)] -= 1
                    else:
                        self._break[_var(other)] += 1
            if count == 2:
                for other in members:
                    if self.is_positive(other):
                        self._make[_var(other)] += 1

        for position in self._occurrences[(~literal).code]:
            self._count_positive[position] += 1
            count = self._count_positive[position]
            members = self._clauses[position]
            if count == 1:
                for other in members:
                    if not self.is_positive(other):
                        self._break[_var(other)] += 1
            if count == 2:
                self._break[v] -= 1
                for other in members:
                    if self.is_positive(other):
                        self._make[_var(other)] += 1
                    else:
                        self._break[_var(other)] -= 1
                self._add_not_horn(position)
            if count == 3:
                for other in members:
                    if _var(other) != v and self.is_positive(other):
                        self._make[_var(other)] -= 1

    def select_positive_random(self, clause: Sequence[Literal]) -> Variable:
        """Return the variable of a positive literal of ``clause``, starting at a random place."""
        if not clause:
            raise ValueError("empty clause has no positive literal")
        start = self._rng.randrange(len(clause))
        for literal in (*clause[start:], *clause[:start]):
            if self.is_positive(literal):
                return Variable(_var(literal))
        raise ValueError("clause has no positive literal")

    # ------------------------------------------------------------------ search

    def _choose_flip(self, position: int) -> int:
        floor = -len(self._clauses)
        best: int | None = None
        second: int | None = None
        youngest: int | None = None
        youngest_birthdate = floor
        best_diff = floor
        second_diff = floor
        changed = self._changed

        for literal in self._clauses[position]:
            if not self.is_positive(literal):
                continue
            v = _var(literal)
            diff = self._make[v] - self._break[v]
            birthdate = changed[v]
            if birthdate > youngest_birthdate:
                youngest_birthdate = birthdate
                youngest = v
            if best is None or diff > best_diff or (
                diff == best_diff and changed[v] < changed[best]
            ):
                second, second_diff = best, best_diff
                best, best_diff = v, diff
            elif second is None or diff > second_diff or (
                diff == second_diff and changed[v] < changed[second]
            ):
                second, second_diff = v, diff

        if best is None:
            raise RuntimeError(f"non-Horn clause {position} has no positive literal")
        if second is None or best != youngest:
            return best
        return second if self._rng.getrandbits(1) else best

    def run(self, nb_runs: int, nb_flips: int) -> int:
        """Search for a good renaming and return the least number of non-Horn clauses seen.

        The best renaming found and its non-Horn clauses are kept and read
        with :meth:`best_renaming` and :meth:`best_not_horn_clauses`.
        """
        best_obtained = len(self._clauses)
        for _ in range(nb_runs):
            self.init(False)
            self._changed = [0] * self._num_vars
            best_this_run = len(self._not_horn)

            for step in range(nb_flips):
                if not self._not_horn:
                    break
                position = self._not_horn[self._rng.randrange(len(self._not_horn))]
                chosen = self._choose_flip(position)
                self.flip(chosen)
                self._changed[chosen] = step

                best_this_run = min(best_this_run, len(self._not_horn))
                if best_this_run < best_obtained:
                    best_obtained = best_this_run
                    self._best_renaming = list(self._renamed)
                    self._best_not_horn = list(self._not_horn)
        return best_obtained

    # ----------------------------------------------------------------- results

    def best_renaming(self) -> list[bool]:
        """Return the renaming of the best score reached by :meth:`run`."""
        return list(self._best_renaming)

    def best_not_horn_clauses(self) -> list[int]:
        """Return the non-Horn clause indices under the best renaming."""
        return list(self._best_not_horn)

    def not_horn_clauses(self) -> list[int]:
        """Return the indices of the clauses that are not Horn right now."""
        return list(self._not_horn)

    def check_consistency(self) -> bool:
        """Recompute every counter from scratch and report whether they all agree."""
        count_positive = [0] * len(self._clauses)
        make = [0] * self._num_vars
        brk = [0] * self._num_vars
        not_horn: list[int] = []

        for position, literals in enumerate(self._clauses):
            positives = sum(1 for literal in literals if self.is_positive(literal))
            count_positive[position] = positives
            if positives > 1:
                not_horn.append(position)
            if positives == 1:
                for literal in literals:
                    if not self.is_positive(literal):
                        brk[_var(literal)] += 1
            if positives == 2:
                for literal in literals:
                    if self.is_positive(literal):
                        make[_var(literal)] += 1

        return (
            count_positive == self._count_positive
            and make == self._make
            and brk == self._break
            and len(not_horn) == len(self._not_horn)
            and set(not_horn) == set(self._not_horn)
        )