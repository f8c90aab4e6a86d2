"""CNF formulas in DIMACS form: parsing, unit simplification, subsumption and renaming."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Iterator


@dataclass(frozen=True, order=True)
class Variable:
    """A propositional variable, stored by its zero-based index."""

    index: int

    @classmethod
    def from_dimacs(cls, value: int) -> "Variable":
        """Build the variable of a (signed, one-based) DIMACS integer."""
        if value == 0:
            raise ValueError("0 does not denote a variable")
        return cls(abs(value) - 1)

    @classmethod
    def from_literal(cls, literal: "Literal") -> "Variable":
        """Return the variable underlying ``literal``."""
        return cls(literal.code >> 1)

    def to_int(self) -> int:
        """Return the one-based DIMACS number of the variable."""
        return self.index + 1

    def __str__(self) -> str:
        return str(self.to_int())


@dataclass(frozen=True, order=True)
class Literal:
    """A literal encoded as ``2 * variable + negated``.

    The ordering places a literal directly before its complement.
    """

    code: int

    @classmethod
    def from_dimacs(cls, value: int) -> "Literal":
        """Build the literal of a signed, one-based DIMACS integer."""
        if value == 0:
            raise ValueError("0 does not denote a literal")
        return cls(((abs(value) - 1) << 1) ^ (1 if value < 0 else 0))

    @classmethod
    def from_variable(cls, variable: Variable, sign: int = 1) -> "Literal":
        """Build a literal of ``variable``; a negative ``sign`` negates it."""
        return cls((variable.index << 1) | (1 if sign < 0 else 0))

    def sign(self) -> int:
        """Return -1 for a negative literal and 1 for a positive one."""
        return -1 if self.code & 1 else 1

    def variable(self) -> Variable:
        """Return the variable of the literal."""
        return Variable.from_literal(self)

    def to_int(self) -> int:
        """Return the signed DIMACS integer of the literal."""
        return self.sign() * ((self.code >> 1) + 1)

    def __invert__(self) -> "Literal":
        return Literal(self.code ^ 1)

    def __str__(self) -> str:
        return str(self.to_int())


class Clause:
    """An ordered disjunction of distinct literals."""

    def __init__(self, literals: Iterable[Literal] = ()) -> None:
        self._literals: list[Literal] = []
        for literal in literals:
            self.push(literal)

    def push(self, literal: Literal) -> None:
        """Append ``literal`` unless it is already present."""
        if literal not in self._literals:
            self._literals.append(literal)

    def remove_literal(self, literal: Literal) -> None:
        """Remove every occurrence of ``literal``."""
        self._literals = [lit for lit in self._literals if lit != literal]

    def remove_variable(self, variable: Variable) -> None:
        """Remove every literal over ``variable``, whatever its sign."""
        self._literals = [lit for lit in self._literals if lit.variable() != variable]

    def contains_clause(self, other: "Clause") -> bool:
        """Return True when every literal of ``other`` is in this clause."""
        return all(literal in self for literal in other)

    def __contains__(self, literal: object) -> bool:
        return literal in self._literals

    def __iter__(self) -> Iterator[Literal]:
        return iter(self._literals)

    def __len__(self) -> int:
        return len(self._literals)

    def __getitem__(self, index: int) -> Literal:
        return self._literals[index]

    def __repr__(self) -> str:
        return f"Clause([{', '.join(str(lit) for lit in self._literals)}])"

    def __str__(self) -> str:
        return " ".join([*(str(lit) for lit in self._literals), "0"])


def _integers(tokens: Iterable[str]) -> Iterator[int]:
    """Yield integer tokens until the first one that is not an integer."""
    for token in tokens:
        try:
            yield int(token)
        except ValueError:
            return


class CNF:
    """A CNF formula with occurrence lists, found units and free variables."""

    def __init__(self, num_vars: int = 0) -> None:
        self.clauses: list[Clause] = []
        self.active: list[bool] = []
        self._occurrences: list[set[int]] = [set() for _ in range(2 * num_vars)]
        self.units: set[Literal] = set()
        self.free: set[Variable] = set()
        self.variables: set[Variable] = {Variable(i) for i in range(num_vars)}
        self.independent: set[Variable] = set()
        self._nb_active = 0

    def _occurrences_of(self, literal: Literal) -> set[int]:
        if not 0 <= literal.code < len(self._occurrences):
            raise ValueError(f"literal {literal} is outside the declared variables")
        return self._occurrences[literal.code]

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "CNF":
        """Read a formula from DIMACS lines.

        Every non-comment line is one clause; an empty clause is kept and
        reported on standard error.
        """
        cnf = cls()
        for raw in lines:
            line = raw.strip()
            if line.startswith("p cnf "):
                fields = line.split()
                try:
                    count = int(fields[2])
                except (IndexError, ValueError) as exc:
                    raise ValueError(f"malformed header: {line!r}") from exc
                cnf.variables.update(Variable(i) for i in range(count))
                cnf._occurrences.extend(set() for _ in range(2 * count))
            elif line.startswith("c ind "):
                cnf.independent.update(
                    Variable.from_dimacs(value)
                    for value in _integers(line.split()[2:])
                    if value != 0
                )
            elif line and line[0] not in "cp":
                clause = Clause()
                position = len(cnf.clauses)
                for value in _integers(line.split()):
                    if value != 0:
                        literal = Literal.from_dimacs(value)
                        clause.push(literal)
                        cnf._occurrences_of(literal).add(position)
                if not clause:
                    print(f'empty clause in input: "{line}"', file=sys.stderr)
                cnf.clauses.append(clause)
                cnf.active.append(True)
        cnf._nb_active = len(cnf.active)
        return cnf

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> "CNF":
        """Read a formula from a DIMACS file."""
        with open(path, encoding="utf-8") as handle:
            return cls.parse(handle)

    def add_clause(self, clause: Clause) -> None:
        """Append an active clause and index its literals."""
        position = len(self.clauses)
        for literal in clause:
            self._occurrences_of(literal)
        self.active.append(True)
        self._nb_active += 1
        self.clauses.append(clause)
        for literal in clause:
            self._occurrences[literal.code].add(position)

    def simplify(self) -> None:
        """Propagate unit clauses until none are left."""
        changed = True
        while changed:
            found: set[Literal] = set()
            for position, clause in enumerate(self.clauses):
                if self.active[position] and len(clause) == 1:
                    found.add(clause[0])
                    self.units.add(clause[0])
                    self.active[position] = False
                    self._nb_active -= 1

            changed = bool(found)

            for literal in sorted(found):
                negation = ~literal
                satisfied = self._occurrences_of(literal)
                for position in sorted(satisfied):
                    if self.active[position]:
                        self._nb_active -= 1
                    self.active[position] = False
                    for other in self.clauses[position]:
                        if other != literal:
                            self._occurrences[other.code].discard(position)
                satisfied.clear()

                falsified = self._occurrences_of(negation)
                for position in sorted(falsified):
                    self.clauses[position].remove_literal(negation)
                falsified.clear()

    def subsumption(self) -> None:
        """Deactivate every clause that contains another active clause."""
        for position, clause in enumerate(self.clauses):
            if not self.active[position] or not len(clause):
                continue
            pivot = min(clause, key=lambda lit: len(self._occurrences[lit.code]))
            for other in sorted(self._occurrences[pivot.code]):
                if (
                    self.active[other]
                    and other != position
                    and self.clauses[other].contains_clause(clause)
                ):
                    self.active[other] = False
                    self._nb_active -= 1
                    for literal in self.clauses[other]:
                        self._occurrences[literal.code].discard(other)

    def compute_free_vars(self) -> None:
        """Record the variables occurring in no active clause and no unit."""
        used = {
            literal.variable()
            for clause in self._active_clauses()
            for literal in clause
        }
        used.update(literal.variable() for literal in self.units)
        self.free = self.variables - used

    def rename_vars(self) -> "CNF":
        """Return the active non-unit clauses over consecutively renumbered variables."""
        kept = [clause for clause in self._active_clauses() if len(clause) > 1]
        mapping: dict[Variable, Variable] = {}
        for clause in kept:
            for literal in clause:
                mapping.setdefault(literal.variable(), Variable(len(mapping)))

        result = CNF(len(mapping))
        for clause in kept:
            result.add_clause(
                Clause(
                    Literal.from_variable(mapping[literal.variable()], literal.sign())
                    for literal in clause
                )
            )
        return result

    def _active_clauses(self) -> Iterator[Clause]:
        return (clause for clause, on in zip(self.clauses, self.active) if on)

    def nb_by_clause_len(self) -> list[int]:
        """Count active clauses by length; index 1 also counts found units."""
        counts = [0, len(self.units)]
        for clause in self._active_clauses():
            while len(clause) >= len(counts):
                counts.append(0)
            counts[len(clause)] += 1
        return counts

    def vars_by_clause_len(self) -> list[set[Variable]]:
        """Group variables by the length of the active clauses they occur in.

        Index 0 holds every variable of an active clause; index 1 also holds
        the variables of the found units.
        """
        groups: list[set[Variable]] = [set(), set()]
        groups[1].update(literal.variable() for literal in self.units)
        for clause in self._active_clauses():
            while len(clause) >= len(groups):
                groups.append(set())
            for literal in clause:
                groups[len(clause)].add(literal.variable())
                groups[0].add(literal.variable())
        return groups

    def nb_vars(self) -> int:
        return len(self.variables)

    def nb_free_vars(self) -> int:
        return len(self.free)

    def nb_units(self) -> int:
        return len(self.units)

    def nb_c_vars(self) -> int:
        return self.nb_vars() - self.nb_free_vars()

    def nb_clauses(self) -> int:
        return len(self.clauses)

    def nb_active_clauses(self) -> int:
        return self._nb_active

    def __str__(self) -> str:
        parts = [f"p cnf {len(self.variables)} {self._nb_active + len(self.units)}"]
        parts.extend(str(clause) for clause in self._active_clauses())
        parts.extend(f"{literal} 0" for literal in sorted(self.units))
        parts.extend(f"c {variable}" for variable in sorted(self.free))
        return "\n".join(parts)