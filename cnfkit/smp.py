"""Command line: simplify a DIMACS formula and print it, optionally with statistics."""

from __future__ import annotations

import argparse
import sys
from os import PathLike

from cnfkit.cnf import CNF

_STATS_HEADER = (
    "c file, #v, #vu, #vf, #c-u, #c2, #v2, #c3, #v3, #c4, #v4, #c5, #v5"
)


def format_stats(path: str | PathLike[str], cnf: CNF) -> str:
    """Simplify ``cnf``, compute its free variables and return a statistics block."""
    cnf.simplify()
    cnf.compute_free_vars()

    counts = cnf.nb_by_clause_len()
    groups = cnf.vars_by_clause_len()

    columns = [
        str(path),
        str(cnf.nb_vars()),
        str(cnf.nb_units()),
        str(cnf.nb_free_vars()),
        str(cnf.nb_active_clauses()),
    ]
    for length in range(2, 6):
        if length < len(counts):
            columns += [str(counts[length]), str(len(groups[length]))]
        else:
            columns += ["0", "0"]

    return f"\n{_STATS_HEADER}\nc {', '.join(columns)}\n"


def main(argv: list[str] | None = None) -> int:
    """Run the simplifier; return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stderr.write("too few arguments\nexiting\n")
        return 1

    parser = argparse.ArgumentParser(
        prog="smp",
        description="Propagate units, remove subsumed clauses and print the formula.",
    )
    parser.add_argument("path", help="DIMACS CNF file")
    parser.add_argument(
        "--rename",
        action="store_true",
        help="renumber the variables of the remaining non-unit clauses",
    )
    parser.add_argument(
        "--stats", action="store_true", help="append a statistics block"
    )
    options = parser.parse_args(args)

    try:
        cnf = CNF.from_file(options.path)
    except OSError:
        sys.stderr.write(f"error opening file {options.path}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"{options.path}: {exc}\n")
        return 1

    cnf.simplify()
    cnf.subsumption()

    result = cnf.rename_vars() if options.rename else cnf
    sys.stdout.write(str(result))

    if options.stats:
        sys.stdout.write(format_stats(options.path, cnf))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())