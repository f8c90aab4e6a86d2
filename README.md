# cnfkit

Tools for propositional formulas in conjunctive normal form (CNF), in plain
Python with no third-party dependencies.

## Modules

- `cnfkit.cnf`: `Variable`, `Literal`, `Clause` and `CNF`.
  - `CNF.parse(lines)` and `CNF.from_file(path)` read DIMACS text, including
    `c ind` lines (kept in `CNF.independent`). Every non-comment line is one
    clause; an empty clause is kept and reported on standard error.
  - `simplify()` propagates unit clauses until none are left; the found units
    are kept in `CNF.units`.
  - `subsumption()` deactivates every clause that contains another active
    clause.
  - `compute_free_vars()` records the variables that occur in no active
    clause and no unit.
  - `rename_vars()` returns a new `CNF` holding the active non-unit clauses
    over consecutively renumbered variables.
  - `nb_by_clause_len()`, `vars_by_clause_len()`, `nb_vars()`, `nb_units()`,
    `nb_free_vars()`, `nb_c_vars()`, `nb_clauses()` and
    `nb_active_clauses()` report statistics.
  - `str(cnf)` gives a DIMACS header, the active clauses, the units as unit
    clauses and the free variables as `c` lines.
- `cnfkit.smp`: the `cnfkit-smp` command, and `format_stats(path, cnf)` which
  returns the statistics block it prints.
- `cnfkit.options`: typed command-line options of the form `-name=value`
  (`IntOption`, `Int64Option`, `DoubleOption`, `StringOption`) and
  `-name` / `-no-name` (`BoolOption`), with `IntRange` and `DoubleRange`
  bounds. Options register with `options.default_registry` unless given
  another `OptionRegistry`. `OptionRegistry.parse(argv, strict)` consumes the
  recognised options and returns the remaining arguments; a value out of
  range, or an unknown `-flag` in strict mode, raises `OptionError`.
  `--help` and `--help-verb` print `help_text()` to standard error and exit.
- `cnfkit.horn`: `RenamableHorn(num_vars, rng=None)`, a local search for a
  variable renaming under which as many clauses as possible are Horn.
  `run(nb_runs, nb_flips)` returns the least number of non-Horn clauses seen;
  `best_renaming()` and `best_not_horn_clauses()` give the renaming that
  reached it.
- `cnfkit.refiner`: `InterpretationRefiner(protected, formula=())`. After
  `init(assumptions, model)`, `transfer_pure_literals` moves pure unprotected
  literals into the assumptions (returning the new assumptions and model),
  `refine` returns a model in which unprotected variables have been flipped
  so that more clauses are satisfied by unprotected literals, and
  `should_be_relaxed` returns unprotected variables that can be relaxed
  (after `init_clauses_with_exist`). Model values are `True`, `False` or
  `None`.
- `cnfkit.system`: `cpu_time()` (wall-clock seconds since its first call),
  `mem_used()` and `mem_used_peak()` (megabytes, 0 where unsupported).
- `cnfkit.wrapper`: `run_limited(max_mem_mb, max_time, args)` runs a program,
  sends it SIGINT once it goes over the memory or time limit, and returns a
  `RunReport` with the command, an `Outcome`, the peak virtual memory in kB
  and the elapsed seconds. `mem_usage(pid)` reads a process's virtual memory
  from `/proc` (0 elsewhere).

## Installation

```
pip install .
```

## Command line

Propagate units, remove subsumed clauses and print the formula:

```
cnfkit-smp formula.cnf
```

`--rename` prints the remaining non-unit clauses over renumbered variables
instead, and `--stats` appends a statistics block (counts of variables,
units, free variables, active clauses, and clauses and variables by clause
length 2 to 5). The command exits with status 1 when no file is given or the
file cannot be read.

Run a program with a 2000 MB memory limit and a 60 second time limit:

```
cnfkit-wrap 2000 60 /usr/bin/some-solver formula.cnf
```

The wrapper writes one line to standard error: the command, the outcome
(`done`, `err`, `mem`, `timeout`, `mem err` or `timeout err`), the peak
virtual memory in kB and the elapsed time in seconds. It exits with status 1
for the two error variants and when the program cannot be started.

## Library use

```python
from cnfkit.cnf import CNF

cnf = CNF.parse(["p cnf 3 3", "1 0", "-1 2 3 0", "2 3 0"])
cnf.simplify()
cnf.subsumption()
print(cnf)
```

## What it does not do

cnfkit contains no SAT solver and no model counter: it prepares and inspects
formulas, and `RenamableHorn` and `InterpretationRefiner` are building blocks
that work on a model you supply rather than finding one.

## Tests

```
pip install .[test]
pytest
```