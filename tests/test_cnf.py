import pytest

from cnfkit.cnf import CNF, Clause, Literal, Variable

TEXT = "p cnf 3 2\n1 -2 0\n2 3 0"


def lit(value):
    return Literal.from_dimacs(value)


def var(value):
    return Variable.from_dimacs(value)


def make(text):
    return CNF.parse(text.splitlines())


def ints(clause):
    return [literal.to_int() for literal in clause]


@pytest.mark.parametrize("value", [1, -1, 7, -42])
def test_literal_round_trip(value):
    assert lit(value).to_int() == value
    assert str(lit(value)) == str(value)


def test_literal_negation():
    literal = lit(5)
    assert (~literal).to_int() == -5
    assert ~~literal == literal
    assert (~literal).variable() == literal.variable()


def test_literal_sign():
    assert lit(3).sign() == 1
    assert lit(-3).sign() == -1


def test_literal_ordering_keeps_complements_adjacent():
    assert lit(3) < lit(-3) < lit(4)


def test_literal_from_variable():
    assert Literal.from_variable(var(4), -1) == lit(-4)
    assert Literal.from_variable(var(4), 1) == lit(4)


def test_variable_from_literal():
    assert Variable.from_literal(lit(-9)).to_int() == 9
    assert var(-9) == var(9)


def test_zero_is_rejected():
    with pytest.raises(ValueError):
        Literal.from_dimacs(0)
    with pytest.raises(ValueError):
        Variable.from_dimacs(0)


def test_clause_push_deduplicates():
    clause = Clause([lit(1), lit(2), lit(1)])
    assert ints(clause) == [1, 2]
    clause.push(lit(2))
    assert ints(clause) == [1, 2]


def test_clause_str():
    assert str(Clause([lit(1), lit(-2)])) == "1 -2 0"
    assert str(Clause()) == "0"


def test_clause_remove_literal():
    clause = Clause([lit(1), lit(-2), lit(3)])
    clause.remove_literal(lit(-2))
    assert ints(clause) == [1, 3]


def test_clause_remove_variable_both_signs():
    clause = Clause([lit(1), lit(-2), lit(3)])
    clause.remove_variable(var(2))
    clause.remove_variable(var(3))
    assert ints(clause) == [1]


def test_clause_containment():
    clause = Clause([lit(1), lit(-2), lit(3)])
    assert lit(1) in clause
    assert lit(-1) not in clause
    assert clause.contains_clause(Clause([lit(3), lit(1)]))
    assert not clause.contains_clause(Clause([lit(1), lit(4)]))
    assert clause.contains_clause(Clause())
    assert clause[1] == lit(-2)
    assert len(clause) == 3


def test_parse_round_trip():
    cnf = make(TEXT)
    assert str(cnf) == TEXT
    assert cnf.nb_vars() == 3
    assert cnf.nb_clauses() == 2
    assert cnf.nb_active_clauses() == cnf.nb_clauses()


def test_comments_and_blank_lines_ignored():
    assert str(make("c a comment\n\n   \n" + TEXT)) == TEXT


def test_independent_support():
    cnf = make("c ind 1 3 0\n" + TEXT)
    assert cnf.independent == {var(1), var(3)}


def test_empty_clause_is_kept_and_reported(capsys):
    cnf = make("p cnf 2 2\n1 2 0\n0")
    assert cnf.nb_clauses() == 2
    assert 'empty clause in input: "0"' in capsys.readouterr().err


def test_literal_outside_header_rejected():
    with pytest.raises(ValueError):
        make("p cnf 2 1\n1 3 0")


def test_clause_before_header_rejected():
    with pytest.raises(ValueError):
        make("1 2 0")


def test_malformed_header_rejected():
    with pytest.raises(ValueError):
        make("p cnf x 1")


def test_simplify_propagates_units():
    cnf = make("p cnf 3 3\n1 0\n-1 2 3 0\n1 3 0")
    cnf.simplify()
    assert str(cnf) == "p cnf 3 2\n2 3 0\n1 0"


def test_simplify_chains_units():
    cnf = make("p cnf 2 2\n1 0\n-1 2 0")
    cnf.simplify()
    assert cnf.units == {lit(1), lit(2)}
    assert not any(cnf.active)
    assert cnf.nb_active_clauses() == sum(cnf.active)
    assert cnf.nb_units() == len(cnf.units)


def test_subsumption_removes_supersets():
    cnf = make("p cnf 3 3\n1 2 3 0\n2 1 0\n-1 3 0")
    cnf.subsumption()
    assert str(cnf) == "p cnf 3 2\n2 1 0\n-1 3 0"
    assert cnf.nb_clauses() == 3


def test_subsumption_keeps_one_duplicate():
    cnf = make("p cnf 2 2\n1 2 0\n1 2 0")
    cnf.subsumption()
    assert cnf.nb_active_clauses() == cnf.nb_clauses() - 1
    assert cnf.active[0]


def test_compute_free_vars():
    cnf = make("p cnf 4 2\n1 0\n2 -3 0")
    cnf.simplify()
    cnf.compute_free_vars()
    assert cnf.free == {var(4)}
    assert cnf.nb_c_vars() == cnf.nb_vars() - cnf.nb_free_vars()
    assert str(cnf).endswith("\nc 4")


def test_counts_by_clause_length():
    cnf = make("p cnf 5 4\n1 0\n2 3 0\n-2 4 5 0\n3 -4 0")
    cnf.simplify()
    counts = cnf.nb_by_clause_len()
    groups = cnf.vars_by_clause_len()
    assert counts[1] == cnf.nb_units()
    assert sum(counts[2:]) + counts[0] == cnf.nb_active_clauses()
    assert len(counts) == len(groups)
    assert set().union(*groups[2:]) == groups[0]
    assert groups[1] == {var(1)}
    assert groups[2] == {var(2), var(3), var(4)}


def test_rename_vars_compacts():
    cnf = make("p cnf 9 3\n5 -7 0\n7 9 0\n3 0")
    renamed = cnf.rename_vars()
    assert str(renamed) == "p cnf 3 2\n1 -2 0\n2 3 0"
    assert renamed.nb_vars() == len(cnf.vars_by_clause_len()[2])
    assert str(cnf).startswith("p cnf 9 3")


def test_add_clause():
    cnf = CNF(2)
    cnf.add_clause(Clause([lit(1), lit(-2)]))
    assert str(cnf) == "p cnf 2 1\n1 -2 0"
    assert cnf.nb_active_clauses() == cnf.nb_clauses()
    with pytest.raises(ValueError):
        cnf.add_clause(Clause([lit(3)]))
    assert cnf.nb_clauses() == 1


def test_from_file(tmp_path):
    path = tmp_path / "formula.cnf"
    path.write_text(TEXT + "\n", encoding="utf-8")
    assert str(CNF.from_file(path)) == TEXT
    with pytest.raises(FileNotFoundError):
        CNF.from_file(tmp_path / "missing.cnf")