import pytest

from cnfkit.cnf import Literal, Variable
from cnfkit.refiner import InterpretationRefiner


def lits(*values):
    return tuple(Literal.from_dimacs(value) for value in values)


def satisfied_count(formula, model):
    def true(lit):
        value = model[lit.variable().index]
        return value is not None and value == (lit.sign() > 0)

    return sum(1 for clause in formula if any(true(lit) for lit in clause))


def test_refine_flips_to_satisfy_clause():
    formula = [lits(1, 2)]
    refiner = InterpretationRefiner([False, False], formula)
    model = [False, False]
    refiner.init([], model)
    result = refiner.refine([], model)
    assert satisfied_count(formula, result) == len(formula)
    assert satisfied_count(formula, model) == 0


def test_refine_does_not_mutate_input_model():
    refiner = InterpretationRefiner([False, False], [lits(1, 2)])
    model = [False, False]
    refiner.init([], model)
    refiner.refine([], model)
    assert model == [False, False]


def test_refine_keeps_assumption_variables():
    formula = [lits(1, 2)]
    refiner = InterpretationRefiner([False, False], formula)
    model = [False, False]
    assumptions = list(lits(-1))
    refiner.init(assumptions, model)
    result = refiner.refine(assumptions, model)
    assert result[0] is False
    assert result[1] is True


def test_refine_keeps_protected_variables():
    formula = [lits(1, 2)]
    refiner = InterpretationRefiner([True, False], formula)
    model = [False, False]
    refiner.init([], model)
    result = refiner.refine([], model)
    assert result[0] == model[0]
    assert result[1] is True


def test_refine_never_breaks_a_satisfied_clause():
    formula = [lits(1), lits(-1, 2)]
    refiner = InterpretationRefiner([False, False], formula)
    model = [True, False]
    refiner.init([], model)
    result = refiner.refine([], model)
    assert result[0] == model[0]
    assert satisfied_count(formula, result) == len(formula)


def test_clause_satisfied_by_assumption_is_left_alone():
    refiner = InterpretationRefiner([False, False], [lits(1, 2)])
    model = [False, True]
    assumptions = list(lits(2))
    refiner.init(assumptions, model)
    assert refiner.refine(assumptions, model) == model


def test_selector_assumption_satisfies_its_clause():
    refiner = InterpretationRefiner([False, False, True], [lits(1, 2)])
    refiner.init_clauses_with_exist(3, [0], lits(3))
    model = [False, False, True]
    assumptions = list(lits(3))
    refiner.init(assumptions, model)
    assert refiner.refine(assumptions, model) == model


def test_too_many_selectors_rejected():
    refiner = InterpretationRefiner([False, False, False], [lits(1, 2)])
    with pytest.raises(ValueError):
        refiner.init_clauses_with_exist(3, [0], lits(3, 2))


def test_selector_outside_variables_rejected():
    refiner = InterpretationRefiner([False, False], [lits(1, 2)])
    with pytest.raises(ValueError):
        refiner.init_clauses_with_exist(2, [0], lits(5))


def test_transfer_pure_literal():
    formula = [lits(1, 2), lits(1, -2)]
    refiner = InterpretationRefiner([False, False], formula)
    model = [False, False]
    refiner.init([], model)
    assumptions, result = refiner.transfer_pure_literals([], model)
    assert assumptions == [Literal.from_dimacs(1)]
    assert result[0] is True
    assert result[1] == model[1]
    assert satisfied_count(formula, result) == len(formula)


def test_transfer_ignores_protected_literals():
    refiner = InterpretationRefiner([True, False], [lits(1, 2)])
    model = [False, False]
    refiner.init([], model)
    assumptions, result = refiner.transfer_pure_literals([], model)
    assert assumptions == [Literal.from_dimacs(2)]
    assert result[0] == model[0]
    assert result[1] is True


def test_transfer_keeps_existing_assumptions_first():
    refiner = InterpretationRefiner([False, False, False], [lits(1, 2), lits(-3, 2)])
    model = [False, False, False]
    start = list(lits(1))
    refiner.init(start, model)
    assumptions, _ = refiner.transfer_pure_literals(start, model)
    assert assumptions[0] == start[0]
    assert Literal.from_dimacs(1) not in assumptions[1:]


def test_should_be_relaxed_single_existential():
    refiner = InterpretationRefiner([False, True], [lits(1, 2)])
    refiner.init_clauses_with_exist(2, [0], [])
    refiner.init([], [False, False])
    assert refiner.should_be_relaxed() == [Variable.from_dimacs(1)]


def test_should_be_relaxed_none_when_clause_depends_on_them():
    refiner = InterpretationRefiner([False, False, False], [lits(1, 2), lits(-1, 3)])
    refiner.init_clauses_with_exist(3, [0, 1], [])
    refiner.init([], [False, False, False])
    assert refiner.should_be_relaxed() == []


def test_should_be_relaxed_without_setup_is_empty():
    refiner = InterpretationRefiner([False, False], [lits(1, 2)])
    refiner.init([], [False, False])
    assert refiner.should_be_relaxed() == []