#  ___________________________________________________________________________
#
#  Pyomo: Python Optimization Modeling Objects
#  Copyright (c) 2008-2023
#  National Technology and Engineering Solutions of Sandia, LLC
#  Under the terms of Contract DE-NA0003525 with National Technology and
#  Engineering Solutions of Sandia, LLC, the U.S. Government retains certain
#  rights in this software.
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""End-to-end geometric programming solves through cvxopt."""

import logging
import math

import pytest
import pyomo.environ as pyo
from pyomo.common.dependencies import attempt_import
from pyomo.opt import TerminationCondition

from gsopt import GPModel
from gsopt.errors import DualUnavailable, InvalidObjectiveForm, NotSolvedYet
from gsopt.solvers.conic import AffineExpression, ConicProgram
from gsopt.solvers.cvxopt import CVXOPT

cvxopt, cvxopt_available = attempt_import('cvxopt')

pytestmark = pytest.mark.skipif(not cvxopt_available, reason='cvxopt is not available')


class TestScenarios:
    def test_cube(self):
        # minimize x + y + z  s.t.  xyz >= 1,  x/y <= 1
        m = GPModel()
        x = m.add_variable('x', lb=0.1)
        y = m.add_variable('y', lb=0.1)
        z = m.add_variable('z', lb=0.1)
        volume = m.add_constraint(x * y * z, '>=', 1)
        m.add_constraint(x / y, '<=', 1)
        m.set_objective(pyo.minimize, x + y + z)
        m.optimize()

        assert m.termination_status() == TerminationCondition.optimal
        assert m.objective_value() == pytest.approx(3.0, rel=1e-5)
        # the objective is flat to second order along xy = const, so x and y
        # are only as accurate as the square root of the solver tolerance
        for v in (x, y, z):
            assert m.value(v) == pytest.approx(1.0, rel=5e-3)
        assert m.value(x * y * z) == pytest.approx(1.0, rel=1e-5)
        assert m.value(x / y) <= 1.0 + 1e-6
        assert m.dual(volume) == pytest.approx(1.0, rel=1e-3)
        assert m.solve_time() >= 0.0

    def test_box(self):
        # minimize w*h  s.t.  2(w + h) <= 10,  w*h >= 2
        m = GPModel()
        w = m.add_variable('w')
        h = m.add_variable('h')
        m.add_constraint(2 * (w + h), '<=', 10)
        m.add_constraint(w * h, '>=', 2)
        m.set_objective('min', w * h)
        m.optimize()

        assert m.termination_status() == TerminationCondition.optimal
        assert m.objective_value() == pytest.approx(2.0, rel=1e-5)
        assert m.value(w * h) == pytest.approx(2.0, rel=1e-5)
        assert m.value(w + h) <= 5.0 + 1e-6

    def test_maximize_area(self):
        # maximize x*y  s.t.  3x + 4y <= 10,  x <= 5,  y <= 5
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        limit = m.add_constraint(3 * x + 4 * y, '<=', 10)
        m.add_constraint(x, '<=', 5)
        m.add_constraint(y, '<=', 5)
        m.set_objective('max', x * y)
        m.optimize()

        assert m.termination_status() == TerminationCondition.optimal
        assert m.value(3 * x + 4 * y) == pytest.approx(10.0, rel=1e-5)
        assert m.value(x) == pytest.approx(5.0 / 3.0, rel=1e-4)
        assert m.value(y) == pytest.approx(5.0 / 4.0, rel=1e-4)
        assert m.objective_value() == pytest.approx(25.0 / 12.0, rel=1e-5)
        # area grows as the square of the right-hand side scale
        assert m.dual(limit) == pytest.approx(2 * 25.0 / 12.0, rel=1e-3)

    def test_posynomial_constraint_monomial_objective(self):
        m = GPModel()
        x, y, z = (m.add_variable(n) for n in 'xyz')
        m.add_constraint(x * y + y * z + x * z, '<=', 3)
        m.set_objective('min', 1 / (x * y * z))
        m.optimize()
        assert m.objective_value() == pytest.approx(1.0, rel=1e-5)
        assert m.value(x * y * z) == pytest.approx(1.0, rel=1e-4)

    def test_fixed_variable(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y', fixed=2.0)
        m.add_constraint(x * y, '>=', 1)
        m.set_objective('min', x + y)
        m.optimize()
        assert m.value(y) == pytest.approx(2.0)
        assert m.value(x) == pytest.approx(0.5, rel=1e-4)
        assert m.objective_value() == pytest.approx(2.5, rel=1e-5)

    def test_infeasible(self, caplog):
        m = GPModel()
        x = m.add_variable('x')
        m.add_constraint(x, '>=', 2)
        m.add_constraint(x, '<=', 1)
        m.set_objective('min', x)
        with caplog.at_level(logging.WARNING, logger='gsopt'):
            m.optimize()
        assert m.termination_status() != TerminationCondition.optimal
        assert 'may not be optimal' in caplog.text
        with pytest.raises(NotSolvedYet):
            m.value(x)
        with pytest.raises(NotSolvedYet):
            m.objective_value()


class TestQueries:
    @pytest.fixture
    def solved(self):
        m = GPModel('cube')
        x = m.add_variable('x', lb=0.1)
        y = m.add_variable('y', lb=0.1)
        m.add_constraint(x * y, '>=', 4, name='area')
        m.set_objective('min', x + y)
        return m.optimize(), x, y

    def test_values(self, solved):
        m, x, y = solved
        assert m.value(x) == pytest.approx(2.0, rel=1e-4)
        assert m.value(x + 2 * y) == pytest.approx(6.0, rel=1e-4)
        assert m.value(x - y) == pytest.approx(0.0, abs=1e-4)
        assert m.value(3) == 3.0
        with pytest.raises(TypeError):
            m.value('x')

    def test_dual_unavailable(self, solved):
        m, x, _ = solved
        late = m.add_constraint(x, '<=', 10)
        with pytest.raises(DualUnavailable):
            m.dual(late)

    def test_summary(self, solved):
        m, _, _ = solved
        text = str(m.solution_summary())
        assert text.startswith('Geometric Programming Solution Summary:')
        assert ' ├ Variables: 2' in text
        assert ' └ Constraints: 1' in text
        assert 'Variable values' not in text
        verbose = str(m.solution_summary(verbose=True))
        assert 'x = ' in verbose
        assert 'Constraint duals' in verbose

    def test_resolve_replaces_solution(self, solved):
        m, x, y = solved
        first = m.solution_info
        m.add_constraint(x, '>=', 3)
        m.optimize()
        assert m.solution_info is not first
        assert m.value(x) == pytest.approx(3.0, rel=1e-4)
        assert m.value(y) == pytest.approx(4.0 / 3.0, rel=1e-4)


class TestNotSolved:
    def test_before_optimize(self):
        m = GPModel()
        x = m.add_variable('x')
        cref = m.add_constraint(x, '>=', 1)
        with pytest.raises(NotSolvedYet):
            m.value(x)
        with pytest.raises(NotSolvedYet):
            m.objective_value()
        with pytest.raises(DualUnavailable):
            m.dual(cref)
        assert m.termination_status() is None

    def test_missing_objective(self):
        m = GPModel()
        m.add_variable('x')
        with pytest.raises(InvalidObjectiveForm):
            m.optimize()


class TestCVXOPTInterface:
    def test_linear_program_duals(self):
        program = ConicProgram()
        col = program.add_variable('x')
        program.add_inequality(AffineExpression({col: -1.0}, constant=1.0))
        program.set_objective(AffineExpression({col: 1.0}))
        res = CVXOPT().solve(program)
        assert res.termination_condition == TerminationCondition.optimal
        assert res.x[0] == pytest.approx(1.0, rel=1e-6)
        assert res.objective == pytest.approx(1.0, rel=1e-6)
        assert res.row_duals[0] == pytest.approx(-1.0, rel=1e-5)
        assert res.wallclock_time >= 0.0

    def test_everything_fixed(self):
        program = ConicProgram()
        col = program.add_variable('x', lb=math.log(2.0), ub=math.log(2.0))
        program.add_inequality(AffineExpression({col: 1.0}, constant=-1.0))
        program.set_objective(AffineExpression({col: 1.0}))
        res = CVXOPT().solve(program)
        assert res.termination_condition == TerminationCondition.optimal
        assert res.x[0] == pytest.approx(math.log(2.0))

    def test_everything_fixed_infeasible(self):
        program = ConicProgram()
        col = program.add_variable('x', lb=1.0, ub=1.0)
        program.add_inequality(AffineExpression({col: 1.0}, constant=-0.5))
        program.set_objective(AffineExpression({col: 1.0}))
        res = CVXOPT().solve(program)
        assert res.termination_condition == TerminationCondition.infeasible
        assert not res.has_primal()

    def test_unknown_option(self, caplog):
        solver = CVXOPT()
        solver.options['not_an_option'] = 3
        solver.options['maxiters'] = 50
        program = ConicProgram()
        col = program.add_variable('x', lb=0.0)
        program.set_objective(AffineExpression({col: 1.0}))
        with caplog.at_level(logging.WARNING, logger='gsopt'):
            solver.solve(program)
        assert 'not_an_option' in caplog.text
        assert 'maxiters' not in caplog.text

    def test_available(self):
        solver = CVXOPT()
        assert solver.available()
        assert len(solver.version()) >= 2
