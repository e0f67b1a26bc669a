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

import math

import pytest
import pyomo.environ as pyo
from pyomo.common.errors import DeveloperError

from gsopt import GPModel, SPModel
from gsopt.errors import CrossModelVariable, InvalidObjectiveForm
from gsopt.expressions import MonomialTerm
from gsopt.solvers.conic import AffineExpression, ConicProgram
from gsopt.tools.logTransform import (
    log_term,
    lower_model,
    objective_sense,
    validate_objective,
)


def _lower(m, **kwds):
    return lower_model(
        m.variables,
        list(enumerate(m.constraints)),
        m.objective_sense,
        m.objective,
        **kwds
    )


class TestColumns:
    def test_layout_and_bounds(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y', lb=0.5, ub=4.0)
        f = m.add_variable('f', fixed=2.0)
        m.set_objective(pyo.minimize, x * f)
        lowered = _lower(m)
        program = lowered.program

        assert lowered.variable_columns == {x: 0, y: 1, f: 2}
        assert program.variable_names == ['log(x)', 'log(y)', 'log(f)']
        assert program.lower_bounds == pytest.approx(
            [math.log(1e-6), math.log(0.5), math.log(2.0)]
        )
        assert program.upper_bounds[0] == math.inf
        assert program.upper_bounds[1:] == pytest.approx([math.log(4.0), math.log(2.0)])
        assert program.starts == pytest.approx([0.0, math.log(2.25), math.log(2.0)])

    def test_single_term_objective_is_affine(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.set_objective('min', 3 * x / y)
        lowered = _lower(m)
        program = lowered.program
        assert program.num_variables() == 2
        assert program.cones == []
        assert program.sense == pyo.minimize
        assert program.objective.coeffs == {0: 1.0, 1: -1.0}
        assert program.objective.constant == pytest.approx(math.log(3.0))

    def test_maximize(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.set_objective('max', x * y**2)
        program = _lower(m).program
        assert program.sense == pyo.maximize
        assert program.objective.coeffs == {0: 1.0, 1: 2.0}


class TestConstraintRows:
    def test_monomial_row(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x * y, '>=', 1)
        m.set_objective('min', x + y)
        lowered = _lower(m)
        program = lowered.program
        assert lowered.constraint_rows == {0: 0}
        row = program.rows[0]
        assert program.row_relations[0] == '<='
        assert row.coeffs == {0: -1.0, 1: -1.0}
        assert row.constant == 0.0

    def test_equality_row(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x, '==', 2 * y)
        m.set_objective('min', x)
        program = _lower(m).program
        assert program.row_relations == ['==']
        assert program.rows[0].coeffs == {0: 1.0, 1: -1.0}
        assert program.rows[0].constant == pytest.approx(math.log(0.5))

    def test_posynomial_row(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x + y, '<=', 10)
        m.set_objective('max', x)
        lowered = _lower(m)
        program = lowered.program

        # one nonnegative auxiliary column per term
        assert program.variable_names[2:] == ['c[0]_u[0]', 'c[0]_u[1]']
        assert program.lower_bounds[2:] == [0.0, 0.0]
        assert program.starts[2:] == pytest.approx([0.1, 0.1])
        assert len(program.cones) == 2
        cone = program.cones[0]
        assert cone.a.coeffs == {0: 1.0}
        assert cone.a.constant == pytest.approx(math.log(0.1))
        assert cone.b == 1.0
        assert cone.c.coeffs == {2: 1.0}

        row = lowered.constraint_rows[0]
        assert program.rows[row].coeffs == {2: 1.0, 3: 1.0}
        assert program.rows[row].constant == -1.0
        assert program.row_relations[row] == '<='

    def test_named_constraint_columns(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x + y, '<=', 10, name='capacity')
        m.set_objective('max', x)
        program = _lower(m).program
        assert program.variable_names[2] == 'capacity_u[0]'

    def test_posynomial_objective(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x * y, '>=', 1)
        m.set_objective('min', x + y)
        lowered = _lower(m)
        program = lowered.program

        t = program.variable_names.index('t')
        assert program.lower_bounds[t] == -math.inf
        assert program.starts[t] == pytest.approx(math.log(2.0))
        assert lowered.log_objective.coeffs == {t: 1.0}
        assert program.objective.coeffs == {t: 1.0}
        assert len(program.cones) == 2
        for cone in program.cones:
            assert cone.a.coeffs[t] == -1.0
        # the monomial row plus the sum(u) <= 1 row of the objective
        assert program.num_rows() == 2

    def test_signomial_record_rejected(self):
        m = SPModel()
        x, y, z = (m.add_variable(n) for n in 'xyz')
        m.add_constraint(x + y, '<=', z + 1)
        m.set_objective('min', x)
        with pytest.raises(DeveloperError):
            _lower(m)


class TestSlacks:
    def test_slack_columns_and_penalty(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        m.add_constraint(x * y, '>=', 1)
        m.set_objective('min', x)
        lowered = _lower(m, slack_rows=(0,), pccp_penalty=3.0)
        program = lowered.program

        assert lowered.slack_columns == {0: 2}
        assert program.variable_names[2] == 'slack[0]'
        assert program.lower_bounds[2] == 0.0
        assert program.rows[0].coeffs == {0: -1.0, 1: -1.0, 2: -1.0}
        assert program.objective.coeffs == {0: 1.0, 2: 3.0}
        assert lowered.log_objective.coeffs == {0: 1.0}

    def test_penalty_sign_when_maximizing(self):
        m = GPModel()
        x = m.add_variable('x')
        m.add_constraint(x, '<=', 2)
        m.set_objective('max', x)
        program = _lower(m, slack_rows=(0,)).program
        assert program.objective.coeffs == {0: 1.0, 1: -5.0}


class TestObjectiveValidation:
    def test_senses(self):
        assert objective_sense('min') == pyo.minimize
        assert objective_sense('maximize') == pyo.maximize
        assert objective_sense(pyo.maximize) == pyo.maximize
        with pytest.raises(InvalidObjectiveForm):
            objective_sense('sideways')
        with pytest.raises(InvalidObjectiveForm):
            objective_sense([])

    def test_forms(self):
        m = GPModel()
        x = m.add_variable('x')
        y = m.add_variable('y')
        assert validate_objective('min', x + y) == pyo.minimize
        assert validate_objective('min', 4) == pyo.minimize
        with pytest.raises(InvalidObjectiveForm):
            validate_objective('min', x - y)
        with pytest.raises(InvalidObjectiveForm):
            validate_objective('max', x + y)
        with pytest.raises(InvalidObjectiveForm):
            validate_objective('min', (x + y) ** 2)
        with pytest.raises(InvalidObjectiveForm):
            m.set_objective('max', x + y)
        assert m.objective is None

    def test_foreign_objective(self):
        m = GPModel()
        z = GPModel().add_variable('z')
        with pytest.raises(CrossModelVariable):
            m.set_objective('min', z)
        assert m.objective is None


class TestConicProgram:
    def test_log_term(self):
        m = GPModel()
        x = m.add_variable('x')
        expr = log_term(MonomialTerm(math.e, {x: 2}), {x: 4})
        assert expr.coeffs == {4: 2.0}
        assert expr.constant == pytest.approx(1.0)
        with pytest.raises(DeveloperError):
            log_term(MonomialTerm(-1.0, {x: 1}), {x: 0})

    def test_affine_expression(self):
        e = AffineExpression({0: 1.0, 1: 2.0}, constant=1.0)
        e.add_term(0, -1.0)
        assert e.coeffs == {1: 2.0}
        assert e.evaluate([10.0, 3.0]) == 7.0
        assert e.shifted(2.0).constant == 3.0
        assert e.constant == 1.0

    def test_program_validation(self):
        p = ConicProgram()
        with pytest.raises(ValueError):
            p.add_variable('bad', lb=2.0, ub=1.0)
        col = p.add_variable('ok')
        with pytest.raises(IndexError):
            p.add_inequality(AffineExpression({col + 1: 1.0}))
        with pytest.raises(ValueError):
            p.add_exponential_cone(AffineExpression(), 0.0, AffineExpression())
        with pytest.raises(ValueError):
            p.set_objective(AffineExpression(), 'sideways')
