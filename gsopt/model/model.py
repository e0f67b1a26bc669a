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

"""Geometric and signomial programming models.

Example::

    m = GPModel()
    x = m.add_variable('x', lb=0.1)
    y = m.add_variable('y', lb=0.1)
    m.add_constraint(x * y, '>=', 1)
    m.set_objective(pyo.minimize, x + y)
    m.optimize()
    m.value(x)

"""

import pyomo.environ as pyo

from gsopt.errors import (
    CrossModelVariable,
    DualUnavailable,
    InvalidObjectiveForm,
    InvalidVariableDeclaration,
    NotSolvedYet,
)
from gsopt.expressions.classify import expression_kind, variables_of
from gsopt.expressions.terms import ExpressionKind
from gsopt.model.variables import Variable
from gsopt.model.constraints import ConstraintRef, normalize_constraint
from gsopt.model.solution import ModelSolutionInfo, SolutionSummary
from gsopt.solvers.cvxopt.cvxopt import CVXOPT
from gsopt.solvers.native.SP import SPConfig
from gsopt.solvers.solver import solve_GP, solve_SP
from gsopt.tools.logTransform import validate_objective


class GSOptModel(object):
    """Variables, constraints and objective shared by GP and SP models"""

    _allow_signomial = False

    def __init__(self, name=''):
        self.name = name
        self.solver = CVXOPT()
        self._variables = []
        self._variable_names = set()
        self._constraints = []
        self._objective = None
        self._objective_sense = None
        self._solution = ModelSolutionInfo()

    @property
    def variables(self):
        return tuple(self._variables)

    @property
    def constraints(self):
        return tuple(self._constraints)

    @property
    def objective(self):
        return self._objective

    @property
    def objective_sense(self):
        return self._objective_sense

    @property
    def solution_info(self):
        return self._solution

    def num_variables(self):
        return len(self._variables)

    def num_constraints(self):
        return len(self._constraints)

    def add_variable(self, name=None, lb=None, ub=None, fixed=None, start=None):
        index = len(self._variables)
        if name is None:
            name = 'x[%d]' % (index,)
        if name in self._variable_names:
            raise InvalidVariableDeclaration(
                'A variable named "%s" already exists in this model' % (name,)
            )
        var = Variable(self, index, name, lb=lb, ub=ub, fixed=fixed, start=start)
        self._variables.append(var)
        self._variable_names.add(name)
        return var

    def add_constraint(self, lhs, relation, rhs=1, name=''):
        con = normalize_constraint(
            self, lhs, relation, rhs, name=name, allow_signomial=self._allow_signomial
        )
        self._constraints.append(con)
        return ConstraintRef(self, len(self._constraints) - 1)

    def _check_owned(self, expr):
        for var in variables_of(expr):
            if var.model is not self:
                raise CrossModelVariable(
                    'Variable "%s" belongs to a different model' % (var.name,)
                )

    def set_objective(self, sense, expr):
        sense = validate_objective(sense, expr)
        self._check_owned(expr)
        self._objective_sense = sense
        self._objective = expr

    def _solve(self):
        raise NotImplementedError(
            '%s does not implement a solve method' % (type(self).__name__,)
        )

    def optimize(self):
        if self._objective is None:
            raise InvalidObjectiveForm('No objective function set in the model')
        self._solution = self._solve()
        return self

    def is_valid(self, obj):
        if isinstance(obj, Variable):
            return obj.model is self and 0 <= obj.index < len(self._variables)
        if isinstance(obj, ConstraintRef):
            return obj.model is self and 0 <= obj.index < len(self._constraints)
        return False

    def constraint(self, cref):
        if not self.is_valid(cref) or not isinstance(cref, ConstraintRef):
            raise ValueError('%r is not a constraint of this model' % (cref,))
        return self._constraints[cref.index]

    def value(self, expr):
        """Value of a variable or expression at the last solution"""
        kind = expression_kind(expr)
        if kind == ExpressionKind.SCALAR:
            return float(expr)
        if kind == ExpressionKind.INVALID:
            raise TypeError('Cannot evaluate object of type %s' % (type(expr).__name__,))
        self._check_owned(expr)
        values = self._solution.variable_values
        if not values:
            raise NotSolvedYet('The model has no solution; call optimize() first')
        if kind == ExpressionKind.VARIABLE:
            return values[expr.index]
        point = {var: values[var.index] for var in variables_of(expr)}
        return expr.evaluate(point)

    def objective_value(self):
        if self._solution.objective_value is None:
            raise NotSolvedYet('The model has no objective value; call optimize() first')
        return self._solution.objective_value

    def termination_status(self):
        return self._solution.termination_status

    def solve_time(self):
        return self._solution.solve_time

    def dual(self, cref):
        con = self.constraint(cref)
        try:
            return self._solution.constraint_duals[cref.index]
        except KeyError:
            raise DualUnavailable(
                'No dual value is available for constraint %s' % (con,)
            )

    def solution_summary(self, verbose=False):
        info = self._solution
        values = {}
        for var in self._variables:
            if var.index in info.variable_values:
                values[var.name] = info.variable_values[var.index]
        return SolutionSummary(
            is_gp=isinstance(self, GPModel),
            termination_status=info.termination_status,
            objective_value=info.objective_value,
            solve_time=info.solve_time,
            variable_count=self.num_variables(),
            constraint_count=self.num_constraints(),
            variable_values=values,
            constraint_duals=dict(info.constraint_duals),
            iterations=info.iterations,
            verbose=verbose,
        )

    def __str__(self):
        lines = ['%s %s' % (type(self).__name__, self.name)]
        if self._objective is not None:
            sense = 'min' if self._objective_sense == pyo.minimize else 'max'
            lines.append('  %s %s' % (sense, self._objective))
        for con in self._constraints:
            lines.append('  s.t. %s' % (con,))
        return '\n'.join(lines)


class GPModel(GSOptModel):
    """A geometric program, solved with a single conic solve"""

    def _solve(self):
        return solve_GP(self, self.solver)


class SPModel(GSOptModel):
    """A signomial program, solved by successive convexification.

    Constraints of the form ``posynomial <= posynomial`` are accepted and
    replaced by a local monomial approximation on each iteration; ``config``
    holds the iteration controls (see :class:`SPConfig`).
    """

    _allow_signomial = True

    def __init__(self, name=''):
        super(SPModel, self).__init__(name)
        self.config = SPConfig()

    def _solve(self):
        return solve_SP(self, self.solver, self.config)
