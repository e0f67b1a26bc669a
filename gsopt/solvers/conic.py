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

"""A small conic intermediate representation.

A :class:`ConicProgram` has bounded scalar columns, affine equality rows
(``expr == 0``), affine inequality rows (``expr <= 0``), exponential cone
constraints and a linear objective.  The exponential cone is

    K_exp = closure{(a, b, c) : b > 0, b * exp(a / b) <= c}

and every cone constraint here has a constant ``b > 0``.
"""

import math

import pyomo.environ as pyo
from pyomo.opt import TerminationCondition


class AffineExpression(object):
    """``sum(coef * x[col]) + constant`` over the columns of a program"""

    __slots__ = ('coeffs', 'constant')

    def __init__(self, coeffs=None, constant=0.0):
        self.coeffs = {}
        if coeffs:
            for col, coef in coeffs.items():
                self.add_term(col, coef)
        self.constant = float(constant)

    def add_term(self, col, coef):
        coef = float(coef)
        if coef == 0:
            return self
        val = self.coeffs.get(col, 0.0) + coef
        if val == 0:
            del self.coeffs[col]
        else:
            self.coeffs[col] = val
        return self

    def copy(self):
        return AffineExpression(self.coeffs, self.constant)

    def shifted(self, delta):
        ans = self.copy()
        ans.constant += delta
        return ans

    def evaluate(self, x):
        return self.constant + math.fsum(c * x[i] for i, c in self.coeffs.items())

    def __str__(self):
        parts = ['%s*x[%d]' % (c, i) for i, c in sorted(self.coeffs.items())]
        parts.append(str(self.constant))
        return ' + '.join(parts)


class ExponentialCone(object):
    __slots__ = ('a', 'b', 'c')

    def __init__(self, a, b, c):
        self.a = a
        self.b = b
        self.c = c


class ConicProgram(object):
    def __init__(self):
        self.variable_names = []
        self.lower_bounds = []
        self.upper_bounds = []
        self.starts = []
        self.rows = []
        self.row_relations = []
        self.cones = []
        self.objective = AffineExpression()
        self.sense = pyo.minimize

    def num_variables(self):
        return len(self.variable_names)

    def num_rows(self):
        return len(self.rows)

    def add_variable(self, name, lb=-math.inf, ub=math.inf, start=0.0):
        if lb is None:
            lb = -math.inf
        if ub is None:
            ub = math.inf
        if lb > ub:
            raise ValueError(
                'Column "%s" has lower bound %s above upper bound %s' % (name, lb, ub)
            )
        self.variable_names.append(name)
        self.lower_bounds.append(float(lb))
        self.upper_bounds.append(float(ub))
        self.starts.append(float(start))
        return len(self.variable_names) - 1

    def _add_row(self, expr, relation):
        for col in expr.coeffs:
            if not 0 <= col < len(self.variable_names):
                raise IndexError('Row references unknown column %s' % (col,))
        self.rows.append(expr)
        self.row_relations.append(relation)
        return len(self.rows) - 1

    def add_equality(self, expr):
        """Add the row ``expr == 0`` and return its index"""
        return self._add_row(expr, '==')

    def add_inequality(self, expr):
        """Add the row ``expr <= 0`` and return its index"""
        return self._add_row(expr, '<=')

    def add_exponential_cone(self, a, b, c):
        """Add ``(a, b, c) in K_exp`` for affine ``a``, ``c`` and a constant
        ``b > 0``"""
        b = float(b)
        if not b > 0:
            raise ValueError(
                'Exponential cone constraints require a positive constant b, '
                'got %s' % (b,)
            )
        self.cones.append(ExponentialCone(a, b, c))
        return len(self.cones) - 1

    def set_objective(self, expr, sense=pyo.minimize):
        if sense not in (pyo.minimize, pyo.maximize):
            raise ValueError('Unknown objective sense %s' % (sense,))
        self.objective = expr
        self.sense = sense


class ConicResults(object):
    def __init__(self):
        self.termination_condition = TerminationCondition.unknown
        self.status = None
        self.x = None
        # sensitivity of the objective, in its own sense, to each row's rhs
        self.row_duals = None
        self.objective = None
        self.wallclock_time = None

    def has_primal(self):
        return self.x is not None
