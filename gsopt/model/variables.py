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

from gsopt.errors import InvalidVariableDeclaration
from gsopt.expressions.terms import ExpressionKind, OperandBase

DEFAULT_LOWER_BOUND = 1e-6


def _positive_or_none(name, field, val):
    if val is None:
        return None
    if isinstance(val, bool):
        raise InvalidVariableDeclaration(
            'The %s of variable "%s" must be a real number, got %r' % (field, name, val)
        )
    try:
        val = float(val)
    except (TypeError, ValueError):
        raise InvalidVariableDeclaration(
            'The %s of variable "%s" must be a real number, got %r' % (field, name, val)
        )
    if math.isnan(val) or not val > 0:
        raise InvalidVariableDeclaration(
            'The %s of variable "%s" must be strictly positive, got %s'
            % (field, name, val)
        )
    return val


class Variable(OperandBase):
    """A strictly positive decision variable owned by a GP/SP model.

    Variables are created through ``model.add_variable`` and compare and hash
    by identity.  In the operator algebra a variable behaves like the
    monomial ``1.0 * x``.
    """

    __slots__ = (
        '_model',
        '_index',
        '_name',
        '_lb',
        '_ub',
        '_lb_declared',
        '_ub_declared',
        '_fixed',
        '_start',
        '_linearization_points',
    )

    _kind = ExpressionKind.VARIABLE

    def __init__(self, model, index, name, lb=None, ub=None, fixed=None, start=None):
        lb = _positive_or_none(name, 'lower bound', lb)
        ub = _positive_or_none(name, 'upper bound', ub)
        fixed = _positive_or_none(name, 'fixed value', fixed)
        start = _positive_or_none(name, 'start value', start)
        if fixed is not None and (lb is not None or ub is not None):
            raise InvalidVariableDeclaration(
                'Variable "%s" cannot be both fixed and bounded' % (name,)
            )
        if lb is not None and math.isinf(lb):
            raise InvalidVariableDeclaration(
                'Variable "%s" has an infinite lower bound' % (name,)
            )
        if ub is not None and math.isinf(ub):
            ub = None
        if lb is not None and ub is not None and lb > ub:
            raise InvalidVariableDeclaration(
                'Variable "%s" has lower bound %s greater than upper bound %s'
                % (name, lb, ub)
            )
        if lb is None and ub is not None and ub < DEFAULT_LOWER_BOUND:
            raise InvalidVariableDeclaration(
                'Variable "%s" has upper bound %s below the default lower '
                'bound %s' % (name, ub, DEFAULT_LOWER_BOUND)
            )
        self._model = model
        self._index = index
        self._name = name
        self._lb_declared = lb is not None
        self._ub_declared = ub is not None
        self._lb = lb if lb is not None else DEFAULT_LOWER_BOUND
        self._ub = ub
        self._fixed = fixed
        self._start = start
        self._linearization_points = []

    @property
    def model(self):
        return self._model

    @property
    def index(self):
        return self._index

    @property
    def name(self):
        return self._name

    @property
    def lb(self):
        return self._lb

    @property
    def ub(self):
        return self._ub

    @property
    def fixed(self):
        return self._fixed

    @property
    def start(self):
        return self._start

    def is_fixed(self):
        return self._fixed is not None

    def has_declared_lb(self):
        return self._lb_declared

    def has_declared_ub(self):
        return self._ub_declared

    @property
    def linearization_points(self):
        return tuple(self._linearization_points)

    def add_linearization_point(self, val):
        self._linearization_points.append(float(val))

    def latest_linearization_point(self):
        if not self._linearization_points:
            return None
        return self._linearization_points[-1]

    def initial_point(self):
        """The point the next linearization is taken at.

        Preference order: the last recorded iterate, the start value, the
        midpoint of two declared bounds, the single declared bound, and
        finally ``1.0``.  Fixed variables always use their fixed value.
        """
        if self._fixed is not None:
            return self._fixed
        if self._linearization_points:
            return self._linearization_points[-1]
        if self._start is not None:
            return self._start
        if self._lb_declared and self._ub_declared:
            return 0.5 * (self._lb + self._ub)
        if self._lb_declared:
            return self._lb
        if self._ub_declared:
            return self._ub
        return 1.0

    def evaluate(self, point):
        return point[self]

    def __str__(self):
        return self._name

    def __repr__(self):
        return 'Variable(%s, index=%d)' % (self._name, self._index)
