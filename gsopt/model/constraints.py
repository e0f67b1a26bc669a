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

"""Normalization of user relations into GP canonical or SP general form.

A relation ``lhs (==|<=|>=) rhs`` is rewritten as the signomial
``d = lhs - rhs``, whose positive part ``P`` and negated negative part ``Q``
are posynomials.  The relation is then one of

- ``P/Q == 1`` with ``P`` and ``Q`` both monomials,
- ``P/Q <= 1`` with ``Q`` a monomial (a posynomial inequality), or
- ``P - Q <= 0`` with ``Q`` a posynomial (a true signomial inequality, which
  only signomial models accept).
"""

import math

from gsopt.errors import (
    InvalidConstraintForm,
    ZeroRightHandSide,
    CrossModelVariable,
)
from gsopt.expressions.terms import (
    ExpressionKind,
    MonomialTerm,
    MonomialExpression,
    PosynomialExpression,
    SignomialExpression,
)
from gsopt.expressions.classify import (
    expression_kind,
    is_signomial,
    terms_of,
    variables_of,
)

RELATIONS = ('==', '<=', '>=')


class ConstraintRef(object):
    """Handle to a constraint, by position in its owning model"""

    __slots__ = ('_model', '_index')

    def __init__(self, model, index):
        self._model = model
        self._index = index

    @property
    def model(self):
        return self._model

    @property
    def index(self):
        return self._index

    def __eq__(self, other):
        if not isinstance(other, ConstraintRef):
            return NotImplemented
        return self._model is other._model and self._index == other._index

    def __hash__(self):
        return hash((id(self._model), self._index))

    def __repr__(self):
        return 'ConstraintRef(%d)' % (self._index,)


class ConstraintData(object):
    """Immutable record of a normalized constraint.

    ``function`` is compared against ``rhs`` (``1`` for the canonical GP
    forms, ``0`` for a true signomial) with ``relation`` (``'=='`` or
    ``'<='``).  ``posynomials`` holds the ``(P, Q)`` pair the record was
    built from, already oriented so that the relation reads ``P <= Q``
    (or ``P == Q``).
    """

    __slots__ = (
        '_function',
        '_relation',
        '_rhs',
        '_name',
        '_negate_dual',
        '_is_signomial',
        '_posynomials',
    )

    def __init__(
        self,
        function,
        relation,
        rhs,
        name='',
        negate_dual=False,
        is_signomial=False,
        posynomials=None,
    ):
        self._function = function
        self._relation = relation
        self._rhs = rhs
        self._name = name
        self._negate_dual = negate_dual
        self._is_signomial = is_signomial
        self._posynomials = posynomials

    @property
    def function(self):
        return self._function

    @property
    def relation(self):
        return self._relation

    @property
    def rhs(self):
        return self._rhs

    @property
    def name(self):
        return self._name

    @property
    def is_equality(self):
        return self._relation == '=='

    @property
    def is_valid(self):
        # records are only built for relations that passed normalization
        return True

    @property
    def negate_dual(self):
        return self._negate_dual

    @property
    def is_signomial(self):
        return self._is_signomial

    @property
    def posynomials(self):
        return self._posynomials

    def __str__(self):
        if self._name:
            return '%s: %s %s %s' % (self._name, self._function, self._relation, self._rhs)
        return '%s %s %s' % (self._function, self._relation, self._rhs)

    def __repr__(self):
        return 'ConstraintData(%s)' % (str(self),)


def collapse_terms(terms):
    """Merge terms with identical exponent maps and drop zero coefficients.

    The first occurrence of each exponent map fixes the position of the
    merged term.
    """
    order = []
    groups = {}
    for term in terms:
        key = frozenset(term.exponents.items())
        if key not in groups:
            order.append(key)
            groups[key] = [term]
        else:
            groups[key].append(term)
    ans = []
    for key in order:
        group = groups[key]
        if len(group) == 1:
            coef = group[0].coefficient
        else:
            coef = math.fsum(t.coefficient for t in group)
        if coef != 0:
            ans.append(MonomialTerm(coef, group[0].exponents))
    return ans


def _is_literal_zero(expr):
    kind = expression_kind(expr)
    if kind == ExpressionKind.SCALAR:
        return expr == 0
    if kind == ExpressionKind.MONOMIAL:
        return expr.term.is_constant() and expr.coefficient == 0
    return False


def _monomial_ratio(p_term, q_term):
    return p_term.multiply(q_term.reciprocal())


def normalize_constraint(model, lhs, relation, rhs=1, name='', allow_signomial=False):
    """Validate ``lhs relation rhs`` and return its :class:`ConstraintData`.

    Raises :class:`InvalidConstraintForm` (or one of its subclasses) or
    :class:`CrossModelVariable` without touching ``model``.
    """
    if relation not in RELATIONS:
        raise InvalidConstraintForm(
            'Unknown relation "%s"; expected one of %s' % (relation, RELATIONS)
        )
    for side in (lhs, rhs):
        if not is_signomial(side):
            raise InvalidConstraintForm(
                'Constraint sides must be real numbers or GP/SP expressions, '
                'got %s' % (side,)
            )
    for var in variables_of(lhs) | variables_of(rhs):
        if var.model is not model:
            raise CrossModelVariable(
                'Variable "%s" belongs to a different model' % (var.name,)
            )

    diff = collapse_terms(
        tuple(terms_of(lhs)) + tuple(t.negate() for t in terms_of(rhs))
    )
    p_terms = tuple(t for t in diff if t.coefficient > 0)
    q_terms = tuple(t.negate() for t in diff if t.coefficient < 0)

    # with nothing moved across, a zero right-hand side has no log image
    if not q_terms and _is_literal_zero(rhs):
        raise ZeroRightHandSide(
            'Constraint "%s" compares %s against zero; move a term to the '
            'right-hand side so both sides are nonzero' % (name, lhs)
        )

    negate_dual = False
    if relation == '>=':
        p_terms, q_terms = q_terms, p_terms
        negate_dual = True
    P = PosynomialExpression(p_terms)
    Q = PosynomialExpression(q_terms)

    if relation == '==':
        if len(p_terms) != 1 or len(q_terms) != 1:
            raise InvalidConstraintForm(
                'Equality constraint "%s" must relate two monomials; got %s == %s'
                % (name, P, Q)
            )
        return ConstraintData(
            MonomialExpression(_monomial_ratio(p_terms[0], q_terms[0])),
            '==',
            1,
            name=name,
            posynomials=(P, Q),
        )

    if not p_terms:
        raise InvalidConstraintForm(
            'Inequality constraint "%s" reduces to %s <= %s, which holds for '
            'every positive point' % (name, 0, Q)
        )
    if not q_terms:
        raise InvalidConstraintForm(
            'Inequality constraint "%s" reduces to %s <= %s, which no positive '
            'point satisfies' % (name, P, 0)
        )
    if len(q_terms) == 1:
        ratio = tuple(_monomial_ratio(t, q_terms[0]) for t in p_terms)
        if len(ratio) == 1:
            function = MonomialExpression(ratio[0])
        else:
            function = PosynomialExpression(ratio)
        return ConstraintData(
            function,
            '<=',
            1,
            name=name,
            negate_dual=negate_dual,
            posynomials=(P, Q),
        )
    if not allow_signomial:
        raise InvalidConstraintForm(
            'Constraint "%s" (%s <= %s) is not GP-compatible: the larger side '
            'must be a monomial' % (name, P, Q)
        )
    return ConstraintData(
        SignomialExpression(p_terms + tuple(t.negate() for t in q_terms)),
        '<=',
        0,
        name=name,
        negate_dual=negate_dual,
        is_signomial=True,
        posynomials=(P, Q),
    )
