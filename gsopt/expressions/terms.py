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

"""Term and expression types for geometric and signomial programming.

The algebra is closed over four kinds of operands:

- ``MonomialTerm``: a signed coefficient times a product of variables raised
  to real powers.  This is the primitive every expression is built from.
- ``MonomialExpression``: exactly one term with a positive coefficient (or a
  degenerate scalar with no variables).
- ``PosynomialExpression``: an ordered sum of terms with positive
  coefficients.
- ``SignomialExpression``: an ordered sum of terms with arbitrary signs.

Operations that leave the algebra (e.g. raising a posynomial to a power)
produce a ``NonGPExpression``, which can be evaluated but never lowered.
"""

import enum
import math
from types import MappingProxyType

from gsopt.errors import InvalidCoefficient


class ExpressionKind(enum.IntEnum):
    INVALID = 0
    SCALAR = 1
    VARIABLE = 2
    MONOMIAL = 3
    POSYNOMIAL = 4
    SIGNOMIAL = 5
    NONGP = 6


class MonomialTerm(object):
    """A coefficient multiplied by variables raised to (real) powers.

    Terms are immutable.  Exponents equal to zero are dropped, so two terms
    describing the same function of the variables compare equal.
    """

    __slots__ = ('_coefficient', '_exponents')

    def __init__(self, coefficient, exponents=None):
        self._coefficient = float(coefficient)
        exps = {}
        if exponents:
            for var, expon in exponents.items():
                expon = float(expon)
                if expon != 0.0:
                    exps[var] = expon
        self._exponents = exps

    @property
    def coefficient(self):
        return self._coefficient

    @property
    def exponents(self):
        return MappingProxyType(self._exponents)

    def is_constant(self):
        return not self._exponents

    def multiply(self, other):
        exps = dict(self._exponents)
        for var, expon in other._exponents.items():
            exps[var] = exps.get(var, 0.0) + expon
        return MonomialTerm(self._coefficient * other._coefficient, exps)

    def scale(self, factor):
        return MonomialTerm(self._coefficient * factor, self._exponents)

    def negate(self):
        return MonomialTerm(-self._coefficient, self._exponents)

    def power(self, p):
        p = float(p)
        if self._coefficient < 0 and not p.is_integer():
            # would leave the reals
            return None
        return MonomialTerm(
            self._coefficient**p, {v: e * p for v, e in self._exponents.items()}
        )

    def reciprocal(self):
        if self._coefficient == 0:
            raise ZeroDivisionError('Cannot divide by a zero-valued monomial term')
        return MonomialTerm(
            1.0 / self._coefficient, {v: -e for v, e in self._exponents.items()}
        )

    def evaluate(self, point):
        val = self._coefficient
        for var, expon in self._exponents.items():
            val *= point[var] ** expon
        return val

    def __eq__(self, other):
        if not isinstance(other, MonomialTerm):
            return NotImplemented
        return (
            self._coefficient == other._coefficient
            and self._exponents == other._exponents
        )

    def __hash__(self):
        return hash((self._coefficient, frozenset(self._exponents.items())))

    def __str__(self):
        if not self._exponents:
            return str(self._coefficient)
        factors = []
        for var, expon in self._exponents.items():
            if expon == 1:
                factors.append(str(var.name))
            else:
                factors.append('%s^%s' % (var.name, expon))
        if self._coefficient == 1:
            return '*'.join(factors)
        return '%s*%s' % (self._coefficient, '*'.join(factors))

    def __repr__(self):
        return 'MonomialTerm(%r, {%s})' % (
            self._coefficient,
            ', '.join('%s: %r' % (v.name, e) for v, e in self._exponents.items()),
        )


class OperandBase(object):
    """Arithmetic entry points shared by variables and expressions.

    All operators are routed through the dispatch tables in
    :mod:`gsopt.expressions.operators`.
    """

    __slots__ = ()

    _kind = ExpressionKind.INVALID

    # numpy scalars on the left defer to the reflected operator
    __array_ufunc__ = None

    def __add__(self, other):
        return operators.add(self, other)

    def __radd__(self, other):
        return operators.add(other, self)

    def __sub__(self, other):
        return operators.subtract(self, other)

    def __rsub__(self, other):
        return operators.subtract(other, self)

    def __mul__(self, other):
        return operators.multiply(self, other)

    def __rmul__(self, other):
        return operators.multiply(other, self)

    def __truediv__(self, other):
        return operators.divide(self, other)

    def __rtruediv__(self, other):
        return operators.divide(other, self)

    def __pow__(self, other):
        return operators.power(self, other)

    def __rpow__(self, other):
        return operators.power(other, self)

    def __neg__(self):
        return operators.negate(self)

    def __pos__(self):
        return self


class _TermSum(OperandBase):
    __slots__ = ('_terms',)

    @property
    def terms(self):
        return self._terms

    def __len__(self):
        return len(self._terms)

    def evaluate(self, point):
        return math.fsum(t.evaluate(point) for t in self._terms)

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._terms == other._terms

    __hash__ = None

    def __str__(self):
        if not self._terms:
            return '0'
        out = str(self._terms[0])
        for term in self._terms[1:]:
            if term.coefficient < 0:
                out += ' - ' + str(term.negate())
            else:
                out += ' + ' + str(term)
        return out

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, str(self))


class MonomialExpression(OperandBase):
    """A single monomial term with a positive coefficient.

    A coefficient of any sign is accepted only when the term has no
    variables (a degenerate scalar).
    """

    __slots__ = ('_term',)

    _kind = ExpressionKind.MONOMIAL

    def __init__(self, coefficient, exponents=None):
        if isinstance(coefficient, MonomialTerm):
            if exponents is not None:
                raise TypeError('Exponents cannot be given together with a term')
            term = coefficient
        else:
            term = MonomialTerm(coefficient, exponents)
        if term.exponents and not term.coefficient > 0:
            raise InvalidCoefficient(
                'Monomial expressions must have positive coefficients, got %s'
                % (term.coefficient,)
            )
        self._term = term

    @property
    def term(self):
        return self._term

    @property
    def terms(self):
        return (self._term,)

    @property
    def coefficient(self):
        return self._term.coefficient

    @property
    def exponents(self):
        return self._term.exponents

    def evaluate(self, point):
        return self._term.evaluate(point)

    def __eq__(self, other):
        if not isinstance(other, MonomialExpression):
            return NotImplemented
        return self._term == other._term

    __hash__ = None

    def __str__(self):
        return str(self._term)

    def __repr__(self):
        return 'MonomialExpression(%s)' % (self._term,)


class PosynomialExpression(_TermSum):
    """A sum of monomial terms, all with positive coefficients"""

    __slots__ = ()

    _kind = ExpressionKind.POSYNOMIAL

    def __init__(self, terms=()):
        if isinstance(terms, MonomialTerm):
            terms = (terms,)
        elif isinstance(terms, MonomialExpression):
            terms = (terms.term,)
        terms = tuple(terms)
        for term in terms:
            if not term.coefficient > 0:
                raise InvalidCoefficient(
                    'Posynomial expressions must have positive coefficients, got %s'
                    % (term.coefficient,)
                )
        self._terms = terms


class SignomialExpression(_TermSum):
    """A sum of monomial terms whose coefficients may take any sign"""

    __slots__ = ()

    _kind = ExpressionKind.SIGNOMIAL

    def __init__(self, terms=()):
        if isinstance(terms, MonomialTerm):
            terms = (terms,)
        elif isinstance(terms, (MonomialExpression, PosynomialExpression)):
            terms = terms.terms
        self._terms = tuple(terms)

    def positive_terms(self):
        return tuple(t for t in self._terms if t.coefficient > 0)

    def negative_terms(self):
        return tuple(t for t in self._terms if t.coefficient < 0)


_NONGP_EVALUATORS = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '/': lambda a, b: a / b,
    '**': lambda a, b: a**b,
}


class NonGPExpression(OperandBase):
    """Opaque result of an operation that leaves the GP/SP algebra.

    It records the operator and its operands so it can still be evaluated,
    but it is neither a monomial, a posynomial nor a signomial.
    """

    __slots__ = ('_operator', '_args')

    _kind = ExpressionKind.NONGP

    def __init__(self, operator, args):
        if operator != 'neg' and operator not in _NONGP_EVALUATORS:
            raise ValueError('Unknown operator "%s"' % (operator,))
        self._operator = operator
        self._args = tuple(args)

    @property
    def operator(self):
        return self._operator

    @property
    def args(self):
        return self._args

    def evaluate(self, point):
        vals = [_evaluate_operand(a, point) for a in self._args]
        if self._operator == 'neg':
            return -vals[0]
        return _NONGP_EVALUATORS[self._operator](*vals)

    def __str__(self):
        if self._operator == 'neg':
            return '-(%s)' % (self._args[0],)
        return '(%s) %s (%s)' % (self._args[0], self._operator, self._args[1])

    def __repr__(self):
        return 'NonGPExpression(%s)' % (str(self),)


def _evaluate_operand(arg, point):
    if isinstance(arg, OperandBase):
        return arg.evaluate(point)
    return arg


# Late import: the operator engine needs the classes defined above
from gsopt.expressions import operators
