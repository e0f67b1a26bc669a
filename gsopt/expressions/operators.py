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

"""Operator engine for GP/SP expressions.

Each binary operator is resolved through a dispatch table keyed by the
:class:`ExpressionKind` of both operands.  The tables are populated for every
pair of kinds when this module is imported, so the algebra is total by
construction: each operation either returns the narrowest kind it can
guarantee, degrades to a signomial, escapes into a ``NonGPExpression``, or
(for foreign operand types) returns ``NotImplemented``.
"""

import itertools

from pyomo.common.errors import DeveloperError

from gsopt.expressions.terms import (
    ExpressionKind,
    MonomialExpression,
    PosynomialExpression,
    SignomialExpression,
    NonGPExpression,
)
from gsopt.expressions.classify import expression_kind, terms_of

_S = ExpressionKind.SCALAR
_V = ExpressionKind.VARIABLE
_M = ExpressionKind.MONOMIAL
_P = ExpressionKind.POSYNOMIAL
_G = ExpressionKind.SIGNOMIAL
_N = ExpressionKind.NONGP
_X = ExpressionKind.INVALID

_MONOMIAL_LIKE = (_V, _M)


def _single_term(arg):
    return terms_of(arg)[0]


def _monomial_or_signomial(term):
    # a non-positive coefficient is only a valid monomial without variables
    if term.is_constant() or term.coefficient > 0:
        return MonomialExpression(term)
    return SignomialExpression((term,))


def _posynomial_or_signomial(terms):
    terms = tuple(terms)
    if all(t.coefficient > 0 for t in terms):
        return PosynomialExpression(terms)
    return SignomialExpression(terms)


def _distribute(a, b):
    return tuple(
        ta.multiply(tb) for ta, tb in itertools.product(terms_of(a), terms_of(b))
    )


def _addend_terms(arg):
    # zero-valued scalars vanish from sums
    return tuple(
        t for t in terms_of(arg) if not (t.is_constant() and t.coefficient == 0)
    )


def _invalid(a, b):
    return NotImplemented


def _binary_op_dispatcher_type_mapping(name, updates):
    mapping = {}
    for a, b in itertools.product(ExpressionKind, repeat=2):
        if a == _X or b == _X:
            mapping[a, b] = _invalid
        elif a == _N or b == _N:
            mapping[a, b] = _nongp_handler(name)
    mapping.update(updates)
    missing = [
        (a.name, b.name)
        for a, b in itertools.product(ExpressionKind, repeat=2)
        if (a, b) not in mapping
    ]
    if missing:
        raise DeveloperError(
            'The %s dispatcher does not cover the operand kinds %s' % (name, missing)
        )
    return mapping


def _nongp_handler(name):
    def _nongp(a, b):
        return NonGPExpression(name, (a, b))

    return _nongp


#
# MULTIPLICATION
#


def _mul_scalar_scalar(a, b):
    return a * b


def _mul_scalar_monomial(c, m):
    return _monomial_or_signomial(_single_term(m).scale(c))


def _mul_monomial_scalar(m, c):
    return _mul_scalar_monomial(c, m)


def _mul_monomial_monomial(a, b):
    return _monomial_or_signomial(_single_term(a).multiply(_single_term(b)))


def _mul_posynomial_any(a, b):
    return _posynomial_or_signomial(_distribute(a, b))


def _mul_signomial_any(a, b):
    return SignomialExpression(_distribute(a, b))


_mul_updates = {(_S, _S): _mul_scalar_scalar}
for _k in _MONOMIAL_LIKE:
    _mul_updates[_S, _k] = _mul_scalar_monomial
    _mul_updates[_k, _S] = _mul_monomial_scalar
    for _j in _MONOMIAL_LIKE:
        _mul_updates[_k, _j] = _mul_monomial_monomial
for _k in (_S, _V, _M, _P):
    _mul_updates[_P, _k] = _mul_posynomial_any
    _mul_updates[_k, _P] = _mul_posynomial_any
for _k in (_S, _V, _M, _P, _G):
    _mul_updates[_G, _k] = _mul_signomial_any
    _mul_updates[_k, _G] = _mul_signomial_any

_mul_dispatcher = _binary_op_dispatcher_type_mapping('*', _mul_updates)


def multiply(a, b):
    return _mul_dispatcher[expression_kind(a), expression_kind(b)](a, b)


#
# DIVISION
#


def _div_scalar_scalar(a, b):
    return a / b


def _div_any_scalar(a, c):
    if c == 0:
        raise ZeroDivisionError('Cannot divide a GP expression by zero')
    return multiply(a, 1.0 / c)


def _div_any_term(a, b):
    # the divisor has exactly one term: multiply by its reciprocal
    terms = terms_of(b)
    if not terms:
        raise ZeroDivisionError('Cannot divide by an empty (zero) expression')
    if len(terms) > 1:
        return NonGPExpression('/', (a, b))
    inv = terms[0].reciprocal()
    if inv.is_constant() or inv.coefficient > 0:
        return multiply(a, MonomialExpression(inv))
    return multiply(a, SignomialExpression((inv,)))


_div_updates = {(_S, _S): _div_scalar_scalar}
for _k in (_V, _M, _P, _G):
    _div_updates[_k, _S] = _div_any_scalar
for _k in (_S, _V, _M, _P, _G):
    for _j in (_V, _M, _P, _G):
        _div_updates[_k, _j] = _div_any_term

_div_dispatcher = _binary_op_dispatcher_type_mapping('/', _div_updates)


def divide(a, b):
    return _div_dispatcher[expression_kind(a), expression_kind(b)](a, b)


#
# EXPONENTIATION
#


def _pow_scalar_scalar(a, b):
    return a**b


def _pow_monomial_scalar(m, p):
    term = _single_term(m).power(p)
    if term is None:
        return NonGPExpression('**', (m, p))
    return _monomial_or_signomial(term)


_pow_updates = {(_S, _S): _pow_scalar_scalar}
for _k in _MONOMIAL_LIKE:
    _pow_updates[_k, _S] = _pow_monomial_scalar
for _k, _j in itertools.product((_S, _V, _M, _P, _G), repeat=2):
    if (_k, _j) not in _pow_updates:
        _pow_updates[_k, _j] = _nongp_handler('**')

_pow_dispatcher = _binary_op_dispatcher_type_mapping('**', _pow_updates)


def power(a, b):
    return _pow_dispatcher[expression_kind(a), expression_kind(b)](a, b)


#
# ADDITION / SUBTRACTION
#


def _add_scalar_scalar(a, b):
    return a + b


def _add_any_any(a, b):
    return _posynomial_or_signomial(_addend_terms(a) + _addend_terms(b))


def _add_signomial_any(a, b):
    return SignomialExpression(_addend_terms(a) + _addend_terms(b))


def _sub_scalar_scalar(a, b):
    return a - b


def _sub_any_any(a, b):
    return SignomialExpression(
        _addend_terms(a) + tuple(t.negate() for t in _addend_terms(b))
    )


_add_updates = {(_S, _S): _add_scalar_scalar}
_sub_updates = {(_S, _S): _sub_scalar_scalar}
for _k, _j in itertools.product((_S, _V, _M, _P, _G), repeat=2):
    if (_k, _j) == (_S, _S):
        continue
    if _k == _G or _j == _G:
        _add_updates[_k, _j] = _add_signomial_any
    else:
        _add_updates[_k, _j] = _add_any_any
    _sub_updates[_k, _j] = _sub_any_any

_add_dispatcher = _binary_op_dispatcher_type_mapping('+', _add_updates)
_sub_dispatcher = _binary_op_dispatcher_type_mapping('-', _sub_updates)


def add(a, b):
    return _add_dispatcher[expression_kind(a), expression_kind(b)](a, b)


def subtract(a, b):
    return _sub_dispatcher[expression_kind(a), expression_kind(b)](a, b)


#
# UNARY NEGATION
#


def _neg_terms(a):
    return SignomialExpression(tuple(t.negate() for t in terms_of(a)))


_neg_dispatcher = {
    _X: lambda a: NotImplemented,
    _S: lambda a: -a,
    _V: _neg_terms,
    _M: _neg_terms,
    _P: _neg_terms,
    _G: _neg_terms,
    _N: lambda a: NonGPExpression('neg', (a,)),
}


def negate(a):
    return _neg_dispatcher[expression_kind(a)](a)


del _k, _j
