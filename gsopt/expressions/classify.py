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

import numbers

from gsopt.errors import InvalidCoefficient
from gsopt.expressions.terms import (
    ExpressionKind,
    MonomialTerm,
    MonomialExpression,
    PosynomialExpression,
    SignomialExpression,
    NonGPExpression,
    OperandBase,
)

_known_kinds = {}


def expression_kind(obj):
    """Return the :class:`ExpressionKind` of an operand.

    Real numbers (including numpy scalars) are ``SCALAR``; bools and any
    other foreign object are ``INVALID``.
    """
    cls = obj.__class__
    try:
        return _known_kinds[cls]
    except KeyError:
        pass
    if issubclass(cls, bool):
        kind = ExpressionKind.INVALID
    elif issubclass(cls, OperandBase):
        kind = cls._kind
    elif isinstance(obj, numbers.Real):
        kind = ExpressionKind.SCALAR
    else:
        kind = ExpressionKind.INVALID
    _known_kinds[cls] = kind
    return kind


def terms_of(expr):
    """The monomial terms of a scalar, variable or GP/SP expression"""
    kind = expression_kind(expr)
    if kind == ExpressionKind.SCALAR:
        return (MonomialTerm(expr),)
    if kind == ExpressionKind.VARIABLE:
        return (MonomialTerm(1.0, {expr: 1.0}),)
    if kind in (
        ExpressionKind.MONOMIAL,
        ExpressionKind.POSYNOMIAL,
        ExpressionKind.SIGNOMIAL,
    ):
        return expr.terms
    raise TypeError(
        'Expression of kind %s has no monomial terms' % (kind.name,)
    )


def variables_of(expr):
    """The set of variables an operand depends on"""
    kind = expression_kind(expr)
    if kind == ExpressionKind.NONGP:
        ans = set()
        for arg in expr.args:
            ans |= variables_of(arg)
        return ans
    if kind == ExpressionKind.INVALID:
        raise TypeError('Unsupported operand type %s' % (type(expr).__name__,))
    ans = set()
    for term in terms_of(expr):
        ans.update(term.exponents)
    return ans


def is_monomial(expr):
    kind = expression_kind(expr)
    if kind == ExpressionKind.SCALAR:
        return bool(expr > 0)
    if kind == ExpressionKind.VARIABLE:
        return True
    if kind == ExpressionKind.MONOMIAL:
        return expr.coefficient > 0
    if kind in (ExpressionKind.POSYNOMIAL, ExpressionKind.SIGNOMIAL):
        return len(expr.terms) == 1 and expr.terms[0].coefficient > 0
    return False


def is_posynomial(expr):
    kind = expression_kind(expr)
    if kind == ExpressionKind.SCALAR:
        return bool(expr > 0)
    if kind == ExpressionKind.VARIABLE:
        return True
    if kind == ExpressionKind.MONOMIAL:
        return expr.coefficient > 0
    if kind == ExpressionKind.POSYNOMIAL:
        return True
    if kind == ExpressionKind.SIGNOMIAL:
        return all(t.coefficient > 0 for t in expr.terms)
    return False


def is_signomial(expr):
    kind = expression_kind(expr)
    return kind not in (ExpressionKind.INVALID, ExpressionKind.NONGP)


def as_monomial(expr):
    """Explicitly convert a variable, positive scalar or single positive
    term into a :class:`MonomialExpression`"""
    kind = expression_kind(expr)
    if kind == ExpressionKind.MONOMIAL:
        return expr
    if kind == ExpressionKind.VARIABLE:
        return MonomialExpression(1.0, {expr: 1.0})
    if kind == ExpressionKind.SCALAR:
        if not expr > 0:
            raise InvalidCoefficient(
                'Cannot convert non-positive constant %s to a monomial' % (expr,)
            )
        return MonomialExpression(expr)
    if is_monomial(expr):
        return MonomialExpression(expr.terms[0])
    raise TypeError(
        'Cannot convert %s expression "%s" to a monomial' % (kind.name.lower(), expr)
    )


def as_posynomial(expr):
    if not is_posynomial(expr):
        raise TypeError('"%s" is not a posynomial' % (expr,))
    return PosynomialExpression(terms_of(expr))


def as_signomial(expr):
    return SignomialExpression(terms_of(expr))


def is_nongp(expr):
    return isinstance(expr, NonGPExpression)
