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

from pyomo.common.dependencies import numpy, numpy_available

if numpy_available:
    import numpy as np
else:
    raise ImportError('The monomial approximation requires numpy')

from gsopt.errors import InvalidCoefficient
from gsopt.expressions.terms import MonomialExpression, MonomialTerm
from gsopt.expressions.classify import as_monomial, is_posynomial, terms_of


def _term_matrix(terms, variables):
    lc = np.array([np.log(t.coefficient) for t in terms])
    A = np.zeros((len(terms), len(variables)))
    col = {v: j for j, v in enumerate(variables)}
    for i, t in enumerate(terms):
        for var, expon in t.exponents.items():
            A[i, col[var]] = expon
    return lc, A


def _variables(terms):
    seen = {}
    for t in terms:
        for var in t.exponents:
            seen.setdefault(var, None)
    return list(seen)


def evaluate_posynomial(posy, x_star):
    """Value of a posynomial and its log-log gradient at ``x_star``.

    Returns ``(log_value, variables, elasticities)`` where the elasticity of
    variable ``x_i`` is ``(x_i / f) * df/dx_i``.  Everything is computed from
    the logarithms of the terms so that widely scaled terms do not overflow.
    """
    terms = terms_of(posy)
    if not is_posynomial(posy) or not terms:
        raise InvalidCoefficient('A non-posynomial object was detected: %s' % (posy,))
    variables = _variables(terms)
    lc, A = _term_matrix(terms, variables)
    logx = np.array([np.log(x_star[v]) for v in variables])
    z = lc + A.dot(logx) if variables else lc
    zmax = np.max(z)
    w = np.exp(z - zmax)
    total = np.sum(w)
    log_value = zmax + np.log(total)
    weights = w / total
    elasticities = weights.dot(A) if variables else np.zeros(0)
    return log_value, variables, elasticities


def monomial_approximation(posy, x_star):
    """The monomial tangent to ``posy`` in log-log space at ``x_star``.

    The result matches both the value and the gradient of ``posy`` at
    ``x_star``; a single-term posynomial is its own approximation.
    """
    terms = terms_of(posy)
    if len(terms) == 1:
        return as_monomial(posy)

    log_value, variables, e = evaluate_posynomial(posy, x_star)
    log_coef = log_value
    exponents = {}
    for var, expon in zip(variables, e):
        log_coef -= expon * np.log(x_star[var])
        exponents[var] = float(expon)
    return MonomialExpression(MonomialTerm(float(np.exp(log_coef)), exponents))
