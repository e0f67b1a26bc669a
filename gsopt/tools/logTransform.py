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

"""Lowering of a GP (or a convexified SP iterate) into a ConicProgram.

With ``y = log(x)`` a monomial ``c * prod(x_i ** a_i)`` becomes the affine
function ``log(c) + sum(a_i * y_i)``.  A posynomial inequality
``sum_k m_k(x) <= 1`` becomes the log-sum-exp inequality
``log(sum_k exp(z_k)) <= 0``, which is encoded with nonnegative auxiliary
columns ``u_k``::

    sum_k u_k <= 1,    (z_k, 1, u_k) in K_exp  for every k

A posynomial objective is minimized through a free epigraph column ``t``
with ``(z_k - t, 1, u_k) in K_exp`` and ``sum_k u_k <= 1``.
"""

import math

import pyomo.environ as pyo
from pyomo.common.errors import DeveloperError

from gsopt.errors import InvalidObjectiveForm
from gsopt.expressions.classify import (
    is_monomial,
    is_posynomial,
    terms_of,
)
from gsopt.solvers.conic import AffineExpression, ConicProgram

_SENSES = {
    pyo.minimize: pyo.minimize,
    pyo.maximize: pyo.maximize,
    'min': pyo.minimize,
    'max': pyo.maximize,
    'minimize': pyo.minimize,
    'maximize': pyo.maximize,
}


def objective_sense(sense):
    try:
        return _SENSES[sense]
    except (KeyError, TypeError):
        raise InvalidObjectiveForm(
            'Unknown objective sense %r; use pyomo.environ.minimize / maximize '
            "or 'min' / 'max'" % (sense,)
        )


def validate_objective(sense, expr):
    """Return the normalized sense, raising InvalidObjectiveForm unless the
    objective is a posynomial to minimize or a monomial to maximize."""
    sense = objective_sense(sense)
    if sense == pyo.minimize:
        if not is_posynomial(expr) or not terms_of(expr):
            raise InvalidObjectiveForm(
                'Only posynomial objectives can be minimized, got %s' % (expr,)
            )
    elif not is_monomial(expr):
        raise InvalidObjectiveForm(
            'Only monomial objectives can be maximized, got %s' % (expr,)
        )
    return sense


class LoweredProgram(object):
    def __init__(self):
        self.program = ConicProgram()
        # Variable -> column of its logarithm
        self.variable_columns = {}
        # constraint index -> row whose dual is reported for it
        self.constraint_rows = {}
        # constraint index -> PCCP slack column
        self.slack_columns = {}
        # log of the objective, without any PCCP penalty
        self.log_objective = None


def log_term(term, columns):
    if not term.coefficient > 0:
        raise DeveloperError(
            'Cannot take the logarithm of the term %s with a non-positive '
            'coefficient' % (term,)
        )
    expr = AffineExpression(constant=math.log(term.coefficient))
    for var, expon in term.exponents.items():
        expr.add_term(columns[var], expon)
    return expr


def _log_sum_exp_le(program, name, lterms, offset_col=None):
    """Add ``log(sum(exp(lterms))) <= t`` (``t = 0`` when ``offset_col`` is
    None) and return the index of the ``sum(u) <= 1`` row"""
    total = AffineExpression(constant=-1.0)
    for k, z in enumerate(lterms):
        a = z.copy()
        if offset_col is not None:
            a.add_term(offset_col, -1.0)
        u_start = math.exp(min(a.evaluate(program.starts), 700.0))
        u = program.add_variable('%s_u[%d]' % (name, k), lb=0.0, start=u_start)
        program.add_exponential_cone(a, 1.0, AffineExpression({u: 1.0}))
        total.add_term(u, 1.0)
    return program.add_inequality(total)


def lower_model(
    variables,
    constraints,
    sense,
    objective,
    slack_rows=(),
    pccp_penalty=5.0,
):
    """Lower a GP onto a ConicProgram.

    ``constraints`` is a sequence of ``(index, ConstraintData)`` pairs whose
    records are in canonical GP form.  For every index in ``slack_rows`` a
    nonnegative log-slack column is subtracted from that constraint's
    lowered terms and ``pccp_penalty`` times the slacks is charged in the
    objective.
    """
    lowered = LoweredProgram()
    program = lowered.program
    columns = lowered.variable_columns

    for var in variables:
        if var.is_fixed():
            lb = ub = math.log(var.fixed)
        else:
            lb = math.log(var.lb)
            ub = math.inf if var.ub is None else math.log(var.ub)
        start = math.log(var.initial_point())
        start = min(max(start, lb), ub)
        columns[var] = program.add_variable('log(%s)' % (var.name,), lb, ub, start)

    for idx in slack_rows:
        col = program.add_variable('slack[%d]' % (idx,), lb=0.0, start=0.0)
        lowered.slack_columns[idx] = col

    for idx, con in constraints:
        if con.is_signomial:
            raise DeveloperError(
                'Signomial constraint %s must be convexified before lowering' % (con,)
            )
        name = con.name or 'c[%d]' % (idx,)
        lterms = [log_term(t, columns) for t in terms_of(con.function)]
        slack = lowered.slack_columns.get(idx)
        if slack is not None:
            for z in lterms:
                z.add_term(slack, -1.0)
        if len(lterms) == 1:
            if con.is_equality:
                row = program.add_equality(lterms[0])
            else:
                row = program.add_inequality(lterms[0])
        elif con.is_equality:
            raise DeveloperError(
                'Equality constraint %s is not a monomial relation' % (con,)
            )
        else:
            row = _log_sum_exp_le(program, name, lterms)
        lowered.constraint_rows[idx] = row

    sense = validate_objective(sense, objective)
    lterms = [log_term(t, columns) for t in terms_of(objective)]
    if len(lterms) == 1:
        log_objective = lterms[0]
    else:
        start = math.log(
            math.fsum(
                math.exp(min(z.evaluate(program.starts), 700.0)) for z in lterms
            )
        )
        t = program.add_variable('t', start=start)
        _log_sum_exp_le(program, 'obj', lterms, offset_col=t)
        log_objective = AffineExpression({t: 1.0})
    lowered.log_objective = log_objective

    program_objective = log_objective.copy()
    if lowered.slack_columns:
        charge = pccp_penalty if sense == pyo.minimize else -pccp_penalty
        for col in lowered.slack_columns.values():
            program_objective.add_term(col, charge)
    program.set_objective(program_objective, sense)

    return lowered
