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

import pyomo.environ as pyo
from pyomo.common.dependencies import numpy, numpy_available
from pyomo.common.dependencies import attempt_import

if numpy_available:
    import numpy as np
else:
    raise ImportError('The exponential cone solver requires numpy')

cvxopt, cvxopt_available = attempt_import("cvxopt")

# exp() overflows a double just above this
_MAX_EXPONENT = 700.0

# tolerance for rows left with no free columns
_CONSTANT_ROW_TOL = 1e-9


def _dense(expr, n):
    row = np.zeros(n)
    for col, coef in expr.coeffs.items():
        row[col] = coef
    return row


def _to_matrix(rows, n):
    if not rows:
        return None
    return cvxopt.matrix(np.array(rows, dtype=float).reshape(len(rows), n))


def _to_vector(vals):
    if not vals:
        return None
    return cvxopt.matrix(np.array(vals, dtype=float))


def _infeasible_result(n_rows, x):
    return {
        'status': 'primal infeasible',
        'x': x,
        'row_multipliers': np.zeros(n_rows),
    }


def solve_ECP(program):
    """Solve a ConicProgram with cvxopt.

    Columns with equal bounds are substituted out before the call.  A program
    without cones goes to ``cvxopt.solvers.lp``; each cone ``(a, b, c)`` is
    otherwise passed to ``cvxopt.solvers.cp`` as the convex constraint
    ``b * exp(a / b) - c <= 0``.

    Returns a dict with the cvxopt ``status``, the full primal vector ``x``
    (or None) and ``row_multipliers``, the nonnegative (inequality) or free
    (equality) cvxopt multipliers of each program row for the minimization
    form of the problem.
    """
    n = program.num_variables()
    n_rows = program.num_rows()
    lb = np.array(program.lower_bounds, dtype=float)
    ub = np.array(program.upper_bounds, dtype=float)
    fixed = np.isfinite(lb) & (lb == ub)
    free = np.flatnonzero(~fixed)
    nf = len(free)
    x_fixed = np.where(fixed, lb, 0.0)

    sign = 1.0 if program.sense == pyo.minimize else -1.0
    c = sign * _dense(program.objective, n)[free]

    def reduce(expr):
        full = _dense(expr, n)
        return full[free], expr.constant + float(np.dot(full[fixed], x_fixed[fixed]))

    A_rows, b_vals, eq_map = [], [], []
    G_rows, h_vals, iq_map = [], [], []
    for i, (expr, relation) in enumerate(zip(program.rows, program.row_relations)):
        a, const = reduce(expr)
        if not a.any():
            if relation == '==' and abs(const) > _CONSTANT_ROW_TOL:
                return _infeasible_result(n_rows, None)
            if relation == '<=' and const > _CONSTANT_ROW_TOL:
                return _infeasible_result(n_rows, None)
            continue
        if relation == '==':
            A_rows.append(a)
            b_vals.append(-const)
            eq_map.append(i)
        else:
            G_rows.append(a)
            h_vals.append(-const)
            iq_map.append(i)

    # column bounds become ordinary linear inequalities
    for k, col in enumerate(free):
        if np.isfinite(lb[col]):
            row = np.zeros(nf)
            row[k] = -1.0
            G_rows.append(row)
            h_vals.append(-lb[col])
        if np.isfinite(ub[col]):
            row = np.zeros(nf)
            row[k] = 1.0
            G_rows.append(row)
            h_vals.append(ub[col])

    cones = []
    for cone in program.cones:
        a_vec, a_const = reduce(cone.a)
        c_vec, c_const = reduce(cone.c)
        cones.append((a_vec, a_const, cone.b, c_vec, c_const))

    if nf == 0:
        # nothing left to optimize, check the point we were handed
        for a_vec, a_const, b, c_vec, c_const in cones:
            if b * np.exp(min(a_const / b, _MAX_EXPONENT)) - c_const > _CONSTANT_ROW_TOL:
                return _infeasible_result(n_rows, None)
        return {'status': 'optimal', 'x': x_fixed, 'row_multipliers': np.zeros(n_rows)}

    G = _to_matrix(G_rows, nf)
    h = _to_vector(h_vals)
    A = _to_matrix(A_rows, nf)
    b = _to_vector(b_vals)
    if G is None:
        G = cvxopt.matrix(0.0, (0, nf))
        h = cvxopt.matrix(0.0, (0, 1))
    c_mat = cvxopt.matrix(c)

    if not cones:
        res = cvxopt.solvers.lp(c_mat, G, h, A, b)
        z_key = 'z'
    else:
        x0 = np.array(program.starts, dtype=float)[free]
        m = len(cones)
        a_mat = np.array([cn[0] for cn in cones])
        a_off = np.array([cn[1] for cn in cones])
        b_arr = np.array([cn[2] for cn in cones])
        c_rows = np.array([cn[3] for cn in cones])
        c_off = np.array([cn[4] for cn in cones])

        def F(x=None, z=None):
            if x is None:
                return m, cvxopt.matrix(x0)
            xv = np.array(x).ravel()
            expo = (a_mat.dot(xv) + a_off) / b_arr
            if np.any(expo > _MAX_EXPONENT):
                return None
            ex = np.exp(expo)
            f = np.empty(m + 1)
            f[0] = c.dot(xv)
            f[1:] = b_arr * ex - (c_rows.dot(xv) + c_off)
            Df = np.empty((m + 1, nf))
            Df[0] = c
            Df[1:] = ex[:, None] * a_mat - c_rows
            if z is None:
                return cvxopt.matrix(f), cvxopt.matrix(Df)
            zv = np.array(z).ravel()
            w = zv[1:] * ex / b_arr
            H = (a_mat * w[:, None]).T.dot(a_mat)
            return cvxopt.matrix(f), cvxopt.matrix(Df), cvxopt.matrix(H)

        res = cvxopt.solvers.cp(F, G=G, h=h, A=A, b=b)
        z_key = 'zl'

    multipliers = np.zeros(n_rows)
    if res.get('y') is not None and eq_map:
        y = np.array(res['y']).ravel()
        for k, i in enumerate(eq_map):
            multipliers[i] = y[k]
    if res.get(z_key) is not None and iq_map:
        z = np.array(res[z_key]).ravel()
        for k, i in enumerate(iq_map):
            multipliers[i] = z[k]

    if res.get('x') is None:
        x = None
    else:
        x = x_fixed.copy()
        x[free] = np.array(res['x']).ravel()

    return {'status': res['status'], 'x': x, 'row_multipliers': multipliers}
