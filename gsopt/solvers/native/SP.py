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

import logging
import warnings

from pyomo.common.config import (
    ConfigDict,
    ConfigValue,
    PositiveInt,
    NonNegativeFloat,
    PositiveFloat,
    Bool,
)
from pyomo.common.timing import HierarchicalTimer
from pyomo.opt import TerminationCondition
from pyomo.common.dependencies import numpy, numpy_available

if numpy_available:
    import numpy as np
else:
    raise ImportError('The Signomial Programming solver requires numpy')

from gsopt.errors import SolveNotConverged
from gsopt.expressions.terms import MonomialExpression, PosynomialExpression
from gsopt.model.constraints import ConstraintData
from gsopt.tools.logTransform import lower_model
from gsopt.tools.monomialApproximation import monomial_approximation
from gsopt.tools.solutionMapper import map_solution

logger = logging.getLogger(__name__)


class SPConfig(ConfigDict):
    def __init__(
        self,
        description=None,
        doc=None,
        implicit=False,
        implicit_domain=None,
        visibility=0,
    ):
        super(SPConfig, self).__init__(
            description=description,
            doc=doc,
            implicit=implicit,
            implicit_domain=implicit_domain,
            visibility=visibility,
        )

        self.declare(
            'max_iterations',
            ConfigValue(
                default=100,
                domain=PositiveInt,
                description='Maximum number of convex subproblems to solve',
            ),
        )
        self.declare(
            'reltol',
            ConfigValue(
                default=1e-6,
                domain=NonNegativeFloat,
                description='Stop when |x_k - x_(k-1)| / |x_k| falls to this value',
            ),
        )
        self.declare(
            'abstol',
            ConfigValue(
                default=1e-6,
                domain=NonNegativeFloat,
                description='Stop when |x_k - x_(k-1)| falls to this value',
            ),
        )
        self.declare(
            'use_pccp',
            ConfigValue(
                default=False,
                domain=Bool,
                description='Relax each signomial constraint with a penalized slack',
            ),
        )
        self.declare(
            'pccp_penalty',
            ConfigValue(
                default=5.0,
                domain=PositiveFloat,
                description='Objective charge per unit of log-slack on the '
                'first iteration',
            ),
        )
        self.declare(
            'pccp_penalty_growth',
            ConfigValue(
                default=2.0,
                domain=PositiveFloat,
                description='Factor the slack penalty is multiplied by after '
                'each iteration',
            ),
        )
        self.declare(
            'pccp_max_penalty',
            ConfigValue(
                default=1e4,
                domain=PositiveFloat,
                description='Upper limit on the slack penalty',
            ),
        )
        self.declare(
            'slack_tol',
            ConfigValue(
                default=1e-6,
                domain=NonNegativeFloat,
                description='Largest log-slack accepted at a converged point',
            ),
        )


def convexify_constraint(con, x_star):
    """Replace ``P <= Q`` by ``P / Qhat <= 1`` where ``Qhat`` is the monomial
    tangent to ``Q`` at ``x_star``"""
    P, Q = con.posynomials
    q_hat = monomial_approximation(Q, x_star).term.reciprocal()
    ratio = tuple(t.multiply(q_hat) for t in P.terms)
    if len(ratio) == 1:
        function = MonomialExpression(ratio[0])
    else:
        function = PosynomialExpression(ratio)
    return ConstraintData(
        function,
        '<=',
        1,
        name=con.name,
        negate_dual=con.negate_dual,
        posynomials=con.posynomials,
    )


def solve_SP(model, solver, config=None, timer=None):
    """Successive convexification of a signomial program.

    Each pass linearizes every true-signomial constraint at the current
    point, lowers and solves the resulting GP, and records the new point on
    each variable.  The loop stops once the relative or absolute change in
    the point falls within tolerance.  A model without true-signomial
    constraints is solved once.

    With ``use_pccp`` the slack penalty grows by ``pccp_penalty_growth``
    after every pass (up to ``pccp_max_penalty``) and a point only counts as
    converged once every log-slack is within ``slack_tol``.  A final point
    with a larger slack is reported with an ``infeasible`` status.  If a
    subproblem fails, the last iterate that had a primal point is mapped.
    """
    if config is None:
        config = SPConfig()
    if timer is None:
        timer = HierarchicalTimer()

    variables = model.variables
    records = model.constraints
    sp_rows = [i for i, con in enumerate(records) if con.is_signomial]
    slack_rows = sp_rows if config.use_pccp else ()

    x_prev = np.array([v.initial_point() for v in variables])
    solve_time = 0.0
    converged = False
    itr = 0
    lowered = results = None
    # last subproblem that produced a primal point
    last_lowered = last_results = None
    failed_status = None
    penalty = config.pccp_penalty
    max_slack = 0.0

    timer.start('sp')
    for itr in range(1, config.max_iterations + 1):
        x_star = {v: v.initial_point() for v in variables}
        constraints = []
        for i, con in enumerate(records):
            if con.is_signomial:
                con = convexify_constraint(con, x_star)
            constraints.append((i, con))

        lowered = lower_model(
            variables,
            constraints,
            model.objective_sense,
            model.objective,
            slack_rows=slack_rows,
            pccp_penalty=penalty,
        )

        results = solver.solve(lowered.program, timer=timer)
        solve_time += results.wallclock_time

        if not results.has_primal():
            logger.warning(
                'Signomial iteration %d returned no primal point (status %s)'
                % (itr, results.termination_condition)
            )
            failed_status = results.termination_condition
            break
        last_lowered, last_results = lowered, results

        x_cur = np.exp(
            np.array([results.x[lowered.variable_columns[v]] for v in variables])
        )
        for v, val in zip(variables, x_cur):
            v.add_linearization_point(val)

        if not sp_rows:
            converged = True
            break

        if lowered.slack_columns:
            max_slack = max(
                float(results.x[col]) for col in lowered.slack_columns.values()
            )

        absolute_error = np.linalg.norm(x_cur - x_prev)
        relative_error = absolute_error / np.linalg.norm(x_cur)
        logger.info(
            'Signomial Programming Iteration %d: relative error %.3e | '
            'absolute error %.3e | max slack %.3e'
            % (itr, relative_error, absolute_error, max_slack)
        )
        if max_slack <= config.slack_tol and (
            relative_error <= config.reltol or absolute_error <= config.abstol
        ):
            converged = True
            break
        x_prev = x_cur
        penalty = min(penalty * config.pccp_penalty_growth, config.pccp_max_penalty)
    else:
        warnings.warn(
            'The signomial iteration did not converge within %d iterations'
            % (config.max_iterations,),
            SolveNotConverged,
        )
    timer.stop('sp')

    if last_results is None:
        return map_solution(
            lowered,
            results,
            records,
            solve_time=solve_time,
            iterations=itr,
            converged=False,
        )

    info = map_solution(
        last_lowered,
        last_results,
        records,
        solve_time=solve_time,
        iterations=itr,
        converged=converged,
    )
    if failed_status is not None:
        info.termination_status = failed_status
    elif max_slack > config.slack_tol:
        logger.warning(
            'The final signomial iterate leaves a log-slack of %.3e; the '
            'reported point violates at least one signomial constraint'
            % (max_slack,)
        )
        info.termination_status = TerminationCondition.infeasible
    return info
