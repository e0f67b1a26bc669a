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
import logging

from gsopt.model.solution import ModelSolutionInfo, SUCCESSFUL_TERMINATION

logger = logging.getLogger(__name__)


def map_solution(
    lowered, results, constraints, solve_time=None, iterations=1, converged=True
):
    """Translate conic results back to the variables of the user model.

    ``constraints`` is the model's list of ConstraintData; the position of a
    record is its constraint index.  Returns a new ModelSolutionInfo and
    leaves every argument untouched.
    """
    status = results.termination_condition
    if status not in SUCCESSFUL_TERMINATION:
        logger.warning(
            'The conic solver terminated with status "%s" (%s); the reported '
            'solution may not be optimal' % (status, results.status)
        )

    if solve_time is None:
        solve_time = results.wallclock_time

    if not results.has_primal():
        return ModelSolutionInfo(
            termination_status=status,
            solve_time=solve_time,
            iterations=iterations,
            converged=converged,
        )

    x = results.x
    values = {
        var.index: math.exp(x[col]) for var, col in lowered.variable_columns.items()
    }
    objective_value = math.exp(lowered.log_objective.evaluate(x))

    duals = {}
    if results.row_duals is not None:
        for idx, row in lowered.constraint_rows.items():
            dual = float(results.row_duals[row]) * objective_value
            if constraints[idx].negate_dual:
                dual = -dual
            duals[idx] = dual

    return ModelSolutionInfo(
        variable_values=values,
        objective_value=objective_value,
        termination_status=status,
        solve_time=solve_time,
        constraint_duals=duals,
        iterations=iterations,
        converged=converged,
    )
