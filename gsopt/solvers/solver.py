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

from pyomo.common.timing import HierarchicalTimer

from gsopt.solvers.cvxopt.cvxopt import CVXOPT
from gsopt.solvers.native.SP import SPConfig, solve_SP as _solve_SP
from gsopt.tools.logTransform import lower_model
from gsopt.tools.solutionMapper import map_solution


def solve_GP(model, solver=None, timer=None):
    """Lower, solve and map a geometric program in a single pass"""
    if solver is None:
        solver = CVXOPT()
    if timer is None:
        timer = HierarchicalTimer()

    records = model.constraints
    timer.start('lower')
    lowered = lower_model(
        model.variables,
        list(enumerate(records)),
        model.objective_sense,
        model.objective,
    )
    timer.stop('lower')

    results = solver.solve(lowered.program, timer=timer)
    return map_solution(lowered, results, records)


def solve_SP(model, solver=None, config=None, timer=None):
    if solver is None:
        solver = CVXOPT()
    if config is None:
        config = SPConfig()
    return _solve_SP(model, solver, config=config, timer=timer)
