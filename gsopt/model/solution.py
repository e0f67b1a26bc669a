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

from pyomo.opt import TerminationCondition

SUCCESSFUL_TERMINATION = (
    TerminationCondition.optimal,
    TerminationCondition.locallyOptimal,
    TerminationCondition.globallyOptimal,
)


class ModelSolutionInfo(object):
    """Results of the most recent solve, keyed by variable and constraint
    index.  A fresh instance replaces the previous one after every solve."""

    def __init__(
        self,
        variable_values=None,
        objective_value=None,
        termination_status=None,
        solve_time=None,
        constraint_duals=None,
        iterations=0,
        converged=False,
    ):
        self.variable_values = {} if variable_values is None else variable_values
        self.objective_value = objective_value
        self.termination_status = termination_status
        self.solve_time = solve_time
        self.constraint_duals = {} if constraint_duals is None else constraint_duals
        self.iterations = iterations
        self.converged = converged

    def has_values(self):
        return bool(self.variable_values)


class SolutionSummary(object):
    __slots__ = (
        'is_gp',
        'termination_status',
        'objective_value',
        'solve_time',
        'variable_count',
        'constraint_count',
        'variable_values',
        'constraint_duals',
        'iterations',
        'verbose',
    )

    def __init__(
        self,
        is_gp,
        termination_status,
        objective_value,
        solve_time,
        variable_count,
        constraint_count,
        variable_values,
        constraint_duals,
        iterations=0,
        verbose=False,
    ):
        self.is_gp = is_gp
        self.termination_status = termination_status
        self.objective_value = objective_value
        self.solve_time = solve_time
        self.variable_count = variable_count
        self.constraint_count = constraint_count
        self.variable_values = variable_values
        self.constraint_duals = constraint_duals
        self.iterations = iterations
        self.verbose = verbose

    def __str__(self):
        if self.is_gp:
            lines = ['Geometric Programming Solution Summary:']
        else:
            lines = ['Signomial Programming Solution Summary:']
        lines.append(' ├ Termination status: %s' % (self.termination_status,))
        if self.objective_value is None:
            lines.append(' ├ Objective value: Not available')
        else:
            lines.append(' ├ Objective value: %s' % (self.objective_value,))
        if self.solve_time is None:
            lines.append(' ├ Solve time: Not available')
        else:
            lines.append(' ├ Solve time: %.4f seconds' % (self.solve_time,))
        if not self.is_gp:
            lines.append(' ├ Iterations: %d' % (self.iterations,))
        lines.append(' ├ Variables: %d' % (self.variable_count,))
        lines.append(' └ Constraints: %d' % (self.constraint_count,))
        if self.verbose and self.termination_status in SUCCESSFUL_TERMINATION:
            if self.variable_values:
                lines.append('')
                lines.append(' Variable values:')
                for name, val in self.variable_values.items():
                    lines.append('   %s = %s' % (name, val))
            if self.constraint_duals:
                lines.append('')
                lines.append(' Constraint duals:')
                for idx, val in self.constraint_duals.items():
                    lines.append('   [%d] = %s' % (idx, val))
        return '\n'.join(lines)
