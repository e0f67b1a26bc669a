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

import sys
import time
import logging

import pyomo.environ as pyo
from pyomo.opt import TerminationCondition
from pyomo.common.timing import HierarchicalTimer
from pyomo.common.config import ConfigDict, ConfigValue, NonNegativeInt, Bool
from pyomo.common.log import LogStream
from pyomo.common.tee import capture_output, TeeStream

from gsopt.solvers.conic import ConicResults
from gsopt.solvers.cvxopt.ECP import solve_ECP

from pyomo.common.dependencies import attempt_import

cvxopt, cvxopt_available = attempt_import("cvxopt")

logger = logging.getLogger(__name__)

CVXOPT_OPTIONS = ('show_progress', 'maxiters', 'refinement', 'abstol', 'reltol', 'feastol')


class CVXOPTConfig(ConfigDict):
    def __init__(
        self,
        description=None,
        doc=None,
        implicit=False,
        implicit_domain=None,
        visibility=0,
    ):
        super(CVXOPTConfig, self).__init__(
            description=description,
            doc=doc,
            implicit=implicit,
            implicit_domain=implicit_domain,
            visibility=visibility,
        )

        self.declare(
            'stream_solver',
            ConfigValue(
                default=False,
                domain=Bool,
                description='Echo the cvxopt iteration log to stdout',
            ),
        )
        self.declare(
            'report_timing',
            ConfigValue(
                default=False,
                domain=Bool,
                description='Log the solve timer report after each solve',
            ),
        )
        self.declare('logfile', ConfigValue(domain=str))
        self.declare('solver_output_logger', ConfigValue())
        self.declare('log_level', ConfigValue(domain=NonNegativeInt))

        self.logfile = ''
        self.solver_output_logger = logger
        self.log_level = logging.INFO


class CVXOPT(object):
    """Solves a ConicProgram with cvxopt and reports a ConicResults"""

    def __init__(self):
        self._config = CVXOPTConfig()
        # cvxopt.solvers.options entries, applied on top of the defaults
        self._options = dict()

    def available(self):
        return bool(cvxopt_available)

    def version(self):
        verString = cvxopt.__version__
        return tuple(int(v) for v in verString.split('.') if v.isdigit())

    @property
    def config(self):
        return self._config

    @property
    def options(self):
        return self._options

    def _set_options(self):
        # cvxopt.solvers.options is global: restore the baseline every solve
        defaults = {
            'show_progress': False,
            'maxiters': 100,
            'refinement': 1,
            'abstol': 1e-7,
            'reltol': 1e-6,
            'feastol': 1e-7,
        }

        for key, val in defaults.items():
            cvxopt.solvers.options[key] = val

        for key, val in self.options.items():
            if key in CVXOPT_OPTIONS:
                cvxopt.solvers.options[key] = val
            else:
                logger.warning('Ignoring unknown cvxopt option "%s"' % (key,))

        if self.config.stream_solver:
            cvxopt.solvers.options['show_progress'] = True

    def _postsolve(self, program, res):
        results = ConicResults()

        status = res['status']
        results.status = status
        if status == 'optimal':
            results.termination_condition = TerminationCondition.optimal
        elif status == 'dual infeasible':
            results.termination_condition = TerminationCondition.unbounded
        elif status == 'primal infeasible':
            results.termination_condition = TerminationCondition.infeasible
        else:
            results.termination_condition = TerminationCondition.unknown

        results.x = res['x']
        if results.x is not None:
            results.objective = program.objective.evaluate(results.x)

        # cvxopt multipliers belong to the minimization form; the objective
        # moves by -multiplier per unit of rhs there
        if program.sense == pyo.minimize:
            results.row_duals = -res['row_multipliers']
        else:
            results.row_duals = res['row_multipliers']

        return results

    def solve(self, program, timer=None):
        if not cvxopt_available:
            raise ImportError('The CVXOPT solver requires cvxopt')
        if timer is None:
            timer = HierarchicalTimer()
        timer.start('solve')

        self._set_options()

        ostreams = [
            LogStream(
                level=self.config.log_level, logger=self.config.solver_output_logger
            )
        ]
        if self.config.stream_solver:
            ostreams.append(sys.stdout)
        if self.config.logfile:
            f = open(self.config.logfile, 'w')
            ostreams.append(f)

        try:
            with TeeStream(*ostreams) as t:
                with capture_output(output=t.STDOUT):
                    timer.start('cvxopt optimize')
                    tic = time.perf_counter()
                    try:
                        cvxoptRes = solve_ECP(program)
                    finally:
                        wallclock = time.perf_counter() - tic
                        timer.stop('cvxopt optimize')
        finally:
            if self.config.logfile:
                f.close()

        res = self._postsolve(program, cvxoptRes)
        res.wallclock_time = wallclock

        timer.stop('solve')

        if self.config.report_timing:
            logger.info('\n' + str(timer))

        return res
