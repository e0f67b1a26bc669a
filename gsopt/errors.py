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

"""Exceptions and warnings raised by the GP/SP modeling layer.

Every declaration error is raised immediately when the offending variable,
expression, constraint or objective is built, never deferred to solve time.
"""

from pyomo.common.errors import PyomoException


class GSOptError(PyomoException):
    """Base class for all errors raised by gsopt"""


class InvalidCoefficient(GSOptError, ValueError):
    """A monomial or posynomial was built with a non-positive coefficient"""


class InvalidVariableDeclaration(GSOptError, ValueError):
    """Variable bounds, fixed value or start value are not strictly positive
    or are inconsistent with each other"""


class InvalidConstraintForm(GSOptError, ValueError):
    """A relation cannot be normalized into GP canonical or SP general form"""


class CrossModelVariable(GSOptError, ValueError):
    """An expression references a variable owned by a different model"""


class ZeroRightHandSide(InvalidConstraintForm):
    """A relation compares against zero, which has no image in log space"""


class InvalidObjectiveForm(GSOptError, ValueError):
    """The objective is not a posynomial (minimize) or monomial (maximize)"""


class NotSolvedYet(GSOptError, RuntimeError):
    """Solution data was requested before a solve produced it"""


class DualUnavailable(GSOptError, RuntimeError):
    """No dual value is available for the requested constraint"""


class SolveNotConverged(UserWarning):
    """The signomial iteration hit its iteration limit before converging"""
