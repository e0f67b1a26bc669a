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

"""Geometric and signomial programming through log-space conic lowering"""

__version__ = '0.1.0'

from gsopt.errors import (
    GSOptError,
    InvalidCoefficient,
    InvalidVariableDeclaration,
    InvalidConstraintForm,
    CrossModelVariable,
    ZeroRightHandSide,
    InvalidObjectiveForm,
    NotSolvedYet,
    DualUnavailable,
    SolveNotConverged,
)
from gsopt.expressions import (
    ExpressionKind,
    MonomialTerm,
    MonomialExpression,
    PosynomialExpression,
    SignomialExpression,
    NonGPExpression,
    expression_kind,
    is_monomial,
    is_posynomial,
    is_signomial,
    as_monomial,
)
from gsopt.model import (
    Variable,
    ConstraintRef,
    GPModel,
    SPModel,
)
