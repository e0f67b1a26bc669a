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

from gsopt.expressions.terms import (
    ExpressionKind,
    MonomialTerm,
    MonomialExpression,
    PosynomialExpression,
    SignomialExpression,
    NonGPExpression,
)
from gsopt.expressions.classify import (
    expression_kind,
    terms_of,
    variables_of,
    is_monomial,
    is_posynomial,
    is_signomial,
    is_nongp,
    as_monomial,
    as_posynomial,
    as_signomial,
)
