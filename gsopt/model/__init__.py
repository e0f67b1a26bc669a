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

from gsopt.model.variables import Variable
from gsopt.model.constraints import ConstraintData, ConstraintRef
from gsopt.model.solution import ModelSolutionInfo, SolutionSummary
from gsopt.model.model import GSOptModel, GPModel, SPModel
