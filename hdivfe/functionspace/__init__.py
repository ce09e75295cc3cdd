
from .fe_type import FiniteElement, ON_CELLS, ON_FACES, ON_BFACES
from .hdiv_rt0 import HDivRT0
from .hdiv_bdm2 import HDivBDM2
from .dofmap import DofMap
from .fe_space import FESpace
from .function import Function
from .operators import Operator, Identity, Divergence
from .qpinfo import QPInfo
from .fe_evaluator import FEEvaluator
from .interpolation import interpolate, interpolation_options, SourceEvaluator
from .fe_vector import FEVector, FEVectorBlock
from .point_evaluator import (
    PointEvaluator, PointEvaluatorData, evaluator_options, standard_kernel
)
