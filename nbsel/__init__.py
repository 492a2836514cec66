from __future__ import annotations

from . import dual, fenchel, op, rng, sort, support, utils
from .errors import DimensionMismatch, InvalidLabels, NumericalDivergence, SubsetSelectionError
from .fenchel import alpha_init
from .memory import Cache, subset_memspec
from .op import vector as vops
from .primal import recover_primal
from .rng import set_seed
from .solver import MAX_RESTARTS, subset_selection
from .support import ind_init
from .types import (
    L1SVM,
    L1SVR,
    L2SVM,
    L2SVR,
    OLS,
    Classification,
    Constraint,
    LogReg,
    LossFunction,
    LoopState,
    Penalty,
    Regression,
    SparseEstimator,
    Sparsity,
)

__all__ = [
    "dual",
    "fenchel",
    "op",
    "rng",
    "sort",
    "support",
    "utils",
    "vops",
    "Cache",
    "Classification",
    "Constraint",
    "DimensionMismatch",
    "InvalidLabels",
    "L1SVM",
    "L1SVR",
    "L2SVM",
    "L2SVR",
    "LogReg",
    "LoopState",
    "LossFunction",
    "MAX_RESTARTS",
    "NumericalDivergence",
    "OLS",
    "Penalty",
    "Regression",
    "SparseEstimator",
    "Sparsity",
    "SubsetSelectionError",
    "alpha_init",
    "ind_init",
    "recover_primal",
    "set_seed",
    "subset_memspec",
    "subset_selection",
]
