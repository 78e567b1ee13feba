"""PyTorch integration for bfgsmin.

Wraps a scalar-valued torch function as an objective whose gradient comes
from autograd.

Example:
    >>> import torch
    >>> from bfgsmin import bfgs
    >>> from bfgsmin.torch import TorchObjective
    >>> res = bfgs(TorchObjective(lambda t: (t ** 2).sum()), [1.0, -1.0])
    >>> res.fun < 1e-12
    True
"""

from bfgsmin.torch.objective import TensorObjectiveFn, TorchObjective

__all__ = ["TensorObjectiveFn", "TorchObjective"]
