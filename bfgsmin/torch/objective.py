"""Objectives differentiated with PyTorch autograd."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import torch

from bfgsmin.optimize.core import Array, Objective

TensorObjectiveFn = Callable[[torch.Tensor], torch.Tensor]


class TorchObjective(Objective):
    """
    Objective defined by a scalar-valued PyTorch function.

    Value-only queries run under ``torch.no_grad()``; value-and-gradient
    queries differentiate ``fun`` with autograd, so no gradient code is
    needed.

    Args:
        fun: Callable taking a 1D tensor and returning a scalar tensor.
        dtype: Floating dtype of the tensors passed to ``fun``.
        device: Device of the tensors passed to ``fun``. Defaults to CPU.

    Example:
        >>> import torch
        >>> from bfgsmin import bfgs
        >>> from bfgsmin.torch import TorchObjective
        >>> obj = TorchObjective(lambda t: ((t - 2.0) ** 2).sum())
        >>> res = bfgs(obj, [0.0, 0.0], tolx=1e-8, tolfun=1e-12)
        >>> [round(float(v), 6) for v in res.x]
        [2.0, 2.0]
    """

    def __init__(
        self,
        fun: TensorObjectiveFn,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> None:
        if not callable(fun):
            raise TypeError(f"fun must be callable, got {type(fun).__name__}")
        if not dtype.is_floating_point:
            raise ValueError(f"dtype must be a floating dtype, got {dtype}")
        self.fun = fun
        self.dtype = dtype
        self.device = device if device is not None else torch.device("cpu")

    def _to_tensor(self, x: Array) -> torch.Tensor:
        return torch.tensor(
            np.asarray(x, dtype=float), dtype=self.dtype, device=self.device
        )

    @staticmethod
    def _check_scalar(value: torch.Tensor) -> torch.Tensor:
        if not isinstance(value, torch.Tensor):
            raise TypeError(
                f"objective must return a torch.Tensor, got {type(value).__name__}"
            )
        if value.numel() != 1:
            raise ValueError(
                f"objective must return a scalar tensor, got shape {tuple(value.shape)}"
            )
        return value.reshape(())

    def evaluate(self, x: Array) -> float:
        with torch.no_grad():
            value = self._check_scalar(self.fun(self._to_tensor(x)))
        return float(value.item())

    def evaluate_with_gradient(self, x: Array) -> tuple[float, Array]:
        params = self._to_tensor(x).requires_grad_(True)
        value = self._check_scalar(self.fun(params))
        if value.requires_grad:
            (grad,) = torch.autograd.grad(value, params, allow_unused=True)
        else:
            grad = None
        if grad is None:
            # value does not depend on params
            grad = torch.zeros_like(params)
        grad_np = grad.detach().cpu().numpy().astype(float)
        return float(value.detach().item()), grad_np


__all__ = ["TensorObjectiveFn", "TorchObjective"]
