import dataclasses

import numpy as np
import pytest

from bfgsmin.optimize.options import BFGSOptions, Display, optimset


def test_defaults():
    opts = optimset()
    assert opts == BFGSOptions()
    assert opts.maxiter == 200
    assert opts.tolx == 1e-6
    assert opts.tolfun == 1e-6
    assert opts.backtrack == 0.5
    assert opts.display is Display.SILENT
    assert opts.min_step == 1e-12


def test_overrides_and_base():
    base = optimset(maxiter=10)
    opts = optimset(base, tolx=1e-3)
    assert opts.maxiter == 10
    assert opts.tolx == 1e-3
    assert base.tolx == 1e-6
    assert optimset(base) is base


def test_mapping_base():
    opts = optimset({"maxiter": 7, "display": "iter"}, tolfun=1e-4)
    assert opts.maxiter == 7
    assert opts.display is Display.ITER
    assert opts.tolfun == 1e-4


def test_options_are_frozen():
    opts = BFGSOptions()
    with pytest.raises(dataclasses.FrozenInstanceError):
        opts.maxiter = 5


def test_unknown_option_raises():
    with pytest.raises(ValueError, match="Unknown option"):
        optimset(max_iter=5)


@pytest.mark.parametrize(
    "overrides",
    [
        {"maxiter": -1},
        {"maxiter": 2.5},
        {"maxiter": True},
        {"tolx": 0.0},
        {"tolfun": -1e-6},
        {"tolx": float("nan")},
        {"backtrack": 0.0},
        {"backtrack": 1.0},
        {"min_step": 0.0},
        {"curvature_tol": -1.0},
        {"display": "loud"},
    ],
)
def test_invalid_values_raise(overrides):
    with pytest.raises(ValueError):
        optimset(**overrides)


def test_numpy_integer_maxiter_is_accepted():
    opts = optimset(maxiter=np.int64(3))
    assert opts.maxiter == 3
    assert type(opts.maxiter) is int


def test_display_parse():
    assert Display.parse("ITER") is Display.ITER
    assert Display.parse(" final ") is Display.FINAL
    assert Display.parse("off") is Display.SILENT
    assert Display.parse("none") is Display.SILENT
    assert Display.parse(Display.FINAL) is Display.FINAL
    with pytest.raises(ValueError):
        Display.parse(2)
