"""Elementwise vector arithmetic: add, subtract, multiply, divide.

Each op writes into a caller-owned `out` and accepts vector-vector,
vector-scalar and scalar-vector operands. numpy ufuncs do the vectorized
work; lane width and instruction set are numpy's business.
"""

import numpy as np
from numba import njit


def _check_operands(out, a, b):
    n = len(out)
    for name, operand in (("a", a), ("b", b)):
        if np.ndim(operand) == 0:
            continue
        if len(operand) != n:
            raise ValueError(f"operand {name} has {len(operand)} samples, out has {n}")
    if np.ndim(a) == 0 and np.ndim(b) == 0:
        raise ValueError("at least one operand must be a vector")


def add(out, a, b):
    """out = a + b"""
    _check_operands(out, a, b)
    return np.add(a, b, out=out)


def subtract(out, a, b):
    """out = a - b"""
    _check_operands(out, a, b)
    return np.subtract(a, b, out=out)


def multiply(out, a, b):
    """out = a * b"""
    _check_operands(out, a, b)
    return np.multiply(a, b, out=out)


def divide(out, a, b):
    """out = a / b (IEEE semantics for division by zero)."""
    _check_operands(out, a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.divide(a, b, out=out)


@njit(cache=True)
def dot_product(a, b):
    """Sum of a[i] * b[i] over the common length, accumulated left to right."""
    acc = 0.0
    for i in range(min(len(a), len(b))):
        acc += a[i] * b[i]
    return acc
