"""Vector similarity and score arithmetic shared by retrieval and evaluation."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Total: vectors of different length, empty vectors and zero-magnitude
    vectors all give ``0.0``.

    Parameters
    ----------
    a, b:
        Embedding vectors.

    Returns
    -------
    float
        A value in ``[-1, 1]``.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    value = float(np.dot(va, vb) / (norm_a * norm_b))
    # Floating point can push a parallel pair a hair past 1.
    return max(-1.0, min(1.0, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, ``0.0`` for an empty sequence."""
    if not values:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def round_score(value: float, digits: int = 2) -> float:
    """Round to *digits* decimal places."""
    return round(float(value), digits)


def clamp_unit(value: float) -> float:
    """Clamp *value* into ``[0, 1]``."""
    return max(0.0, min(1.0, value))
