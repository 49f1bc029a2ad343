"""
Utility functions for game mechanics
"""

from __future__ import annotations
import random
from typing import Iterable, List, Optional, Sequence, Tuple
import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def dist_sq(x1: float, y1: float, x2: float, y2: float) -> float:
    dx = x1 - x2
    dy = y1 - y2
    return dx * dx + dy * dy


def nearest(origin: Tuple[float, float], points: Iterable[Sequence[float]], k: int) -> List[Sequence[float]]:
    """The k points closest to origin; each point starts with (x, y, ...)"""
    ox, oy = origin
    return sorted(points, key=lambda p: dist_sq(ox, oy, p[0], p[1]))[:k]


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)
