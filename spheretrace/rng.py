"""Mersenne Twister random source with the helpers the renderer samples from."""

from __future__ import annotations

import math
import os
import random

import numpy as np

_MASK32 = 0xFFFFFFFF
_STATE_SIZE = 624
_UINT32_MAX = _MASK32


def _mt19937_state(seed: int) -> tuple:
    """Build the generator state that a 32-bit Mersenne Twister has after seeding."""
    words = [seed & _MASK32]
    for i in range(1, _STATE_SIZE):
        prev = words[-1]
        words.append((1812433253 * (prev ^ (prev >> 30)) + i) & _MASK32)
    return (3, (*words, _STATE_SIZE), None)


class Rng:
    """MT19937 generator; pass ``None`` as seed to draw one from the OS."""

    def __init__(self, seed: int | None = None) -> None:
        self._engine = random.Random()
        self.reseed(seed)

    def reseed(self, seed: int | None = None) -> None:
        """Restart the sequence from ``seed`` (or from OS entropy when ``None``)."""
        if seed is None:
            seed = int.from_bytes(os.urandom(4), "little")
        self._engine.setstate(_mt19937_state(seed))

    def uint32(self) -> int:
        """Return the next raw 32-bit output."""
        return self._engine.getrandbits(32)

    def uint32_between(self, low: int, high: int) -> int:
        """Return an integer in ``[low, high]`` using the modulo reduction."""
        if low > high:
            raise ValueError(f"empty range: {low} > {high}")
        return low + self.uint32() % (high - low + 1)

    def unit_float(self) -> float:
        """Return a float in ``[0, 1]``."""
        return self.uint32() / _UINT32_MAX

    def float_between(self, low: float, high: float) -> float:
        """Return a float in ``[low, high]``."""
        return low + self.uint32() / (_UINT32_MAX / (high - low))

    def unit_sphere(self) -> np.ndarray:
        """Return a uniformly distributed unit vector."""
        theta = self.float_between(0.0, 2.0 * math.pi)
        cos_phi = max(-1.0, min(1.0, self.float_between(-1.0, 1.0)))
        phi = math.acos(cos_phi)
        sin_phi = math.sin(phi)
        return np.array(
            [sin_phi * math.cos(theta), sin_phi * math.sin(theta), math.cos(phi)]
        )