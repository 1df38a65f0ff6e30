"""Tri-axis sample value shared by the accelerometer and magnetometer paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """Three single-precision components in device-local axes."""

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        # Sensor samples arrive as 32-bit floats
        object.__setattr__(self, "x", float(np.float32(self.x)))
        object.__setattr__(self, "y", float(np.float32(self.y)))
        object.__setattr__(self, "z", float(np.float32(self.z)))

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "Vector3":
        """Build from any 3-element sequence (list, tuple, ndarray)."""
        if len(values) != 3:
            raise ValueError(f"Expected 3 components, got {len(values)}")
        return cls(values[0], values[1], values[2])

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))
