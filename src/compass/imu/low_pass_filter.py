"""
Exponential low-pass filter for raw tri-axis sensor samples.

Suppresses high-frequency jitter in the accelerometer and magnetometer
streams before they are fused into a heading. Each output blends the new
sample with the previous output:

    out[i] = previous[i] + alpha * (sample[i] - previous[i])

The filter is pure: the caller keeps the returned vector and hands it back
as ``previous`` on the next call. The first call (``previous is None``)
passes the sample through unchanged, which seeds the state.

Samples are assumed finite. NaN or Inf components propagate into the output
unchanged; they are not clamped.

Usage:
    filtered = None
    for sample in samples:
        filtered = low_pass(sample, filtered)
"""

from __future__ import annotations

from typing import Optional

from compass.imu.vector import Vector3

# Same constant for both sensor types
ALPHA = 0.25


def low_pass(sample: Vector3, previous: Optional[Vector3], alpha: float = ALPHA) -> Vector3:
    """Blend ``sample`` into ``previous`` with a single-pole IIR step."""
    if previous is None:
        return sample

    return Vector3(
        previous.x + alpha * (sample.x - previous.x),
        previous.y + alpha * (sample.y - previous.y),
        previous.z + alpha * (sample.z - previous.z),
    )


class LowPassFilter:
    """Stateful wrapper holding the filtered vector for one sensor stream."""

    def __init__(self, alpha: float = ALPHA) -> None:
        self.alpha = alpha
        self.value: Optional[Vector3] = None
        self.sample_count = 0

    def update(self, sample: Vector3) -> Vector3:
        self.value = low_pass(sample, self.value, self.alpha)
        self.sample_count += 1
        return self.value

    @property
    def ready(self) -> bool:
        return self.value is not None
