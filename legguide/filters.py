"""First-order low-pass filtering of scalar signals."""

from __future__ import annotations

import math


class LowPassFilter:
    """Exponential low-pass filter defined by a sample period and a cut-off frequency.

    The first value added after construction or :meth:`clear` seeds the
    filter, so the output starts at that value instead of ramping up from zero.
    """

    def __init__(self, sample_period: float, cut_frequency: float):
        self.weight = 1.0 / (1.0 + 1.0 / (2.0 * math.pi * sample_period * cut_frequency))
        self._started = False
        self._past_value = 0.0

    def add_value(self, value: float) -> None:
        """Feed one new sample into the filter."""
        if not self._started:
            self._started = True
            self._past_value = value
        self._past_value = self.weight * value + (1.0 - self.weight) * self._past_value

    def value(self) -> float:
        """Return the current filtered value."""
        return self._past_value

    def clear(self) -> None:
        """Forget the history; the next sample seeds the filter again."""
        self._started = False