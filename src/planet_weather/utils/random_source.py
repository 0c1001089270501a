"""
Injectable random-number sources for the weather simulation.
All stochastic decisions draw uniform floats in [0, 1) from one of these.
"""

import numpy as np
from typing import Optional, Sequence, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Anything that produces uniform floats in [0, 1)"""

    def next_float(self) -> float:
        ...


class NumpyRandomSource:
    """
    Random source backed by a numpy Generator.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random source.

        Args:
            seed: Random seed for reproducible weather
        """
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next_float(self) -> float:
        return float(self._rng.random())


class SequenceRandomSource:
    """
    Replays a fixed sequence of values, cycling when exhausted.
    Used to force specific branches of the weather state machine.
    """

    def __init__(self, values: Sequence[float]):
        """
        Args:
            values: Values in [0, 1) to replay in order

        Raises:
            ValueError: If the sequence is empty or holds values outside [0, 1)
        """
        if len(values) == 0:
            raise ValueError("SequenceRandomSource needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Random value {value} outside [0, 1)")

        self.values = [float(v) for v in values]
        self.position = 0
        self.draw_count = 0

    def next_float(self) -> float:
        value = self.values[self.position]
        self.position = (self.position + 1) % len(self.values)
        self.draw_count += 1
        return value


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw a float in [low, high) from any random source"""
    return low + (high - low) * rng.next_float()


def random_int(rng: RandomSource, low: int, count: int) -> int:
    """Draw an integer in [low, low + count)"""
    return low + int(rng.next_float() * count)
