"""Running count/sum/sum-of-squares accumulators."""

import math
from typing import Dict

from ..models.kit import KIT_CLASSES, ClassKey, KitClass, PerClassAmount


class RunningStats:
    """Incremental count, sum, sum of squares, min and max of one series."""

    def __init__(self):
        self.count = 0
        self.total = 0.0
        self.sum_sq = 0.0
        self.min = math.inf
        self.max = 0.0

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.sum_sq += value * value
        self.min = min(self.min, value)
        self.max = max(self.max, value)

    @property
    def mean(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total / self.count

    @property
    def variance(self) -> float:
        """Population variance E[X^2] - E[X]^2; 0 below two samples."""
        if self.count < 2:
            return 0.0
        mean = self.mean
        return self.sum_sq / self.count - mean * mean

    @property
    def stddev(self) -> float:
        return math.sqrt(max(0.0, self.variance))

    def snapshot(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "sum": self.total,
            "sum_sq": self.sum_sq,
            "min": self.min if self.count else 0.0,
            "max": self.max,
            "mean": self.mean,
            "variance": self.variance,
        }


class PerClassStats:
    """One RunningStats per kit class, fed a whole PerClassAmount at a time."""

    def __init__(self):
        self.count = 0
        self._stats: Dict[KitClass, RunningStats] = {
            kit_class: RunningStats() for kit_class in KIT_CLASSES
        }

    def add(self, amounts: PerClassAmount) -> None:
        self.count += 1
        for kit_class, value in amounts.items():
            self._stats[kit_class].add(value)

    def __getitem__(self, kit_class: ClassKey) -> RunningStats:
        return self._stats[KitClass(kit_class)]

    def mean(self, kit_class: ClassKey) -> float:
        return self[kit_class].mean

    def variance(self, kit_class: ClassKey) -> float:
        return self[kit_class].variance

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        return {kit_class.value: stats.snapshot() for kit_class, stats in self._stats.items()}
