"""Task arrival process modeling."""

import numpy as np
from typing import List, Optional


class ArrivalProcess:
    """Models task arrival patterns.

    Supports:
    - Poisson (memoryless arrivals)
    - Uniform (evenly spaced)
    - Gamma (bursty)
    """

    def __init__(self, process_type: str = 'poisson', rate: float = 0.5,
                 rng: Optional[np.random.Generator] = None):
        """Initialize arrival process.

        Args:
            process_type: Type of arrival process
            rate: Arrival rate (tasks per second)
            rng: Random generator (a fresh unseeded one if None)
        """
        if rate <= 0:
            raise ValueError(f"Arrival rate must be positive, got {rate}")
        self.process_type = process_type
        self.rate = rate
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate_arrivals(self, start_time: float, end_time: float) -> List[float]:
        """Generate arrival times in [start_time, end_time).

        Args:
            start_time: Start time
            end_time: End time

        Returns:
            Sorted arrival times
        """
        if self.process_type == 'poisson':
            return self._draw_until(start_time, end_time,
                                    lambda: self.rng.exponential(1.0 / self.rate))
        elif self.process_type == 'uniform':
            num_arrivals = int((end_time - start_time) * self.rate)
            return [start_time + i / self.rate for i in range(num_arrivals)]
        elif self.process_type == 'gamma':
            # Lower shape = more bursty
            shape = 0.5
            scale = (1.0 / self.rate) / shape
            return self._draw_until(start_time, end_time,
                                    lambda: self.rng.gamma(shape, scale))
        else:
            raise ValueError(f"Unknown arrival process: {self.process_type}")

    @staticmethod
    def _draw_until(start_time: float, end_time: float, draw) -> List[float]:
        arrivals = []
        current_time = start_time
        while True:
            current_time += draw()
            if current_time >= end_time:
                return arrivals
            arrivals.append(float(current_time))
