"""Task generation for simulation workloads."""

import numpy as np
from typing import Dict, List, Optional

from .arrival_process import ArrivalProcess
from ..vm.vm import Task
from ..utils.io import load_json
from ..utils.logger import setup_logger


class TaskGenerator:
    """Generate tasks submitted to the simulated VM.

    Supports:
    - Arrival processes (poisson, uniform, gamma) with sampled sizes
    - Burst patterns alternating busy and idle phases
    - Trace replay from a JSON file
    """

    def __init__(self, config: Dict, rng: Optional[np.random.Generator] = None):
        """Initialize task generator.

        Args:
            config: Workload configuration
            rng: Random generator (seeded from ``seed`` in config if None)
        """
        self.config = config
        self.logger = setup_logger(self.__class__.__name__)
        self.rng = rng if rng is not None else np.random.default_rng(config.get('seed'))

        self.workload_type = config.get('type', 'poisson')
        self.arrival_rate = config.get('arrival_rate', 0.5)
        self.max_tasks = config.get('max_tasks')

        self.pes_choices = config.get('pes', [1, 2])
        self.length_config = config.get('length', {})
        self.ram_per_pe_mb = config.get('ram_per_pe_mb', 256.0)
        self.bw_per_task = config.get('bw_per_task', 10.0)

        self.task_counter = 0

    def generate(self, start_time: float = 0.0, end_time: float = 600.0) -> List[Task]:
        """Generate tasks for the simulation period.

        Args:
            start_time: Start time
            end_time: End time

        Returns:
            Tasks sorted by submission time
        """
        self.logger.info(f"Generating {self.workload_type} workload...")

        if self.workload_type in ('poisson', 'uniform', 'gamma'):
            process = ArrivalProcess(self.workload_type, self.arrival_rate, self.rng)
            tasks = [self._create_task(t) for t in process.generate_arrivals(start_time, end_time)]
        elif self.workload_type == 'burst':
            tasks = self._generate_burst_pattern(start_time, end_time)
        elif self.workload_type == 'trace':
            tasks = self._generate_from_trace(start_time, end_time)
        else:
            raise ValueError(f"Unknown workload type: {self.workload_type}")

        tasks.sort(key=lambda task: task.submitted_at)
        if self.max_tasks is not None:
            tasks = tasks[:self.max_tasks]

        self.logger.info(f"Generated {len(tasks)} tasks")
        return tasks

    def _generate_burst_pattern(self, start_time: float, end_time: float) -> List[Task]:
        """Alternate bursts at three times the base rate with idle phases."""
        burst_duration = self.config.get('burst_duration', 60)
        idle_duration = self.config.get('idle_duration', 120)
        burst_process = ArrivalProcess('poisson', self.arrival_rate * 3, self.rng)

        tasks = []
        current_time = start_time
        in_burst = True

        while current_time < end_time:
            if in_burst:
                burst_end = min(current_time + burst_duration, end_time)
                for arrival_time in burst_process.generate_arrivals(current_time, burst_end):
                    tasks.append(self._create_task(arrival_time))
                current_time = burst_end
            else:
                current_time = min(current_time + idle_duration, end_time)
            in_burst = not in_burst

        return tasks

    def _generate_from_trace(self, start_time: float, end_time: float) -> List[Task]:
        """Replay ``[{"arrival_time", "pes", "length"}, ...]`` from a JSON file."""
        trace_path = self.config.get('trace_path')
        if not trace_path:
            raise ValueError("trace_path required for trace workload")

        data = load_json(trace_path)
        entries = data if isinstance(data, list) else data.get('tasks', [])

        tasks = []
        for entry in entries:
            arrival_time = float(entry['arrival_time'])
            if not start_time <= arrival_time < end_time:
                continue
            pes = int(entry.get('pes', 1))
            tasks.append(Task(
                task_id=self._next_id(),
                pes=pes,
                length=float(entry['length']),
                submitted_at=arrival_time,
                ram_mb=float(entry.get('ram_mb', pes * self.ram_per_pe_mb)),
                bw=float(entry.get('bw', self.bw_per_task)),
            ))
        return tasks

    def _create_task(self, arrival_time: float) -> Task:
        pes = int(self.rng.choice(self.pes_choices))
        return Task(
            task_id=self._next_id(),
            pes=pes,
            length=self._sample_length(self.length_config),
            submitted_at=arrival_time,
            ram_mb=pes * self.ram_per_pe_mb,
            bw=self.bw_per_task,
        )

    def _next_id(self) -> int:
        task_id = self.task_counter
        self.task_counter += 1
        return task_id

    def _sample_length(self, config: Dict) -> float:
        """Sample task length (MI) from the configured distribution.

        Args:
            config: Length configuration

        Returns:
            Sampled length
        """
        distribution = config.get('distribution', 'gamma')
        mean = config.get('mean', 20000.0)
        std = config.get('std', 10000.0)
        min_val = config.get('min', 1000.0)
        max_val = config.get('max', 200000.0)

        if distribution == 'gamma':
            shape = (mean / std) ** 2
            scale = std ** 2 / mean
            sample = self.rng.gamma(shape, scale)
        elif distribution == 'normal':
            sample = self.rng.normal(mean, std)
        elif distribution == 'uniform':
            sample = self.rng.uniform(min_val, max_val)
        elif distribution == 'constant':
            return float(mean)
        else:
            raise ValueError(f"Unknown distribution: {distribution}")

        return float(np.clip(sample, min_val, max_val))
