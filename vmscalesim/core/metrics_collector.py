"""Metrics collection and aggregation."""

import numpy as np
import pandas as pd
from collections import defaultdict
from pathlib import Path
from typing import Dict, List

from ..utils.logger import setup_logger


class MetricsCollector:
    """Collect and aggregate simulation metrics.

    Tracks a per-tick time series of the VM and the engine's signal, the
    scaling requests that were applied, and task completion times.
    """

    def __init__(self, config: Dict):
        """Initialize metrics collector.

        Args:
            config: Configuration dictionary
        """
        self.config = config
        self.logger = setup_logger(self.__class__.__name__)

        self.timeline = defaultdict(list)
        self.scaling_events: List[Dict] = []
        self.completion_times: List[float] = []

        self.percentiles = config.get('metrics', {}).get('percentiles', [50, 90, 95, 99])

    def record_tick(self, timestamp: float, sample: Dict) -> None:
        """Record VM state at a tick.

        Args:
            timestamp: Current simulation time
            sample: Metric name to value
        """
        self.timeline['time'].append(timestamp)
        for key, value in sample.items():
            self.timeline[key].append(value)

    def record_scaling(self, request: Dict) -> None:
        self.scaling_events.append(request)

    def record_task_completion(self, task) -> None:
        self.completion_times.append(task.finish_time - task.submitted_at)

    def to_dataframe(self) -> pd.DataFrame:
        """Get the per-tick timeline as a DataFrame."""
        return pd.DataFrame(dict(self.timeline))

    def export_timeline(self, path: str) -> Path:
        """Write the per-tick timeline to CSV.

        Args:
            path: Output file path

        Returns:
            Path written
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path

    def compute_metrics(self) -> Dict:
        """Compute aggregate metrics from collected data.

        Returns:
            Dictionary of computed metrics
        """
        results = {
            'num_ticks': len(self.timeline['time']),
            'num_scaling_events': len(self.scaling_events),
            'num_scale_up': sum(1 for e in self.scaling_events if e['direction'] == 'up'),
            'num_scale_down': sum(1 for e in self.scaling_events if e['direction'] == 'down'),
            'completed_tasks': len(self.completion_times),
        }

        for name in ('cpu_utilization', 'core_fraction', 'signal', 'number_of_pes', 'ram_utilization'):
            values = self.timeline.get(name)
            if values:
                results[f'mean_{name}'] = float(np.mean(values))
                results[f'max_{name}'] = float(np.max(values))
                results[f'min_{name}'] = float(np.min(values))

        if self.completion_times:
            results.update(self._compute_distribution_metrics(
                'task_duration', self.completion_times
            ))

        # PE-seconds provisioned, a proxy for cost
        times = self.timeline.get('time')
        pes = self.timeline.get('number_of_pes')
        if times and pes and len(times) > 1:
            results['pe_seconds'] = float(np.sum(np.diff(times) * np.asarray(pes[:-1])))

        return results

    def _compute_distribution_metrics(self, name: str, values: List[float]) -> Dict:
        results = {
            f'mean_{name}': float(np.mean(values)),
            f'median_{name}': float(np.median(values)),
            f'std_{name}': float(np.std(values)),
        }

        for p in self.percentiles:
            results[f'p{p}_{name}'] = float(np.percentile(values, p))

        return results

    def get_summary(self) -> str:
        """Get human-readable summary of metrics."""
        if not self.timeline['time']:
            return "No metrics collected"

        metrics = self.compute_metrics()
        summary = [
            "=== Metrics Summary ===",
            f"Ticks: {metrics['num_ticks']}",
            f"Mean CPU Utilization: {metrics.get('mean_cpu_utilization', 0):.2%}",
            f"Mean Signal: {metrics.get('mean_signal', 0):.2f}",
            f"Scaling events: {metrics['num_scale_up']} up / {metrics['num_scale_down']} down",
            f"Completed tasks: {metrics['completed_tasks']}",
        ]
        return "\n".join(summary)
