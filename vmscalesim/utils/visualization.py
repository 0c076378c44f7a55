"""Visualization utilities for simulation results."""

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from pathlib import Path
from typing import Dict

sns.set_style("whitegrid")
sns.set_palette("husl")


def plot_results(results: Dict, timeline: pd.DataFrame, output_dir: Path) -> None:
    """Generate all visualization plots.

    Args:
        results: Results dictionary from simulation
        timeline: Per-tick timeline from MetricsCollector.to_dataframe()
        output_dir: Directory to save plots
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if not timeline.empty:
        plot_signal_timeline(timeline, output_dir / "signal_timeline.png",
                             results.get('scaling_events', []))
        plot_capacity_timeline(timeline, output_dir / "capacity_timeline.png")


def plot_signal_timeline(timeline: pd.DataFrame, output_path: Path, scaling_events=()) -> None:
    """Plot raw CPU utilization against the smoothed signal.

    Args:
        timeline: Per-tick timeline
        output_path: Output file path
        scaling_events: Applied scaling requests, drawn as vertical markers
    """
    fig, ax = plt.subplots(figsize=(12, 5))

    ax.plot(timeline['time'], timeline['cpu_utilization'], label='CPU utilization',
            linewidth=1, alpha=0.6)
    if 'signal' in timeline:
        ax.plot(timeline['time'], timeline['signal'], label='Smoothed signal', linewidth=2)
    if 'core_fraction' in timeline:
        ax.plot(timeline['time'], timeline['core_fraction'], label='Core fraction',
                linewidth=1, linestyle='--')

    for event in scaling_events:
        color = 'tab:red' if event['direction'] == 'up' else 'tab:green'
        ax.axvline(event['time'], color=color, alpha=0.3)

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Load')
    ax.set_title('Load Signal Over Time')
    ax.legend()
    ax.grid(alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()


def plot_capacity_timeline(timeline: pd.DataFrame, output_path: Path) -> None:
    """Plot PE count and running tasks over time."""
    fig, ax1 = plt.subplots(figsize=(12, 5))

    ax1.step(timeline['time'], timeline['number_of_pes'], where='post',
             label='PEs', linewidth=2, color='steelblue')
    ax1.set_xlabel('Time (s)')
    ax1.set_ylabel('PEs')

    ax2 = ax1.twinx()
    ax2.plot(timeline['time'], timeline['running_tasks'], label='Running tasks',
             color='coral', alpha=0.7)
    ax2.set_ylabel('Running tasks')

    ax1.set_title('VM Capacity and Load')
    fig.legend(loc='upper right')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()
