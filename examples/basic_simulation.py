"""Basic vertical scaling example: gradual vs instantaneous PE scaling."""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from vmscalesim.core.simulator import Simulator
from vmscalesim.utils.logger import setup_logger
from configs import load_with_defaults


def run(strategy: str, logger) -> dict:
    config = load_with_defaults()
    config['simulation']['duration'] = 300
    config['diagnostics']['enabled'] = False
    config['scaling'][0]['strategy'] = strategy

    simulator = Simulator(config)
    results = simulator.run()

    logger.info(f"--- {strategy} ---")
    logger.info(f"Tasks: {results['completed_tasks']}/{results['total_tasks']} completed")
    logger.info(f"Scale up/down: {results['num_scale_up']}/{results['num_scale_down']}")
    logger.info(f"Mean CPU utilization: {results.get('mean_cpu_utilization', 0):.2%}")
    logger.info(f"Mean PEs: {results.get('mean_number_of_pes', 0):.2f}")
    if 'median_task_duration' in results:
        logger.info(f"Median task duration: {results['median_task_duration']:.1f}s")
    return results


def main():
    """Compare the two scaling strategies on the default workload."""
    logger = setup_logger("BasicSimulation")
    logger.info("=== Vertical Scaling Strategies ===")

    for strategy in ('gradual', 'instantaneous'):
        run(strategy, logger)

    logger.info("Simulation complete!")


if __name__ == "__main__":
    main()
