"""Main entry point for the VMScaleSim simulator."""

import argparse
import sys
from pathlib import Path

from vmscalesim.core.simulator import Simulator
from vmscalesim.utils.io import save_yaml
from vmscalesim.utils.logger import setup_logger
from vmscalesim.utils.visualization import plot_results
from configs import load_with_defaults


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="VMScaleSim: vertical VM scaling simulator"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a configuration file layered over the defaults",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="results",
        help="Directory to save results",
    )
    parser.add_argument(
        "--visualize",
        action="store_true",
        help="Generate visualization plots",
    )
    parser.add_argument(
        "--no-diagnostics",
        action="store_true",
        help="Disable per-tick VM status lines",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main function."""
    args = parse_args(argv)

    log_level = "DEBUG" if args.verbose else "INFO"
    logger = setup_logger("VMScaleSim", level=log_level)

    logger.info("=== VMScaleSim: vertical VM scaling simulator ===")

    try:
        config = load_with_defaults(args.config)
        if args.no_diagnostics:
            config.setdefault('diagnostics', {})['enabled'] = False

        logger.info(f"Vm: {config['vm'].get('pes')} PEs, workload: {config['workload'].get('type')}")

        simulator = Simulator(config)
        results = simulator.run()

        logger.info("=== Simulation Results ===")
        logger.info(f"Total Tasks: {results['total_tasks']}")
        logger.info(f"Completed Tasks: {results['completed_tasks']}")
        logger.info(f"Mean CPU Utilization: {results.get('mean_cpu_utilization', 0):.2%}")
        logger.info(f"Mean Signal: {results.get('mean_signal', 0):.2f}")
        logger.info(f"Scale Up Events: {results['num_scale_up']}")
        logger.info(f"Scale Down Events: {results['num_scale_down']}")
        logger.info(f"Final PEs: {results['final_pes']}")

        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        results_file = output_dir / "results.yaml"
        save_yaml(results, results_file)
        timeline_file = simulator.metrics_collector.export_timeline(output_dir / "timeline.csv")
        logger.info(f"Results saved to {results_file} and {timeline_file}")

        if args.visualize:
            logger.info("Generating visualization plots...")
            plot_results(results, simulator.metrics_collector.to_dataframe(), output_dir)
            logger.info(f"Plots saved to {output_dir}")

        logger.info("Simulation completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Simulation failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
