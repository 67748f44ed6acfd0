"""Main entry point for the cardinality churn generator."""
import argparse
import logging
import sys
import threading
import signal
import time

from churnbird.config import Config, build_config, read_config_file
from churnbird.control_api import ControlAPI
from churnbird.engine import TurnoverEngine, run_engine_thread
from churnbird.population import Population
from churnbird.prom_exporter import PrometheusExporter

USAGE = "%(prog)s [options] NUM_RANDOM_FAMILIES MAX_SERIES_PER_FAMILY"


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="churnbird",
        usage=USAGE,
        description="Serve random Prometheus gauge families whose series churn over time"
    )
    parser.add_argument(
        "num_families",
        type=int,
        metavar="NUM_RANDOM_FAMILIES",
        help="Number of metric families to generate"
    )
    parser.add_argument(
        "max_series_per_family",
        type=int,
        metavar="MAX_SERIES_PER_FAMILY",
        help="Upper bound on series per family (each family gets between half and all of it)"
    )
    parser.add_argument(
        "--listen-address",
        help="The address and port on which to serve metrics (default :8080)"
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        help="The seed to use, for deterministic metrics generation (default: current time)"
    )
    parser.add_argument(
        "--turnover-rate",
        type=int,
        help=(
            "The minimum number of series to replace per family at each turnover interval, "
            "as the denominator of a fraction of the total series (0 to disable, default 6)"
        )
    )
    parser.add_argument(
        "--turnover-interval",
        help="The interval at which to replace series in each family, e.g. 15s or 1m (default 15s)"
    )
    parser.add_argument(
        "--fixed-label-name",
        help="Key of the label every series carries (default fixed_label)"
    )
    parser.add_argument(
        "--fixed-label-cardinality",
        type=int,
        help="Number of distinct values of the fixed label (default 2)"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Optional configuration YAML file; flags take precedence"
    )
    parser.add_argument(
        "--log-level",
        help="Log level (default INFO, or LOG_LEVEL from the environment)"
    )
    parser.add_argument(
        "--control-port",
        type=int,
        help="Port of the control API (default 8081)"
    )
    parser.add_argument(
        "--no-control-api",
        action="store_true",
        help="Do not start the control API"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """Build the validated config from parsed arguments."""
    raw = read_config_file(args.config) if args.config else {}

    overrides = {
        ("population", "num_families"): args.num_families,
        ("population", "max_series_per_family"): args.max_series_per_family,
        ("population", "fixed_label_name"): args.fixed_label_name,
        ("population", "fixed_label_cardinality"): args.fixed_label_cardinality,
        ("exporters.prometheus", "listen_address"): args.listen_address,
        ("exporters.control_api", "port"): args.control_port,
        ("exporters.control_api", "enabled"): False if args.no_control_api else None,
        ("global", "seed"): args.random_seed,
        ("global", "log_level"): args.log_level,
        ("turnover", "rate"): args.turnover_rate,
        ("turnover", "interval_s"): args.turnover_interval,
    }
    return build_config(raw, overrides)


def main(argv=None):
    """Main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = config_from_args(args)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.global_.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("churnbird - Cardinality Churn Generator")
    logger.info("=" * 60)
    logger.info(f"Random seed: {config.global_.seed}")
    logger.info(
        f"Turnover: rate {config.turnover.rate}, "
        f"interval {config.turnover.interval_s}s"
    )

    # Generate population
    start_time = time.time()
    population = Population.generate(
        config.population.num_families,
        config.population.max_series_per_family,
        config.global_.seed,
        config.population.fixed_label_name,
        config.population.fixed_label_cardinality
    )
    logger.info(f"Done generating random series: {time.time() - start_time:.3f}s")
    for family in population.family_sizes():
        logger.info(f"- {family['name']}: {family['size']} series")

    # Start metrics endpoint
    exporter = PrometheusExporter(config.exporters.prometheus, population)
    try:
        exporter.start()
    except Exception as e:
        logger.error(f"Metrics listener error: {e}", exc_info=True)
        sys.exit(1)

    # Start turnover in separate thread
    engine = TurnoverEngine(population, config.turnover)
    engine_thread = threading.Thread(
        target=run_engine_thread,
        args=(engine,),
        daemon=True
    )
    engine_thread.start()

    # Setup signal handlers
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        engine.stop()
        exporter.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    control_config = config.exporters.control_api
    if not control_config.enabled:
        exporter.server_thread.join()
        return

    # Run control API (blocking)
    control_api = ControlAPI(engine, exporter.collector)
    logger.info(f"Starting control API on port {control_config.port}")
    try:
        control_api.run(host=control_config.bind_address, port=control_config.port)
    except Exception as e:
        logger.error(f"Control API error: {e}", exc_info=True)
        engine.stop()
        sys.exit(1)

    engine.stop()
    exporter.shutdown()


if __name__ == "__main__":
    main()
