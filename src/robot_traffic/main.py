"""Main entry point for the robot traffic simulation."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from robot_traffic.adapters.config import AppConfig
from robot_traffic.adapters.csv_files import (
    CsvReportWriter,
    discover_route_sources,
    load_stations,
)
from robot_traffic.adapters.observers import LoggingObserver
from robot_traffic.application import SimulationError, SimulationResult, TrafficSimulation

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line overrides for the configuration."""
    parser = argparse.ArgumentParser(
        description="Simulate robots passing stations and report traffic conditions",
    )
    parser.add_argument("--config", help="TOML configuration file with a [simulation] section")
    parser.add_argument("--stations", help="Stations CSV file (name, lat, lon)")
    parser.add_argument("--routes-dir", help="Directory with one <robot id>.csv per robot")
    parser.add_argument("--report", help="Traffic report CSV file to write")
    parser.add_argument(
        "--vehicle-id",
        type=int,
        action="append",
        dest="vehicle_ids",
        help="Robot id to simulate (repeatable)",
    )
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> AppConfig:
    """Build the configuration: environment, then TOML file, then command line."""
    config = AppConfig(config_file=args.config) if args.config else AppConfig()
    config = config.apply_config_file()
    return config.with_overrides(
        stations_file=args.stations,
        routes_dir=args.routes_dir,
        report_file=args.report,
        vehicle_ids=args.vehicle_ids,
        log_level=args.log_level,
    )


async def main(argv: Sequence[str] | None = None) -> SimulationResult:
    """Main application entry point."""
    config = load_config(parse_args(argv))
    logging.getLogger().setLevel(config.log_level)

    stations = load_stations(config.stations_file)
    logger.info(f"Loaded {len(stations)} station(s) from {config.stations_file}")

    sources = discover_route_sources(config.routes_dir, config.vehicle_ids)
    if not sources:
        logger.warning(f"No route files found in {config.routes_dir}")

    with CsvReportWriter(config.report_file) as writer:
        simulation = TrafficSimulation(
            vehicle_ids=list(sources),
            stations=stations,
            route_sources=sources.values(),
            writer=writer,
            observer=LoggingObserver(),
            queue_size=config.worker_queue_size,
        )
        result = await simulation.run()

    logger.info(
        f"Dispatcher Terminated: {result.terminated} "
        f"({result.reports_written} report(s) written to {config.report_file})"
    )
    return result


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except (OSError, ValueError, SimulationError) as e:
        logger.error(f"Simulation aborted: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        sys.exit(130)


if __name__ == "__main__":
    run()
