"""
Bookmap Watcher CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the frame source, classifier and alert dispatcher, and run the poll loop.

Usage:
    python main.py                                  # Watch the primary display
    python main.py --interval 5 --monitor 2
    python main.py --source recordings/ --once      # Replay saved screenshots
    python main.py --config watcher.yaml --no-classifier

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from bookmap_watcher.alerts import AlertDispatcher, DesktopNotifier
from bookmap_watcher.capture import open_source
from bookmap_watcher.classifier_client import StockPriceClient
from bookmap_watcher.config import AppConfig, load_config, validate_config
from bookmap_watcher.controller import PollController


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Bookmap Watcher: alerts when a price bubble reaches a red line",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--source",
        type=str,
        help="'screen' or a path to an image file/directory to replay. Overrides config.",
    )
    parser.add_argument(
        "--monitor",
        type=int,
        help="mss monitor index (1 = primary display). Overrides config.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between detection cycles. Overrides config.",
    )
    parser.add_argument(
        "--capture-timeout",
        type=float,
        help="Screen grab timeout in seconds. Overrides config.",
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        help="Classification service URL. Overrides config.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Classification request timeout in seconds. Overrides config.",
    )
    parser.add_argument(
        "--no-classifier",
        action="store_true",
        help="Do not call the classification service.",
    )
    parser.add_argument(
        "--snapshot-path",
        type=str,
        help="Where to write the per-cycle PNG snapshot. Overrides config.",
    )
    parser.add_argument(
        "--no-snapshot",
        action="store_true",
        help="Do not write snapshots to disk.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit.",
    )

    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a new validated config with CLI overrides applied."""
    capture = config.capture
    if args.source is not None:
        capture = dataclasses.replace(capture, source=args.source)
    if args.monitor is not None:
        capture = dataclasses.replace(capture, monitor_index=args.monitor)
    if args.capture_timeout is not None:
        capture = dataclasses.replace(capture, timeout_s=args.capture_timeout)

    detection = config.detection
    if args.interval is not None:
        detection = dataclasses.replace(detection, poll_interval_s=args.interval)

    classifier = config.classifier
    if args.endpoint is not None:
        classifier = dataclasses.replace(classifier, endpoint=args.endpoint)
    if args.timeout is not None:
        classifier = dataclasses.replace(classifier, timeout_s=args.timeout)
    if args.no_classifier:
        classifier = dataclasses.replace(classifier, enabled=False)

    snapshot = config.snapshot
    if args.snapshot_path is not None:
        snapshot = dataclasses.replace(snapshot, path=args.snapshot_path)
    if args.no_snapshot:
        snapshot = dataclasses.replace(snapshot, enabled=False)

    return validate_config(dataclasses.replace(
        config,
        capture=capture,
        detection=detection,
        classifier=classifier,
        snapshot=snapshot,
    ))


def main(argv=None) -> int:
    """Main execution loop."""
    args = parse_args(argv)

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_overrides(load_config(args.config), args)
        logger.info("Configuration active for this run.")
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        source = open_source(config.capture)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Initialization failed: %s", e)
        return 1

    classifier = None
    if config.classifier.enabled:
        classifier = StockPriceClient.from_config(config.classifier)

    dispatcher = AlertDispatcher(DesktopNotifier(), config.alert)
    snapshot_path = config.snapshot.path if config.snapshot.enabled else None

    controller = PollController(
        config,
        source=source,
        dispatcher=dispatcher,
        classifier=classifier,
        snapshot_path=snapshot_path,
    )

    # 3. Poll Loop
    try:
        controller.run(max_cycles=1 if args.once else None)
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    finally:
        # 4. Cleanup
        if classifier is not None:
            classifier.close()
        source.release()
        dispatcher.wait_pending(timeout=15)

    return 0


if __name__ == "__main__":
    sys.exit(main())
