"""GPS module entry point.

Replays a JSON-lines fix file through the full recording pipeline and writes
one CSV capture, using ``config.txt`` (plus user overrides) for defaults::

    python -m sensor_logger.modules.GPS.main_gps --input fixes.jsonl
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from sensor_logger.core.logging_config import configure_logging, module_log_path
from sensor_logger.core.logging_utils import get_module_logger
from .config import DEFAULT_CONFIG_PATH, GPSConfig, load_gps_config
from .gps_core.errors import GPSRecorderError
from .gps_core.providers import InProcessLocationPlatform, StaticAuthorization
from .gps_core.replay import replay_fixes
from .recorder import GPSRecorder

logger = get_module_logger("MainGPS")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="GPS recorder (fix file replay)")
    parser.add_argument("--input", type=Path, required=True, help="JSON-lines fix file to replay")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Module config file (default: {DEFAULT_CONFIG_PATH.name})",
    )
    parser.add_argument("--output-dir", dest="output_dir", type=Path, default=None)
    parser.add_argument("--file-prefix", dest="file_prefix", default=None)
    parser.add_argument("--min-time-ms", dest="min_time_ms", type=int, default=None)
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
    )
    parser.add_argument(
        "--console",
        dest="console_output",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Echo logs to stdout",
    )
    return parser.parse_args(argv)


def setup_logging(config: GPSConfig) -> Path:
    """Configure root logging for a run; returns the log file path."""
    log_file = module_log_path(config.output_dir, config.sensor_name)
    configure_logging(
        config.log_level,
        force=True,
        console=config.console_output,
        log_file=log_file,
    )
    return log_file


async def run(config: GPSConfig, input_path: Path) -> int:
    platform = InProcessLocationPlatform()
    recorder = GPSRecorder.from_config(config, platform, StaticAuthorization(granted=True))

    if not recorder.enable_gps():
        logger.error("GPS unavailable, nothing recorded")
        return 1

    try:
        recorder.start_recording(datetime.now())
        delivered = await replay_fixes(input_path, platform)
        recorder.stop_recording()
    except (GPSRecorderError, OSError) as exc:
        logger.error("Recording failed: %s", exc, exc_info=True)
        return 1
    finally:
        recorder.disable_gps()

    logger.info("Recorded %d fixes to %s", delivered, recorder.last_gps_file)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    config = load_gps_config(args.config, args)
    log_file = setup_logging(config)

    logger.info("=" * 60)
    logger.info("%s starting (input=%s, log=%s)", config.display_name, args.input, log_file)
    logger.info("=" * 60)

    try:
        return asyncio.run(run(config, args.input))
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
        return 130


if __name__ == "__main__":
    sys.exit(main())
