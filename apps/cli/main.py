from __future__ import annotations

import argparse
import logging
import signal
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from packages.core.alerts.notifier import make_notifier
from packages.core.enforcement.enforcer import LimitEnforcer
from packages.core.enforcement.limits import LimitConfig
from packages.core.enforcement.terminator import ProcessTerminator
from packages.core.errors import ConfigError
from packages.core.logging_ import setup_logging
from packages.core.monitor.classifier import build_classifier
from packages.core.monitor.process_platform import PsutilPlatform
from packages.core.monitor.process_scanner import ProcessScanner
from packages.core.monitor.session_monitor import SessionMonitor
from packages.core.monitor.session_tracker import SessionTracker
from packages.shared.config import AppConfig
from packages.shared.store import ConfigStore
from packages.shared.timefmt import format_duration, parse_duration

log = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return value


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def _duration(text: str) -> timedelta:
    try:
        return parse_duration(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gamer-limit",
        description="Close games once a playtime budget is used up.",
    )
    p.add_argument("--hours", type=_non_negative_int, default=0, help="budget hours")
    p.add_argument("--minutes", type=_non_negative_int, default=0, help="budget minutes")
    p.add_argument("--duration", type=_duration, default=None,
                   help='budget as "1h 30m" or "1:30:00" (instead of --hours/--minutes)')
    p.add_argument("--warning-margin", type=_non_negative_int, default=None, metavar="MINUTES",
                   help="warn this many minutes before closing the game (default: from config, 5)")
    p.add_argument("--scan-interval", type=_positive_float, default=None, metavar="SECONDS",
                   help="seconds between process scans (default: from config, 15)")
    p.add_argument("--config", type=Path, default=None, help="game configuration JSON")
    p.add_argument("--monitor-only", action="store_true", help="track playtime, never notify or close games")
    p.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return p


def build_limits(args: argparse.Namespace, cfg: AppConfig) -> LimitConfig:
    margin_minutes = args.warning_margin if args.warning_margin is not None else cfg.warning_margin_minutes
    margin = timedelta(minutes=margin_minutes)
    if args.duration is not None:
        if args.hours or args.minutes:
            raise ConfigError("use either --duration or --hours/--minutes, not both")
        return LimitConfig.from_duration(args.duration, margin)
    return LimitConfig.from_hours_minutes(args.hours, args.minutes, margin)


def build_monitor(args: argparse.Namespace, cfg: AppConfig, limits: LimitConfig) -> SessionMonitor:
    platform = PsutilPlatform()
    scanner = ProcessScanner(platform, build_classifier(cfg))
    enforcer = None
    if not args.monitor_only:
        terminator = ProcessTerminator(platform, **cfg.to_terminator_config())
        enforcer = LimitEnforcer(limits, make_notifier(cfg.notifier), terminator)
    interval = args.scan_interval if args.scan_interval is not None else cfg.scan_interval_seconds
    return SessionMonitor(scanner, SessionTracker(), enforcer, interval_seconds=interval)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    store = ConfigStore(args.config)
    cfg = store.load()
    log.info("Using game config %s", store.path())

    try:
        limits = build_limits(args, cfg)
    except ConfigError as e:
        log.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    monitor = build_monitor(args, cfg, limits)
    log.info(
        "Budget %s per game, warning %s before the end%s",
        format_duration(limits.total_budget),
        format_duration(limits.warning_margin),
        " (monitor only)" if args.monitor_only else "",
    )

    def signal_handler(sig, frame):
        log.info("Received signal %s, shutting down...", sig)
        monitor.stop()

    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, signal_handler)

    monitor.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
