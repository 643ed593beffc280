import argparse
import logging
import sys
import time
from typing import List

from . import __version__
from .config import DEFAULT_FILEPATH_FORMAT, ConfigurationError, Level, LoggingConfig, parse_level, parse_module_levels


def _config_from_args(args: argparse.Namespace) -> LoggingConfig:
    return LoggingConfig.from_values(
        logging_level=args.level,
        module_levels=parse_module_levels(args.module_level),
        filepath_format=args.file,
    )


def cmd_emit(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    severity = parse_level(args.severity)
    cfg.apply()
    logger = logging.getLogger(args.logger)
    messages: List[str] = args.message or [line.rstrip("\n") for line in sys.stdin]
    for message in messages:
        logger.log(severity, "%s", message)
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    cfg.apply()
    logger = logging.getLogger(args.logger)
    logger.info("Starting demo.")
    logger.debug("Configuration:\nlevel=%s\nfile=%s", cfg.logging_level.label, cfg.filepath_format)
    logger.info("Downloading...")
    for done in range(0, args.steps + 1):
        # "\r" replaces the previous console line
        logger.info("\rDownloading... %d/%d", done, args.steps)
        if args.delay:
            time.sleep(args.delay)
    logger.warning("Disk usage is above 80%.")
    logger.error("Could not reach mirror.\nFalling back to primary.")
    logger.log(Level.TRACE, "demo finished")
    return 0


def _add_dispatch_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--level", default="info", help="Minimum level for both sinks (error, warn, info, debug, trace)")
    p.add_argument(
        "--module-level",
        action="append",
        metavar="NAME=LEVEL",
        help="Minimum level for a specific logger and its children (repeatable)",
    )
    p.add_argument(
        "--file",
        default=DEFAULT_FILEPATH_FORMAT,
        help=f"Log file path, strftime-formatted with UTC time (default: {DEFAULT_FILEPATH_FORMAT})",
    )
    p.add_argument("--logger", default="main", help="Logger name the records are emitted under")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="setup-logging", description="Log to the console and a file with personal formatting.")
    # Global --version (argparse will exit 0 before validating subcommands)
    parser.add_argument(
        "--version",
        action="version",
        version=f"setup_logging {__version__}",
        help="Show version and exit",
    )
    sub = parser.add_subparsers(dest="cmd")

    emit_parser = sub.add_parser("emit", help="Log messages (arguments, or stdin lines) through both sinks")
    emit_parser.add_argument("message", nargs="*", help="Messages to log; read from stdin if omitted")
    emit_parser.add_argument("--severity", default="info", help="Level of the emitted records (default: info)")
    _add_dispatch_arguments(emit_parser)
    emit_parser.set_defaults(func=cmd_emit)

    demo_parser = sub.add_parser("demo", help="Show the formatting with a short sample")
    demo_parser.add_argument("--steps", type=int, default=5, help="Progress updates to overwrite")
    demo_parser.add_argument("--delay", type=float, default=0.2, help="Seconds between progress updates")
    _add_dispatch_arguments(demo_parser)
    demo_parser.set_defaults(func=cmd_demo)

    version_parser = sub.add_parser("version", help="Show version and exit")
    version_parser.set_defaults(func=lambda _: (print(f"setup_logging {__version__}"), 0)[1])

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    if not getattr(args, "cmd", None):  # No subcommand provided
        parser.print_help()
        return 0
    try:
        return args.func(args)
    except ConfigurationError as exc:
        print(f"[setup_logging] {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
