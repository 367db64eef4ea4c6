"""
Command-line interface for MOS-DEF.

Usage:
    mos-def [global options] <command> [options]

Commands:
    list       List active monitors
    landscape  Rotate monitors to landscape (0°)
    portrait   Rotate monitors to portrait (90°)
    toggle     Toggle between landscape and portrait
    init       Write a default config.toml
    validate   Check configuration and display backend
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config, SelectionStore, RunOptions
from .display import get_setter
from .exceptions import (
    MosDefError,
    ConfigError,
    ConfigValidationError,
    StateError,
    SelectorParseError,
    NoMatchError,
    MonitorDetectionError,
    BackendNotFoundError,
    RemoteSessionError,
)
from .monitor_detection import MonitorDetector
from .rotation import RotationCommand
from .commands import (
    list_monitors,
    rotate,
    init_config,
    validate_config,
    save_default,
    clear_default,
)

ROTATION_COMMANDS = {command.value: command for command in RotationCommand}


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mos-def",
        description="Monitor Orientation Switcher: rotate monitors with a confirm-or-revert safety net",
        epilog=(
            "Selectors: M# (monitor id), device:\"NAME\" (output name), "
            "name:\"substring\" (case-insensitive model name match)"
        ),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to config file"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print changes without applying them"
    )
    parser.add_argument(
        "--no-confirm",
        action="store_true",
        help="Skip the keep-or-revert prompt"
    )
    parser.add_argument(
        "--force-remote",
        action="store_true",
        help="Allow rotation from a remote (SSH) session"
    )
    parser.add_argument(
        "--revert-seconds",
        type=int,
        metavar="N",
        default=None,
        help="Revert automatically after N seconds unless confirmed"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mos-def {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    list_parser = subparsers.add_parser("list", help="List active monitors")
    list_parser.add_argument("--json", action="store_true", help="Output JSON")

    for name, help_text in (
        ("landscape", "Set monitors to landscape (0°)"),
        ("portrait", "Set monitors to portrait (90°)"),
        ("toggle", "Toggle between landscape and portrait"),
    ):
        rotate_parser = subparsers.add_parser(name, help=help_text)
        rotate_parser.add_argument("--only", metavar="SEL", help="Apply to a single monitor")
        rotate_parser.add_argument("--include", metavar="LIST", help="Apply to these monitors (comma-separated)")
        rotate_parser.add_argument("--exclude", metavar="LIST", help="Skip these monitors (comma-separated)")
        rotate_parser.add_argument("--save-default", metavar="SEL", help="Save a default selector and exit")
        rotate_parser.add_argument("--clear-default", action="store_true", help="Clear the saved default selector and exit")

    subparsers.add_parser("init", help="Initialize config")
    subparsers.add_parser("validate", help="Validate configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.revert_seconds is not None and args.revert_seconds < 0:
        parser.error("--revert-seconds must not be negative")

    logger = logging.getLogger(__name__)
    verbose = args.verbose

    try:
        if args.command == "init":
            setup_logging("DEBUG" if verbose else "WARNING")
            init_config(args.config)
            return 0

        config = Config.load(config_file=args.config)

        options = RunOptions.from_args(args, config.rotation, config.logging)
        verbose = options.verbose
        setup_logging("DEBUG" if verbose else config.logging.level)
        logger.debug(f"Run options: {options}")

        command = args.command
        if command is None:
            parser.print_help()
            return 1

        detector = MonitorDetector(config.display.backend, timeout=config.display.command_timeout)

        if command == "validate":
            return validate_config(config, detector)

        if command == "list":
            list_monitors(detector, json_output=args.json)
            return 0

        store = SelectionStore(Config.get_state_file())

        if args.save_default is not None:
            return save_default(store, args.save_default)
        if args.clear_default:
            return clear_default(store)

        setter = get_setter(
            detector.backend,
            persist_file=config.display.get_persist_path(),
            timeout=config.display.command_timeout,
        )
        return rotate(
            ROTATION_COMMANDS[command],
            options,
            detector,
            setter,
            store,
            only=args.only,
            include=args.include,
            exclude=args.exclude,
        )

    # Handle specific error types with appropriate exit codes and messages
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        return 130

    except ConfigValidationError as e:
        print(f"\n❌ Configuration Validation Error: {e}", file=sys.stderr)
        print("\nRun 'mos-def validate' for detailed diagnostics.", file=sys.stderr)
        return 78  # EX_CONFIG

    except ConfigError as e:
        print(f"\n❌ Configuration Error: {e}", file=sys.stderr)
        return 78  # EX_CONFIG

    except RemoteSessionError as e:
        print(f"\n❌ Refusing to Rotate: {e}", file=sys.stderr)
        return 2

    except SelectorParseError as e:
        print(f"\n❌ Invalid Selector: {e}", file=sys.stderr)
        return 2

    except NoMatchError as e:
        print(f"\n❌ {e}", file=sys.stderr)
        if e.suggestions:
            print(f"\n{e.suggestions}", file=sys.stderr)
        return 2

    except StateError as e:
        print(f"\n❌ State File Error: {e}", file=sys.stderr)
        return 3

    except BackendNotFoundError as e:
        print(f"\n❌ Display Backend Not Found\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        return 69  # EX_UNAVAILABLE

    except MonitorDetectionError as e:
        print(f"\n❌ Monitor Detection Failed: {e}", file=sys.stderr)
        return 3

    except MosDefError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        logger.error(str(e))
        if verbose:
            raise
        return 1

    except Exception as e:
        # Unexpected errors - show full traceback in verbose mode
        print(f"\n❌ Unexpected Error: {type(e).__name__}: {e}", file=sys.stderr)
        logger.error(f"Unexpected error: {type(e).__name__}: {e}")
        if verbose:
            raise
        print("\nRun with -v/--verbose for full traceback.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
