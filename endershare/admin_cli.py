"""
EnderShare Admin CLI - Inspect persisted sharing state.

Usage:
    endershare-admin validate                    # Validate configuration
    endershare-admin sessions                    # List stored sessions
    endershare-admin pending                     # List queued restorations
    endershare-admin sessions --data-dir ./data  # Use a specific data directory

The CLI only reads; it never modifies sessions or restorations.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from endershare.application.sharing.restoration import deserialize_items
from endershare.core.logging_config import LoggingConfig
from endershare.domain.errors import RecordFormatError, StorageError
from endershare.domain.sessions.containers import PRIVATE_SLOTS, SHARED_SLOTS
from endershare.infrastructure.sessions.yaml_store import YamlSessionStore
from endershare.modules.config import ConfigManager

logger = logging.getLogger(__name__)


def _data_dir(args: argparse.Namespace, manager: ConfigManager) -> Path:
    return Path(args.data_dir or manager.app_settings.data_dir)


def validate_config(args: argparse.Namespace) -> int:
    """Validate the configuration."""
    manager = ConfigManager()
    status = manager.validate_config()

    print("Validation results:")
    for config_type, is_valid in status.items():
        print(f"  {config_type}: {'valid' if is_valid else 'INVALID'}")

    if not all(status.values()):
        print("Some configuration has issues. Check the log output above.")
        return 1

    share = manager.share_config
    print(f"Invitation timeout: {share.pending_invitation_timeout}s")
    print(f"Debounce delay: {manager.debounce_delay_seconds}s")
    return 0


def list_sessions(args: argparse.Namespace) -> int:
    """List stored sessions with their slot usage."""
    manager = ConfigManager()
    store = YamlSessionStore(_data_dir(args, manager))
    records = store.load_all_sessions()

    if not records:
        print("No stored sessions")
        return 0

    print(f"Found {len(records)} stored sessions:\n")
    for record in records:
        first_half = sum(1 for slot in record.slots if 0 <= slot < PRIVATE_SLOTS)
        second_half = sum(1 for slot in record.slots if PRIVATE_SLOTS <= slot < SHARED_SLOTS)
        print(f"{record.session_id}")
        print(f"   player1: {record.participant_a} ({first_half} items)")
        print(f"   player2: {record.participant_b} ({second_half} items)")
        print()
    return 0


def list_pending(args: argparse.Namespace) -> int:
    """List queued restorations."""
    manager = ConfigManager()
    store = YamlSessionStore(_data_dir(args, manager))
    pending = store.load_pending_restorations()

    if not pending:
        print("No pending restorations")
        return 0

    print(f"Found {len(pending)} pending restorations:\n")
    for participant, serialized in pending.items():
        try:
            items = deserialize_items(serialized, PRIVATE_SLOTS, store.codec)
        except RecordFormatError as e:
            print(f"{participant}: unreadable ({e.message})")
            continue
        print(f"{participant}: {sum(1 for item in items if item is not None)} items")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser for the endershare-admin CLI."""
    parser = argparse.ArgumentParser(
        prog="endershare-admin",
        description="Inspect EnderShare configuration and persisted state",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Write JSON logs to the log directory")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.set_defaults(func=validate_config)

    for name, func, help_text in (
        ("sessions", list_sessions, "List stored sessions"),
        ("pending", list_pending, "List pending restorations"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--data-dir", help="Data directory (default: ENDERSHARE_DATA_DIR or ./data)")
        sub.set_defaults(func=func)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.json_logs:
        LoggingConfig.from_settings(ConfigManager().app_settings, log_level="DEBUG" if args.verbose else None)
    else:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format='%(levelname)s: %(message)s',
        )

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except StorageError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
