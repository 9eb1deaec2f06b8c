"""Daily balances main entry point."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn

from daily_balances.service.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="daily-balances",
        description="Daily Balances - opening balance, sales and remaining credit tracking",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: BALANCES_PORT or 4950)",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database holding the storage slot (default: data/balances.db)",
    )
    parser.add_argument(
        "--export-dir",
        default=None,
        help="Directory exported JSON files are written to (default: data/exports)",
    )
    parser.add_argument(
        "--no-autoload",
        action="store_true",
        help="Start from seed data instead of the saved snapshot",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Force JSON log output (default: auto-detect)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the balances service."""
    args = build_parser().parse_args(argv)

    configure_logging(
        level=args.log_level.upper(),
        json_output=args.json_logs if args.json_logs else None,
    )

    # The app factory reads its configuration from the environment
    if args.port is not None:
        os.environ["BALANCES_PORT"] = str(args.port)
    if args.db_path:
        os.environ["BALANCES_DB_PATH"] = args.db_path
    if args.export_dir:
        os.environ["BALANCES_EXPORT_DIR"] = args.export_dir
    if args.no_autoload:
        os.environ["BALANCES_AUTOLOAD"] = "0"

    port = int(os.environ.get("BALANCES_PORT", "4950"))

    try:
        uvicorn.run(
            "daily_balances.service.app:create_app_from_env",
            host=args.host,
            port=port,
            reload=args.reload,
            log_level=args.log_level,
            factory=True,
        )
        return 0
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
