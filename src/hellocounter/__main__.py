"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    python -m hellocounter                    # 0.0.0.0:8337
    python -m hellocounter --port 3000        # Custom port
    python -m hellocounter --host 127.0.0.1   # Localhost only
    python -m hellocounter --workers 8        # 8-16 worker threads

Flags override environment variables (HELLO_HOST, HELLO_PORT,
HELLO_WORKERS, HELLO_TIMEOUT, HELLO_LOG_LEVEL), which override the
defaults in ServerConfig.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hello-counter",
        description="Greeting server that counts its visitors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hellocounter                      # Run with defaults
  python -m hellocounter --port 3000          # Custom port
  python -m hellocounter --host 127.0.0.1     # Localhost only
  python -m hellocounter -l DEBUG             # Verbose logging
        """,
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8337)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 4, max will be 2x this)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"hello-counter {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with any given CLI flags applied on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.min_workers = args.workers
        config.max_workers = args.workers * 2
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
