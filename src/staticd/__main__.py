"""
=============================================================================
STATICD CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:8080, serving ./www)
    python -m staticd

    # Environment variables
    ADDR=0.0.0.0:8080 DIR=/srv/www THREADS=8 python -m staticd

    # Flags override the environment
    python -m staticd --dir ./public --threads 4 --log-level DEBUG

Exit status: 0 after a clean shutdown (SIGTERM / Ctrl+C), 1 if startup
fails (missing root directory, address in use, bad configuration).

=============================================================================
"""

import argparse
import sys
from typing import Optional

from . import __version__
from .config import ServerConfig, parse_worker_count
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticd",
        description="Minimal concurrent static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables (overridden by flags):
  ADDR        Listen address        (default: 127.0.0.1:8080)
  DIR         Root directory        (default: ./www)
  INDEX       Index file name       (default: index.html)
  THREADS     Worker thread count   (default: 2, minimum 1)
  LOG_LEVEL   Logging level         (default: INFO)
        """,
    )

    parser.add_argument(
        "--addr", "-a",
        default=None,
        help="Address to listen on, host:port",
    )

    parser.add_argument(
        "--dir", "-d",
        default=None,
        help="Root directory to serve files from",
    )

    parser.add_argument(
        "--index", "-i",
        default=None,
        help="File served for /",
    )

    parser.add_argument(
        "--threads", "-t",
        default=None,
        help="Number of worker threads",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticd {__version__}",
    )

    return parser


def load_config(argv: Optional[list[str]] = None) -> ServerConfig:
    """Environment first, then any flags given on the command line."""
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env()

    if args.addr is not None:
        config.address = args.addr
    if args.dir is not None:
        config.root_dir = args.dir
    if args.index is not None:
        config.index_file = args.index
    if args.threads is not None:
        config.workers = parse_worker_count(args.threads)
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv: Optional[list[str]] = None):
    config = load_config(argv)

    try:
        server = FileServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
