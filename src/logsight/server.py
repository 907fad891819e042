"""
LogSight Web Server Entry Point

Provides the `logsight-web` command to start the FastAPI server.

Usage:
    logsight-web --log-path match.log          # Serve a match on port 3001
    logsight-web --log-path match.log --port 8000
    logsight-web --host 127.0.0.1              # Bind to localhost only
    logsight-web --reload                      # Enable auto-reload for development
"""

import argparse
import logging
import os
import sys

from logsight.core.config import configure_logging, get_config

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Start the LogSight web server."""
    config = get_config()

    parser = argparse.ArgumentParser(
        description="LogSight CS:GO Match Log Analyzer - Web Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    logsight-web --log-path match.log         Serve match.log on http://0.0.0.0:3001
    logsight-web --port 8000                  Start on port 8000
    logsight-web --host 127.0.0.1             Bind to localhost only
    logsight-web --reload                     Enable auto-reload (development)
        """,
    )
    parser.add_argument(
        "--log-path",
        default=config.parser.log_path,
        help="Match log to serve (default: LOGSIGHT_LOG_PATH or config file)",
    )
    parser.add_argument(
        "--host",
        default=config.server.host,
        help=f"Host to bind to (default: {config.server.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.server.port,
        help=f"Port to bind to (default: {config.server.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        default=config.logging.level.lower(),
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )

    args = parser.parse_args(argv)

    config.logging.level = args.log_level.upper()
    configure_logging(config.logging)

    if not args.log_path:
        logger.error("No match log given. Pass --log-path or set LOGSIGHT_LOG_PATH.")
        sys.exit(1)

    config.parser.log_path = str(args.log_path)
    # Reload workers run in a fresh process and read the path from the environment
    os.environ["LOGSIGHT_LOG_PATH"] = str(args.log_path)

    import uvicorn

    logger.info("Starting LogSight web server on http://%s:%s", args.host, args.port)
    logger.info("Press Ctrl+C to stop")

    uvicorn.run(
        "logsight.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
