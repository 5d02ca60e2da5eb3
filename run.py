#!/usr/bin/env python
"""
Entry point for running the MemKV API server.

Usage:
    MEMKV_API_KEY=secret python run.py              # Start server with defaults
    MEMKV_API_KEY=secret python run.py --port 9000  # Custom port
    MEMKV_API_KEY=secret python run.py --reload     # Enable auto-reload (development)
"""

import argparse
import logging

import uvicorn

from memkv.app import configure_logging
from memkv.config import MemKVConfig

logger = logging.getLogger("memkv.run")


def main():
    """Main entry point."""
    config = MemKVConfig.from_env()

    parser = argparse.ArgumentParser(description="MemKV API Server")
    parser.add_argument(
        "--host",
        type=str,
        default=config.host,
        help=f"Host to bind to (default: {config.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.http_port,
        help=f"Port to bind to (default: {config.http_port})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload (development only)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.log_level.value.lower(),
        choices=["debug", "info", "warning", "error"],
        help=f"Log level (default: {config.log_level.value.lower()})"
    )

    args = parser.parse_args()

    configure_logging(config)
    logger.info(f"MemKV listening on http://{args.host}:{args.port} (docs at /docs)")

    # The factory builds the stores and validates the config in the server process.
    uvicorn.run(
        "memkv.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        timeout_graceful_shutdown=config.shutdown_timeout_secs,
    )


if __name__ == "__main__":
    main()
