"""
Run the shortbox API server.

    python -m shortbox --host 0.0.0.0 --port 8000
"""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

logger = logging.getLogger("shortbox")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="shortbox link shortener API server")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Log level for the uvicorn server (default: INFO)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Number of worker processes (default: 1). Cannot be combined with --reload.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    if args.workers > 1 and args.reload:
        logger.error("--reload cannot be used with --workers > 1")
        return 2

    uvicorn.run(
        "shortbox.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
        workers=args.workers if args.workers > 1 else None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
