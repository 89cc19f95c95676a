"""
CLI for launching the FastAPI server.

Usage:
    pos-serve
    pos-serve --port 8080 --host 127.0.0.1
    pos-serve --backend-url https://docs.example.com/api --db /var/lib/pos/cache.db

Options that override settings are passed to the app as POS_* environment
variables, which the startup hook reads through Settings.from_env().
"""

import argparse
import os
import sys

import uvicorn


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Launch the POS inventory API server"
    )

    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Cache database path (sets POS_CACHE_DB)",
    )
    parser.add_argument(
        "--backend-url",
        type=str,
        default=None,
        help="Document store base URL (sets POS_BACKEND_URL; default: in-memory store)",
    )
    parser.add_argument(
        "--max-age",
        type=float,
        default=None,
        help="Seconds before a cached collection is refetched (sets POS_CACHE_MAX_AGE_S)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Server log level",
    )

    args = parser.parse_args(argv)

    overrides = {
        "POS_CACHE_DB": args.db,
        "POS_BACKEND_URL": args.backend_url,
        "POS_CACHE_MAX_AGE_S": None if args.max_age is None else str(args.max_age),
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value

    backend = os.environ.get("POS_BACKEND_URL") or "in-memory store"
    print(f"Starting POS inventory API server on {args.host}:{args.port}")
    print(f"Document store: {backend}")
    print(f"API documentation available at: http://localhost:{args.port}/docs")

    uvicorn.run(
        "pos_inventory.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
