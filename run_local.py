#!/usr/bin/env python3
"""
Local development server runner.

Runs the broker's FastAPI application with uvicorn. CloudFormation
calls go to whichever AWS account the local credentials point at.

Usage:
    python run_local.py
    python run_local.py --port 8000
    python run_local.py --reload  # Auto-reload on code changes
"""

import argparse
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent
src_path = project_root / "src"

try:
    import uvicorn
except ImportError:
    print("ERROR: uvicorn is not installed.")
    print("Please install dependencies: pip install -e '.[dev]'")
    sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Run the SQS broker locally with uvicorn"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes (recommended for development)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for uvicorn (default: info)"
    )

    args = parser.parse_args()

    env_file = project_root / ".env"
    if not env_file.exists() and not os.environ.get("BROKER_PASSWORD"):
        print("WARNING: no .env file and BROKER_PASSWORD is unset;")
        print("every broker request will be rejected with 401.")

    print("=" * 60)
    print("Starting SQS Service Broker (Local Development)")
    print("=" * 60)
    print(f"Server: http://{args.host}:{args.port}")
    print(f"Catalog: http://{args.host}:{args.port}/v2/catalog")
    print(f"API Docs: http://{args.host}:{args.port}/docs")
    print(f"Health: http://{args.host}:{args.port}/health")
    print("=" * 60)
    if args.reload:
        print("Auto-reload: ENABLED (code changes will restart server)")
    print()

    # Stay in project root so .env file loads correctly
    uvicorn.run(
        "main:app",
        app_dir=str(src_path),
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=[str(src_path)] if args.reload else None
    )


if __name__ == "__main__":
    main()
