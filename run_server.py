#!/usr/bin/env python3
"""
Launch script for the LeafSpy Telemetry backend.

Usage:
    python run_server.py [data_folder] [--port PORT] [--host HOST]

Examples:
    python run_server.py                    # Use default ./data/logs folder
    python run_server.py /path/to/logs      # Use custom folder
    python run_server.py --port 5000        # Run on port 5000
"""

import argparse
import os
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="LeafSpy Telemetry Backend Server")
    parser.add_argument(
        "data_folder",
        nargs="?",
        default="./data/logs",
        help="Path to folder containing LeafSpy CSV logs (default: ./data/logs)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to run server on (default: 8000)"
    )
    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for all interfaces)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail a whole log on its first undecodable row instead of skipping it"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Run in debug mode"
    )

    args = parser.parse_args()

    data_folder = Path(args.data_folder)

    print("LeafSpy Telemetry Backend")
    print("=" * 40)
    print(f"Data folder: {data_folder.absolute()}")
    print(f"Server: http://{args.host}:{args.port}")
    print("=" * 40)

    if not data_folder.exists():
        print(f"\nWarning: Data folder does not exist: {data_folder}")
        print("You can set it later via POST /folder")

    # Configure the app through the environment it reads at import time
    if data_folder.exists():
        os.environ["LEAFSPY_DATA_FOLDER"] = str(data_folder)
    if args.strict:
        os.environ["LEAFSPY_SKIP_INVALID_ROWS"] = "0"

    print("\nAPI Endpoints:")
    print("  GET  /                   - Health check")
    print("  GET  /health             - Detailed health")
    print("  GET  /folder             - Current folder info")
    print("  POST /folder             - Set data folder")
    print("  POST /folder/rescan      - Rescan data folder")
    print("  GET  /logs               - List all logs")
    print("  GET  /logs/{id}          - Get log summary and skipped rows")
    print("  GET  /logs/{id}/records  - Get decoded records")
    print("\nStarting server...")

    import uvicorn

    uvicorn.run(
        "leafspy.main:app",
        host=args.host,
        port=args.port,
        reload=args.debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
