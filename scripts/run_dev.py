"""
Run the analytics API locally with auto-reload.

Usage:
    python scripts/run_dev.py [--port 8000] [--log-level debug]
"""

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="TrainIQ development server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    print(f"TrainIQ API on http://{args.host}:{args.port} (docs at /docs)")
    uvicorn.run("trainiq.main:app", host=args.host, port=args.port, reload=True, log_level=args.log_level)


if __name__ == "__main__":
    main()
