#!/usr/bin/env python
"""
Run the Clinic Pricing API.

Usage:
    python scripts/run_api.py [--host 127.0.0.1] [--port 8000] [--no-reload]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the Clinic Pricing API with uvicorn")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    data_dir = project_root / "src" / "clinic_pricing" / "data"
    for name in ("services.csv", "customers.csv"):
        if not (data_dir / name).exists():
            print(f"ERROR: {name} not found in {data_dir}")
            sys.exit(1)

    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_path, env.get("PYTHONPATH")]))

    cmd = [
        sys.executable, "-m", "uvicorn", "clinic_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Starting Clinic Pricing API: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, env=env, cwd=project_root)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
