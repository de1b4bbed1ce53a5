#!/usr/bin/env python3
"""
Run a .nc script with macro logging enabled and save stdout to a
timestamped file under logs/ (easy to diff across runs).

Usage:
    python scripts/macro_smoke.py                        # examples/macros.nc
    python scripts/macro_smoke.py examples/hello.nc --model macro

Writes logs/run_latest.log and logs/macro_raw_latest.log as well.
"""

import argparse
import contextlib
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.cli import run_script
from neurodsl.config import Config
from neurodsl.runtime.interpreter import Interpreter

REPORTED_ENV = ("NC_INTENT_THRESHOLD", "NC_MODELS_DIR", "NC_MACRO_MODEL")


class Tee:
    """Write to several text streams at once."""

    def __init__(self, *streams):
        self.streams = streams

    def write(self, data):
        for stream in self.streams:
            stream.write(data)
        return len(data)

    def flush(self):
        for stream in self.streams:
            stream.flush()


def run_smoke(script_path: str, model: Optional[str] = None) -> int:
    """Run one script, teeing everything it prints into a timestamped log."""
    config = Config.from_env()
    config.output_log = True
    config.raw_log = True

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"macro_smoke_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    print(f"Writing log to: {log_path}")

    with open(log_path, "w", encoding="utf-8") as log_file:
        with contextlib.redirect_stdout(Tee(sys.stdout, log_file)):
            print(f"Script: {script_path}")
            for name in REPORTED_ENV:
                print(f"{name}={os.environ.get(name, 'unset')}")

            if not Path(script_path).exists():
                print(f"❌ Script not found: {script_path}")
                return 1

            interpreter = Interpreter(config, echo=True)
            status = run_script(script_path, interpreter, config, model)

    print(f"Done. Log saved to {log_path}")
    return status


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run a .nc script and keep a timestamped log")
    parser.add_argument("script", nargs="?", default="examples/macros.nc",
                        help="Script to run (default: examples/macros.nc)")
    parser.add_argument("--model", help="Model id to inject when the script has no AI: line")
    args = parser.parse_args()

    sys.exit(run_smoke(args.script.replace("\\", "/"), args.model))


if __name__ == "__main__":
    main()
