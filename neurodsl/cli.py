#!/usr/bin/env python3
"""
neurodsl command line.

    neurodsl script.nc            run a script
    neurodsl --model sst2 x.nc    run with an injected model when the script has no AI: line
    neurodsl                      interactive REPL (blocks end at an empty line)
    neurodsl help | --version | --about
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from neurodsl import __version__
from neurodsl.config import Config
from neurodsl.dsl.engine import analyze, inject_model
from neurodsl.runtime.interpreter import Interpreter

ABOUT = "NeuroDSL CLI: classifier-backed scripting with natural-language macros."

HELP_TEXT = """
NeuroDSL language help

Basic syntax:
────────────────────────────────
AI: "path/to/model"              → Select a classifier (or "openai:<kind>")
neuro "text"                     → Print a string
neuro name                       → Print a variable
set x = 1 + 2                    → Assign an expression
set x from AI: "input"           → Store the active classifier's label
macro from AI: ...               → Natural-language instruction → DSL
if x == "a":                     → Branch on variables or classifier labels
    neuro "A"
elif "text" == "Positive":
    neuro "P"
else:
    neuro "other"

Run commands:
────────────────────────────────
neurodsl examples/hello.nc
neurodsl --model sst2 examples/sentiment.nc
neurodsl                         → interactive mode, finish a block with an empty line

Optional logging:
────────────────────────────────
NEUROCHAIN_OUTPUT_LOG=1       → write `neuro:` output to logs/run_latest.log
NEUROCHAIN_RAW_LOG=1          → write intent/DSL debug to logs/macro_raw_latest.log
"""


def print_help() -> None:
    print(HELP_TEXT)


def print_version() -> None:
    print(f"🧬 NeuroDSL version {__version__}")


def print_about() -> None:
    print(f"🌌 {ABOUT}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neurodsl", add_help=False, description="Run NeuroDSL scripts")
    parser.add_argument("script", nargs="?", help="Script file (.nc), or 'help'")
    parser.add_argument("-h", "--help", action="store_true", help="Show language help")
    parser.add_argument("-v", "--version", action="store_true", help="Show version")
    parser.add_argument("--about", action="store_true", help="Show about line")
    parser.add_argument("--model", help="Model id to inject when the script has no AI: line (e.g. sst2, macro)")
    return parser


def run_script(path: str, interpreter: Interpreter, config: Config, model: Optional[str] = None) -> int:
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    if model:
        source = inject_model(source, model, config)

    print(f"Running script: {path}")
    result = analyze(source, interpreter)
    if not result.ok:
        print(f"Error: {result.output}", file=sys.stderr)
        return 1
    print("Script finished.")
    return 0


def read_block(stream: TextIO) -> Optional[str]:
    """Read lines until an empty one; None at end of input."""
    lines: List[str] = []
    while True:
        print("... ", end="", flush=True)
        line = stream.readline()
        if not line:
            return "\n".join(lines) if lines else None
        if not line.strip():
            return "\n".join(lines)
        lines.append(line.rstrip("\n"))


def repl(interpreter: Interpreter, stream: TextIO = sys.stdin) -> int:
    """Interactive loop; the interpreter keeps its variables across blocks."""
    while True:
        print("Enter NeuroDSL code (finish with an empty line):")
        block = read_block(stream)
        if block is None:
            print("Exiting...")
            return 0

        command = block.strip()
        if command == "exit":
            print("Exiting...")
            return 0
        if command == "help":
            print_help()
            continue
        if command in ("version", "--version", "-v"):
            print_version()
            continue
        if command in ("about", "--about"):
            print_about()
            continue
        if not command:
            continue

        result = analyze(block, interpreter)
        if not result.ok:
            print(f"Error: {result.output}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.help or args.script == "help":
        print_help()
        return 0
    if args.version:
        print_version()
        return 0
    if args.about:
        print_about()
        return 0

    config = Config.from_env()
    interpreter = Interpreter(config, echo=True)

    if args.script:
        return run_script(args.script, interpreter, config, args.model)
    return repl(interpreter)


if __name__ == "__main__":
    sys.exit(main())
