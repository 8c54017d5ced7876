"""
nstackgen CLI — Generate localization sources from nstack.json.

Commands:
- nstackgen build     — Run one generation pass per input (default: ./nstack.json)
- nstackgen validate  — Check an nstack.json without contacting NStack

Settings come from nstackgen.yaml (``--config``); ``--target`` overrides the
configured dialect.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from nstackgen.engine.errors import NStackGenError

logger = logging.getLogger("nstackgen.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="nstackgen",
        description="nstackgen — NStack localization source generator",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # nstackgen build
    build_parser = subparsers.add_parser("build", help="Generate sources from nstack.json")
    build_parser.add_argument(
        "inputs", nargs="*", default=["nstack.json"], help="Input files (default: nstack.json)"
    )
    build_parser.add_argument(
        "--config", default=None, help="Path to nstackgen.yaml (default: ./nstackgen.yaml)"
    )
    build_parser.add_argument(
        "--target", choices=["dart", "python"], help="Output dialect (overrides nstackgen.yaml)"
    )

    # nstackgen validate
    validate_parser = subparsers.add_parser("validate", help="Validate an nstack.json")
    validate_parser.add_argument(
        "input", nargs="?", default="nstack.json", help="Input file (default: nstack.json)"
    )

    args = parser.parse_args(argv)

    if args.command == "build":
        return cmd_build(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return 0


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_build(args: argparse.Namespace) -> int:
    """
    Run a generation pass for every input:
    1. Load nstackgen.yaml (+ --target override)
    2. Build each input concurrently (passes share no state)
    3. Report per input; exit 1 if any pass failed
    """
    from nstackgen.build_step import FileBuildStep
    from nstackgen.builder import NStackBuilder
    from nstackgen.engine.config import load_settings
    from nstackgen.engine.logging import BuildEventLogger

    try:
        settings = load_settings(args.config, target=args.target)
    except NStackGenError as e:
        print(f"[ERROR] {e.message}")
        return 1

    _configure_logging(settings.logging.level)

    missing = [path for path in args.inputs if not Path(path).is_file()]
    if missing:
        for path in missing:
            print(f"[ERROR] Input not found: {path}")
        return 1

    event_logger = BuildEventLogger(settings.logging.directory) if settings.logging.directory else None
    builder = NStackBuilder(settings, event_logger=event_logger)

    steps = [FileBuildStep(path) for path in args.inputs]
    results = asyncio.run(builder.build_all(steps))

    failed = 0
    for result in results:
        if result.completed:
            print(f"[OK] {result.input_id} → {result.output_id} ({result.duration_ms} ms)")
        elif result.skipped:
            print(f"[SKIP] {result.input_id} (trigger is '{settings.trigger}')")
        else:
            failed += 1
            error = result.error
            print(f"[ERROR] {result.input_id} failed at {result.stage}: {error.error_type}: {error.message}")

    return 1 if failed else 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Parse an nstack.json and report whether both credentials are set."""
    from nstackgen.engine.config import parse_nstack_config

    path = Path(args.input)
    if not path.is_file():
        print(f"[ERROR] Input not found: {path}")
        return 1

    try:
        config = parse_nstack_config(path.read_text(encoding="utf-8"))
    except NStackGenError as e:
        print(f"[ERROR] {path}: {e.message}")
        return 1

    print(f"[OK] {path}: project {config.project_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
