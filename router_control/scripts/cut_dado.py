#!/usr/bin/env python3
"""
Cut Dado Script.

Generate the dado toolpath for a job file and print it as G-code.

Usage:
    cut-dado                                  # shipped default job
    cut-dado --config shelf.yaml
    cut-dado --config shelf.yaml --output shelf.gcode
    cut-dado --tree                           # show the program structure
    python -m router_control.scripts.cut_dado --log-level DEBUG

G-code is written to stdout (or --output); logs go to stderr.
"""

from __future__ import annotations

import argparse
import sys

from router_control.configs.loader import ConfigError, load_config
from router_control.gcode.compiler import CompileError, emit, format_tree, render
from router_control.toolpath.dado import generate_dado_path
from router_control.units.quantity import UnrecognizedConversion
from router_control.utils.fs import atomic_write_text
from router_control.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cut-dado",
        description="Generate G-code for a dado joint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Job file path (default: shipped dado.yaml)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write G-code to this file instead of stdout",
    )
    parser.add_argument(
        "--tree",
        action="store_true",
        help="Print the nested program structure instead of G-code",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the logging level from the job file",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Bootstrap logging so config errors are reported consistently
    setup_logging(
        args.log_level or "INFO",
        json=args.log_json,
        context={"app": "cut-dado"},
    )

    try:
        cfg = load_config(args.config)
    except (ConfigError, FileNotFoundError) as exc:
        logger.error("Config error: %s", exc)
        return 1

    setup_logging(
        args.log_level or cfg.logging.level,
        cfg.logging.file,
        json=args.log_json or cfg.logging.json,
    )

    try:
        path = generate_dado_path(cfg.joint, cfg.machine)

        if args.tree:
            sys.stdout.write(format_tree(path))
            return 0
        if not args.output:
            count = emit(path)
            logger.info("Emitted %d G-code lines", count)
            return 0
        text = render(path)
    except (UnrecognizedConversion, CompileError, ValueError) as exc:
        logger.error("Toolpath generation failed: %s", exc)
        return 1

    try:
        atomic_write_text(args.output, text)
    except (RuntimeError, OSError) as exc:
        logger.error("Could not write %s: %s", args.output, exc)
        return 1
    logger.info("Wrote G-code to %s", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
