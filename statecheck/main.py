"""
StateCheck — Command-line entry point.

Verifies deployed contract state against a YAML inventory and exits
non-zero when any check fails or any view function is left unchecked.

Usage:
    statecheck <state.yml> [<abi_dir>]
    statecheck <state.yml> <abi_dir> --section l1 --log-level DEBUG
    python -m statecheck.main <state.yml> --config config/default.yaml

RPC URLs in the inventory may name environment variables; a .env file in
the working directory is loaded first.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

import structlog
from dotenv import load_dotenv

from statecheck.checks.errors import ConfigError
from statecheck.checks.loader import load_state
from statecheck.checks.report import ConsoleTranscript
from statecheck.checks.service import StateCheckService
from statecheck.config import CheckerConfig, load_config
from statecheck.primitives.common import new_id
from statecheck.telemetry.logging import setup_logging

logger = structlog.get_logger()


def apply_overrides(config: CheckerConfig, args: argparse.Namespace) -> CheckerConfig:
    """Command-line values win over YAML and environment configuration."""
    update: dict[str, Any] = {}
    if args.abi_dir:
        update["abi_dir"] = Path(args.abi_dir)
    if args.section:
        update["sections"] = list(args.section)
    logging_update: dict[str, Any] = {}
    if args.log_level:
        logging_update["level"] = args.log_level
    if args.log_format:
        logging_update["format"] = args.log_format
    if logging_update:
        update["logging"] = config.logging.model_copy(update=logging_update)
    return config.model_copy(update=update) if update else config


async def main(args: argparse.Namespace) -> int:
    load_dotenv(Path.cwd() / ".env")

    config = apply_overrides(load_config(args.config), args)
    run_id = new_id()
    setup_logging(config.logging, run_id=run_id)

    service = StateCheckService(config, transcript=ConsoleTranscript())
    try:
        document = load_state(args.state_file)
        report = await service.run(document)
    except ConfigError as e:
        logger.error("config_error", error=str(e))
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    return report.exit_code


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Verify deployed contract state against a YAML inventory.",
    )
    parser.add_argument("state_file", help="YAML inventory of contracts and expected values")
    parser.add_argument(
        "abi_dir",
        nargs="?",
        default=None,
        help="Directory holding <Name>.json or <Name>.sol/<Name>.json ABI artifacts",
    )
    parser.add_argument("--config", default=None, help="Optional checker config YAML")
    parser.add_argument(
        "--section",
        action="append",
        default=None,
        help="Only evaluate this section key (repeatable), e.g. --section l1",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-format", choices=["console", "json"], default=None)
    return parser.parse_args(argv)


def cli() -> None:
    sys.exit(asyncio.run(main(_parse_args())))


if __name__ == "__main__":
    cli()
