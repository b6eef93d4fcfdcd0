"""CLI entry point: print one client's encoded compliance week."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Sequence

from .config import Config
from .logging import setup_logging
from .policies import registered_kinds
from .service import run_week

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regimen-compliance",
        description="Compute a client's seven-day regimen compliance calendar.",
    )
    parser.add_argument(
        "--client-id",
        required=True,
        help="Client whose week should be computed.",
    )
    parser.add_argument(
        "--kind",
        required=True,
        choices=[kind.value for kind in registered_kinds()],
        help="Regimen kind to score.",
    )
    parser.add_argument(
        "--week-start",
        required=True,
        help="First day of the week (YYYY-MM-DD) in the configured timezone.",
    )
    return parser


async def _run(args: argparse.Namespace, config: Config) -> int:
    payload = await run_week(
        config,
        client_id=args.client_id,
        kind=args.kind,
        week_start=args.week_start,
    )
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    config = Config.from_env()
    setup_logging(config.log_format, config.log_level)
    logger.info(
        "Computing %s compliance in %s",
        args.kind,
        config.timezone,
        extra={"compliance_client_id": args.client_id, "compliance_week_start": args.week_start},
    )
    raise SystemExit(asyncio.run(_run(args, config)))


if __name__ == "__main__":
    main()
