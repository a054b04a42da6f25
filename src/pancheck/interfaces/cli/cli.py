from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import structlog
import yaml

from pancheck.application.use_cases.check_links import BatchReport, CheckLinksUseCase
from pancheck.infrastructure.composition import build_registry, create_http_client
from pancheck.infrastructure.config import AppConfig, load_config
from pancheck.infrastructure.logging.setup import configure_logging

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pancheck",
        description="Check whether netdisk share links are still live.",
    )

    parser.add_argument("links", nargs="*", help="Share links to check.")
    parser.add_argument(
        "--links-file",
        default=None,
        help="File with one link per line ('-' for stdin).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print one JSON object per link instead of text.",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the effective configuration as YAML and exit.",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    return parser.parse_args(argv)


def read_links(lines: Iterable[str]) -> list[str]:
    """Links from *lines*, skipping blanks and ``#`` comments."""
    links = []
    for line in lines:
        line = line.strip()
        if line and not line.startswith("#"):
            links.append(line)
    return links


def _collect_links(args: argparse.Namespace) -> list[str]:
    links = list(args.links)
    if args.links_file == "-":
        links.extend(read_links(sys.stdin))
    elif args.links_file:
        text = Path(args.links_file).read_text(encoding="utf-8")
        links.extend(read_links(text.splitlines()))
    return links


async def _run(config: AppConfig, links: list[str]) -> BatchReport:
    async with create_http_client(config) as http_client:
        registry = build_registry(config, http_client)
        return await CheckLinksUseCase(registry).execute(links)


def print_report(report: BatchReport, *, as_json: bool, out: TextIO) -> None:
    for link, result in report.results.items():
        if as_json:
            row: dict[str, Any] = {
                "link": link,
                "valid": result.valid,
                "failure_reason": result.failure_reason,
                "duration_ms": result.duration_ms,
            }
            out.write(json.dumps(row, ensure_ascii=False) + "\n")
        else:
            status = "VALID" if result.valid else "INVALID"
            reason = f" [{result.failure_reason}]" if result.failure_reason else ""
            out.write(f"{status:<8}{link}{reason} ({result.duration_ms} ms)\n")

    execution = report.execution
    if as_json:
        summary = {
            "checked": execution.checked_count,
            "valid": execution.valid_count,
            "invalid": execution.invalid_count,
            "duration_ms": execution.execution_duration_ms,
        }
        out.write(json.dumps({"summary": summary}) + "\n")
    else:
        out.write(
            f"checked={execution.checked_count} valid={execution.valid_count} "
            f"invalid={execution.invalid_count} "
            f"duration={execution.execution_duration_ms} ms\n"
        )


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Exit status: 0 when every link is valid, 1 otherwise, 2 without links.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    if args.show_config:
        sys.stdout.write(yaml.safe_dump(config.to_sectioned_dict(), sort_keys=False))
        return 0

    configure_logging(config)

    links = _collect_links(args)
    if not links:
        log.error("no_links_given")
        return 2

    report = asyncio.run(_run(config, links))
    print_report(report, as_json=args.json, out=sys.stdout)
    return 0 if report.execution.invalid_count == 0 else 1


if __name__ == "__main__":
    raise SystemExit(start())
