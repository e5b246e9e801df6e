from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx
import uvicorn

from fetchrace.cep import InvalidCEPError, cep_tasks, decode_address, normalize_cep
from fetchrace.config import (
    ConfigError,
    ProjectConfig,
    RaceConfig,
    default_project,
    load_project,
)
from fetchrace.fetch import FetchError, create_client, http_task
from fetchrace.quote import QuoteClient, QuoteError, build_app, write_quote
from fetchrace.race import RaceOutcome, TimedOut, WonBy, race

from .args import build_parser

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Timeout: Both API requests took too long."


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        logging.basicConfig(level=args.log_level)

        match args.command:
            case "cep":
                return cmd_cep(args)
            case "race":
                return cmd_race(args)
            case "serve":
                return cmd_serve(args)
            case "quote":
                return cmd_quote(args)
            case _:
                return 2

    except (ConfigError, InvalidCEPError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def main() -> None:
    sys.exit(run_cli())


def cmd_cep(args: argparse.Namespace) -> int:
    project = _load(args)
    raw = args.cep
    if raw is None:
        try:
            raw = input("Enter a CEP: ")
        except EOFError:
            raw = ""
    cep = normalize_cep(raw)

    race_config = project.race
    outcome = asyncio.run(_race_cep(race_config, cep))

    match outcome:
        case WonBy(task_id=winner, payload=payload):
            label = race_config.get_endpoint(winner).label
            try:
                address = decode_address(winner, payload)
            except FetchError:
                print(f"No usable data from {label}", file=sys.stderr)
                return 1
            print(f"Received data from {label}: {address}")
            return 0
        case TimedOut():
            print(TIMEOUT_MESSAGE)
            return 1
    return 2


def cmd_race(args: argparse.Namespace) -> int:
    project = _load(args)
    deadline_ms = project.race.deadline_ms
    if args.deadline_ms is not None:
        if args.deadline_ms <= 0:
            raise ConfigError(f"--deadline-ms must be positive, got {args.deadline_ms}")
        deadline_ms = args.deadline_ms
    strict = args.strict or project.race.strict

    outcome = asyncio.run(_race_urls(args.url_a, args.url_b, deadline_ms / 1000, strict))

    match outcome:
        case WonBy(task_id=winner, payload=payload):
            print(f"Winner {winner}: {payload}")
            return 0
        case TimedOut():
            print(TIMEOUT_MESSAGE)
            return 1
    return 2


def cmd_serve(args: argparse.Namespace) -> int:
    server = _load(args).server
    if args.host is not None:
        server.host = args.host
    if args.port is not None:
        server.port = args.port

    logger.info(f"Quote server starting on {server.host}:{server.port}")
    uvicorn.run(
        build_app(server),
        host=server.host,
        port=server.port,
        log_level=args.log_level.lower(),
    )
    return 0


def cmd_quote(args: argparse.Namespace) -> int:
    client_config = _load(args).client
    try:
        bid = asyncio.run(_get_bid(client_config.server_url, client_config.timeout_s))
    except QuoteError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(f"Current exchange rate: {bid:.2f}")

    try:
        write_quote(client_config.quote_file, bid)
    except OSError as exc:
        logger.error(f"Could not write {client_config.quote_file}: {exc}")
    else:
        logger.info(f"Quote saved to {client_config.quote_file}")
    return 0


def _load(args: argparse.Namespace) -> ProjectConfig:
    if args.config is None:
        return default_project()
    return load_project(args.config)


def _make_client(timeout_s: float) -> httpx.AsyncClient:
    return create_client(timeout_s)


async def _race_cep(race_config: RaceConfig, cep: str) -> RaceOutcome:
    endpoints = [race_config.get_endpoint(eid) for eid in race_config.endpoint_ids()]
    async with _make_client(race_config.deadline_s) as client:
        task_a, task_b = cep_tasks(endpoints, cep, client)
        return await race(
            task_a, task_b, race_config.deadline_s, strict=race_config.strict
        )


async def _race_urls(
    url_a: str, url_b: str, deadline_s: float, strict: bool
) -> RaceOutcome:
    async with _make_client(deadline_s) as client:
        task_a = http_task("a", url_a, client)
        task_b = http_task("b", url_b, client)
        return await race(task_a, task_b, deadline_s, strict=strict)


async def _get_bid(server_url: str, timeout_s: float) -> float:
    async with _make_client(timeout_s) as client:
        return await QuoteClient(client, server_url, timeout_s).get_bid()
