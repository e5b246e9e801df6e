from __future__ import annotations

import argparse

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fetchrace")

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (.yml/.yaml, .toml, .json); built-in defaults if omitted",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # cep
    cep = subparsers.add_parser(
        "cep", help="Look up a CEP, racing both address APIs against the deadline"
    )
    cep.add_argument(
        "cep",
        nargs="?",
        default=None,
        help="CEP to look up, read from stdin when omitted",
    )

    # race
    race = subparsers.add_parser("race", help="Race two URLs and print the winner")
    race.add_argument("url_a", help="First URL")
    race.add_argument("url_b", help="Second URL")
    race.add_argument(
        "--deadline-ms",
        type=int,
        default=None,
        help="Overall deadline, defaults to the configured race deadline",
    )
    race.add_argument(
        "--strict",
        action="store_true",
        help="A failed fetch forfeits instead of winning with an empty payload",
    )

    # serve
    serve = subparsers.add_parser("serve", help="Run the quote server")
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Bind port")

    # quote
    subparsers.add_parser("quote", help="Request the current quote from the server")

    return parser
