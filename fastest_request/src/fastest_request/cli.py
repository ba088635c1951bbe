from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import RaceConfig
from .duration import parse_duration
from .errors import FastestRequestError, InvalidFlags, InvalidIdentifier, InvalidInput, InvalidTimeout
from .execution import race_sync
from .targets import normalize_identifier

PROG = "fastest-request"

TIMEOUT_HELP = (
    'timeout define a limit to make all requests. Examples 300ms, -1.5h or "2h45m". '
    'Valid time units are "ns", "us" (or "µs"), "ms", "s", "m", "h".'
)


@dataclass(frozen=True)
class CLIFlags:
    cep: str
    timeout: float
    verbose: bool = False


class _FlagParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise InvalidFlags(f"failed to parse flags: {message}")


def build_parser(prog: str, config: RaceConfig) -> argparse.ArgumentParser:
    parser = _FlagParser(
        prog=prog,
        add_help=False,
        description="Ask every provider for a CEP at once and print the fastest answer.",
    )
    parser.add_argument("-cep", "--cep", default="", help="make a cep request")
    parser.add_argument("identifier", nargs="?", default=None, help="cep, when -cep is not given")
    parser.add_argument("-timeout", "--timeout", default=config.default_timeout, help=TIMEOUT_HELP)
    parser.add_argument("-v", "--verbose", action="store_true", help="log every attempt to stderr")
    parser.add_argument("-h", "--help", action="store_true", help="show this help message")
    return parser


def parse_cli_flags(
    prog: str,
    args: Sequence[str],
    config: Optional[RaceConfig] = None,
) -> Tuple[CLIFlags, str]:
    """Parse command line ``args`` into flags plus the usage text.

    Every failure is an ``InvalidInput`` carrying the usage text.
    """
    config = config or RaceConfig()
    parser = build_parser(prog, config)
    usage = parser.format_help()
    try:
        ns = parser.parse_args(list(args))
    except InvalidFlags as exc:
        exc.usage = usage
        raise
    if ns.help:
        raise InvalidFlags("failed to parse flags: help requested", usage=usage)

    cep = normalize_identifier(ns.cep) or normalize_identifier(ns.identifier)
    if cep is None:
        raise InvalidIdentifier(usage=usage)
    try:
        timeout = parse_duration(ns.timeout)
    except InvalidTimeout as exc:
        raise InvalidTimeout(f"invalid timeout: {exc}", usage=usage) from exc
    return CLIFlags(cep=cep, timeout=timeout, verbose=ns.verbose), usage


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(message)s", stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    config = RaceConfig()
    args = sys.argv[1:] if argv is None else argv
    try:
        flags, _usage = parse_cli_flags(PROG, args, config)
    except InvalidInput as exc:
        print(exc, file=sys.stderr)
        print(exc.usage, file=sys.stderr)
        return 1

    _configure_logging("INFO" if flags.verbose else config.log_level)

    try:
        response = race_sync(flags.cep, flags.timeout, config=config)
    except FastestRequestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(response.to_json(indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
