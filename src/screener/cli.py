"""
Command-line entry point.

Usage:
    equity-screener serve
    equity-screener screen swing --sector tech --rsi-min 30 --rsi-max 70
    equity-screener screen growth --growth-sector cyber --max-price 200
    equity-screener quote AAPL
    equity-screener technicals AAPL
    equity-screener overview AAPL
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from screener.app import build_services, main as serve
from screener.core.catalog import screen_types
from screener.core.config import ScreenerSettings, load_settings
from screener.core.errors import ConfigurationError, InvalidRequestError, ProviderError
from screener.core.logging_config import setup_logging
from screener.core.models import FilterSpec, MAPosition


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="equity-screener", description="Rate-limited equity screener")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Serve the HTTP API")

    screen = sub.add_parser("screen", help="Screen a category of symbols")
    screen.add_argument("type", choices=screen_types())
    screen.add_argument("--sector", help="Swing sub-category (default: tech)")
    screen.add_argument("--growth-sector", help="Growth sub-category (default: ai)")
    screen.add_argument("--max-price", type=float)
    screen.add_argument("--rsi-min", type=float)
    screen.add_argument("--rsi-max", type=float)
    screen.add_argument("--ma50-position", choices=[p.value for p in MAPosition])
    screen.add_argument("--short-interest-min", type=float)
    screen.add_argument("--short-interest-max", type=float)

    for name in ("quote", "technicals", "overview"):
        lookup = sub.add_parser(name, help=f"Look up the {name} for one symbol")
        lookup.add_argument("symbol")

    return parser


def _filters_from_args(args: argparse.Namespace) -> FilterSpec:
    return FilterSpec(
        sector=args.sector,
        growth_sector=args.growth_sector,
        max_price=args.max_price,
        rsi_min=args.rsi_min,
        rsi_max=args.rsi_max,
        ma50_position=args.ma50_position,
        short_interest_min=args.short_interest_min,
        short_interest_max=args.short_interest_max,
    )


async def _run(args: argparse.Namespace, settings: ScreenerSettings) -> int:
    services = build_services(settings)

    if args.command == "screen":
        result = await services.screening.screen(args.type, _filters_from_args(args))
        print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
        return 0

    lookup = {
        "quote": services.lookups.get_quote,
        "technicals": services.lookups.get_technicals,
        "overview": services.lookups.get_overview,
    }[args.command]
    found = await lookup(args.symbol)
    if found is None:
        print(f"{args.symbol}: not found", file=sys.stderr)
        return 1
    print(json.dumps(found.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        serve()
        return 0

    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        return asyncio.run(_run(args, settings))
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except InvalidRequestError as e:
        print(f"Invalid request: {e.message}", file=sys.stderr)
        return 2
    except ProviderError as e:
        print(f"Provider error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
