import argparse
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from steamsearch.version import __version__

__all__ = ["Args", "parse_args"]

_parser = argparse.ArgumentParser(
    "steam-search",
    description="Search for Steam games and pick a depot manifest to download from the Steam console",
)

_parser.add_argument(
    "--version",
    action="version",
    version=f"%(prog)s {__version__}",
)

_parser.add_argument(
    "-l",
    "--language",
    metavar="LANG",
    help="Storefront language used for search results",
    default="english",
)

_parser.add_argument(
    "-c",
    "--country",
    metavar="CC",
    help="Storefront country code used for search results and prices",
    default="US",
)

_parser.add_argument(
    "-t",
    "--timeout",
    metavar="SECONDS",
    help="Timeout for the store search request and the product info lookup",
    default=10.0,
    type=float,
)

_parser.add_argument(
    "--page-size",
    metavar="ROWS",
    help="Number of entries shown per selection menu page",
    default=15,
    type=int,
)

_parser.add_argument(
    "--no-clipboard",
    help="Do not copy the console command to the clipboard",
    action="store_true",
)

_parser.add_argument(
    "--no-console",
    help="Do not open the Steam console",
    action="store_true",
)

_parser.add_argument(
    "--skip-steam-check",
    help="Do not require a running Steam client",
    action="store_true",
)

_parser.add_argument(
    "--save-info",
    metavar="PATH",
    help="Also write manifest_info.json and README.txt for the chosen manifest below PATH/<appid>/<depotid>",
    type=Path,
)


@dataclass
class Args:
    language: str
    country: str
    timeout: float
    page_size: int
    no_clipboard: bool
    no_console: bool
    skip_steam_check: bool
    save_info: Path | None


def parse_args(argv: Sequence[str] | None = None) -> Args:
    args = cast(Args, _parser.parse_args(argv))
    if args.page_size < 1:
        _parser.error("--page-size must be at least 1")
    if args.timeout <= 0:
        _parser.error("--timeout must be positive")
    return args
