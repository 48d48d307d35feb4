import sys
from collections.abc import Sequence

from colorama import init

from steamsearch.args import parse_args
from steamsearch.command import CommandFormatter, SteamConsoleLauncher, SystemClipboard
from steamsearch.flow import InteractionFlow
from steamsearch.network import CatalogClient, SearchService
from steamsearch.ui import Prompter
from steamsearch.utils import is_steam_running
from steamsearch.version import __version__

__all__ = ["main", "__version__"]


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    init()

    flow = InteractionFlow(
        catalog=CatalogClient(timeout=args.timeout),
        search=SearchService(language=args.language, country=args.country, timeout=args.timeout),
        prompts=Prompter(page_size=args.page_size),
        formatter=CommandFormatter(
            clipboard=None if args.no_clipboard else SystemClipboard(),
            console=None if args.no_console else SteamConsoleLauncher(),
        ),
        steam_running=None if args.skip_steam_check else is_steam_running,
        info_dir=args.save_info,
    )
    return flow.run()


if __name__ == "__main__":
    sys.exit(main())
