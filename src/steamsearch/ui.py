"""Terminal output and numbered selection menus"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, NamedTuple

from colorama import Back, Fore, Style

from steamsearch.types import Application, Depot, DepotFlag, Manifest, RenderedCommand
from steamsearch.utils import format_size, relative_time

__all__ = [
    "info",
    "success",
    "warning",
    "error",
    "Choice",
    "Separator",
    "Prompter",
]


def _print(color: str, message: str):
    print(f"{color}{message}{Style.RESET_ALL}")


def info(message: str):
    _print(Fore.BLUE, message)


def success(message: str):
    _print(Fore.GREEN, message)


def warning(message: str):
    _print(Fore.YELLOW, message)


def error(message: str):
    _print(Fore.RED, message)


def highlight(message: str):
    _print(Fore.CYAN, message)


def plain(message: str):
    _print(Fore.WHITE, message)


def _local_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


class Choice(NamedTuple):
    label: str
    value: Any


class Separator(NamedTuple):
    label: str


def application_label(app: Application) -> str:
    return f"{app.name} ({app.id})"


def depot_label(depot: Depot) -> str:
    label = f"{depot.name} (ID: {depot.id}) - {depot.os}"
    if DepotFlag.OPTIONAL in depot.flags:
        label += " [Optional]"
    if depot.language:
        label += f" [{depot.language}]"
    return label


def manifest_label(manifest: Manifest, now: float | None = None) -> str:
    if manifest.is_historical:
        label = f"Manifest: {manifest.manifest_id}"
        if manifest.time_updated is not None:
            label += f" - Seen: {_local_time(manifest.time_updated)} ({relative_time(manifest.time_updated, now)})"
        return label

    label = f"{manifest.branch} (Build ID: {manifest.build_id})"
    if manifest.time_updated is not None:
        label += f" - Updated: {_local_time(manifest.time_updated)}"
    label += " [Public]" if manifest.is_public else " [Private]"
    if manifest.description:
        label += f" - {manifest.description}"
    return label


def manifest_choices(manifests: Sequence[Manifest]) -> list[Choice | Separator]:
    current = [manifest for manifest in manifests if not manifest.is_historical]
    historical = [manifest for manifest in manifests if manifest.is_historical]
    choices: list[Choice | Separator] = []
    if current:
        choices.append(Separator("---- Current Branch Manifests ----"))
        choices += [Choice(manifest_label(manifest), manifest) for manifest in current]
    if historical:
        choices.append(Separator("---- Previously Seen Manifests ----"))
        choices += [Choice(manifest_label(manifest), manifest) for manifest in historical]
    return choices


class Prompter:
    """Reads the user's choices from the terminal"""

    def __init__(self, page_size: int = 15, input_func: Callable[[str], str] = input):
        self.page_size = page_size
        self.input = input_func

    def ask_search_term(self) -> str:
        while True:
            term = self.input(f"{Fore.CYAN}Enter game name to search: {Style.RESET_ALL}")
            if term.strip():
                return term
            error("Please enter a game name to search")

    def select(self, message: str, choices: Sequence[Choice | Separator]) -> Any:
        """Numbered menu, shown a page at a time. Separators are not selectable."""
        selectable = [choice for choice in choices if isinstance(choice, Choice)]
        if not selectable:
            raise ValueError("Nothing to select from")

        pages: list[list[Choice | Separator]] = [[]]
        on_page = 0
        for choice in choices:
            # a full page also pushes a following separator onto the next page
            if on_page == self.page_size:
                pages.append([])
                on_page = 0
            pages[-1].append(choice)
            if isinstance(choice, Choice):
                on_page += 1

        page = 0
        while True:
            number = sum(isinstance(choice, Choice) for entry in pages[:page] for choice in entry)
            print()
            for choice in pages[page]:
                if isinstance(choice, Separator):
                    _print(Fore.YELLOW, choice.label)
                    continue
                number += 1
                print(f"{Fore.GREEN}{number:>3}.{Style.RESET_ALL} {choice.label}")
            hint = ""
            if len(pages) > 1:
                hint = f" (page {page + 1}/{len(pages)}, n/p to change page)"
            answer = self.input(f"\n{Fore.CYAN}{message}{hint} {Style.RESET_ALL}").strip().lower()

            if answer in ("n", "p") and len(pages) > 1:
                page = (page + (1 if answer == "n" else -1)) % len(pages)
                continue
            try:
                index = int(answer)
            except ValueError:
                error("Please enter a valid number")
                continue
            if not 1 <= index <= len(selectable):
                error("Invalid selection, please try again")
                continue
            return selectable[index - 1].value

    def select_application(self, apps: Sequence[Application]) -> Application:
        success(f"\nFound {len(apps)} matching applications:")
        return self.select("Select an application:", [Choice(application_label(app), app) for app in apps])

    def select_depot(self, depots: Sequence[Depot]) -> Depot | None:
        if not depots:
            warning("\nNo depots found for this application.")
            return None
        success(f"\nFound {len(depots)} depots for this application:")
        return self.select("Select a depot:", [Choice(depot_label(depot), depot) for depot in depots])

    def select_manifest(self, manifests: Sequence[Manifest]) -> Manifest | None:
        if not manifests:
            warning("\nNo manifests found for this depot.")
            return None
        success(f"\nFound {len(manifests)} manifests for this depot:")
        return self.select("Select a manifest:", manifest_choices(manifests))


def show_application(app: Application):
    success("\nSelected Application Details:")
    plain(f"Name: {app.name}")
    plain(f"AppID: {app.id}")
    plain(f"Type: {app.kind}")
    if app.price:
        discount = f" (-{app.discount_percent}%)" if app.discount_percent else ""
        plain(f"Price: {app.price:.2f}{discount}")


def show_depot(depot: Depot):
    success("\nSelected Depot Details:")
    plain(f"Name: {depot.name}")
    plain(f"ID: {depot.id}")
    plain(f"OS Type: {depot.os}")
    if depot.max_size:
        plain(f"Max Size: {format_size(depot.max_size)}")
    if depot.encrypted_size:
        plain(f"Encrypted Size: {format_size(depot.encrypted_size)}")
    if depot.language:
        plain(f"Language: {depot.language}")
    if depot.dlc_app_id:
        plain(f"DLC App ID: {depot.dlc_app_id}")
    if depot.flags:
        plain(f"Flags: {', '.join(sorted(depot.flags))}")


def show_manifest(manifest: Manifest):
    success("\nSelected Manifest Details:")
    if manifest.is_historical:
        plain(f"Manifest ID: {manifest.manifest_id}")
        if manifest.time_updated is not None:
            plain(f"First Seen: {_local_time(manifest.time_updated)}")
        plain("Type: Previously seen manifest")
        return

    plain(f"Branch: {manifest.branch}")
    plain(f"Build ID: {manifest.build_id}")
    plain(f"Manifest ID: {manifest.manifest_id}")
    if manifest.description:
        plain(f"Description: {manifest.description}")
    plain(f"Public: {'Yes' if manifest.is_public else 'No'}")
    if manifest.time_updated is not None:
        plain(f"Last Updated: {_local_time(manifest.time_updated)}")


def show_command(rendered: RenderedCommand):
    success("\nSteam Console Command:")
    highlight(rendered.command)
    success("\nCommand with instructions (you can copy this whole block):")
    highlight(rendered.annotated_command)


def show_literal_command(rendered: RenderedCommand):
    print(f"\n{Back.RED}{Fore.WHITE}USE THIS COMMAND:{Style.RESET_ALL}")
    print(f"{Back.CYAN}{Fore.BLACK} {rendered.annotated_command} {Style.RESET_ALL}")


def show_post_download_instructions(content_path: str):
    print(f"\n{Back.YELLOW}{Fore.BLACK}IMPORTANT POST-DOWNLOAD INSTRUCTIONS:{Style.RESET_ALL}")
    plain("1. After running the command, wait for the download to complete (there is no progress indicator)")
    plain('2. When complete, you\'ll see a message like: "Depot download complete : [path] ([files], manifest [id])"')
    plain(f"3. Go to the download location shown in the message (usually in {content_path})")
    plain("4. Copy all files from this folder to your game installation directory to complete the update")
    highlight("\nTip: You can open the download location directly by entering this in File Explorer address bar:")
    print(f"{Back.WHITE}{Fore.BLACK} %PROGRAMFILES(X86)%\\{content_path} {Style.RESET_ALL}")


def show_completion(rendered: RenderedCommand | None):
    if rendered is None:
        info("\nSearch completed.")
        return
    info("\nProcess completed successfully.")
    print(f"\n{Back.GREEN}{Fore.BLACK}COMMAND TO USE IN STEAM CONSOLE:{Style.RESET_ALL}")
    print(f"{Back.WHITE}{Fore.BLACK} {rendered.command} {Style.RESET_ALL}")
    plain("\nWhen the Steam console opens, paste the command to start the download.")
