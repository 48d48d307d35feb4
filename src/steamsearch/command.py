import json
import shutil
import subprocess
import sys
import webbrowser
from datetime import datetime, timezone
from pathlib import Path, PureWindowsPath
from typing import NamedTuple, Protocol

from steamsearch import ui
from steamsearch.errors import SideEffectError
from steamsearch.types import RenderedCommand

__all__ = [
    "Clipboard",
    "ConsoleLauncher",
    "SystemClipboard",
    "SteamConsoleLauncher",
    "CommandFormatter",
    "Delivery",
    "content_path",
    "render",
    "write_manifest_info",
]

STEAM_CONSOLE_URI = "steam://open/console"


def content_path(app_id: int, depot_id: str) -> str:
    return str(PureWindowsPath("Steam", "steamapps", "content", f"app_{app_id}", f"depot_{depot_id}"))


def render(app_id: int, depot_id: str, manifest_id: str) -> RenderedCommand:
    command = f"download_depot {app_id} {depot_id} {manifest_id}"
    note = (
        "// IMPORTANT: Wait for download to complete (no progress indicator). "
        f"After completion, copy files from {content_path(app_id, depot_id)} to your game folder."
    )
    return RenderedCommand(command, f"{command}\n\n{note}")


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class ConsoleLauncher(Protocol):
    def open(self) -> None: ...


def _clipboard_argv() -> list[str] | None:
    if sys.platform == "win32":
        return ["clip"]
    if sys.platform == "darwin":
        return ["pbcopy"]
    for argv in (["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]):
        if shutil.which(argv[0]):
            return argv
    return None


class SystemClipboard:
    def copy(self, text: str) -> None:
        if not (argv := _clipboard_argv()):
            raise SideEffectError("No clipboard utility available")
        try:
            subprocess.run(argv, input=text, text=True, check=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as ex:
            raise SideEffectError(f"Could not copy command to clipboard: {ex}") from ex


class SteamConsoleLauncher:
    def __init__(self, uri: str = STEAM_CONSOLE_URI):
        self.uri = uri

    def open(self) -> None:
        try:
            opened = webbrowser.open(self.uri)
        except webbrowser.Error as ex:
            raise SideEffectError(f"Could not open Steam console: {ex}") from ex
        if not opened:
            raise SideEffectError(f"No handler registered for {self.uri}")


class Delivery(NamedTuple):
    copied: bool
    console_opened: bool


class CommandFormatter:
    """Renders the console command and hands it to the clipboard and the Steam console"""

    def __init__(self, clipboard: Clipboard | None = None, console: ConsoleLauncher | None = None):
        self.clipboard = clipboard
        self.console = console

    def render(self, app_id: int, depot_id: str, manifest_id: str) -> RenderedCommand:
        return render(app_id, depot_id, manifest_id)

    def deliver(self, rendered: RenderedCommand, app_id: int, depot_id: str) -> Delivery:
        copied = False
        if self.clipboard is not None:
            try:
                self.clipboard.copy(rendered.annotated_command)
                copied = True
            except SideEffectError as ex:
                ui.warning(f"\n{ex}")

        console_opened = False
        if self.console is not None:
            try:
                self.console.open()
                console_opened = True
            except SideEffectError as ex:
                ui.warning(f"\n{ex}")
                ui.plain("Please open Steam console manually and paste the command.")

        if console_opened:
            ui.success("\n✓ Steam console opened")
        if copied:
            ui.success("✓ Command copied to clipboard")
            if console_opened:
                ui.plain("Paste the command into the Steam console to start the download.")
        else:
            ui.show_literal_command(rendered)

        ui.show_post_download_instructions(content_path(app_id, depot_id))
        return Delivery(copied, console_opened)


def write_manifest_info(app_id: int, depot_id: str, manifest_id: str, directory: Path) -> Path:
    """Record a requested manifest with DepotDownloader instructions, returns the README path"""
    target = directory / str(app_id) / str(depot_id)
    target.mkdir(parents=True, exist_ok=True)

    downloader_command = (
        f"dotnet DepotDownloader.dll -app {app_id} -depot {depot_id} -manifest {manifest_id} "
        "-username YOUR_USERNAME -password YOUR_PASSWORD -dir OUTPUT_DIR"
    )
    manifest_info = {
        "appId": app_id,
        "depotId": depot_id,
        "manifestId": manifest_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "downloadInstructions": (
            "To download this manifest, use DepotDownloader tool:\n"
            "1. Download from: https://github.com/SteamRE/DepotDownloader\n"
            f"2. Use command: {downloader_command}"
        ),
    }
    (target / "manifest_info.json").write_text(json.dumps(manifest_info, indent=2))

    readme = target / "README.txt"
    readme.write_text(
        "STEAM MANIFEST DOWNLOAD INSTRUCTIONS\n"
        "==================================\n\n"
        f"App ID: {app_id}\n"
        f"Depot ID: {depot_id}\n"
        f"Manifest ID: {manifest_id}\n\n"
        "Anonymous downloads are not supported by Steam.\n"
        "To download this content, you need:\n\n"
        "1. A Steam account that owns this content\n"
        "2. DepotDownloader tool (https://github.com/SteamRE/DepotDownloader)\n\n"
        "Command to use:\n"
        f"{downloader_command}\n\n"
        "Note: Replace YOUR_USERNAME, YOUR_PASSWORD, and OUTPUT_DIR with your actual Steam credentials "
        "and desired output directory.\n"
    )
    return readme
