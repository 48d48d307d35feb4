from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

from steamsearch import ui
from steamsearch.command import CommandFormatter, write_manifest_info
from steamsearch.depots import app_depot, declared_depots
from steamsearch.errors import PreconditionError, SteamSearchError, ValidationError
from steamsearch.manifests import extract_manifests
from steamsearch.types import Application, Depot, Manifest, ProductInfo, RenderedCommand

__all__ = ["FlowState", "InteractionFlow"]


class FlowState(Enum):
    IDLE = "Idle"
    LOGGED_IN = "LoggedIn"
    SEARCHED = "Searched"
    APP_SELECTED = "AppSelected"
    DEPOTS_LISTED = "DepotsListed"
    DEPOT_SELECTED = "DepotSelected"
    MANIFESTS_LISTED = "ManifestsListed"
    MANIFEST_SELECTED = "ManifestSelected"
    DONE = "Done"


class Catalog(Protocol):
    def login(self) -> None: ...
    def logout(self) -> None: ...
    def fetch_product(self, app_id: int) -> ProductInfo: ...


class Search(Protocol):
    def search(self, term: str) -> list[Application]: ...


class Prompts(Protocol):
    def ask_search_term(self) -> str: ...
    def select_application(self, apps: list[Application]) -> Application: ...
    def select_depot(self, depots: list[Depot]) -> Depot | None: ...
    def select_manifest(self, manifests: list[Manifest]) -> Manifest | None: ...


class InteractionFlow:
    """search -> app -> depot -> manifest -> console command, one pass, no way back"""

    def __init__(
        self,
        catalog: Catalog,
        search: Search,
        prompts: Prompts,
        formatter: CommandFormatter,
        steam_running: Callable[[], bool] | None = None,
        info_dir: Path | None = None,
    ):
        self.catalog = catalog
        self.search = search
        self.prompts = prompts
        self.formatter = formatter
        self.steam_running = steam_running
        self.info_dir = info_dir
        self.state = FlowState.IDLE
        self.rendered: RenderedCommand | None = None

    def run(self) -> int:
        try:
            self._run()
        except SteamSearchError as ex:
            ui.error(f"\nError: {ex}")
            return 1
        except (KeyboardInterrupt, EOFError):
            ui.error("\nAborted")
            return 1
        finally:
            self.catalog.logout()
            self.state = FlowState.DONE
        return 0

    def _run(self):
        if self.steam_running is not None and not self.steam_running():
            raise PreconditionError("Steam is not running! Please start Steam before using this tool.")

        self.catalog.login()
        self.state = FlowState.LOGGED_IN

        apps = self._search()
        self.state = FlowState.SEARCHED
        if not apps:
            ui.warning("No games found, nothing to do.")
            return

        app = self.prompts.select_application(apps)
        self.state = FlowState.APP_SELECTED
        ui.show_application(app)

        product = self.catalog.fetch_product(app.id)
        depots = declared_depots(product)
        if not depots:
            ui.warning("No depots found. Using the main app as a depot.")
            depots = [app_depot(product)]
        self.state = FlowState.DEPOTS_LISTED

        depot = self.prompts.select_depot(depots)
        if depot is None:
            ui.show_completion(None)
            return
        self.state = FlowState.DEPOT_SELECTED
        ui.show_depot(depot)

        ui.info(f"Fetching manifest information for depot {depot.id}...")
        manifests = extract_manifests(product, depot.id)
        self.state = FlowState.MANIFESTS_LISTED

        manifest = self.prompts.select_manifest(manifests)
        if manifest is None:
            ui.show_completion(None)
            return
        self.state = FlowState.MANIFEST_SELECTED
        ui.show_manifest(manifest)

        self.rendered = self.formatter.render(app.id, depot.id, manifest.manifest_id)
        ui.show_command(self.rendered)
        self.formatter.deliver(self.rendered, app.id, depot.id)
        if self.info_dir is not None:
            self._save_info(self.info_dir, app.id, depot.id, manifest.manifest_id)
        ui.show_completion(self.rendered)

    def _search(self) -> list[Application]:
        while True:
            term = self.prompts.ask_search_term()
            try:
                return self.search.search(term)
            except ValidationError as ex:
                ui.error(str(ex))

    def _save_info(self, directory: Path, app_id: int, depot_id: str, manifest_id: str):
        try:
            readme = write_manifest_info(app_id, depot_id, manifest_id, directory)
        except OSError as ex:
            ui.warning(f"Failed to save manifest information to {directory}: {ex}")
            return
        ui.success(f"Download instructions saved to {readme}")
